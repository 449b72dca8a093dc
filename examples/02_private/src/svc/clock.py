from modgen.annotations import generate_module

__all__ = ["Clock", "SystemClock"]


class Clock:
    def now(self) -> float:
        raise NotImplementedError


class SystemClock(Clock):
    def now(self) -> float:
        import time

        return time.time()


@generate_module(SystemClock, binds=Clock)
class _ClockWiring:
    pass
