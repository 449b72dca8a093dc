# SPDX-License-Identifier: MIT
"""Runtime support for generated injector modules.

Generated modules look like this:

    @module
    @generated("modgen.processors.generate_module.GenerateModuleProcessor")
    class Gen_Session(BindsModule, ABC):
        @binds
        @abstractmethod
        def bindsAuthenticated(self, value: SessionImpl) -> Authenticated: ...

The class is abstract and is never instantiated. Install it through its
``install`` classmethod, which injector accepts as a plain module callable:

    injector = Injector([Gen_Session.install])
    injector.get(Authenticated)  # -> SessionImpl instance
"""

from __future__ import annotations

import logging
from typing import Any, Callable, TypeVar, get_type_hints

from injector import Binder, Module

logger = logging.getLogger(__name__)

C = TypeVar("C", bound=type)
F = TypeVar("F", bound=Callable[..., Any])

MODULE_ATTR = "__di_module__"
GENERATED_ATTR = "__generated_by__"
BINDS_ATTR = "__di_binds__"


def module(cls: C) -> C:
    """Mark a class as a dependency injection module."""
    setattr(cls, MODULE_ATTR, True)
    return cls


def is_module(cls: type) -> bool:
    return bool(cls.__dict__.get(MODULE_ATTR, False))


def generated(value: str) -> Callable[[C], C]:
    """Record the tool that generated a class.

    Args:
        value: Fully qualified name of the generator.
    """

    def decorator(cls: C) -> C:
        setattr(cls, GENERATED_ATTR, value)
        return cls

    return decorator


def binds(method: F) -> F:
    """Mark a method as a binding declaration.

    The method's return annotation is the interface and its single
    parameter annotation is the implementation.
    """
    setattr(method, BINDS_ATTR, True)
    return method


class BindsModule(Module):
    """Injector module whose bindings are declared by @binds methods."""

    @classmethod
    def bindings(cls) -> list[tuple[type, type]]:
        """Collect (interface, implementation) pairs from @binds methods.

        Raises:
            TypeError: If a @binds method is not of the form
                ``name(self, value: Impl) -> Interface``.
        """
        pairs: list[tuple[type, type]] = []
        for name in sorted(dir(cls)):
            method = getattr(cls, name, None)
            if not getattr(method, BINDS_ATTR, False):
                continue
            hints = get_type_hints(method)
            interface = hints.pop("return", None)
            if interface is None or len(hints) != 1:
                raise TypeError(
                    f"{cls.__name__}.{name} must take one annotated parameter "
                    "and declare a return type"
                )
            (implementation,) = hints.values()
            pairs.append((interface, implementation))
        return pairs

    @classmethod
    def install(cls, binder: Binder) -> None:
        """Apply this module's bindings to an injector binder."""
        for interface, implementation in cls.bindings():
            logger.debug(
                "%s: binding %s to %s",
                cls.__name__,
                interface.__qualname__,
                implementation.__qualname__,
            )
            binder.bind(interface, to=implementation)

    def configure(self, binder: Binder) -> None:
        self.install(binder)
