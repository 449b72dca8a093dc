from app.auth import Authenticated


class SessionImpl(Authenticated):
    def user(self) -> str:
        return "alice"
