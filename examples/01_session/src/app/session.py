from modgen import generate_module

from app.auth import Authenticated
from app.impl import SessionImpl


@generate_module(SessionImpl, binds=Authenticated)
class Session:
    """Wiring for user sessions."""
