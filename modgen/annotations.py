# SPDX-License-Identifier: MIT
"""Marker decorators read by modgen processors.

Markers do nothing at runtime beyond recording their arguments. Their
meaning comes from the processors that find them in source files.
"""

from __future__ import annotations

from typing import Callable, TypeVar

T = TypeVar("T", bound=type)

# Qualified name processors look for.
GENERATE_MODULE = "modgen.annotations.generate_module"

# Names under which the marker is re-exported.
ALIASES = {
    "modgen.generate_module": GENERATE_MODULE,
}


def generate_module(value: type, *, binds: type) -> Callable[[T], T]:
    """Request an injector module binding ``binds`` to ``value``.

    Example:
        @generate_module(SessionImpl, binds=Authenticated)
        class Session:
            ...

    modgen then writes ``Gen_Session`` next to the declaring module, with
    one abstract ``bindsAuthenticated(value: SessionImpl)`` method.

    Args:
        value: The implementation class.
        binds: The interface the implementation is bound to.

    Returns:
        A class decorator that returns the class unchanged.
    """

    def decorator(cls: T) -> T:
        cls.__generate_module__ = (binds, value)  # type: ignore[attr-defined]
        return cls

    return decorator
