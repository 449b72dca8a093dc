# SPDX-License-Identifier: MIT
"""Diagnostics reported by processors."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from modgen.model.elements import TypeElement
    from modgen.util.source_location import SourceLocation

logger = logging.getLogger(__name__)


class Kind(Enum):
    ERROR = "error"
    WARNING = "warning"
    NOTE = "note"


_LEVELS = {
    Kind.ERROR: logging.ERROR,
    Kind.WARNING: logging.WARNING,
    Kind.NOTE: logging.INFO,
}


@dataclass(frozen=True)
class Diagnostic:
    """A message reported during processing.

    Attributes:
        kind: Severity.
        message: Message text.
        element: Declaration the message is attached to, if any.
        position: Location inside the declaration, if more precise
            than the declaration itself.
    """

    kind: Kind
    message: str
    element: TypeElement | None = None
    position: SourceLocation | None = None

    @property
    def location(self) -> SourceLocation | None:
        if self.position is not None:
            return self.position
        if self.element is not None:
            return self.element.location
        return None

    def __str__(self) -> str:
        if self.location is not None:
            return f"{self.location}: {self.kind.value}: {self.message}"
        return f"{self.kind.value}: {self.message}"


class Messager:
    """Collects diagnostics and forwards them to logging."""

    def __init__(self) -> None:
        self.diagnostics: list[Diagnostic] = []

    def print_message(
        self,
        kind: Kind,
        message: str,
        element: TypeElement | None = None,
        position: SourceLocation | None = None,
    ) -> None:
        diagnostic = Diagnostic(kind, message, element, position)
        self.diagnostics.append(diagnostic)
        if diagnostic.location is not None:
            logger.log(_LEVELS[kind], "%s: %s", diagnostic.location, message)
        else:
            logger.log(_LEVELS[kind], "%s", message)

    def of_kind(self, kind: Kind) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.kind is kind]

    @property
    def error_count(self) -> int:
        return len(self.of_kind(Kind.ERROR))

    @property
    def warning_count(self) -> int:
        return len(self.of_kind(Kind.WARNING))
