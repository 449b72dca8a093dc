# SPDX-License-Identifier: MIT
"""Source locations for diagnostics and error messages."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class SourceLocation:
    """A position in a source file.

    Attributes:
        path: Path of the source file.
        line: 1-based line number, or None if unknown.
    """

    path: Path
    line: int | None = None

    def __str__(self) -> str:
        if self.line is None:
            return str(self.path)
        return f"{self.path}:{self.line}"
