# SPDX-License-Identifier: MIT
"""Custom exceptions for modgen.

All modgen exceptions inherit from ModgenError, which includes
optional source location information for better error messages.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from modgen.util.source_location import SourceLocation


class ModgenError(Exception):
    """Base class for all modgen exceptions.

    Attributes:
        message: The error message.
        location: Optional source location where the error occurred.
    """

    def __init__(
        self,
        message: str,
        location: SourceLocation | None = None,
    ) -> None:
        self.message = message
        self.location = location
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if self.location:
            return f"{self.location}: {self.message}"
        return self.message


class SourceParseError(ModgenError):
    """A source file could not be read or parsed."""


class AnnotationValueError(ModgenError, ValueError):
    """An annotation attribute does not have the expected shape."""


class MissingAttributeError(ModgenError, ValueError):
    """A required annotation attribute was not given.

    Attributes:
        attribute: Name of the missing attribute.
        annotation: Qualified name of the annotation.
    """

    def __init__(
        self,
        attribute: str,
        annotation: str,
        location: SourceLocation | None = None,
    ) -> None:
        self.attribute = attribute
        self.annotation = annotation
        super().__init__(
            f"no attribute {attribute!r} on annotation {annotation}", location
        )


class UnresolvedTypeAbort(ModgenError):
    """An annotation referenced a type that could not be resolved.

    The root cause has normally been reported already, so the message
    carries no detail of its own.
    """

    def __init__(self, location: SourceLocation | None = None) -> None:
        super().__init__("abort", location)


class FilerError(ModgenError):
    """A generated source file could not be created or written.

    Attributes:
        name: Dotted name of the compilation unit.
    """

    def __init__(
        self,
        name: str,
        reason: str,
        location: SourceLocation | None = None,
    ) -> None:
        self.name = name
        super().__init__(f"{reason}: {name}", location)


class ProcessingError(ModgenError):
    """A processor failed during a round."""


class DuplicateModuleError(ModgenError):
    """Two declarations would generate the same module.

    Raised by the filer instead of FilerError when the module was
    already created in this run from a different declaration.

    Attributes:
        name: Dotted name of the generated module.
        claimed_by: Qualified names of the declarations already using it.
    """

    def __init__(
        self,
        name: str,
        claimed_by: tuple[str, ...],
        location: SourceLocation | None = None,
    ) -> None:
        self.name = name
        self.claimed_by = claimed_by
        super().__init__(
            f"module {name} is already generated from {', '.join(claimed_by)}",
            location,
        )
