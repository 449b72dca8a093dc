# SPDX-License-Identifier: MIT
"""Type declarations and the annotations attached to them."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from modgen.model.values import AnnotationValue
    from modgen.util.source_location import SourceLocation


class Modifier(Enum):
    PUBLIC = "public"
    ABSTRACT = "abstract"


@dataclass(frozen=True)
class AnnotationMirror:
    """A marker decorator as written on a declaration.

    Attributes:
        qualified_name: Fully qualified name of the decorator.
        values: Attribute values keyed by name, in source order.
            A leading positional argument is stored as 'value'.
    """

    qualified_name: str
    values: dict[str, AnnotationValue] = field(default_factory=dict)

    def __hash__(self) -> int:
        return hash((self.qualified_name, tuple(self.values)))


@dataclass(frozen=True)
class TypeElement:
    """A top-level class declaration found in a source file.

    Attributes:
        qualified_name: Dotted module path plus class name.
        module: Dotted name of the declaring module.
        package: Dotted name of the package containing the module,
            '' for a top-level module.
        modifiers: Modifiers derived from the declaration.
        annotations: Marker decorators on the class.
        location: Where the class statement starts.
    """

    qualified_name: str
    module: str
    package: str
    modifiers: frozenset[Modifier] = frozenset()
    annotations: tuple[AnnotationMirror, ...] = ()
    location: SourceLocation | None = None

    @property
    def simple_name(self) -> str:
        return self.qualified_name.rpartition(".")[2]

    @property
    def is_public(self) -> bool:
        return Modifier.PUBLIC in self.modifiers

    def __str__(self) -> str:
        return self.qualified_name
