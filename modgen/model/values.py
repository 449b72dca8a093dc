# SPDX-License-Identifier: MIT
"""Annotation attribute values.

A decorator argument can be written in many shapes. The catalog reduces
each one to a member of the AnnotationValue union:

    TypeRef      a name that resolves to a class
    ArrayValue   a list, tuple or set display
    StringValue  a string literal, or ERROR_SENTINEL for an unresolved name
    OtherValue   anything else (numbers, calls, subscripts, ...)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

# Stands in for a name the catalog could not resolve.
ERROR_SENTINEL = "<error>"

BUILTINS_MODULE = "builtins"


@dataclass(frozen=True)
class TypeRef:
    """Reference to a class by its fully qualified name."""

    qualified_name: str

    @property
    def simple_name(self) -> str:
        return self.qualified_name.rpartition(".")[2]

    @property
    def module(self) -> str:
        """Module the class is defined in ('' when unqualified)."""
        return self.qualified_name.rpartition(".")[0]

    @property
    def is_builtin(self) -> bool:
        return self.module == BUILTINS_MODULE

    def __str__(self) -> str:
        return self.qualified_name


@dataclass(frozen=True)
class ArrayValue:
    items: tuple[AnnotationValue, ...]


@dataclass(frozen=True)
class StringValue:
    value: str


@dataclass(frozen=True)
class OtherValue:
    """A value with no dedicated variant.

    Attributes:
        value: The literal value, or source text for non-literal expressions.
        kind: Short name of the value's kind (e.g. 'int', 'Call').
    """

    value: Any
    kind: str


AnnotationValue = Union[TypeRef, ArrayValue, StringValue, OtherValue]
