# SPDX-License-Identifier: MIT
"""Declarations and annotation values seen by processors."""

from modgen.model.elements import AnnotationMirror, Modifier, TypeElement
from modgen.model.values import (
    ERROR_SENTINEL,
    AnnotationValue,
    ArrayValue,
    OtherValue,
    StringValue,
    TypeRef,
)

__all__ = [
    "ERROR_SENTINEL",
    "AnnotationMirror",
    "AnnotationValue",
    "ArrayValue",
    "Modifier",
    "OtherValue",
    "StringValue",
    "TypeElement",
    "TypeRef",
]
