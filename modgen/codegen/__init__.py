# SPDX-License-Identifier: MIT
"""Builders for generated Python source."""

from modgen.codegen.spec import (
    ClassSpec,
    DecoratorSpec,
    MethodSpec,
    ParameterSpec,
    SourceFile,
    TypeName,
)

__all__ = [
    "ClassSpec",
    "DecoratorSpec",
    "MethodSpec",
    "ParameterSpec",
    "SourceFile",
    "TypeName",
]
