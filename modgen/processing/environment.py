# SPDX-License-Identifier: MIT
"""Environments handed to processors."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from modgen.catalog import TypeCatalog
    from modgen.config import Options
    from modgen.model.elements import TypeElement
    from modgen.processing.filer import Filer
    from modgen.processing.messager import Messager


@dataclass
class ProcessingEnvironment:
    """Services shared by all processors for a whole run.

    Attributes:
        catalog: Declarations visible to processors.
        messager: Diagnostic channel.
        filer: Creates generated source files.
        options: Processor options.
    """

    catalog: TypeCatalog
    messager: Messager
    filer: Filer
    options: Options


@dataclass
class RoundEnvironment:
    """The declarations introduced in one round.

    Attributes:
        root_elements: Classes from the sources processed in this round.
        processing_over: True for the final round, which has no elements.
        error_raised: True if an earlier round reported an error.
    """

    root_elements: list[TypeElement] = field(default_factory=list)
    processing_over: bool = False
    error_raised: bool = False

    def elements_annotated_with(self, annotation: str) -> list[TypeElement]:
        """Root elements carrying the ``annotation`` decorator."""
        return [
            e
            for e in self.root_elements
            if any(m.qualified_name == annotation for m in e.annotations)
        ]

    def annotation_types(self) -> set[str]:
        """Qualified names of all decorators present on root elements."""
        return {m.qualified_name for e in self.root_elements for m in e.annotations}
