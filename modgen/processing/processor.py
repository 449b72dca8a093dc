# SPDX-License-Identifier: MIT
"""Processor protocol for source generation.

Processors are handed the declarations of each round and may write new
source files through the filer. Those files are parsed and handed back
in the next round.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from modgen.processing.environment import (
        ProcessingEnvironment,
        RoundEnvironment,
    )

# Supported annotation type matching every decorator.
ALL_ANNOTATIONS = "*"


@runtime_checkable
class Processor(Protocol):
    """Protocol for processors."""

    def init(self, processing_env: ProcessingEnvironment) -> None:
        """Receive the shared environment before the first round."""
        ...

    def supported_annotation_types(self) -> set[str]:
        """Qualified decorator names this processor handles, or {'*'}."""
        ...

    def supported_options(self) -> set[str]:
        """Option keys this processor reads."""
        ...

    def process(self, annotations: set[str], round_env: RoundEnvironment) -> bool:
        """Process one round.

        Args:
            annotations: Decorators present in this round that the
                processor supports and no earlier processor claimed.
            round_env: The round's declarations.

        Returns:
            True to claim ``annotations``, hiding them from later processors.
        """
        ...


class BaseProcessor:
    """Base class for processors with common functionality."""

    def __init__(self) -> None:
        self._processing_env: ProcessingEnvironment | None = None

    def init(self, processing_env: ProcessingEnvironment) -> None:
        self._processing_env = processing_env

    @property
    def processing_env(self) -> ProcessingEnvironment:
        if self._processing_env is None:
            raise RuntimeError(f"{self!r} used before init()")
        return self._processing_env

    @property
    def name(self) -> str:
        return self.__class__.__name__

    def supported_annotation_types(self) -> set[str]:
        return set()

    def supported_options(self) -> set[str]:
        return set()

    def process(self, annotations: set[str], round_env: RoundEnvironment) -> bool:
        """Process a round. Subclasses must implement."""
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"
