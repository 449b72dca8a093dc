# SPDX-License-Identifier: MIT
"""Processing host: environments, diagnostics, file creation and rounds."""

from modgen.processing.driver import RoundDriver, RunResult, generate
from modgen.processing.environment import ProcessingEnvironment, RoundEnvironment
from modgen.processing.filer import Filer, GeneratedSource
from modgen.processing.messager import Diagnostic, Kind, Messager
from modgen.processing.processor import BaseProcessor, Processor

__all__ = [
    "BaseProcessor",
    "Diagnostic",
    "Filer",
    "GeneratedSource",
    "Kind",
    "Messager",
    "ProcessingEnvironment",
    "Processor",
    "RoundDriver",
    "RoundEnvironment",
    "RunResult",
    "generate",
]
