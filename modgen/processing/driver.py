# SPDX-License-Identifier: MIT
"""Round-based driver for processors.

A run works in rounds:

1. Every processor is handed the declarations of the current round,
   along with the decorators present that it supports.
2. Files the processors generate are parsed into the catalog; their
   classes form the next round.
3. When a round generates nothing, a final round with no elements is
   run so processors can finish up.

A processor that raises ends the run: no further rounds are started
and the result reports failure.
"""

from __future__ import annotations

import logging
import traceback
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from modgen.catalog import TypeCatalog
from modgen.config import DEFAULT_MAX_ROUNDS, Options
from modgen.core.errors import ModgenError
from modgen.processing.environment import ProcessingEnvironment, RoundEnvironment
from modgen.processing.filer import Filer
from modgen.processing.messager import Kind, Messager
from modgen.processing.processor import ALL_ANNOTATIONS

if TYPE_CHECKING:
    from modgen.processing.filer import GeneratedSource
    from modgen.processing.processor import Processor

logger = logging.getLogger(__name__)


@dataclass
class RunResult:
    """Outcome of a processing run.

    Attributes:
        rounds: Number of rounds with elements that were run.
        generated: Files created during the run.
        errors: ERROR diagnostics reported.
        warnings: WARNING diagnostics reported.
        failure: Exception that ended the run, if any.
    """

    rounds: int = 0
    generated: list[GeneratedSource] = field(default_factory=list)
    errors: int = 0
    warnings: int = 0
    failure: BaseException | None = None

    @property
    def success(self) -> bool:
        return self.failure is None and self.errors == 0


class RoundDriver:
    """Runs processors over rounds until no new sources appear.

    Processors run in the order given. A processor that returns True
    claims the decorators it was offered, and later processors do not
    see them in that round. Processors supporting '*' are called every
    round. Once a processor has been called, it is called in every
    later round even if none of its decorators appear.
    """

    def __init__(
        self,
        processors: list[Processor],
        processing_env: ProcessingEnvironment,
        *,
        max_rounds: int = DEFAULT_MAX_ROUNDS,
    ) -> None:
        self.processors = list(processors)
        self.processing_env = processing_env
        self.max_rounds = max_rounds
        self._invoked: list[Processor] = []

    def run(self) -> RunResult:
        env = self.processing_env
        supported: set[str] = set()
        for processor in self.processors:
            processor.init(env)
            supported |= processor.supported_options()
        for key in env.options.unknown(supported):
            env.messager.print_message(
                Kind.WARNING, f"option {key!r} is not recognized by any processor"
            )

        result = RunResult()
        root_elements = env.catalog.elements()

        while True:
            result.rounds += 1
            round_env = RoundEnvironment(
                root_elements, error_raised=env.messager.error_count > 0
            )
            logger.info(
                "Round %d: %d declarations", result.rounds, len(root_elements)
            )
            try:
                self._run_round(round_env)
                new_files = env.filer.take_new_files()
                if not new_files:
                    break
                if result.rounds >= self.max_rounds:
                    env.messager.print_message(
                        Kind.ERROR,
                        f"stopped after {self.max_rounds} rounds; "
                        "processors keep generating new files",
                    )
                    break
                modules = [
                    env.catalog.add_source_file(f.path, env.filer.output_dir)
                    for f in new_files
                ]
                root_elements = env.catalog.elements(modules)
            except Exception as e:
                logger.debug("Round %d failed:\n%s", result.rounds, traceback.format_exc())
                result.failure = e
                break

        if result.failure is None:
            final_env = RoundEnvironment(
                processing_over=True, error_raised=env.messager.error_count > 0
            )
            try:
                self._run_round(final_env)
            except Exception as e:
                logger.debug("Final round failed:\n%s", traceback.format_exc())
                result.failure = e

        if result.failure is not None:
            logger.error("Processing failed: %s", result.failure)

        result.generated = env.filer.created
        result.errors = env.messager.error_count
        result.warnings = env.messager.warning_count
        return result

    def _run_round(self, round_env: RoundEnvironment) -> None:
        unclaimed = round_env.annotation_types()
        for processor in self.processors:
            offered = processor.supported_annotation_types()
            if ALL_ANNOTATIONS in offered:
                relevant = set(unclaimed)
                matches = True
            else:
                relevant = unclaimed & offered
                matches = bool(relevant)
            invoked = any(p is processor for p in self._invoked)
            if not matches and not invoked:
                continue
            if not invoked:
                self._invoked.append(processor)

            logger.debug("Running %r with %s", processor, sorted(relevant))
            if processor.process(relevant, round_env):
                unclaimed -= relevant


def generate(
    source_roots: list[Path],
    processors: list[Processor],
    options: Options | None = None,
) -> RunResult:
    """Parse source roots, run processors and write the manifest.

    Args:
        source_roots: Directories to scan; the first is the default
            output directory.
        processors: Processors to run, in order.
        options: Processor options (default: environment only).

    Returns:
        The run result.

    Raises:
        ModgenError: If sources cannot be parsed or options are invalid.
    """
    if not source_roots:
        raise ModgenError("no source roots given")
    options = options or Options()
    catalog = TypeCatalog.from_roots([Path(r) for r in source_roots])
    output_dir = options.output_dir(Path(source_roots[0]))

    env = ProcessingEnvironment(
        catalog=catalog,
        messager=Messager(),
        filer=Filer(output_dir),
        options=options,
    )
    driver = RoundDriver(processors, env, max_rounds=options.max_rounds)
    result = driver.run()

    manifest = options.manifest_path(output_dir)
    if env.filer.created:
        env.filer.write_manifest(manifest)
        logger.info("Wrote %s", manifest)
    return result
