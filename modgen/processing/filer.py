# SPDX-License-Identifier: MIT
"""Creation of generated source files.

The Filer maps dotted module names to paths under an output directory,
refuses to create the same module twice in one run, and remembers which
source files each generated file came from. That record is written out
as a JSON manifest so build tools can invalidate generated files when
their originating sources change.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, TextIO

from modgen.codegen.spec import HEADER
from modgen.core.errors import DuplicateModuleError, FilerError

if TYPE_CHECKING:
    from modgen.model.elements import TypeElement

logger = logging.getLogger(__name__)

MANIFEST_VERSION = 1


def is_generated(path: Path) -> bool:
    """Return True if ``path`` starts with the generated-code header."""
    try:
        with open(path, encoding="utf-8") as f:
            return f.readline().rstrip("\n") == HEADER
    except (OSError, UnicodeDecodeError):
        return False


class GeneratedSource:
    """Handle to a generated source file that has not been written yet.

    Attributes:
        name: Dotted module name.
        path: Destination path.
        originating_elements: Declarations the file was generated from.
    """

    def __init__(
        self,
        name: str,
        path: Path,
        originating_elements: tuple[TypeElement, ...],
    ) -> None:
        self.name = name
        self.path = path
        self.originating_elements = originating_elements

    @contextmanager
    def open_writer(self) -> Iterator[TextIO]:
        """Open the file for writing.

        Text goes to a temporary file beside the destination, which
        replaces the destination only if the block exits normally.
        The temporary file is closed and removed on every path.

        Raises:
            OSError: If the file cannot be created or written.
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.path.stem}.", suffix=".tmp", dir=self.path.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
                yield f
            os.replace(tmp_name, self.path)
        finally:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)

    def __repr__(self) -> str:
        return f"GeneratedSource({self.name!r}, {str(self.path)!r})"


class Filer:
    """Creates generated source files under an output directory.

    Attributes:
        output_dir: Root directory packages are written under.
    """

    def __init__(self, output_dir: Path) -> None:
        self.output_dir = Path(output_dir)
        self._created: dict[str, GeneratedSource] = {}
        self._pending: list[GeneratedSource] = []

    def path_for(self, name: str) -> Path:
        return self.output_dir.joinpath(*name.split(".")).with_suffix(".py")

    def create_source_file(
        self, name: str, *originating_elements: TypeElement
    ) -> GeneratedSource:
        """Reserve a new generated module.

        Args:
            name: Dotted module name, e.g. 'app.Gen_Session'.
            *originating_elements: Declarations the module is generated from.

        Raises:
            DuplicateModuleError: If the module was already created in
                this run from different originating elements.
            FilerError: If the module was already created in this run from
                the same elements, or would overwrite a file modgen did not
                generate.
        """
        existing = self._created.get(name)
        if existing is not None:
            before = _origins(existing.originating_elements)
            now = _origins(originating_elements)
            if before and now and before != now:
                raise DuplicateModuleError(name, tuple(sorted(before)))
            raise FilerError(name, "attempt to recreate a file")
        path = self.path_for(name)
        if path.exists() and not is_generated(path):
            raise FilerError(name, "attempt to overwrite a source file")

        source = GeneratedSource(name, path, tuple(originating_elements))
        self._created[name] = source
        self._pending.append(source)
        logger.debug("Created %s at %s", name, path)
        return source

    def take_new_files(self) -> list[GeneratedSource]:
        """Return files created since the last call that now exist on disk."""
        pending, self._pending = self._pending, []
        return [s for s in pending if s.path.exists()]

    @property
    def created(self) -> list[GeneratedSource]:
        return list(self._created.values())

    def originating_sources(self) -> dict[str, list[str]]:
        """Map each written file to the source files it was generated from."""
        result: dict[str, list[str]] = {}
        for source in self._created.values():
            if not source.path.exists():
                continue
            origins: list[str] = []
            for element in source.originating_elements:
                if element.location is not None:
                    origins.append(str(element.location.path))
            result[str(source.path)] = sorted(set(origins))
        return result

    def write_manifest(self, path: Path) -> None:
        """Write the originating-source record as JSON.

        Format:
            {
                "version": 1,
                "generated": {
                    "src/app/Gen_Session.py": ["src/app/session.py"]
                }
            }
        """
        path.parent.mkdir(parents=True, exist_ok=True)
        data = {"version": MANIFEST_VERSION, "generated": self.originating_sources()}
        with open(path, "w") as f:
            json.dump(data, f, indent=2, sort_keys=True)
            f.write("\n")


def read_manifest(path: Path) -> dict[str, list[str]]:
    """Read a manifest written by Filer.write_manifest.

    Returns an empty mapping if the file does not exist or is unreadable.
    """
    if not path.exists():
        return {}
    try:
        with open(path) as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("Ignoring unreadable manifest %s: %s", path, e)
        return {}
    generated = data.get("generated", {}) if isinstance(data, dict) else {}
    return {str(k): list(v) for k, v in generated.items()}


def _origins(elements: tuple[TypeElement, ...]) -> set[str]:
    return {e.qualified_name for e in elements}
