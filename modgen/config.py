# SPDX-License-Identifier: MIT
"""Processor options.

Options can be set when invoking modgen:
    modgen generate src -A output_dir=build/gen -A max_rounds=3

or through the environment:
    MODGEN_OUTPUT_DIR=build/gen modgen generate src

Precedence (highest to lowest):
    1. Command line: -A KEY=value
    2. Environment variable: MODGEN_<KEY>=value
    3. Defaults
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path

from modgen.core.errors import ModgenError

ENV_PREFIX = "MODGEN_"

DEFAULT_MANIFEST = "modgen_manifest.json"
DEFAULT_MAX_ROUNDS = 10

KNOWN_OPTIONS = {"output_dir", "manifest", "max_rounds"}


def parse_options(args: list[str]) -> tuple[dict[str, str], list[str]]:
    """Parse KEY=value arguments from a list.

    Args:
        args: List of arguments.

    Returns:
        Tuple of (options dict, remaining args).
    """
    options: dict[str, str] = {}
    remaining: list[str] = []

    for arg in args:
        if "=" in arg and not arg.startswith("-"):
            key, _, value = arg.partition("=")
            if key:
                options[key] = value
            else:
                remaining.append(arg)
        else:
            remaining.append(arg)

    return options, remaining


class Options:
    """Option lookup over command line values and the environment.

    Attributes:
        values: Options given explicitly (e.g. on the command line).
    """

    def __init__(
        self,
        values: Mapping[str, str] | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self.values = dict(values or {})
        self._environ = os.environ if environ is None else environ

    def get(self, name: str, default: str | None = None) -> str | None:
        if name in self.values:
            return self.values[name]
        return self._environ.get(ENV_PREFIX + name.upper(), default)

    def get_int(self, name: str, default: int) -> int:
        value = self.get(name)
        if value is None or value == "":
            return default
        try:
            return int(value)
        except ValueError:
            raise ModgenError(
                f"option {name} must be an integer, got {value!r}"
            ) from None

    def output_dir(self, source_root: Path) -> Path:
        """Directory generated packages are written under.

        Defaults to the source root, so generated modules sit beside
        the modules they were generated from.
        """
        value = self.get("output_dir")
        return Path(value) if value else source_root

    def manifest_path(self, output_dir: Path) -> Path:
        value = self.get("manifest")
        if value:
            return Path(value)
        return output_dir / DEFAULT_MANIFEST

    @property
    def max_rounds(self) -> int:
        rounds = self.get_int("max_rounds", DEFAULT_MAX_ROUNDS)
        if rounds < 1:
            raise ModgenError(f"option max_rounds must be at least 1, got {rounds}")
        return rounds

    def unknown(self, supported: set[str]) -> list[str]:
        """Explicit option keys neither modgen nor any processor reads."""
        return sorted(set(self.values) - KNOWN_OPTIONS - supported)

    def __repr__(self) -> str:
        return f"Options({self.values!r})"
