# SPDX-License-Identifier: MIT
"""Shared fixtures for modgen tests."""

from __future__ import annotations

import textwrap
from collections.abc import Callable
from pathlib import Path

import pytest

from modgen.catalog import TypeCatalog
from modgen.config import Options
from modgen.processing.environment import ProcessingEnvironment
from modgen.processing.filer import Filer
from modgen.processing.messager import Messager

AUTH = """\
class Authenticated:
    pass
"""

IMPL = """\
from app.auth import Authenticated


class SessionImpl(Authenticated):
    pass
"""

SESSION = """\
from modgen import generate_module

from app.auth import Authenticated
from app.impl import SessionImpl


@generate_module(SessionImpl, binds=Authenticated)
class Session:
    pass
"""


def write_tree(root: Path, files: dict[str, str]) -> Path:
    """Write ``files`` (relative path -> source) under ``root``."""
    for name, text in files.items():
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(text))
    return root


def make_env(root: Path, options: dict[str, str] | None = None) -> ProcessingEnvironment:
    """A processing environment over ``root``, writing back into it."""
    return ProcessingEnvironment(
        catalog=TypeCatalog.from_roots([root]),
        messager=Messager(),
        filer=Filer(root),
        options=Options(options or {}, environ={}),
    )


@pytest.fixture
def app_files() -> dict[str, str]:
    """The package from the end-to-end example."""
    return {
        "app/__init__.py": "",
        "app/auth.py": AUTH,
        "app/impl.py": IMPL,
        "app/session.py": SESSION,
    }


@pytest.fixture
def source_tree(tmp_path: Path) -> Callable[[dict[str, str]], Path]:
    """Factory writing a source tree under tmp_path/src."""

    def make(files: dict[str, str]) -> Path:
        return write_tree(tmp_path / "src", files)

    return make


@pytest.fixture
def env_for() -> Callable[..., ProcessingEnvironment]:
    """Factory for processing environments over a source root."""
    return make_env
