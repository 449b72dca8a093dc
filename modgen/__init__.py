# SPDX-License-Identifier: MIT
"""
modgen: injector module generation for Python.

Classes marked with ``@generate_module(Impl, binds=Interface)`` get a
generated ``Gen_<Name>`` injector module binding ``Interface`` to
``Impl``. Generation runs at build time over source files, without
importing them:

    modgen generate src
"""

from __future__ import annotations

from modgen.annotations import GENERATE_MODULE, generate_module
from modgen.di import BindsModule, binds, generated, module

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Marker
    "GENERATE_MODULE",
    "generate_module",
    # Runtime support for generated modules
    "BindsModule",
    "binds",
    "generated",
    "module",
]
