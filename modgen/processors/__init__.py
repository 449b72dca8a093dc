# SPDX-License-Identifier: MIT
"""Processors shipped with modgen."""

from modgen.processors.generate_module import GenerateModuleProcessor

__all__ = ["GenerateModuleProcessor"]


def default_processors() -> list[GenerateModuleProcessor]:
    """Processors run by the command line tool."""
    return [GenerateModuleProcessor()]
