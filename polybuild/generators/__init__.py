# SPDX-License-Identifier: MIT
"""Build file generators for polybuild."""

from polybuild.generators.generator import BaseGenerator, Generator
from polybuild.generators.makefile import MakefileGenerator

__all__ = [
    "BaseGenerator",
    "Generator",
    "MakefileGenerator",
]
