# SPDX-License-Identifier: MIT
"""
Polybuild: generates portable makefiles from a declarative TOML project.

Polybuild reads ``Polybuild.toml``, scans the declared source directories
for C and C++ files and their header dependencies, and writes a makefile
that builds the project with GCC-style compilers or MSVC.
"""

from __future__ import annotations

__version__ = "0.2.0"

from polybuild.core.config import ConfigModel  # noqa: E402
from polybuild.core.errors import PolybuildError  # noqa: E402
from polybuild.generators.makefile import MakefileGenerator  # noqa: E402

__all__ = [
    "__version__",
    "ConfigModel",
    "MakefileGenerator",
    "PolybuildError",
]
