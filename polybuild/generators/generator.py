# SPDX-License-Identifier: MIT
"""Generator protocol for build file generation.

Generators take a loaded project configuration and produce build files
for an external build tool (currently make).
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from polybuild.core.config import ConfigModel


@runtime_checkable
class Generator(Protocol):
    """Protocol for build file generators."""

    @property
    def name(self) -> str:
        """Generator name (e.g., 'make')."""
        ...

    def generate(self, config: ConfigModel, output_dir: Path) -> list[Path]:
        """Generate build files for a project.

        Args:
            config: The project configuration.
            output_dir: Directory to write output files to.

        Returns:
            The files written.
        """
        ...


class BaseGenerator:
    """Base class for generators with common functionality."""

    def __init__(self, name: str) -> None:
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    def generate(self, config: ConfigModel, output_dir: Path) -> list[Path]:
        """Generate build files. Subclasses must implement."""
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.name!r})"
