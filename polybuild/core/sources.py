# SPDX-License-Identifier: MIT
"""Source file discovery."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path, PurePath

from polybuild.core.errors import SourceDirectoryError

logger = logging.getLogger(__name__)


class SourceKind(Enum):
    C = "c"
    CPP = "cpp"


SOURCE_SUFFIXES: dict[str, SourceKind] = {
    ".c": SourceKind.C,
    ".cpp": SourceKind.CPP,
    ".cc": SourceKind.CPP,
    ".cxx": SourceKind.CPP,
}


def source_kind(path: PurePath | str) -> SourceKind | None:
    """Return the language family of a file by extension, or None."""
    return SOURCE_SUFFIXES.get(PurePath(path).suffix)


@dataclass(frozen=True)
class SourceFile:
    """A discovered source file.

    Attributes:
        path: Path relative to the project root, as it appears in rules.
        kind: C or C++ family.
    """

    path: PurePath
    kind: SourceKind

    @property
    def stem(self) -> str:
        return self.path.stem

    @property
    def is_cpp(self) -> bool:
        return self.kind is SourceKind.CPP


def discover_sources(
    directories: list[str] | tuple[str, ...], root: Path | str = "."
) -> list[SourceFile]:
    """List the source files of each directory, in declaration order.

    Directories are not searched recursively. Entries within a directory
    are visited in sorted name order so that repeated runs see the same
    sequence.

    Args:
        directories: Source directories relative to ``root``.
        root: Project root used for filesystem access.

    Returns:
        Source files with paths relative to ``root``.

    Raises:
        SourceDirectoryError: If a directory does not exist or cannot be read.
    """
    root = Path(root)
    sources: list[SourceFile] = []
    for directory in directories:
        try:
            entries = sorted(p.name for p in (root / directory).iterdir())
        except OSError as e:
            raise SourceDirectoryError(directory) from e

        for name in entries:
            path = PurePath(directory) / name
            kind = source_kind(path)
            if kind is None or not (root / path).is_file():
                continue
            logger.debug("Discovered %s source %s", kind.value, path.as_posix())
            sources.append(SourceFile(path, kind))
    return sources
