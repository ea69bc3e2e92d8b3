# SPDX-License-Identifier: MIT
"""Header dependency scanning.

Source files are scanned line by line for ``#include`` directives. Each
reference is looked up first next to the including file, then in every
search directory; found headers are scanned in turn. The result is the
include closure of the source file: every header it transitively depends
on, in depth-first discovery order.

Two details differ from what a compiler does and are kept on purpose:

- When a header is not found locally, *every* search directory that
  contains it contributes a dependency, not just the first one.
- References that resolve nowhere are dropped silently. They are assumed
  to be system headers outside the project.
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path, PurePath
from typing import Iterator, Sequence

logger = logging.getLogger(__name__)

_ANGLED_INCLUDE = re.compile(r"^\s*#\s*include\s*<([^>]+)>.*$")
_QUOTED_INCLUDE = re.compile(r'^\s*#\s*include\s*"([^"]+)".*$')


class IncludeSyntax(Enum):
    ANGLED = "angled"
    QUOTED = "quoted"


@dataclass(frozen=True)
class HeaderReference:
    """The target of one include directive.

    Attributes:
        text: Header name exactly as written between the delimiters.
        syntax: Whether it was written ``<like.h>`` or ``"like.h"``.
    """

    text: str
    syntax: IncludeSyntax


def parse_include_line(line: str) -> HeaderReference | None:
    """Parse one source line.

    The result is one of three cases: an angled reference, a quoted
    reference (both as HeaderReference, told apart by ``syntax``) or None
    when the line holds no include directive.

    Returns:
        The referenced header, or None if the line is not an include
        directive. The angled form is tried first.

    Examples:
        >>> parse_include_line('#include <stdio.h>')
        HeaderReference(text='stdio.h', syntax=<IncludeSyntax.ANGLED: 'angled'>)
        >>> parse_include_line('  #  include "util.h" // local')
        HeaderReference(text='util.h', syntax=<IncludeSyntax.QUOTED: 'quoted'>)
        >>> parse_include_line('int x;') is None
        True
    """
    line = line.rstrip("\r\n")
    match = _ANGLED_INCLUDE.match(line)
    if match:
        return HeaderReference(match.group(1), IncludeSyntax.ANGLED)
    match = _QUOTED_INCLUDE.match(line)
    if match:
        return HeaderReference(match.group(1), IncludeSyntax.QUOTED)
    return None


@dataclass(frozen=True)
class IncludeClosure:
    """Headers reachable from one source file, in discovery order.

    Each path appears at most once.
    """

    paths: tuple[PurePath, ...] = ()

    def __iter__(self) -> Iterator[PurePath]:
        return iter(self.paths)

    def __len__(self) -> int:
        return len(self.paths)

    def __contains__(self, path: object) -> bool:
        return path in self.paths

    def as_posix(self) -> list[str]:
        return [p.as_posix() for p in self.paths]


class IncludeResolver:
    """Computes include closures relative to a project root.

    Paths passed to and returned from the resolver are relative to
    ``root`` (or absolute); ``root`` is only used to touch the filesystem.

    Example:
        resolver = IncludeResolver(root=project_dir)
        closure = resolver.resolve("src/main.c", ["include"])
        for header in closure:
            print(header)
    """

    def __init__(self, root: Path | str = ".") -> None:
        self._root = Path(root)

    def resolve(
        self, source: PurePath | str, search_paths: Sequence[str] = ()
    ) -> IncludeClosure:
        """Compute the include closure of ``source``.

        The walk is depth first: a header's own dependencies are listed
        right after it, before the next reference of the including file.
        A header already in the closure is neither recorded nor scanned
        again, which also breaks include cycles.

        Args:
            source: The source file to scan.
            search_paths: Directories searched, in order, for references
                not found next to the including file.

        Returns:
            The closure. Empty if the file has no resolvable includes.
        """
        closure: list[PurePath] = []
        seen: set[PurePath] = set()
        stack: list[Iterator[PurePath]] = [
            iter(self._dependencies(PurePath(source), search_paths))
        ]

        while stack:
            header = next(stack[-1], None)
            if header is None:
                stack.pop()
                continue
            if header in seen:
                continue
            seen.add(header)
            closure.append(header)
            stack.append(iter(self._dependencies(header, search_paths)))

        logger.debug(
            "%s depends on %d header(s)", PurePath(source).as_posix(), len(closure)
        )
        return IncludeClosure(tuple(closure))

    def _dependencies(
        self, path: PurePath, search_paths: Sequence[str]
    ) -> list[PurePath]:
        """Resolve every include directive of one file to existing headers."""
        found: list[PurePath] = []
        for ref in self._scan(path):
            local = self._normalize(path.parent / ref.text)
            if self._is_file(local):
                found.append(local)
                continue
            for directory in search_paths:
                candidate = self._normalize(PurePath(directory) / ref.text)
                if self._is_file(candidate):
                    found.append(candidate)
        return found

    def _scan(self, path: PurePath) -> list[HeaderReference]:
        """Read the include directives of a file.

        The file is closed before any of its headers is visited.
        """
        refs: list[HeaderReference] = []
        try:
            with open(self._root / path, encoding="utf-8", errors="replace") as f:
                for line in f:
                    ref = parse_include_line(line)
                    if ref is not None:
                        refs.append(ref)
        except OSError as e:
            logger.debug("Cannot scan %s: %s", path.as_posix(), e)
        return refs

    def _is_file(self, path: PurePath) -> bool:
        return (self._root / path).is_file()

    @staticmethod
    def _normalize(path: PurePath) -> PurePath:
        # Lexical only, so "a/../b.h" and "b.h" are the same header.
        return PurePath(os.path.normpath(path))
