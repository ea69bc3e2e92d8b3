# SPDX-License-Identifier: MIT
"""Collision-free object artifact names."""

from __future__ import annotations


class ArtifactNamer:
    """Allocates a unique object name per source file.

    Names have the form ``<stem>_<n>`` where ``n`` is the smallest
    non-negative integer not yet taken during this run, so ``src/a.c``
    and ``lib/a.c`` become ``a_0`` and ``a_1`` in encounter order.

    One namer is created per generation run.
    """

    def __init__(self) -> None:
        self._allocated: set[str] = set()

    def allocate(self, stem: str) -> str:
        """Claim and return the first free name for ``stem``."""
        suffix = 0
        while f"{stem}_{suffix}" in self._allocated:
            suffix += 1
        name = f"{stem}_{suffix}"
        self._allocated.add(name)
        return name

    def __contains__(self, name: str) -> bool:
        return name in self._allocated

    def __len__(self) -> int:
        return len(self._allocated)
