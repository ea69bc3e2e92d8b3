# SPDX-License-Identifier: MIT
"""Environment overlays.

An overlay rebinds toolchain variables when an environment variable has
a given value at build time, for example::

    [env.BUILD.debug.options]
    c-compilation-flags = "-g -O0"

becomes::

    ifeq ($(BUILD),debug)
        c_compiler := $(CC)
        c_compilation_flags := -g -O0 $(dynamic_flag)
        ...
    endif

Blocks are written in declaration order and are independent of each
other. If two blocks test the same variable and value, both are written
and make applies them top to bottom, so the later one wins.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Sequence

from polybuild.core.config import OptionsConfig
from polybuild.core.rules import conditional
from polybuild.generators.variables import toolchain_variables

if TYPE_CHECKING:
    from polybuild.core.config import ConfigModel, OverlayConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OverlayView:
    """An overlay merged with the base configuration.

    Attributes:
        variable: Environment variable tested by make.
        value: Value that activates the overlay.
        options: Options, falling back to the base options.
        library: Library directories.
        install: Install directory, empty for none.
        static_libraries: Rebound static libraries, or None to keep the base.
    """

    variable: str
    value: str
    options: OptionsConfig
    library: tuple[str, ...]
    install: str
    static_libraries: tuple[str, ...] | None


def resolve_overlay(overlay: OverlayConfig, config: ConfigModel) -> OverlayView:
    """Merge one overlay's overrides onto the base configuration."""
    base = config.paths
    options = OptionsConfig.from_table(overlay.options, defaults=config.options)
    static_libraries = (
        options.static_libraries if "static-libraries" in overlay.options else None
    )
    return OverlayView(
        variable=overlay.variable,
        value=overlay.value,
        options=options,
        library=overlay.paths.find_or("library", list, base.library),
        install=overlay.paths.find_or("install", str, base.install),
        static_libraries=static_libraries,
    )


def render_overlay(
    view: OverlayView, shared: bool, include_paths: Sequence[str] = ()
) -> str:
    """Render one ``ifeq`` block.

    Args:
        view: The merged overlay.
        shared: Base ``shared`` setting; overlays cannot change the
            output kind because ``out_ext`` is fixed by the platform block.
        include_paths: Base include directories. Overlays cannot change
            them because header prerequisites are computed from the base.
    """
    body = toolchain_variables(
        view.options,
        include_paths=include_paths,
        library_paths=view.library,
        install=view.install,
        shared=shared,
        static_libraries=view.static_libraries,
        indent=True,
    )
    return conditional(view.variable, view.value, body)


def expand_overlays(config: ConfigModel) -> list[str]:
    """Render every overlay of ``config`` in declaration order."""
    blocks = []
    for overlay in config.overlays:
        logger.debug("Expanding overlay %s=%s", overlay.variable, overlay.value)
        view = resolve_overlay(overlay, config)
        block = render_overlay(view, config.options.shared, config.paths.include)
        blocks.append(block)
    return blocks
