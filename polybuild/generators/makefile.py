# SPDX-License-Identifier: MIT
"""Makefile generator.

Writes two files into the project directory:

- ``.polybuild.mk``: the rule script with platform and overlay variable
  blocks, one compile rule per source file, the link rule, ``clean`` and
  ``install``.
- ``Makefile``: a thin wrapper that sets up ``OS``, runs the configured
  preludes and delegates to the rule script.

Both files are rendered completely before either is opened, so a fatal
configuration error never leaves a half-written script behind.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path, PurePath
from typing import TYPE_CHECKING

from polybuild.core.includes import IncludeClosure, IncludeResolver
from polybuild.core.naming import ArtifactNamer
from polybuild.core.rules import BuildRule, assign, conditional, echo
from polybuild.core.sources import SourceFile, discover_sources
from polybuild.generators.generator import BaseGenerator
from polybuild.generators.overlay import expand_overlays
from polybuild.generators.variables import platform_block, toolchain_variables

if TYPE_CHECKING:
    from polybuild.core.config import ConfigModel

logger = logging.getLogger(__name__)

HEADER = "# This file was auto-generated by Polybuild\n"


@dataclass(frozen=True)
class CompileUnit:
    """One source file with everything needed for its compile rule.

    Attributes:
        source: The source file.
        artifact: Unique object name, without directory or extension.
        closure: Headers the source depends on.
    """

    source: SourceFile
    artifact: str
    closure: IncludeClosure


def collect_units(config: ConfigModel, root: Path | str = ".") -> list[CompileUnit]:
    """Discover sources, scan their includes and name their objects.

    Uses a fresh ArtifactNamer, so names are unique within the run and
    depend only on discovery order.

    Raises:
        SourceDirectoryError: If a source directory cannot be listed.
    """
    resolver = IncludeResolver(root)
    namer = ArtifactNamer()
    units = []
    for source in discover_sources(config.paths.source, root):
        artifact = namer.allocate(source.stem)
        closure = resolver.resolve(source.path, config.paths.include)
        logger.debug(
            "%s -> %s (%d header(s))", source.path.as_posix(), artifact, len(closure)
        )
        units.append(CompileUnit(source, artifact, closure))
    return units


class MakefileGenerator(BaseGenerator):
    """Generator for GNU make.

    Example:
        config = ConfigModel.load("Polybuild.toml")
        MakefileGenerator().generate(config, Path("."))
        # then run: make
    """

    def __init__(
        self,
        *,
        script_filename: str = ".polybuild.mk",
        wrapper_filename: str = "Makefile",
    ) -> None:
        super().__init__("make")
        self.script_filename = script_filename
        self.wrapper_filename = wrapper_filename

    def generate(self, config: ConfigModel, output_dir: Path) -> list[Path]:
        """Write the rule script and wrapper into ``output_dir``.

        Source and header paths in the rules are relative to
        ``output_dir``, which is also where make is expected to run.
        """
        output_dir = Path(output_dir)
        logger.info("Converting configuration to makefile...")
        script = self.render_script(config, collect_units(config, output_dir))
        wrapper = self.render_wrapper(config)

        written = []
        for filename, text in (
            (self.script_filename, script),
            (self.wrapper_filename, wrapper),
        ):
            path = output_dir / filename
            with open(path, "w", encoding="utf-8") as f:
                f.write(text)
            logger.info("Wrote %s", path)
            written.append(path)
        logger.info("Finished converting configuration to makefile!")
        return written

    def render_script(self, config: ConfigModel, units: list[CompileUnit]) -> str:
        """Render the rule script for already collected compile units."""
        paths, options = config.paths, config.options
        sections = [HEADER, platform_block(options.shared)]

        sections.append(
            "".join(
                toolchain_variables(
                    options,
                    include_paths=paths.include,
                    library_paths=paths.library,
                    install=paths.install,
                    shared=options.shared,
                    static_libraries=options.static_libraries or None,
                )
            )
        )
        sections.extend(expand_overlays(config))

        output = self._output(config)
        rules = [BuildRule("all", (output,), phony=True)]
        rules.extend(self._compile_rule(unit, paths.artifact) for unit in units)
        rules.append(self._link_rule(config, units))
        rules.append(self._clean_rule(config))
        if paths.install:
            rules.append(self._install_rule(config))

        sections.extend(rule.render() for rule in rules)
        return "\n".join(sections)

    def render_wrapper(self, config: ConfigModel) -> str:
        """Render the top-level Makefile."""
        delegate = f'@"$(MAKE)" -f {self.script_filename} --no-print-directory'
        preludes = config.options.preludes

        sections = [HEADER]
        sections.append(
            "ifndef OS\n"
            + assign("OS", "$(shell uname)", indent=True)
            + "\texport OS\n"
            + "endif\n"
        )
        sections.append(
            conditional(
                "OS",
                "Windows_NT",
                [
                    assign("CC", "cl", indent=True),
                    assign("CXX", "cl", indent=True),
                    assign("CL", "/nologo", indent=True),
                    assign("LINK", "/nologo", indent=True),
                    assign("MSYS_NO_PATHCONV", "1", indent=True),
                    "\texport CC CXX CL LINK MSYS_NO_PATHCONV\n",
                ],
            )
        )

        names = tuple(f"prelude{i}" for i in range(len(preludes)))
        rules = [BuildRule("all", names, (delegate,), phony=True)]
        for name, command in zip(names, preludes):
            rules.append(
                BuildRule(
                    name,
                    commands=(echo(f"Executing prelude: {command}"), f"@{command}"),
                    phony=True,
                )
            )
        rules.append(BuildRule("clean", commands=(f"{delegate} $@",), phony=True))
        if config.paths.install:
            rules.append(
                BuildRule("install", commands=(f"{delegate} $@",), phony=True)
            )

        sections.extend(rule.render() for rule in rules)
        return "\n".join(sections)

    @staticmethod
    def _output(config: ConfigModel) -> str:
        return config.paths.output + "$(out_ext)"

    @staticmethod
    def _object(artifact_dir: str, artifact: str) -> str:
        return (PurePath(artifact_dir) / artifact).as_posix() + "$(obj_ext)"

    def _compile_rule(self, unit: CompileUnit, artifact_dir: str) -> BuildRule:
        if unit.source.is_cpp:
            compiler, flags = "cpp_compiler", "cpp_compilation_flags"
        else:
            compiler, flags = "c_compiler", "c_compilation_flags"
        return BuildRule(
            self._object(artifact_dir, unit.artifact),
            (unit.source.path.as_posix(), *unit.closure.as_posix()),
            (
                echo("Compiling $@ from $<..."),
                f"@mkdir -p {artifact_dir}",
                f'@"$({compiler})" $(compile_only_flag) $< $({flags}) '
                "$(obj_path_flag)$@",
                echo("Finished compiling $@ from $<!"),
            ),
        )

    def _link_rule(self, config: ConfigModel, units: list[CompileUnit]) -> BuildRule:
        # The C++ driver pulls in the C++ runtime when any C++ object is linked.
        if any(unit.source.is_cpp for unit in units):
            compiler, flags = "cpp_compiler", "cpp_compilation_flags"
        else:
            compiler, flags = "c_compiler", "c_compilation_flags"

        prerequisites = [
            self._object(config.paths.artifact, unit.artifact) for unit in units
        ]
        prerequisites.append("$(static_libraries)")

        commands = [echo("Building $@...")]
        parent = PurePath(config.paths.output).parent
        if parent != PurePath("."):
            commands.append(f"@mkdir -p {parent.as_posix()}")
        commands.append(
            f'@"$({compiler})" $^ $({flags}) $(out_path_flag)$@ '
            "$(link_flag) $(link_time_flags) $(libraries)"
        )
        commands.append(echo("Finished building $@!"))
        return BuildRule(self._output(config), tuple(prerequisites), tuple(commands))

    def _clean_rule(self, config: ConfigModel) -> BuildRule:
        output = self._output(config)
        artifact_dir = config.paths.artifact
        commands = []
        for command in config.options.clean_preludes:
            commands.append(echo(f"Executing clean prelude: {command}"))
            commands.append(f"@{command}")
        commands.append(echo(f"Deleting {output} and {artifact_dir}..."))
        commands.append(f"@rm -rf {output} {artifact_dir}")
        commands.append(echo(f"Finished deleting {output} and {artifact_dir}!"))
        return BuildRule("clean", commands=tuple(commands), phony=True)

    def _install_rule(self, config: ConfigModel) -> BuildRule:
        output = self._output(config)
        return BuildRule(
            "install",
            commands=(
                echo(f"Copying {output} to $(prefix)..."),
                f"@cp {output} $(prefix)",
                echo(f"Finished copying {output} to $(prefix)!"),
            ),
            phony=True,
        )
