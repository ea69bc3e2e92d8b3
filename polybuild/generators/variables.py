# SPDX-License-Identifier: MIT
"""Toolchain variable blocks shared by the base script and overlays."""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

from polybuild.core.rules import assign, conditional

if TYPE_CHECKING:
    from polybuild.core.config import OptionsConfig

# POSIX spellings first, then the MSVC rebinding evaluated by make.
POSIX_FLAGS: list[tuple[str, str]] = [
    ("include_path_flag", "-I"),
    ("library_path_flag", "-L"),
    ("obj_path_flag", "-o"),
    ("out_path_flag", "-o"),
    ("library_flag", "-l"),
    ("static_flag", "-static"),
    ("shared_flag", "-shared -fPIC"),
    ("compile_only_flag", "-c"),
    ("obj_ext", ".o"),
]

WINDOWS_FLAGS: list[tuple[str, str]] = [
    ("include_path_flag", "/I"),
    ("library_path_flag", "/LIBPATH:"),
    ("obj_path_flag", "/Fo:"),
    ("out_path_flag", "/Fe:"),
    ("library_flag", ""),
    ("dynamic_flag", "/MD"),
    ("static_flag", "/MT"),
    ("shared_flag", "/LD"),
    ("compile_only_flag", "/c"),
    ("link_flag", "/link"),
    ("pkg_config_syntax", "--msvc-syntax"),
    ("obj_ext", ".obj"),
]


def platform_block(shared: bool) -> str:
    """Flag spellings for POSIX compilers with a Windows_NT override.

    Both branches are always written; make picks one from ``$(OS)``.
    """
    lines = [assign(name, value) for name, value in POSIX_FLAGS]
    if shared:
        lines.append(assign("out_ext", ".so"))
    body = [assign(name, value, indent=True) for name, value in WINDOWS_FLAGS]
    body.append(assign("out_ext", ".dll" if shared else ".exe", indent=True))
    return "".join(lines) + conditional("OS", "Windows_NT", body)


def _pkg_config(mode: str, packages: Sequence[str]) -> str:
    return f" `pkg-config $(pkg_config_syntax) {mode} {' '.join(packages)}`"


def compilation_flags(
    flags: str,
    include_paths: Sequence[str],
    shared: bool,
    static: bool,
    pkg_config_libraries: Sequence[str],
) -> str:
    """Value of a ``*_compilation_flags`` variable.

    ``shared`` and ``static`` are independent: both flags may be added.
    """
    value = flags
    for path in include_paths:
        value += f" $(include_path_flag){path}"
    if shared:
        value += " $(shared_flag)"
    value += " $(static_flag)" if static else " $(dynamic_flag)"
    if pkg_config_libraries:
        value += _pkg_config("--cflags", pkg_config_libraries)
    return value


def link_time_flags(flags: str, library_paths: Sequence[str]) -> str:
    return flags + "".join(f" $(library_path_flag){path}" for path in library_paths)


def libraries(names: Sequence[str], pkg_config_libraries: Sequence[str]) -> str:
    value = "".join(f" $(library_flag){name}" for name in names)
    if pkg_config_libraries:
        value += _pkg_config("--libs", pkg_config_libraries)
    return value.lstrip()


def toolchain_variables(
    options: OptionsConfig,
    *,
    include_paths: Sequence[str],
    library_paths: Sequence[str],
    install: str,
    shared: bool,
    static_libraries: Sequence[str] | None,
    indent: bool = False,
) -> list[str]:
    """Compiler, flag and library assignments for one configuration view.

    Args:
        options: Options with defaults already applied.
        include_paths: Directories added with ``$(include_path_flag)``.
        library_paths: Directories added with ``$(library_path_flag)``.
        install: Install directory; ``prefix`` is only bound when non-empty.
        shared: Whether the output is a shared library.
        static_libraries: Bound to ``static_libraries`` unless None.
        indent: Indent lines for use inside a conditional block.
    """
    lines = [
        assign("c_compiler", options.c_compiler, indent),
        assign("cpp_compiler", options.cpp_compiler, indent),
    ]
    for name, flags in (
        ("c_compilation_flags", options.c_compilation_flags),
        ("cpp_compilation_flags", options.cpp_compilation_flags),
    ):
        value = compilation_flags(
            flags, include_paths, shared, options.static, options.pkg_config_libraries
        )
        lines.append(assign(name, value, indent))
    link = link_time_flags(options.link_time_flags, library_paths)
    lines.append(assign("link_time_flags", link, indent))
    libs = libraries(options.libraries, options.pkg_config_libraries)
    lines.append(assign("libraries", libs, indent))
    if static_libraries is not None:
        lines.append(assign("static_libraries", " ".join(static_libraries), indent))
    if install:
        lines.append(assign("prefix", install, indent))
    return lines
