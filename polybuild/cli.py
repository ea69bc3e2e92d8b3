# SPDX-License-Identifier: MIT
"""Command-line interface for polybuild."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from polybuild.core.config import DEFAULT_CONFIG_FILE, ConfigModel
from polybuild.core.errors import PolybuildError
from polybuild.generators.makefile import MakefileGenerator

logger = logging.getLogger("polybuild")

CONFIG_TEMPLATE = """\
# Polybuild project description.
# Run 'polybuild' to regenerate the makefile, then 'make' to build.

[paths]
output = "bin/app"
source = ["src"]
include = ["include"]
artifact = "obj"
# install = "/usr/local/bin"

[options]
# c-compiler = "gcc"
# cpp-compiler = "g++"
c-compilation-flags = "-Wall -O2"
cpp-compilation-flags = "-Wall -O2"
libraries = []

# Overlays apply when an environment variable has a given value:
#   make BUILD=debug
# [env.BUILD.debug.options]
# c-compilation-flags = "-Wall -g -O0"
"""


def setup_logging(verbose: bool = False, debug: bool = False) -> None:
    """Configure logging based on verbosity level."""
    if debug:
        level = logging.DEBUG
        fmt = "%(levelname)s: %(name)s: %(message)s"
    elif verbose:
        level = logging.INFO
        fmt = "%(levelname)s: %(message)s"
    else:
        level = logging.WARNING
        fmt = "%(levelname)s: %(message)s"

    logging.basicConfig(level=level, format=fmt)


def find_config(name: str, search_dir: Path | None = None) -> Path | None:
    """Find a configuration file by name.

    Args:
        name: File name or path, relative to ``search_dir``.
        search_dir: Directory to search in (default: current dir).

    Returns:
        Path to the file if found, None otherwise.
    """
    if search_dir is None:
        search_dir = Path.cwd()

    config_path = search_dir / name
    if config_path.is_file():
        return config_path

    return None


def cmd_generate(args: argparse.Namespace) -> int:
    """Generate the makefile from the project configuration.

    Nothing is written unless the whole configuration is valid.
    """
    setup_logging(args.verbose, args.debug)

    project_dir = Path(args.directory)
    config_path = find_config(args.config, project_dir)
    if config_path is None:
        logger.error("No %s found in %s", args.config, project_dir)
        logger.info("Run 'polybuild init' to create one")
        return 1

    try:
        config = ConfigModel.load(config_path)
        written = MakefileGenerator().generate(config, project_dir)
    except PolybuildError as e:
        logger.error("%s", e)
        return 1

    for path in written:
        print(f"Generated {path}")
    return 0


def cmd_init(args: argparse.Namespace) -> int:
    """Write a template configuration file."""
    setup_logging(args.verbose, args.debug)

    config_path = Path(args.directory) / args.config
    if config_path.exists() and not args.force:
        logger.error("%s already exists (use --force to overwrite)", config_path)
        return 1

    config_path.write_text(CONFIG_TEMPLATE)
    logger.info("Created %s", config_path)
    print(f"Created {config_path}")
    return 0


def add_common_args(parser: argparse.ArgumentParser) -> None:
    """Add common arguments to a parser."""
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    parser.add_argument("--debug", action="store_true", help="Debug output")
    parser.add_argument(
        "-C",
        "--directory",
        default=".",
        help="Project directory (default: current directory)",
    )
    parser.add_argument(
        "-c",
        "--config",
        default=DEFAULT_CONFIG_FILE,
        help=f"Configuration file name (default: {DEFAULT_CONFIG_FILE})",
    )


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the polybuild CLI."""
    parser = argparse.ArgumentParser(
        prog="polybuild",
        description="Generate a portable makefile from Polybuild.toml.",
        epilog="Run 'polybuild <command> --help' for command-specific help.",
    )
    from polybuild import __version__

    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    add_common_args(parser)
    parser.set_defaults(func=cmd_generate)

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    gen_parser = subparsers.add_parser(
        "generate", help="Generate the makefile (default)"
    )
    add_common_args(gen_parser)
    gen_parser.set_defaults(func=cmd_generate)

    init_parser = subparsers.add_parser("init", help="Create a template Polybuild.toml")
    init_parser.add_argument(
        "-f", "--force", action="store_true", help="Overwrite existing file"
    )
    add_common_args(init_parser)
    init_parser.set_defaults(func=cmd_init)

    args = parser.parse_args(argv)
    result: int = args.func(args)
    return result


if __name__ == "__main__":
    sys.exit(main())
