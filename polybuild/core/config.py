# SPDX-License-Identifier: MIT
"""Project configuration for polybuild.

The configuration is read from a TOML file (``Polybuild.toml`` by default)
with three recognized sections:

    [paths]
    output = "bin/app"          # required
    source = ["src"]            # required
    artifact = "obj"            # required
    include = ["include"]
    library = []
    install = "/usr/local/bin"

    [options]
    c-compiler = "gcc"
    cpp-compiler = "g++"        # "compiler" is accepted as a fallback
    libraries = ["m"]
    shared = false
    static = false

    [env.BUILD.debug.options]   # overlay selected when $(BUILD) == debug
    c-compilation-flags = "-g"

Values that are not set fall back to conventional external make variables
such as ``$(CC)`` or ``$(CXXFLAGS)`` rather than literal tool names.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # type: ignore[no-redef]

from polybuild.core.errors import ConfigError, ConfigTypeError, MissingKeyError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "Polybuild.toml"

_MISSING = object()


class Table:
    """Typed, read-only view over one TOML table.

    Lookups come in two flavours: ``find`` for required keys, which raises
    MissingKeyError when the key is absent, and ``find_or`` which returns
    a default instead. Both check the value type and raise ConfigTypeError
    on mismatch.

    Attributes:
        name: Dotted path of this table, used in error messages.
    """

    def __init__(self, data: Mapping[str, Any] | None = None, name: str = "") -> None:
        self._data: dict[str, Any] = dict(data or {})
        self.name = name

    def _qualify(self, key: str) -> str:
        return f"{self.name}.{key}" if self.name else key

    def __contains__(self, key: str) -> bool:
        return key in self._data

    def __iter__(self):
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Table):
            return NotImplemented
        return self._data == other._data

    def __repr__(self) -> str:
        return f"Table({self.name!r}, {self._data!r})"

    def find(self, key: str, kind: type) -> Any:
        """Look up a required key.

        Args:
            key: Key within this table.
            kind: Expected type: str, bool, list (of strings) or Table.

        Raises:
            MissingKeyError: If the key is absent.
            ConfigTypeError: If the value has the wrong type.
        """
        value = self._data.get(key, _MISSING)
        if value is _MISSING:
            raise MissingKeyError(self._qualify(key))
        return self._convert(key, value, kind)

    def find_or(self, key: str, kind: type, default: Any) -> Any:
        """Look up an optional key, returning default when absent."""
        value = self._data.get(key, _MISSING)
        if value is _MISSING:
            return default
        return self._convert(key, value, kind)

    def table(self, key: str) -> Table:
        """Return a sub-table, or an empty one when absent."""
        return self.find_or(key, Table, Table(name=self._qualify(key)))

    def _convert(self, key: str, value: Any, kind: type) -> Any:
        qualified = self._qualify(key)
        if kind is Table:
            if not isinstance(value, Mapping):
                raise ConfigTypeError(qualified, "a table")
            return Table(value, qualified)
        if kind is list:
            if not isinstance(value, list) or not all(
                isinstance(item, str) for item in value
            ):
                raise ConfigTypeError(qualified, "a list of strings")
            return tuple(value)
        if kind is bool:
            if not isinstance(value, bool):
                raise ConfigTypeError(qualified, "a boolean")
            return value
        if kind is str:
            if not isinstance(value, str):
                raise ConfigTypeError(qualified, "a string")
            return value
        raise TypeError(f"unsupported lookup type: {kind!r}")


@dataclass(frozen=True)
class PathsConfig:
    """The ``[paths]`` section."""

    output: str
    source: tuple[str, ...]
    artifact: str
    include: tuple[str, ...] = ()
    library: tuple[str, ...] = ()
    install: str = ""

    @classmethod
    def from_table(cls, table: Table) -> PathsConfig:
        return cls(
            output=table.find("output", str),
            source=table.find("source", list),
            artifact=table.find("artifact", str),
            include=table.find_or("include", list, ()),
            library=table.find_or("library", list, ()),
            install=table.find_or("install", str, ""),
        )


@dataclass(frozen=True)
class OptionsConfig:
    """The ``[options]`` section, with defaults already substituted."""

    c_compiler: str = "$(CC)"
    cpp_compiler: str = "$(CXX)"
    c_compilation_flags: str = "$(CFLAGS)"
    cpp_compilation_flags: str = "$(CXXFLAGS)"
    link_time_flags: str = "$(LDFLAGS)"
    libraries: tuple[str, ...] = ()
    static_libraries: tuple[str, ...] = ()
    pkg_config_libraries: tuple[str, ...] = ()
    preludes: tuple[str, ...] = ()
    clean_preludes: tuple[str, ...] = ()
    shared: bool = False
    static: bool = False

    @classmethod
    def from_table(
        cls, table: Table, defaults: OptionsConfig | None = None
    ) -> OptionsConfig:
        """Build options from a table, falling back to ``defaults``.

        ``compiler`` and ``compilation-flags`` are accepted as fallbacks
        for their ``cpp-`` prefixed spellings.
        """
        d = defaults or cls()
        return cls(
            c_compiler=table.find_or("c-compiler", str, d.c_compiler),
            cpp_compiler=table.find_or(
                "cpp-compiler", str, table.find_or("compiler", str, d.cpp_compiler)
            ),
            c_compilation_flags=table.find_or(
                "c-compilation-flags", str, d.c_compilation_flags
            ),
            cpp_compilation_flags=table.find_or(
                "cpp-compilation-flags",
                str,
                table.find_or("compilation-flags", str, d.cpp_compilation_flags),
            ),
            link_time_flags=table.find_or("link-time-flags", str, d.link_time_flags),
            libraries=table.find_or("libraries", list, d.libraries),
            static_libraries=table.find_or(
                "static-libraries", list, d.static_libraries
            ),
            pkg_config_libraries=table.find_or(
                "pkg-config-libraries", list, d.pkg_config_libraries
            ),
            preludes=table.find_or("preludes", list, d.preludes),
            clean_preludes=table.find_or("clean-preludes", list, d.clean_preludes),
            shared=table.find_or("shared", bool, d.shared),
            static=table.find_or("static", bool, d.static),
        )


@dataclass(frozen=True)
class OverlayConfig:
    """One ``[env.<VARIABLE>.<VALUE>]`` block as declared.

    Only the raw override tables are kept; the merged view is computed
    against the base configuration when the overlay is expanded.

    Attributes:
        variable: External environment variable to test at build time.
        value: Value the variable must equal for the overlay to apply.
        paths: Overrides for the ``[paths]`` section.
        options: Overrides for the ``[options]`` section.
    """

    variable: str
    value: str
    paths: Table = field(default_factory=Table)
    options: Table = field(default_factory=Table)


@dataclass(frozen=True)
class ConfigModel:
    """Typed view over a complete project description.

    Attributes:
        paths: The ``[paths]`` section.
        options: The ``[options]`` section.
        overlays: Environment overlays in declaration order.
    """

    paths: PathsConfig
    options: OptionsConfig = field(default_factory=OptionsConfig)
    overlays: tuple[OverlayConfig, ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ConfigModel:
        """Build a model from already-parsed TOML data.

        Raises:
            MissingKeyError: If a required key is absent.
            ConfigTypeError: If a value has the wrong type.
        """
        root = Table(data)
        paths = PathsConfig.from_table(root.table("paths"))
        options = OptionsConfig.from_table(root.table("options"))

        overlays: list[OverlayConfig] = []
        env = root.table("env")
        for variable in env:
            values = env.table(variable)
            for value in values:
                block = values.table(value)
                overlays.append(
                    OverlayConfig(
                        variable=variable,
                        value=value,
                        paths=block.table("paths"),
                        options=block.table("options"),
                    )
                )
                logger.debug("Found overlay %s=%s", variable, value)

        return cls(paths=paths, options=options, overlays=tuple(overlays))

    @classmethod
    def load(cls, path: Path | str = DEFAULT_CONFIG_FILE) -> ConfigModel:
        """Load and validate a TOML configuration file.

        Raises:
            ConfigError: If the file cannot be read or is not valid TOML.
        """
        path = Path(path)
        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
        except OSError as e:
            raise ConfigError(f"cannot read {path}: {e.strerror or e}") from e
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"{path}: {e}") from e
        logger.debug("Loaded configuration from %s", path)
        return cls.from_dict(data)
