# SPDX-License-Identifier: MIT
"""Custom exceptions for polybuild.

All polybuild exceptions inherit from PolybuildError. Every one of them
is fatal: generation aborts before any output file is written.
"""

from __future__ import annotations


class PolybuildError(Exception):
    """Base class for all polybuild exceptions.

    Attributes:
        message: The error message.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ConfigError(PolybuildError):
    """Error while reading the project configuration.

    Raised for malformed TOML and for invalid values.
    """


class MissingKeyError(ConfigError):
    """A required configuration key is absent.

    Attributes:
        key: Dotted name of the missing key.
    """

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"missing required configuration key: {key}")


class ConfigTypeError(ConfigError):
    """A configuration value has the wrong type.

    Attributes:
        key: Dotted name of the offending key.
        expected: Human readable name of the expected type.
    """

    def __init__(self, key: str, expected: str) -> None:
        self.key = key
        self.expected = expected
        super().__init__(f"configuration key {key} must be {expected}")


class GenerateError(PolybuildError):
    """Error during the generate phase."""


class SourceDirectoryError(GenerateError):
    """A declared source directory cannot be listed.

    Attributes:
        path: The inaccessible directory.
    """

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"source directory not accessible: {path}")
