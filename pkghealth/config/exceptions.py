# SPDX-License-Identifier: MIT

"""
Custom exceptions for the configuration system.

Kept apart from the health check errors so the CLI can tell "your config is
wrong" apart from "your package is wrong" without importing the detectors.
"""


class ConfigError(Exception):
    """Base for all configuration errors."""


class ConfigLoadError(ConfigError):
    """Raised when a config file cannot be read from disk or parsed as YAML."""


class ConfigValidationError(ConfigError):
    """
    Raised when a config file parses fine but fails schema validation.
    This covers missing required fields, type mismatches, unknown keys and
    malformed allow-list patterns.

    `sections` names the top-level keys (`global`, `relocation`,
    `dependencies`, or an unknown key) that failed, in file order where
    pydantic reports them that way.
    """

    def __init__(self, message: str, sections: tuple[str, ...] = ()) -> None:
        self.sections = sections
        super().__init__(message)
