# SPDX-License-Identifier: MIT

"""
Reads a pkghealth YAML config and turns it into a frozen PkgHealthConfig.

Read errors and YAML syntax errors raise ConfigLoadError. Schema errors raise
ConfigValidationError, which names the sections that failed. A health gate
run with a config path never falls back to defaults.
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from pkghealth.config.exceptions import ConfigLoadError, ConfigValidationError
from pkghealth.config.schema import PkgHealthConfig


def _read_mapping(config_path: Path) -> dict[str, Any]:
    """
    Parse `config_path` as YAML and insist on a top-level mapping.

    An empty file parses to None and is rejected like any other non-mapping.
    """
    if not config_path.is_file():
        reason = "not found" if not config_path.exists() else "not a file"
        raise ConfigLoadError(f"Config file {reason}: {config_path}")

    try:
        with open(config_path, encoding="utf-8") as handle:
            parsed = yaml.safe_load(handle)
    except OSError as err:
        raise ConfigLoadError(f"Cannot read config file {config_path}: {err}") from err
    except yaml.YAMLError as err:
        raise ConfigLoadError(f"Invalid YAML in {config_path}: {err}") from err

    if not isinstance(parsed, dict):
        raise ConfigLoadError(
            f"{config_path}: expected a YAML mapping with a 'global' section, "
            f"got {type(parsed).__name__}"
        )
    return parsed


def _failed_sections(err: ValidationError) -> tuple[str, ...]:
    sections: list[str] = []
    for detail in err.errors():
        location = detail.get("loc") or ("<root>",)
        section = str(location[0])
        if section not in sections:
            sections.append(section)
    return tuple(sections)


def load_config(config_path: Path) -> PkgHealthConfig:
    """
    Load and validate a config file.

    Raises:
        ConfigLoadError: Missing file, I/O failure, bad YAML, or a document
            that isn't a mapping.
        ConfigValidationError: The mapping doesn't match the schema.
    """
    raw_data = _read_mapping(config_path)

    try:
        return PkgHealthConfig.model_validate(raw_data)
    except ValidationError as err:
        sections = _failed_sections(err)
        raise ConfigValidationError(
            f"Invalid config {config_path} (section: {', '.join(sections)}):\n{err}",
            sections=sections,
        ) from err
