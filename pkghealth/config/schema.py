# SPDX-License-Identifier: MIT

"""
Type-safe configuration schemas for pkghealth.

Each config section gets its own frozen pydantic model:
  - frozen=True: immutability after construction
  - extra="forbid": unknown fields cause immediate failure
  - validate_default=True: even defaults get type-checked

Only `global:` is required in a config file. The detector sections default
to the behaviour a stock Omnibus-style install tree expects, so most
pipelines never need to write them out.
"""

import re
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_SCAN_COMMAND: str = (
    "find {install_dir}/ -type f | xargs file | grep \"ELF\" "
    "| awk -F: '{print $1}' | sed -e 's/:$//'"
)

DEFAULT_RESOLVER_COMMAND: str = "xargs ldd"

# Core system libraries every Linux host is expected to provide. A package
# linking against these from /lib is fine; anything else from outside the
# install root is not.
DEFAULT_ALLOWED_LIBRARIES: tuple[str, ...] = (
    r"ld-linux",
    r"libanl\.so",
    r"libc\.so",
    r"libcrypt\.so",
    r"libdl\.so",
    r"libfreebl\d\.so",
    r"libgcc_s\.so",
    r"libm\.so",
    r"libnsl\.so",
    r"libpthread\.so",
    r"libresolv\.so",
    r"librt\.so",
    r"libstdc\+\+\.so",
    r"libutil\.so",
    r"linux-vdso.+",
    r"linux-gate\.so",
)


class GlobalConfig(BaseModel):
    """Cross-cutting settings: schema version and observability."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    config_version: str = Field(
        description="Schema version for compatibility tracking, e.g. '1.0.0'"
    )
    log_level: str = Field(
        default="INFO",
        description="One of DEBUG, INFO, WARNING, ERROR, CRITICAL",
    )
    log_file: Optional[str] = Field(
        default=None,
        description="Optional path for file-based log output",
    )

    @field_validator("log_level")
    @classmethod
    def _known_log_level(cls, value: str) -> str:
        upper = value.upper()
        if upper not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level {value!r}")
        return upper


class RelocationConfig(BaseModel):
    """Where the DLL relocation check looks and what it looks for."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    search_subdir: str = Field(
        default="embedded/bin",
        description="Directory under the install root searched recursively for DLLs",
    )
    library_extension: str = Field(
        default=".dll",
        description="File extension of the dynamic libraries to decode",
    )

    @field_validator("library_extension")
    @classmethod
    def _extension_has_dot(cls, value: str) -> str:
        if not value.startswith(".") or len(value) < 2:
            raise ValueError(f"library_extension must look like '.dll', got {value!r}")
        return value


class DependencyConfig(BaseModel):
    """
    Commands and allow-list for the external dependency audit.

    `scan_command` is a shell pipeline with an `{install_dir}` placeholder
    that prints one binary path per line. `resolver_command` reads those
    paths on stdin and prints an ldd-style report.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    scan_command: str = Field(
        default=DEFAULT_SCAN_COMMAND,
        description="Shell pipeline listing candidate binaries, one per line",
    )
    resolver_command: str = Field(
        default=DEFAULT_RESOLVER_COMMAND,
        description="Shell command resolving linked libraries for paths on stdin",
    )
    allowed_libraries: list[str] = Field(
        default_factory=lambda: list(DEFAULT_ALLOWED_LIBRARIES),
        description="Regexes matched against library names that may live outside the install root",
    )
    command_timeout_seconds: Optional[int] = Field(
        default=None,
        ge=1,
        description="Upper bound for each external command; None waits forever",
    )

    @field_validator("scan_command")
    @classmethod
    def _scan_command_has_placeholder(cls, value: str) -> str:
        if "{install_dir}" not in value:
            raise ValueError("scan_command must contain an {install_dir} placeholder")
        return value

    @field_validator("allowed_libraries")
    @classmethod
    def _patterns_compile(cls, value: list[str]) -> list[str]:
        for pattern in value:
            try:
                re.compile(pattern)
            except re.error as err:
                raise ValueError(f"Invalid allowed_libraries pattern {pattern!r}: {err}") from err
        return value


class PkgHealthConfig(BaseModel):
    """
    Top-level config container.

    A config file needs `global:`; `relocation:` and `dependencies:` fall back
    to their defaults when absent.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    global_config: GlobalConfig = Field(alias="global")
    relocation: RelocationConfig = Field(default_factory=RelocationConfig)
    dependencies: DependencyConfig = Field(default_factory=DependencyConfig)


def default_config() -> PkgHealthConfig:
    """The configuration used when no config file is given."""
    return PkgHealthConfig.model_validate({"global": {"config_version": "1.0.0"}})
