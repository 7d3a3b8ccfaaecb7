# SPDX-License-Identifier: MIT

"""
Data model for a single health check run.

Everything here is built fresh per run and thrown away once the verdict is
in. Records are frozen dataclasses: once a module's header has been decoded
or a dependency line parsed, nothing downstream should be able to change it.
ConflictEntry is the one mutable type because the detector fills its
`conflicts` list as it walks the pairs.
"""

import sys
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class PlatformFamily(str, Enum):
    """Target platform family a package is built for."""

    WINDOWS = "windows"
    LINUX = "linux"
    DARWIN = "darwin"
    FREEBSD = "freebsd"
    SOLARIS = "solaris"
    AIX = "aix"

    @property
    def is_relocation_sensitive(self) -> bool:
        """Only the Windows loader cares about preferred base addresses overlapping."""
        return self is PlatformFamily.WINDOWS


_SYS_PLATFORM_PREFIXES: tuple[tuple[str, PlatformFamily], ...] = (
    ("win32", PlatformFamily.WINDOWS),
    ("cygwin", PlatformFamily.WINDOWS),
    ("linux", PlatformFamily.LINUX),
    ("darwin", PlatformFamily.DARWIN),
    ("freebsd", PlatformFamily.FREEBSD),
    ("sunos", PlatformFamily.SOLARIS),
    ("aix", PlatformFamily.AIX),
)


def detect_platform_family(sys_platform: Optional[str] = None) -> PlatformFamily:
    """
    Map a `sys.platform` string to a PlatformFamily.

    Only used for defaults. The orchestrator always takes the family as an
    explicit argument because the target platform is not necessarily the
    host the check runs on.
    """
    value = sys_platform if sys_platform is not None else sys.platform
    for prefix, family in _SYS_PLATFORM_PREFIXES:
        if value.startswith(prefix):
            return family
    raise ValueError(f"Unsupported platform: {value!r}")


@dataclass(frozen=True)
class AddressRange:
    """Half-open virtual address interval [start, end)."""

    start: int
    end: int

    def overlaps(self, other: "AddressRange") -> bool:
        return self.start < other.end and other.start < self.end


@dataclass(frozen=True)
class ModuleRecord:
    """
    One bundled DLL considered for relocation checking.

    `relative_id` is the path below the search root with the extension
    stripped and forward slashes, e.g. "b/b" for embedded/bin/b/b.dll.
    """

    relative_id: str
    image_base: int
    image_size: int
    is_64bit: bool = False

    def __post_init__(self) -> None:
        if self.image_size <= 0:
            raise ValueError(f"{self.relative_id}: image size must be positive, got {self.image_size}")
        if self.image_base < 0:
            raise ValueError(f"{self.relative_id}: image base must be unsigned, got {self.image_base}")
        width = 64 if self.is_64bit else 32
        if self.image_base + self.image_size > 2**width:
            raise ValueError(
                f"{self.relative_id}: image 0x{self.image_base:x}+0x{self.image_size:x} "
                f"does not fit a {width}-bit address space"
            )

    @property
    def address_range(self) -> AddressRange:
        return AddressRange(self.image_base, self.image_base + self.image_size)


@dataclass
class ConflictEntry:
    """A module that collides with at least one other module."""

    base: int
    size: int
    conflicts: list[str] = field(default_factory=list)


# relative_id -> entry, only for modules with at least one conflict.
ConflictMap = dict[str, ConflictEntry]


def conflict_map_to_dict(conflicts: ConflictMap) -> dict[str, dict[str, object]]:
    """Plain-data form of a conflict map, suitable for JSON logging."""
    return {
        relative_id: {
            "base": entry.base,
            "size": entry.size,
            "conflicts": list(entry.conflicts),
        }
        for relative_id, entry in conflicts.items()
    }


@dataclass(frozen=True)
class DependencyEdge:
    """A binary's reference to a shared library, resolved or not."""

    binary: str
    name: str
    resolved_path: Optional[str] = None

    @property
    def is_resolved(self) -> bool:
        return bool(self.resolved_path)


@dataclass(frozen=True)
class ExternalDependencyViolation:
    """A resolved library path that sits outside the install root."""

    binary: str
    name: str
    resolved_path: str
