# SPDX-License-Identifier: MIT

"""
DLL base relocation conflict detection.

Every DLL asks the Windows loader for a preferred base address. If two DLLs
a process loads ask for overlapping ranges, one of them gets rebased at load
time, which costs startup time and defeats any shared pages. The check
decodes each bundled DLL's image base and size and reports every pair whose
half-open ranges [base, base + size) intersect.

Modules are visited in sorted path order and pairs in (earlier, later)
order, so the conflict map comes out the same for an unchanged tree. Ranges
are compared as plain integers, so a PE32 and a PE32+ DLL can still collide.
"""

from pathlib import Path
from typing import Optional, Sequence

from pkghealth.config.schema import RelocationConfig
from pkghealth.health.enumerator import list_modules
from pkghealth.health.exceptions import HeaderDecodeError, RelocationConflictsFound
from pkghealth.health.models import (
    ConflictEntry,
    ConflictMap,
    ModuleRecord,
    PlatformFamily,
    conflict_map_to_dict,
)
from pkghealth.health.pe_header import read_header
from pkghealth.logging.logger import get_logger
from pkghealth.utils.paths import relative_module_id

logger = get_logger(__name__)


def find_conflicts(modules: Sequence[ModuleRecord]) -> ConflictMap:
    """
    Pairwise overlap test over fully decoded modules.

    Each conflicting pair adds the later module to the earlier one's list and
    the earlier to the later's. Modules without any partner are left out.
    """
    snapshot = tuple(modules)
    conflicts: ConflictMap = {}

    for index, first in enumerate(snapshot):
        first_range = first.address_range
        for second in snapshot[index + 1 :]:
            if not first_range.overlaps(second.address_range):
                continue

            first_entry = conflicts.setdefault(
                first.relative_id,
                ConflictEntry(base=first.image_base, size=first.image_size),
            )
            second_entry = conflicts.setdefault(
                second.relative_id,
                ConflictEntry(base=second.image_base, size=second.image_size),
            )
            if second.relative_id not in first_entry.conflicts:
                first_entry.conflicts.append(second.relative_id)
            if first.relative_id not in second_entry.conflicts:
                second_entry.conflicts.append(first.relative_id)

    return conflicts


class RelocationConflictDetector:
    """Finds DLLs under the install root whose preferred address ranges overlap."""

    def __init__(self, config: Optional[RelocationConfig] = None) -> None:
        self.config = config or RelocationConfig()

    @staticmethod
    def checkable(platform_family: PlatformFamily) -> bool:
        return platform_family.is_relocation_sensitive

    def search_root(self, install_dir: Path) -> Path:
        return install_dir / self.config.search_subdir

    def discover_modules(self, install_dir: Path) -> list[ModuleRecord]:
        """
        Decode every DLL below the search root.

        Raises:
            HeaderDecodeError: A file with the library extension is not a PE
                image, or its image does not fit its address space.
        """
        search_root = self.search_root(install_dir)
        extension = self.config.library_extension
        modules: list[ModuleRecord] = []

        for path in list_modules(search_root, extension):
            header = read_header(path)
            try:
                record = ModuleRecord(
                    relative_id=relative_module_id(path, search_root, extension),
                    image_base=header.image_base,
                    image_size=header.image_size,
                    is_64bit=header.is_64bit,
                )
            except ValueError as err:
                raise HeaderDecodeError(str(err), path=str(path)) from err
            logger.debug(
                "Decoded module",
                extra={
                    "module_id": record.relative_id,
                    "base": hex(record.image_base),
                    "size": hex(record.image_size),
                    "is_64bit": record.is_64bit,
                },
            )
            modules.append(record)

        logger.info(
            "Module discovery complete",
            extra={"search_root": str(search_root), "modules": len(modules)},
        )
        return modules

    def detect_conflicts(self, install_dir: Path) -> ConflictMap:
        """Conflict map for every DLL under the install root. Empty means clean."""
        return find_conflicts(self.discover_modules(install_dir))

    def run(self, install_dir: Path) -> bool:
        """
        Raises:
            RelocationConflictsFound: At least one pair of DLLs overlaps.
            HeaderDecodeError: A DLL could not be decoded.
        """
        conflicts = self.detect_conflicts(install_dir)
        if conflicts:
            logger.error(
                "Relocation conflicts found",
                extra={
                    "install_dir": str(install_dir),
                    "conflicts": conflict_map_to_dict(conflicts),
                },
            )
            raise RelocationConflictsFound(conflicts)

        logger.info("Relocation check passed", extra={"install_dir": str(install_dir)})
        return True
