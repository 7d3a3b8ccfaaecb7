# SPDX-License-Identifier: MIT

"""
External dependency audit for Unix targets.

A package that links against a library it didn't ship works on the build
host and breaks on any target host where that library is missing or a
different version. The audit scans the install root for ELF files, resolves
their shared-library dependencies, and flags every resolved path that lies
outside the install root, apart from the core system libraries on the
allow-list.
"""

import re
from pathlib import Path
from typing import Optional

from pkghealth.config.schema import DependencyConfig
from pkghealth.health.enumerator import scan_binaries
from pkghealth.health.exceptions import ExternalDependenciesFound
from pkghealth.health.ldd import resolve_dependencies
from pkghealth.health.models import DependencyEdge, ExternalDependencyViolation, PlatformFamily
from pkghealth.logging.logger import get_logger
from pkghealth.utils.paths import is_within_root

logger = get_logger(__name__)


def find_external_dependencies(
    edges: list[DependencyEdge],
    install_dir: str,
    allowed_libraries: Optional[list[str]] = None,
) -> list[ExternalDependencyViolation]:
    """
    Every resolved edge whose path is outside `install_dir`.

    Unresolved edges are skipped. So are edges whose library name matches
    one of the `allowed_libraries` patterns.
    """
    allowed = [re.compile(pattern) for pattern in (allowed_libraries or [])]
    violations: list[ExternalDependencyViolation] = []

    for edge in edges:
        if not edge.is_resolved:
            continue
        if is_within_root(edge.resolved_path, install_dir):
            continue
        if any(pattern.search(edge.name) for pattern in allowed):
            continue
        violations.append(
            ExternalDependencyViolation(
                binary=edge.binary,
                name=edge.name,
                resolved_path=edge.resolved_path,
            )
        )

    return violations


class ExternalDependencyAuditor:
    """Flags installed binaries that link against libraries the package does not ship."""

    def __init__(self, config: Optional[DependencyConfig] = None) -> None:
        self.config = config or DependencyConfig()

    @staticmethod
    def checkable(platform_family: PlatformFamily) -> bool:
        return not platform_family.is_relocation_sensitive

    def audit(self, install_dir: Path) -> list[ExternalDependencyViolation]:
        """
        Scan, resolve and filter. Returns the violations without raising on them.

        Raises:
            ShellCommandFailed: The scan or the resolver command failed.
            EmptyScanError: The scan found no binaries.
            InstallRootMismatchError: The scan found nothing under `install_dir`.
        """
        root = str(install_dir)
        timeout = self.config.command_timeout_seconds

        binaries = scan_binaries(root, self.config.scan_command, timeout=timeout)
        edges = resolve_dependencies(binaries, self.config.resolver_command, timeout=timeout)
        return find_external_dependencies(edges, root, self.config.allowed_libraries)

    def run(self, install_dir: Path) -> bool:
        """
        Raises:
            ExternalDependenciesFound: At least one binary links outside the install root.
            HealthCheckInternalError: The scan or resolver misbehaved.
        """
        violations = self.audit(install_dir)
        if violations:
            failure = ExternalDependenciesFound(str(install_dir), violations)
            logger.error(
                "External dependencies found",
                extra={"install_dir": str(install_dir), "violations": failure.to_dict()},
            )
            raise failure

        logger.info("External dependency check passed", extra={"install_dir": str(install_dir)})
        return True
