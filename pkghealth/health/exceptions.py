# SPDX-License-Identifier: MIT

"""
Error kinds raised by the health checks.

There are two families and they must stay apart:

  HealthCheckFailed:        the package itself is broken (overlapping DLL
                              bases, libraries leaking in from the host).
                              This should stop the release.
  HealthCheckInternalError: the checking tooling is broken (the scan found
                              nothing, scanned the wrong tree, a shell
                              command failed, a DLL could not be decoded).
                              This points at the build environment, not at
                              the package.

Both inherit from HealthCheckError so a caller that only wants "did the gate
pass" can catch one type.
"""

from typing import Optional

from pkghealth.health.models import (
    ConflictMap,
    ExternalDependencyViolation,
    conflict_map_to_dict,
)


def _group_by_binary(
    violations: list[ExternalDependencyViolation],
) -> dict[str, list[ExternalDependencyViolation]]:
    grouped: dict[str, list[ExternalDependencyViolation]] = {}
    for violation in violations:
        grouped.setdefault(violation.binary, []).append(violation)
    return grouped


class HealthCheckError(Exception):
    """Base for everything the health checks raise."""


class HealthCheckFailed(HealthCheckError):
    """The installed package violates a packaging invariant."""


class RelocationConflictsFound(HealthCheckFailed):
    """One or more DLLs have overlapping preferred address ranges."""

    def __init__(self, conflicts: ConflictMap) -> None:
        self.conflicts = conflicts
        super().__init__(self._describe(conflicts))

    def to_dict(self) -> dict[str, dict[str, object]]:
        return conflict_map_to_dict(self.conflicts)

    @staticmethod
    def _describe(conflicts: ConflictMap) -> str:
        lines = ["Found DLLs with conflicting base addresses:"]
        for relative_id, entry in conflicts.items():
            lines.append(
                f"  {relative_id}: base=0x{entry.base:08x} size=0x{entry.size:08x} "
                f"conflicts with {', '.join(entry.conflicts)}"
            )
        return "\n".join(lines)


class ExternalDependenciesFound(HealthCheckFailed):
    """One or more binaries link against libraries outside the install root."""

    def __init__(
        self,
        install_dir: str,
        violations: list[ExternalDependencyViolation],
    ) -> None:
        self.install_dir = install_dir
        self.violations = violations
        super().__init__(self._describe(install_dir, violations))

    def by_binary(self) -> dict[str, list[ExternalDependencyViolation]]:
        """Violations grouped by binary, binaries in first-seen order."""
        return _group_by_binary(self.violations)

    def to_dict(self) -> dict[str, list[str]]:
        return {
            binary: [v.resolved_path for v in items]
            for binary, items in self.by_binary().items()
        }

    @staticmethod
    def _describe(install_dir: str, violations: list[ExternalDependencyViolation]) -> str:
        grouped = _group_by_binary(violations)
        lines = [f"Found binaries linking against libraries outside {install_dir}:"]
        for binary, items in grouped.items():
            lines.append(f"  {binary}")
            for item in items:
                lines.append(f"    --> {item.name} => {item.resolved_path}")
        return "\n".join(lines)


class HealthCheckInternalError(HealthCheckError):
    """The checking tooling or its environment failed, not the package."""


class EmptyScanError(HealthCheckInternalError):
    """The binary scan returned no candidate files at all."""

    def __init__(self) -> None:
        super().__init__("Internal Error: Health Check found no lines")


class InstallRootMismatchError(HealthCheckInternalError):
    """None of the scanned files live under the install root."""

    def __init__(self, install_dir: str) -> None:
        self.install_dir = install_dir
        super().__init__("Internal Error: Health Check lines not matching the install_dir")


class ShellCommandFailed(HealthCheckInternalError):
    """An external command exited non-zero, timed out, or could not start."""

    def __init__(
        self,
        command: str,
        message: str,
        exit_code: Optional[int] = None,
        stderr: str = "",
    ) -> None:
        self.command = command
        self.exit_code = exit_code
        self.stderr = stderr
        super().__init__(message)


class HeaderDecodeError(HealthCheckInternalError):
    """A file with the library extension is not a decodable PE image."""

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        self.path = path
        super().__init__(message if path is None else f"{path}: {message}")
