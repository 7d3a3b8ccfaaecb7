# SPDX-License-Identifier: MIT

"""
Binary enumeration for both health checks.

Windows side: a recursive glob for one library extension under the search
root, in sorted order so two runs over the same tree see modules in the same
order. Unix side: the configured file-type scan, which prints one ELF path
per line.
"""

from pathlib import Path
from typing import Optional

from pkghealth.health.exceptions import EmptyScanError, InstallRootMismatchError
from pkghealth.health.shell import run_shell
from pkghealth.logging.logger import get_logger
from pkghealth.utils.paths import is_within_root

logger = get_logger(__name__)


def list_modules(search_root: Path, extension: str) -> list[Path]:
    """
    Every regular file below `search_root` ending in `extension`, sorted.

    The extension is matched case-insensitively, as Windows does, so FOO.DLL
    is found from a POSIX build host too. A missing search root is not an
    error; a package without DLLs has nothing to conflict.
    """
    if not search_root.is_dir():
        logger.info("Module search root does not exist", extra={"search_root": str(search_root)})
        return []

    suffix = extension.lower()
    return sorted(
        p for p in search_root.rglob("*") if p.name.lower().endswith(suffix) and p.is_file()
    )


def build_scan_command(command_template: str, install_dir: str) -> str:
    """Substitute the install root into a scan command template."""
    # str.format would trip over the awk braces in the default pipeline.
    return command_template.replace("{install_dir}", install_dir.rstrip("/"))


def scan_binaries(
    install_dir: str,
    command_template: str,
    timeout: Optional[int] = None,
) -> list[str]:
    """
    Run the file-type scan and return the candidate binary paths.

    Raises:
        ShellCommandFailed: The scan command itself failed.
        EmptyScanError: The scan produced no paths at all.
        InstallRootMismatchError: None of the paths are under `install_dir`.
    """
    command = build_scan_command(command_template, install_dir)
    output = run_shell(command, timeout=timeout)

    paths = [line.strip() for line in output.splitlines() if line.strip()]
    if not paths:
        raise EmptyScanError()

    if not any(is_within_root(path, install_dir) for path in paths):
        logger.error(
            "Scan results do not match the install root",
            extra={"install_dir": install_dir, "sample": paths[:5]},
        )
        raise InstallRootMismatchError(install_dir)

    logger.info("Binary scan complete", extra={"install_dir": install_dir, "binaries": len(paths)})
    return paths
