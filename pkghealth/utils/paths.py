# SPDX-License-Identifier: MIT

"""
Path helpers shared by the health checks.

The dependency audit compares paths printed by Unix tools, so containment is
decided on normalised POSIX strings rather than by resolving symlinks on the
machine running the check.
"""

import posixpath
from pathlib import Path, PurePosixPath


def is_within_root(path: str, root: str) -> bool:
    """
    True if `path` is `root` itself or lies somewhere below it.

    Comparison is component-wise, so /opt/app2/lib is not inside /opt/app.
    `..` segments are collapsed first, so /opt/app/../etc/passwd is not
    inside /opt/app either.
    """
    if not path or not root:
        return False
    normalized_path = PurePosixPath(posixpath.normpath(path))
    normalized_root = PurePosixPath(posixpath.normpath(root))
    return normalized_path == normalized_root or normalized_root in normalized_path.parents


def relative_module_id(path: Path, search_root: Path, extension: str) -> str:
    """
    Identifier for a discovered module: its path below `search_root` with
    `extension` removed and forward slashes.

    embedded/bin/c/c/c.dll under embedded/bin with ".dll" gives "c/c/c".

    Raises:
        ValueError: If `path` is not below `search_root`.
    """
    relative = path.relative_to(search_root).as_posix()
    if extension and relative.lower().endswith(extension.lower()):
        relative = relative[: -len(extension)]
    return relative
