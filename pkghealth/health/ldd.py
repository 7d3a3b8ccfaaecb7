# SPDX-License-Identifier: MIT

"""
Dependency resolution via an ldd-style command, and the parser for its report.

The report groups dependencies under a header line naming each binary:

    /opt/app/bin/tool:
            linux-vdso.so.1 =>  (0x00007fff583ff000)
            libz.so.1 => /opt/app/embedded/lib/libz.so.1 (0x00007fad8592a000)
            libc.so.6 => /lib/x86_64-linux-gnu/libc.so.6 (0x00007fad8518d000)
            /lib64/ld-linux-x86-64.so.2 (0x00007fad85b51000)

Rules:
  - an unindented line ending in ':' starts a new binary
  - an indented `name => /path (0x...)` line is a resolved dependency
  - an indented `name =>  (0x...)` or `name => not found` line is a
    dependency with no path (kernel-provided, or missing on this host)
  - the program interpreter line (a bare path with an address, no '=>'),
    `statically linked` and `not a dynamic executable` are skipped

The parser doesn't care which command produced the text.
"""

import re
from typing import Optional

from pkghealth.health.models import DependencyEdge
from pkghealth.health.shell import run_shell_tolerant
from pkghealth.logging.logger import get_logger

logger = get_logger(__name__)

_BINARY_HEADER = re.compile(r"^(\S.*):$")
_RESOLVED = re.compile(
    r"^\s+(?P<name>.+?)\s+=>\s+(?P<path>/.*?)(?:\s+\((?:0x)?[0-9a-fA-F]+\))?\s*$"
)
_UNRESOLVED = re.compile(r"^\s+(?P<name>.+?)\s+=>\s*(?:not found|\(.*\))?\s*$")
_INTERPRETER = re.compile(r"^\s+\S.*?\s+\((?:0x)?[0-9a-fA-F]+\)\s*$")
_SKIPPED = re.compile(r"^\s+(?:statically linked|not a dynamic executable)\s*$")


def parse_resolver_output(text: str, default_binary: Optional[str] = None) -> list[DependencyEdge]:
    """
    Parse an ldd-style report into dependency edges, in report order.

    Args:
        text: The resolver's stdout.
        default_binary: Binary to attribute dependency lines to before any
            header line. ldd leaves out the header when given a single file.

    Returns:
        One DependencyEdge per dependency line. Edges for pseudo-libraries
        carry resolved_path=None.
    """
    edges: list[DependencyEdge] = []
    current = default_binary

    for line in text.splitlines():
        if not line.strip():
            continue

        header = _BINARY_HEADER.match(line)
        if header:
            current = header.group(1)
            continue

        if _SKIPPED.match(line):
            continue

        if current is None:
            logger.debug("Dependency line before any binary header", extra={"line": line})
            continue

        resolved = _RESOLVED.match(line)
        if resolved:
            edges.append(
                DependencyEdge(
                    binary=current,
                    name=resolved.group("name"),
                    resolved_path=resolved.group("path"),
                )
            )
            continue

        unresolved = _UNRESOLVED.match(line)
        if unresolved:
            edges.append(DependencyEdge(binary=current, name=unresolved.group("name")))
            continue

        if _INTERPRETER.match(line):
            continue

        logger.debug("Unrecognised resolver line", extra={"binary": current, "line": line})

    return edges


def resolve_dependencies(
    binaries: list[str],
    command: str,
    timeout: Optional[int] = None,
) -> list[DependencyEdge]:
    """
    Feed `binaries` to the resolver command on stdin and parse its report.

    Raises:
        ShellCommandFailed: The resolver failed without producing any report.
    """
    stdin = "\n".join(binaries) + "\n"
    output = run_shell_tolerant(command, input=stdin, timeout=timeout)

    default_binary = binaries[0] if len(binaries) == 1 else None
    edges = parse_resolver_output(output, default_binary=default_binary)

    logger.info(
        "Dependencies resolved",
        extra={
            "binaries": len(binaries),
            "edges": len(edges),
            "unresolved": sum(1 for e in edges if not e.is_resolved),
        },
    )
    return edges
