# SPDX-License-Identifier: MIT

"""
External command adapter.

The Unix audit is driven by shell pipelines (`find | xargs file | grep ...`
and `xargs ldd`), so commands run through the shell. They come from the
gate's own config, never from the package being checked.

A non-zero exit, a timeout, or a missing shell all become ShellCommandFailed
carrying the command's own error text. That is a tooling failure and must not
be reported as a broken package.
"""

import subprocess
from typing import Optional

from pkghealth.health.exceptions import ShellCommandFailed
from pkghealth.logging.logger import get_logger

logger = get_logger(__name__)


def _failure(command: str, result: subprocess.CompletedProcess[str]) -> ShellCommandFailed:
    stderr = result.stderr.strip()
    return ShellCommandFailed(
        command,
        f"Command {command!r} exited with status {result.returncode}: {stderr}",
        exit_code=result.returncode,
        stderr=stderr,
    )


def capture_shell(
    command: str,
    input: Optional[str] = None,
    timeout: Optional[int] = None,
) -> subprocess.CompletedProcess[str]:
    """
    Run `command` through the shell and return the completed process
    whatever its exit status.

    Raises:
        ShellCommandFailed: Timeout, or the shell could not start.
    """
    logger.debug("Running command", extra={"command": command, "has_input": input is not None})

    try:
        return subprocess.run(
            command,
            shell=True,
            input=input,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as err:
        raise ShellCommandFailed(
            command,
            f"Command timed out after {timeout}s: {command}",
        ) from err
    except OSError as err:
        raise ShellCommandFailed(command, f"Cannot run command {command!r}: {err}") from err


def run_shell(
    command: str,
    input: Optional[str] = None,
    timeout: Optional[int] = None,
) -> str:
    """
    Run `command` through the shell and return its stdout.

    Args:
        command: Shell command line.
        input: Text fed to the command's stdin, if any.
        timeout: Seconds before the command is killed. None waits forever.

    Returns:
        Captured stdout.

    Raises:
        ShellCommandFailed: Non-zero exit, timeout, or the shell could not start.
    """
    result = capture_shell(command, input=input, timeout=timeout)

    if result.returncode != 0:
        err = _failure(command, result)
        logger.error(
            "Command failed",
            extra={"command": command, "exit_code": result.returncode, "stderr": err.stderr},
        )
        raise err

    return result.stdout


def run_shell_tolerant(
    command: str,
    input: Optional[str] = None,
    timeout: Optional[int] = None,
) -> str:
    """
    Like run_shell, but a non-zero exit that still produced stdout is logged
    and the output returned.

    `xargs ldd` exits 123 as soon as one file in the batch is a static
    executable or a relocatable object, even though every other file was
    resolved fine. Only a failure with nothing on stdout is fatal.
    """
    result = capture_shell(command, input=input, timeout=timeout)

    if result.returncode != 0:
        err = _failure(command, result)
        if not result.stdout.strip():
            logger.error(
                "Command failed",
                extra={"command": command, "exit_code": result.returncode, "stderr": err.stderr},
            )
            raise err
        logger.warning(
            "Command exited non-zero, using partial output",
            extra={"command": command, "exit_code": result.returncode, "stderr": err.stderr},
        )

    return result.stdout
