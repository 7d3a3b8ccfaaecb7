# SPDX-License-Identifier: MIT

"""
CLI entrypoint for pkghealth.

Usage:
    pkghealth check --install-dir /opt/app --platform windows
    pkghealth check --install-dir /opt/app --config healthcheck.yaml
    pkghealth info

Global options (--config, --log-level) are inherited by every subcommand
through argparse's parent parser mechanism.
"""

import argparse
import sys

from pkghealth.cli.commands import handle_check, handle_info
from pkghealth.cli.exit_codes import USER_ERROR
from pkghealth.health.models import PlatformFamily


def _build_global_parser() -> argparse.ArgumentParser:
    """Parent parser holding the options every subcommand accepts."""
    parent = argparse.ArgumentParser(add_help=False)
    parent.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to YAML configuration file.",
    )
    parent.add_argument(
        "--log-level",
        type=str,
        default=None,
        dest="log_level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set the logging verbosity level (overrides the config).",
    )
    return parent


def _register_subcommands(
    subparsers: argparse._SubParsersAction,  # type: ignore[type-arg]
    parent: argparse.ArgumentParser,
) -> None:
    check_parser = subparsers.add_parser(
        "check",
        parents=[parent],
        help="Run the post-install health check on an install root.",
    )
    check_parser.add_argument(
        "--install-dir",
        type=str,
        required=True,
        dest="install_dir",
        help="Directory the package was installed into.",
    )
    check_parser.add_argument(
        "--platform",
        type=str,
        default=None,
        choices=[family.value for family in PlatformFamily],
        help="Target platform family. Defaults to the host's.",
    )
    check_parser.set_defaults(func=handle_check)

    info_parser = subparsers.add_parser(
        "info",
        parents=[parent],
        help="Display version, host and effective config.",
    )
    info_parser.set_defaults(func=handle_info)


def main() -> None:
    """
    Main CLI entrypoint, wired to the `pkghealth` console script.

    With no subcommand, shows help and exits with USER_ERROR.
    """
    parent = _build_global_parser()

    root_parser = argparse.ArgumentParser(
        prog="pkghealth",
        description="pkghealth: post-install health checks for packaged binaries.",
        parents=[parent],
    )
    subparsers = root_parser.add_subparsers(dest="command")
    _register_subcommands(subparsers, parent)

    args = root_parser.parse_args()

    if not hasattr(args, "func") or args.func is None:
        root_parser.print_help()
        sys.exit(USER_ERROR)

    exit_code = args.func(args)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
