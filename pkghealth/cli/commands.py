# SPDX-License-Identifier: MIT

"""
Subcommand handlers for the pkghealth CLI.

Each handler takes the parsed argparse namespace and returns an exit code.
No print() calls: results, including the structured failure payloads, go
through the JSON logger on stderr.
"""

import argparse
import logging
import platform
from pathlib import Path
from typing import Optional

from pkghealth import __version__
from pkghealth.cli.exit_codes import (
    CONFIG_ERROR,
    HEALTH_CHECK_FAILED,
    INTERNAL_ERROR,
    SUCCESS,
    USER_ERROR,
)
from pkghealth.config.exceptions import ConfigError
from pkghealth.config.loader import load_config
from pkghealth.config.schema import PkgHealthConfig, default_config
from pkghealth.health.exceptions import (
    ExternalDependenciesFound,
    HealthCheckFailed,
    HealthCheckInternalError,
    RelocationConflictsFound,
)
from pkghealth.health.models import PlatformFamily, detect_platform_family
from pkghealth.health.orchestrator import HealthCheck
from pkghealth.logging.logger import configure_package_logging, get_logger


def _load_config_and_logger(
    args: argparse.Namespace,
    command_name: str,
) -> tuple[int, Optional[PkgHealthConfig], logging.Logger]:
    """
    Shared setup: load the config if one was given and level the loggers.

    --log-level on the command line wins over the config's log_level.
    Returns (exit_code, config, logger); the caller bails out on anything
    other than SUCCESS.
    """
    logger = get_logger(f"pkghealth.cli.{command_name}", log_level=args.log_level or "INFO")

    if args.config is None:
        config = default_config()
    else:
        try:
            config = load_config(Path(args.config))
        except ConfigError as err:
            logger.error(
                "Configuration error",
                extra={"command": command_name, "error": str(err)},
            )
            return CONFIG_ERROR, None, logger

    log_level = args.log_level or config.global_config.log_level
    log_file = Path(config.global_config.log_file) if config.global_config.log_file else None
    configure_package_logging(log_level=log_level, log_file=log_file)

    return SUCCESS, config, logger


def handle_check(args: argparse.Namespace) -> int:
    """Run the health check against an install root."""
    exit_code, config, logger = _load_config_and_logger(args, "check")
    if exit_code != SUCCESS:
        return exit_code

    install_dir = Path(args.install_dir)
    if not install_dir.is_dir():
        logger.error("Install directory not found", extra={"install_dir": str(install_dir)})
        return USER_ERROR

    if args.platform is not None:
        platform_family = PlatformFamily(args.platform)
    else:
        try:
            platform_family = detect_platform_family()
        except ValueError as err:
            logger.error("Cannot detect platform family, pass --platform", extra={"error": str(err)})
            return USER_ERROR

    try:
        HealthCheck(install_dir, platform_family, config).run()
    except RelocationConflictsFound as err:
        logger.error(
            "Health check failed",
            extra={"reason": "relocation_conflicts", "conflicts": err.to_dict()},
        )
        return HEALTH_CHECK_FAILED
    except ExternalDependenciesFound as err:
        logger.error(
            "Health check failed",
            extra={"reason": "external_dependencies", "violations": err.to_dict()},
        )
        return HEALTH_CHECK_FAILED
    except HealthCheckFailed as err:
        logger.error("Health check failed", extra={"error": str(err)})
        return HEALTH_CHECK_FAILED
    except HealthCheckInternalError as err:
        logger.error("Health check internal error", extra={"error": str(err)})
        return INTERNAL_ERROR

    logger.info(
        "Health check passed",
        extra={"install_dir": str(install_dir), "platform_family": platform_family.value},
    )
    return SUCCESS


def handle_info(args: argparse.Namespace) -> int:
    """Log version, host and effective config."""
    exit_code, config, logger = _load_config_and_logger(args, "info")
    if exit_code != SUCCESS:
        return exit_code

    try:
        host_family: Optional[str] = detect_platform_family().value
    except ValueError:
        host_family = None

    logger.info(
        "pkghealth info",
        extra={
            "version": __version__,
            "python_version": platform.python_version(),
            "host_platform": platform.system(),
            "host_platform_family": host_family,
            "config": config.model_dump(by_alias=True) if config is not None else None,
        },
    )
    return SUCCESS
