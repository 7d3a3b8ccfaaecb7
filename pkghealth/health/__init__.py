# SPDX-License-Identifier: MIT

"""
Post-install health checks.

    from pkghealth.health import HealthCheck

    HealthCheck("/opt/app", "linux").run()

`run()` returns True or raises. HealthCheckFailed means the package is
broken; HealthCheckInternalError means the tooling around it is.
"""

from pkghealth.health.exceptions import (
    ExternalDependenciesFound,
    HealthCheckError,
    HealthCheckFailed,
    HealthCheckInternalError,
    RelocationConflictsFound,
)
from pkghealth.health.models import PlatformFamily
from pkghealth.health.orchestrator import HealthCheck

__all__ = [
    "ExternalDependenciesFound",
    "HealthCheck",
    "HealthCheckError",
    "HealthCheckFailed",
    "HealthCheckInternalError",
    "PlatformFamily",
    "RelocationConflictsFound",
]
