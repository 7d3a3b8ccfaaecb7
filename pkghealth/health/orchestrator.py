# SPDX-License-Identifier: MIT

"""
Health check entry point.

Picks the one detector that applies to the target platform family and runs
it. There are exactly two outcomes: `run()` returns True, or it raises.
Whatever the detector raises reaches the caller untouched.
"""

from pathlib import Path
from typing import Optional, Union

from pkghealth.config.schema import PkgHealthConfig, default_config
from pkghealth.health.dependencies import ExternalDependencyAuditor
from pkghealth.health.models import PlatformFamily
from pkghealth.health.relocation import RelocationConflictDetector
from pkghealth.logging.logger import get_logger

logger = get_logger(__name__)


class HealthCheck:
    """
    Post-install health check for one package build.

    Args:
        install_dir: The install root the package was staged into.
        platform_family: The family the package targets. Passed in rather
            than detected, because packages are often checked on a different
            host than the one they will run on.
        config: Detector settings. Defaults apply when omitted.
    """

    def __init__(
        self,
        install_dir: Union[str, Path],
        platform_family: Union[str, PlatformFamily],
        config: Optional[PkgHealthConfig] = None,
    ) -> None:
        self.install_dir = Path(install_dir)
        self.platform_family = PlatformFamily(platform_family)
        self.config = config or default_config()
        self.relocation = RelocationConflictDetector(self.config.relocation)
        self.dependencies = ExternalDependencyAuditor(self.config.dependencies)

    def relocation_checkable(self) -> bool:
        return self.relocation.checkable(self.platform_family)

    def run(self) -> bool:
        """
        Run the applicable detector.

        Returns:
            True when the package passes.

        Raises:
            HealthCheckFailed: The package is broken.
            HealthCheckInternalError: The checking tooling is broken.
        """
        logger.info(
            "Health check started",
            extra={
                "install_dir": str(self.install_dir),
                "platform_family": self.platform_family.value,
            },
        )

        if self.relocation_checkable():
            return self.relocation.run(self.install_dir)
        return self.dependencies.run(self.install_dir)
