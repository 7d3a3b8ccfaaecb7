# SPDX-License-Identifier: MIT

"""
CLI exit codes.

A build pipeline branches on these, so "package broken" and "tooling broken"
get different codes.
"""

SUCCESS: int = 0
USER_ERROR: int = 1
CONFIG_ERROR: int = 2
INTERNAL_ERROR: int = 3
HEALTH_CHECK_FAILED: int = 4
