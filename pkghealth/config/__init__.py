# SPDX-License-Identifier: MIT

"""YAML configuration for the health check gate."""
