# SPDX-License-Identifier: MIT

"""
pkghealth: post-install health checks for packaged binaries.

Run after a package has been installed into its staging directory and
before it is published. On Windows targets it looks for DLLs whose preferred
load addresses overlap; everywhere else it looks for executables that link
against libraries the package does not ship.
"""

__version__ = "1.0.0"
