# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
relbuild: release-build driver for a Go command-line binary.

Builds a development binary, a single stripped and versioned distribution
binary, or the full platform matrix with a tagged SHA256 manifest.
"""

__version__ = "0.1.0"
