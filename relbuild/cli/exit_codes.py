# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
CLI exit codes.

Any non-zero code not listed here is the status of an external tool
(compiler, toolchain installer, digest utility) passed through unchanged.
"""

SUCCESS: int = 0
USER_ERROR: int = 1
CONFIG_ERROR: int = 2
RUNTIME_ERROR: int = 3
VALIDATION_ERROR: int = 4

# EX_UNAVAILABLE from sysexits(3): a required external utility is missing.
UNAVAILABLE: int = 69
