# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Build operations.

local     : development binary for the host into the build directory
dist      : one stripped, versioned, platform-named release binary
dist-all  : dist for every entry of PLATFORMS, then the SHA256 manifest

Every step runs sequentially. Any failure aborts the run and leaves whatever
was already written on disk; a re-run overwrites it.
"""
