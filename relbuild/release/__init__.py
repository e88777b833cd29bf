# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Release outputs that sit next to the binaries: the artifacts manifest and
the SHA256 tagged-digest file, plus verification of the latter.
"""
