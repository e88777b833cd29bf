# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Release platform matrix.

Possible GOOS/GOARCH values are listed in the Go source tree at
src/go/build/syslist.go. The order here is the order of the artifacts
manifest and of the SHA256 file.
"""

from typing import NamedTuple


class Platform(NamedTuple):
    """A cross-compilation target."""

    os: str
    arch: str

    def __str__(self) -> str:
        return f"{self.os}-{self.arch}"


PLATFORMS: tuple[Platform, ...] = (
    Platform("linux", "amd64"),
    Platform("linux", "arm"),
    Platform("linux", "arm64"),
    Platform("darwin", "amd64"),
    Platform("darwin", "arm64"),
    Platform("freebsd", "amd64"),
    Platform("openbsd", "amd64"),
    Platform("windows", "amd64"),
)
