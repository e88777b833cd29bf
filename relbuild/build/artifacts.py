# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Pure helpers for dist builds: artifact names and `go build` flags.

Nothing here touches the filesystem or spawns processes, which keeps the
naming rules trivially testable.
"""

from typing import Optional

from relbuild.build.platforms import Platform

WINDOWS_OS = "windows"
WINDOWS_SUFFIX = ".exe"

# -s drops the symbol table, -w drops DWARF (-s implies -w everywhere but Darwin).
STRIP_LDFLAGS = "-s -w"

# Keep local paths and VCS stamps out of the binary so identical inputs give
# identical bytes.
REPRODUCIBILITY_FLAGS: tuple[str, ...] = ("-trimpath", "-buildvcs=false")


def executable_suffix(os_name: str) -> str:
    """'.exe' for Windows targets, nothing for everything else."""
    return WINDOWS_SUFFIX if os_name == WINDOWS_OS else ""


def artifact_filename(binary: str, version: Optional[str], platform: Platform) -> str:
    """
    Compose `<binary>-<version>-<os>-<arch>[.exe]`.

    A missing version leaves its segment empty (`runner--linux-amd64`) rather
    than dropping it, so names from untagged trees still line up by position.
    """
    return f"{binary}-{version or ''}-{platform.os}-{platform.arch}{executable_suffix(platform.os)}"


def ldflags(version: Optional[str], version_variable: str) -> str:
    """Link flags: always strip, embed the version only when we have one."""
    parts = [STRIP_LDFLAGS]
    if version:
        parts += ["-X", f"{version_variable}={version}"]
    return " ".join(parts)


def dist_build_flags(version: Optional[str], version_variable: str) -> list[str]:
    """All flags passed to `go build` for a release binary, before -o."""
    return [f"-ldflags={ldflags(version, version_variable)}", *REPRODUCIBILITY_FLAGS]
