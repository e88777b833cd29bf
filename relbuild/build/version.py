# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Version tag derivation from git.

`git describe --tags --match "v[0-9]*" --dirty` gives the nearest release
tag, plus a commit distance and hash when HEAD is past it, plus "-dirty"
when the tree has uncommitted changes.

If git can't answer (no matching tags, not a repository, git not installed)
the build carries on without a version. That's a warning, not an error.
"""

from pathlib import Path
from typing import Optional

from relbuild.logging.logger import get_logger
from relbuild.process.runner import ProcessRunner

logger = get_logger(__name__)

TAG_PATTERN = "v[0-9]*"


def describe_version(runner: ProcessRunner, worktree: Path) -> Optional[str]:
    """Return the version tag for `worktree`, or None if git can't produce one."""
    result = runner.run(
        ["git", "-C", str(worktree), "describe", "--tags", "--match", TAG_PATTERN, "--dirty"]
    )
    version = result.stdout.strip()
    if not result.ok or not version:
        logger.warning(
            "No version tag available, building without one",
            extra={
                "worktree": str(worktree),
                "exit_code": result.returncode,
                "stderr": result.stderr.strip(),
            },
        )
        return None
    return version
