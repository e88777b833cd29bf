# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Per-run build context.

Settings say what the user asked for; the context is what we actually use:
a resolved toolchain, an absolute worktree, a build directory and a binary
name. It's computed once at startup and shared by every build step, so the
toolchain can't change halfway through a dist-all run.
"""

from dataclasses import dataclass
from pathlib import Path

from relbuild.config.schema import BuildSettings
from relbuild.logging.logger import get_logger
from relbuild.process.runner import ProcessRunner
from relbuild.toolchain.resolver import Fetcher, Toolchain, fetch_text, resolve_toolchain

logger = get_logger(__name__)

DEFAULT_BUILD_DIR_NAME = "build"


@dataclass(frozen=True)
class BuildContext:
    """Everything a build step needs besides the target platform."""

    settings: BuildSettings
    toolchain: Toolchain
    worktree: Path
    build_dir: Path
    binary_name: str

    @property
    def entry_point(self) -> Path:
        """The main package being built."""
        return self.worktree / "cmd" / self.binary_name

    @property
    def compile_env(self) -> dict[str, str]:
        """Environment layered onto every `go build`."""
        return {"CGO_ENABLED": self.settings.cgo_enabled}


def resolve_worktree(settings: BuildSettings, runner: ProcessRunner) -> Path:
    """
    WORKTREE if set, otherwise the top level of the enclosing git repository.

    Outside a repository we fall back to the current directory. Version
    derivation will then degrade on its own; we don't fail the build for it.
    """
    if settings.worktree is not None:
        return settings.worktree.resolve()

    result = runner.run(["git", "rev-parse", "--show-toplevel"])
    toplevel = result.stdout.strip()
    if result.ok and toplevel:
        return Path(toplevel)

    cwd = Path.cwd()
    logger.warning(
        "Not inside a git repository, using the current directory as worktree",
        extra={"cwd": str(cwd), "stderr": result.stderr.strip()},
    )
    return cwd


def build_context(
    settings: BuildSettings,
    runner: ProcessRunner,
    fetch: Fetcher = fetch_text,
) -> BuildContext:
    """
    Resolve settings into a BuildContext. No files are written here.

    Raises:
        NetworkResolutionError: If GO=latest can't be resolved.
        CommandFailedError: If the toolchain query or install fails.
    """
    toolchain = resolve_toolchain(settings.go, runner, fetch)
    worktree = resolve_worktree(settings, runner)
    build_dir = settings.build_dir or worktree / DEFAULT_BUILD_DIR_NAME
    binary_name = settings.binary_name or worktree.name

    logger.debug(
        "Build context resolved",
        extra={
            "toolchain": toolchain.executable,
            "worktree": str(worktree),
            "build_dir": str(build_dir),
            "binary": binary_name,
        },
    )
    return BuildContext(
        settings=settings,
        toolchain=toolchain,
        worktree=worktree,
        build_dir=build_dir,
        binary_name=binary_name,
    )
