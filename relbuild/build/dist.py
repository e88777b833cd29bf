# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Release builds: one platform (dist) or the whole matrix (dist-all).

A dist build strips debug info, embeds the git version tag when there is
one, drops local paths and VCS stamps, and writes
`<binary>-<version>-<os>-<arch>[.exe]` into the build directory.

dist-all runs dist once per entry of PLATFORMS, strictly one after another.
Parallel builds would fight over the Go build cache and interleave compiler
output; release builds are rare enough that wall-clock time doesn't matter.
The artifact names go into a manifest file which feeds checksum generation.
"""

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Callable, Optional

from relbuild.build.artifacts import artifact_filename, dist_build_flags
from relbuild.build.context import BuildContext
from relbuild.build.platforms import PLATFORMS, Platform
from relbuild.build.version import describe_version
from relbuild.logging.logger import get_logger
from relbuild.process.runner import ProcessRunner, run_checked
from relbuild.release.checksums.integrity import ChecksumReport, generate_sha256_file
from relbuild.release.manifests.manifest import append_artifact, start_artifacts_manifest
from relbuild.toolchain.resolver import host_platform
from relbuild.utils.paths import ensure_directory

logger = get_logger(__name__)


@dataclass(frozen=True)
class DistAllResult:
    """Outputs of a full matrix build."""

    artifacts: list[str]
    manifest_path: Path
    checksums: ChecksumReport


def target_platform(ctx: BuildContext, runner: ProcessRunner) -> Platform:
    """
    GOOS/GOARCH from settings, each falling back to the toolchain's own value.

    The toolchain is only asked for the half that isn't set.
    """
    goos = ctx.settings.goos
    goarch = ctx.settings.goarch
    if goos is None or goarch is None:
        host_os, host_arch = host_platform(ctx.toolchain, runner)
        goos = goos or host_os
        goarch = goarch or host_arch
    return Platform(goos, goarch)


def build_dist(
    ctx: BuildContext,
    runner: ProcessRunner,
    platform: Optional[Platform] = None,
) -> Path:
    """
    Build one release binary and return its path.

    Args:
        ctx: Resolved build context.
        runner: Process runner for git and go.
        platform: Target to build; defaults to the settings/host platform.

    Raises:
        CommandFailedError: With the compiler's exit status if the build fails.
            A half-written binary is left where it is.
    """
    if platform is None:
        platform = target_platform(ctx, runner)

    version = describe_version(runner, ctx.worktree)
    flags = dist_build_flags(version, ctx.settings.version_variable)

    ensure_directory(ctx.build_dir)
    out = ctx.build_dir / artifact_filename(ctx.binary_name, version, platform)

    env = dict(ctx.compile_env)
    env.update({"GOOS": platform.os, "GOARCH": platform.arch})

    logger.info(
        "Dist build started",
        extra={"platform": str(platform), "version": version or "", "output": str(out)},
    )
    run_checked(
        runner,
        [ctx.toolchain.executable, "build", *flags, "-o", str(out), str(ctx.entry_point)],
        env=env,
    )
    logger.info("Dist build finished", extra={"platform": str(platform), "output": str(out)})
    return out


def build_dist_all(
    ctx: BuildContext,
    runner: ProcessRunner,
    platforms: tuple[Platform, ...] = PLATFORMS,
    on_artifact: Optional[Callable[[str], None]] = None,
) -> DistAllResult:
    """
    Build every platform in order, write the manifest, then checksum it all.

    Each iteration builds from a settings copy that only overrides GOOS and
    GOARCH; the context shared across iterations is never changed. Every
    name goes into the manifest, and to `on_artifact` if given, as soon as
    its build finishes.

    Raises:
        CommandFailedError: On the first failing build or a failing digest tool.
        DigestToolUnavailableError: If no SHA256 utility is installed.
    """
    ensure_directory(ctx.build_dir)
    manifest_path = start_artifacts_manifest(ctx.build_dir)

    artifacts: list[str] = []
    for platform in platforms:
        per_target = ctx.settings.model_copy(update={"goos": platform.os, "goarch": platform.arch})
        out = build_dist(replace(ctx, settings=per_target), runner, platform)
        artifacts.append(out.name)
        append_artifact(manifest_path, out.name)
        if on_artifact is not None:
            on_artifact(out.name)

    report = generate_sha256_file(manifest_path, runner)

    logger.info(
        "Dist-all finished",
        extra={"artifact_count": len(artifacts), "sha256_file": str(report.sha256_path)},
    )
    return DistAllResult(artifacts=artifacts, manifest_path=manifest_path, checksums=report)

