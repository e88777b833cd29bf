# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Command handlers for the relbuild CLI.

Each function here corresponds to one command and returns a process exit
code. Failures are logged once, as structured JSON on stderr, and mapped to
an exit code:

  CommandFailedError          -> the external tool's own exit status
  DigestToolUnavailableError  -> UNAVAILABLE (69)
  NetworkResolutionError      -> RUNTIME_ERROR (urllib has no exit status of
                                 its own, so an HTTP error, a connection
                                 failure and a body without a version line
                                 all give the same status)
  ConfigError                 -> CONFIG_ERROR

Stdout only ever carries results meant for capture: artifact paths, artifact
names and digest lines.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Callable, Optional

from relbuild.build.context import (
    DEFAULT_BUILD_DIR_NAME,
    BuildContext,
    build_context,
    resolve_worktree,
)
from relbuild.build.dist import build_dist, build_dist_all
from relbuild.build.exceptions import (
    BuildError,
    CommandFailedError,
    DigestToolUnavailableError,
)
from relbuild.build.local import build_local
from relbuild.cli.exit_codes import (
    CONFIG_ERROR,
    RUNTIME_ERROR,
    SUCCESS,
    UNAVAILABLE,
    VALIDATION_ERROR,
)
from relbuild.config.exceptions import ConfigError
from relbuild.config.loader import load_settings
from relbuild.config.schema import BuildSettings
from relbuild.logging.logger import get_logger
from relbuild.process.runner import ProcessRunner
from relbuild.release.checksums.integrity import SHA256_FILENAME, verify_sha256_file
from relbuild.toolchain.resolver import Fetcher


def _emit(line: str) -> None:
    """Write one result line to stdout."""
    sys.stdout.write(line if line.endswith("\n") else line + "\n")
    sys.stdout.flush()


def _exit_code_for(err: BuildError) -> int:
    if isinstance(err, CommandFailedError):
        return err.returncode
    if isinstance(err, DigestToolUnavailableError):
        return UNAVAILABLE
    return RUNTIME_ERROR


def _load(
    args: argparse.Namespace, command_name: str
) -> tuple[int, Optional[BuildSettings], logging.Logger]:
    """
    The shared setup every command needs: read settings.

    Returns a tuple of (exit_code, settings, logger). If exit_code is not
    SUCCESS, the caller should return it immediately.
    """
    logger = get_logger(f"relbuild.cli.{command_name}")

    config_path = Path(args.config) if args.config is not None else None
    try:
        settings = load_settings(config_path)
    except ConfigError as err:
        logger.error(
            "Configuration error",
            extra={"command": command_name, "error": str(err)},
        )
        return CONFIG_ERROR, None, logger

    return SUCCESS, settings, logger


def _run_build(
    args: argparse.Namespace,
    runner: ProcessRunner,
    fetch: Fetcher,
    command_name: str,
    step: Callable[[BuildContext], None],
) -> int:
    """Load settings, resolve the build context, then run `step` with error mapping."""
    exit_code, settings, logger = _load(args, command_name)
    if exit_code != SUCCESS or settings is None:
        return exit_code

    try:
        ctx = build_context(settings, runner, fetch)
        logger.info(
            "Command started",
            extra={"command": command_name, "toolchain": ctx.toolchain.executable},
        )
        step(ctx)
        logger.info("Command completed", extra={"command": command_name})
        return SUCCESS
    except BuildError as err:
        code = _exit_code_for(err)
        logger.error(
            "Build failed",
            extra={"command": command_name, "error": str(err), "exit_code": code},
        )
        return code
    except OSError as err:
        logger.error(
            "I/O error",
            extra={"command": command_name, "error": str(err)},
            exc_info=True,
        )
        return RUNTIME_ERROR


def handle_build(args: argparse.Namespace, runner: ProcessRunner, fetch: Fetcher) -> int:
    """Development build for the host platform."""

    def step(ctx: BuildContext) -> None:
        build_local(ctx, runner)

    return _run_build(args, runner, fetch, "build", step)


def handle_dist(args: argparse.Namespace, runner: ProcessRunner, fetch: Fetcher) -> int:
    """Release build for GOOS/GOARCH (or the host). Prints the artifact path."""

    def step(ctx: BuildContext) -> None:
        out = build_dist(ctx, runner)
        _emit(str(out))

    return _run_build(args, runner, fetch, "dist", step)


def handle_dist_all(args: argparse.Namespace, runner: ProcessRunner, fetch: Fetcher) -> int:
    """Release build for every platform, then the SHA256 file."""

    def step(ctx: BuildContext) -> None:
        result = build_dist_all(ctx, runner, on_artifact=_emit)
        if result.checksums.output:
            _emit(result.checksums.output)

    return _run_build(args, runner, fetch, "dist-all", step)


def handle_verify(args: argparse.Namespace, runner: ProcessRunner, fetch: Fetcher) -> int:
    """Check the SHA256 file in the build directory against the artifacts."""
    exit_code, settings, logger = _load(args, "verify")
    if exit_code != SUCCESS or settings is None:
        return exit_code

    build_dir = settings.build_dir or resolve_worktree(settings, runner) / DEFAULT_BUILD_DIR_NAME

    try:
        result = verify_sha256_file(build_dir)
    except OSError as err:
        logger.error(
            "I/O error",
            extra={"command": "verify", "error": str(err)},
            exc_info=True,
        )
        return RUNTIME_ERROR

    for error in result.errors:
        _emit(f"{SHA256_FILENAME}: {error}")
    for name in result.missing_files:
        _emit(f"{name}: MISSING")
    for name in result.mismatches:
        _emit(f"{name}: FAILED")
    _emit(f"{result.checked_count} checked, {'OK' if result.is_valid else 'FAILED'}")

    return SUCCESS if result.is_valid else VALIDATION_ERROR
