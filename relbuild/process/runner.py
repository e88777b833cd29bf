# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
External process invocation.

Every external tool relbuild touches (the Go toolchain, git, sha256sum or
shasum) is called through a ProcessRunner. It's deliberately simple: run the
subprocess, capture everything, return the result. No timeouts and no
retries, a hung compiler hangs the build just like it would from a shell.

Tests swap in a fake runner that records calls and returns canned results,
so filename composition and failure propagation are checked without a real
toolchain.

No shell=True anywhere. Arguments are always passed as a list.
"""

import os
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Protocol, Sequence

from relbuild.build.exceptions import CommandFailedError
from relbuild.logging.logger import get_logger

logger = get_logger(__name__)

# What a POSIX shell reports for a command it can't find.
COMMAND_NOT_FOUND: int = 127


@dataclass(frozen=True)
class ProcessResult:
    """Outcome of one external command."""

    args: tuple[str, ...]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class ProcessRunner(Protocol):
    """Anything that can run a command and look up executables on PATH."""

    def run(
        self,
        args: Sequence[str],
        env: Optional[Mapping[str, str]] = None,
        cwd: Optional[Path] = None,
    ) -> ProcessResult: ...

    def which(self, name: str) -> Optional[str]: ...


class SubprocessRunner:
    """ProcessRunner backed by subprocess.run and shutil.which."""

    def run(
        self,
        args: Sequence[str],
        env: Optional[Mapping[str, str]] = None,
        cwd: Optional[Path] = None,
    ) -> ProcessResult:
        """
        Run a command to completion and capture its output.

        `env` entries are layered on top of the current environment, the same
        way `env VAR=value cmd` behaves in a shell. A missing executable is
        reported as exit status 127 instead of raising.
        """
        argv = tuple(str(a) for a in args)
        full_env = None
        if env:
            full_env = dict(os.environ)
            full_env.update(env)

        logger.debug(
            "Running command",
            extra={"argv": list(argv), "cwd": str(cwd) if cwd else None, "env": dict(env or {})},
        )

        try:
            completed = subprocess.run(
                list(argv),
                capture_output=True,
                text=True,
                env=full_env,
                cwd=str(cwd) if cwd is not None else None,
            )
        except FileNotFoundError:
            return ProcessResult(
                args=argv,
                returncode=COMMAND_NOT_FOUND,
                stderr=f"{argv[0]}: command not found",
            )

        return ProcessResult(
            args=argv,
            returncode=completed.returncode,
            stdout=completed.stdout,
            stderr=completed.stderr,
        )

    def which(self, name: str) -> Optional[str]:
        return shutil.which(name)


def run_checked(
    runner: ProcessRunner,
    args: Sequence[str],
    env: Optional[Mapping[str, str]] = None,
    cwd: Optional[Path] = None,
) -> ProcessResult:
    """
    Run a command and raise CommandFailedError if it exits non-zero.

    The tool's stderr is logged before raising so the user sees the actual
    compiler diagnostics, not just our summary.
    """
    result = runner.run(args, env=env, cwd=cwd)
    if not result.ok:
        logger.error(
            "Command failed",
            extra={
                "argv": list(result.args),
                "exit_code": result.returncode,
                "stderr": result.stderr.strip(),
            },
        )
        raise CommandFailedError(list(result.args), result.returncode, result.stderr)
    return result
