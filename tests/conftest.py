# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Shared pytest fixtures for relbuild tests.

The centrepiece is FakeRunner: a stand-in for SubprocessRunner that answers
git, go and digest-tool invocations from canned state and records every
call. `go build -o <file>` writes a small deterministic file so checksum
generation and verification have something real to hash.
"""

import hashlib
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional, Sequence

import pytest

from relbuild.build.context import BuildContext, build_context
from relbuild.config.schema import BuildSettings
from relbuild.process.runner import COMMAND_NOT_FOUND, ProcessResult

SETTINGS_ENV_VARS = (
    "GO",
    "WORKTREE",
    "BUILD_DIR",
    "CGO_ENABLED",
    "GOOS",
    "GOARCH",
    "BINARY_NAME",
    "VERSION_VARIABLE",
)


@dataclass
class Call:
    argv: tuple[str, ...]
    env: dict[str, str]
    cwd: Optional[Path]


@dataclass
class FakeRunner:
    """Records calls and plays back git/go/sha256sum behaviour."""

    available: set[str] = field(default_factory=lambda: {"go", "git", "sha256sum", "shasum"})
    go_env: dict[str, str] = field(
        default_factory=lambda: {"GOOS": "linux", "GOARCH": "amd64", "GOVERSION": "go1.22.4"}
    )
    version: Optional[str] = "v1.2.3"
    toplevel: Optional[str] = None
    build_returncode: int = 0
    fail_platform: Optional[str] = None
    digest_returncode: int = 0
    calls: list[Call] = field(default_factory=list)

    def which(self, name: str) -> Optional[str]:
        return f"/usr/bin/{name}" if name in self.available else None

    def run(
        self,
        args: Sequence[str],
        env: Optional[Mapping[str, str]] = None,
        cwd: Optional[Path] = None,
    ) -> ProcessResult:
        argv = tuple(str(a) for a in args)
        self.calls.append(Call(argv=argv, env=dict(env or {}), cwd=cwd))

        if argv[0] not in self.available:
            return ProcessResult(argv, COMMAND_NOT_FOUND, "", f"{argv[0]}: command not found")
        if argv[0] == "git":
            return self._git(argv)
        if argv[0] in ("sha256sum", "shasum"):
            return self._digest(argv, cwd)
        return self._go(argv, dict(env or {}))

    def commands(self, subcommand: str) -> list[Call]:
        """Calls whose second argv element is `subcommand` (e.g. 'build')."""
        return [c for c in self.calls if len(c.argv) > 1 and c.argv[1] == subcommand]

    def _git(self, argv: tuple[str, ...]) -> ProcessResult:
        if "describe" in argv:
            if self.version is None:
                return ProcessResult(argv, 128, "", "fatal: No names found, cannot describe anything.")
            return ProcessResult(argv, 0, self.version + "\n", "")
        if "rev-parse" in argv:
            if self.toplevel is None:
                return ProcessResult(argv, 128, "", "fatal: not a git repository")
            return ProcessResult(argv, 0, self.toplevel + "\n", "")
        return ProcessResult(argv, 0, "", "")

    def _go(self, argv: tuple[str, ...], env: dict[str, str]) -> ProcessResult:
        sub = argv[1]
        if sub == "env":
            return ProcessResult(argv, 0, self.go_env[argv[2]] + "\n", "")
        if sub == "install":
            # golang.org/dl/<ver>@latest puts a <ver> wrapper on PATH.
            self.available.add(argv[2].rsplit("/", 1)[1].split("@", 1)[0])
            return ProcessResult(argv, 0, "", "")
        if sub == "build":
            target = f"{env.get('GOOS')}-{env.get('GOARCH')}"
            if self.build_returncode or target == self.fail_platform:
                return ProcessResult(argv, self.build_returncode or 1, "", "main.go:1: syntax error")
            out = argv[argv.index("-o") + 1]
            if not out.endswith(os.sep):
                Path(out).write_bytes(f"binary {Path(out).name}".encode())
            return ProcessResult(argv, 0, "", "")
        return ProcessResult(argv, 0, "", "")

    def _digest(self, argv: tuple[str, ...], cwd: Optional[Path]) -> ProcessResult:
        if self.digest_returncode:
            return ProcessResult(argv, self.digest_returncode, "", "digest failed")
        base = cwd or Path.cwd()
        names = [a for a in argv[1:] if not a.startswith("-") and a != "256"]
        lines = []
        for name in names:
            path = base / name
            if not path.is_file():
                return ProcessResult(argv, 1, "", f"{name}: No such file or directory")
            lines.append(f"SHA256 ({name}) = {hashlib.sha256(path.read_bytes()).hexdigest()}\n")
        return ProcessResult(argv, 0, "".join(lines), "")


@pytest.fixture(autouse=True)
def _clean_settings_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a developer's GOOS/GOARCH/etc. from leaking into tests."""
    for name in SETTINGS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture()
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture()
def worktree(tmp_path: Path) -> Path:
    """An empty project tree named 'runner' with its cmd/runner entry point."""
    root = tmp_path / "runner"
    (root / "cmd" / "runner").mkdir(parents=True)
    return root


@pytest.fixture()
def ctx(worktree: Path, fake_runner: FakeRunner) -> BuildContext:
    """A resolved context over the default toolchain and the `worktree` fixture."""
    return build_context(BuildSettings(worktree=worktree), fake_runner)
