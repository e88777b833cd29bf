# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
In-process CLI tests.

`run()` takes the process runner and URL fetcher as arguments, so these go
through the real argument parsing, settings loading and exit-code mapping
with the FakeRunner standing in for go, git and sha256sum.
"""

from pathlib import Path

import pytest

from relbuild.build.exceptions import NetworkResolutionError
from relbuild.build.platforms import PLATFORMS
from relbuild.cli.exit_codes import CONFIG_ERROR, RUNTIME_ERROR, SUCCESS, UNAVAILABLE, USER_ERROR, VALIDATION_ERROR
from relbuild.cli.main import USAGE, run


@pytest.fixture()
def project_env(monkeypatch: pytest.MonkeyPatch, worktree: Path) -> Path:
    """Point WORKTREE at the fixture tree; returns the expected build dir."""
    monkeypatch.setenv("WORKTREE", str(worktree))
    return worktree.resolve() / "build"


def _unreachable(url: str) -> str:
    raise NetworkResolutionError(f"GET {url} failed")


class TestUsage:
    def test_unknown_command(self, capsys: pytest.CaptureFixture[str], fake_runner, tmp_path: Path) -> None:
        code = run(["foobar"], runner=fake_runner)
        captured = capsys.readouterr()

        assert code == USER_ERROR
        assert USAGE in captured.err
        assert captured.out == ""
        assert fake_runner.calls == []
        assert list(tmp_path.iterdir()) == []

    @pytest.mark.parametrize(
        "argv",
        [
            ["--foobar"],
            ["--foobar", "dist"],
            ["dist", "--foobar"],
            ["--log-level", "LOUD", "dist"],
            ["dist", "--config"],
        ],
    )
    def test_bad_options_exit_one_with_usage(
        self, argv: list[str], capsys: pytest.CaptureFixture[str], fake_runner, tmp_path: Path
    ) -> None:
        code = run(argv, runner=fake_runner)
        captured = capsys.readouterr()

        assert code == USER_ERROR
        assert USAGE in captured.err
        assert captured.out == ""
        assert fake_runner.calls == []
        assert list(tmp_path.iterdir()) == []

    def test_only_first_positional_picks_the_command(
        self, project_env: Path, fake_runner, capsys: pytest.CaptureFixture[str]
    ) -> None:
        assert run(["dist", "extra"], runner=fake_runner) == SUCCESS
        assert capsys.readouterr().out.strip().endswith("runner-v1.2.3-linux-amd64")


class TestLocal:
    def test_no_argument_runs_local_build(self, project_env: Path, fake_runner) -> None:
        assert run([], runner=fake_runner) == SUCCESS
        (build,) = fake_runner.commands("build")
        assert "-trimpath" not in build.argv
        assert project_env.is_dir()

    def test_compiler_status_is_passed_through(self, project_env: Path, fake_runner) -> None:
        fake_runner.build_returncode = 2
        assert run([], runner=fake_runner) == 2


class TestDist:
    def test_prints_artifact_path(
        self, project_env: Path, fake_runner, capsys: pytest.CaptureFixture[str]
    ) -> None:
        assert run(["dist"], runner=fake_runner) == SUCCESS
        out = capsys.readouterr().out
        assert out == f"{project_env / 'runner-v1.2.3-linux-amd64'}\n"

    def test_target_from_environment(
        self, project_env: Path, fake_runner, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        monkeypatch.setenv("GOOS", "windows")
        monkeypatch.setenv("GOARCH", "arm64")
        assert run(["dist"], runner=fake_runner) == SUCCESS
        assert capsys.readouterr().out.strip().endswith("runner-v1.2.3-windows-arm64.exe")

    def test_untagged_tree_still_succeeds(
        self, project_env: Path, fake_runner, capsys: pytest.CaptureFixture[str]
    ) -> None:
        fake_runner.version = None
        assert run(["dist"], runner=fake_runner) == SUCCESS
        assert capsys.readouterr().out.strip().endswith("runner--linux-amd64")

    def test_latest_unreachable_is_runtime_error(
        self, project_env: Path, fake_runner, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("GO", "latest")
        assert run(["dist"], runner=fake_runner, fetch=_unreachable) == RUNTIME_ERROR
        assert fake_runner.commands("build") == []


class TestDistAll:
    def test_prints_names_then_digests(
        self, project_env: Path, fake_runner, capsys: pytest.CaptureFixture[str]
    ) -> None:
        assert run(["dist-all"], runner=fake_runner) == SUCCESS

        lines = capsys.readouterr().out.splitlines()
        names = lines[: len(PLATFORMS)]
        digests = lines[len(PLATFORMS):]
        assert names == (project_env / ".build-dist-all-artifacts").read_text().splitlines()
        assert [line.split(" ")[1].strip("()") for line in digests] == names
        assert (project_env / "SHA256").read_text().splitlines() == digests

    def test_failed_build_still_prints_finished_names(
        self, project_env: Path, fake_runner, capsys: pytest.CaptureFixture[str]
    ) -> None:
        fake_runner.fail_platform = "linux-arm64"

        assert run(["dist-all"], runner=fake_runner) == 1
        assert capsys.readouterr().out.splitlines() == [
            "runner-v1.2.3-linux-amd64",
            "runner-v1.2.3-linux-arm",
        ]

    def test_missing_digest_tool_exits_69(self, project_env: Path, fake_runner) -> None:
        fake_runner.available -= {"sha256sum", "shasum"}
        assert run(["dist-all"], runner=fake_runner) == UNAVAILABLE
        assert not (project_env / "SHA256").exists()


class TestVerify:
    def test_after_dist_all(self, project_env: Path, fake_runner) -> None:
        assert run(["dist-all"], runner=fake_runner) == SUCCESS
        assert run(["verify"], runner=fake_runner) == SUCCESS

    def test_tampered_artifact(
        self, project_env: Path, fake_runner, capsys: pytest.CaptureFixture[str]
    ) -> None:
        run(["dist-all"], runner=fake_runner)
        (project_env / "runner-v1.2.3-linux-arm").write_bytes(b"tampered")
        capsys.readouterr()

        assert run(["verify"], runner=fake_runner) == VALIDATION_ERROR
        assert "runner-v1.2.3-linux-arm: FAILED" in capsys.readouterr().out


class TestConfigOption:
    def test_bad_config_file(self, project_env: Path, fake_runner, tmp_path: Path) -> None:
        assert run(["dist", "--config", str(tmp_path / "missing.yaml")], runner=fake_runner) == CONFIG_ERROR
        assert fake_runner.calls == []

    def test_numeric_cgo_flag_in_config_file(self, project_env: Path, fake_runner, tmp_path: Path) -> None:
        config = tmp_path / "relbuild.yaml"
        config.write_text("cgo_enabled: 1\n", encoding="utf-8")

        assert run(["dist", "--config", str(config)], runner=fake_runner) == SUCCESS
        (build,) = fake_runner.commands("build")
        assert build.env["CGO_ENABLED"] == "1"

    def test_config_file_sets_build_dir(self, project_env: Path, fake_runner, tmp_path: Path) -> None:
        out_dir = tmp_path / "release"
        config = tmp_path / "relbuild.yaml"
        config.write_text(f"build_dir: {out_dir}\nbinary_name: runner\n", encoding="utf-8")

        assert run(["--config", str(config), "dist"], runner=fake_runner) == SUCCESS
        assert (out_dir / "runner-v1.2.3-linux-amd64").is_file()
