# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Build settings for relbuild.

Every setting has a default and can be overridden from the environment using
the upper-case field name (GO, WORKTREE, BUILD_DIR, CGO_ENABLED, GOOS, GOARCH,
BINARY_NAME, VERSION_VARIABLE). Empty environment values count as unset, so
`GOOS= relbuild dist` still builds for the host.

The model is frozen. The all-platforms build derives one copy per target with
`model_copy(update=...)` instead of mutating a shared instance.

Defaults that depend on the working tree (WORKTREE itself, BUILD_DIR,
BINARY_NAME) or on the toolchain (GOOS, GOARCH) stay None here and are filled
in by relbuild.build.context, which has access to git and go.
"""

from pathlib import Path
from typing import Any, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_TOOLCHAIN = "go"
LATEST_TOOLCHAIN = "latest"


class BuildSettings(BaseSettings):
    """Environment-overridable knobs for every build operation."""

    model_config = SettingsConfigDict(
        frozen=True,
        extra="forbid",
        validate_default=True,
        case_sensitive=False,
        env_ignore_empty=True,
    )

    go: str = Field(
        default=DEFAULT_TOOLCHAIN,
        description="Toolchain selector: 'go', a versioned name like 'go1.22.4', or 'latest'",
    )
    worktree: Optional[Path] = Field(
        default=None,
        description="Working tree to build; defaults to the git top-level directory",
    )
    build_dir: Optional[Path] = Field(
        default=None,
        description="Output directory; defaults to <worktree>/build",
    )
    cgo_enabled: str = Field(
        default="0",
        description="Value exported as CGO_ENABLED to every compile",
    )
    goos: Optional[str] = Field(default=None, description="Target OS for dist builds")
    goarch: Optional[str] = Field(default=None, description="Target architecture for dist builds")
    binary_name: Optional[str] = Field(
        default=None,
        description="Name of the command under <worktree>/cmd; defaults to the worktree name",
    )
    version_variable: str = Field(
        default="main.Version",
        description="Package-qualified variable that receives the version tag at link time",
    )

    @field_validator("cgo_enabled", mode="before")
    @classmethod
    def _flag_as_text(cls, value: Any) -> Any:
        # YAML gives `cgo_enabled: 1` as an int and `true` as a bool.
        if isinstance(value, bool):
            return "1" if value else "0"
        if isinstance(value, int):
            return str(value)
        return value

    @field_validator("go", "cgo_enabled", "version_variable")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value.strip()

    @field_validator("binary_name")
    @classmethod
    def _plain_name(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and ("/" in value or "\\" in value or not value.strip()):
            raise ValueError(f"binary name must be a plain name, got {value!r}")
        return value
