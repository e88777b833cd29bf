# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Artifacts manifest written by dist-all.

Format: one artifact base filename per line, in platform-matrix order,
trailing newline. dist-all truncates it before the first build and appends
each name as soon as that build finishes, so an aborted run leaves a
manifest listing exactly the artifacts that were built. Read once by
checksum generation. A re-run overwrites it.
"""

from pathlib import Path

from relbuild.logging.logger import get_logger

_logger = get_logger(__name__)

ARTIFACTS_MANIFEST_FILENAME = ".build-dist-all-artifacts"


def _check_name(name: str) -> None:
    if not name or "/" in name or "\n" in name:
        raise ValueError(f"Manifest entries must be plain file names, got {name!r}")


def start_artifacts_manifest(build_dir: Path) -> Path:
    """Create (or empty) the manifest in `build_dir` and return its path."""
    manifest_path = build_dir / ARTIFACTS_MANIFEST_FILENAME
    manifest_path.write_text("", encoding="utf-8")
    return manifest_path


def append_artifact(manifest_path: Path, name: str) -> None:
    """
    Add one artifact name to the end of the manifest.

    Raises:
        ValueError: If the name contains a directory part or a newline.
    """
    _check_name(name)
    with open(manifest_path, "a", encoding="utf-8") as f:
        f.write(f"{name}\n")


def write_artifacts_manifest(build_dir: Path, artifacts: list[str]) -> Path:
    """
    Write a complete manifest into `build_dir` in one go and return its path.

    Raises:
        ValueError: If a name contains a directory part or a newline.
    """
    for name in artifacts:
        _check_name(name)

    manifest_path = start_artifacts_manifest(build_dir)
    for name in artifacts:
        append_artifact(manifest_path, name)

    _logger.info(
        "Artifacts manifest written",
        extra={"path": str(manifest_path), "entries": len(artifacts)},
    )
    return manifest_path


def read_artifacts_manifest(manifest_path: Path) -> list[str]:
    """
    Return the artifact names listed in a manifest, skipping blank lines.

    Raises:
        FileNotFoundError: If the manifest doesn't exist.
    """
    if not manifest_path.is_file():
        raise FileNotFoundError(f"Artifacts manifest not found: {manifest_path}")

    content = manifest_path.read_text(encoding="utf-8")
    return [line.strip() for line in content.splitlines() if line.strip()]
