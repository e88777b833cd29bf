# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
SHA256 file generation and verification.

Generation shells out to the system digest utility, probed in this order:
  1. sha256sum --tag        (GNU coreutils)
  2. shasum -a 256 --tag    (Perl, ships with macOS)
If neither is on PATH we raise DigestToolUnavailableError, which the CLI
turns into exit status 69 (EX_UNAVAILABLE). That way automation can tell a
machine missing a tool apart from a broken build or a bad checksum.

The tool runs inside the manifest's directory so every line names the
artifact by its bare filename, never by a build-machine path.

SHA256 file format (BSD "tagged" style, one line per artifact):
    SHA256 (<filename>) = <sha256hex>
"""

import re
from dataclasses import dataclass, field
from pathlib import Path

from relbuild.build.exceptions import DigestToolUnavailableError
from relbuild.logging.logger import get_logger
from relbuild.process.runner import ProcessRunner, run_checked
from relbuild.release.manifests.manifest import read_artifacts_manifest
from relbuild.utils.hashing import compute_sha256

_logger = get_logger(__name__)

SHA256_FILENAME = "SHA256"

DIGEST_TOOLS: tuple[tuple[str, ...], ...] = (
    ("sha256sum", "--tag"),
    ("shasum", "-a", "256", "--tag"),
)

_TAGGED_LINE = re.compile(r"^SHA256 \((?P<name>.+)\) = (?P<digest>[0-9a-fA-F]{64})$")


@dataclass(frozen=True)
class ChecksumReport:
    """What checksum generation produced."""

    sha256_path: Path
    output: str
    tool: str
    entries: int


@dataclass(frozen=True)
class VerificationResult:
    """Outcome of checking a SHA256 file against the files next to it."""

    is_valid: bool
    checked_count: int
    mismatches: list[str] = field(default_factory=list)
    missing_files: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


def find_digest_tool(runner: ProcessRunner) -> list[str]:
    """
    Return the argv prefix of the first available digest tool.

    Raises:
        DigestToolUnavailableError: If neither candidate is on PATH.
    """
    for candidate in DIGEST_TOOLS:
        if runner.which(candidate[0]) is not None:
            return list(candidate)
    raise DigestToolUnavailableError(
        "No SHA256 utility found on PATH (tried: "
        + ", ".join(c[0] for c in DIGEST_TOOLS)
        + ")"
    )


def generate_sha256_file(manifest_path: Path, runner: ProcessRunner) -> ChecksumReport:
    """
    Digest every artifact listed in the manifest into SHA256 beside it.

    The tool is probed before anything is written, so a missing tool leaves
    no SHA256 file behind. An empty manifest gives an empty SHA256 file.

    Raises:
        DigestToolUnavailableError: If no digest tool is installed.
        CommandFailedError: If the digest tool exits non-zero (e.g. a listed
            artifact is missing); nothing is written in that case either.
        FileNotFoundError: If the manifest itself is missing.
    """
    tool = find_digest_tool(runner)
    names = read_artifacts_manifest(manifest_path)
    workdir = manifest_path.parent

    output = ""
    if names:
        result = run_checked(runner, [*tool, *names], cwd=workdir)
        output = result.stdout

    sha256_path = workdir / SHA256_FILENAME
    sha256_path.write_text(output, encoding="utf-8")

    _logger.info(
        "SHA256 file written",
        extra={"path": str(sha256_path), "tool": tool[0], "entries": len(names)},
    )
    return ChecksumReport(sha256_path=sha256_path, output=output, tool=tool[0], entries=len(names))


def parse_sha256_file(sha256_path: Path) -> dict[str, str]:
    """
    Parse a tagged SHA256 file into {filename: lowercase hex digest}.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If a non-blank line isn't in tagged format.
    """
    if not sha256_path.is_file():
        raise FileNotFoundError(f"SHA256 file not found: {sha256_path}")

    digests: dict[str, str] = {}
    content = sha256_path.read_text(encoding="utf-8")
    for line_num, line in enumerate(content.splitlines(), start=1):
        line = line.strip()
        if not line:
            continue
        match = _TAGGED_LINE.match(line)
        if match is None:
            raise ValueError(
                f"Invalid SHA256 line {line_num}: expected "
                f"'SHA256 (<filename>) = <sha256>', got: {line!r}"
            )
        digests[match.group("name")] = match.group("digest").lower()
    return digests


def verify_sha256_file(build_dir: Path) -> VerificationResult:
    """
    Recompute every digest listed in `build_dir`/SHA256 and compare.

    Reports all mismatches and missing files, not just the first.
    """
    sha256_path = build_dir / SHA256_FILENAME
    if not sha256_path.is_file():
        return VerificationResult(
            is_valid=False,
            checked_count=0,
            errors=[f"{SHA256_FILENAME} not found in {build_dir}"],
        )

    try:
        expected = parse_sha256_file(sha256_path)
    except ValueError as err:
        return VerificationResult(
            is_valid=False,
            checked_count=0,
            errors=[f"Failed to parse {SHA256_FILENAME}: {err}"],
        )

    mismatches: list[str] = []
    missing_files: list[str] = []
    checked = 0

    for filename, expected_hash in expected.items():
        file_path = build_dir / filename
        if not file_path.is_file():
            missing_files.append(filename)
            _logger.error("Artifact missing during verification", extra={"file": filename})
            continue

        checked += 1
        if compute_sha256(file_path) != expected_hash:
            mismatches.append(filename)
            _logger.error("Checksum mismatch", extra={"file": filename})

    is_valid = not mismatches and not missing_files

    if is_valid:
        _logger.info("All checksums verified", extra={"checked_count": checked})
    else:
        _logger.error(
            "Checksum verification failed",
            extra={"mismatches": len(mismatches), "missing": len(missing_files)},
        )

    return VerificationResult(
        is_valid=is_valid,
        checked_count=checked,
        mismatches=mismatches,
        missing_files=missing_files,
    )
