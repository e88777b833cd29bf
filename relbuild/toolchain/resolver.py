# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Go toolchain resolution.

Decides which `go` executable every build step of this run will invoke:

  - "go" (the default) is used as-is.
  - "latest" is first turned into a concrete version name (e.g. "go1.22.4")
    by reading https://go.dev/VERSION?m=text.
  - A versioned name equal to the default toolchain's own GOVERSION collapses
    back to "go", so we don't install a second copy of what's already there.
  - Any other versioned name that isn't on PATH is installed through the
    golang.org/dl wrapper (`go install golang.org/dl/<ver>@latest`) and then
    provisioned with `<ver> download`.

Go's executable install directory ($GOBIN, $GOPATH/bin or $HOME/go/bin) must
be on PATH for a freshly installed wrapper to be found.

No retries. An unreachable version endpoint or a failed install ends the run.
"""

import re
from dataclasses import dataclass
from typing import Callable
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from relbuild.build.exceptions import NetworkResolutionError
from relbuild.config.schema import DEFAULT_TOOLCHAIN, LATEST_TOOLCHAIN
from relbuild.logging.logger import get_logger
from relbuild.process.runner import ProcessRunner, run_checked

logger = get_logger(__name__)

LATEST_VERSION_URL: str = "https://go.dev/VERSION?m=text"
DOWNLOADER_MODULE: str = "golang.org/dl"

_VERSION_LINE = re.compile(r"^go[0-9.]+$")

_HTTP_TIMEOUT_SECONDS = 30

Fetcher = Callable[[str], str]


@dataclass(frozen=True)
class Toolchain:
    """The concrete Go executable fixed for the rest of the run."""

    executable: str

    def env(self, runner: ProcessRunner, key: str) -> str:
        """Return `go env <key>` for this toolchain."""
        result = run_checked(runner, [self.executable, "env", key])
        return result.stdout.strip()


def fetch_text(url: str) -> str:
    """
    GET a URL and return the body as text.

    Raises:
        NetworkResolutionError: On any HTTP or connection failure.
    """
    req = Request(url, headers={"User-Agent": "relbuild"}, method="GET")
    try:
        with urlopen(req, timeout=_HTTP_TIMEOUT_SECONDS) as resp:
            return resp.read().decode("utf-8")
    except HTTPError as exc:
        raise NetworkResolutionError(f"GET {url} returned HTTP {exc.code}") from exc
    except (URLError, OSError) as exc:
        raise NetworkResolutionError(f"GET {url} failed: {exc}") from exc


def resolve_latest_version(fetch: Fetcher = fetch_text) -> str:
    """
    Resolve the symbolic 'latest' to a concrete toolchain name.

    The endpoint's body has the version on the first line followed by a
    timestamp line; we take the first line that looks like `go1.2.3`.

    Raises:
        NetworkResolutionError: If the endpoint can't be reached or returns
            no version line.
    """
    body = fetch(LATEST_VERSION_URL)
    for line in body.splitlines():
        candidate = line.strip()
        if _VERSION_LINE.match(candidate):
            logger.info("Resolved latest Go version", extra={"version": candidate})
            return candidate
    raise NetworkResolutionError(
        f"No Go version found in response from {LATEST_VERSION_URL}"
    )


def resolve_toolchain(
    requested: str,
    runner: ProcessRunner,
    fetch: Fetcher = fetch_text,
) -> Toolchain:
    """
    Turn the GO setting into a concrete Toolchain, installing it if needed.

    Args:
        requested: "go", "latest", or a versioned wrapper name like "go1.22.4".
        runner: Process runner used for `go env`, `go install` and `<ver> download`.
        fetch: URL fetcher used only for "latest".

    Raises:
        NetworkResolutionError: If "latest" can't be resolved.
        CommandFailedError: If querying or installing the toolchain fails.
    """
    if requested == DEFAULT_TOOLCHAIN:
        return Toolchain(DEFAULT_TOOLCHAIN)

    wanted = requested
    if wanted == LATEST_TOOLCHAIN:
        wanted = resolve_latest_version(fetch)

    default_version = Toolchain(DEFAULT_TOOLCHAIN).env(runner, "GOVERSION")
    if wanted == default_version:
        logger.info(
            "Requested toolchain is the default go",
            extra={"version": wanted},
        )
        return Toolchain(DEFAULT_TOOLCHAIN)

    if runner.which(wanted) is None:
        logger.info("Installing Go toolchain", extra={"version": wanted})
        run_checked(runner, [DEFAULT_TOOLCHAIN, "install", f"{DOWNLOADER_MODULE}/{wanted}@latest"])
        run_checked(runner, [wanted, "download"])

    return Toolchain(wanted)


def host_platform(toolchain: Toolchain, runner: ProcessRunner) -> tuple[str, str]:
    """Return the toolchain's native (GOOS, GOARCH)."""
    return toolchain.env(runner, "GOOS"), toolchain.env(runner, "GOARCH")
