# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Exceptions raised by the build and release steps.

Every failure here is fatal for the run. The CLI maps each type to an exit
code; nothing catches them to retry or clean up.
"""


class BuildError(Exception):
    """Base for all build-time failures."""


class CommandFailedError(BuildError):
    """
    An external command exited non-zero.

    The return code is kept so the CLI can exit with exactly the status the
    compiler (or installer, or digest tool) returned.
    """

    def __init__(self, args: list[str], returncode: int, stderr: str = "") -> None:
        self.command = list(args)
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(f"Command {self.command[0]!r} failed with exit status {returncode}")


class NetworkResolutionError(BuildError):
    """Raised when the symbolic 'latest' toolchain version cannot be resolved."""


class DigestToolUnavailableError(BuildError):
    """Raised when neither sha256sum nor shasum is available on PATH."""
