# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
CLI entrypoint for relbuild.

One optional positional command picks the operation:

    relbuild              local development build
    relbuild dist         release build for GOOS/GOARCH (default: host)
    relbuild dist-all     release build for every platform + SHA256 file
    relbuild verify       check SHA256 against the artifacts in the build dir

Anything else, including an unknown option or a malformed one, prints a
usage line to stderr and exits 1 before settings are read or any file is
touched. Positionals after the command are ignored.

Global options (--config, --log-level) go before or after the command.
"""

import argparse
import sys
from typing import Callable, NoReturn, Optional, Sequence

from relbuild.cli.commands import handle_build, handle_dist, handle_dist_all, handle_verify
from relbuild.cli.exit_codes import USER_ERROR
from relbuild.logging.logger import configure_logging
from relbuild.process.runner import ProcessRunner, SubprocessRunner
from relbuild.toolchain.resolver import Fetcher, fetch_text

PROG = "relbuild"
USAGE = f"usage: {PROG} [dist | dist-all | verify]"

Handler = Callable[[argparse.Namespace, ProcessRunner, Fetcher], int]

COMMANDS: dict[Optional[str], Handler] = {
    None: handle_build,
    "dist": handle_dist,
    "dist-all": handle_dist_all,
    "verify": handle_verify,
}


class _UsageError(Exception):
    """Raised by the parser instead of exiting with argparse's status 2."""


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> NoReturn:
        raise _UsageError(message)


def _build_parser() -> argparse.ArgumentParser:
    """
    The command is a free-form positional rather than a subparser so that an
    unknown command gets our own usage line and exit status 1 instead of
    argparse's exit status 2.
    """
    parser = _ArgumentParser(
        prog=PROG,
        usage=f"{PROG} [--config FILE] [--log-level LEVEL] [dist | dist-all | verify]",
        description="Build and cross-compile release binaries for a Go command.",
    )
    parser.add_argument(
        "command",
        nargs="?",
        default=None,
        help="dist, dist-all or verify; omit for a local build.",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to a YAML settings file (overrides environment variables).",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        dest="log_level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set the logging verbosity level.",
    )
    return parser


def run(
    argv: Optional[Sequence[str]] = None,
    runner: Optional[ProcessRunner] = None,
    fetch: Fetcher = fetch_text,
) -> int:
    """
    Parse arguments, dispatch, and return the exit code.

    `runner` and `fetch` are the seams for external processes and the
    network; the real implementations are used when they're not given.
    """
    try:
        args, rest = _build_parser().parse_known_args(argv)
    except _UsageError:
        sys.stderr.write(USAGE + "\n")
        return USER_ERROR

    # Only the first positional picks the command; later ones are ignored.
    unknown_options = [arg for arg in rest if arg.startswith("-")]
    handler = COMMANDS.get(args.command)
    if handler is None or unknown_options:
        sys.stderr.write(USAGE + "\n")
        return USER_ERROR

    configure_logging(args.log_level)
    return handler(args, runner if runner is not None else SubprocessRunner(), fetch)


def main() -> None:
    """Console-script entrypoint; pyproject.toml's [project.scripts] points here."""
    sys.exit(run())


if __name__ == "__main__":
    main()
