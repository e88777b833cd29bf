# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Local development build.

`go build -o <build_dir>/ <worktree>/cmd/<binary>` for the host platform.
No version, no stripping. The trailing slash on -o makes go pick the
output name itself (adding .exe on Windows hosts).
"""

import os

from relbuild.build.context import BuildContext
from relbuild.logging.logger import get_logger
from relbuild.process.runner import ProcessRunner, run_checked
from relbuild.utils.paths import ensure_directory

logger = get_logger(__name__)


def build_local(ctx: BuildContext, runner: ProcessRunner) -> None:
    """
    Compile the development binary into the build directory.

    Raises:
        CommandFailedError: With the compiler's exit status if the build fails.
    """
    ensure_directory(ctx.build_dir)
    out_dir = f"{ctx.build_dir}{os.sep}"

    logger.info(
        "Local build started",
        extra={"toolchain": ctx.toolchain.executable, "entry_point": str(ctx.entry_point)},
    )
    run_checked(
        runner,
        [ctx.toolchain.executable, "build", "-o", out_dir, str(ctx.entry_point)],
        env=ctx.compile_env,
    )
    logger.info("Local build finished", extra={"build_dir": str(ctx.build_dir)})
