"""Async wrapper around external commands (gleam, npm, tar, unzip)."""

import asyncio
import logging
import shutil
from dataclasses import dataclass
from pathlib import Path

from atelier.errors import ProcessFailure

logger = logging.getLogger(__name__)


@dataclass
class ProcessResult:
    args: list[str]
    returncode: int
    stdout: str
    stderr: str


class ProcessRunner:
    """Runs one command at a time and waits for it to exit.

    A command that cannot be launched or exits non-zero raises
    ``ProcessFailure`` carrying the captured error output (stdout when stderr
    is empty).  No timeout is applied.
    """

    async def run(self, args: list[str], cwd: Path) -> ProcessResult:
        if not args:
            raise ProcessFailure([], None, "empty command")
        # npm and friends are .cmd shims on Windows; resolve them explicitly.
        executable = shutil.which(args[0]) or args[0]
        logger.info(f"Running {' '.join(args)} in {cwd}")
        try:
            proc = await asyncio.create_subprocess_exec(
                executable,
                *args[1:],
                cwd=str(cwd),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise ProcessFailure(args, None, str(e)) from e

        stdout_b, stderr_b = await proc.communicate()
        stdout = stdout_b.decode(errors="replace")
        stderr = stderr_b.decode(errors="replace")
        result = ProcessResult(
            args=list(args),
            returncode=proc.returncode if proc.returncode is not None else -1,
            stdout=stdout,
            stderr=stderr,
        )
        if result.returncode != 0:
            logger.warning(f"{args[0]} exited with status {result.returncode}")
            raise ProcessFailure(args, result.returncode, stderr or stdout)
        return result
