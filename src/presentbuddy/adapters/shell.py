"""Async external command runner shared by the OS actuators."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
import logging
import shutil

from ..config import config
from ..core.errors import HelperTimeout, OperationFailed

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommandResult:
    args: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str


def has_cmd(name: str) -> bool:
    return shutil.which(name) is not None


async def run_command(
    args: list[str],
    timeout: float | None = None,
    check: bool = True,
) -> CommandResult:
    """Run args without a shell and collect its output.

    Raises:
        HelperTimeout: the process outlived timeout (it is killed)
        OperationFailed: the binary could not be started, or it exited
            non-zero while check is set
    """
    timeout = config.COMMAND_TIMEOUT if timeout is None else timeout
    command = " ".join(args)
    logger.debug("Running: %s", command)

    try:
        proc = await asyncio.create_subprocess_exec(
            *args,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        raise OperationFailed(f"Command failed: {command}: {e}") from e

    try:
        stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout)
    except asyncio.TimeoutError as e:
        proc.kill()
        await proc.wait()
        raise HelperTimeout(f"Command timed out after {timeout:g}s: {command}") from e

    result = CommandResult(
        args=tuple(args),
        returncode=proc.returncode,
        stdout=stdout.decode(errors="replace"),
        stderr=stderr.decode(errors="replace"),
    )
    if check and result.returncode != 0:
        detail = result.stderr.strip() or result.stdout.strip() or f"exit {result.returncode}"
        raise OperationFailed(f"Command failed: {command}: {detail}")
    return result
