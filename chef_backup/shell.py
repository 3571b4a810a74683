"""Thin asyncio wrapper around shell command execution."""

import asyncio
from typing import Optional

from pydantic import BaseModel

from ._utils import logger
from .exceptions import ShellCommandError


class ShellResult(BaseModel):
    """Outcome of one shell command."""

    success: bool
    exit_code: int
    output: str = ""
    error: str = ""


async def run(command: str, cwd: Optional[str] = None) -> ShellResult:
    """Run a command through the shell and capture its output.

    Args:
        command: Full command line; redirections are interpreted by the shell
        cwd: Working directory for the command

    Returns:
        ShellResult with exit status and decoded output
    """
    logger.debug(f"Running: {command}" + (f" (cwd={cwd})" if cwd else ""))

    process = await asyncio.create_subprocess_shell(
        command,
        cwd=cwd,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE
    )
    stdout, stderr = await process.communicate()

    return ShellResult(
        success=process.returncode == 0,
        exit_code=process.returncode,
        output=stdout.decode("utf-8", errors="replace") if stdout else "",
        error=stderr.decode("utf-8", errors="replace") if stderr else ""
    )


async def run_checked(command: str, cwd: Optional[str] = None, runner=run) -> ShellResult:
    """Run a command and raise ShellCommandError when it exits non-zero."""
    result = await runner(command, cwd=cwd)
    if not result.success:
        raise ShellCommandError(command, result)
    return result
