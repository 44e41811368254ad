"""Subprocess helper — argv-only, async, with a hard timeout."""

from __future__ import annotations

import asyncio
import contextlib
from pathlib import Path


class CommandTimeout(Exception):
    """The command ran past its timeout and was killed."""

    def __init__(self, cmd: list[str], timeout: float):
        super().__init__(f"Command timed out after {timeout}s: {cmd[0]}")
        self.cmd = cmd
        self.timeout = timeout


async def kill_and_reap(proc: asyncio.subprocess.Process) -> None:
    """Kill *proc* if it is still running and wait for it to exit."""
    with contextlib.suppress(ProcessLookupError):
        proc.kill()
    await proc.wait()


async def run(
    cmd: list[str],
    *,
    timeout: float = 120.0,
    cwd: Path | None = None,
) -> tuple[int, str, str]:
    """Run a subprocess and return (returncode, stdout, stderr).

    Never goes through a shell. A missing executable is reported as exit
    code 127. On timeout or cancellation the process is killed and reaped;
    a timeout then raises ``CommandTimeout``.
    """
    try:
        proc = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=cwd,
        )
    except FileNotFoundError:
        return (127, "", f"Command not found: {cmd[0]}")

    try:
        stdout_bytes, stderr_bytes = await asyncio.wait_for(
            proc.communicate(), timeout=timeout,
        )
    except TimeoutError:
        await kill_and_reap(proc)
        raise CommandTimeout(cmd, timeout) from None
    except asyncio.CancelledError:
        await kill_and_reap(proc)
        raise

    return (
        proc.returncode or 0,
        stdout_bytes.decode(errors="replace").strip(),
        stderr_bytes.decode(errors="replace").strip(),
    )
