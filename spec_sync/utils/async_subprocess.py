"""Async subprocess utilities.

Provides non-blocking subprocess execution for git and the external spec
generator. Every call is awaited in turn by the engine, so runs stay strictly
sequential while the event loop remains free for the host API calls.

Example:
    >>> from spec_sync.utils.async_subprocess import run_command
    >>> stdout, stderr, code = await run_command("git", "status", "--porcelain", cwd="/repo")
    >>> if not stdout.strip():
    ...     print("clean")
"""

import asyncio
import subprocess
from pathlib import Path


async def run_command(
    *args: str,
    cwd: Path | str | None = None,
    check: bool = True,
    timeout: float | None = None,
    capture_output: bool = True,
) -> tuple[str, str, int]:
    """Run a command asynchronously without shell interpolation.

    Args:
        *args: Command and arguments as separate strings. The first argument
            is the executable, e.g. ``"git", "commit", "-m", "message"``.
        cwd: Working directory for command execution. If None, uses the
            current working directory of the parent process.
        check: If True (default), raise CalledProcessError when the command
            returns a non-zero exit code.
        timeout: Maximum seconds to wait for completion. None (the default)
            waits indefinitely and relies on the transport's own behaviour.
        capture_output: If True (default), capture stdout and stderr as
            strings. If False, output goes to the parent's stdout/stderr and
            the returned strings are empty.

    Returns:
        Tuple of (stdout, stderr, return_code), decoded as UTF-8 with
        replacement for invalid bytes.

    Raises:
        subprocess.CalledProcessError: If check=True and the command returns
            non-zero. The exception includes stdout, stderr and return code.
        asyncio.TimeoutError: If timeout is exceeded. The process is killed
            before this exception is raised.
        FileNotFoundError: If the executable is not found.
    """
    process = await asyncio.create_subprocess_exec(
        *args,
        cwd=cwd,
        stdout=asyncio.subprocess.PIPE if capture_output else None,
        stderr=asyncio.subprocess.PIPE if capture_output else None,
    )

    try:
        stdout_bytes, stderr_bytes = await asyncio.wait_for(
            process.communicate(),
            timeout=timeout,
        )
    except TimeoutError:
        process.kill()
        await process.wait()
        raise

    stdout = (stdout_bytes or b"").decode("utf-8", errors="replace")
    stderr = (stderr_bytes or b"").decode("utf-8", errors="replace")

    if check and process.returncode != 0:
        raise subprocess.CalledProcessError(
            process.returncode,
            args,
            stdout,
            stderr,
        )

    return stdout, stderr, process.returncode or 0
