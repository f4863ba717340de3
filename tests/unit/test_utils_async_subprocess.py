"""Tests for spec_sync.utils.async_subprocess module."""

import asyncio
import subprocess

import pytest

from spec_sync.utils.async_subprocess import run_command


class TestRunCommand:
    """Test basic functionality of run_command."""

    @pytest.mark.asyncio
    async def test_run_simple_command(self):
        """Test running a simple command that succeeds."""
        stdout, stderr, returncode = await run_command("echo", "hello")

        assert stdout.strip() == "hello"
        assert stderr == ""
        assert returncode == 0

    @pytest.mark.asyncio
    async def test_run_command_captures_stderr(self):
        stdout, stderr, returncode = await run_command("sh", "-c", "echo error >&2")

        assert stderr.strip() == "error"

    @pytest.mark.asyncio
    async def test_run_command_with_cwd(self, tmp_path):
        stdout, _, _ = await run_command("pwd", cwd=tmp_path)

        assert stdout.strip() == str(tmp_path.resolve())

    @pytest.mark.asyncio
    async def test_non_zero_exit_check_false(self):
        stdout, stderr, returncode = await run_command("false", check=False)

        assert returncode != 0

    @pytest.mark.asyncio
    async def test_non_zero_exit_raises(self):
        """Test CalledProcessError carries output and arguments."""
        with pytest.raises(subprocess.CalledProcessError) as exc_info:
            await run_command("sh", "-c", "echo out; echo err >&2; exit 3")

        assert exc_info.value.returncode == 3
        assert exc_info.value.cmd == ("sh", "-c", "echo out; echo err >&2; exit 3")
        assert exc_info.value.stdout.strip() == "out"
        assert exc_info.value.stderr.strip() == "err"

    @pytest.mark.asyncio
    async def test_missing_executable(self):
        with pytest.raises(FileNotFoundError):
            await run_command("definitely-not-a-real-command-xyz")

    @pytest.mark.asyncio
    async def test_timeout_kills_process(self):
        with pytest.raises(asyncio.TimeoutError):
            await run_command("sleep", "10", timeout=0.1)

    @pytest.mark.asyncio
    async def test_without_capture(self):
        stdout, stderr, returncode = await run_command("true", capture_output=False)

        assert (stdout, stderr, returncode) == ("", "", 0)
