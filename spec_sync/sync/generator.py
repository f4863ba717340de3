"""External spec generator (``fern api update``).

The generator is opaque: it is installed if missing, run in the workspace,
and judged only by its exit status. Whether it changed anything is decided
afterwards from ``git status``.
"""

import subprocess
from collections.abc import Sequence
from pathlib import Path

import structlog

from spec_sync.exceptions import GeneratorError
from spec_sync.utils.async_subprocess import run_command

log = structlog.get_logger(__name__)


class SpecGenerator:
    """Runs a generator CLI, installing it first when it is not on PATH.

    Attributes:
        command: Command that regenerates the specifications
        version_check: Command used to detect whether the CLI is installed
        install: Command that installs the CLI
    """

    def __init__(
        self,
        command: Sequence[str] = ("fern", "api", "update"),
        version_check: Sequence[str] = ("fern", "--version"),
        install: Sequence[str] = ("npm", "install", "-g", "fern-api"),
    ) -> None:
        self.command = tuple(command)
        self.version_check = tuple(version_check)
        self.install = tuple(install)

    @property
    def display_name(self) -> str:
        return " ".join(self.command)

    async def is_installed(self) -> bool:
        try:
            await run_command(*self.version_check, check=True)
        except (FileNotFoundError, subprocess.CalledProcessError):
            return False
        return True

    async def run(self, cwd: Path) -> None:
        """Install the CLI if needed, then run the generator in ``cwd``.

        Raises:
            GeneratorError: If installation or generation fails
        """
        log.info("generator_started", command=self.display_name, cwd=str(cwd))

        try:
            if await self.is_installed():
                log.info("generator_already_installed", version_check=" ".join(self.version_check))
            else:
                log.info("generator_installing", install=" ".join(self.install))
                await run_command(*self.install, cwd=cwd, capture_output=False)

            await run_command(*self.command, cwd=cwd, capture_output=False)

        except subprocess.CalledProcessError as e:
            raise GeneratorError(
                f'Failed to run "{self.display_name}": '
                f"command '{' '.join(e.cmd)}' exited with code {e.returncode}"
            ) from e
        except FileNotFoundError as e:
            raise GeneratorError(f'Failed to run "{self.display_name}": {e}') from e

        log.info("generator_completed", command=self.display_name)
