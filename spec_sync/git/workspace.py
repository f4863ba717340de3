"""Local git working tree operations.

``GitWorkspace`` wraps the git CLI for one repository root. The root is an
explicit value passed to every subprocess, so nothing in a run depends on
(or changes) the process working directory.

Every method is a blocking-style awaitable: it returns once git exits and
raises GitOperationError if git exits non-zero. Output is only ever
inspected for emptiness (``status``, ``diff``); structured git output is
never parsed.

Example:
    >>> workspace = GitWorkspace(Path("/tmp/target"))
    >>> await workspace.create_branch("sync-spec")
    >>> if (await workspace.status()).strip():
    ...     await workspace.stage_all()
    ...     await workspace.commit("Sync OpenAPI files")
"""

from __future__ import annotations

import subprocess
from collections.abc import Iterable
from pathlib import Path

import structlog

from spec_sync.exceptions import GitOperationError
from spec_sync.utils.async_subprocess import run_command

log = structlog.get_logger(__name__)

REDACTED = "***"


class GitWorkspace:
    """Git operations scoped to a single repository root.

    Attributes:
        root: Absolute path of the working tree
        remote: Name of the remote pushed to and fetched from
    """

    def __init__(
        self,
        root: Path,
        remote: str = "origin",
        secrets: Iterable[str] = (),
    ) -> None:
        """Initialize a workspace.

        Args:
            root: Working tree root. Need not exist until the first command.
            remote: Remote name used for fetch, pull and push
            secrets: Values to mask in error messages and logs (e.g. tokens
                embedded in clone URLs)
        """
        self.root = Path(root)
        self.remote = remote
        self._secrets = [s for s in secrets if s]

    async def _git(self, *args: str, cwd: Path | None = None) -> str:
        """Run a git command in the workspace and return its stdout."""
        try:
            stdout, _, _ = await run_command("git", *args, cwd=cwd or self.root, check=True)
        except subprocess.CalledProcessError as e:
            command = [self._redact(a) for a in ("git", *args)]
            raise GitOperationError(
                f"Command '{' '.join(command)}' failed with exit code {e.returncode}",
                command=command,
                stderr=self._redact(e.stderr or ""),
            ) from None  # CalledProcessError.cmd is unredacted
        except FileNotFoundError as e:
            raise GitOperationError("git executable not found on PATH") from e
        return stdout

    def _redact(self, text: str) -> str:
        for secret in self._secrets:
            text = text.replace(secret, REDACTED)
        return text

    async def clone(self, url: str) -> None:
        """Clone ``url`` into the workspace root.

        The parent directory is created if needed; the root itself must not
        exist or be empty.
        """
        self.root.parent.mkdir(parents=True, exist_ok=True)
        log.info("git_clone", url=self._redact(url), path=str(self.root))
        await self._git("clone", url, str(self.root), cwd=self.root.parent)

    async def configure_identity(self, name: str, email: str) -> None:
        """Set the committer identity for this repository only."""
        await self._git("config", "user.name", name)
        await self._git("config", "user.email", email)

    async def create_branch(self, branch: str) -> None:
        """Create ``branch`` from the current HEAD and check it out.

        Fails if a local branch with that name already exists.
        """
        await self._git("checkout", "-b", branch)

    async def checkout(self, branch: str) -> None:
        """Check out an existing branch (local or tracked from the remote)."""
        await self._git("checkout", branch)

    async def pull(self, branch: str) -> None:
        """Fast-forward the current branch from ``<remote>/<branch>``."""
        await self._git("pull", self.remote, branch)

    async def fetch(self, branch: str) -> None:
        """Fetch ``branch`` from the remote, updating ``<remote>/<branch>``."""
        await self._git("fetch", self.remote, branch)

    async def diff(self, left: str, right: str) -> str:
        """Return the textual diff between two refs."""
        return await self._git("diff", left, right)

    async def status(self) -> str:
        """Return porcelain status; empty iff no tracked or untracked change."""
        return await self._git("status", "--porcelain")

    async def stage_all(self) -> None:
        await self._git("add", ".")

    async def commit(self, message: str) -> None:
        await self._git("commit", "-m", message)

    async def push(self, branch: str, force: bool = False, verbose: bool = False) -> None:
        """Push ``branch`` to the remote.

        Args:
            branch: Local branch to push under the same name
            force: Overwrite the remote branch regardless of its history
            verbose: Ask git for verbose push output
        """
        args = ["push"]
        if force:
            args.append("--force")
        if verbose:
            args.append("--verbose")
        await self._git(*args, self.remote, branch)
