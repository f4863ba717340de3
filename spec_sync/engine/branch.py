"""
Branch reconciliation.

Decides which branch state to produce in the target working tree, whether a
mutation produced any change, and whether that change needs pushing.

Branch Selection:
    The branch either exists on the remote (check it out and fast-forward)
    or it does not (create it from the current HEAD). A failed existence
    query counts as "does not exist".

Push Decision:
    AUTO_MERGE always pushes; the change lands straight on the working
    branch, which may be the mainline.

    PULL_REQUEST first fetches the remote branch and diffs HEAD against it.
    An empty diff means the remote already carries this content (typically an
    unmerged PR with an identical commit), so the push is skipped and the PR
    left alone. A failed fetch means the branch is new and is always pushed.
    The push is forced: the working branch is a disposable staging branch
    whose remote state is always exactly one commit on top of its base.
"""

import structlog

from spec_sync.exceptions import GitOperationError, SpecSyncError
from spec_sync.git.workspace import GitWorkspace
from spec_sync.models.domain import PushPolicy
from spec_sync.providers.base import RepositoryHost

log = structlog.get_logger(__name__)


class BranchReconciler:
    """Prepare, commit and push the working branch of one workspace.

    Attributes:
        workspace: Working tree the branch lives in
        host: Repository host used for the remote existence check
    """

    def __init__(self, workspace: GitWorkspace, host: RepositoryHost) -> None:
        self.workspace = workspace
        self.host = host

    async def branch_exists(self, branch: str) -> bool:
        """Query the host for ``heads/<branch>``.

        Any failure, not only "not found", is read as "does not exist".
        """
        try:
            return await self.host.get_ref(f"heads/{branch}")
        except Exception as e:
            log.info("branch_lookup_failed", branch=branch, error=str(e))
            return False

    async def setup_branch(self, branch: str, exists: bool) -> None:
        """Check out the existing branch and fast-forward it, or create it.

        Raises:
            GitOperationError: If checkout, pull or branch creation fails
        """
        try:
            if exists:
                log.info("branch_exists_checking_out", branch=branch)
                await self.workspace.checkout(branch)
                await self.workspace.pull(branch)
            else:
                log.info("branch_missing_creating", branch=branch)
                await self.workspace.create_branch(branch)
        except SpecSyncError as e:
            raise GitOperationError(f"Failed to setup branch {branch}: {e}") from e

    async def has_changes(self) -> bool:
        """Return True if the tree has tracked or untracked changes."""
        status = await self.workspace.status()
        return bool(status.strip())

    async def commit(self, message: str) -> None:
        """Stage everything and commit it with ``message``."""
        await self.workspace.stage_all()
        await self.workspace.commit(message)
        log.info("changes_committed", message=message)

    async def has_difference_with_remote(self, branch: str) -> bool:
        """Return True unless HEAD is identical to the remote branch.

        If the remote branch cannot be fetched it is assumed not to exist
        yet, which also counts as a difference.
        """
        try:
            await self.workspace.fetch(branch)
            diff = await self.workspace.diff("HEAD", f"{self.workspace.remote}/{branch}")
        except GitOperationError as e:
            log.info("remote_branch_unavailable_assuming_first_push", branch=branch, error=str(e))
            return True
        return bool(diff.strip())

    async def push(self, branch: str, policy: PushPolicy) -> bool:
        """Push the committed change according to ``policy``.

        Returns:
            True if a push happened, False if it was skipped because the
            remote already has the same content.

        Raises:
            GitOperationError: If the push fails
        """
        should_push = True
        if policy is PushPolicy.PULL_REQUEST:
            should_push = await self.has_difference_with_remote(branch)

        if not should_push:
            log.info("push_skipped_no_difference", branch=branch)
            return False

        try:
            await self.workspace.push(branch, force=policy is PushPolicy.PULL_REQUEST)
        except SpecSyncError as e:
            raise GitOperationError(f"Failed to push changes to the repository: {e}") from e

        log.info("changes_pushed", branch=branch, policy=str(policy))
        return True
