"""
Run orchestration for the two sync modes.

Mapping sync (``update_from_source`` false):
    parse mappings -> verify access -> clone target -> select/create branch
    -> copy mappings -> detect change -> commit -> push decision
    -> pull request (unless auto-merge). The PR base is ``base_branch``.

Generation sync (``update_from_source`` true):
    configure identity -> create a brand-new branch in the workspace ->
    run the generator -> detect change -> commit -> push -> pull request
    (unless auto-merge). The PR base is the ref the workflow ran from.

Both modes end at the first terminal state reached: no change, push
skipped, pushed, or pull request created/updated. Failures are raised, not
rolled back.
"""

import structlog

from spec_sync.config.settings import SyncSettings
from spec_sync.engine.branch import BranchReconciler
from spec_sync.engine.pull_request import GENERATION_TEMPLATE, SYNC_TEMPLATE, PullRequestReconciler
from spec_sync.exceptions import GitOperationError, RepositoryAccessError, SpecSyncError, SyncError
from spec_sync.git.workspace import GitWorkspace
from spec_sync.models.domain import PushPolicy, SyncOutcome
from spec_sync.providers.base import RepositoryHost
from spec_sync.sync.copier import apply_copies
from spec_sync.sync.generator import SpecGenerator
from spec_sync.sync.mappings import resolve_mappings

log = structlog.get_logger(__name__)

GENERATION_COMMIT_MESSAGE = "Update API specifications with fern api update"


class SyncOrchestrator:
    """Sequence one run in the mode chosen by the settings.

    Attributes:
        settings: Read-only run settings
        host: Repository host the change is delivered to
        generator: External generator used by generation sync
    """

    def __init__(
        self,
        settings: SyncSettings,
        host: RepositoryHost,
        generator: SpecGenerator | None = None,
    ) -> None:
        self.settings = settings
        self.host = host
        self.generator = generator or SpecGenerator()

    async def run(self) -> SyncOutcome:
        """Execute the run.

        Returns:
            The terminal state the run reached

        Raises:
            ConfigurationError: Before any side effect, for missing inputs
            RepositoryAccessError: If the target cannot be verified or cloned
            SyncError: For any failure once the working tree is touched
        """
        self.settings.require_token()
        branch = self.settings.require_branch()

        if self.settings.update_from_source:
            return await self.update_from_source(branch)
        return await self.sync_from_mappings(branch)

    async def sync_from_mappings(self, branch: str) -> SyncOutcome:
        """Copy the declared mappings into the target repository and deliver them."""
        settings = self.settings
        mappings = settings.require_mappings()
        policy = settings.push_policy

        # Resolved up front so a missing source fails before the clone.
        instructions = resolve_mappings(mappings, settings.source_root, settings.clone_root)

        workspace = await self._clone_target()
        reconciler = BranchReconciler(workspace, self.host)

        if policy is PushPolicy.AUTO_MERGE:
            log.info("auto_merge_enabled", branch=branch)
        else:
            log.info("pull_request_mode", branch=branch, base=settings.base_branch)

        try:
            exists = await reconciler.branch_exists(branch)
            await reconciler.setup_branch(branch, exists)

            apply_copies(instructions)

            if not await reconciler.has_changes():
                log.info("no_changes_detected", branch=branch)
                return SyncOutcome.NO_CHANGES

            await reconciler.commit(self._sync_commit_message())

            if not await reconciler.push(branch, policy):
                return SyncOutcome.PUSH_SKIPPED

            if policy is PushPolicy.AUTO_MERGE:
                log.info("pushed_without_pull_request", branch=branch)
                return SyncOutcome.PUSHED

            pulls = PullRequestReconciler(self.host, SYNC_TEMPLATE, add_timestamp=settings.add_timestamp)
            return await pulls.reconcile(branch, settings.base_branch)

        except (SpecSyncError, OSError) as e:
            raise SyncError(f"Failed to sync changes: {e}") from e

    async def update_from_source(self, branch: str) -> SyncOutcome:
        """Run the generator in the workspace and deliver its output."""
        settings = self.settings
        policy = settings.push_policy
        base = settings.require_base_ref() if policy is PushPolicy.PULL_REQUEST else None

        workspace = GitWorkspace(settings.source_root, secrets=[settings.require_token()])
        reconciler = BranchReconciler(workspace, self.host)

        try:
            await workspace.configure_identity(settings.git_user_name, settings.git_user_email)

            log.info("creating_branch", branch=branch)
            await workspace.create_branch(branch)

            await self.generator.run(workspace.root)

            if not await reconciler.has_changes():
                log.info("no_changes_from_generator", command=self.generator.display_name)
                return SyncOutcome.NO_CHANGES

            await reconciler.commit(GENERATION_COMMIT_MESSAGE)

            log.info("pushing_branch", branch=branch)
            await workspace.push(branch, verbose=True)

            if base is None:
                log.info("pushed_without_pull_request", branch=branch)
                return SyncOutcome.PUSHED

            pulls = PullRequestReconciler(self.host, GENERATION_TEMPLATE, add_timestamp=settings.add_timestamp)
            return await pulls.reconcile(branch, base)

        except SpecSyncError as e:
            raise SyncError(f"Failed to update from source: {e}") from e

    async def _clone_target(self) -> GitWorkspace:
        """Verify access to the target repository and clone it.

        Raises:
            RepositoryAccessError: If verification or the clone fails
        """
        settings = self.settings
        repository = self.host.full_name

        try:
            await self.host.verify_access()
        except SpecSyncError as e:
            raise RepositoryAccessError(
                f"Failed to verify repository access: {e}",
                repository=repository,
                suggestion="Check that the token is valid and can read the repository.",
            ) from e
        log.info("repository_access_verified", repository=repository)

        workspace = GitWorkspace(settings.clone_root, secrets=[settings.require_token()])
        try:
            await workspace.clone(self.host.clone_url())
            await workspace.configure_identity(settings.git_user_name, settings.git_user_email)
        except GitOperationError as e:
            raise RepositoryAccessError(
                f"Failed to clone repository: {e}",
                repository=repository,
                suggestion=f"Please ensure your token has 'repo' scope and you have write access to {repository}.",
            ) from e

        return workspace

    def _sync_commit_message(self) -> str:
        source = self.settings.context.repository_name or "source repository"
        return f"Sync OpenAPI files from {source}"
