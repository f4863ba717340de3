"""Tests for spec_sync/engine/branch.py - branch selection and push decision."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from spec_sync.engine.branch import BranchReconciler
from spec_sync.exceptions import ExternalServiceError, GitOperationError
from spec_sync.models.domain import PushPolicy


@pytest.fixture
def mock_workspace():
    workspace = MagicMock()
    workspace.remote = "origin"
    for name in ("checkout", "pull", "create_branch", "fetch", "stage_all", "commit", "push"):
        setattr(workspace, name, AsyncMock(return_value=None))
    workspace.diff = AsyncMock(return_value="")
    workspace.status = AsyncMock(return_value="")
    return workspace


@pytest.fixture
def reconciler(mock_workspace, mock_host):
    return BranchReconciler(mock_workspace, mock_host)


class TestBranchExists:
    """Tests for the remote existence check."""

    @pytest.mark.asyncio
    async def test_found(self, reconciler, mock_host):
        mock_host.get_ref.return_value = True

        assert await reconciler.branch_exists("update-spec") is True
        mock_host.get_ref.assert_awaited_once_with("heads/update-spec")

    @pytest.mark.asyncio
    async def test_not_found(self, reconciler, mock_host):
        mock_host.get_ref.return_value = False

        assert await reconciler.branch_exists("update-spec") is False

    @pytest.mark.asyncio
    async def test_lookup_failure_counts_as_missing(self, reconciler, mock_host):
        """Any API error, not only 404, is read as "does not exist"."""
        mock_host.get_ref.side_effect = ExternalServiceError("Server Error", status_code=500)

        assert await reconciler.branch_exists("update-spec") is False


class TestSetupBranch:
    @pytest.mark.asyncio
    async def test_existing_branch_is_checked_out_and_pulled(self, reconciler, mock_workspace):
        await reconciler.setup_branch("update-spec", exists=True)

        mock_workspace.checkout.assert_awaited_once_with("update-spec")
        mock_workspace.pull.assert_awaited_once_with("update-spec")
        mock_workspace.create_branch.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_branch_is_created(self, reconciler, mock_workspace):
        await reconciler.setup_branch("update-spec", exists=False)

        mock_workspace.create_branch.assert_awaited_once_with("update-spec")
        mock_workspace.checkout.assert_not_called()
        mock_workspace.pull.assert_not_called()

    @pytest.mark.asyncio
    async def test_failure_is_wrapped(self, reconciler, mock_workspace):
        mock_workspace.checkout.side_effect = GitOperationError("Command 'git checkout update-spec' failed")

        with pytest.raises(GitOperationError, match="Failed to setup branch update-spec: Command"):
            await reconciler.setup_branch("update-spec", exists=True)


class TestChangesAndCommit:
    @pytest.mark.asyncio
    async def test_clean_tree(self, reconciler, mock_workspace):
        mock_workspace.status.return_value = "\n"

        assert await reconciler.has_changes() is False

    @pytest.mark.asyncio
    async def test_untracked_file_counts(self, reconciler, mock_workspace):
        mock_workspace.status.return_value = "?? fern/openapi/new.yaml\n"

        assert await reconciler.has_changes() is True

    @pytest.mark.asyncio
    async def test_commit_stages_everything(self, reconciler, mock_workspace):
        await reconciler.commit("Sync OpenAPI files from api-source")

        mock_workspace.stage_all.assert_awaited_once()
        mock_workspace.commit.assert_awaited_once_with("Sync OpenAPI files from api-source")


class TestPush:
    """Tests for the push decision."""

    @pytest.mark.asyncio
    async def test_auto_merge_always_pushes_without_force(self, reconciler, mock_workspace):
        pushed = await reconciler.push("main", PushPolicy.AUTO_MERGE)

        assert pushed is True
        mock_workspace.fetch.assert_not_called()
        mock_workspace.push.assert_awaited_once_with("main", force=False)

    @pytest.mark.asyncio
    async def test_pull_request_mode_skips_identical_remote(self, reconciler, mock_workspace):
        mock_workspace.diff.return_value = ""

        pushed = await reconciler.push("update-spec", PushPolicy.PULL_REQUEST)

        assert pushed is False
        mock_workspace.fetch.assert_awaited_once_with("update-spec")
        mock_workspace.diff.assert_awaited_once_with("HEAD", "origin/update-spec")
        mock_workspace.push.assert_not_called()

    @pytest.mark.asyncio
    async def test_pull_request_mode_force_pushes_difference(self, reconciler, mock_workspace):
        mock_workspace.diff.return_value = "diff --git a/api.yaml b/api.yaml\n"

        pushed = await reconciler.push("update-spec", PushPolicy.PULL_REQUEST)

        assert pushed is True
        mock_workspace.push.assert_awaited_once_with("update-spec", force=True)

    @pytest.mark.asyncio
    async def test_missing_remote_branch_is_pushed(self, reconciler, mock_workspace):
        """A failed fetch means the branch is new."""
        mock_workspace.fetch.side_effect = GitOperationError("couldn't find remote ref update-spec")

        pushed = await reconciler.push("update-spec", PushPolicy.PULL_REQUEST)

        assert pushed is True
        mock_workspace.diff.assert_not_called()
        mock_workspace.push.assert_awaited_once_with("update-spec", force=True)

    @pytest.mark.asyncio
    async def test_push_failure_is_wrapped(self, reconciler, mock_workspace):
        mock_workspace.push.side_effect = GitOperationError("rejected")

        with pytest.raises(GitOperationError) as exc_info:
            await reconciler.push("main", PushPolicy.AUTO_MERGE)

        assert str(exc_info.value) == "Failed to push changes to the repository: rejected"
