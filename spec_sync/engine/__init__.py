"""Reconciliation engine.

Key Components:
    - BranchReconciler: branch selection, change detection, commit and push
    - PullRequestReconciler: create-or-update of the single open pull request
    - SyncOrchestrator: sequences both into mapping sync or generation sync
"""

from spec_sync.engine.branch import BranchReconciler
from spec_sync.engine.orchestrator import SyncOrchestrator
from spec_sync.engine.pull_request import PullRequestReconciler

__all__ = [
    "BranchReconciler",
    "PullRequestReconciler",
    "SyncOrchestrator",
]
