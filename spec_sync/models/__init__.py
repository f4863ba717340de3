"""Core domain models for spec-sync.

Key Models:
    - PullRequest: Open pull request on the repository host
    - CopyInstruction: One resolved source -> destination file copy

Enums:
    - PushPolicy: auto-merge vs. pull-request delivery
    - SyncOutcome: terminal state reached by a run
"""

from spec_sync.models.domain import CopyInstruction, PullRequest, PushPolicy, SyncOutcome

__all__ = [
    "CopyInstruction",
    "PullRequest",
    "PushPolicy",
    "SyncOutcome",
]
