"""Repository host providers.

Key Components:
    - RepositoryHost: Abstract interface the reconciliation engine depends on
    - GitHubRestHost: GitHub / GitHub Enterprise implementation (PyGithub)
    - create_repository_host: Build the host for a run from settings
"""

from spec_sync.providers.base import RepositoryHost

__all__ = [
    "RepositoryHost",
]
