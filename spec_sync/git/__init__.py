"""Local git operations.

The main entry point is GitWorkspace, which runs the git CLI against an
explicit repository root.

Example:
    >>> from spec_sync.git import GitWorkspace
    >>> workspace = GitWorkspace(Path("temp-fern-config"))
    >>> await workspace.checkout("sync-spec")
"""

from spec_sync.git.workspace import GitWorkspace

__all__ = ["GitWorkspace"]
