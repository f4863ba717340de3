"""
Domain models for spec-sync.

These are the normalized internal representations the reconciliation engine
works with. Provider-specific objects (PyGithub pull requests) are converted
into these before they reach the engine.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class PushPolicy(str, Enum):
    """How a committed change is delivered to the remote.

    AUTO_MERGE pushes straight to the working branch and never opens a pull
    request. PULL_REQUEST force-pushes a disposable branch, but only when its
    content differs from the remote, and then reconciles a pull request.
    """

    AUTO_MERGE = "auto_merge"
    PULL_REQUEST = "pull_request"

    def __str__(self) -> str:
        return self.value


class SyncOutcome(str, Enum):
    """Terminal state reached by a run."""

    NO_CHANGES = "no_changes"
    """The working tree was unchanged after mutation; nothing committed."""

    PUSH_SKIPPED = "push_skipped"
    """A commit was made locally but the remote branch already had the content."""

    PUSHED = "pushed"
    """Changes were pushed and, by policy, no pull request was touched."""

    PULL_REQUEST_CREATED = "pull_request_created"
    """Changes were pushed and a new pull request was opened."""

    PULL_REQUEST_UPDATED = "pull_request_updated"
    """Changes were pushed and the existing open pull request was refreshed."""

    def __str__(self) -> str:
        return self.value


@dataclass
class PullRequest:
    """An open pull request on the repository host.

    Only ever looked up by head branch; the first match returned by the host
    is treated as authoritative.
    """

    number: int
    title: str
    body: str
    head: str
    base: str
    url: str


@dataclass(frozen=True)
class CopyInstruction:
    """A single concrete file copy produced by resolving a mapping.

    Attributes:
        source: Absolute path of the file inside the source workspace
        destination: Absolute path the file is written to in the target tree
        relative: Source path relative to the source root, POSIX separators
    """

    source: Path
    destination: Path
    relative: str
