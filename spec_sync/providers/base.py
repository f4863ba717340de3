"""
Abstract base class for repository host providers.

The reconciliation engine talks to the host (GitHub, or a GitHub Enterprise
instance) only through this interface, never through a concrete client.
"""

from abc import ABC, abstractmethod

from spec_sync.models.domain import PullRequest


class RepositoryHost(ABC):
    """Narrow interface to the remote repository host.

    An instance is bound to one repository (``owner``/``repo``); every call
    operates on that repository. All methods are async so that blocking
    HTTP clients can be pushed off the event loop by implementations.

    Attributes:
        owner: Repository owner (user or organization)
        repo: Repository name
    """

    owner: str
    repo: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"

    async def connect(self) -> None:
        """Open the client session. Implementations without one need not override."""
        return None

    async def disconnect(self) -> None:
        """Release the client session."""
        return None

    @abstractmethod
    async def verify_access(self) -> None:
        """Confirm the credential can read the repository.

        Raises:
            ExternalServiceError: If the repository cannot be fetched
        """
        pass

    @abstractmethod
    async def get_ref(self, ref: str) -> bool:
        """Report whether a git reference exists.

        Args:
            ref: Reference without the ``refs/`` prefix, e.g. ``heads/sync-spec``

        Returns:
            True if the reference exists, False if the host reports it missing.

        Raises:
            ExternalServiceError: For any other API failure. Callers that
                treat failure as absence must catch this themselves.
        """
        pass

    @abstractmethod
    async def list_open_pulls(self, head: str) -> list[PullRequest]:
        """List open pull requests whose head matches.

        Args:
            head: Head filter in ``owner:branch`` form

        Returns:
            Open pull requests in the order the host returns them.

        Raises:
            ExternalServiceError: If the API request fails
        """
        pass

    @abstractmethod
    async def create_pull(self, title: str, head: str, base: str, body: str) -> PullRequest:
        """Open a pull request from ``head`` into ``base``.

        Raises:
            ExternalServiceError: If the API request fails
        """
        pass

    @abstractmethod
    async def update_pull(self, number: int, body: str) -> PullRequest:
        """Replace the body of an existing pull request. The title is left as is.

        Raises:
            ExternalServiceError: If the API request fails
        """
        pass

    @abstractmethod
    def clone_url(self) -> str:
        """Return an authenticated HTTPS clone URL for the repository.

        The URL embeds the credential; callers must not log it unredacted.
        """
        pass
