"""GitHub host implementation using PyGithub and the REST API."""

import asyncio
from collections.abc import Callable
from typing import TypeVar

import structlog
from github import Auth, Github, GithubException  # type: ignore[import-not-found]
from github.PullRequest import PullRequest as GHPullRequest  # type: ignore[import-not-found]
from github.Repository import Repository as GHRepository  # type: ignore[import-not-found]

from spec_sync.exceptions import ExternalServiceError
from spec_sync.models.domain import PullRequest
from spec_sync.providers.base import RepositoryHost

log = structlog.get_logger(__name__)

T = TypeVar("T")


async def _run_sync(func: Callable[[], T]) -> T:
    """Run a synchronous function in a thread pool.

    PyGithub is blocking; calls are still made one at a time, this only
    keeps the event loop responsive while waiting.
    """
    return await asyncio.to_thread(func)


def _describe(e: GithubException) -> str:
    """Extract the API's error message from a GithubException."""
    if isinstance(e.data, dict) and e.data.get("message"):
        return str(e.data["message"])
    return str(e)


class GitHubRestHost(RepositoryHost):
    """GitHub implementation of RepositoryHost using the PyGithub library."""

    def __init__(
        self,
        token: str,
        owner: str,
        repo: str,
        base_url: str = "https://api.github.com",
        server_url: str = "https://github.com",
    ):
        """Initialize GitHub host.

        Args:
            token: Personal access token, App token or the workflow GITHUB_TOKEN
            owner: Repository owner (user or organization)
            repo: Repository name
            base_url: GitHub API base URL (for GitHub Enterprise)
            server_url: Web base URL used to build clone URLs
        """
        self.token = token.strip() if token else token
        self.owner = owner
        self.repo = repo
        # Normalize URLs by removing trailing slash
        self.base_url = base_url.rstrip("/")
        self.server_url = server_url.rstrip("/")
        self._client: Github | None = None
        self._repo: GHRepository | None = None

    async def connect(self) -> None:
        """Initialize the GitHub client. No request is made until first use."""
        self._client = Github(auth=Auth.Token(self.token), base_url=self.base_url)
        log.info(
            "github_connected",
            base_url=self.base_url,
            owner=self.owner,
            repo=self.repo,
        )

    async def disconnect(self) -> None:
        """Close GitHub client."""
        if self._client:
            await _run_sync(self._client.close)
            self._client = None
            self._repo = None

    async def _get_repo(self) -> GHRepository:
        if self._client is None:
            await self.connect()
        if self._repo is None:
            client = self._client
            self._repo = await _run_sync(lambda: client.get_repo(self.full_name))
        return self._repo

    async def verify_access(self) -> None:
        """Fetch the repository to confirm the token can see it."""
        log.info("verify_access", repository=self.full_name)

        try:
            await self._get_repo()
        except GithubException as e:
            log.error("github_verify_access_failed", repository=self.full_name, error=str(e))
            raise ExternalServiceError(_describe(e), status_code=e.status) from e

    async def get_ref(self, ref: str) -> bool:
        """Check whether ``ref`` (e.g. ``heads/main``) exists."""
        log.debug("get_ref", ref=ref)

        try:
            repo = await self._get_repo()
            await _run_sync(lambda: repo.get_git_ref(ref))
            return True

        except GithubException as e:
            if e.status == 404:
                log.debug("github_ref_not_found", ref=ref)
                return False
            log.error("github_get_ref_failed", ref=ref, error=str(e))
            raise ExternalServiceError(f"Failed to get ref {ref}: {_describe(e)}", status_code=e.status) from e

    async def list_open_pulls(self, head: str) -> list[PullRequest]:
        """List open pull requests filtered by ``owner:branch`` head."""
        log.info("list_open_pulls", head=head)

        try:
            repo = await self._get_repo()
            gh_pulls = await _run_sync(lambda: list(repo.get_pulls(state="open", head=head)))
            return [self._convert_pull_request(pr) for pr in gh_pulls]

        except GithubException as e:
            log.error("github_list_pulls_failed", head=head, error=str(e))
            raise ExternalServiceError(
                f"Failed to list pull requests for {head}: {_describe(e)}", status_code=e.status
            ) from e

    async def create_pull(self, title: str, head: str, base: str, body: str) -> PullRequest:
        """Create a pull request."""
        log.info("create_pull", title=title, head=head, base=base)

        try:
            repo = await self._get_repo()
            gh_pr = await _run_sync(
                lambda: repo.create_pull(
                    title=title,
                    body=body,
                    head=head,
                    base=base,
                )
            )
            return self._convert_pull_request(gh_pr)

        except GithubException as e:
            log.error("github_create_pr_failed", head=head, base=base, error=str(e))
            raise ExternalServiceError(
                f"Failed to create pull request from {head} to {base}: {_describe(e)}",
                status_code=e.status,
            ) from e

    async def update_pull(self, number: int, body: str) -> PullRequest:
        """Replace the body of pull request ``number``."""
        log.info("update_pull", number=number)

        try:
            repo = await self._get_repo()

            def _update() -> GHPullRequest:
                gh_pr = repo.get_pull(number)
                gh_pr.edit(body=body)
                return gh_pr

            gh_pr = await _run_sync(_update)
            return self._convert_pull_request(gh_pr)

        except GithubException as e:
            log.error("github_update_pr_failed", number=number, error=str(e))
            raise ExternalServiceError(
                f"Failed to update pull request #{number}: {_describe(e)}", status_code=e.status
            ) from e

    def clone_url(self) -> str:
        """HTTPS clone URL authenticated with the token as ``x-access-token``."""
        scheme, _, host = self.server_url.partition("://")
        if not host:
            scheme, host = "https", self.server_url
        return f"{scheme}://x-access-token:{self.token}@{host}/{self.full_name}.git"

    def _convert_pull_request(self, gh_pr: GHPullRequest) -> PullRequest:
        """Convert GitHub PullRequest to our PullRequest model."""
        return PullRequest(
            number=gh_pr.number,
            title=gh_pr.title,
            body=gh_pr.body or "",
            head=gh_pr.head.ref,
            base=gh_pr.base.ref,
            url=gh_pr.html_url,
        )
