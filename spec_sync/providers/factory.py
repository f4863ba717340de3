"""Factory for creating repository host instances from settings."""

import structlog

from spec_sync.config.settings import SyncSettings
from spec_sync.providers.base import RepositoryHost
from spec_sync.providers.github_rest import GitHubRestHost

log = structlog.get_logger(__name__)


def create_repository_host(settings: SyncSettings) -> RepositoryHost:
    """Create the host for the repository the run delivers to.

    Mapping sync targets ``settings.repository``; generation sync targets the
    repository the workflow itself runs in.

    Args:
        settings: Run settings

    Returns:
        RepositoryHost bound to the delivery repository

    Raises:
        ConfigurationError: If the token or the repository is missing

    Example:
        >>> host = create_repository_host(SyncSettings(repository="acme/docs", token="..."))
        >>> host.full_name
        'acme/docs'
    """
    token = settings.require_token()
    if settings.update_from_source:
        owner, repo = settings.require_context_repository()
    else:
        owner, repo = settings.require_repository()

    log.info("creating_github_host", base_url=settings.context.api_url, repository=f"{owner}/{repo}")
    return GitHubRestHost(
        token=token,
        owner=owner,
        repo=repo,
        base_url=settings.context.api_url,
        server_url=settings.context.server_url,
    )
