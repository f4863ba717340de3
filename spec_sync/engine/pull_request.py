"""
Pull request reconciliation.

After a push, makes sure exactly one open pull request carries the working
branch into its base: an existing one gets a refreshed body, otherwise a new
one is opened. Duplicates are not merged; the first open pull request the
host returns for the head is the one that gets updated.
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime

import structlog

from spec_sync.models.domain import PullRequest, SyncOutcome
from spec_sync.providers.base import RepositoryHost

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class PullRequestTemplate:
    """Fixed pull request text for one run mode.

    ``title`` may contain a ``{date}`` placeholder, filled with the run time.
    """

    title: str
    body: str

    def render_title(self, now: datetime) -> str:
        return self.title.format(date=now.strftime("%Y-%m-%dT%H-%M-%SZ"))

    def render_body(self, now: datetime, add_timestamp: bool = True) -> str:
        if not add_timestamp:
            return self.body
        stamp = now.isoformat(timespec="milliseconds").replace("+00:00", "Z")
        return f"{self.body}\nUpdated: {stamp}"


SYNC_TEMPLATE = PullRequestTemplate(
    title="chore: Update OpenAPI specifications ({date})",
    body="Update OpenAPI specifications based on changes in the source repository.",
)

GENERATION_TEMPLATE = PullRequestTemplate(
    title="chore: Update API specifications with fern api update ({date})",
    body="Update API specifications by running fern api update.",
)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class PullRequestReconciler:
    """Create or update the single open pull request for a working branch.

    Attributes:
        host: Repository host the pull request lives on
        template: Title/body text for the current run mode
        add_timestamp: Whether bodies carry an ``Updated:`` line
    """

    def __init__(
        self,
        host: RepositoryHost,
        template: PullRequestTemplate,
        add_timestamp: bool = True,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.host = host
        self.template = template
        self.add_timestamp = add_timestamp
        self._clock = clock

    async def find_open(self, branch: str) -> PullRequest | None:
        """Return the first open pull request whose head is ``branch``."""
        pulls = await self.host.list_open_pulls(head=f"{self.host.owner}:{branch}")
        if len(pulls) > 1:
            log.warning(
                "multiple_open_pull_requests",
                branch=branch,
                numbers=[pr.number for pr in pulls],
                using=pulls[0].number,
            )
        return pulls[0] if pulls else None

    async def reconcile(self, branch: str, base: str) -> SyncOutcome:
        """Update the open pull request for ``branch`` or open a new one.

        Args:
            branch: Head branch that was just pushed
            base: Branch a new pull request targets

        Returns:
            PULL_REQUEST_UPDATED or PULL_REQUEST_CREATED

        Raises:
            ExternalServiceError: If any host call fails. Nothing is rolled back.
        """
        now = self._clock()
        body = self.template.render_body(now, self.add_timestamp)

        existing = await self.find_open(branch)
        if existing is not None:
            log.info("updating_pull_request", number=existing.number, branch=branch)
            updated = await self.host.update_pull(existing.number, body)
            log.info("pull_request_updated", number=updated.number, url=updated.url)
            return SyncOutcome.PULL_REQUEST_UPDATED

        log.info("creating_pull_request", head=branch, base=base)
        created = await self.host.create_pull(
            title=self.template.render_title(now),
            head=branch,
            base=base,
            body=body,
        )
        log.info("pull_request_created", number=created.number, url=created.url)
        return SyncOutcome.PULL_REQUEST_CREATED
