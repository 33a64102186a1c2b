"""Webhook event handling.

Turns a raw webhook delivery into a reconciliation. Only pull request
events reach the Reconciler; every other category is ignored.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from prlabeler.config.loader import ConfigNotFoundError, parse_ruleset
from prlabeler.github.client import GitHubAPIError
from prlabeler.github.events import parse_webhook
from prlabeler.logging import log_event_ignored
from prlabeler.rules.reconciler import FetchConfig, Reconciler

if TYPE_CHECKING:
    import structlog

    from prlabeler.config.schema import RuleSet
    from prlabeler.github.client import GitHubClient
    from prlabeler.rules.schema import ReconcileResult

# Location of the rule file inside the target repository
DEFAULT_CONFIG_PATH = ".github/labeler.yml"


def make_config_fetcher(
    client: GitHubClient,
    config_path: str = DEFAULT_CONFIG_PATH,
) -> FetchConfig:
    """Build a fetch_config operation reading rules from the repository.

    Args:
        client: Open GitHub client.
        config_path: Rule file path inside the repository.

    Returns:
        Async callable (owner, repo) -> RuleSet.
    """

    async def fetch_config(owner: str, repo: str) -> RuleSet:
        location = f"{owner}/{repo}:{config_path}"
        try:
            content = await client.get_file_contents(owner, repo, config_path)
        except GitHubAPIError as e:
            if e.is_not_found:
                msg = f"Rule file not found: {location}"
                raise ConfigNotFoundError(msg, location) from e
            raise
        return parse_ruleset(content, location)

    return fetch_config


class EventHandler:
    """Entry point for webhook deliveries."""

    def __init__(self, reconciler: Reconciler) -> None:
        """Initialize handler.

        Args:
            reconciler: Reconciler run for each pull request event.
        """
        self._reconciler = reconciler

    @classmethod
    def from_client(
        cls,
        client: GitHubClient,
        *,
        config_path: str = DEFAULT_CONFIG_PATH,
        dry_run: bool = False,
        log: structlog.stdlib.BoundLogger | None = None,
    ) -> EventHandler:
        """Create a handler backed by the GitHub API.

        Args:
            client: Open GitHub client.
            config_path: Rule file path inside each repository.
            dry_run: If True, compute labels without replacing them.
            log: Optional structured logger for the reconciler.

        Returns:
            EventHandler instance.
        """

        async def replace_labels(
            owner: str, repo: str, number: int, labels: list[str]
        ) -> None:
            await client.replace_issue_labels(owner, repo, number, labels)

        reconciler = Reconciler(
            make_config_fetcher(client, config_path),
            client.get_issue_labels,
            replace_labels,
            log=log,
            dry_run=dry_run,
        )
        return cls(reconciler)

    @property
    def reconciler(self) -> Reconciler:
        """Get the reconciler."""
        return self._reconciler

    async def handle_event(
        self,
        event_name: str,
        payload: bytes,
    ) -> ReconcileResult | None:
        """Handle a webhook delivery.

        Args:
            event_name: Webhook category (X-GitHub-Event header value).
            payload: Raw JSON body of the delivery.

        Returns:
            ReconcileResult for pull request events, None otherwise.

        Raises:
            EventParseError: If a pull request payload is malformed.
        """
        event = parse_webhook(event_name, payload)
        if event is None:
            log_event_ignored(event_name, "not a pull request event")
            return None

        return await self._reconciler.reconcile(event.pull_request)
