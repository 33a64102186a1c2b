"""GitHub webhook event models and payload parsing."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, ValidationError

# Webhook categories that carry a pull request payload
PULL_REQUEST_EVENTS = frozenset({"pull_request", "pull_request_target"})


class EventParseError(Exception):
    """Raised when a pull request webhook payload cannot be parsed."""

    def __init__(self, message: str, *, event_name: str | None = None) -> None:
        """Initialize the error.

        Args:
            message: Error description.
            event_name: Webhook category being parsed.
        """
        super().__init__(message)
        self.event_name = event_name


class _GitHubModel(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class User(_GitHubModel):
    """GitHub account reference."""

    login: str


class Repository(_GitHubModel):
    """GitHub repository reference."""

    name: str
    owner: User
    full_name: str | None = None

    @property
    def slug(self) -> str:
        """Get the repository as 'owner/name'."""
        return self.full_name or f"{self.owner.login}/{self.name}"


class BranchRef(_GitHubModel):
    """Head or base of a pull request."""

    ref: str | None = None
    sha: str | None = None
    repo: Repository


class Label(_GitHubModel):
    """Label attached to an issue or pull request."""

    name: str


class PullRequest(_GitHubModel):
    """Read-only view of the pull request that triggered an event."""

    number: int
    title: str = ""
    state: str | None = None
    html_url: str | None = None
    user: User | None = None
    base: BranchRef
    labels: list[Label] = Field(default_factory=list)

    @property
    def owner(self) -> str:
        """Get the base repository owner login."""
        return self.base.repo.owner.login

    @property
    def repo_name(self) -> str:
        """Get the base repository name."""
        return self.base.repo.name

    @property
    def author(self) -> str | None:
        """Get the login of the PR author, if known."""
        return self.user.login if self.user else None

    @property
    def label_names(self) -> list[str]:
        """Get label names as delivered in the payload."""
        return [label.name for label in self.labels]

    @property
    def entity_id(self) -> str:
        """Get a unique identifier for the PR (owner/repo#number)."""
        return f"{self.base.repo.slug}#{self.number}"


class PullRequestEvent(_GitHubModel):
    """Webhook payload for pull_request and pull_request_target events."""

    action: str | None = None
    number: int | None = None
    pull_request: PullRequest
    sender: User | None = None


def is_pull_request_event(event_name: str) -> bool:
    """Check whether a webhook category carries a pull request."""
    return event_name in PULL_REQUEST_EVENTS


def parse_webhook(event_name: str, payload: bytes) -> PullRequestEvent | None:
    """Parse a raw webhook delivery.

    Only pull-request categories are decoded. Anything else is ignored
    without looking at the payload.

    Args:
        event_name: Webhook category (X-GitHub-Event header value).
        payload: Raw JSON body of the delivery.

    Returns:
        Parsed PullRequestEvent, or None for other categories.

    Raises:
        EventParseError: If a pull request payload is malformed.
    """
    if not is_pull_request_event(event_name):
        return None

    try:
        return PullRequestEvent.model_validate_json(payload)
    except ValidationError as e:
        raise EventParseError(
            f"Invalid {event_name} payload: {e.error_count()} error(s): "
            + "; ".join(
                f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}"
                for err in e.errors()
            ),
            event_name=event_name,
        ) from e
