"""GitHub API client and webhook event parsing."""

from prlabeler.github.auth import AuthenticationError, get_github_token
from prlabeler.github.client import (
    DEFAULT_BASE_URL,
    GitHubAPIError,
    GitHubClient,
    RateLimitError,
)
from prlabeler.github.events import (
    PULL_REQUEST_EVENTS,
    EventParseError,
    PullRequest,
    PullRequestEvent,
    is_pull_request_event,
    parse_webhook,
)

__all__ = [
    "DEFAULT_BASE_URL",
    "PULL_REQUEST_EVENTS",
    "AuthenticationError",
    "EventParseError",
    "GitHubAPIError",
    "GitHubClient",
    "PullRequest",
    "PullRequestEvent",
    "RateLimitError",
    "get_github_token",
    "is_pull_request_event",
    "parse_webhook",
]
