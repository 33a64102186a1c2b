"""Shared pytest fixtures for prlabeler tests.

This module provides common fixtures for:
- Temporary rule files
- Sample GitHub webhook payloads
- In-memory fakes of the reconciler's GitHub operations
"""

from __future__ import annotations

import json
import logging
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING, Any

import pytest
import structlog
import yaml

from prlabeler.config import RuleSet
from prlabeler.github.events import PullRequest
from prlabeler.rules import Reconciler

if TYPE_CHECKING:
    from collections.abc import Callable, Generator


@pytest.fixture(autouse=True)
def reset_logging() -> Generator[None, None, None]:
    """Undo configure_logging() calls made by CLI commands under test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    structlog.reset_defaults()
    root.handlers[:] = handlers
    root.setLevel(level)


# ============================================================================
# Fakes
# ============================================================================


class FakeLabelApi:
    """In-memory stand-in for the rule file and label endpoints.

    Records every call. A successful replace becomes the current label set,
    so consecutive reconciliations see each other's writes.
    """

    def __init__(
        self,
        rules: dict[str, Any] | RuleSet | Exception | None = None,
        labels: list[str] | Exception | None = None,
        replace_error: Exception | None = None,
    ) -> None:
        if isinstance(rules, dict):
            rules = RuleSet.model_validate(rules)
        self.rules = rules if rules is not None else RuleSet.model_validate({})
        self.labels = labels if labels is not None else []
        self.replace_error = replace_error
        self.calls: list[tuple[Any, ...]] = []
        self.replaced: list[list[str]] = []

    async def fetch_config(self, owner: str, repo: str) -> RuleSet:
        self.calls.append(("fetch_config", owner, repo))
        if isinstance(self.rules, Exception):
            raise self.rules
        return self.rules

    async def get_current_labels(self, owner: str, repo: str, number: int) -> list[str]:
        self.calls.append(("get_current_labels", owner, repo, number))
        if isinstance(self.labels, Exception):
            raise self.labels
        return list(self.labels)

    async def replace_labels(
        self, owner: str, repo: str, number: int, labels: list[str]
    ) -> None:
        self.calls.append(("replace_labels", owner, repo, number, list(labels)))
        if self.replace_error is not None:
            raise self.replace_error
        self.labels = list(labels)
        self.replaced.append(list(labels))

    @property
    def call_names(self) -> list[str]:
        return [call[0] for call in self.calls]

    def reconciler(self, **kwargs: Any) -> Reconciler:
        return Reconciler(
            self.fetch_config,
            self.get_current_labels,
            self.replace_labels,
            **kwargs,
        )


@pytest.fixture
def make_api() -> Callable[..., FakeLabelApi]:
    """Factory fixture for FakeLabelApi instances."""
    return FakeLabelApi


# ============================================================================
# Rule File Fixtures
# ============================================================================


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files.

    Yields:
        Path to temporary directory (cleaned up after test)
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_rules() -> dict[str, Any]:
    """Return a rule file mapping with a few title rules."""
    return {
        "needs-docs": {"title": "docs?"},
        "breaking": {"title": "^[a-z]+!:"},
        "wip": {"title": "(?i)\\bwip\\b"},
    }


@pytest.fixture
def write_rules(temp_dir: Path) -> Callable[..., Path]:
    """Factory fixture to write rule files.

    Args:
        rules: Rule mapping, or raw YAML text
        filename: Name of the rule file (default: labeler.yml)

    Returns:
        Path to the written rule file
    """

    def _write(rules: dict[str, Any] | str, filename: str = "labeler.yml") -> Path:
        path = temp_dir / filename
        if isinstance(rules, str):
            path.write_text(rules, encoding="utf-8")
        else:
            with path.open("w") as f:
                yaml.safe_dump(rules, f)
        return path

    return _write


# ============================================================================
# GitHub Payload Fixtures
# ============================================================================


@pytest.fixture
def github_pr_response() -> dict[str, Any]:
    """Return a sample GitHub pull request object."""
    return {
        "id": 100,
        "number": 123,
        "title": "Fix docs typo",
        "state": "open",
        "draft": False,
        "user": {
            "login": "contributor",
            "id": 3,
        },
        "labels": [
            {"name": "bug", "color": "d73a4a"},
        ],
        "created_at": "2026-01-08T09:00:00Z",
        "updated_at": "2026-01-10T14:00:00Z",
        "body": "This PR fixes...",
        "html_url": "https://github.com/octocat/hello-world/pull/123",
        "head": {
            "ref": "fix-docs",
            "sha": "6dcb09b5b57875f334f61aebed695e2e4193db5e",
            "repo": {
                "name": "hello-world",
                "full_name": "contributor/hello-world",
                "owner": {"login": "contributor", "id": 3},
            },
        },
        "base": {
            "ref": "main",
            "sha": "e5bd3914e2e596debea16f433f57875b5b90bcd6",
            "repo": {
                "id": 1296269,
                "name": "hello-world",
                "full_name": "octocat/hello-world",
                "owner": {"login": "octocat", "id": 1},
            },
        },
        "merged": False,
        "mergeable": True,
    }


@pytest.fixture
def pull_request_payload(github_pr_response: dict[str, Any]) -> dict[str, Any]:
    """Return a sample pull_request webhook payload."""
    return {
        "action": "edited",
        "number": github_pr_response["number"],
        "pull_request": github_pr_response,
        "repository": github_pr_response["base"]["repo"],
        "sender": {"login": "contributor", "id": 3},
    }


@pytest.fixture
def pull_request_payload_bytes(pull_request_payload: dict[str, Any]) -> bytes:
    """Return the sample pull_request payload as raw JSON bytes."""
    return json.dumps(pull_request_payload).encode("utf-8")


@pytest.fixture
def make_pr(github_pr_response: dict[str, Any]) -> Callable[..., PullRequest]:
    """Factory fixture for PullRequest views with a given title."""

    def _make(title: str = "Fix docs typo", number: int = 123) -> PullRequest:
        data = {**github_pr_response, "title": title, "number": number}
        return PullRequest.model_validate(data)

    return _make
