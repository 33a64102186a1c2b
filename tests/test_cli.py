"""Tests for the prlabeler CLI."""

from __future__ import annotations

import base64
import json
from typing import TYPE_CHECKING

import httpx
import pytest
from typer.testing import CliRunner

from prlabeler import __version__
from prlabeler.cli import ExitCode, app
from prlabeler.github import GitHubClient

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

runner = CliRunner()

RULES = "needs-docs:\n  title: docs\nwip:\n  title: WIP\n"


@pytest.fixture
def event_file(temp_dir: Path, pull_request_payload_bytes: bytes) -> Path:
    path = temp_dir / "event.json"
    path.write_bytes(pull_request_payload_bytes)
    return path


@pytest.fixture
def mock_github(monkeypatch: pytest.MonkeyPatch) -> Callable[..., list[httpx.Request]]:
    """Route the CLI's GitHubClient through a MockTransport.

    Returns a function taking (rule_file, labels, label_status) that
    installs the mock and returns the list of recorded requests.
    """

    def _install(
        rule_file: str | None = RULES,
        labels: list[str] | None = None,
        label_status: int = 200,
    ) -> list[httpx.Request]:
        requests: list[httpx.Request] = []
        current = list(labels or [])

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            if "/contents/" in request.url.path:
                if rule_file is None:
                    return httpx.Response(404, json={"message": "Not Found"})
                content = base64.b64encode(rule_file.encode()).decode()
                return httpx.Response(
                    200, json={"type": "file", "encoding": "base64", "content": content}
                )
            if request.method == "PUT":
                body = json.loads(request.content)
                return httpx.Response(200, json=[{"name": n} for n in body["labels"]])
            if label_status != 200:
                return httpx.Response(label_status, json={"message": "Server Error"})
            return httpx.Response(200, json=[{"name": n} for n in current])

        def client_factory(token: str | None, *, base_url: str) -> GitHubClient:
            return GitHubClient(
                token, base_url=base_url, transport=httpx.MockTransport(handler)
            )

        monkeypatch.setattr("prlabeler.cli.GitHubClient", client_factory)
        return requests

    return _install


class TestVersion:
    """Tests for --version."""

    def test_version(self) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"prlabeler {__version__}" in result.output


class TestHandle:
    """Tests for the handle command."""

    def test_ignores_other_events_without_token(
        self, monkeypatch: pytest.MonkeyPatch, temp_dir: Path
    ) -> None:
        monkeypatch.delenv("GITHUB_TOKEN", raising=False)
        result = runner.invoke(
            app,
            ["handle", "--event-name", "push", "--event-path", str(temp_dir / "none.json")],
        )

        assert result.exit_code == ExitCode.SUCCESS
        assert "Ignored 'push' event" in result.output

    def test_reads_github_actions_environment(self, temp_dir: Path) -> None:
        result = runner.invoke(
            app,
            ["handle"],
            env={
                "GITHUB_EVENT_NAME": "issues",
                "GITHUB_EVENT_PATH": str(temp_dir / "none.json"),
            },
        )

        assert result.exit_code == ExitCode.SUCCESS
        assert "Ignored 'issues' event" in result.output

    def test_missing_event_file(self, temp_dir: Path) -> None:
        result = runner.invoke(
            app,
            [
                "handle",
                "--event-name",
                "pull_request",
                "--event-path",
                str(temp_dir / "missing.json"),
                "--token",
                "test-token",
            ],
        )

        assert result.exit_code == ExitCode.EVENT_ERROR
        assert "Cannot read event payload" in result.output

    def test_malformed_payload(self, temp_dir: Path) -> None:
        path = temp_dir / "event.json"
        path.write_text('{"action": "opened"}')

        result = runner.invoke(
            app,
            [
                "handle",
                "--event-name",
                "pull_request",
                "--event-path",
                str(path),
                "--token",
                "test-token",
            ],
        )

        assert result.exit_code == ExitCode.EVENT_ERROR
        assert "Event error" in result.output

    def test_missing_token(self, monkeypatch: pytest.MonkeyPatch, event_file: Path) -> None:
        monkeypatch.delenv("GITHUB_TOKEN", raising=False)
        result = runner.invoke(
            app,
            ["handle", "--event-name", "pull_request", "--event-path", str(event_file)],
        )

        assert result.exit_code == ExitCode.AUTH_ERROR
        assert "GITHUB_TOKEN" in result.output

    def test_reconciles_labels(
        self,
        event_file: Path,
        mock_github: Callable[..., list[httpx.Request]],
    ) -> None:
        requests = mock_github(labels=["bug", "wip"])

        result = runner.invoke(
            app,
            [
                "handle",
                "--event-name",
                "pull_request",
                "--event-path",
                str(event_file),
                "--token",
                "test-token",
            ],
        )

        assert result.exit_code == ExitCode.SUCCESS, result.output
        assert "octocat/hello-world#123" in result.output
        assert "+ needs-docs" in result.output
        assert "- wip" in result.output
        put = [r for r in requests if r.method == "PUT"]
        assert json.loads(put[0].content) == {"labels": ["bug", "needs-docs"]}

    def test_dry_run(
        self,
        event_file: Path,
        mock_github: Callable[..., list[httpx.Request]],
    ) -> None:
        requests = mock_github()

        result = runner.invoke(
            app,
            [
                "handle",
                "--event-name",
                "pull_request_target",
                "--event-path",
                str(event_file),
                "--token",
                "test-token",
                "--dry-run",
            ],
        )

        assert result.exit_code == ExitCode.SUCCESS, result.output
        assert "Dry-run mode" in result.output
        assert all(r.method == "GET" for r in requests)

    def test_missing_rule_file(
        self,
        event_file: Path,
        mock_github: Callable[..., list[httpx.Request]],
    ) -> None:
        mock_github(rule_file=None)

        result = runner.invoke(
            app,
            [
                "handle",
                "--event-name",
                "pull_request",
                "--event-path",
                str(event_file),
                "--token",
                "test-token",
            ],
        )

        assert result.exit_code == ExitCode.CONFIG_ERROR
        assert "Rule file not found" in result.output

    def test_api_failure(
        self,
        event_file: Path,
        mock_github: Callable[..., list[httpx.Request]],
    ) -> None:
        requests = mock_github(label_status=500)

        result = runner.invoke(
            app,
            [
                "handle",
                "--event-name",
                "pull_request",
                "--event-path",
                str(event_file),
                "--token",
                "test-token",
            ],
        )

        assert result.exit_code == ExitCode.FATAL_ERROR
        assert "GitHub API error" in result.output
        assert not any(r.method == "PUT" for r in requests)


    def test_unexpected_error_is_fatal(
        self, monkeypatch: pytest.MonkeyPatch, event_file: Path
    ) -> None:
        async def broken(*_args: object, **_kwargs: object) -> None:
            raise KeyError("pull_request")

        monkeypatch.setattr("prlabeler.cli._handle_event", broken)

        result = runner.invoke(
            app,
            [
                "handle",
                "--event-name",
                "pull_request",
                "--event-path",
                str(event_file),
                "--token",
                "test-token",
            ],
        )

        assert result.exit_code == ExitCode.FATAL_ERROR
        assert "Unexpected error" in result.output


class TestValidate:
    """Tests for the validate command."""

    def test_valid_file(self, write_rules: Callable[..., Path]) -> None:
        path = write_rules(RULES)
        result = runner.invoke(app, ["validate", str(path)])

        assert result.exit_code == ExitCode.SUCCESS
        assert "Rule file is valid" in result.output
        assert "Rules: 2 (2 usable)" in result.output

    def test_verbose_lists_rules(self, write_rules: Callable[..., Path]) -> None:
        path = write_rules(RULES)
        result = runner.invoke(app, ["validate", str(path), "-v"])

        assert "needs-docs: title" in result.output
        assert "wip: title" in result.output

    def test_reports_unusable_rules(self, write_rules: Callable[..., Path]) -> None:
        path = write_rules("needs-docs:\n  title: ''\nbroken:\n  title: 'fix('\nok:\n  title: x\n")
        result = runner.invoke(app, ["validate", str(path)])

        assert result.exit_code == ExitCode.SUCCESS
        assert "Rules: 3 (1 usable)" in result.output
        assert "not applicable" in result.output
        assert "Invalid title pattern" in result.output

    def test_invalid_file(self, write_rules: Callable[..., Path]) -> None:
        path = write_rules("needs-docs: docs\n")
        result = runner.invoke(app, ["validate", str(path)])

        assert result.exit_code == ExitCode.CONFIG_ERROR
        assert "Rule validation failed" in result.output

    def test_missing_file(self, temp_dir: Path) -> None:
        result = runner.invoke(app, ["validate", str(temp_dir / "missing.yml")])

        assert result.exit_code == ExitCode.CONFIG_ERROR
        assert "Rule file not found" in result.output


class TestPreview:
    """Tests for the preview command."""

    def test_adds_matching_label(self, write_rules: Callable[..., Path]) -> None:
        path = write_rules(RULES)
        result = runner.invoke(app, ["preview", str(path), "--title", "Fix docs", "-l", "bug"])

        assert result.exit_code == ExitCode.SUCCESS
        assert "Desired labels: bug, needs-docs" in result.output
        assert "+ needs-docs" in result.output

    def test_removes_label(self, write_rules: Callable[..., Path]) -> None:
        path = write_rules(RULES)
        result = runner.invoke(
            app, ["preview", str(path), "-t", "Refactor", "-l", "wip", "-l", "bug"]
        )

        assert result.exit_code == ExitCode.SUCCESS
        assert "Desired labels: bug" in result.output
        assert "- wip" in result.output

    def test_no_changes(self, write_rules: Callable[..., Path]) -> None:
        path = write_rules(RULES)
        result = runner.invoke(app, ["preview", str(path), "-t", "Refactor"])

        assert "Desired labels: (none)" in result.output
        assert "No label changes" in result.output
