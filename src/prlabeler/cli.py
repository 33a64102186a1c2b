"""CLI entry point for prlabeler.

This module provides the Typer-based CLI with commands:
- prlabeler handle: Reconcile labels for one webhook delivery
- prlabeler validate: Validate a local rule file
- prlabeler preview: Show the labels a rule file would produce for a title

`handle` reads its inputs from the GitHub Actions runtime by default
(GITHUB_EVENT_NAME, GITHUB_EVENT_PATH, GITHUB_TOKEN, GITHUB_API_URL).

Exit codes:
- 0: Success (including ignored events)
- 1: Rule file error
- 2: Authentication error
- 3: Event payload error
- 4: Fatal error (GitHub API or unexpected)
"""

from __future__ import annotations

import asyncio
from enum import IntEnum
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import typer

from prlabeler import __version__
from prlabeler.config import load_ruleset
from prlabeler.config.loader import ConfigError
from prlabeler.github import (
    DEFAULT_BASE_URL,
    AuthenticationError,
    EventParseError,
    GitHubAPIError,
    GitHubClient,
    is_pull_request_event,
)
from prlabeler.github.events import BranchRef, PullRequest, Repository, User
from prlabeler.handler import DEFAULT_CONFIG_PATH, EventHandler
from prlabeler.logging import configure_logging, get_logger, log_event_ignored
from prlabeler.rules import Reconciler, find_matches

if TYPE_CHECKING:
    import structlog

    from prlabeler.config.schema import RuleSet
    from prlabeler.rules.schema import ReconcileResult


class ExitCode(IntEnum):
    """CLI exit codes."""

    SUCCESS = 0
    CONFIG_ERROR = 1
    AUTH_ERROR = 2
    EVENT_ERROR = 3
    FATAL_ERROR = 4


app = typer.Typer(
    name="prlabeler",
    help="Keep pull request labels in sync with per-repository title rules.",
    add_completion=False,
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"prlabeler {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """prlabeler - label pull requests from title rules."""


def _fail(message: str, code: ExitCode) -> typer.Exit:
    typer.echo(typer.style(f"✗ {message}", fg=typer.colors.RED), err=True)
    return typer.Exit(code)


def _local_pull_request(title: str) -> PullRequest:
    """Build a stand-in pull request for offline evaluation."""
    return PullRequest(
        number=0,
        title=title,
        base=BranchRef(repo=Repository(name="local", owner=User(login="local"))),
    )


def _echo_result(result: ReconcileResult) -> None:
    """Print a reconciliation summary."""
    typer.echo(typer.style(result.entity_id, bold=True))
    typer.echo(f"  Desired labels: {', '.join(result.desired_labels) or '(none)'}")
    if result.added:
        typer.echo(typer.style(f"  + {', '.join(result.added)}", fg=typer.colors.GREEN))
    if result.removed:
        typer.echo(typer.style(f"  - {', '.join(result.removed)}", fg=typer.colors.RED))
    if not result.changed:
        typer.echo("  No label changes")
    for label in result.skipped_rules:
        typer.echo(typer.style(f"  ! rule '{label}' skipped", fg=typer.colors.YELLOW))


@app.command()
def handle(
    event_name: Annotated[
        str,
        typer.Option(
            "--event-name",
            envvar="GITHUB_EVENT_NAME",
            help="Webhook category, e.g. pull_request.",
        ),
    ],
    event_path: Annotated[
        Path,
        typer.Option(
            "--event-path",
            envvar="GITHUB_EVENT_PATH",
            help="Path to the JSON webhook payload.",
        ),
    ],
    config_path: Annotated[
        str,
        typer.Option(
            "--config-path",
            envvar="LABELER_CONFIG_PATH",
            help="Rule file path inside the target repository.",
        ),
    ] = DEFAULT_CONFIG_PATH,
    token: Annotated[
        str | None,
        typer.Option(
            "--token",
            envvar="GITHUB_TOKEN",
            help="GitHub token with pull request write access.",
            show_default=False,
        ),
    ] = None,
    api_url: Annotated[
        str,
        typer.Option(
            "--api-url",
            envvar="GITHUB_API_URL",
            help="GitHub API base URL.",
        ),
    ] = DEFAULT_BASE_URL,
    dry_run: Annotated[
        bool,
        typer.Option(
            "--dry-run",
            help="Compute labels without replacing them.",
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable debug logging.",
        ),
    ] = False,
) -> None:
    """Reconcile pull request labels for one webhook delivery.

    Events other than pull_request and pull_request_target are ignored
    and exit successfully.
    """
    configure_logging(verbose=verbose)
    log = get_logger("prlabeler.cli")

    if not is_pull_request_event(event_name):
        log_event_ignored(event_name, "not a pull request event")
        typer.echo(f"Ignored '{event_name}' event")
        raise typer.Exit(ExitCode.SUCCESS)

    try:
        payload = event_path.read_bytes()
    except OSError as e:
        raise _fail(f"Cannot read event payload: {e}", ExitCode.EVENT_ERROR) from e

    if dry_run:
        typer.echo(
            typer.style(
                "🔍 Dry-run mode: labels will be computed but not replaced",
                fg=typer.colors.CYAN,
            )
        )

    try:
        result = asyncio.run(
            _handle_event(
                event_name,
                payload,
                token=token,
                api_url=api_url,
                config_path=config_path,
                dry_run=dry_run,
                log=log,
            )
        )
    except AuthenticationError as e:
        raise _fail(f"Authentication error: {e}", ExitCode.AUTH_ERROR) from e
    except EventParseError as e:
        raise _fail(f"Event error: {e}", ExitCode.EVENT_ERROR) from e
    except ConfigError as e:
        raise _fail(f"Rule file error: {e}", ExitCode.CONFIG_ERROR) from e
    except GitHubAPIError as e:
        log.exception("GitHub API request failed", status_code=e.status_code)
        raise _fail(f"GitHub API error: {e}", ExitCode.FATAL_ERROR) from e
    except Exception as e:
        log.exception("Event handling failed")
        raise _fail(f"Unexpected error: {e}", ExitCode.FATAL_ERROR) from e

    if result is None:
        typer.echo(f"Ignored '{event_name}' event")
        raise typer.Exit(ExitCode.SUCCESS)

    _echo_result(result)
    raise typer.Exit(ExitCode.SUCCESS)


async def _handle_event(
    event_name: str,
    payload: bytes,
    *,
    token: str | None,
    api_url: str,
    config_path: str,
    dry_run: bool,
    log: structlog.stdlib.BoundLogger,
) -> ReconcileResult | None:
    """Run one delivery through an API-backed EventHandler.

    Args:
        event_name: Webhook category
        payload: Raw webhook body
        token: GitHub token (None reads GITHUB_TOKEN)
        api_url: GitHub API base URL
        config_path: Rule file path inside the repository
        dry_run: Whether to skip the replace call
        log: Logger instance

    Returns:
        ReconcileResult, or None if the event was ignored
    """
    async with GitHubClient(token, base_url=api_url) as client:
        log.debug("Created GitHub client", client=repr(client))
        handler = EventHandler.from_client(
            client,
            config_path=config_path,
            dry_run=dry_run,
            log=log,
        )
        return await handler.handle_event(event_name, payload)


def _load_rules_or_exit(config: Path) -> RuleSet:
    try:
        return load_ruleset(config)
    except ConfigError as e:
        raise _fail(str(e), ExitCode.CONFIG_ERROR) from e


@app.command()
def validate(
    config: Annotated[
        Path,
        typer.Argument(help="Path to a rule file (e.g. .github/labeler.yml)."),
    ],
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="List every rule.",
        ),
    ] = False,
) -> None:
    """Validate a rule file without contacting GitHub.

    Loads the file and checks it against the schema. Rules that would
    always be skipped (empty or invalid patterns) are reported as
    warnings but do not fail validation.
    """
    configure_logging(verbose=verbose, json_output=False)

    rules = _load_rules_or_exit(config)
    typer.echo(typer.style("✓ Rule file is valid", fg=typer.colors.GREEN))

    _, evaluations = find_matches(_local_pull_request(""), rules)
    skipped = {e.label: e.reason for e in evaluations if e.skipped}

    typer.echo(f"  Rules: {len(rules)} ({len(rules) - len(skipped)} usable)")

    if verbose:
        for label, matcher in rules.items():
            typer.echo(f"  - {label}: {matcher.kind} {matcher.model_dump(exclude={'kind'})}")

    for label, reason in skipped.items():
        typer.echo(typer.style(f"  ! {label}: {reason}", fg=typer.colors.YELLOW))

    raise typer.Exit(ExitCode.SUCCESS)


@app.command()
def preview(
    config: Annotated[
        Path,
        typer.Argument(help="Path to a rule file."),
    ],
    title: Annotated[
        str,
        typer.Option(
            "--title",
            "-t",
            help="Pull request title to evaluate.",
        ),
    ],
    label: Annotated[
        list[str] | None,
        typer.Option(
            "--label",
            "-l",
            help="Label currently on the pull request (repeatable).",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable debug logging.",
        ),
    ] = False,
) -> None:
    """Show the labels a rule file produces for a title, offline."""
    configure_logging(verbose=verbose, json_output=False)
    log = get_logger("prlabeler.cli")

    rules = _load_rules_or_exit(config)
    current = list(label or [])

    async def fetch_config(_owner: str, _repo: str) -> RuleSet:
        return rules

    async def get_current_labels(_owner: str, _repo: str, _number: int) -> list[str]:
        return current

    async def replace_labels(
        _owner: str, _repo: str, _number: int, _labels: list[str]
    ) -> None:
        return None

    reconciler = Reconciler(
        fetch_config,
        get_current_labels,
        replace_labels,
        log=log,
        dry_run=True,
    )
    result = asyncio.run(reconciler.reconcile(_local_pull_request(title)))

    _echo_result(result)
    raise typer.Exit(ExitCode.SUCCESS)
