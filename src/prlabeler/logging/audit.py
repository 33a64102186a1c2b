"""Structured JSON logging and reconciliation audit trail.

This module provides:
- structlog configuration for JSON logging to stderr
- Secret redaction for sensitive values (GITHUB_TOKEN, auth headers)
- Structured log events for rule evaluation and reconciliation decisions
"""

from __future__ import annotations

import logging
import re
import sys
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from collections.abc import Callable

    from structlog.typing import EventDict, WrappedLogger

    from prlabeler.rules.schema import ReconcileResult

# Patterns for secret redaction
SECRET_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    # GitHub tokens (ghp_, gho_, ghu_, ghs_, ghr_ prefixes)
    (re.compile(r"(gh[pousr]_[A-Za-z0-9_]{36,})"), "[REDACTED_GITHUB_TOKEN]"),
    # Fine-grained personal access tokens
    (re.compile(r"(github_pat_[A-Za-z0-9_]{22,})"), "[REDACTED_GITHUB_TOKEN]"),
    (re.compile(r"(token[=:]\s*['\"]?)([A-Za-z0-9_-]{20,})"), r"\1[REDACTED]"),
    (re.compile(r"(Bearer\s+)([A-Za-z0-9._-]+)", re.IGNORECASE), r"\1[REDACTED]"),
    (re.compile(r"(authorization[=:]\s*['\"]?)([^\s'\"]+)", re.IGNORECASE), r"\1[REDACTED]"),
]


def redact_secrets(value: Any) -> Any:
    """Redact sensitive values from a string, dict, or list.

    Args:
        value: Value to redact. Can be str, dict, list, or other.

    Returns:
        Value with sensitive data redacted
    """
    if isinstance(value, str):
        result = value
        for pattern, replacement in SECRET_PATTERNS:
            result = pattern.sub(replacement, result)
        return result

    if isinstance(value, dict):
        return {k: redact_secrets(v) for k, v in value.items()}

    if isinstance(value, list):
        return [redact_secrets(item) for item in value]

    return value


def _redact_processor(
    _logger: WrappedLogger,
    _method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """structlog processor that redacts secrets from log events."""
    return redact_secrets(event_dict)


def configure_logging(
    verbose: bool = False,
    json_output: bool = True,
) -> None:
    """Configure structured logging for the application.

    Sets up structlog with JSON formatting to stderr, including:
    - Timestamp in ISO format
    - Log level
    - Secret redaction
    - Exception formatting

    Args:
        verbose: If True, enable DEBUG level. Otherwise INFO.
        json_output: If True, output JSON. Otherwise use console format.
    """
    level = logging.DEBUG if verbose else logging.INFO

    # Library modules log through the standard library
    logging.basicConfig(
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
        level=level,
    )

    processors: list[Callable[..., Any]] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        _redact_processor,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if json_output:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a configured structlog logger.

    Args:
        name: Optional logger name (typically __name__)

    Returns:
        Bound structlog logger
    """
    return structlog.get_logger(name)


def log_event_ignored(event_name: str, reason: str) -> None:
    """Log a webhook delivery that does not reach the reconciler.

    Args:
        event_name: Webhook category
        reason: Why the event was ignored
    """
    log = get_logger("prlabeler.events")
    log.info("event_ignored", event_name=event_name, reason=reason)


def log_rule_evaluated(
    log: structlog.stdlib.BoundLogger,
    label: str,
    condition: str,
    matched: bool | None,
    reason: str,
) -> None:
    """Log the outcome of a single labeling rule.

    Matches are logged at info, skips at warning, misses at debug.

    Args:
        log: Logger bound to the reconciliation context
        label: Label governed by the rule
        condition: Human-readable condition name
        matched: Result, or None if the rule was skipped
        reason: Explanation of the outcome
    """
    if matched is None:
        log.warning("rule_skipped", label=label, condition=condition, reason=reason)
    elif matched:
        log.info("rule_matched", label=label, condition=condition, reason=reason)
    else:
        log.debug("rule_not_matched", label=label, condition=condition, reason=reason)


def log_reconciliation(
    log: structlog.stdlib.BoundLogger,
    result: ReconcileResult,
) -> None:
    """Log the full decision trail for one pull request.

    Args:
        log: Logger bound to the reconciliation context
        result: Computed reconciliation
    """
    log.info(
        "reconciliation",
        entity=result.entity_id,
        current_labels=result.current_labels,
        desired_labels=result.desired_labels,
        added=result.added,
        removed=result.removed,
        rules_evaluated=len(result.evaluations),
        rules_skipped=result.skipped_rules,
        applied=result.applied,
    )
