"""Logging module for prlabeler.

This module provides structured JSON logging with:
- structlog configuration for consistent log formatting
- Secret redaction for GITHUB_TOKEN and authorization values
- Structured log events for rule evaluation and reconciliation

Usage:
    from prlabeler.logging import configure_logging, get_logger

    configure_logging(verbose=True)
    log = get_logger(__name__)
"""

from prlabeler.logging.audit import (
    configure_logging,
    get_logger,
    log_event_ignored,
    log_reconciliation,
    log_rule_evaluated,
    redact_secrets,
)

__all__ = [
    "configure_logging",
    "get_logger",
    "log_event_ignored",
    "log_reconciliation",
    "log_rule_evaluated",
    "redact_secrets",
]
