"""Rule file loading and validation.

This module provides:
- YAML parsing of rule files with Pydantic validation
- Loading a rule file from the local filesystem
- Typed errors for missing, unreadable or invalid rule files

Where the rule file comes from (a local path, the target repository) is
up to the caller; this module only turns text into a RuleSet.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from prlabeler.config.schema import RuleSet


class ConfigError(Exception):
    """Raised when rule file loading or validation fails."""

    def __init__(self, message: str, path: Path | str | None = None) -> None:
        """Initialize ConfigError with message and optional path.

        Args:
            message: Error description
            path: Location of the rule file that caused the error
        """
        self.path = path
        super().__init__(message)


class ConfigNotFoundError(ConfigError):
    """Raised when the rule file does not exist."""


class ConfigValidationError(ConfigError):
    """Raised when rule file validation fails."""

    def __init__(
        self,
        message: str,
        path: Path | str | None = None,
        validation_errors: list[dict[str, Any]] | None = None,
    ) -> None:
        """Initialize ConfigValidationError.

        Args:
            message: Error description
            path: Location of the rule file
            validation_errors: List of Pydantic validation error dicts
        """
        self.validation_errors = validation_errors or []
        super().__init__(message, path)


def parse_yaml(content: str, path: Path | str | None = None) -> dict[str, Any]:
    """Parse rule file YAML into a mapping.

    Args:
        content: YAML text
        path: Location of the text, for error reporting

    Returns:
        Parsed YAML as a dictionary (empty for an empty document)

    Raises:
        ConfigError: If the YAML is malformed or not a mapping
    """
    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        msg = f"Invalid YAML syntax: {e}"
        raise ConfigError(msg, path) from e

    if data is None:
        return {}

    if not isinstance(data, dict):
        msg = "Rule file must contain a YAML mapping of label names to matchers"
        raise ConfigValidationError(msg, path)

    return data


def parse_ruleset(content: str, path: Path | str | None = None) -> RuleSet:
    """Parse and validate a rule file.

    Args:
        content: YAML text of the rule file
        path: Location of the text, for error reporting

    Returns:
        Validated RuleSet

    Raises:
        ConfigError: If the YAML cannot be parsed
        ConfigValidationError: If the rules fail schema validation

    Example:
        >>> rules = parse_ruleset("needs-docs:\\n  title: docs\\n")
        >>> rules["needs-docs"].title
        'docs'
    """
    raw_rules = parse_yaml(content, path)

    try:
        return RuleSet.model_validate(raw_rules)
    except ValidationError as e:
        errors = e.errors()
        error_msgs: list[str] = []
        for err in errors:
            loc = ".".join(str(loc) for loc in err["loc"])
            error_msgs.append(f"  - {loc}: {err['msg']}")

        message = (
            f"Rule validation failed ({len(errors)} error(s)):\n"
            + "\n".join(error_msgs)
        )
        raise ConfigValidationError(
            message,
            path=path,
            validation_errors=[dict(err) for err in errors],
        ) from e


def load_ruleset(path: str | Path) -> RuleSet:
    """Load and validate a rule file from disk.

    Args:
        path: Path to the YAML rule file

    Returns:
        Validated RuleSet

    Raises:
        ConfigNotFoundError: If the file does not exist
        ConfigError: If the file cannot be read or parsed
        ConfigValidationError: If the rules fail schema validation
    """
    rule_path = Path(path).expanduser()
    if not rule_path.exists():
        msg = f"Rule file not found: {rule_path}"
        raise ConfigNotFoundError(msg, rule_path)

    try:
        content = rule_path.read_text(encoding="utf-8")
    except OSError as e:
        msg = f"Cannot read rule file: {e}"
        raise ConfigError(msg, rule_path) from e

    return parse_ruleset(content, rule_path)
