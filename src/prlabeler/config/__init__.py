"""Rule file schema and loading.

Usage:
    from prlabeler.config import load_ruleset, parse_ruleset

    rules = load_ruleset(".github/labeler.yml")
    rules = parse_ruleset(yaml_text)
"""

from prlabeler.config.loader import (
    ConfigError,
    ConfigNotFoundError,
    ConfigValidationError,
    load_ruleset,
    parse_ruleset,
)
from prlabeler.config.schema import MATCHER_KINDS, Matcher, RuleSet, TitleMatcher

__all__ = [
    "MATCHER_KINDS",
    "ConfigError",
    "ConfigNotFoundError",
    "ConfigValidationError",
    "Matcher",
    "RuleSet",
    "TitleMatcher",
    "load_ruleset",
    "parse_ruleset",
]
