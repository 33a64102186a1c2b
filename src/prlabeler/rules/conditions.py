"""Conditions that decide whether a labeling rule matches a pull request.

Each matcher kind from the rule file has exactly one Condition:
- TitleCondition: Match the PR title against a regular expression

Conditions return (matched, reason) and raise ConditionError subclasses
when a rule cannot be evaluated. Callers treat those as "skip this rule".
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, ClassVar

from prlabeler.config.schema import TitleMatcher

if TYPE_CHECKING:
    from prlabeler.config.schema import Matcher
    from prlabeler.github.events import PullRequest

logger = logging.getLogger(__name__)


class ConditionError(Exception):
    """Base class for rules that could not be evaluated."""


class InapplicableConditionError(ConditionError):
    """Raised when a matcher lacks the data its condition needs."""


class ConditionEvaluationError(ConditionError):
    """Raised when a matcher's data is present but unusable."""


class Condition(ABC):
    """Base class for rule conditions."""

    name: ClassVar[str]

    @abstractmethod
    def evaluate(self, pr: PullRequest, matcher: Matcher) -> tuple[bool, str]:
        """Check if a pull request satisfies a matcher.

        Args:
            pr: Pull request to check.
            matcher: Matcher from the rule file.

        Returns:
            Tuple of (matched, reason).

        Raises:
            InapplicableConditionError: If the matcher cannot apply.
            ConditionEvaluationError: If the matcher is malformed.
        """
        ...


class TitleCondition(Condition):
    """Condition matching the PR title against a regex.

    The pattern is searched for anywhere in the title; it is not anchored
    unless the pattern itself uses ^ or $.
    """

    name = "Title matches regex"

    def evaluate(self, pr: PullRequest, matcher: Matcher) -> tuple[bool, str]:
        """Search the PR title for the matcher's pattern."""
        if not isinstance(matcher, TitleMatcher):
            raise ConditionEvaluationError(
                f"Expected TitleMatcher, got {type(matcher).__name__}"
            )

        pattern = matcher.title
        if not pattern:
            raise InapplicableConditionError("Title matcher is not applicable")

        logger.debug("Matching `%s` against: `%s`", pattern, pr.title)

        try:
            compiled = re.compile(pattern)
        except re.error as e:
            raise ConditionEvaluationError(
                f"Invalid title pattern '{pattern}': {e}"
            ) from e

        if compiled.search(pr.title):
            return True, f"Title '{pr.title}' matches '{pattern}'"
        return False, f"Title '{pr.title}' doesn't match '{pattern}'"


# Condition classes keyed by matcher kind
CONDITIONS: dict[str, type[Condition]] = {
    "title": TitleCondition,
}


def get_condition(matcher: Matcher) -> Condition:
    """Get the condition that evaluates a matcher's kind.

    Args:
        matcher: Matcher to get a condition for.

    Returns:
        Condition instance.

    Raises:
        ValueError: If the matcher kind is unknown.
    """
    condition_class = CONDITIONS.get(matcher.kind)
    if condition_class is None:
        raise ValueError(f"Unknown matcher kind: {matcher.kind}")
    return condition_class()


def evaluate_matcher(pr: PullRequest, matcher: Matcher) -> tuple[bool, str]:
    """Evaluate a single matcher against a pull request.

    Convenience wrapper around get_condition + Condition.evaluate.
    """
    return get_condition(matcher).evaluate(pr, matcher)
