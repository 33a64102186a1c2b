"""Pydantic schema models for labeler rule files.

A rule file maps label names to matchers:

    needs-docs:
      title: "docs?"
    breaking:
      title: "^(feat|fix)!:"

Each matcher is a tagged variant with a ``kind`` discriminator. The YAML
shape omits ``kind``; it is inferred from the keys present in the matcher.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, RootModel, field_validator, model_validator


class TitleMatcher(BaseModel):
    """Matcher that applies a label when the PR title matches a regex.

    Attributes:
        kind: Always 'title'
        title: Regular expression searched for anywhere in the title.
            Empty means the rule is inapplicable.
    """

    model_config = ConfigDict(extra="ignore", frozen=True, coerce_numbers_to_str=True)

    kind: Literal["title"] = "title"
    title: str = ""

    @field_validator("title", mode="before")
    @classmethod
    def null_title_is_empty(cls, v: Any) -> Any:
        """Read a bare `title:` key as an empty pattern."""
        return "" if v is None else v


# Union of all matcher variants, discriminated on ``kind``
Matcher = TitleMatcher

# Matcher models keyed by kind; the key doubles as the YAML field that
# identifies the kind when ``kind`` is omitted
MATCHER_KINDS: dict[str, type[BaseModel]] = {
    "title": TitleMatcher,
}

DEFAULT_MATCHER_KIND = "title"


def infer_matcher_kind(data: dict[str, Any]) -> str:
    """Infer a matcher's kind from its keys.

    Args:
        data: Raw matcher mapping from the rule file.

    Returns:
        Explicit ``kind`` if given, else the first key naming a known kind,
        else the default kind.
    """
    if "kind" in data:
        return str(data["kind"])
    for key in data:
        if key in MATCHER_KINDS:
            return key
    return DEFAULT_MATCHER_KIND


class RuleSet(RootModel[dict[str, Matcher]]):
    """Mapping from label name to the matcher governing it."""

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="before")
    @classmethod
    def tag_matchers(cls, data: Any) -> Any:
        """Stringify label keys and fill in missing ``kind`` tags."""
        if not isinstance(data, dict):
            return data

        tagged: dict[str, Any] = {}
        for label, matcher in data.items():
            if matcher is None:
                matcher = {}
            if isinstance(matcher, dict):
                matcher = {**matcher, "kind": infer_matcher_kind(matcher)}
            tagged[str(label)] = matcher
        return tagged

    def __iter__(self) -> Iterator[str]:  # type: ignore[override]
        return iter(self.root)

    def __len__(self) -> int:
        return len(self.root)

    def __getitem__(self, label: str) -> Matcher:
        return self.root[label]

    def items(self) -> Iterator[tuple[str, Matcher]]:
        """Iterate over (label, matcher) pairs."""
        return iter(self.root.items())

    @property
    def labels(self) -> list[str]:
        """Get the labels governed by this rule set."""
        return list(self.root)
