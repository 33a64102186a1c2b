"""Rule evaluation and reconciliation result models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class RuleEvaluation(BaseModel):
    """Outcome of evaluating one labeling rule."""

    model_config = ConfigDict(frozen=True)

    label: str = Field(..., description="Label governed by the rule")
    condition: str = Field(..., description="Human-readable condition name")
    matched: bool | None = Field(
        default=None,
        description="Evaluation result, or None if the rule was skipped",
    )
    reason: str = Field(..., description="Why the rule matched, failed or was skipped")

    @property
    def skipped(self) -> bool:
        """Check if the rule was skipped."""
        return self.matched is None


class ReconcileResult(BaseModel):
    """Label set computed (and possibly applied) for a pull request."""

    model_config = ConfigDict(frozen=True)

    owner: str = Field(..., description="Base repository owner")
    repo: str = Field(..., description="Base repository name")
    number: int = Field(..., description="Pull request number")
    current_labels: list[str] = Field(
        default_factory=list, description="Labels on the PR before reconciliation"
    )
    intentions: dict[str, bool] = Field(
        default_factory=dict, description="Whether each label should be present"
    )
    desired_labels: list[str] = Field(
        default_factory=list, description="Labels the PR should end up with"
    )
    evaluations: list[RuleEvaluation] = Field(
        default_factory=list, description="Per-rule outcomes"
    )
    applied: bool = Field(default=False, description="Whether the label set was written")

    @property
    def added(self) -> list[str]:
        """Get labels that were not on the PR before."""
        current = set(self.current_labels)
        return [label for label in self.desired_labels if label not in current]

    @property
    def removed(self) -> list[str]:
        """Get labels dropped from the PR."""
        desired = set(self.desired_labels)
        return sorted(label for label in set(self.current_labels) if label not in desired)

    @property
    def changed(self) -> bool:
        """Check if the label set differs from the current one."""
        return set(self.desired_labels) != set(self.current_labels)

    @property
    def skipped_rules(self) -> list[str]:
        """Get labels whose rules were skipped."""
        return [e.label for e in self.evaluations if e.skipped]

    @property
    def entity_id(self) -> str:
        """Get the PR identifier (owner/repo#number)."""
        return f"{self.owner}/{self.repo}#{self.number}"
