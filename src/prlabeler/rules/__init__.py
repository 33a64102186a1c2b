"""Rule conditions and label reconciliation."""

from prlabeler.rules.conditions import (
    CONDITIONS,
    Condition,
    ConditionError,
    ConditionEvaluationError,
    InapplicableConditionError,
    TitleCondition,
    evaluate_matcher,
    get_condition,
)
from prlabeler.rules.reconciler import Reconciler, compute_desired_labels, find_matches
from prlabeler.rules.schema import ReconcileResult, RuleEvaluation

__all__ = [
    "CONDITIONS",
    "Condition",
    "ConditionError",
    "ConditionEvaluationError",
    "InapplicableConditionError",
    "ReconcileResult",
    "Reconciler",
    "RuleEvaluation",
    "TitleCondition",
    "compute_desired_labels",
    "evaluate_matcher",
    "find_matches",
    "get_condition",
]
