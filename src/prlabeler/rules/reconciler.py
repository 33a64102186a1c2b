"""Label reconciliation for pull requests.

This module provides the Reconciler class, which turns a rule set and a
pull request into the label set the PR should carry. It handles:
- Evaluating every rule's condition against the PR
- Skipping rules that are inapplicable or malformed
- Merging rule outcomes over the PR's current labels
- Writing the result with a single replace call
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from typing import TYPE_CHECKING

from prlabeler.logging import get_logger, log_reconciliation, log_rule_evaluated
from prlabeler.rules.conditions import CONDITIONS, ConditionError, get_condition
from prlabeler.rules.schema import ReconcileResult, RuleEvaluation

if TYPE_CHECKING:
    import structlog

    from prlabeler.config.schema import RuleSet
    from prlabeler.github.events import PullRequest

FetchConfig = Callable[[str, str], Awaitable["RuleSet"]]
GetCurrentLabels = Callable[[str, str, int], Awaitable[list[str]]]
ReplaceLabels = Callable[[str, str, int, list[str]], Awaitable[None]]


def find_matches(
    pr: PullRequest,
    rules: RuleSet,
) -> tuple[dict[str, bool], list[RuleEvaluation]]:
    """Evaluate every rule against a pull request.

    Rules whose condition raises are recorded as skipped and contribute
    nothing to the updates.

    Args:
        pr: Pull request to evaluate.
        rules: Rule set from the repository.

    Returns:
        Tuple of (updates, evaluations) where updates maps each
        successfully evaluated label to whether it matched.
    """
    updates: dict[str, bool] = {}
    evaluations: list[RuleEvaluation] = []

    for label, matcher in rules.items():
        condition_class = CONDITIONS.get(matcher.kind)
        condition_name = condition_class.name if condition_class else matcher.kind

        try:
            matched, reason = get_condition(matcher).evaluate(pr, matcher)
        except (ConditionError, ValueError) as e:
            evaluations.append(
                RuleEvaluation(
                    label=label,
                    condition=condition_name,
                    matched=None,
                    reason=f"Condition {condition_name} skipped: {e}",
                )
            )
            continue

        updates[label] = matched
        evaluations.append(
            RuleEvaluation(
                label=label,
                condition=condition_name,
                matched=matched,
                reason=reason,
            )
        )

    return updates, evaluations


def compute_desired_labels(
    current_labels: list[str],
    updates: Mapping[str, bool],
) -> tuple[dict[str, bool], list[str]]:
    """Merge rule outcomes over the current labels.

    Args:
        current_labels: Labels currently on the PR.
        updates: Rule outcomes keyed by label.

    Returns:
        Tuple of (intentions, desired_labels). desired_labels is sorted.
    """
    # intentions[label] tells whether label should be set on the PR
    intentions = dict.fromkeys(current_labels, True)
    intentions.update(updates)

    desired = sorted(label for label, wanted in intentions.items() if wanted)
    return intentions, desired


class Reconciler:
    """Reconciles a pull request's labels against its repository's rules.

    The three collaborators are injected so the reconciler never talks to
    GitHub directly:
    - fetch_config(owner, repo) -> RuleSet
    - get_current_labels(owner, repo, number) -> list[str]
    - replace_labels(owner, repo, number, labels) -> None

    Errors from any of them propagate unchanged. Errors evaluating a single
    rule never do.
    """

    def __init__(
        self,
        fetch_config: FetchConfig,
        get_current_labels: GetCurrentLabels,
        replace_labels: ReplaceLabels,
        *,
        log: structlog.stdlib.BoundLogger | None = None,
        dry_run: bool = False,
    ) -> None:
        """Initialize reconciler.

        Args:
            fetch_config: Loads the rule set for a repository.
            get_current_labels: Lists labels currently on a PR.
            replace_labels: Replaces the full label set on a PR.
            log: Optional structured logger; defaults to prlabeler.reconciler.
            dry_run: If True, compute the label set without writing it.
        """
        self._fetch_config = fetch_config
        self._get_current_labels = get_current_labels
        self._replace_labels = replace_labels
        self._log = log or get_logger("prlabeler.reconciler")
        self._dry_run = dry_run

    @property
    def dry_run(self) -> bool:
        """Check if writes are disabled."""
        return self._dry_run

    async def reconcile(self, pr: PullRequest) -> ReconcileResult:
        """Compute and apply the label set for a pull request.

        Args:
            pr: Pull request to reconcile.

        Returns:
            ReconcileResult describing the computed label set.
        """
        owner = pr.owner
        repo = pr.repo_name
        log = self._log.bind(entity=f"{owner}/{repo}#{pr.number}")

        rules = await self._fetch_config(owner, repo)
        log.debug("Fetched rules", rules_count=len(rules))

        updates, evaluations = find_matches(pr, rules)
        for evaluation in evaluations:
            log_rule_evaluated(
                log,
                evaluation.label,
                evaluation.condition,
                evaluation.matched,
                evaluation.reason,
            )

        current_labels = await self._get_current_labels(owner, repo, pr.number)

        intentions, desired = compute_desired_labels(current_labels, updates)

        if not self._dry_run:
            await self._replace_labels(owner, repo, pr.number, desired)

        result = ReconcileResult(
            owner=owner,
            repo=repo,
            number=pr.number,
            current_labels=list(current_labels),
            intentions=intentions,
            desired_labels=desired,
            evaluations=evaluations,
            applied=not self._dry_run,
        )
        log_reconciliation(log, result)
        return result
