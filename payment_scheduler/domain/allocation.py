"""Budget allocation engine - ranks obligations and fits them into a budget"""

import logging
from datetime import date
from decimal import ROUND_CEILING, ROUND_FLOOR, Decimal
from typing import Dict, List, Optional, Sequence, Tuple
from payment_scheduler.domain.models import (
    CRITICAL,
    CategoryRules,
    Obligation,
    PriorityAssessment,
    SchedulingResult,
    ScoringPolicy,
)
from payment_scheduler.domain.exceptions import MissingInputError
from payment_scheduler.domain.categories import default_category_rules
from payment_scheduler.domain.priority import assess_priority

GREEDY = "greedy"
OPTIMAL = "optimal"

CENT = Decimal("0.01")


def priority_sort_key(assessment: PriorityAssessment) -> Tuple[float, Decimal, int]:
    """Score descending, remaining amount descending, id ascending"""
    return (-assessment.score, -assessment.remaining_amount, assessment.obligation.id)


def _greedy_partition(
    ranked: List[PriorityAssessment],
    budget: Decimal,
) -> Tuple[List[PriorityAssessment], List[PriorityAssessment]]:
    """
    Walk the ranked list and schedule while the budget holds.

    The first candidate that does not fit ends the walk; it and every
    candidate after it are deferred. A smaller, lower-priority item is
    never pulled ahead of a larger one that was rejected.
    """
    scheduled: List[PriorityAssessment] = []
    running_total = Decimal(0)

    for index, assessment in enumerate(ranked):
        if running_total + assessment.remaining_amount > budget:
            return scheduled, ranked[index:]
        scheduled.append(assessment)
        running_total += assessment.remaining_amount

    return scheduled, []


def _optimal_partition(
    ranked: List[PriorityAssessment],
    budget: Decimal,
    max_states: int,
) -> Optional[Tuple[List[PriorityAssessment], List[PriorityAssessment]]]:
    """
    Bounded subset-sum packing in cents.

    Items are visited in priority order and a reachable total keeps the
    first combination that produced it, so on equal totals the
    higher-priority combination wins. Returns None when the number of
    reachable totals exceeds max_states.
    """
    capacity = int((budget / CENT).to_integral_value(rounding=ROUND_FLOOR))
    if capacity <= 0:
        return [], list(ranked)

    # total -> (previous total, index of item added)
    parents: Dict[int, Tuple[int, int]] = {0: (-1, -1)}

    for index, assessment in enumerate(ranked):
        weight = int((assessment.remaining_amount / CENT).to_integral_value(rounding=ROUND_CEILING))
        if weight > capacity:
            continue
        for total in list(parents):
            new_total = total + weight
            if new_total <= capacity and new_total not in parents:
                parents[new_total] = (total, index)
        if len(parents) > max_states:
            return None

    chosen = set()
    total = max(parents)
    while total > 0:
        total, index = parents[total]
        chosen.add(index)

    scheduled = [a for i, a in enumerate(ranked) if i in chosen]
    deferred = [a for i, a in enumerate(ranked) if i not in chosen]
    return scheduled, deferred


def allocate_budget(
    assessments: Sequence[PriorityAssessment],
    budget: Decimal,
    strategy: str = GREEDY,
    optimal_max_states: int = 200_000,
) -> SchedulingResult:
    """
    Partition assessed obligations into scheduled and deferred.

    Rules:
    - Candidates ranked by priority_sort_key
    - scheduled_total never exceeds budget; zero or negative budget
      schedules nothing
    - critical_items overlays both partitions for visibility
    """
    ranked = sorted(assessments, key=priority_sort_key)
    total_needed = sum((a.remaining_amount for a in ranked), Decimal(0))

    partition = None
    if strategy == OPTIMAL:
        partition = _optimal_partition(ranked, budget, optimal_max_states)
        if partition is None:
            logging.warning(
                "Optimal packing state limit reached, using greedy allocation",
                extra={"step": "allocate", "candidates": len(ranked), "max_states": optimal_max_states},
            )
    elif strategy != GREEDY:
        raise ValueError(f"Unknown allocation strategy: {strategy}")

    if partition is None:
        partition = _greedy_partition(ranked, budget)
    scheduled, deferred = partition

    scheduled_total = sum((a.remaining_amount for a in scheduled), Decimal(0))

    return SchedulingResult(
        budget=budget,
        total_needed=total_needed,
        is_over_budget=total_needed > budget,
        scheduled_items=scheduled,
        critical_items=[a for a in ranked if a.level == CRITICAL],
        deferred_items=deferred,
        scheduled_total=scheduled_total,
        remaining_budget=budget - scheduled_total,
    )


def select_candidates(obligations: Sequence[Obligation]) -> Tuple[List[Obligation], List[Optional[int]]]:
    """
    Split obligations into scheduling candidates and skipped ids.

    Fully paid obligations are dropped silently. Records without an id or
    with more paid than owed are skipped with a warning.
    """
    candidates: List[Obligation] = []
    skipped: List[Optional[int]] = []

    for obligation in obligations:
        if obligation.id is None:
            logging.warning(
                "Skipping obligation without identifier",
                extra={"step": "select_candidates", "obligation_name": obligation.name, "reason": "missing_id"},
            )
            skipped.append(None)
            continue
        remaining = obligation.remaining_amount
        if remaining < 0:
            logging.warning(
                "Skipping obligation with negative remaining amount",
                extra={
                    "step": "select_candidates",
                    "obligation_id": obligation.id,
                    "remaining_amount": str(remaining),
                    "reason": "negative_remaining",
                },
            )
            skipped.append(obligation.id)
            continue
        if remaining == 0:
            continue
        candidates.append(obligation)

    return candidates, skipped


def classify_and_allocate(
    obligations: Optional[Sequence[Obligation]],
    budget: Optional[Decimal],
    today: date,
    category_rules: Optional[CategoryRules] = None,
    policy: Optional[ScoringPolicy] = None,
    strategy: str = GREEDY,
    optimal_max_states: int = 200_000,
) -> SchedulingResult:
    """
    Main entry point: score every outstanding obligation and fit them into
    the budget.

    Raises:
        MissingInputError: obligations or budget is None
    """
    if obligations is None:
        raise MissingInputError("obligations is required")
    if budget is None:
        raise MissingInputError("budget is required")
    if category_rules is None:
        category_rules = default_category_rules()

    candidates, skipped = select_candidates(obligations)
    assessments = [assess_priority(o, today, category_rules, policy) for o in candidates]

    result = allocate_budget(assessments, Decimal(budget), strategy, optimal_max_states)
    result.skipped_ids = skipped
    return result
