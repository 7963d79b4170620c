"""Priority classifier - scores a single obligation for scheduling"""

from datetime import date
from decimal import Decimal
from typing import List, Optional, Tuple
from payment_scheduler.domain.models import (
    CRITICAL,
    HIGH,
    LOW,
    MEDIUM,
    CategoryRules,
    Obligation,
    PriorityAssessment,
    ScoringPolicy,
)
from payment_scheduler.domain.categories import GENERAL, carries_late_fee, default_category_rules
from payment_scheduler.utils.date_utils import days_between

DEFAULT_REASON = "一般項目"
REASON_SEPARATOR = "、"


def overdue_days_for(obligation: Obligation, today: date) -> int:
    """Whole days past due, 0 when not due yet or no due date"""
    if obligation.due_date is None:
        return 0
    return max(0, days_between(obligation.due_date, today))


def calculate_priority_score(
    obligation: Obligation,
    today: date,
    category_rules: CategoryRules,
    policy: ScoringPolicy,
) -> Tuple[float, List[str]]:
    """
    Score an obligation; higher means pay sooner.

    Components (weights come from the policy):
    - Overdue: base + per-day weight, uncapped
    - Late fee or penalty risk: fixed bonus
    - Category bonus from the injected table (rent, insurance)
    - Due soon: 0-3 days, smaller bonus for 4-7 days
    - Contractual payment types: installment, monthly
    - Remaining amount, scaled up to the large-amount threshold

    Returns: (score, reasons) with reasons in the order they were applied
    """
    score = 0.0
    reasons: List[str] = []
    remaining = obligation.remaining_amount
    overdue_days = overdue_days_for(obligation, today)

    if overdue_days > 0:
        score += policy.overdue_base + policy.overdue_day_weight * overdue_days
        reasons.append(f"逾期{overdue_days}天")

    if carries_late_fee(obligation, category_rules):
        score += policy.late_fee_bonus
        reasons.append("有罰款風險")

    rule = category_rules.get(obligation.category or GENERAL)
    if rule is not None and rule.bonus:
        score += rule.bonus
        if rule.label:
            reasons.append(rule.label)

    if obligation.due_date is not None and overdue_days == 0:
        days_until_due = days_between(today, obligation.due_date)
        if days_until_due <= policy.due_soon_days:
            score += policy.due_soon_bonus
            reasons.append(f"{policy.due_soon_days}天內到期")
        elif days_until_due <= policy.due_this_week_days:
            score += policy.due_this_week_bonus
            reasons.append(f"{policy.due_this_week_days}天內到期")

    if obligation.payment_type == "installment":
        score += policy.installment_bonus
        reasons.append("分期合約")
    elif obligation.payment_type == "monthly":
        score += policy.monthly_bonus
        reasons.append("月付項目")

    # Amount magnitude: linear up to the threshold, flat above it
    if policy.large_amount_threshold > 0:
        ratio = min(remaining / policy.large_amount_threshold, Decimal(1))
    else:
        ratio = Decimal(1)
    score += policy.amount_weight * float(max(ratio, Decimal(0)))
    if remaining >= policy.large_amount_threshold:
        reasons.append("金額較大")

    return round(score, 3), reasons


def determine_priority_level(
    score: float,
    overdue_days: int,
    remaining: Decimal,
    policy: ScoringPolicy,
) -> str:
    """
    Map score and overdue status to a priority level.

    - critical: overdue past the grace window, overdue with a large
      remaining amount, or score at the critical threshold
    - high: any other overdue obligation, or score at the high threshold
    - medium / low: by score
    """
    if overdue_days > 0 and (
        overdue_days > policy.critical_overdue_days
        or remaining >= policy.large_amount_threshold
    ):
        return CRITICAL
    if score >= policy.critical_score:
        return CRITICAL
    if overdue_days > 0 or score >= policy.high_score:
        return HIGH
    if score >= policy.medium_score:
        return MEDIUM
    return LOW


def assess_priority(
    obligation: Obligation,
    today: date,
    category_rules: Optional[CategoryRules] = None,
    policy: Optional[ScoringPolicy] = None,
) -> PriorityAssessment:
    """
    Main entry point: produce a PriorityAssessment for one obligation.

    The obligation must have something left to pay; zero-remaining items
    are filtered before they reach this function.
    """
    if category_rules is None:
        category_rules = default_category_rules()
    if policy is None:
        policy = ScoringPolicy()

    overdue_days = overdue_days_for(obligation, today)
    score, reasons = calculate_priority_score(obligation, today, category_rules, policy)
    level = determine_priority_level(score, overdue_days, obligation.remaining_amount, policy)

    return PriorityAssessment(
        obligation=obligation,
        score=score,
        level=level,
        is_overdue=overdue_days > 0,
        overdue_days=overdue_days,
        reason=REASON_SEPARATOR.join(reasons) or DEFAULT_REASON,
    )
