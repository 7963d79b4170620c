"""Dependency injection for FastAPI endpoints"""

from fastapi import Request
from payment_scheduler.config import settings
from payment_scheduler.domain.models import CategoryRules, ScoringPolicy
from payment_scheduler.domain.categories import default_category_rules


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_category_rules() -> CategoryRules:
    """Fresh category table per request"""
    return default_category_rules()


def get_scoring_policy() -> ScoringPolicy:
    """Priority scoring policy from settings"""
    return ScoringPolicy(
        overdue_base=settings.overdue_base,
        overdue_day_weight=settings.overdue_day_weight,
        late_fee_bonus=settings.late_fee_bonus,
        amount_weight=settings.amount_weight,
        large_amount_threshold=settings.large_amount_threshold,
        critical_overdue_days=settings.critical_overdue_days,
    )
