"""Category lookup table and name-based category inference"""

from typing import Optional
from payment_scheduler.domain.models import CategoryRule, CategoryRules, Obligation

GENERAL = "general"

# Keyword -> category, checked in order against the item name
CATEGORY_KEYWORDS = (
    ("rent", ("租金", "房租", "rent")),
    ("insurance", ("勞健保", "勞保", "健保", "insurance")),
    ("utility", ("水電", "電費", "水費", "utility")),
)


def default_category_rules() -> CategoryRules:
    """
    Build a fresh category table.

    Rent and labour/health insurance cannot be postponed without penalty,
    so both carry a late fee on top of their category bonus.
    """
    return {
        "rent": CategoryRule(bonus=60.0, label="租金合約", has_late_fee=True),
        "insurance": CategoryRule(bonus=50.0, label="勞健保費", has_late_fee=True),
        "utility": CategoryRule(bonus=0.0),
        GENERAL: CategoryRule(bonus=0.0),
    }


def infer_category(item_name: Optional[str]) -> str:
    """Guess a category tag from the item name"""
    name = (item_name or "").lower()
    for category, keywords in CATEGORY_KEYWORDS:
        if any(keyword in name for keyword in keywords):
            return category
    return GENERAL


def carries_late_fee(obligation: Obligation, rules: CategoryRules) -> bool:
    """Explicit flag wins; otherwise the category rule decides"""
    if obligation.has_late_fee is not None:
        return obligation.has_late_fee
    rule = rules.get(obligation.category or GENERAL)
    return bool(rule and rule.has_late_fee)
