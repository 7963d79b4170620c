"""Parse loosely-typed obligation records into Obligation values"""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping, Optional
from payment_scheduler.domain.models import CategoryRules, Obligation
from payment_scheduler.domain.exceptions import InvalidObligationError
from payment_scheduler.domain.categories import infer_category

PAYMENT_TYPES = ("single", "monthly", "installment")


def parse_amount(value: Any, field_name: str, obligation_id=None) -> Decimal:
    """Parse a currency amount; None and empty string mean zero"""
    if value is None or value == "":
        return Decimal("0")
    try:
        # Through str so float 0.1 stays 0.1
        amount = Decimal(str(value).strip().replace(",", ""))
    except InvalidOperation as e:
        raise InvalidObligationError(f"Invalid {field_name}: {value!r}", obligation_id) from e
    if not amount.is_finite():
        raise InvalidObligationError(f"Invalid {field_name}: {value!r}", obligation_id)
    return amount


def parse_date(value: Any, field_name: str, obligation_id=None) -> Optional[date]:
    """Parse a calendar date from a date, datetime or ISO string"""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError as e:
        raise InvalidObligationError(f"Invalid {field_name}: {value!r}", obligation_id) from e


def parse_obligation(raw: Mapping[str, Any], category_rules: Optional[CategoryRules] = None) -> Obligation:
    """
    Build an Obligation from a raw record.

    Accepted keys: id, name (or item_name), total_amount, paid_amount,
    due_date (falls back to end_date, then start_date), category,
    payment_type, has_late_fee, project_name.

    A missing or unknown category is inferred from the name. Negative
    remaining amounts are left for the engine to reject.

    Raises:
        InvalidObligationError: missing id, or unparseable amount/date
    """
    raw_id = raw.get("id")
    if raw_id is None or raw_id == "":
        raise InvalidObligationError("Obligation record has no id")
    try:
        obligation_id = int(raw_id)
    except (TypeError, ValueError) as e:
        raise InvalidObligationError(f"Invalid id: {raw_id!r}") from e

    name = raw.get("name") or raw.get("item_name") or ""
    total = parse_amount(raw.get("total_amount"), "total_amount", obligation_id)
    paid = parse_amount(raw.get("paid_amount"), "paid_amount", obligation_id)

    due_value = raw.get("due_date") or raw.get("end_date") or raw.get("start_date")
    due_date = parse_date(due_value, "due_date", obligation_id)

    category = raw.get("category")
    if not category or (category_rules is not None and category not in category_rules):
        category = infer_category(name)

    payment_type = raw.get("payment_type") or "single"
    if payment_type not in PAYMENT_TYPES:
        payment_type = "single"

    has_late_fee = raw.get("has_late_fee")

    return Obligation(
        id=obligation_id,
        name=name,
        total_amount=total,
        paid_amount=paid,
        due_date=due_date,
        category=category,
        payment_type=payment_type,
        has_late_fee=None if has_late_fee is None else bool(has_late_fee),
        project_name=raw.get("project_name") or None,
    )
