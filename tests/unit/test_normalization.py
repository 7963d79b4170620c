"""Unit tests for obligation record parsing and category inference"""

import pytest
from datetime import date, datetime
from decimal import Decimal
from payment_scheduler.domain.normalization import parse_amount, parse_date, parse_obligation
from payment_scheduler.domain.categories import carries_late_fee, default_category_rules, infer_category
from payment_scheduler.domain.exceptions import InvalidObligationError
from payment_scheduler.utils.date_utils import add_days, days_between, month_bounds


def test_parse_string_amounts_and_dates():
    """Test loosely typed record becomes exact decimals and dates"""
    obligation = parse_obligation(
        {
            "id": "42",
            "item_name": "水電費",
            "total_amount": "1,200.50",
            "paid_amount": 200,
            "due_date": "2026-03-20",
            "payment_type": "monthly",
        }
    )

    assert obligation.id == 42
    assert obligation.name == "水電費"
    assert obligation.total_amount == Decimal("1200.50")
    assert obligation.paid_amount == Decimal("200")
    assert obligation.remaining_amount == Decimal("1000.50")
    assert obligation.due_date == date(2026, 3, 20)
    assert obligation.category == "utility"
    assert obligation.payment_type == "monthly"
    assert obligation.has_late_fee is None


def test_float_amount_keeps_decimal_value():
    """Test floats are read through their string form"""
    assert parse_amount(0.1, "total_amount") == Decimal("0.1")


def test_missing_paid_amount_is_zero():
    """Test None and empty amounts"""
    assert parse_amount(None, "paid_amount") == Decimal("0")
    assert parse_amount("", "paid_amount") == Decimal("0")


def test_due_date_falls_back_to_end_then_start():
    """Test due date resolution order"""
    with_end = parse_obligation(
        {"id": 1, "name": "a", "total_amount": "1", "end_date": "2026-05-01", "start_date": "2026-04-01"}
    )
    start_only = parse_obligation({"id": 2, "name": "b", "total_amount": "1", "start_date": "2026-04-01"})
    undated = parse_obligation({"id": 3, "name": "c", "total_amount": "1"})

    assert with_end.due_date == date(2026, 5, 1)
    assert start_only.due_date == date(2026, 4, 1)
    assert undated.due_date is None


def test_parse_date_accepts_datetime():
    """Test datetimes are truncated to the calendar date"""
    assert parse_date(datetime(2026, 3, 16, 23, 59), "due_date") == date(2026, 3, 16)
    assert parse_date("2026-03-16T08:00:00", "due_date") == date(2026, 3, 16)


@pytest.mark.parametrize(
    "raw",
    [
        {"name": "no id", "total_amount": "10"},
        {"id": "abc", "name": "bad id", "total_amount": "10"},
        {"id": 1, "name": "bad amount", "total_amount": "ten"},
        {"id": 1, "name": "bad amount", "total_amount": "NaN"},
        {"id": 1, "name": "bad date", "total_amount": "10", "due_date": "2026-13-40"},
    ],
)
def test_malformed_records_raise(raw):
    """Test unparseable records are rejected"""
    with pytest.raises(InvalidObligationError):
        parse_obligation(raw)


def test_invalid_amount_error_carries_id():
    """Test error keeps the offending record id"""
    with pytest.raises(InvalidObligationError) as exc_info:
        parse_obligation({"id": 7, "name": "x", "total_amount": "?"})

    assert exc_info.value.obligation_id == 7


def test_overpaid_record_parses():
    """Test negative remaining is left for the engine to reject"""
    obligation = parse_obligation({"id": 1, "name": "x", "total_amount": "10", "paid_amount": "15"})

    assert obligation.remaining_amount == Decimal("-5")


def test_unknown_payment_type_defaults_to_single():
    obligation = parse_obligation({"id": 1, "name": "x", "total_amount": "10", "payment_type": "weekly"})

    assert obligation.payment_type == "single"


def test_unknown_category_is_inferred_when_rules_given():
    """Test category not in the table falls back to name inference"""
    rules = default_category_rules()
    obligation = parse_obligation({"id": 1, "name": "店面租金", "total_amount": "10", "category": "misc"}, rules)
    kept = parse_obligation({"id": 2, "name": "店面租金", "total_amount": "10", "category": "insurance"}, rules)

    assert obligation.category == "rent"
    assert kept.category == "insurance"


@pytest.mark.parametrize(
    "name,category",
    [
        ("三月房租", "rent"),
        ("店面租金", "rent"),
        ("員工勞健保", "insurance"),
        ("健保補充保費", "insurance"),
        ("二月電費", "utility"),
        ("水電瓦斯", "utility"),
        ("Office Rent", "rent"),
        ("供應商貨款", "general"),
        ("", "general"),
        (None, "general"),
    ],
)
def test_infer_category(name, category):
    assert infer_category(name) == category


def test_late_fee_from_rules_or_override():
    """Test explicit flag wins over the category table"""
    rules = default_category_rules()
    rent = parse_obligation({"id": 1, "name": "房租", "total_amount": "10"})
    waived = parse_obligation({"id": 2, "name": "房租", "total_amount": "10", "has_late_fee": False})
    utility = parse_obligation({"id": 3, "name": "電費", "total_amount": "10"})

    assert carries_late_fee(rent, rules) is True
    assert carries_late_fee(waived, rules) is False
    assert carries_late_fee(utility, rules) is False


def test_default_rules_are_fresh_per_call():
    """Test callers cannot leak edits into other requests"""
    first = default_category_rules()
    first["rent"].bonus = 0.0

    assert default_category_rules()["rent"].bonus == 60.0


def test_date_helpers():
    assert days_between(date(2026, 3, 1), date(2026, 3, 16)) == 15
    assert days_between(date(2026, 3, 16), date(2026, 3, 1)) == -15
    assert add_days(date(2026, 2, 27), 3) == date(2026, 3, 2)
    assert month_bounds(2028, 2) == (date(2028, 2, 1), date(2028, 2, 29))
    assert month_bounds(2026, 12) == (date(2026, 12, 1), date(2026, 12, 31))
