"""Integration tests for the obligation and schedule repositories"""

import pytest
from datetime import date, timedelta
from decimal import Decimal
from sqlalchemy.orm import Session
from payment_scheduler.domain.models import ScheduleEntry
from payment_scheduler.domain.exceptions import ScheduleNotFoundError
from payment_scheduler.infrastructure.database.repositories import ObligationRepository, ScheduleRepository

TODAY = date(2026, 3, 16)

pytestmark = pytest.mark.integration


def test_outstanding_obligations_are_parsed(db: Session, add_item):
    """Test rows become Obligation values with inferred category"""
    item = add_item(
        "三月房租",
        "25000",
        paid_amount="5000",
        start_date=date(2026, 3, 1),
        end_date=date(2026, 3, 5),
        payment_type="monthly",
        project_name="浯島文旅",
    )

    obligations = ObligationRepository(db).get_outstanding_obligations()

    assert len(obligations) == 1
    obligation = obligations[0]
    assert obligation.id == item.id
    assert obligation.remaining_amount == Decimal("20000")
    assert obligation.due_date == date(2026, 3, 5)
    assert obligation.category == "rent"
    assert obligation.payment_type == "monthly"
    assert obligation.project_name == "浯島文旅"


def test_snapshot_limit(db: Session, add_item):
    """Test snapshot is capped"""
    for i in range(5):
        add_item(f"項目{i}", "10")

    assert len(ObligationRepository(db).get_outstanding_obligations(limit=3)) == 3


def test_overdue_obligations(db: Session, add_item):
    """Test only past-due unpaid items are returned"""
    late = add_item("逾期", "10", start_date=TODAY - timedelta(days=1))
    add_item("今天到期", "10", start_date=TODAY)
    add_item("已付清", "10", paid_amount="10", start_date=TODAY - timedelta(days=4))

    overdue = ObligationRepository(db).get_overdue_obligations(TODAY)

    assert [o.id for o in overdue] == [late.id]


def test_confirm_flushes_without_commit(db: Session, add_item):
    """Test repository leaves the transaction to the caller"""
    item = add_item("貨款", "100")
    repo = ScheduleRepository(db)

    saved = repo.confirm_schedules(
        [ScheduleEntry(obligation_id=item.id, scheduled_date=date(2026, 3, 20), scheduled_amount=Decimal("100"))],
        TODAY,
    )
    assert saved[0].id is not None

    db.rollback()
    assert repo.get_schedules_for_month(2026, 3) == []


def test_reschedule_increments_count(db: Session, add_item, add_schedule):
    item = add_item("貨款", "100")
    schedule = add_schedule(item, date(2026, 3, 1), "100")
    repo = ScheduleRepository(db)

    repo.reschedule(schedule.id, date(2026, 3, 30), "第一次")
    moved = repo.reschedule(schedule.id, date(2026, 4, 15), "第二次")

    assert moved.reschedule_count == 2
    assert moved.scheduled_date == date(2026, 4, 15)
    assert moved.status == "rescheduled"


def test_missing_schedule_raises(db: Session):
    repo = ScheduleRepository(db)

    with pytest.raises(ScheduleNotFoundError):
        repo.reschedule(1, TODAY)
    with pytest.raises(ScheduleNotFoundError):
        repo.delete_schedule(1)


def test_confirm_moves_each_overdue_schedule_once(db: Session, add_item, add_schedule):
    """Test repeated entries for one item do not move the same schedule twice"""
    item = add_item("貨款", "5000", start_date=TODAY - timedelta(days=5))
    stale = add_schedule(item, TODAY - timedelta(days=3), "5000")
    repo = ScheduleRepository(db)

    saved = repo.confirm_schedules(
        [
            ScheduleEntry(obligation_id=item.id, scheduled_date=date(2026, 3, 20), scheduled_amount=Decimal("2500")),
            ScheduleEntry(obligation_id=item.id, scheduled_date=date(2026, 4, 20), scheduled_amount=Decimal("2500")),
        ],
        TODAY,
    )
    db.commit()

    assert saved[0].id == stale.id
    assert saved[0].reschedule_count == 1
    assert "2026-03-13" in saved[0].notes
    assert saved[1].id != stale.id
    assert saved[1].reschedule_count == 0
    assert saved[1].notes is None
    assert len(repo.get_schedules_for_item(item.id)) == 2


def test_update_schedule_fields(db: Session, add_item, add_schedule):
    item = add_item("貨款", "100")
    schedule = add_schedule(item, TODAY - timedelta(days=1), "100")
    repo = ScheduleRepository(db)

    updated = repo.update_schedule(schedule.id, status="completed", notes="已付款")
    db.commit()

    assert updated.status == "completed"
    assert updated.notes == "已付款"
    assert repo.get_overdue_schedules(TODAY) == []


def test_update_schedule_rejects_other_fields(db: Session, add_item, add_schedule):
    item = add_item("貨款", "100")
    schedule = add_schedule(item, TODAY, "100")

    with pytest.raises(ValueError):
        ScheduleRepository(db).update_schedule(schedule.id, scheduled_date=TODAY)
    with pytest.raises(ScheduleNotFoundError):
        ScheduleRepository(db).update_schedule(404, status="completed")


def test_schedules_for_item_newest_first(db: Session, add_item, add_schedule):
    item = add_item("貨款", "100")
    other = add_item("房租", "100")
    first = add_schedule(item, date(2026, 1, 5), "50")
    second = add_schedule(item, date(2026, 2, 5), "50")
    add_schedule(other, date(2026, 3, 5), "100")

    history = ScheduleRepository(db).get_schedules_for_item(item.id)

    assert [s.id for s in history] == [second.id, first.id]
