"""Data access layer for payment items and schedules"""

import logging
from datetime import date
from typing import List, Optional, Sequence
from sqlalchemy.orm import Session
from payment_scheduler.infrastructure.database.models import PaymentItem, PaymentSchedule
from payment_scheduler.infrastructure.observability.metrics import skipped_obligations_counter
from payment_scheduler.domain.models import CategoryRules, Obligation, ScheduleEntry
from payment_scheduler.domain.exceptions import (
    InvalidObligationError,
    ObligationNotFoundError,
    ScheduleNotFoundError,
)
from payment_scheduler.domain.normalization import parse_obligation
from payment_scheduler.utils.date_utils import month_bounds

OPEN_STATUSES = ("scheduled", "rescheduled")
UPDATABLE_FIELDS = {"scheduled_amount", "notes", "status"}


class ObligationRepository:
    """Snapshot provider for outstanding payment items"""

    def __init__(self, db: Session, category_rules: Optional[CategoryRules] = None):
        self.db = db
        self.category_rules = category_rules

    def get_outstanding_obligations(
        self,
        project_name: Optional[str] = None,
        category: Optional[str] = None,
        limit: int = 10_000,
    ) -> List[Obligation]:
        """
        Fetch unpaid, non-deleted items as Obligation values.

        Rows that fail to parse are logged and skipped. The category filter
        runs after parsing so inferred categories match too.
        """
        query = self.db.query(PaymentItem).filter(
            PaymentItem.is_deleted.is_(False),
            PaymentItem.status != "completed",
        )
        if project_name:
            query = query.filter(PaymentItem.project_name == project_name)
        rows = query.order_by(PaymentItem.id).limit(limit).all()

        obligations = []
        for row in rows:
            try:
                obligation = parse_obligation(
                    {
                        "id": row.id,
                        "item_name": row.item_name,
                        "total_amount": row.total_amount,
                        "paid_amount": row.paid_amount,
                        "due_date": row.end_date or row.start_date,
                        "category": row.category,
                        "payment_type": row.payment_type,
                        "project_name": row.project_name,
                    },
                    self.category_rules,
                )
            except InvalidObligationError as e:
                skipped_obligations_counter.labels(reason="unparseable").inc()
                logging.warning(
                    f"Skipping payment item: {e}",
                    extra={"step": "load_obligations", "obligation_id": row.id},
                )
                continue

            if category and obligation.category != category:
                continue
            obligations.append(obligation)

        return obligations

    def get_overdue_obligations(self, today: date, limit: int = 10_000) -> List[Obligation]:
        """Outstanding items whose due date is before today"""
        return [
            o
            for o in self.get_outstanding_obligations(limit=limit)
            if o.due_date is not None and o.due_date < today and o.remaining_amount > 0
        ]


class ScheduleRepository:
    """Confirmation sink and lookups for payment schedules"""

    def __init__(self, db: Session):
        self.db = db

    def get_schedule(self, schedule_id: int) -> Optional[PaymentSchedule]:
        return self.db.query(PaymentSchedule).filter(PaymentSchedule.id == schedule_id).first()

    def get_schedules_for_month(self, year: int, month: int) -> List[PaymentSchedule]:
        """Schedules dated within the month, earliest first"""
        start, end = month_bounds(year, month)
        return (
            self.db.query(PaymentSchedule)
            .filter(PaymentSchedule.scheduled_date >= start, PaymentSchedule.scheduled_date <= end)
            .order_by(PaymentSchedule.scheduled_date, PaymentSchedule.id)
            .all()
        )

    def get_overdue_schedules(self, today: date) -> List[PaymentSchedule]:
        """Open schedules dated before today, oldest first"""
        return (
            self.db.query(PaymentSchedule)
            .filter(
                PaymentSchedule.status.in_(OPEN_STATUSES),
                PaymentSchedule.scheduled_date < today,
            )
            .order_by(PaymentSchedule.scheduled_date, PaymentSchedule.id)
            .all()
        )

    def confirm_schedules(self, entries: Sequence[ScheduleEntry], today: date) -> List[PaymentSchedule]:
        """
        Persist confirmed schedule entries.

        An item with an overdue open schedule has that schedule moved to the
        new date; otherwise a new schedule is created. Each overdue schedule
        is moved at most once per batch, so repeated entries for one item
        after the first create new schedules. Flushes only: the caller
        commits or rolls back the whole batch.

        Raises:
            ObligationNotFoundError: an entry references an unknown item
        """
        saved = []
        moved_ids = set()
        for entry in entries:
            item = self.db.query(PaymentItem).filter(PaymentItem.id == entry.obligation_id).first()
            if item is None:
                raise ObligationNotFoundError(f"Payment item {entry.obligation_id} not found")

            query = self.db.query(PaymentSchedule).filter(
                PaymentSchedule.payment_item_id == item.id,
                PaymentSchedule.status.in_(OPEN_STATUSES),
                PaymentSchedule.scheduled_date < today,
            )
            if moved_ids:
                query = query.filter(PaymentSchedule.id.notin_(moved_ids))
            overdue = query.order_by(PaymentSchedule.scheduled_date, PaymentSchedule.id).first()

            if overdue is not None:
                notes = entry.notes or f"原排期 {overdue.scheduled_date.isoformat()}，逾期移至 {entry.scheduled_date.isoformat()}"
                self._move(overdue, entry.scheduled_date, notes)
                overdue.scheduled_amount = entry.scheduled_amount
                moved_ids.add(overdue.id)
                saved.append(overdue)
                continue

            schedule = PaymentSchedule(
                payment_item_id=item.id,
                scheduled_date=entry.scheduled_date,
                original_due_date=item.end_date or item.start_date,
                scheduled_amount=entry.scheduled_amount,
                status="scheduled",
                reschedule_count=0,
                notes=entry.notes,
            )
            self.db.add(schedule)
            saved.append(schedule)

        self.db.flush()
        return saved

    def reschedule(self, schedule_id: int, new_date: date, notes: Optional[str] = None) -> PaymentSchedule:
        """
        Move one schedule to a new date.

        Raises:
            ScheduleNotFoundError: unknown schedule id
        """
        schedule = self.get_schedule(schedule_id)
        if schedule is None:
            raise ScheduleNotFoundError(f"Schedule {schedule_id} not found")
        self._move(schedule, new_date, notes)
        self.db.flush()
        return schedule

    def update_schedule(self, schedule_id: int, **fields) -> PaymentSchedule:
        """
        Update amount, notes or status of one schedule.

        Setting status to "completed" takes the schedule out of the overdue
        lists.

        Raises:
            ScheduleNotFoundError: unknown schedule id
            ValueError: a field that cannot be updated this way
        """
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update schedule fields: {', '.join(sorted(unknown))}")

        schedule = self.get_schedule(schedule_id)
        if schedule is None:
            raise ScheduleNotFoundError(f"Schedule {schedule_id} not found")
        for name, value in fields.items():
            setattr(schedule, name, value)
        self.db.flush()
        return schedule

    def get_schedules_for_item(self, item_id: int) -> List[PaymentSchedule]:
        """Schedule history of one item, newest first"""
        return (
            self.db.query(PaymentSchedule)
            .filter(PaymentSchedule.payment_item_id == item_id)
            .order_by(PaymentSchedule.scheduled_date.desc(), PaymentSchedule.id.desc())
            .all()
        )

    def delete_schedule(self, schedule_id: int) -> None:
        schedule = self.get_schedule(schedule_id)
        if schedule is None:
            raise ScheduleNotFoundError(f"Schedule {schedule_id} not found")
        self.db.delete(schedule)
        self.db.flush()

    @staticmethod
    def _move(schedule: PaymentSchedule, new_date: date, notes: Optional[str]) -> None:
        schedule.scheduled_date = new_date
        schedule.reschedule_count = (schedule.reschedule_count or 0) + 1
        schedule.status = "rescheduled"
        schedule.notes = notes
