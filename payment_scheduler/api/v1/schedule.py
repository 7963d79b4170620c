"""Smart schedule suggestion and payment schedule endpoints"""

import time
import logging
from collections import defaultdict
from datetime import date
from decimal import Decimal
from fastapi import APIRouter, Depends, HTTPException, Path, Request, Response
from sqlalchemy.orm import Session

from payment_scheduler.api.v1.schemas import (
    ConfirmScheduleRequest,
    DailyStat,
    PrioritizedItemSchema,
    RescheduleRequest,
    ScheduleListResponse,
    ScheduleSchema,
    ScheduleStatsResponse,
    ScheduleUpdateRequest,
    SmartScheduleRequest,
    SmartScheduleResponse,
)
from payment_scheduler.api.dependencies import get_category_rules, get_request_id, get_scoring_policy
from payment_scheduler.config import settings
from payment_scheduler.infrastructure.database.session import get_db
from payment_scheduler.infrastructure.database.models import PaymentSchedule
from payment_scheduler.infrastructure.database.repositories import OPEN_STATUSES, ObligationRepository, ScheduleRepository
from payment_scheduler.domain.models import CategoryRules, PriorityAssessment, ScheduleEntry, ScoringPolicy
from payment_scheduler.domain.allocation import classify_and_allocate
from payment_scheduler.domain.exceptions import ObligationNotFoundError, ScheduleNotFoundError
from payment_scheduler.infrastructure.observability.metrics import confirmed_schedules_counter, record_schedule_result
from payment_scheduler.infrastructure.observability.logging import log_schedule_result

router = APIRouter()


def to_item_schema(assessment: PriorityAssessment) -> PrioritizedItemSchema:
    obligation = assessment.obligation
    return PrioritizedItemSchema(
        id=obligation.id,
        item_name=obligation.name,
        total_amount=obligation.total_amount,
        paid_amount=obligation.paid_amount,
        remaining_amount=obligation.remaining_amount,
        due_date=obligation.due_date,
        category=obligation.category,
        payment_type=obligation.payment_type,
        project_name=obligation.project_name,
        priority=assessment.score,
        priority_level=assessment.level,
        is_overdue=assessment.is_overdue,
        overdue_days=assessment.overdue_days,
        reason=assessment.reason,
    )


def to_schedule_schema(schedule: PaymentSchedule) -> ScheduleSchema:
    return ScheduleSchema(
        id=schedule.id,
        payment_item_id=schedule.payment_item_id,
        scheduled_date=schedule.scheduled_date,
        original_due_date=schedule.original_due_date,
        reschedule_count=schedule.reschedule_count,
        scheduled_amount=schedule.scheduled_amount,
        status=schedule.status,
        notes=schedule.notes,
    )


@router.post("/schedule/smart-suggest", response_model=SmartScheduleResponse)
def smart_suggest(
    request_body: SmartScheduleRequest,
    request: Request,
    db: Session = Depends(get_db),
    category_rules: CategoryRules = Depends(get_category_rules),
    policy: ScoringPolicy = Depends(get_scoring_policy),
):
    """
    Suggest which outstanding obligations to pay within a budget.

    Flow:
    1. Load outstanding obligations (optionally by project/category)
    2. Score each obligation and rank by priority
    3. Fit ranked obligations into the budget, defer the rest
    4. Return scheduled / deferred partitions plus critical overlay
    """
    start_time = time.time()
    request_id = get_request_id(request)
    today = request_body.today or date.today()

    obligation_repo = ObligationRepository(db, category_rules)
    obligations = obligation_repo.get_outstanding_obligations(
        project_name=request_body.project_name,
        category=request_body.category,
        limit=settings.max_obligations,
    )

    result = classify_and_allocate(
        obligations,
        request_body.budget,
        today,
        category_rules=category_rules,
        policy=policy,
        strategy=request_body.strategy or settings.allocation_strategy,
        optimal_max_states=settings.optimal_max_states,
    )

    duration_ms = (time.time() - start_time) * 1000
    record_schedule_result(result.is_over_budget, len(result.deferred_items), result.skipped_ids)
    log_schedule_result(request_id, result, duration_ms)

    return SmartScheduleResponse(
        budget=result.budget,
        total_needed=result.total_needed,
        is_over_budget=result.is_over_budget,
        critical_items=[to_item_schema(a) for a in result.critical_items],
        scheduled_items=[to_item_schema(a) for a in result.scheduled_items],
        deferred_items=[to_item_schema(a) for a in result.deferred_items],
        scheduled_total=result.scheduled_total,
        remaining_budget=result.remaining_budget,
        skipped_ids=result.skipped_ids,
    )


@router.post("/schedule/confirm", response_model=ScheduleListResponse, status_code=201)
def confirm_schedules(
    request_body: ConfirmScheduleRequest,
    request: Request,
    db: Session = Depends(get_db),
):
    """
    Persist confirmed schedule entries as one batch.

    Items with an overdue open schedule have it moved; others get a new
    schedule. Any failure rolls back the whole batch.
    """
    request_id = get_request_id(request)
    today = request_body.today or date.today()
    entries = [
        ScheduleEntry(
            obligation_id=e.obligation_id,
            scheduled_date=e.scheduled_date,
            scheduled_amount=e.scheduled_amount,
            notes=e.notes,
        )
        for e in request_body.entries
    ]

    try:
        schedules = ScheduleRepository(db).confirm_schedules(entries, today)
        db.commit()

    except ObligationNotFoundError as e:
        db.rollback()
        logging.warning(f"Confirm rejected: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=404, detail=str(e))

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error confirming schedules: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    confirmed_schedules_counter.inc(len(schedules))
    logging.info(
        "Schedules confirmed",
        extra={"request_id": request_id, "step": "confirm_schedules", "count": len(schedules)},
    )
    return ScheduleListResponse(schedules=[to_schedule_schema(s) for s in schedules])


@router.get("/schedule/overdue", response_model=ScheduleListResponse)
def get_overdue_schedules(db: Session = Depends(get_db)):
    """Open schedules dated before today"""
    schedules = ScheduleRepository(db).get_overdue_schedules(date.today())
    return ScheduleListResponse(schedules=[to_schedule_schema(s) for s in schedules])


@router.get("/schedule/stats/{year}/{month}", response_model=ScheduleStatsResponse)
def get_schedule_stats(
    year: int = Path(..., ge=2000, le=2100),
    month: int = Path(..., ge=1, le=12),
    db: Session = Depends(get_db),
):
    """
    Monthly schedule totals.

    Returns:
        Total amount and count, overdue count, and per-day amount/count
    """
    schedules = ScheduleRepository(db).get_schedules_for_month(year, month)
    today = date.today()

    daily = defaultdict(lambda: {"amount": Decimal(0), "count": 0})
    for schedule in schedules:
        day = daily[schedule.scheduled_date.isoformat()]
        day["amount"] += schedule.scheduled_amount
        day["count"] += 1

    overdue_count = sum(
        1 for s in schedules if s.status in OPEN_STATUSES and s.scheduled_date < today
    )

    return ScheduleStatsResponse(
        year=year,
        month=month,
        total_amount=sum((s.scheduled_amount for s in schedules), Decimal(0)),
        total_count=len(schedules),
        overdue_count=overdue_count,
        daily_stats={day: DailyStat(**stat) for day, stat in daily.items()},
    )


@router.get("/schedule/items/{item_id}", response_model=ScheduleListResponse)
def get_item_schedules(item_id: int, db: Session = Depends(get_db)):
    """Schedule history of one payment item, newest first"""
    schedules = ScheduleRepository(db).get_schedules_for_item(item_id)
    return ScheduleListResponse(schedules=[to_schedule_schema(s) for s in schedules])


@router.get("/schedule/{year}/{month}", response_model=ScheduleListResponse)
def get_month_schedules(
    year: int = Path(..., ge=2000, le=2100),
    month: int = Path(..., ge=1, le=12),
    db: Session = Depends(get_db),
):
    """Schedules dated within the month"""
    schedules = ScheduleRepository(db).get_schedules_for_month(year, month)
    return ScheduleListResponse(schedules=[to_schedule_schema(s) for s in schedules])


@router.post("/schedule/{schedule_id}/reschedule", response_model=ScheduleSchema)
def reschedule_payment(
    schedule_id: int,
    request_body: RescheduleRequest,
    request: Request,
    db: Session = Depends(get_db),
):
    """Move one schedule to a new date"""
    request_id = get_request_id(request)
    try:
        schedule = ScheduleRepository(db).reschedule(schedule_id, request_body.new_date, request_body.notes)
        db.commit()
    except ScheduleNotFoundError as e:
        db.rollback()
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error rescheduling: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    return to_schedule_schema(schedule)


@router.put("/schedule/{schedule_id}", response_model=ScheduleSchema)
def update_schedule(
    schedule_id: int,
    request_body: ScheduleUpdateRequest,
    request: Request,
    db: Session = Depends(get_db),
):
    """Update amount, notes or status; status "completed" marks it paid"""
    request_id = get_request_id(request)
    fields = request_body.model_dump(exclude_unset=True)
    # Only notes may be cleared
    fields = {k: v for k, v in fields.items() if v is not None or k == "notes"}
    try:
        schedule = ScheduleRepository(db).update_schedule(schedule_id, **fields)
        db.commit()
    except ScheduleNotFoundError as e:
        db.rollback()
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error updating schedule: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    logging.info(
        "Schedule updated",
        extra={"request_id": request_id, "step": "update_schedule", "schedule_id": schedule_id},
    )
    return to_schedule_schema(schedule)


@router.delete("/schedule/{schedule_id}", status_code=204)
def delete_schedule(schedule_id: int, request: Request, db: Session = Depends(get_db)):
    """Remove a schedule"""
    request_id = get_request_id(request)
    try:
        ScheduleRepository(db).delete_schedule(schedule_id)
        db.commit()
    except ScheduleNotFoundError as e:
        db.rollback()
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error deleting schedule: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")
    return Response(status_code=204)
