"""POST /v1/schedule/reschedule/proposals - propose new dates for overdue items"""

import logging
from datetime import date
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from payment_scheduler.api.v1.schemas import (
    RescheduleProposalRequest,
    RescheduleProposalResponse,
    RescheduleProposalSchema,
)
from payment_scheduler.api.dependencies import get_category_rules, get_request_id
from payment_scheduler.config import settings
from payment_scheduler.infrastructure.database.session import get_db
from payment_scheduler.infrastructure.database.repositories import ObligationRepository
from payment_scheduler.domain.models import CategoryRules
from payment_scheduler.domain.reschedule import propose_reschedule
from payment_scheduler.infrastructure.observability.metrics import reschedule_proposals_counter
from payment_scheduler.utils.date_utils import month_bounds

router = APIRouter()


@router.post("/schedule/reschedule/proposals", response_model=RescheduleProposalResponse)
def create_reschedule_proposals(
    request_body: RescheduleProposalRequest,
    request: Request,
    db: Session = Depends(get_db),
    category_rules: CategoryRules = Depends(get_category_rules),
):
    """
    Propose new dates for every overdue obligation.

    The new date is the first day of target_year/target_month when given,
    otherwise today + grace_days (settings default when omitted). Nothing is
    written; confirm proposals through POST /v1/schedule/confirm.
    """
    request_id = get_request_id(request)
    today = request_body.today or date.today()
    grace_days = request_body.grace_days
    if grace_days is None:
        grace_days = settings.reschedule_grace_days

    target_date = None
    if request_body.target_year is not None:
        target_date, _ = month_bounds(request_body.target_year, request_body.target_month)

    overdue = ObligationRepository(db, category_rules).get_overdue_obligations(
        today, limit=settings.max_obligations
    )
    proposals = propose_reschedule(overdue, today, grace_days, target_date=target_date)

    reschedule_proposals_counter.inc(len(proposals))
    logging.info(
        "Reschedule proposals generated",
        extra={"request_id": request_id, "step": "propose_reschedule", "count": len(proposals)},
    )

    return RescheduleProposalResponse(
        proposals=[
            RescheduleProposalSchema(
                obligation_id=p.obligation_id,
                proposed_date=p.proposed_date,
                scheduled_amount=p.scheduled_amount,
                original_due_date=p.original_due_date,
                overdue_days=p.overdue_days,
            )
            for p in proposals
        ],
        total=len(proposals),
    )
