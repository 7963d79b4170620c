"""Overdue rescheduling - proposes new dates without touching amounts"""

import logging
from datetime import date
from typing import List, Optional, Sequence
from payment_scheduler.domain.models import Obligation, RescheduleProposal
from payment_scheduler.domain.exceptions import MissingInputError
from payment_scheduler.domain.priority import overdue_days_for
from payment_scheduler.utils.date_utils import add_days


def propose_reschedule(
    overdue_obligations: Optional[Sequence[Obligation]],
    today: date,
    grace_days: int,
    target_date: Optional[date] = None,
) -> List[RescheduleProposal]:
    """
    Propose a new schedule date for each overdue obligation.

    Policy:
    - New date is today + grace_days, or target_date when given
    - Scheduled amount is the obligation's remaining amount, unchanged
    - Obligations that are not overdue or have nothing left are ignored
    - Most overdue first, then by id

    Nothing is persisted here; the caller confirms proposals through the
    schedule repository.

    Raises:
        MissingInputError: overdue_obligations is None
        ValueError: grace_days is negative
    """
    if overdue_obligations is None:
        raise MissingInputError("overdue_obligations is required")
    if grace_days < 0:
        raise ValueError(f"grace_days must be >= 0, got {grace_days}")

    new_date = target_date if target_date is not None else add_days(today, grace_days)

    proposals = []
    for obligation in overdue_obligations:
        overdue_days = overdue_days_for(obligation, today)
        if obligation.id is None or overdue_days == 0 or obligation.remaining_amount <= 0:
            logging.debug(
                "Obligation not eligible for reschedule",
                extra={"step": "propose_reschedule", "obligation_id": obligation.id},
            )
            continue
        proposals.append(
            RescheduleProposal(
                obligation_id=obligation.id,
                proposed_date=new_date,
                scheduled_amount=obligation.remaining_amount,
                original_due_date=obligation.due_date,
                overdue_days=overdue_days,
            )
        )

    proposals.sort(key=lambda p: (-p.overdue_days, p.obligation_id))
    return proposals
