"""Pydantic schemas for API request/response validation"""

from datetime import date
from decimal import Decimal
from typing import Dict, List, Literal, Optional
from pydantic import BaseModel, Field, model_validator


class SmartScheduleRequest(BaseModel):
    """Request body for POST /v1/schedule/smart-suggest"""

    budget: Decimal = Field(..., description="Available budget for the period")
    today: Optional[date] = Field(None, description="Reference date, defaults to server date")
    project_name: Optional[str] = None
    category: Optional[str] = None
    strategy: Optional[Literal["greedy", "optimal"]] = None


class PrioritizedItemSchema(BaseModel):
    """Obligation with its priority assessment"""

    id: int
    item_name: str
    total_amount: Decimal
    paid_amount: Decimal
    remaining_amount: Decimal
    due_date: Optional[date] = None
    category: Optional[str] = None
    payment_type: str
    project_name: Optional[str] = None
    priority: float
    priority_level: str
    is_overdue: bool
    overdue_days: int
    reason: str


class SmartScheduleResponse(BaseModel):
    """Response for POST /v1/schedule/smart-suggest"""

    budget: Decimal
    total_needed: Decimal
    is_over_budget: bool
    critical_items: List[PrioritizedItemSchema]
    scheduled_items: List[PrioritizedItemSchema]
    deferred_items: List[PrioritizedItemSchema]
    scheduled_total: Decimal
    remaining_budget: Decimal
    skipped_ids: List[Optional[int]] = []


class RescheduleProposalRequest(BaseModel):
    """Request body for POST /v1/schedule/reschedule/proposals"""

    grace_days: Optional[int] = Field(None, ge=0, description="Days after today for the new date")
    target_year: Optional[int] = Field(None, ge=2000, le=2100)
    target_month: Optional[int] = Field(None, ge=1, le=12)
    today: Optional[date] = None

    @model_validator(mode="after")
    def check_target_month(self):
        if (self.target_year is None) != (self.target_month is None):
            raise ValueError("target_year and target_month must be given together")
        return self


class RescheduleProposalSchema(BaseModel):
    """Proposed new date for one overdue obligation"""

    obligation_id: int
    proposed_date: date
    scheduled_amount: Decimal
    original_due_date: Optional[date] = None
    overdue_days: int


class RescheduleProposalResponse(BaseModel):
    """Response for POST /v1/schedule/reschedule/proposals"""

    proposals: List[RescheduleProposalSchema]
    total: int


class ScheduleEntrySchema(BaseModel):
    """One confirmed schedule entry"""

    obligation_id: int = Field(..., gt=0)
    scheduled_date: date
    scheduled_amount: Decimal = Field(..., gt=0)
    notes: Optional[str] = None


class ConfirmScheduleRequest(BaseModel):
    """Request body for POST /v1/schedule/confirm"""

    entries: List[ScheduleEntrySchema] = Field(..., min_length=1)
    today: Optional[date] = None


class ScheduleSchema(BaseModel):
    """Persisted payment schedule"""

    id: int
    payment_item_id: int
    scheduled_date: date
    original_due_date: Optional[date] = None
    reschedule_count: int
    scheduled_amount: Decimal
    status: str
    notes: Optional[str] = None


class ScheduleListResponse(BaseModel):
    """List of schedules"""

    schedules: List[ScheduleSchema]


class DailyStat(BaseModel):
    """Scheduled amount and count for one day"""

    amount: Decimal
    count: int


class ScheduleStatsResponse(BaseModel):
    """Response for GET /v1/schedule/stats/{year}/{month}"""

    year: int
    month: int
    total_amount: Decimal
    total_count: int
    overdue_count: int
    daily_stats: Dict[str, DailyStat]


class RescheduleRequest(BaseModel):
    """Request body for POST /v1/schedule/{schedule_id}/reschedule"""

    new_date: date
    notes: Optional[str] = None


class ScheduleUpdateRequest(BaseModel):
    """Request body for PUT /v1/schedule/{schedule_id}"""

    scheduled_amount: Optional[Decimal] = Field(None, gt=0)
    notes: Optional[str] = None
    status: Optional[Literal["scheduled", "rescheduled", "completed"]] = None

    @model_validator(mode="after")
    def check_not_empty(self):
        if not self.model_fields_set:
            raise ValueError("at least one of scheduled_amount, notes, status is required")
        return self
