"""Domain models - pure Python dataclasses representing scheduling entities"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional

# Priority levels, highest first
CRITICAL = "critical"
HIGH = "high"
MEDIUM = "medium"
LOW = "low"
PRIORITY_LEVELS = (CRITICAL, HIGH, MEDIUM, LOW)


@dataclass
class Obligation:
    """Outstanding payment item as read from the obligation store"""

    id: Optional[int]
    name: str
    total_amount: Decimal
    paid_amount: Decimal = Decimal("0")
    due_date: Optional[date] = None
    category: Optional[str] = None  # rent, insurance, utility, general
    payment_type: str = "single"  # single, monthly, installment
    has_late_fee: Optional[bool] = None  # None: derive from category rules
    project_name: Optional[str] = None

    @property
    def remaining_amount(self) -> Decimal:
        return self.total_amount - self.paid_amount


@dataclass
class CategoryRule:
    """Priority treatment for one category tag"""

    bonus: float
    label: Optional[str] = None
    has_late_fee: bool = False


# Category tag -> rule, passed into the engine per call
CategoryRules = Dict[str, CategoryRule]


@dataclass
class ScoringPolicy:
    """Weights and thresholds for priority scoring"""

    overdue_base: float = 60.0
    overdue_day_weight: float = 1.0
    late_fee_bonus: float = 80.0
    amount_weight: float = 20.0
    large_amount_threshold: Decimal = Decimal("50000")
    critical_overdue_days: int = 7
    due_soon_days: int = 3
    due_soon_bonus: float = 40.0
    due_this_week_days: int = 7
    due_this_week_bonus: float = 20.0
    installment_bonus: float = 30.0
    monthly_bonus: float = 15.0
    critical_score: float = 100.0
    high_score: float = 50.0
    medium_score: float = 20.0


@dataclass
class PriorityAssessment:
    """Priority of one obligation on a given day"""

    obligation: Obligation
    score: float
    level: str
    is_overdue: bool
    overdue_days: int
    reason: str

    @property
    def remaining_amount(self) -> Decimal:
        return self.obligation.remaining_amount


@dataclass
class SchedulingResult:
    """Budget allocation outcome"""

    budget: Decimal
    total_needed: Decimal
    is_over_budget: bool
    scheduled_items: List[PriorityAssessment]
    critical_items: List[PriorityAssessment]
    deferred_items: List[PriorityAssessment]
    scheduled_total: Decimal
    remaining_budget: Decimal
    skipped_ids: List[Optional[int]] = field(default_factory=list)


@dataclass
class RescheduleProposal:
    """Proposed new schedule date for an overdue obligation"""

    obligation_id: int
    proposed_date: date
    scheduled_amount: Decimal
    original_due_date: Optional[date]
    overdue_days: int


@dataclass
class ScheduleEntry:
    """Confirmed schedule to persist for an obligation"""

    obligation_id: int
    scheduled_date: date
    scheduled_amount: Decimal
    notes: Optional[str] = None
