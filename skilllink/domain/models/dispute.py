"""
Contract disputes and their automatic escalation.
"""

from datetime import datetime, timedelta
from enum import Enum
from typing import Optional
from dataclasses import dataclass

from .base import BaseEntity, AggregateRoot, ValidationError, BusinessRuleViolation, utc_now


class DisputeStatus(str, Enum):
    OPEN = "open"
    IN_REVIEW = "in_review"
    RESOLVED = "resolved"
    CLOSED = "closed"


class DisputeOutcome(str, Enum):
    NONE = "none"          # contract resumes
    RELEASE = "release"    # held funds go to talent
    REFUND = "refund"      # held funds go back to the employer


ESCALATION_NOTE = "Automatically escalated after {hours} hours without resolution"


@dataclass(eq=False)
class Dispute(AggregateRoot):
    contract_id: str = ""
    raised_by: str = ""
    reason: str = ""
    status: DisputeStatus = DisputeStatus.OPEN
    resolution: Optional[str] = None
    outcome: Optional[DisputeOutcome] = None
    resolved_by: Optional[str] = None
    resolved_at: Optional[datetime] = None

    def __post_init__(self):
        super().__post_init__()
        self.validate()

    def validate(self) -> None:
        if not self.contract_id:
            raise ValidationError("Dispute requires a contract", "contract_id")
        if not self.reason or len(self.reason.strip()) < 10:
            raise ValidationError("Dispute reason must be at least 10 characters", "reason")

    @property
    def is_unresolved(self) -> bool:
        return self.status in (DisputeStatus.OPEN, DisputeStatus.IN_REVIEW)

    def is_stale(self, hours: int, now: Optional[datetime] = None) -> bool:
        """Open for longer than ``hours`` without anyone picking it up."""
        now = now or utc_now()
        return self.status == DisputeStatus.OPEN and self.created_at <= now - timedelta(hours=hours)

    def start_review(self) -> None:
        if self.status != DisputeStatus.OPEN:
            raise BusinessRuleViolation(f"Only open disputes can be taken into review (status is {self.status.value})")
        self.status = DisputeStatus.IN_REVIEW
        self.mark_as_updated()

    def resolve(self, admin_id: str, resolution: str, outcome: DisputeOutcome) -> None:
        if not self.is_unresolved:
            raise BusinessRuleViolation(f"Dispute is already {self.status.value}")
        if not resolution or not resolution.strip():
            raise ValidationError("Please provide a resolution", "resolution")
        self.status = DisputeStatus.RESOLVED
        self.resolution = resolution.strip()
        self.outcome = outcome
        self.resolved_by = admin_id
        self.resolved_at = utc_now()
        self.mark_as_updated()

    def close(self, admin_id: str, note: Optional[str] = None) -> None:
        if not self.is_unresolved:
            raise BusinessRuleViolation(f"Dispute is already {self.status.value}")
        self.status = DisputeStatus.CLOSED
        self.resolution = note
        self.outcome = DisputeOutcome.NONE
        self.resolved_by = admin_id
        self.resolved_at = utc_now()
        self.mark_as_updated()


@dataclass(eq=False)
class DisputeEscalation(BaseEntity):
    """Hand-off of a stale dispute to an administrator."""

    dispute_id: str = ""
    escalated_to: str = ""
    escalation_reason: str = "timeout"
    notes: Optional[str] = None
