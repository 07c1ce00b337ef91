"""
Trust badges for talent and the requests that lead to them.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional
from dataclasses import dataclass, field

from .base import BaseEntity, ValidationError, BusinessRuleViolation, utc_now


class BadgeType(str, Enum):
    IDENTITY = "identity"
    SKILL = "skill"
    PORTFOLIO = "portfolio"
    BLUE_TICK = "blue_tick"


class BadgeLevel(str, Enum):
    BRONZE = "bronze"
    SILVER = "silver"
    GOLD = "gold"
    PLATINUM = "platinum"


class VerificationRequestStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


REQUESTABLE_BADGES = (BadgeType.IDENTITY, BadgeType.SKILL, BadgeType.PORTFOLIO)


@dataclass(eq=False)
class VerificationBadge(BaseEntity):
    """At most one badge per talent and badge type."""

    talent_id: str = ""
    badge_type: BadgeType = BadgeType.IDENTITY
    badge_level: BadgeLevel = BadgeLevel.BRONZE
    issued_by: Optional[str] = None
    issued_at: datetime = field(default_factory=utc_now)

    def upgrade(self, level: BadgeLevel, issued_by: str) -> None:
        self.badge_level = level
        self.issued_by = issued_by
        self.issued_at = utc_now()
        self.mark_as_updated()


@dataclass(eq=False)
class VerificationRequest(BaseEntity):
    talent_id: str = ""
    request_type: BadgeType = BadgeType.IDENTITY
    verification_data: Dict[str, Any] = field(default_factory=dict)
    status: VerificationRequestStatus = VerificationRequestStatus.PENDING
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    admin_notes: Optional[str] = None

    def __post_init__(self):
        super().__post_init__()
        self.validate()

    def validate(self) -> None:
        if not self.talent_id:
            raise ValidationError("Verification request requires a talent", "talent_id")
        if self.request_type not in REQUESTABLE_BADGES:
            raise ValidationError(
                f"Badge type {self.request_type.value} cannot be requested", "request_type"
            )

    @property
    def is_pending(self) -> bool:
        return self.status == VerificationRequestStatus.PENDING

    def review(self, admin_id: str, approved: bool, notes: Optional[str] = None) -> None:
        if not self.is_pending:
            raise BusinessRuleViolation(f"Request already {self.status.value}")
        self.status = VerificationRequestStatus.APPROVED if approved else VerificationRequestStatus.REJECTED
        self.reviewed_by = admin_id
        self.reviewed_at = utc_now()
        self.admin_notes = notes
        self.mark_as_updated()
