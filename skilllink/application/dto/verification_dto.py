"""
Verification DTOs for the application layer.
Talent verification requests and trust badges.
"""

from typing import Any, Dict, Optional
from datetime import datetime
from pydantic import Field, validator

from .base_dto import RequestDTO, ResponseDTO, ListRequestDTO
from skilllink.domain.models.verification import (
    VerificationBadge, VerificationRequest, BadgeType, BadgeLevel, VerificationRequestStatus
)
from skilllink.infrastructure.validation.validators import SecurityValidator, safe_text_validator


class CreateVerificationRequestDTO(RequestDTO):
    request_type: BadgeType
    verification_data: Dict[str, Any] = Field(default_factory=dict, description="Documents and links")

    @validator('verification_data', pre=True)
    def validate_data(cls, v):
        if not isinstance(v, dict):
            raise ValueError("Verification data must be an object")
        for value in v.values():
            if isinstance(value, str):
                SecurityValidator.check_xss(value)
        return v


class VerificationReviewInputDTO(RequestDTO):
    approved: bool
    notes: Optional[str] = Field(default=None, max_length=2000)

    @validator('notes', pre=True)
    def validate_notes(cls, v):
        if v is not None:
            return safe_text_validator(v)
        return v


class ReviewVerificationRequestDTO(VerificationReviewInputDTO):
    request_id: str = Field(min_length=1)


class IssueBadgeRequestDTO(RequestDTO):
    talent_id: str = Field(min_length=1)
    badge_type: BadgeType
    badge_level: BadgeLevel = BadgeLevel.BRONZE


class ListBadgesRequestDTO(RequestDTO):
    talent_id: str = Field(min_length=1)


class VerificationListRequestDTO(ListRequestDTO):
    status: Optional[VerificationRequestStatus] = None


class BadgeResponseDTO(ResponseDTO):
    talent_id: str
    badge_type: BadgeType
    badge_level: BadgeLevel
    issued_by: Optional[str] = None
    issued_at: datetime

    @classmethod
    def from_domain(cls, badge: VerificationBadge) -> "BadgeResponseDTO":
        return cls(
            id=badge.id,
            created_at=badge.created_at,
            updated_at=badge.updated_at,
            talent_id=badge.talent_id,
            badge_type=badge.badge_type,
            badge_level=badge.badge_level,
            issued_by=badge.issued_by,
            issued_at=badge.issued_at,
        )


class VerificationRequestResponseDTO(ResponseDTO):
    talent_id: str
    request_type: BadgeType
    verification_data: Dict[str, Any] = Field(default_factory=dict)
    status: VerificationRequestStatus
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    admin_notes: Optional[str] = None

    @classmethod
    def from_domain(cls, request: VerificationRequest) -> "VerificationRequestResponseDTO":
        return cls(
            id=request.id,
            created_at=request.created_at,
            updated_at=request.updated_at,
            talent_id=request.talent_id,
            request_type=request.request_type,
            verification_data=dict(request.verification_data),
            status=request.status,
            reviewed_by=request.reviewed_by,
            reviewed_at=request.reviewed_at,
            admin_notes=request.admin_notes,
        )
