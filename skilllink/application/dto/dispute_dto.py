"""
Dispute DTOs for the application layer.
"""

from typing import Optional
from datetime import datetime
from pydantic import Field, validator

from .base_dto import RequestDTO, ResponseDTO, ListRequestDTO
from skilllink.domain.models.dispute import Dispute, DisputeStatus, DisputeOutcome
from skilllink.infrastructure.validation.validators import safe_text_validator


class RaiseDisputeRequestDTO(RequestDTO):
    contract_id: str = Field(min_length=1)
    reason: str = Field(min_length=10, max_length=5000)

    @validator('reason', pre=True)
    def validate_reason(cls, v):
        return safe_text_validator(v)


class DisputeActionRequestDTO(RequestDTO):
    dispute_id: str = Field(min_length=1)


class ResolveDisputeInputDTO(RequestDTO):
    resolution: str = Field(min_length=1, max_length=5000)
    outcome: DisputeOutcome = Field(default=DisputeOutcome.NONE, description="What happens to held funds")

    @validator('resolution', pre=True)
    def validate_resolution(cls, v):
        return safe_text_validator(v)


class ResolveDisputeRequestDTO(ResolveDisputeInputDTO):
    dispute_id: str = Field(min_length=1)


class CloseDisputeInputDTO(RequestDTO):
    note: Optional[str] = Field(default=None, max_length=5000)

    @validator('note', pre=True)
    def validate_note(cls, v):
        if v is not None:
            return safe_text_validator(v)
        return v


class CloseDisputeRequestDTO(CloseDisputeInputDTO):
    dispute_id: str = Field(min_length=1)


class DisputeListRequestDTO(ListRequestDTO):
    status: Optional[DisputeStatus] = None


class DisputeResponseDTO(ResponseDTO):
    contract_id: str
    raised_by: str
    reason: str
    status: DisputeStatus
    resolution: Optional[str] = None
    outcome: Optional[DisputeOutcome] = None
    resolved_by: Optional[str] = None
    resolved_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, dispute: Dispute) -> "DisputeResponseDTO":
        return cls(
            id=dispute.id,
            created_at=dispute.created_at,
            updated_at=dispute.updated_at,
            contract_id=dispute.contract_id,
            raised_by=dispute.raised_by,
            reason=dispute.reason,
            status=dispute.status,
            resolution=dispute.resolution,
            outcome=dispute.outcome,
            resolved_by=dispute.resolved_by,
            resolved_at=dispute.resolved_at,
        )
