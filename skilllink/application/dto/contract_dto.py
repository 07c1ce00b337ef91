"""
Contract DTOs for the application layer.
Contracts, milestones, renewals, amendments and negotiations.
"""

from typing import Any, Dict, Optional, List
from datetime import datetime
from pydantic import Field, validator

from .base_dto import RequestDTO, ResponseDTO
from skilllink.domain.models.contract import (
    Contract, Milestone, ContractAmendment, ContractStatus, EscrowStatus, MilestoneStatus,
    AmendmentType, AmendmentStatus
)
from skilllink.domain.models.base import as_naive_utc
from skilllink.domain.models.negotiation import ContractNegotiation, NegotiationStatus
from skilllink.infrastructure.validation.validators import (
    DataValidator, BusinessValidator, safe_text_validator
)


def _clean_terms(v):
    if v is not None:
        return safe_text_validator(v)
    return v


# Contracts
class CreateContractRequestDTO(RequestDTO):
    """Draw up a contract for an accepted application."""

    application_id: str = Field(min_length=1)
    total_amount_minor_units: int = Field(gt=0, description="Contract total in minor units")
    currency: str = Field(default="NGN", max_length=3)
    terms: Optional[str] = Field(default=None, max_length=20000)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

    @validator('terms', pre=True)
    def validate_terms(cls, v):
        return _clean_terms(v)

    @validator('start_date')
    def normalize_start_date(cls, v):
        return as_naive_utc(v)

    @validator('currency', pre=True)
    def validate_currency(cls, v):
        return DataValidator.validate_currency_code(v)

    @validator('end_date')
    def validate_dates(cls, v, values):
        v = as_naive_utc(v)
        start = values.get('start_date')
        if v is not None and start is not None and v < start:
            raise ValueError("End date cannot be before start date")
        return v


class ContractActionRequestDTO(RequestDTO):
    contract_id: str = Field(min_length=1)


class ListContractsRequestDTO(RequestDTO):
    status: Optional[ContractStatus] = None


class MilestoneInputDTO(RequestDTO):
    """Milestone fields supplied in the request body."""

    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=5000)
    amount_minor_units: int = Field(gt=0)
    due_date: Optional[datetime] = None
    depends_on: Optional[str] = Field(default=None, description="Milestone that must be approved first")

    @validator('title', pre=True)
    def validate_title(cls, v):
        return BusinessValidator.validate_title(v)

    @validator('due_date')
    def normalize_due_date(cls, v):
        return as_naive_utc(v)

    @validator('description', pre=True)
    def validate_description(cls, v):
        if v is not None:
            return safe_text_validator(v)
        return v


class AddMilestoneRequestDTO(MilestoneInputDTO):
    contract_id: str = Field(min_length=1)


class MilestoneDependencyInputDTO(RequestDTO):
    depends_on: Optional[str] = Field(default=None, description="None clears the dependency")


class SetMilestoneDependencyRequestDTO(MilestoneDependencyInputDTO):
    contract_id: str = Field(min_length=1)
    milestone_id: str = Field(min_length=1)


class MilestoneActionRequestDTO(RequestDTO):
    """Start, submit, approve or reject a milestone."""

    contract_id: str = Field(min_length=1)
    milestone_id: str = Field(min_length=1)


class RenewContractInputDTO(RequestDTO):
    total_amount_minor_units: int = Field(gt=0)
    duration_days: int = Field(default=30, gt=0, le=3650)
    terms: Optional[str] = Field(default=None, max_length=20000)

    @validator('terms', pre=True)
    def validate_terms(cls, v):
        return _clean_terms(v)


class RenewContractRequestDTO(RenewContractInputDTO):
    contract_id: str = Field(min_length=1)


class MilestoneResponseDTO(ResponseDTO):
    contract_id: str
    title: str
    description: Optional[str] = None
    amount_minor_units: int
    due_date: Optional[datetime] = None
    status: MilestoneStatus
    depends_on: Optional[str] = None
    order_index: int = 0
    submitted_at: Optional[datetime] = None
    approved_at: Optional[datetime] = None
    released: bool = False
    released_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, milestone: Milestone) -> "MilestoneResponseDTO":
        return cls(
            id=milestone.id,
            created_at=milestone.created_at,
            updated_at=milestone.updated_at,
            contract_id=milestone.contract_id,
            title=milestone.title,
            description=milestone.description,
            amount_minor_units=milestone.amount_minor_units,
            due_date=milestone.due_date,
            status=milestone.status,
            depends_on=milestone.depends_on,
            order_index=milestone.order_index,
            submitted_at=milestone.submitted_at,
            approved_at=milestone.approved_at,
            released=milestone.released,
            released_at=milestone.released_at,
        )


class ContractResponseDTO(ResponseDTO):
    job_id: str
    application_id: Optional[str] = None
    employer_id: str
    talent_id: str
    total_amount_minor_units: int
    currency: str
    terms: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    status: ContractStatus
    escrow_status: EscrowStatus
    parent_contract_id: Optional[str] = None
    is_renewal: bool = False
    version: int = 1
    milestones: List[MilestoneResponseDTO] = Field(default_factory=list)
    held_balance_minor_units: Optional[int] = None

    @classmethod
    def from_domain(cls, contract: Contract, held_balance: Optional[int] = None) -> "ContractResponseDTO":
        return cls(
            id=contract.id,
            created_at=contract.created_at,
            updated_at=contract.updated_at,
            job_id=contract.job_id,
            application_id=contract.application_id,
            employer_id=contract.employer_id,
            talent_id=contract.talent_id,
            total_amount_minor_units=contract.total_amount_minor_units,
            currency=contract.currency,
            terms=contract.terms,
            start_date=contract.start_date,
            end_date=contract.end_date,
            status=contract.status,
            escrow_status=contract.escrow_status,
            parent_contract_id=contract.parent_contract_id,
            is_renewal=contract.is_renewal,
            version=contract.version,
            milestones=[MilestoneResponseDTO.from_domain(m) for m in contract.milestones],
            held_balance_minor_units=held_balance,
        )


# Amendments
class AmendmentInputDTO(RequestDTO):
    amendment_type: AmendmentType
    amendment_data: Dict[str, Any] = Field(default_factory=dict)

    @validator('amendment_data', pre=True)
    def validate_data(cls, v):
        if not isinstance(v, dict):
            raise ValueError("Amendment data must be an object")
        return {
            key: safe_text_validator(value) if isinstance(value, str) else value
            for key, value in v.items()
        }


class ProposeAmendmentRequestDTO(AmendmentInputDTO):
    contract_id: str = Field(min_length=1)


class AmendmentReviewInputDTO(RequestDTO):
    approve: bool
    reason: Optional[str] = Field(default=None, max_length=2000, description="Required when rejecting")

    @validator('reason', pre=True)
    def validate_reason(cls, v):
        return _clean_terms(v)


class ReviewAmendmentRequestDTO(AmendmentReviewInputDTO):
    amendment_id: str = Field(min_length=1)


class AmendmentResponseDTO(ResponseDTO):
    contract_id: str
    proposed_by: str
    amendment_type: AmendmentType
    amendment_data: Dict[str, Any] = Field(default_factory=dict)
    status: AmendmentStatus
    approved_by: Optional[str] = None
    rejection_reason: Optional[str] = None
    reviewed_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, amendment: ContractAmendment) -> "AmendmentResponseDTO":
        return cls(
            id=amendment.id,
            created_at=amendment.created_at,
            updated_at=amendment.updated_at,
            contract_id=amendment.contract_id,
            proposed_by=amendment.proposed_by,
            amendment_type=amendment.amendment_type,
            amendment_data=dict(amendment.amendment_data),
            status=amendment.status,
            approved_by=amendment.approved_by,
            rejection_reason=amendment.rejection_reason,
            reviewed_at=amendment.reviewed_at,
        )


# Negotiations
class OpenNegotiationRequestDTO(RequestDTO):
    """Employer's opening proposal on an application."""

    application_id: str = Field(min_length=1)
    amount_minor_units: int = Field(gt=0)
    terms: Optional[str] = Field(default=None, max_length=20000)

    @validator('terms', pre=True)
    def validate_terms(cls, v):
        return _clean_terms(v)


class CounterOfferInputDTO(RequestDTO):
    amount_minor_units: int = Field(gt=0)
    terms: Optional[str] = Field(default=None, max_length=20000)

    @validator('terms', pre=True)
    def validate_terms(cls, v):
        return _clean_terms(v)


class CounterOfferRequestDTO(CounterOfferInputDTO):
    negotiation_id: str = Field(min_length=1)


class NegotiationResponseInputDTO(RequestDTO):
    accept: bool
    currency: str = Field(default="NGN", max_length=3, description="Currency of the resulting contract")

    @validator('currency', pre=True)
    def validate_currency(cls, v):
        return DataValidator.validate_currency_code(v)


class RespondToNegotiationRequestDTO(NegotiationResponseInputDTO):
    negotiation_id: str = Field(min_length=1)


class NegotiationResponseDTO(ResponseDTO):
    job_id: str
    application_id: str
    employer_id: str
    talent_id: str
    proposed_amount_minor_units: int
    terms: Optional[str] = None
    counter_offer_amount_minor_units: Optional[int] = None
    counter_terms: Optional[str] = None
    status: NegotiationStatus
    contract_id: Optional[str] = None
    awaiting_user_id: Optional[str] = None

    @classmethod
    def from_domain(cls, negotiation: ContractNegotiation) -> "NegotiationResponseDTO":
        return cls(
            id=negotiation.id,
            created_at=negotiation.created_at,
            updated_at=negotiation.updated_at,
            job_id=negotiation.job_id,
            application_id=negotiation.application_id,
            employer_id=negotiation.employer_id,
            talent_id=negotiation.talent_id,
            proposed_amount_minor_units=negotiation.proposed_amount_minor_units,
            terms=negotiation.terms,
            counter_offer_amount_minor_units=negotiation.counter_offer_amount_minor_units,
            counter_terms=negotiation.counter_terms,
            status=negotiation.status,
            contract_id=negotiation.contract_id,
            awaiting_user_id=negotiation.awaiting_user_id,
        )
