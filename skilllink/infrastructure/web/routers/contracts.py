"""
Contract router.
Milestone lifecycle, completion, cancellation, renewal, amendments and negotiations.
"""

from typing import Annotated, List, Optional
from fastapi import APIRouter, Depends, Query, status

from skilllink.application.dto.contract_dto import (
    CreateContractRequestDTO, ContractActionRequestDTO, ListContractsRequestDTO,
    MilestoneInputDTO, AddMilestoneRequestDTO, MilestoneDependencyInputDTO,
    SetMilestoneDependencyRequestDTO, MilestoneActionRequestDTO, RenewContractInputDTO,
    RenewContractRequestDTO, AmendmentInputDTO, ProposeAmendmentRequestDTO,
    AmendmentReviewInputDTO, ReviewAmendmentRequestDTO, OpenNegotiationRequestDTO,
    CounterOfferInputDTO, CounterOfferRequestDTO, NegotiationResponseInputDTO,
    RespondToNegotiationRequestDTO, ContractResponseDTO, AmendmentResponseDTO,
    NegotiationResponseDTO
)
from skilllink.application.use_cases.contract_use_cases import (
    CreateContractUseCase, GetContractUseCase, ListContractsUseCase, AddMilestoneUseCase,
    SetMilestoneDependencyUseCase, StartMilestoneUseCase, SubmitMilestoneUseCase,
    ApproveMilestoneUseCase, RejectMilestoneUseCase, CompleteContractUseCase,
    CancelContractUseCase, RenewContractUseCase
)
from skilllink.application.use_cases.negotiation_use_cases import (
    OpenNegotiationUseCase, CounterOfferUseCase, RespondToNegotiationUseCase,
    ListNegotiationsUseCase, ProposeAmendmentUseCase, ReviewAmendmentUseCase,
    ListAmendmentsUseCase
)
from skilllink.domain.models.contract import ContractStatus
from skilllink.infrastructure.auth import CurrentUser, get_current_user
from skilllink.infrastructure.db.unit_of_work import SQLAlchemyUnitOfWork, get_unit_of_work
from .common import run_use_case, build_request


router = APIRouter()

User = Annotated[CurrentUser, Depends(get_current_user)]
UoW = Annotated[SQLAlchemyUnitOfWork, Depends(get_unit_of_work)]


# Negotiations come first so "/negotiations" is not read as a contract id

@router.get("/negotiations", response_model=List[NegotiationResponseDTO])
async def list_negotiations(user: User, uow: UoW):
    return await run_use_case(ListNegotiationsUseCase(uow=uow), None, user)


@router.post("/negotiations", status_code=status.HTTP_201_CREATED, response_model=NegotiationResponseDTO)
async def open_negotiation(request: OpenNegotiationRequestDTO, user: User, uow: UoW):
    """Employer opens a negotiation on an application with a first offer."""
    return await run_use_case(OpenNegotiationUseCase(uow=uow), request, user)


@router.post("/negotiations/{negotiation_id}/counter", response_model=NegotiationResponseDTO)
async def counter_offer(negotiation_id: str, body: CounterOfferInputDTO, user: User, uow: UoW):
    """The party whose turn it is answers with a new amount."""
    request = build_request(CounterOfferRequestDTO, negotiation_id=negotiation_id, **body.model_dump())
    return await run_use_case(CounterOfferUseCase(uow=uow), request, user)


@router.post("/negotiations/{negotiation_id}/respond", response_model=NegotiationResponseDTO)
async def respond_to_negotiation(negotiation_id: str, body: NegotiationResponseInputDTO, user: User, uow: UoW):
    """Accepting the last offer creates the contract at that amount."""
    request = build_request(RespondToNegotiationRequestDTO, negotiation_id=negotiation_id, **body.model_dump())
    return await run_use_case(RespondToNegotiationUseCase(uow=uow), request, user)


@router.post("/amendments/{amendment_id}/review", response_model=AmendmentResponseDTO)
async def review_amendment(amendment_id: str, body: AmendmentReviewInputDTO, user: User, uow: UoW):
    request = build_request(ReviewAmendmentRequestDTO, amendment_id=amendment_id, **body.model_dump())
    return await run_use_case(ReviewAmendmentUseCase(uow=uow), request, user)


# Contracts

@router.post("", status_code=status.HTTP_201_CREATED, response_model=ContractResponseDTO)
async def create_contract(request: CreateContractRequestDTO, user: User, uow: UoW):
    """
    Create a draft contract from an accepted application.

    - **total_amount_minor_units**: contract total in minor units (kobo, cents)
    """
    return await run_use_case(CreateContractUseCase(uow=uow), request, user)


@router.get("", response_model=List[ContractResponseDTO])
async def list_contracts(
    user: User,
    uow: UoW,
    contract_status: Optional[ContractStatus] = Query(None, alias="status")
):
    request = build_request(ListContractsRequestDTO, status=contract_status)
    return await run_use_case(ListContractsUseCase(uow=uow), request, user)


@router.get("/{contract_id}", response_model=ContractResponseDTO)
async def get_contract(contract_id: str, user: User, uow: UoW):
    request = build_request(ContractActionRequestDTO, contract_id=contract_id)
    return await run_use_case(GetContractUseCase(uow=uow), request, user)


@router.post("/{contract_id}/complete", response_model=ContractResponseDTO)
async def complete_contract(contract_id: str, user: User, uow: UoW):
    """Employer completes the contract; any remaining escrow goes to the talent."""
    request = build_request(ContractActionRequestDTO, contract_id=contract_id)
    return await run_use_case(CompleteContractUseCase(uow=uow), request, user)


@router.post("/{contract_id}/cancel", response_model=ContractResponseDTO)
async def cancel_contract(contract_id: str, user: User, uow: UoW):
    """Held escrow is refunded to the employer."""
    request = build_request(ContractActionRequestDTO, contract_id=contract_id)
    return await run_use_case(CancelContractUseCase(uow=uow), request, user)


@router.post("/{contract_id}/renew", status_code=status.HTTP_201_CREATED, response_model=ContractResponseDTO)
async def renew_contract(contract_id: str, body: RenewContractInputDTO, user: User, uow: UoW):
    request = build_request(RenewContractRequestDTO, contract_id=contract_id, **body.model_dump())
    return await run_use_case(RenewContractUseCase(uow=uow), request, user)


# Milestones

@router.post("/{contract_id}/milestones", status_code=status.HTTP_201_CREATED, response_model=ContractResponseDTO)
async def add_milestone(contract_id: str, body: MilestoneInputDTO, user: User, uow: UoW):
    """Milestone amounts may never add up to more than the contract total."""
    request = build_request(AddMilestoneRequestDTO, contract_id=contract_id, **body.model_dump())
    return await run_use_case(AddMilestoneUseCase(uow=uow), request, user)


@router.put("/{contract_id}/milestones/{milestone_id}/dependency", response_model=ContractResponseDTO)
async def set_milestone_dependency(
    contract_id: str,
    milestone_id: str,
    body: MilestoneDependencyInputDTO,
    user: User,
    uow: UoW
):
    request = build_request(
        SetMilestoneDependencyRequestDTO,
        contract_id=contract_id, milestone_id=milestone_id, depends_on=body.depends_on
    )
    return await run_use_case(SetMilestoneDependencyUseCase(uow=uow), request, user)


async def _milestone_action(use_case_class, contract_id: str, milestone_id: str, user: CurrentUser, uow):
    request = build_request(MilestoneActionRequestDTO, contract_id=contract_id, milestone_id=milestone_id)
    return await run_use_case(use_case_class(uow=uow), request, user)


@router.post("/{contract_id}/milestones/{milestone_id}/start", response_model=ContractResponseDTO)
async def start_milestone(contract_id: str, milestone_id: str, user: User, uow: UoW):
    return await _milestone_action(StartMilestoneUseCase, contract_id, milestone_id, user, uow)


@router.post("/{contract_id}/milestones/{milestone_id}/submit", response_model=ContractResponseDTO)
async def submit_milestone(contract_id: str, milestone_id: str, user: User, uow: UoW):
    return await _milestone_action(SubmitMilestoneUseCase, contract_id, milestone_id, user, uow)


@router.post("/{contract_id}/milestones/{milestone_id}/approve", response_model=ContractResponseDTO)
async def approve_milestone(contract_id: str, milestone_id: str, user: User, uow: UoW):
    """Approval releases the milestone amount, less the platform fee, to the talent's wallet."""
    return await _milestone_action(ApproveMilestoneUseCase, contract_id, milestone_id, user, uow)


@router.post("/{contract_id}/milestones/{milestone_id}/reject", response_model=ContractResponseDTO)
async def reject_milestone(contract_id: str, milestone_id: str, user: User, uow: UoW):
    return await _milestone_action(RejectMilestoneUseCase, contract_id, milestone_id, user, uow)


# Amendments

@router.get("/{contract_id}/amendments", response_model=List[AmendmentResponseDTO])
async def list_amendments(contract_id: str, user: User, uow: UoW):
    request = build_request(ContractActionRequestDTO, contract_id=contract_id)
    return await run_use_case(ListAmendmentsUseCase(uow=uow), request, user)


@router.post("/{contract_id}/amendments", status_code=status.HTTP_201_CREATED, response_model=AmendmentResponseDTO)
async def propose_amendment(contract_id: str, body: AmendmentInputDTO, user: User, uow: UoW):
    request = build_request(ProposeAmendmentRequestDTO, contract_id=contract_id, **body.model_dump())
    return await run_use_case(ProposeAmendmentUseCase(uow=uow), request, user)
