"""
Dispute router.
Parties raise disputes; admins review, resolve or close them.
"""

from typing import Annotated, Optional
from fastapi import APIRouter, Depends, Query, status

from skilllink.application.dto.base_dto import ListResponseDTO
from skilllink.application.dto.dispute_dto import (
    RaiseDisputeRequestDTO, DisputeActionRequestDTO, ResolveDisputeInputDTO, ResolveDisputeRequestDTO,
    CloseDisputeInputDTO, CloseDisputeRequestDTO, DisputeListRequestDTO, DisputeResponseDTO
)
from skilllink.application.use_cases.dispute_use_cases import (
    RaiseDisputeUseCase, GetDisputeUseCase, ListDisputesUseCase, ReviewDisputeUseCase,
    ResolveDisputeUseCase, CloseDisputeUseCase
)
from skilllink.domain.models.dispute import DisputeStatus
from skilllink.infrastructure.auth import CurrentUser, get_current_user
from skilllink.infrastructure.db.unit_of_work import SQLAlchemyUnitOfWork, get_unit_of_work
from .common import run_use_case, build_request, PageQuery, PageSizeQuery


router = APIRouter()

User = Annotated[CurrentUser, Depends(get_current_user)]
UoW = Annotated[SQLAlchemyUnitOfWork, Depends(get_unit_of_work)]


@router.post("", status_code=status.HTTP_201_CREATED, response_model=DisputeResponseDTO)
async def raise_dispute(request: RaiseDisputeRequestDTO, user: User, uow: UoW):
    """Freezes milestone releases on the contract until the dispute is settled."""
    return await run_use_case(RaiseDisputeUseCase(uow=uow), request, user)


@router.get("", response_model=ListResponseDTO[DisputeResponseDTO])
async def list_disputes(
    user: User,
    uow: UoW,
    dispute_status: Optional[DisputeStatus] = Query(None, alias="status"),
    page: PageQuery = 1,
    page_size: PageSizeQuery = 20
):
    request = build_request(DisputeListRequestDTO, status=dispute_status, page=page, page_size=page_size)
    return await run_use_case(ListDisputesUseCase(uow=uow), request, user)


@router.get("/{dispute_id}", response_model=DisputeResponseDTO)
async def get_dispute(dispute_id: str, user: User, uow: UoW):
    request = build_request(DisputeActionRequestDTO, dispute_id=dispute_id)
    return await run_use_case(GetDisputeUseCase(uow=uow), request, user)


@router.post("/{dispute_id}/review", response_model=DisputeResponseDTO)
async def review_dispute(dispute_id: str, user: User, uow: UoW):
    request = build_request(DisputeActionRequestDTO, dispute_id=dispute_id)
    return await run_use_case(ReviewDisputeUseCase(uow=uow), request, user)


@router.post("/{dispute_id}/resolve", response_model=DisputeResponseDTO)
async def resolve_dispute(dispute_id: str, body: ResolveDisputeInputDTO, user: User, uow: UoW):
    """
    Settle a dispute.

    - **outcome**: `release` pays held escrow to the talent, `refund` returns it
      to the employer, `none` lets the contract continue
    """
    request = build_request(ResolveDisputeRequestDTO, dispute_id=dispute_id, **body.model_dump())
    return await run_use_case(ResolveDisputeUseCase(uow=uow), request, user)


@router.post("/{dispute_id}/close", response_model=DisputeResponseDTO)
async def close_dispute(dispute_id: str, body: CloseDisputeInputDTO, user: User, uow: UoW):
    request = build_request(CloseDisputeRequestDTO, dispute_id=dispute_id, note=body.note)
    return await run_use_case(CloseDisputeUseCase(uow=uow), request, user)
