"""
Verification router: talent ask for badges and follow their requests.
"""

from typing import Annotated, List
from fastapi import APIRouter, Depends, status

from skilllink.application.dto.verification_dto import (
    CreateVerificationRequestDTO, VerificationRequestResponseDTO
)
from skilllink.application.use_cases.verification_use_cases import (
    RequestVerificationUseCase, ListMyVerificationRequestsUseCase
)
from skilllink.infrastructure.auth import CurrentUser, get_current_user
from skilllink.infrastructure.db.unit_of_work import SQLAlchemyUnitOfWork, get_unit_of_work
from .common import run_use_case


router = APIRouter()


@router.post("/requests", status_code=status.HTTP_201_CREATED, response_model=VerificationRequestResponseDTO)
async def request_verification(
    request: CreateVerificationRequestDTO,
    user: Annotated[CurrentUser, Depends(get_current_user)],
    uow: Annotated[SQLAlchemyUnitOfWork, Depends(get_unit_of_work)]
):
    """One pending request per badge type."""
    return await run_use_case(RequestVerificationUseCase(uow=uow), request, user)


@router.get("/requests/mine", response_model=List[VerificationRequestResponseDTO])
async def list_my_requests(
    user: Annotated[CurrentUser, Depends(get_current_user)],
    uow: Annotated[SQLAlchemyUnitOfWork, Depends(get_unit_of_work)]
):
    return await run_use_case(ListMyVerificationRequestsUseCase(uow=uow), None, user)
