"""
Profile router: talent profiles, employer accounts and badges.
"""

from typing import Annotated, List
from fastapi import APIRouter, Depends

from skilllink.application.dto.base_dto import EntityRequestDTO
from skilllink.application.dto.user_dto import (
    UpdateProfileRequestDTO, UpdateEmployerRequestDTO, ProfileResponseDTO, EmployerResponseDTO
)
from skilllink.application.dto.verification_dto import ListBadgesRequestDTO, BadgeResponseDTO
from skilllink.application.use_cases.user_use_cases import (
    GetProfileUseCase, UpdateProfileUseCase, UpdateEmployerUseCase
)
from skilllink.application.use_cases.verification_use_cases import ListBadgesUseCase
from skilllink.infrastructure.auth import CurrentUser, get_current_user
from skilllink.infrastructure.db.unit_of_work import SQLAlchemyUnitOfWork, get_unit_of_work
from .common import run_use_case, build_request


router = APIRouter()


@router.put("/me", response_model=ProfileResponseDTO)
async def update_my_profile(
    request: UpdateProfileRequestDTO,
    user: Annotated[CurrentUser, Depends(get_current_user)],
    uow: Annotated[SQLAlchemyUnitOfWork, Depends(get_unit_of_work)]
):
    """Update the caller's talent profile. Skills are normalized and de-duplicated."""
    return await run_use_case(UpdateProfileUseCase(uow=uow), request, user)


@router.put("/me/employer", response_model=EmployerResponseDTO)
async def update_my_employer(
    request: UpdateEmployerRequestDTO,
    user: Annotated[CurrentUser, Depends(get_current_user)],
    uow: Annotated[SQLAlchemyUnitOfWork, Depends(get_unit_of_work)]
):
    return await run_use_case(UpdateEmployerUseCase(uow=uow), request, user)


@router.get("/{user_id}", response_model=ProfileResponseDTO)
async def get_profile(
    user_id: str,
    uow: Annotated[SQLAlchemyUnitOfWork, Depends(get_unit_of_work)]
):
    return await run_use_case(GetProfileUseCase(uow=uow), build_request(EntityRequestDTO, id=user_id))


@router.get("/{user_id}/badges", response_model=List[BadgeResponseDTO])
async def list_badges(
    user_id: str,
    uow: Annotated[SQLAlchemyUnitOfWork, Depends(get_unit_of_work)]
):
    """Verification badges are public."""
    return await run_use_case(ListBadgesUseCase(uow=uow), build_request(ListBadgesRequestDTO, talent_id=user_id))
