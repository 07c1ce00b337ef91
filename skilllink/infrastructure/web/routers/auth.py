"""
Authentication router.
Sign-up, sign-in and token refresh through Supabase Auth.
"""

from typing import Annotated
from fastapi import APIRouter, Depends, status

from skilllink.application.dto.user_dto import (
    RegisterRequestDTO, LoginRequestDTO, RefreshTokenRequestDTO, AuthResponseDTO, MeResponseDTO
)
from skilllink.application.use_cases.user_use_cases import (
    RegisterUserUseCase, LoginUseCase, RefreshTokenUseCase, GetMeUseCase
)
from skilllink.infrastructure.auth import CurrentUser, SupabaseAuthService, get_auth_service, get_current_user
from skilllink.infrastructure.db.unit_of_work import SQLAlchemyUnitOfWork, get_unit_of_work
from skilllink.infrastructure.rate_limiting import auth_rate_limit
from .common import run_use_case


router = APIRouter()


@router.post("/register", status_code=status.HTTP_201_CREATED, response_model=AuthResponseDTO)
async def register(
    request: RegisterRequestDTO,
    uow: Annotated[SQLAlchemyUnitOfWork, Depends(get_unit_of_work)],
    auth_service: Annotated[SupabaseAuthService, Depends(get_auth_service)],
    _=Depends(auth_rate_limit)
):
    """
    Register a talent or employer account.

    - **role**: `talent` (default) or `employer`
    - **company_name**: required for employers
    """
    return await run_use_case(RegisterUserUseCase(auth_service=auth_service, uow=uow), request)


@router.post("/login", response_model=AuthResponseDTO)
async def login(
    request: LoginRequestDTO,
    uow: Annotated[SQLAlchemyUnitOfWork, Depends(get_unit_of_work)],
    auth_service: Annotated[SupabaseAuthService, Depends(get_auth_service)],
    _=Depends(auth_rate_limit)
):
    return await run_use_case(LoginUseCase(auth_service=auth_service, uow=uow), request)


@router.post("/refresh", response_model=AuthResponseDTO)
async def refresh(
    request: RefreshTokenRequestDTO,
    uow: Annotated[SQLAlchemyUnitOfWork, Depends(get_unit_of_work)],
    auth_service: Annotated[SupabaseAuthService, Depends(get_auth_service)]
):
    return await run_use_case(RefreshTokenUseCase(auth_service=auth_service, uow=uow), request)


@router.get("/me", response_model=MeResponseDTO)
async def me(
    user: Annotated[CurrentUser, Depends(get_current_user)],
    uow: Annotated[SQLAlchemyUnitOfWork, Depends(get_unit_of_work)]
):
    """Current user's roles, profile and employer account."""
    return await run_use_case(GetMeUseCase(uow=uow), None, user)
