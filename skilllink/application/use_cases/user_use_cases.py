"""
User use cases for the application layer.
Registration and sign-in through the identity provider, talent profiles and
employer accounts, and the admin employer verification queue.
"""

import logging
from typing import Any, Dict, List, Optional

from skilllink.application.use_cases.base_use_case import (
    CommandUseCase, QueryUseCase, PaginatedQueryUseCase, AuthorizedUseCase
)
from skilllink.application.dto.base_dto import EntityRequestDTO, ListResponseDTO
from skilllink.application.dto.user_dto import (
    RegisterRequestDTO, LoginRequestDTO, RefreshTokenRequestDTO, AuthResponseDTO,
    UpdateProfileRequestDTO, ProfileResponseDTO, UpdateEmployerRequestDTO, EmployerResponseDTO,
    VerifyEmployerRequestDTO, EmployerListRequestDTO, MeResponseDTO
)
from skilllink.config import settings
from skilllink.domain.models.base import ValidationError, EntityNotFoundError
from skilllink.domain.models.user import (
    Profile, Employer, RoleAssignment, UserRole, VerificationLevel
)


logger = logging.getLogger(__name__)


def _auth_response(result: Dict[str, Any], user_id: str, email: Optional[str], roles: List[UserRole]) -> AuthResponseDTO:
    session = result.get("session") or {}
    return AuthResponseDTO(
        access_token=result.get("access_token") or session.get("access_token"),
        refresh_token=result.get("refresh_token") or session.get("refresh_token"),
        expires_in=session.get("expires_in"),
        user_id=user_id,
        email=email,
        roles=[role.value for role in roles],
    )


class RegisterUserUseCase(CommandUseCase[RegisterRequestDTO, AuthResponseDTO]):
    """
    Sign a user up with the identity provider and create the local account.
    Talent get a profile; employers get an employer record.
    """

    def __init__(self, auth_service, **kwargs):
        super().__init__(**kwargs)
        self.auth_service = auth_service

    async def _validate_request(self, request: RegisterRequestDTO) -> None:
        await super()._validate_request(request)
        if UserRole(request.role) == UserRole.EMPLOYER and not request.company_name:
            raise ValidationError("Company name is required for employer accounts", "company_name")

    async def _execute_command_logic(self, request: RegisterRequestDTO) -> AuthResponseDTO:
        role = UserRole(request.role)
        result = self.auth_service.sign_up(
            request.email,
            request.password,
            {"full_name": request.full_name, "role": role.value}
        )
        user_id = str(result["user"]["id"])

        self.uow.roles.add(RoleAssignment(user_id=user_id, role=role))
        if role == UserRole.EMPLOYER:
            self.uow.employers.save(Employer(
                user_id=user_id,
                company_name=request.company_name,
                email=request.email,
            ))
        else:
            self.uow.profiles.save(Profile(
                user_id=user_id,
                full_name=request.full_name,
                email=request.email,
                phone_number=request.phone_number,
            ))

        logger.info(f"Registered {role.value} account {user_id}")
        return _auth_response(result, user_id, request.email, [role])


class LoginUseCase(QueryUseCase[LoginRequestDTO, AuthResponseDTO]):

    def __init__(self, auth_service, **kwargs):
        super().__init__(**kwargs)
        self.auth_service = auth_service

    async def _execute_business_logic(self, request: LoginRequestDTO) -> AuthResponseDTO:
        result = self.auth_service.sign_in(request.email, request.password)
        user_id = str(result["user"]["id"])
        roles = self.uow.roles.get_roles(user_id)
        return _auth_response(result, user_id, request.email, roles)


class RefreshTokenUseCase(QueryUseCase[RefreshTokenRequestDTO, AuthResponseDTO]):

    def __init__(self, auth_service, **kwargs):
        super().__init__(**kwargs)
        self.auth_service = auth_service

    async def _execute_business_logic(self, request: RefreshTokenRequestDTO) -> AuthResponseDTO:
        result = self.auth_service.refresh_token(request.refresh_token)
        user = result.get("user") or (result.get("session") or {}).get("user") or {}
        user_id = str(user.get("id", ""))
        if not user_id:
            raise ValidationError("Refreshed session has no user")
        roles = self.uow.roles.get_roles(user_id)
        return _auth_response(result, user_id, user.get("email"), roles)


class GetMeUseCase(AuthorizedUseCase, QueryUseCase[None, MeResponseDTO]):
    """The caller's roles, profile and employer account."""

    async def _execute_business_logic(self, request: None) -> MeResponseDTO:
        profile = self.uow.profiles.find_by_user_id(self.current_user_id)
        employer = self.uow.employers.find_by_user_id(self.current_user_id)
        return MeResponseDTO(
            user_id=self.current_user_id,
            roles=list(self.current_user_roles),
            profile=ProfileResponseDTO.from_domain(profile) if profile else None,
            employer=EmployerResponseDTO.from_domain(employer) if employer else None,
        )


class GetProfileUseCase(QueryUseCase[EntityRequestDTO, ProfileResponseDTO]):
    """Public talent profile by user id."""

    async def _execute_business_logic(self, request: EntityRequestDTO) -> ProfileResponseDTO:
        profile = self.uow.profiles.find_by_user_id(request.id)
        if profile is None:
            raise EntityNotFoundError("Profile", request.id)
        return ProfileResponseDTO.from_domain(profile)


class UpdateProfileUseCase(AuthorizedUseCase, CommandUseCase[UpdateProfileRequestDTO, ProfileResponseDTO]):

    async def _execute_command_logic(self, request: UpdateProfileRequestDTO) -> ProfileResponseDTO:
        profile = self.uow.profiles.find_by_user_id(self.current_user_id)
        if profile is None:
            raise EntityNotFoundError("Profile", self.current_user_id)

        profile.update_info(
            full_name=request.full_name,
            bio=request.bio,
            location=request.location,
            phone_number=request.phone_number,
            skills=request.skills,
            max_skills=settings.max_profile_skills,
        )
        saved = self.uow.profiles.save(profile)
        return ProfileResponseDTO.from_domain(saved)


class UpdateEmployerUseCase(AuthorizedUseCase, CommandUseCase[UpdateEmployerRequestDTO, EmployerResponseDTO]):

    async def _check_authorization(self, request: UpdateEmployerRequestDTO) -> None:
        self._require_role(UserRole.EMPLOYER)

    async def _execute_command_logic(self, request: UpdateEmployerRequestDTO) -> EmployerResponseDTO:
        employer = self.uow.employers.find_by_user_id(self.current_user_id)
        if employer is None:
            raise EntityNotFoundError("Employer", self.current_user_id)

        employer.update_info(
            company_name=request.company_name,
            company_description=request.company_description,
            website=request.website,
        )
        saved = self.uow.employers.save(employer)
        return EmployerResponseDTO.from_domain(saved)


class VerifyEmployerUseCase(AuthorizedUseCase, CommandUseCase[VerifyEmployerRequestDTO, EmployerResponseDTO]):
    """Admin grants or removes an employer verification tier."""

    async def _check_authorization(self, request: VerifyEmployerRequestDTO) -> None:
        self._require_role(UserRole.ADMIN)

    async def _execute_command_logic(self, request: VerifyEmployerRequestDTO) -> EmployerResponseDTO:
        employer = self.uow.employers.find_by_user_id(request.employer_user_id)
        if employer is None:
            raise EntityNotFoundError("Employer", request.employer_user_id)

        if request.approved:
            employer.verify(VerificationLevel(request.level), self.current_user_id, request.notes)
        else:
            employer.reject_verification(self.current_user_id, request.notes)

        saved = self.uow.employers.save(employer)
        logger.info(
            f"Employer {employer.user_id} verification set to {saved.verification_level.value} "
            f"by {self.current_user_id}"
        )
        return EmployerResponseDTO.from_domain(saved)


class ListEmployersUseCase(AuthorizedUseCase, PaginatedQueryUseCase[EmployerListRequestDTO, ListResponseDTO]):

    async def _check_authorization(self, request: EmployerListRequestDTO) -> None:
        self._require_role(UserRole.ADMIN)

    async def _execute_business_logic(self, request: EmployerListRequestDTO) -> ListResponseDTO:
        employers, total = self.uow.employers.list_by_verification(
            verified=request.verified,
            limit=request.limit,
            offset=request.offset
        )
        return ListResponseDTO[EmployerResponseDTO].create(
            items=[EmployerResponseDTO.from_domain(e) for e in employers],
            total=total,
            page=request.page,
            page_size=request.page_size
        )
