"""
Unit tests for registration, profiles and employer verification.
"""

import pytest
from unittest.mock import Mock

from skilllink.application.dto.user_dto import (
    RegisterRequestDTO, LoginRequestDTO, UpdateProfileRequestDTO, VerifyEmployerRequestDTO
)
from skilllink.application.use_cases.user_use_cases import (
    RegisterUserUseCase, LoginUseCase, UpdateProfileUseCase, VerifyEmployerUseCase
)
from skilllink.domain.models.user import UserRole, VerificationLevel
from skilllink.infrastructure.auth.supabase_auth import SupabaseAuthService


def auth_service_for(user_id):
    service = Mock(spec=SupabaseAuthService)
    result = {
        "user": {"id": user_id},
        "session": {"access_token": "access", "refresh_token": "refresh", "expires_in": 3600},
    }
    service.sign_up.return_value = result
    service.sign_in.return_value = result
    return service


async def register(uow, user_id, **fields):
    service = auth_service_for(user_id)
    result = await RegisterUserUseCase(auth_service=service, uow=uow).execute(RegisterRequestDTO(**fields))
    return result, service


class TestRegister:
    """Test cases for account creation."""

    @pytest.mark.asyncio
    async def test_talent_gets_profile(self, uow):
        result, service = await register(uow, "new-talent", email="Ada@Example.com", password="s3cret-pass",
                                         full_name="Ada Lovelace")

        assert result.success is True
        assert result.data.roles == ["talent"]
        assert result.data.access_token == "access"
        service.sign_up.assert_called_once_with(
            "ada@example.com", "s3cret-pass", {"full_name": "Ada Lovelace", "role": "talent"}
        )
        assert uow.roles.get_roles("new-talent") == [UserRole.TALENT]
        assert uow.profiles.find_by_user_id("new-talent").full_name == "Ada Lovelace"
        assert uow.employers.find_by_user_id("new-talent") is None

    @pytest.mark.asyncio
    async def test_employer_gets_employer_record(self, uow):
        result, _ = await register(uow, "new-employer", email="hire@widgets.ng", password="s3cret-pass",
                                   full_name="Bola Founder", role="employer", company_name="Widgets Ltd")

        assert result.success is True
        assert uow.roles.get_roles("new-employer") == [UserRole.EMPLOYER]
        employer = uow.employers.find_by_user_id("new-employer")
        assert employer.company_name == "Widgets Ltd"
        assert employer.verification_level == VerificationLevel.UNVERIFIED
        assert uow.profiles.find_by_user_id("new-employer") is None

    @pytest.mark.asyncio
    async def test_employer_needs_company(self, uow):
        result, service = await register(uow, "new-employer", email="hire@widgets.ng", password="s3cret-pass",
                                         full_name="Bola Founder", role="employer")

        assert result.error_code == "VALIDATION_ERROR"
        service.sign_up.assert_not_called()

    def test_admin_cannot_self_register(self):
        with pytest.raises(ValueError):
            RegisterRequestDTO(email="root@example.com", password="s3cret-pass", full_name="Root", role="admin")

    def test_malformed_email_rejected(self):
        with pytest.raises(ValueError):
            RegisterRequestDTO(email="not-an-email", password="s3cret-pass", full_name="Ada")

    @pytest.mark.asyncio
    async def test_login_returns_stored_roles(self, uow, marketplace):
        result = await LoginUseCase(auth_service=auth_service_for(marketplace.talent_id), uow=uow).execute(
            LoginRequestDTO(email="ada@example.com", password="s3cret-pass")
        )

        assert result.data.user_id == marketplace.talent_id
        assert result.data.roles == ["talent"]


class TestUpdateProfile:
    """Test cases for talent profile edits."""

    async def update(self, uow, user_id, **fields):
        use_case = UpdateProfileUseCase(uow=uow).set_current_user(user_id, ["talent"])
        return await use_case.execute(UpdateProfileRequestDTO(**fields))

    @pytest.mark.asyncio
    async def test_skills_deduplicated_ignoring_case(self, uow, marketplace):
        result = await self.update(uow, marketplace.talent_id,
                                   skills=["Python", "python ", "Django", "PYTHON", "  "], bio="Backend engineer")

        assert result.success is True
        assert result.data.skills == ["Python", "Django"]
        assert result.data.bio == "Backend engineer"

    @pytest.mark.asyncio
    async def test_skills_capped_at_thirty(self, uow, marketplace):
        result = await self.update(uow, marketplace.talent_id, skills=[f"Skill {n}" for n in range(31)])

        assert result.success is False
        assert result.error_code == "VALIDATION_ERROR"
        assert uow.profiles.find_by_user_id(marketplace.talent_id).skills == []

    @pytest.mark.asyncio
    async def test_duplicates_do_not_count_towards_cap(self, uow, marketplace):
        skills = [f"Skill {n}" for n in range(30)] + [f"skill {n}" for n in range(30)]

        result = await self.update(uow, marketplace.talent_id, skills=skills)

        assert result.success is True
        assert len(result.data.skills) == 30

    @pytest.mark.asyncio
    async def test_profile_required(self, uow, marketplace):
        result = await self.update(uow, marketplace.employer_id, full_name="Nobody")

        assert result.error_code == "ENTITY_NOT_FOUND"


class TestVerifyEmployer:

    @pytest.mark.asyncio
    async def test_admin_verifies_then_revokes(self, uow, marketplace):
        use_case = VerifyEmployerUseCase(uow=uow).set_current_user(marketplace.admin_id, ["admin"])
        verified = await use_case.execute(VerifyEmployerRequestDTO(
            employer_user_id=marketplace.employer_id, approved=True, level="premium", notes="CAC documents checked"
        ))

        assert verified.data.verified is True
        assert verified.data.verification_level == VerificationLevel.PREMIUM.value
        assert verified.data.verified_by == marketplace.admin_id

        use_case = VerifyEmployerUseCase(uow=uow).set_current_user(marketplace.admin_id, ["admin"])
        revoked = await use_case.execute(VerifyEmployerRequestDTO(
            employer_user_id=marketplace.employer_id, approved=False, notes="Documents expired"
        ))

        assert revoked.data.verified is False
        assert revoked.data.verification_level == VerificationLevel.UNVERIFIED.value

    @pytest.mark.asyncio
    async def test_employers_cannot_verify_themselves(self, uow, marketplace):
        use_case = VerifyEmployerUseCase(uow=uow).set_current_user(marketplace.employer_id, ["employer"])

        result = await use_case.execute(VerifyEmployerRequestDTO(employer_user_id=marketplace.employer_id,
                                                                 approved=True, level="verified"))

        assert result.error_code == "FORBIDDEN"
