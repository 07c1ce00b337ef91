"""
Unit tests for verification requests and badges.
"""

import pytest

from skilllink.application.dto.verification_dto import (
    CreateVerificationRequestDTO, ReviewVerificationRequestDTO, IssueBadgeRequestDTO,
    ListBadgesRequestDTO, VerificationListRequestDTO
)
from skilllink.application.use_cases.verification_use_cases import (
    RequestVerificationUseCase, ReviewVerificationRequestUseCase, IssueBadgeUseCase,
    ListBadgesUseCase, ListMyVerificationRequestsUseCase, ListVerificationRequestsUseCase
)
from skilllink.domain.models.verification import BadgeLevel, BadgeType, VerificationRequestStatus


async def run(use_case_class, uow, user_id, roles, request):
    use_case = use_case_class(uow=uow)
    if user_id is not None:
        use_case.set_current_user(user_id, roles)
    return await use_case.execute(request)


async def request_identity(uow, market):
    result = await run(RequestVerificationUseCase, uow, market.talent_id, ["talent"],
                       CreateVerificationRequestDTO(request_type="identity",
                                                    verification_data={"document": "https://files.example.com/id.png"}))
    assert result.success is True
    return result.data


class TestRequestVerification:
    """Test cases for talent verification requests."""

    @pytest.mark.asyncio
    async def test_request_is_pending(self, uow, marketplace):
        created = await request_identity(uow, marketplace)

        assert created.status == VerificationRequestStatus.PENDING.value
        assert created.talent_id == marketplace.talent_id

        mine = await run(ListMyVerificationRequestsUseCase, uow, marketplace.talent_id, ["talent"], None)
        assert [r.id for r in mine.data] == [created.id]

    @pytest.mark.asyncio
    async def test_one_pending_request_per_type(self, uow, marketplace):
        await request_identity(uow, marketplace)

        result = await run(RequestVerificationUseCase, uow, marketplace.talent_id, ["talent"],
                           CreateVerificationRequestDTO(request_type="identity"))

        assert result.success is False
        assert result.error_code == "DUPLICATE_ENTITY"

    @pytest.mark.asyncio
    async def test_blue_tick_is_not_requestable(self, uow, marketplace):
        """Test the blue tick can only be granted by an admin."""
        result = await run(RequestVerificationUseCase, uow, marketplace.talent_id, ["talent"],
                           CreateVerificationRequestDTO(request_type="blue_tick"))

        assert result.success is False
        assert result.error_code == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_only_talent_request(self, uow, marketplace):
        result = await run(RequestVerificationUseCase, uow, marketplace.employer_id, ["employer"],
                           CreateVerificationRequestDTO(request_type="skill"))

        assert result.success is False
        assert result.error_code == "FORBIDDEN"


class TestReviewVerification:
    """Test cases for admin review."""

    @pytest.mark.asyncio
    async def test_identity_approval(self, uow, marketplace):
        """Test approving identity issues a bronze badge and marks the profile."""
        created = await request_identity(uow, marketplace)

        result = await run(ReviewVerificationRequestUseCase, uow, marketplace.admin_id, ["admin"],
                           ReviewVerificationRequestDTO(request_id=created.id, approved=True))

        assert result.success is True
        assert result.data.status == VerificationRequestStatus.APPROVED.value
        badge = uow.badges.find_by_talent_and_type(marketplace.talent_id, BadgeType.IDENTITY)
        assert badge.badge_level == BadgeLevel.BRONZE
        assert uow.profiles.find_by_user_id(marketplace.talent_id).id_verified is True

    @pytest.mark.asyncio
    async def test_approval_keeps_existing_badge(self, uow, marketplace):
        """Test an approval does not downgrade a badge the talent already holds."""
        await run(IssueBadgeUseCase, uow, marketplace.admin_id, ["admin"],
                  IssueBadgeRequestDTO(talent_id=marketplace.talent_id, badge_type="identity", badge_level="gold"))
        created = await request_identity(uow, marketplace)

        await run(ReviewVerificationRequestUseCase, uow, marketplace.admin_id, ["admin"],
                  ReviewVerificationRequestDTO(request_id=created.id, approved=True))

        badge = uow.badges.find_by_talent_and_type(marketplace.talent_id, BadgeType.IDENTITY)
        assert badge.badge_level == BadgeLevel.GOLD

    @pytest.mark.asyncio
    async def test_rejection_issues_nothing(self, uow, marketplace):
        created = await request_identity(uow, marketplace)

        result = await run(ReviewVerificationRequestUseCase, uow, marketplace.admin_id, ["admin"],
                           ReviewVerificationRequestDTO(request_id=created.id, approved=False, notes="Blurry scan"))

        assert result.data.status == VerificationRequestStatus.REJECTED.value
        assert result.data.admin_notes == "Blurry scan"
        assert uow.badges.find_by_talent(marketplace.talent_id) == []
        assert uow.profiles.find_by_user_id(marketplace.talent_id).id_verified is False

    @pytest.mark.asyncio
    async def test_reviewed_once(self, uow, marketplace):
        created = await request_identity(uow, marketplace)
        request = ReviewVerificationRequestDTO(request_id=created.id, approved=True)
        await run(ReviewVerificationRequestUseCase, uow, marketplace.admin_id, ["admin"], request)

        result = await run(ReviewVerificationRequestUseCase, uow, marketplace.admin_id, ["admin"], request)

        assert result.success is False
        assert result.error_code == "BUSINESS_RULE_VIOLATION"

    @pytest.mark.asyncio
    async def test_admin_queue(self, uow, marketplace):
        await request_identity(uow, marketplace)

        pending = await run(ListVerificationRequestsUseCase, uow, marketplace.admin_id, ["admin"],
                            VerificationListRequestDTO(status="pending"))
        denied = await run(ListVerificationRequestsUseCase, uow, marketplace.talent_id, ["talent"],
                           VerificationListRequestDTO())

        assert pending.data.total == 1
        assert denied.error_code == "FORBIDDEN"


class TestBadges:

    @pytest.mark.asyncio
    async def test_issue_then_upgrade(self, uow, marketplace):
        """Test issuing the same badge type again changes its level."""
        first = await run(IssueBadgeUseCase, uow, marketplace.admin_id, ["admin"],
                          IssueBadgeRequestDTO(talent_id=marketplace.talent_id, badge_type="blue_tick"))
        second = await run(IssueBadgeUseCase, uow, marketplace.admin_id, ["admin"],
                           IssueBadgeRequestDTO(talent_id=marketplace.talent_id, badge_type="blue_tick",
                                                badge_level="platinum"))

        assert first.data.badge_level == BadgeLevel.BRONZE.value
        assert second.data.id == first.data.id
        assert second.data.badge_level == BadgeLevel.PLATINUM.value

    @pytest.mark.asyncio
    async def test_badges_are_public(self, uow, marketplace):
        await run(IssueBadgeUseCase, uow, marketplace.admin_id, ["admin"],
                  IssueBadgeRequestDTO(talent_id=marketplace.talent_id, badge_type="skill"))

        result = await run(ListBadgesUseCase, uow, None, None, ListBadgesRequestDTO(talent_id=marketplace.talent_id))

        assert result.success is True
        assert [b.badge_type for b in result.data] == [BadgeType.SKILL.value]
