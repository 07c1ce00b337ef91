"""
Verification use cases: talent requests, admin review and trust badges.
"""

import logging
from typing import List, Optional

from skilllink.application.use_cases.base_use_case import (
    CommandUseCase, QueryUseCase, PaginatedQueryUseCase, AuthorizedUseCase
)
from skilllink.application.dto.base_dto import ListResponseDTO
from skilllink.application.dto.verification_dto import (
    CreateVerificationRequestDTO, ReviewVerificationRequestDTO, IssueBadgeRequestDTO,
    ListBadgesRequestDTO, VerificationListRequestDTO, BadgeResponseDTO,
    VerificationRequestResponseDTO
)
from skilllink.domain.events.marketplace_events import BadgeIssued, VerificationRequestReviewed
from skilllink.domain.models.base import EntityNotFoundError, DuplicateEntityError
from skilllink.domain.models.user import UserRole
from skilllink.domain.models.verification import (
    VerificationBadge, VerificationRequest, BadgeType, BadgeLevel, VerificationRequestStatus
)
from skilllink.domain.repositories.unit_of_work import UnitOfWork


logger = logging.getLogger(__name__)


def upsert_badge(
    uow: UnitOfWork,
    talent_id: str,
    badge_type: BadgeType,
    badge_level: BadgeLevel,
    issued_by: str,
    keep_existing: bool = False
) -> VerificationBadge:
    """
    Issue a badge or change the level of the one the talent already holds.
    With ``keep_existing`` an existing badge is left untouched.
    """
    badge: Optional[VerificationBadge] = uow.badges.find_by_talent_and_type(talent_id, badge_type)
    if badge is None:
        badge = VerificationBadge(
            talent_id=talent_id,
            badge_type=badge_type,
            badge_level=badge_level,
            issued_by=issued_by,
        )
    elif keep_existing:
        return badge
    else:
        badge.upgrade(badge_level, issued_by)

    badge.add_event(BadgeIssued(
        badge_id=badge.id,
        talent_id=talent_id,
        badge_type=badge_type.value,
        badge_level=badge.badge_level.value
    ))
    return uow.badges.save(badge)


class RequestVerificationUseCase(AuthorizedUseCase, CommandUseCase[CreateVerificationRequestDTO, VerificationRequestResponseDTO]):
    """Talent ask for a badge; one pending request per type."""

    async def _check_authorization(self, request: CreateVerificationRequestDTO) -> None:
        self._require_role(UserRole.TALENT)

    async def _execute_command_logic(self, request: CreateVerificationRequestDTO) -> VerificationRequestResponseDTO:
        request_type = BadgeType(request.request_type)
        if self.uow.verification_requests.find_pending(self.current_user_id, request_type):
            raise DuplicateEntityError("VerificationRequest", "request_type", request_type.value)

        verification_request = VerificationRequest(
            talent_id=self.current_user_id,
            request_type=request_type,
            verification_data=dict(request.verification_data),
        )
        saved = self.uow.verification_requests.save(verification_request)
        return VerificationRequestResponseDTO.from_domain(saved)


class ReviewVerificationRequestUseCase(AuthorizedUseCase, CommandUseCase[ReviewVerificationRequestDTO, VerificationRequestResponseDTO]):
    """
    Admin approves or rejects a verification request.
    Approval grants a bronze badge unless one of that type exists; an
    identity approval also marks the profile as ID verified.
    """

    async def _check_authorization(self, request: ReviewVerificationRequestDTO) -> None:
        self._require_role(UserRole.ADMIN)

    async def _execute_command_logic(self, request: ReviewVerificationRequestDTO) -> VerificationRequestResponseDTO:
        verification_request = self.uow.verification_requests.find_by_id(request.request_id)
        if verification_request is None:
            raise EntityNotFoundError("VerificationRequest", request.request_id)

        verification_request.review(self.current_user_id, request.approved, request.notes)

        if request.approved:
            upsert_badge(
                self.uow,
                verification_request.talent_id,
                verification_request.request_type,
                BadgeLevel.BRONZE,
                self.current_user_id,
                keep_existing=True
            )
            if verification_request.request_type == BadgeType.IDENTITY:
                profile = self.uow.profiles.find_by_user_id(verification_request.talent_id)
                if profile is not None:
                    profile.mark_identity_verified()
                    self.uow.profiles.save(profile)

        verification_request.add_event(VerificationRequestReviewed(
            request_id=verification_request.id,
            talent_id=verification_request.talent_id,
            request_type=verification_request.request_type.value,
            approved=request.approved,
            admin_notes=request.notes or ""
        ))
        saved = self.uow.verification_requests.save(verification_request)
        logger.info(f"Verification request {saved.id} {saved.status.value}")
        return VerificationRequestResponseDTO.from_domain(saved)


class IssueBadgeUseCase(AuthorizedUseCase, CommandUseCase[IssueBadgeRequestDTO, BadgeResponseDTO]):

    async def _check_authorization(self, request: IssueBadgeRequestDTO) -> None:
        self._require_role(UserRole.ADMIN)

    async def _execute_command_logic(self, request: IssueBadgeRequestDTO) -> BadgeResponseDTO:
        badge = upsert_badge(
            self.uow,
            request.talent_id,
            BadgeType(request.badge_type),
            BadgeLevel(request.badge_level),
            self.current_user_id
        )
        return BadgeResponseDTO.from_domain(badge)


class ListBadgesUseCase(QueryUseCase[ListBadgesRequestDTO, List[BadgeResponseDTO]]):
    """Badges are public."""

    async def _execute_business_logic(self, request: ListBadgesRequestDTO) -> List[BadgeResponseDTO]:
        return [BadgeResponseDTO.from_domain(b) for b in self.uow.badges.find_by_talent(request.talent_id)]


class ListMyVerificationRequestsUseCase(AuthorizedUseCase, QueryUseCase[None, List[VerificationRequestResponseDTO]]):

    async def _execute_business_logic(self, request: None) -> List[VerificationRequestResponseDTO]:
        return [
            VerificationRequestResponseDTO.from_domain(r)
            for r in self.uow.verification_requests.find_by_talent(self.current_user_id)
        ]


class ListVerificationRequestsUseCase(AuthorizedUseCase, PaginatedQueryUseCase[VerificationListRequestDTO, ListResponseDTO]):

    async def _check_authorization(self, request: VerificationListRequestDTO) -> None:
        self._require_role(UserRole.ADMIN)

    async def _execute_business_logic(self, request: VerificationListRequestDTO) -> ListResponseDTO:
        status = VerificationRequestStatus(request.status) if request.status else None
        requests, total = self.uow.verification_requests.list_by_status(
            status, limit=request.limit, offset=request.offset
        )
        return ListResponseDTO[VerificationRequestResponseDTO].create(
            items=[VerificationRequestResponseDTO.from_domain(r) for r in requests],
            total=total,
            page=request.page,
            page_size=request.page_size
        )
