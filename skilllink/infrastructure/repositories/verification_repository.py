"""
Verification repository implementations using SQLAlchemy.
"""

from typing import List, Optional, Tuple

from sqlalchemy import func

from skilllink.domain.models.verification import (
    VerificationBadge, VerificationRequest, BadgeType, VerificationRequestStatus
)
from skilllink.domain.repositories.verification_repository import (
    BadgeRepository, VerificationRequestRepository
)
from skilllink.infrastructure.db.models import VerificationBadgeModel, VerificationRequestModel
from skilllink.infrastructure.mappers.verification_mapper import (
    VerificationBadgeMapper, VerificationRequestMapper
)
from .base import SQLAlchemyRepository


class SQLAlchemyBadgeRepository(SQLAlchemyRepository, BadgeRepository):

    model = VerificationBadgeModel
    entity_name = "VerificationBadge"

    def __init__(self, session):
        super().__init__(session, VerificationBadgeMapper())

    def save(self, badge: VerificationBadge) -> VerificationBadge:
        return self._save(badge)

    def find_by_talent(self, talent_id: str) -> List[VerificationBadge]:
        models = (
            self.session.query(VerificationBadgeModel)
            .filter_by(talent_id=talent_id)
            .order_by(VerificationBadgeModel.issued_at)
            .all()
        )
        return [self.mapper.model_to_domain(model) for model in models]

    def find_by_talent_and_type(self, talent_id: str, badge_type: BadgeType) -> Optional[VerificationBadge]:
        model = self.session.query(VerificationBadgeModel).filter_by(
            talent_id=talent_id,
            badge_type=badge_type
        ).first()
        return self.mapper.model_to_domain(model) if model else None


class SQLAlchemyVerificationRequestRepository(SQLAlchemyRepository, VerificationRequestRepository):

    model = VerificationRequestModel
    entity_name = "VerificationRequest"

    def __init__(self, session):
        super().__init__(session, VerificationRequestMapper())

    def save(self, request: VerificationRequest) -> VerificationRequest:
        return self._save(request)

    def find_by_id(self, request_id: str) -> Optional[VerificationRequest]:
        model = self._get_model(request_id)
        return self.mapper.model_to_domain(model) if model else None

    def find_pending(self, talent_id: str, request_type: BadgeType) -> Optional[VerificationRequest]:
        model = self.session.query(VerificationRequestModel).filter_by(
            talent_id=talent_id,
            request_type=request_type,
            status=VerificationRequestStatus.PENDING
        ).first()
        return self.mapper.model_to_domain(model) if model else None

    def find_by_talent(self, talent_id: str) -> List[VerificationRequest]:
        models = (
            self.session.query(VerificationRequestModel)
            .filter_by(talent_id=talent_id)
            .order_by(VerificationRequestModel.created_at.desc())
            .all()
        )
        return [self.mapper.model_to_domain(model) for model in models]

    def list_by_status(
        self,
        status: Optional[VerificationRequestStatus] = None,
        limit: int = 20,
        offset: int = 0
    ) -> Tuple[List[VerificationRequest], int]:
        query = self.session.query(VerificationRequestModel)
        if status is not None:
            query = query.filter(VerificationRequestModel.status == status)

        total = query.with_entities(func.count(VerificationRequestModel.id)).scalar() or 0
        models = query.order_by(VerificationRequestModel.created_at).offset(offset).limit(limit).all()
        return [self.mapper.model_to_domain(model) for model in models], total
