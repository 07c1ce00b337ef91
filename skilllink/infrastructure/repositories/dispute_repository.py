"""
Dispute repository implementations using SQLAlchemy.
"""

from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import func

from skilllink.domain.models.dispute import Dispute, DisputeEscalation, DisputeStatus
from skilllink.domain.repositories.dispute_repository import DisputeRepository, EscalationRepository
from skilllink.infrastructure.db.models import DisputeModel, DisputeEscalationModel
from skilllink.infrastructure.mappers.dispute_mapper import DisputeMapper, DisputeEscalationMapper
from .base import SQLAlchemyRepository


UNRESOLVED_STATUSES = (DisputeStatus.OPEN, DisputeStatus.IN_REVIEW)


class SQLAlchemyDisputeRepository(SQLAlchemyRepository, DisputeRepository):
    """SQLAlchemy implementation of dispute repository."""

    model = DisputeModel
    entity_name = "Dispute"

    def __init__(self, session):
        super().__init__(session, DisputeMapper())

    def save(self, dispute: Dispute) -> Dispute:
        return self._save(dispute)

    def find_by_id(self, dispute_id: str) -> Optional[Dispute]:
        model = self._get_model(dispute_id)
        return self.mapper.model_to_domain(model) if model else None

    def find_unresolved_by_contract(self, contract_id: str) -> Optional[Dispute]:
        model = (
            self.session.query(DisputeModel)
            .filter(
                DisputeModel.contract_id == contract_id,
                DisputeModel.status.in_(UNRESOLVED_STATUSES)
            )
            .first()
        )
        return self.mapper.model_to_domain(model) if model else None

    def find_by_contract_ids(self, contract_ids: List[str]) -> List[Dispute]:
        if not contract_ids:
            return []
        models = (
            self.session.query(DisputeModel)
            .filter(DisputeModel.contract_id.in_(contract_ids))
            .order_by(DisputeModel.created_at.desc())
            .all()
        )
        return [self.mapper.model_to_domain(model) for model in models]

    def list_by_status(
        self,
        status: Optional[DisputeStatus] = None,
        limit: int = 20,
        offset: int = 0
    ) -> Tuple[List[Dispute], int]:
        query = self.session.query(DisputeModel)
        if status is not None:
            query = query.filter(DisputeModel.status == status)

        total = query.with_entities(func.count(DisputeModel.id)).scalar() or 0
        models = query.order_by(DisputeModel.created_at.desc()).offset(offset).limit(limit).all()
        return [self.mapper.model_to_domain(model) for model in models], total

    def find_open_created_before(self, cutoff: datetime) -> List[Dispute]:
        models = (
            self.session.query(DisputeModel)
            .filter(
                DisputeModel.status == DisputeStatus.OPEN,
                DisputeModel.created_at <= cutoff
            )
            .order_by(DisputeModel.created_at)
            .all()
        )
        return [self.mapper.model_to_domain(model) for model in models]


class SQLAlchemyEscalationRepository(SQLAlchemyRepository, EscalationRepository):

    model = DisputeEscalationModel
    entity_name = "DisputeEscalation"

    def __init__(self, session):
        super().__init__(session, DisputeEscalationMapper())

    def save(self, escalation: DisputeEscalation) -> DisputeEscalation:
        self.session.add(self.mapper.domain_to_model(escalation))
        self._flush()
        self._track(escalation)
        return escalation

    def exists_for_dispute(self, dispute_id: str) -> bool:
        return self.session.query(DisputeEscalationModel.id).filter_by(
            dispute_id=dispute_id
        ).first() is not None
