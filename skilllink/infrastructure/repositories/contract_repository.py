"""
Contract repository implementations using SQLAlchemy.
"""

from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import selectinload

from skilllink.domain.models.contract import (
    Contract, ContractAmendment, ContractStatus, MilestoneStatus
)
from skilllink.domain.models.negotiation import ContractNegotiation, NegotiationStatus
from skilllink.domain.models.reminder import MilestoneReminder, ReminderType
from skilllink.domain.repositories.contract_repository import (
    ContractRepository, AmendmentRepository, NegotiationRepository, ReminderRepository
)
from skilllink.infrastructure.db.models import (
    ContractModel, MilestoneModel, ContractAmendmentModel,
    ContractNegotiationModel, MilestoneReminderModel
)
from skilllink.infrastructure.mappers.contract_mapper import (
    ContractMapper, ContractAmendmentMapper, ContractNegotiationMapper, MilestoneReminderMapper
)
from .base import SQLAlchemyRepository


LIVE_STATUSES = (ContractStatus.DRAFT, ContractStatus.ACTIVE, ContractStatus.DISPUTED)


class SQLAlchemyContractRepository(SQLAlchemyRepository, ContractRepository):
    """SQLAlchemy implementation of the contract aggregate repository."""

    model = ContractModel
    entity_name = "Contract"

    def __init__(self, session):
        super().__init__(session, ContractMapper())

    def _query(self):
        return self.session.query(ContractModel).options(selectinload(ContractModel.milestones))

    def save(self, contract: Contract) -> Contract:
        return self._save(contract)

    def find_by_id(self, contract_id: str) -> Optional[Contract]:
        model = self._query().filter(ContractModel.id == contract_id).first()
        return self.mapper.model_to_domain(model) if model else None

    def find_by_id_for_update(self, contract_id: str) -> Optional[Contract]:
        model = self._get_model(contract_id, for_update=True)
        return self.mapper.model_to_domain(model) if model else None

    def find_by_party(self, user_id: str, status: Optional[ContractStatus] = None) -> List[Contract]:
        query = self._query().filter(or_(
            ContractModel.employer_id == user_id,
            ContractModel.talent_id == user_id
        ))
        if status is not None:
            query = query.filter(ContractModel.status == status)
        models = query.order_by(ContractModel.created_at.desc()).all()
        return [self.mapper.model_to_domain(model) for model in models]

    def find_live_by_application(self, application_id: str) -> Optional[Contract]:
        model = (
            self._query()
            .filter(
                ContractModel.application_id == application_id,
                ContractModel.is_renewal.is_(False),
                ContractModel.status.in_(LIVE_STATUSES)
            )
            .first()
        )
        return self.mapper.model_to_domain(model) if model else None

    def find_with_milestones_in_progress(self) -> List[Contract]:
        models = (
            self._query()
            .join(MilestoneModel, MilestoneModel.contract_id == ContractModel.id)
            .filter(
                ContractModel.status == ContractStatus.ACTIVE,
                MilestoneModel.status == MilestoneStatus.IN_PROGRESS,
                MilestoneModel.due_date.isnot(None)
            )
            .distinct()
            .all()
        )
        return [self.mapper.model_to_domain(model) for model in models]


class SQLAlchemyAmendmentRepository(SQLAlchemyRepository, AmendmentRepository):

    model = ContractAmendmentModel
    entity_name = "ContractAmendment"

    def __init__(self, session):
        super().__init__(session, ContractAmendmentMapper())

    def save(self, amendment: ContractAmendment) -> ContractAmendment:
        return self._save(amendment)

    def find_by_id(self, amendment_id: str) -> Optional[ContractAmendment]:
        model = self._get_model(amendment_id)
        return self.mapper.model_to_domain(model) if model else None

    def find_by_contract(self, contract_id: str) -> List[ContractAmendment]:
        models = (
            self.session.query(ContractAmendmentModel)
            .filter_by(contract_id=contract_id)
            .order_by(ContractAmendmentModel.created_at.desc())
            .all()
        )
        return [self.mapper.model_to_domain(model) for model in models]


class SQLAlchemyNegotiationRepository(SQLAlchemyRepository, NegotiationRepository):

    model = ContractNegotiationModel
    entity_name = "ContractNegotiation"

    def __init__(self, session):
        super().__init__(session, ContractNegotiationMapper())

    def save(self, negotiation: ContractNegotiation) -> ContractNegotiation:
        return self._save(negotiation)

    def find_by_id(self, negotiation_id: str) -> Optional[ContractNegotiation]:
        model = self._get_model(negotiation_id)
        return self.mapper.model_to_domain(model) if model else None

    def find_open_by_application(self, application_id: str) -> Optional[ContractNegotiation]:
        model = (
            self.session.query(ContractNegotiationModel)
            .filter(
                ContractNegotiationModel.application_id == application_id,
                ContractNegotiationModel.status.in_((NegotiationStatus.PENDING, NegotiationStatus.COUNTERED))
            )
            .first()
        )
        return self.mapper.model_to_domain(model) if model else None

    def find_by_party(self, user_id: str) -> List[ContractNegotiation]:
        models = (
            self.session.query(ContractNegotiationModel)
            .filter(or_(
                ContractNegotiationModel.employer_id == user_id,
                ContractNegotiationModel.talent_id == user_id
            ))
            .order_by(ContractNegotiationModel.created_at.desc())
            .all()
        )
        return [self.mapper.model_to_domain(model) for model in models]


class SQLAlchemyReminderRepository(SQLAlchemyRepository, ReminderRepository):

    model = MilestoneReminderModel
    entity_name = "MilestoneReminder"

    def __init__(self, session):
        super().__init__(session, MilestoneReminderMapper())

    def exists(self, milestone_id: str, reminder_type: ReminderType) -> bool:
        return self.session.query(MilestoneReminderModel.id).filter_by(
            milestone_id=milestone_id,
            reminder_type=reminder_type
        ).first() is not None

    def save(self, reminder: MilestoneReminder) -> MilestoneReminder:
        self.session.add(self.mapper.domain_to_model(reminder))
        self._flush()
        self._track(reminder)
        return reminder
