"""
SQLAlchemy unit of work.
One session per business action; every repository shares it.
"""

import logging
from typing import List

from fastapi import Depends
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from skilllink.domain.events.base import DomainEvent
from skilllink.domain.models.base import ConcurrencyError, DuplicateEntityError
from skilllink.domain.repositories.unit_of_work import UnitOfWork
from skilllink.infrastructure.repositories import (
    SQLAlchemyRoleRepository, SQLAlchemyProfileRepository, SQLAlchemyEmployerRepository,
    SQLAlchemyJobRepository, SQLAlchemyApplicationRepository, SQLAlchemyScrapingLogRepository,
    SQLAlchemyJobAlertRepository, SQLAlchemyContractRepository, SQLAlchemyAmendmentRepository,
    SQLAlchemyNegotiationRepository, SQLAlchemyReminderRepository,
    SQLAlchemyTransactionRepository, SQLAlchemyWalletRepository, SQLAlchemyPaymentProofRepository,
    SQLAlchemyDisputeRepository, SQLAlchemyEscalationRepository,
    SQLAlchemyBadgeRepository, SQLAlchemyVerificationRequestRepository
)
from skilllink.infrastructure.repositories.base import SQLAlchemyRepository
from skilllink.infrastructure.db.database import get_db


logger = logging.getLogger(__name__)


class SQLAlchemyUnitOfWork(UnitOfWork):
    """Unit of work over a single SQLAlchemy session."""

    def __init__(self, session: Session):
        self.session = session

        self.roles = SQLAlchemyRoleRepository(session)
        self.profiles = SQLAlchemyProfileRepository(session)
        self.employers = SQLAlchemyEmployerRepository(session)
        self.jobs = SQLAlchemyJobRepository(session)
        self.applications = SQLAlchemyApplicationRepository(session)
        self.scraping_logs = SQLAlchemyScrapingLogRepository(session)
        self.job_alerts = SQLAlchemyJobAlertRepository(session)
        self.contracts = SQLAlchemyContractRepository(session)
        self.amendments = SQLAlchemyAmendmentRepository(session)
        self.negotiations = SQLAlchemyNegotiationRepository(session)
        self.reminders = SQLAlchemyReminderRepository(session)
        self.transactions = SQLAlchemyTransactionRepository(session)
        self.wallets = SQLAlchemyWalletRepository(session)
        self.payment_proofs = SQLAlchemyPaymentProofRepository(session)
        self.disputes = SQLAlchemyDisputeRepository(session)
        self.escalations = SQLAlchemyEscalationRepository(session)
        self.badges = SQLAlchemyBadgeRepository(session)
        self.verification_requests = SQLAlchemyVerificationRequestRepository(session)

    def _repositories(self) -> List[SQLAlchemyRepository]:
        return [value for value in vars(self).values() if isinstance(value, SQLAlchemyRepository)]

    def commit(self) -> None:
        try:
            self.session.commit()
        except StaleDataError as exc:
            logger.warning(f"Commit lost an optimistic lock: {exc}")
            self.rollback()
            raise ConcurrencyError()
        except IntegrityError as exc:
            logger.warning(f"Commit violated a constraint: {exc.orig}")
            self.rollback()
            raise DuplicateEntityError("Record", "unique key", str(exc.orig))

    def rollback(self) -> None:
        self.session.rollback()
        for repository in self._repositories():
            for entity in repository.seen:
                entity.pull_events()
            repository.seen.clear()

    def collect_events(self) -> List[DomainEvent]:
        events: List[DomainEvent] = []
        for repository in self._repositories():
            for entity in repository.seen:
                events.extend(entity.pull_events())
            repository.seen.clear()
        return events


def get_unit_of_work(session: Session = Depends(get_db)) -> SQLAlchemyUnitOfWork:
    """FastAPI dependency: one unit of work per request."""
    return SQLAlchemyUnitOfWork(session)
