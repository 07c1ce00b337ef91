"""
Unit of work interface.
Groups the repositories of one business action under a single transaction.
"""

from abc import ABC, abstractmethod
from typing import List

from skilllink.domain.events.base import DomainEvent
from .user_repository import RoleRepository, ProfileRepository, EmployerRepository
from .job_repository import (
    JobRepository, ApplicationRepository, ScrapingLogRepository, JobAlertRepository
)
from .contract_repository import (
    ContractRepository, AmendmentRepository, NegotiationRepository, ReminderRepository
)
from .payment_repository import TransactionRepository, WalletRepository, PaymentProofRepository
from .dispute_repository import DisputeRepository, EscalationRepository
from .verification_repository import BadgeRepository, VerificationRequestRepository


class UnitOfWork(ABC):
    """
    Everything saved through the repositories of one unit of work commits or
    rolls back together. Events raised by saved entities are handed out only
    after a successful commit.
    """

    roles: RoleRepository
    profiles: ProfileRepository
    employers: EmployerRepository
    jobs: JobRepository
    applications: ApplicationRepository
    scraping_logs: ScrapingLogRepository
    job_alerts: JobAlertRepository
    contracts: ContractRepository
    amendments: AmendmentRepository
    negotiations: NegotiationRepository
    reminders: ReminderRepository
    transactions: TransactionRepository
    wallets: WalletRepository
    payment_proofs: PaymentProofRepository
    disputes: DisputeRepository
    escalations: EscalationRepository
    badges: BadgeRepository
    verification_requests: VerificationRequestRepository

    @abstractmethod
    def commit(self) -> None:
        """Commit the transaction. Raises ConcurrencyError on a lost update."""
        pass

    @abstractmethod
    def rollback(self) -> None:
        """Discard every change and every pending event."""
        pass

    @abstractmethod
    def collect_events(self) -> List[DomainEvent]:
        """Pull the events raised by entities saved since the last collection."""
        pass
