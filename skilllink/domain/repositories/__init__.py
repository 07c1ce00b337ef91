"""
Repository interfaces for the domain layer.
This module exports all repository interfaces (ports) for dependency injection.
"""

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
from .unit_of_work import UnitOfWork

__all__ = [
    "RoleRepository",
    "ProfileRepository",
    "EmployerRepository",
    "JobRepository",
    "ApplicationRepository",
    "ScrapingLogRepository",
    "JobAlertRepository",
    "ContractRepository",
    "AmendmentRepository",
    "NegotiationRepository",
    "ReminderRepository",
    "TransactionRepository",
    "WalletRepository",
    "PaymentProofRepository",
    "DisputeRepository",
    "EscalationRepository",
    "BadgeRepository",
    "VerificationRequestRepository",
    "UnitOfWork",
]
