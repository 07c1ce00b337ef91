"""
Repository implementations using SQLAlchemy.
"""

from .user_repository import (
    SQLAlchemyRoleRepository, SQLAlchemyProfileRepository, SQLAlchemyEmployerRepository
)
from .job_repository import (
    SQLAlchemyJobRepository, SQLAlchemyApplicationRepository, SQLAlchemyScrapingLogRepository,
    SQLAlchemyJobAlertRepository
)
from .contract_repository import (
    SQLAlchemyContractRepository, SQLAlchemyAmendmentRepository,
    SQLAlchemyNegotiationRepository, SQLAlchemyReminderRepository
)
from .payment_repository import (
    SQLAlchemyTransactionRepository, SQLAlchemyWalletRepository, SQLAlchemyPaymentProofRepository
)
from .dispute_repository import SQLAlchemyDisputeRepository, SQLAlchemyEscalationRepository
from .verification_repository import (
    SQLAlchemyBadgeRepository, SQLAlchemyVerificationRequestRepository
)

__all__ = [
    "SQLAlchemyRoleRepository",
    "SQLAlchemyProfileRepository",
    "SQLAlchemyEmployerRepository",
    "SQLAlchemyJobRepository",
    "SQLAlchemyApplicationRepository",
    "SQLAlchemyScrapingLogRepository",
    "SQLAlchemyJobAlertRepository",
    "SQLAlchemyContractRepository",
    "SQLAlchemyAmendmentRepository",
    "SQLAlchemyNegotiationRepository",
    "SQLAlchemyReminderRepository",
    "SQLAlchemyTransactionRepository",
    "SQLAlchemyWalletRepository",
    "SQLAlchemyPaymentProofRepository",
    "SQLAlchemyDisputeRepository",
    "SQLAlchemyEscalationRepository",
    "SQLAlchemyBadgeRepository",
    "SQLAlchemyVerificationRequestRepository",
]
