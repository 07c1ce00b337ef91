"""
Mappers between domain entities and database models.
"""

from .user_mapper import RoleMapper, ProfileMapper, EmployerMapper
from .job_mapper import JobMapper, JobApplicationMapper, JobScrapingLogMapper, JobAlertMapper
from .contract_mapper import (
    ContractMapper, ContractAmendmentMapper, ContractNegotiationMapper, MilestoneReminderMapper
)
from .payment_mapper import TransactionMapper, WalletMapper, PaymentProofMapper
from .dispute_mapper import DisputeMapper, DisputeEscalationMapper
from .verification_mapper import VerificationBadgeMapper, VerificationRequestMapper

__all__ = [
    "RoleMapper",
    "ProfileMapper",
    "EmployerMapper",
    "JobMapper",
    "JobApplicationMapper",
    "JobScrapingLogMapper",
    "JobAlertMapper",
    "ContractMapper",
    "ContractAmendmentMapper",
    "ContractNegotiationMapper",
    "MilestoneReminderMapper",
    "TransactionMapper",
    "WalletMapper",
    "PaymentProofMapper",
    "DisputeMapper",
    "DisputeEscalationMapper",
    "VerificationBadgeMapper",
    "VerificationRequestMapper",
]
