"""
Domain models for the SkillLink marketplace.
This module exports all domain entities and value objects.
"""

# Base classes
from .base import (
    BaseEntity,
    AggregateRoot,
    DomainException,
    ValidationError,
    BusinessRuleViolation,
    EntityNotFoundError,
    DuplicateEntityError,
    AuthorizationError,
    ConcurrencyError,
    ValueObject,
    Money,
    utc_now,
    new_id
)

from .user import Profile, Employer, RoleAssignment, UserRole, VerificationLevel

from .job import (
    Job,
    JobApplication,
    JobScrapingLog,
    JobStatus,
    JobVerificationStatus,
    ApplicationStatus,
    JobListing,
    ScrapingStatus
)

from .contract import (
    Contract,
    Milestone,
    ContractAmendment,
    ContractStatus,
    EscrowStatus,
    MilestoneStatus,
    AmendmentType,
    AmendmentStatus
)

from .negotiation import ContractNegotiation, NegotiationStatus

from .payment import (
    Transaction,
    Wallet,
    PaymentProof,
    TransactionType,
    TransactionStatus,
    PaymentProvider
)

from .dispute import Dispute, DisputeEscalation, DisputeStatus, DisputeOutcome

from .verification import (
    VerificationBadge,
    VerificationRequest,
    BadgeType,
    BadgeLevel,
    VerificationRequestStatus
)

from .reminder import MilestoneReminder, ReminderType

from .alert import JobAlert, AlertFrequency

__all__ = [
    "BaseEntity", "AggregateRoot", "DomainException", "ValidationError",
    "BusinessRuleViolation", "EntityNotFoundError", "DuplicateEntityError",
    "AuthorizationError", "ConcurrencyError", "ValueObject", "Money", "utc_now", "new_id",
    "Profile", "Employer", "RoleAssignment", "UserRole", "VerificationLevel",
    "Job", "JobApplication", "JobScrapingLog", "JobStatus", "JobVerificationStatus",
    "ApplicationStatus", "ScrapingStatus", "JobListing",
    "Contract", "Milestone", "ContractAmendment", "ContractStatus", "EscrowStatus",
    "MilestoneStatus", "AmendmentType", "AmendmentStatus",
    "ContractNegotiation", "NegotiationStatus",
    "Transaction", "Wallet", "PaymentProof", "TransactionType", "TransactionStatus",
    "PaymentProvider",
    "Dispute", "DisputeEscalation", "DisputeStatus", "DisputeOutcome",
    "VerificationBadge", "VerificationRequest", "BadgeType", "BadgeLevel",
    "VerificationRequestStatus",
    "MilestoneReminder", "ReminderType",
    "JobAlert", "AlertFrequency",
]
