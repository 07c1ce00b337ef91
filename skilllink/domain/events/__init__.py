"""
Domain events for the application.
Event-driven architecture components for notifications.
"""

from .base import DomainEvent, EventHandler, EventDispatcher, get_event_dispatcher, publish_event
from .contract_events import (
    ContractCreated, ContractActivated, ContractCompleted, ContractCancelled,
    MilestoneSubmitted, MilestoneReviewed, MilestoneReminderDue,
    AmendmentProposed, AmendmentReviewed, NegotiationOfferMade, NegotiationConcluded
)
from .payment_events import (
    EscrowFunded, PaymentReleased, RefundIssued, PaymentProofSubmitted,
    PaymentProofReviewed, PayoutRequested, PayoutSettled
)
from .dispute_events import DisputeRaised, DisputeResolved, DisputeEscalated
from .marketplace_events import (
    ApplicationSubmitted, ApplicationStatusChanged, VerificationRequestReviewed,
    BadgeIssued, EmployerVerificationChanged, JobAlertMatched, NewJobsAggregated
)

__all__ = [
    "DomainEvent",
    "EventHandler",
    "EventDispatcher",
    "get_event_dispatcher",
    "publish_event",
    "ContractCreated",
    "ContractActivated",
    "ContractCompleted",
    "ContractCancelled",
    "MilestoneSubmitted",
    "MilestoneReviewed",
    "MilestoneReminderDue",
    "AmendmentProposed",
    "AmendmentReviewed",
    "NegotiationOfferMade",
    "NegotiationConcluded",
    "EscrowFunded",
    "PaymentReleased",
    "RefundIssued",
    "PaymentProofSubmitted",
    "PaymentProofReviewed",
    "PayoutRequested",
    "PayoutSettled",
    "DisputeRaised",
    "DisputeResolved",
    "DisputeEscalated",
    "ApplicationSubmitted",
    "ApplicationStatusChanged",
    "VerificationRequestReviewed",
    "BadgeIssued",
    "EmployerVerificationChanged",
    "JobAlertMatched",
    "NewJobsAggregated",
]
