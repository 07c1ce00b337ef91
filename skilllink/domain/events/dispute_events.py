"""
Domain events raised by disputes and their escalation.
"""

from dataclasses import dataclass

from .base import DomainEvent


@dataclass
class DisputeRaised(DomainEvent):
    dispute_id: str = ""
    contract_id: str = ""
    raised_by: str = ""
    other_party_id: str = ""
    reason: str = ""


@dataclass
class DisputeResolved(DomainEvent):
    dispute_id: str = ""
    contract_id: str = ""
    outcome: str = ""
    resolution: str = ""
    employer_id: str = ""
    talent_id: str = ""


@dataclass
class DisputeEscalated(DomainEvent):
    """Fired when an open dispute outlives the escalation window."""

    dispute_id: str = ""
    contract_id: str = ""
    escalated_to: str = ""
    reason: str = ""
    hours_open: int = 0
