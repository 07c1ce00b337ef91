"""
Domain events raised by contracts, milestones, amendments and negotiations.
"""

from typing import Optional
from datetime import datetime
from dataclasses import dataclass

from .base import DomainEvent


@dataclass
class ContractCreated(DomainEvent):
    """Fired when a draft contract is drawn up for an accepted application."""

    contract_id: str = ""
    employer_id: str = ""
    talent_id: str = ""
    amount_minor_units: int = 0
    currency: str = ""
    is_renewal: bool = False


@dataclass
class ContractActivated(DomainEvent):
    """Fired when escrow funding turns a draft contract active."""

    contract_id: str = ""
    employer_id: str = ""
    talent_id: str = ""


@dataclass
class ContractCompleted(DomainEvent):
    contract_id: str = ""
    employer_id: str = ""
    talent_id: str = ""


@dataclass
class ContractCancelled(DomainEvent):
    contract_id: str = ""
    employer_id: str = ""
    talent_id: str = ""
    refunded_minor_units: int = 0


@dataclass
class MilestoneSubmitted(DomainEvent):
    """Fired when talent hands in a milestone for review."""

    contract_id: str = ""
    milestone_id: str = ""
    milestone_title: str = ""
    employer_id: str = ""


@dataclass
class MilestoneReviewed(DomainEvent):
    """Fired when the employer approves or rejects a submitted milestone."""

    contract_id: str = ""
    milestone_id: str = ""
    milestone_title: str = ""
    talent_id: str = ""
    approved: bool = False


@dataclass
class MilestoneReminderDue(DomainEvent):
    """Fired once per milestone and reminder type by the reminder sweep."""

    contract_id: str = ""
    milestone_id: str = ""
    milestone_title: str = ""
    reminder_type: str = ""
    due_date: Optional[datetime] = None
    employer_id: str = ""
    talent_id: str = ""


@dataclass
class AmendmentProposed(DomainEvent):
    contract_id: str = ""
    amendment_id: str = ""
    amendment_type: str = ""
    proposed_by: str = ""
    recipient_id: str = ""


@dataclass
class AmendmentReviewed(DomainEvent):
    contract_id: str = ""
    amendment_id: str = ""
    amendment_type: str = ""
    proposed_by: str = ""
    approved: bool = False


@dataclass
class NegotiationOfferMade(DomainEvent):
    """Fired for an opening proposal and for each counter offer."""

    negotiation_id: str = ""
    job_id: str = ""
    offered_by: str = ""
    recipient_id: str = ""
    amount_minor_units: int = 0


@dataclass
class NegotiationConcluded(DomainEvent):
    negotiation_id: str = ""
    employer_id: str = ""
    talent_id: str = ""
    accepted: bool = False
    amount_minor_units: int = 0
