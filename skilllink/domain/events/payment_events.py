"""
Domain events raised by the escrow ledger, wallets and payouts.
"""

from dataclasses import dataclass

from .base import DomainEvent


@dataclass
class EscrowFunded(DomainEvent):
    """Fired when an escrow deposit is confirmed."""

    transaction_id: str = ""
    contract_id: str = ""
    employer_id: str = ""
    talent_id: str = ""
    amount_minor_units: int = 0
    currency: str = ""


@dataclass
class PaymentReleased(DomainEvent):
    """Fired when held funds are released to talent."""

    transaction_id: str = ""
    contract_id: str = ""
    milestone_id: str = ""
    talent_id: str = ""
    amount_minor_units: int = 0
    platform_fee_minor_units: int = 0
    net_amount_minor_units: int = 0
    currency: str = ""


@dataclass
class RefundIssued(DomainEvent):
    transaction_id: str = ""
    contract_id: str = ""
    employer_id: str = ""
    amount_minor_units: int = 0
    currency: str = ""


@dataclass
class PaymentProofSubmitted(DomainEvent):
    """Fired when a payer uploads proof of a manual bank transfer."""

    proof_id: str = ""
    transaction_id: str = ""
    user_id: str = ""
    amount_minor_units: int = 0
    currency: str = ""


@dataclass
class PaymentProofReviewed(DomainEvent):
    proof_id: str = ""
    transaction_id: str = ""
    user_id: str = ""
    approved: bool = False
    notes: str = ""


@dataclass
class PayoutRequested(DomainEvent):
    transaction_id: str = ""
    user_id: str = ""
    amount_minor_units: int = 0
    currency: str = ""


@dataclass
class PayoutSettled(DomainEvent):
    """Fired when an admin marks a payout completed or failed."""

    transaction_id: str = ""
    user_id: str = ""
    amount_minor_units: int = 0
    currency: str = ""
    succeeded: bool = False
