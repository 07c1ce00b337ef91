"""
Escrow ledger, wallets and payment proofs.

The ledger is append-only: every movement of money is a Transaction row and
balances are derived from completed rows. Wallets hold talent earnings and
refunded employer funds and can never go negative.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional
from dataclasses import dataclass, field

from .base import (
    BaseEntity, AggregateRoot, ValidationError, BusinessRuleViolation, utc_now
)


class TransactionType(str, Enum):
    ESCROW = "escrow"
    RELEASE = "release"
    PAYOUT = "payout"
    REFUND = "refund"


class TransactionStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class PaymentProvider(str, Enum):
    MANUAL_TRANSFER = "manual_transfer"
    FLUTTERWAVE = "flutterwave"
    INTERNAL = "internal"


@dataclass(eq=False)
class Transaction(BaseEntity):
    """One ledger row."""

    transaction_type: TransactionType = TransactionType.ESCROW
    status: TransactionStatus = TransactionStatus.PENDING
    amount_minor_units: int = 0
    platform_fee_minor_units: int = 0
    net_amount_minor_units: int = 0
    currency: str = "NGN"

    job_id: Optional[str] = None
    contract_id: Optional[str] = None
    milestone_id: Optional[str] = None
    from_user_id: Optional[str] = None
    to_user_id: Optional[str] = None

    description: Optional[str] = None
    payment_provider: PaymentProvider = PaymentProvider.INTERNAL
    external_reference: Optional[str] = None
    payment_metadata: Dict[str, Any] = field(default_factory=dict)
    completed_at: Optional[datetime] = None

    def __post_init__(self):
        super().__post_init__()
        self.validate()

    def validate(self) -> None:
        if not isinstance(self.amount_minor_units, int) or self.amount_minor_units <= 0:
            raise ValidationError("Transaction amount must be a positive number of minor units", "amount_minor_units")
        if self.platform_fee_minor_units < 0 or self.platform_fee_minor_units > self.amount_minor_units:
            raise ValidationError("Platform fee must be between zero and the amount", "platform_fee_minor_units")
        if self.net_amount_minor_units != self.amount_minor_units - self.platform_fee_minor_units:
            raise ValidationError("Net amount must equal amount minus platform fee", "net_amount_minor_units")

    @property
    def is_pending(self) -> bool:
        return self.status == TransactionStatus.PENDING

    @property
    def is_completed(self) -> bool:
        return self.status == TransactionStatus.COMPLETED

    def _require_pending(self) -> None:
        if not self.is_pending:
            raise BusinessRuleViolation(f"Transaction is already {self.status.value}")

    def complete(self, metadata: Optional[Dict[str, Any]] = None) -> None:
        self._require_pending()
        self.status = TransactionStatus.COMPLETED
        self.completed_at = utc_now()
        if metadata:
            self.payment_metadata = {**self.payment_metadata, **metadata}
        self.mark_as_updated()

    def fail(self, reason: Optional[str] = None, metadata: Optional[Dict[str, Any]] = None) -> None:
        self._require_pending()
        self.status = TransactionStatus.FAILED
        extra = dict(metadata or {})
        if reason:
            extra["failure_reason"] = reason
        self.payment_metadata = {**self.payment_metadata, **extra}
        self.mark_as_updated()

    def cancel(self) -> None:
        self._require_pending()
        self.status = TransactionStatus.CANCELLED
        self.mark_as_updated()


@dataclass(eq=False)
class Wallet(AggregateRoot):
    """Spendable balance of one user."""

    user_id: str = ""
    balance_minor_units: int = 0
    currency: str = "NGN"

    def __post_init__(self):
        super().__post_init__()
        self.validate()

    def validate(self) -> None:
        if not self.user_id:
            raise ValidationError("Wallet requires a user id", "user_id")
        if self.balance_minor_units < 0:
            raise ValidationError("Wallet balance cannot be negative", "balance_minor_units")

    def _check_currency(self, currency: str) -> None:
        if currency != self.currency:
            raise BusinessRuleViolation(
                f"Wallet holds {self.currency}; cannot move {currency}"
            )

    def credit(self, amount_minor_units: int, currency: str) -> None:
        if amount_minor_units <= 0:
            raise ValidationError("Credit amount must be positive", "amount_minor_units")
        self._check_currency(currency)
        self.balance_minor_units += amount_minor_units
        self.mark_as_updated()

    def debit(self, amount_minor_units: int, currency: str) -> None:
        if amount_minor_units <= 0:
            raise ValidationError("Debit amount must be positive", "amount_minor_units")
        self._check_currency(currency)
        if amount_minor_units > self.balance_minor_units:
            raise BusinessRuleViolation("Insufficient balance")
        self.balance_minor_units -= amount_minor_units
        self.mark_as_updated()


@dataclass(eq=False)
class PaymentProof(BaseEntity):
    """Evidence of a manual bank transfer awaiting admin review."""

    transaction_id: str = ""
    user_id: str = ""
    proof_url: str = ""
    bank_details: Dict[str, Any] = field(default_factory=dict)
    notes: Optional[str] = None
    verified_by: Optional[str] = None
    verified_at: Optional[datetime] = None
    rejected: bool = False
    admin_notes: Optional[str] = None

    def __post_init__(self):
        super().__post_init__()
        self.validate()

    def validate(self) -> None:
        if not self.transaction_id:
            raise ValidationError("Proof must reference a transaction", "transaction_id")
        if not self.proof_url or not self.proof_url.strip():
            raise ValidationError("Proof URL cannot be empty", "proof_url")

    @property
    def is_reviewed(self) -> bool:
        return self.verified_at is not None

    def review(self, admin_id: str, approved: bool, notes: Optional[str] = None) -> None:
        if self.is_reviewed:
            raise BusinessRuleViolation("Payment proof has already been reviewed")
        if not approved and not (notes and notes.strip()):
            raise ValidationError("A reason is required when rejecting a payment proof", "notes")
        self.verified_by = admin_id
        self.verified_at = utc_now()
        self.rejected = not approved
        self.admin_notes = notes
        self.mark_as_updated()
