"""
Payment DTOs for the application layer.
Escrow funding, payment proofs, wallets, payouts and the payment dashboard.
"""

from typing import Any, Dict, Optional
from datetime import datetime
from pydantic import Field, validator

from .base_dto import BaseDTO, RequestDTO, ResponseDTO, ListRequestDTO
from skilllink.domain.models.payment import (
    Transaction, Wallet, PaymentProof, TransactionType, TransactionStatus, PaymentProvider
)
from skilllink.infrastructure.validation.validators import (
    BusinessValidator, secure_url_validator, safe_text_validator
)


class InitializeEscrowRequestDTO(RequestDTO):
    contract_id: str = Field(min_length=1)
    provider: PaymentProvider = Field(default=PaymentProvider.MANUAL_TRANSFER)

    @validator('provider')
    def validate_provider(cls, v):
        if v == PaymentProvider.INTERNAL or v == PaymentProvider.INTERNAL.value:
            raise ValueError("Escrow must be funded through an external provider")
        return v


class TransactionResponseDTO(ResponseDTO):
    transaction_type: TransactionType
    status: TransactionStatus
    amount_minor_units: int
    platform_fee_minor_units: int
    net_amount_minor_units: int
    currency: str
    job_id: Optional[str] = None
    contract_id: Optional[str] = None
    milestone_id: Optional[str] = None
    from_user_id: Optional[str] = None
    to_user_id: Optional[str] = None
    description: Optional[str] = None
    payment_provider: PaymentProvider
    external_reference: Optional[str] = None
    payment_metadata: Dict[str, Any] = Field(default_factory=dict)
    completed_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, transaction: Transaction) -> "TransactionResponseDTO":
        return cls(
            id=transaction.id,
            created_at=transaction.created_at,
            updated_at=transaction.updated_at,
            transaction_type=transaction.transaction_type,
            status=transaction.status,
            amount_minor_units=transaction.amount_minor_units,
            platform_fee_minor_units=transaction.platform_fee_minor_units,
            net_amount_minor_units=transaction.net_amount_minor_units,
            currency=transaction.currency,
            job_id=transaction.job_id,
            contract_id=transaction.contract_id,
            milestone_id=transaction.milestone_id,
            from_user_id=transaction.from_user_id,
            to_user_id=transaction.to_user_id,
            description=transaction.description,
            payment_provider=transaction.payment_provider,
            external_reference=transaction.external_reference,
            payment_metadata=dict(transaction.payment_metadata),
            completed_at=transaction.completed_at,
        )


class EscrowInitResponseDTO(BaseDTO):
    """Pending deposit plus what the payer has to do next."""

    transaction: TransactionResponseDTO
    payment_link: Optional[str] = None
    instructions: str


class SubmitPaymentProofRequestDTO(RequestDTO):
    transaction_id: str = Field(min_length=1)
    proof_url: str = Field(max_length=1000, description="Uploaded receipt")
    bank_details: Dict[str, Any] = Field(default_factory=dict, description="Account the transfer came from")
    notes: Optional[str] = Field(default=None, max_length=2000)

    @validator('proof_url', pre=True)
    def validate_proof_url(cls, v):
        return secure_url_validator(v)

    @validator('notes', pre=True)
    def validate_notes(cls, v):
        if v is not None:
            return safe_text_validator(v)
        return v


class PaymentProofReviewInputDTO(RequestDTO):
    approved: bool
    notes: Optional[str] = Field(default=None, max_length=2000, description="Required when rejecting")

    @validator('notes', pre=True)
    def validate_notes(cls, v):
        if v is not None:
            return safe_text_validator(v)
        return v


class ReviewPaymentProofRequestDTO(PaymentProofReviewInputDTO):
    proof_id: str = Field(min_length=1)


class PaymentProofResponseDTO(ResponseDTO):
    transaction_id: str
    user_id: str
    proof_url: str
    bank_details: Dict[str, Any] = Field(default_factory=dict)
    notes: Optional[str] = None
    verified_by: Optional[str] = None
    verified_at: Optional[datetime] = None
    rejected: bool = False
    admin_notes: Optional[str] = None

    @classmethod
    def from_domain(cls, proof: PaymentProof) -> "PaymentProofResponseDTO":
        return cls(
            id=proof.id,
            created_at=proof.created_at,
            updated_at=proof.updated_at,
            transaction_id=proof.transaction_id,
            user_id=proof.user_id,
            proof_url=proof.proof_url,
            bank_details=dict(proof.bank_details),
            notes=proof.notes,
            verified_by=proof.verified_by,
            verified_at=proof.verified_at,
            rejected=proof.rejected,
            admin_notes=proof.admin_notes,
        )


class PaymentWebhookRequestDTO(RequestDTO):
    """Provider callback, already authenticated by the router."""

    event: str
    data: Dict[str, Any] = Field(default_factory=dict)


class WebhookResultDTO(BaseDTO):
    handled: bool
    transaction_id: Optional[str] = None
    detail: str


class WalletResponseDTO(ResponseDTO):
    user_id: str
    balance_minor_units: int
    currency: str

    @classmethod
    def from_domain(cls, wallet: Wallet) -> "WalletResponseDTO":
        return cls(
            id=wallet.id,
            created_at=wallet.created_at,
            updated_at=wallet.updated_at,
            user_id=wallet.user_id,
            balance_minor_units=wallet.balance_minor_units,
            currency=wallet.currency,
        )


class TransactionListRequestDTO(ListRequestDTO):
    transaction_type: Optional[TransactionType] = None


class PayoutRequestDTO(RequestDTO):
    """Withdrawal from the caller's wallet."""

    amount_minor_units: int = Field(gt=0)
    bank_details: Dict[str, Any] = Field(description="account_number, account_name and bank_name")

    @validator('bank_details', pre=True)
    def validate_bank_details(cls, v):
        if not isinstance(v, dict):
            raise ValueError("Bank details must be an object")
        return BusinessValidator.validate_bank_details(v)


class SettlePayoutInputDTO(RequestDTO):
    succeeded: bool
    reason: Optional[str] = Field(default=None, max_length=2000)
    reference: Optional[str] = Field(default=None, max_length=255, description="Bank transfer reference")

    @validator('reason', 'reference', pre=True)
    def validate_text(cls, v):
        if v is not None:
            return safe_text_validator(v)
        return v


class SettlePayoutRequestDTO(SettlePayoutInputDTO):
    transaction_id: str = Field(min_length=1)


class PendingPayoutListRequestDTO(ListRequestDTO):
    pass


class PaymentSummaryResponseDTO(BaseDTO):
    """Dashboard figures for one user, in minor units."""

    user_id: str
    currency: str
    wallet_balance_minor_units: int
    total_released_minor_units: int
    total_withdrawn_minor_units: int
    pending_transactions: int
    escrow_held_minor_units: int
