"""
Payment mappers for converting between domain entities and database models.
"""

from skilllink.domain.models.payment import Transaction, Wallet, PaymentProof
from skilllink.infrastructure.db.models import TransactionModel, WalletModel, PaymentProofModel
from .base import TIMESTAMP_FIELDS, copy_fields, read_fields


TRANSACTION_FIELDS = (
    "transaction_type", "status", "amount_minor_units", "platform_fee_minor_units",
    "net_amount_minor_units", "currency", "job_id", "contract_id", "milestone_id",
    "from_user_id", "to_user_id", "description", "payment_provider",
    "external_reference", "completed_at",
)

WALLET_FIELDS = ("user_id", "balance_minor_units", "currency")

PROOF_FIELDS = (
    "transaction_id", "user_id", "proof_url", "notes", "verified_by",
    "verified_at", "admin_notes",
)


class TransactionMapper:
    """Maps between Transaction ledger rows and TransactionModel."""

    def domain_to_model(self, transaction: Transaction) -> TransactionModel:
        model = TransactionModel(id=transaction.id)
        self.update_model(model, transaction)
        return model

    def update_model(self, model: TransactionModel, transaction: Transaction) -> None:
        copy_fields(transaction, model, ("created_at", "updated_at") + TRANSACTION_FIELDS)
        model.payment_metadata = dict(transaction.payment_metadata)

    def model_to_domain(self, model: TransactionModel) -> Transaction:
        return Transaction(
            payment_metadata=dict(model.payment_metadata or {}),
            **read_fields(model, TIMESTAMP_FIELDS + TRANSACTION_FIELDS)
        )


class WalletMapper:

    def domain_to_model(self, wallet: Wallet) -> WalletModel:
        model = WalletModel(id=wallet.id)
        self.update_model(model, wallet)
        return model

    def update_model(self, model: WalletModel, wallet: Wallet) -> None:
        copy_fields(wallet, model, ("created_at", "updated_at") + WALLET_FIELDS)

    def model_to_domain(self, model: WalletModel) -> Wallet:
        return Wallet(version=model.version or 1, **read_fields(model, TIMESTAMP_FIELDS + WALLET_FIELDS))


class PaymentProofMapper:

    def domain_to_model(self, proof: PaymentProof) -> PaymentProofModel:
        model = PaymentProofModel(id=proof.id)
        self.update_model(model, proof)
        return model

    def update_model(self, model: PaymentProofModel, proof: PaymentProof) -> None:
        copy_fields(proof, model, ("created_at", "updated_at") + PROOF_FIELDS)
        model.bank_details = dict(proof.bank_details)
        model.rejected = proof.rejected

    def model_to_domain(self, model: PaymentProofModel) -> PaymentProof:
        return PaymentProof(
            bank_details=dict(model.bank_details or {}),
            rejected=bool(model.rejected),
            **read_fields(model, TIMESTAMP_FIELDS + PROOF_FIELDS)
        )
