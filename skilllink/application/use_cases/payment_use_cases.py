"""
Payment use cases for the application layer.
Escrow funding (manual transfer or Flutterwave), payment proofs, provider
webhooks, wallets, payouts and the payment dashboard.

Each command runs in one unit of work: a confirmed deposit, the contract
activation and the job status change commit together, and a payout debit is
never stored without its ledger row.
"""

import logging
import time
from typing import Optional

from skilllink.application.use_cases.base_use_case import (
    CommandUseCase, QueryUseCase, PaginatedQueryUseCase, AuthorizedUseCase
)
from skilllink.application.use_cases.settlement import build_settlement
from skilllink.application.dto.base_dto import ListResponseDTO, ListRequestDTO
from skilllink.application.dto.payment_dto import (
    InitializeEscrowRequestDTO, EscrowInitResponseDTO, TransactionResponseDTO,
    SubmitPaymentProofRequestDTO, ReviewPaymentProofRequestDTO, PaymentProofResponseDTO,
    PaymentWebhookRequestDTO, WebhookResultDTO, WalletResponseDTO, TransactionListRequestDTO,
    PayoutRequestDTO, SettlePayoutRequestDTO, PendingPayoutListRequestDTO,
    PaymentSummaryResponseDTO
)
from skilllink.config import settings
from skilllink.domain.events.payment_events import PaymentProofSubmitted, PaymentProofReviewed
from skilllink.domain.models.base import (
    ValidationError, BusinessRuleViolation, EntityNotFoundError, DuplicateEntityError, AuthorizationError
)
from skilllink.domain.models.contract import EscrowStatus
from skilllink.domain.models.payment import (
    PaymentProof, PaymentProvider, Transaction, TransactionStatus, TransactionType, Wallet
)
from skilllink.domain.models.user import UserRole
from skilllink.infrastructure.payments.flutterwave import FlutterwaveClient


logger = logging.getLogger(__name__)

MANUAL_TRANSFER_INSTRUCTIONS = "Please upload payment proof to complete the transaction"
CARD_PAYMENT_INSTRUCTIONS = "Complete the payment on the provider's checkout page"


class TransactionLoaderMixin:

    def _load_transaction(self, transaction_id: str, for_update: bool = False) -> Transaction:
        transaction = self.uow.transactions.find_by_id(transaction_id, for_update=for_update)
        if transaction is None:
            raise EntityNotFoundError("Transaction", transaction_id)
        return transaction


class InitializeEscrowUseCase(AuthorizedUseCase, CommandUseCase[InitializeEscrowRequestDTO, EscrowInitResponseDTO]):
    """
    The employer of a draft contract starts funding its escrow.

    A manual transfer leaves a pending deposit waiting for proof. A card
    payment also opens a Flutterwave checkout and stores its link.
    """

    def __init__(self, payment_gateway: Optional[FlutterwaveClient] = None, **kwargs):
        super().__init__(**kwargs)
        self.payment_gateway = payment_gateway

    async def _execute_command_logic(self, request: InitializeEscrowRequestDTO) -> EscrowInitResponseDTO:
        provider = PaymentProvider(request.provider)
        settlement = build_settlement(self.uow)

        contract = settlement.load_contract(request.contract_id)
        contract.require_employer(self.current_user_id)

        if provider == PaymentProvider.FLUTTERWAVE and self.payment_gateway is None:
            raise BusinessRuleViolation("Card payments are not configured")

        reference = None
        if provider == PaymentProvider.FLUTTERWAVE:
            reference = f"job-{contract.job_id}-{int(time.time() * 1000)}"

        transaction = settlement.escrow_service.open_escrow(contract, provider, reference)
        payment_link = None

        if provider == PaymentProvider.FLUTTERWAVE:
            employer = self.uow.employers.find_by_user_id(contract.employer_id)
            if employer is None or not employer.email:
                raise ValidationError("An email address is required for card payments", "email")

            checkout = self.payment_gateway.create_payment(
                tx_ref=reference,
                amount_minor_units=transaction.amount_minor_units,
                currency=transaction.currency,
                customer_email=employer.email,
                customer_name=employer.company_name,
                description=f"Escrow for contract {contract.id}",
                meta={
                    "job_id": contract.job_id,
                    "contract_id": contract.id,
                    "user_id": self.current_user_id,
                    "platform_fee": transaction.platform_fee_minor_units,
                    "net_amount": transaction.net_amount_minor_units,
                }
            )
            payment_link = checkout["payment_link"]
            transaction.payment_metadata = {**transaction.payment_metadata, **checkout}

        saved = self.uow.transactions.save(transaction)
        self.uow.contracts.save(contract)
        logger.info(f"Escrow initialized for contract {contract.id} via {provider.value}")

        return EscrowInitResponseDTO(
            transaction=TransactionResponseDTO.from_domain(saved),
            payment_link=payment_link,
            instructions=CARD_PAYMENT_INSTRUCTIONS if payment_link else MANUAL_TRANSFER_INSTRUCTIONS
        )


class SubmitPaymentProofUseCase(TransactionLoaderMixin, AuthorizedUseCase, CommandUseCase[SubmitPaymentProofRequestDTO, PaymentProofResponseDTO]):
    """The payer uploads evidence of a bank transfer for a pending deposit."""

    async def _execute_command_logic(self, request: SubmitPaymentProofRequestDTO) -> PaymentProofResponseDTO:
        transaction = self._load_transaction(request.transaction_id)

        if transaction.from_user_id != self.current_user_id:
            raise AuthorizationError("Only the payer can submit proof for this transaction")
        if transaction.transaction_type != TransactionType.ESCROW or not transaction.is_pending:
            raise BusinessRuleViolation("Proof can only be submitted for a pending escrow payment")
        if self.uow.payment_proofs.find_unreviewed_by_transaction(transaction.id):
            raise DuplicateEntityError("PaymentProof", "transaction_id", transaction.id)

        proof = PaymentProof(
            transaction_id=transaction.id,
            user_id=self.current_user_id,
            proof_url=request.proof_url,
            bank_details=dict(request.bank_details),
            notes=request.notes,
        )
        proof.add_event(PaymentProofSubmitted(
            proof_id=proof.id,
            transaction_id=transaction.id,
            user_id=self.current_user_id,
            amount_minor_units=transaction.amount_minor_units,
            currency=transaction.currency
        ))
        saved = self.uow.payment_proofs.save(proof)
        return PaymentProofResponseDTO.from_domain(saved)


class ReviewPaymentProofUseCase(TransactionLoaderMixin, AuthorizedUseCase, CommandUseCase[ReviewPaymentProofRequestDTO, PaymentProofResponseDTO]):
    """Admin verifies or rejects a payment proof, confirming or failing the deposit."""

    async def _check_authorization(self, request: ReviewPaymentProofRequestDTO) -> None:
        self._require_role(UserRole.ADMIN)

    async def _execute_command_logic(self, request: ReviewPaymentProofRequestDTO) -> PaymentProofResponseDTO:
        proof = self.uow.payment_proofs.find_by_id(request.proof_id)
        if proof is None:
            raise EntityNotFoundError("PaymentProof", request.proof_id)

        transaction = self._load_transaction(proof.transaction_id, for_update=True)
        proof.review(self.current_user_id, request.approved, request.notes)

        settlement = build_settlement(self.uow)
        if request.approved:
            settlement.confirm_escrow(transaction, {
                "verified_by": self.current_user_id,
                "proof_id": proof.id,
            })
        else:
            settlement.fail_escrow(transaction, request.notes, {"proof_id": proof.id})

        proof.add_event(PaymentProofReviewed(
            proof_id=proof.id,
            transaction_id=transaction.id,
            user_id=proof.user_id,
            approved=request.approved,
            notes=request.notes or ""
        ))
        saved = self.uow.payment_proofs.save(proof)
        return PaymentProofResponseDTO.from_domain(saved)


class ListPendingPaymentProofsUseCase(AuthorizedUseCase, PaginatedQueryUseCase[ListRequestDTO, ListResponseDTO]):

    async def _check_authorization(self, request: ListRequestDTO) -> None:
        self._require_role(UserRole.ADMIN)

    async def _execute_business_logic(self, request: ListRequestDTO) -> ListResponseDTO:
        proofs, total = self.uow.payment_proofs.list_unreviewed(limit=request.limit, offset=request.offset)
        return ListResponseDTO[PaymentProofResponseDTO].create(
            items=[PaymentProofResponseDTO.from_domain(p) for p in proofs],
            total=total,
            page=request.page,
            page_size=request.page_size
        )


class HandlePaymentWebhookUseCase(CommandUseCase[PaymentWebhookRequestDTO, WebhookResultDTO]):
    """
    Apply a Flutterwave charge notification.
    The signature is checked by the router; replays are acknowledged without changes.
    """

    async def _execute_command_logic(self, request: PaymentWebhookRequestDTO) -> WebhookResultDTO:
        data = request.data or {}
        charge_status = str(data.get("status") or "").lower()
        succeeded = request.event == "charge.completed" and charge_status == "successful"
        failed = request.event == "charge.failed" or charge_status == "failed"

        if not succeeded and not failed:
            return WebhookResultDTO(handled=False, detail="Webhook received")

        tx_ref = data.get("tx_ref")
        if not tx_ref:
            raise ValidationError("Webhook payload has no tx_ref", "tx_ref")

        transaction = self.uow.transactions.find_by_external_reference(tx_ref, for_update=True)
        if transaction is None:
            raise EntityNotFoundError("Transaction", tx_ref)

        if transaction.status not in (TransactionStatus.PENDING, TransactionStatus.COMPLETED):
            return WebhookResultDTO(
                handled=False,
                transaction_id=transaction.id,
                detail=f"Transaction is already {transaction.status.value}"
            )

        settlement = build_settlement(self.uow)
        metadata = {"flutterwave_payment_id": data.get("id")}
        if succeeded:
            changed = settlement.confirm_escrow(transaction, metadata)
        else:
            changed = settlement.fail_escrow(transaction, data.get("processor_response") or "Charge failed", metadata)

        return WebhookResultDTO(
            handled=changed,
            transaction_id=transaction.id,
            detail="Payment processed" if changed else "Already processed"
        )


# Wallets and payouts

class GetWalletUseCase(AuthorizedUseCase, CommandUseCase[None, WalletResponseDTO]):
    """Caller's wallet, created empty on first access."""

    async def _execute_command_logic(self, request: None) -> WalletResponseDTO:
        wallet = self.uow.wallets.find_by_user_id(self.current_user_id)
        if wallet is None:
            wallet = self.uow.wallets.save(Wallet(user_id=self.current_user_id, currency=settings.default_currency))
            logger.info(f"Wallet created for user {self.current_user_id}")
        return WalletResponseDTO.from_domain(wallet)


class ListTransactionsUseCase(AuthorizedUseCase, PaginatedQueryUseCase[TransactionListRequestDTO, ListResponseDTO]):

    async def _execute_business_logic(self, request: TransactionListRequestDTO) -> ListResponseDTO:
        transaction_type = TransactionType(request.transaction_type) if request.transaction_type else None
        transactions, total = self.uow.transactions.find_by_user(
            self.current_user_id,
            transaction_type=transaction_type,
            limit=request.limit,
            offset=request.offset
        )
        return ListResponseDTO[TransactionResponseDTO].create(
            items=[TransactionResponseDTO.from_domain(t) for t in transactions],
            total=total,
            page=request.page,
            page_size=request.page_size
        )


class PaymentSummaryUseCase(AuthorizedUseCase, QueryUseCase[None, PaymentSummaryResponseDTO]):
    """Dashboard totals for the caller."""

    async def _execute_business_logic(self, request: None) -> PaymentSummaryResponseDTO:
        user_id = self.current_user_id
        wallet = self.uow.wallets.find_by_user_id(user_id)

        escrow_held = 0
        for contract in self.uow.contracts.find_by_party(user_id):
            if contract.escrow_status == EscrowStatus.FUNDED:
                escrow_held += self.uow.transactions.held_balance(contract.id)

        return PaymentSummaryResponseDTO(
            user_id=user_id,
            currency=wallet.currency if wallet else settings.default_currency,
            wallet_balance_minor_units=wallet.balance_minor_units if wallet else 0,
            total_released_minor_units=self.uow.transactions.total_for_user(
                user_id, TransactionType.RELEASE, TransactionStatus.COMPLETED, received=True
            ),
            total_withdrawn_minor_units=self.uow.transactions.total_for_user(
                user_id, TransactionType.PAYOUT, TransactionStatus.COMPLETED, received=False
            ),
            pending_transactions=self.uow.transactions.count_pending_for_user(user_id),
            escrow_held_minor_units=escrow_held,
        )


class RequestPayoutUseCase(AuthorizedUseCase, CommandUseCase[PayoutRequestDTO, TransactionResponseDTO]):
    """Withdraw from the caller's wallet to a bank account."""

    async def _execute_command_logic(self, request: PayoutRequestDTO) -> TransactionResponseDTO:
        wallet = self.uow.wallets.find_by_user_id(self.current_user_id, for_update=True)
        if wallet is None:
            raise BusinessRuleViolation("Insufficient balance")

        settlement = build_settlement(self.uow)
        transaction = settlement.escrow_service.request_payout(
            wallet,
            request.amount_minor_units,
            settings.min_payout_minor_units,
            request.bank_details
        )
        self.uow.wallets.save(wallet)
        saved = self.uow.transactions.save(transaction)
        logger.info(f"Payout {saved.id} requested by {self.current_user_id}")
        return TransactionResponseDTO.from_domain(saved)


class SettlePayoutUseCase(TransactionLoaderMixin, AuthorizedUseCase, CommandUseCase[SettlePayoutRequestDTO, TransactionResponseDTO]):
    """Admin marks a pending payout as paid, or failed with the money returned."""

    async def _check_authorization(self, request: SettlePayoutRequestDTO) -> None:
        self._require_role(UserRole.ADMIN)

    async def _execute_command_logic(self, request: SettlePayoutRequestDTO) -> TransactionResponseDTO:
        transaction = self._load_transaction(request.transaction_id, for_update=True)
        settlement = build_settlement(self.uow)

        if request.succeeded:
            metadata = {"settled_by": self.current_user_id}
            if request.reference:
                metadata["reference"] = request.reference
            settlement.escrow_service.complete_payout(transaction, metadata)
        else:
            if transaction.from_user_id is None:
                raise BusinessRuleViolation("Payout has no requester")
            wallet = settlement.wallet_for(transaction.from_user_id, transaction.currency)
            settlement.escrow_service.fail_payout(transaction, wallet, request.reason or "Payout failed")
            self.uow.wallets.save(wallet)

        saved = self.uow.transactions.save(transaction)
        return TransactionResponseDTO.from_domain(saved)


class ListPendingPayoutsUseCase(AuthorizedUseCase, PaginatedQueryUseCase[PendingPayoutListRequestDTO, ListResponseDTO]):

    async def _check_authorization(self, request: PendingPayoutListRequestDTO) -> None:
        self._require_role(UserRole.ADMIN)

    async def _execute_business_logic(self, request: PendingPayoutListRequestDTO) -> ListResponseDTO:
        payouts, total = self.uow.transactions.find_by_type_and_status(
            TransactionType.PAYOUT,
            TransactionStatus.PENDING,
            limit=request.limit,
            offset=request.offset
        )
        return ListResponseDTO[TransactionResponseDTO].create(
            items=[TransactionResponseDTO.from_domain(t) for t in payouts],
            total=total,
            page=request.page,
            page_size=request.page_size
        )
