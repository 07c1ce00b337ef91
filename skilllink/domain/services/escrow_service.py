"""Escrow service for moving money through the ledger.
Builds ledger rows and applies their effects on contracts and wallets.

The service never touches storage. Callers load the rows (locked where the
database supports it), call one method and persist everything it changed in
a single unit of work.
"""

from typing import Any, Dict, Optional, Tuple

from skilllink.domain.models.base import ValidationError, BusinessRuleViolation, utc_now
from skilllink.domain.models.contract import Contract, ContractStatus, EscrowStatus
from skilllink.domain.models.job import Job, JobStatus
from skilllink.domain.models.payment import (
    Transaction, Wallet, TransactionType, TransactionStatus, PaymentProvider
)
from skilllink.domain.events.payment_events import (
    EscrowFunded, PaymentReleased, RefundIssued, PayoutRequested, PayoutSettled
)


class EscrowService:
    """
    Domain service for escrow funding, releases, refunds and payouts.
    All amounts are integer minor units.
    """

    def __init__(self, platform_fee_percent: int = 10):
        if platform_fee_percent < 0 or platform_fee_percent > 100:
            raise ValidationError("Platform fee must be between 0 and 100 percent", "platform_fee_percent")
        self.platform_fee_percent = platform_fee_percent

    def calculate_fee(self, amount_minor_units: int) -> Tuple[int, int]:
        """Return (fee, net) for a gross amount. The fee is floored."""
        fee = amount_minor_units * self.platform_fee_percent // 100
        return fee, amount_minor_units - fee

    # Funding

    def open_escrow(
        self,
        contract: Contract,
        provider: PaymentProvider,
        external_reference: Optional[str] = None
    ) -> Transaction:
        """Create the pending deposit for the full contract amount."""
        contract.mark_escrow_pending()
        fee, net = self.calculate_fee(contract.total_amount_minor_units)

        return Transaction(
            transaction_type=TransactionType.ESCROW,
            status=TransactionStatus.PENDING,
            amount_minor_units=contract.total_amount_minor_units,
            platform_fee_minor_units=fee,
            net_amount_minor_units=net,
            currency=contract.currency,
            job_id=contract.job_id,
            contract_id=contract.id,
            from_user_id=contract.employer_id,
            to_user_id=contract.talent_id,
            description=f"Escrow deposit for contract {contract.id}",
            payment_provider=provider,
            external_reference=external_reference,
        )

    def confirm_escrow(
        self,
        transaction: Transaction,
        contract: Contract,
        job: Optional[Job] = None,
        metadata: Optional[Dict[str, Any]] = None
    ) -> bool:
        """
        Mark a deposit as received and put the contract to work.
        Returns False when the deposit was already confirmed.
        """
        self._require_escrow_for(transaction, contract)
        if transaction.is_completed:
            return False
        if not transaction.is_pending:
            raise BusinessRuleViolation(f"Escrow payment is {transaction.status.value} and cannot be confirmed")

        transaction.complete(metadata)
        contract.mark_escrow_funded()
        if job is not None and job.status == JobStatus.OPEN:
            job.start_work()

        transaction.add_event(EscrowFunded(
            transaction_id=transaction.id,
            contract_id=contract.id,
            employer_id=contract.employer_id,
            talent_id=contract.talent_id,
            amount_minor_units=transaction.amount_minor_units,
            currency=transaction.currency
        ))
        return True

    def fail_escrow(
        self,
        transaction: Transaction,
        contract: Contract,
        reason: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None
    ) -> bool:
        """Mark a deposit as failed. Returns False when it is no longer pending."""
        self._require_escrow_for(transaction, contract)
        if not transaction.is_pending:
            return False
        transaction.fail(reason, metadata)
        contract.mark_escrow_unfunded()
        return True

    @staticmethod
    def _require_escrow_for(transaction: Transaction, contract: Contract) -> None:
        if transaction.transaction_type != TransactionType.ESCROW:
            raise BusinessRuleViolation("Transaction is not an escrow deposit")
        if transaction.contract_id != contract.id:
            raise BusinessRuleViolation("Transaction belongs to a different contract")

    # Releases

    def release_milestone(
        self,
        contract: Contract,
        milestone_id: str,
        held_balance: int,
        talent_wallet: Wallet
    ) -> Transaction:
        """
        Pay an approved milestone to the talent, exactly once.
        The milestone is flagged released and the wallet credited with the net amount.
        """
        contract.ensure_funded()
        if contract.status == ContractStatus.DISPUTED:
            raise BusinessRuleViolation("Contract is under dispute; releases are frozen")
        if contract.status != ContractStatus.ACTIVE:
            raise BusinessRuleViolation(f"Contract must be active (status is {contract.status.value})")

        milestone = contract.get_milestone(milestone_id)
        if held_balance < milestone.amount_minor_units:
            raise BusinessRuleViolation(
                f"Escrow holds {held_balance} but milestone requires {milestone.amount_minor_units}"
            )
        contract.mark_milestone_released(milestone_id)

        transaction = self._release(
            contract,
            milestone.amount_minor_units,
            talent_wallet,
            milestone_id=milestone.id,
            description=f"Payment for milestone: {milestone.title}"
        )
        return transaction

    def release_remaining(
        self,
        contract: Contract,
        held_balance: int,
        talent_wallet: Wallet
    ) -> Optional[Transaction]:
        """Pay whatever is still held to the talent. None when nothing is held."""
        if held_balance <= 0:
            return None
        contract.ensure_funded()
        return self._release(
            contract,
            held_balance,
            talent_wallet,
            milestone_id=None,
            description=f"Release of remaining escrow for contract {contract.id}"
        )

    def _release(
        self,
        contract: Contract,
        amount: int,
        talent_wallet: Wallet,
        milestone_id: Optional[str],
        description: str
    ) -> Transaction:
        if talent_wallet.user_id != contract.talent_id:
            raise BusinessRuleViolation("Releases can only be credited to the contracted talent")

        fee, net = self.calculate_fee(amount)
        now = utc_now()
        transaction = Transaction(
            transaction_type=TransactionType.RELEASE,
            status=TransactionStatus.COMPLETED,
            amount_minor_units=amount,
            platform_fee_minor_units=fee,
            net_amount_minor_units=net,
            currency=contract.currency,
            job_id=contract.job_id,
            contract_id=contract.id,
            milestone_id=milestone_id,
            from_user_id=contract.employer_id,
            to_user_id=contract.talent_id,
            description=description,
            payment_provider=PaymentProvider.INTERNAL,
            completed_at=now,
        )
        if net > 0:
            talent_wallet.credit(net, contract.currency)

        transaction.add_event(PaymentReleased(
            transaction_id=transaction.id,
            contract_id=contract.id,
            milestone_id=milestone_id or "",
            talent_id=contract.talent_id,
            amount_minor_units=amount,
            platform_fee_minor_units=fee,
            net_amount_minor_units=net,
            currency=contract.currency
        ))
        return transaction

    # Refunds

    def refund(
        self,
        contract: Contract,
        held_balance: int,
        employer_wallet: Wallet
    ) -> Optional[Transaction]:
        """Return the held balance to the employer wallet, without a fee."""
        if held_balance <= 0:
            return None
        if contract.escrow_status != EscrowStatus.FUNDED:
            raise BusinessRuleViolation(f"Escrow is not funded (status is {contract.escrow_status.value})")
        if employer_wallet.user_id != contract.employer_id:
            raise BusinessRuleViolation("Refunds can only be credited to the contract employer")

        transaction = Transaction(
            transaction_type=TransactionType.REFUND,
            status=TransactionStatus.COMPLETED,
            amount_minor_units=held_balance,
            platform_fee_minor_units=0,
            net_amount_minor_units=held_balance,
            currency=contract.currency,
            job_id=contract.job_id,
            contract_id=contract.id,
            to_user_id=contract.employer_id,
            description=f"Refund of escrow for contract {contract.id}",
            payment_provider=PaymentProvider.INTERNAL,
            completed_at=utc_now(),
        )
        employer_wallet.credit(held_balance, contract.currency)

        transaction.add_event(RefundIssued(
            transaction_id=transaction.id,
            contract_id=contract.id,
            employer_id=contract.employer_id,
            amount_minor_units=held_balance,
            currency=contract.currency
        ))
        return transaction

    # Payouts

    def request_payout(
        self,
        wallet: Wallet,
        amount_minor_units: int,
        minimum_minor_units: int,
        bank_details: Dict[str, Any]
    ) -> Transaction:
        """Debit the wallet and record a pending withdrawal."""
        if amount_minor_units < minimum_minor_units:
            raise ValidationError(
                f"Minimum payout is {minimum_minor_units} minor units", "amount_minor_units"
            )
        if not bank_details:
            raise ValidationError("Bank details are required for a payout", "bank_details")

        wallet.debit(amount_minor_units, wallet.currency)

        transaction = Transaction(
            transaction_type=TransactionType.PAYOUT,
            status=TransactionStatus.PENDING,
            amount_minor_units=amount_minor_units,
            platform_fee_minor_units=0,
            net_amount_minor_units=amount_minor_units,
            currency=wallet.currency,
            from_user_id=wallet.user_id,
            description="Wallet withdrawal",
            payment_provider=PaymentProvider.MANUAL_TRANSFER,
            payment_metadata={"bank_details": dict(bank_details)},
        )
        transaction.add_event(PayoutRequested(
            transaction_id=transaction.id,
            user_id=wallet.user_id,
            amount_minor_units=amount_minor_units,
            currency=wallet.currency
        ))
        return transaction

    def complete_payout(self, transaction: Transaction, metadata: Optional[Dict[str, Any]] = None) -> None:
        self._require_payout(transaction)
        transaction.complete(metadata)
        transaction.add_event(PayoutSettled(
            transaction_id=transaction.id,
            user_id=transaction.from_user_id or "",
            amount_minor_units=transaction.amount_minor_units,
            currency=transaction.currency,
            succeeded=True
        ))

    def fail_payout(self, transaction: Transaction, wallet: Wallet, reason: Optional[str] = None) -> None:
        """Mark a withdrawal failed and put the money back in the wallet."""
        self._require_payout(transaction)
        if wallet.user_id != transaction.from_user_id:
            raise BusinessRuleViolation("Wallet does not belong to the payout requester")

        transaction.fail(reason)
        wallet.credit(transaction.amount_minor_units, transaction.currency)
        transaction.add_event(PayoutSettled(
            transaction_id=transaction.id,
            user_id=wallet.user_id,
            amount_minor_units=transaction.amount_minor_units,
            currency=transaction.currency,
            succeeded=False
        ))

    @staticmethod
    def _require_payout(transaction: Transaction) -> None:
        if transaction.transaction_type != TransactionType.PAYOUT:
            raise BusinessRuleViolation("Transaction is not a payout")
        if not transaction.is_pending:
            raise BusinessRuleViolation(f"Payout is already {transaction.status.value}")
