"""
Escrow settlement steps shared by the contract, payment and dispute use cases.

Every method works inside the caller's unit of work: rows are read with
locks where the store supports them and nothing is committed here.
"""

import logging
from typing import Any, Dict, Optional

from skilllink.config import settings
from skilllink.domain.models.base import EntityNotFoundError
from skilllink.domain.models.contract import Contract, EscrowStatus
from skilllink.domain.models.job import JobStatus, ApplicationStatus
from skilllink.domain.models.payment import Transaction, Wallet
from skilllink.domain.repositories.unit_of_work import UnitOfWork
from skilllink.domain.services.escrow_service import EscrowService


logger = logging.getLogger(__name__)


class EscrowSettlement:
    """Moves contract money through the ledger and keeps wallets in step."""

    def __init__(self, uow: UnitOfWork, escrow_service: EscrowService):
        self.uow = uow
        self.escrow_service = escrow_service

    def load_contract(self, contract_id: str) -> Contract:
        contract = self.uow.contracts.find_by_id_for_update(contract_id)
        if contract is None:
            raise EntityNotFoundError("Contract", contract_id)
        return contract

    def wallet_for(self, user_id: str, currency: str) -> Wallet:
        """Locked wallet of a user, created empty on first use."""
        wallet = self.uow.wallets.find_by_user_id(user_id, for_update=True)
        if wallet is None:
            wallet = Wallet(user_id=user_id, currency=currency)
        return wallet

    # Funding

    def confirm_escrow(self, transaction: Transaction, metadata: Optional[Dict[str, Any]] = None) -> bool:
        """Confirm a deposit. Returns False when it was already confirmed."""
        contract = self.load_contract(transaction.contract_id)
        job = self.uow.jobs.find_by_id(contract.job_id)

        if not self.escrow_service.confirm_escrow(transaction, contract, job, metadata):
            logger.info(f"Escrow {transaction.id} already confirmed; nothing to do")
            return False

        self.uow.transactions.save(transaction)
        self.uow.contracts.save(contract)
        if job is not None:
            self.uow.jobs.save(job)
        logger.info(f"Escrow funded for contract {contract.id} ({transaction.amount_minor_units} {transaction.currency})")
        return True

    def fail_escrow(
        self,
        transaction: Transaction,
        reason: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None
    ) -> bool:
        contract = self.load_contract(transaction.contract_id)
        if not self.escrow_service.fail_escrow(transaction, contract, reason, metadata):
            return False
        self.uow.transactions.save(transaction)
        self.uow.contracts.save(contract)
        logger.info(f"Escrow {transaction.id} failed for contract {contract.id}: {reason}")
        return True

    # Releases

    def release_milestone(self, contract: Contract, milestone_id: str) -> Transaction:
        """
        Pay an approved milestone to the talent.
        Completes the contract once every milestone has been paid.
        """
        held = self.uow.transactions.held_balance(contract.id)
        wallet = self.wallet_for(contract.talent_id, contract.currency)

        transaction = self.escrow_service.release_milestone(contract, milestone_id, held, wallet)
        self.uow.transactions.save(transaction)
        self.uow.wallets.save(wallet)

        if contract.all_milestones_released:
            self.complete_contract(contract)
        return transaction

    def complete_contract(self, contract: Contract, settled_by_dispute: bool = False) -> Optional[Transaction]:
        """Release whatever is still held and close the contract and its job."""
        held = self.uow.transactions.held_balance(contract.id)
        wallet = self.wallet_for(contract.talent_id, contract.currency)

        remainder = self.escrow_service.release_remaining(contract, held, wallet)
        if remainder is not None:
            self.uow.transactions.save(remainder)
            self.uow.wallets.save(wallet)

        contract.complete(settled_by_dispute=settled_by_dispute)

        if contract.application_id:
            application = self.uow.applications.find_by_id(contract.application_id)
            if application is not None and application.status == ApplicationStatus.ACCEPTED:
                application.complete()
                self.uow.applications.save(application)

        job = self.uow.jobs.find_by_id(contract.job_id)
        if job is not None and job.status == JobStatus.IN_PROGRESS:
            job.complete()
            self.uow.jobs.save(job)

        profile = self.uow.profiles.find_by_user_id(contract.talent_id)
        if profile is not None:
            profile.record_completed_gig()
            self.uow.profiles.save(profile)

        logger.info(f"Contract {contract.id} completed")
        return remainder

    # Refunds

    def cancel_contract(self, contract: Contract) -> Optional[Transaction]:
        """Cancel a contract, refunding held escrow to the employer."""
        refund = None
        if contract.escrow_status == EscrowStatus.FUNDED:
            held = self.uow.transactions.held_balance(contract.id)
            wallet = self.wallet_for(contract.employer_id, contract.currency)
            refund = self.escrow_service.refund(contract, held, wallet)
            if refund is not None:
                self.uow.transactions.save(refund)
                self.uow.wallets.save(wallet)
        elif contract.escrow_status == EscrowStatus.PENDING:
            pending = self.uow.transactions.find_pending_escrow(contract.id)
            if pending is not None:
                pending.cancel()
                self.uow.transactions.save(pending)

        contract.cancel(refunded_minor_units=refund.amount_minor_units if refund else 0)
        logger.info(f"Contract {contract.id} cancelled")
        return refund


def build_settlement(uow: UnitOfWork, platform_fee_percent: Optional[int] = None) -> EscrowSettlement:
    """Settlement helper using the configured platform fee."""
    fee = settings.platform_fee_percent if platform_fee_percent is None else platform_fee_percent
    return EscrowSettlement(uow, EscrowService(platform_fee_percent=fee))
