"""
Unit tests for the escrow domain service.
"""

import pytest

from skilllink.domain.events.payment_events import EscrowFunded, PaymentReleased, PayoutSettled
from skilllink.domain.models.base import ValidationError, BusinessRuleViolation
from skilllink.domain.models.contract import Contract, ContractStatus, EscrowStatus
from skilllink.domain.models.job import Job, JobStatus
from skilllink.domain.models.payment import (
    PaymentProvider, TransactionStatus, TransactionType, Wallet
)
from skilllink.domain.services.escrow_service import EscrowService


EMPLOYER = "employer-1"
TALENT = "talent-1"


class TestEscrowService:
    """Test cases for EscrowService."""

    def setup_method(self):
        """Set up test fixtures."""
        self.service = EscrowService(platform_fee_percent=10)
        self.job = Job(
            title="Mobile app",
            description="Flutter app for a logistics company",
            employer_id=EMPLOYER,
            budget_min=100,
            budget_max=200,
        )
        self.contract = Contract.create(
            job_id=self.job.id,
            employer_id=EMPLOYER,
            talent_id=TALENT,
            total_amount_minor_units=100000,
            currency="NGN",
        )
        self.first = self.contract.add_milestone("Design", 40000)
        self.second = self.contract.add_milestone("Build", 60000)
        self.talent_wallet = Wallet(user_id=TALENT, currency="NGN")
        self.employer_wallet = Wallet(user_id=EMPLOYER, currency="NGN")

    def fund(self):
        transaction = self.service.open_escrow(self.contract, PaymentProvider.MANUAL_TRANSFER)
        self.service.confirm_escrow(transaction, self.contract, self.job)
        return transaction

    def approve(self, milestone):
        self.contract.start_milestone(milestone.id, TALENT)
        self.contract.submit_milestone(milestone.id, TALENT)
        self.contract.approve_milestone(milestone.id, EMPLOYER)

    def test_fee_is_floored(self):
        """Test the platform fee rounds down and net takes the remainder."""
        assert self.service.calculate_fee(999) == (99, 900)
        assert self.service.calculate_fee(1) == (0, 1)

    def test_fee_percent_bounds(self):
        with pytest.raises(ValidationError):
            EscrowService(platform_fee_percent=101)

    def test_open_escrow_is_pending_full_amount(self):
        """Test the deposit covers the full contract amount."""
        transaction = self.service.open_escrow(self.contract, PaymentProvider.MANUAL_TRANSFER)

        assert transaction.transaction_type == TransactionType.ESCROW
        assert transaction.status == TransactionStatus.PENDING
        assert transaction.amount_minor_units == 100000
        assert transaction.platform_fee_minor_units == 10000
        assert transaction.from_user_id == EMPLOYER
        assert self.contract.escrow_status == EscrowStatus.PENDING

    def test_confirm_escrow_activates_contract_and_job(self):
        transaction = self.fund()

        assert transaction.status == TransactionStatus.COMPLETED
        assert self.contract.status == ContractStatus.ACTIVE
        assert self.job.status == JobStatus.IN_PROGRESS
        assert isinstance(transaction.pull_events()[0], EscrowFunded)

    def test_confirm_escrow_twice_is_noop(self):
        """Test a replayed confirmation changes nothing."""
        transaction = self.fund()
        assert self.service.confirm_escrow(transaction, self.contract, self.job) is False

    def test_failed_escrow_resets_contract(self):
        transaction = self.service.open_escrow(self.contract, PaymentProvider.FLUTTERWAVE, "job-1-1")
        assert self.service.fail_escrow(transaction, self.contract, "Declined") is True

        assert transaction.status == TransactionStatus.FAILED
        assert self.contract.escrow_status == EscrowStatus.UNFUNDED
        with pytest.raises(BusinessRuleViolation):
            self.service.confirm_escrow(transaction, self.contract)

    def test_release_milestone_credits_net(self):
        """Test a release pays the net amount into the talent wallet."""
        self.fund()
        self.approve(self.first)

        transaction = self.service.release_milestone(self.contract, self.first.id, 100000, self.talent_wallet)

        assert transaction.transaction_type == TransactionType.RELEASE
        assert transaction.amount_minor_units == 40000
        assert transaction.platform_fee_minor_units == 4000
        assert transaction.net_amount_minor_units == 36000
        assert transaction.milestone_id == self.first.id
        assert self.talent_wallet.balance_minor_units == 36000
        assert self.first.released is True
        assert isinstance(transaction.pull_events()[0], PaymentReleased)

    def test_release_requires_approval(self):
        self.fund()
        with pytest.raises(BusinessRuleViolation):
            self.service.release_milestone(self.contract, self.first.id, 100000, self.talent_wallet)

    def test_release_cannot_exceed_held_balance(self):
        self.fund()
        self.approve(self.second)
        with pytest.raises(BusinessRuleViolation):
            self.service.release_milestone(self.contract, self.second.id, 50000, self.talent_wallet)
        assert self.talent_wallet.balance_minor_units == 0

    def test_release_frozen_by_dispute(self):
        """Test nothing is released while the contract is disputed."""
        self.fund()
        self.approve(self.first)
        self.contract.open_dispute()

        with pytest.raises(BusinessRuleViolation):
            self.service.release_milestone(self.contract, self.first.id, 100000, self.talent_wallet)

    def test_release_only_to_contracted_talent(self):
        self.fund()
        self.approve(self.first)
        with pytest.raises(BusinessRuleViolation):
            self.service.release_milestone(self.contract, self.first.id, 100000, Wallet(user_id="someone", currency="NGN"))

    def test_release_remaining(self):
        self.fund()
        transaction = self.service.release_remaining(self.contract, 60000, self.talent_wallet)

        assert transaction.amount_minor_units == 60000
        assert transaction.milestone_id is None
        assert self.talent_wallet.balance_minor_units == 54000
        assert self.service.release_remaining(self.contract, 0, self.talent_wallet) is None

    def test_refund_has_no_fee(self):
        """Test refunds return the full held amount to the employer."""
        self.fund()
        transaction = self.service.refund(self.contract, 100000, self.employer_wallet)

        assert transaction.transaction_type == TransactionType.REFUND
        assert transaction.platform_fee_minor_units == 0
        assert self.employer_wallet.balance_minor_units == 100000

    def test_refund_unfunded_contract(self):
        with pytest.raises(BusinessRuleViolation):
            self.service.refund(self.contract, 100, self.employer_wallet)


class TestPayouts:
    """Test cases for wallet withdrawals."""

    def setup_method(self):
        self.service = EscrowService(platform_fee_percent=10)
        self.wallet = Wallet(user_id=TALENT, currency="NGN", balance_minor_units=50000)
        self.bank = {"account_number": "0123456789", "account_name": "Ada", "bank_name": "GTBank"}

    def test_request_debits_wallet(self):
        transaction = self.service.request_payout(self.wallet, 20000, 100, self.bank)

        assert transaction.transaction_type == TransactionType.PAYOUT
        assert transaction.status == TransactionStatus.PENDING
        assert transaction.payment_metadata["bank_details"] == self.bank
        assert self.wallet.balance_minor_units == 30000

    def test_minimum_payout(self):
        with pytest.raises(ValidationError):
            self.service.request_payout(self.wallet, 99, 100, self.bank)

    def test_insufficient_balance(self):
        with pytest.raises(BusinessRuleViolation):
            self.service.request_payout(self.wallet, 60000, 100, self.bank)
        assert self.wallet.balance_minor_units == 50000

    def test_failed_payout_restores_balance(self):
        """Test a failed withdrawal puts the money back."""
        transaction = self.service.request_payout(self.wallet, 20000, 100, self.bank)
        transaction.pull_events()
        self.service.fail_payout(transaction, self.wallet, "Account closed")

        assert transaction.status == TransactionStatus.FAILED
        assert self.wallet.balance_minor_units == 50000
        event = transaction.pull_events()[0]
        assert isinstance(event, PayoutSettled)
        assert event.succeeded is False

    def test_payout_settled_once(self):
        transaction = self.service.request_payout(self.wallet, 20000, 100, self.bank)
        self.service.complete_payout(transaction, {"reference": "TRF-1"})

        assert transaction.status == TransactionStatus.COMPLETED
        with pytest.raises(BusinessRuleViolation):
            self.service.fail_payout(transaction, self.wallet)
