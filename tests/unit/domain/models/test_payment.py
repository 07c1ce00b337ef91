"""
Unit tests for ledger rows, wallets and payment proofs.
"""

import pytest

from skilllink.domain.models.base import ValidationError, BusinessRuleViolation
from skilllink.domain.models.payment import (
    Transaction, TransactionType, TransactionStatus, Wallet, PaymentProof
)


def make_transaction(**kwargs):
    fields = dict(
        transaction_type=TransactionType.ESCROW,
        amount_minor_units=10000,
        platform_fee_minor_units=1000,
        net_amount_minor_units=9000,
    )
    fields.update(kwargs)
    return Transaction(**fields)


class TestTransaction:

    def test_net_must_match_amount_minus_fee(self):
        """Test ledger rows keep amount = fee + net."""
        with pytest.raises(ValidationError):
            make_transaction(net_amount_minor_units=8000)

    def test_fee_cannot_exceed_amount(self):
        with pytest.raises(ValidationError):
            make_transaction(platform_fee_minor_units=20000, net_amount_minor_units=-10000)

    def test_complete_pending(self):
        """Test completion stamps the row and merges metadata."""
        transaction = make_transaction(payment_metadata={"a": 1})
        transaction.complete({"b": 2})

        assert transaction.status == TransactionStatus.COMPLETED
        assert transaction.completed_at is not None
        assert transaction.payment_metadata == {"a": 1, "b": 2}

    def test_fail_records_reason(self):
        transaction = make_transaction()
        transaction.fail("Card declined")

        assert transaction.status == TransactionStatus.FAILED
        assert transaction.payment_metadata["failure_reason"] == "Card declined"

    def test_settled_rows_are_final(self):
        """Test a completed row cannot fail or be cancelled."""
        transaction = make_transaction()
        transaction.complete()

        with pytest.raises(BusinessRuleViolation):
            transaction.fail()
        with pytest.raises(BusinessRuleViolation):
            transaction.cancel()


class TestWallet:

    def test_credit_and_debit(self):
        wallet = Wallet(user_id="talent-1", currency="NGN")
        wallet.credit(5000, "NGN")
        wallet.debit(2000, "NGN")

        assert wallet.balance_minor_units == 3000

    def test_balance_never_negative(self):
        """Test an overdraft is refused and leaves the balance untouched."""
        wallet = Wallet(user_id="talent-1", currency="NGN", balance_minor_units=100)

        with pytest.raises(BusinessRuleViolation):
            wallet.debit(101, "NGN")
        assert wallet.balance_minor_units == 100

    def test_currency_mismatch(self):
        wallet = Wallet(user_id="talent-1", currency="NGN")
        with pytest.raises(BusinessRuleViolation):
            wallet.credit(100, "USD")

    def test_non_positive_amounts(self):
        wallet = Wallet(user_id="talent-1", currency="NGN")
        with pytest.raises(ValidationError):
            wallet.credit(0, "NGN")
        with pytest.raises(ValidationError):
            wallet.debit(-5, "NGN")


class TestPaymentProof:

    def make_proof(self):
        return PaymentProof(transaction_id="tx-1", user_id="employer-1", proof_url="https://files.example.com/r.png")

    def test_review_approve(self):
        proof = self.make_proof()
        proof.review("admin-1", approved=True)

        assert proof.is_reviewed
        assert proof.rejected is False
        assert proof.verified_by == "admin-1"

    def test_reject_needs_notes(self):
        """Test a rejection must say why."""
        proof = self.make_proof()
        with pytest.raises(ValidationError):
            proof.review("admin-1", approved=False)

    def test_reviewed_once(self):
        proof = self.make_proof()
        proof.review("admin-1", approved=False, notes="Blurry receipt")

        assert proof.rejected is True
        with pytest.raises(BusinessRuleViolation):
            proof.review("admin-1", approved=True)

    def test_proof_url_required(self):
        with pytest.raises(ValidationError):
            PaymentProof(transaction_id="tx-1", user_id="employer-1", proof_url=" ")
