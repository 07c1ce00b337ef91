"""
Unit tests for disputes, negotiations and verification requests.
"""

import pytest
from datetime import timedelta

from skilllink.domain.models.base import (
    ValidationError, BusinessRuleViolation, AuthorizationError, utc_now
)
from skilllink.domain.models.dispute import Dispute, DisputeStatus, DisputeOutcome
from skilllink.domain.models.negotiation import ContractNegotiation, NegotiationStatus
from skilllink.domain.models.verification import (
    VerificationRequest, VerificationRequestStatus, BadgeType
)


class TestDispute:
    """Test cases for the dispute lifecycle."""

    def make_dispute(self):
        return Dispute(contract_id="contract-1", raised_by="talent-1", reason="Work was approved but never paid")

    def test_reason_minimum_length(self):
        """Test short reasons are refused."""
        with pytest.raises(ValidationError):
            Dispute(contract_id="contract-1", raised_by="talent-1", reason="too short")

    def test_review_then_resolve(self):
        dispute = self.make_dispute()
        dispute.start_review()
        dispute.resolve("admin-1", "  Talent delivered  ", DisputeOutcome.RELEASE)

        assert dispute.status == DisputeStatus.RESOLVED
        assert dispute.resolution == "Talent delivered"
        assert dispute.outcome == DisputeOutcome.RELEASE
        assert dispute.resolved_by == "admin-1"

    def test_resolution_text_required(self):
        dispute = self.make_dispute()
        with pytest.raises(ValidationError):
            dispute.resolve("admin-1", "   ", DisputeOutcome.NONE)

    def test_resolved_dispute_is_final(self):
        """Test a resolved dispute cannot be resolved or closed again."""
        dispute = self.make_dispute()
        dispute.resolve("admin-1", "Settled", DisputeOutcome.NONE)

        with pytest.raises(BusinessRuleViolation):
            dispute.resolve("admin-1", "Again", DisputeOutcome.REFUND)
        with pytest.raises(BusinessRuleViolation):
            dispute.close("admin-1")

    def test_close_without_money(self):
        dispute = self.make_dispute()
        dispute.close("admin-1", "Parties settled privately")

        assert dispute.status == DisputeStatus.CLOSED
        assert dispute.outcome == DisputeOutcome.NONE

    def test_review_only_from_open(self):
        dispute = self.make_dispute()
        dispute.start_review()
        with pytest.raises(BusinessRuleViolation):
            dispute.start_review()

    def test_stale_only_when_open_long_enough(self):
        """Test staleness uses the creation time and the open status."""
        dispute = self.make_dispute()
        now = utc_now()
        dispute.created_at = now - timedelta(hours=49)

        assert dispute.is_stale(48, now) is True
        dispute.start_review()
        assert dispute.is_stale(48, now) is False


class TestNegotiation:
    """Test cases for offers and counter offers."""

    def make_negotiation(self):
        return ContractNegotiation.open(
            job_id="job-1",
            application_id="app-1",
            employer_id="employer-1",
            talent_id="talent-1",
            amount_minor_units=50000,
            terms="Two weeks",
        )

    def test_talent_accepts_opening_offer(self):
        negotiation = self.make_negotiation()
        assert negotiation.awaiting_user_id == "talent-1"

        agreed = negotiation.accept("talent-1")

        assert agreed == 50000
        assert negotiation.status == NegotiationStatus.ACCEPTED

    def test_counter_then_employer_accepts(self):
        """Test the employer accepts the talent's counter offer."""
        negotiation = self.make_negotiation()
        negotiation.counter("talent-1", 65000, "Three weeks")

        assert negotiation.awaiting_user_id == "employer-1"
        agreed = negotiation.accept("employer-1")

        assert agreed == 65000
        assert negotiation.current_amount_minor_units == 65000
        assert negotiation.current_terms == "Three weeks"

    def test_cannot_answer_own_offer(self):
        """Test the party that made the latest offer cannot accept it."""
        negotiation = self.make_negotiation()
        with pytest.raises(AuthorizationError):
            negotiation.accept("employer-1")

        negotiation.counter("talent-1", 60000)
        with pytest.raises(AuthorizationError):
            negotiation.accept("talent-1")

    def test_only_talent_counters(self):
        negotiation = self.make_negotiation()
        with pytest.raises(AuthorizationError):
            negotiation.counter("employer-1", 40000)

    def test_one_counter_round(self):
        """Test a countered negotiation cannot be countered again."""
        negotiation = self.make_negotiation()
        negotiation.counter("talent-1", 60000)
        with pytest.raises(BusinessRuleViolation):
            negotiation.counter("talent-1", 70000)

    def test_concluded_negotiation_is_closed(self):
        negotiation = self.make_negotiation()
        negotiation.reject("talent-1")

        assert negotiation.status == NegotiationStatus.REJECTED
        with pytest.raises(BusinessRuleViolation):
            negotiation.accept("talent-1")


class TestVerificationRequest:

    def test_blue_tick_cannot_be_requested(self):
        """Test only identity, skill and portfolio badges are requestable."""
        with pytest.raises(ValidationError):
            VerificationRequest(talent_id="talent-1", request_type=BadgeType.BLUE_TICK)

    def test_review_once(self):
        request = VerificationRequest(talent_id="talent-1", request_type=BadgeType.SKILL)
        request.review("admin-1", approved=True, notes="Portfolio checked")

        assert request.status == VerificationRequestStatus.APPROVED
        with pytest.raises(BusinessRuleViolation):
            request.review("admin-1", approved=False)
