"""
Unit tests for the Contract aggregate.
"""

import pytest
from datetime import datetime, timedelta

from skilllink.domain.events.contract_events import (
    ContractCreated, ContractActivated, MilestoneSubmitted, AmendmentProposed
)
from skilllink.domain.models.base import (
    ValidationError, BusinessRuleViolation, AuthorizationError, EntityNotFoundError
)
from skilllink.domain.models.contract import (
    Contract, ContractStatus, EscrowStatus, MilestoneStatus, AmendmentType, AmendmentStatus
)


EMPLOYER = "employer-1"
TALENT = "talent-1"


def make_contract(total=100000, **kwargs):
    return Contract.create(
        job_id="job-1",
        employer_id=EMPLOYER,
        talent_id=TALENT,
        total_amount_minor_units=total,
        currency="NGN",
        **kwargs
    )


def make_active_contract(total=100000, milestones=(("Design", 40000), ("Build", 60000))):
    contract = make_contract(total)
    for title, amount in milestones:
        contract.add_milestone(title, amount)
    contract.mark_escrow_pending()
    contract.mark_escrow_funded()
    return contract


class TestContractCreation:
    """Test cases for drawing up contracts."""

    def test_create_draft_contract(self):
        """Test a new contract starts as an unfunded draft."""
        contract = make_contract()

        assert contract.status == ContractStatus.DRAFT
        assert contract.escrow_status == EscrowStatus.UNFUNDED
        assert contract.is_renewal is False
        events = contract.pull_events()
        assert len(events) == 1
        assert isinstance(events[0], ContractCreated)
        assert events[0].amount_minor_units == 100000

    def test_same_party_rejected(self):
        """Test employer and talent must differ."""
        with pytest.raises(ValidationError):
            Contract.create(
                job_id="job-1", employer_id=EMPLOYER, talent_id=EMPLOYER,
                total_amount_minor_units=100, currency="NGN"
            )

    def test_non_positive_amount_rejected(self):
        """Test contract totals must be positive minor units."""
        with pytest.raises(ValidationError):
            make_contract(total=0)

    def test_end_before_start_rejected(self):
        """Test the end date cannot precede the start date."""
        start = datetime(2024, 3, 1)
        with pytest.raises(ValidationError):
            make_contract(start_date=start, end_date=start - timedelta(days=1))


class TestMilestonePlanning:
    """Test cases for adding milestones and their dependencies."""

    def test_add_milestones_within_total(self):
        """Test milestones are ordered and their sum tracked."""
        contract = make_contract()
        first = contract.add_milestone("Design", 40000)
        second = contract.add_milestone("Build", 60000)

        assert first.order_index == 0
        assert second.order_index == 1
        assert contract.milestone_total == 100000

    def test_milestones_cannot_exceed_total(self):
        """Test the milestone sum may never exceed the contract total."""
        contract = make_contract()
        contract.add_milestone("Design", 70000)

        with pytest.raises(BusinessRuleViolation):
            contract.add_milestone("Build", 30001)
        assert len(contract.milestones) == 1

    def test_milestones_only_added_to_drafts(self):
        """Test active contracts are closed for planning."""
        contract = make_active_contract()
        with pytest.raises(BusinessRuleViolation):
            contract.add_milestone("Extra", 1)

    def test_self_dependency_rejected(self):
        """Test a milestone cannot depend on itself."""
        contract = make_contract()
        milestone = contract.add_milestone("Design", 10000)

        with pytest.raises(BusinessRuleViolation):
            contract.set_milestone_dependency(milestone.id, milestone.id)

    def test_circular_dependency_rejected(self):
        """Test dependency chains cannot loop back."""
        contract = make_contract()
        a = contract.add_milestone("A", 10000)
        b = contract.add_milestone("B", 10000, depends_on=a.id)
        c = contract.add_milestone("C", 10000, depends_on=b.id)

        with pytest.raises(BusinessRuleViolation):
            contract.set_milestone_dependency(a.id, c.id)
        assert a.depends_on is None

    def test_unknown_dependency_removes_new_milestone(self):
        """Test a failed dependency leaves the milestone list unchanged."""
        contract = make_contract()
        with pytest.raises(EntityNotFoundError):
            contract.add_milestone("Orphan", 10000, depends_on="missing")
        assert contract.milestones == []

    def test_clear_dependency(self):
        """Test passing None clears a dependency."""
        contract = make_contract()
        a = contract.add_milestone("A", 10000)
        b = contract.add_milestone("B", 10000, depends_on=a.id)

        contract.set_milestone_dependency(b.id, None)
        assert b.depends_on is None


class TestMilestoneExecution:
    """Test cases for the milestone state machine."""

    def test_full_milestone_cycle(self):
        """Test start, submit and approve by the right parties."""
        contract = make_active_contract()
        milestone = contract.milestones[0]

        contract.start_milestone(milestone.id, TALENT)
        contract.submit_milestone(milestone.id, TALENT)
        contract.approve_milestone(milestone.id, EMPLOYER)

        assert milestone.status == MilestoneStatus.APPROVED
        assert milestone.submitted_at is not None
        assert milestone.approved_at is not None
        assert any(isinstance(e, MilestoneSubmitted) for e in contract.pull_events())

    def test_only_talent_starts_work(self):
        """Test the employer cannot start a milestone."""
        contract = make_active_contract()
        with pytest.raises(AuthorizationError):
            contract.start_milestone(contract.milestones[0].id, EMPLOYER)

    def test_only_employer_approves(self):
        """Test the talent cannot approve their own work."""
        contract = make_active_contract()
        milestone = contract.milestones[0]
        contract.start_milestone(milestone.id, TALENT)
        contract.submit_milestone(milestone.id, TALENT)

        with pytest.raises(AuthorizationError):
            contract.approve_milestone(milestone.id, TALENT)

    def test_work_requires_active_contract(self):
        """Test milestones cannot start on a draft."""
        contract = make_contract()
        milestone = contract.add_milestone("Design", 10000)

        with pytest.raises(BusinessRuleViolation):
            contract.start_milestone(milestone.id, TALENT)

    def test_dependency_blocks_start(self):
        """Test a milestone waits for its prerequisite to be approved."""
        contract = make_contract()
        first = contract.add_milestone("Design", 40000)
        second = contract.add_milestone("Build", 60000, depends_on=first.id)
        contract.mark_escrow_pending()
        contract.mark_escrow_funded()

        with pytest.raises(BusinessRuleViolation):
            contract.start_milestone(second.id, TALENT)

        contract.start_milestone(first.id, TALENT)
        contract.submit_milestone(first.id, TALENT)
        contract.approve_milestone(first.id, EMPLOYER)
        contract.start_milestone(second.id, TALENT)
        assert second.status == MilestoneStatus.IN_PROGRESS

    def test_rejected_milestone_can_be_reworked(self):
        """Test rejection sends the milestone back for rework."""
        contract = make_active_contract()
        milestone = contract.milestones[0]
        contract.start_milestone(milestone.id, TALENT)
        contract.submit_milestone(milestone.id, TALENT)
        contract.reject_milestone(milestone.id, EMPLOYER)

        contract.start_milestone(milestone.id, TALENT)
        assert milestone.status == MilestoneStatus.IN_PROGRESS

    def test_cannot_skip_states(self):
        """Test a pending milestone cannot be submitted directly."""
        contract = make_active_contract()
        with pytest.raises(BusinessRuleViolation):
            contract.submit_milestone(contract.milestones[0].id, TALENT)

    def test_dispute_freezes_work(self):
        """Test milestone work stops while a dispute is open."""
        contract = make_active_contract()
        contract.open_dispute()

        with pytest.raises(BusinessRuleViolation):
            contract.start_milestone(contract.milestones[0].id, TALENT)

    def test_release_only_once(self):
        """Test an approved milestone is paid out exactly once."""
        contract = make_active_contract()
        milestone = contract.milestones[0]
        contract.start_milestone(milestone.id, TALENT)
        contract.submit_milestone(milestone.id, TALENT)
        contract.approve_milestone(milestone.id, EMPLOYER)

        contract.mark_milestone_released(milestone.id)
        with pytest.raises(BusinessRuleViolation):
            contract.mark_milestone_released(milestone.id)


class TestContractLifecycle:
    """Test cases for funding, completion, cancellation and renewal."""

    def test_funding_activates_contract(self):
        """Test a funded deposit makes the contract active."""
        contract = make_contract()
        contract.mark_escrow_pending()
        contract.pull_events()
        contract.mark_escrow_funded()

        assert contract.status == ContractStatus.ACTIVE
        assert contract.escrow_status == EscrowStatus.FUNDED
        assert contract.start_date is not None
        assert isinstance(contract.pull_events()[0], ContractActivated)

    def test_escrow_initiated_once(self):
        """Test a second deposit cannot be opened while one is pending."""
        contract = make_contract()
        contract.mark_escrow_pending()
        with pytest.raises(BusinessRuleViolation):
            contract.mark_escrow_pending()

    def test_complete_requires_released_milestones(self):
        """Test unpaid milestones block a normal completion."""
        contract = make_active_contract()
        with pytest.raises(BusinessRuleViolation):
            contract.complete()

    def test_dispute_settlement_completes_with_unpaid_milestones(self):
        """Test a dispute released to the talent closes the contract anyway."""
        contract = make_active_contract()
        contract.complete(settled_by_dispute=True)

        assert contract.status == ContractStatus.COMPLETED
        assert contract.escrow_status == EscrowStatus.RELEASED

    def test_cancel_funded_contract_marks_refund(self):
        """Test cancelling a funded contract marks escrow refunded."""
        contract = make_active_contract()
        contract.cancel(refunded_minor_units=100000)

        assert contract.status == ContractStatus.CANCELLED
        assert contract.escrow_status == EscrowStatus.REFUNDED

    def test_completed_contract_cannot_be_cancelled(self):
        """Test terminal contracts stay terminal."""
        contract = make_active_contract(milestones=())
        contract.complete()
        with pytest.raises(BusinessRuleViolation):
            contract.cancel()

    def test_renewal_links_parent(self):
        """Test a renewal is a new draft between the same parties."""
        contract = make_active_contract()
        now = datetime(2024, 5, 1)
        renewal = contract.renew(EMPLOYER, 50000, duration_days=14, now=now)

        assert renewal.id != contract.id
        assert renewal.parent_contract_id == contract.id
        assert renewal.is_renewal is True
        assert renewal.status == ContractStatus.DRAFT
        assert renewal.talent_id == TALENT
        assert renewal.end_date == now + timedelta(days=14)

    def test_only_employer_renews(self):
        """Test the talent cannot renew a contract."""
        contract = make_active_contract()
        with pytest.raises(AuthorizationError):
            contract.renew(TALENT, 50000)

    def test_draft_cannot_be_renewed(self):
        """Test renewal needs an active or completed contract."""
        contract = make_contract()
        with pytest.raises(BusinessRuleViolation):
            contract.renew(EMPLOYER, 50000)


class TestAmendments:
    """Test cases for proposing and reviewing amendments."""

    def test_terms_amendment_applied_on_approval(self):
        """Test the other party's approval applies new terms."""
        contract = make_contract(terms="Old terms")
        amendment = contract.propose_amendment(TALENT, AmendmentType.TERMS, {"terms": "New terms"})
        proposed = [e for e in contract.pull_events() if isinstance(e, AmendmentProposed)]
        assert proposed[0].recipient_id == EMPLOYER

        contract.review_amendment(amendment, EMPLOYER, approve=True)

        assert amendment.status == AmendmentStatus.APPROVED
        assert amendment.approved_by == EMPLOYER
        assert contract.terms == "New terms"

    def test_proposer_cannot_review(self):
        """Test amendments need the counterparty."""
        contract = make_contract()
        amendment = contract.propose_amendment(EMPLOYER, AmendmentType.TERMS, {"terms": "x"})

        with pytest.raises(AuthorizationError):
            contract.review_amendment(amendment, EMPLOYER, approve=True)

    def test_rejection_needs_reason(self):
        """Test a rejection must explain itself."""
        contract = make_contract()
        amendment = contract.propose_amendment(EMPLOYER, AmendmentType.TERMS, {"terms": "x"})

        with pytest.raises(ValidationError):
            contract.review_amendment(amendment, TALENT, approve=False)

        contract.review_amendment(amendment, TALENT, approve=False, reason="Too vague")
        assert amendment.status == AmendmentStatus.REJECTED
        assert amendment.rejection_reason == "Too vague"

    def test_deadline_amendment(self):
        """Test a deadline amendment moves the end date."""
        contract = make_contract(start_date=datetime(2024, 1, 1), end_date=datetime(2024, 2, 1))
        amendment = contract.propose_amendment(EMPLOYER, AmendmentType.DEADLINE, {"end_date": "2024-03-01T00:00:00"})
        contract.review_amendment(amendment, TALENT, approve=True)

        assert contract.end_date == datetime(2024, 3, 1)

    def test_deadline_amendment_with_utc_offset(self):
        """Test offset-aware deadlines are stored as naive UTC."""
        contract = make_contract(start_date=datetime(2024, 1, 1), end_date=datetime(2024, 2, 1))
        zulu = contract.propose_amendment(EMPLOYER, AmendmentType.DEADLINE, {"end_date": "2024-03-01T00:00:00Z"})
        contract.review_amendment(zulu, TALENT, approve=True)

        assert contract.end_date == datetime(2024, 3, 1)
        assert contract.end_date.tzinfo is None

        lagos = contract.propose_amendment(EMPLOYER, AmendmentType.DEADLINE, {"end_date": "2024-04-01T09:00:00+01:00"})
        contract.review_amendment(lagos, TALENT, approve=True)

        assert contract.end_date == datetime(2024, 4, 1, 8, 0)

    def test_amount_amendment_blocked_after_funding(self):
        """Test the total is locked once escrow is initiated."""
        contract = make_active_contract()
        with pytest.raises(BusinessRuleViolation):
            contract.propose_amendment(EMPLOYER, AmendmentType.AMOUNT, {"total_amount_minor_units": 200000})

    def test_amount_amendment_not_below_milestones(self):
        """Test a new total cannot undercut planned milestones."""
        contract = make_contract()
        contract.add_milestone("Design", 80000)
        amendment = contract.propose_amendment(EMPLOYER, AmendmentType.AMOUNT, {"total_amount_minor_units": 50000})

        with pytest.raises(BusinessRuleViolation):
            contract.review_amendment(amendment, TALENT, approve=True)
        assert contract.total_amount_minor_units == 100000

    def test_invalid_amendment_data(self):
        """Test each amendment type checks its payload."""
        contract = make_contract()
        with pytest.raises(ValidationError):
            contract.propose_amendment(EMPLOYER, AmendmentType.SCOPE, {})
        with pytest.raises(ValidationError):
            contract.propose_amendment(EMPLOYER, AmendmentType.DEADLINE, {"end_date": "not a date"})

    def test_outsider_cannot_propose(self):
        """Test only parties may amend."""
        contract = make_contract()
        with pytest.raises(AuthorizationError):
            contract.propose_amendment("stranger", AmendmentType.TERMS, {"terms": "x"})
