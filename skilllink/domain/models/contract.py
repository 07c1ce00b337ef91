"""
Contract aggregate: milestone-driven lifecycle, escrow status and amendments.

A contract is drawn up for an accepted application. It starts as a draft,
becomes active once escrow is funded and completes when every milestone has
been approved and paid out. Milestones belong to the aggregate and are always
loaded and saved with their contract.
"""

from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Dict, List, Optional
from dataclasses import dataclass, field

from .base import (
    BaseEntity, AggregateRoot, ValidationError, BusinessRuleViolation,
    EntityNotFoundError, AuthorizationError, utc_now, as_naive_utc
)
from skilllink.domain.events.contract_events import (
    ContractCreated, ContractActivated, ContractCompleted, ContractCancelled,
    MilestoneSubmitted, MilestoneReviewed, AmendmentProposed, AmendmentReviewed
)


class ContractStatus(str, Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    DISPUTED = "disputed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class EscrowStatus(str, Enum):
    UNFUNDED = "unfunded"
    PENDING = "pending"
    FUNDED = "funded"
    RELEASED = "released"
    REFUNDED = "refunded"


class MilestoneStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    SUBMITTED = "submitted"
    APPROVED = "approved"
    REJECTED = "rejected"


class AmendmentType(str, Enum):
    TERMS = "terms"
    SCOPE = "scope"
    DEADLINE = "deadline"
    AMOUNT = "amount"


class AmendmentStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


_MILESTONE_TRANSITIONS = {
    MilestoneStatus.PENDING: {MilestoneStatus.IN_PROGRESS},
    MilestoneStatus.IN_PROGRESS: {MilestoneStatus.SUBMITTED},
    MilestoneStatus.SUBMITTED: {MilestoneStatus.APPROVED, MilestoneStatus.REJECTED},
    MilestoneStatus.REJECTED: {MilestoneStatus.IN_PROGRESS},
    MilestoneStatus.APPROVED: set(),
}


@dataclass(eq=False)
class Milestone(BaseEntity):
    """A payable slice of contract work."""

    contract_id: str = ""
    title: str = ""
    description: Optional[str] = None
    amount_minor_units: int = 0
    due_date: Optional[datetime] = None
    status: MilestoneStatus = MilestoneStatus.PENDING
    depends_on: Optional[str] = None
    order_index: int = 0
    submitted_at: Optional[datetime] = None
    approved_at: Optional[datetime] = None
    released: bool = False
    released_at: Optional[datetime] = None

    def __post_init__(self):
        super().__post_init__()
        self.validate()

    def validate(self) -> None:
        if not self.title or not self.title.strip():
            raise ValidationError("Milestone title cannot be empty", "title")
        if len(self.title) > 255:
            raise ValidationError("Milestone title too long (max 255 characters)", "title")
        if not isinstance(self.amount_minor_units, int) or self.amount_minor_units <= 0:
            raise ValidationError("Milestone amount must be a positive number of minor units", "amount_minor_units")

    def transition_to(self, new_status: MilestoneStatus) -> None:
        if new_status not in _MILESTONE_TRANSITIONS[self.status]:
            raise BusinessRuleViolation(
                f"Milestone cannot move from {self.status.value} to {new_status.value}"
            )
        self.status = new_status
        now = utc_now()
        if new_status == MilestoneStatus.SUBMITTED:
            self.submitted_at = now
        elif new_status == MilestoneStatus.APPROVED:
            self.approved_at = now
        self.updated_at = now

    @property
    def is_approved(self) -> bool:
        return self.status == MilestoneStatus.APPROVED

    def is_due_within(self, hours: int, now: Optional[datetime] = None) -> bool:
        now = now or utc_now()
        return self.due_date is not None and now <= self.due_date <= now + timedelta(hours=hours)

    def is_overdue(self, now: Optional[datetime] = None) -> bool:
        now = now or utc_now()
        return self.due_date is not None and self.due_date < now


@dataclass(eq=False)
class ContractAmendment(BaseEntity):
    """A change to a live contract proposed by one party and reviewed by the other."""

    contract_id: str = ""
    proposed_by: str = ""
    amendment_type: AmendmentType = AmendmentType.TERMS
    amendment_data: Dict[str, Any] = field(default_factory=dict)
    status: AmendmentStatus = AmendmentStatus.PENDING
    approved_by: Optional[str] = None
    rejection_reason: Optional[str] = None
    reviewed_at: Optional[datetime] = None

    def __post_init__(self):
        super().__post_init__()
        self.validate()

    def validate(self) -> None:
        data = self.amendment_data or {}
        if self.amendment_type == AmendmentType.TERMS:
            if not str(data.get("terms", "")).strip():
                raise ValidationError("Terms amendment requires new terms", "amendment_data")
        elif self.amendment_type == AmendmentType.SCOPE:
            if not str(data.get("description", "")).strip():
                raise ValidationError("Scope amendment requires a description", "amendment_data")
        elif self.amendment_type == AmendmentType.DEADLINE:
            if not data.get("end_date"):
                raise ValidationError("Deadline amendment requires an end_date", "amendment_data")
            self.parse_end_date()
        elif self.amendment_type == AmendmentType.AMOUNT:
            amount = data.get("total_amount_minor_units")
            if not isinstance(amount, int) or isinstance(amount, bool) or amount <= 0:
                raise ValidationError(
                    "Amount amendment requires a positive total_amount_minor_units", "amendment_data"
                )

    def parse_end_date(self) -> datetime:
        value = self.amendment_data.get("end_date")
        if not isinstance(value, datetime):
            text = str(value)
            if text.endswith("Z"):
                text = text[:-1] + "+00:00"
            try:
                value = datetime.fromisoformat(text)
            except ValueError:
                raise ValidationError(f"Invalid end_date: {value}", "amendment_data")
        return as_naive_utc(value)

    @property
    def is_pending(self) -> bool:
        return self.status == AmendmentStatus.PENDING


@dataclass(eq=False)
class Contract(AggregateRoot):
    """
    Contract aggregate root.
    Amounts are integer minor units in ``currency``.
    """

    job_id: str = ""
    application_id: Optional[str] = None
    employer_id: str = ""
    talent_id: str = ""
    total_amount_minor_units: int = 0
    currency: str = "NGN"
    terms: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    status: ContractStatus = ContractStatus.DRAFT
    escrow_status: EscrowStatus = EscrowStatus.UNFUNDED
    parent_contract_id: Optional[str] = None
    is_renewal: bool = False
    milestones: List[Milestone] = field(default_factory=list)

    def __post_init__(self):
        super().__post_init__()
        self.validate()

    def validate(self) -> None:
        if not self.job_id:
            raise ValidationError("Contract requires a job", "job_id")
        if not self.employer_id or not self.talent_id:
            raise ValidationError("Contract requires an employer and a talent", "parties")
        if self.employer_id == self.talent_id:
            raise ValidationError("Employer and talent must be different users", "parties")
        if not isinstance(self.total_amount_minor_units, int) or self.total_amount_minor_units <= 0:
            raise ValidationError("Contract amount must be a positive number of minor units", "total_amount_minor_units")
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValidationError("End date cannot be before start date", "end_date")
        if self.milestone_total > self.total_amount_minor_units:
            raise ValidationError("Milestone amounts exceed the contract total", "milestones")

    @classmethod
    def create(
        cls,
        job_id: str,
        employer_id: str,
        talent_id: str,
        total_amount_minor_units: int,
        currency: str,
        application_id: Optional[str] = None,
        terms: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        parent_contract_id: Optional[str] = None,
    ) -> "Contract":
        """Draw up a new draft contract."""
        contract = cls(
            job_id=job_id,
            application_id=application_id,
            employer_id=employer_id,
            talent_id=talent_id,
            total_amount_minor_units=total_amount_minor_units,
            currency=currency,
            terms=terms,
            start_date=start_date,
            end_date=end_date,
            parent_contract_id=parent_contract_id,
            is_renewal=parent_contract_id is not None,
        )
        contract.add_event(ContractCreated(
            contract_id=contract.id,
            employer_id=employer_id,
            talent_id=talent_id,
            amount_minor_units=total_amount_minor_units,
            currency=currency,
            is_renewal=contract.is_renewal
        ))
        return contract

    # Queries

    @property
    def milestone_total(self) -> int:
        return sum(m.amount_minor_units for m in self.milestones)

    @property
    def has_milestones(self) -> bool:
        return bool(self.milestones)

    @property
    def all_milestones_released(self) -> bool:
        return self.has_milestones and all(m.released for m in self.milestones)

    @property
    def is_live(self) -> bool:
        return self.status in (ContractStatus.DRAFT, ContractStatus.ACTIVE, ContractStatus.DISPUTED)

    def is_party(self, user_id: str) -> bool:
        return user_id in (self.employer_id, self.talent_id)

    def other_party(self, user_id: str) -> str:
        if user_id == self.employer_id:
            return self.talent_id
        if user_id == self.talent_id:
            return self.employer_id
        raise AuthorizationError("User is not a party to this contract")

    def require_employer(self, user_id: str) -> None:
        if user_id != self.employer_id:
            raise AuthorizationError("Only the contract employer can perform this action")

    def require_talent(self, user_id: str) -> None:
        if user_id != self.talent_id:
            raise AuthorizationError("Only the contracted talent can perform this action")

    def require_party(self, user_id: str) -> None:
        if not self.is_party(user_id):
            raise AuthorizationError("User is not a party to this contract")

    def get_milestone(self, milestone_id: str) -> Milestone:
        for milestone in self.milestones:
            if milestone.id == milestone_id:
                return milestone
        raise EntityNotFoundError("Milestone", milestone_id)

    # Milestone planning

    def add_milestone(
        self,
        title: str,
        amount_minor_units: int,
        description: Optional[str] = None,
        due_date: Optional[datetime] = None,
        depends_on: Optional[str] = None
    ) -> Milestone:
        if self.status != ContractStatus.DRAFT:
            raise BusinessRuleViolation("Milestones can only be added while the contract is a draft")

        milestone = Milestone(
            contract_id=self.id,
            title=title,
            description=description,
            amount_minor_units=amount_minor_units,
            due_date=due_date,
            order_index=len(self.milestones),
        )
        if self.milestone_total + milestone.amount_minor_units > self.total_amount_minor_units:
            raise BusinessRuleViolation(
                "Milestone amounts cannot exceed the contract total "
                f"({self.milestone_total + milestone.amount_minor_units} > {self.total_amount_minor_units})"
            )

        self.milestones.append(milestone)
        if depends_on:
            try:
                self.set_milestone_dependency(milestone.id, depends_on)
            except Exception:
                self.milestones.remove(milestone)
                raise

        self.mark_as_updated()
        return milestone

    def set_milestone_dependency(self, milestone_id: str, depends_on: Optional[str]) -> Milestone:
        """
        Make ``milestone_id`` wait for ``depends_on``. Passing None clears it.
        Rejects self references and any chain that leads back to the milestone.
        """
        milestone = self.get_milestone(milestone_id)
        if milestone.status not in (MilestoneStatus.PENDING, MilestoneStatus.REJECTED):
            raise BusinessRuleViolation("Dependencies can only change before work on the milestone starts")

        if depends_on is None:
            milestone.depends_on = None
            self.mark_as_updated()
            return milestone

        if depends_on == milestone_id:
            raise BusinessRuleViolation("A milestone cannot depend on itself")
        self.get_milestone(depends_on)

        visited = set()
        cursor: Optional[str] = depends_on
        while cursor is not None:
            if cursor == milestone_id:
                raise BusinessRuleViolation("This dependency would create a circular chain")
            if cursor in visited:
                break
            visited.add(cursor)
            cursor = self.get_milestone(cursor).depends_on

        milestone.depends_on = depends_on
        self.mark_as_updated()
        return milestone

    # Milestone execution

    def _require_active(self) -> None:
        if self.status == ContractStatus.DISPUTED:
            raise BusinessRuleViolation("Contract is under dispute; milestone work is frozen")
        if self.status != ContractStatus.ACTIVE:
            raise BusinessRuleViolation(f"Contract must be active (status is {self.status.value})")

    def start_milestone(self, milestone_id: str, user_id: str) -> Milestone:
        self.require_talent(user_id)
        self._require_active()
        milestone = self.get_milestone(milestone_id)

        if milestone.depends_on:
            prerequisite = self.get_milestone(milestone.depends_on)
            if not prerequisite.is_approved:
                raise BusinessRuleViolation(
                    f"Milestone '{prerequisite.title}' must be approved before this one can start"
                )

        milestone.transition_to(MilestoneStatus.IN_PROGRESS)
        self.mark_as_updated()
        return milestone

    def submit_milestone(self, milestone_id: str, user_id: str) -> Milestone:
        self.require_talent(user_id)
        self._require_active()
        milestone = self.get_milestone(milestone_id)
        milestone.transition_to(MilestoneStatus.SUBMITTED)
        self.mark_as_updated()

        self.add_event(MilestoneSubmitted(
            contract_id=self.id,
            milestone_id=milestone.id,
            milestone_title=milestone.title,
            employer_id=self.employer_id
        ))
        return milestone

    def approve_milestone(self, milestone_id: str, user_id: str) -> Milestone:
        """Approve submitted work. Payment is released by the escrow ledger."""
        self.require_employer(user_id)
        self._require_active()
        self.ensure_funded()
        milestone = self.get_milestone(milestone_id)
        milestone.transition_to(MilestoneStatus.APPROVED)
        self.mark_as_updated()

        self.add_event(MilestoneReviewed(
            contract_id=self.id,
            milestone_id=milestone.id,
            milestone_title=milestone.title,
            talent_id=self.talent_id,
            approved=True
        ))
        return milestone

    def reject_milestone(self, milestone_id: str, user_id: str) -> Milestone:
        self.require_employer(user_id)
        self._require_active()
        milestone = self.get_milestone(milestone_id)
        milestone.transition_to(MilestoneStatus.REJECTED)
        self.mark_as_updated()

        self.add_event(MilestoneReviewed(
            contract_id=self.id,
            milestone_id=milestone.id,
            milestone_title=milestone.title,
            talent_id=self.talent_id,
            approved=False
        ))
        return milestone

    def mark_milestone_released(self, milestone_id: str) -> Milestone:
        milestone = self.get_milestone(milestone_id)
        if not milestone.is_approved:
            raise BusinessRuleViolation("Only approved milestones can be paid out")
        if milestone.released:
            raise BusinessRuleViolation("Milestone payment has already been released")
        milestone.released = True
        milestone.released_at = utc_now()
        self.mark_as_updated()
        return milestone

    # Escrow

    def ensure_funded(self) -> None:
        if self.escrow_status != EscrowStatus.FUNDED:
            raise BusinessRuleViolation(f"Escrow is not funded (status is {self.escrow_status.value})")

    def mark_escrow_pending(self) -> None:
        if self.status != ContractStatus.DRAFT:
            raise BusinessRuleViolation("Only draft contracts can be funded")
        if self.escrow_status != EscrowStatus.UNFUNDED:
            raise BusinessRuleViolation(f"Escrow already initiated (status is {self.escrow_status.value})")
        self.escrow_status = EscrowStatus.PENDING
        self.mark_as_updated()

    def mark_escrow_unfunded(self) -> None:
        """A pending deposit failed or was rejected."""
        if self.escrow_status == EscrowStatus.PENDING:
            self.escrow_status = EscrowStatus.UNFUNDED
            self.mark_as_updated()

    def mark_escrow_funded(self) -> None:
        """Deposit confirmed: the contract goes live."""
        if self.escrow_status not in (EscrowStatus.PENDING, EscrowStatus.UNFUNDED):
            raise BusinessRuleViolation(f"Escrow cannot be funded from {self.escrow_status.value}")
        if self.status != ContractStatus.DRAFT:
            raise BusinessRuleViolation(f"Only draft contracts can be activated (status is {self.status.value})")

        self.escrow_status = EscrowStatus.FUNDED
        self.status = ContractStatus.ACTIVE
        if self.start_date is None:
            self.start_date = utc_now()
        self.mark_as_updated()

        self.add_event(ContractActivated(
            contract_id=self.id,
            employer_id=self.employer_id,
            talent_id=self.talent_id
        ))

    # Lifecycle

    def complete(self, settled_by_dispute: bool = False) -> None:
        """
        Close a fully paid contract.
        A dispute resolved in the talent's favour pays out everything held, so
        unreleased milestones do not block completion in that case.
        """
        if self.status != ContractStatus.ACTIVE:
            raise BusinessRuleViolation(f"Only active contracts can be completed (status is {self.status.value})")
        if not settled_by_dispute and self.has_milestones and not self.all_milestones_released:
            raise BusinessRuleViolation("All milestones must be approved and paid before completion")

        self.status = ContractStatus.COMPLETED
        self.escrow_status = EscrowStatus.RELEASED
        self.mark_as_updated()

        self.add_event(ContractCompleted(
            contract_id=self.id,
            employer_id=self.employer_id,
            talent_id=self.talent_id
        ))

    def cancel(self, refunded_minor_units: int = 0) -> None:
        if self.status not in (ContractStatus.DRAFT, ContractStatus.ACTIVE):
            raise BusinessRuleViolation(f"Contract cannot be cancelled from {self.status.value}")

        if self.escrow_status == EscrowStatus.FUNDED:
            self.escrow_status = EscrowStatus.REFUNDED
        elif self.escrow_status == EscrowStatus.PENDING:
            self.escrow_status = EscrowStatus.UNFUNDED
        self.status = ContractStatus.CANCELLED
        self.mark_as_updated()

        self.add_event(ContractCancelled(
            contract_id=self.id,
            employer_id=self.employer_id,
            talent_id=self.talent_id,
            refunded_minor_units=refunded_minor_units
        ))

    def open_dispute(self) -> None:
        if self.status != ContractStatus.ACTIVE:
            raise BusinessRuleViolation("Disputes can only be raised on active contracts")
        self.status = ContractStatus.DISPUTED
        self.mark_as_updated()

    def lift_dispute(self) -> None:
        if self.status != ContractStatus.DISPUTED:
            raise BusinessRuleViolation("Contract is not under dispute")
        self.status = ContractStatus.ACTIVE
        self.mark_as_updated()

    def renew(
        self,
        user_id: str,
        total_amount_minor_units: int,
        duration_days: int = 30,
        terms: Optional[str] = None,
        now: Optional[datetime] = None
    ) -> "Contract":
        """Draw up a follow-on draft contract between the same parties."""
        self.require_employer(user_id)
        if self.status not in (ContractStatus.ACTIVE, ContractStatus.COMPLETED):
            raise BusinessRuleViolation("Only active or completed contracts can be renewed")
        if duration_days <= 0:
            raise ValidationError("Renewal duration must be positive", "duration_days")

        start = now or utc_now()
        return Contract.create(
            job_id=self.job_id,
            application_id=self.application_id,
            employer_id=self.employer_id,
            talent_id=self.talent_id,
            total_amount_minor_units=total_amount_minor_units,
            currency=self.currency,
            terms=terms if terms is not None else self.terms,
            start_date=start,
            end_date=start + timedelta(days=duration_days),
            parent_contract_id=self.id,
        )

    # Amendments

    def propose_amendment(
        self,
        user_id: str,
        amendment_type: AmendmentType,
        amendment_data: Dict[str, Any]
    ) -> ContractAmendment:
        self.require_party(user_id)
        if self.status not in (ContractStatus.DRAFT, ContractStatus.ACTIVE):
            raise BusinessRuleViolation("Amendments can only be proposed on draft or active contracts")
        if amendment_type == AmendmentType.AMOUNT and self.escrow_status != EscrowStatus.UNFUNDED:
            raise BusinessRuleViolation("The contract amount cannot change once escrow has been initiated")

        amendment = ContractAmendment(
            contract_id=self.id,
            proposed_by=user_id,
            amendment_type=amendment_type,
            amendment_data=dict(amendment_data),
        )
        self.add_event(AmendmentProposed(
            contract_id=self.id,
            amendment_id=amendment.id,
            amendment_type=amendment_type.value,
            proposed_by=user_id,
            recipient_id=self.other_party(user_id)
        ))
        return amendment

    def review_amendment(
        self,
        amendment: ContractAmendment,
        user_id: str,
        approve: bool,
        reason: Optional[str] = None
    ) -> ContractAmendment:
        """The counterparty approves (applying the change) or rejects."""
        self.require_party(user_id)
        if amendment.contract_id != self.id:
            raise BusinessRuleViolation("Amendment belongs to a different contract")
        if not amendment.is_pending:
            raise BusinessRuleViolation(f"Amendment already {amendment.status.value}")
        if user_id == amendment.proposed_by:
            raise AuthorizationError("Amendments must be reviewed by the other party")

        if approve:
            self._apply_amendment(amendment)
            amendment.status = AmendmentStatus.APPROVED
            amendment.approved_by = user_id
        else:
            if not reason or not reason.strip():
                raise ValidationError("A rejection reason is required", "rejection_reason")
            amendment.status = AmendmentStatus.REJECTED
            amendment.rejection_reason = reason
        amendment.reviewed_at = utc_now()
        amendment.mark_as_updated()

        self.add_event(AmendmentReviewed(
            contract_id=self.id,
            amendment_id=amendment.id,
            amendment_type=amendment.amendment_type.value,
            proposed_by=amendment.proposed_by,
            approved=approve
        ))
        return amendment

    def _apply_amendment(self, amendment: ContractAmendment) -> None:
        if self.status not in (ContractStatus.DRAFT, ContractStatus.ACTIVE):
            raise BusinessRuleViolation("Amendments can only be applied to draft or active contracts")

        if amendment.amendment_type == AmendmentType.TERMS:
            self.terms = amendment.amendment_data["terms"]
        elif amendment.amendment_type == AmendmentType.DEADLINE:
            new_end = amendment.parse_end_date()
            if self.start_date and new_end < self.start_date:
                raise BusinessRuleViolation("New deadline cannot be before the contract start date")
            self.end_date = new_end
        elif amendment.amendment_type == AmendmentType.AMOUNT:
            if self.escrow_status != EscrowStatus.UNFUNDED:
                raise BusinessRuleViolation("The contract amount cannot change once escrow has been initiated")
            new_total = amendment.amendment_data["total_amount_minor_units"]
            if new_total < self.milestone_total:
                raise BusinessRuleViolation("New amount is below the sum of existing milestones")
            self.total_amount_minor_units = new_total
        # Scope changes are recorded on the amendment only.
        self.mark_as_updated()
