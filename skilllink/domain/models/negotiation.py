"""
Price negotiation between an employer and an applicant before a contract exists.
"""

from enum import Enum
from typing import Optional
from dataclasses import dataclass

from .base import AggregateRoot, ValidationError, BusinessRuleViolation, AuthorizationError
from skilllink.domain.events.contract_events import NegotiationOfferMade, NegotiationConcluded


class NegotiationStatus(str, Enum):
    PENDING = "pending"        # employer's proposal awaits the talent
    COUNTERED = "countered"    # talent's counter offer awaits the employer
    ACCEPTED = "accepted"
    REJECTED = "rejected"


@dataclass(eq=False)
class ContractNegotiation(AggregateRoot):
    """
    Offer and counter offer on an application.
    Only the party that did not make the latest offer may accept or reject it.
    """

    job_id: str = ""
    application_id: str = ""
    employer_id: str = ""
    talent_id: str = ""
    proposed_amount_minor_units: int = 0
    terms: Optional[str] = None
    counter_offer_amount_minor_units: Optional[int] = None
    counter_terms: Optional[str] = None
    status: NegotiationStatus = NegotiationStatus.PENDING
    contract_id: Optional[str] = None

    def __post_init__(self):
        super().__post_init__()
        self.validate()

    def validate(self) -> None:
        if not self.application_id or not self.job_id:
            raise ValidationError("Negotiation requires a job application", "application_id")
        if self.employer_id == self.talent_id:
            raise ValidationError("Employer and talent must be different users", "parties")
        if self.proposed_amount_minor_units <= 0:
            raise ValidationError("Proposed amount must be positive", "proposed_amount_minor_units")
        if self.counter_offer_amount_minor_units is not None and self.counter_offer_amount_minor_units <= 0:
            raise ValidationError("Counter offer must be positive", "counter_offer_amount_minor_units")

    @classmethod
    def open(
        cls,
        job_id: str,
        application_id: str,
        employer_id: str,
        talent_id: str,
        amount_minor_units: int,
        terms: Optional[str] = None
    ) -> "ContractNegotiation":
        negotiation = cls(
            job_id=job_id,
            application_id=application_id,
            employer_id=employer_id,
            talent_id=talent_id,
            proposed_amount_minor_units=amount_minor_units,
            terms=terms,
        )
        negotiation.add_event(NegotiationOfferMade(
            negotiation_id=negotiation.id,
            job_id=job_id,
            offered_by=employer_id,
            recipient_id=talent_id,
            amount_minor_units=amount_minor_units
        ))
        return negotiation

    @property
    def is_open(self) -> bool:
        return self.status in (NegotiationStatus.PENDING, NegotiationStatus.COUNTERED)

    @property
    def awaiting_user_id(self) -> Optional[str]:
        """The party that must respond to the latest offer."""
        if self.status == NegotiationStatus.PENDING:
            return self.talent_id
        if self.status == NegotiationStatus.COUNTERED:
            return self.employer_id
        return None

    @property
    def current_amount_minor_units(self) -> int:
        if self.status == NegotiationStatus.COUNTERED or (
            self.status == NegotiationStatus.ACCEPTED and self.counter_offer_amount_minor_units
        ):
            return self.counter_offer_amount_minor_units
        return self.proposed_amount_minor_units

    @property
    def current_terms(self) -> Optional[str]:
        if self.counter_offer_amount_minor_units and self.counter_terms:
            return self.counter_terms
        return self.terms

    def counter(self, user_id: str, amount_minor_units: int, terms: Optional[str] = None) -> None:
        if user_id != self.talent_id:
            raise AuthorizationError("Only the applicant can counter an offer")
        if self.status != NegotiationStatus.PENDING:
            raise BusinessRuleViolation(f"Cannot counter a {self.status.value} negotiation")
        if amount_minor_units <= 0:
            raise ValidationError("Counter offer must be positive", "counter_offer_amount_minor_units")

        self.counter_offer_amount_minor_units = amount_minor_units
        self.counter_terms = terms
        self.status = NegotiationStatus.COUNTERED
        self.mark_as_updated()

        self.add_event(NegotiationOfferMade(
            negotiation_id=self.id,
            job_id=self.job_id,
            offered_by=self.talent_id,
            recipient_id=self.employer_id,
            amount_minor_units=amount_minor_units
        ))

    def _require_responder(self, user_id: str) -> None:
        if not self.is_open:
            raise BusinessRuleViolation(f"Negotiation is already {self.status.value}")
        if user_id not in (self.employer_id, self.talent_id):
            raise AuthorizationError("User is not part of this negotiation")
        if user_id != self.awaiting_user_id:
            raise AuthorizationError("You cannot respond to your own offer")

    def accept(self, user_id: str) -> int:
        """Accept the latest offer and return the agreed amount."""
        self._require_responder(user_id)
        agreed = self.current_amount_minor_units
        self.status = NegotiationStatus.ACCEPTED
        self.mark_as_updated()

        self.add_event(NegotiationConcluded(
            negotiation_id=self.id,
            employer_id=self.employer_id,
            talent_id=self.talent_id,
            accepted=True,
            amount_minor_units=agreed
        ))
        return agreed

    def reject(self, user_id: str) -> None:
        self._require_responder(user_id)
        self.status = NegotiationStatus.REJECTED
        self.mark_as_updated()

        self.add_event(NegotiationConcluded(
            negotiation_id=self.id,
            employer_id=self.employer_id,
            talent_id=self.talent_id,
            accepted=False,
            amount_minor_units=self.current_amount_minor_units
        ))
