"""
Negotiation and amendment use cases.
Offers and counter offers before a contract exists, and changes to a live
contract proposed by one party and reviewed by the other.
"""

import logging
from typing import List

from skilllink.application.use_cases.base_use_case import (
    CommandUseCase, QueryUseCase, AuthorizedUseCase
)
from skilllink.application.use_cases.contract_use_cases import ContractUseCaseMixin
from skilllink.application.dto.contract_dto import (
    OpenNegotiationRequestDTO, CounterOfferRequestDTO, RespondToNegotiationRequestDTO,
    NegotiationResponseDTO, ProposeAmendmentRequestDTO, ReviewAmendmentRequestDTO,
    AmendmentResponseDTO, ContractActionRequestDTO
)
from skilllink.domain.models.base import (
    BusinessRuleViolation, EntityNotFoundError, DuplicateEntityError, AuthorizationError
)
from skilllink.domain.models.contract import Contract, AmendmentType
from skilllink.domain.models.job import ApplicationStatus
from skilllink.domain.models.negotiation import ContractNegotiation


logger = logging.getLogger(__name__)


class NegotiationUseCaseMixin:

    def _load_negotiation(self, negotiation_id: str) -> ContractNegotiation:
        negotiation = self.uow.negotiations.find_by_id(negotiation_id)
        if negotiation is None:
            raise EntityNotFoundError("ContractNegotiation", negotiation_id)
        return negotiation


class OpenNegotiationUseCase(AuthorizedUseCase, CommandUseCase[OpenNegotiationRequestDTO, NegotiationResponseDTO]):
    """The job's employer makes an opening offer on an application."""

    async def _execute_command_logic(self, request: OpenNegotiationRequestDTO) -> NegotiationResponseDTO:
        application = self.uow.applications.find_by_id(request.application_id)
        if application is None:
            raise EntityNotFoundError("JobApplication", request.application_id)
        job = self.uow.jobs.find_by_id(application.job_id)
        if job is None:
            raise EntityNotFoundError("Job", application.job_id)

        if job.employer_id != self.current_user_id:
            raise AuthorizationError("Only the job's employer can open a negotiation")
        if application.status not in (ApplicationStatus.PENDING, ApplicationStatus.ACCEPTED):
            raise BusinessRuleViolation(f"Cannot negotiate on a {application.status.value} application")
        if self.uow.negotiations.find_open_by_application(application.id):
            raise DuplicateEntityError("ContractNegotiation", "application_id", application.id)
        if self.uow.contracts.find_live_by_application(application.id):
            raise BusinessRuleViolation("A contract already exists for this application")

        negotiation = ContractNegotiation.open(
            job_id=job.id,
            application_id=application.id,
            employer_id=self.current_user_id,
            talent_id=application.applicant_id,
            amount_minor_units=request.amount_minor_units,
            terms=request.terms,
        )
        saved = self.uow.negotiations.save(negotiation)
        return NegotiationResponseDTO.from_domain(saved)


class CounterOfferUseCase(NegotiationUseCaseMixin, AuthorizedUseCase, CommandUseCase[CounterOfferRequestDTO, NegotiationResponseDTO]):

    async def _execute_command_logic(self, request: CounterOfferRequestDTO) -> NegotiationResponseDTO:
        negotiation = self._load_negotiation(request.negotiation_id)
        negotiation.counter(self.current_user_id, request.amount_minor_units, request.terms)
        saved = self.uow.negotiations.save(negotiation)
        return NegotiationResponseDTO.from_domain(saved)


class RespondToNegotiationUseCase(NegotiationUseCaseMixin, AuthorizedUseCase, CommandUseCase[RespondToNegotiationRequestDTO, NegotiationResponseDTO]):
    """
    Accept or reject the latest offer.
    Accepting also accepts the application and draws up a draft contract
    at the agreed amount and terms.
    """

    async def _execute_command_logic(self, request: RespondToNegotiationRequestDTO) -> NegotiationResponseDTO:
        negotiation = self._load_negotiation(request.negotiation_id)

        if not request.accept:
            negotiation.reject(self.current_user_id)
            return NegotiationResponseDTO.from_domain(self.uow.negotiations.save(negotiation))

        agreed = negotiation.accept(self.current_user_id)

        application = self.uow.applications.find_by_id(negotiation.application_id)
        if application is None:
            raise EntityNotFoundError("JobApplication", negotiation.application_id)
        if self.uow.contracts.find_live_by_application(application.id):
            raise BusinessRuleViolation("A contract already exists for this application")

        if application.status == ApplicationStatus.PENDING:
            job = self.uow.jobs.find_by_id(negotiation.job_id)
            application.accept(job.title if job else "")
            self.uow.applications.save(application)
            employer = self.uow.employers.find_by_user_id(negotiation.employer_id)
            if employer is not None:
                employer.record_hire()
                self.uow.employers.save(employer)

        contract = Contract.create(
            job_id=negotiation.job_id,
            application_id=negotiation.application_id,
            employer_id=negotiation.employer_id,
            talent_id=negotiation.talent_id,
            total_amount_minor_units=agreed,
            currency=request.currency,
            terms=negotiation.current_terms,
        )
        self.uow.contracts.save(contract)

        negotiation.contract_id = contract.id
        saved = self.uow.negotiations.save(negotiation)
        logger.info(f"Negotiation {negotiation.id} accepted at {agreed}; contract {contract.id} drafted")
        return NegotiationResponseDTO.from_domain(saved)


class ListNegotiationsUseCase(AuthorizedUseCase, QueryUseCase[None, List[NegotiationResponseDTO]]):

    async def _execute_business_logic(self, request: None) -> List[NegotiationResponseDTO]:
        negotiations = self.uow.negotiations.find_by_party(self.current_user_id)
        return [NegotiationResponseDTO.from_domain(n) for n in negotiations]


# Amendments

class ProposeAmendmentUseCase(ContractUseCaseMixin, AuthorizedUseCase, CommandUseCase[ProposeAmendmentRequestDTO, AmendmentResponseDTO]):

    async def _execute_command_logic(self, request: ProposeAmendmentRequestDTO) -> AmendmentResponseDTO:
        contract = self._load_contract(request.contract_id)
        amendment = contract.propose_amendment(
            self.current_user_id,
            AmendmentType(request.amendment_type),
            request.amendment_data
        )
        saved = self.uow.amendments.save(amendment)
        self.uow.contracts.save(contract)
        return AmendmentResponseDTO.from_domain(saved)


class ReviewAmendmentUseCase(ContractUseCaseMixin, AuthorizedUseCase, CommandUseCase[ReviewAmendmentRequestDTO, AmendmentResponseDTO]):
    """The other party approves (applying the change) or rejects an amendment."""

    async def _execute_command_logic(self, request: ReviewAmendmentRequestDTO) -> AmendmentResponseDTO:
        amendment = self.uow.amendments.find_by_id(request.amendment_id)
        if amendment is None:
            raise EntityNotFoundError("ContractAmendment", request.amendment_id)

        contract = self._load_contract(amendment.contract_id, for_update=True)
        contract.review_amendment(amendment, self.current_user_id, request.approve, request.reason)

        saved = self.uow.amendments.save(amendment)
        self.uow.contracts.save(contract)
        return AmendmentResponseDTO.from_domain(saved)


class ListAmendmentsUseCase(ContractUseCaseMixin, AuthorizedUseCase, QueryUseCase[ContractActionRequestDTO, List[AmendmentResponseDTO]]):

    async def _execute_business_logic(self, request: ContractActionRequestDTO) -> List[AmendmentResponseDTO]:
        contract = self._load_contract(request.contract_id)
        self._require_party_or_admin(contract)
        return [AmendmentResponseDTO.from_domain(a) for a in self.uow.amendments.find_by_contract(contract.id)]
