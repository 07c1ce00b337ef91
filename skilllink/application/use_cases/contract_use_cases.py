"""
Contract use cases for the application layer.
Drawing up contracts, planning and executing milestones, completion,
cancellation and renewal.

Commands that move money lock the contract row first and run the ledger
step inside the same unit of work, so a milestone approval and its payment
commit together or not at all.
"""

import logging
from typing import List

from skilllink.application.use_cases.base_use_case import (
    CommandUseCase, QueryUseCase, AuthorizedUseCase
)
from skilllink.application.use_cases.settlement import build_settlement
from skilllink.application.dto.contract_dto import (
    CreateContractRequestDTO, ContractActionRequestDTO, ListContractsRequestDTO,
    AddMilestoneRequestDTO, SetMilestoneDependencyRequestDTO, MilestoneActionRequestDTO,
    RenewContractRequestDTO, ContractResponseDTO
)
from skilllink.domain.models.base import (
    BusinessRuleViolation, EntityNotFoundError, DuplicateEntityError, AuthorizationError
)
from skilllink.domain.models.contract import Contract, ContractStatus
from skilllink.domain.models.job import ApplicationStatus
from skilllink.domain.models.user import UserRole


logger = logging.getLogger(__name__)


class ContractUseCaseMixin:
    """Loading helpers shared by the contract use cases."""

    def _load_contract(self, contract_id: str, for_update: bool = False) -> Contract:
        if for_update:
            contract = self.uow.contracts.find_by_id_for_update(contract_id)
        else:
            contract = self.uow.contracts.find_by_id(contract_id)
        if contract is None:
            raise EntityNotFoundError("Contract", contract_id)
        return contract

    def _require_party_or_admin(self, contract: Contract) -> None:
        if not contract.is_party(self.current_user_id) and not self.is_admin:
            raise AuthorizationError("User is not a party to this contract")

    def _response(self, contract: Contract) -> ContractResponseDTO:
        return ContractResponseDTO.from_domain(contract, self.uow.transactions.held_balance(contract.id))


class CreateContractUseCase(ContractUseCaseMixin, AuthorizedUseCase, CommandUseCase[CreateContractRequestDTO, ContractResponseDTO]):
    """The job's employer draws up a draft contract for an accepted application."""

    async def _execute_command_logic(self, request: CreateContractRequestDTO) -> ContractResponseDTO:
        application = self.uow.applications.find_by_id(request.application_id)
        if application is None:
            raise EntityNotFoundError("JobApplication", request.application_id)
        job = self.uow.jobs.find_by_id(application.job_id)
        if job is None:
            raise EntityNotFoundError("Job", application.job_id)

        if job.employer_id != self.current_user_id:
            raise AuthorizationError("Only the job's employer can create a contract")
        if application.status != ApplicationStatus.ACCEPTED:
            raise BusinessRuleViolation("Contracts can only be created for accepted applications")
        if self.uow.contracts.find_live_by_application(application.id):
            raise DuplicateEntityError("Contract", "application_id", application.id)

        contract = Contract.create(
            job_id=job.id,
            application_id=application.id,
            employer_id=self.current_user_id,
            talent_id=application.applicant_id,
            total_amount_minor_units=request.total_amount_minor_units,
            currency=request.currency,
            terms=request.terms,
            start_date=request.start_date,
            end_date=request.end_date,
        )
        saved = self.uow.contracts.save(contract)
        logger.info(f"Contract {saved.id} drawn up for application {application.id}")
        return self._response(saved)


class GetContractUseCase(ContractUseCaseMixin, AuthorizedUseCase, QueryUseCase[ContractActionRequestDTO, ContractResponseDTO]):

    async def _execute_business_logic(self, request: ContractActionRequestDTO) -> ContractResponseDTO:
        contract = self._load_contract(request.contract_id)
        self._require_party_or_admin(contract)
        return self._response(contract)


class ListContractsUseCase(ContractUseCaseMixin, AuthorizedUseCase, QueryUseCase[ListContractsRequestDTO, List[ContractResponseDTO]]):
    """Contracts where the caller is employer or talent."""

    async def _execute_business_logic(self, request: ListContractsRequestDTO) -> List[ContractResponseDTO]:
        status = ContractStatus(request.status) if request.status else None
        contracts = self.uow.contracts.find_by_party(self.current_user_id, status)
        return [self._response(contract) for contract in contracts]


# Milestone planning

class AddMilestoneUseCase(ContractUseCaseMixin, AuthorizedUseCase, CommandUseCase[AddMilestoneRequestDTO, ContractResponseDTO]):

    async def _execute_command_logic(self, request: AddMilestoneRequestDTO) -> ContractResponseDTO:
        contract = self._load_contract(request.contract_id, for_update=True)
        contract.require_employer(self.current_user_id)

        contract.add_milestone(
            title=request.title,
            amount_minor_units=request.amount_minor_units,
            description=request.description,
            due_date=request.due_date,
            depends_on=request.depends_on,
        )
        return self._response(self.uow.contracts.save(contract))


class SetMilestoneDependencyUseCase(ContractUseCaseMixin, AuthorizedUseCase, CommandUseCase[SetMilestoneDependencyRequestDTO, ContractResponseDTO]):

    async def _execute_command_logic(self, request: SetMilestoneDependencyRequestDTO) -> ContractResponseDTO:
        contract = self._load_contract(request.contract_id, for_update=True)
        contract.require_employer(self.current_user_id)
        contract.set_milestone_dependency(request.milestone_id, request.depends_on)
        return self._response(self.uow.contracts.save(contract))


# Milestone execution

class StartMilestoneUseCase(ContractUseCaseMixin, AuthorizedUseCase, CommandUseCase[MilestoneActionRequestDTO, ContractResponseDTO]):

    async def _execute_command_logic(self, request: MilestoneActionRequestDTO) -> ContractResponseDTO:
        contract = self._load_contract(request.contract_id, for_update=True)
        contract.start_milestone(request.milestone_id, self.current_user_id)
        return self._response(self.uow.contracts.save(contract))


class SubmitMilestoneUseCase(ContractUseCaseMixin, AuthorizedUseCase, CommandUseCase[MilestoneActionRequestDTO, ContractResponseDTO]):

    async def _execute_command_logic(self, request: MilestoneActionRequestDTO) -> ContractResponseDTO:
        contract = self._load_contract(request.contract_id, for_update=True)
        contract.submit_milestone(request.milestone_id, self.current_user_id)
        return self._response(self.uow.contracts.save(contract))


class ApproveMilestoneUseCase(ContractUseCaseMixin, AuthorizedUseCase, CommandUseCase[MilestoneActionRequestDTO, ContractResponseDTO]):
    """
    Approve submitted work and pay it out of escrow.
    The last paid milestone completes the contract.
    """

    async def _execute_command_logic(self, request: MilestoneActionRequestDTO) -> ContractResponseDTO:
        contract = self._load_contract(request.contract_id, for_update=True)
        contract.approve_milestone(request.milestone_id, self.current_user_id)

        transaction = build_settlement(self.uow).release_milestone(contract, request.milestone_id)
        saved = self.uow.contracts.save(contract)
        logger.info(
            f"Milestone {request.milestone_id} released: {transaction.net_amount_minor_units} "
            f"{transaction.currency} net to {contract.talent_id}"
        )
        return self._response(saved)


class RejectMilestoneUseCase(ContractUseCaseMixin, AuthorizedUseCase, CommandUseCase[MilestoneActionRequestDTO, ContractResponseDTO]):

    async def _execute_command_logic(self, request: MilestoneActionRequestDTO) -> ContractResponseDTO:
        contract = self._load_contract(request.contract_id, for_update=True)
        contract.reject_milestone(request.milestone_id, self.current_user_id)
        return self._response(self.uow.contracts.save(contract))


# Lifecycle

class CompleteContractUseCase(ContractUseCaseMixin, AuthorizedUseCase, CommandUseCase[ContractActionRequestDTO, ContractResponseDTO]):
    """Employer closes an active contract, releasing whatever is still held."""

    async def _execute_command_logic(self, request: ContractActionRequestDTO) -> ContractResponseDTO:
        contract = self._load_contract(request.contract_id, for_update=True)
        contract.require_employer(self.current_user_id)
        if contract.status == ContractStatus.DISPUTED:
            raise BusinessRuleViolation("Contract is under dispute; releases are frozen")

        build_settlement(self.uow).complete_contract(contract)
        return self._response(self.uow.contracts.save(contract))


class CancelContractUseCase(ContractUseCaseMixin, AuthorizedUseCase, CommandUseCase[ContractActionRequestDTO, ContractResponseDTO]):
    """Employer or admin cancels; funded escrow goes back to the employer wallet."""

    async def _execute_command_logic(self, request: ContractActionRequestDTO) -> ContractResponseDTO:
        contract = self._load_contract(request.contract_id, for_update=True)
        self._require_owner_or_role(contract.employer_id, UserRole.ADMIN)

        build_settlement(self.uow).cancel_contract(contract)
        return self._response(self.uow.contracts.save(contract))


class RenewContractUseCase(ContractUseCaseMixin, AuthorizedUseCase, CommandUseCase[RenewContractRequestDTO, ContractResponseDTO]):
    """Draft a follow-on contract between the same parties."""

    async def _execute_command_logic(self, request: RenewContractRequestDTO) -> ContractResponseDTO:
        contract = self._load_contract(request.contract_id)
        renewal = contract.renew(
            self.current_user_id,
            total_amount_minor_units=request.total_amount_minor_units,
            duration_days=request.duration_days,
            terms=request.terms,
        )
        saved = self.uow.contracts.save(renewal)
        logger.info(f"Contract {contract.id} renewed as {saved.id}")
        return self._response(saved)
