"""
Dispute use cases for the application layer.
Raising disputes on active contracts and their administrative handling.

While a dispute is unresolved the contract is frozen: no milestone releases.
Resolution decides where the held escrow goes, inside the same unit of work.
"""

import logging

from skilllink.application.use_cases.base_use_case import (
    CommandUseCase, QueryUseCase, PaginatedQueryUseCase, AuthorizedUseCase
)
from skilllink.application.use_cases.settlement import build_settlement
from skilllink.application.dto.base_dto import ListResponseDTO
from skilllink.application.dto.dispute_dto import (
    RaiseDisputeRequestDTO, DisputeActionRequestDTO, ResolveDisputeRequestDTO,
    CloseDisputeRequestDTO, DisputeListRequestDTO, DisputeResponseDTO
)
from skilllink.domain.events.dispute_events import DisputeRaised, DisputeResolved
from skilllink.domain.models.base import (
    BusinessRuleViolation, EntityNotFoundError, DuplicateEntityError, AuthorizationError
)
from skilllink.domain.models.contract import ContractStatus
from skilllink.domain.models.dispute import Dispute, DisputeOutcome, DisputeStatus
from skilllink.domain.models.user import UserRole


logger = logging.getLogger(__name__)


class DisputeUseCaseMixin:

    def _load_dispute(self, dispute_id: str) -> Dispute:
        dispute = self.uow.disputes.find_by_id(dispute_id)
        if dispute is None:
            raise EntityNotFoundError("Dispute", dispute_id)
        return dispute


class RaiseDisputeUseCase(AuthorizedUseCase, CommandUseCase[RaiseDisputeRequestDTO, DisputeResponseDTO]):
    """Either party of an active contract opens a dispute, freezing releases."""

    async def _execute_command_logic(self, request: RaiseDisputeRequestDTO) -> DisputeResponseDTO:
        contract = self.uow.contracts.find_by_id_for_update(request.contract_id)
        if contract is None:
            raise EntityNotFoundError("Contract", request.contract_id)
        contract.require_party(self.current_user_id)

        if self.uow.disputes.find_unresolved_by_contract(contract.id):
            raise DuplicateEntityError("Dispute", "contract_id", contract.id)

        contract.open_dispute()
        dispute = Dispute(
            contract_id=contract.id,
            raised_by=self.current_user_id,
            reason=request.reason,
        )
        dispute.add_event(DisputeRaised(
            dispute_id=dispute.id,
            contract_id=contract.id,
            raised_by=self.current_user_id,
            other_party_id=contract.other_party(self.current_user_id),
            reason=dispute.reason
        ))

        self.uow.contracts.save(contract)
        saved = self.uow.disputes.save(dispute)
        logger.info(f"Dispute {saved.id} raised on contract {contract.id}")
        return DisputeResponseDTO.from_domain(saved)


class GetDisputeUseCase(DisputeUseCaseMixin, AuthorizedUseCase, QueryUseCase[DisputeActionRequestDTO, DisputeResponseDTO]):

    async def _execute_business_logic(self, request: DisputeActionRequestDTO) -> DisputeResponseDTO:
        dispute = self._load_dispute(request.dispute_id)
        if not self.is_admin:
            contract = self.uow.contracts.find_by_id(dispute.contract_id)
            if contract is None or not contract.is_party(self.current_user_id):
                raise AuthorizationError("User is not a party to this dispute")
        return DisputeResponseDTO.from_domain(dispute)


class ListDisputesUseCase(AuthorizedUseCase, PaginatedQueryUseCase[DisputeListRequestDTO, ListResponseDTO]):
    """Admins see every dispute; other users see disputes on their own contracts."""

    async def _execute_business_logic(self, request: DisputeListRequestDTO) -> ListResponseDTO:
        status = DisputeStatus(request.status) if request.status else None

        if self.is_admin:
            disputes, total = self.uow.disputes.list_by_status(status, limit=request.limit, offset=request.offset)
        else:
            contract_ids = [c.id for c in self.uow.contracts.find_by_party(self.current_user_id)]
            mine = self.uow.disputes.find_by_contract_ids(contract_ids) if contract_ids else []
            if status is not None:
                mine = [d for d in mine if d.status == status]
            total = len(mine)
            disputes = mine[request.offset:request.offset + request.limit]

        return ListResponseDTO[DisputeResponseDTO].create(
            items=[DisputeResponseDTO.from_domain(d) for d in disputes],
            total=total,
            page=request.page,
            page_size=request.page_size
        )


class ReviewDisputeUseCase(DisputeUseCaseMixin, AuthorizedUseCase, CommandUseCase[DisputeActionRequestDTO, DisputeResponseDTO]):

    async def _check_authorization(self, request: DisputeActionRequestDTO) -> None:
        self._require_role(UserRole.ADMIN)

    async def _execute_command_logic(self, request: DisputeActionRequestDTO) -> DisputeResponseDTO:
        dispute = self._load_dispute(request.dispute_id)
        dispute.start_review()
        return DisputeResponseDTO.from_domain(self.uow.disputes.save(dispute))


class ResolveDisputeUseCase(DisputeUseCaseMixin, AuthorizedUseCase, CommandUseCase[ResolveDisputeRequestDTO, DisputeResponseDTO]):
    """
    Admin settles a dispute.

    release: everything held goes to the talent and the contract completes.
    refund: everything held goes back to the employer and the contract is cancelled.
    none: the contract simply resumes.
    """

    async def _check_authorization(self, request: ResolveDisputeRequestDTO) -> None:
        self._require_role(UserRole.ADMIN)

    async def _execute_command_logic(self, request: ResolveDisputeRequestDTO) -> DisputeResponseDTO:
        dispute = self._load_dispute(request.dispute_id)
        outcome = DisputeOutcome(request.outcome)

        settlement = build_settlement(self.uow)
        contract = settlement.load_contract(dispute.contract_id)

        dispute.resolve(self.current_user_id, request.resolution, outcome)
        if contract.status != ContractStatus.DISPUTED:
            raise BusinessRuleViolation("Contract is not under dispute")
        contract.lift_dispute()

        if outcome == DisputeOutcome.RELEASE:
            settlement.complete_contract(contract, settled_by_dispute=True)
        elif outcome == DisputeOutcome.REFUND:
            settlement.cancel_contract(contract)

        dispute.add_event(DisputeResolved(
            dispute_id=dispute.id,
            contract_id=contract.id,
            outcome=outcome.value,
            resolution=dispute.resolution or "",
            employer_id=contract.employer_id,
            talent_id=contract.talent_id
        ))

        self.uow.contracts.save(contract)
        saved = self.uow.disputes.save(dispute)
        logger.info(f"Dispute {saved.id} resolved with outcome {outcome.value}")
        return DisputeResponseDTO.from_domain(saved)


class CloseDisputeUseCase(DisputeUseCaseMixin, AuthorizedUseCase, CommandUseCase[CloseDisputeRequestDTO, DisputeResponseDTO]):
    """Admin closes a dispute without moving money; the contract resumes."""

    async def _check_authorization(self, request: CloseDisputeRequestDTO) -> None:
        self._require_role(UserRole.ADMIN)

    async def _execute_command_logic(self, request: CloseDisputeRequestDTO) -> DisputeResponseDTO:
        dispute = self._load_dispute(request.dispute_id)
        contract = self.uow.contracts.find_by_id_for_update(dispute.contract_id)
        if contract is None:
            raise EntityNotFoundError("Contract", dispute.contract_id)

        dispute.close(self.current_user_id, request.note)
        if contract.status == ContractStatus.DISPUTED:
            contract.lift_dispute()
            self.uow.contracts.save(contract)

        return DisputeResponseDTO.from_domain(self.uow.disputes.save(dispute))
