"""
Unit tests for dispute use cases.
"""

import pytest

from skilllink.application.dto.dispute_dto import (
    RaiseDisputeRequestDTO, DisputeActionRequestDTO, ResolveDisputeRequestDTO,
    CloseDisputeRequestDTO, DisputeListRequestDTO
)
from skilllink.application.use_cases.dispute_use_cases import (
    RaiseDisputeUseCase, GetDisputeUseCase, ListDisputesUseCase, ReviewDisputeUseCase,
    ResolveDisputeUseCase, CloseDisputeUseCase
)
from skilllink.domain.models.contract import ContractStatus
from skilllink.domain.models.dispute import DisputeStatus


REASON = "The delivered build does not match the agreed design."


async def run(use_case_class, uow, user_id, roles, request, **kwargs):
    use_case = use_case_class(uow=uow, **kwargs)
    use_case.set_current_user(user_id, roles)
    return await use_case.execute(request)


async def raise_dispute(uow, market, contract):
    result = await run(RaiseDisputeUseCase, uow, market.employer_id, ["employer"],
                       RaiseDisputeRequestDTO(contract_id=contract.id, reason=REASON))
    assert result.success is True
    return result.data


class TestRaiseDispute:
    """Test cases for opening disputes."""

    @pytest.mark.asyncio
    async def test_dispute_freezes_contract(self, uow, marketplace):
        contract = marketplace.funded_contract()

        dispute = await raise_dispute(uow, marketplace, contract)

        assert dispute.status == DisputeStatus.OPEN.value
        assert dispute.raised_by == marketplace.employer_id
        assert uow.contracts.find_by_id(contract.id).status == ContractStatus.DISPUTED

    @pytest.mark.asyncio
    async def test_one_open_dispute_per_contract(self, uow, marketplace):
        """Test a second dispute is refused while the first is unresolved."""
        contract = marketplace.funded_contract()
        await raise_dispute(uow, marketplace, contract)

        result = await run(RaiseDisputeUseCase, uow, marketplace.talent_id, ["talent"],
                           RaiseDisputeRequestDTO(contract_id=contract.id, reason=REASON))

        assert result.success is False
        assert result.error_code == "DUPLICATE_ENTITY"

    @pytest.mark.asyncio
    async def test_outsider_cannot_dispute(self, uow, marketplace):
        contract = marketplace.funded_contract()

        result = await run(RaiseDisputeUseCase, uow, "stranger", ["talent"],
                           RaiseDisputeRequestDTO(contract_id=contract.id, reason=REASON))

        assert result.success is False
        assert result.error_code == "FORBIDDEN"

    @pytest.mark.asyncio
    async def test_draft_contract_cannot_be_disputed(self, uow, marketplace):
        contract = marketplace.draft_contract()

        result = await run(RaiseDisputeUseCase, uow, marketplace.employer_id, ["employer"],
                           RaiseDisputeRequestDTO(contract_id=contract.id, reason=REASON))

        assert result.success is False
        assert result.error_code == "BUSINESS_RULE_VIOLATION"

    def test_reason_too_short(self):
        with pytest.raises(ValueError):
            RaiseDisputeRequestDTO(contract_id="contract-1", reason="Bad")


class TestResolveDispute:
    """Test cases for admin settlement of disputes."""

    @pytest.mark.asyncio
    async def test_release_pays_talent(self, uow, marketplace):
        """Test a release outcome pays out everything held and completes the contract."""
        contract = marketplace.funded_contract()
        dispute = await raise_dispute(uow, marketplace, contract)

        result = await run(ResolveDisputeUseCase, uow, marketplace.admin_id, ["admin"],
                           ResolveDisputeRequestDTO(dispute_id=dispute.id, resolution="Work accepted", outcome="release"))

        assert result.success is True
        assert result.data.status == DisputeStatus.RESOLVED.value
        assert result.data.resolved_by == marketplace.admin_id
        assert uow.contracts.find_by_id(contract.id).status == ContractStatus.COMPLETED
        assert uow.wallets.find_by_user_id(marketplace.talent_id).balance_minor_units == 90000
        assert uow.transactions.held_balance(contract.id) == 0

    @pytest.mark.asyncio
    async def test_refund_returns_funds(self, uow, marketplace):
        contract = marketplace.funded_contract()
        dispute = await raise_dispute(uow, marketplace, contract)

        result = await run(ResolveDisputeUseCase, uow, marketplace.admin_id, ["admin"],
                           ResolveDisputeRequestDTO(dispute_id=dispute.id, resolution="Nothing delivered", outcome="refund"))

        assert result.success is True
        assert uow.contracts.find_by_id(contract.id).status == ContractStatus.CANCELLED
        assert uow.wallets.find_by_user_id(marketplace.employer_id).balance_minor_units == 100000

    @pytest.mark.asyncio
    async def test_no_outcome_resumes_contract(self, uow, marketplace):
        contract = marketplace.funded_contract()
        dispute = await raise_dispute(uow, marketplace, contract)

        result = await run(ResolveDisputeUseCase, uow, marketplace.admin_id, ["admin"],
                           ResolveDisputeRequestDTO(dispute_id=dispute.id, resolution="Parties agreed to continue"))

        assert result.success is True
        assert uow.contracts.find_by_id(contract.id).status == ContractStatus.ACTIVE
        assert uow.transactions.held_balance(contract.id) == 100000

    @pytest.mark.asyncio
    async def test_resolve_twice(self, uow, marketplace):
        contract = marketplace.funded_contract()
        dispute = await raise_dispute(uow, marketplace, contract)
        request = ResolveDisputeRequestDTO(dispute_id=dispute.id, resolution="Parties agreed to continue")
        await run(ResolveDisputeUseCase, uow, marketplace.admin_id, ["admin"], request)

        result = await run(ResolveDisputeUseCase, uow, marketplace.admin_id, ["admin"], request)

        assert result.success is False
        assert result.error_code == "BUSINESS_RULE_VIOLATION"

    @pytest.mark.asyncio
    async def test_only_admin_resolves(self, uow, marketplace):
        contract = marketplace.funded_contract()
        dispute = await raise_dispute(uow, marketplace, contract)

        result = await run(ResolveDisputeUseCase, uow, marketplace.employer_id, ["employer"],
                           ResolveDisputeRequestDTO(dispute_id=dispute.id, resolution="I win", outcome="refund"))

        assert result.success is False
        assert result.error_code == "FORBIDDEN"
        assert uow.contracts.find_by_id(contract.id).status == ContractStatus.DISPUTED


class TestDisputeQueries:
    """Test cases for review, close and listing."""

    @pytest.mark.asyncio
    async def test_review_then_close(self, uow, marketplace):
        contract = marketplace.funded_contract()
        dispute = await raise_dispute(uow, marketplace, contract)

        reviewed = await run(ReviewDisputeUseCase, uow, marketplace.admin_id, ["admin"],
                             DisputeActionRequestDTO(dispute_id=dispute.id))
        assert reviewed.data.status == DisputeStatus.IN_REVIEW.value

        closed = await run(CloseDisputeUseCase, uow, marketplace.admin_id, ["admin"],
                           CloseDisputeRequestDTO(dispute_id=dispute.id, note="Withdrawn by employer"))

        assert closed.success is True
        assert closed.data.status == DisputeStatus.CLOSED.value
        assert uow.contracts.find_by_id(contract.id).status == ContractStatus.ACTIVE

    @pytest.mark.asyncio
    async def test_parties_see_their_disputes(self, uow, marketplace):
        contract = marketplace.funded_contract()
        dispute = await raise_dispute(uow, marketplace, contract)

        mine = await run(ListDisputesUseCase, uow, marketplace.talent_id, ["talent"], DisputeListRequestDTO())
        theirs = await run(ListDisputesUseCase, uow, "stranger", ["talent"], DisputeListRequestDTO())
        everything = await run(ListDisputesUseCase, uow, marketplace.admin_id, ["admin"],
                               DisputeListRequestDTO(status="open"))

        assert mine.data.total == 1
        assert theirs.data.total == 0
        assert everything.data.items[0].id == dispute.id

    @pytest.mark.asyncio
    async def test_outsider_cannot_read_dispute(self, uow, marketplace):
        contract = marketplace.funded_contract()
        dispute = await raise_dispute(uow, marketplace, contract)

        result = await run(GetDisputeUseCase, uow, "stranger", ["talent"],
                           DisputeActionRequestDTO(dispute_id=dispute.id))

        assert result.success is False
        assert result.error_code == "FORBIDDEN"
