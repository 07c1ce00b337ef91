"""
Contract mappers for converting between domain entities and database models.
Milestones travel with their contract.
"""

from skilllink.domain.models.contract import Contract, Milestone, ContractAmendment
from skilllink.domain.models.negotiation import ContractNegotiation
from skilllink.domain.models.reminder import MilestoneReminder
from skilllink.infrastructure.db.models import (
    ContractModel, MilestoneModel, ContractAmendmentModel,
    ContractNegotiationModel, MilestoneReminderModel
)
from .base import TIMESTAMP_FIELDS, copy_fields, read_fields


CONTRACT_FIELDS = (
    "job_id", "application_id", "employer_id", "talent_id", "total_amount_minor_units",
    "currency", "terms", "start_date", "end_date", "status", "escrow_status",
    "parent_contract_id", "is_renewal",
)

MILESTONE_FIELDS = (
    "contract_id", "title", "description", "amount_minor_units", "due_date", "status",
    "depends_on", "order_index", "submitted_at", "approved_at", "released", "released_at",
)

AMENDMENT_FIELDS = (
    "contract_id", "proposed_by", "amendment_type", "status", "approved_by",
    "rejection_reason", "reviewed_at",
)

NEGOTIATION_FIELDS = (
    "job_id", "application_id", "employer_id", "talent_id", "proposed_amount_minor_units",
    "terms", "counter_offer_amount_minor_units", "counter_terms", "status", "contract_id",
)


class ContractMapper:
    """Maps between the Contract aggregate and ContractModel with its milestones."""

    def domain_to_model(self, contract: Contract) -> ContractModel:
        model = ContractModel(id=contract.id)
        self.update_model(model, contract)
        return model

    def update_model(self, model: ContractModel, contract: Contract) -> None:
        copy_fields(contract, model, ("created_at", "updated_at") + CONTRACT_FIELDS)

        existing = {milestone_model.id: milestone_model for milestone_model in model.milestones}
        for milestone in contract.milestones:
            milestone_model = existing.get(milestone.id)
            if milestone_model is None:
                milestone_model = MilestoneModel(id=milestone.id)
                model.milestones.append(milestone_model)
            copy_fields(milestone, milestone_model, ("created_at", "updated_at") + MILESTONE_FIELDS)

    def model_to_domain(self, model: ContractModel) -> Contract:
        milestones = [self._milestone_to_domain(m) for m in model.milestones]
        data = read_fields(model, TIMESTAMP_FIELDS + CONTRACT_FIELDS)
        data["is_renewal"] = bool(model.is_renewal)
        return Contract(milestones=milestones, version=model.version or 1, **data)

    def _milestone_to_domain(self, model: MilestoneModel) -> Milestone:
        data = read_fields(model, TIMESTAMP_FIELDS + MILESTONE_FIELDS)
        data["released"] = bool(model.released)
        return Milestone(**data)


class ContractAmendmentMapper:

    def domain_to_model(self, amendment: ContractAmendment) -> ContractAmendmentModel:
        model = ContractAmendmentModel(id=amendment.id)
        self.update_model(model, amendment)
        return model

    def update_model(self, model: ContractAmendmentModel, amendment: ContractAmendment) -> None:
        copy_fields(amendment, model, ("created_at", "updated_at") + AMENDMENT_FIELDS)
        model.amendment_data = dict(amendment.amendment_data)

    def model_to_domain(self, model: ContractAmendmentModel) -> ContractAmendment:
        return ContractAmendment(
            amendment_data=dict(model.amendment_data or {}),
            **read_fields(model, TIMESTAMP_FIELDS + AMENDMENT_FIELDS)
        )


class ContractNegotiationMapper:

    def domain_to_model(self, negotiation: ContractNegotiation) -> ContractNegotiationModel:
        model = ContractNegotiationModel(id=negotiation.id)
        self.update_model(model, negotiation)
        return model

    def update_model(self, model: ContractNegotiationModel, negotiation: ContractNegotiation) -> None:
        copy_fields(negotiation, model, ("created_at", "updated_at") + NEGOTIATION_FIELDS)

    def model_to_domain(self, model: ContractNegotiationModel) -> ContractNegotiation:
        return ContractNegotiation(
            version=model.version or 1,
            **read_fields(model, TIMESTAMP_FIELDS + NEGOTIATION_FIELDS)
        )


class MilestoneReminderMapper:

    def domain_to_model(self, reminder: MilestoneReminder) -> MilestoneReminderModel:
        model = MilestoneReminderModel()
        copy_fields(reminder, model, TIMESTAMP_FIELDS + ("milestone_id", "reminder_type"))
        return model
