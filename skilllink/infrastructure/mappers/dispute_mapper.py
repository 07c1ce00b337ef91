"""
Dispute mappers for converting between domain entities and database models.
"""

from skilllink.domain.models.dispute import Dispute, DisputeEscalation
from skilllink.infrastructure.db.models import DisputeModel, DisputeEscalationModel
from .base import TIMESTAMP_FIELDS, copy_fields, read_fields


DISPUTE_FIELDS = (
    "contract_id", "raised_by", "reason", "status", "resolution", "outcome",
    "resolved_by", "resolved_at",
)

ESCALATION_FIELDS = ("dispute_id", "escalated_to", "escalation_reason", "notes")


class DisputeMapper:

    def domain_to_model(self, dispute: Dispute) -> DisputeModel:
        model = DisputeModel(id=dispute.id)
        self.update_model(model, dispute)
        return model

    def update_model(self, model: DisputeModel, dispute: Dispute) -> None:
        copy_fields(dispute, model, ("created_at", "updated_at") + DISPUTE_FIELDS)

    def model_to_domain(self, model: DisputeModel) -> Dispute:
        return Dispute(version=model.version or 1, **read_fields(model, TIMESTAMP_FIELDS + DISPUTE_FIELDS))


class DisputeEscalationMapper:

    def domain_to_model(self, escalation: DisputeEscalation) -> DisputeEscalationModel:
        model = DisputeEscalationModel()
        copy_fields(escalation, model, TIMESTAMP_FIELDS + ESCALATION_FIELDS)
        return model

    def model_to_domain(self, model: DisputeEscalationModel) -> DisputeEscalation:
        return DisputeEscalation(**read_fields(model, TIMESTAMP_FIELDS + ESCALATION_FIELDS))
