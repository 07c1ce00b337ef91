"""
Verification mappers for converting between domain entities and database models.
"""

from skilllink.domain.models.verification import VerificationBadge, VerificationRequest
from skilllink.infrastructure.db.models import VerificationBadgeModel, VerificationRequestModel
from .base import TIMESTAMP_FIELDS, copy_fields, read_fields


BADGE_FIELDS = ("talent_id", "badge_type", "badge_level", "issued_by", "issued_at")

REQUEST_FIELDS = ("talent_id", "request_type", "status", "reviewed_by", "reviewed_at", "admin_notes")


class VerificationBadgeMapper:

    def domain_to_model(self, badge: VerificationBadge) -> VerificationBadgeModel:
        model = VerificationBadgeModel(id=badge.id)
        self.update_model(model, badge)
        return model

    def update_model(self, model: VerificationBadgeModel, badge: VerificationBadge) -> None:
        copy_fields(badge, model, ("created_at", "updated_at") + BADGE_FIELDS)

    def model_to_domain(self, model: VerificationBadgeModel) -> VerificationBadge:
        return VerificationBadge(**read_fields(model, TIMESTAMP_FIELDS + BADGE_FIELDS))


class VerificationRequestMapper:

    def domain_to_model(self, request: VerificationRequest) -> VerificationRequestModel:
        model = VerificationRequestModel(id=request.id)
        self.update_model(model, request)
        return model

    def update_model(self, model: VerificationRequestModel, request: VerificationRequest) -> None:
        copy_fields(request, model, ("created_at", "updated_at") + REQUEST_FIELDS)
        model.verification_data = dict(request.verification_data)

    def model_to_domain(self, model: VerificationRequestModel) -> VerificationRequest:
        return VerificationRequest(
            verification_data=dict(model.verification_data or {}),
            **read_fields(model, TIMESTAMP_FIELDS + REQUEST_FIELDS)
        )
