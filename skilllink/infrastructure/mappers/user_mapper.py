"""
User mappers for converting between domain entities and database models.
"""

from skilllink.domain.models.user import Profile, Employer, RoleAssignment, VerificationLevel
from skilllink.infrastructure.db.models import ProfileModel, EmployerModel, UserRoleModel
from .base import TIMESTAMP_FIELDS, copy_fields, read_fields


PROFILE_FIELDS = (
    "user_id", "full_name", "email", "phone_number", "bio", "location",
    "rating", "total_reviews", "total_gigs_completed", "id_verified",
)

EMPLOYER_FIELDS = (
    "user_id", "company_name", "email", "company_description", "website",
    "verified", "verification_level", "verification_date", "verified_by",
    "verification_notes", "total_jobs_posted", "successful_hires",
)


class RoleMapper:
    """Maps between RoleAssignment and UserRoleModel."""

    def domain_to_model(self, assignment: RoleAssignment) -> UserRoleModel:
        model = UserRoleModel()
        copy_fields(assignment, model, TIMESTAMP_FIELDS + ("user_id", "role"))
        return model

    def model_to_domain(self, model: UserRoleModel) -> RoleAssignment:
        return RoleAssignment(**read_fields(model, TIMESTAMP_FIELDS + ("user_id", "role")))


class ProfileMapper:
    """Maps between Profile domain entity and ProfileModel database model."""

    def domain_to_model(self, profile: Profile) -> ProfileModel:
        model = ProfileModel(id=profile.id)
        self.update_model(model, profile)
        return model

    def update_model(self, model: ProfileModel, profile: Profile) -> None:
        copy_fields(profile, model, ("created_at", "updated_at") + PROFILE_FIELDS)
        model.skills = list(profile.skills)

    def model_to_domain(self, model: ProfileModel) -> Profile:
        return Profile(
            skills=list(model.skills or []),
            version=model.version or 1,
            **read_fields(model, TIMESTAMP_FIELDS + PROFILE_FIELDS)
        )


class EmployerMapper:
    """Maps between Employer domain entity and EmployerModel database model."""

    def domain_to_model(self, employer: Employer) -> EmployerModel:
        model = EmployerModel(id=employer.id)
        self.update_model(model, employer)
        return model

    def update_model(self, model: EmployerModel, employer: Employer) -> None:
        copy_fields(employer, model, ("created_at", "updated_at") + EMPLOYER_FIELDS)

    def model_to_domain(self, model: EmployerModel) -> Employer:
        data = read_fields(model, TIMESTAMP_FIELDS + EMPLOYER_FIELDS)
        data["verification_level"] = model.verification_level or VerificationLevel.UNVERIFIED
        data["verified"] = bool(model.verified)
        return Employer(version=model.version or 1, **data)
