"""
People on the marketplace: talent profiles, employers and role assignments.
Every person is identified by the user id issued by the identity provider.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional
from dataclasses import dataclass, field

from .base import BaseEntity, AggregateRoot, ValidationError, BusinessRuleViolation, utc_now
from skilllink.domain.events.marketplace_events import EmployerVerificationChanged


class UserRole(str, Enum):
    """Application roles."""
    TALENT = "talent"
    EMPLOYER = "employer"
    ADMIN = "admin"


class VerificationLevel(str, Enum):
    """Employer verification tiers."""
    UNVERIFIED = "unverified"
    BASIC = "basic"
    VERIFIED = "verified"
    PREMIUM = "premium"


@dataclass(eq=False)
class RoleAssignment(BaseEntity):
    """A role granted to a user. A user can hold several roles."""

    user_id: str = ""
    role: UserRole = UserRole.TALENT


@dataclass(eq=False)
class Profile(AggregateRoot):
    """
    Talent profile.
    Keeps the public freelancer card and the counters derived from finished work.
    """

    user_id: str = ""
    full_name: str = ""
    email: Optional[str] = None
    phone_number: Optional[str] = None
    bio: Optional[str] = None
    location: Optional[str] = None
    skills: List[str] = field(default_factory=list)

    rating: float = 0.0
    total_reviews: int = 0
    total_gigs_completed: int = 0
    id_verified: bool = False

    def __post_init__(self):
        super().__post_init__()
        self.validate()

    def validate(self) -> None:
        if not self.user_id:
            raise ValidationError("Profile requires a user id", "user_id")
        if not self.full_name or not self.full_name.strip():
            raise ValidationError("Full name cannot be empty", "full_name")
        if len(self.full_name) > 200:
            raise ValidationError("Full name too long (max 200 characters)", "full_name")
        if self.rating < 0 or self.rating > 5:
            raise ValidationError("Rating must be between 0 and 5", "rating")

    def update_info(
        self,
        full_name: Optional[str] = None,
        bio: Optional[str] = None,
        location: Optional[str] = None,
        phone_number: Optional[str] = None,
        skills: Optional[List[str]] = None,
        max_skills: int = 30
    ) -> None:
        """Update editable profile fields."""
        if full_name is not None:
            self.full_name = full_name.strip()
        if bio is not None:
            self.bio = bio
        if location is not None:
            self.location = location
        if phone_number is not None:
            self.phone_number = phone_number
        if skills is not None:
            self.set_skills(skills, max_skills)

        self.validate()
        self.mark_as_updated()

    def set_skills(self, skills: List[str], max_skills: int = 30) -> None:
        """Replace skills, dropping blanks and case-insensitive duplicates."""
        cleaned: List[str] = []
        seen = set()
        for skill in skills:
            skill = skill.strip()
            if not skill or skill.lower() in seen:
                continue
            seen.add(skill.lower())
            cleaned.append(skill)

        if len(cleaned) > max_skills:
            raise ValidationError(f"A profile can list at most {max_skills} skills", "skills")
        self.skills = cleaned

    def record_completed_gig(self) -> None:
        self.total_gigs_completed += 1
        self.mark_as_updated()

    def mark_identity_verified(self) -> None:
        self.id_verified = True
        self.mark_as_updated()


@dataclass(eq=False)
class Employer(AggregateRoot):
    """
    Employer account.
    Verification is granted by admins in tiers.
    """

    user_id: str = ""
    company_name: str = ""
    email: Optional[str] = None
    company_description: Optional[str] = None
    website: Optional[str] = None

    verified: bool = False
    verification_level: VerificationLevel = VerificationLevel.UNVERIFIED
    verification_date: Optional[datetime] = None
    verified_by: Optional[str] = None
    verification_notes: Optional[str] = None

    total_jobs_posted: int = 0
    successful_hires: int = 0

    def __post_init__(self):
        super().__post_init__()
        self.validate()

    def validate(self) -> None:
        if not self.user_id:
            raise ValidationError("Employer requires a user id", "user_id")
        if not self.company_name or not self.company_name.strip():
            raise ValidationError("Company name cannot be empty", "company_name")
        if len(self.company_name) > 200:
            raise ValidationError("Company name too long (max 200 characters)", "company_name")

    def update_info(
        self,
        company_name: Optional[str] = None,
        company_description: Optional[str] = None,
        website: Optional[str] = None
    ) -> None:
        if company_name is not None:
            self.company_name = company_name.strip()
        if company_description is not None:
            self.company_description = company_description
        if website is not None:
            self.website = website
        self.validate()
        self.mark_as_updated()

    def verify(self, level: VerificationLevel, admin_id: str, notes: Optional[str] = None) -> None:
        """Grant a verification tier."""
        if level == VerificationLevel.UNVERIFIED:
            raise BusinessRuleViolation("Use reject_verification to remove verification")

        self.verified = True
        self.verification_level = level
        self.verification_date = utc_now()
        self.verified_by = admin_id
        self.verification_notes = notes
        self.mark_as_updated()

        self.add_event(EmployerVerificationChanged(
            employer_id=self.user_id,
            verified=True,
            verification_level=level.value
        ))

    def reject_verification(self, admin_id: str, notes: Optional[str] = None) -> None:
        self.verified = False
        self.verification_level = VerificationLevel.UNVERIFIED
        self.verification_date = utc_now()
        self.verified_by = admin_id
        self.verification_notes = notes
        self.mark_as_updated()

        self.add_event(EmployerVerificationChanged(
            employer_id=self.user_id,
            verified=False,
            verification_level=VerificationLevel.UNVERIFIED.value
        ))

    def record_job_posted(self) -> None:
        self.total_jobs_posted += 1
        self.mark_as_updated()

    def record_hire(self) -> None:
        self.successful_hires += 1
        self.mark_as_updated()
