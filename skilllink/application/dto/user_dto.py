"""
User DTOs for the application layer.
Registration, authentication, talent profiles and employer accounts.
"""

from typing import Optional, List
from datetime import datetime
from pydantic import EmailStr, Field, validator

from .base_dto import RequestDTO, ResponseDTO, BaseDTO, ListRequestDTO
from skilllink.domain.models.user import Profile, Employer, UserRole, VerificationLevel
from skilllink.infrastructure.validation.validators import (
    SecurityValidator, DataValidator, BusinessValidator, safe_text_validator
)


# Auth
class RegisterRequestDTO(RequestDTO):
    """Sign-up request. Only talent and employer accounts can self-register."""

    email: EmailStr = Field(description="Login email")
    password: str = Field(min_length=8, max_length=128, description="Password")
    full_name: str = Field(min_length=1, max_length=200, description="Full name")
    role: UserRole = Field(default=UserRole.TALENT, description="Account type")
    company_name: Optional[str] = Field(default=None, max_length=200, description="Company name for employers")
    phone_number: Optional[str] = Field(default=None, max_length=20, description="Phone number")

    @validator('email', pre=True)
    def validate_email(cls, v):
        return DataValidator.validate_email(v)

    @validator('full_name', 'company_name', pre=True)
    def validate_safe_strings(cls, v):
        if v is not None:
            SecurityValidator.check_xss(v)
            return v.strip()
        return v

    @validator('phone_number', pre=True)
    def validate_phone(cls, v):
        if v:
            return DataValidator.validate_phone(v)
        return None

    @validator('role')
    def validate_role(cls, v):
        if v == UserRole.ADMIN or v == UserRole.ADMIN.value:
            raise ValueError("Admin accounts cannot be self-registered")
        return v


class LoginRequestDTO(RequestDTO):
    email: EmailStr = Field(description="Login email")
    password: str = Field(min_length=1, description="Password")

    @validator('email', pre=True)
    def validate_email(cls, v):
        return DataValidator.validate_email(v)


class RefreshTokenRequestDTO(RequestDTO):
    refresh_token: str = Field(min_length=1, description="Refresh token")


class AuthResponseDTO(BaseDTO):
    """Tokens issued by the identity provider."""

    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    token_type: str = "bearer"
    expires_in: Optional[int] = None
    user_id: str
    email: Optional[str] = None
    roles: List[str] = Field(default_factory=list)


# Profiles
class UpdateProfileRequestDTO(RequestDTO):
    """Partial update of the caller's talent profile."""

    full_name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    bio: Optional[str] = Field(default=None, max_length=2000)
    location: Optional[str] = Field(default=None, max_length=200)
    phone_number: Optional[str] = Field(default=None, max_length=20)
    skills: Optional[List[str]] = Field(default=None, description="Skill names")

    @validator('full_name', 'location', pre=True)
    def validate_safe_strings(cls, v):
        if v is not None:
            SecurityValidator.check_xss(v)
        return v

    @validator('bio', pre=True)
    def validate_bio(cls, v):
        if v is not None:
            return safe_text_validator(v)
        return v

    @validator('phone_number', pre=True)
    def validate_phone(cls, v):
        if v:
            return DataValidator.validate_phone(v)
        return v

    @validator('skills', pre=True)
    def validate_skills(cls, v):
        if v is not None:
            return BusinessValidator.validate_skills(v, max_items=100)
        return v


class ProfileResponseDTO(ResponseDTO):
    user_id: str
    full_name: str
    email: Optional[str] = None
    phone_number: Optional[str] = None
    bio: Optional[str] = None
    location: Optional[str] = None
    skills: List[str] = Field(default_factory=list)
    rating: float = 0.0
    total_reviews: int = 0
    total_gigs_completed: int = 0
    id_verified: bool = False
    version: int = 1

    @classmethod
    def from_domain(cls, profile: Profile) -> "ProfileResponseDTO":
        return cls(
            id=profile.id,
            created_at=profile.created_at,
            updated_at=profile.updated_at,
            user_id=profile.user_id,
            full_name=profile.full_name,
            email=profile.email,
            phone_number=profile.phone_number,
            bio=profile.bio,
            location=profile.location,
            skills=list(profile.skills),
            rating=profile.rating,
            total_reviews=profile.total_reviews,
            total_gigs_completed=profile.total_gigs_completed,
            id_verified=profile.id_verified,
            version=profile.version,
        )


# Employers
class UpdateEmployerRequestDTO(RequestDTO):
    company_name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    company_description: Optional[str] = Field(default=None, max_length=5000)
    website: Optional[str] = Field(default=None, max_length=255)

    @validator('company_name', pre=True)
    def validate_company_name(cls, v):
        if v is not None:
            SecurityValidator.check_xss(v)
        return v

    @validator('company_description', pre=True)
    def validate_description(cls, v):
        if v is not None:
            return safe_text_validator(v)
        return v

    @validator('website', pre=True)
    def validate_website(cls, v):
        if v:
            return DataValidator.validate_url(v)
        return v


class EmployerResponseDTO(ResponseDTO):
    user_id: str
    company_name: str
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

    @classmethod
    def from_domain(cls, employer: Employer) -> "EmployerResponseDTO":
        return cls(
            id=employer.id,
            created_at=employer.created_at,
            updated_at=employer.updated_at,
            user_id=employer.user_id,
            company_name=employer.company_name,
            email=employer.email,
            company_description=employer.company_description,
            website=employer.website,
            verified=employer.verified,
            verification_level=employer.verification_level,
            verification_date=employer.verification_date,
            verified_by=employer.verified_by,
            verification_notes=employer.verification_notes,
            total_jobs_posted=employer.total_jobs_posted,
            successful_hires=employer.successful_hires,
        )


class EmployerVerificationDecisionDTO(RequestDTO):
    """Admin decision on an employer. The level is ignored when rejecting."""

    approved: bool = Field(description="Grant or remove verification")
    level: VerificationLevel = Field(default=VerificationLevel.VERIFIED, description="Verification tier")
    notes: Optional[str] = Field(default=None, max_length=2000)

    @validator('notes', pre=True)
    def validate_notes(cls, v):
        if v is not None:
            return safe_text_validator(v)
        return v


class VerifyEmployerRequestDTO(EmployerVerificationDecisionDTO):
    employer_user_id: str = Field(min_length=1)


class EmployerListRequestDTO(ListRequestDTO):
    verified: Optional[bool] = Field(default=None, description="Filter on verification")


class MeResponseDTO(BaseDTO):
    """The caller's identity with whichever accounts exist for it."""

    user_id: str
    roles: List[str] = Field(default_factory=list)
    profile: Optional[ProfileResponseDTO] = None
    employer: Optional[EmployerResponseDTO] = None
