"""
Job DTOs for the application layer.
Postings, search, applications, job alerts and admin moderation.
"""

from typing import Optional, List
from datetime import datetime
from pydantic import Field, validator

from .base_dto import RequestDTO, ResponseDTO, ListRequestDTO
from skilllink.domain.models.alert import AlertFrequency, JobAlert
from skilllink.domain.models.job import (
    Job, JobApplication, JobScrapingLog, JobStatus, JobVerificationStatus, ApplicationStatus, ScrapingStatus
)
from skilllink.infrastructure.validation.validators import (
    SecurityValidator, DataValidator, BusinessValidator, safe_text_validator
)


class CreateJobRequestDTO(RequestDTO):
    """DTO for posting a job."""

    title: str = Field(min_length=3, max_length=255, description="Job title")
    description: str = Field(min_length=1, max_length=20000, description="Job description")
    location: Optional[str] = Field(default=None, max_length=200, description="Location")
    remote: bool = Field(default=False, description="Remote friendly")
    budget_min: int = Field(gt=0, description="Minimum monthly budget in major units")
    budget_max: int = Field(gt=0, description="Maximum monthly budget in major units")
    currency: str = Field(default="USD", max_length=3, description="Budget currency")
    required_skills: List[str] = Field(default_factory=list, description="Required skills")
    duration_days: int = Field(default=30, gt=0, le=3650, description="Expected duration")

    @validator('title', pre=True)
    def validate_title(cls, v):
        return BusinessValidator.validate_title(v)

    @validator('description', pre=True)
    def validate_description(cls, v):
        return safe_text_validator(v)

    @validator('location', pre=True)
    def validate_location(cls, v):
        if v is not None:
            SecurityValidator.check_xss(v)
        return v

    @validator('currency', pre=True)
    def validate_currency(cls, v):
        return DataValidator.validate_currency_code(v)

    @validator('required_skills', pre=True)
    def validate_skills(cls, v):
        return BusinessValidator.validate_skills(v or [])

    @validator('budget_max')
    def validate_budget_range(cls, v, values):
        budget_min = values.get('budget_min')
        if budget_min is not None and v < budget_min:
            raise ValueError("Maximum budget cannot be below minimum budget")
        return v


class JobSearchRequestDTO(ListRequestDTO):
    """Public job search filters."""

    query: Optional[str] = Field(default=None, max_length=200, description="Text in title or description")
    skills: Optional[List[str]] = Field(default=None, description="Any of these skills")
    remote: Optional[bool] = Field(default=None, description="Remote only")
    min_budget: Optional[int] = Field(default=None, ge=0, description="Minimum budget_max")
    location: Optional[str] = Field(default=None, max_length=200)

    @validator('query', 'location', pre=True)
    def validate_safe_strings(cls, v):
        if v is not None:
            SecurityValidator.check_xss(v)
            v = v.strip()
            return v or None
        return v


class JobResponseDTO(ResponseDTO):
    title: str
    description: str
    employer_id: Optional[str] = None
    company_name: Optional[str] = None
    location: Optional[str] = None
    remote: bool = False
    budget_min: int
    budget_max: int
    currency: str
    required_skills: List[str] = Field(default_factory=list)
    duration_days: int
    status: JobStatus
    source: str
    external_url: Optional[str] = None
    verification_status: JobVerificationStatus
    is_featured: bool = False
    featured_until: Optional[datetime] = None

    @classmethod
    def from_domain(cls, job: Job) -> "JobResponseDTO":
        return cls(
            id=job.id,
            created_at=job.created_at,
            updated_at=job.updated_at,
            title=job.title,
            description=job.description,
            employer_id=job.employer_id,
            company_name=job.company_name,
            location=job.location,
            remote=job.remote,
            budget_min=job.budget_min,
            budget_max=job.budget_max,
            currency=job.currency,
            required_skills=list(job.required_skills),
            duration_days=job.duration_days,
            status=job.status,
            source=job.source,
            external_url=job.external_url,
            verification_status=job.verification_status,
            is_featured=job.is_featured_at(),
            featured_until=job.featured_until,
        )


class ApplyToJobRequestDTO(RequestDTO):
    job_id: str = Field(min_length=1)
    proposal_text: str = Field(min_length=10, max_length=10000, description="Cover letter")

    @validator('proposal_text', pre=True)
    def validate_proposal(cls, v):
        return safe_text_validator(v)


class ApplicationDecisionRequestDTO(RequestDTO):
    """The job's employer accepts or rejects an application."""

    application_id: str = Field(min_length=1)
    accept: bool


class ApplicationResponseDTO(ResponseDTO):
    job_id: str
    applicant_id: str
    proposal_text: str
    status: ApplicationStatus

    @classmethod
    def from_domain(cls, application: JobApplication) -> "ApplicationResponseDTO":
        return cls(
            id=application.id,
            created_at=application.created_at,
            updated_at=application.updated_at,
            job_id=application.job_id,
            applicant_id=application.applicant_id,
            proposal_text=application.proposal_text,
            status=application.status,
        )


# Job alerts
class CreateJobAlertRequestDTO(RequestDTO):
    """A saved search. Empty filters match every new job."""

    skills: List[str] = Field(default_factory=list, description="Any of these skills")
    locations: List[str] = Field(default_factory=list, description="Any of these locations")
    min_budget: int = Field(default=0, ge=0, description="Minimum budget_max")
    remote_only: bool = Field(default=False)
    frequency: AlertFrequency = Field(default=AlertFrequency.DAILY, description="instant, daily or weekly")

    @validator('skills', pre=True)
    def validate_skills(cls, v):
        return BusinessValidator.validate_skills(v or [])

    @validator('locations', pre=True)
    def validate_locations(cls, v):
        locations = []
        for location in v or []:
            SecurityValidator.check_xss(location)
            location = location.strip()
            if location and location not in locations:
                locations.append(location)
        if len(locations) > 10:
            raise ValueError("At most 10 locations per alert")
        return locations


class JobAlertResponseDTO(ResponseDTO):
    user_id: str
    skills: List[str] = Field(default_factory=list)
    locations: List[str] = Field(default_factory=list)
    min_budget: int
    remote_only: bool
    frequency: AlertFrequency
    active: bool
    last_sent_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, alert: JobAlert) -> "JobAlertResponseDTO":
        return cls(
            id=alert.id,
            created_at=alert.created_at,
            updated_at=alert.updated_at,
            user_id=alert.user_id,
            skills=list(alert.skills),
            locations=list(alert.locations),
            min_budget=alert.min_budget,
            remote_only=alert.remote_only,
            frequency=alert.frequency,
            active=alert.active,
            last_sent_at=alert.last_sent_at,
        )


# Moderation
class ModerateJobRequestDTO(RequestDTO):
    """Admin verification or rejection of a posting."""

    job_id: str = Field(min_length=1)
    approve: bool


class FeatureJobRequestDTO(RequestDTO):
    job_id: str = Field(min_length=1)
    featured: bool = Field(default=True, description="False removes the feature")
    days: Optional[int] = Field(default=None, gt=0, le=365, description="Days to feature the job")


class ModerationListRequestDTO(ListRequestDTO):
    verification_status: Optional[JobVerificationStatus] = None


class ScrapingLogResponseDTO(ResponseDTO):
    jobs_found: int
    jobs_created: int
    jobs_rejected: int
    execution_time_ms: int
    status: ScrapingStatus
    error_message: Optional[str] = None

    @classmethod
    def from_domain(cls, log: JobScrapingLog) -> "ScrapingLogResponseDTO":
        return cls(
            id=log.id,
            created_at=log.created_at,
            updated_at=log.updated_at,
            jobs_found=log.jobs_found,
            jobs_created=log.jobs_created,
            jobs_rejected=log.jobs_rejected,
            execution_time_ms=log.execution_time_ms,
            status=log.status,
            error_message=log.error_message,
        )
