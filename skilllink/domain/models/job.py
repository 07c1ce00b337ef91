"""
Job postings, applications and aggregation run logs.
"""

from datetime import datetime, timedelta
from enum import Enum
from typing import List, Optional
from dataclasses import dataclass, field

from .base import BaseEntity, AggregateRoot, ValidationError, BusinessRuleViolation, utc_now
from skilllink.domain.events.marketplace_events import ApplicationSubmitted, ApplicationStatusChanged


class JobStatus(str, Enum):
    DRAFT = "draft"
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class JobVerificationStatus(str, Enum):
    UNVERIFIED = "unverified"
    VERIFIED = "verified"
    REJECTED = "rejected"


class ApplicationStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    COMPLETED = "completed"


class ScrapingStatus(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"


PLATFORM_SOURCE = "platform"

_JOB_TRANSITIONS = {
    JobStatus.DRAFT: {JobStatus.OPEN, JobStatus.CANCELLED},
    JobStatus.OPEN: {JobStatus.IN_PROGRESS, JobStatus.CANCELLED},
    JobStatus.IN_PROGRESS: {JobStatus.COMPLETED},
    JobStatus.COMPLETED: set(),
    JobStatus.CANCELLED: set(),
}


@dataclass(eq=False)
class Job(AggregateRoot):
    """
    Job posting.
    Budgets are listed in major currency units per month, as advertised.
    Aggregated jobs have no employer account.
    """

    title: str = ""
    description: str = ""
    employer_id: Optional[str] = None
    company_name: Optional[str] = None
    location: Optional[str] = None
    remote: bool = False
    budget_min: int = 0
    budget_max: int = 0
    currency: str = "USD"
    required_skills: List[str] = field(default_factory=list)
    duration_days: int = 30

    status: JobStatus = JobStatus.OPEN
    source: str = PLATFORM_SOURCE
    external_url: Optional[str] = None
    verification_status: JobVerificationStatus = JobVerificationStatus.UNVERIFIED
    is_featured: bool = False
    featured_until: Optional[datetime] = None

    def __post_init__(self):
        super().__post_init__()
        self.validate()

    def validate(self) -> None:
        if not self.title or len(self.title.strip()) < 3:
            raise ValidationError("Job title must be at least 3 characters", "title")
        if len(self.title) > 255:
            raise ValidationError("Job title too long (max 255 characters)", "title")
        if not self.description or not self.description.strip():
            raise ValidationError("Job description cannot be empty", "description")
        if self.budget_min <= 0:
            raise ValidationError("Minimum budget must be positive", "budget_min")
        if self.budget_max < self.budget_min:
            raise ValidationError("Maximum budget cannot be below minimum budget", "budget_max")
        if self.duration_days <= 0:
            raise ValidationError("Duration must be positive", "duration_days")

    @property
    def is_aggregated(self) -> bool:
        return self.source != PLATFORM_SOURCE

    def is_featured_at(self, moment: Optional[datetime] = None) -> bool:
        moment = moment or utc_now()
        return self.is_featured and self.featured_until is not None and self.featured_until > moment

    def _transition(self, new_status: JobStatus) -> None:
        if new_status not in _JOB_TRANSITIONS[self.status]:
            raise BusinessRuleViolation(
                f"Cannot move job from {self.status.value} to {new_status.value}"
            )
        self.status = new_status
        self.mark_as_updated()

    def start_work(self) -> None:
        """Escrow was funded for this job."""
        self._transition(JobStatus.IN_PROGRESS)

    def complete(self) -> None:
        self._transition(JobStatus.COMPLETED)

    def cancel(self) -> None:
        self._transition(JobStatus.CANCELLED)

    def publish(self) -> None:
        self._transition(JobStatus.OPEN)

    def verify(self) -> None:
        self.verification_status = JobVerificationStatus.VERIFIED
        self.mark_as_updated()

    def reject(self) -> None:
        """Hide the job from search."""
        self.verification_status = JobVerificationStatus.REJECTED
        self.is_featured = False
        self.featured_until = None
        self.mark_as_updated()

    def feature(self, days: int = 7, now: Optional[datetime] = None) -> None:
        if days <= 0:
            raise ValidationError("Featured duration must be positive", "days")
        if self.verification_status == JobVerificationStatus.REJECTED:
            raise BusinessRuleViolation("Rejected jobs cannot be featured")
        self.is_featured = True
        self.featured_until = (now or utc_now()) + timedelta(days=days)
        self.mark_as_updated()

    def unfeature(self) -> None:
        self.is_featured = False
        self.featured_until = None
        self.mark_as_updated()

    def accepts_applications(self) -> bool:
        return (
            self.status == JobStatus.OPEN
            and self.verification_status != JobVerificationStatus.REJECTED
        )


@dataclass(eq=False)
class JobApplication(BaseEntity):
    """A talent's proposal for a job."""

    job_id: str = ""
    applicant_id: str = ""
    proposal_text: str = ""
    status: ApplicationStatus = ApplicationStatus.PENDING

    def __post_init__(self):
        super().__post_init__()
        self.validate()

    def validate(self) -> None:
        if not self.job_id:
            raise ValidationError("Application requires a job", "job_id")
        if not self.applicant_id:
            raise ValidationError("Application requires an applicant", "applicant_id")
        if not self.proposal_text or len(self.proposal_text.strip()) < 10:
            raise ValidationError("Proposal must be at least 10 characters", "proposal_text")

    @classmethod
    def submit(cls, job: Job, applicant_id: str, proposal_text: str) -> "JobApplication":
        if not job.accepts_applications():
            raise BusinessRuleViolation("This job is not accepting applications")
        if job.employer_id == applicant_id:
            raise BusinessRuleViolation("Employers cannot apply to their own jobs")

        application = cls(job_id=job.id, applicant_id=applicant_id, proposal_text=proposal_text)
        application.add_event(ApplicationSubmitted(
            application_id=application.id,
            job_id=job.id,
            job_title=job.title,
            applicant_id=applicant_id,
            employer_id=job.employer_id or ""
        ))
        return application

    def _change_status(self, new_status: ApplicationStatus, job_title: str) -> None:
        self.status = new_status
        self.mark_as_updated()
        self.add_event(ApplicationStatusChanged(
            application_id=self.id,
            job_title=job_title,
            applicant_id=self.applicant_id,
            status=new_status.value
        ))

    def accept(self, job_title: str = "") -> None:
        if self.status != ApplicationStatus.PENDING:
            raise BusinessRuleViolation(f"Only pending applications can be accepted (status is {self.status.value})")
        self._change_status(ApplicationStatus.ACCEPTED, job_title)

    def reject(self, job_title: str = "") -> None:
        if self.status != ApplicationStatus.PENDING:
            raise BusinessRuleViolation(f"Only pending applications can be rejected (status is {self.status.value})")
        self._change_status(ApplicationStatus.REJECTED, job_title)

    def complete(self) -> None:
        if self.status != ApplicationStatus.ACCEPTED:
            raise BusinessRuleViolation("Only accepted applications can be completed")
        self.status = ApplicationStatus.COMPLETED
        self.mark_as_updated()


@dataclass(eq=False)
class JobScrapingLog(BaseEntity):
    """Outcome of one aggregation run."""

    jobs_found: int = 0
    jobs_created: int = 0
    jobs_rejected: int = 0
    execution_time_ms: int = 0
    status: ScrapingStatus = ScrapingStatus.SUCCESS
    error_message: Optional[str] = None


@dataclass
class JobListing:
    """A listing fetched from a third-party job board, before curation."""

    title: str
    company: Optional[str]
    description: str
    location: Optional[str]
    budget_min: int
    budget_max: int
    required_skills: List[str]
    remote: bool
    url: str
    source: str
