"""
Domain events for job applications, job alerts and trust verification.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from .base import DomainEvent


@dataclass
class ApplicationSubmitted(DomainEvent):
    application_id: str = ""
    job_id: str = ""
    job_title: str = ""
    applicant_id: str = ""
    employer_id: str = ""


@dataclass
class ApplicationStatusChanged(DomainEvent):
    application_id: str = ""
    job_title: str = ""
    applicant_id: str = ""
    status: str = ""


@dataclass
class VerificationRequestReviewed(DomainEvent):
    request_id: str = ""
    talent_id: str = ""
    request_type: str = ""
    approved: bool = False
    admin_notes: str = ""


@dataclass
class BadgeIssued(DomainEvent):
    badge_id: str = ""
    talent_id: str = ""
    badge_type: str = ""
    badge_level: str = ""


@dataclass
class EmployerVerificationChanged(DomainEvent):
    employer_id: str = ""
    verified: bool = False
    verification_level: str = ""


@dataclass
class JobAlertMatched(DomainEvent):
    """New jobs matched a talent's saved alert. ``jobs`` holds plain summaries for the email."""
    alert_id: str = ""
    user_id: str = ""
    total_matches: int = 0
    jobs: List[Dict[str, Any]] = field(default_factory=list)


@dataclass
class NewJobsAggregated(DomainEvent):
    jobs_created: int = 0
    jobs_rejected: int = 0
    scraped_at: Optional[datetime] = None
