"""
Saved job searches that talent are emailed about.
"""

from datetime import datetime, timedelta
from enum import Enum
from typing import List, Optional
from dataclasses import dataclass, field

from .base import BaseEntity, ValidationError, utc_now
from .job import Job, JobStatus, JobVerificationStatus
from skilllink.domain.events.marketplace_events import JobAlertMatched


class AlertFrequency(str, Enum):
    INSTANT = "instant"
    DAILY = "daily"
    WEEKLY = "weekly"


# Minimum gap between two emails for one alert
_SEND_INTERVALS = {
    AlertFrequency.INSTANT: timedelta(0),
    AlertFrequency.DAILY: timedelta(hours=24),
    AlertFrequency.WEEKLY: timedelta(days=7),
}

# A new alert looks back this far on its first run
FIRST_RUN_LOOKBACK = timedelta(hours=24)


@dataclass(eq=False)
class JobAlert(BaseEntity):
    """
    A talent's saved job search.

    Every filter left empty matches everything. Locations match by
    substring, and remote jobs satisfy any location. Skills match when an
    alert skill and a job skill contain one another, ignoring case.
    """

    user_id: str = ""
    skills: List[str] = field(default_factory=list)
    locations: List[str] = field(default_factory=list)
    min_budget: int = 0
    remote_only: bool = False
    frequency: AlertFrequency = AlertFrequency.DAILY
    active: bool = True
    last_sent_at: Optional[datetime] = None

    def __post_init__(self):
        super().__post_init__()
        self.validate()

    def validate(self) -> None:
        if not self.user_id:
            raise ValidationError("Job alert must belong to a user", "user_id")
        if self.min_budget < 0:
            raise ValidationError("Minimum budget cannot be negative", "min_budget")

    def is_due(self, now: Optional[datetime] = None) -> bool:
        if not self.active:
            return False
        if self.last_sent_at is None:
            return True
        return (now or utc_now()) - self.last_sent_at >= _SEND_INTERVALS[self.frequency]

    def matches_since(self, now: Optional[datetime] = None) -> datetime:
        """Jobs created at or after this moment are new to the alert."""
        return self.last_sent_at or (now or utc_now()) - FIRST_RUN_LOOKBACK

    def matches(self, job: Job) -> bool:
        if job.status != JobStatus.OPEN or job.verification_status == JobVerificationStatus.REJECTED:
            return False
        if job.budget_max < self.min_budget:
            return False
        if self.remote_only and not job.remote:
            return False

        if self.locations and not job.remote:
            job_location = (job.location or "").lower()
            if not any(location.lower() in job_location for location in self.locations):
                return False

        if self.skills:
            job_skills = [skill.lower() for skill in job.required_skills]
            wanted = [skill.lower() for skill in self.skills]
            if not any(w in s or s in w for w in wanted for s in job_skills):
                return False

        return True

    def record_sent(self, jobs: List[Job], max_listed: int, now: Optional[datetime] = None) -> None:
        """Mark the alert as sent and raise the event that emails the matches."""
        self.last_sent_at = now or utc_now()
        self.mark_as_updated()
        self.add_event(JobAlertMatched(
            alert_id=self.id,
            user_id=self.user_id,
            total_matches=len(jobs),
            jobs=[
                {
                    "id": job.id,
                    "title": job.title,
                    "company_name": job.company_name,
                    "location": job.location or ("Remote" if job.remote else None),
                    "budget_min": job.budget_min,
                    "budget_max": job.budget_max,
                    "currency": job.currency,
                }
                for job in jobs[:max_listed]
            ],
        ))
