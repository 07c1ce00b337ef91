"""
Job repository interfaces.
Postings, applications, aggregation logs and job alerts.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional, Tuple

from skilllink.domain.models.alert import JobAlert
from skilllink.domain.models.job import (
    Job, JobApplication, JobScrapingLog, JobVerificationStatus
)


class JobRepository(ABC):
    """Repository interface for job postings."""

    @abstractmethod
    def save(self, job: Job) -> Job:
        pass

    @abstractmethod
    def find_by_id(self, job_id: str) -> Optional[Job]:
        pass

    @abstractmethod
    def exists_by_title_and_company(self, title: str, company_name: Optional[str]) -> bool:
        """Exact match used to deduplicate aggregated listings."""
        pass

    @abstractmethod
    def search(
        self,
        now: datetime,
        query: Optional[str] = None,
        skills: Optional[List[str]] = None,
        remote: Optional[bool] = None,
        min_budget: Optional[int] = None,
        location: Optional[str] = None,
        limit: int = 20,
        offset: int = 0
    ) -> Tuple[List[Job], int]:
        """
        Search open, non-rejected jobs.
        Jobs featured at ``now`` come first, then newest first.
        """
        pass

    @abstractmethod
    def find_by_employer(self, employer_id: str) -> List[Job]:
        pass

    @abstractmethod
    def find_open_created_since(self, since: datetime) -> List[Job]:
        """Open, non-rejected jobs created at or after ``since``, newest first."""
        pass

    @abstractmethod
    def list_for_moderation(
        self,
        verification_status: Optional[JobVerificationStatus] = None,
        limit: int = 20,
        offset: int = 0
    ) -> Tuple[List[Job], int]:
        pass


class ApplicationRepository(ABC):
    """Repository interface for job applications."""

    @abstractmethod
    def save(self, application: JobApplication) -> JobApplication:
        pass

    @abstractmethod
    def find_by_id(self, application_id: str) -> Optional[JobApplication]:
        pass

    @abstractmethod
    def find_by_job_and_applicant(self, job_id: str, applicant_id: str) -> Optional[JobApplication]:
        pass

    @abstractmethod
    def find_by_job(self, job_id: str) -> List[JobApplication]:
        pass

    @abstractmethod
    def find_by_applicant(self, applicant_id: str) -> List[JobApplication]:
        pass


class ScrapingLogRepository(ABC):
    """Repository interface for aggregation run logs."""

    @abstractmethod
    def save(self, log: JobScrapingLog) -> JobScrapingLog:
        pass

    @abstractmethod
    def list_recent(self, limit: int = 20) -> List[JobScrapingLog]:
        pass


class JobAlertRepository(ABC):
    """Repository interface for saved job alerts."""

    @abstractmethod
    def save(self, alert: JobAlert) -> JobAlert:
        pass

    @abstractmethod
    def find_by_id(self, alert_id: str) -> Optional[JobAlert]:
        pass

    @abstractmethod
    def find_by_user(self, user_id: str) -> List[JobAlert]:
        pass

    @abstractmethod
    def find_active(self) -> List[JobAlert]:
        pass

    @abstractmethod
    def delete(self, alert_id: str) -> None:
        pass
