"""
Job repository implementations using SQLAlchemy.
"""

from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import func, or_, and_, case, cast, String

from skilllink.domain.models.alert import JobAlert
from skilllink.domain.models.job import (
    Job, JobApplication, JobScrapingLog, JobStatus, JobVerificationStatus
)
from skilllink.domain.repositories.job_repository import (
    JobRepository, ApplicationRepository, ScrapingLogRepository, JobAlertRepository
)
from skilllink.infrastructure.db.models import (
    JobModel, JobApplicationModel, JobScrapingLogModel, JobAlertModel
)
from skilllink.infrastructure.mappers.job_mapper import (
    JobMapper, JobApplicationMapper, JobScrapingLogMapper, JobAlertMapper
)
from .base import SQLAlchemyRepository


class SQLAlchemyJobRepository(SQLAlchemyRepository, JobRepository):
    """SQLAlchemy implementation of job repository."""

    model = JobModel
    entity_name = "Job"

    def __init__(self, session):
        super().__init__(session, JobMapper())

    def save(self, job: Job) -> Job:
        return self._save(job)

    def find_by_id(self, job_id: str) -> Optional[Job]:
        model = self._get_model(job_id)
        return self.mapper.model_to_domain(model) if model else None

    def exists_by_title_and_company(self, title: str, company_name: Optional[str]) -> bool:
        query = self.session.query(JobModel.id).filter(JobModel.title == title)
        if company_name is None:
            query = query.filter(JobModel.company_name.is_(None))
        else:
            query = query.filter(JobModel.company_name == company_name)
        return query.first() is not None

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
        """Search visible jobs, featured first."""
        db_query = self.session.query(JobModel).filter(
            JobModel.status == JobStatus.OPEN,
            JobModel.verification_status != JobVerificationStatus.REJECTED
        )

        if query:
            pattern = f"%{query}%"
            db_query = db_query.filter(or_(
                JobModel.title.ilike(pattern),
                JobModel.description.ilike(pattern),
                JobModel.company_name.ilike(pattern)
            ))
        if skills:
            skills_text = cast(JobModel.required_skills, String)
            db_query = db_query.filter(or_(*[skills_text.ilike(f"%{skill}%") for skill in skills]))
        if remote is not None:
            db_query = db_query.filter(JobModel.remote == remote)
        if min_budget is not None:
            db_query = db_query.filter(JobModel.budget_max >= min_budget)
        if location:
            db_query = db_query.filter(JobModel.location.ilike(f"%{location}%"))

        total = db_query.with_entities(func.count(JobModel.id)).scalar() or 0

        featured_first = case(
            (and_(JobModel.is_featured.is_(True), JobModel.featured_until > now), 0),
            else_=1
        )
        models = (
            db_query
            .order_by(featured_first, JobModel.created_at.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )
        return [self.mapper.model_to_domain(model) for model in models], total

    def find_by_employer(self, employer_id: str) -> List[Job]:
        models = (
            self.session.query(JobModel)
            .filter_by(employer_id=employer_id)
            .order_by(JobModel.created_at.desc())
            .all()
        )
        return [self.mapper.model_to_domain(model) for model in models]

    def find_open_created_since(self, since: datetime) -> List[Job]:
        models = (
            self.session.query(JobModel)
            .filter(
                JobModel.status == JobStatus.OPEN,
                JobModel.verification_status != JobVerificationStatus.REJECTED,
                JobModel.created_at >= since
            )
            .order_by(JobModel.created_at.desc())
            .all()
        )
        return [self.mapper.model_to_domain(model) for model in models]

    def list_for_moderation(
        self,
        verification_status: Optional[JobVerificationStatus] = None,
        limit: int = 20,
        offset: int = 0
    ) -> Tuple[List[Job], int]:
        query = self.session.query(JobModel)
        if verification_status is not None:
            query = query.filter(JobModel.verification_status == verification_status)

        total = query.with_entities(func.count(JobModel.id)).scalar() or 0
        models = query.order_by(JobModel.created_at.desc()).offset(offset).limit(limit).all()
        return [self.mapper.model_to_domain(model) for model in models], total


class SQLAlchemyApplicationRepository(SQLAlchemyRepository, ApplicationRepository):
    """SQLAlchemy implementation of job application repository."""

    model = JobApplicationModel
    entity_name = "JobApplication"

    def __init__(self, session):
        super().__init__(session, JobApplicationMapper())

    def save(self, application: JobApplication) -> JobApplication:
        return self._save(application)

    def find_by_id(self, application_id: str) -> Optional[JobApplication]:
        model = self._get_model(application_id)
        return self.mapper.model_to_domain(model) if model else None

    def find_by_job_and_applicant(self, job_id: str, applicant_id: str) -> Optional[JobApplication]:
        model = self.session.query(JobApplicationModel).filter_by(
            job_id=job_id,
            applicant_id=applicant_id
        ).first()
        return self.mapper.model_to_domain(model) if model else None

    def find_by_job(self, job_id: str) -> List[JobApplication]:
        models = (
            self.session.query(JobApplicationModel)
            .filter_by(job_id=job_id)
            .order_by(JobApplicationModel.created_at)
            .all()
        )
        return [self.mapper.model_to_domain(model) for model in models]

    def find_by_applicant(self, applicant_id: str) -> List[JobApplication]:
        models = (
            self.session.query(JobApplicationModel)
            .filter_by(applicant_id=applicant_id)
            .order_by(JobApplicationModel.created_at.desc())
            .all()
        )
        return [self.mapper.model_to_domain(model) for model in models]


class SQLAlchemyScrapingLogRepository(SQLAlchemyRepository, ScrapingLogRepository):

    model = JobScrapingLogModel
    entity_name = "JobScrapingLog"

    def __init__(self, session):
        super().__init__(session, JobScrapingLogMapper())

    def save(self, log: JobScrapingLog) -> JobScrapingLog:
        self.session.add(self.mapper.domain_to_model(log))
        self._flush()
        self._track(log)
        return log

    def list_recent(self, limit: int = 20) -> List[JobScrapingLog]:
        models = (
            self.session.query(JobScrapingLogModel)
            .order_by(JobScrapingLogModel.created_at.desc())
            .limit(limit)
            .all()
        )
        return [self.mapper.model_to_domain(model) for model in models]


class SQLAlchemyJobAlertRepository(SQLAlchemyRepository, JobAlertRepository):

    model = JobAlertModel
    entity_name = "JobAlert"

    def __init__(self, session):
        super().__init__(session, JobAlertMapper())

    def save(self, alert: JobAlert) -> JobAlert:
        return self._save(alert)

    def find_by_id(self, alert_id: str) -> Optional[JobAlert]:
        model = self._get_model(alert_id)
        return self.mapper.model_to_domain(model) if model else None

    def find_by_user(self, user_id: str) -> List[JobAlert]:
        models = (
            self.session.query(JobAlertModel)
            .filter_by(user_id=user_id)
            .order_by(JobAlertModel.created_at.desc())
            .all()
        )
        return [self.mapper.model_to_domain(model) for model in models]

    def find_active(self) -> List[JobAlert]:
        models = (
            self.session.query(JobAlertModel)
            .filter(JobAlertModel.active.is_(True))
            .order_by(JobAlertModel.created_at)
            .all()
        )
        return [self.mapper.model_to_domain(model) for model in models]

    def delete(self, alert_id: str) -> None:
        model = self._get_model(alert_id)
        if model is not None:
            self.session.delete(model)
            self._flush()
