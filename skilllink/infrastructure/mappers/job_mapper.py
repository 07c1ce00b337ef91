"""
Job mappers for converting between domain entities and database models.
"""

from skilllink.domain.models.alert import JobAlert
from skilllink.domain.models.job import Job, JobApplication, JobScrapingLog
from skilllink.infrastructure.db.models import (
    JobModel, JobApplicationModel, JobScrapingLogModel, JobAlertModel
)
from .base import TIMESTAMP_FIELDS, copy_fields, read_fields


JOB_FIELDS = (
    "title", "description", "employer_id", "company_name", "location", "remote",
    "budget_min", "budget_max", "currency", "duration_days", "status", "source",
    "external_url", "verification_status", "is_featured", "featured_until",
)

APPLICATION_FIELDS = ("job_id", "applicant_id", "proposal_text", "status")

SCRAPING_LOG_FIELDS = (
    "jobs_found", "jobs_created", "jobs_rejected", "execution_time_ms", "status", "error_message",
)

ALERT_FIELDS = ("user_id", "min_budget", "frequency", "last_sent_at")


class JobMapper:
    """Maps between Job domain entity and JobModel database model."""

    def domain_to_model(self, job: Job) -> JobModel:
        model = JobModel(id=job.id)
        self.update_model(model, job)
        return model

    def update_model(self, model: JobModel, job: Job) -> None:
        copy_fields(job, model, ("created_at", "updated_at") + JOB_FIELDS)
        model.required_skills = list(job.required_skills)

    def model_to_domain(self, model: JobModel) -> Job:
        data = read_fields(model, TIMESTAMP_FIELDS + JOB_FIELDS)
        data["remote"] = bool(model.remote)
        data["is_featured"] = bool(model.is_featured)
        return Job(
            required_skills=list(model.required_skills or []),
            version=model.version or 1,
            **data
        )


class JobApplicationMapper:

    def domain_to_model(self, application: JobApplication) -> JobApplicationModel:
        model = JobApplicationModel(id=application.id)
        self.update_model(model, application)
        return model

    def update_model(self, model: JobApplicationModel, application: JobApplication) -> None:
        copy_fields(application, model, ("created_at", "updated_at") + APPLICATION_FIELDS)

    def model_to_domain(self, model: JobApplicationModel) -> JobApplication:
        return JobApplication(**read_fields(model, TIMESTAMP_FIELDS + APPLICATION_FIELDS))


class JobScrapingLogMapper:

    def domain_to_model(self, log: JobScrapingLog) -> JobScrapingLogModel:
        model = JobScrapingLogModel()
        copy_fields(log, model, TIMESTAMP_FIELDS + SCRAPING_LOG_FIELDS)
        return model

    def model_to_domain(self, model: JobScrapingLogModel) -> JobScrapingLog:
        return JobScrapingLog(**read_fields(model, TIMESTAMP_FIELDS + SCRAPING_LOG_FIELDS))


class JobAlertMapper:

    def domain_to_model(self, alert: JobAlert) -> JobAlertModel:
        model = JobAlertModel(id=alert.id)
        self.update_model(model, alert)
        return model

    def update_model(self, model: JobAlertModel, alert: JobAlert) -> None:
        copy_fields(alert, model, ("created_at", "updated_at", "remote_only", "active") + ALERT_FIELDS)
        model.skills = list(alert.skills)
        model.locations = list(alert.locations)

    def model_to_domain(self, model: JobAlertModel) -> JobAlert:
        return JobAlert(
            skills=list(model.skills or []),
            locations=list(model.locations or []),
            remote_only=bool(model.remote_only),
            active=bool(model.active),
            **read_fields(model, TIMESTAMP_FIELDS + ALERT_FIELDS)
        )
