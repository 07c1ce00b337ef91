"""
Job use cases for the application layer.
Posting, search, applications, job alerts and admin moderation.
"""

import logging
from typing import List

from skilllink.application.use_cases.base_use_case import (
    CommandUseCase, QueryUseCase, PaginatedQueryUseCase, AuthorizedUseCase
)
from skilllink.application.dto.base_dto import EntityRequestDTO, ListResponseDTO
from skilllink.application.dto.job_dto import (
    CreateJobRequestDTO, JobSearchRequestDTO, JobResponseDTO, ApplyToJobRequestDTO,
    ApplicationDecisionRequestDTO, ApplicationResponseDTO, ModerateJobRequestDTO,
    FeatureJobRequestDTO, ModerationListRequestDTO, ScrapingLogResponseDTO, CreateJobAlertRequestDTO,
    JobAlertResponseDTO
)
from skilllink.config import settings
from skilllink.domain.models.base import (
    BusinessRuleViolation, EntityNotFoundError, DuplicateEntityError, AuthorizationError, utc_now
)
from skilllink.domain.models.alert import AlertFrequency, JobAlert
from skilllink.domain.models.job import (
    Job, JobApplication, JobStatus, JobVerificationStatus, PLATFORM_SOURCE
)
from skilllink.domain.models.user import UserRole


logger = logging.getLogger(__name__)


class PostJobUseCase(AuthorizedUseCase, CommandUseCase[CreateJobRequestDTO, JobResponseDTO]):
    """Employers post open jobs; they stay unverified until an admin reviews them."""

    async def _check_authorization(self, request: CreateJobRequestDTO) -> None:
        self._require_role(UserRole.EMPLOYER)

    async def _execute_command_logic(self, request: CreateJobRequestDTO) -> JobResponseDTO:
        employer = self.uow.employers.find_by_user_id(self.current_user_id)
        if employer is None:
            raise BusinessRuleViolation("Create an employer account before posting jobs")

        job = Job(
            title=request.title,
            description=request.description,
            employer_id=self.current_user_id,
            company_name=employer.company_name,
            location=request.location,
            remote=request.remote,
            budget_min=request.budget_min,
            budget_max=request.budget_max,
            currency=request.currency,
            required_skills=request.required_skills,
            duration_days=request.duration_days,
            status=JobStatus.OPEN,
            source=PLATFORM_SOURCE,
            verification_status=JobVerificationStatus.UNVERIFIED,
        )
        employer.record_job_posted()

        saved = self.uow.jobs.save(job)
        self.uow.employers.save(employer)
        logger.info(f"Job {saved.id} posted by {self.current_user_id}")
        return JobResponseDTO.from_domain(saved)


class SearchJobsUseCase(PaginatedQueryUseCase[JobSearchRequestDTO, ListResponseDTO]):
    """Public search. Featured jobs come first, then the newest."""

    async def _execute_business_logic(self, request: JobSearchRequestDTO) -> ListResponseDTO:
        jobs, total = self.uow.jobs.search(
            now=utc_now(),
            query=request.query,
            skills=request.skills,
            remote=request.remote,
            min_budget=request.min_budget,
            location=request.location,
            limit=request.limit,
            offset=request.offset
        )
        return ListResponseDTO[JobResponseDTO].create(
            items=[JobResponseDTO.from_domain(job) for job in jobs],
            total=total,
            page=request.page,
            page_size=request.page_size
        )


class GetJobUseCase(QueryUseCase[EntityRequestDTO, JobResponseDTO]):

    async def _execute_business_logic(self, request: EntityRequestDTO) -> JobResponseDTO:
        job = self.uow.jobs.find_by_id(request.id)
        if job is None:
            raise EntityNotFoundError("Job", request.id)
        return JobResponseDTO.from_domain(job)


class ListMyJobsUseCase(AuthorizedUseCase, QueryUseCase[None, List[JobResponseDTO]]):

    async def _execute_business_logic(self, request: None) -> List[JobResponseDTO]:
        return [JobResponseDTO.from_domain(job) for job in self.uow.jobs.find_by_employer(self.current_user_id)]


class ApplyToJobUseCase(AuthorizedUseCase, CommandUseCase[ApplyToJobRequestDTO, ApplicationResponseDTO]):
    """Talent apply once per job."""

    async def _check_authorization(self, request: ApplyToJobRequestDTO) -> None:
        self._require_role(UserRole.TALENT)

    async def _execute_command_logic(self, request: ApplyToJobRequestDTO) -> ApplicationResponseDTO:
        job = self.uow.jobs.find_by_id(request.job_id)
        if job is None:
            raise EntityNotFoundError("Job", request.job_id)

        if self.uow.applications.find_by_job_and_applicant(job.id, self.current_user_id):
            raise DuplicateEntityError("JobApplication", "job_id", job.id)

        application = JobApplication.submit(job, self.current_user_id, request.proposal_text)
        saved = self.uow.applications.save(application)
        return ApplicationResponseDTO.from_domain(saved)


class ListJobApplicationsUseCase(AuthorizedUseCase, QueryUseCase[EntityRequestDTO, List[ApplicationResponseDTO]]):
    """Applications to one job, for its employer or an admin."""

    async def _execute_business_logic(self, request: EntityRequestDTO) -> List[ApplicationResponseDTO]:
        job = self.uow.jobs.find_by_id(request.id)
        if job is None:
            raise EntityNotFoundError("Job", request.id)
        if job.employer_id is None:
            self._require_role(UserRole.ADMIN)
        else:
            self._require_owner_or_role(job.employer_id, UserRole.ADMIN)

        return [ApplicationResponseDTO.from_domain(a) for a in self.uow.applications.find_by_job(job.id)]


class ListMyApplicationsUseCase(AuthorizedUseCase, QueryUseCase[None, List[ApplicationResponseDTO]]):

    async def _execute_business_logic(self, request: None) -> List[ApplicationResponseDTO]:
        applications = self.uow.applications.find_by_applicant(self.current_user_id)
        return [ApplicationResponseDTO.from_domain(a) for a in applications]


class DecideApplicationUseCase(AuthorizedUseCase, CommandUseCase[ApplicationDecisionRequestDTO, ApplicationResponseDTO]):
    """The job's employer accepts or rejects a pending application."""

    async def _execute_command_logic(self, request: ApplicationDecisionRequestDTO) -> ApplicationResponseDTO:
        application = self.uow.applications.find_by_id(request.application_id)
        if application is None:
            raise EntityNotFoundError("JobApplication", request.application_id)

        job = self.uow.jobs.find_by_id(application.job_id)
        if job is None:
            raise EntityNotFoundError("Job", application.job_id)
        if job.employer_id != self.current_user_id:
            raise AuthorizationError("Only the job's employer can decide on applications")

        if request.accept:
            application.accept(job.title)
            employer = self.uow.employers.find_by_user_id(self.current_user_id)
            if employer is not None:
                employer.record_hire()
                self.uow.employers.save(employer)
        else:
            application.reject(job.title)

        saved = self.uow.applications.save(application)
        return ApplicationResponseDTO.from_domain(saved)


# Job alerts

class CreateJobAlertUseCase(AuthorizedUseCase, CommandUseCase[CreateJobAlertRequestDTO, JobAlertResponseDTO]):

    async def _check_authorization(self, request: CreateJobAlertRequestDTO) -> None:
        self._require_role(UserRole.TALENT)

    async def _execute_command_logic(self, request: CreateJobAlertRequestDTO) -> JobAlertResponseDTO:
        alert = JobAlert(
            user_id=self.current_user_id,
            skills=request.skills,
            locations=request.locations,
            min_budget=request.min_budget,
            remote_only=request.remote_only,
            frequency=AlertFrequency(request.frequency),
        )
        saved = self.uow.job_alerts.save(alert)
        logger.info(f"Job alert {saved.id} created by {self.current_user_id} ({saved.frequency.value})")
        return JobAlertResponseDTO.from_domain(saved)


class ListMyJobAlertsUseCase(AuthorizedUseCase, QueryUseCase[None, List[JobAlertResponseDTO]]):

    async def _execute_business_logic(self, request: None) -> List[JobAlertResponseDTO]:
        alerts = self.uow.job_alerts.find_by_user(self.current_user_id)
        return [JobAlertResponseDTO.from_domain(alert) for alert in alerts]


class DeleteJobAlertUseCase(AuthorizedUseCase, CommandUseCase[EntityRequestDTO, None]):
    """Owners remove their own alerts."""

    async def _execute_command_logic(self, request: EntityRequestDTO) -> None:
        alert = self.uow.job_alerts.find_by_id(request.id)
        if alert is None:
            raise EntityNotFoundError("JobAlert", request.id)
        self._require_owner_or_role(alert.user_id, UserRole.ADMIN)
        self.uow.job_alerts.delete(alert.id)


# Moderation

class ModerateJobUseCase(AuthorizedUseCase, CommandUseCase[ModerateJobRequestDTO, JobResponseDTO]):

    async def _check_authorization(self, request: ModerateJobRequestDTO) -> None:
        self._require_role(UserRole.ADMIN)

    async def _execute_command_logic(self, request: ModerateJobRequestDTO) -> JobResponseDTO:
        job = self.uow.jobs.find_by_id(request.job_id)
        if job is None:
            raise EntityNotFoundError("Job", request.job_id)

        if request.approve:
            job.verify()
        else:
            job.reject()
        saved = self.uow.jobs.save(job)
        logger.info(f"Job {job.id} {'verified' if request.approve else 'rejected'} by {self.current_user_id}")
        return JobResponseDTO.from_domain(saved)


class FeatureJobUseCase(AuthorizedUseCase, CommandUseCase[FeatureJobRequestDTO, JobResponseDTO]):

    async def _check_authorization(self, request: FeatureJobRequestDTO) -> None:
        self._require_role(UserRole.ADMIN)

    async def _execute_command_logic(self, request: FeatureJobRequestDTO) -> JobResponseDTO:
        job = self.uow.jobs.find_by_id(request.job_id)
        if job is None:
            raise EntityNotFoundError("Job", request.job_id)

        if request.featured:
            job.feature(request.days or settings.featured_job_default_days)
        else:
            job.unfeature()
        saved = self.uow.jobs.save(job)
        return JobResponseDTO.from_domain(saved)


class ListJobsForModerationUseCase(AuthorizedUseCase, PaginatedQueryUseCase[ModerationListRequestDTO, ListResponseDTO]):

    async def _check_authorization(self, request: ModerationListRequestDTO) -> None:
        self._require_role(UserRole.ADMIN)

    async def _execute_business_logic(self, request: ModerationListRequestDTO) -> ListResponseDTO:
        status = JobVerificationStatus(request.verification_status) if request.verification_status else None
        jobs, total = self.uow.jobs.list_for_moderation(status, limit=request.limit, offset=request.offset)
        return ListResponseDTO[JobResponseDTO].create(
            items=[JobResponseDTO.from_domain(job) for job in jobs],
            total=total,
            page=request.page,
            page_size=request.page_size
        )


class ListScrapingLogsUseCase(AuthorizedUseCase, QueryUseCase[None, List[ScrapingLogResponseDTO]]):

    async def _check_authorization(self, request: None) -> None:
        self._require_role(UserRole.ADMIN)

    async def _execute_business_logic(self, request: None) -> List[ScrapingLogResponseDTO]:
        return [ScrapingLogResponseDTO.from_domain(log) for log in self.uow.scraping_logs.list_recent()]
