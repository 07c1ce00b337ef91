"""
Unit tests for job posting, search, applications, alerts and moderation.
"""

import pytest
from datetime import timedelta

from skilllink.application.dto.base_dto import EntityRequestDTO
from skilllink.application.dto.job_dto import (
    CreateJobRequestDTO, JobSearchRequestDTO, ApplyToJobRequestDTO, ApplicationDecisionRequestDTO,
    ModerateJobRequestDTO, FeatureJobRequestDTO, CreateJobAlertRequestDTO
)
from skilllink.application.use_cases.job_use_cases import (
    PostJobUseCase, SearchJobsUseCase, ApplyToJobUseCase, DecideApplicationUseCase,
    ModerateJobUseCase, FeatureJobUseCase, CreateJobAlertUseCase, ListMyJobAlertsUseCase,
    DeleteJobAlertUseCase
)
from skilllink.domain.models.base import utc_now
from skilllink.domain.models.job import ApplicationStatus, JobVerificationStatus


async def run(use_case_class, uow, user_id, roles, request):
    use_case = use_case_class(uow=uow)
    if user_id is not None:
        use_case.set_current_user(user_id, roles)
    return await use_case.execute(request)


async def search(uow, **filters):
    result = await run(SearchJobsUseCase, uow, None, None, JobSearchRequestDTO(**filters))
    assert result.success is True
    return result.data


def ids(listing):
    return [job.id for job in listing.items]


class TestPostJob:
    """Test cases for employer postings."""

    @pytest.mark.asyncio
    async def test_post_counts_towards_employer(self, uow, marketplace):
        request = CreateJobRequestDTO(
            title="Mobile developer", description="Ship our Android app.",
            budget_min=400, budget_max=800, required_skills=["Kotlin"]
        )

        first = await run(PostJobUseCase, uow, marketplace.employer_id, ["employer"], request)
        await run(PostJobUseCase, uow, marketplace.employer_id, ["employer"], request)

        assert first.success is True
        assert first.data.verification_status == JobVerificationStatus.UNVERIFIED.value
        assert first.data.company_name == "Lagos Widgets"
        assert uow.employers.find_by_user_id(marketplace.employer_id).total_jobs_posted == 2

    @pytest.mark.asyncio
    async def test_talent_cannot_post(self, uow, marketplace):
        request = CreateJobRequestDTO(title="Any job", description="Anything.", budget_min=1, budget_max=2)

        result = await run(PostJobUseCase, uow, marketplace.talent_id, ["talent"], request)

        assert result.error_code == "FORBIDDEN"

    def test_budget_range_checked(self):
        with pytest.raises(ValueError):
            CreateJobRequestDTO(title="Any job", description="Anything.", budget_min=500, budget_max=100)


class TestSearchJobs:
    """Test cases for public job search."""

    @pytest.mark.asyncio
    async def test_featured_first_then_newest(self, uow, marketplace):
        now = utc_now()
        oldest = marketplace.open_job(title="Oldest posting", created_at=now - timedelta(days=3))
        lapsed = marketplace.open_job(title="Lapsed feature", created_at=now - timedelta(days=2),
                                      is_featured=True, featured_until=now - timedelta(hours=1))
        newest = marketplace.open_job(title="Newest posting", created_at=now - timedelta(hours=1))

        featured = await run(FeatureJobUseCase, uow, marketplace.admin_id, ["admin"],
                             FeatureJobRequestDTO(job_id=oldest.id, days=3))
        assert featured.success is True

        listing = await search(uow)

        assert ids(listing) == [oldest.id, newest.id, lapsed.id]
        assert listing.total == 3

    @pytest.mark.asyncio
    async def test_rejected_and_closed_jobs_hidden(self, uow, marketplace):
        visible = marketplace.open_job(title="Awaiting review")
        rejected = marketplace.open_job(title="Spam posting")
        cancelled = marketplace.open_job(title="Cancelled posting")
        cancelled.cancel()
        uow.jobs.save(cancelled)
        uow.commit()

        await run(ModerateJobUseCase, uow, marketplace.admin_id, ["admin"],
                  ModerateJobRequestDTO(job_id=rejected.id, approve=False))

        assert ids(await search(uow)) == [visible.id]

    @pytest.mark.asyncio
    async def test_filters(self, uow, marketplace):
        now = utc_now()
        flutter = marketplace.open_job(title="Flutter rider app", required_skills=["Flutter", "Dart"],
                                       remote=True, location="Lagos", budget_min=500, budget_max=900,
                                       created_at=now - timedelta(hours=2))
        django = marketplace.open_job(title="Django API", required_skills=["Python", "Django"],
                                      remote=False, location="Nairobi", budget_min=1500, budget_max=2500,
                                      created_at=now - timedelta(hours=1))

        assert ids(await search(uow, skills=["dart"])) == [flutter.id]
        assert ids(await search(uow, skills=["Dart", "Django"])) == [django.id, flutter.id]
        assert ids(await search(uow, remote=True)) == [flutter.id]
        assert ids(await search(uow, min_budget=1000)) == [django.id]
        assert ids(await search(uow, location="nairobi")) == [django.id]
        assert ids(await search(uow, query="rider")) == [flutter.id]

    @pytest.mark.asyncio
    async def test_pagination(self, uow, marketplace):
        now = utc_now()
        for n in range(3):
            marketplace.open_job(title=f"Posting number {n}", created_at=now - timedelta(hours=n))

        page = await search(uow, page=2, page_size=2)

        assert page.total == 3
        assert [job.title for job in page.items] == ["Posting number 2"]


class TestApplications:
    """Test cases for applying and deciding."""

    @pytest.mark.asyncio
    async def test_accept_counts_hire(self, uow, marketplace):
        job = marketplace.open_job()
        applied = await run(ApplyToJobUseCase, uow, marketplace.talent_id, ["talent"],
                            ApplyToJobRequestDTO(job_id=job.id, proposal_text="I shipped three of these."))

        decided = await run(DecideApplicationUseCase, uow, marketplace.employer_id, ["employer"],
                            ApplicationDecisionRequestDTO(application_id=applied.data.id, accept=True))

        assert decided.success is True
        assert decided.data.status == ApplicationStatus.ACCEPTED.value
        assert uow.employers.find_by_user_id(marketplace.employer_id).successful_hires == 1

    @pytest.mark.asyncio
    async def test_rejection_does_not_count_hire(self, uow, marketplace):
        job = marketplace.open_job()
        applied = await run(ApplyToJobUseCase, uow, marketplace.talent_id, ["talent"],
                            ApplyToJobRequestDTO(job_id=job.id, proposal_text="I shipped three of these."))

        decided = await run(DecideApplicationUseCase, uow, marketplace.employer_id, ["employer"],
                            ApplicationDecisionRequestDTO(application_id=applied.data.id, accept=False))

        assert decided.data.status == ApplicationStatus.REJECTED.value
        assert uow.employers.find_by_user_id(marketplace.employer_id).successful_hires == 0

    @pytest.mark.asyncio
    async def test_one_application_per_job(self, uow, marketplace):
        job = marketplace.open_job()
        request = ApplyToJobRequestDTO(job_id=job.id, proposal_text="I shipped three of these.")
        await run(ApplyToJobUseCase, uow, marketplace.talent_id, ["talent"], request)

        again = await run(ApplyToJobUseCase, uow, marketplace.talent_id, ["talent"], request)

        assert again.error_code == "DUPLICATE_ENTITY"

    @pytest.mark.asyncio
    async def test_only_job_owner_decides(self, uow, marketplace):
        job = marketplace.open_job()
        applied = await run(ApplyToJobUseCase, uow, marketplace.talent_id, ["talent"],
                            ApplyToJobRequestDTO(job_id=job.id, proposal_text="I shipped three of these."))

        decided = await run(DecideApplicationUseCase, uow, "employer-2", ["employer"],
                            ApplicationDecisionRequestDTO(application_id=applied.data.id, accept=True))

        assert decided.error_code == "FORBIDDEN"


class TestJobAlerts:
    """Test cases for saved job alerts."""

    async def create(self, uow, user_id, roles, **fields):
        return await run(CreateJobAlertUseCase, uow, user_id, roles, CreateJobAlertRequestDTO(**fields))

    @pytest.mark.asyncio
    async def test_talent_saves_alert(self, uow, marketplace):
        result = await self.create(uow, marketplace.talent_id, ["talent"],
                                   skills=[" Flutter ", ""], locations=["Lagos", "Lagos ", "Accra"],
                                   min_budget=300, frequency="weekly")

        assert result.success is True
        assert result.data.skills == ["Flutter"]
        assert result.data.locations == ["Lagos", "Accra"]
        assert result.data.frequency == "weekly"
        assert result.data.last_sent_at is None

        listed = await run(ListMyJobAlertsUseCase, uow, marketplace.talent_id, ["talent"], None)
        assert [alert.id for alert in listed.data] == [result.data.id]

    @pytest.mark.asyncio
    async def test_employers_cannot_save_alerts(self, uow, marketplace):
        result = await self.create(uow, marketplace.employer_id, ["employer"])

        assert result.error_code == "FORBIDDEN"

    def test_unknown_frequency_rejected(self):
        with pytest.raises(ValueError):
            CreateJobAlertRequestDTO(frequency="hourly")

    @pytest.mark.asyncio
    async def test_only_owner_deletes(self, uow, marketplace):
        created = await self.create(uow, marketplace.talent_id, ["talent"])
        request = EntityRequestDTO(id=created.data.id)

        stranger = await run(DeleteJobAlertUseCase, uow, "talent-2", ["talent"], request)
        owner = await run(DeleteJobAlertUseCase, uow, marketplace.talent_id, ["talent"], request)

        assert stranger.error_code == "FORBIDDEN"
        assert owner.success is True
        assert uow.job_alerts.find_by_user(marketplace.talent_id) == []

    @pytest.mark.asyncio
    async def test_delete_missing_alert(self, uow, marketplace):
        result = await run(DeleteJobAlertUseCase, uow, marketplace.talent_id, ["talent"],
                           EntityRequestDTO(id="nope"))

        assert result.error_code == "ENTITY_NOT_FOUND"
