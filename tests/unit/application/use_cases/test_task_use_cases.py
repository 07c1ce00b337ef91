"""
Unit tests for the scheduled maintenance use cases.
"""

import pytest
from datetime import timedelta

from skilllink.application.dto.task_dto import RunTaskRequestDTO
from skilllink.application.use_cases.task_use_cases import (
    AggregateJobsUseCase, SendJobAlertsUseCase, EscalateDisputesUseCase, MilestoneRemindersUseCase
)
from skilllink.domain.events.base import get_event_dispatcher
from skilllink.domain.models.alert import AlertFrequency, JobAlert
from skilllink.domain.models.base import utc_now
from skilllink.domain.models.dispute import Dispute
from skilllink.domain.models.job import JobListing, ScrapingStatus
from skilllink.domain.models.reminder import ReminderType
from skilllink.domain.models.user import RoleAssignment, UserRole
from skilllink.infrastructure.job_sources.base import JobSource


def make_listing(**kwargs):
    fields = dict(
        title="Backend Engineer",
        company="Remote Co",
        description="Build and maintain Python services on PostgreSQL for a distributed team. " * 2,
        location=None,
        budget_min=4000,
        budget_max=6000,
        required_skills=["Python", "PostgreSQL"],
        remote=True,
        url="https://jobs.example.com/backend",
        source="fake",
    )
    fields.update(kwargs)
    return JobListing(**fields)


class FakeJobSource(JobSource):
    name = "fake"

    def __init__(self, listings=None, error=None, failed_requests=0):
        super().__init__()
        self.listings = listings or []
        self.error = error
        self.failed_requests = failed_requests

    def fetch(self):
        if self.error:
            raise self.error
        return list(self.listings)


async def run(use_case):
    return await use_case.execute(RunTaskRequestDTO())


def events_of(event_type):
    return [e for e in get_event_dispatcher().get_event_log() if e["event_type"] == event_type]


class TestAggregateJobs:
    """Test cases for job aggregation."""

    @pytest.mark.asyncio
    async def test_stores_curated_listings(self, uow):
        source = FakeJobSource([make_listing(), make_listing(title="Frontend Engineer")])

        result = await run(AggregateJobsUseCase(sources=[source], uow=uow))

        assert result.success is True
        assert result.data.jobs_found == 2
        assert result.data.jobs_created == 2
        assert result.data.sources == ["fake"]
        assert uow.jobs.exists_by_title_and_company("Frontend Engineer", "Remote Co") is True

    @pytest.mark.asyncio
    async def test_rejects_low_quality_and_duplicates(self, uow):
        """Test duplicates within the run and against stored jobs count as rejected."""
        first = FakeJobSource([make_listing()])
        await run(AggregateJobsUseCase(sources=[first], uow=uow))

        second = FakeJobSource([
            make_listing(),
            make_listing(title="Data Analyst"),
            make_listing(title="Data Analyst"),
            make_listing(title="Designer", company=None),
        ])
        result = await run(AggregateJobsUseCase(sources=[second], uow=uow))

        assert result.data.jobs_created == 1
        assert result.data.duplicates_skipped == 2
        assert result.data.jobs_rejected == 3

    @pytest.mark.asyncio
    async def test_failing_source_does_not_stop_run(self, uow):
        broken = FakeJobSource(error=RuntimeError("board offline"))
        flaky = FakeJobSource([make_listing()], failed_requests=1)

        result = await run(AggregateJobsUseCase(sources=[broken, flaky], uow=uow))

        assert result.data.success is True
        assert result.data.jobs_created == 1
        assert result.data.failed_sources == ["fake", "fake"]

    @pytest.mark.asyncio
    async def test_run_is_logged(self, uow):
        await run(AggregateJobsUseCase(sources=[FakeJobSource([make_listing()])], uow=uow))

        logs = uow.scraping_logs.list_recent()

        assert len(logs) == 1
        assert logs[0].status == ScrapingStatus.SUCCESS
        assert logs[0].jobs_created == 1

    @pytest.mark.asyncio
    async def test_admins_told_about_new_jobs(self, uow):
        await run(AggregateJobsUseCase(sources=[FakeJobSource([make_listing()])], uow=uow))

        [notice] = events_of("NewJobsAggregated")
        assert notice["data"]["jobs_created"] == 1

    @pytest.mark.asyncio
    async def test_no_notice_without_new_jobs(self, uow):
        await run(AggregateJobsUseCase(sources=[FakeJobSource([make_listing()])], uow=uow))
        get_event_dispatcher().clear_event_log()

        result = await run(AggregateJobsUseCase(sources=[FakeJobSource([make_listing()])], uow=uow))

        assert result.data.duplicates_skipped == 1
        assert events_of("NewJobsAggregated") == []


class TestEscalateDisputes:
    """Test cases for stale dispute escalation."""

    def add_dispute(self, uow, hours_old):
        dispute = Dispute(contract_id="contract-1", raised_by="employer-1", reason="Work never delivered at all")
        dispute.created_at = utc_now() - timedelta(hours=hours_old)
        uow.disputes.save(dispute)
        uow.commit()
        uow.collect_events()
        return dispute

    @pytest.mark.asyncio
    async def test_escalates_stale_disputes_once(self, uow, marketplace):
        stale = self.add_dispute(uow, hours_old=72)
        self.add_dispute(uow, hours_old=2)

        first = await run(EscalateDisputesUseCase(escalation_hours=48, uow=uow))
        second = await run(EscalateDisputesUseCase(escalation_hours=48, uow=uow))

        assert first.data.escalated == 1
        assert first.data.dispute_ids == [stale.id]
        assert second.data.escalated == 0
        assert uow.escalations.exists_for_dispute(stale.id) is True

    @pytest.mark.asyncio
    async def test_skips_without_admin(self, uow):
        self.add_dispute(uow, hours_old=72)

        result = await run(EscalateDisputesUseCase(escalation_hours=48, uow=uow))

        assert result.data.escalated == 0
        assert result.data.skipped_without_admin == 1

    @pytest.mark.asyncio
    async def test_escalates_to_first_admin(self, uow, marketplace):
        uow.roles.add(RoleAssignment(user_id="admin-2", role=UserRole.ADMIN))
        uow.commit()
        stale = self.add_dispute(uow, hours_old=72)

        await run(EscalateDisputesUseCase(escalation_hours=48, uow=uow))

        escalated = events_of("DisputeEscalated")
        assert escalated[0]["data"]["dispute_id"] == stale.id
        assert escalated[0]["data"]["escalated_to"] == uow.roles.find_user_ids_with_role(UserRole.ADMIN)[0]


class TestMilestoneReminders:
    """Test cases for milestone deadline reminders."""

    def schedule(self, uow, contract, due_in_hours):
        contract = uow.contracts.find_by_id_for_update(contract.id)
        milestone = contract.milestones[0]
        milestone.due_date = utc_now() + timedelta(hours=due_in_hours)
        contract.start_milestone(milestone.id, contract.talent_id)
        uow.contracts.save(contract)
        uow.commit()
        uow.collect_events()
        return milestone

    @pytest.mark.asyncio
    async def test_due_soon_sent_once(self, uow, marketplace):
        milestone = self.schedule(uow, marketplace.funded_contract(), due_in_hours=5)

        first = await run(MilestoneRemindersUseCase(reminder_hours=24, uow=uow))
        second = await run(MilestoneRemindersUseCase(reminder_hours=24, uow=uow))

        assert first.data.due_soon_sent == 1
        assert first.data.milestone_ids == [milestone.id]
        assert second.data.due_soon_sent == 0
        assert uow.reminders.exists(milestone.id, ReminderType.DUE_SOON) is True

    @pytest.mark.asyncio
    async def test_overdue(self, uow, marketplace):
        milestone = self.schedule(uow, marketplace.funded_contract(), due_in_hours=-3)

        result = await run(MilestoneRemindersUseCase(reminder_hours=24, uow=uow))

        assert result.data.overdue_sent == 1
        assert result.data.due_soon_sent == 0
        assert uow.reminders.exists(milestone.id, ReminderType.OVERDUE) is True

    @pytest.mark.asyncio
    async def test_far_deadline_ignored(self, uow, marketplace):
        self.schedule(uow, marketplace.funded_contract(), due_in_hours=24 * 10)

        result = await run(MilestoneRemindersUseCase(reminder_hours=24, uow=uow))

        assert result.data.due_soon_sent == 0
        assert result.data.overdue_sent == 0


class TestSendJobAlerts:
    """Test cases for the job alert emails."""

    def add_alert(self, uow, **fields):
        alert = uow.job_alerts.save(JobAlert(user_id="talent-1", **fields))
        uow.commit()
        uow.collect_events()
        return alert

    @pytest.mark.asyncio
    async def test_matching_jobs_are_sent(self, uow, marketplace):
        alert = self.add_alert(uow, skills=["python"])
        match = marketplace.open_job(title="Django API", required_skills=["Python", "Django"])
        marketplace.open_job(title="Brand refresh", required_skills=["Figma"])

        result = await run(SendJobAlertsUseCase(uow=uow))

        assert result.data.alerts_processed == 1
        assert result.data.alerts_sent == 1
        assert result.data.alert_ids == [alert.id]
        [email] = events_of("JobAlertMatched")
        assert email["data"]["user_id"] == "talent-1"
        assert [job["id"] for job in email["data"]["jobs"]] == [match.id]
        assert uow.job_alerts.find_by_id(alert.id).last_sent_at is not None

    @pytest.mark.asyncio
    async def test_frequency_is_respected(self, uow, marketplace):
        now = utc_now()
        self.add_alert(uow, frequency=AlertFrequency.DAILY, last_sent_at=now - timedelta(hours=2))
        self.add_alert(uow, frequency=AlertFrequency.WEEKLY, last_sent_at=now - timedelta(days=3))
        due = self.add_alert(uow, frequency=AlertFrequency.DAILY, last_sent_at=now - timedelta(hours=25))
        marketplace.open_job(created_at=now - timedelta(hours=1))

        result = await run(SendJobAlertsUseCase(uow=uow))

        assert result.data.alerts_processed == 3
        assert result.data.alert_ids == [due.id]

    @pytest.mark.asyncio
    async def test_only_jobs_since_last_email(self, uow, marketplace):
        now = utc_now()
        alert = self.add_alert(uow, frequency=AlertFrequency.INSTANT, last_sent_at=now - timedelta(hours=1))
        marketplace.open_job(title="Already emailed", created_at=now - timedelta(hours=2))
        fresh = marketplace.open_job(title="Posted just now", created_at=now - timedelta(minutes=10))

        await run(SendJobAlertsUseCase(uow=uow))

        [email] = events_of("JobAlertMatched")
        assert email["data"]["alert_id"] == alert.id
        assert [job["id"] for job in email["data"]["jobs"]] == [fresh.id]

    @pytest.mark.asyncio
    async def test_first_run_looks_back_one_day(self, uow, marketplace):
        now = utc_now()
        self.add_alert(uow)
        marketplace.open_job(title="Last week", created_at=now - timedelta(days=7))

        result = await run(SendJobAlertsUseCase(uow=uow))

        assert result.data.alerts_sent == 0

    @pytest.mark.asyncio
    async def test_no_matches_keeps_alert_due(self, uow, marketplace):
        alert = self.add_alert(uow, remote_only=True)
        marketplace.open_job(remote=False)

        result = await run(SendJobAlertsUseCase(uow=uow))

        assert result.data.alerts_sent == 0
        assert events_of("JobAlertMatched") == []
        assert uow.job_alerts.find_by_id(alert.id).last_sent_at is None

    @pytest.mark.asyncio
    async def test_closed_jobs_and_paused_alerts_skipped(self, uow, marketplace):
        self.add_alert(uow, active=False)
        live = self.add_alert(uow)
        job = marketplace.open_job()
        job.cancel()
        uow.jobs.save(job)
        uow.commit()

        result = await run(SendJobAlertsUseCase(uow=uow))

        assert result.data.alerts_processed == 1
        assert result.data.alerts_sent == 0
        assert uow.job_alerts.find_by_id(live.id).last_sent_at is None

    @pytest.mark.asyncio
    async def test_email_lists_at_most_max_listed(self, uow, marketplace):
        self.add_alert(uow)
        for n in range(3):
            marketplace.open_job(title=f"Opening number {n}")

        await run(SendJobAlertsUseCase(max_listed=2, uow=uow))

        [email] = events_of("JobAlertMatched")
        assert email["data"]["total_matches"] == 3
        assert len(email["data"]["jobs"]) == 2
