"""
Unit tests for saved job alerts.
"""

import pytest
from datetime import datetime, timedelta

from skilllink.domain.models.alert import JobAlert, AlertFrequency
from skilllink.domain.models.base import ValidationError
from skilllink.domain.models.job import Job, JobStatus, JobVerificationStatus


NOW = datetime(2024, 6, 10, 12, 0)


def make_job(**kwargs):
    fields = dict(
        title="Django API developer",
        description="Build REST endpoints.",
        company_name="Nairobi Labs",
        location="Nairobi, Kenya",
        budget_min=800,
        budget_max=1500,
        required_skills=["Python", "Django"],
    )
    fields.update(kwargs)
    return Job(**fields)


class TestDueness:
    """Test cases for frequency windows."""

    def test_never_sent_is_due(self):
        for frequency in AlertFrequency:
            assert JobAlert(user_id="talent-1", frequency=frequency).is_due(NOW) is True

    def test_daily_waits_a_day(self):
        alert = JobAlert(user_id="talent-1", frequency=AlertFrequency.DAILY, last_sent_at=NOW - timedelta(hours=23))
        assert alert.is_due(NOW) is False

        alert.last_sent_at = NOW - timedelta(hours=24)
        assert alert.is_due(NOW) is True

    def test_weekly_waits_a_week(self):
        alert = JobAlert(user_id="talent-1", frequency=AlertFrequency.WEEKLY, last_sent_at=NOW - timedelta(days=6))
        assert alert.is_due(NOW) is False

        alert.last_sent_at = NOW - timedelta(days=7)
        assert alert.is_due(NOW) is True

    def test_instant_is_always_due(self):
        alert = JobAlert(user_id="talent-1", frequency=AlertFrequency.INSTANT, last_sent_at=NOW - timedelta(minutes=5))
        assert alert.is_due(NOW) is True

    def test_paused_alert_is_never_due(self):
        assert JobAlert(user_id="talent-1", active=False).is_due(NOW) is False

    def test_new_jobs_window(self):
        assert JobAlert(user_id="talent-1").matches_since(NOW) == NOW - timedelta(hours=24)

        sent = NOW - timedelta(days=3)
        assert JobAlert(user_id="talent-1", last_sent_at=sent).matches_since(NOW) == sent


class TestMatching:
    """Test cases for matching jobs against alert filters."""

    def test_empty_alert_matches_any_open_job(self):
        assert JobAlert(user_id="talent-1").matches(make_job()) is True

    def test_closed_and_rejected_jobs_never_match(self):
        alert = JobAlert(user_id="talent-1")

        assert alert.matches(make_job(status=JobStatus.CANCELLED)) is False
        assert alert.matches(make_job(verification_status=JobVerificationStatus.REJECTED)) is False
        assert alert.matches(make_job(verification_status=JobVerificationStatus.UNVERIFIED)) is True

    def test_skills_match_either_way_ignoring_case(self):
        job = make_job(required_skills=["PostgreSQL", "Python"])

        assert JobAlert(user_id="talent-1", skills=["postgres"]).matches(job) is True
        assert JobAlert(user_id="talent-1", skills=["Python 3"]).matches(job) is True
        assert JobAlert(user_id="talent-1", skills=["figma", "PYTHON"]).matches(job) is True
        assert JobAlert(user_id="talent-1", skills=["Figma"]).matches(job) is False

    def test_job_without_skills_fails_skill_filter(self):
        assert JobAlert(user_id="talent-1", skills=["Python"]).matches(make_job(required_skills=[])) is False

    def test_budget_compares_against_top_of_range(self):
        job = make_job(budget_min=800, budget_max=1500)

        assert JobAlert(user_id="talent-1", min_budget=1500).matches(job) is True
        assert JobAlert(user_id="talent-1", min_budget=1501).matches(job) is False

    def test_remote_only(self):
        alert = JobAlert(user_id="talent-1", remote_only=True)

        assert alert.matches(make_job(remote=False)) is False
        assert alert.matches(make_job(remote=True)) is True

    def test_locations_by_substring_and_remote_satisfies_any(self):
        alert = JobAlert(user_id="talent-1", locations=["lagos", "nairobi"])

        assert alert.matches(make_job(location="Nairobi, Kenya")) is True
        assert alert.matches(make_job(location="Accra, Ghana")) is False
        assert alert.matches(make_job(location=None, remote=True)) is True


class TestRecordSent:

    def test_records_time_and_lists_capped_jobs(self):
        alert = JobAlert(user_id="talent-1")
        jobs = [make_job(title=f"Role {n}") for n in range(3)]

        alert.record_sent(jobs, max_listed=2, now=NOW)

        assert alert.last_sent_at == NOW
        [event] = alert.pull_events()
        assert event.user_id == "talent-1"
        assert event.total_matches == 3
        assert [job["title"] for job in event.jobs] == ["Role 0", "Role 1"]

    def test_remote_job_without_location_listed_as_remote(self):
        alert = JobAlert(user_id="talent-1")

        alert.record_sent([make_job(location=None, remote=True)], max_listed=10, now=NOW)

        assert alert.pull_events()[0].jobs[0]["location"] == "Remote"


def test_alert_needs_owner_and_sane_budget():
    with pytest.raises(ValidationError):
        JobAlert()
    with pytest.raises(ValidationError):
        JobAlert(user_id="talent-1", min_budget=-1)
