"""
Unit tests for jobs, applications and profiles.
"""

import pytest
from datetime import datetime, timedelta

from skilllink.domain.models.base import ValidationError, BusinessRuleViolation
from skilllink.domain.models.job import (
    Job, JobApplication, JobStatus, JobVerificationStatus, ApplicationStatus
)
from skilllink.domain.models.user import Profile, Employer, VerificationLevel


def make_job(**kwargs):
    fields = dict(
        title="Frontend developer",
        description="Build landing pages",
        employer_id="employer-1",
        budget_min=300,
        budget_max=600,
    )
    fields.update(kwargs)
    return Job(**fields)


class TestJob:
    """Test cases for job postings."""

    def test_budget_range(self):
        with pytest.raises(ValidationError):
            make_job(budget_min=600, budget_max=300)

    def test_short_title(self):
        with pytest.raises(ValidationError):
            make_job(title="UI")

    def test_status_transitions(self):
        """Test open -> in progress -> completed, and no way back."""
        job = make_job()
        job.start_work()
        job.complete()

        assert job.status == JobStatus.COMPLETED
        with pytest.raises(BusinessRuleViolation):
            job.cancel()

    def test_featured_window(self):
        """Test a featured job stops being featured when the window ends."""
        job = make_job()
        now = datetime(2024, 1, 1)
        job.feature(days=7, now=now)

        assert job.is_featured_at(now + timedelta(days=6)) is True
        assert job.is_featured_at(now + timedelta(days=8)) is False

    def test_rejected_job_hidden_and_unfeatured(self):
        """Test rejecting a job drops its feature and blocks applications."""
        job = make_job()
        job.feature(days=3)
        job.reject()

        assert job.verification_status == JobVerificationStatus.REJECTED
        assert job.is_featured is False
        assert job.accepts_applications() is False
        with pytest.raises(BusinessRuleViolation):
            job.feature(days=3)

    def test_aggregated_job(self):
        job = make_job(employer_id=None, source="remotive")
        assert job.is_aggregated is True


class TestJobApplication:
    """Test cases for applying to jobs."""

    def test_submit_and_accept(self):
        job = make_job()
        application = JobApplication.submit(job, "talent-1", "I have five years of React experience.")
        application.accept(job.title)

        assert application.status == ApplicationStatus.ACCEPTED
        assert len(application.pull_events()) == 2

    def test_employer_cannot_apply_to_own_job(self):
        job = make_job()
        with pytest.raises(BusinessRuleViolation):
            JobApplication.submit(job, "employer-1", "Applying to my own job for fun.")

    def test_closed_job_rejects_applications(self):
        job = make_job()
        job.start_work()
        with pytest.raises(BusinessRuleViolation):
            JobApplication.submit(job, "talent-1", "Please consider my proposal.")

    def test_decision_only_once(self):
        job = make_job()
        application = JobApplication.submit(job, "talent-1", "I have five years of React experience.")
        application.reject(job.title)

        with pytest.raises(BusinessRuleViolation):
            application.accept(job.title)


class TestProfiles:

    def test_skills_deduplicated(self):
        """Test blank and case-insensitive duplicate skills are dropped."""
        profile = Profile(user_id="talent-1", full_name="Ada")
        profile.update_info(skills=["Python", "python", " ", "SQL"])

        assert profile.skills == ["Python", "SQL"]

    def test_skill_limit(self):
        profile = Profile(user_id="talent-1", full_name="Ada")
        with pytest.raises(ValidationError):
            profile.set_skills([f"skill-{i}" for i in range(5)], max_skills=4)

    def test_employer_verification_tiers(self):
        employer = Employer(user_id="employer-1", company_name="Lagos Widgets")
        employer.verify(VerificationLevel.PREMIUM, "admin-1", "Documents checked")

        assert employer.verified is True
        assert employer.verification_level == VerificationLevel.PREMIUM

        employer.reject_verification("admin-1", "Registration expired")
        assert employer.verified is False
        assert employer.verification_level == VerificationLevel.UNVERIFIED

    def test_unverified_is_not_a_grant(self):
        employer = Employer(user_id="employer-1", company_name="Lagos Widgets")
        with pytest.raises(BusinessRuleViolation):
            employer.verify(VerificationLevel.UNVERIFIED, "admin-1")
