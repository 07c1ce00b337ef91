"""
Unit tests for the third-party job board clients.
"""

import requests
from unittest.mock import Mock

from skilllink.infrastructure.job_sources import (
    RemotiveJobSource, AdzunaJobSource, JSearchJobSource, build_job_sources
)
from skilllink.infrastructure.job_sources.base import round_half_up
from skilllink.infrastructure.job_sources.remotive import REMOTIVE_CATEGORIES
from skilllink.domain.services.job_curation_service import JobCurationService


def json_response(payload):
    response = Mock()
    response.json.return_value = payload
    response.raise_for_status.return_value = None
    return response


def session_returning(*responses):
    session = Mock(spec=requests.Session)
    session.get.side_effect = list(responses)
    return session


class TestRemotiveJobSource:
    """Test cases for the Remotive client."""

    def test_fetch_maps_jobs(self):
        job = {
            "title": "Senior React Developer",
            "company_name": "Remote Co",
            "description": "Build dashboards with React and TypeScript.",
            "candidate_required_location": "Africa",
            "tags": ["react", "typescript"],
            "url": "https://remotive.com/jobs/1",
        }
        responses = [json_response({"jobs": [job]})] + [json_response({"jobs": []})] * (len(REMOTIVE_CATEGORIES) - 1)
        source = RemotiveJobSource(session=session_returning(*responses), result_limit=10)

        listings = source.fetch()

        assert len(listings) == 1
        listing = listings[0]
        assert listing.company == "Remote Co"
        assert listing.location == "Africa"
        assert listing.budget_min == 8000
        assert listing.budget_max == 12000
        assert listing.required_skills == ["react", "typescript"]
        assert listing.remote is True
        assert listing.source == "remotive"
        params = source.session.get.call_args_list[0].kwargs["params"]
        assert params == {"category": "software-dev", "limit": 10}

    def test_missing_fields_use_defaults(self):
        """Test blank listings fall back to placeholders and extracted skills."""
        responses = [json_response({"jobs": [{}]})] + [json_response({})] * (len(REMOTIVE_CATEGORIES) - 1)
        source = RemotiveJobSource(session=session_returning(*responses))

        listing = source.fetch()[0]

        assert listing.title == "Untitled Position"
        assert listing.company == "Unknown Company"
        assert listing.location == "Worldwide"
        assert listing.required_skills == ["Communication", "Problem Solving", "Team Work"]

    def test_failed_request_is_skipped(self):
        """Test one failing category does not stop the others."""
        responses = [requests.ConnectionError("timeout")] + [json_response({"jobs": [{"title": "Designer"}]})] * (len(REMOTIVE_CATEGORIES) - 1)
        source = RemotiveJobSource(session=session_returning(*responses))

        listings = source.fetch()

        assert source.failed_requests == 1
        assert len(listings) == len(REMOTIVE_CATEGORIES) - 1

    def test_invalid_json_counts_as_failure(self):
        bad = Mock()
        bad.raise_for_status.return_value = None
        bad.json.side_effect = ValueError("not json")
        responses = [bad] * len(REMOTIVE_CATEGORIES)
        source = RemotiveJobSource(session=session_returning(*responses))

        assert source.fetch() == []
        assert source.failed_requests == len(REMOTIVE_CATEGORIES)


class TestAdzunaJobSource:

    def test_annual_salary_becomes_monthly(self):
        result = {
            "title": "Backend Engineer",
            "company": {"display_name": "Acme"},
            "location": {"display_name": "London"},
            "description": "Remote friendly role working with Python and Docker.",
            "salary_min": 60000,
            "salary_max": 90000,
            "redirect_url": "https://adzuna.example.com/1",
        }
        source = AdzunaJobSource(
            "app-id", "app-key", countries=["gb"],
            session=session_returning(json_response({"results": [result]}), json_response({"results": []}))
        )

        listing = source.fetch()[0]

        assert listing.budget_min == 5000
        assert listing.budget_max == 7500
        assert listing.required_skills == ["Python", "Docker"]
        assert listing.remote is True
        params = source.session.get.call_args_list[0].kwargs["params"]
        assert params["app_id"] == "app-id"
        assert params["what"] == "it-jobs"

    def test_salary_defaults(self):
        source = AdzunaJobSource("app-id", "app-key", countries=["gb"],
                                 session=session_returning(json_response({"results": [{}]}), json_response({})))

        listing = source.fetch()[0]

        assert listing.budget_min == 2500
        assert listing.budget_max == 3750
        assert listing.remote is False


class TestJSearchJobSource:

    def test_fetch_sends_rapidapi_headers(self):
        result = {
            "job_title": "Data Analyst",
            "employer_name": "Insights Ltd",
            "job_description": "SQL and Python reporting.",
            "job_city": "Nairobi",
            "job_country": "KE",
            "job_is_remote": False,
            "job_min_salary": 1200.4,
        }
        source = JSearchJobSource("rapid-key", queries=["data analyst"],
                                  session=session_returning(json_response({"data": [result]})))

        listing = source.fetch()[0]

        assert listing.location == "Nairobi, KE"
        assert listing.budget_min == 1200
        assert listing.budget_max == 1801
        assert listing.required_skills == ["Python", "SQL"]
        headers = source.session.get.call_args.kwargs["headers"]
        assert headers["X-RapidAPI-Key"] == "rapid-key"


class TestHelpers:

    def test_round_half_up(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(1800.6) == 1801
        assert round_half_up(-2.5) == -3

    def test_remotive_always_configured(self):
        sources = build_job_sources(JobCurationService())
        assert sources[0].name == "remotive"
