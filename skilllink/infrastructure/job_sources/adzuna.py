"""Adzuna job search API. Needs an app id and key."""

import logging
from typing import List, Optional

from skilllink.domain.models.job import JobListing
from .base import JobSource, round_half_up


logger = logging.getLogger(__name__)

ADZUNA_URL = "https://api.adzuna.com/v1/api/jobs/{country}/search/1"
ADZUNA_CATEGORIES = ["it-jobs", "engineering-jobs"]
DEFAULT_ANNUAL_SALARY = 30000


class AdzunaJobSource(JobSource):
    """Salaries are annual on Adzuna and stored as monthly budgets."""

    name = "adzuna"

    def __init__(self, app_id: str, app_key: str, countries: Optional[List[str]] = None, **kwargs):
        super().__init__(**kwargs)
        self.app_id = app_id
        self.app_key = app_key
        self.countries = list(countries or ["gb", "us", "au"])

    def fetch(self) -> List[JobListing]:
        listings: List[JobListing] = []
        for country in self.countries[:3]:
            for category in ADZUNA_CATEGORIES:
                data = self._get_json(
                    ADZUNA_URL.format(country=country),
                    params={
                        "app_id": self.app_id,
                        "app_key": self.app_key,
                        "results_per_page": self.result_limit,
                        "what": category,
                        "content-type": "application/json",
                    }
                )
                if data is None:
                    continue
                for result in data.get("results") or []:
                    listings.append(self._to_listing(result))
        logger.info(f"Adzuna returned {len(listings)} jobs")
        return listings

    def _to_listing(self, result: dict) -> JobListing:
        description = result.get("description") or "No description available"
        salary_min = result.get("salary_min") or DEFAULT_ANNUAL_SALARY
        salary_max = result.get("salary_max") or salary_min * 1.5

        return JobListing(
            title=result.get("title") or "Untitled Position",
            company=(result.get("company") or {}).get("display_name") or "Unknown Company",
            description=description,
            location=(result.get("location") or {}).get("display_name") or "Remote",
            budget_min=round_half_up(salary_min / 12),
            budget_max=round_half_up(salary_max / 12),
            required_skills=self.curation.extract_skills(description),
            remote="remote" in description.lower(),
            url=result.get("redirect_url") or "",
            source=self.name,
        )
