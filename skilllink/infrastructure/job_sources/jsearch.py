"""JSearch (RapidAPI) job search. Needs a RapidAPI key."""

import logging
from typing import List, Optional

from skilllink.domain.models.job import JobListing
from .base import JobSource, round_half_up


logger = logging.getLogger(__name__)

JSEARCH_HOST = "jsearch.p.rapidapi.com"
JSEARCH_URL = f"https://{JSEARCH_HOST}/search"
DEFAULT_QUERIES = ["software developer remote", "frontend developer", "data analyst"]
DEFAULT_MIN_SALARY = 3000


class JSearchJobSource(JobSource):

    name = "jsearch"

    def __init__(self, api_key: str, queries: Optional[List[str]] = None, **kwargs):
        super().__init__(**kwargs)
        self.api_key = api_key
        self.queries = list(queries or DEFAULT_QUERIES)

    def fetch(self) -> List[JobListing]:
        listings: List[JobListing] = []
        headers = {"X-RapidAPI-Key": self.api_key, "X-RapidAPI-Host": JSEARCH_HOST}
        for query in self.queries[:3]:
            data = self._get_json(
                JSEARCH_URL,
                params={"query": query, "num_pages": 1, "page": 1},
                headers=headers
            )
            if data is None:
                continue
            for result in data.get("data") or []:
                listings.append(self._to_listing(result))
        logger.info(f"JSearch returned {len(listings)} jobs")
        return listings

    def _to_listing(self, result: dict) -> JobListing:
        description = result.get("job_description") or "No description available"
        salary_min = result.get("job_min_salary") or DEFAULT_MIN_SALARY
        salary_max = result.get("job_max_salary") or salary_min * 1.5
        skills = (result.get("job_required_skills") or [])[:10]
        location = f"{result.get('job_city') or ''}, {result.get('job_country') or 'Remote'}".strip()

        return JobListing(
            title=result.get("job_title") or "Untitled Position",
            company=result.get("employer_name") or "Unknown Company",
            description=description,
            location=location,
            budget_min=round_half_up(salary_min),
            budget_max=round_half_up(salary_max),
            required_skills=skills or self.curation.extract_skills(description),
            remote=bool(result.get("job_is_remote")),
            url=result.get("job_apply_link") or "",
            source=self.name,
        )
