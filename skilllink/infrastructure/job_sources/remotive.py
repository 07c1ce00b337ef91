"""Remotive remote-jobs API. Free, no key."""

import logging
from typing import List

from skilllink.domain.models.job import JobListing
from .base import JobSource, round_half_up


logger = logging.getLogger(__name__)

REMOTIVE_URL = "https://remotive.com/api/remote-jobs"
REMOTIVE_CATEGORIES = ["software-dev", "design", "marketing", "customer-support", "data"]


class RemotiveJobSource(JobSource):

    name = "remotive"

    def fetch(self) -> List[JobListing]:
        listings: List[JobListing] = []
        for category in REMOTIVE_CATEGORIES:
            data = self._get_json(REMOTIVE_URL, params={"category": category, "limit": self.result_limit})
            if data is None:
                continue
            for job in data.get("jobs") or []:
                listings.append(self._to_listing(job, category))
        logger.info(f"Remotive returned {len(listings)} jobs")
        return listings

    def _to_listing(self, job: dict, category: str) -> JobListing:
        title = job.get("title") or "Untitled Position"
        description = job.get("description") or "No description available"
        base_salary = self.curation.estimate_salary(title, category)
        tags = (job.get("tags") or [])[:10]

        return JobListing(
            title=title,
            company=job.get("company_name") or "Unknown Company",
            description=description,
            location=job.get("candidate_required_location") or "Worldwide",
            budget_min=base_salary,
            budget_max=round_half_up(base_salary * 1.5),
            required_skills=tags or self.curation.extract_skills(description),
            remote=True,
            url=job.get("url") or "",
            source=self.name,
        )
