"""Job curation service for aggregated listings.
Handles skill extraction, salary estimation, quality filtering and deduplication.
"""

from typing import Iterable, List, Optional, Set, Tuple

from skilllink.domain.models.job import (
    Job, JobListing, JobStatus, JobVerificationStatus
)


SKILL_VOCABULARY = [
    "JavaScript", "Python", "React", "Node.js", "TypeScript", "Java", "SQL",
    "AWS", "Docker", "Git", "HTML", "CSS", "MongoDB", "PostgreSQL", "GraphQL",
    "Vue.js", "Angular", "PHP", "Ruby", "Go", "Kubernetes", "Linux", "Azure",
    "Figma", "Adobe", "UI/UX", "Photoshop", "Illustrator", "Sketch",
    "SEO", "Content Writing", "Social Media", "Google Analytics", "Marketing",
    "Excel", "Data Analysis", "Power BI", "Tableau", "Machine Learning",
]

FALLBACK_SKILLS = ["Communication", "Problem Solving", "Team Work"]

CATEGORY_BASE_SALARIES = {
    "software-dev": 5000,
    "design": 4000,
    "marketing": 4500,
    "customer-support": 2500,
    "data": 5500,
}

DEFAULT_BASE_SALARY = 4000


class JobCurationService:
    """
    Domain service deciding which aggregated listings become jobs.
    Budgets are monthly amounts in major currency units.
    """

    def __init__(
        self,
        description_max_length: int = 5000,
        duration_days: int = 30,
        max_extracted_skills: int = 8
    ):
        self.description_max_length = description_max_length
        self.duration_days = duration_days
        self.max_extracted_skills = max_extracted_skills

    def extract_skills(self, description: str) -> List[str]:
        """
        Match the skill vocabulary against a description, case-insensitively.
        Falls back to generic soft skills when nothing matches.
        """
        text = (description or "").lower()
        found = [skill for skill in SKILL_VOCABULARY if skill.lower() in text]
        if not found:
            return list(FALLBACK_SKILLS)
        return found[:self.max_extracted_skills]

    def estimate_salary(self, title: str, category: Optional[str] = None) -> int:
        """Monthly salary estimate for boards that do not publish one."""
        title_lower = (title or "").lower()

        if "senior" in title_lower or "lead" in title_lower:
            return 8000
        if "junior" in title_lower or "entry" in title_lower:
            return 3000
        if "manager" in title_lower or "director" in title_lower:
            return 10000

        return CATEGORY_BASE_SALARIES.get(category or "", DEFAULT_BASE_SALARY)

    def passes_quality_filter(self, listing: JobListing) -> bool:
        return bool(
            listing.title
            and len(listing.title) > 3
            and listing.company
            and listing.description
            and len(listing.description) > 50
            and listing.budget_min > 0
            and listing.budget_max >= listing.budget_min
            and listing.required_skills
        )

    @staticmethod
    def dedupe_key(title: str, company: Optional[str]) -> Tuple[str, Optional[str]]:
        """Exact (title, company) pair; no normalisation is applied."""
        return (title, company)

    def split_by_quality(self, listings: Iterable[JobListing]) -> Tuple[List[JobListing], int]:
        """Return the listings that pass the filter and the number rejected."""
        accepted: List[JobListing] = []
        rejected = 0
        for listing in listings:
            if self.passes_quality_filter(listing):
                accepted.append(listing)
            else:
                rejected += 1
        return accepted, rejected

    def is_duplicate_in_run(self, listing: JobListing, seen: Set[Tuple[str, Optional[str]]]) -> bool:
        key = self.dedupe_key(listing.title, listing.company)
        if key in seen:
            return True
        seen.add(key)
        return False

    def to_job(self, listing: JobListing) -> Job:
        """Build the open, pre-verified job stored for an aggregated listing."""
        return Job(
            title=listing.title,
            description=listing.description[:self.description_max_length],
            employer_id=None,
            company_name=listing.company,
            location=listing.location or "Remote",
            remote=listing.remote,
            budget_min=listing.budget_min,
            budget_max=listing.budget_max,
            required_skills=list(listing.required_skills),
            duration_days=self.duration_days,
            status=JobStatus.OPEN,
            source=listing.source,
            external_url=listing.url,
            verification_status=JobVerificationStatus.VERIFIED,
        )
