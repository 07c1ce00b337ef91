"""
Third-party job boards feeding the aggregation pipeline.
"""

from typing import List

from skilllink.config import settings
from skilllink.domain.services.job_curation_service import JobCurationService
from .base import JobSource
from .remotive import RemotiveJobSource
from .adzuna import AdzunaJobSource
from .jsearch import JSearchJobSource


def build_job_sources(curation: JobCurationService) -> List[JobSource]:
    """Remotive always runs; Adzuna and JSearch only when their keys are set."""
    options = {
        "curation": curation,
        "timeout": settings.job_source_timeout_seconds,
        "result_limit": settings.job_source_result_limit,
    }
    sources: List[JobSource] = [RemotiveJobSource(**options)]
    if settings.adzuna_enabled:
        sources.append(AdzunaJobSource(
            settings.adzuna_app_id, settings.adzuna_app_key, countries=settings.adzuna_countries, **options
        ))
    if settings.jsearch_enabled:
        sources.append(JSearchJobSource(settings.rapidapi_key, queries=settings.jsearch_queries, **options))
    return sources


__all__ = [
    "JobSource", "RemotiveJobSource", "AdzunaJobSource", "JSearchJobSource", "build_job_sources",
]
