"""
Common plumbing for third-party job boards.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import requests

from skilllink.domain.models.job import JobListing
from skilllink.domain.services.job_curation_service import JobCurationService


logger = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    return int(value + 0.5) if value >= 0 else -int(-value + 0.5)


class JobSource(ABC):
    """
    A job board the aggregator can pull from.

    ``fetch`` never raises for a failed HTTP call: the failing request is
    logged and skipped so the other requests and sources still run.
    """

    name = "source"

    def __init__(
        self,
        curation: Optional[JobCurationService] = None,
        session: Optional[requests.Session] = None,
        timeout: int = 15,
        result_limit: int = 50
    ):
        self.curation = curation or JobCurationService()
        self.session = session or requests.Session()
        self.timeout = timeout
        self.result_limit = result_limit
        self.failed_requests = 0

    @abstractmethod
    def fetch(self) -> List[JobListing]:
        pass

    def _get_json(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None
    ) -> Optional[Dict[str, Any]]:
        try:
            response = self.session.get(url, params=params, headers=headers, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except requests.RequestException as exc:
            self.failed_requests += 1
            logger.error(f"{self.name} request to {url} failed: {exc}")
        except ValueError as exc:
            self.failed_requests += 1
            logger.error(f"{self.name} returned invalid JSON from {url}: {exc}")
        return None
