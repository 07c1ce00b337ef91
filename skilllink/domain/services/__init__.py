"""
Domain services for the SkillLink marketplace.
"""

from .escrow_service import EscrowService
from .job_curation_service import JobCurationService

__all__ = [
    "EscrowService",
    "JobCurationService",
]
