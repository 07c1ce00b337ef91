"""
DTOs for the scheduled maintenance tasks.
"""

from typing import List
from pydantic import Field

from .base_dto import BaseDTO, RequestDTO


class RunTaskRequestDTO(RequestDTO):
    """Scheduled tasks take no parameters."""
    pass


class AggregationSummaryDTO(BaseDTO):
    success: bool = True
    jobs_found: int = 0
    jobs_created: int = 0
    jobs_rejected: int = 0
    duplicates_skipped: int = 0
    execution_time_ms: int = 0
    sources: List[str] = Field(default_factory=list)
    failed_sources: List[str] = Field(default_factory=list)
    error: str = ""


class EscalationSummaryDTO(BaseDTO):
    escalated: int = 0
    dispute_ids: List[str] = Field(default_factory=list)
    skipped_without_admin: int = 0


class ReminderSummaryDTO(BaseDTO):
    due_soon_sent: int = 0
    overdue_sent: int = 0
    milestone_ids: List[str] = Field(default_factory=list)


class JobAlertSummaryDTO(BaseDTO):
    alerts_processed: int = 0
    alerts_sent: int = 0
    alert_ids: List[str] = Field(default_factory=list)
