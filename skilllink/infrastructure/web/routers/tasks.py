"""
Scheduled task router.
Called by the scheduler with the cron secret header, or by an admin.
"""

import logging
from typing import Annotated
from fastapi import APIRouter, Depends

from skilllink.application.dto.task_dto import (
    RunTaskRequestDTO, AggregationSummaryDTO, JobAlertSummaryDTO, EscalationSummaryDTO, ReminderSummaryDTO
)
from skilllink.application.use_cases.task_use_cases import (
    AggregateJobsUseCase, SendJobAlertsUseCase, EscalateDisputesUseCase, MilestoneRemindersUseCase
)
from skilllink.config import settings
from skilllink.domain.services.job_curation_service import JobCurationService
from skilllink.infrastructure.auth import require_cron_or_admin
from skilllink.infrastructure.db.unit_of_work import SQLAlchemyUnitOfWork, get_unit_of_work
from skilllink.infrastructure.job_sources import build_job_sources
from .common import run_use_case


logger = logging.getLogger(__name__)

router = APIRouter()

Caller = Annotated[str, Depends(require_cron_or_admin)]
UoW = Annotated[SQLAlchemyUnitOfWork, Depends(get_unit_of_work)]


def get_job_curation() -> JobCurationService:
    return JobCurationService(
        description_max_length=settings.job_description_max_length,
        duration_days=settings.aggregated_job_duration_days,
    )


@router.post("/aggregate-jobs", response_model=AggregationSummaryDTO)
async def aggregate_jobs(
    caller: Caller,
    uow: UoW,
    curation: Annotated[JobCurationService, Depends(get_job_curation)]
):
    """Pull listings from the configured job boards and store the new, good ones."""
    logger.info(f"Job aggregation triggered by {caller}")
    use_case = AggregateJobsUseCase(sources=build_job_sources(curation), curation=curation, uow=uow)
    return await run_use_case(use_case, RunTaskRequestDTO())


@router.post("/send-job-alerts", response_model=JobAlertSummaryDTO)
async def send_job_alerts(caller: Caller, uow: UoW):
    """Email talent whose saved alerts match jobs posted since their last email."""
    logger.info(f"Job alerts triggered by {caller}")
    use_case = SendJobAlertsUseCase(max_listed=settings.job_alert_max_listed, uow=uow)
    return await run_use_case(use_case, RunTaskRequestDTO())


@router.post("/escalate-disputes", response_model=EscalationSummaryDTO)
async def escalate_disputes(caller: Caller, uow: UoW):
    logger.info(f"Dispute escalation triggered by {caller}")
    use_case = EscalateDisputesUseCase(escalation_hours=settings.dispute_escalation_hours, uow=uow)
    return await run_use_case(use_case, RunTaskRequestDTO())


@router.post("/milestone-reminders", response_model=ReminderSummaryDTO)
async def milestone_reminders(caller: Caller, uow: UoW):
    logger.info(f"Milestone reminders triggered by {caller}")
    use_case = MilestoneRemindersUseCase(reminder_hours=settings.milestone_reminder_hours, uow=uow)
    return await run_use_case(use_case, RunTaskRequestDTO())
