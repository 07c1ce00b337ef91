"""
Scheduled maintenance use cases.
Job aggregation, job alerts, dispute escalation and milestone deadline reminders.

They are triggered by the scheduler (or an admin) and do not act on behalf of
a user, so they are plain command use cases. Every task is safe to re-run.
"""

import asyncio
import logging
import time
from datetime import datetime, timedelta
from typing import List, Optional, Set, Tuple

from skilllink.application.use_cases.base_use_case import CommandUseCase
from skilllink.application.dto.task_dto import (
    RunTaskRequestDTO, AggregationSummaryDTO, JobAlertSummaryDTO, EscalationSummaryDTO, ReminderSummaryDTO
)
from skilllink.domain.events.contract_events import MilestoneReminderDue
from skilllink.domain.events.dispute_events import DisputeEscalated
from skilllink.domain.events.marketplace_events import NewJobsAggregated
from skilllink.domain.models.base import utc_now
from skilllink.domain.models.alert import JobAlert
from skilllink.domain.models.contract import Contract, Milestone, MilestoneStatus
from skilllink.domain.models.dispute import DisputeEscalation, ESCALATION_NOTE
from skilllink.domain.models.job import Job, JobListing, JobScrapingLog, ScrapingStatus
from skilllink.domain.models.reminder import MilestoneReminder, ReminderType
from skilllink.domain.models.user import UserRole
from skilllink.domain.services.job_curation_service import JobCurationService
from skilllink.infrastructure.job_sources.base import JobSource


logger = logging.getLogger(__name__)


class AggregateJobsUseCase(CommandUseCase[RunTaskRequestDTO, AggregationSummaryDTO]):
    """
    Pull listings from every configured job board, keep the ones that pass
    the quality filter and store those not seen before.

    Duplicates are matched on the exact (title, company) pair, against stored
    jobs and within the run, and are counted as rejected. Each run leaves a
    scraping log, including runs that fail.
    """

    def __init__(self, sources: List[JobSource], curation: Optional[JobCurationService] = None, **kwargs):
        super().__init__(**kwargs)
        self.sources = sources
        self.curation = curation or JobCurationService()

    async def _execute_command_logic(self, request: RunTaskRequestDTO) -> AggregationSummaryDTO:
        started = time.monotonic()
        summary = AggregationSummaryDTO()

        try:
            listings = await self._fetch_all(summary)
            summary.jobs_found = len(listings)

            accepted, rejected = self.curation.split_by_quality(listings)
            summary.jobs_rejected = rejected
            logger.info(f"{len(accepted)} of {len(listings)} listings passed the quality filter")

            seen: Set[Tuple[str, Optional[str]]] = set()
            for listing in accepted:
                if self._is_duplicate(listing, seen):
                    summary.duplicates_skipped += 1
                    summary.jobs_rejected += 1
                    continue
                self.uow.jobs.save(self.curation.to_job(listing))
                summary.jobs_created += 1
        except Exception as exc:
            logger.exception("Job aggregation failed")
            self.uow.rollback()
            summary.success = False
            summary.jobs_created = 0
            summary.error = str(exc)

        summary.execution_time_ms = int((time.monotonic() - started) * 1000)
        log = JobScrapingLog(
            jobs_found=summary.jobs_found,
            jobs_created=summary.jobs_created,
            jobs_rejected=summary.jobs_rejected,
            execution_time_ms=summary.execution_time_ms,
            status=ScrapingStatus.SUCCESS if summary.success else ScrapingStatus.FAILED,
            error_message=summary.error or f"Sources: {', '.join(summary.sources)}",
        )
        if summary.jobs_created:
            log.add_event(NewJobsAggregated(
                jobs_created=summary.jobs_created,
                jobs_rejected=summary.jobs_rejected,
                scraped_at=log.created_at
            ))
        self.uow.scraping_logs.save(log)
        logger.info(
            f"Job aggregation finished: {summary.jobs_created} created, {summary.jobs_rejected} rejected"
        )
        return summary

    async def _fetch_all(self, summary: AggregationSummaryDTO) -> List[JobListing]:
        listings: List[JobListing] = []
        for source in self.sources:
            try:
                fetched = await asyncio.to_thread(source.fetch)
            except Exception:
                logger.exception(f"Job source {source.name} failed")
                summary.failed_sources.append(source.name)
                continue
            summary.sources.append(source.name)
            if source.failed_requests:
                summary.failed_sources.append(source.name)
            listings.extend(fetched)
        return listings

    def _is_duplicate(self, listing: JobListing, seen: Set[Tuple[str, Optional[str]]]) -> bool:
        if self.curation.is_duplicate_in_run(listing, seen):
            return True
        return self.uow.jobs.exists_by_title_and_company(listing.title, listing.company)


class SendJobAlertsUseCase(CommandUseCase[RunTaskRequestDTO, JobAlertSummaryDTO]):
    """
    Email talent about new jobs that match their saved alerts.

    An alert waits until its frequency allows another email. Only jobs
    created since its previous email count as new; a first run looks back
    one day. Alerts without matches keep their last_sent_at.
    """

    def __init__(self, max_listed: int = 10, **kwargs):
        super().__init__(**kwargs)
        self.max_listed = max_listed

    async def _execute_command_logic(self, request: RunTaskRequestDTO) -> JobAlertSummaryDTO:
        now = utc_now()
        alerts = self.uow.job_alerts.find_active()
        summary = JobAlertSummaryDTO(alerts_processed=len(alerts))

        due = [alert for alert in alerts if alert.is_due(now)]
        if not due:
            return summary

        recent = self.uow.jobs.find_open_created_since(min(alert.matches_since(now) for alert in due))
        for alert in due:
            since = alert.matches_since(now)
            matching = [job for job in recent if job.created_at >= since and alert.matches(job)]
            if not matching:
                continue
            self._send(alert, matching, now)
            summary.alerts_sent += 1
            summary.alert_ids.append(alert.id)

        logger.info(f"Job alerts: {summary.alerts_sent} of {summary.alerts_processed} alerts had new matches")
        return summary

    def _send(self, alert: JobAlert, jobs: List[Job], now: datetime) -> None:
        logger.debug(f"Alert {alert.id} matched {len(jobs)} jobs")
        alert.record_sent(jobs, self.max_listed, now)
        self.uow.job_alerts.save(alert)


class EscalateDisputesUseCase(CommandUseCase[RunTaskRequestDTO, EscalationSummaryDTO]):
    """Hand open disputes that nobody picked up to an administrator."""

    def __init__(self, escalation_hours: int = 48, **kwargs):
        super().__init__(**kwargs)
        self.escalation_hours = escalation_hours

    async def _execute_command_logic(self, request: RunTaskRequestDTO) -> EscalationSummaryDTO:
        now = utc_now()
        cutoff = now - timedelta(hours=self.escalation_hours)
        summary = EscalationSummaryDTO()

        stale = self.uow.disputes.find_open_created_before(cutoff)
        if not stale:
            return summary

        admins = self.uow.roles.find_user_ids_with_role(UserRole.ADMIN)
        for dispute in stale:
            if self.uow.escalations.exists_for_dispute(dispute.id):
                continue
            if not admins:
                summary.skipped_without_admin += 1
                continue

            note = ESCALATION_NOTE.format(hours=self.escalation_hours)
            escalation = DisputeEscalation(
                dispute_id=dispute.id,
                escalated_to=admins[0],
                escalation_reason="timeout",
                notes=note,
            )
            escalation.add_event(DisputeEscalated(
                dispute_id=dispute.id,
                contract_id=dispute.contract_id,
                escalated_to=admins[0],
                reason=note,
                hours_open=int((now - dispute.created_at).total_seconds() // 3600)
            ))
            self.uow.escalations.save(escalation)
            summary.escalated += 1
            summary.dispute_ids.append(dispute.id)

        if summary.skipped_without_admin:
            logger.warning(f"{summary.skipped_without_admin} disputes need escalation but no admin exists")
        logger.info(f"Escalated {summary.escalated} disputes")
        return summary


class MilestoneRemindersUseCase(CommandUseCase[RunTaskRequestDTO, ReminderSummaryDTO]):
    """
    Remind both parties about in-progress milestones that are due soon or
    overdue. Each reminder type is sent at most once per milestone.
    """

    def __init__(self, reminder_hours: int = 24, **kwargs):
        super().__init__(**kwargs)
        self.reminder_hours = reminder_hours

    async def _execute_command_logic(self, request: RunTaskRequestDTO) -> ReminderSummaryDTO:
        now = utc_now()
        summary = ReminderSummaryDTO()

        for contract in self.uow.contracts.find_with_milestones_in_progress():
            for milestone in contract.milestones:
                if milestone.status != MilestoneStatus.IN_PROGRESS:
                    continue

                reminder_type = None
                if milestone.is_due_within(self.reminder_hours, now):
                    reminder_type = ReminderType.DUE_SOON
                elif milestone.is_overdue(now):
                    reminder_type = ReminderType.OVERDUE
                if reminder_type is None or self.uow.reminders.exists(milestone.id, reminder_type):
                    continue

                self._remind(contract, milestone, reminder_type)
                if reminder_type == ReminderType.DUE_SOON:
                    summary.due_soon_sent += 1
                else:
                    summary.overdue_sent += 1
                summary.milestone_ids.append(milestone.id)

        logger.info(f"Sent {summary.due_soon_sent} due-soon and {summary.overdue_sent} overdue reminders")
        return summary

    def _remind(self, contract: Contract, milestone: Milestone, reminder_type: ReminderType) -> None:
        reminder = MilestoneReminder(milestone_id=milestone.id, reminder_type=reminder_type)
        reminder.add_event(MilestoneReminderDue(
            contract_id=contract.id,
            milestone_id=milestone.id,
            milestone_title=milestone.title,
            reminder_type=reminder_type.value,
            due_date=milestone.due_date,
            employer_id=contract.employer_id,
            talent_id=contract.talent_id
        ))
        self.uow.reminders.save(reminder)
