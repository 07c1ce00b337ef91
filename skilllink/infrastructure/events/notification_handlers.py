"""
Event handlers for email notifications.
Converts domain events into emails for the people involved.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Any

from sqlalchemy.orm import Session

from skilllink.config import settings
from skilllink.domain.events.base import EventHandler, DomainEvent
from skilllink.domain.events.contract_events import (
    ContractActivated, ContractCompleted, ContractCancelled, MilestoneSubmitted,
    MilestoneReviewed, MilestoneReminderDue, AmendmentProposed, AmendmentReviewed,
    NegotiationOfferMade, NegotiationConcluded
)
from skilllink.domain.events.payment_events import (
    EscrowFunded, PaymentReleased, RefundIssued, PaymentProofSubmitted,
    PaymentProofReviewed, PayoutRequested, PayoutSettled
)
from skilllink.domain.events.dispute_events import DisputeRaised, DisputeResolved, DisputeEscalated
from skilllink.domain.events.marketplace_events import (
    ApplicationSubmitted, ApplicationStatusChanged, VerificationRequestReviewed,
    BadgeIssued, EmployerVerificationChanged, JobAlertMatched, NewJobsAggregated
)
from skilllink.domain.models.user import UserRole
from skilllink.infrastructure.db.database import SessionLocal
from skilllink.infrastructure.email import EmailService, get_email_service
from skilllink.infrastructure.repositories import (
    SQLAlchemyEmployerRepository, SQLAlchemyProfileRepository, SQLAlchemyRoleRepository
)


logger = logging.getLogger(__name__)


@dataclass
class Recipient:
    email: str
    name: str


class RecipientDirectory:
    """
    Resolves user ids to email addresses.
    Handlers run after the request's unit of work has committed, so lookups
    use a short-lived session of their own.
    """

    def __init__(self, session_factory: Callable[[], Session] = SessionLocal):
        self.session_factory = session_factory

    def lookup(self, user_id: str) -> Optional[Recipient]:
        if not user_id:
            return None
        session = self.session_factory()
        try:
            profile = SQLAlchemyProfileRepository(session).find_by_user_id(user_id)
            if profile is not None and profile.email:
                return Recipient(email=profile.email, name=profile.full_name)
            employer = SQLAlchemyEmployerRepository(session).find_by_user_id(user_id)
            if employer is not None and employer.email:
                return Recipient(email=employer.email, name=employer.company_name)
            return None
        finally:
            session.close()

    def admins(self) -> List[Recipient]:
        """Admins with a known address, or the configured admin inbox."""
        session = self.session_factory()
        try:
            admin_ids = SQLAlchemyRoleRepository(session).find_user_ids_with_role(UserRole.ADMIN)
            profiles = SQLAlchemyProfileRepository(session).find_by_user_ids(admin_ids) if admin_ids else []
            recipients = [Recipient(email=p.email, name=p.full_name) for p in profiles if p.email]
        finally:
            session.close()

        if not recipients and settings.admin_email:
            recipients = [Recipient(email=settings.admin_email, name="SkillLink Admin")]
        return recipients


class ActivityLogHandler(EventHandler):
    """Logs every event that passes through the dispatcher."""

    def can_handle(self, event: DomainEvent) -> bool:
        return True

    async def handle(self, event: DomainEvent) -> None:
        logger.info(f"Event received: {event.event_type} (ID: {event.event_id})")


class NotificationHandler(EventHandler):
    """
    Base for handlers that email the parties of an event.

    Subclasses map event classes to coroutine methods in ``routes``.
    Failures are logged; an email that cannot be sent never fails the
    business action that raised the event.
    """

    routes: Dict[type, str] = {}

    def __init__(self, email_service: Optional[EmailService] = None, directory: Optional[RecipientDirectory] = None):
        self.email_service = email_service or get_email_service()
        self.directory = directory or RecipientDirectory()

    @property
    def event_types(self) -> List[str]:
        return [event_class.__name__ for event_class in self.routes]

    def can_handle(self, event: DomainEvent) -> bool:
        return type(event) in self.routes

    async def handle(self, event: DomainEvent) -> None:
        method_name = self.routes.get(type(event))
        if method_name is None:
            return
        try:
            await getattr(self, method_name)(event)
        except Exception as e:
            logger.error(f"Error handling {event.event_type} notification: {str(e)}")

    async def _notify(self, user_id: str, subject: str, template: str, context: Dict[str, Any]) -> None:
        recipient = self.directory.lookup(user_id)
        if recipient is None:
            logger.warning(f"No email address for user {user_id}; skipping '{subject}'")
            return
        await self._send(recipient, subject, template, context)

    async def _notify_admins(self, subject: str, template: str, context: Dict[str, Any]) -> None:
        admins = self.directory.admins()
        if not admins:
            logger.warning(f"No admin inbox configured; skipping '{subject}'")
            return
        for admin in admins:
            await self._send(admin, subject, template, context, priority="high")

    async def _send(
        self,
        recipient: Recipient,
        subject: str,
        template: str,
        context: Dict[str, Any],
        priority: str = "normal"
    ) -> None:
        result = await self.email_service.send_notification(
            to=recipient.email,
            subject=subject,
            template=template,
            context={"recipient_name": recipient.name, "heading": subject, **context},
            priority=priority
        )
        if not result.get("success"):
            logger.error(f"Failed to send '{subject}' to {recipient.email}: {result.get('error')}")


class ContractNotificationHandler(NotificationHandler):
    """Contract lifecycle, milestones, amendments, negotiation and applications."""

    routes = {
        ContractActivated: "_contract_activated",
        ContractCompleted: "_contract_completed",
        ContractCancelled: "_contract_cancelled",
        MilestoneSubmitted: "_milestone_submitted",
        MilestoneReviewed: "_milestone_reviewed",
        MilestoneReminderDue: "_milestone_reminder",
        AmendmentProposed: "_amendment_proposed",
        AmendmentReviewed: "_amendment_reviewed",
        NegotiationOfferMade: "_offer_made",
        NegotiationConcluded: "_negotiation_concluded",
        ApplicationSubmitted: "_application_submitted",
        ApplicationStatusChanged: "_application_status_changed",
    }

    async def _contract_activated(self, event: ContractActivated) -> None:
        context = {"message": "Escrow is funded and work on the contract can begin.", "contract_id": event.contract_id}
        for user_id in (event.employer_id, event.talent_id):
            await self._notify(user_id, "Your contract is now active", "notification", context)

    async def _contract_completed(self, event: ContractCompleted) -> None:
        context = {"message": "All milestones are settled and the contract is complete.", "contract_id": event.contract_id}
        for user_id in (event.employer_id, event.talent_id):
            await self._notify(user_id, "Contract completed", "notification", context)

    async def _contract_cancelled(self, event: ContractCancelled) -> None:
        context = {
            "message": "The contract was cancelled.",
            "contract_id": event.contract_id,
            "amount": event.refunded_minor_units,
            "amount_label": "Refunded to employer",
        }
        for user_id in (event.employer_id, event.talent_id):
            await self._notify(user_id, "Contract cancelled", "notification", context)

    async def _milestone_submitted(self, event: MilestoneSubmitted) -> None:
        await self._notify(event.employer_id, f"Milestone ready for review: {event.milestone_title}", "notification", {
            "message": "The talent has submitted work for this milestone. Please review it.",
            "contract_id": event.contract_id,
        })

    async def _milestone_reviewed(self, event: MilestoneReviewed) -> None:
        outcome = "approved" if event.approved else "sent back for changes"
        await self._notify(event.talent_id, f"Milestone {outcome}: {event.milestone_title}", "notification", {
            "message": f"Your submission was {outcome}.",
            "contract_id": event.contract_id,
        })

    async def _milestone_reminder(self, event: MilestoneReminderDue) -> None:
        overdue = event.reminder_type == "overdue"
        subject = f"Milestone {'overdue' if overdue else 'due soon'}: {event.milestone_title}"
        context = {
            "milestone_title": event.milestone_title,
            "due_date": event.due_date,
            "overdue": overdue,
            "contract_id": event.contract_id,
        }
        for user_id in (event.talent_id, event.employer_id):
            await self._notify(user_id, subject, "milestone_reminder", context)

    async def _amendment_proposed(self, event: AmendmentProposed) -> None:
        await self._notify(event.recipient_id, "A contract change was proposed", "notification", {
            "message": f"A {event.amendment_type.replace('_', ' ')} amendment is waiting for your decision.",
            "contract_id": event.contract_id,
        })

    async def _amendment_reviewed(self, event: AmendmentReviewed) -> None:
        outcome = "accepted" if event.approved else "rejected"
        await self._notify(event.proposed_by, f"Your amendment was {outcome}", "notification", {
            "message": f"The {event.amendment_type.replace('_', ' ')} amendment was {outcome}.",
            "contract_id": event.contract_id,
        })

    async def _offer_made(self, event: NegotiationOfferMade) -> None:
        await self._notify(event.recipient_id, "New offer received", "notification", {
            "message": "You have a new offer on a job negotiation.",
            "amount": event.amount_minor_units,
            "amount_label": "Offered amount",
        })

    async def _negotiation_concluded(self, event: NegotiationConcluded) -> None:
        outcome = "accepted" if event.accepted else "rejected"
        context = {"message": f"The negotiation was {outcome}.", "amount": event.amount_minor_units, "amount_label": "Final amount"}
        for user_id in (event.employer_id, event.talent_id):
            await self._notify(user_id, f"Negotiation {outcome}", "notification", context)

    async def _application_submitted(self, event: ApplicationSubmitted) -> None:
        await self._notify(event.employer_id, f"New application for {event.job_title}", "notification", {
            "message": "A talent applied to your job.",
        })

    async def _application_status_changed(self, event: ApplicationStatusChanged) -> None:
        await self._notify(event.applicant_id, f"Application update: {event.job_title}", "notification", {
            "message": f"Your application is now {event.status}.",
        })


class PaymentNotificationHandler(NotificationHandler):
    """Escrow funding, releases, refunds, proofs and payouts."""

    routes = {
        EscrowFunded: "_escrow_funded",
        PaymentReleased: "_payment_released",
        RefundIssued: "_refund_issued",
        PaymentProofSubmitted: "_proof_submitted",
        PaymentProofReviewed: "_proof_reviewed",
        PayoutRequested: "_payout_requested",
        PayoutSettled: "_payout_settled",
    }

    async def _escrow_funded(self, event: EscrowFunded) -> None:
        context = {
            "message": "The contract budget is held in escrow.",
            "amount": event.amount_minor_units,
            "currency": event.currency,
            "reference": event.transaction_id,
        }
        for user_id in (event.employer_id, event.talent_id):
            await self._notify(user_id, "Escrow funded", "payment", context)

    async def _payment_released(self, event: PaymentReleased) -> None:
        await self._notify(event.talent_id, "Payment released to your wallet", "payment", {
            "message": "A milestone payment has been credited to your wallet.",
            "amount": event.amount_minor_units,
            "fee": event.platform_fee_minor_units,
            "net_amount": event.net_amount_minor_units,
            "currency": event.currency,
            "reference": event.transaction_id,
        })

    async def _refund_issued(self, event: RefundIssued) -> None:
        await self._notify(event.employer_id, "Escrow refunded", "payment", {
            "message": "Funds held for your contract were refunded.",
            "amount": event.amount_minor_units,
            "currency": event.currency,
            "reference": event.transaction_id,
        })

    async def _proof_submitted(self, event: PaymentProofSubmitted) -> None:
        await self._notify_admins("Payment proof awaiting review", "payment", {
            "message": "A payer uploaded proof of a manual transfer.",
            "amount": event.amount_minor_units,
            "currency": event.currency,
            "reference": event.transaction_id,
        })

    async def _proof_reviewed(self, event: PaymentProofReviewed) -> None:
        outcome = "approved" if event.approved else "rejected"
        await self._notify(event.user_id, f"Payment proof {outcome}", "payment", {
            "message": event.notes or f"Your payment proof was {outcome}.",
            "reference": event.transaction_id,
        })

    async def _payout_requested(self, event: PayoutRequested) -> None:
        await self._notify_admins("Payout requested", "payment", {
            "message": "A wallet holder requested a payout.",
            "amount": event.amount_minor_units,
            "currency": event.currency,
            "reference": event.transaction_id,
        })

    async def _payout_settled(self, event: PayoutSettled) -> None:
        if event.succeeded:
            subject, message = "Payout sent", "Your payout was sent to your account."
        else:
            subject, message = "Payout failed", "Your payout failed and the amount was returned to your wallet."
        await self._notify(event.user_id, subject, "payment", {
            "message": message,
            "amount": event.amount_minor_units,
            "currency": event.currency,
            "reference": event.transaction_id,
        })


class DisputeNotificationHandler(NotificationHandler):

    routes = {
        DisputeRaised: "_dispute_raised",
        DisputeResolved: "_dispute_resolved",
        DisputeEscalated: "_dispute_escalated",
    }

    async def _dispute_raised(self, event: DisputeRaised) -> None:
        context = {"reason": event.reason, "contract_id": event.contract_id, "dispute_id": event.dispute_id}
        await self._notify(event.other_party_id, "A dispute was raised on your contract", "dispute", context)
        await self._notify_admins("New dispute raised", "dispute", context)

    async def _dispute_resolved(self, event: DisputeResolved) -> None:
        context = {
            "resolution": event.resolution,
            "outcome": event.outcome,
            "contract_id": event.contract_id,
            "dispute_id": event.dispute_id,
        }
        for user_id in (event.employer_id, event.talent_id):
            await self._notify(user_id, "Dispute resolved", "dispute", context)

    async def _dispute_escalated(self, event: DisputeEscalated) -> None:
        await self._notify(event.escalated_to, "Dispute escalated to you", "dispute", {
            "reason": event.reason,
            "hours_open": event.hours_open,
            "contract_id": event.contract_id,
            "dispute_id": event.dispute_id,
        })


class VerificationNotificationHandler(NotificationHandler):

    routes = {
        VerificationRequestReviewed: "_request_reviewed",
        BadgeIssued: "_badge_issued",
        EmployerVerificationChanged: "_employer_verification_changed",
    }

    async def _request_reviewed(self, event: VerificationRequestReviewed) -> None:
        outcome = "approved" if event.approved else "rejected"
        await self._notify(event.talent_id, f"Verification {outcome}", "notification", {
            "message": event.admin_notes or f"Your {event.request_type} verification request was {outcome}.",
        })

    async def _badge_issued(self, event: BadgeIssued) -> None:
        await self._notify(event.talent_id, "You earned a badge", "notification", {
            "message": f"Your profile now shows a {event.badge_level} {event.badge_type} badge.",
        })

    async def _employer_verification_changed(self, event: EmployerVerificationChanged) -> None:
        status = "verified" if event.verified else "no longer verified"
        await self._notify(event.employer_id, "Employer verification update", "notification", {
            "message": f"Your company is {status} (level: {event.verification_level}).",
        })


class JobNotificationHandler(NotificationHandler):
    """Job alert emails for talent and new-job notices for admins."""

    routes = {
        JobAlertMatched: "_job_alert_matched",
        NewJobsAggregated: "_new_jobs_aggregated",
    }

    async def _job_alert_matched(self, event: JobAlertMatched) -> None:
        plural = "" if event.total_matches == 1 else "s"
        await self._notify(
            event.user_id,
            f"{event.total_matches} new job{plural} matching your alert",
            "job_alert",
            {"total_matches": event.total_matches, "jobs": event.jobs}
        )

    async def _new_jobs_aggregated(self, event: NewJobsAggregated) -> None:
        plural = "" if event.jobs_created == 1 else "s"
        message = f"The job aggregator stored {event.jobs_created} new job{plural} awaiting verification."
        if event.jobs_rejected:
            message += f" {event.jobs_rejected} listings did not meet the quality bar."
        await self._notify_admins(f"{event.jobs_created} new job{plural} require verification", "notification", {
            "message": message,
        })
