"""
Email service for transactional notifications.
Handles SMTP connections, template rendering, and delivery.
"""

import asyncio
import re
import smtplib
import logging
from typing import List, Dict, Any, Optional, Union
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from dataclasses import dataclass, field

from skilllink.config import settings
from skilllink.domain.models.base import utc_now
from .template_loader import EmailTemplateLoader


logger = logging.getLogger(__name__)


@dataclass
class EmailMessage:
    """Email message data."""
    to: Union[str, List[str]]
    subject: str
    template: str
    context: Dict[str, Any] = field(default_factory=dict)
    priority: str = "normal"  # high, normal, low

    @property
    def recipients(self) -> List[str]:
        return list(self.to) if isinstance(self.to, list) else [self.to]


class EmailService:
    """
    Sends templated email over SMTP.
    Without SMTP settings, messages are logged and kept in ``sent_emails``.
    """

    def __init__(self):
        self.smtp_host = settings.smtp_host
        self.smtp_port = settings.smtp_port
        self.smtp_user = settings.smtp_user
        self.smtp_password = settings.smtp_password
        self.from_name = settings.email_from_name
        self.from_address = settings.email_from_address
        self.template_loader = EmailTemplateLoader()
        self.sent_emails: List[Dict[str, Any]] = []

    async def send_email(self, message: EmailMessage) -> Dict[str, Any]:
        """
        Send an email message.
        Delivery failures are reported in the result, never raised.
        """
        html_content = self.template_loader.render_template(f"{message.template}.html", message.context)
        text_content = re.sub(r'<[^>]+>', '', html_content)

        if not self._is_smtp_configured():
            return self._log_email(message, html_content)

        try:
            mime_message = self._create_mime_message(message, html_content, text_content)
            await asyncio.to_thread(self._send_via_smtp, mime_message, message.recipients)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send email '{message.subject}' to {message.to}: {str(e)}")
            return {"success": False, "error": str(e), "timestamp": utc_now().isoformat()}

        logger.info(f"Email sent to {message.to}: {message.subject}")
        return {"success": True, "recipients": message.recipients, "timestamp": utc_now().isoformat()}

    async def send_notification(
        self,
        to: Union[str, List[str]],
        subject: str,
        template: str,
        context: Optional[Dict[str, Any]] = None,
        priority: str = "normal"
    ) -> Dict[str, Any]:
        return await self.send_email(EmailMessage(
            to=to,
            subject=subject,
            template=template,
            context={"subject": subject, **(context or {})},
            priority=priority
        ))

    def _create_mime_message(self, message: EmailMessage, html_content: str, text_content: str) -> MIMEMultipart:
        mime_msg = MIMEMultipart("alternative")
        mime_msg["Subject"] = message.subject
        mime_msg["From"] = f"{self.from_name} <{self.from_address}>"
        mime_msg["To"] = ", ".join(message.recipients)

        if message.priority == "high":
            mime_msg["X-Priority"] = "1"
        elif message.priority == "low":
            mime_msg["X-Priority"] = "5"

        mime_msg.attach(MIMEText(text_content, "plain", "utf-8"))
        mime_msg.attach(MIMEText(html_content, "html", "utf-8"))
        return mime_msg

    def _send_via_smtp(self, mime_message: MIMEMultipart, recipients: List[str]) -> None:
        with smtplib.SMTP(self.smtp_host, self.smtp_port) as server:
            server.starttls()
            server.login(self.smtp_user, self.smtp_password)
            server.send_message(mime_message, to_addrs=recipients)

    def _log_email(self, message: EmailMessage, html_content: str) -> Dict[str, Any]:
        """Log email instead of sending (for development)."""
        self.sent_emails.append({
            "timestamp": utc_now().isoformat(),
            "to": message.to,
            "subject": message.subject,
            "template": message.template,
            "html_preview": html_content[:200] + "..." if len(html_content) > 200 else html_content,
            "priority": message.priority
        })
        logger.info(f"Email logged (SMTP not configured): {message.subject} to {message.to}")
        return {
            "success": True,
            "logged": True,
            "timestamp": utc_now().isoformat()
        }

    def _is_smtp_configured(self) -> bool:
        return all([self.smtp_host, self.smtp_user, self.smtp_password])

    def get_sent_emails(self) -> List[Dict[str, Any]]:
        """Get list of logged emails (for development/testing)."""
        return self.sent_emails.copy()

    def clear_sent_emails(self) -> None:
        self.sent_emails.clear()


# Singleton instance
_email_service = None


def get_email_service() -> EmailService:
    """Get singleton email service instance."""
    global _email_service
    if _email_service is None:
        _email_service = EmailService()
    return _email_service
