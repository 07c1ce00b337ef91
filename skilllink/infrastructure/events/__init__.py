"""
Infrastructure event handlers.
Handles domain events and triggers appropriate notifications.
"""

from .notification_handlers import (
    ActivityLogHandler, ContractNotificationHandler, PaymentNotificationHandler,
    DisputeNotificationHandler, VerificationNotificationHandler, JobNotificationHandler, RecipientDirectory
)
from .event_setup import setup_event_handlers, initialize_event_system

__all__ = [
    "ActivityLogHandler",
    "ContractNotificationHandler",
    "PaymentNotificationHandler",
    "DisputeNotificationHandler",
    "VerificationNotificationHandler",
    "JobNotificationHandler",
    "RecipientDirectory",
    "setup_event_handlers",
    "initialize_event_system"
]
