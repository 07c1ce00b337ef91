"""
Event system setup and configuration.
Registers all event handlers with the event dispatcher.
"""

import logging

from skilllink.domain.events.base import get_event_dispatcher
from .notification_handlers import (
    ActivityLogHandler,
    ContractNotificationHandler,
    PaymentNotificationHandler,
    DisputeNotificationHandler,
    VerificationNotificationHandler,
    JobNotificationHandler
)

logger = logging.getLogger(__name__)


def setup_event_handlers() -> None:
    """Set up and register all event handlers."""
    dispatcher = get_event_dispatcher()
    dispatcher.clear_handlers()

    dispatcher.register_global_handler(ActivityLogHandler())

    for handler in (
        ContractNotificationHandler(),
        PaymentNotificationHandler(),
        DisputeNotificationHandler(),
        VerificationNotificationHandler(),
        JobNotificationHandler(),
    ):
        for event_type in handler.event_types:
            dispatcher.register_handler(event_type, handler)

    registered = dispatcher.get_registered_handlers()
    for event_type, handlers in registered.items():
        logger.debug(f"Event {event_type}: {', '.join(handlers)} handlers")
    logger.info("Event handlers registered successfully")


def initialize_event_system() -> None:
    """Initialize the complete event system."""
    try:
        setup_event_handlers()
        logger.info("Event system initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize event system: {str(e)}")
        raise
