"""
Record of deadline reminders already sent for a milestone.
"""

from enum import Enum
from dataclasses import dataclass

from .base import BaseEntity


class ReminderType(str, Enum):
    DUE_SOON = "24h_before"
    OVERDUE = "overdue"


@dataclass(eq=False)
class MilestoneReminder(BaseEntity):
    milestone_id: str = ""
    reminder_type: ReminderType = ReminderType.DUE_SOON
