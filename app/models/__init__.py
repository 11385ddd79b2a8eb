# app/models/__init__.py

from .user import User
from .medicine import Medicine, MedicineFrequency
from .reminder_log import ReminderLog, ReminderStatus, RESOLVED_STATUSES

__all__ = [
    "User",
    "Medicine",
    "MedicineFrequency",
    "ReminderLog",
    "ReminderStatus",
    "RESOLVED_STATUSES",
]
