"""
Reminder service layer.

- scheduler: deadline -> pending reminders (T-3, T-1, due day)
- worker: claim-and-deliver drain of due reminders

Both are triggered by management commands, the internal API or the
in-process APScheduler; neither keeps state between calls.
"""

# =====================================================
# SCHEDULING
# =====================================================
from .scheduler import (
    schedule_reminders,
    schedule_reminders_bulk,
    schedule_upcoming_reminders,
)

# =====================================================
# DRAIN
# =====================================================
from .worker import (
    drain_reminders,
    process_reminder,
)

__all__ = [
    # Scheduling
    "schedule_reminders",
    "schedule_reminders_bulk",
    "schedule_upcoming_reminders",

    # Drain
    "drain_reminders",
    "process_reminder",
]
