"""
Notification service layer.

Each module owns one stage of the reminder pipeline. Status fields on
Reminder and OutboundMessage are written only through these services.
"""

# =====================================================
# REMINDERS
# =====================================================
from .reminders import (
    drain_reminders,
    schedule_reminders,
    schedule_reminders_bulk,
    schedule_upcoming_reminders,
)

# =====================================================
# CLAIMS
# =====================================================
from .claims import (
    claim_pending_reminders,
    claim_queued_messages,
    release_stale_claims,
)

# =====================================================
# OUTBOX
# =====================================================
from .outbox import (
    enqueue_message,
    record_delivery_status,
)
from .dispatcher import (
    dispatch_outbox,
)

# =====================================================
# PUBLIC EXPORTS
# =====================================================
__all__ = [
    # Reminders
    "drain_reminders",
    "schedule_reminders",
    "schedule_reminders_bulk",
    "schedule_upcoming_reminders",

    # Claims
    "claim_pending_reminders",
    "claim_queued_messages",
    "release_stale_claims",

    # Outbox
    "enqueue_message",
    "record_delivery_status",
    "dispatch_outbox",
]
