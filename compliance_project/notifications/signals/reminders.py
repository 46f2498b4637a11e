"""
notifications/signals/reminders.py

Queue pruning driven by events in other apps:
- deadline filed     -> cancel the deadline's pending reminders
- consent withdrawn  -> cancel the contact's pending reminders and
                        queued messages

Only ``pending`` reminders and ``queued`` messages are touched; sent,
failed and cancelled rows are history and stay as they are.
"""

import logging

from django.db import transaction
from django.dispatch import receiver

from accounts.signals import consent_withdrawn
from filings.signals import deadline_filed
from notifications.models import Reminder
from notifications.services.outbox import cancel_queued_messages_for_contact

logger = logging.getLogger(__name__)

REASON_FILED_EARLY = "Deadline was filed early"
REASON_OPTED_OUT = "Contact opted out"


# ============================================================
# FILING EVENT HOOK
# ============================================================

@receiver(deadline_filed)
def cancel_reminders_on_filing(sender, deadline, filed_at, **kwargs):
    cancelled = (
        Reminder.objects
        .filter(deadline=deadline, status=Reminder.Status.PENDING)
        .update(
            status=Reminder.Status.CANCELLED,
            error_message=REASON_FILED_EARLY,
            updated_at=filed_at,
        )
    )

    if cancelled:
        logger.info(
            "Cancelled %s pending reminders for filed deadline %s",
            cancelled, deadline.pk,
        )

    return cancelled


# ============================================================
# OPT-OUT CLEANUP
# ============================================================

@receiver(consent_withdrawn)
def cancel_work_on_opt_out(sender, contact, reason, changed_at, **kwargs):
    # Reminders reach a contact through the account's primary contact
    with transaction.atomic():
        reminders = (
            Reminder.objects
            .filter(
                deadline__entity__account__primary_contact=contact,
                status=Reminder.Status.PENDING,
            )
            .update(
                status=Reminder.Status.CANCELLED,
                error_message=REASON_OPTED_OUT,
                updated_at=changed_at,
            )
        )

        messages = cancel_queued_messages_for_contact(
            contact, REASON_OPTED_OUT, now=changed_at,
        )

    return {"reminders": reminders, "messages": messages}
