"""
notifications/services/reminders/worker.py

Reminder drain: claim a batch, then for each reminder

1. re-fetch the deadline; filed -> cancel
2. resolve the account's primary contact and re-check consent;
   not eligible -> cancel
3. queue an outbound message with the template parameters
4. mark the reminder sent

Any unexpected error marks the reminder failed. There is no retry
within a pass, and a failed reminder stays failed.

Each reminder is finalized in its own transaction, holding the row
lock on the reminder and on the contact, so an opt-out or a filing
running at the same moment either happens-before (and the reminder is
cancelled) or happens-after (and cancels the queued message).
"""

import logging
from dataclasses import dataclass, field, asdict
from typing import List

from django.db import transaction
from django.utils import timezone

from accounts.models import Contact
from filings.models import Deadline
from notifications.message_templates import build_parameters
from notifications.models import Reminder
from notifications.services.claims import claim_pending_reminders, default_worker_id
from notifications.services.outbox import enqueue_message

logger = logging.getLogger(__name__)

SENT = "sent"
SKIPPED = "skipped"

REASON_FILED = "Deadline already filed"
REASON_NO_CONTACT = "No eligible contact"


@dataclass
class DrainSummary:
    worker_id: str
    processed: int = 0
    sent: int = 0
    skipped: int = 0
    failed: int = 0
    errors: List[dict] = field(default_factory=list)

    def as_dict(self):
        return asdict(self)


# ============================================================
# FINALIZATION
# ============================================================

def finalize_reminder(reminder_id, status, now, error=""):
    """pending -> status. Returns False when the reminder already left pending."""
    fields = {"status": status, "updated_at": now}
    if status == Reminder.Status.SENT:
        fields["sent_at"] = now
    if error:
        fields["error_message"] = error

    return bool(
        Reminder.objects
        .filter(pk=reminder_id, status=Reminder.Status.PENDING)
        .update(**fields)
    )


def resolve_recipient(deadline):
    """The account's primary contact, locked, if it may be messaged."""
    contact_id = deadline.entity.account.primary_contact_id
    if contact_id is None:
        return None

    contact = (
        Contact.objects
        .select_for_update()
        .filter(pk=contact_id)
        .first()
    )
    if contact is None or not contact.is_eligible:
        return None

    return contact


# ============================================================
# PER-REMINDER PROCESSING
# ============================================================

def process_reminder(reminder_id, now):
    """Returns SENT or SKIPPED. Raises on unexpected errors."""
    with transaction.atomic():
        reminder = (
            Reminder.objects
            .select_for_update()
            .filter(pk=reminder_id)
            .first()
        )
        # Cancelled by a filing or opt-out after the claim
        if reminder is None or not reminder.is_pending:
            return SKIPPED

        deadline = (
            Deadline.objects
            .select_related("entity__account")
            .get(pk=reminder.deadline_id)
        )

        if deadline.filed_at is not None:
            finalize_reminder(reminder.pk, Reminder.Status.CANCELLED, now, REASON_FILED)
            return SKIPPED

        contact = resolve_recipient(deadline)
        if contact is None:
            finalize_reminder(reminder.pk, Reminder.Status.CANCELLED, now, REASON_NO_CONTACT)
            return SKIPPED

        enqueue_message(
            contact,
            reminder.template_id,
            build_parameters(deadline),
            scheduled_for=now,
            reminder=reminder,
        )
        finalize_reminder(reminder.pk, Reminder.Status.SENT, now)

    return SENT


# ============================================================
# DRAIN
# ============================================================

def drain_reminders(batch_size=None, worker_id=None, now=None) -> DrainSummary:
    now = now or timezone.now()
    worker_id = worker_id or default_worker_id()
    summary = DrainSummary(worker_id=worker_id)

    claimed = claim_pending_reminders(worker_id, batch_size=batch_size, now=now)
    summary.processed = len(claimed)

    for reminder in claimed:
        try:
            outcome = process_reminder(reminder.pk, now)
        except Exception as exc:
            logger.exception("Error processing reminder %s", reminder.pk)
            finalize_reminder(reminder.pk, Reminder.Status.FAILED, now, str(exc) or exc.__class__.__name__)
            summary.failed += 1
            summary.errors.append({"reminder_id": reminder.pk, "error": str(exc)})
            continue

        if outcome == SENT:
            summary.sent += 1
        else:
            summary.skipped += 1

    logger.info(
        "Reminder drain %s: processed=%s sent=%s skipped=%s failed=%s",
        worker_id, summary.processed, summary.sent, summary.skipped, summary.failed,
    )

    return summary
