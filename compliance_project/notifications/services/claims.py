"""
notifications/services/claims.py

Atomic claim of queue rows for exclusive processing.

A claim selects due, unclaimed rows ordered by due time with
SELECT ... FOR UPDATE SKIP LOCKED, then stamps claimed_at / claimed_by
in the same transaction. Concurrent claimants skip each other's locked
rows instead of waiting, so N workers drain one queue without ever
returning the same row twice.

The stamp is itself a conditional UPDATE (still unclaimed, still in the
claimable status). On stores without row locks (SQLite in development)
that conditional write is the compare-and-swap that keeps claims
exclusive.
"""

import logging
import os
import socket
import uuid
from datetime import timedelta

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from compliance_project.exceptions import PipelineValidationError
from notifications.models import OutboundMessage, Reminder

logger = logging.getLogger(__name__)


def default_worker_id():
    return f"{socket.gethostname()}:{os.getpid()}:{uuid.uuid4().hex[:8]}"


def _candidate_ids(model, *, status, due_field, batch_size, now):
    """Lock and return up to ``batch_size`` claimable ids, skipping rows locked elsewhere."""
    return list(
        model.objects
        .select_for_update(skip_locked=True)
        .filter(
            status=status,
            claimed_at__isnull=True,
            **{f"{due_field}__lte": now},
        )
        .order_by(due_field, "pk")
        .values_list("pk", flat=True)[:batch_size]
    )


def _claim(model, *, status, due_field, worker_id, batch_size, now):
    if batch_size < 0:
        raise PipelineValidationError(f"batch_size must not be negative, got {batch_size}")

    with transaction.atomic():
        candidate_ids = _candidate_ids(
            model,
            status=status,
            due_field=due_field,
            batch_size=batch_size,
            now=now,
        )

        if not candidate_ids:
            return []

        claimed = (
            model.objects
            .filter(pk__in=candidate_ids, status=status, claimed_at__isnull=True)
            .update(claimed_at=now, claimed_by=worker_id, updated_at=now)
        )

        rows = list(
            model.objects
            .filter(pk__in=candidate_ids, claimed_by=worker_id, claimed_at=now)
            .order_by(due_field, "pk")
        )

    logger.info(
        "Worker %s claimed %s/%s %s rows",
        worker_id, claimed, len(candidate_ids), model._meta.model_name,
    )

    return rows


def claim_pending_reminders(worker_id, batch_size=None, now=None):
    """Claim up to ``batch_size`` pending reminders whose send_at has passed."""
    return _claim(
        Reminder,
        status=Reminder.Status.PENDING,
        due_field="send_at",
        worker_id=worker_id,
        batch_size=settings.REMINDER_BATCH_SIZE if batch_size is None else batch_size,
        now=now or timezone.now(),
    )


def claim_queued_messages(worker_id, batch_size=None, now=None):
    """Claim up to ``batch_size`` queued outbox messages that are due."""
    return _claim(
        OutboundMessage,
        status=OutboundMessage.Status.QUEUED,
        due_field="scheduled_for",
        worker_id=worker_id,
        batch_size=settings.OUTBOX_BATCH_SIZE if batch_size is None else batch_size,
        now=now or timezone.now(),
    )


# ============================================================
# STALE CLAIM RECLAMATION
# ============================================================

def release_stale_claims(older_than=None, now=None):
    """
    Make rows claimed by a crashed worker claimable again.

    Only rows still in their claimable status are released; finalized
    rows keep their claim stamp as an audit record.
    """
    now = now or timezone.now()
    older_than = older_than or timedelta(minutes=settings.STALE_CLAIM_MINUTES)
    cutoff = now - older_than

    released = {}
    for label, model, status in (
        ("reminders", Reminder, Reminder.Status.PENDING),
        ("messages", OutboundMessage, OutboundMessage.Status.QUEUED),
    ):
        released[label] = (
            model.objects
            .filter(status=status, claimed_at__lt=cutoff)
            .update(claimed_at=None, claimed_by=None, updated_at=now)
        )

    if any(released.values()):
        logger.warning(
            "Released stale claims older than %s: %s reminders, %s messages",
            older_than, released["reminders"], released["messages"],
        )

    return released
