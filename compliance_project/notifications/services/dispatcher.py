"""
notifications/services/dispatcher.py

Outbox drain: claim queued messages and hand them to the transport.

Consent is checked once more right before the transport call, with the
contact row locked for the duration of the send, so an opt-out either
lands first (message cancelled) or waits for the send to finish.
"""

import logging
from dataclasses import dataclass, field, asdict
from typing import List

from django.db import transaction
from django.utils import timezone

from accounts.models import Contact
from notifications.models import OutboundMessage
from notifications.services.claims import claim_queued_messages, default_worker_id
from notifications.services.outbox import (
    cancel_message,
    mark_message_failed,
    mark_message_sent,
)
from notifications.transport import get_transport

logger = logging.getLogger(__name__)

SENT = "sent"
CANCELLED = "cancelled"
FAILED = "failed"
SKIPPED = "skipped"

REASON_CONSENT = "Consent withdrawn"


@dataclass
class DispatchSummary:
    worker_id: str
    processed: int = 0
    sent: int = 0
    cancelled: int = 0
    failed: int = 0
    errors: List[dict] = field(default_factory=list)

    def as_dict(self):
        return asdict(self)


def deliver_message(message_id, transport, now):
    """Returns (outcome, error)."""
    with transaction.atomic():
        message = (
            OutboundMessage.objects
            .select_for_update()
            .filter(pk=message_id)
            .first()
        )
        if message is None or message.status != OutboundMessage.Status.QUEUED:
            return SKIPPED, None

        contact = Contact.objects.select_for_update().get(pk=message.contact_id)

        if not contact.is_eligible:
            cancel_message(message.pk, REASON_CONSENT, now)
            return CANCELLED, None

        address = transport.address_for(contact)
        if not address:
            error = f"Contact has no {transport.address_field} for {transport.__class__.__name__}"
            mark_message_failed(message.pk, error, now)
            return FAILED, error

        result = transport.send(address, message.template_id, message.parameters)

        if result.success:
            mark_message_sent(message.pk, result.provider_id, now)
            return SENT, None

        error = result.error or "Transport reported failure"
        mark_message_failed(message.pk, error, now)
        return FAILED, error


def dispatch_outbox(batch_size=None, worker_id=None, now=None, transport=None) -> DispatchSummary:
    now = now or timezone.now()
    worker_id = worker_id or default_worker_id()
    transport = transport or get_transport()
    summary = DispatchSummary(worker_id=worker_id)

    claimed = claim_queued_messages(worker_id, batch_size=batch_size, now=now)
    summary.processed = len(claimed)

    for message in claimed:
        try:
            outcome, error = deliver_message(message.pk, transport, now)
        except Exception as exc:
            logger.exception("Error sending message %s", message.pk)
            mark_message_failed(message.pk, str(exc) or exc.__class__.__name__, now)
            outcome, error = FAILED, str(exc)

        if outcome == SENT:
            summary.sent += 1
        elif outcome == CANCELLED:
            summary.cancelled += 1
        elif outcome == FAILED:
            summary.failed += 1
            summary.errors.append({"message_id": message.pk, "error": error})

    logger.info(
        "Outbox dispatch %s: processed=%s sent=%s cancelled=%s failed=%s",
        worker_id, summary.processed, summary.sent, summary.cancelled, summary.failed,
    )

    return summary
