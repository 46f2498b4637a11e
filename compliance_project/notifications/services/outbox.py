"""
notifications/services/outbox.py

Outbox writes. Every status change is a single-row (or contact-scoped)
conditional UPDATE guarded by the status it transitions from, so a
row finalized by someone else is never overwritten.
"""

import logging

from django.utils import timezone

from compliance_project.exceptions import NotFound, PipelineValidationError
from notifications.message_templates import validate_parameters
from notifications.models import OutboundMessage

logger = logging.getLogger(__name__)

Status = OutboundMessage.Status

# Provider callbacks may only move a message forward
DELIVERY_TRANSITIONS = {
    Status.DELIVERED: {Status.SENT},
    Status.READ: {Status.SENT, Status.DELIVERED},
    Status.FAILED: {Status.SENT, Status.DELIVERED},
}


def enqueue_message(contact, template_id, parameters, scheduled_for=None, reminder=None):
    """Validate the parameter bag and queue one message for ``contact``."""
    clean = validate_parameters(template_id, parameters)

    message = OutboundMessage.objects.create(
        contact=contact,
        reminder=reminder,
        template_id=template_id,
        parameters=clean,
        scheduled_for=scheduled_for or timezone.now(),
        status=Status.QUEUED,
    )

    logger.info(
        "Queued message %s (%s) for contact %s",
        message.pk, template_id, contact.pk,
    )

    return message


def _transition(message_id, from_statuses, now, **fields):
    return (
        OutboundMessage.objects
        .filter(pk=message_id, status__in=from_statuses)
        .update(status_changed_at=now, updated_at=now, **fields)
    )


def mark_message_sent(message_id, provider_message_id, now=None):
    now = now or timezone.now()
    return _transition(
        message_id, [Status.QUEUED], now,
        status=Status.SENT,
        sent_at=now,
        provider_message_id=provider_message_id or "",
    )


def mark_message_failed(message_id, error, now=None):
    now = now or timezone.now()
    return _transition(
        message_id, [Status.QUEUED], now,
        status=Status.FAILED,
        error_message=error,
    )


def cancel_message(message_id, reason, now=None):
    now = now or timezone.now()
    return _transition(
        message_id, [Status.QUEUED], now,
        status=Status.CANCELLED,
        error_message=reason,
    )


def cancel_queued_messages_for_contact(contact, reason, now=None):
    """Cancel every queued message for ``contact``; other statuses are untouched."""
    now = now or timezone.now()
    return (
        OutboundMessage.objects
        .filter(contact=contact, status=Status.QUEUED)
        .update(
            status=Status.CANCELLED,
            error_message=reason,
            status_changed_at=now,
            updated_at=now,
        )
    )


# ============================================================
# PROVIDER DELIVERY CALLBACKS
# ============================================================

def record_delivery_status(provider_message_id, status, error=None, now=None):
    """
    Apply a provider status callback.

    Returns (message, applied). Out-of-order or repeated callbacks are
    ignored rather than moving the message backwards.
    """
    try:
        status = Status(status)
    except ValueError:
        raise PipelineValidationError(f"Unsupported delivery status: {status!r}") from None

    allowed_from = DELIVERY_TRANSITIONS.get(status)
    if allowed_from is None:
        raise PipelineValidationError(f"Unsupported delivery status: {status.value!r}")

    message = (
        OutboundMessage.objects
        .filter(provider_message_id=provider_message_id)
        .exclude(provider_message_id="")
        .first()
    )
    if message is None:
        raise NotFound("Message", provider_message_id)

    now = now or timezone.now()
    fields = {"status": status}
    if error:
        fields["error_message"] = error

    applied = bool(_transition(message.pk, allowed_from, now, **fields))
    message.refresh_from_db()

    if not applied:
        logger.info(
            "Ignored %s callback for message %s in status %s",
            status.value, message.pk, message.status,
        )

    return message, applied
