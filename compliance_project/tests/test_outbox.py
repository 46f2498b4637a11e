"""
Tests for the outbox: enqueue validation, dispatch through a transport,
and provider delivery callbacks.
"""
from datetime import timedelta

import pytest

from accounts.models import Contact
from compliance_project.exceptions import NotFound, PipelineValidationError, TemplateParameterError
from notifications.models import OutboundMessage
from notifications.services.dispatcher import REASON_CONSENT, dispatch_outbox
from notifications.services.outbox import enqueue_message, record_delivery_status
from notifications.transport import BaseTransport, EmailTransport, SendResult
from tests.conftest import ist

NOW = ist(2024, 2, 20, 9, 10)


class RecordingTransport(BaseTransport):

    def __init__(self, result=None, exc=None):
        self.result = result or SendResult(success=True, provider_id="wamid.0001")
        self.exc = exc
        self.sent = []

    def send(self, address, template_id, parameters):
        if self.exc:
            raise self.exc
        self.sent.append((address, template_id, parameters))
        return self.result


# =============================================================================
# ENQUEUE
# =============================================================================

class TestEnqueueMessage:

    def test_queues_validated_parameters(self, contact):
        message = enqueue_message(
            contact,
            "gst_deadline_tminus3",
            {"gstin": "27AAPFU0939F1ZV", "return_type": "GSTR-1", "due_date": "2024-02-12"},
            scheduled_for=NOW,
        )

        assert message.status == OutboundMessage.Status.QUEUED
        assert message.scheduled_for == NOW
        assert message.claimed_at is None

    def test_missing_parameter_rejected(self, contact):
        with pytest.raises(TemplateParameterError):
            enqueue_message(contact, "gst_deadline_tminus3", {"gstin": "27AAPFU0939F1ZV"})

        assert not OutboundMessage.objects.exists()

    def test_unknown_template_rejected(self, contact):
        with pytest.raises(TemplateParameterError):
            enqueue_message(contact, "marketing_blast", {})


# =============================================================================
# DISPATCH
# =============================================================================

class TestDispatchOutbox:

    def test_sends_and_records_provider_id(self, contact, make_message):
        message = make_message(scheduled_for=NOW - timedelta(minutes=5))
        transport = RecordingTransport()

        summary = dispatch_outbox(worker_id="dispatcher-a", now=NOW, transport=transport)

        assert (summary.processed, summary.sent) == (1, 1)
        assert transport.sent[0][0] == contact.phone
        message.refresh_from_db()
        assert message.status == OutboundMessage.Status.SENT
        assert message.provider_message_id == "wamid.0001"
        assert message.sent_at == NOW

    def test_consent_checked_before_send(self, contact, make_message):
        message = make_message(scheduled_for=NOW - timedelta(minutes=5))
        Contact.objects.filter(pk=contact.pk).update(consent_granted=False, opted_out_at=NOW)
        transport = RecordingTransport()

        summary = dispatch_outbox(worker_id="dispatcher-a", now=NOW, transport=transport)

        assert summary.cancelled == 1
        assert transport.sent == []
        message.refresh_from_db()
        assert message.status == OutboundMessage.Status.CANCELLED
        assert message.error_message == REASON_CONSENT

    def test_transport_failure_marks_failed(self, make_message):
        message = make_message(scheduled_for=NOW - timedelta(minutes=5))
        transport = RecordingTransport(result=SendResult(success=False, error="invalid number"))

        summary = dispatch_outbox(worker_id="dispatcher-a", now=NOW, transport=transport)

        assert summary.failed == 1
        assert summary.errors == [{"message_id": message.pk, "error": "invalid number"}]
        message.refresh_from_db()
        assert message.status == OutboundMessage.Status.FAILED

    def test_transport_exception_marks_failed(self, make_message):
        message = make_message(scheduled_for=NOW - timedelta(minutes=5))
        transport = RecordingTransport(exc=ConnectionError("provider timeout"))

        summary = dispatch_outbox(worker_id="dispatcher-a", now=NOW, transport=transport)

        assert summary.failed == 1
        message.refresh_from_db()
        assert message.status == OutboundMessage.Status.FAILED
        assert message.error_message == "provider timeout"

    def test_email_transport(self, contact, make_message, mailoutbox):
        make_message(scheduled_for=NOW - timedelta(minutes=5))

        summary = dispatch_outbox(worker_id="dispatcher-a", now=NOW, transport=EmailTransport())

        assert summary.sent == 1
        assert len(mailoutbox) == 1
        assert mailoutbox[0].to == [contact.email]
        assert mailoutbox[0].subject == "Notice: GSTR-3B due today"

    def test_missing_address_fails(self, contact, make_message):
        Contact.objects.filter(pk=contact.pk).update(email="")
        message = make_message(scheduled_for=NOW - timedelta(minutes=5))

        dispatch_outbox(worker_id="dispatcher-a", now=NOW, transport=EmailTransport())

        message.refresh_from_db()
        assert message.status == OutboundMessage.Status.FAILED


# =============================================================================
# DELIVERY CALLBACKS
# =============================================================================

class TestRecordDeliveryStatus:

    @pytest.fixture
    def sent_message(self, make_message):
        return make_message(status=OutboundMessage.Status.SENT, provider_message_id="wamid.0042")

    def test_sent_to_delivered_to_read(self, sent_message):
        message, applied = record_delivery_status("wamid.0042", "delivered", now=NOW)
        assert applied and message.status == OutboundMessage.Status.DELIVERED

        message, applied = record_delivery_status("wamid.0042", "read", now=NOW)
        assert applied and message.status == OutboundMessage.Status.READ
        assert message.status_changed_at == NOW

    def test_out_of_order_callback_ignored(self, sent_message):
        record_delivery_status("wamid.0042", "read", now=NOW)

        message, applied = record_delivery_status("wamid.0042", "delivered", now=NOW)

        assert applied is False
        assert message.status == OutboundMessage.Status.READ

    def test_failure_callback_records_error(self, sent_message):
        message, applied = record_delivery_status("wamid.0042", "failed", error="user blocked", now=NOW)

        assert applied
        assert message.error_message == "user blocked"

    def test_unsupported_status(self, sent_message):
        with pytest.raises(PipelineValidationError):
            record_delivery_status("wamid.0042", "queued")
        with pytest.raises(PipelineValidationError):
            record_delivery_status("wamid.0042", "bounced")

    def test_unknown_provider_id(self, db):
        with pytest.raises(NotFound):
            record_delivery_status("wamid.9999", "delivered")
