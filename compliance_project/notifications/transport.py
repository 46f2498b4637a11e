"""
notifications/transport.py

Message transports. The outbox dispatcher only relies on

    send(address, template_id, parameters) -> SendResult

and on ``address_for(contact)``. The active transport is chosen by
settings.MESSAGE_TRANSPORT, the same way Django picks EMAIL_BACKEND.
"""

import logging
import uuid
from dataclasses import dataclass
from typing import Optional

from django.conf import settings
from django.core.mail import send_mail
from django.utils.module_loading import import_string

from notifications.message_templates import get_template

logger = logging.getLogger(__name__)


@dataclass
class SendResult:
    success: bool
    provider_id: Optional[str] = None
    error: Optional[str] = None


class BaseTransport:
    # Contact attribute holding the address this transport delivers to
    address_field = "phone"

    def address_for(self, contact):
        return getattr(contact, self.address_field, "") or ""

    def send(self, address, template_id, parameters) -> SendResult:
        raise NotImplementedError


class LoggingTransport(BaseTransport):
    """Development transport: logs the message and reports success."""

    def send(self, address, template_id, parameters):
        subject, _ = get_template(template_id).render(parameters)
        provider_id = f"log_{uuid.uuid4().hex}"

        logger.info(
            "Message to %s [%s]: %s (provider id %s)",
            address, template_id, subject, provider_id,
        )

        return SendResult(success=True, provider_id=provider_id)


class EmailTransport(BaseTransport):
    """Renders the template and delivers it through Django's mail backend."""

    address_field = "email"

    def send(self, address, template_id, parameters):
        subject, body = get_template(template_id).render(parameters)

        delivered = send_mail(
            subject=subject,
            message=body,
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[address],
            fail_silently=False,
        )

        if not delivered:
            return SendResult(success=False, error="Mail backend accepted no messages")

        return SendResult(success=True, provider_id=f"email_{uuid.uuid4().hex}")


def get_transport(path=None) -> BaseTransport:
    transport_class = import_string(path or settings.MESSAGE_TRANSPORT)
    return transport_class()
