"""
accounts/services/consent.py

Consent gate for outbound messaging.

- is_eligible(): pure read, re-checked at send time by the workers
- opt_out() / opt_in(): the only code paths that write consent fields

Opt-out commits the consent flip first, then asks receivers of
``consent_withdrawn`` to cancel pending reminders and queued messages.
A cleanup failure never rolls the flip back; it is logged and reported
as a warning on the result.
"""

import logging
from dataclasses import dataclass, asdict
from typing import Optional

from django.db import transaction
from django.utils import timezone

from accounts.models import Contact
from accounts.signals import consent_withdrawn
from compliance_project.exceptions import NotFound

logger = logging.getLogger(__name__)

DEFAULT_OPT_OUT_REASON = "User requested opt-out"
DEFAULT_OPT_IN_REASON = "User requested opt-in"


@dataclass
class OptOutResult:
    contact_id: int
    cancelled_reminders: int = 0
    cancelled_messages: int = 0
    warning: Optional[str] = None

    def as_dict(self):
        return asdict(self)


# ============================================================
# READ
# ============================================================

def is_eligible(contact_id) -> bool:
    """True iff the contact has granted consent and has not opted out."""
    row = (
        Contact.objects
        .filter(pk=contact_id)
        .values("consent_granted", "opted_out_at")
        .first()
    )
    if row is None:
        raise NotFound("Contact", contact_id)

    return row["consent_granted"] and row["opted_out_at"] is None


# ============================================================
# TRANSITIONS
# ============================================================

def _apply_consent(contact_id, *, granted, reason, now):
    with transaction.atomic():
        contact = (
            Contact.objects
            .select_for_update()
            .filter(pk=contact_id)
            .first()
        )
        if contact is None:
            raise NotFound("Contact", contact_id)

        contact.consent_granted = granted
        contact.opted_out_at = None if granted else now
        contact.consent_changed_at = now
        contact.consent_change_reason = reason
        contact.save(update_fields=[
            "consent_granted",
            "opted_out_at",
            "consent_changed_at",
            "consent_change_reason",
        ])

    return contact


def opt_out(contact_id, reason=None, now=None) -> OptOutResult:
    now = now or timezone.now()
    reason = reason or DEFAULT_OPT_OUT_REASON

    contact = _apply_consent(contact_id, granted=False, reason=reason, now=now)
    result = OptOutResult(contact_id=contact.pk)

    # --------------------------------------------------
    # CLEANUP (NON-FATAL)
    # --------------------------------------------------
    responses = consent_withdrawn.send_robust(
        sender=Contact,
        contact=contact,
        reason=reason,
        changed_at=now,
    )

    failures = []
    for receiver, response in responses:
        if isinstance(response, Exception):
            logger.error(
                "Cancellation after opt-out of contact %s failed in %s: %s",
                contact.pk, getattr(receiver, "__name__", receiver), response,
            )
            failures.append(str(response))
            continue

        if response:
            result.cancelled_reminders += response.get("reminders", 0)
            result.cancelled_messages += response.get("messages", 0)

    if failures:
        result.warning = "Consent withdrawn but cleanup incomplete: " + "; ".join(failures)

    logger.info(
        "Contact %s opted out. Cancelled: %s reminders, %s messages. Reason: %s",
        contact.pk, result.cancelled_reminders, result.cancelled_messages, reason,
    )

    return result


def opt_in(contact_id, reason=None, now=None) -> Contact:
    """
    Restore consent. Cancelled reminders stay cancelled; the next
    scheduling pass creates whatever is still missing.
    """
    now = now or timezone.now()
    reason = reason or DEFAULT_OPT_IN_REASON

    contact = _apply_consent(contact_id, granted=True, reason=reason, now=now)

    logger.info("Contact %s opted back in. Reason: %s", contact.pk, reason)

    return contact
