"""
Shared fixtures for the reminder pipeline tests.

One account in Asia/Kolkata with a primary contact, one monthly GST
entity and the GSTR-3B deadline for January 2024 (due 2024-02-20).
"""
from datetime import date, datetime
from zoneinfo import ZoneInfo

import pytest

IST = ZoneInfo("Asia/Kolkata")


def ist(year, month, day, hour=0, minute=0):
    return datetime(year, month, day, hour, minute, tzinfo=IST)


@pytest.fixture
def account(db):
    from accounts.models import Account

    return Account.objects.create(business_name="Acme Traders", timezone="Asia/Kolkata")


@pytest.fixture
def contact(account):
    from accounts.models import Contact

    contact = Contact.objects.create(
        account=account,
        name="Priya Nair",
        phone="+919800000001",
        email="priya@acme.example",
    )
    account.primary_contact = contact
    account.save(update_fields=["primary_contact"])
    return contact


@pytest.fixture
def entity(account):
    from filings.models import GSTEntity

    return GSTEntity.objects.create(
        account=account,
        gstin="27AAPFU0939F1ZV",
        legal_name="Acme Traders Private Limited",
        filing_frequency=GSTEntity.FilingFrequency.MONTHLY,
    )


@pytest.fixture
def deadline(entity, contact):
    from filings.models import Deadline

    return Deadline.objects.create(
        entity=entity,
        return_type=Deadline.ReturnType.GSTR3B,
        period_month=1,
        period_year=2024,
        due_date=date(2024, 2, 20),
    )


@pytest.fixture
def make_reminder(deadline):
    from notifications.models import Reminder

    def _make(template_id=Reminder.Template.DUE_DAY, send_at=None, **fields):
        return Reminder.objects.create(
            deadline=fields.pop("deadline", deadline),
            template_id=template_id,
            send_at=send_at or ist(2024, 2, 20, 9),
            **fields,
        )

    return _make


@pytest.fixture
def make_message(contact):
    from notifications.models import OutboundMessage

    def _make(scheduled_for=None, **fields):
        defaults = {
            "contact": contact,
            "template_id": "gst_deadline_dueday",
            "parameters": {
                "gstin": "27AAPFU0939F1ZV",
                "return_type": "GSTR-3B",
                "due_date": "2024-02-20",
            },
            "scheduled_for": scheduled_for or ist(2024, 2, 20, 9),
        }
        defaults.update(fields)
        return OutboundMessage.objects.create(**defaults)

    return _make
