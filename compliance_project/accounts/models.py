from django.conf import settings
from django.db import models
from django.db.models import Q


def default_account_timezone():
    return settings.TIME_ZONE


class Account(models.Model):
    """
    A business using the compliance service.
    Owns its GST entities and its contacts.
    """

    class Status(models.TextChoices):
        ACTIVE = "active", "Active"
        INACTIVE = "inactive", "Inactive"
        SUSPENDED = "suspended", "Suspended"

    business_name = models.CharField(max_length=200)

    # Reminders are pinned to the local send hour in this zone
    timezone = models.CharField(
        max_length=64,
        default=default_account_timezone,
    )

    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.ACTIVE,
        db_index=True,
    )

    # The contact that receives deadline reminders
    primary_contact = models.ForeignKey(
        "accounts.Contact",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.business_name


class ContactQuerySet(models.QuerySet):
    def eligible(self):
        """Contacts that may currently be messaged."""
        return self.filter(consent_granted=True, opted_out_at__isnull=True)


class Contact(models.Model):
    """
    A notification target.

    Consent fields are written only by accounts.services.consent
    (opt_out / opt_in). The check constraint keeps the two valid
    states: opted in (granted, no opt-out timestamp) and opted out.
    """

    account = models.ForeignKey(
        Account,
        on_delete=models.CASCADE,
        related_name="contacts",
    )

    name = models.CharField(max_length=150)
    phone = models.CharField(max_length=20, blank=True)
    email = models.EmailField(blank=True)

    # =====================================================
    # CONSENT STATE
    # =====================================================
    consent_granted = models.BooleanField(default=True)
    opted_out_at = models.DateTimeField(null=True, blank=True)
    consent_changed_at = models.DateTimeField(null=True, blank=True)
    consent_change_reason = models.CharField(max_length=255, null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    objects = ContactQuerySet.as_manager()

    class Meta:
        constraints = [
            models.CheckConstraint(
                condition=(
                    Q(consent_granted=True, opted_out_at__isnull=True)
                    | Q(consent_granted=False, opted_out_at__isnull=False)
                ),
                name="contact_consent_state_valid",
            ),
            models.CheckConstraint(
                condition=~Q(phone="", email=""),
                name="contact_phone_or_email_required",
            ),
        ]
        indexes = [
            models.Index(fields=["consent_granted", "opted_out_at"]),
        ]

    def __str__(self):
        return f"{self.name} ({self.phone or self.email})"

    @property
    def is_eligible(self):
        return self.consent_granted and self.opted_out_at is None
