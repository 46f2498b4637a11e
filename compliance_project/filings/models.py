from django.db import models
from django.db.models import Q
from django.utils import timezone

from accounts.models import Account


class GSTEntity(models.Model):
    """A GST registration (GSTIN) that files periodic returns."""

    class FilingFrequency(models.TextChoices):
        MONTHLY = "monthly", "Monthly"
        QUARTERLY = "quarterly", "Quarterly"

    class Status(models.TextChoices):
        ACTIVE = "active", "Active"
        INACTIVE = "inactive", "Inactive"
        CANCELLED = "cancelled", "Cancelled"
        SUSPENDED = "suspended", "Suspended"

    account = models.ForeignKey(
        Account,
        on_delete=models.CASCADE,
        related_name="entities",
    )

    gstin = models.CharField(max_length=15, unique=True)
    legal_name = models.CharField(max_length=200)
    trade_name = models.CharField(max_length=200, blank=True)

    filing_frequency = models.CharField(
        max_length=20,
        choices=FilingFrequency.choices,
        default=FilingFrequency.MONTHLY,
    )

    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.ACTIVE,
        db_index=True,
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "GST entity"
        verbose_name_plural = "GST entities"

    def __str__(self):
        return f"{self.legal_name} ({self.gstin})"

    @property
    def is_active(self):
        return self.status == self.Status.ACTIVE


class Deadline(models.Model):
    """
    One return-filing obligation: entity + return type + period.

    ``filed_at`` is set once by mark_deadline_filed and never cleared.
    """

    class ReturnType(models.TextChoices):
        GSTR1 = "GSTR1", "GSTR-1"
        GSTR3B = "GSTR3B", "GSTR-3B"

    class Status(models.TextChoices):
        UPCOMING = "upcoming", "Upcoming"
        OVERDUE = "overdue", "Overdue"
        FILED = "filed", "Filed"

    entity = models.ForeignKey(
        GSTEntity,
        on_delete=models.CASCADE,
        related_name="deadlines",
    )

    return_type = models.CharField(max_length=10, choices=ReturnType.choices)
    period_month = models.PositiveSmallIntegerField()
    period_year = models.PositiveSmallIntegerField()
    due_date = models.DateField(db_index=True)

    filed_at = models.DateTimeField(null=True, blank=True)
    proof_url = models.CharField(max_length=500, blank=True)
    notes = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["due_date", "return_type"]
        constraints = [
            models.UniqueConstraint(
                fields=["entity", "return_type", "period_year", "period_month"],
                name="unique_deadline_per_period",
            ),
            models.CheckConstraint(
                condition=Q(period_month__gte=1, period_month__lte=12),
                name="deadline_period_month_valid",
            ),
        ]
        indexes = [
            models.Index(fields=["entity", "due_date"]),
        ]

    def __str__(self):
        return f"{self.get_return_type_display()} {self.period_label} - due {self.due_date}"

    @property
    def is_filed(self):
        return self.filed_at is not None

    @property
    def status(self):
        if self.filed_at:
            return self.Status.FILED
        if self.due_date < timezone.localdate():
            return self.Status.OVERDUE
        return self.Status.UPCOMING

    @property
    def period_label(self):
        from filings.services.deadline_generator import period_label

        return period_label(
            self.period_month,
            self.period_year,
            self.entity.filing_frequency,
        )
