from django.db import models
from django.db.models import Q

from accounts.models import Contact
from filings.models import Deadline


class Reminder(models.Model):
    """
    One scheduled nudge for one deadline at one fixed offset.

    Leaves ``pending`` exactly once (sent / failed / cancelled).
    ``claimed_at`` / ``claimed_by`` mark a worker's exclusive hold and
    are not a state of their own.
    """

    # =====================================================
    # TEMPLATE (ONE PER OFFSET)
    # =====================================================
    class Template(models.TextChoices):
        T_MINUS_3 = "gst_deadline_tminus3", "3 days before due date"
        T_MINUS_1 = "gst_deadline_tminus1", "1 day before due date"
        DUE_DAY = "gst_deadline_dueday", "Due date"

    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        SENT = "sent", "Sent"
        FAILED = "failed", "Failed"
        CANCELLED = "cancelled", "Cancelled"

    # =====================================================
    # CORE RELATIONSHIPS
    # =====================================================
    deadline = models.ForeignKey(
        Deadline,
        on_delete=models.CASCADE,
        related_name="reminders",
    )

    template_id = models.CharField(max_length=40, choices=Template.choices)

    # =====================================================
    # SCHEDULE / STATE
    # =====================================================
    send_at = models.DateTimeField()

    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True,
    )

    sent_at = models.DateTimeField(null=True, blank=True)
    error_message = models.TextField(blank=True)

    # =====================================================
    # CLAIM
    # =====================================================
    claimed_at = models.DateTimeField(null=True, blank=True)
    claimed_by = models.CharField(max_length=100, null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["send_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["deadline", "template_id"],
                name="unique_reminder_per_template",
            ),
        ]
        indexes = [
            models.Index(
                fields=["send_at"],
                name="reminder_claimable_idx",
                condition=Q(status="pending", claimed_at__isnull=True),
            ),
            models.Index(fields=["deadline", "status"]),
        ]

    def __str__(self):
        return f"{self.get_template_id_display()} | {self.deadline_id} | {self.status}"

    @property
    def is_pending(self):
        return self.status == self.Status.PENDING


class OutboundMessage(models.Model):
    """
    One delivery attempt in the outbox.

    Never deleted: sent, failed and cancelled rows are the audit trail.
    """

    class Status(models.TextChoices):
        QUEUED = "queued", "Queued"
        SENT = "sent", "Sent"
        DELIVERED = "delivered", "Delivered"
        READ = "read", "Read"
        FAILED = "failed", "Failed"
        CANCELLED = "cancelled", "Cancelled"

    contact = models.ForeignKey(
        Contact,
        on_delete=models.PROTECT,
        related_name="outbound_messages",
    )

    # Source reminder, kept for traceability only
    reminder = models.ForeignKey(
        "notifications.Reminder",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="messages",
    )

    template_id = models.CharField(max_length=40)
    parameters = models.JSONField(default=dict)

    scheduled_for = models.DateTimeField()

    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.QUEUED,
        db_index=True,
    )

    provider_message_id = models.CharField(max_length=255, blank=True, db_index=True)
    sent_at = models.DateTimeField(null=True, blank=True)
    status_changed_at = models.DateTimeField(null=True, blank=True)
    error_message = models.TextField(blank=True)

    claimed_at = models.DateTimeField(null=True, blank=True)
    claimed_by = models.CharField(max_length=100, null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(
                fields=["scheduled_for"],
                name="outbox_claimable_idx",
                condition=Q(status="queued", claimed_at__isnull=True),
            ),
            models.Index(fields=["contact", "status"]),
        ]

    def __str__(self):
        return f"{self.contact} | {self.template_id} | {self.status}"
