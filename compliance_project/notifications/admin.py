from django.contrib import admin
from django.utils.html import format_html

from .models import OutboundMessage, Reminder


STATUS_COLORS = {
    "pending": "#6c757d",
    "queued": "#6c757d",
    "sent": "#0d6efd",
    "delivered": "#198754",
    "read": "#198754",
    "failed": "#dc3545",
    "cancelled": "#adb5bd",
}


def colored_status(obj):
    return format_html(
        '<strong style="color:{};">{}</strong>',
        STATUS_COLORS.get(obj.status, "#000"),
        obj.get_status_display(),
    )


colored_status.short_description = "Status"


@admin.register(Reminder)
class ReminderAdmin(admin.ModelAdmin):
    """
    Reminders are written by the scheduler and the drain worker.
    Status fields are read-only here so admin edits cannot bypass
    the conditional transitions.
    """

    # =====================================================
    # LIST VIEW
    # =====================================================
    list_display = (
        "id",
        "deadline",
        "template_id",
        "send_at",
        colored_status,
        "claimed_by",
        "sent_at",
    )

    list_filter = (
        "status",
        "template_id",
        "send_at",
    )

    search_fields = (
        "deadline__entity__gstin",
        "deadline__entity__legal_name",
        "claimed_by",
    )

    ordering = ("send_at",)
    list_per_page = 25

    readonly_fields = (
        "status",
        "sent_at",
        "error_message",
        "claimed_at",
        "claimed_by",
        "created_at",
        "updated_at",
    )

    # =====================================================
    # ACTIONS
    # =====================================================
    actions = ("release_claims",)

    @admin.action(description="Release claim (make claimable again)")
    def release_claims(self, request, queryset):
        updated = (
            queryset
            .filter(status=Reminder.Status.PENDING)
            .update(claimed_at=None, claimed_by=None)
        )
        self.message_user(request, f"{updated} reminder(s) released.")


@admin.register(OutboundMessage)
class OutboundMessageAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "contact",
        "template_id",
        "scheduled_for",
        colored_status,
        "provider_message_id",
        "sent_at",
    )

    list_filter = (
        "status",
        "template_id",
        "scheduled_for",
    )

    search_fields = (
        "contact__name",
        "contact__phone",
        "contact__email",
        "provider_message_id",
    )

    ordering = ("-scheduled_for",)
    list_per_page = 25

    readonly_fields = (
        "contact",
        "reminder",
        "template_id",
        "parameters",
        "status",
        "provider_message_id",
        "sent_at",
        "status_changed_at",
        "error_message",
        "claimed_at",
        "claimed_by",
        "created_at",
        "updated_at",
    )
