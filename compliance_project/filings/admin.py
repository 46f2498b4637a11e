from django.contrib import admin

from .models import Deadline, GSTEntity


# ---------------------------------------------------------------------
# GST ENTITY ADMIN
# ---------------------------------------------------------------------
@admin.register(GSTEntity)
class GSTEntityAdmin(admin.ModelAdmin):
    list_display = (
        "gstin",
        "legal_name",
        "account",
        "filing_frequency",
        "status",
        "created_at",
    )
    list_filter = ("filing_frequency", "status")
    search_fields = ("gstin", "legal_name", "trade_name", "account__business_name")


# ---------------------------------------------------------------------
# DEADLINE ADMIN
# filed_at is set through mark_deadline_filed so reminders get cancelled
# ---------------------------------------------------------------------
@admin.register(Deadline)
class DeadlineAdmin(admin.ModelAdmin):
    list_display = (
        "entity",
        "return_type",
        "period_month",
        "period_year",
        "due_date",
        "filed_at",
    )
    list_filter = ("return_type", "period_year", "entity__filing_frequency")
    search_fields = ("entity__gstin", "entity__legal_name")
    ordering = ("due_date",)
    readonly_fields = ("filed_at", "created_at", "updated_at")
