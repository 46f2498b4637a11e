from django.contrib import admin

from .models import Account, Contact


# ============================================================
# ACCOUNT ADMIN
# ============================================================

class ContactInline(admin.TabularInline):
    model = Contact
    extra = 0
    fields = ("name", "phone", "email", "consent_granted", "opted_out_at")
    readonly_fields = ("consent_granted", "opted_out_at")


@admin.register(Account)
class AccountAdmin(admin.ModelAdmin):
    list_display = (
        "business_name",
        "status",
        "timezone",
        "primary_contact",
        "created_at",
    )
    list_filter = ("status", "timezone")
    search_fields = ("business_name",)
    inlines = [ContactInline]


# ============================================================
# CONTACT ADMIN
# Consent fields are read-only: they change only through
# the opt-out / opt-in services.
# ============================================================

@admin.register(Contact)
class ContactAdmin(admin.ModelAdmin):
    list_display = (
        "name",
        "account",
        "phone",
        "email",
        "consent_granted",
        "opted_out_at",
        "consent_changed_at",
    )
    list_filter = ("consent_granted",)
    search_fields = ("name", "phone", "email", "account__business_name")
    readonly_fields = (
        "consent_granted",
        "opted_out_at",
        "consent_changed_at",
        "consent_change_reason",
        "created_at",
    )
