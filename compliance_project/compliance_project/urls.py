from django.contrib import admin
from django.urls import path, include


urlpatterns = [
    # DJANGO ADMIN (STAFF ONLY)
    path("django/admin/", admin.site.urls),

    # INTERNAL JSON API
    path("api/contacts/", include("accounts.urls")),
    path("api/deadlines/", include("filings.urls")),
    path("api/reminders/", include("notifications.urls")),
]
