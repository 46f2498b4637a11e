from django.urls import path

from .views import (
    delivery_status_view,
    dispatch_view,
    drain_view,
    release_stale_view,
    schedule_view,
)

app_name = "notifications"

urlpatterns = [
    path("schedule/", schedule_view, name="schedule"),
    path("drain/", drain_view, name="drain"),
    path("dispatch/", dispatch_view, name="dispatch"),
    path("release-stale/", release_stale_view, name="release-stale"),
    path("delivery-status/", delivery_status_view, name="delivery-status"),
]
