import os

from django.apps import AppConfig
from django.core import checks


class NotificationsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "notifications"
    verbose_name = "Deadline reminders"

    def ready(self):
        # Receivers for deadline_filed / consent_withdrawn
        import notifications.signals  # noqa

        from .checks import check_pipeline_settings
        checks.register(check_pipeline_settings)

        # Autoreload runs ready() in both processes; only the child serves
        if os.environ.get("RUN_MAIN") != "true":
            return

        from .scheduler import start_scheduler
        start_scheduler()
