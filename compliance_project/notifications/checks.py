from django.conf import settings
from django.core.checks import Error, Warning
from django.utils.module_loading import import_string


def check_pipeline_settings(app_configs=None, **kwargs):
    errors = []

    try:
        import_string(settings.MESSAGE_TRANSPORT)
    except ImportError as exc:
        errors.append(Error(
            f"MESSAGE_TRANSPORT cannot be imported: {exc}",
            hint="Use a dotted path such as notifications.transport.LoggingTransport.",
            id="notifications.E001",
        ))

    if not 0 <= settings.REMINDER_SEND_HOUR <= 23:
        errors.append(Error(
            f"REMINDER_SEND_HOUR must be between 0 and 23, got {settings.REMINDER_SEND_HOUR}",
            id="notifications.E002",
        ))

    if settings.STALE_CLAIM_MINUTES <= 0:
        errors.append(Error(
            "STALE_CLAIM_MINUTES must be positive",
            id="notifications.E003",
        ))

    if not settings.DEBUG and not getattr(settings, "INTERNAL_API_KEY", ""):
        errors.append(Warning(
            "INTERNAL_API_KEY is empty; the internal JSON endpoints accept unauthenticated calls.",
            hint="Set INTERNAL_API_KEY and send it in the X-Internal-Key header.",
            id="notifications.W002",
        ))

    if getattr(settings, "ENABLE_SCHEDULER", False) and "sqlite" in settings.DATABASES["default"]["ENGINE"]:
        errors.append(Warning(
            "The scheduler is enabled on SQLite; claims fall back to conditional updates without row locks.",
            id="notifications.W001",
        ))

    return errors
