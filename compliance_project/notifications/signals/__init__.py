# Receivers register on import (NotificationsConfig.ready)
from . import reminders  # noqa: F401
