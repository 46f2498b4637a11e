"""
notifications/services/reminders/scheduler.py

Turns a deadline into its three pending reminders (T-3, T-1, due day),
each pinned to the local send hour in the account's timezone.

- filed deadlines get nothing
- offsets already in the past are dropped, never backfilled
- one reminder per (deadline, template); repeat calls create nothing
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, time, timedelta
from typing import List, Optional
from zoneinfo import ZoneInfo

from django.conf import settings
from django.utils import timezone

from compliance_project.exceptions import NotFound
from filings.models import Deadline, GSTEntity
from notifications.message_templates import TEMPLATES
from notifications.models import Reminder

logger = logging.getLogger(__name__)


@dataclass
class ScheduleResult:
    deadline_id: int
    created: List[Reminder] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self):
        return self.error is None


def reminder_send_times(due_date, tz_name, send_hour=None):
    """[(template_id, aware send_at)] ordered T-3, T-1, due day."""
    tz = ZoneInfo(tz_name)
    send_hour = settings.REMINDER_SEND_HOUR if send_hour is None else send_hour

    times = []
    for template in sorted(TEMPLATES.values(), key=lambda t: -t.days_before_due):
        send_day = due_date - timedelta(days=template.days_before_due)
        send_at = datetime.combine(send_day, time(hour=send_hour), tzinfo=tz)
        times.append((template.template_id, send_at))

    return times


def schedule_reminders(deadline_id, now=None) -> ScheduleResult:
    now = now or timezone.now()

    deadline = (
        Deadline.objects
        .select_related("entity__account")
        .filter(pk=deadline_id)
        .first()
    )
    if deadline is None:
        raise NotFound("Deadline", deadline_id)

    result = ScheduleResult(deadline_id=deadline.pk)

    if deadline.filed_at is not None:
        return result

    for template_id, send_at in reminder_send_times(
        deadline.due_date, deadline.entity.account.timezone
    ):
        if send_at <= now:
            continue

        # Unique (deadline, template): a concurrent or repeated call finds the row
        reminder, created = Reminder.objects.get_or_create(
            deadline=deadline,
            template_id=template_id,
            defaults={
                "send_at": send_at,
                "status": Reminder.Status.PENDING,
            },
        )
        if created:
            result.created.append(reminder)

    if result.created:
        logger.info(
            "Scheduled %s reminders for deadline %s",
            len(result.created), deadline.pk,
        )

    return result


def schedule_reminders_bulk(deadline_ids, now=None) -> List[ScheduleResult]:
    """
    Schedule each deadline independently. A failure is recorded on that
    deadline's result and the rest carry on.
    """
    now = now or timezone.now()
    results = []

    for deadline_id in deadline_ids:
        try:
            results.append(schedule_reminders(deadline_id, now=now))
        except Exception as exc:
            logger.exception("Failed to schedule reminders for deadline %s", deadline_id)
            results.append(ScheduleResult(deadline_id=deadline_id, error=str(exc)))

    return results


def schedule_upcoming_reminders(now=None) -> List[ScheduleResult]:
    """Scheduling pass over every unfiled, not-yet-due deadline of active entities."""
    now = now or timezone.now()

    deadline_ids = list(
        Deadline.objects
        .filter(
            filed_at__isnull=True,
            due_date__gte=timezone.localdate(now) - timedelta(days=1),
            entity__status=GSTEntity.Status.ACTIVE,
        )
        .order_by("due_date")
        .values_list("pk", flat=True)
    )

    return schedule_reminders_bulk(deadline_ids, now=now)
