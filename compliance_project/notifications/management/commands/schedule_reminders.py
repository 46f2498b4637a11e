"""
Create pending reminders for unfiled deadlines.

Without --deadline this is the daily scheduling pass over every
unfiled, not-yet-due deadline of an active entity.
"""

from django.core.management.base import BaseCommand

from notifications.services.reminders import (
    schedule_reminders_bulk,
    schedule_upcoming_reminders,
)


class Command(BaseCommand):
    help = "Schedule T-3, T-1 and due-day reminders for deadlines"

    def add_arguments(self, parser):
        parser.add_argument(
            "--deadline",
            type=int,
            action="append",
            dest="deadlines",
            help="Deadline id (repeatable). Defaults to all upcoming deadlines.",
        )

    def handle(self, *args, **options):
        if options["deadlines"]:
            results = schedule_reminders_bulk(options["deadlines"])
        else:
            results = schedule_upcoming_reminders()

        created = 0
        for result in results:
            if not result.ok:
                self.stderr.write(
                    self.style.ERROR(f"Deadline {result.deadline_id}: {result.error}")
                )
                continue
            created += len(result.created)

        self.stdout.write(
            self.style.SUCCESS(
                f"Completed: {created} reminders across {len(results)} deadlines"
            )
        )
