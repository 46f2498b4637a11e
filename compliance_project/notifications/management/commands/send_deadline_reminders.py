"""
notifications/management/commands/send_deadline_reminders.py

Scheduled command (runs every SCHEDULER_INTERVAL_MINUTES).

Claims due pending reminders and turns each into a queued outbound
message. Safe to run from several processes at once: claims are
exclusive, so no reminder is handled twice.
"""

from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone

from compliance_project.exceptions import PipelineValidationError
from notifications.services.reminders import drain_reminders


class Command(BaseCommand):
    help = "Process due deadline reminders into the outbox"

    def add_arguments(self, parser):
        parser.add_argument(
            "--batch-size",
            type=int,
            default=None,
            help="Maximum reminders to claim (defaults to REMINDER_BATCH_SIZE)",
        )
        parser.add_argument(
            "--worker-id",
            default=None,
            help="Identifier stamped on claimed rows",
        )

    def handle(self, *args, **options):
        now = timezone.now()

        self.stdout.write(
            self.style.NOTICE(
                f"[{now:%Y-%m-%d %H:%M:%S}] Starting reminder drain"
            )
        )

        try:
            summary = drain_reminders(
                batch_size=options["batch_size"],
                worker_id=options["worker_id"],
                now=now,
            )
        except PipelineValidationError as exc:
            raise CommandError(str(exc)) from exc

        for error in summary.errors:
            self.stderr.write(
                self.style.ERROR(f"Reminder {error['reminder_id']}: {error['error']}")
            )

        self.stdout.write(
            self.style.SUCCESS(
                f"[{now:%Y-%m-%d %H:%M:%S}] Completed: "
                f"{summary.processed} claimed, "
                f"{summary.sent} sent, "
                f"{summary.skipped} skipped, "
                f"{summary.failed} failed"
            )
        )
