from datetime import timedelta

from django.core.management.base import BaseCommand

from notifications.services.claims import release_stale_claims


class Command(BaseCommand):
    help = "Release claims held longer than STALE_CLAIM_MINUTES by workers that never finished"

    def add_arguments(self, parser):
        parser.add_argument(
            "--minutes",
            type=int,
            default=None,
            help="Claim age threshold (defaults to STALE_CLAIM_MINUTES)",
        )

    def handle(self, *args, **options):
        older_than = None
        if options["minutes"] is not None:
            older_than = timedelta(minutes=options["minutes"])

        released = release_stale_claims(older_than=older_than)

        self.stdout.write(
            self.style.SUCCESS(
                f"Released {released['reminders']} reminders and "
                f"{released['messages']} messages"
            )
        )
