from django.core.management.base import BaseCommand, CommandError

from compliance_project.exceptions import PipelineValidationError

from notifications.services.dispatcher import dispatch_outbox


class Command(BaseCommand):
    help = "Deliver queued outbound messages through the configured transport"

    def add_arguments(self, parser):
        parser.add_argument("--batch-size", type=int, default=None)
        parser.add_argument("--worker-id", default=None)

    def handle(self, *args, **options):
        try:
            summary = dispatch_outbox(
                batch_size=options["batch_size"],
                worker_id=options["worker_id"],
            )
        except PipelineValidationError as exc:
            raise CommandError(str(exc)) from exc

        for error in summary.errors:
            self.stderr.write(
                self.style.ERROR(f"Message {error['message_id']}: {error['error']}")
            )

        self.stdout.write(
            self.style.SUCCESS(
                f"Completed: {summary.processed} claimed, "
                f"{summary.sent} sent, "
                f"{summary.cancelled} cancelled, "
                f"{summary.failed} failed"
            )
        )
