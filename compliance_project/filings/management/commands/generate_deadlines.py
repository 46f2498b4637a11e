"""
filings/management/commands/generate_deadlines.py

Generate upcoming GST deadlines for one entity or every active entity.
Safe to re-run: existing (entity, return type, period) rows are kept.
"""

from django.core.management.base import BaseCommand

from compliance_project.exceptions import ReminderPipelineError
from filings.models import GSTEntity
from filings.services.deadlines import generate_deadlines


class Command(BaseCommand):
    help = "Generate upcoming GST filing deadlines"

    def add_arguments(self, parser):
        parser.add_argument(
            "--entity",
            type=int,
            action="append",
            dest="entities",
            help="Entity id (repeatable). Defaults to every active entity.",
        )

    def handle(self, *args, **options):
        entity_ids = options["entities"] or list(
            GSTEntity.objects
            .filter(status=GSTEntity.Status.ACTIVE)
            .values_list("pk", flat=True)
        )

        total_created = 0
        for entity_id in entity_ids:
            try:
                result = generate_deadlines(entity_id)
            except ReminderPipelineError as exc:
                self.stderr.write(self.style.ERROR(f"Entity {entity_id}: {exc}"))
                continue

            total_created += len(result.created)

        self.stdout.write(
            self.style.SUCCESS(
                f"Completed: {total_created} new deadlines across {len(entity_ids)} entities"
            )
        )
