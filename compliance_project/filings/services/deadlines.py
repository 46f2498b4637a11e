"""
filings/services/deadlines.py

Persistence side of the deadline lifecycle:
- generate_deadlines: idempotent creation from the entity's cadence
- mark_deadline_filed: one-way filing, fires ``deadline_filed``
"""

import logging
from dataclasses import dataclass, field
from typing import List
from zoneinfo import ZoneInfo

from django.db import transaction
from django.utils import timezone

from compliance_project.exceptions import NotFound, PipelineValidationError
from filings.models import Deadline, GSTEntity
from filings.services.deadline_generator import generate
from filings.signals import deadline_filed

logger = logging.getLogger(__name__)


@dataclass
class GenerationResult:
    entity: GSTEntity
    created: List[Deadline] = field(default_factory=list)
    deadlines: List[Deadline] = field(default_factory=list)


@dataclass
class FilingResult:
    deadline: Deadline
    cancelled_reminders: int = 0
    already_filed: bool = False


def entity_local_date(entity):
    return timezone.localdate(timezone=ZoneInfo(entity.account.timezone))


# ============================================================
# GENERATE
# ============================================================

def generate_deadlines(entity_id, as_of=None) -> GenerationResult:
    """
    Create the entity's upcoming deadlines.

    Re-running is safe: rows that already exist for
    (entity, return type, period) are left untouched.
    """
    entity = (
        GSTEntity.objects
        .select_related("account")
        .filter(pk=entity_id)
        .first()
    )
    if entity is None:
        raise NotFound("GST entity", entity_id)

    if not entity.is_active:
        raise PipelineValidationError(
            f"GST entity {entity.gstin} is {entity.status}; deadlines are generated for active entities only"
        )

    as_of = as_of or entity_local_date(entity)

    # Computed in full before anything is written
    drafts = generate(entity.filing_frequency, as_of)

    result = GenerationResult(entity=entity)

    with transaction.atomic():
        for draft in drafts:
            deadline, created = Deadline.objects.get_or_create(
                entity=entity,
                return_type=draft.return_type,
                period_year=draft.period_year,
                period_month=draft.period_month,
                defaults={"due_date": draft.due_date},
            )
            if created:
                result.created.append(deadline)

    result.deadlines = list(entity.deadlines.order_by("due_date", "return_type"))

    logger.info(
        "Generated deadlines for %s: %s drafts, %s new",
        entity.gstin, len(drafts), len(result.created),
    )

    return result


# ============================================================
# MARK FILED
# ============================================================

def mark_deadline_filed(deadline_id, proof_url=None, now=None) -> FilingResult:
    """
    Set ``filed_at`` and cancel the deadline's pending reminders in the
    same transaction. Filing an already-filed deadline is a no-op that
    keeps the original timestamp.
    """
    now = now or timezone.now()

    with transaction.atomic():
        deadline = (
            Deadline.objects
            .select_for_update()
            .filter(pk=deadline_id)
            .first()
        )
        if deadline is None:
            raise NotFound("Deadline", deadline_id)

        if deadline.filed_at is not None:
            return FilingResult(deadline=deadline, already_filed=True)

        deadline.filed_at = now
        update_fields = ["filed_at", "updated_at"]
        if proof_url:
            deadline.proof_url = proof_url
            update_fields.append("proof_url")
        deadline.save(update_fields=update_fields)

        # Receivers run inside this transaction; a failure undoes the filing
        responses = deadline_filed.send(
            sender=Deadline,
            deadline=deadline,
            filed_at=now,
        )

    cancelled = sum(
        response for _, response in responses
        if isinstance(response, int)
    )

    logger.info(
        "Deadline %s marked filed; %s pending reminders cancelled",
        deadline.pk, cancelled,
    )

    return FilingResult(deadline=deadline, cancelled_reminders=cancelled)
