from compliance_project.api import internal_endpoint, require_int

from filings.services.deadlines import generate_deadlines, mark_deadline_filed


def serialize_deadline(deadline):
    return {
        "id": deadline.pk,
        "entity_id": deadline.entity_id,
        "return_type": deadline.return_type,
        "period_month": deadline.period_month,
        "period_year": deadline.period_year,
        "due_date": deadline.due_date.isoformat(),
        "filed_at": deadline.filed_at.isoformat() if deadline.filed_at else None,
        "proof_url": deadline.proof_url or None,
    }


@internal_endpoint()
def generate_deadlines_view(request, payload):
    result = generate_deadlines(require_int(payload, "entity_id"))

    return {
        "entity_id": result.entity.pk,
        "created": [serialize_deadline(d) for d in result.created],
        "deadlines": [serialize_deadline(d) for d in result.deadlines],
    }


@internal_endpoint()
def mark_filed_view(request, payload):
    result = mark_deadline_filed(
        require_int(payload, "deadline_id"),
        proof_url=payload.get("proof_url"),
    )

    return {
        "deadline": serialize_deadline(result.deadline),
        "already_filed": result.already_filed,
        "cancelled_reminders": result.cancelled_reminders,
    }
