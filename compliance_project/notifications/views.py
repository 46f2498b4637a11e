from compliance_project.api import internal_endpoint, optional_int, parse_int, require_field, require_int
from compliance_project.exceptions import PipelineValidationError

from notifications.services.claims import release_stale_claims
from notifications.services.dispatcher import dispatch_outbox
from notifications.services.outbox import record_delivery_status
from notifications.services.reminders import drain_reminders, schedule_reminders_bulk


def serialize_reminder(reminder):
    return {
        "id": reminder.pk,
        "deadline_id": reminder.deadline_id,
        "template_id": reminder.template_id,
        "send_at": reminder.send_at.isoformat(),
        "status": reminder.status,
    }


# ============================================================
# SCHEDULING
# ============================================================

@internal_endpoint()
def schedule_view(request, payload):
    """
    Accepts deadline_id or deadline_ids. Per-deadline failures are
    reported in the result list; the call itself still succeeds.
    """
    deadline_ids = payload.get("deadline_ids")
    if deadline_ids is None:
        deadline_ids = [require_int(payload, "deadline_id")]
    if not isinstance(deadline_ids, list) or not deadline_ids:
        raise PipelineValidationError("deadline_ids must be a non-empty list")
    deadline_ids = [parse_int(value, "deadline_ids", minimum=1) for value in deadline_ids]

    results = schedule_reminders_bulk(deadline_ids)

    return {
        "results": [
            {
                "deadline_id": result.deadline_id,
                "ok": result.ok,
                "created": [serialize_reminder(r) for r in result.created],
                "error": result.error,
            }
            for result in results
        ],
    }


# ============================================================
# WORKERS
# ============================================================

@internal_endpoint()
def drain_view(request, payload):
    summary = drain_reminders(
        batch_size=optional_int(payload, "batch_size"),
        worker_id=payload.get("worker_id"),
    )
    return summary.as_dict()


@internal_endpoint()
def dispatch_view(request, payload):
    summary = dispatch_outbox(
        batch_size=optional_int(payload, "batch_size"),
        worker_id=payload.get("worker_id"),
    )
    return summary.as_dict()


@internal_endpoint()
def release_stale_view(request, payload):
    return {"released": release_stale_claims()}


# ============================================================
# PROVIDER CALLBACK
# ============================================================

@internal_endpoint()
def delivery_status_view(request, payload):
    message, applied = record_delivery_status(
        require_field(payload, "provider_message_id"),
        require_field(payload, "status"),
        error=payload.get("error"),
    )

    return {
        "message_id": message.pk,
        "status": message.status,
        "applied": applied,
    }
