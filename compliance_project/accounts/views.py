from compliance_project.api import internal_endpoint

from accounts.services.consent import is_eligible, opt_in, opt_out


@internal_endpoint()
def opt_out_view(request, payload, contact_id):
    result = opt_out(contact_id, reason=payload.get("reason"))

    return {
        "contact_id": result.contact_id,
        "cancelled_reminders": result.cancelled_reminders,
        "cancelled_messages": result.cancelled_messages,
        "warning": result.warning,
    }


@internal_endpoint()
def opt_in_view(request, payload, contact_id):
    contact = opt_in(contact_id, reason=payload.get("reason"))

    return {
        "contact_id": contact.pk,
        "consent_changed_at": contact.consent_changed_at.isoformat(),
    }


@internal_endpoint(methods=("GET",))
def eligibility_view(request, payload, contact_id):
    return {
        "contact_id": contact_id,
        "eligible": is_eligible(contact_id),
    }
