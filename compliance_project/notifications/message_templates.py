"""
notifications/message_templates.py

Closed registry of reminder templates.

Each template id maps to its offset from the due date and the exact
set of parameter keys a message for it must carry. Parameter bags are
validated when a message is enqueued, not when it is delivered.
"""

from dataclasses import dataclass
from datetime import date

from compliance_project.exceptions import TemplateParameterError
from notifications.models import Reminder

REQUIRED_PARAMETERS = frozenset({"gstin", "return_type", "due_date"})
OPTIONAL_PARAMETERS = frozenset({"legal_name", "period"})


@dataclass(frozen=True)
class ReminderTemplate:
    template_id: str
    days_before_due: int
    label: str
    required: frozenset = REQUIRED_PARAMETERS
    optional: frozenset = OPTIONAL_PARAMETERS

    def validate(self, parameters):
        if not isinstance(parameters, dict):
            raise TemplateParameterError(
                f"{self.template_id}: parameters must be a mapping"
            )

        missing = [
            key for key in sorted(self.required)
            if parameters.get(key) in (None, "")
        ]
        if missing:
            raise TemplateParameterError(
                f"{self.template_id}: missing parameters {', '.join(missing)}"
            )

        unknown = sorted(set(parameters) - self.required - self.optional)
        if unknown:
            raise TemplateParameterError(
                f"{self.template_id}: unknown parameters {', '.join(unknown)}"
            )

        return {key: str(value) for key, value in parameters.items()}

    def render(self, parameters):
        """Return (subject, body) for text transports."""
        due = date.fromisoformat(parameters["due_date"])
        return_type = parameters["return_type"]
        period = parameters.get("period")
        subject_period = f" ({period})" if period else ""

        if self.days_before_due > 0:
            day_word = "day" if self.days_before_due == 1 else "days"
            subject = f"Reminder: {return_type}{subject_period} due in {self.days_before_due} {day_word}"
            lead = (
                f"This is a reminder that the {return_type} return for GSTIN "
                f"{parameters['gstin']} is due on {due:%A, %d %B %Y}."
            )
        else:
            subject = f"Notice: {return_type}{subject_period} due today"
            lead = (
                f"The {return_type} return for GSTIN {parameters['gstin']} "
                f"is due today, {due:%A, %d %B %Y}."
            )

        body = (
            "Good day.\n\n"
            f"{lead}\n\n"
            "Please file the return within the prescribed period to avoid "
            "late fees and interest.\n\n"
            "Reply STOP to stop receiving these reminders."
        )
        return subject, body


TEMPLATES = {
    Reminder.Template.T_MINUS_3.value: ReminderTemplate(Reminder.Template.T_MINUS_3, 3, "T-3"),
    Reminder.Template.T_MINUS_1.value: ReminderTemplate(Reminder.Template.T_MINUS_1, 1, "T-1"),
    Reminder.Template.DUE_DAY.value: ReminderTemplate(Reminder.Template.DUE_DAY, 0, "Due day"),
}


def get_template(template_id) -> ReminderTemplate:
    try:
        return TEMPLATES[str(template_id)]
    except KeyError:
        raise TemplateParameterError(f"Unknown template id: {template_id!r}") from None


def validate_parameters(template_id, parameters):
    return get_template(template_id).validate(parameters)


def build_parameters(deadline):
    """Parameter bag for a reminder about ``deadline``."""
    entity = deadline.entity
    return {
        "gstin": entity.gstin,
        "legal_name": entity.legal_name,
        "return_type": deadline.get_return_type_display(),
        "due_date": deadline.due_date.isoformat(),
        "period": deadline.period_label,
    }
