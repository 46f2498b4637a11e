"""
Tests for the template registry and parameter validation.
"""
import pytest

from compliance_project.exceptions import TemplateParameterError
from notifications.message_templates import (
    TEMPLATES,
    build_parameters,
    get_template,
    validate_parameters,
)
from notifications.models import Reminder

PARAMS = {"gstin": "27AAPFU0939F1ZV", "return_type": "GSTR-3B", "due_date": "2024-02-20"}


class TestRegistry:

    def test_one_template_per_offset(self):
        assert {t.days_before_due for t in TEMPLATES.values()} == {3, 1, 0}
        assert set(TEMPLATES) == set(Reminder.Template.values)

    def test_lookup_by_enum_or_string(self):
        assert get_template(Reminder.Template.T_MINUS_1) is get_template("gst_deadline_tminus1")

    def test_unknown_template(self):
        with pytest.raises(TemplateParameterError):
            get_template("gst_deadline_tminus7")


class TestValidateParameters:

    def test_required_keys_only(self):
        assert validate_parameters("gst_deadline_dueday", PARAMS) == PARAMS

    def test_values_are_stringified(self):
        clean = validate_parameters("gst_deadline_dueday", {**PARAMS, "period": 202401})
        assert clean["period"] == "202401"

    @pytest.mark.parametrize("missing", ["gstin", "return_type", "due_date"])
    def test_missing_required_key(self, missing):
        params = {k: v for k, v in PARAMS.items() if k != missing}

        with pytest.raises(TemplateParameterError, match=missing):
            validate_parameters("gst_deadline_dueday", params)

    def test_unknown_key(self):
        with pytest.raises(TemplateParameterError, match="amount"):
            validate_parameters("gst_deadline_dueday", {**PARAMS, "amount": "1000"})

    def test_not_a_mapping(self):
        with pytest.raises(TemplateParameterError):
            validate_parameters("gst_deadline_dueday", ["gstin"])


class TestRender:

    def test_advance_reminder(self):
        subject, body = get_template("gst_deadline_tminus3").render({**PARAMS, "period": "January 2024"})

        assert subject == "Reminder: GSTR-3B (January 2024) due in 3 days"
        assert "Tuesday, 20 February 2024" in body
        assert "27AAPFU0939F1ZV" in body

    def test_singular_day(self):
        subject, _ = get_template("gst_deadline_tminus1").render(PARAMS)
        assert subject == "Reminder: GSTR-3B due in 1 day"


class TestBuildParameters:

    def test_from_deadline(self, deadline):
        params = build_parameters(deadline)

        assert params["return_type"] == "GSTR-3B"
        assert params["period"] == "January 2024"
        assert validate_parameters("gst_deadline_dueday", params) == params
