"""
Tests for GST deadline arithmetic (filings.services.deadline_generator).

Pure date logic; no database access.
"""
from datetime import date

import pytest

from compliance_project.exceptions import InvalidCadence, PipelineValidationError
from filings.models import Deadline, GSTEntity
from filings.services.deadline_generator import (
    add_months,
    calculate_due_date,
    generate,
    next_working_day,
    period_label,
    quarter_end_month,
)

MONTHLY = GSTEntity.FilingFrequency.MONTHLY
QUARTERLY = GSTEntity.FilingFrequency.QUARTERLY


class TestDateHelpers:

    def test_add_months_crosses_year_boundaries(self):
        assert add_months(2023, 12, 1) == (2024, 1)
        assert add_months(2024, 1, -1) == (2023, 12)
        assert add_months(2024, 3, 12) == (2025, 3)

    def test_weekend_rolls_to_monday(self):
        assert next_working_day(date(2024, 1, 20)) == date(2024, 1, 22)  # Saturday
        assert next_working_day(date(2024, 2, 11)) == date(2024, 2, 12)  # Sunday
        assert next_working_day(date(2024, 2, 20)) == date(2024, 2, 20)

    def test_due_date_falls_in_following_month(self):
        assert calculate_due_date(1, 2024, 20) == date(2024, 2, 20)
        assert calculate_due_date(12, 2023, 11) == date(2024, 1, 11)

    def test_saturday_due_date_is_shifted(self):
        """December 2023 GSTR-3B: the 20th is a Saturday."""
        assert calculate_due_date(12, 2023, 20) == date(2024, 1, 22)

    def test_quarter_end_month(self):
        assert [quarter_end_month(m) for m in (1, 2, 3, 4, 9, 10, 12)] == [3, 3, 3, 6, 9, 12, 12]

    def test_period_labels(self):
        assert period_label(1, 2024, MONTHLY) == "January 2024"
        assert period_label(12, 2023, QUARTERLY) == "Q4 2023"
        assert period_label(3, 2024, QUARTERLY) == "Q1 2024"


class TestGenerateMonthly:

    def test_first_period_due_this_month(self):
        drafts = generate(MONTHLY, date(2024, 2, 1))

        first_two = [(d.return_type, d.period_month, d.period_year, d.due_date) for d in drafts[:2]]
        assert first_two == [
            (Deadline.ReturnType.GSTR1, 1, 2024, date(2024, 2, 12)),
            (Deadline.ReturnType.GSTR3B, 1, 2024, date(2024, 2, 20)),
        ]

    def test_twelve_periods_two_returns_each(self):
        drafts = generate(MONTHLY, date(2024, 2, 1))

        assert len(drafts) == 24
        assert {(d.period_year, d.period_month) for d in drafts} == {
            add_months(2024, 1, i) for i in range(12)
        }

    def test_sorted_by_due_date(self):
        drafts = generate(MONTHLY, date(2024, 6, 15))
        due_dates = [d.due_date for d in drafts]
        assert due_dates == sorted(due_dates)

    def test_no_due_date_on_weekend(self):
        for draft in generate(MONTHLY, date(2024, 1, 1)):
            assert draft.due_date.weekday() < 5

    def test_accepts_plain_string_cadence(self):
        assert len(generate("monthly", date(2024, 2, 1))) == 24


class TestGenerateQuarterly:

    def test_four_quarters(self):
        drafts = generate(QUARTERLY, date(2024, 1, 15))

        assert len(drafts) == 8
        assert sorted({d.period_month for d in drafts}) == [3, 6, 9, 12]

    def test_quarter_due_dates(self):
        drafts = generate(QUARTERLY, date(2024, 1, 15))

        # Oct-Dec 2023: GSTR-1 on the 13th (Saturday -> Monday), GSTR-3B on the 22nd
        assert [(d.return_type, d.due_date) for d in drafts[:2]] == [
            (Deadline.ReturnType.GSTR1, date(2024, 1, 15)),
            (Deadline.ReturnType.GSTR3B, date(2024, 1, 22)),
        ]
        assert drafts[0].period_month == 12
        assert drafts[0].period_year == 2023


class TestInvalidCadence:

    def test_unknown_cadence_raises(self):
        with pytest.raises(InvalidCadence) as excinfo:
            generate("yearly", date(2024, 2, 1))

        assert excinfo.value.cadence == "yearly"

    def test_is_a_validation_error(self):
        with pytest.raises(PipelineValidationError):
            generate("", date(2024, 2, 1))


class TestEndToEndMonthly:

    def test_mid_january_run(self):
        """February dues for January: the 11th is a Sunday and moves to the 12th."""
        drafts = generate(MONTHLY, date(2024, 1, 15))
        due_dates = [d.due_date for d in drafts]

        assert date(2024, 2, 12) in due_dates
        assert date(2024, 2, 20) in due_dates
        assert due_dates.index(date(2024, 2, 12)) < due_dates.index(date(2024, 2, 20))
        assert due_dates[:2] == [date(2024, 1, 11), date(2024, 1, 22)]
