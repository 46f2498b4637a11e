"""
filings/services/deadline_generator.py

Pure GST deadline arithmetic. No database access.

Rules:
- monthly filers: GSTR-1 on the 11th, GSTR-3B on the 20th of the
  month after the period
- quarterly filers: GSTR-1 on the 13th, GSTR-3B on the 22nd of the
  month after the quarter ends
- a due date on Saturday/Sunday rolls forward to Monday
- horizon: 12 monthly periods or 4 quarters, starting with the period
  whose returns fall due in the current month
"""

import calendar
from dataclasses import dataclass
from datetime import date, timedelta

from compliance_project.exceptions import InvalidCadence
from filings.models import Deadline, GSTEntity

MONTHLY = GSTEntity.FilingFrequency.MONTHLY
QUARTERLY = GSTEntity.FilingFrequency.QUARTERLY


# ============================================================
# DEADLINE CONFIGURATION
# ============================================================

DEADLINE_RULES = {
    MONTHLY: (
        (Deadline.ReturnType.GSTR1, 11),
        (Deadline.ReturnType.GSTR3B, 20),
    ),
    QUARTERLY: (
        (Deadline.ReturnType.GSTR1, 13),
        (Deadline.ReturnType.GSTR3B, 22),
    ),
}

# (periods generated, months per period)
HORIZON = {
    MONTHLY: (12, 1),
    QUARTERLY: (4, 3),
}

# Returns fall due in the month after the period (or quarter) ends
DUE_MONTH_OFFSET = 1


@dataclass(frozen=True)
class DeadlineDraft:
    return_type: str
    period_month: int
    period_year: int
    due_date: date


# ============================================================
# DATE HELPERS
# ============================================================

def add_months(year, month, months):
    """Shift a (year, month) pair by a signed number of months."""
    index = year * 12 + (month - 1) + months
    return index // 12, index % 12 + 1


def next_working_day(day):
    """Roll Saturday/Sunday forward to Monday. No holiday calendar."""
    while day.weekday() >= 5:
        day += timedelta(days=1)
    return day


def calculate_due_date(period_month, period_year, day_of_month):
    year, month = add_months(period_year, period_month, DUE_MONTH_OFFSET)
    day = min(day_of_month, calendar.monthrange(year, month)[1])
    return next_working_day(date(year, month, day))


def quarter_end_month(month):
    return ((month - 1) // 3) * 3 + 3


def resolve_cadence(cadence):
    try:
        return GSTEntity.FilingFrequency(cadence)
    except ValueError:
        raise InvalidCadence(cadence) from None


def period_label(period_month, period_year, cadence):
    """'January 2024' for monthly periods, 'Q4 2023' for quarters."""
    if cadence == QUARTERLY:
        return f"Q{(period_month + 2) // 3} {period_year}"
    return f"{calendar.month_name[period_month]} {period_year}"


# ============================================================
# GENERATION
# ============================================================

def generate(cadence, as_of):
    """
    Return DeadlineDraft objects ascending by due date.

    Raises InvalidCadence before producing anything when the cadence
    is unknown.
    """
    cadence = resolve_cadence(cadence)
    periods, step = HORIZON[cadence]
    rules = DEADLINE_RULES[cadence]

    month_start = as_of.replace(day=1)

    # Period whose returns fall due in the current month
    year, month = add_months(as_of.year, as_of.month, -DUE_MONTH_OFFSET)
    if cadence == QUARTERLY:
        month = quarter_end_month(month)

    drafts = []
    for index in range(periods):
        period_year, period_month = add_months(year, month, index * step)

        for return_type, day_of_month in rules:
            due_date = calculate_due_date(period_month, period_year, day_of_month)

            if due_date < month_start:
                continue

            drafts.append(DeadlineDraft(
                return_type=return_type,
                period_month=period_month,
                period_year=period_year,
                due_date=due_date,
            ))

    drafts.sort(key=lambda draft: (draft.due_date, draft.return_type))
    return drafts
