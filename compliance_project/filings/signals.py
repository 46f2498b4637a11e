"""
filings/signals.py

Sent by filings.services.deadlines.mark_deadline_filed inside the same
transaction that sets ``filed_at``, so a worker either sees the deadline
as filed or the reminder as already cancelled.

kwargs: deadline, filed_at
Receivers return the number of reminders they cancelled.
"""

from django.dispatch import Signal

deadline_filed = Signal()
