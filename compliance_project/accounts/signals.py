"""
accounts/signals.py

Signals emitted by the consent gate. Receivers live in the apps that own
the work to be pruned (see notifications.signals).
"""

from django.dispatch import Signal

# Sent after a contact's opt-out has been committed.
# kwargs: contact, reason, changed_at
# Receivers return {"reminders": int, "messages": int}.
consent_withdrawn = Signal()
