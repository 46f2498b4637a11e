"""
Error taxonomy shared by the accounts, filings and notifications apps.

Unique-constraint conflicts have no class here: duplicate deadline or
reminder creation is absorbed by get_or_create.
"""


class ReminderPipelineError(Exception):
    """Base class for errors raised by the reminder pipeline."""


class PipelineValidationError(ReminderPipelineError, ValueError):
    """Bad input rejected at the call boundary. Nothing was written."""


class InvalidCadence(PipelineValidationError):
    """Unknown filing frequency."""

    def __init__(self, cadence):
        self.cadence = cadence
        super().__init__(f"Unknown filing frequency: {cadence!r}")


class TemplateParameterError(PipelineValidationError):
    """Template id unknown, or parameter bag incomplete / carrying extra keys."""


class NotFound(ReminderPipelineError):
    """Unknown entity, deadline, contact or message id. Nothing was mutated."""

    def __init__(self, kind, identifier):
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"{kind} not found: {identifier}")
