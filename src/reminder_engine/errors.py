"""
Reminder Engine Errors

Exceptions shared by the jobs and the webhook handler.
"""


class ReminderError(Exception):
    """Base error for the reminder engine"""


class ActionValidationError(ReminderError):
    """Malformed or unauthorized user action; nothing was mutated"""


class JobFetchError(ReminderError):
    """A run-level fetch failed and the job was aborted"""

    def __init__(self, phase: str, cause: Exception):
        super().__init__(f"{phase}: {cause}")
        self.phase = phase
        self.cause = cause


class InvalidSnoozeDuration(ActionValidationError):
    """Snooze minutes missing, non-numeric or not positive"""
