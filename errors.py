"""Error types raised by the habit ledger core."""


class HabitLedgerError(Exception):
    code = "habit_ledger_error"


class ValidationError(HabitLedgerError):
    """Bad habit input (empty title, weekday outside 0-6)."""

    code = "validation_error"


class InvalidDate(HabitLedgerError):
    code = "invalid_date"


class NotFoundError(HabitLedgerError):
    """A referenced habit or day does not exist."""

    code = "not_found"


class StorageError(HabitLedgerError):
    """The data file could not be read or written."""

    code = "storage_error"
