"""Exception types raised by the budget subsystem.

All of them are recoverable at the call-site.
"""


class TallyError(Exception):
    """Base class for all Tally errors."""


class ValidationError(TallyError):
    """Invalid input to a ledger add/update (negative amount, empty name, bad type)."""


class NotFoundError(TallyError):
    """An update or remove referenced an entry id that is not in the ledger."""

    def __init__(self, entry_id: str, message: str = None):
        self.entry_id = entry_id
        super().__init__(message or f"Budget entry {entry_id} not found")


class AlreadyRemovedError(NotFoundError):
    """A remove referenced an entry id that was already removed from the ledger."""

    def __init__(self, entry_id: str):
        super().__init__(entry_id, f"Budget entry {entry_id} was already removed")


class UnsupportedFormatError(TallyError):
    """The currency formatter was given a non-finite or non-numeric amount."""


class SyncError(TallyError):
    """Transport or persistence collaborator failure. Retried, never fatal."""
