"""In-memory ledger of one user's budget entries.

A LedgerStore is created per session and is the only place entries are
mutated. User-initiated changes are validated, applied optimistically, then
written through the persistence collaborator; a failed write is rolled back.
Changes that arrive from the change feed go through the apply_* methods,
which trust the already-validated payload.
"""

from contextlib import contextmanager
from dataclasses import replace
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Set, Tuple
from errors import AlreadyRemovedError, NotFoundError, SyncError, ValidationError
from models.budget_entry import (
    BudgetEntry,
    BudgetEntryInput,
    MUTABLE_FIELDS,
    validate_entry_fields,
)
from logger import get_logger

logger = get_logger("ledger")

# Listener actions
ADDED = "added"
UPDATED = "updated"
REMOVED = "removed"
ROLLED_BACK = "rolled_back"
RESYNCED = "resynced"
CLEARED = "cleared"

BudgetSnapshot = Tuple[BudgetEntry, ...]
Listener = Callable[[str, object], None]


class LedgerStore:
    """Holds the canonical in-memory list of entries for one user.

    Args:
        user_id: The user every entry in this store belongs to.
        persistence: Optional persistence collaborator with create/update/
                     delete/list (e.g. EntryService). Without one, entries stay
                     local and unconfirmed.
    """

    def __init__(self, user_id: str, persistence=None):
        self.user_id = user_id
        self.persistence = persistence
        self._entries: Dict[str, BudgetEntry] = {}
        self._pending: Set[str] = set()
        # Ids removed this session; reset by clear(), so bounded by session lifetime
        self._removed: Set[str] = set()
        self._listeners: List[Listener] = []
        self._mutating = False

    # Reads

    def all(self) -> BudgetSnapshot:
        """Get an immutable snapshot of the current entries."""
        return tuple(self._entries.values())

    def get(self, entry_id: str) -> Optional[BudgetEntry]:
        return self._entries.get(entry_id)

    def is_confirmed(self, entry_id: str) -> bool:
        """Whether an entry has been acknowledged by the persistence collaborator."""
        return entry_id in self._entries and entry_id not in self._pending

    def pending_ids(self) -> Set[str]:
        return set(self._pending)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, entry_id) -> bool:
        return entry_id in self._entries

    # Listeners

    def add_listener(self, listener: Listener) -> None:
        """Register a callback invoked as listener(action, entry_or_id) after each change."""
        self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    # User-initiated mutations

    def add(self, data: BudgetEntryInput) -> BudgetEntry:
        """Validate and add a new entry.

        Args:
            data: Name, amount, type, category and recurrence of the entry.

        Returns:
            The created BudgetEntry with its new id.

        Raises:
            ValidationError: If the input is invalid. Nothing is applied.
            SyncError: If the persistence write failed. The add is rolled back.
        """
        entry = BudgetEntry.create(self.user_id, data)

        with self._mutation("add"):
            self._entries[entry.id] = entry
            self._pending.add(entry.id)
            self._notify(ADDED, entry)

            if self.persistence is None:
                return entry

            try:
                self._call(self.persistence.create, entry)
            except SyncError:
                del self._entries[entry.id]
                self._pending.discard(entry.id)
                logger.warning(f"Rolled back add of entry {entry.id}")
                self._notify(ROLLED_BACK, entry.id)
                raise

            self._pending.discard(entry.id)

        return entry

    def update(self, entry_id: str, fields: Mapping[str, object]) -> BudgetEntry:
        """Replace fields of an existing entry.

        Args:
            entry_id: ID of the entry to change.
            fields: Any of name, amount, category, type, is_recurring.

        Returns:
            The updated BudgetEntry.

        Raises:
            NotFoundError: If no entry has this id.
            ValidationError: If a field is unknown/immutable or a value is invalid.
            SyncError: If the persistence write failed. The update is rolled back.
        """
        current = self._entries.get(entry_id)
        if current is None:
            raise self._not_found(entry_id)

        unknown = set(fields) - MUTABLE_FIELDS
        if unknown:
            raise ValidationError(f"Cannot update fields: {', '.join(sorted(unknown))}")

        name, amount, entry_type = validate_entry_fields(
            fields.get("name", current.name),
            fields.get("amount", current.amount),
            fields.get("type", current.type),
        )
        updated = replace(
            current,
            name=name,
            amount=amount,
            type=entry_type,
            category=fields.get("category", current.category) or "",
            is_recurring=bool(fields.get("is_recurring", current.is_recurring)),
        )

        with self._mutation("update"):
            was_pending = entry_id in self._pending
            self._entries[entry_id] = updated
            self._pending.add(entry_id)
            self._notify(UPDATED, updated)

            if self.persistence is None:
                return updated

            try:
                self._call(self.persistence.update, updated)
            except SyncError:
                self._entries[entry_id] = current
                if not was_pending:
                    self._pending.discard(entry_id)
                logger.warning(f"Rolled back update of entry {entry_id}")
                self._notify(ROLLED_BACK, current)
                raise

            self._pending.discard(entry_id)

        return updated

    def remove(self, entry_id: str) -> None:
        """Remove an entry.

        Raises:
            AlreadyRemovedError: If the entry was already removed.
            NotFoundError: If no entry with this id was ever in the ledger.
            SyncError: If the persistence write failed. The entry is restored.
        """
        current = self._entries.get(entry_id)
        if current is None:
            raise self._not_found(entry_id)

        with self._mutation("remove"):
            del self._entries[entry_id]
            self._removed.add(entry_id)
            self._notify(REMOVED, entry_id)

            if self.persistence is None:
                self._pending.discard(entry_id)
                return

            try:
                self._call(self.persistence.delete, self.user_id, entry_id)
            except SyncError:
                self._entries[entry_id] = current
                self._removed.discard(entry_id)
                logger.warning(f"Rolled back removal of entry {entry_id}")
                self._notify(ROLLED_BACK, current)
                raise

            self._pending.discard(entry_id)

    # Confirmed changes from the change feed

    def apply_insert(self, entry: BudgetEntry) -> bool:
        """Apply a server-confirmed insert without re-validating it.

        An insert for an id already present (the echo of a local add) replaces
        the local copy and confirms it.

        Returns:
            False if the entry belongs to another user, or was removed locally
            before its insert arrived, and was ignored.
        """
        if entry.user_id != self.user_id:
            return False

        if entry.id in self._removed:
            # Late echo of an add the user has since removed
            logger.info(f"Ignoring insert for removed entry {entry.id}")
            return False

        if self._entries.get(entry.id) == entry:
            # Echo of a change this store already holds
            self._pending.discard(entry.id)
            return True

        with self._mutation("apply_insert"):
            self._entries[entry.id] = entry
            self._pending.discard(entry.id)
            self._notify(ADDED, entry)
        return True

    def apply_update(self, entry: BudgetEntry) -> bool:
        """Apply a server-confirmed update.

        Returns:
            False if the id is not in the ledger (the change is ignored).
        """
        if entry.user_id != self.user_id or entry.id not in self._entries:
            return False

        if self._entries[entry.id] == entry:
            self._pending.discard(entry.id)
            return True

        with self._mutation("apply_update"):
            self._entries[entry.id] = entry
            self._pending.discard(entry.id)
            self._notify(UPDATED, entry)
        return True

    def apply_delete(self, entry_id: str) -> bool:
        """Apply a server-confirmed delete.

        Returns:
            False if the id is not in the ledger (the change is ignored).
        """
        if entry_id not in self._entries:
            return False

        with self._mutation("apply_delete"):
            del self._entries[entry_id]
            self._pending.discard(entry_id)
            self._removed.add(entry_id)
            self._notify(REMOVED, entry_id)
        return True

    def replace_all(self, entries: Iterable[BudgetEntry]) -> None:
        """Replace confirmed entries with a fresh list from the collaborator.

        Unconfirmed local entries are kept so optimistic work is not lost.
        """
        with self._mutation("replace_all"):
            fresh = {e.id: e for e in entries if e.user_id == self.user_id}
            for entry_id in self._pending:
                if entry_id in self._entries and entry_id not in fresh:
                    fresh[entry_id] = self._entries[entry_id]
            self._entries = fresh
            self._pending &= set(fresh)
            self._notify(RESYNCED, len(fresh))

    def load(self) -> int:
        """Load the user's entries from the persistence collaborator.

        Returns:
            Number of entries in the ledger afterwards.

        Raises:
            SyncError: If the collaborator cannot be read.
        """
        if self.persistence is None:
            return len(self._entries)
        self.replace_all(self._call(self.persistence.list, self.user_id))
        logger.info(f"Loaded {len(self._entries)} budget entries for user {self.user_id}")
        return len(self._entries)

    def clear(self) -> None:
        """Drop every entry and all tracking state (sign-out / identity change)."""
        with self._mutation("clear"):
            self._entries = {}
            self._pending = set()
            self._removed = set()
            self._notify(CLEARED, None)

    # Internals

    @contextmanager
    def _mutation(self, operation: str):
        if self._mutating:
            raise RuntimeError(
                f"Ledger {operation} called while another mutation is in progress"
            )
        self._mutating = True
        try:
            yield
        finally:
            self._mutating = False

    def _call(self, call, *args):
        try:
            return call(*args)
        except SyncError:
            raise
        except Exception as e:
            raise SyncError(f"Persistence call failed: {e}") from e

    def _not_found(self, entry_id: str) -> NotFoundError:
        if entry_id in self._removed:
            return AlreadyRemovedError(entry_id)
        return NotFoundError(entry_id)

    def _notify(self, action: str, payload) -> None:
        for listener in list(self._listeners):
            try:
                listener(action, payload)
            except Exception:
                logger.exception(f"Ledger listener failed on '{action}'")
