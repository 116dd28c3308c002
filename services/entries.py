"""Budget entry service for database operations.

This is the persistence collaborator behind the ledger store. Every
successful write is published to the attached change feed.
"""

import sqlite3
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional
from errors import SyncError
from models.budget_entry import BudgetEntry
from sync.feed import ChangeEvent, INSERT, UPDATE, DELETE
from logger import get_logger

logger = get_logger()

_ENTRY_SELECT_FIELDS = (
    "id, user_id, name, amount, category, entry_type, is_recurring, created_at"
)


class EntryService:
    """Service for managing budget entries, scoped by user."""

    def __init__(self, db_manager, feed=None):
        """Initialize the entry service.

        Args:
            db_manager: Database manager instance for database operations.
            feed: Optional LocalChangeFeed to publish committed changes to.
        """
        self.db_manager = db_manager
        self.feed = feed

    def list(self, user_id: str) -> List[BudgetEntry]:
        """Get all entries for a user.

        Args:
            user_id: Owning user.

        Returns:
            List of BudgetEntry objects, newest first.

        Raises:
            SyncError: If the database cannot be read.
        """
        try:
            with self.db_manager.connect() as conn:
                cursor = conn.execute(
                    f"""
                    SELECT {_ENTRY_SELECT_FIELDS}
                    FROM budget_entries
                    WHERE user_id = ?
                    ORDER BY created_at DESC, id
                    """,
                    (user_id,),
                )
                rows = cursor.fetchall()
        except sqlite3.Error as e:
            raise SyncError(f"Failed to list budget entries: {e}") from e

        return [self._row_to_entry(row) for row in rows]

    def find(self, user_id: str, entry_id: str) -> Optional[BudgetEntry]:
        """Get a single entry by ID.

        Returns:
            BudgetEntry if found for this user, None otherwise.
        """
        try:
            with self.db_manager.connect() as conn:
                cursor = conn.execute(
                    f"SELECT {_ENTRY_SELECT_FIELDS} FROM budget_entries "
                    "WHERE id = ? AND user_id = ?",
                    (entry_id, user_id),
                )
                row = cursor.fetchone()
        except sqlite3.Error as e:
            raise SyncError(f"Failed to read budget entry {entry_id}: {e}") from e

        return self._row_to_entry(row) if row else None

    def create(self, entry: BudgetEntry) -> BudgetEntry:
        """Insert a new entry (its id is assigned by the caller).

        Args:
            entry: BudgetEntry to store.

        Returns:
            The stored entry.

        Raises:
            SyncError: If the insert fails (e.g., duplicate ID).
        """
        try:
            with self.db_manager.connect() as conn:
                conn.execute(
                    f"""
                    INSERT INTO budget_entries ({_ENTRY_SELECT_FIELDS})
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        entry.id,
                        entry.user_id,
                        entry.name,
                        str(entry.amount),
                        entry.category,
                        entry.type,
                        int(entry.is_recurring),
                        entry.created_at.isoformat(),
                    ),
                )
                conn.commit()
        except sqlite3.Error as e:
            raise SyncError(f"Failed to create budget entry {entry.id}: {e}") from e

        logger.debug(f"Stored budget entry {entry.id} for user {entry.user_id}")
        self._publish(ChangeEvent(INSERT, entry.user_id, new=entry.to_dict()))
        return entry

    def update(self, entry: BudgetEntry) -> BudgetEntry:
        """Replace the mutable fields of an existing entry.

        Args:
            entry: BudgetEntry carrying the new field values.

        Returns:
            The updated entry.

        Raises:
            SyncError: If the entry does not exist for this user or the update fails.
        """
        try:
            with self.db_manager.connect() as conn:
                cursor = conn.execute(
                    """
                    UPDATE budget_entries
                    SET name = ?, amount = ?, category = ?, entry_type = ?,
                        is_recurring = ?, updated_at = ?
                    WHERE id = ? AND user_id = ?
                    """,
                    (
                        entry.name,
                        str(entry.amount),
                        entry.category,
                        entry.type,
                        int(entry.is_recurring),
                        datetime.now(timezone.utc).isoformat(),
                        entry.id,
                        entry.user_id,
                    ),
                )
                conn.commit()
        except sqlite3.Error as e:
            raise SyncError(f"Failed to update budget entry {entry.id}: {e}") from e

        if cursor.rowcount == 0:
            raise SyncError(f"Budget entry {entry.id} not found in storage")

        self._publish(ChangeEvent(UPDATE, entry.user_id, new=entry.to_dict()))
        return entry

    def delete(self, user_id: str, entry_id: str) -> bool:
        """Delete an entry by ID.

        Returns:
            True if the entry was deleted, False if not found.

        Raises:
            SyncError: If the delete fails.
        """
        try:
            with self.db_manager.connect() as conn:
                cursor = conn.execute(
                    "DELETE FROM budget_entries WHERE id = ? AND user_id = ?",
                    (entry_id, user_id),
                )
                conn.commit()
        except sqlite3.Error as e:
            raise SyncError(f"Failed to delete budget entry {entry_id}: {e}") from e

        deleted = cursor.rowcount > 0
        if deleted:
            self._publish(ChangeEvent(DELETE, user_id, old={"id": entry_id}))
        return deleted

    def _publish(self, event: ChangeEvent) -> None:
        if self.feed is not None:
            self.feed.publish(event)

    def _row_to_entry(self, row) -> BudgetEntry:
        """Convert a database row to a BudgetEntry object."""
        return BudgetEntry(
            id=row[0],
            user_id=row[1],
            name=row[2],
            amount=Decimal(row[3]),
            category=row[4] or "",
            type=row[5],
            is_recurring=bool(row[6]),
            created_at=datetime.fromisoformat(row[7]),
        )
