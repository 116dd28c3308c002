"""Helper utilities for tests."""

from pathlib import Path
import sqlite3

from db.migrator import Migrator


def run_migrations(conn: sqlite3.Connection, migrations_dir: Path) -> None:
    """Run all SQL migrations in order.

    Args:
        conn: SQLite connection to run migrations against.
        migrations_dir: Path to directory containing .sql migration files.
    """
    Migrator(migrations_dir).apply(conn)


class FailingPersistence:
    """Persistence collaborator whose writes can be made to fail on demand."""

    def __init__(self, inner=None):
        self.inner = inner
        self.fail_writes = False
        self.calls = []

    def _maybe_fail(self, op):
        self.calls.append(op)
        if self.fail_writes:
            raise ConnectionError(f"{op} failed: backend unreachable")

    def list(self, user_id):
        self.calls.append("list")
        return self.inner.list(user_id) if self.inner else []

    def create(self, entry):
        self._maybe_fail("create")
        return self.inner.create(entry) if self.inner else entry

    def update(self, entry):
        self._maybe_fail("update")
        return self.inner.update(entry) if self.inner else entry

    def delete(self, user_id, entry_id):
        self._maybe_fail("delete")
        return self.inner.delete(user_id, entry_id) if self.inner else True
