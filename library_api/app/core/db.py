"""
SQLite database integration and simple migration system.

This module provides functions for obtaining a database connection
(``get_connection``), a read cursor (``get_cursor``), a write
transaction (``transaction``) and applying migrations on application
start (``init_db``).

The migration mechanism stores applied migration versions in the
``migrations`` table and executes new migrations in order.
"""

import logging
import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from .config import settings
from .logging_config import SQL_LOGGER_NAME

logger = logging.getLogger(__name__)


MIGRATIONS: list[tuple[int, str]] = [
    # Migration 1: books, readers and the lending association
    (
        1,
        """
        CREATE TABLE IF NOT EXISTS books (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL DEFAULT '',
            author TEXT NOT NULL DEFAULT '',
            article TEXT NOT NULL DEFAULT '',
            publication_year TEXT NOT NULL DEFAULT '',
            exemplar_count INTEGER NOT NULL DEFAULT 0 CHECK (exemplar_count >= 0),
            delete_time TIMESTAMP
        );

        CREATE TABLE IF NOT EXISTS readers (
            id TEXT PRIMARY KEY,
            fio TEXT NOT NULL DEFAULT '',
            birth_date DATE,
            delete_time TIMESTAMP
        );

        -- One row per lent exemplar.  The composite key forbids lending
        -- the same book to the same reader twice.
        CREATE TABLE IF NOT EXISTS book_readers (
            book_id TEXT NOT NULL,
            reader_id TEXT NOT NULL,
            PRIMARY KEY (book_id, reader_id),
            FOREIGN KEY(book_id) REFERENCES books(id) ON DELETE CASCADE,
            FOREIGN KEY(reader_id) REFERENCES readers(id) ON DELETE CASCADE
        );

        CREATE INDEX IF NOT EXISTS idx_book_readers_reader_id ON book_readers(reader_id);
        """,
    ),
    # Migration 2: speed up active-only scans
    (
        2,
        """
        CREATE INDEX IF NOT EXISTS idx_books_delete_time ON books(delete_time);
        CREATE INDEX IF NOT EXISTS idx_readers_delete_time ON readers(delete_time);
        """,
    ),
]


def get_database_path() -> str:
    """Compute the path to the SQLite database file.

    If ``settings.database_url`` is an absolute path, use it directly.
    Otherwise resolve it relative to the project root.
    """
    db_url = settings.database_url
    if os.path.isabs(db_url):
        return db_url
    base_dir = Path(__file__).resolve().parent.parent.parent  # library_api/
    return str((base_dir / db_url).resolve())


def _casefold(value: Optional[str]) -> Optional[str]:
    return value.casefold() if value is not None else None


def get_connection() -> sqlite3.Connection:
    """Create and return a new SQLite connection.

    Rows are returned as ``sqlite3.Row`` so columns can be accessed by
    name.  Foreign keys are enabled for the lifetime of the connection
    and a ``casefold`` SQL function is registered for case-insensitive
    searches (SQLite's own ``LOWER`` only folds ASCII letters).
    """
    conn = sqlite3.connect(get_database_path(), timeout=settings.database_timeout)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    conn.create_function("casefold", 1, _casefold, deterministic=True)
    if settings.debug:
        conn.set_trace_callback(logging.getLogger(SQL_LOGGER_NAME).debug)
    return conn


@contextmanager
def get_cursor() -> Iterator[sqlite3.Cursor]:
    """Context manager that yields a cursor and closes the connection on exit."""
    conn = get_connection()
    try:
        yield conn.cursor()
        conn.commit()
    finally:
        conn.close()


@contextmanager
def transaction() -> Iterator[sqlite3.Cursor]:
    """Yield a cursor inside a ``BEGIN IMMEDIATE`` transaction.

    The write lock is taken before the first read, so a lend that
    counts the current holders and then inserts a new association
    cannot interleave with another writer.  The transaction is
    committed on normal exit and rolled back if the block raises.
    """
    conn = get_connection()
    # Manage BEGIN/COMMIT explicitly instead of the module's implicit transactions.
    conn.isolation_level = None
    cursor = conn.cursor()
    try:
        cursor.execute("BEGIN IMMEDIATE")
        try:
            yield cursor
        except Exception:
            cursor.execute("ROLLBACK")
            raise
        cursor.execute("COMMIT")
    finally:
        conn.close()


def init_db() -> None:
    """Initialise the database and apply pending migrations.

    Creates the ``migrations`` table if it does not exist, checks the
    current schema version, and applies any new migrations defined in
    ``MIGRATIONS``.  When adding a migration, append it with an
    incremented version number.
    """
    with get_cursor() as cursor:
        cursor.execute(
            "CREATE TABLE IF NOT EXISTS migrations (version INTEGER PRIMARY KEY)"
        )
        cursor.execute("SELECT MAX(version) as version FROM migrations")
        row = cursor.fetchone()
        current_version = row["version"] if row and row["version"] is not None else 0

        for version, sql in MIGRATIONS:
            if version > current_version:
                logger.info("Applying migration %s", version)
                cursor.executescript(sql)
                cursor.execute(
                    "INSERT INTO migrations (version) VALUES (?)", (version,)
                )
                current_version = version
