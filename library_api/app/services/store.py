"""
Entity store for books, readers and the lending association.

Every function takes an open ``sqlite3.Cursor`` so that the calling
service decides the transaction boundary: reads use
``core.db.get_cursor`` and writes run inside ``core.db.transaction``.
All fetches are active-only; soft-deleted rows are filtered with the
helpers from ``core.soft_delete``.

Availability is never stored.  ``holder_count`` is computed from the
``book_readers`` table by a correlated subquery each time a book is
read.
"""

import sqlite3
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set

from ..core.soft_delete import exclude_deleted, not_deleted, where_active

# Live number of readers holding book ``b``.
HOLDER_COUNT_SQL = "(SELECT COUNT(*) FROM book_readers br WHERE br.book_id = b.id)"

# Availability classification over the ``holder_count`` column of ``BookStore.fetch_all``.
GIVEN_OUT_CLAUSE = "b.holder_count > 0"
AVAILABLE_CLAUSE = "b.holder_count < b.exemplar_count"

# SQLite caps the number of host parameters per statement.
_IN_CHUNK_SIZE = 500


@dataclass
class BookRecord:
    id: str
    name: str
    author: str
    article: str
    publication_year: str
    exemplar_count: int
    holder_count: int = 0
    delete_time: Optional[str] = None
    # Ids of the readers holding the book; ``None`` when not loaded.
    reader_ids: Optional[Set[str]] = None

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "BookRecord":
        return cls(
            id=row["id"],
            name=row["name"],
            author=row["author"],
            article=row["article"],
            publication_year=row["publication_year"],
            exemplar_count=row["exemplar_count"],
            holder_count=row["holder_count"],
            delete_time=row["delete_time"],
        )


@dataclass
class ReaderRecord:
    id: str
    fio: str
    birth_date: Optional[str] = None
    delete_time: Optional[str] = None
    # Books currently held by the reader; ``None`` when not loaded.
    books: Optional[List[BookRecord]] = field(default=None)

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "ReaderRecord":
        return cls(
            id=row["id"],
            fio=row["fio"],
            birth_date=row["birth_date"],
            delete_time=row["delete_time"],
        )


def _new_id() -> str:
    return str(uuid.uuid4())


def _chunks(values: Sequence[str]) -> Iterable[Sequence[str]]:
    for start in range(0, len(values), _IN_CHUNK_SIZE):
        yield values[start:start + _IN_CHUNK_SIZE]


def _update_columns(
    cursor: sqlite3.Cursor,
    table: str,
    allowed: Sequence[str],
    entity_id: str,
    changes: Dict[str, Any],
) -> None:
    unknown = set(changes) - set(allowed)
    if unknown:
        raise KeyError(f"Cannot update {table} columns: {', '.join(sorted(unknown))}")
    if not changes:
        return
    assignments = ", ".join(f"{column} = ?" for column in changes)
    cursor.execute(
        f"UPDATE {table} SET {assignments} WHERE id = ? AND {not_deleted()}",
        (*changes.values(), entity_id),
    )


class BookStore:
    """Persistence for ``books`` rows."""

    COLUMNS = ("name", "author", "article", "publication_year", "exemplar_count")
    _SELECT = f"SELECT b.*, {HOLDER_COUNT_SQL} AS holder_count FROM books b"

    @classmethod
    def insert(cls, cursor: sqlite3.Cursor, values: Dict[str, Any]) -> BookRecord:
        book_id = _new_id()
        cursor.execute(
            """
            INSERT INTO books (id, name, author, article, publication_year, exemplar_count)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                book_id,
                values.get("name", ""),
                values.get("author", ""),
                values.get("article", ""),
                values.get("publication_year", ""),
                values.get("exemplar_count", 0),
            ),
        )
        return cls.fetch(cursor, book_id)

    @classmethod
    def fetch(
        cls, cursor: sqlite3.Cursor, book_id: str, include_readers: bool = False
    ) -> Optional[BookRecord]:
        books = cls.fetch_all(cursor, ["b.id = ?"], [str(book_id)], include_readers=include_readers)
        return books[0] if books else None

    @classmethod
    def fetch_all(
        cls,
        cursor: sqlite3.Cursor,
        clauses: Sequence[str] = (),
        params: Sequence[Any] = (),
        include_readers: bool = False,
    ) -> List[BookRecord]:
        """Return active books matching all ``clauses``.

        Clauses may refer to the book table as ``b`` and to the live
        holder count as ``holder_count``.
        """
        query = f"SELECT * FROM ({cls._SELECT}{where_active('b')}) AS b"
        if clauses:
            query += " WHERE " + " AND ".join(clauses)
        query += " ORDER BY b.name, b.id"
        books = [BookRecord.from_row(row) for row in cursor.execute(query, tuple(params)).fetchall()]
        if include_readers:
            for book in books:
                book.reader_ids = LoanStore.reader_ids(cursor, book.id)
        return books

    @classmethod
    def fetch_for_readers(cls, cursor: sqlite3.Cursor, reader_ids: Sequence[str]) -> Dict[str, List[BookRecord]]:
        """Map each reader id to the active books it holds."""
        held: Dict[str, List[BookRecord]] = {reader_id: [] for reader_id in reader_ids}
        for chunk in _chunks(list(reader_ids)):
            placeholders = ", ".join("?" for _ in chunk)
            rows = cursor.execute(
                f"""
                SELECT loan.reader_id AS reader_id, b.*, {HOLDER_COUNT_SQL} AS holder_count
                FROM book_readers loan
                JOIN books b ON b.id = loan.book_id
                WHERE loan.reader_id IN ({placeholders})
                ORDER BY b.name, b.id
                """,
                tuple(chunk),
            ).fetchall()
            for row in exclude_deleted(rows):
                held[row["reader_id"]].append(BookRecord.from_row(row))
        return held

    @classmethod
    def update(cls, cursor: sqlite3.Cursor, book_id: str, changes: Dict[str, Any]) -> None:
        _update_columns(cursor, "books", cls.COLUMNS, str(book_id), changes)

    @classmethod
    def mark_deleted(cls, cursor: sqlite3.Cursor, book_id: str, timestamp: str) -> None:
        cursor.execute(
            f"UPDATE books SET delete_time = ? WHERE id = ? AND {not_deleted()}",
            (timestamp, str(book_id)),
        )


class ReaderStore:
    """Persistence for ``readers`` rows."""

    COLUMNS = ("fio", "birth_date")

    @classmethod
    def insert(cls, cursor: sqlite3.Cursor, values: Dict[str, Any]) -> ReaderRecord:
        reader_id = _new_id()
        cursor.execute(
            "INSERT INTO readers (id, fio, birth_date) VALUES (?, ?, ?)",
            (reader_id, values.get("fio", ""), values.get("birth_date")),
        )
        return cls.fetch(cursor, reader_id, include_books=True)

    @classmethod
    def fetch(
        cls, cursor: sqlite3.Cursor, reader_id: str, include_books: bool = False
    ) -> Optional[ReaderRecord]:
        readers = cls.fetch_all(cursor, ["r.id = ?"], [str(reader_id)], include_books=include_books)
        return readers[0] if readers else None

    @classmethod
    def fetch_all(
        cls,
        cursor: sqlite3.Cursor,
        clauses: Sequence[str] = (),
        params: Sequence[Any] = (),
        include_books: bool = False,
    ) -> List[ReaderRecord]:
        """Return active readers matching all ``clauses`` (table alias ``r``)."""
        query = "SELECT r.* FROM readers r" + where_active("r", clauses) + " ORDER BY r.fio, r.id"
        readers = [ReaderRecord.from_row(row) for row in cursor.execute(query, tuple(params)).fetchall()]
        if include_books and readers:
            held = BookStore.fetch_for_readers(cursor, [reader.id for reader in readers])
            for reader in readers:
                reader.books = held[reader.id]
        return readers

    @classmethod
    def update(cls, cursor: sqlite3.Cursor, reader_id: str, changes: Dict[str, Any]) -> None:
        _update_columns(cursor, "readers", cls.COLUMNS, str(reader_id), changes)

    @classmethod
    def mark_deleted(cls, cursor: sqlite3.Cursor, reader_id: str, timestamp: str) -> None:
        cursor.execute(
            f"UPDATE readers SET delete_time = ? WHERE id = ? AND {not_deleted()}",
            (timestamp, str(reader_id)),
        )


class LoanStore:
    """Persistence for the ``book_readers`` association."""

    @staticmethod
    def exists(cursor: sqlite3.Cursor, book_id: str, reader_id: str) -> bool:
        row = cursor.execute(
            "SELECT 1 FROM book_readers WHERE book_id = ? AND reader_id = ?",
            (str(book_id), str(reader_id)),
        ).fetchone()
        return row is not None

    @staticmethod
    def reader_ids(cursor: sqlite3.Cursor, book_id: str) -> Set[str]:
        rows = cursor.execute(
            "SELECT reader_id FROM book_readers WHERE book_id = ?", (str(book_id),)
        ).fetchall()
        return {row["reader_id"] for row in rows}

    @staticmethod
    def add(cursor: sqlite3.Cursor, book_id: str, reader_id: str) -> None:
        cursor.execute(
            "INSERT INTO book_readers (book_id, reader_id) VALUES (?, ?)",
            (str(book_id), str(reader_id)),
        )

    @staticmethod
    def remove(cursor: sqlite3.Cursor, book_id: str, reader_id: str) -> int:
        cursor.execute(
            "DELETE FROM book_readers WHERE book_id = ? AND reader_id = ?",
            (str(book_id), str(reader_id)),
        )
        return cursor.rowcount

    @staticmethod
    def clear_book(cursor: sqlite3.Cursor, book_id: str) -> int:
        cursor.execute("DELETE FROM book_readers WHERE book_id = ?", (str(book_id),))
        return cursor.rowcount

    @staticmethod
    def clear_reader(cursor: sqlite3.Cursor, reader_id: str) -> int:
        cursor.execute("DELETE FROM book_readers WHERE reader_id = ?", (str(reader_id),))
        return cursor.rowcount
