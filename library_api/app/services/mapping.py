"""
Conversion between store records and API schemas.

Records carry internal details (soft-delete markers, holder counts,
association sets) that clients never see.  Update payloads are turned
into plain column changes here so the services can apply them without
touching lending state.
"""

from typing import Any, Dict, List

from ..schemas.book import BookCreate, BookRead, BookUpdate
from ..schemas.reader import ReaderCreate, ReaderRead, ReaderUpdate
from .store import BookRecord, ReaderRecord

# Reader columns that may be cleared by sending ``null``.
NULLABLE_READER_FIELDS = {"birth_date"}


def book_to_read(book: BookRecord) -> BookRead:
    return BookRead.model_validate(book)


def books_to_read(books: List[BookRecord]) -> List[BookRead]:
    return [book_to_read(book) for book in books]


def reader_to_read(reader: ReaderRecord) -> ReaderRead:
    """Render a reader together with the books it holds.

    The reader must have been fetched with ``include_books=True``;
    otherwise the book list is empty.
    """
    return ReaderRead(
        id=reader.id,
        fio=reader.fio,
        birth_date=reader.birth_date,
        books=books_to_read(reader.books or []),
    )


def readers_to_read(readers: List[ReaderRecord]) -> List[ReaderRead]:
    return [reader_to_read(reader) for reader in readers]


def book_values(data: BookCreate) -> Dict[str, Any]:
    return data.model_dump()


def reader_values(data: ReaderCreate) -> Dict[str, Any]:
    values = data.model_dump()
    if values["birth_date"] is not None:
        values["birth_date"] = values["birth_date"].isoformat()
    return values


def book_changes(update: BookUpdate) -> Dict[str, Any]:
    """Column changes for the fields the client sent (``null`` is ignored)."""
    return {k: v for k, v in update.model_dump(exclude_unset=True).items() if v is not None}


def reader_changes(update: ReaderUpdate) -> Dict[str, Any]:
    changes: Dict[str, Any] = {}
    for key, value in update.model_dump(exclude_unset=True).items():
        if value is None and key not in NULLABLE_READER_FIELDS:
            continue
        if key == "birth_date" and value is not None:
            value = value.isoformat()
        changes[key] = value
    return changes
