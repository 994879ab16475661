"""
Lending rules: giving books to readers and taking them back.

A book may be held by at most ``exemplar_count`` readers, and a reader
holds a given book at most once.  Both checks and the write that
follows run in one ``BEGIN IMMEDIATE`` transaction, so two concurrent
requests for the last free exemplar cannot both succeed.  A rejected
request rolls the transaction back and leaves the state unchanged.
"""

import logging
import sqlite3
from typing import Tuple
from uuid import UUID

from ..core.db import transaction
from ..core.errors import AlreadyLentError, CapacityExceededError, NotFoundError, NotLentError
from ..schemas.reader import ReaderRead
from .mapping import reader_to_read
from .store import BookRecord, BookStore, LoanStore, ReaderRecord, ReaderStore

logger = logging.getLogger(__name__)


def _resolve(cursor: sqlite3.Cursor, book_id: UUID, reader_id: UUID) -> Tuple[BookRecord, ReaderRecord]:
    reader = ReaderStore.fetch(cursor, reader_id)
    if reader is None:
        raise NotFoundError("Reader", reader_id)
    book = BookStore.fetch(cursor, book_id)
    if book is None:
        raise NotFoundError("Book", book_id)
    return book, reader


class LendingService:
    """Service applying lend and return transitions."""

    @classmethod
    async def give_book(cls, book_id: UUID, reader_id: UUID) -> ReaderRead:
        """Lend a book to a reader and return the reader with its holdings.

        Raises
        ------
        NotFoundError
            The book or the reader is unknown or deleted.
        AlreadyLentError
            The reader already holds this book.
        CapacityExceededError
            Every exemplar of the book is given out.
        """
        with transaction() as cursor:
            book, reader = _resolve(cursor, book_id, reader_id)
            if LoanStore.exists(cursor, book.id, reader.id):
                logger.info("Reader %s already holds book %s", reader.id, book.id)
                raise AlreadyLentError()
            if book.holder_count >= book.exemplar_count:
                logger.info(
                    "Book %s has no free exemplars (%s of %s given out)",
                    book.id,
                    book.holder_count,
                    book.exemplar_count,
                )
                raise CapacityExceededError()
            try:
                LoanStore.add(cursor, book.id, reader.id)
            except sqlite3.IntegrityError as exc:
                raise AlreadyLentError() from exc
            reader = ReaderStore.fetch(cursor, reader.id, include_books=True)
        logger.info("Gave book %s to reader %s", book.id, reader.id)
        return reader_to_read(reader)

    @classmethod
    async def return_book(cls, book_id: UUID, reader_id: UUID) -> None:
        """Take a book back from a reader.

        Raises ``NotFoundError`` for unknown ids and ``NotLentError``
        when the reader does not hold the book.
        """
        with transaction() as cursor:
            book, reader = _resolve(cursor, book_id, reader_id)
            if not LoanStore.remove(cursor, book.id, reader.id):
                logger.info("Reader %s does not hold book %s", reader.id, book.id)
                raise NotLentError()
        logger.info("Reader %s returned book %s", reader.id, book.id)
