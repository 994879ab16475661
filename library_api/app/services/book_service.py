"""
Business logic for books.

The ``BookService`` creates, reads, updates and soft-deletes books.
Deleting a book returns every exemplar to the library first: all
readers holding it lose the association in the same transaction that
sets ``delete_time``.
"""

import logging
from typing import List
from uuid import UUID

from ..core.db import get_cursor, transaction
from ..core.errors import CapacityExceededError, NotFoundError
from ..core.soft_delete import deletion_timestamp
from ..schemas.book import BookCreate, BookRead, BookUpdate
from .mapping import book_changes, book_to_read, book_values, books_to_read
from .store import BookStore, LoanStore

logger = logging.getLogger(__name__)


class BookService:
    """Service for managing books."""

    @classmethod
    async def create_book(cls, data: BookCreate) -> BookRead:
        with transaction() as cursor:
            book = BookStore.insert(cursor, book_values(data))
        logger.info("Created book %s '%s' with %s exemplars", book.id, book.name, book.exemplar_count)
        return book_to_read(book)

    @classmethod
    async def get_book(cls, book_id: UUID) -> BookRead:
        """Retrieve a single active book.  Raises ``NotFoundError`` otherwise."""
        with get_cursor() as cursor:
            book = BookStore.fetch(cursor, book_id)
        if book is None:
            raise NotFoundError("Book", book_id)
        return book_to_read(book)

    @classmethod
    async def list_books(cls) -> List[BookRead]:
        with get_cursor() as cursor:
            return books_to_read(BookStore.fetch_all(cursor))

    @classmethod
    async def update_book(cls, book_id: UUID, update: BookUpdate) -> None:
        """Apply the scalar fields of ``update`` to an existing book.

        Lowering ``exemplar_count`` below the number of exemplars
        currently given out is rejected with ``CapacityExceededError``.
        """
        changes = book_changes(update)
        with transaction() as cursor:
            book = BookStore.fetch(cursor, book_id)
            if book is None:
                raise NotFoundError("Book", book_id)
            new_count = changes.get("exemplar_count", book.exemplar_count)
            if new_count < book.holder_count:
                raise CapacityExceededError(
                    f"Book has {book.holder_count} exemplars given out; "
                    f"exemplar count cannot be lowered to {new_count}"
                )
            BookStore.update(cursor, book.id, changes)
        logger.info("Updated book %s: %s", book_id, ", ".join(changes) or "no changes")

    @classmethod
    async def delete_book(cls, book_id: UUID) -> None:
        """Soft-delete a book after taking it back from all its holders."""
        with transaction() as cursor:
            book = BookStore.fetch(cursor, book_id, include_readers=True)
            if book is None:
                raise NotFoundError("Book", book_id)
            LoanStore.clear_book(cursor, book.id)
            BookStore.mark_deleted(cursor, book.id, deletion_timestamp())
        if book.reader_ids:
            logger.info(
                "Deleted book %s; returned from readers %s", book_id, ", ".join(sorted(book.reader_ids))
            )
        else:
            logger.info("Deleted book %s", book_id)
