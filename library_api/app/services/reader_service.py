"""
Business logic for readers.

Readers are always returned with the books they currently hold.
Deleting a reader makes every book it holds available again before
the reader is marked deleted.
"""

import logging
from typing import List
from uuid import UUID

from ..core.db import get_cursor, transaction
from ..core.errors import NotFoundError
from ..core.soft_delete import deletion_timestamp
from ..schemas.reader import ReaderCreate, ReaderRead, ReaderUpdate
from .mapping import reader_changes, reader_to_read, reader_values, readers_to_read
from .store import LoanStore, ReaderStore

logger = logging.getLogger(__name__)


class ReaderService:
    """Service for managing readers."""

    @classmethod
    async def create_reader(cls, data: ReaderCreate) -> ReaderRead:
        with transaction() as cursor:
            reader = ReaderStore.insert(cursor, reader_values(data))
        logger.info("Registered reader %s '%s'", reader.id, reader.fio)
        return reader_to_read(reader)

    @classmethod
    async def get_reader(cls, reader_id: UUID) -> ReaderRead:
        """Retrieve a single active reader with its books.

        Raises ``NotFoundError`` if the id is unknown or the reader
        has been deleted.
        """
        with get_cursor() as cursor:
            reader = ReaderStore.fetch(cursor, reader_id, include_books=True)
        if reader is None:
            raise NotFoundError("Reader", reader_id)
        return reader_to_read(reader)

    @classmethod
    async def list_readers(cls) -> List[ReaderRead]:
        with get_cursor() as cursor:
            return readers_to_read(ReaderStore.fetch_all(cursor, include_books=True))

    @classmethod
    async def update_reader(cls, reader_id: UUID, update: ReaderUpdate) -> None:
        changes = reader_changes(update)
        with transaction() as cursor:
            reader = ReaderStore.fetch(cursor, reader_id)
            if reader is None:
                raise NotFoundError("Reader", reader_id)
            ReaderStore.update(cursor, reader.id, changes)
        logger.info("Updated reader %s: %s", reader_id, ", ".join(changes) or "no changes")

    @classmethod
    async def delete_reader(cls, reader_id: UUID) -> None:
        """Soft-delete a reader, returning all of its books to the library."""
        with transaction() as cursor:
            reader = ReaderStore.fetch(cursor, reader_id)
            if reader is None:
                raise NotFoundError("Reader", reader_id)
            returned = LoanStore.clear_reader(cursor, reader.id)
            ReaderStore.mark_deleted(cursor, reader.id, deletion_timestamp())
        logger.info("Deleted reader %s; %s books returned", reader_id, returned)
