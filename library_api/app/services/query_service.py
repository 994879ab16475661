"""
Read-only queries over the active books and readers.

Availability is derived from the live holder count on every call:
a book is given out when at least one reader holds it and available
while fewer readers hold it than it has exemplars.  Searches are
case-insensitive substring matches using Unicode case folding.
"""

from typing import List

from ..core.db import get_cursor
from ..schemas.book import BookRead
from ..schemas.reader import ReaderRead
from .mapping import books_to_read, readers_to_read
from .store import AVAILABLE_CLAUSE, GIVEN_OUT_CLAUSE, BookStore, ReaderStore


class QueryService:
    """Listings and searches.  Empty results are returned as empty lists."""

    @classmethod
    async def list_given_out_books(cls) -> List[BookRead]:
        with get_cursor() as cursor:
            return books_to_read(BookStore.fetch_all(cursor, [GIVEN_OUT_CLAUSE]))

    @classmethod
    async def list_available_books(cls) -> List[BookRead]:
        with get_cursor() as cursor:
            return books_to_read(BookStore.fetch_all(cursor, [AVAILABLE_CLAUSE]))

    @classmethod
    async def search_books(cls, search_text: str) -> List[BookRead]:
        with get_cursor() as cursor:
            books = BookStore.fetch_all(
                cursor, ["INSTR(casefold(b.name), ?) > 0"], [search_text.casefold()]
            )
        return books_to_read(books)

    @classmethod
    async def search_readers(cls, search_text: str) -> List[ReaderRead]:
        with get_cursor() as cursor:
            readers = ReaderStore.fetch_all(
                cursor,
                ["INSTR(casefold(r.fio), ?) > 0"],
                [search_text.casefold()],
                include_books=True,
            )
        return readers_to_read(readers)
