from library_api.app.core.db import get_cursor
from library_api.app.schemas.book import BookCreate
from library_api.app.schemas.reader import ReaderCreate
from library_api.app.services.book_service import BookService
from library_api.app.services.reader_service import ReaderService
from library_api.app.services.store import BookStore


async def new_book(name: str = "Dune", exemplar_count: int = 1, **fields):
    return await BookService.create_book(BookCreate(name=name, exemplar_count=exemplar_count, **fields))


async def new_reader(fio: str = "Ann", **fields):
    return await ReaderService.create_reader(ReaderCreate(fio=fio, **fields))


def holder_counts():
    """Map book id -> (holder_count, exemplar_count) for active books."""
    with get_cursor() as cursor:
        return {
            book.id: (book.holder_count, book.exemplar_count)
            for book in BookStore.fetch_all(cursor)
        }


def loan_rows():
    with get_cursor() as cursor:
        rows = cursor.execute("SELECT book_id, reader_id FROM book_readers").fetchall()
    return {(row["book_id"], row["reader_id"]) for row in rows}
