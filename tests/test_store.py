"""Tests for the entity store, the soft-delete filter and the update rules."""

import sqlite3
from datetime import date

import pytest

from library_api.app.core.db import get_cursor, init_db, transaction
from library_api.app.core.errors import CapacityExceededError, NotFoundError
from library_api.app.core.soft_delete import exclude_deleted, not_deleted, where_active
from library_api.app.schemas.book import BookUpdate
from library_api.app.schemas.reader import ReaderUpdate
from library_api.app.services.book_service import BookService
from library_api.app.services.lending_service import LendingService
from library_api.app.services.reader_service import ReaderService
from library_api.app.services.mapping import book_to_read
from library_api.app.services.store import (
    AVAILABLE_CLAUSE,
    GIVEN_OUT_CLAUSE,
    BookRecord,
    BookStore,
    LoanStore,
    ReaderStore,
)

from .helpers import new_book, new_reader


def test_not_deleted_clause():
    assert not_deleted() == "delete_time IS NULL"
    assert not_deleted("b") == "b.delete_time IS NULL"
    assert where_active("r", ["r.id = ?"]) == " WHERE r.delete_time IS NULL AND r.id = ?"


def test_exclude_deleted_filters_any_sequence():
    rows = [
        {"id": "1", "delete_time": None},
        {"id": "2", "delete_time": "2024-01-01T00:00:00+00:00"},
        {"id": "3", "delete_time": None},
    ]
    assert [row["id"] for row in exclude_deleted(rows)] == ["1", "3"]


def test_migrations_are_idempotent():
    init_db()
    with get_cursor() as cursor:
        versions = [row["version"] for row in cursor.execute("SELECT version FROM migrations")]
    assert versions == [1, 2]


@pytest.mark.asyncio
async def test_association_is_unique_in_storage():
    book = await new_book(exemplar_count=5)
    reader = await new_reader()
    with transaction() as cursor:
        LoanStore.add(cursor, book.id, reader.id)
    with pytest.raises(sqlite3.IntegrityError):
        with transaction() as cursor:
            LoanStore.add(cursor, book.id, reader.id)


@pytest.mark.asyncio
async def test_failed_transaction_rolls_back():
    book = await new_book(exemplar_count=5)
    reader = await new_reader()
    with pytest.raises(RuntimeError):
        with transaction() as cursor:
            LoanStore.add(cursor, book.id, reader.id)
            raise RuntimeError("boom")
    with get_cursor() as cursor:
        assert not LoanStore.exists(cursor, book.id, reader.id)


@pytest.mark.asyncio
async def test_eager_loading_is_optional():
    book = await new_book(exemplar_count=2)
    reader = await new_reader()
    await LendingService.give_book(book.id, reader.id)
    with get_cursor() as cursor:
        plain = ReaderStore.fetch(cursor, reader.id)
        eager = ReaderStore.fetch(cursor, reader.id, include_books=True)
        book_record = BookStore.fetch(cursor, book.id, include_readers=True)
    assert plain.books is None
    assert [b.id for b in eager.books] == [str(book.id)]
    assert book_record.reader_ids == {str(reader.id)}
    assert book_record.holder_count == 1
    with get_cursor() as cursor:
        available = BookStore.fetch_all(cursor, [AVAILABLE_CLAUSE])
        given_out = BookStore.fetch_all(cursor, [GIVEN_OUT_CLAUSE])
    assert [b.id for b in available] == [str(book.id)]
    assert [b.id for b in given_out] == [str(book.id)]


def test_update_rejects_unknown_columns():
    with pytest.raises(KeyError):
        with transaction() as cursor:
            BookStore.update(cursor, "any", {"delete_time": None})


@pytest.mark.asyncio
async def test_partial_book_update_keeps_other_fields():
    book = await new_book("Dune", exemplar_count=1, author="Frank Herbert", article="A-1")
    await BookService.update_book(book.id, BookUpdate(exemplar_count=4, name=None))
    updated = await BookService.get_book(book.id)
    assert updated.name == "Dune"
    assert updated.author == "Frank Herbert"
    assert updated.article == "A-1"
    assert updated.exemplar_count == 4


@pytest.mark.asyncio
async def test_book_update_leaves_loans_untouched():
    book = await new_book(exemplar_count=2)
    reader = await new_reader()
    await LendingService.give_book(book.id, reader.id)
    await BookService.update_book(book.id, BookUpdate(name="Renamed"))
    held = (await ReaderService.get_reader(reader.id)).books
    assert [b.name for b in held] == ["Renamed"]


@pytest.mark.asyncio
async def test_exemplar_count_cannot_drop_below_holders():
    book = await new_book(exemplar_count=2)
    for name in ("Ann", "Bob"):
        reader = await new_reader(name)
        await LendingService.give_book(book.id, reader.id)
    with pytest.raises(CapacityExceededError):
        await BookService.update_book(book.id, BookUpdate(exemplar_count=1))
    assert (await BookService.get_book(book.id)).exemplar_count == 2


@pytest.mark.asyncio
async def test_reader_birth_date_can_be_cleared():
    reader = await new_reader("Ann", birth_date=date(1990, 5, 17))
    assert reader.birth_date == date(1990, 5, 17)

    await ReaderService.update_reader(reader.id, ReaderUpdate(fio="Ann Smith"))
    updated = await ReaderService.get_reader(reader.id)
    assert updated.fio == "Ann Smith"
    assert updated.birth_date == date(1990, 5, 17)

    await ReaderService.update_reader(reader.id, ReaderUpdate(birth_date=None))
    assert (await ReaderService.get_reader(reader.id)).birth_date is None


@pytest.mark.asyncio
async def test_update_deleted_reader_is_not_found():
    reader = await new_reader()
    await ReaderService.delete_reader(reader.id)
    with pytest.raises(NotFoundError):
        await ReaderService.update_reader(reader.id, ReaderUpdate(fio="Ghost"))


def test_book_record_maps_to_public_fields_only():
    record = BookRecord(
        id="0b6f4c8e-4a3e-4f4b-9d53-6f0a1f5a2c11",
        name="Dune",
        author="Frank Herbert",
        article="A-1",
        publication_year="1965",
        exemplar_count=2,
        holder_count=1,
        delete_time=None,
        reader_ids={"r1"},
    )
    book = book_to_read(record)
    assert str(book.id) == record.id
    assert book.model_dump(exclude={"id"}) == {
        "name": "Dune",
        "author": "Frank Herbert",
        "article": "A-1",
        "publication_year": "1965",
        "exemplar_count": 2,
    }
