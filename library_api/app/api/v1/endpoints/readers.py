"""
Reader endpoints for API v1.

Besides CRUD for readers this router exposes the lending actions:
``POST /{reader_id}/give/{book_id}`` lends a book and
``DELETE /{reader_id}/return/{book_id}`` takes it back.  Rule
violations are answered with 400 and a human-readable ``detail``.
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, HTTPException, Path, Query, Request, Response, status

from library_api.app.core.errors import LendingRuleError, NotFoundError
from library_api.app.schemas.reader import ReaderCreate, ReaderRead, ReaderUpdate
from library_api.app.services.lending_service import LendingService
from library_api.app.services.query_service import QueryService
from library_api.app.services.reader_service import ReaderService

from .responses import list_or_no_content

router = APIRouter()


@router.get("", response_model=List[ReaderRead], summary="List all readers")
async def list_readers() -> List[ReaderRead]:
    return list_or_no_content(await ReaderService.list_readers())


@router.get("/search", response_model=List[ReaderRead], summary="Search readers by FIO")
async def search_readers(
    search_text: str = Query(..., alias="searchText", description="Part of the full name, any case"),
) -> List[ReaderRead]:
    return list_or_no_content(await QueryService.search_readers(search_text))


@router.get("/{reader_id}", response_model=ReaderRead, summary="Get reader by ID")
async def get_reader(reader_id: UUID) -> ReaderRead:
    """Retrieve a reader together with the books it holds."""
    try:
        return await ReaderService.get_reader(reader_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e


@router.put("/{reader_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Update reader")
async def update_reader(reader_id: UUID, updates: ReaderUpdate) -> None:
    try:
        await ReaderService.update_reader(reader_id, updates)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    return None


@router.post("", response_model=ReaderRead, status_code=status.HTTP_201_CREATED, summary="Create new reader")
async def create_reader(reader: ReaderCreate, request: Request, response: Response) -> ReaderRead:
    created = await ReaderService.create_reader(reader)
    response.headers["Location"] = str(request.url_for("get_reader", reader_id=str(created.id)))
    return created


@router.delete("/{reader_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete reader by ID")
async def delete_reader(reader_id: UUID) -> None:
    """Soft-delete a reader; all books it holds become available again."""
    try:
        await ReaderService.delete_reader(reader_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    return None


@router.post("/{reader_id}/give/{book_id}", response_model=ReaderRead, summary="Give the book to the reader")
async def give_book(
    reader_id: UUID = Path(..., description="ID of the reader"),
    book_id: UUID = Path(..., description="ID of the book to give out"),
) -> ReaderRead:
    """Lend a book to a reader.

    Returns the reader with its updated list of books.  Answers 400 if
    the reader already holds the book or no exemplar is free.
    """
    try:
        return await LendingService.give_book(book_id, reader_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except LendingRuleError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e


@router.delete(
    "/{reader_id}/return/{book_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Return the book to the library",
)
async def return_book(
    reader_id: UUID = Path(..., description="ID of the reader"),
    book_id: UUID = Path(..., description="ID of the book being returned"),
) -> None:
    try:
        await LendingService.return_book(book_id, reader_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except LendingRuleError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    return None
