"""
Book endpoints for API v1.

Listing routes answer 204 No Content when nothing matches, single-book
routes answer 404 when the id does not belong to an active book.  The
fixed paths (``givenOutBooks``, ``availableBooks``, ``search``) are
declared before ``/{book_id}`` so they are not parsed as ids.
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, HTTPException, Query, Request, Response, status

from library_api.app.core.errors import LendingRuleError, NotFoundError
from library_api.app.schemas.book import BookCreate, BookRead, BookUpdate
from library_api.app.services.book_service import BookService
from library_api.app.services.query_service import QueryService

from .responses import list_or_no_content

router = APIRouter()


@router.get("", response_model=List[BookRead], summary="List all books")
async def list_books() -> List[BookRead]:
    return list_or_no_content(await BookService.list_books())


@router.get("/givenOutBooks", response_model=List[BookRead], summary="Get list of given out books")
async def list_given_out_books() -> List[BookRead]:
    """Books held by at least one reader."""
    return list_or_no_content(await QueryService.list_given_out_books())


@router.get("/availableBooks", response_model=List[BookRead], summary="Get list of books available for given out")
async def list_available_books() -> List[BookRead]:
    """Books with at least one exemplar that is not given out."""
    return list_or_no_content(await QueryService.list_available_books())


@router.get("/search", response_model=List[BookRead], summary="Search books by name")
async def search_books(
    search_text: str = Query(..., alias="searchText", description="Part of the book name, any case"),
) -> List[BookRead]:
    return list_or_no_content(await QueryService.search_books(search_text))


@router.get("/{book_id}", response_model=BookRead, summary="Get book by ID")
async def get_book(book_id: UUID) -> BookRead:
    try:
        return await BookService.get_book(book_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e


@router.put("/{book_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Update book")
async def update_book(book_id: UUID, updates: BookUpdate) -> None:
    """Update the scalar fields of a book.

    Only the fields present in the body are changed.  Reducing
    ``exemplar_count`` below the number of exemplars currently given
    out is answered with 400.
    """
    try:
        await BookService.update_book(book_id, updates)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except LendingRuleError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    return None


@router.post("", response_model=BookRead, status_code=status.HTTP_201_CREATED, summary="Create new book")
async def create_book(book: BookCreate, request: Request, response: Response) -> BookRead:
    created = await BookService.create_book(book)
    response.headers["Location"] = str(request.url_for("get_book", book_id=str(created.id)))
    return created


@router.delete("/{book_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete book by ID")
async def delete_book(book_id: UUID) -> None:
    """Soft-delete a book.

    Every reader holding the book loses it before the book disappears
    from all listings.
    """
    try:
        await BookService.delete_book(book_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    return None
