"""
Pydantic models for books.

``BookBase`` holds the scalar attributes shared by every book payload;
``BookCreate`` is the request body for new books, ``BookRead`` the
response body, and ``BookUpdate`` a partial update where every field
is optional.
"""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class BookBase(BaseModel):
    name: str = Field("", description="Title of the book", examples=["Dune"])
    author: str = Field("", description="Author", examples=["Frank Herbert"])
    article: str = Field("", description="Article code", examples=["ISBN-0441013597"])
    publication_year: str = Field("", description="Year of publication", examples=["1965"])
    exemplar_count: int = Field(0, ge=0, description="Number of physical copies owned by the library")


class BookCreate(BookBase):
    """Schema for creating a book."""
    pass


class BookRead(BookBase):
    """Schema for reading a book from the API."""

    id: UUID

    model_config = {
        "from_attributes": True,
    }


class BookUpdate(BaseModel):
    """Schema for updating a book.

    All fields are optional; only provided fields will be updated.
    Lending state is changed exclusively through the reader give and
    return endpoints.
    """

    name: Optional[str] = None
    author: Optional[str] = None
    article: Optional[str] = None
    publication_year: Optional[str] = None
    exemplar_count: Optional[int] = Field(None, ge=0)
