"""
Pydantic models for readers.

A reader is returned together with the books it currently holds so that
clients can display its loans without a follow-up lookup per book.
"""

from datetime import date
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from .book import BookRead


class ReaderBase(BaseModel):
    fio: str = Field("", description="Full name of the reader", examples=["Ann Smith"])
    birth_date: Optional[date] = Field(None, description="Date of birth", examples=["1990-05-17"])


class ReaderCreate(ReaderBase):
    """Schema for registering a reader."""
    pass


class ReaderRead(ReaderBase):
    """Schema for reading a reader from the API."""

    id: UUID
    books: List[BookRead] = Field(default_factory=list, description="Books currently given out to the reader")


class ReaderUpdate(BaseModel):
    """Schema for updating a reader.

    All fields are optional.  ``birth_date`` may be sent as ``null`` to
    clear it; omitted fields keep their current value.
    """

    fio: Optional[str] = None
    birth_date: Optional[date] = None
