"""
Top‑level router for version 1 of the API.

Aggregates the resource routers under their path prefixes.  When a new
resource is introduced, include its router here.
"""

from fastapi import APIRouter

from .endpoints import books, readers

router = APIRouter()

router.include_router(books.router, prefix="/books", tags=["books"])
router.include_router(readers.router, prefix="/readers", tags=["readers"])
