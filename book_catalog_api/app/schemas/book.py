"""
Pydantic models for book data.

``BookBase`` contains the catalog fields; ``BookCreate`` extends it for
requests and ``BookRead`` adds the server‑managed fields for
responses.  ``BookSummary`` is one row of the paginated listing and
``BookDetail`` backs the detail view with reviews and rating.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from .review import ReviewRead


class BookBase(BaseModel):
    title: str = Field(..., examples=["The Hobbit"])
    author: str = Field(..., examples=["J.R.R. Tolkien"])
    description: str = Field(..., examples=["A hobbit is swept into a quest."])
    genre: str = Field(..., examples=["Fantasy"])
    published_year: int = Field(..., examples=[1937])


class BookCreate(BookBase):
    """Schema for creating a book.

    ``added_by`` may be omitted; when present it must be the caller's
    own profile id.
    """

    added_by: Optional[str] = None


class BookUpdate(BaseModel):
    """Schema for updating a book.

    All fields are optional; only provided fields will be updated.
    ``added_by`` is accepted only so that an attempt to transfer
    ownership can be refused rather than silently dropped.
    """

    added_by: Optional[str] = None
    title: Optional[str] = None
    author: Optional[str] = None
    description: Optional[str] = None
    genre: Optional[str] = None
    published_year: Optional[int] = None


class BookRead(BookBase):
    """Schema for reading a book from the API."""

    id: str
    added_by: str
    created_at: str
    updated_at: str

    model_config = {
        "from_attributes": True,
    }


class BookSummary(BookRead):
    owner_name: Optional[str] = None
    average_rating: float = 0.0
    review_count: int = 0


class BookPage(BaseModel):
    """One page of the book listing."""

    items: List[BookSummary]
    total: int
    page: int
    page_size: int
    total_pages: int


class BookDetail(BookRead):
    owner_name: Optional[str] = None
    reviews: List[ReviewRead]
    average_rating: float
    star_rating: int
    review_count: int
