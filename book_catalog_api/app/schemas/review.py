"""
Pydantic schemas for book reviews.

A user may hold at most one review per book.  The rating is an integer
from 1 to 5; its range is checked by the review service so that a
violation is reported as a constraint error rather than a malformed
request.
"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

MAX_REVIEW_LENGTH = 5000


def _clean_text(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    v = v.strip()
    if len(v) > MAX_REVIEW_LENGTH:
        raise ValueError(f"Review must be {MAX_REVIEW_LENGTH} characters or fewer")
    return v


class ReviewCreate(BaseModel):
    """Schema for creating a new review."""

    book_id: str = Field(..., description="Identifier of the book being reviewed")
    rating: int = Field(..., description="Rating from 1 to 5")
    review_text: str = Field(..., description="Free‑text review body; must not be blank")
    # Optional; when given it must be the caller's own profile id.
    user_id: Optional[str] = Field(None, description="Author profile id")

    @field_validator("review_text")
    @classmethod
    def sanitize_text(cls, v: str) -> str:
        """Trim whitespace and enforce a maximum length."""
        return _clean_text(v) or ""


class ReviewUpdate(BaseModel):
    """Schema for editing a review; only provided fields change.

    ``book_id`` and ``user_id`` are immutable and rejected unless they
    repeat the stored values.
    """

    book_id: Optional[str] = None
    user_id: Optional[str] = None
    rating: Optional[int] = None
    review_text: Optional[str] = None

    @field_validator("review_text")
    @classmethod
    def sanitize_text(cls, v: Optional[str]) -> Optional[str]:
        return _clean_text(v)


class ReviewRead(BaseModel):
    """Schema for reading a review from the API."""

    id: str
    book_id: str
    user_id: str
    rating: int
    review_text: str
    created_at: str
    updated_at: str
    author_name: Optional[str] = None

    model_config = {
        "from_attributes": True,
    }


class ReviewWithBook(ReviewRead):
    """A review together with the title of the book it belongs to."""

    book_title: str
