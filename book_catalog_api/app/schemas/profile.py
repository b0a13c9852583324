"""
Pydantic models for profiles.

A profile is the public face of an account: id, display name and
email.  ``ProfileSummary`` backs the profile page, listing the books a
user added and the reviews they wrote.
"""

from typing import List

from pydantic import BaseModel

from .book import BookRead
from .review import ReviewWithBook


class ProfileRead(BaseModel):
    """Schema for reading a profile from the API."""

    id: str
    name: str
    email: str
    created_at: str

    model_config = {
        "from_attributes": True,
    }


class ProfileSummary(BaseModel):
    profile: ProfileRead
    books: List[BookRead]
    reviews: List[ReviewWithBook]
    book_count: int
    review_count: int
