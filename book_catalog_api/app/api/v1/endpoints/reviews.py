"""
API endpoints for book reviews.

Anyone may read reviews.  A signed‑in user may post one review per
book and edit or delete only their own.  A second review of the same
book is answered with 409.
"""

from typing import List

from fastapi import APIRouter, Depends, status

from book_catalog_api.app.core.errors import CatalogError, to_http_exception
from book_catalog_api.app.core.security import get_current_user
from book_catalog_api.app.schemas.review import ReviewCreate, ReviewRead, ReviewUpdate
from book_catalog_api.app.services.review_service import ReviewService

router = APIRouter()


@router.get(
    "/books/{book_id}/reviews",
    response_model=List[ReviewRead],
    summary="List reviews of a book",
)
async def list_book_reviews(book_id: str) -> List[ReviewRead]:
    """Reviews of a book, newest first, each with its author's name."""
    try:
        return await ReviewService.list_reviews_for_book(book_id)
    except CatalogError as e:
        raise to_http_exception(e) from e


@router.post(
    "/reviews",
    response_model=ReviewRead,
    status_code=status.HTTP_201_CREATED,
    summary="Submit a review",
)
async def create_review(
    data: ReviewCreate,
    current_user: dict = Depends(get_current_user),
) -> ReviewRead:
    """Create a review.

    The rating must be between 1 and 5 and the caller must not have
    reviewed the book already; either violation returns 409.
    """
    try:
        return await ReviewService.create_review(data, current_user)
    except CatalogError as e:
        raise to_http_exception(e) from e


@router.get(
    "/reviews/{review_id}",
    response_model=ReviewRead,
    summary="Get a single review",
)
async def get_review(review_id: str) -> ReviewRead:
    try:
        return await ReviewService.get_review(review_id)
    except CatalogError as e:
        raise to_http_exception(e) from e


@router.put(
    "/reviews/{review_id}",
    response_model=ReviewRead,
    summary="Edit a review",
)
async def update_review(
    review_id: str,
    data: ReviewUpdate,
    current_user: dict = Depends(get_current_user),
) -> ReviewRead:
    try:
        return await ReviewService.update_review(review_id, data, current_user)
    except CatalogError as e:
        raise to_http_exception(e) from e


@router.delete(
    "/reviews/{review_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a review",
)
async def delete_review(
    review_id: str,
    current_user: dict = Depends(get_current_user),
) -> None:
    """Delete a review.  Only its author may do so."""
    try:
        await ReviewService.delete_review(review_id, current_user)
    except CatalogError as e:
        raise to_http_exception(e) from e
    return None
