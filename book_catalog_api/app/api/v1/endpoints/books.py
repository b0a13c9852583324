"""
Book endpoints for API v1.

Reading the catalog is open to everyone.  Creating a book requires a
signed‑in user, who becomes its owner; only the owner may edit or
delete it.  Deleting a book also deletes its reviews.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from book_catalog_api.app.core.errors import CatalogError, to_http_exception
from book_catalog_api.app.core.security import get_current_user
from book_catalog_api.app.schemas.book import BookCreate, BookDetail, BookPage, BookRead, BookUpdate
from book_catalog_api.app.services.book_service import BookService

router = APIRouter()


@router.get("/", response_model=BookPage)
async def list_books(
    q: Optional[str] = Query(None, description="Substring of the title or author"),
    genre: Optional[str] = Query(None),
    sort: Optional[str] = Query(None, description="'newest' (default), 'oldest' or 'year'"),
    page: int = Query(1),
) -> BookPage:
    """List books five per page.

    - **q** — case‑insensitive match against title or author.
    - **genre** — exact genre filter.
    - **sort** — `newest`, `oldest` or `year` (publication year, latest first).
    - **page** — 1‑indexed; pages past the end are empty.
    """
    try:
        return await BookService.list_books(q=q, genre=genre, sort=sort, page=page)
    except CatalogError as e:
        raise to_http_exception(e) from e


@router.get("/genres", response_model=List[str])
async def list_genres() -> List[str]:
    """Distinct genres present in the catalog."""
    try:
        return await BookService.list_genres()
    except CatalogError as e:
        raise to_http_exception(e) from e


@router.get("/{book_id}", response_model=BookDetail)
async def get_book(book_id: str) -> BookDetail:
    """Book details with owner name, reviews and average rating."""
    try:
        detail = await BookService.get_book_detail(book_id)
    except CatalogError as e:
        raise to_http_exception(e) from e
    if detail is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Book not found")
    return detail


@router.post("/", response_model=BookRead, status_code=status.HTTP_201_CREATED)
async def create_book(
    book: BookCreate,
    current_user: dict = Depends(get_current_user),
) -> BookRead:
    try:
        return await BookService.create_book(book, current_user)
    except CatalogError as e:
        raise to_http_exception(e) from e


@router.put("/{book_id}", response_model=BookRead)
async def update_book(
    book_id: str,
    data: BookUpdate,
    current_user: dict = Depends(get_current_user),
) -> BookRead:
    """Update a book.  Only the user who added it may do so."""
    try:
        return await BookService.update_book(book_id, data, current_user)
    except CatalogError as e:
        raise to_http_exception(e) from e


@router.delete("/{book_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_book(
    book_id: str,
    current_user: dict = Depends(get_current_user),
) -> None:
    """Delete a book and all of its reviews."""
    try:
        await BookService.delete_book(book_id, current_user)
    except CatalogError as e:
        raise to_http_exception(e) from e
    return None
