"""
Business logic for books.

Covers the catalog mutations (create, update, delete, each checked by
the access policy) and the read side: the filtered, sorted and
paginated listing, the detail view with reviews and average rating,
and the set of genres used to populate the filter.
"""

import logging
import sqlite3
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional

from ..core.errors import NotFound, Unauthorized, ValidationError
from ..core.policy import Action, Resource, authorize
from ..schemas.book import BookCreate, BookDetail, BookPage, BookRead, BookSummary, BookUpdate
from ..schemas.review import ReviewRead
from .aggregation import (
    BOOKS_PER_PAGE,
    average_rating,
    display_rating,
    page_offset,
    star_rating,
    total_pages,
)

MIN_PUBLISHED_YEAR = 1000
REQUIRED_TEXT_FIELDS = ("title", "author", "description", "genre")

BOOK_COLUMNS = (
    "b.id, b.title, b.author, b.description, b.genre, b.published_year, "
    "b.added_by, b.created_at, b.updated_at"
)

logger = logging.getLogger(__name__)


class SortKey(str, Enum):
    NEWEST = "newest"
    OLDEST = "oldest"
    YEAR = "year"


_ORDER_BY = {
    SortKey.NEWEST: "b.created_at DESC, b.id ASC",
    SortKey.OLDEST: "b.created_at ASC, b.id ASC",
    SortKey.YEAR: "b.published_year DESC, b.id ASC",
}

_SORT_ALIASES = {"by-year-desc": SortKey.YEAR}


def parse_sort(value: Optional[str]) -> SortKey:
    """Map a sort parameter onto a ``SortKey``; default is newest first."""
    if value is None or value == "":
        return SortKey.NEWEST
    if isinstance(value, SortKey):
        return value
    if value in _SORT_ALIASES:
        return _SORT_ALIASES[value]
    try:
        return SortKey(value)
    except ValueError:
        raise ValidationError(
            f"Unknown sort '{value}'; expected newest, oldest or year"
        ) from None


def validate_book_fields(fields: Dict[str, object]) -> Dict[str, object]:
    """Check and normalise book fields, returning the cleaned copy.

    Text fields must be non‑empty after trimming; the published year
    must be an integer between 1000 and the current year.
    """
    cleaned = dict(fields)
    for name in REQUIRED_TEXT_FIELDS:
        if name not in cleaned:
            continue
        value = cleaned[name]
        if not isinstance(value, str) or not value.strip():
            raise ValidationError(f"{name.capitalize()} must not be empty")
        cleaned[name] = value.strip()
    if "published_year" in cleaned:
        year = cleaned["published_year"]
        current_year = datetime.now(timezone.utc).year
        if isinstance(year, bool) or not isinstance(year, int):
            raise ValidationError("Published year must be an integer")
        if not MIN_PUBLISHED_YEAR <= year <= current_year:
            raise ValidationError(
                f"Published year must be between {MIN_PUBLISHED_YEAR} and {current_year}"
            )
    return cleaned


def _contains_ci(haystack: Optional[str], needle: Optional[str]) -> int:
    """SQL function: case‑insensitive substring test."""
    if haystack is None or needle is None:
        return 0
    return 1 if needle.casefold() in haystack.casefold() else 0


def _fetch_book(conn: sqlite3.Connection, book_id: str) -> Optional[sqlite3.Row]:
    return conn.execute(
        f"SELECT {BOOK_COLUMNS} FROM books b WHERE b.id = ?",
        (book_id,),
    ).fetchone()


def _ratings_by_book(conn: sqlite3.Connection, book_ids: List[str]) -> Dict[str, List[int]]:
    ratings: Dict[str, List[int]] = {book_id: [] for book_id in book_ids}
    if not book_ids:
        return ratings
    placeholders = ", ".join("?" for _ in book_ids)
    rows = conn.execute(
        f"SELECT book_id, rating FROM reviews WHERE book_id IN ({placeholders})",
        tuple(book_ids),
    ).fetchall()
    for row in rows:
        ratings[row["book_id"]].append(row["rating"])
    return ratings


class BookService:
    """Service for the book catalog."""

    @classmethod
    async def create_book(cls, data: BookCreate, current_user: Optional[dict]) -> BookRead:
        """Add a book owned by the current user.

        The owner is always the caller; a submitted ``added_by`` naming
        someone else is refused.
        """
        payload = data.model_dump()
        authorize(current_user, Resource.BOOK, Action.CREATE, payload=payload)
        payload.pop("added_by", None)
        fields = validate_book_fields(payload)

        from book_catalog_api.app.core.db import connection, new_id, utcnow
        book_id = new_id()
        now = utcnow()
        owner_id = current_user["user_id"]
        with connection() as conn:
            conn.execute(
                """
                INSERT INTO books (id, title, author, description, genre, published_year,
                                   added_by, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    book_id,
                    fields["title"],
                    fields["author"],
                    fields["description"],
                    fields["genre"],
                    fields["published_year"],
                    owner_id,
                    now,
                    now,
                ),
            )
            conn.commit()
        logger.info("User %s added book %s '%s'", owner_id, book_id, fields["title"])
        return BookRead(id=book_id, added_by=owner_id, created_at=now, updated_at=now, **fields)

    @classmethod
    async def update_book(cls, book_id: str, data: BookUpdate, current_user: Optional[dict]) -> BookRead:
        """Apply the provided fields to a book owned by the caller.

        ``updated_at`` is refreshed on every successful update, even when
        the submitted values equal the stored ones.
        """
        updates = data.model_dump(exclude_unset=True, exclude_none=True)
        from book_catalog_api.app.core.db import connection, utcnow
        with connection() as conn:
            row = _fetch_book(conn, book_id)
            if not row:
                raise NotFound(f"Book {book_id} not found")
            try:
                authorize(current_user, Resource.BOOK, Action.UPDATE, target=row, payload=updates)
            except Unauthorized:
                logger.warning("User %s may not update book %s", (current_user or {}).get("user_id"), book_id)
                raise
            updates.pop("added_by", None)
            fields = validate_book_fields(updates)
            fields["updated_at"] = utcnow()
            assignments = ", ".join(f"{key} = ?" for key in fields)
            conn.execute(
                f"UPDATE books SET {assignments} WHERE id = ?",
                (*fields.values(), book_id),
            )
            conn.commit()
            updated = _fetch_book(conn, book_id)
        logger.info("Book %s updated", book_id)
        return BookRead(**dict(updated))

    @classmethod
    async def delete_book(cls, book_id: str, current_user: Optional[dict]) -> None:
        """Delete a book owned by the caller together with its reviews."""
        from book_catalog_api.app.core.db import connection
        with connection() as conn:
            row = _fetch_book(conn, book_id)
            if not row:
                raise NotFound(f"Book {book_id} not found")
            try:
                authorize(current_user, Resource.BOOK, Action.DELETE, target=row)
            except Unauthorized:
                logger.warning("User %s may not delete book %s", (current_user or {}).get("user_id"), book_id)
                raise
            # Reviews first; the foreign key cascade covers writes made
            # outside this service.
            conn.execute("DELETE FROM reviews WHERE book_id = ?", (book_id,))
            conn.execute("DELETE FROM books WHERE id = ?", (book_id,))
            conn.commit()
        logger.info("Book %s deleted", book_id)

    @classmethod
    async def list_books(
        cls,
        q: Optional[str] = None,
        genre: Optional[str] = None,
        sort: Optional[str] = None,
        page: int = 1,
    ) -> BookPage:
        """Return one page of books matching the filters.

        - ``q`` matches title or author as a case‑insensitive substring.
        - ``genre`` must equal the book's genre exactly.
        - ``sort``: ``newest`` (default), ``oldest`` or ``year``.  Ties
          are broken by id so pages never overlap.
        - ``page`` is 1‑indexed; the page size is fixed at 5.  Pages past
          the end are empty, with the total still reported.
        """
        sort_key = parse_sort(sort)
        if isinstance(page, bool) or not isinstance(page, int) or page < 1:
            raise ValidationError("Page must be an integer of at least 1")

        where_clauses: List[str] = []
        params: list = []
        query_text = (q or "").strip()
        if query_text:
            where_clauses.append("(contains_ci(b.title, ?) OR contains_ci(b.author, ?))")
            params.extend([query_text, query_text])
        if genre:
            where_clauses.append("b.genre = ?")
            params.append(genre)
        where = (" WHERE " + " AND ".join(where_clauses)) if where_clauses else ""

        from book_catalog_api.app.core.db import connection
        with connection() as conn:
            conn.create_function("contains_ci", 2, _contains_ci, deterministic=True)
            # Count and slice come from the same read transaction.
            conn.execute("BEGIN")
            total = conn.execute(
                f"SELECT COUNT(*) AS count FROM books b{where}", tuple(params)
            ).fetchone()["count"]
            offset = page_offset(page)
            rows = []
            # Past the last row the page is empty; huge offsets never reach SQLite.
            if offset < total:
                rows = conn.execute(
                    f"""
                    SELECT {BOOK_COLUMNS}, p.name AS owner_name
                    FROM books b LEFT JOIN profiles p ON p.id = b.added_by
                    {where}
                    ORDER BY {_ORDER_BY[sort_key]}
                    LIMIT ? OFFSET ?
                    """,
                    (*params, BOOKS_PER_PAGE, offset),
                ).fetchall()
            ratings = _ratings_by_book(conn, [row["id"] for row in rows])
            conn.commit()

        items = [
            BookSummary(
                **dict(row),
                average_rating=display_rating(average_rating(ratings[row["id"]])),
                review_count=len(ratings[row["id"]]),
            )
            for row in rows
        ]
        return BookPage(
            items=items,
            total=total,
            page=page,
            page_size=BOOKS_PER_PAGE,
            total_pages=total_pages(total),
        )

    @classmethod
    async def get_book(cls, book_id: str) -> BookRead:
        """Retrieve a single book or raise ``NotFound``."""
        from book_catalog_api.app.core.db import connection
        with connection() as conn:
            row = _fetch_book(conn, book_id)
        if not row:
            raise NotFound(f"Book {book_id} not found")
        return BookRead(**dict(row))

    @classmethod
    async def get_book_detail(cls, book_id: str) -> Optional[BookDetail]:
        """Book, owner name, reviews (newest first) and rating.

        Returns ``None`` for an unknown id so callers can render a
        not‑found state.
        """
        from book_catalog_api.app.core.db import connection
        with connection() as conn:
            row = conn.execute(
                f"""
                SELECT {BOOK_COLUMNS}, p.name AS owner_name
                FROM books b LEFT JOIN profiles p ON p.id = b.added_by
                WHERE b.id = ?
                """,
                (book_id,),
            ).fetchone()
            if not row:
                return None
            review_rows = conn.execute(
                """
                SELECT r.id, r.book_id, r.user_id, r.rating, r.review_text,
                       r.created_at, r.updated_at, p.name AS author_name
                FROM reviews r LEFT JOIN profiles p ON p.id = r.user_id
                WHERE r.book_id = ?
                ORDER BY r.created_at DESC, r.id ASC
                """,
                (book_id,),
            ).fetchall()
        reviews = [ReviewRead(**dict(r)) for r in review_rows]
        mean = average_rating(r.rating for r in reviews)
        return BookDetail(
            **dict(row),
            reviews=reviews,
            average_rating=display_rating(mean),
            star_rating=star_rating(mean),
            review_count=len(reviews),
        )

    @classmethod
    async def list_genres(cls) -> List[str]:
        """Distinct genres across all books, sorted."""
        from book_catalog_api.app.core.db import connection
        with connection() as conn:
            rows = conn.execute(
                "SELECT DISTINCT genre FROM books ORDER BY genre"
            ).fetchall()
        return [row["genre"] for row in rows]
