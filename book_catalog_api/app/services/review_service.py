"""
Business logic for reviews.

Any signed‑in user may review any book, once.  The one‑review rule is
checked before inserting and is also a ``UNIQUE`` constraint in the
schema, so two concurrent submissions cannot both succeed: the loser's
``IntegrityError`` is reported as ``ConstraintViolation``.  Reviews can
only be edited or removed by their author.
"""

import logging
import sqlite3
from typing import List, Optional

from ..core.errors import ConstraintViolation, NotFound, Unauthorized, ValidationError
from ..core.policy import Action, Resource, authorize, check_rating, check_review_unique
from ..schemas.review import ReviewCreate, ReviewRead, ReviewUpdate

REVIEW_SELECT = """
    SELECT r.id, r.book_id, r.user_id, r.rating, r.review_text,
           r.created_at, r.updated_at, p.name AS author_name
    FROM reviews r LEFT JOIN profiles p ON p.id = r.user_id
"""

logger = logging.getLogger(__name__)


def check_review_text(value) -> str:
    """Return the trimmed review body or raise ``ValidationError`` if blank."""
    if not isinstance(value, str) or not value.strip():
        raise ValidationError("Review text must not be empty")
    return value.strip()


def _fetch_review(conn: sqlite3.Connection, review_id: str) -> Optional[sqlite3.Row]:
    return conn.execute(REVIEW_SELECT + " WHERE r.id = ?", (review_id,)).fetchone()


class ReviewService:
    """Service for book reviews."""

    @classmethod
    async def create_review(cls, data: ReviewCreate, current_user: Optional[dict]) -> ReviewRead:
        """Create a review of ``data.book_id`` by the current user.

        Checks, in order: the caller may create reviews, the rating is in
        range, the body is not blank, the book exists, and the caller has
        not reviewed it yet.
        """
        authorize(current_user, Resource.REVIEW, Action.CREATE, payload={"user_id": data.user_id})
        rating = check_rating(data.rating)
        review_text = check_review_text(data.review_text)
        user_id = current_user["user_id"]

        from book_catalog_api.app.core.db import connection, new_id, utcnow
        review_id = new_id()
        now = utcnow()
        with connection() as conn:
            book = conn.execute("SELECT id FROM books WHERE id = ?", (data.book_id,)).fetchone()
            if not book:
                raise NotFound(f"Book {data.book_id} not found")
            existing = conn.execute(
                "SELECT id FROM reviews WHERE book_id = ? AND user_id = ?",
                (data.book_id, user_id),
            ).fetchone()
            check_review_unique(existing)
            try:
                conn.execute(
                    """
                    INSERT INTO reviews (id, book_id, user_id, rating, review_text, created_at, updated_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?)
                    """,
                    (review_id, data.book_id, user_id, rating, review_text, now, now),
                )
                conn.commit()
            except sqlite3.IntegrityError as e:
                conn.rollback()
                logger.warning("Duplicate review by %s for book %s: %s", user_id, data.book_id, e)
                raise ConstraintViolation("You have already reviewed this book") from e
            row = _fetch_review(conn, review_id)
        logger.info("User %s reviewed book %s with %s stars", user_id, data.book_id, rating)
        return ReviewRead(**dict(row))

    @classmethod
    async def update_review(cls, review_id: str, data: ReviewUpdate, current_user: Optional[dict]) -> ReviewRead:
        """Edit the rating and/or text of the caller's own review."""
        updates = data.model_dump(exclude_unset=True, exclude_none=True)
        from book_catalog_api.app.core.db import connection, utcnow
        with connection() as conn:
            row = _fetch_review(conn, review_id)
            if not row:
                raise NotFound(f"Review {review_id} not found")
            try:
                authorize(current_user, Resource.REVIEW, Action.UPDATE, target=row, payload=updates)
            except Unauthorized:
                logger.warning("User %s may not update review %s", (current_user or {}).get("user_id"), review_id)
                raise
            fields = {key: updates[key] for key in ("rating", "review_text") if key in updates}
            if "rating" in fields:
                fields["rating"] = check_rating(fields["rating"])
            if "review_text" in fields:
                fields["review_text"] = check_review_text(fields["review_text"])
            fields["updated_at"] = utcnow()
            assignments = ", ".join(f"{key} = ?" for key in fields)
            conn.execute(
                f"UPDATE reviews SET {assignments} WHERE id = ?",
                (*fields.values(), review_id),
            )
            conn.commit()
            updated = _fetch_review(conn, review_id)
        logger.info("Review %s updated", review_id)
        return ReviewRead(**dict(updated))

    @classmethod
    async def delete_review(cls, review_id: str, current_user: Optional[dict]) -> None:
        """Remove the caller's own review."""
        from book_catalog_api.app.core.db import connection
        with connection() as conn:
            row = _fetch_review(conn, review_id)
            if not row:
                raise NotFound(f"Review {review_id} not found")
            try:
                authorize(current_user, Resource.REVIEW, Action.DELETE, target=row)
            except Unauthorized:
                logger.warning("User %s may not delete review %s", (current_user or {}).get("user_id"), review_id)
                raise
            conn.execute("DELETE FROM reviews WHERE id = ?", (review_id,))
            conn.commit()
        logger.info("Review %s deleted", review_id)

    @classmethod
    async def get_review(cls, review_id: str) -> ReviewRead:
        from book_catalog_api.app.core.db import connection
        with connection() as conn:
            row = _fetch_review(conn, review_id)
        if not row:
            raise NotFound(f"Review {review_id} not found")
        return ReviewRead(**dict(row))

    @classmethod
    async def list_reviews_for_book(cls, book_id: str) -> List[ReviewRead]:
        """All reviews of a book, newest first, with author names."""
        from book_catalog_api.app.core.db import connection
        with connection() as conn:
            book = conn.execute("SELECT id FROM books WHERE id = ?", (book_id,)).fetchone()
            if not book:
                raise NotFound(f"Book {book_id} not found")
            rows = conn.execute(
                REVIEW_SELECT + " WHERE r.book_id = ? ORDER BY r.created_at DESC, r.id ASC",
                (book_id,),
            ).fetchall()
        return [ReviewRead(**dict(row)) for row in rows]
