"""
Business logic for accounts and profiles.

Registration creates the credential row in ``accounts`` and the public
row in ``profiles`` inside one transaction: if either insert fails,
neither is kept and registration is reported as failed.  Afterwards a
profile can only be renamed, and only by its owner.
"""

import logging
import sqlite3
from typing import Optional

from ..core.errors import ConstraintViolation, NotFound, ValidationError
from ..core.policy import Action, Resource, authorize
from ..schemas.auth import RegisterRequest
from ..schemas.book import BookRead
from ..schemas.profile import ProfileRead, ProfileSummary
from ..schemas.review import ReviewWithBook

DEFAULT_PROFILE_NAME = "User"
MIN_PASSWORD_LENGTH = 6

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    """Lower‑case and trim an email, rejecting obviously malformed ones."""
    value = (email or "").strip().lower()
    local, sep, domain = value.partition("@")
    if not sep or not local or not domain or "@" in domain or " " in value:
        raise ValidationError("A valid email address is required")
    return value


def _profile_from_row(row: sqlite3.Row) -> ProfileRead:
    return ProfileRead(
        id=row["id"],
        name=row["name"],
        email=row["email"],
        created_at=row["created_at"],
    )


class ProfileService:
    """Service for registration, login and profile management."""

    @classmethod
    async def register(cls, data: RegisterRequest) -> ProfileRead:
        """Create an account and its profile atomically.

        The display name falls back to ``"User"`` when absent or blank.
        A duplicate email raises ``ConstraintViolation``.
        """
        email = normalize_email(data.email)
        if len(data.password or "") < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
            )
        name = (data.name or "").strip() or DEFAULT_PROFILE_NAME

        from book_catalog_api.app.core.db import connection, new_id, utcnow
        from book_catalog_api.app.core.security import hash_password
        profile_id = new_id()
        now = utcnow()
        with connection() as conn:
            try:
                conn.execute(
                    "INSERT INTO accounts (id, email, password_hash, created_at) VALUES (?, ?, ?, ?)",
                    (profile_id, email, hash_password(data.password), now),
                )
                conn.execute(
                    "INSERT INTO profiles (id, name, email, created_at) VALUES (?, ?, ?, ?)",
                    (profile_id, name, email, now),
                )
                conn.commit()
            except sqlite3.IntegrityError as e:
                conn.rollback()
                logger.warning("Registration rejected for %s: %s", email, e)
                raise ConstraintViolation("Email is already registered") from e
        logger.info("Registered profile %s (%s)", profile_id, email)
        return ProfileRead(id=profile_id, name=name, email=email, created_at=now)

    @classmethod
    async def authenticate(cls, email: str, password: str) -> Optional[ProfileRead]:
        """Return the profile for matching credentials, otherwise ``None``."""
        from book_catalog_api.app.core.db import connection
        from book_catalog_api.app.core.security import verify_password
        with connection() as conn:
            row = conn.execute(
                """
                SELECT p.id, p.name, p.email, p.created_at, a.password_hash
                FROM accounts a JOIN profiles p ON p.id = a.id
                WHERE a.email = ?
                """,
                ((email or "").strip().lower(),),
            ).fetchone()
        if not row or not verify_password(password, row["password_hash"]):
            return None
        return _profile_from_row(row)

    @classmethod
    async def get_profile(cls, profile_id: str) -> ProfileRead:
        """Retrieve a profile by id or raise ``NotFound``."""
        from book_catalog_api.app.core.db import connection
        with connection() as conn:
            row = conn.execute(
                "SELECT id, name, email, created_at FROM profiles WHERE id = ?",
                (profile_id,),
            ).fetchone()
        if not row:
            raise NotFound(f"Profile {profile_id} not found")
        return _profile_from_row(row)

    @classmethod
    async def update_profile(cls, profile_id: str, updates: dict, current_user: dict) -> ProfileRead:
        """Rename a profile.

        Only the owner may call this and only ``name`` may change; any
        attempt to alter the email or id is refused by the policy.
        """
        from book_catalog_api.app.core.db import connection
        with connection() as conn:
            row = conn.execute(
                "SELECT id, name, email, created_at FROM profiles WHERE id = ?",
                (profile_id,),
            ).fetchone()
            if not row:
                raise NotFound(f"Profile {profile_id} not found")
            authorize(current_user, Resource.PROFILE, Action.UPDATE, target=row, payload=updates)
            if "name" in updates:
                name = updates["name"]
                if not isinstance(name, str) or not name.strip():
                    raise ValidationError("Name must not be empty")
                conn.execute(
                    "UPDATE profiles SET name = ? WHERE id = ?",
                    (name.strip(), profile_id),
                )
                conn.commit()
                logger.info("Profile %s renamed", profile_id)
            updated = conn.execute(
                "SELECT id, name, email, created_at FROM profiles WHERE id = ?",
                (profile_id,),
            ).fetchone()
        return _profile_from_row(updated)

    @classmethod
    async def get_summary(cls, profile_id: str) -> ProfileSummary:
        """Profile page data: the user's books and reviews, newest first."""
        from book_catalog_api.app.core.db import connection
        with connection() as conn:
            row = conn.execute(
                "SELECT id, name, email, created_at FROM profiles WHERE id = ?",
                (profile_id,),
            ).fetchone()
            if not row:
                raise NotFound(f"Profile {profile_id} not found")
            book_rows = conn.execute(
                """
                SELECT id, title, author, description, genre, published_year,
                       added_by, created_at, updated_at
                FROM books WHERE added_by = ?
                ORDER BY created_at DESC, id ASC
                """,
                (profile_id,),
            ).fetchall()
            review_rows = conn.execute(
                """
                SELECT r.id, r.book_id, r.user_id, r.rating, r.review_text,
                       r.created_at, r.updated_at, b.title AS book_title
                FROM reviews r JOIN books b ON b.id = r.book_id
                WHERE r.user_id = ?
                ORDER BY r.created_at DESC, r.id ASC
                """,
                (profile_id,),
            ).fetchall()
        profile = _profile_from_row(row)
        books = [BookRead(**dict(b)) for b in book_rows]
        reviews = [ReviewWithBook(author_name=profile.name, **dict(r)) for r in review_rows]
        return ProfileSummary(
            profile=profile,
            books=books,
            reviews=reviews,
            book_count=len(books),
            review_count=len(reviews),
        )
