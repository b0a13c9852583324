import asyncio
import sqlite3

import pytest

from book_catalog_api.app.core import db
from book_catalog_api.app.core.config import ConfigurationError, Settings, settings
from book_catalog_api.app.core.errors import ConstraintViolation, Unauthorized, Unavailable, ValidationError
from book_catalog_api.app.schemas.auth import RegisterRequest
from book_catalog_api.app.schemas.book import BookCreate, BookUpdate
from book_catalog_api.app.schemas.review import ReviewCreate
from book_catalog_api.app.services import review_service
from book_catalog_api.app.services.book_service import BookService
from book_catalog_api.app.services.profile_service import ProfileService
from book_catalog_api.app.services.review_service import ReviewService


def _actor(profile):
    return {"sub": profile.id, "user_id": profile.id, "email": profile.email}


def _register(name, email):
    profile = asyncio.run(
        ProfileService.register(RegisterRequest(email=email, password="secret123", name=name))
    )
    return _actor(profile)


def _book(actor, **overrides):
    data = {
        "title": "The Hobbit",
        "author": "J.R.R. Tolkien",
        "description": "There and back again.",
        "genre": "Fantasy",
        "published_year": 1937,
    }
    data.update(overrides)
    return asyncio.run(BookService.create_book(BookCreate(**data), actor))


def test_registration_is_atomic(database):
    # A profile already holding the email makes the second insert fail.
    conn = sqlite3.connect(database)
    conn.execute("PRAGMA foreign_keys = ON")
    conn.execute(
        "INSERT INTO accounts (id, email, password_hash, created_at) VALUES ('x', 'other@x.com', 'h', 't')"
    )
    conn.execute("INSERT INTO profiles (id, name, email, created_at) VALUES ('x', 'X', 'ada@x.com', 't')")
    conn.commit()
    conn.close()

    with pytest.raises(ConstraintViolation):
        _register("Ada", "ada@x.com")

    conn = sqlite3.connect(database)
    try:
        accounts = conn.execute("SELECT COUNT(*) FROM accounts WHERE email = 'ada@x.com'").fetchone()[0]
    finally:
        conn.close()
    assert accounts == 0


def test_concurrent_duplicate_review_is_stopped_by_the_store(database, monkeypatch):
    owner = _register("Owner", "owner@x.com")
    ada = _register("Ada", "ada@x.com")
    book = _book(owner)
    # Simulate the race: both requests pass the pre-insert check.
    monkeypatch.setattr(review_service, "check_review_unique", lambda existing: None)

    asyncio.run(ReviewService.create_review(ReviewCreate(book_id=book.id, rating=4, review_text="Good"), ada))
    with pytest.raises(ConstraintViolation):
        asyncio.run(ReviewService.create_review(ReviewCreate(book_id=book.id, rating=5, review_text="Good"), ada))
    assert len(asyncio.run(ReviewService.list_reviews_for_book(book.id))) == 1


def test_anonymous_actor_cannot_mutate(database):
    owner = _register("Owner", "owner@x.com")
    book = _book(owner)
    with pytest.raises(Unauthorized):
        _book(None)
    with pytest.raises(Unauthorized):
        asyncio.run(BookService.update_book(book.id, BookUpdate(title="X"), None))
    with pytest.raises(Unauthorized):
        asyncio.run(ReviewService.create_review(ReviewCreate(book_id=book.id, rating=4, review_text="Good"), None))


def test_blank_review_body_is_rejected_by_service_and_store(database):
    owner = _register("Owner", "owner@x.com")
    ada = _register("Ada", "ada@x.com")
    book = _book(owner)
    with pytest.raises(ValidationError):
        asyncio.run(ReviewService.create_review(ReviewCreate(book_id=book.id, rating=4, review_text=" "), ada))

    conn = sqlite3.connect(database)
    try:
        with pytest.raises(sqlite3.IntegrityError):
            conn.execute(
                "INSERT INTO reviews (id, book_id, user_id, rating, review_text, created_at, updated_at) "
                "VALUES ('r1', ?, ?, 4, '  ', 't', 't')",
                (book.id, ada["user_id"]),
            )
    finally:
        conn.close()


def test_detail_of_unknown_book_is_none(database):
    assert asyncio.run(BookService.get_book_detail("missing")) is None


def test_store_failure_is_unavailable(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "database_url", str(tmp_path / "no" / "such" / "dir" / "db.sqlite"))
    with pytest.raises(Unavailable):
        db.get_connection()
    with pytest.raises(Unavailable):
        asyncio.run(BookService.list_genres())


def test_settings_require_store_and_secret():
    with pytest.raises(ConfigurationError) as exc:
        Settings(database_url="", secret_key="").validate()
    assert "DATABASE_URL" in str(exc.value)
    assert "SECRET_KEY" in str(exc.value)
    Settings(database_url="catalog.db", secret_key="s").validate()
    assert not hasattr(settings, "algorithm")
