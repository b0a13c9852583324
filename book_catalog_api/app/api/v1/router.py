"""
Top‑level router for version 1 of the API.

This router aggregates the domain routers under a unified prefix.
When a new domain is introduced, include its router here.
"""

from fastapi import APIRouter

from .endpoints import auth, books, health, profiles, reviews

router = APIRouter()

router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(profiles.router, prefix="/profiles", tags=["profiles"])
router.include_router(books.router, prefix="/books", tags=["books"])
# Reviews are served both under /books/{id}/reviews and /reviews, so the
# router declares its full paths itself.
router.include_router(reviews.router, tags=["reviews"])
router.include_router(health.router, tags=["health"])
