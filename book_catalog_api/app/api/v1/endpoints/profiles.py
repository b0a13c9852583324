"""
Profile endpoints for API v1.

Profiles are readable by anyone.  ``PUT /profiles/{id}`` renames the
caller's own profile; no other field can be changed.
"""

from fastapi import APIRouter, Body, Depends

from book_catalog_api.app.core.errors import CatalogError, to_http_exception
from book_catalog_api.app.core.security import get_current_user
from book_catalog_api.app.schemas.profile import ProfileRead, ProfileSummary
from book_catalog_api.app.services.profile_service import ProfileService

router = APIRouter()


@router.get("/me", response_model=ProfileRead)
async def read_own_profile(current_user: dict = Depends(get_current_user)) -> ProfileRead:
    """Return the profile of the signed‑in user."""
    try:
        return await ProfileService.get_profile(current_user["user_id"])
    except CatalogError as e:
        raise to_http_exception(e) from e


@router.get("/{profile_id}", response_model=ProfileRead)
async def read_profile(profile_id: str) -> ProfileRead:
    try:
        return await ProfileService.get_profile(profile_id)
    except CatalogError as e:
        raise to_http_exception(e) from e


@router.put("/{profile_id}", response_model=ProfileRead)
async def update_profile(
    profile_id: str,
    body: dict = Body(...),
    current_user: dict = Depends(get_current_user),
) -> ProfileRead:
    """Update the display name of the caller's profile.

    The body may only contain ``name`` (other keys are refused with 403
    unless they repeat the stored value).
    """
    try:
        return await ProfileService.update_profile(profile_id, body, current_user)
    except CatalogError as e:
        raise to_http_exception(e) from e


@router.get("/{profile_id}/summary", response_model=ProfileSummary)
async def read_profile_summary(profile_id: str) -> ProfileSummary:
    """Books added and reviews written by a user, with counts."""
    try:
        return await ProfileService.get_summary(profile_id)
    except CatalogError as e:
        raise to_http_exception(e) from e
