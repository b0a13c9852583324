"""
Registration and login endpoints.

Registering creates the account and its profile in one step and
returns a bearer token for the new identity, so the client is signed
in immediately.
"""

from fastapi import APIRouter, HTTPException, status

from book_catalog_api.app.core.errors import CatalogError, to_http_exception
from book_catalog_api.app.core.security import create_access_token
from book_catalog_api.app.schemas.auth import LoginRequest, RegisterRequest, Token
from book_catalog_api.app.services.profile_service import ProfileService

router = APIRouter()


@router.post("/register", response_model=Token, status_code=status.HTTP_201_CREATED)
async def register(data: RegisterRequest) -> Token:
    """Register a new user and return an access token.

    A duplicate email yields 409, a malformed email or a short
    password 422.
    """
    try:
        profile = await ProfileService.register(data)
    except CatalogError as e:
        raise to_http_exception(e) from e
    return Token(access_token=create_access_token({"sub": profile.id}))


@router.post("/login", response_model=Token)
async def login(data: LoginRequest) -> Token:
    """Authenticate with email and password and return a token."""
    try:
        profile = await ProfileService.authenticate(data.email, data.password)
    except CatalogError as e:
        raise to_http_exception(e) from e
    if not profile:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    return Token(access_token=create_access_token({"sub": profile.id}))
