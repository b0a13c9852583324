"""Domain exceptions shared by the services and their HTTP mapping."""

from fastapi import HTTPException, status


class CatalogError(Exception):
    """Base exception for all catalog service errors."""

    status_code = status.HTTP_400_BAD_REQUEST


class Unauthorized(CatalogError):
    """Actor is not allowed to perform the requested mutation."""

    status_code = status.HTTP_403_FORBIDDEN


class ConstraintViolation(CatalogError):
    """Uniqueness or range rule broken (duplicate review, rating bounds)."""

    status_code = status.HTTP_409_CONFLICT


class NotFound(CatalogError):
    """Referenced profile, book or review does not exist."""

    status_code = status.HTTP_404_NOT_FOUND


class ValidationError(CatalogError):
    """Malformed input: empty text, bad year, non-integer rating, etc."""

    status_code = 422


class Unavailable(CatalogError):
    """The store could not be reached."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


def to_http_exception(exc: CatalogError) -> HTTPException:
    """Translate a domain error into the matching ``HTTPException``."""
    return HTTPException(status_code=exc.status_code, detail=str(exc))
