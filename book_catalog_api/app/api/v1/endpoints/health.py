"""
Health endpoint for API v1.

Reports the service name and version and checks that the database
answers a trivial query.  A store that cannot be reached yields 503.
"""

from typing import Any, Dict

from fastapi import APIRouter

from book_catalog_api.app.core.config import settings
from book_catalog_api.app.core.errors import CatalogError, to_http_exception

router = APIRouter()


@router.get("/health", response_model=Dict[str, Any])
async def health() -> Dict[str, Any]:
    from book_catalog_api.app.core.db import connection
    try:
        with connection() as conn:
            conn.execute("SELECT 1").fetchone()
    except CatalogError as e:
        raise to_http_exception(e) from e
    return {"status": "ok", "service": settings.project_name, "version": settings.api_version}
