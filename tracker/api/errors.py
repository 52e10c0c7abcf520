"""
Mapping of infrastructure errors to HTTP errors.
"""
from fastapi import HTTPException, status

from tracker.infrastructure.supabase_client import SupabaseAPIError


COMMON_RESPONSES = {
    404: {"description": "Requested resource not found"},
    429: {"description": "Rate limit exceeded"},
    502: {"description": "Campaign database unavailable or returned an error"},
}


def to_http_exception(error: SupabaseAPIError, what: str) -> HTTPException:
    """
    Translate a Supabase failure into an HTTPException.

    A 404 from the database is passed through; everything else is reported
    as a bad gateway.
    """
    if error.status_code == status.HTTP_404_NOT_FOUND:
        return HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{what} not found: {error.message}",
        )
    return HTTPException(
        status_code=status.HTTP_502_BAD_GATEWAY,
        detail=f"Failed to fetch {what}: {error.message}",
    )
