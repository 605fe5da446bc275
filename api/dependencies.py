"""
FastAPI dependencies.
"""

from fastapi import HTTPException

from domain.admission import ValidationError
from repositories.client import AdminApiClient, get_admin_client


def admin_client() -> AdminApiClient:
    """Admin service client used by every route; overridden in tests."""
    return get_admin_client()


def validation_http_error(error: ValidationError) -> HTTPException:
    """Translate an admission guard failure into a 422 response."""
    return HTTPException(
        status_code=422,
        detail={"reason": error.reason.value, "detail": error.message},
    )
