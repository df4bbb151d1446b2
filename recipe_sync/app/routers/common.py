from __future__ import annotations

from fastapi import HTTPException, status

from recipe_sync.app.domain.errors import CatalogRepositoryError
from recipe_sync.app.domain.models import ItemError
from recipe_sync.app.schemas.common import ItemErrorOut
from recipe_sync.services.errors import (
    CredentialRejectedError,
    RateLimitedError,
    ServiceError,
)


def serialize_errors(errors: list[ItemError]) -> list[ItemErrorOut]:
    return [ItemErrorOut(**error.to_dict()) for error in errors]


def upstream_http_error(exc: Exception) -> HTTPException:
    """Map a source or store failure to the HTTP status the API reports."""
    if isinstance(exc, CredentialRejectedError):
        return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc))
    if isinstance(exc, RateLimitedError):
        return HTTPException(status_code=status.HTTP_429_TOO_MANY_REQUESTS, detail=str(exc))
    if isinstance(exc, (ServiceError, CatalogRepositoryError)):
        return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))
