"""Translate expected directory errors into HTTP responses."""

from fastapi import HTTPException, status

from panel.core.exceptions import ConflictError, NotFoundError, ValidationError

# StoreError is not listed; it propagates and becomes a 500.
EXPECTED_ERRORS = (ValidationError, ConflictError, NotFoundError)


def to_http_exception(e: ValidationError | ConflictError | NotFoundError) -> HTTPException:
    if isinstance(e, ValidationError):
        return HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"message": "Validation failed", "errors": e.as_dicts()},
        )
    if isinstance(e, ConflictError):
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"message": e.message, "field": e.field},
        )
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
