"""
Domain errors raised by the service layer.

They are HTTPException subclasses so services can raise them directly and
FastAPI renders them as ``{"detail": message}`` with the matching status.
"""
from fastapi import HTTPException, status


class NotFoundError(HTTPException):
    """A client, product, order, register session, payment or entry does not exist."""

    def __init__(self, detail: str = "Resource not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class ValidationError(HTTPException):
    """Business rule violation on otherwise well-formed input."""

    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class NoOpenSessionError(HTTPException):
    """A cash operation needs an open register and there is none."""

    def __init__(self, detail: str = "No open register session"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class ConflictError(HTTPException):
    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class AuthenticationError(HTTPException):
    def __init__(self, detail: str = "Could not validate credentials"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


def internal_error(action: str, error: Exception) -> HTTPException:
    """500 raised after an unexpected failure, once the session was rolled back."""
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Internal error {action}: {str(error)}"
    )
