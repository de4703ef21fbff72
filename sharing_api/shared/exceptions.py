# sharing_api/shared/exceptions.py
from typing import Optional

from fastapi import HTTPException, status


class BaseHTTPException(HTTPException):
    """
    HTTP exception with class-level defaults.

    Subclasses override ``status_code`` and ``message``; callers may pass a
    more specific message when raising.
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(
            status_code=type(self).status_code, detail=message or type(self).message
        )


# Authentication & Authorization Exceptions
class UnlinkedPrincipalError(HTTPException):
    def __init__(self) -> None:
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Token subject not linked to a principal",
        )


class NotAuthorizedError(HTTPException):
    def __init__(self) -> None:
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized")


# Validation / Request Exceptions
class InvalidDataError(HTTPException):
    def __init__(self, message: str = "Invalid request data") -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=message)
