"""
Domain-specific exceptions for sharing.
"""

from typing import Any, Dict, List, Optional

from fastapi import status

from sharing_api.shared.exceptions import BaseHTTPException


class SharingException(BaseHTTPException):
    """Base exception for sharing-related errors."""

    status_code = status.HTTP_400_BAD_REQUEST


class ResourceNotFoundError(SharingException):
    """
    Raised when the shared resource cannot be resolved.

    Also raised when the caller may not know the resource exists, so the two
    cases look the same from outside.
    """

    status_code = status.HTTP_404_NOT_FOUND
    message = "Resource not found"


class ShareNotFoundError(SharingException):
    """Raised when a share id does not belong to the resource."""

    status_code = status.HTTP_404_NOT_FOUND
    message = "Share not found"


class ShareForbiddenError(SharingException):
    """Raised when the caller lacks the permission an operation needs."""

    status_code = status.HTTP_403_FORBIDDEN
    message = "Not allowed to access the shares of this resource"


class EntitlementRequiredError(SharingException):
    """Raised on writes when sharing is not licensed for the resource kind."""

    status_code = status.HTTP_402_PAYMENT_REQUIRED
    message = "Sharing requires an enterprise entitlement"


class InvalidRoleError(SharingException):
    """Raised when a role is outside the resource kind's allowed roles."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    message = "Role is not allowed for this resource"


class UnknownPrincipalError(SharingException):
    """Raised when share targets reference principals that do not exist."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    message = "Unknown principal"

    def __init__(self, principal_ids: List[str]) -> None:
        self.principal_ids = principal_ids
        super().__init__(f"Unknown principals: {', '.join(principal_ids)}")


class OwnerShareError(SharingException):
    """Raised when a share targets the owner of the resource."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    message = "The owner of a resource always has access and cannot be shared with"


class PrincipalAlreadyActiveError(SharingException):
    """Raised when resending an invite to a principal who is already active."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    message = "Principal is already active"


class ShareConflictError(SharingException):
    """Raised when a concurrent request created the same share first."""

    status_code = status.HTTP_409_CONFLICT
    message = "Share already exists"

    def __init__(self, principal_id: Optional[str] = None) -> None:
        self.principal_id = principal_id
        super().__init__(
            f"A share for principal {principal_id} already exists"
            if principal_id
            else None
        )


class BatchAbortedError(SharingException):
    """Raised when any item of a bulk operation is invalid."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    message = "Bulk operation aborted"

    def __init__(self, failures: List[Dict[str, Any]]) -> None:
        self.failures = failures
        super().__init__()
        # Keep the per-item reasons in the response body
        self.detail = {"message": type(self).message, "failures": failures}


class InviteDeliveryError(SharingException):
    """Raised when the invite notification could not be handed off."""

    status_code = status.HTTP_502_BAD_GATEWAY
    message = "Failed to deliver invite"
