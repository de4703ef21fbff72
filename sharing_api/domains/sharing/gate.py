import logging
from enum import Enum

from sharing_api.domains.sharing.entitlements import EntitlementChecker
from sharing_api.domains.sharing.exceptions import (
    EntitlementRequiredError,
    ShareForbiddenError,
)
from sharing_api.domains.sharing.strategies import SharingStrategy

logger = logging.getLogger(__name__)


class Operation(str, Enum):
    """Operations on a resource's share list."""

    LIST = "list"
    DIALOG = "dialog"
    CREATE = "create"
    UPDATE = "update"
    DESTROY = "destroy"
    BULK_UPDATE = "bulk_update"
    BULK_DESTROY = "bulk_destroy"
    RESEND_INVITE = "resend_invite"
    COPY = "copy"


READ_OPERATIONS = frozenset({Operation.LIST, Operation.DIALOG})


class AccessDecision(str, Enum):
    GRANTED = "granted"
    ENTITLEMENT_REQUIRED = "entitlement_required"


class AuthorizationGate:
    """
    Decides whether an operation on a share list may proceed.

    Two checks apply: the acting principal's ambient permission on the
    resource, then the entitlement for the sharing capability itself. A
    missing permission always wins over a missing entitlement.
    """

    def __init__(self, entitlements: EntitlementChecker):
        self.entitlements = entitlements

    def authorize(
        self, strategy: SharingStrategy, operation: Operation
    ) -> AccessDecision:
        """
        Check an operation against the strategy and the entitlement.

        Args:
            strategy: Strategy for the resource
            operation: The requested operation

        Returns:
            GRANTED, or ENTITLEMENT_REQUIRED when the principal is permitted
            but sharing is not licensed for the resource kind

        Raises:
            ShareForbiddenError: If the principal lacks the permission
        """
        if operation in READ_OPERATIONS:
            permitted = strategy.viewable() or strategy.manageable()
        else:
            permitted = strategy.manageable()

        if not permitted:
            logger.warning(
                f"Principal {strategy.principal.id} denied {operation.value} on "
                f"{strategy.kind.value} {strategy.resource.id}"
            )
            raise ShareForbiddenError()

        if not self.entitlements.is_sharing_enabled(strategy.kind):
            return AccessDecision.ENTITLEMENT_REQUIRED

        return AccessDecision.GRANTED

    def require(self, strategy: SharingStrategy, operation: Operation) -> None:
        """
        Like authorize, but for operations that cannot degrade to an upsell.

        Raises:
            ShareForbiddenError: If the principal lacks the permission
            EntitlementRequiredError: If sharing is not licensed
        """
        if self.authorize(strategy, operation) is AccessDecision.ENTITLEMENT_REQUIRED:
            raise EntitlementRequiredError()
