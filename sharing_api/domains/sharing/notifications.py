import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import httpx

from sharing_api.core.settings import settings
from sharing_api.domains.sharing.exceptions import InviteDeliveryError
from sharing_api.domains.sharing.models import Principal, Share, ShareableEntity

logger = logging.getLogger(__name__)


class InviteNotifier(ABC):
    """
    Delivers invites to principals who have not activated their account.

    Implementations only hand the invite off; deduplication and rate
    limiting are the receiving side's concern.
    """

    @abstractmethod
    async def send_invite(
        self, principal: Principal, share: Share, resource: ShareableEntity
    ) -> None:
        pass


class LoggingInviteNotifier(InviteNotifier):
    """Records invites in the application log. Used when no webhook is set."""

    async def send_invite(
        self, principal: Principal, share: Share, resource: ShareableEntity
    ) -> None:
        logger.info(
            f"Invite for {principal.email} to {resource.kind.value} {resource.id} "
            f"(share {share.id}, role {share.role_id.value})"
        )


class WebhookInviteNotifier(InviteNotifier):
    """Posts invites to an HTTP endpoint as JSON."""

    def __init__(
        self,
        url: str,
        timeout: int = 10,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.url = url
        self.timeout = timeout
        self.client = client

    def _build_payload(
        self, principal: Principal, share: Share, resource: ShareableEntity
    ) -> Dict[str, Any]:
        return {
            "principal_id": principal.id,
            "email": principal.email,
            "status": principal.status.value,
            "share_id": share.id,
            "role_id": share.role_id.value,
            "resource_kind": resource.kind.value,
            "resource_id": resource.id,
        }

    async def send_invite(
        self, principal: Principal, share: Share, resource: ShareableEntity
    ) -> None:
        payload = self._build_payload(principal, share, resource)

        try:
            if self.client is not None:
                response = await self.client.post(
                    self.url, json=payload, timeout=self.timeout
                )
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(self.url, json=payload)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Invite delivery for share {share.id} failed: {e}")
            raise InviteDeliveryError()

        logger.info(f"Invite for share {share.id} handed to {self.url}")


def get_invite_notifier() -> InviteNotifier:
    """Pick the invite notifier configured for this deployment."""
    if settings.INVITE_WEBHOOK_URL:
        return WebhookInviteNotifier(
            settings.INVITE_WEBHOOK_URL, timeout=settings.INVITE_WEBHOOK_TIMEOUT
        )
    return LoggingInviteNotifier()
