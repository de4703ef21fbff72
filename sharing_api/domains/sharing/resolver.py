import logging
from typing import Iterable

from sharing_api.domains.sharing.exceptions import ResourceNotFoundError
from sharing_api.domains.sharing.models import Principal, ResolverInput, ShareFilter
from sharing_api.domains.sharing.repository import SharingRepository
from sharing_api.domains.sharing.strategies import SharingStrategy, get_strategy_class

logger = logging.getLogger(__name__)


class EntityResolver:
    """Turns a request's resource identifier into a sharing strategy."""

    def __init__(self, repository: SharingRepository):
        self.repository = repository

    async def resolve(
        self,
        identifier: ResolverInput,
        principal: Principal,
        filters: Iterable[ShareFilter] = (),
    ) -> SharingStrategy:
        """
        Load the identified resource as seen by the acting principal.

        Args:
            identifier: Request identifier with exactly one populated field
            principal: The acting principal
            filters: Share-list filters requested by the client

        Returns:
            Strategy for the resource

        Raises:
            ResourceNotFoundError: If the resource does not exist or the
                principal may not know that it exists
        """
        kind, entity_id = identifier.target()
        strategy_class = get_strategy_class(kind)

        strategy = await strategy_class.load(
            self.repository, entity_id, principal, filters
        )
        if strategy is None or not strategy.resource_visible():
            logger.debug(
                f"Principal {principal.id} cannot resolve {kind.value} {entity_id}"
            )
            raise ResourceNotFoundError()

        return strategy
