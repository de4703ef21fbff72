from typing import Iterable, Optional

from sharing_api.domains.sharing.models import (
    Principal,
    ResourceKind,
    ShareFilter,
)
from sharing_api.domains.sharing.repository import SharingRepository
from sharing_api.shared.permissions import Permission, Role, permissions_for

from .base import SharingStrategy
from .registry import register_strategy

OWNER_PERMISSIONS = frozenset(
    {Permission.VIEW_SAVED_QUERY, Permission.EDIT_SAVED_QUERY}
)


@register_strategy(ResourceKind.SAVED_QUERY)
class SavedQueryStrategy(SharingStrategy):
    """
    Sharing of saved queries.

    The owner may do everything; anyone else is limited to what their share
    role on the query grants.
    """

    resolve_permission = Permission.VIEW_SAVED_QUERY
    view_permission = Permission.VIEW_SAVED_QUERY
    manage_permission = Permission.EDIT_SAVED_QUERY
    share_roles = frozenset({Role.SAVED_QUERY_VIEWER, Role.SAVED_QUERY_EDITOR})

    @classmethod
    async def load(
        cls,
        repository: SharingRepository,
        entity_id: str,
        principal: Principal,
        filters: Iterable[ShareFilter] = (),
    ) -> Optional["SavedQueryStrategy"]:
        saved_query = await repository.get_saved_query(entity_id)
        if not saved_query:
            return None

        if saved_query.owner_id == principal.id:
            permissions = OWNER_PERMISSIONS
        else:
            own_share = await repository.find_share(
                ResourceKind.SAVED_QUERY, saved_query.id, principal.id
            )
            permissions = permissions_for([own_share.role_id if own_share else None])

        return cls(saved_query, principal, permissions, repository, filters)
