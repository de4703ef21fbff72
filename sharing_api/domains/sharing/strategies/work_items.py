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


@register_strategy(ResourceKind.WORK_ITEM)
class WorkItemStrategy(SharingStrategy):
    """
    Sharing of individual work items.

    Ambient permissions come from the principal's role in the work item's
    project, plus whatever role an existing share on the work item gives
    them.
    """

    resolve_permission = Permission.VIEW_WORK_ITEMS
    view_permission = Permission.VIEW_SHARED_WORK_ITEMS
    manage_permission = Permission.SHARE_WORK_ITEMS
    share_roles = frozenset(
        {Role.WORK_ITEM_VIEWER, Role.WORK_ITEM_COMMENTER, Role.WORK_ITEM_EDITOR}
    )

    @classmethod
    async def load(
        cls,
        repository: SharingRepository,
        entity_id: str,
        principal: Principal,
        filters: Iterable[ShareFilter] = (),
    ) -> Optional["WorkItemStrategy"]:
        work_item = await repository.get_work_item(entity_id)
        if not work_item:
            return None

        project_role = await repository.get_project_role(
            work_item.project_id, principal.id
        )
        own_share = await repository.find_share(
            ResourceKind.WORK_ITEM, work_item.id, principal.id
        )

        permissions = permissions_for(
            [project_role, own_share.role_id if own_share else None]
        )
        return cls(work_item, principal, permissions, repository, filters)
