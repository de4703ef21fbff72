from abc import ABC, abstractmethod
from typing import ClassVar, FrozenSet, Iterable, List, Optional

from sharing_api.domains.sharing.models import (
    Principal,
    ResourceKind,
    Share,
    ShareableEntity,
    ShareFilter,
    ShareFilterName,
)
from sharing_api.domains.sharing.repository import SharingRepository
from sharing_api.shared.permissions import Permission, Role


class SharingStrategy(ABC):
    """
    Per-request view of one resource's shares from one principal's seat.

    A strategy is built fresh for every request by the resolver and is never
    reused. It answers what the acting principal may do with the share list
    and reads the current snapshot of that list from storage.

    Subclasses declare the permissions that gate viewing and managing, the
    roles a share may carry, and how the entity plus the principal's ambient
    permissions are loaded.
    """

    kind: ClassVar[ResourceKind]
    resolve_permission: ClassVar[Permission]
    view_permission: ClassVar[Permission]
    manage_permission: ClassVar[Permission]
    share_roles: ClassVar[FrozenSet[Role]]
    supported_filters: ClassVar[FrozenSet[ShareFilterName]] = frozenset(
        {ShareFilterName.ROLE, ShareFilterName.PRINCIPAL_STATUS}
    )

    def __init__(
        self,
        resource: ShareableEntity,
        principal: Principal,
        permissions: FrozenSet[Permission],
        repository: SharingRepository,
        filters: Iterable[ShareFilter] = (),
    ):
        self.resource = resource
        self.principal = principal
        self.permissions = permissions
        self.repository = repository
        self.filters = self._allowed_filters(filters)

    @classmethod
    @abstractmethod
    async def load(
        cls,
        repository: SharingRepository,
        entity_id: str,
        principal: Principal,
        filters: Iterable[ShareFilter] = (),
    ) -> Optional["SharingStrategy"]:
        """
        Load the entity and the principal's ambient permissions on it.

        Returns:
            The strategy, or None if the entity does not exist
        """
        pass

    def resource_visible(self) -> bool:
        """Whether the principal may know the resource exists at all."""
        return self.resolve_permission in self.permissions

    def viewable(self) -> bool:
        return self.view_permission in self.permissions

    def manageable(self) -> bool:
        return self.manage_permission in self.permissions

    def allowed_roles(self) -> FrozenSet[Role]:
        return self.share_roles

    async def all_shares(self) -> List[Share]:
        """Current shares, newest first, without the owner's implicit share."""
        shares = await self.repository.list_shares(self.kind, self.resource.id)
        return [share for share in shares if share.principal_id != self.owner_id]

    async def shares(self) -> List[Share]:
        """Current shares as the caller's (filtered) list shows them."""
        return [share for share in await self.all_shares() if self._matches(share)]

    @property
    def owner_id(self) -> str:
        return self.resource.owner_id

    def _allowed_filters(self, filters: Iterable[ShareFilter]) -> List[ShareFilter]:
        allowed = {tag.value for tag in self.supported_filters}
        return [f for f in filters if f.name in allowed]

    def _matches(self, share: Share) -> bool:
        for share_filter in self.filters:
            value = self._filter_value(ShareFilterName(share_filter.name), share)
            if share_filter.values and value not in share_filter.values:
                return False
        return True

    @staticmethod
    def _filter_value(tag: ShareFilterName, share: Share) -> Optional[str]:
        if tag == ShareFilterName.ROLE:
            return share.role_id.value
        if tag == ShareFilterName.PRINCIPAL_STATUS:
            return share.principal.status.value if share.principal else None
        return None
