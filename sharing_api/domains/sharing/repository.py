import logging
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, AsyncContextManager, AsyncIterator, List, Optional

from fastapi import Depends
from prisma.errors import UniqueViolationError

from sharing_api.core.database import get_db
from sharing_api.domains.sharing.exceptions import (
    ShareConflictError,
    ShareNotFoundError,
)
from sharing_api.domains.sharing.models import (
    Principal,
    ResourceKind,
    SavedQuery,
    Share,
    WorkItem,
)
from sharing_api.shared.permissions import Role

if TYPE_CHECKING:
    from prisma import Prisma

logger = logging.getLogger(__name__)


class SharingRepository(ABC):
    """Storage operations the sharing engine depends on."""

    @abstractmethod
    async def get_principal(self, principal_id: str) -> Optional[Principal]:
        pass

    @abstractmethod
    async def get_principals(self, principal_ids: List[str]) -> List[Principal]:
        """Return the principals that exist among ``principal_ids``."""
        pass

    @abstractmethod
    async def get_work_item(self, work_item_id: str) -> Optional[WorkItem]:
        pass

    @abstractmethod
    async def get_project_role(
        self, project_id: str, principal_id: str
    ) -> Optional[Role]:
        """Return the principal's membership role in a project, if any."""
        pass

    @abstractmethod
    async def get_saved_query(self, saved_query_id: str) -> Optional[SavedQuery]:
        pass

    @abstractmethod
    async def list_shares(self, kind: ResourceKind, entity_id: str) -> List[Share]:
        """
        Return every share of a resource, most recently created first.

        Shares come with their principal loaded.
        """
        pass

    @abstractmethod
    async def find_share(
        self, kind: ResourceKind, entity_id: str, principal_id: str
    ) -> Optional[Share]:
        pass

    @abstractmethod
    async def create_share(
        self, kind: ResourceKind, entity_id: str, principal_id: str, role: Role
    ) -> Share:
        """
        Create a share.

        Raises:
            ShareConflictError: If a share for the same resource and principal
                already exists
        """
        pass

    @abstractmethod
    async def update_share_role(self, share_id: str, role: Role) -> Share:
        pass

    @abstractmethod
    async def delete_share(self, share_id: str) -> None:
        pass

    @abstractmethod
    def transaction(self) -> AsyncContextManager["SharingRepository"]:
        """
        Open a transaction.

        Yields a repository bound to the transaction; everything written
        through it is rolled back if the block raises.
        """
        pass


class PrismaSharingRepository(SharingRepository):
    """Prisma-backed sharing storage."""

    def __init__(self, db: "Prisma"):
        self.db = db

    async def get_principal(self, principal_id: str) -> Optional[Principal]:
        record = await self.db.principal.find_unique(where={"id": principal_id})
        return Principal.model_validate(record) if record else None

    async def get_principals(self, principal_ids: List[str]) -> List[Principal]:
        if not principal_ids:
            return []
        records = await self.db.principal.find_many(
            where={"id": {"in": principal_ids}}
        )
        return [Principal.model_validate(record) for record in records]

    async def get_work_item(self, work_item_id: str) -> Optional[WorkItem]:
        record = await self.db.workitem.find_unique(where={"id": work_item_id})
        return WorkItem.model_validate(record) if record else None

    async def get_project_role(
        self, project_id: str, principal_id: str
    ) -> Optional[Role]:
        membership = await self.db.projectmember.find_first(
            where={"projectId": project_id, "principalId": principal_id}
        )
        return Role(membership.role) if membership else None

    async def get_saved_query(self, saved_query_id: str) -> Optional[SavedQuery]:
        record = await self.db.savedquery.find_unique(where={"id": saved_query_id})
        return SavedQuery.model_validate(record) if record else None

    async def list_shares(self, kind: ResourceKind, entity_id: str) -> List[Share]:
        records = await self.db.share.find_many(
            where={"entityType": kind.value, "entityId": entity_id},
            include={"principal": True},
            order=[{"createdAt": "desc"}, {"id": "desc"}],
        )
        return [Share.model_validate(record) for record in records]

    async def find_share(
        self, kind: ResourceKind, entity_id: str, principal_id: str
    ) -> Optional[Share]:
        record = await self.db.share.find_first(
            where={
                "entityType": kind.value,
                "entityId": entity_id,
                "principalId": principal_id,
            },
            include={"principal": True},
        )
        return Share.model_validate(record) if record else None

    async def create_share(
        self, kind: ResourceKind, entity_id: str, principal_id: str, role: Role
    ) -> Share:
        try:
            record = await self.db.share.create(
                data={
                    "entityType": kind.value,
                    "entityId": entity_id,
                    "principalId": principal_id,
                    "roleId": role.value,
                },
                include={"principal": True},
            )
        except UniqueViolationError:
            logger.warning(
                f"Concurrent share creation for {kind.value} {entity_id} "
                f"and principal {principal_id}"
            )
            raise ShareConflictError(principal_id)

        return Share.model_validate(record)

    async def update_share_role(self, share_id: str, role: Role) -> Share:
        record = await self.db.share.update(
            where={"id": share_id},
            data={"roleId": role.value},
            include={"principal": True},
        )
        if not record:
            logger.warning(f"Share {share_id} was removed before its role changed")
            raise ShareNotFoundError()
        return Share.model_validate(record)

    async def delete_share(self, share_id: str) -> None:
        await self.db.share.delete(where={"id": share_id})

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator["PrismaSharingRepository"]:
        async with self.db.tx() as transaction:
            yield PrismaSharingRepository(transaction)


async def get_repository(db: "Prisma" = Depends(get_db)) -> SharingRepository:
    """Repository dependency for FastAPI dependency injection."""
    return PrismaSharingRepository(db)
