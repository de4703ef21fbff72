"""
Tests for the Prisma-backed sharing repository.

Prisma records are stood in for by simple attribute objects; the repository
only reads attributes from them.
"""

from datetime import datetime
from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock

import pytest
from prisma.errors import UniqueViolationError

from sharing_api.domains.sharing.exceptions import (
    ShareConflictError,
    ShareNotFoundError,
)
from sharing_api.domains.sharing.models import (
    ActivationState,
    ResourceKind,
)
from sharing_api.domains.sharing.repository import (
    PrismaSharingRepository,
    get_repository,
)
from sharing_api.shared.permissions import Role


def principal_record(principal_id: str = "alice", status: str = "active"):
    return SimpleNamespace(
        id=principal_id,
        email=f"{principal_id}@example.com",
        displayName=principal_id.title(),
        status=status,
    )


def share_record(share_id: str = "share-1", principal=None):
    return SimpleNamespace(
        id=share_id,
        entityType="work_item",
        entityId="wi-1",
        principalId="alice",
        roleId="work_item_viewer",
        createdAt=datetime(2024, 1, 15, 9, 0, 0),
        principal=principal,
    )


class TestPrismaSharingRepository:
    """Test query shapes and record conversion."""

    @pytest.fixture
    def repo(self, mock_prisma: Mock) -> PrismaSharingRepository:
        return PrismaSharingRepository(mock_prisma)

    @pytest.mark.asyncio
    async def test_get_principal(self, repo, mock_prisma):
        mock_prisma.principal.find_unique.return_value = principal_record(
            status="locked"
        )

        principal = await repo.get_principal("alice")

        mock_prisma.principal.find_unique.assert_called_once_with(
            where={"id": "alice"}
        )
        assert principal.display_name == "Alice"
        assert principal.status == ActivationState.LOCKED
        assert principal.is_active is False

    @pytest.mark.asyncio
    async def test_get_principal_missing(self, repo, mock_prisma):
        mock_prisma.principal.find_unique.return_value = None

        assert await repo.get_principal("ghost") is None

    @pytest.mark.asyncio
    async def test_get_principals(self, repo, mock_prisma):
        mock_prisma.principal.find_many.return_value = [principal_record("alice")]

        principals = await repo.get_principals(["alice", "ghost"])

        mock_prisma.principal.find_many.assert_called_once_with(
            where={"id": {"in": ["alice", "ghost"]}}
        )
        assert [p.id for p in principals] == ["alice"]

    @pytest.mark.asyncio
    async def test_get_principals_empty_skips_query(self, repo, mock_prisma):
        assert await repo.get_principals([]) == []
        mock_prisma.principal.find_many.assert_not_called()

    @pytest.mark.asyncio
    async def test_get_work_item(self, repo, mock_prisma):
        mock_prisma.workitem.find_unique.return_value = SimpleNamespace(
            id="wi-1", subject="Fix login", projectId="project-1", authorId="owner"
        )

        work_item = await repo.get_work_item("wi-1")

        assert work_item.project_id == "project-1"
        assert work_item.owner_id == "owner"
        assert work_item.kind == ResourceKind.WORK_ITEM

    @pytest.mark.asyncio
    async def test_get_project_role(self, repo, mock_prisma):
        mock_prisma.projectmember.find_first.return_value = SimpleNamespace(
            role="project_manager"
        )

        role = await repo.get_project_role("project-1", "manager")

        mock_prisma.projectmember.find_first.assert_called_once_with(
            where={"projectId": "project-1", "principalId": "manager"}
        )
        assert role == Role.PROJECT_MANAGER

    @pytest.mark.asyncio
    async def test_get_project_role_without_membership(self, repo, mock_prisma):
        mock_prisma.projectmember.find_first.return_value = None

        assert await repo.get_project_role("project-1", "alice") is None

    @pytest.mark.asyncio
    async def test_get_saved_query(self, repo, mock_prisma):
        mock_prisma.savedquery.find_unique.return_value = SimpleNamespace(
            id="sq-1", name="Open bugs", ownerId="owner"
        )

        saved_query = await repo.get_saved_query("sq-1")

        assert saved_query.owner_id == "owner"
        assert saved_query.kind == ResourceKind.SAVED_QUERY

    @pytest.mark.asyncio
    async def test_list_shares_newest_first_with_principal(self, repo, mock_prisma):
        mock_prisma.share.find_many.return_value = [
            share_record("share-2", principal_record()),
            share_record("share-1", principal_record()),
        ]

        shares = await repo.list_shares(ResourceKind.WORK_ITEM, "wi-1")

        mock_prisma.share.find_many.assert_called_once_with(
            where={"entityType": "work_item", "entityId": "wi-1"},
            include={"principal": True},
            order=[{"createdAt": "desc"}, {"id": "desc"}],
        )
        assert [s.id for s in shares] == ["share-2", "share-1"]
        assert shares[0].role_id == Role.WORK_ITEM_VIEWER
        assert shares[0].principal.email == "alice@example.com"

    @pytest.mark.asyncio
    async def test_find_share(self, repo, mock_prisma):
        mock_prisma.share.find_first.return_value = share_record()

        share = await repo.find_share(ResourceKind.WORK_ITEM, "wi-1", "alice")

        mock_prisma.share.find_first.assert_called_once_with(
            where={
                "entityType": "work_item",
                "entityId": "wi-1",
                "principalId": "alice",
            },
            include={"principal": True},
        )
        assert share.entity_type == ResourceKind.WORK_ITEM
        assert share.principal is None

    @pytest.mark.asyncio
    async def test_create_share(self, repo, mock_prisma):
        mock_prisma.share.create.return_value = share_record()

        share = await repo.create_share(
            ResourceKind.WORK_ITEM, "wi-1", "alice", Role.WORK_ITEM_VIEWER
        )

        mock_prisma.share.create.assert_called_once_with(
            data={
                "entityType": "work_item",
                "entityId": "wi-1",
                "principalId": "alice",
                "roleId": "work_item_viewer",
            },
            include={"principal": True},
        )
        assert share.id == "share-1"

    @pytest.mark.asyncio
    async def test_create_share_unique_violation_is_conflict(self, repo, mock_prisma):
        mock_prisma.share.create.side_effect = UniqueViolationError(
            {"user_facing_error": {"error_code": "P2002"}}
        )

        with pytest.raises(ShareConflictError) as exc_info:
            await repo.create_share(
                ResourceKind.WORK_ITEM, "wi-1", "alice", Role.WORK_ITEM_VIEWER
            )

        assert exc_info.value.principal_id == "alice"
        assert exc_info.value.status_code == 409

    @pytest.mark.asyncio
    async def test_update_share_role(self, repo, mock_prisma):
        record = share_record()
        record.roleId = "work_item_editor"
        mock_prisma.share.update.return_value = record

        share = await repo.update_share_role("share-1", Role.WORK_ITEM_EDITOR)

        mock_prisma.share.update.assert_called_once_with(
            where={"id": "share-1"},
            data={"roleId": "work_item_editor"},
            include={"principal": True},
        )
        assert share.role_id == Role.WORK_ITEM_EDITOR

    @pytest.mark.asyncio
    async def test_update_share_role_of_removed_share_not_found(
        self, repo, mock_prisma
    ):
        mock_prisma.share.update.return_value = None

        with pytest.raises(ShareNotFoundError) as exc_info:
            await repo.update_share_role("share-1", Role.WORK_ITEM_EDITOR)

        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_delete_share(self, repo, mock_prisma):
        await repo.delete_share("share-1")

        mock_prisma.share.delete.assert_called_once_with(where={"id": "share-1"})

    @pytest.mark.asyncio
    async def test_transaction_binds_to_transaction_client(self, repo, mock_prisma):
        tx_client = Mock()
        tx_client.share.delete = AsyncMock()
        mock_prisma.tx.return_value.__aenter__.return_value = tx_client

        async with repo.transaction() as tx:
            await tx.delete_share("share-1")

        assert isinstance(tx, PrismaSharingRepository)
        assert tx.db is tx_client
        tx_client.share.delete.assert_called_once_with(where={"id": "share-1"})
        mock_prisma.share.delete.assert_not_called()
        mock_prisma.tx.return_value.__aexit__.assert_called_once()

    @pytest.mark.asyncio
    async def test_transaction_propagates_errors(self, repo, mock_prisma):
        with pytest.raises(RuntimeError):
            async with repo.transaction():
                raise RuntimeError("boom")

        exc_type = mock_prisma.tx.return_value.__aexit__.call_args.args[0]
        assert exc_type is RuntimeError


class TestGetRepository:
    @pytest.mark.asyncio
    async def test_wraps_database_client(self, mock_prisma):
        repo = await get_repository(mock_prisma)

        assert isinstance(repo, PrismaSharingRepository)
        assert repo.db is mock_prisma
