import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sharing_api.domains.sharing.exceptions import (
    BatchAbortedError,
    InvalidRoleError,
    OwnerShareError,
    PrincipalAlreadyActiveError,
    ShareNotFoundError,
    UnknownPrincipalError,
)
from sharing_api.domains.sharing.gate import AuthorizationGate, Operation
from sharing_api.domains.sharing.models import Share
from sharing_api.domains.sharing.notifications import InviteNotifier
from sharing_api.domains.sharing.repository import SharingRepository
from sharing_api.domains.sharing.strategies import SharingStrategy
from sharing_api.shared.exceptions import InvalidDataError
from sharing_api.shared.permissions import Role

logger = logging.getLogger(__name__)


@dataclass
class ShareMutationOutcome:
    """Share-list snapshots taken around a mutation, plus what it touched."""

    operation: Operation
    before: List[Share]
    after: List[Share]
    added: List[Share] = field(default_factory=list)
    updated: List[Share] = field(default_factory=list)
    removed: List[Share] = field(default_factory=list)
    pending_invites: List[Share] = field(default_factory=list)
    previous_role_id: Optional[Role] = None

    @property
    def touched(self) -> List[Share]:
        return self.added + self.updated


class ShareMutationService:
    """
    Creates, updates and removes shares on behalf of the acting principal.

    Every operation passes the authorization gate first and runs its writes
    in a single transaction, so a failure leaves the share list untouched.
    """

    def __init__(
        self,
        repository: SharingRepository,
        gate: AuthorizationGate,
        notifier: InviteNotifier,
    ):
        self.repository = repository
        self.gate = gate
        self.notifier = notifier

    async def create_or_update_share(
        self, strategy: SharingStrategy, principal_ids: Sequence[str], role_id: str
    ) -> ShareMutationOutcome:
        """
        Share the resource with principals, or change the role they already have.

        Args:
            strategy: Strategy for the resource
            principal_ids: Principals to share with; repeats are ignored
            role_id: Role to give every principal

        Returns:
            Outcome with the new shares in ``added`` and re-assigned ones in
            ``updated``; shares of principals that still need to accept an
            invite are also listed in ``pending_invites``

        Raises:
            InvalidRoleError: If the role is not allowed on the resource kind
            UnknownPrincipalError: If any principal does not exist
            OwnerShareError: If the resource owner is among the principals
            ShareConflictError: If a concurrent request created one of the
                shares first
        """
        self.gate.require(strategy, Operation.CREATE)
        role = self._validate_role(strategy, role_id)

        target_ids = list(dict.fromkeys(principal_ids))
        principals = await self.repository.get_principals(target_ids)
        found = {principal.id: principal for principal in principals}

        missing = [pid for pid in target_ids if pid not in found]
        if missing:
            raise UnknownPrincipalError(missing)
        if strategy.owner_id in found:
            raise OwnerShareError()

        before = await strategy.shares()
        outcome = ShareMutationOutcome(
            operation=Operation.CREATE, before=before, after=[]
        )

        async with self.repository.transaction() as tx:
            for principal_id in target_ids:
                existing = await tx.find_share(
                    strategy.kind, strategy.resource.id, principal_id
                )
                if existing is None:
                    share = await tx.create_share(
                        strategy.kind, strategy.resource.id, principal_id, role
                    )
                    outcome.added.append(share)
                elif existing.role_id != role:
                    share = await tx.update_share_role(existing.id, role)
                    outcome.updated.append(share)
                else:
                    share = existing
                    outcome.updated.append(share)

                if not found[principal_id].is_active:
                    outcome.pending_invites.append(share)

        outcome.after = await strategy.shares()

        logger.info(
            f"Shared {strategy.kind.value} {strategy.resource.id} as {role.value}: "
            f"{len(outcome.added)} added, {len(outcome.updated)} updated, "
            f"{len(outcome.pending_invites)} pending invite"
        )
        return outcome

    async def update_share_role(
        self, strategy: SharingStrategy, share_id: str, role_id: str
    ) -> ShareMutationOutcome:
        """
        Change the role of one share.

        Raises:
            InvalidRoleError: If the role is not allowed on the resource kind
            ShareNotFoundError: If the share does not belong to the resource
        """
        self.gate.require(strategy, Operation.UPDATE)
        role = self._validate_role(strategy, role_id)

        share = await self._find_share(strategy, share_id)
        before = await strategy.shares()

        async with self.repository.transaction() as tx:
            updated = await tx.update_share_role(share.id, role)

        after = await strategy.shares()

        logger.info(
            f"Share {share.id} on {strategy.kind.value} {strategy.resource.id} "
            f"changed from {share.role_id.value} to {role.value}"
        )
        return ShareMutationOutcome(
            operation=Operation.UPDATE,
            before=before,
            after=after,
            updated=[updated],
            previous_role_id=share.role_id,
        )

    async def destroy_share(
        self, strategy: SharingStrategy, share_id: str
    ) -> ShareMutationOutcome:
        """
        Remove one share.

        Raises:
            ShareNotFoundError: If the share does not belong to the resource
        """
        self.gate.require(strategy, Operation.DESTROY)

        share = await self._find_share(strategy, share_id)
        before = await strategy.shares()

        async with self.repository.transaction() as tx:
            await tx.delete_share(share.id)

        after = await strategy.shares()

        logger.info(
            f"Share {share.id} removed from {strategy.kind.value} "
            f"{strategy.resource.id}"
        )
        return ShareMutationOutcome(
            operation=Operation.DESTROY, before=before, after=after, removed=[share]
        )

    async def bulk_update(
        self, strategy: SharingStrategy, updates: Sequence[Tuple[str, str]]
    ) -> ShareMutationOutcome:
        """
        Change the roles of several shares at once.

        Args:
            strategy: Strategy for the resource
            updates: (share_id, role_id) pairs

        Raises:
            BatchAbortedError: If any share id is unknown or any role is not
                allowed; nothing is written in that case
        """
        self.gate.require(strategy, Operation.BULK_UPDATE)

        current = {share.id: share for share in await strategy.all_shares()}
        allowed = {role.value for role in strategy.allowed_roles()}

        failures: List[Dict[str, Any]] = []
        for share_id, role_id in updates:
            if share_id not in current:
                failures.append({"share_id": share_id, "error": "not_found"})
            elif role_id not in allowed:
                failures.append({"share_id": share_id, "error": "invalid_role"})
        if failures:
            logger.warning(
                f"Bulk update on {strategy.kind.value} {strategy.resource.id} "
                f"aborted: {failures}"
            )
            raise BatchAbortedError(failures)

        before = await strategy.shares()
        outcome = ShareMutationOutcome(
            operation=Operation.BULK_UPDATE, before=before, after=[]
        )

        async with self.repository.transaction() as tx:
            for share_id, role_id in updates:
                share = await tx.update_share_role(share_id, Role(role_id))
                outcome.updated.append(share)

        outcome.after = await strategy.shares()

        logger.info(
            f"Bulk updated {len(outcome.updated)} shares on {strategy.kind.value} "
            f"{strategy.resource.id}"
        )
        return outcome

    async def bulk_destroy(
        self, strategy: SharingStrategy, share_ids: Sequence[str]
    ) -> ShareMutationOutcome:
        """
        Remove several shares at once.

        Raises:
            BatchAbortedError: If any share id is unknown; nothing is removed
                in that case
        """
        self.gate.require(strategy, Operation.BULK_DESTROY)

        current = {share.id: share for share in await strategy.all_shares()}
        target_ids = list(dict.fromkeys(share_ids))

        failures = [
            {"share_id": share_id, "error": "not_found"}
            for share_id in target_ids
            if share_id not in current
        ]
        if failures:
            logger.warning(
                f"Bulk destroy on {strategy.kind.value} {strategy.resource.id} "
                f"aborted: {failures}"
            )
            raise BatchAbortedError(failures)

        before = await strategy.shares()

        async with self.repository.transaction() as tx:
            for share_id in target_ids:
                await tx.delete_share(share_id)

        after = await strategy.shares()

        logger.info(
            f"Bulk removed {len(target_ids)} shares from {strategy.kind.value} "
            f"{strategy.resource.id}"
        )
        return ShareMutationOutcome(
            operation=Operation.BULK_DESTROY,
            before=before,
            after=after,
            removed=[current[share_id] for share_id in target_ids],
        )

    async def resend_invite(self, strategy: SharingStrategy, share_id: str) -> Share:
        """
        Send the invite for a share again.

        Only the notifier is called; shares and roles are left as they are,
        so repeating the call is harmless to stored data.

        Raises:
            ShareNotFoundError: If the share does not belong to the resource
            PrincipalAlreadyActiveError: If the principal needs no invite
            InviteDeliveryError: If the notifier could not hand the invite off
        """
        self.gate.require(strategy, Operation.RESEND_INVITE)

        share = await self._find_share(strategy, share_id)
        principal = share.principal or await self.repository.get_principal(
            share.principal_id
        )
        if principal is None:
            raise ShareNotFoundError()
        if principal.is_active:
            raise PrincipalAlreadyActiveError()

        await self.notifier.send_invite(principal, share, strategy.resource)
        return share

    async def copy_shares(
        self, source: SharingStrategy, target: SharingStrategy
    ) -> ShareMutationOutcome:
        """
        Copy the shares of one resource onto another of the same kind.

        Principals that already have a share on the target, and the target's
        owner, are skipped, as are roles the target does not allow.
        The caller must be able to manage the target and list the source.

        Raises:
            InvalidDataError: If the resources are of different kinds
        """
        self.gate.require(target, Operation.COPY)
        self.gate.require(source, Operation.LIST)

        if source.kind != target.kind:
            raise InvalidDataError(
                "Shares can only be copied between resources of the same kind"
            )

        existing = {share.principal_id for share in await target.all_shares()}
        allowed = target.allowed_roles()

        # Oldest first, so the copies keep the source's relative order
        candidates = [
            share
            for share in reversed(await source.all_shares())
            if share.principal_id not in existing
            and share.principal_id != target.owner_id
            and share.role_id in allowed
        ]

        before = await target.shares()
        outcome = ShareMutationOutcome(
            operation=Operation.COPY, before=before, after=[]
        )

        async with self.repository.transaction() as tx:
            for share in candidates:
                copy = await tx.create_share(
                    target.kind, target.resource.id, share.principal_id, share.role_id
                )
                outcome.added.append(copy)

        outcome.after = await target.shares()

        logger.info(
            f"Copied {len(outcome.added)} shares from {source.kind.value} "
            f"{source.resource.id} to {target.resource.id}"
        )
        return outcome

    def _validate_role(self, strategy: SharingStrategy, role_id: str) -> Role:
        for role in strategy.allowed_roles():
            if role.value == role_id:
                return role
        raise InvalidRoleError(
            f"Role {role_id} is not allowed for {strategy.kind.value} shares"
        )

    async def _find_share(self, strategy: SharingStrategy, share_id: str) -> Share:
        for share in await strategy.all_shares():
            if share.id == share_id:
                return share
        raise ShareNotFoundError()
