from typing import List, Optional

from fastapi import Depends, Query
from pydantic import TypeAdapter, ValidationError

from sharing_api.domains.auth.dependencies import get_current_principal
from sharing_api.domains.sharing.entitlements import (
    EntitlementChecker,
    SettingsEntitlementChecker,
)
from sharing_api.domains.sharing.gate import AuthorizationGate
from sharing_api.domains.sharing.models import Principal, ResolverInput, ShareFilter
from sharing_api.domains.sharing.notifications import (
    InviteNotifier,
    get_invite_notifier,
)
from sharing_api.domains.sharing.repository import SharingRepository, get_repository
from sharing_api.domains.sharing.resolver import EntityResolver
from sharing_api.domains.sharing.service import ShareMutationService
from sharing_api.domains.sharing.strategies import SharingStrategy
from sharing_api.shared.exceptions import InvalidDataError

_filters_adapter = TypeAdapter(List[ShareFilter])


def get_resolver_input(
    work_item_id: Optional[str] = Query(None, description="Work item to share"),
    saved_query_id: Optional[str] = Query(None, description="Saved query to share"),
) -> ResolverInput:
    """Build the resource identifier from the query string."""
    try:
        return ResolverInput(work_item_id=work_item_id, saved_query_id=saved_query_id)
    except ValidationError:
        raise InvalidDataError(
            "Exactly one of work_item_id or saved_query_id is required"
        )


def get_share_filters(
    filters: Optional[str] = Query(
        None, description='JSON list of filters, e.g. [{"name": "role", "values": []}]'
    ),
) -> List[ShareFilter]:
    """Parse share-list filters; which of them apply is up to the strategy."""
    if not filters:
        return []
    try:
        return _filters_adapter.validate_json(filters)
    except ValidationError:
        raise InvalidDataError("Invalid share filters")


def get_entitlements() -> EntitlementChecker:
    return SettingsEntitlementChecker()


def get_authorization_gate(
    entitlements: EntitlementChecker = Depends(get_entitlements),
) -> AuthorizationGate:
    return AuthorizationGate(entitlements)


def get_notifier() -> InviteNotifier:
    return get_invite_notifier()


async def get_sharing_strategy(
    identifier: ResolverInput = Depends(get_resolver_input),
    filters: List[ShareFilter] = Depends(get_share_filters),
    principal: Principal = Depends(get_current_principal),
    repository: SharingRepository = Depends(get_repository),
) -> SharingStrategy:
    """Resolve the request's resource into a strategy for the acting principal."""
    return await EntityResolver(repository).resolve(identifier, principal, filters)


def get_share_service(
    repository: SharingRepository = Depends(get_repository),
    gate: AuthorizationGate = Depends(get_authorization_gate),
    notifier: InviteNotifier = Depends(get_notifier),
) -> ShareMutationService:
    return ShareMutationService(repository, gate, notifier)
