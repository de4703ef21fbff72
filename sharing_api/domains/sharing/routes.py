# sharing_api/domains/sharing/routes.py
from fastapi import APIRouter, Depends

from sharing_api.domains.auth.dependencies import get_current_principal
from sharing_api.domains.sharing.classifier import DeltaAction, classify
from sharing_api.domains.sharing.dependencies import (
    get_authorization_gate,
    get_share_service,
    get_sharing_strategy,
)
from sharing_api.domains.sharing.gate import (
    AccessDecision,
    AuthorizationGate,
    Operation,
)
from sharing_api.domains.sharing.models import (
    BulkShareDestroyRequest,
    BulkShareUpdateRequest,
    Principal,
    ResendInviteResponse,
    ShareCopyRequest,
    ShareCreateRequest,
    ShareDeltaResponse,
    ShareDialogResponse,
    ShareListResponse,
    ShareResponse,
    ShareUpdateRequest,
)
from sharing_api.domains.sharing.repository import SharingRepository, get_repository
from sharing_api.domains.sharing.resolver import EntityResolver
from sharing_api.domains.sharing.service import (
    ShareMutationOutcome,
    ShareMutationService,
)
from sharing_api.domains.sharing.strategies import SharingStrategy

router = APIRouter(prefix="/shares", tags=["Shares"])


def build_delta_response(outcome: ShareMutationOutcome) -> ShareDeltaResponse:
    """Classify a mutation outcome and package it for the client."""
    action = classify(outcome)

    previous_ids = {share.id for share in outcome.before}
    visible_ids = {share.id for share in outcome.after}

    if action == DeltaAction.NEW_INVITE_FORM:
        affected = outcome.pending_invites
    else:
        affected = [share for share in outcome.touched if share.id in visible_ids]
    affected_ids = {share.id for share in affected}

    # Rows the client drew that are no longer in the list
    removed_ids = [share.id for share in outcome.removed]
    removed_ids += [
        share.id
        for share in outcome.touched
        if share.id in previous_ids and share.id not in visible_ids
    ]
    removed_ids = [
        share_id for share_id in removed_ids if share_id not in affected_ids
    ]

    return ShareDeltaResponse(
        action=action.value,
        shares=[ShareResponse.from_share(share) for share in outcome.after],
        affected=[ShareResponse.from_share(share) for share in affected],
        removed_share_ids=removed_ids,
        total=len(outcome.after),
    )


@router.get("", response_model=ShareListResponse, operation_id="listShares")
async def list_shares(
    strategy: SharingStrategy = Depends(get_sharing_strategy),
    gate: AuthorizationGate = Depends(get_authorization_gate),
) -> ShareListResponse:
    """
    List the shares of a resource.

    Requires permission to view or to manage the resource's shares. When
    sharing is not licensed the response only flags the upsell.
    """
    decision = gate.authorize(strategy, Operation.LIST)
    response = ShareListResponse(
        resource_kind=strategy.kind,
        resource_id=strategy.resource.id,
        viewable=strategy.viewable(),
        manageable=strategy.manageable(),
    )
    if decision is AccessDecision.ENTITLEMENT_REQUIRED:
        response.upsell = True
        return response

    shares = await strategy.shares()
    response.allowed_roles = sorted(role.value for role in strategy.allowed_roles())
    response.shares = [ShareResponse.from_share(share) for share in shares]
    response.total = len(shares)
    return response


@router.get(
    "/dialog", response_model=ShareDialogResponse, operation_id="openShareDialog"
)
async def open_share_dialog(
    strategy: SharingStrategy = Depends(get_sharing_strategy),
    gate: AuthorizationGate = Depends(get_authorization_gate),
) -> ShareDialogResponse:
    """Describe what the caller may do in the share dialog."""
    decision = gate.authorize(strategy, Operation.DIALOG)
    return ShareDialogResponse(
        resource_kind=strategy.kind,
        resource_id=strategy.resource.id,
        viewable=strategy.viewable(),
        manageable=strategy.manageable(),
        upsell=decision is AccessDecision.ENTITLEMENT_REQUIRED,
    )


@router.post("", response_model=ShareDeltaResponse, operation_id="createShares")
async def create_shares(
    request: ShareCreateRequest,
    strategy: SharingStrategy = Depends(get_sharing_strategy),
    service: ShareMutationService = Depends(get_share_service),
) -> ShareDeltaResponse:
    """
    Share a resource with one or more principals.

    Principals that already have a share get their role changed instead.
    Requires permission to manage the resource's shares.
    """
    outcome = await service.create_or_update_share(
        strategy, request.principal_ids, request.role_id
    )
    return build_delta_response(outcome)


@router.patch(
    "/bulk", response_model=ShareDeltaResponse, operation_id="bulkUpdateShares"
)
async def bulk_update_shares(
    request: BulkShareUpdateRequest,
    strategy: SharingStrategy = Depends(get_sharing_strategy),
    service: ShareMutationService = Depends(get_share_service),
) -> ShareDeltaResponse:
    """Change the roles of several shares; all of them or none."""
    outcome = await service.bulk_update(
        strategy, [(item.share_id, item.role_id) for item in request.updates]
    )
    return build_delta_response(outcome)


@router.delete(
    "/bulk", response_model=ShareDeltaResponse, operation_id="bulkDestroyShares"
)
async def bulk_destroy_shares(
    request: BulkShareDestroyRequest,
    strategy: SharingStrategy = Depends(get_sharing_strategy),
    service: ShareMutationService = Depends(get_share_service),
) -> ShareDeltaResponse:
    """Remove several shares; all of them or none."""
    outcome = await service.bulk_destroy(strategy, request.share_ids)
    return build_delta_response(outcome)


@router.post("/copy", response_model=ShareDeltaResponse, operation_id="copyShares")
async def copy_shares(
    request: ShareCopyRequest,
    strategy: SharingStrategy = Depends(get_sharing_strategy),
    principal: Principal = Depends(get_current_principal),
    repository: SharingRepository = Depends(get_repository),
    service: ShareMutationService = Depends(get_share_service),
) -> ShareDeltaResponse:
    """
    Copy the shares of another resource of the same kind onto this one.

    Used after duplicating a resource. Requires permission to manage this
    resource's shares and to view the source's shares.
    """
    source = await EntityResolver(repository).resolve(request.source, principal)
    outcome = await service.copy_shares(source, strategy)
    return build_delta_response(outcome)


@router.patch(
    "/{share_id}", response_model=ShareDeltaResponse, operation_id="updateShare"
)
async def update_share(
    share_id: str,
    request: ShareUpdateRequest,
    strategy: SharingStrategy = Depends(get_sharing_strategy),
    service: ShareMutationService = Depends(get_share_service),
) -> ShareDeltaResponse:
    """Change the role of a share."""
    outcome = await service.update_share_role(strategy, share_id, request.role_id)
    return build_delta_response(outcome)


@router.delete(
    "/{share_id}", response_model=ShareDeltaResponse, operation_id="destroyShare"
)
async def destroy_share(
    share_id: str,
    strategy: SharingStrategy = Depends(get_sharing_strategy),
    service: ShareMutationService = Depends(get_share_service),
) -> ShareDeltaResponse:
    """Remove a share."""
    outcome = await service.destroy_share(strategy, share_id)
    return build_delta_response(outcome)


@router.post(
    "/{share_id}/resend_invite",
    response_model=ResendInviteResponse,
    operation_id="resendShareInvite",
)
async def resend_invite(
    share_id: str,
    strategy: SharingStrategy = Depends(get_sharing_strategy),
    service: ShareMutationService = Depends(get_share_service),
) -> ResendInviteResponse:
    """
    Send the invite for a share again.

    Only applies to principals who have not activated their account yet.
    Shares are not modified, so the call can safely be repeated.
    """
    share = await service.resend_invite(strategy, share_id)
    return ResendInviteResponse(share_id=share.id, principal_id=share.principal_id)
