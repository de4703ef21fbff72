from enum import Enum

from sharing_api.domains.sharing.gate import Operation
from sharing_api.domains.sharing.service import ShareMutationOutcome


class DeltaAction(str, Enum):
    """The single UI update a client applies after a share mutation."""

    REPLACE_MODAL = "replace_modal"  # Re-render the whole share panel
    PREPEND_SHARES = "prepend_shares"  # Insert the new rows at the top
    NEW_INVITE_FORM = "new_invite_form"  # Show the pending-invite affordance
    UPDATE_PERMISSION_BUTTON = "update_permission_button"  # Patch a row's role
    REMOVE_SHARE = "remove_share"  # Drop the affected rows


def classify(outcome: ShareMutationOutcome) -> DeltaAction:
    """
    Pick the delta action for a mutation outcome.

    Rules are checked in order and the first match wins. Pending invites
    come first: a principal who still has to accept an invite is never
    shown as an ordinary share, whatever the size of the list.

    Only rows the caller can see count. With filters applied, a share that
    was created or changed outside the visible list does not produce a row
    to insert or patch.
    """
    if outcome.operation == Operation.CREATE and outcome.pending_invites:
        return DeltaAction.NEW_INVITE_FORM

    # First share(s) on an empty panel
    if not outcome.before and outcome.after:
        return DeltaAction.REPLACE_MODAL

    before_ids = {share.id for share in outcome.before}
    after_ids = {share.id for share in outcome.after}
    touched = outcome.touched

    # Rows entering the visible list, new or moved in by a role change
    if any(
        share.id in after_ids and share.id not in before_ids for share in touched
    ):
        return DeltaAction.PREPEND_SHARES

    # Nothing left to show
    if not outcome.after:
        return DeltaAction.REPLACE_MODAL

    drawn_ids = before_ids | after_ids
    visible_touched = [share for share in touched if share.id in drawn_ids]
    if not visible_touched and not outcome.removed:
        # e.g. a copy that found nothing new; redraw rather than guess
        return DeltaAction.REPLACE_MODAL

    # Every visible row was already drawn and is still there
    if visible_touched and all(
        share.id in before_ids and share.id in after_ids
        for share in visible_touched
    ):
        return DeltaAction.UPDATE_PERMISSION_BUTTON

    return DeltaAction.REMOVE_SHARE
