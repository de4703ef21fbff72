from enum import Enum
from typing import Set


class Permission(Enum):
    """
    Defines the ambient permissions a principal can hold on a resource.

    Permissions should follow the pattern: ACTION_RESOURCE
    Common actions: VIEW, SHARE, EDIT, COMMENT
    """

    # Work item permissions
    VIEW_WORK_ITEMS = "view_work_items"  # Know the work item exists and open it
    VIEW_SHARED_WORK_ITEMS = "view_shared_work_items"  # See who it is shared with
    SHARE_WORK_ITEMS = "share_work_items"  # Add, change and remove shares
    COMMENT_WORK_ITEMS = "comment_work_items"
    EDIT_WORK_ITEMS = "edit_work_items"

    # Saved query permissions
    VIEW_SAVED_QUERY = "view_saved_query"  # Open the query and see its shares
    EDIT_SAVED_QUERY = "edit_saved_query"  # Change the query and its shares


class Role(str, Enum):
    """
    Named permission bundles.

    Project roles are held through project membership; the remaining roles
    are assigned through shares and are scoped to one resource kind.
    """

    # Project membership roles
    PROJECT_MANAGER = "project_manager"
    PROJECT_MEMBER = "project_member"
    PROJECT_READER = "project_reader"

    # Work item share roles
    WORK_ITEM_VIEWER = "work_item_viewer"
    WORK_ITEM_COMMENTER = "work_item_commenter"
    WORK_ITEM_EDITOR = "work_item_editor"

    # Saved query share roles
    SAVED_QUERY_VIEWER = "saved_query_viewer"
    SAVED_QUERY_EDITOR = "saved_query_editor"


ROLE_PERMISSIONS: dict[Role, Set[Permission]] = {
    Role.PROJECT_MANAGER: {
        # Managers decide who else gets to see individual work items
        Permission.VIEW_WORK_ITEMS,
        Permission.VIEW_SHARED_WORK_ITEMS,
        Permission.SHARE_WORK_ITEMS,
        Permission.COMMENT_WORK_ITEMS,
        Permission.EDIT_WORK_ITEMS,
    },
    Role.PROJECT_MEMBER: {
        Permission.VIEW_WORK_ITEMS,
        Permission.VIEW_SHARED_WORK_ITEMS,
        Permission.COMMENT_WORK_ITEMS,
        Permission.EDIT_WORK_ITEMS,
    },
    Role.PROJECT_READER: {
        Permission.VIEW_WORK_ITEMS,
    },
    Role.WORK_ITEM_VIEWER: {
        Permission.VIEW_WORK_ITEMS,
    },
    Role.WORK_ITEM_COMMENTER: {
        Permission.VIEW_WORK_ITEMS,
        Permission.COMMENT_WORK_ITEMS,
    },
    Role.WORK_ITEM_EDITOR: {
        Permission.VIEW_WORK_ITEMS,
        Permission.COMMENT_WORK_ITEMS,
        Permission.EDIT_WORK_ITEMS,
    },
    Role.SAVED_QUERY_VIEWER: {
        Permission.VIEW_SAVED_QUERY,
    },
    Role.SAVED_QUERY_EDITOR: {
        Permission.VIEW_SAVED_QUERY,
        Permission.EDIT_SAVED_QUERY,
    },
}
