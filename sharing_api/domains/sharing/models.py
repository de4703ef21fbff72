# sharing_api/domains/sharing/models.py
from datetime import datetime
from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from sharing_api.shared.permissions import Role


class ResourceKind(str, Enum):
    """Kinds of resource that can be shared."""

    WORK_ITEM = "work_item"
    SAVED_QUERY = "saved_query"


class ActivationState(str, Enum):
    """Activation state of a principal."""

    ACTIVE = "active"
    INVITED = "invited"  # Created through an invite that was never accepted
    LOCKED = "locked"


class Principal(BaseModel):
    id: str
    email: str
    display_name: Optional[str] = Field(default=None, alias="displayName")
    status: ActivationState = ActivationState.ACTIVE

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    @property
    def is_active(self) -> bool:
        return self.status == ActivationState.ACTIVE


class WorkItem(BaseModel):
    id: str
    subject: str
    project_id: str = Field(alias="projectId")
    author_id: str = Field(alias="authorId")

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    @property
    def kind(self) -> ResourceKind:
        return ResourceKind.WORK_ITEM

    @property
    def owner_id(self) -> str:
        return self.author_id


class SavedQuery(BaseModel):
    id: str
    name: str
    owner_id: str = Field(alias="ownerId")

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    @property
    def kind(self) -> ResourceKind:
        return ResourceKind.SAVED_QUERY


ShareableEntity = Union[WorkItem, SavedQuery]


class Share(BaseModel):
    id: str
    entity_type: ResourceKind = Field(alias="entityType")
    entity_id: str = Field(alias="entityId")
    principal_id: str = Field(alias="principalId")
    role_id: Role = Field(alias="roleId")
    created_at: datetime = Field(alias="createdAt")
    principal: Optional[Principal] = None

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class ShareFilterName(str, Enum):
    """Filter tags a strategy may allow on its share list."""

    ROLE = "role"
    PRINCIPAL_STATUS = "principal_status"


class ShareFilter(BaseModel):
    """
    A single share-list filter as sent by the client.

    ``name`` is kept as a plain string: strategies decide which tags they
    honour, and anything outside their allowlist is dropped.
    """

    name: str
    values: List[str] = []


class ResolverInput(BaseModel):
    """
    Identifies the resource a sharing request is about.

    Exactly one identifier must be populated; anything else is a wiring
    mistake on the caller's side rather than a user error.
    """

    work_item_id: Optional[str] = None
    saved_query_id: Optional[str] = None

    @model_validator(mode="after")
    def validate_single_identifier(self) -> "ResolverInput":
        populated = [value for value in self._identifiers().values() if value]
        if len(populated) != 1:
            raise ValueError(
                "Exactly one resource identifier must be provided, "
                f"got {len(populated)}"
            )
        return self

    def _identifiers(self) -> dict[ResourceKind, Optional[str]]:
        return {
            ResourceKind.WORK_ITEM: self.work_item_id,
            ResourceKind.SAVED_QUERY: self.saved_query_id,
        }

    def target(self) -> tuple[ResourceKind, str]:
        """Return the (kind, id) pair of the populated identifier."""
        for kind, value in self._identifiers().items():
            if value:
                return kind, value
        raise ValueError("No resource identifier provided")


# Request models


class ShareCreateRequest(BaseModel):
    principal_ids: List[str] = Field(min_length=1)
    role_id: str


class ShareUpdateRequest(BaseModel):
    role_id: str


class BulkShareUpdateItem(BaseModel):
    share_id: str
    role_id: str


class BulkShareUpdateRequest(BaseModel):
    updates: List[BulkShareUpdateItem] = Field(min_length=1)


class BulkShareDestroyRequest(BaseModel):
    share_ids: List[str] = Field(min_length=1)

    @field_validator("share_ids")
    @classmethod
    def validate_unique(cls, v: List[str]) -> List[str]:
        # Preserve order while dropping repeats
        return list(dict.fromkeys(v))


class ShareCopyRequest(BaseModel):
    source: ResolverInput


# Response models


class PrincipalResponse(BaseModel):
    id: str
    email: str
    display_name: Optional[str]
    status: ActivationState


class ShareResponse(BaseModel):
    id: str
    principal_id: str
    role_id: str
    created_at: datetime
    principal: Optional[PrincipalResponse] = None

    @classmethod
    def from_share(cls, share: Share) -> "ShareResponse":
        principal = None
        if share.principal:
            principal = PrincipalResponse(
                id=share.principal.id,
                email=share.principal.email,
                display_name=share.principal.display_name,
                status=share.principal.status,
            )
        return cls(
            id=share.id,
            principal_id=share.principal_id,
            role_id=share.role_id.value,
            created_at=share.created_at,
            principal=principal,
        )


class ShareListResponse(BaseModel):
    resource_kind: ResourceKind
    resource_id: str
    viewable: bool
    manageable: bool
    upsell: bool = False
    allowed_roles: List[str] = []
    shares: List[ShareResponse] = []
    total: int = 0


class ShareDialogResponse(BaseModel):
    resource_kind: ResourceKind
    resource_id: str
    viewable: bool
    manageable: bool
    upsell: bool = False


class ShareDeltaResponse(BaseModel):
    action: str
    shares: List[ShareResponse]
    affected: List[ShareResponse] = []
    removed_share_ids: List[str] = []
    total: int


class ResendInviteResponse(BaseModel):
    share_id: str
    principal_id: str
    message: str = "Invite sent"
