from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field


# ─── JWT Inputs ────────────────────────────────────────────────────────


class User(BaseModel):
    """
    User identity for the simple JWT payload shape.

    Unknown keys are kept and copied into the JWT payload as-is.
    """

    id: str = Field(min_length=1)
    email: str = Field(min_length=1)
    user_name: Optional[str] = Field(None, alias="name")
    user_avatar_url: Optional[str] = Field(None, alias="avatar_url")
    admin_scopes: Optional[List[str]] = None
    allowed_email_domains: Optional[List[str]] = None

    class Config:
        populate_by_name = True
        extra = "allow"


class IdentifierInput(BaseModel):
    """Identifier structure for JWT generation"""
    type: Literal["email", "sms"]
    value: str


class GroupInput(BaseModel):
    """Group structure for JWT generation (input)"""
    type: str
    id: Optional[str] = None  # Legacy field (deprecated, use groupId)
    groupId: Optional[str] = Field(None, alias="group_id", serialization_alias="groupId")
    name: str

    class Config:
        populate_by_name = True


class AuthenticatedUser(BaseModel):
    """What a framework authentication resolver hands back for a request."""
    user_id: str = Field(min_length=1)
    identifiers: List[IdentifierInput] = Field(min_length=1)
    groups: Optional[List[GroupInput]] = None
    role: Optional[str] = None


class JwtPayload(BaseModel):
    """Identity for the structured JWT payload shape."""
    user_id: str = Field(min_length=1)
    identifiers: List[IdentifierInput] = Field(min_length=1)
    groups: Optional[List[GroupInput]] = None
    role: Optional[str] = None
    attributes: Optional[Dict[str, Any]] = None


# ─── Invitations ───────────────────────────────────────────────────────


class InvitationTarget(BaseModel):
    type: str  # "email", "phone", "phoneNumber", "username", ...
    value: str


class InvitationGroup(BaseModel):
    """
    Invitation group from API responses
    This matches the MemberGroups table structure from the API
    """
    id: str  # Vortex internal UUID
    account_id: str = Field(alias="accountId")
    group_id: str = Field(alias="groupId")  # Customer's group ID
    type: str  # Group type (e.g., "workspace", "team")
    name: str
    created_at: str = Field(alias="createdAt")  # ISO 8601

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "id": "550e8400-e29b-41d4-a716-446655440000",
                "accountId": "6ba7b810-9dad-11d1-80b4-00c04fd430c8",
                "groupId": "workspace-123",
                "type": "workspace",
                "name": "My Workspace",
                "createdAt": "2025-01-27T12:00:00.000Z"
            }
        }


class InvitationAcceptance(BaseModel):
    id: Optional[str] = None
    account_id: Optional[str] = Field(None, alias="accountId")
    accepted_at: Optional[str] = Field(None, alias="acceptedAt")
    target: Optional[InvitationTarget] = None

    class Config:
        populate_by_name = True


class Invitation(BaseModel):
    id: str
    account_id: Optional[str] = Field(None, alias="accountId")
    click_throughs: Optional[int] = Field(None, alias="clickThroughs")
    configuration_attributes: Optional[Dict[str, Any]] = Field(
        None, alias="configurationAttributes"
    )
    attributes: Optional[Dict[str, Any]] = None
    created_at: Optional[str] = Field(None, alias="createdAt")
    deactivated: Optional[bool] = None
    delivery_count: Optional[int] = Field(None, alias="deliveryCount")
    delivery_types: Optional[List[str]] = Field(None, alias="deliveryTypes")
    foreign_creator_id: Optional[str] = Field(None, alias="foreignCreatorId")
    invitation_type: Optional[str] = Field(None, alias="invitationType")
    modified_at: Optional[str] = Field(None, alias="modifiedAt")
    status: Optional[str] = None
    target: List[InvitationTarget] = []
    views: Optional[int] = None
    widget_configuration_id: Optional[str] = Field(None, alias="widgetConfigurationId")
    project_id: Optional[str] = Field(None, alias="projectId")
    groups: List[InvitationGroup] = []
    accepts: List[InvitationAcceptance] = []
    expired: Optional[bool] = None
    expires: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None

    class Config:
        populate_by_name = True


class AcceptUser(BaseModel):
    """The person accepting an invitation. Needs an email or a phone."""
    email: Optional[str] = None
    phone: Optional[str] = None
    name: Optional[str] = None


# ─── Backend Invitation Creation ───────────────────────────────────────


class CreateInvitationTarget(BaseModel):
    type: Literal["email", "phone", "internal"]
    value: str


class Inviter(BaseModel):
    user_id: str = Field(alias="userId")
    user_email: Optional[str] = Field(None, alias="userEmail")
    name: Optional[str] = None
    avatar_url: Optional[str] = Field(None, alias="avatarUrl")

    class Config:
        populate_by_name = True


class CreateInvitationGroup(BaseModel):
    type: str
    group_id: str = Field(alias="groupId")
    name: str

    class Config:
        populate_by_name = True


class BackendCreateInvitationRequest(BaseModel):
    widget_configuration_id: str = Field(alias="widgetConfigurationId")
    target: CreateInvitationTarget
    inviter: Inviter
    groups: Optional[List[CreateInvitationGroup]] = None
    source: Optional[str] = None
    template_variables: Optional[Dict[str, str]] = Field(None, alias="templateVariables")
    metadata: Optional[Dict[str, Any]] = None

    class Config:
        populate_by_name = True


class CreateInvitationResponse(BaseModel):
    id: str
    short_link: Optional[str] = Field(None, alias="shortLink")
    status: Optional[str] = None
    created_at: Optional[str] = Field(None, alias="createdAt")

    class Config:
        populate_by_name = True


# ─── Autojoin ──────────────────────────────────────────────────────────


class AutojoinDomain(BaseModel):
    id: str
    domain: str


class AutojoinDomainsResponse(BaseModel):
    autojoin_domains: List[AutojoinDomain] = Field(default_factory=list, alias="autojoinDomains")
    invitation: Optional[Invitation] = None

    class Config:
        populate_by_name = True


class ConfigureAutojoinRequest(BaseModel):
    scope: str
    scope_type: str = Field(alias="scopeType")
    scope_name: Optional[str] = Field(None, alias="scopeName")
    domains: List[str]
    widget_id: str = Field(alias="widgetId")
    metadata: Optional[Dict[str, Any]] = None

    class Config:
        populate_by_name = True


TargetLike = Union[InvitationTarget, Dict[str, str]]
AcceptUserLike = Union[AcceptUser, Dict[str, Any]]
