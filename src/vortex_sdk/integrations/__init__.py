"""
Framework integrations

Shared pieces for the FastAPI and Flask adapters. Both expose the same route
set under ``/api/vortex`` so the Vortex React provider works with any backend:

========  ===================================================  ==========================
Method    Path                                                 Operation
========  ===================================================  ==========================
POST      /jwt                                                 ``JWT``
GET       /invitations?targetType=&targetValue=                ``GET_INVITATIONS``
GET       /invitations/{invitation_id}                         ``GET_INVITATION``
DELETE    /invitations/{invitation_id}                         ``REVOKE_INVITATION``
POST      /invitations/accept                                  ``ACCEPT_INVITATIONS``
GET       /invitations/by-group/{group_type}/{group_id}        ``GET_GROUP_INVITATIONS``
DELETE    /invitations/by-group/{group_type}/{group_id}        ``DELETE_GROUP_INVITATIONS``
POST      /invitations/{invitation_id}/reinvite                ``REINVITE``
POST      /webhooks                                            (only with a VortexWebhooks)
========  ===================================================  ==========================

Every route first calls the authentication resolver (401 when it returns None),
then the authorization resolver (403 when it returns False).
"""

from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import ValidationError

from ..types import AcceptUser, AuthenticatedUser, Invitation, InvitationTarget, JwtPayload

DEFAULT_PREFIX = "/api/vortex"


class Operation(str, Enum):
    """Operation names handed to the authorization resolver."""

    JWT = "JWT"
    GET_INVITATIONS = "GET_INVITATIONS"
    GET_INVITATION = "GET_INVITATION"
    REVOKE_INVITATION = "REVOKE_INVITATION"
    ACCEPT_INVITATIONS = "ACCEPT_INVITATIONS"
    GET_GROUP_INVITATIONS = "GET_GROUP_INVITATIONS"
    DELETE_GROUP_INVITATIONS = "DELETE_GROUP_INVITATIONS"
    REINVITE = "REINVITE"


class BadRequest(ValueError):
    """Request input the adapter cannot act on; rendered as a 400."""

    pass


FORBIDDEN_MESSAGES = {
    Operation.JWT: "Not authorized to generate JWT",
    Operation.GET_INVITATIONS: "Not authorized to get invitations",
    Operation.GET_INVITATION: "Not authorized to get invitation",
    Operation.REVOKE_INVITATION: "Not authorized to revoke invitation",
    Operation.ACCEPT_INVITATIONS: "Not authorized to accept invitations",
    Operation.GET_GROUP_INVITATIONS: "Not authorized to get group invitations",
    Operation.DELETE_GROUP_INVITATIONS: "Not authorized to delete group invitations",
    Operation.REINVITE: "Not authorized to reinvite",
}

UserLike = Union[AuthenticatedUser, Dict[str, Any]]


def coerce_user(user: UserLike) -> AuthenticatedUser:
    if isinstance(user, dict):
        return AuthenticatedUser(**user)
    return user


def jwt_payload_for(user: AuthenticatedUser) -> JwtPayload:
    return JwtPayload(
        user_id=user.user_id,
        identifiers=user.identifiers,
        groups=user.groups,
        role=user.role,
    )


def parse_accept_body(
    body: Any,
) -> Tuple[List[str], Optional[AcceptUser], Optional[InvitationTarget]]:
    """
    Read ``{invitationIds, user}`` or the legacy ``{invitationIds, target}``.

    Returns:
        ``(invitation_ids, user, target)`` with exactly one of user/target set.

    Raises:
        BadRequest: If ids or both user and target are missing or malformed.
    """
    if not isinstance(body, dict):
        raise BadRequest("Missing invitationIds or target")

    invitation_ids = body.get("invitationIds")
    user = body.get("user")
    target = body.get("target")

    if not invitation_ids or not isinstance(invitation_ids, list) or not (user or target):
        raise BadRequest("Missing invitationIds or target")

    try:
        if user:
            accept_user = AcceptUser(**user)
            if not accept_user.email and not accept_user.phone:
                raise BadRequest("User must have either email or phone")
            return invitation_ids, accept_user, None
        return invitation_ids, None, InvitationTarget(**target)
    except (TypeError, ValidationError) as e:
        raise BadRequest(f"Invalid accept request: {e}") from e


def dump_invitation(invitation: Invitation) -> Dict[str, Any]:
    return invitation.model_dump(by_alias=True, exclude_none=True)


def error_body(message: str) -> Dict[str, str]:
    return {"error": message}