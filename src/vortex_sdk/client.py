import logging
from typing import Any, Dict, List, Literal, Optional, Union
from urllib.parse import quote

import httpx

from .config import DEFAULT_BASE_URL, VortexSettings
from .errors import VortexConfigurationError
from .tokens import mint_token
from .transport import VortexTransport
from .types import (
    AcceptUser,
    AcceptUserLike,
    AutojoinDomainsResponse,
    BackendCreateInvitationRequest,
    ConfigureAutojoinRequest,
    CreateInvitationGroup,
    CreateInvitationResponse,
    CreateInvitationTarget,
    Invitation,
    InvitationTarget,
    Inviter,
    JwtPayload,
    TargetLike,
    User,
)

logger = logging.getLogger(__name__)

TargetType = Literal["email", "username", "phoneNumber"]


def target_to_accept_user(target: TargetLike) -> AcceptUser:
    """Translate a legacy invitation target into the AcceptUser format."""
    if isinstance(target, dict):
        target = InvitationTarget(**target)

    if target.type in ("phone", "phoneNumber", "sms"):
        return AcceptUser(phone=target.value)
    # Email and every other target type are sent as email
    return AcceptUser(email=target.value)


def _accept_body(invitation_ids: List[str], user: AcceptUserLike) -> Dict[str, Any]:
    if isinstance(user, dict):
        user = AcceptUser(**user)

    # Validate that either email or phone is provided
    if not user.email and not user.phone:
        raise ValueError("User must have either email or phone")

    return {"invitationIds": invitation_ids, "user": user.model_dump(exclude_none=True)}


def _warn_legacy_accept() -> None:
    logger.warning(
        "[Vortex SDK] DEPRECATED: accept_invitations_by_target is deprecated. "
        "Use accept_invitations with AcceptUser(email='user@example.com') instead.",
        extra={
            "vortex_deprecated": "accept_invitations_by_target",
            "vortex_replacement": "accept_invitations",
        },
    )


def _invitations(response: Dict) -> List[Invitation]:
    return [Invitation(**inv) for inv in response.get("invitations") or []]


def _group_path(group_type: str, group_id: str) -> str:
    return f"/invitations/by-group/{quote(group_type, safe='')}/{quote(group_id, safe='')}"


def _autojoin_path(scope_type: str, scope: str) -> str:
    return f"/invitations/by-scope/{quote(scope_type, safe='')}/{quote(scope, safe='')}/autojoin"


def _create_invitation_body(
    widget_configuration_id: str,
    target: Union[CreateInvitationTarget, Dict[str, str]],
    inviter: Union[Inviter, Dict[str, str]],
    groups: Optional[List[Union[CreateInvitationGroup, Dict[str, str]]]],
    source: Optional[str],
    template_variables: Optional[Dict[str, str]],
    metadata: Optional[Dict[str, Any]],
) -> Dict[str, Any]:
    # Convert dicts to models if needed
    if isinstance(target, dict):
        target = CreateInvitationTarget(**target)
    if isinstance(inviter, dict):
        inviter = Inviter(**inviter)
    if groups:
        groups = [
            CreateInvitationGroup(**g) if isinstance(g, dict) else g
            for g in groups
        ]

    request = BackendCreateInvitationRequest(
        widget_configuration_id=widget_configuration_id,
        target=target,
        inviter=inviter,
        groups=groups,
        source=source,
        template_variables=template_variables,
        metadata=metadata,
    )
    # camelCase keys for the API
    return request.model_dump(by_alias=True, exclude_none=True)


class Vortex:
    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 10.0,
        client: Optional[httpx.Client] = None,
        async_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize Vortex client

        Args:
            api_key: Your Vortex API key
            base_url: Base URL for Vortex API (default: https://api.vortexsoftware.com/api/v1)
            timeout: Request timeout in seconds
            client: Optional ``httpx.Client`` for the ``*_sync`` methods
            async_client: Optional ``httpx.AsyncClient`` for the async methods
        """
        if not api_key:
            raise VortexConfigurationError("Vortex requires an API key")
        self.api_key = api_key
        self._transport = VortexTransport(
            api_key,
            base_url=base_url,
            timeout=timeout,
            client=client,
            async_client=async_client,
        )

    @classmethod
    def from_env(cls, settings: Optional[VortexSettings] = None) -> "Vortex":
        """
        Build a client from ``VORTEX_API_KEY``, ``VORTEX_BASE_URL`` and
        ``VORTEX_TIMEOUT``.
        """
        settings = settings or VortexSettings()
        if not settings.api_key:
            raise VortexConfigurationError("VORTEX_API_KEY is not set")
        return cls(settings.api_key, base_url=settings.base_url, timeout=settings.timeout)

    @property
    def base_url(self) -> str:
        return self._transport.base_url

    # ─── JWT ───────────────────────────────────────────────────────────

    def generate_jwt(self, user: Union[User, Dict], **extra: Any) -> str:
        """
        Generate a JWT token for a user

        Args:
            user: User object or dict with 'id', 'email', and optional 'name',
                  'avatar_url', 'admin_scopes', 'allowed_email_domains'
            **extra: Additional properties to include in JWT payload

        Returns:
            JWT token string

        Raises:
            TokenError: If the API key is invalid or signing fails
            ValueError: If required user fields are missing

        Example:
            user = {'id': 'user-123', 'email': 'user@example.com', 'admin_scopes': ['autojoin']}
            jwt = vortex.generate_jwt(user=user)

            # With additional properties
            jwt = vortex.generate_jwt(user=user, role='admin', department='Engineering')
        """
        if isinstance(user, dict):
            user = User(**user)
        return mint_token(self.api_key, user, extra)

    def generate_structured_jwt(
        self, payload: Union[JwtPayload, Dict], **extra: Any
    ) -> str:
        """
        Generate a JWT carrying identifiers, groups and role

        Example:
            jwt = vortex.generate_structured_jwt({
                'user_id': 'user-123',
                'identifiers': [{'type': 'email', 'value': 'user@example.com'}],
                'groups': [{'type': 'team', 'group_id': 'team-1', 'name': 'Engineering'}],
                'role': 'admin',
            })
        """
        if isinstance(payload, dict):
            payload = JwtPayload(**payload)
        return mint_token(self.api_key, payload, extra)

    # ─── Invitations ───────────────────────────────────────────────────

    async def get_invitations_by_target(
        self,
        target_type: TargetType,
        target_value: str,
    ) -> List[Invitation]:
        """
        Get invitations for a specific target

        Args:
            target_type: Type of target (email, username, or phoneNumber)
            target_value: Target value
        """
        params = {"targetType": target_type, "targetValue": target_value}
        response = await self._transport.request("GET", "/invitations", params=params)
        return _invitations(response)

    def get_invitations_by_target_sync(
        self,
        target_type: TargetType,
        target_value: str,
    ) -> List[Invitation]:
        """Get invitations for a specific target (synchronous)"""
        params = {"targetType": target_type, "targetValue": target_value}
        response = self._transport.request_sync("GET", "/invitations", params=params)
        return _invitations(response)

    async def get_invitation(self, invitation_id: str) -> Invitation:
        """Get a specific invitation by ID"""
        response = await self._transport.request(
            "GET", f"/invitations/{quote(invitation_id, safe='')}"
        )
        return Invitation(**response)

    def get_invitation_sync(self, invitation_id: str) -> Invitation:
        """Get a specific invitation by ID (synchronous)"""
        response = self._transport.request_sync(
            "GET", f"/invitations/{quote(invitation_id, safe='')}"
        )
        return Invitation(**response)

    async def accept_invitations(
        self, invitation_ids: List[str], user: AcceptUserLike
    ) -> Dict:
        """
        Accept invitations on behalf of a user

        Args:
            invitation_ids: List of invitation IDs to accept
            user: AcceptUser (or dict) with an email or phone, and an optional name

        Raises:
            ValueError: If the user has neither email nor phone

        Example:
            user = AcceptUser(email="user@example.com", name="John Doe")
            result = await client.accept_invitations(["inv-123"], user)
        """
        data = _accept_body(invitation_ids, user)
        return await self._transport.request("POST", "/invitations/accept", data=data)

    def accept_invitations_sync(
        self, invitation_ids: List[str], user: AcceptUserLike
    ) -> Dict:
        """Accept invitations on behalf of a user (synchronous)"""
        data = _accept_body(invitation_ids, user)
        return self._transport.request_sync("POST", "/invitations/accept", data=data)

    async def accept_invitation(self, invitation_id: str, user: AcceptUserLike) -> Dict:
        """
        Accept a single invitation (recommended method)

        Example:
            result = await client.accept_invitation("inv-123", {"email": "user@example.com"})
        """
        return await self.accept_invitations([invitation_id], user)

    def accept_invitation_sync(self, invitation_id: str, user: AcceptUserLike) -> Dict:
        """Accept a single invitation (synchronous)"""
        return self.accept_invitations_sync([invitation_id], user)

    async def accept_invitations_by_target(
        self, invitation_ids: List[str], target: TargetLike
    ) -> Dict:
        """
        Accept invitations with a legacy ``{type, value}`` target.

        Deprecated: use :meth:`accept_invitations` with an AcceptUser.
        """
        _warn_legacy_accept()
        return await self.accept_invitations(invitation_ids, target_to_accept_user(target))

    def accept_invitations_by_target_sync(
        self, invitation_ids: List[str], target: TargetLike
    ) -> Dict:
        """Deprecated synchronous twin of :meth:`accept_invitations_by_target`."""
        _warn_legacy_accept()
        return self.accept_invitations_sync(invitation_ids, target_to_accept_user(target))

    async def revoke_invitation(self, invitation_id: str) -> Dict:
        """Revoke an invitation"""
        return await self._transport.request(
            "DELETE", f"/invitations/{quote(invitation_id, safe='')}"
        )

    def revoke_invitation_sync(self, invitation_id: str) -> Dict:
        """Revoke an invitation (synchronous)"""
        return self._transport.request_sync(
            "DELETE", f"/invitations/{quote(invitation_id, safe='')}"
        )

    async def get_invitations_by_group(
        self, group_type: str, group_id: str
    ) -> List[Invitation]:
        """
        Get invitations for a specific group

        Args:
            group_type: Type of group
            group_id: Group ID
        """
        response = await self._transport.request("GET", _group_path(group_type, group_id))
        return _invitations(response)

    def get_invitations_by_group_sync(
        self, group_type: str, group_id: str
    ) -> List[Invitation]:
        """Get invitations for a specific group (synchronous)"""
        response = self._transport.request_sync("GET", _group_path(group_type, group_id))
        return _invitations(response)

    async def delete_invitations_by_group(self, group_type: str, group_id: str) -> Dict:
        """Delete all invitations for a specific group"""
        return await self._transport.request("DELETE", _group_path(group_type, group_id))

    def delete_invitations_by_group_sync(self, group_type: str, group_id: str) -> Dict:
        """Delete all invitations for a specific group (synchronous)"""
        return self._transport.request_sync("DELETE", _group_path(group_type, group_id))

    async def reinvite(self, invitation_id: str) -> Invitation:
        """Resend a specific invitation"""
        response = await self._transport.request(
            "POST", f"/invitations/{quote(invitation_id, safe='')}/reinvite"
        )
        return Invitation(**response)

    def reinvite_sync(self, invitation_id: str) -> Invitation:
        """Resend a specific invitation (synchronous)"""
        response = self._transport.request_sync(
            "POST", f"/invitations/{quote(invitation_id, safe='')}/reinvite"
        )
        return Invitation(**response)

    async def create_invitation(
        self,
        widget_configuration_id: str,
        target: Union[CreateInvitationTarget, Dict[str, str]],
        inviter: Union[Inviter, Dict[str, str]],
        groups: Optional[List[Union[CreateInvitationGroup, Dict[str, str]]]] = None,
        source: Optional[str] = None,
        template_variables: Optional[Dict[str, str]] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> CreateInvitationResponse:
        """
        Create an invitation from your backend.

        Uses the API key only, no user JWT. Useful for admin-initiated or
        "People You May Know" invitations.

        Args:
            widget_configuration_id: The widget configuration ID to use
            target: Who is being invited: type 'email', 'phone' or 'internal', and a value
            inviter: The inviting user: user_id, optional user_email and name
            groups: Optional groups to associate with the invitation
            source: Optional source for analytics (defaults to 'api' server-side)
            template_variables: Optional template variables for email customization
            metadata: Optional metadata passed through to webhooks

        Example:
            result = await vortex.create_invitation(
                widget_configuration_id="widget-config-123",
                target={"type": "email", "value": "invitee@example.com"},
                inviter={"user_id": "user-456", "user_email": "inviter@example.com"},
                groups=[{"type": "team", "group_id": "team-789", "name": "Engineering"}],
            )
        """
        data = _create_invitation_body(
            widget_configuration_id, target, inviter, groups, source, template_variables, metadata
        )
        response = await self._transport.request("POST", "/invitations", data=data)
        return CreateInvitationResponse(**response)

    def create_invitation_sync(
        self,
        widget_configuration_id: str,
        target: Union[CreateInvitationTarget, Dict[str, str]],
        inviter: Union[Inviter, Dict[str, str]],
        groups: Optional[List[Union[CreateInvitationGroup, Dict[str, str]]]] = None,
        source: Optional[str] = None,
        template_variables: Optional[Dict[str, str]] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> CreateInvitationResponse:
        """
        Create an invitation from your backend (synchronous version).

        See create_invitation() for full documentation.
        """
        data = _create_invitation_body(
            widget_configuration_id, target, inviter, groups, source, template_variables, metadata
        )
        response = self._transport.request_sync("POST", "/invitations", data=data)
        return CreateInvitationResponse(**response)

    # ─── Autojoin ──────────────────────────────────────────────────────

    async def get_autojoin_domains(
        self, scope_type: str, scope: str
    ) -> AutojoinDomainsResponse:
        """
        Get autojoin domains configured for a specific scope

        Args:
            scope_type: The type of scope (e.g., "organization", "team")
            scope: The scope identifier (customer's group ID)
        """
        response = await self._transport.request("GET", _autojoin_path(scope_type, scope))
        return AutojoinDomainsResponse(**response)

    def get_autojoin_domains_sync(
        self, scope_type: str, scope: str
    ) -> AutojoinDomainsResponse:
        """Get autojoin domains configured for a specific scope (synchronous)"""
        response = self._transport.request_sync("GET", _autojoin_path(scope_type, scope))
        return AutojoinDomainsResponse(**response)

    async def configure_autojoin(
        self,
        scope: str,
        scope_type: str,
        domains: List[str],
        widget_id: str,
        scope_name: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> AutojoinDomainsResponse:
        """
        Configure autojoin domains for a specific scope

        The platform syncs the list: new domains are added, missing ones are
        removed, and an empty list deactivates the autojoin invitation.
        """
        request = ConfigureAutojoinRequest(
            scope=scope,
            scope_type=scope_type,
            domains=domains,
            widget_id=widget_id,
            scope_name=scope_name,
            metadata=metadata,
        )
        response = await self._transport.request(
            "POST",
            "/invitations/autojoin",
            data=request.model_dump(by_alias=True, exclude_none=True),
        )
        return AutojoinDomainsResponse(**response)

    def configure_autojoin_sync(
        self,
        scope: str,
        scope_type: str,
        domains: List[str],
        widget_id: str,
        scope_name: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> AutojoinDomainsResponse:
        """Configure autojoin domains for a specific scope (synchronous)"""
        request = ConfigureAutojoinRequest(
            scope=scope,
            scope_type=scope_type,
            domains=domains,
            widget_id=widget_id,
            scope_name=scope_name,
            metadata=metadata,
        )
        response = self._transport.request_sync(
            "POST",
            "/invitations/autojoin",
            data=request.model_dump(by_alias=True, exclude_none=True),
        )
        return AutojoinDomainsResponse(**response)

    # ─── Lifecycle ─────────────────────────────────────────────────────

    async def close(self) -> None:
        """Close the HTTP client"""
        await self._transport.aclose()

    def close_sync(self) -> None:
        """Close the synchronous HTTP client"""
        self._transport.close()

    async def __aenter__(self) -> "Vortex":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    def __enter__(self) -> "Vortex":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close_sync()
