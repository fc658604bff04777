"""
FastAPI integration

Example::

    from fastapi import FastAPI, Request
    from vortex_sdk import Vortex, VortexWebhooks
    from vortex_sdk.integrations.fastapi import create_vortex_router

    async def authenticate(request: Request):
        session = await load_session(request)
        if session is None:
            return None
        return {
            "user_id": session.user_id,
            "identifiers": [{"type": "email", "value": session.email}],
        }

    def authorize(operation, user):
        return True

    app = FastAPI()
    app.include_router(
        create_vortex_router(
            Vortex.from_env(),
            authenticate,
            authorize,
            webhooks=VortexWebhooks.from_env(),
            on_webhook_event=handle_event,
        )
    )
"""

import functools
import inspect
import json
import logging
from typing import Any, Awaitable, Callable, Optional, Union

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from ..client import Vortex
from ..errors import VortexError, VortexWebhookSignatureError, WebhookPayloadError
from ..types import AuthenticatedUser
from ..webhook_types import VortexEvent
from ..webhooks import SIGNATURE_HEADER, VortexWebhooks
from . import (
    DEFAULT_PREFIX,
    FORBIDDEN_MESSAGES,
    BadRequest,
    Operation,
    UserLike,
    coerce_user,
    dump_invitation,
    error_body,
    jwt_payload_for,
    parse_accept_body,
)

AuthenticateCallback = Callable[
    [Request], Union[Optional[UserLike], Awaitable[Optional[UserLike]]]
]
AuthorizeCallback = Callable[
    [Operation, AuthenticatedUser], Union[bool, Awaitable[bool]]
]
WebhookHandler = Callable[[VortexEvent], Any]


async def _maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(error_body(message), status_code=status_code)


def create_vortex_router(
    client: Vortex,
    authenticate: AuthenticateCallback,
    authorize: Optional[AuthorizeCallback] = None,
    *,
    webhooks: Optional[VortexWebhooks] = None,
    on_webhook_event: Optional[WebhookHandler] = None,
    logger: Optional[logging.Logger] = None,
    prefix: str = DEFAULT_PREFIX,
) -> APIRouter:
    """
    Build an ``APIRouter`` serving the Vortex routes.

    Args:
        client: Vortex client used for JWTs and platform calls (async methods)
        authenticate: Maps a request to an AuthenticatedUser (or dict), or None.
            May be a coroutine function.
        authorize: Maps (operation, user) to allow/deny. May be a coroutine
            function. Defaults to allowing every authenticated user.
        webhooks: When given, ``POST {prefix}/webhooks`` verifies and parses events
        on_webhook_event: Called with each verified event. May be a coroutine function.
        logger: Logger for request handling; defaults to this module's logger
        prefix: Route prefix
    """
    log = logger or logging.getLogger(__name__)
    router = APIRouter(prefix=prefix)

    async def guard(request: Request, operation: Operation) -> Union[AuthenticatedUser, JSONResponse]:
        log.debug("Vortex %s invoked", operation.value)

        resolved = await _maybe_await(authenticate(request))
        if resolved is None:
            return _error(401, "Authentication required")
        user = coerce_user(resolved)

        allowed = True if authorize is None else await _maybe_await(authorize(operation, user))
        if not allowed:
            log.warning("Vortex %s authorization failed for user %s", operation.value, user.user_id)
            return _error(403, FORBIDDEN_MESSAGES[operation])
        return user

    def handled(endpoint: Callable[..., Awaitable[Any]]) -> Callable[..., Awaitable[Any]]:
        # Anything that is not already rendered still goes out as a JSON error
        @functools.wraps(endpoint)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return await endpoint(*args, **kwargs)
            except Exception:
                log.exception("Vortex unexpected error in %s", endpoint.__name__)
                return _error(500, "Internal server error")

        return wrapper

    @router.post("/jwt")
    @handled
    async def generate_jwt(request: Request):
        user = await guard(request, Operation.JWT)
        if isinstance(user, JSONResponse):
            return user
        try:
            jwt = client.generate_structured_jwt(jwt_payload_for(user))
        except VortexError as e:
            log.error("Vortex error generating JWT: %s", e)
            return _error(500, f"Failed to generate JWT: {e}")
        log.debug("Vortex JWT generated for user %s", user.user_id)
        return {"jwt": jwt}

    @router.get("/invitations")
    @handled
    async def get_invitations_by_target(request: Request):
        user = await guard(request, Operation.GET_INVITATIONS)
        if isinstance(user, JSONResponse):
            return user
        target_type = request.query_params.get("targetType")
        target_value = request.query_params.get("targetValue")
        if not target_type or not target_value:
            return _error(400, "Missing targetType or targetValue")
        try:
            invitations = await client.get_invitations_by_target(target_type, target_value)
        except VortexError as e:
            log.error("Vortex error getting invitations: %s", e)
            return _error(500, f"Failed to get invitations: {e}")
        return {"invitations": [dump_invitation(i) for i in invitations]}

    @router.post("/invitations/accept")
    @handled
    async def accept_invitations(request: Request):
        user = await guard(request, Operation.ACCEPT_INVITATIONS)
        if isinstance(user, JSONResponse):
            return user
        try:
            body = await request.json()
        except json.JSONDecodeError:
            return _error(400, "Invalid JSON in request body")
        try:
            invitation_ids, accept_user, target = parse_accept_body(body)
            if accept_user is not None:
                return await client.accept_invitations(invitation_ids, accept_user)
            return await client.accept_invitations_by_target(invitation_ids, target)
        except BadRequest as e:
            return _error(400, str(e))
        except VortexError as e:
            log.error("Vortex error accepting invitations: %s", e)
            return _error(500, f"Failed to accept invitations: {e}")

    @router.get("/invitations/by-group/{group_type}/{group_id}")
    @handled
    async def get_invitations_by_group(group_type: str, group_id: str, request: Request):
        user = await guard(request, Operation.GET_GROUP_INVITATIONS)
        if isinstance(user, JSONResponse):
            return user
        try:
            invitations = await client.get_invitations_by_group(group_type, group_id)
        except VortexError as e:
            log.error("Vortex error getting group invitations: %s", e)
            return _error(500, f"Failed to get group invitations: {e}")
        return {"invitations": [dump_invitation(i) for i in invitations]}

    @router.delete("/invitations/by-group/{group_type}/{group_id}")
    @handled
    async def delete_invitations_by_group(group_type: str, group_id: str, request: Request):
        user = await guard(request, Operation.DELETE_GROUP_INVITATIONS)
        if isinstance(user, JSONResponse):
            return user
        try:
            await client.delete_invitations_by_group(group_type, group_id)
        except VortexError as e:
            log.error("Vortex error deleting group invitations: %s", e)
            return _error(500, f"Failed to delete group invitations: {e}")
        return {"success": True}

    @router.get("/invitations/{invitation_id}")
    @handled
    async def get_invitation(invitation_id: str, request: Request):
        user = await guard(request, Operation.GET_INVITATION)
        if isinstance(user, JSONResponse):
            return user
        try:
            invitation = await client.get_invitation(invitation_id)
        except VortexError as e:
            return _error(404, f"Invitation not found: {e}")
        return dump_invitation(invitation)

    @router.delete("/invitations/{invitation_id}")
    @handled
    async def revoke_invitation(invitation_id: str, request: Request):
        user = await guard(request, Operation.REVOKE_INVITATION)
        if isinstance(user, JSONResponse):
            return user
        try:
            await client.revoke_invitation(invitation_id)
        except VortexError as e:
            log.error("Vortex error revoking invitation: %s", e)
            return _error(500, f"Failed to revoke invitation: {e}")
        return {"success": True}

    @router.post("/invitations/{invitation_id}/reinvite")
    @handled
    async def reinvite(invitation_id: str, request: Request):
        user = await guard(request, Operation.REINVITE)
        if isinstance(user, JSONResponse):
            return user
        try:
            invitation = await client.reinvite(invitation_id)
        except VortexError as e:
            log.error("Vortex error reinviting: %s", e)
            return _error(500, f"Failed to reinvite: {e}")
        return dump_invitation(invitation)

    if webhooks is not None:

        @router.post("/webhooks")
        @handled
        async def receive_webhook(request: Request):
            payload = await request.body()
            try:
                event = webhooks.construct_event(payload, request.headers.get(SIGNATURE_HEADER))
            except VortexWebhookSignatureError as e:
                log.warning("Vortex webhook rejected: invalid signature")
                return _error(401, str(e))
            except WebhookPayloadError as e:
                log.warning("Vortex webhook rejected: %s", e)
                return _error(400, str(e))

            if on_webhook_event is not None:
                await _maybe_await(on_webhook_event(event))
            return {"received": True}

    return router
