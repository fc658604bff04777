"""
Flask integration

Uses the synchronous (``*_sync``) client methods.

Example::

    from flask import Flask, session
    from vortex_sdk import Vortex
    from vortex_sdk.integrations.flask import create_vortex_blueprint

    def authenticate(request):
        if "user_id" not in session:
            return None
        return {
            "user_id": session["user_id"],
            "identifiers": [{"type": "email", "value": session["email"]}],
        }

    app = Flask(__name__)
    app.register_blueprint(
        create_vortex_blueprint(Vortex.from_env(), authenticate, logger=app.logger)
    )
"""

import functools
import logging
from typing import Any, Callable, Optional, Tuple, Union

from flask import Blueprint, Request, Response, jsonify, request

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

AuthenticateCallback = Callable[[Request], Optional[UserLike]]
AuthorizeCallback = Callable[[Operation, AuthenticatedUser], bool]
WebhookHandler = Callable[[VortexEvent], Any]

ErrorResponse = Tuple[Response, int]


def _error(status_code: int, message: str) -> ErrorResponse:
    return jsonify(error_body(message)), status_code


def create_vortex_blueprint(
    client: Vortex,
    authenticate: AuthenticateCallback,
    authorize: Optional[AuthorizeCallback] = None,
    *,
    webhooks: Optional[VortexWebhooks] = None,
    on_webhook_event: Optional[WebhookHandler] = None,
    logger: Optional[logging.Logger] = None,
    url_prefix: str = DEFAULT_PREFIX,
    name: str = "vortex",
) -> Blueprint:
    """
    Build a ``Blueprint`` serving the Vortex routes.

    Args:
        client: Vortex client used for JWTs and platform calls (sync methods)
        authenticate: Maps the current request to an AuthenticatedUser (or dict), or None
        authorize: Maps (operation, user) to allow/deny. Defaults to allowing
            every authenticated user.
        webhooks: When given, ``POST {url_prefix}/webhooks`` verifies and parses events
        on_webhook_event: Called with each verified event
        logger: Logger for request handling; pass ``app.logger`` to reuse Flask's
        url_prefix: Route prefix
        name: Blueprint name
    """
    log = logger or logging.getLogger(__name__)
    bp = Blueprint(name, __name__, url_prefix=url_prefix)

    def guard(operation: Operation) -> Union[AuthenticatedUser, ErrorResponse]:
        log.debug("Vortex %s invoked", operation.value)

        resolved = authenticate(request)
        if resolved is None:
            return _error(401, "Authentication required")
        user = coerce_user(resolved)

        if authorize is not None and not authorize(operation, user):
            log.warning("Vortex %s authorization failed for user %s", operation.value, user.user_id)
            return _error(403, FORBIDDEN_MESSAGES[operation])
        return user

    def handled(endpoint: Callable[..., Any]) -> Callable[..., Any]:
        # Anything that is not already rendered still goes out as a JSON error
        @functools.wraps(endpoint)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return endpoint(*args, **kwargs)
            except Exception:
                log.exception("Vortex unexpected error in %s", endpoint.__name__)
                return _error(500, "Internal server error")

        return wrapper

    @bp.post("/jwt")
    @handled
    def generate_jwt():
        user = guard(Operation.JWT)
        if not isinstance(user, AuthenticatedUser):
            return user
        try:
            jwt = client.generate_structured_jwt(jwt_payload_for(user))
        except VortexError as e:
            log.error("Vortex error generating JWT: %s", e)
            return _error(500, f"Failed to generate JWT: {e}")
        log.debug("Vortex JWT generated for user %s", user.user_id)
        return jsonify({"jwt": jwt})

    @bp.get("/invitations")
    @handled
    def get_invitations_by_target():
        user = guard(Operation.GET_INVITATIONS)
        if not isinstance(user, AuthenticatedUser):
            return user
        target_type = request.args.get("targetType")
        target_value = request.args.get("targetValue")
        if not target_type or not target_value:
            return _error(400, "Missing targetType or targetValue")
        try:
            invitations = client.get_invitations_by_target_sync(target_type, target_value)
        except VortexError as e:
            log.error("Vortex error getting invitations: %s", e)
            return _error(500, f"Failed to get invitations: {e}")
        return jsonify({"invitations": [dump_invitation(i) for i in invitations]})

    @bp.post("/invitations/accept")
    @handled
    def accept_invitations():
        user = guard(Operation.ACCEPT_INVITATIONS)
        if not isinstance(user, AuthenticatedUser):
            return user
        body = request.get_json(silent=True)
        if body is None and request.get_data():
            return _error(400, "Invalid JSON in request body")
        try:
            invitation_ids, accept_user, target = parse_accept_body(body)
            if accept_user is not None:
                result = client.accept_invitations_sync(invitation_ids, accept_user)
            else:
                result = client.accept_invitations_by_target_sync(invitation_ids, target)
        except BadRequest as e:
            return _error(400, str(e))
        except VortexError as e:
            log.error("Vortex error accepting invitations: %s", e)
            return _error(500, f"Failed to accept invitations: {e}")
        return jsonify(result)

    @bp.get("/invitations/by-group/<group_type>/<group_id>")
    @handled
    def get_invitations_by_group(group_type: str, group_id: str):
        user = guard(Operation.GET_GROUP_INVITATIONS)
        if not isinstance(user, AuthenticatedUser):
            return user
        try:
            invitations = client.get_invitations_by_group_sync(group_type, group_id)
        except VortexError as e:
            log.error("Vortex error getting group invitations: %s", e)
            return _error(500, f"Failed to get group invitations: {e}")
        return jsonify({"invitations": [dump_invitation(i) for i in invitations]})

    @bp.delete("/invitations/by-group/<group_type>/<group_id>")
    @handled
    def delete_invitations_by_group(group_type: str, group_id: str):
        user = guard(Operation.DELETE_GROUP_INVITATIONS)
        if not isinstance(user, AuthenticatedUser):
            return user
        try:
            client.delete_invitations_by_group_sync(group_type, group_id)
        except VortexError as e:
            log.error("Vortex error deleting group invitations: %s", e)
            return _error(500, f"Failed to delete group invitations: {e}")
        return jsonify({"success": True})

    @bp.get("/invitations/<invitation_id>")
    @handled
    def get_invitation(invitation_id: str):
        user = guard(Operation.GET_INVITATION)
        if not isinstance(user, AuthenticatedUser):
            return user
        try:
            invitation = client.get_invitation_sync(invitation_id)
        except VortexError as e:
            return _error(404, f"Invitation not found: {e}")
        return jsonify(dump_invitation(invitation))

    @bp.delete("/invitations/<invitation_id>")
    @handled
    def revoke_invitation(invitation_id: str):
        user = guard(Operation.REVOKE_INVITATION)
        if not isinstance(user, AuthenticatedUser):
            return user
        try:
            client.revoke_invitation_sync(invitation_id)
        except VortexError as e:
            log.error("Vortex error revoking invitation: %s", e)
            return _error(500, f"Failed to revoke invitation: {e}")
        return jsonify({"success": True})

    @bp.post("/invitations/<invitation_id>/reinvite")
    @handled
    def reinvite(invitation_id: str):
        user = guard(Operation.REINVITE)
        if not isinstance(user, AuthenticatedUser):
            return user
        try:
            invitation = client.reinvite_sync(invitation_id)
        except VortexError as e:
            log.error("Vortex error reinviting: %s", e)
            return _error(500, f"Failed to reinvite: {e}")
        return jsonify(dump_invitation(invitation))

    if webhooks is not None:

        @bp.post("/webhooks")
        @handled
        def receive_webhook():
            payload = request.get_data()
            try:
                event = webhooks.construct_event(payload, request.headers.get(SIGNATURE_HEADER))
            except VortexWebhookSignatureError as e:
                log.warning("Vortex webhook rejected: invalid signature")
                return _error(401, str(e))
            except WebhookPayloadError as e:
                log.warning("Vortex webhook rejected: %s", e)
                return _error(400, str(e))

            if on_webhook_event is not None:
                on_webhook_event(event)
            return jsonify({"received": True})

    return bp
