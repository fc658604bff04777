"""
Vortex Webhooks

Core webhook verification and parsing for the Vortex Python SDK.

Example::

    from vortex_sdk import VortexWebhooks

    webhooks = VortexWebhooks(secret=os.environ["VORTEX_WEBHOOK_SECRET"])

    # In any HTTP handler:
    event = webhooks.construct_event(raw_body, signature_header)
"""

import hashlib
import hmac
import json
from typing import Any, Optional, Union

from pydantic import ValidationError

from .config import VortexSettings
from .errors import (
    VortexWebhookSignatureError,
    WebhookConfigurationError,
    WebhookPayloadError,
)
from .webhook_types import VortexEvent, classify_event

SIGNATURE_HEADER = "X-Vortex-Signature"

Payload = Union[str, bytes, bytearray, memoryview]


def verify_signature(payload: Payload, signature: Optional[str], secret: str) -> bool:
    """
    Verify the HMAC-SHA256 signature of a raw webhook payload.

    Never raises: an empty, malformed or mismatched signature returns ``False``.

    Args:
        payload: The raw request body (str or any bytes-like object).
        signature: The hex digest from the ``X-Vortex-Signature`` header.
        secret: The webhook signing secret.
    """
    if not signature or not isinstance(signature, str) or not secret:
        return False

    try:
        if isinstance(payload, str):
            payload = payload.encode("utf-8")

        expected = hmac.new(
            secret.encode("utf-8"),
            payload,
            hashlib.sha256,
        ).hexdigest()

        if len(signature.encode("utf-8")) != len(expected):
            return False

        # Timing-safe comparison to prevent timing attacks
        return hmac.compare_digest(signature.encode("utf-8"), expected.encode("ascii"))
    except (TypeError, ValueError):
        return False


def construct_event(payload: Payload, signature: Optional[str], secret: str) -> VortexEvent:
    """
    Verify and parse a raw webhook payload.

    The signature is checked before the body is parsed.

    Raises:
        VortexWebhookSignatureError: If the signature is invalid.
        WebhookPayloadError: If the verified body is not a valid event.
    """
    if not verify_signature(payload, signature, secret):
        raise VortexWebhookSignatureError()

    try:
        body = payload if isinstance(payload, str) else bytes(payload).decode("utf-8")
        parsed: Any = json.loads(body)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise WebhookPayloadError(f"Invalid webhook payload: {e}") from e

    if not isinstance(parsed, dict):
        raise WebhookPayloadError("Invalid webhook payload: expected a JSON object")

    try:
        return classify_event(parsed)
    except ValidationError as e:
        raise WebhookPayloadError(f"Invalid webhook payload: {e}") from e


class VortexWebhooks:
    """
    Core webhook verification and parsing.

    This class is framework-agnostic: use it directly or through
    :mod:`vortex_sdk.integrations.fastapi` / :mod:`vortex_sdk.integrations.flask`.

    Args:
        secret: The webhook signing secret from your Vortex dashboard.

    Raises:
        WebhookConfigurationError: If ``secret`` is empty or None.

    Example::

        webhooks = VortexWebhooks(secret=os.environ["VORTEX_WEBHOOK_SECRET"])
        event = webhooks.construct_event(request.body, request.headers["X-Vortex-Signature"])
    """

    def __init__(self, secret: Optional[str]) -> None:
        if not secret:
            raise WebhookConfigurationError("VortexWebhooks requires a secret")
        self._secret = secret

    @classmethod
    def from_env(cls, settings: Optional[VortexSettings] = None) -> "VortexWebhooks":
        """Build from ``VORTEX_WEBHOOK_SECRET``."""
        settings = settings or VortexSettings()
        return cls(secret=settings.webhook_secret)

    def verify_signature(self, payload: Payload, signature: Optional[str]) -> bool:
        """
        Verify the HMAC-SHA256 signature of an incoming webhook payload.

        Returns:
            ``True`` if the signature is valid.
        """
        return verify_signature(payload, signature, self._secret)

    def construct_event(self, payload: Payload, signature: Optional[str]) -> VortexEvent:
        """
        Verify and parse an incoming webhook payload.

        Args:
            payload: The raw request body (str or bytes). Must be the raw body,
                not a parsed dict, since the signature covers the exact bytes
                that were sent.
            signature: The value of the ``X-Vortex-Signature`` header.

        Returns:
            A :class:`VortexWebhookEvent` or :class:`VortexAnalyticsEvent`.

        Raises:
            VortexWebhookSignatureError: If the signature is invalid.
            WebhookPayloadError: If the body is not a valid event.
        """
        return construct_event(payload, signature, self._secret)
