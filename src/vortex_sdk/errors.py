"""
Vortex Errors

Every exception raised by the SDK derives from :class:`VortexError`, so callers
can catch the whole family at once or branch on a specific kind.
"""

from typing import Optional


class VortexError(Exception):
    """Base class for all Vortex SDK errors."""

    pass


class VortexConfigurationError(VortexError, ValueError):
    """Raised when the SDK is constructed with missing or invalid settings."""

    pass


# ─── Token Minting ─────────────────────────────────────────────────────


class TokenError(VortexError, ValueError):
    """Base class for JWT generation failures."""

    pass


class InvalidApiKeyFormatError(TokenError):
    """The API key does not split into three non-empty segments."""

    pass


class InvalidApiKeyPrefixError(TokenError):
    """The API key does not start with the ``VRTX`` tag."""

    pass


class MalformedKeyIdError(TokenError):
    """The encoded key id is not base64url for exactly 16 bytes."""

    pass


class SigningError(TokenError):
    """Encoding or signing failed after the API key was accepted."""

    pass


# ─── Webhooks ──────────────────────────────────────────────────────────


class VortexWebhookSignatureError(VortexError):
    """Raised when webhook signature verification fails."""

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(
            message
            or "Webhook signature verification failed. Ensure you are using "
            "the raw request body and the correct signing secret."
        )


class WebhookConfigurationError(VortexConfigurationError):
    """Raised when a webhook verifier is created without a signing secret."""

    pass


class WebhookPayloadError(VortexError, ValueError):
    """Raised when a verified webhook body is not a valid event."""

    pass


# ─── Platform API ──────────────────────────────────────────────────────


class VortexApiError(VortexError):
    def __init__(self, message: str, status_code: int = 500):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class ClientRequestError(VortexApiError):
    """The platform answered with a 4xx status."""

    pass


class ServerRequestError(VortexApiError):
    """The platform answered with a 5xx status."""

    pass


class UnexpectedResponseError(VortexApiError):
    """The platform answered with a status outside 2xx/4xx/5xx."""

    pass
