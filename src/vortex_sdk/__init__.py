"""
Vortex Python SDK

A Python SDK for Vortex invitation management, JWT generation and
webhook verification.
"""

from .client import Vortex
from .config import VortexSettings
from .errors import (
    ClientRequestError,
    InvalidApiKeyFormatError,
    InvalidApiKeyPrefixError,
    MalformedKeyIdError,
    ServerRequestError,
    SigningError,
    TokenError,
    UnexpectedResponseError,
    VortexApiError,
    VortexConfigurationError,
    VortexError,
    VortexWebhookSignatureError,
    WebhookConfigurationError,
    WebhookPayloadError,
)
from .tokens import mint_token
from .types import (
    AcceptUser,
    AuthenticatedUser,
    AutojoinDomain,
    AutojoinDomainsResponse,
    CreateInvitationGroup,
    CreateInvitationResponse,
    CreateInvitationTarget,
    GroupInput,
    IdentifierInput,
    Invitation,
    InvitationGroup,
    InvitationTarget,
    Inviter,
    JwtPayload,
    User,
)
from .webhook_types import (
    AnalyticsEventType,
    VortexAnalyticsEvent,
    VortexEvent,
    VortexWebhookEvent,
    WebhookEventType,
    classify_event,
    is_analytics_event,
    is_webhook_event,
)
from .webhooks import SIGNATURE_HEADER, VortexWebhooks, construct_event, verify_signature

__version__ = "0.1.0"
__author__ = "TeamVortexSoftware"
__email__ = "support@vortexsoftware.com"

__all__ = [
    "Vortex",
    "VortexSettings",
    "mint_token",
    # Models
    "AcceptUser",
    "AuthenticatedUser",
    "AutojoinDomain",
    "AutojoinDomainsResponse",
    "CreateInvitationGroup",
    "CreateInvitationResponse",
    "CreateInvitationTarget",
    "GroupInput",
    "IdentifierInput",
    "Invitation",
    "InvitationGroup",
    "InvitationTarget",
    "Inviter",
    "JwtPayload",
    "User",
    # Webhooks
    "SIGNATURE_HEADER",
    "VortexWebhooks",
    "VortexEvent",
    "VortexWebhookEvent",
    "VortexAnalyticsEvent",
    "WebhookEventType",
    "AnalyticsEventType",
    "classify_event",
    "construct_event",
    "verify_signature",
    "is_webhook_event",
    "is_analytics_event",
    # Errors
    "VortexError",
    "VortexConfigurationError",
    "TokenError",
    "InvalidApiKeyFormatError",
    "InvalidApiKeyPrefixError",
    "MalformedKeyIdError",
    "SigningError",
    "VortexWebhookSignatureError",
    "WebhookConfigurationError",
    "WebhookPayloadError",
    "VortexApiError",
    "ClientRequestError",
    "ServerRequestError",
    "UnexpectedResponseError",
]
