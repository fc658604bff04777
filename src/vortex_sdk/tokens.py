"""
Vortex JWT minting

Tokens are signed locally with a key derived from the API key, using the same
algorithm as the other Vortex SDKs (Node.js, Ruby, Java, Go), so the output is
byte-for-byte identical for the same inputs and timestamp.

Example::

    from vortex_sdk.tokens import mint_token
    from vortex_sdk.types import User

    token = mint_token(api_key, User(id="user-123", email="user@example.com"))
"""

import base64
import binascii
import hashlib
import hmac
import json
import time
import uuid
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from .errors import (
    InvalidApiKeyFormatError,
    InvalidApiKeyPrefixError,
    MalformedKeyIdError,
    SigningError,
)
from .types import JwtPayload, User

API_KEY_PREFIX = "VRTX"
TOKEN_TTL_SECONDS = 3600

Claims = Union[User, JwtPayload]
ClaimsLike = Union[User, JwtPayload, Dict[str, Any]]


def b64url_encode(data: bytes) -> str:
    """Base64url without padding."""
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def _b64url_decode(data: str) -> bytes:
    padded = data + "=" * (-len(data) % 4)
    return base64.b64decode(padded, altchars=b"-_", validate=True)


def canonical_key_id(raw: bytes) -> str:
    """Render 16 raw bytes as a lowercase dashed UUID string (8-4-4-4-12)."""
    return str(uuid.UUID(bytes=raw))


def parse_api_key(api_key: str) -> Tuple[str, str]:
    """
    Split an API key into its canonical key id and signing secret.

    Args:
        api_key: Key in the form ``VRTX.{base64url(16 bytes)}.{secret}``

    Returns:
        ``(kid, secret)``

    Raises:
        InvalidApiKeyFormatError: Not exactly three non-empty segments.
        InvalidApiKeyPrefixError: First segment is not ``VRTX``.
        MalformedKeyIdError: Second segment does not decode to 16 bytes.
    """
    parts = api_key.split(".") if isinstance(api_key, str) else []
    if len(parts) != 3 or not all(parts):
        raise InvalidApiKeyFormatError(
            "Invalid API key format. Expected: VRTX.{encodedId}.{key}"
        )

    prefix, encoded_id, secret = parts

    if prefix != API_KEY_PREFIX:
        raise InvalidApiKeyPrefixError("Invalid API key prefix. Expected: VRTX")

    try:
        raw_id = _b64url_decode(encoded_id)
    except (binascii.Error, ValueError) as e:
        raise MalformedKeyIdError(f"Invalid UUID in API key: {e}") from e

    if len(raw_id) != 16:
        raise MalformedKeyIdError(
            f"Invalid UUID in API key: expected 16 bytes, got {len(raw_id)}"
        )

    return canonical_key_id(raw_id), secret


def derive_signing_key(secret: str, kid: str) -> bytes:
    return hmac.new(secret.encode(), kid.encode(), hashlib.sha256).digest()


def build_user_claims(user: User, expires: int) -> Dict[str, Any]:
    """Payload for the simple shape: flat user identity plus admin scopes."""
    claims: Dict[str, Any] = {
        "userId": user.id,
        "userEmail": user.email,
        "expires": expires,
    }

    if user.user_name:
        claims["userName"] = user.user_name

    if user.user_avatar_url:
        claims["userAvatarUrl"] = user.user_avatar_url

    if user.admin_scopes:
        claims["adminScopes"] = user.admin_scopes

    # Domain-restricted invitations
    if user.allowed_email_domains:
        claims["allowedEmailDomains"] = user.allowed_email_domains

    if user.model_extra:
        claims.update(user.model_extra)

    return claims


def build_structured_claims(payload: JwtPayload, expires: int) -> Dict[str, Any]:
    """Payload for the structured shape: identifiers, groups and role."""
    claims: Dict[str, Any] = {"userId": payload.user_id}

    if payload.groups is not None:
        claims["groups"] = [
            g.model_dump(by_alias=True, exclude_none=True) for g in payload.groups
        ]

    if payload.role is not None:
        claims["role"] = payload.role

    claims["expires"] = expires
    claims["identifiers"] = [i.model_dump() for i in payload.identifiers]

    if payload.attributes:
        claims.update(payload.attributes)

    return claims


def mint_token(
    api_key: str,
    claims: ClaimsLike,
    extensions: Optional[Mapping[str, Any]] = None,
) -> str:
    """
    Mint a signed JWT for ``claims``.

    Args:
        api_key: Vortex API key
        claims: A :class:`User` (simple shape) or :class:`JwtPayload`
            (structured shape). A plain dict is validated as a :class:`User`.
        extensions: Extra payload fields, merged last. They win over
            fields of the same name.

    Returns:
        ``header_b64.payload_b64.signature_b64``

    Raises:
        TokenError: One of its subclasses, for a bad key or a failed signing step.
        ValueError: If a dict fails :class:`User` validation.
        TypeError: If ``claims`` is neither a model nor a dict.
    """
    if isinstance(claims, dict):
        claims = User(**claims)
    elif not isinstance(claims, (User, JwtPayload)):
        raise TypeError(
            f"claims must be a User, JwtPayload or dict, not {type(claims).__name__}"
        )

    kid, secret = parse_api_key(api_key)

    iat = int(time.time())
    expires = iat + TOKEN_TTL_SECONDS

    try:
        # Step 1: Derive signing key from API key + UUID
        signing_key = derive_signing_key(secret, kid)

        # Step 2: Build header + payload
        header = {
            "iat": iat,
            "alg": "HS256",
            "typ": "JWT",
            "kid": kid,
        }

        if isinstance(claims, JwtPayload):
            payload = build_structured_claims(claims, expires)
        else:
            payload = build_user_claims(claims, expires)

        if extensions:
            payload.update(extensions)

        # Step 3: Base64URL encode (without padding)
        header_b64 = b64url_encode(json.dumps(header, separators=(",", ":")).encode())
        payload_b64 = b64url_encode(json.dumps(payload, separators=(",", ":")).encode())

        # Step 4: Sign
        to_sign = f"{header_b64}.{payload_b64}"
        signature = hmac.new(signing_key, to_sign.encode(), hashlib.sha256).digest()
    except (TypeError, ValueError, UnicodeError) as e:
        raise SigningError(f"JWT generation failed: {e}") from e

    return f"{to_sign}.{b64url_encode(signature)}"
