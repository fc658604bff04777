"""Tests for JWT minting."""

import base64
import hashlib
import hmac
import re
import uuid

import pytest

from vortex_sdk import (
    InvalidApiKeyFormatError,
    InvalidApiKeyPrefixError,
    JwtPayload,
    MalformedKeyIdError,
    SigningError,
    TokenError,
    User,
    Vortex,
    mint_token,
)
from vortex_sdk.tokens import canonical_key_id, derive_signing_key, parse_api_key

from .conftest import API_KEY, ZERO_KEY_ID, decode_segment

UUID_PATTERN = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$")

USER = User(id="u1", email="u1@example.com")


def _encode_id(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode().rstrip("=")


class TestApiKey:
    @pytest.mark.parametrize(
        "raw",
        [
            bytes(16),
            b"\xff" * 16,
            bytes(range(16)),
            uuid.UUID("6ba7b810-9dad-11d1-80b4-00c04fd430c8").bytes,
        ],
    )
    def test_canonical_key_id_shape(self, raw: bytes) -> None:
        kid = canonical_key_id(raw)
        assert len(kid) == 36
        assert UUID_PATTERN.match(kid)

    def test_parse_api_key(self) -> None:
        raw = uuid.UUID("6ba7b810-9dad-11d1-80b4-00c04fd430c8").bytes
        kid, secret = parse_api_key(f"VRTX.{_encode_id(raw)}.s3cr3t")
        assert kid == "6ba7b810-9dad-11d1-80b4-00c04fd430c8"
        assert secret == "s3cr3t"

    @pytest.mark.parametrize("key", ["onlyone", "two.parts", "a.b.c.d", "VRTX..secret", ""])
    def test_invalid_format(self, key: str) -> None:
        with pytest.raises(InvalidApiKeyFormatError):
            mint_token(key, USER)

    def test_invalid_prefix(self) -> None:
        with pytest.raises(InvalidApiKeyPrefixError):
            mint_token(f"WRONG.{ZERO_KEY_ID}.secret", USER)

    @pytest.mark.parametrize(
        "encoded_id",
        [
            _encode_id(bytes(15)),
            _encode_id(bytes(17)),
            "not*base64",
            "A",
        ],
    )
    def test_malformed_key_id(self, encoded_id: str) -> None:
        with pytest.raises(MalformedKeyIdError):
            mint_token(f"VRTX.{encoded_id}.secret", USER)

    def test_key_errors_are_value_errors(self) -> None:
        with pytest.raises(ValueError, match="Invalid API key prefix"):
            mint_token(f"WRONG.{ZERO_KEY_ID}.secret", USER)


class TestMintToken:
    def test_end_to_end_zero_key(self, frozen_time: int) -> None:
        token = mint_token(API_KEY, USER)
        header_b64, payload_b64, signature_b64 = token.split(".")

        assert decode_segment(header_b64) == {
            "iat": frozen_time,
            "alg": "HS256",
            "typ": "JWT",
            "kid": "00000000-0000-0000-0000-000000000000",
        }
        assert decode_segment(payload_b64) == {
            "userId": "u1",
            "userEmail": "u1@example.com",
            "expires": frozen_time + 3600,
        }

        signing_key = hmac.new(
            b"mysecret", b"00000000-0000-0000-0000-000000000000", hashlib.sha256
        ).digest()
        expected = hmac.new(
            signing_key, f"{header_b64}.{payload_b64}".encode(), hashlib.sha256
        ).digest()
        assert signature_b64 == base64.urlsafe_b64encode(expected).decode().rstrip("=")

    def test_field_order_matches_other_sdks(self, frozen_time: int) -> None:
        header_b64, payload_b64, _ = mint_token(API_KEY, USER).split(".")
        header_json = base64.urlsafe_b64decode(header_b64 + "=" * (-len(header_b64) % 4))
        payload_json = base64.urlsafe_b64decode(payload_b64 + "=" * (-len(payload_b64) % 4))

        assert header_json == (
            b'{"iat":1700000000,"alg":"HS256","typ":"JWT",'
            b'"kid":"00000000-0000-0000-0000-000000000000"}'
        )
        assert payload_json == b'{"userId":"u1","userEmail":"u1@example.com","expires":1700003600}'

    def test_three_unpadded_segments(self) -> None:
        token = mint_token(API_KEY, USER)
        segments = token.split(".")
        assert len(segments) == 3
        assert all(segments)
        assert "=" not in token

    def test_deterministic_within_a_second(self, frozen_time: int) -> None:
        assert mint_token(API_KEY, USER) == mint_token(API_KEY, USER)

    def test_different_seconds_differ(self, monkeypatch) -> None:
        monkeypatch.setattr("vortex_sdk.tokens.time.time", lambda: 1_700_000_000)
        first = mint_token(API_KEY, USER)
        monkeypatch.setattr("vortex_sdk.tokens.time.time", lambda: 1_700_000_001)
        second = mint_token(API_KEY, USER)
        assert first != second

    def test_different_secret_changes_only_signature(self, frozen_time: int) -> None:
        first = mint_token(f"VRTX.{ZERO_KEY_ID}.secret-one", USER).split(".")
        second = mint_token(f"VRTX.{ZERO_KEY_ID}.secret-two", USER).split(".")
        assert first[:2] == second[:2]
        assert first[2] != second[2]

    def test_optional_fields_omitted_when_absent(self) -> None:
        payload = decode_segment(mint_token(API_KEY, USER).split(".")[1])
        for key in ("userName", "userAvatarUrl", "adminScopes", "allowedEmailDomains"):
            assert key not in payload

    def test_optional_fields_included(self) -> None:
        user = User(
            id="u1",
            email="u1@example.com",
            name="Ada",
            avatar_url="https://example.com/a.png",
            admin_scopes=["autojoin"],
            allowed_email_domains=["example.com"],
        )
        payload = decode_segment(mint_token(API_KEY, user).split(".")[1])
        assert payload["userName"] == "Ada"
        assert payload["userAvatarUrl"] == "https://example.com/a.png"
        assert payload["adminScopes"] == ["autojoin"]
        assert payload["allowedEmailDomains"] == ["example.com"]

    def test_extensions_merge_last(self) -> None:
        token = mint_token(API_KEY, USER, {"department": "Engineering", "userId": "override"})
        payload = decode_segment(token.split(".")[1])
        assert payload["department"] == "Engineering"
        assert payload["userId"] == "override"

    def test_user_extra_fields_are_carried(self) -> None:
        user = User(**{"id": "u1", "email": "u1@example.com", "plan": "pro"})
        payload = decode_segment(mint_token(API_KEY, user).split(".")[1])
        assert payload["plan"] == "pro"

    def test_unserializable_extension_is_signing_error(self) -> None:
        with pytest.raises(SigningError):
            mint_token(API_KEY, USER, {"when": object()})

    def test_structured_payload(self, frozen_time: int) -> None:
        claims = JwtPayload(
            user_id="user123",
            identifiers=[{"type": "email", "value": "user@example.com"}],
            groups=[{"type": "team", "group_id": "team1", "name": "Engineering"}],
            role="admin",
            attributes={"plan": "pro"},
        )
        payload = decode_segment(mint_token(API_KEY, claims).split(".")[1])

        assert list(payload) == ["userId", "groups", "role", "expires", "identifiers", "plan"]
        assert payload["groups"] == [{"type": "team", "groupId": "team1", "name": "Engineering"}]
        assert payload["identifiers"] == [{"type": "email", "value": "user@example.com"}]
        assert payload["expires"] == frozen_time + 3600

    def test_structured_payload_omits_absent_group_and_role(self) -> None:
        claims = JwtPayload(user_id="u1", identifiers=[{"type": "sms", "value": "+15550100"}])
        payload = decode_segment(mint_token(API_KEY, claims).split(".")[1])
        assert "groups" not in payload
        assert "role" not in payload

    def test_signing_key_depends_on_kid(self) -> None:
        assert derive_signing_key("secret", "a") != derive_signing_key("secret", "b")


class TestBoundaryValidation:
    def test_user_requires_email(self) -> None:
        with pytest.raises(ValueError):
            User(id="u1", email="")

    def test_structured_requires_identifier(self) -> None:
        with pytest.raises(ValueError):
            JwtPayload(user_id="u1", identifiers=[])

    def test_mint_token_accepts_plain_dict(self, frozen_time: int) -> None:
        assert mint_token(API_KEY, {"id": "u1", "email": "u1@example.com"}) == mint_token(API_KEY, USER)

    def test_mint_token_validates_plain_dict(self) -> None:
        with pytest.raises(ValueError):
            mint_token(API_KEY, {"id": "u1"})

    def test_mint_token_rejects_other_claim_types(self) -> None:
        with pytest.raises(TypeError, match="claims must be"):
            mint_token(API_KEY, ["u1", "u1@example.com"])


class TestClientJwt:
    def test_generate_jwt_from_dict(self, frozen_time: int) -> None:
        client = Vortex(API_KEY)
        token = client.generate_jwt({"id": "u1", "email": "u1@example.com"})
        assert token == mint_token(API_KEY, USER)

    def test_generate_jwt_with_extra(self) -> None:
        client = Vortex(API_KEY)
        token = client.generate_jwt(USER, role="admin")
        assert decode_segment(token.split(".")[1])["role"] == "admin"

    def test_generate_structured_jwt(self) -> None:
        client = Vortex(API_KEY)
        token = client.generate_structured_jwt(
            {"user_id": "u1", "identifiers": [{"type": "email", "value": "u1@example.com"}]}
        )
        payload = decode_segment(token.split(".")[1])
        assert payload["userId"] == "u1"
        assert payload["identifiers"] == [{"type": "email", "value": "u1@example.com"}]

    def test_invalid_key_raises_token_error(self) -> None:
        client = Vortex("invalid-key")
        with pytest.raises(TokenError, match="Invalid API key format"):
            client.generate_jwt(USER)
