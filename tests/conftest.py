"""Shared test fixtures."""

import base64
import hashlib
import hmac
import json
from typing import Any, Dict, List, Optional, Tuple

import httpx
import pytest

from vortex_sdk import AuthenticatedUser, Vortex
from vortex_sdk.integrations import Operation

ZERO_KEY_ID = base64.urlsafe_b64encode(bytes(16)).decode().rstrip("=")
API_KEY = f"VRTX.{ZERO_KEY_ID}.mysecret"


def decode_segment(segment: str) -> Dict[str, Any]:
    padded = segment + "=" * (-len(segment) % 4)
    return json.loads(base64.urlsafe_b64decode(padded))


@pytest.fixture
def api_key() -> str:
    return API_KEY


@pytest.fixture
def frozen_time(monkeypatch):
    """Pin ``time.time()`` inside the token minter to a fixed second."""
    now = 1_700_000_000
    monkeypatch.setattr("vortex_sdk.tokens.time.time", lambda: now + 0.25)
    return now


class FakePlatform:
    """Routes ``(method, path)`` to canned responses; 404 for anything else."""

    def __init__(self) -> None:
        self.routes: Dict[Tuple[str, str], Tuple[int, Dict[str, Any]]] = {}
        self.requests: List[httpx.Request] = []

    def add(self, method: str, path: str, status_code: int = 200, **kwargs: Any) -> None:
        self.routes[(method, f"/api/v1{path}")] = (status_code, kwargs)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        status_code, kwargs = self.routes.get(
            (request.method, request.url.path), (404, {"json": {"error": "Not found"}})
        )
        return httpx.Response(status_code, **kwargs)

    def client(self) -> Vortex:
        transport = httpx.MockTransport(self)
        return Vortex(
            API_KEY,
            base_url="https://api.test.vortex/api/v1",
            client=httpx.Client(transport=transport),
            async_client=httpx.AsyncClient(transport=transport),
        )

    def last_json(self) -> Dict[str, Any]:
        return json.loads(self.requests[-1].content)


@pytest.fixture
def platform() -> FakePlatform:
    return FakePlatform()


AUTHENTICATED_USER = {
    "user_id": "user-123",
    "identifiers": [{"type": "email", "value": "user@example.com"}],
    "groups": [{"type": "team", "group_id": "team-1", "name": "Engineering"}],
    "role": "member",
}

WEBHOOK_SECRET = "whsec_adapter_secret"


def sign(payload: bytes, secret: str = WEBHOOK_SECRET) -> str:
    return hmac.new(secret.encode(), payload, hashlib.sha256).hexdigest()


def authenticate_bearer(request: Any) -> Optional[Dict[str, Any]]:
    """Treats ``Authorization: Bearer good`` as a logged-in user."""
    if request.headers.get("authorization") == "Bearer good":
        return AUTHENTICATED_USER
    return None


def authorize_non_destructive(operation: Operation, user: AuthenticatedUser) -> bool:
    return operation not in (Operation.REVOKE_INVITATION, Operation.DELETE_GROUP_INVITATIONS)


AUTH = {"Authorization": "Bearer good"}
