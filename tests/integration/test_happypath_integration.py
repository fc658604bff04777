"""
Live happy path against a Vortex environment: create, read, accept.

Deselected by default; run with ``pytest -m integration`` and the
TEST_INTEGRATION_SDKS_* variables set.
"""

import os
import time
from typing import List, Optional

import httpx
import pytest

from vortex_sdk import AcceptUser, Invitation, Vortex

WIDGET_TEMPLATE_VARIABLES = (
    "lzstr:N4Ig5gTg9grgDgfQHYEMC2BTEAuEBlAEQGkACAFQwGcAXEgcWnhABoQBLJANzeowmXRZcBCCQBqUCLwAeLcI0SY0"
    "AIz4IAxrCTUcIAMxzNaOCiQBPAZl0SpGaSQCSSdQDoQAXyA"
)


def _require(name: str) -> str:
    value = os.getenv(name)
    if not value:
        raise ValueError(f"Missing required environment variable: {name}")
    return value


@pytest.mark.integration
class TestIntegration:
    @pytest.fixture(autouse=True)
    def setup(self):
        api_key = _require("TEST_INTEGRATION_SDKS_VORTEX_API_KEY")
        self.client_api_url = _require("TEST_INTEGRATION_SDKS_VORTEX_CLIENT_API_URL")
        public_api_url = _require("TEST_INTEGRATION_SDKS_VORTEX_PUBLIC_API_URL")
        self.session_id = _require("TEST_INTEGRATION_SDKS_VORTEX_SESSION_ID")
        self.component_id = _require("TEST_INTEGRATION_SDKS_VORTEX_COMPONENT_ID")

        timestamp = str(int(time.time()))
        self.user_id = _require("TEST_INTEGRATION_SDKS_USER_ID").replace("{timestamp}", timestamp)
        self.user_email = _require("TEST_INTEGRATION_SDKS_USER_EMAIL").replace("{timestamp}", timestamp)
        self.group_type = _require("TEST_INTEGRATION_SDKS_GROUP_TYPE")
        self.group_name = _require("TEST_INTEGRATION_SDKS_GROUP_NAME")
        self.group_id = f"test-group-{os.getpid()}"

        self.create_client = Vortex(api_key, base_url=f"{self.client_api_url}/api/v1")
        self.public_client = Vortex(api_key, base_url=f"{public_api_url}/api/v1")

    @pytest.mark.asyncio
    async def test_full_invitation_flow(self):
        invitation_id = await self.create_invitation()
        assert invitation_id is not None, "Failed to create invitation"

        invitation = await self.public_client.get_invitation(invitation_id)
        assert invitation.id == invitation_id

        by_target: List[Invitation] = await self.public_client.get_invitations_by_target(
            "email", self.user_email
        )
        assert any(inv.id == invitation_id for inv in by_target)

        by_group = await self.public_client.get_invitations_by_group(self.group_type, self.group_id)
        assert any(inv.id == invitation_id for inv in by_group)

        result = await self.public_client.accept_invitation(
            invitation_id, AcceptUser(email=self.user_email)
        )
        assert result is not None

        await self.create_client.close()
        await self.public_client.close()

    async def create_invitation(self) -> Optional[str]:
        """Create an invitation through the widget API the way a browser would."""
        jwt = self.create_client.generate_jwt({"id": self.user_id, "email": self.user_email})
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {jwt}",
            "x-session-id": self.session_id,
        }

        async with httpx.AsyncClient() as http:
            widget = await http.get(
                f"{self.client_api_url}/api/v1/widgets/{self.component_id}",
                params={"templateVariables": WIDGET_TEMPLATE_VARIABLES},
                headers=headers,
            )
            if widget.status_code != 200:
                pytest.fail(f"Widget configuration request failed ({widget.status_code}): {widget.text}")

            data = widget.json().get("data", {})
            widget_config_id = data.get("widgetConfiguration", {}).get("id")
            attestation = data.get("sessionAttestation")
            if not widget_config_id or not attestation:
                pytest.fail("Widget response lacks a configuration id or session attestation")

            response = await http.post(
                f"{self.client_api_url}/api/v1/invitations",
                json={
                    "payload": {
                        "emails": {"value": self.user_email, "type": "email", "role": "member"}
                    },
                    "group": {
                        "type": self.group_type,
                        "groupId": self.group_id,
                        "name": self.group_name,
                    },
                    "source": "email",
                    "widgetConfigurationId": widget_config_id,
                    "templateVariables": {
                        "group_name": "SDK Test Group",
                        "inviter_name": "Dr Vortex",
                        "group_member_count": "3",
                        "company_name": "Vortex Inc.",
                    },
                },
                headers={**headers, "x-session-attestation": attestation},
            )
            if response.status_code not in (200, 201):
                pytest.fail(f"Create invitation failed ({response.status_code}): {response.text}")

        result = response.json()
        entries = result.get("data", {}).get("invitationEntries") or [{}]
        return entries[0].get("id") or result.get("id")
