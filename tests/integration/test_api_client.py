"""
Integration tests for the registry API client against the fake service
"""

import logging

import httpx
import pytest

from registry_console.api.client import RegistryApiClient
from registry_console.core.exceptions import RemoteError
from registry_console.core.schemas.registry import LandRegistration, OwnerRegistration

pytestmark = pytest.mark.integration


class TestEndpoints:
    """Test each consumed endpoint"""

    @pytest.mark.asyncio
    async def test_login_returns_token(self, api_client):
        token = await api_client.login("clerk@registry.test", "s3cret-pass")

        assert token.count(".") == 2

    @pytest.mark.asyncio
    async def test_login_error_uses_msg_field(self, api_client):
        with pytest.raises(RemoteError) as exc:
            await api_client.login("clerk@registry.test", "nope")

        assert exc.value.message == "Invalid credentials"
        assert exc.value.status_code == 400
        assert exc.value.server_message == "Invalid credentials"

    @pytest.mark.asyncio
    async def test_get_owners_maps_ids(self, api_client, registry_server):
        owners = await api_client.get_owners()

        assert owners[0].id == registry_server.owners[0]["_id"]
        assert owners[1].proof_id == "PASSPORT-77"

    @pytest.mark.asyncio
    async def test_get_lands_accepts_populated_owner(self, api_client, registry_server):
        owner = registry_server.owners[0]
        registry_server.lands[0].pop("currentOwnerId")
        registry_server.lands[0]["currentOwner"] = owner

        lands = await api_client.get_lands()

        assert lands[0].current_owner_id == owner["_id"]
        assert lands[0].market_value == 2500000

    @pytest.mark.asyncio
    async def test_register_owner_payload_uses_service_names(self, api_client, registry_server):
        owner = OwnerRegistration(name="N", contact="C", email="e@x.test", proof_id="P-1")

        message = await api_client.register_owner(owner)

        assert message == "Owner registered successfully!"
        assert b'"proofId"' in registry_server.requests[-1].content

    @pytest.mark.asyncio
    async def test_register_land(self, api_client, registry_server):
        land = LandRegistration(
            location="Goa",
            area="1 Acre",
            market_value=0,
            property_type="Plot",
            survey_number="SN-1",
            current_owner_id=registry_server.owners[0]["_id"],
        )

        assert await api_client.register_land(land) == "Land registered successfully!"

    @pytest.mark.asyncio
    async def test_transfer_uses_put(self, api_client, registry_server):
        land_id = registry_server.lands[0]["_id"]
        new_owner = registry_server.owners[1]["_id"]

        await api_client.transfer_ownership(land_id, new_owner)

        request = registry_server.requests[-1]
        assert request.method == "PUT"
        assert b'"landId"' in request.content and b'"newOwnerId"' in request.content

    @pytest.mark.asyncio
    async def test_land_record_id_is_escaped(self, api_client, registry_server):
        with pytest.raises(RemoteError):
            await api_client.get_land_record("../getOwners")

        assert registry_server.requests[-1].url.raw_path.endswith(b"getLandRecord/..%2FgetOwners")


class TestFailures:
    """Test failure translation"""

    @pytest.mark.asyncio
    async def test_transport_failure_uses_fallback(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with RegistryApiClient(
            "http://registry.test/api", transport=httpx.MockTransport(handler)
        ) as client:
            with pytest.raises(RemoteError) as exc:
                await client.get_owners()

        assert exc.value.message == "Failed to fetch owners."
        assert exc.value.status_code is None

    @pytest.mark.asyncio
    async def test_malformed_row_is_skipped(self, api_client, registry_server, caplog):
        registry_server.owners.append({"name": "no id"})

        with caplog.at_level(logging.WARNING, logger="registry_console.api.client"):
            owners = await api_client.get_owners()

        assert [owner.name for owner in owners] == ["Asha Verma", "Ravi Kumar"]
        assert "Skipping malformed Owner at index 2" in caplog.text

    @pytest.mark.asyncio
    async def test_non_list_payload_uses_fallback(self, api_client, registry_server):
        registry_server.fail("getOwners", 200, {"owners": []})

        with pytest.raises(RemoteError) as exc:
            await api_client.get_owners()

        assert exc.value.message == "Failed to fetch owners."

    @pytest.mark.asyncio
    async def test_failure_log_masks_request_body(self, api_client, caplog):
        with caplog.at_level(logging.WARNING, logger="registry_console.api.client"):
            with pytest.raises(RemoteError):
                await api_client.login("clerk@registry.test", "wrong-password-123")

        assert "POST /auth/login returned 400" in caplog.text
        assert "'password': 'wron****'" in caplog.text
        assert "wrong-password-123" not in caplog.text

    @pytest.mark.asyncio
    async def test_non_json_success_body(self, api_client, registry_server):
        registry_server.fail("getLands", 200, "<html>maintenance</html>")

        with pytest.raises(RemoteError) as exc:
            await api_client.get_lands()

        assert exc.value.message == "Failed to fetch lands."


class TestAuthorizationHeader:
    """Test the bearer credential"""

    @pytest.mark.asyncio
    async def test_token_sent_when_present(self, transport, registry_server):
        async with RegistryApiClient(
            "http://registry.test/api", token_provider=lambda: "tok.en.value", transport=transport
        ) as client:
            await client.get_owners()

        assert registry_server.requests[-1].headers["Authorization"] == "Bearer tok.en.value"

    @pytest.mark.asyncio
    async def test_no_header_without_token(self, transport, registry_server):
        async with RegistryApiClient(
            "http://registry.test/api", token_provider=lambda: None, transport=transport
        ) as client:
            await client.get_owners()

        assert "Authorization" not in registry_server.requests[-1].headers
