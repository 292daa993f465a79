"""
Tests for pbi_workspaces.clients.powerbi
"""

import json

import httpx
import pytest

from pbi_workspaces.clients.powerbi import PowerBIClient
from pbi_workspaces.config import PowerBIConfig
from pbi_workspaces.errors import RemoteUnavailableError
from pbi_workspaces.models import NO_CAPACITY_ID

BASE_URL = "https://api.test/v1.0/myorg"


def make_client(handler):
    """Build a client whose requests are answered by ``handler``."""
    requests = []

    def record(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return handler(request)

    client = PowerBIClient(BASE_URL, "secret-token", transport=httpx.MockTransport(record))
    return client, requests


class TestCapacities:
    """Tests for capacity listing."""

    def test_list_capacities(self):
        client, requests = make_client(
            lambda request: httpx.Response(
                200,
                json={
                    "value": [
                        {"id": "c1", "displayName": "Premium", "sku": "P1", "state": "Active", "region": "West Europe"},
                        {"id": "c2", "displayName": "Embedded"},
                    ]
                },
            )
        )

        capacities = client.list_capacities()

        assert [c.id for c in capacities] == ["c1", "c2"]
        assert capacities[0].display_name == "Premium"
        assert capacities[0].region == "West Europe"
        assert requests[0].method == "GET"
        assert requests[0].url.path == "/v1.0/myorg/capacities"
        assert requests[0].headers["Authorization"] == "Bearer secret-token"

    def test_missing_value_is_empty(self):
        client, _ = make_client(lambda request: httpx.Response(200, json={"value": None}))

        assert client.list_capacities() == []


class TestWorkspaces:
    """Tests for workspace (group) calls."""

    def test_create_workspace(self):
        client, requests = make_client(
            lambda request: httpx.Response(200, json={"id": "ws-1", "name": "Sales"})
        )

        workspace = client.create_workspace("Sales")

        assert workspace.id == "ws-1"
        assert workspace.capacity_id == NO_CAPACITY_ID
        assert requests[0].method == "POST"
        assert requests[0].url.params["workspaceV2"] == "True"
        assert json.loads(requests[0].content) == {"name": "Sales"}

    def test_create_without_id_fails(self):
        client, _ = make_client(lambda request: httpx.Response(200, json={}))

        with pytest.raises(RemoteUnavailableError):
            client.create_workspace("Sales")

    def test_get_workspace_uses_filter(self):
        client, requests = make_client(
            lambda request: httpx.Response(
                200, json={"value": [{"id": "ws-1", "name": "Sales", "capacityId": "c1"}]}
            )
        )

        workspace = client.get_workspace("ws-1")

        assert workspace.name == "Sales"
        assert workspace.capacity_id == "c1"
        assert requests[0].url.params["$filter"] == "id eq 'ws-1'"

    def test_get_workspace_absent(self):
        client, _ = make_client(lambda request: httpx.Response(200, json={"value": []}))

        assert client.get_workspace("ws-1") is None

    def test_get_workspace_not_found_status(self):
        client, _ = make_client(lambda request: httpx.Response(404, json={"error": "NotFound"}))

        assert client.get_workspace("ws-1") is None

    def test_missing_capacity_normalised(self):
        client, _ = make_client(
            lambda request: httpx.Response(200, json={"value": [{"id": "ws-1", "name": "Sales"}]})
        )

        assert client.get_workspace("ws-1").capacity_id == NO_CAPACITY_ID

    def test_delete_escapes_id(self):
        client, requests = make_client(lambda request: httpx.Response(200))

        client.delete_workspace("a/b c")

        assert requests[0].method == "DELETE"
        assert requests[0].url.raw_path == b"/v1.0/myorg/groups/a%2Fb%20c"

    def test_assign_to_capacity(self):
        client, requests = make_client(lambda request: httpx.Response(200))

        client.assign_workspace_to_capacity("ws-1", NO_CAPACITY_ID)

        assert requests[0].url.path == "/v1.0/myorg/groups/ws-1/AssignToCapacity"
        assert json.loads(requests[0].content) == {"capacityId": NO_CAPACITY_ID}


class TestErrors:
    """Tests for error translation."""

    def test_http_error(self):
        client, _ = make_client(lambda request: httpx.Response(401, text="Unauthorized"))

        with pytest.raises(RemoteUnavailableError) as excinfo:
            client.list_capacities()

        assert excinfo.value.status_code == 401
        assert excinfo.value.operation == "list_capacities"

    def test_delete_not_found_is_error(self):
        client, _ = make_client(lambda request: httpx.Response(404))

        with pytest.raises(RemoteUnavailableError):
            client.delete_workspace("ws-1")

    def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client, _ = make_client(handler)

        with pytest.raises(RemoteUnavailableError) as excinfo:
            client.assign_workspace_to_capacity("ws-1", "c1")

        assert excinfo.value.status_code is None
        assert isinstance(excinfo.value.__cause__, httpx.ConnectError)


class TestLifecycle:
    """Tests for construction and cleanup."""

    def test_from_config(self):
        config = PowerBIConfig(access_token="abc", api_url="https://api.test/v1.0/myorg/")

        with PowerBIClient.from_config(config) as client:
            assert client.base_url == "https://api.test/v1.0/myorg"

        assert client._client.is_closed
