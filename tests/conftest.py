"""
Pytest configuration and fixtures for the workspace service tests
"""

from typing import Any, Dict, List, Optional, Tuple

import pytest

from pbi_workspaces.config import AppConfig, PowerBIConfig
from pbi_workspaces.errors import RemoteUnavailableError
from pbi_workspaces.models import Capacity, Workspace
from pbi_workspaces.services.capacity_resolver import CapacityResolver
from pbi_workspaces.services.workspace_reconciler import WorkspaceReconciler


class FakePowerBIClient:
    """In-memory stand-in for PowerBIClient that records every call."""

    def __init__(self, capacities: Optional[List[Capacity]] = None) -> None:
        self.capacities: List[Capacity] = list(capacities or [])
        self.workspaces: Dict[str, Workspace] = {}
        self.calls: List[Tuple[str, Tuple[Any, ...]]] = []
        self.failures: Dict[str, Exception] = {}
        self.hidden: set = set()
        self.closed = False
        self._next_id = 1

    def __enter__(self) -> "FakePowerBIClient":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def close(self) -> None:
        self.closed = True

    def fail(self, operation: str, status_code: int = 500) -> None:
        self.failures[operation] = RemoteUnavailableError(
            f"{operation} failed", operation=operation, status_code=status_code
        )

    def _record(self, operation: str, *args: Any) -> None:
        self.calls.append((operation, args))
        if operation in self.failures:
            raise self.failures[operation]

    def calls_to(self, operation: str) -> List[Tuple[Any, ...]]:
        return [args for name, args in self.calls if name == operation]

    def list_capacities(self) -> List[Capacity]:
        self._record("list_capacities")
        return list(self.capacities)

    def create_workspace(self, name: str) -> Workspace:
        self._record("create_workspace", name)
        workspace = Workspace(id=f"ws-{self._next_id}", name=name)
        self._next_id += 1
        self.workspaces[workspace.id] = workspace
        return workspace

    def get_workspace(self, workspace_id: str) -> Optional[Workspace]:
        self._record("get_workspace", workspace_id)
        if workspace_id in self.hidden:
            return None
        return self.workspaces.get(workspace_id)

    def delete_workspace(self, workspace_id: str) -> None:
        self._record("delete_workspace", workspace_id)
        if workspace_id not in self.workspaces:
            raise RemoteUnavailableError(
                "workspace not found", operation="delete_workspace", status_code=404
            )
        del self.workspaces[workspace_id]

    def assign_workspace_to_capacity(self, workspace_id: str, capacity_id: str) -> None:
        self._record("assign_workspace_to_capacity", workspace_id, capacity_id)
        workspace = self.workspaces[workspace_id]
        self.workspaces[workspace_id] = Workspace(
            id=workspace.id, name=workspace.name, capacity_id=capacity_id
        )


@pytest.fixture
def capacities():
    """Capacities returned by the fake API, in response order."""
    return [
        Capacity(id="c1", display_name="Premium", sku="P1", state="Active"),
        Capacity(id="c2", display_name="Premium", sku="P2", state="Active"),
        Capacity(id="c3", display_name="Embedded", sku="A1", state="Active"),
    ]


@pytest.fixture
def fake_client(capacities):
    return FakePowerBIClient(capacities)


@pytest.fixture
def resolver(fake_client):
    return CapacityResolver(fake_client)


@pytest.fixture
def reconciler(fake_client):
    return WorkspaceReconciler(fake_client)


@pytest.fixture
def settings():
    """Application settings that ignore any .env file."""
    return AppConfig(
        _env_file=None,
        powerbi=PowerBIConfig(access_token="test-token", api_url="https://api.test/v1.0/myorg"),
    )
