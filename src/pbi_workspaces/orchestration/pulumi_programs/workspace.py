"""Pulumi dynamic resource that manages a Power BI workspace."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

import pulumi
from pulumi.dynamic import (
    CreateResult,
    DiffResult,
    ReadResult,
    Resource,
    ResourceProvider,
    UpdateResult,
)

from ...clients.powerbi import PowerBIClient
from ...config import get_settings
from ...models import DesiredWorkspace, WorkspaceState
from ...services.workspace_reconciler import WorkspaceReconciler

ClientFactory = Callable[[], PowerBIClient]


def default_client_factory() -> PowerBIClient:
    """Build a client from the environment of the provider process."""

    return PowerBIClient.from_config(get_settings().powerbi)


def _desired(props: Dict[str, Any]) -> DesiredWorkspace:
    return DesiredWorkspace(
        name=props["name"],
        capacity_display_name=props.get("capacity_display_name") or "",
    )


def _outputs(state: WorkspaceState) -> Dict[str, Any]:
    return {
        "name": state.name,
        "capacity_display_name": state.capacity_display_name,
        "capacity_id": state.capacity_id,
    }


class WorkspaceProvider(ResourceProvider):
    """Dynamic provider delegating each lifecycle call to the reconciler.

    The provider is serialized into the Pulumi state, so it keeps a client
    factory rather than an open client.
    """

    def __init__(self, client_factory: Optional[ClientFactory] = None) -> None:
        self._client_factory = client_factory or default_client_factory

    def create(self, props: Dict[str, Any]) -> CreateResult:
        with self._client_factory() as client:
            state = WorkspaceReconciler(client).create(_desired(props))
        return CreateResult(id_=state.id, outs=_outputs(state))

    def read(self, id_: str, props: Dict[str, Any]) -> ReadResult:
        with self._client_factory() as client:
            state = WorkspaceReconciler(client).read(id_)
        if state is None:
            # An empty id tells the engine the resource is gone.
            return ReadResult(id_="", outs={})
        return ReadResult(id_=state.id, outs=_outputs(state))

    def diff(self, _id: str, _olds: Dict[str, Any], _news: Dict[str, Any]) -> DiffResult:
        replaces = []
        changes = []
        if _olds.get("name") != _news.get("name"):
            replaces.append("name")
        if (_olds.get("capacity_display_name") or "") != (_news.get("capacity_display_name") or ""):
            changes.append("capacity_display_name")
        return DiffResult(
            changes=bool(replaces or changes),
            replaces=replaces,
            delete_before_replace=True,
        )

    def update(self, _id: str, _olds: Dict[str, Any], _news: Dict[str, Any]) -> UpdateResult:
        current = WorkspaceState(
            id=_id,
            name=_olds["name"],
            capacity_id=_olds.get("capacity_id"),
            capacity_display_name=_olds.get("capacity_display_name") or "",
        )
        with self._client_factory() as client:
            state = WorkspaceReconciler(client).update(_id, _desired(_news), current)
        return UpdateResult(outs=_outputs(state))

    def delete(self, _id: str, _props: Dict[str, Any]) -> None:
        with self._client_factory() as client:
            WorkspaceReconciler(client).delete(_id)


@dataclass
class WorkspaceArgs:
    """Inputs of a :class:`PowerBIWorkspace`."""

    name: pulumi.Input[str]
    capacity_display_name: Optional[pulumi.Input[str]] = None


class PowerBIWorkspace(Resource):
    """A Power BI workspace, optionally assigned to a capacity.

    Changing ``name`` replaces the workspace. Pass
    ``pulumi.ResourceOptions(import_=<id>)`` to adopt an existing workspace.
    """

    name: pulumi.Output[str]
    capacity_display_name: pulumi.Output[str]
    capacity_id: pulumi.Output[Optional[str]]

    def __init__(
        self,
        resource_name: str,
        args: WorkspaceArgs,
        opts: Optional[pulumi.ResourceOptions] = None,
        provider: Optional[WorkspaceProvider] = None,
    ) -> None:
        props = {
            "name": args.name,
            "capacity_display_name": args.capacity_display_name or "",
            "capacity_id": None,
        }
        super().__init__(provider or WorkspaceProvider(), resource_name, props, opts)


__all__ = [
    "PowerBIWorkspace",
    "WorkspaceArgs",
    "WorkspaceProvider",
    "default_client_factory",
]
