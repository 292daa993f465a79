"""FastAPI routes for the Power BI Workspace Service."""
from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from pydantic import BaseModel, Field

from ..errors import CapacityNotFoundError
from ..models import Capacity, DesiredWorkspace, WorkspaceState
from ..services.capacity_resolver import CapacityResolver
from ..services.workspace_reconciler import WorkspaceReconciler

router = APIRouter()


class WorkspaceRequest(BaseModel):
    name: str = Field(..., min_length=1)
    capacity_display_name: str = ""

    def to_desired(self) -> DesiredWorkspace:
        return DesiredWorkspace(name=self.name, capacity_display_name=self.capacity_display_name)


class ImportRequest(BaseModel):
    id: str = Field(..., min_length=1)


class WorkspaceResponse(BaseModel):
    id: str
    name: str
    capacity_id: Optional[str] = None
    capacity_display_name: str = ""

    @classmethod
    def from_state(cls, state: WorkspaceState) -> "WorkspaceResponse":
        return cls(**state.to_dict())


class CapacityResponse(BaseModel):
    id: str
    display_name: str
    sku: Optional[str] = None
    state: Optional[str] = None
    region: Optional[str] = None

    @classmethod
    def from_capacity(cls, capacity: Capacity) -> "CapacityResponse":
        return cls(**capacity.to_dict())


def get_reconciler(request: Request) -> WorkspaceReconciler:
    reconciler = getattr(request.app.state, "reconciler", None)
    if reconciler is None:
        raise RuntimeError("WorkspaceReconciler dependency not configured")
    return reconciler


def get_resolver(request: Request) -> CapacityResolver:
    resolver = getattr(request.app.state, "resolver", None)
    if resolver is None:
        raise RuntimeError("CapacityResolver dependency not configured")
    return resolver


@router.get("/workspaces/{workspace_id}", response_model=WorkspaceResponse)
def read_workspace(
    workspace_id: str,
    reconciler: WorkspaceReconciler = Depends(get_reconciler),
) -> WorkspaceResponse:
    state = reconciler.read(workspace_id)
    if state is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Workspace not found")
    return WorkspaceResponse.from_state(state)


@router.post("/workspaces", response_model=WorkspaceResponse, status_code=status.HTTP_201_CREATED)
def create_workspace(
    body: WorkspaceRequest,
    reconciler: WorkspaceReconciler = Depends(get_reconciler),
) -> WorkspaceResponse:
    return WorkspaceResponse.from_state(reconciler.create(body.to_desired()))


@router.post("/workspaces/import", response_model=WorkspaceResponse)
def import_workspace(
    body: ImportRequest,
    reconciler: WorkspaceReconciler = Depends(get_reconciler),
) -> WorkspaceResponse:
    return WorkspaceResponse.from_state(reconciler.import_workspace(body.id))


@router.put("/workspaces/{workspace_id}", response_model=WorkspaceResponse)
def reconcile_workspace(
    workspace_id: str,
    body: WorkspaceRequest,
    reconciler: WorkspaceReconciler = Depends(get_reconciler),
) -> WorkspaceResponse:
    return WorkspaceResponse.from_state(reconciler.reconcile(body.to_desired(), workspace_id))


@router.delete("/workspaces/{workspace_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_workspace(
    workspace_id: str,
    reconciler: WorkspaceReconciler = Depends(get_reconciler),
) -> Response:
    reconciler.delete(workspace_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/capacities", response_model=List[CapacityResponse])
def list_capacities(resolver: CapacityResolver = Depends(get_resolver)) -> List[CapacityResponse]:
    return [CapacityResponse.from_capacity(capacity) for capacity in resolver.list_capacities()]


@router.get("/capacities/lookup", response_model=CapacityResponse)
def lookup_capacity(
    name: str = Query(..., min_length=1),
    resolver: CapacityResolver = Depends(get_resolver),
) -> CapacityResponse:
    try:
        capacity = resolver.resolve_by_name(name)
    except CapacityNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return CapacityResponse.from_capacity(capacity)


__all__ = ["router"]
