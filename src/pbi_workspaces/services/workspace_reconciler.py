"""Lifecycle management for Power BI workspaces."""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional

from ..clients.powerbi import PowerBIClient
from ..errors import (
    AmbiguousRemoteStateError,
    CapacityNotFoundError,
    ReplacementRequiredError,
    WorkspaceNotFoundError,
    operation_step,
)
from ..models import (
    NO_CAPACITY_ID,
    DesiredWorkspace,
    WorkspaceDiff,
    WorkspaceState,
    is_no_capacity,
)
from .capacity_resolver import CapacityResolver

LOGGER = logging.getLogger(__name__)


class WorkspaceReconciler:
    """Drive workspace create/read/update/delete against the remote service.

    No state is held between calls. A single caller is expected to run one
    operation at a time per workspace.
    """

    def __init__(self, client: PowerBIClient, resolver: Optional[CapacityResolver] = None) -> None:
        self._client = client
        self._resolver = resolver or CapacityResolver(client)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def create(self, desired: DesiredWorkspace) -> WorkspaceState:
        """Create a workspace, assign its capacity and return the observed state.

        A failed capacity assignment is raised with ``workspace_id`` set; the
        workspace that was already created is left in place.
        """

        LOGGER.info("Creating workspace", extra={"workspace_name": desired.name})
        with operation_step("create_workspace"):
            workspace = self._client.create_workspace(desired.name)
        LOGGER.info(
            "Workspace created", extra={"workspace_id": workspace.id, "workspace_name": workspace.name}
        )

        assigned: Optional[WorkspaceState] = None
        if desired.capacity_display_name:
            base = WorkspaceState(
                id=workspace.id,
                name=workspace.name,
                capacity_id=None,
                capacity_display_name="",
            )
            assigned = self._assign(base, desired.capacity_display_name)

        state = self.read(workspace.id)
        if state is not None:
            return state

        # Newly created workspaces can be missing from reads for a short while.
        LOGGER.warning(
            "Created workspace not visible yet; reporting state from create response",
            extra={"workspace_id": workspace.id},
        )
        if assigned is not None:
            return assigned
        return WorkspaceState(
            id=workspace.id,
            name=workspace.name,
            capacity_id=workspace.capacity_id,
            capacity_display_name="",
        )

    def read(self, workspace_id: str) -> Optional[WorkspaceState]:
        """Return the observed workspace state, or None if it no longer exists."""

        with operation_step("get_workspace", workspace_id):
            workspace = self._client.get_workspace(workspace_id)
        if workspace is None:
            LOGGER.info("Workspace absent on remote service", extra={"workspace_id": workspace_id})
            return None

        if is_no_capacity(workspace.capacity_id):
            return WorkspaceState(
                id=workspace.id,
                name=workspace.name,
                capacity_id=NO_CAPACITY_ID,
                capacity_display_name="",
            )

        with operation_step("resolve_capacity", workspace_id):
            try:
                capacity = self._resolver.resolve_by_id(workspace.capacity_id)
            except CapacityNotFoundError as exc:
                raise AmbiguousRemoteStateError(
                    f"workspace {workspace.id} is assigned to unknown capacity {workspace.capacity_id}"
                ) from exc
        return WorkspaceState(
            id=workspace.id,
            name=workspace.name,
            capacity_id=workspace.capacity_id,
            capacity_display_name=capacity.display_name,
        )

    def update(
        self, workspace_id: str, desired: DesiredWorkspace, current: WorkspaceState
    ) -> WorkspaceState:
        """Apply a capacity change in place. Renames are rejected."""

        if desired.name != current.name:
            raise ReplacementRequiredError(
                f"workspace name cannot change from {current.name!r} to {desired.name!r}",
                step="update_workspace",
                workspace_id=workspace_id,
            )
        if desired.capacity_display_name == current.capacity_display_name:
            LOGGER.debug("Capacity unchanged; nothing to update", extra={"workspace_id": workspace_id})
            return current
        return self._assign(replace(current, id=workspace_id), desired.capacity_display_name)

    def delete(self, workspace_id: str) -> None:
        LOGGER.info("Deleting workspace", extra={"workspace_id": workspace_id})
        with operation_step("delete_workspace", workspace_id):
            self._client.delete_workspace(workspace_id)

    def import_workspace(self, workspace_id: str) -> WorkspaceState:
        """Adopt an existing workspace by id, backfilling all attributes."""

        state = self.read(workspace_id)
        if state is None:
            raise WorkspaceNotFoundError(
                f"cannot import non-existent workspace {workspace_id}",
                step="import_workspace",
                workspace_id=workspace_id,
            )
        LOGGER.info("Workspace imported", extra={"workspace_id": workspace_id})
        return state

    # ------------------------------------------------------------------
    # Drift correction
    # ------------------------------------------------------------------
    @staticmethod
    def diff(desired: DesiredWorkspace, current: WorkspaceState) -> WorkspaceDiff:
        return WorkspaceDiff(
            replace=desired.name != current.name,
            capacity_changed=desired.capacity_display_name != current.capacity_display_name,
        )

    def reconcile(self, desired: DesiredWorkspace, workspace_id: Optional[str] = None) -> WorkspaceState:
        """Converge the remote workspace onto ``desired`` and return its state.

        The returned id differs from ``workspace_id`` when the workspace had to
        be created or replaced.
        """

        current = self.read(workspace_id) if workspace_id else None
        if current is None:
            if workspace_id:
                LOGGER.info("Workspace drifted away; recreating", extra={"workspace_id": workspace_id})
            return self.create(desired)

        changes = self.diff(desired, current)
        if changes.replace:
            LOGGER.info(
                "Workspace name drifted; replacing",
                extra={"workspace_id": current.id, "workspace_name": desired.name},
            )
            self.delete(current.id)
            return self.create(desired)
        if changes.capacity_changed:
            self.update(current.id, desired, current)
            refreshed = self.read(current.id)
            if refreshed is not None:
                return refreshed
            raise WorkspaceNotFoundError(
                f"workspace {current.id} disappeared during reconciliation",
                step="read_workspace",
                workspace_id=current.id,
            )
        return current

    # ------------------------------------------------------------------
    # Capacity assignment
    # ------------------------------------------------------------------
    def assign_capacity(self, workspace_id: str, capacity_display_name: str) -> str:
        """Assign the capacity named ``capacity_display_name``; empty unassigns.

        Returns the capacity id that was sent. Nothing is sent when the name
        cannot be resolved.
        """

        capacity_id = NO_CAPACITY_ID
        if capacity_display_name:
            with operation_step("resolve_capacity", workspace_id):
                capacity_id = self._resolver.resolve_by_name(capacity_display_name).id
        LOGGER.info(
            "Assigning workspace to capacity",
            extra={
                "workspace_id": workspace_id,
                "capacity_id": capacity_id,
                "capacity_display_name": capacity_display_name,
            },
        )
        with operation_step("assign_capacity", workspace_id):
            self._client.assign_workspace_to_capacity(workspace_id, capacity_id)
        return capacity_id

    def _assign(self, state: WorkspaceState, capacity_display_name: str) -> WorkspaceState:
        self.assign_capacity(state.id, capacity_display_name)
        # The assigned id is only trusted again once a read re-resolves it.
        return replace(state, capacity_display_name=capacity_display_name, capacity_id=None)


__all__ = ["WorkspaceReconciler"]
