"""Domain models for Power BI workspaces and capacities."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

# Assigning a workspace to this capacity id unassigns it.
NO_CAPACITY_ID = "00000000-0000-0000-0000-000000000000"


def is_no_capacity(capacity_id: Optional[str]) -> bool:
    """Return True when ``capacity_id`` means the workspace has no capacity."""

    return not capacity_id or capacity_id.lower() == NO_CAPACITY_ID


@dataclass(frozen=True)
class Capacity:
    """A pre-existing capacity as listed by the remote service."""

    id: str
    display_name: str
    sku: Optional[str] = None
    state: Optional[str] = None
    region: Optional[str] = None

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "Capacity":
        return cls(
            id=payload["id"],
            display_name=payload.get("displayName", ""),
            sku=payload.get("sku"),
            state=payload.get("state"),
            region=payload.get("region"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "display_name": self.display_name,
            "sku": self.sku,
            "state": self.state,
            "region": self.region,
        }


@dataclass(frozen=True)
class Workspace:
    """Workspace record as returned by the remote service."""

    id: str
    name: str
    capacity_id: str = NO_CAPACITY_ID

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "Workspace":
        capacity_id = payload.get("capacityId")
        return cls(
            id=payload["id"],
            name=payload.get("name", ""),
            capacity_id=NO_CAPACITY_ID if is_no_capacity(capacity_id) else capacity_id,
        )


@dataclass(frozen=True)
class DesiredWorkspace:
    """Attributes a caller wants a workspace to have."""

    name: str
    capacity_display_name: str = ""


@dataclass(frozen=True)
class WorkspaceState:
    """Observed workspace state reported back to callers.

    ``capacity_id`` is ``None`` after a capacity assignment until the next read
    resolves it again.
    """

    id: str
    name: str
    capacity_id: Optional[str]
    capacity_display_name: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "capacity_id": self.capacity_id,
            "capacity_display_name": self.capacity_display_name,
        }


@dataclass(frozen=True)
class WorkspaceDiff:
    """Differences between a desired and an observed workspace."""

    replace: bool = False
    capacity_changed: bool = False

    @property
    def has_changes(self) -> bool:
        return self.replace or self.capacity_changed


__all__ = [
    "NO_CAPACITY_ID",
    "Capacity",
    "DesiredWorkspace",
    "Workspace",
    "WorkspaceDiff",
    "WorkspaceState",
    "is_no_capacity",
]
