"""Capacity resolution and workspace lifecycle services."""

from .capacity_resolver import CapacityResolver
from .workspace_reconciler import WorkspaceReconciler

__all__ = ["CapacityResolver", "WorkspaceReconciler"]
