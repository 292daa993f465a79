"""Translate capacity display names to ids and back."""
from __future__ import annotations

import logging
from typing import Callable, List, Optional

from ..clients.powerbi import PowerBIClient
from ..errors import CapacityNotFoundError
from ..models import Capacity

LOGGER = logging.getLogger(__name__)


class CapacityResolver:
    """Look up capacities by scanning the full list from the API.

    The list is fetched on every call. Capacities are few and change slowly, and
    there is no way to learn when a cached copy went stale.
    """

    def __init__(self, client: PowerBIClient) -> None:
        self._client = client

    def list_capacities(self) -> List[Capacity]:
        return self._client.list_capacities()

    def resolve_by_name(self, display_name: str) -> Capacity:
        """Return the first capacity whose display name matches exactly."""

        capacities = self._client.list_capacities()
        capacity = self._first(capacities, lambda item: item.display_name == display_name)
        if capacity is None:
            raise CapacityNotFoundError(f"capacity not found for display name: {display_name}")
        duplicates = sum(1 for item in capacities if item.display_name == display_name)
        if duplicates > 1:
            LOGGER.debug(
                "Capacity display name is not unique; using first match",
                extra={"display_name": display_name, "capacity_id": capacity.id, "matches": duplicates},
            )
        return capacity

    def resolve_by_id(self, capacity_id: str) -> Capacity:
        """Return the capacity with the given id.

        Ids are GUIDs and are compared case-insensitively.
        """

        wanted = capacity_id.lower()
        capacity = self._first(self._client.list_capacities(), lambda item: item.id.lower() == wanted)
        if capacity is None:
            raise CapacityNotFoundError(f"capacity not found with ID: {capacity_id}")
        return capacity

    @staticmethod
    def _first(capacities: List[Capacity], predicate: Callable[[Capacity], bool]) -> Optional[Capacity]:
        for capacity in capacities:
            if predicate(capacity):
                return capacity
        return None


__all__ = ["CapacityResolver"]
