"""Capacity lookup for use inside Pulumi programs."""
from __future__ import annotations

from typing import Optional

from ...models import Capacity
from ...services.capacity_resolver import CapacityResolver
from .workspace import ClientFactory, default_client_factory


def get_capacity(display_name: str, client_factory: Optional[ClientFactory] = None) -> Capacity:
    """Return the capacity named ``display_name``.

    Raises ``CapacityNotFoundError`` when no capacity matches.
    """

    with (client_factory or default_client_factory)() as client:
        return CapacityResolver(client).resolve_by_name(display_name)


__all__ = ["get_capacity"]
