"""Synchronous client for the Power BI REST API.

Only the calls needed to manage workspaces (groups) and their capacity
assignment are implemented. Calls are never retried; any transport error or
non-2xx response is raised as :class:`RemoteUnavailableError`.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from ..config import PowerBIConfig
from ..errors import RemoteUnavailableError
from ..models import Capacity, Workspace

LOGGER = logging.getLogger(__name__)


def _path_id(value: str) -> str:
    return quote(value, safe="")


class PowerBIClient:
    """
    Power BI REST API client.

    Usage:
        with PowerBIClient(base_url=..., access_token="...") as client:
            capacities = client.list_capacities()
            workspace = client.create_workspace("Sales")
            client.assign_workspace_to_capacity(workspace.id, capacities[0].id)
    """

    def __init__(
        self,
        base_url: str,
        access_token: str,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
            headers={
                "Authorization": f"Bearer {access_token}",
                "Content-Type": "application/json",
            },
        )

    @classmethod
    def from_config(
        cls, config: PowerBIConfig, transport: Optional[httpx.BaseTransport] = None
    ) -> "PowerBIClient":
        return cls(
            base_url=config.api_url,
            access_token=config.access_token.get_secret_value(),
            timeout=config.timeout,
            transport=transport,
        )

    def close(self) -> None:
        """Close the underlying HTTP connection pool."""
        if not self._client.is_closed:
            self._client.close()

    def __enter__(self) -> "PowerBIClient":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def _request(
        self,
        operation: str,
        method: str,
        url: str,
        *,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, str]] = None,
        allow_not_found: bool = False,
    ) -> Optional[httpx.Response]:
        LOGGER.debug("Power BI request", extra={"operation": operation, "method": method, "url": url})
        try:
            response = self._client.request(method, url, json=json, params=params)
        except httpx.RequestError as exc:
            raise RemoteUnavailableError(
                f"Failed to reach Power BI API: {exc}", operation=operation
            ) from exc
        if allow_not_found and response.status_code == 404:
            return None
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise RemoteUnavailableError(
                f"Power BI API returned {response.status_code} for {method} {url}: {response.text}",
                operation=operation,
                status_code=response.status_code,
            ) from exc
        return response

    @staticmethod
    def _json(response: httpx.Response) -> Dict[str, Any]:
        if not response.content:
            return {}
        return response.json() or {}

    # =========================================================================
    # CAPACITIES
    # =========================================================================

    def list_capacities(self) -> List[Capacity]:
        """Return every capacity visible to the caller, in API order."""
        response = self._request("list_capacities", "GET", "/capacities")
        items = self._json(response).get("value") or []
        return [Capacity.from_api(item) for item in items]

    # =========================================================================
    # WORKSPACES
    # =========================================================================

    def create_workspace(self, name: str) -> Workspace:
        response = self._request(
            "create_workspace",
            "POST",
            "/groups",
            params={"workspaceV2": "True"},
            json={"name": name},
        )
        payload = self._json(response)
        if not payload.get("id"):
            raise RemoteUnavailableError(
                "Power BI API did not return an id for the created workspace",
                operation="create_workspace",
                status_code=response.status_code,
            )
        return Workspace.from_api({"name": name, **payload})

    def get_workspace(self, workspace_id: str) -> Optional[Workspace]:
        """Return the workspace, or None when it does not exist."""
        escaped = workspace_id.replace("'", "''")
        response = self._request(
            "get_workspace",
            "GET",
            "/groups",
            params={"$filter": f"id eq '{escaped}'"},
            allow_not_found=True,
        )
        if response is None:
            return None
        for item in self._json(response).get("value") or []:
            if str(item.get("id", "")).lower() == workspace_id.lower():
                return Workspace.from_api(item)
        return None

    def delete_workspace(self, workspace_id: str) -> None:
        self._request("delete_workspace", "DELETE", f"/groups/{_path_id(workspace_id)}")

    def assign_workspace_to_capacity(self, workspace_id: str, capacity_id: str) -> None:
        self._request(
            "assign_workspace_to_capacity",
            "POST",
            f"/groups/{_path_id(workspace_id)}/AssignToCapacity",
            json={"capacityId": capacity_id},
        )


__all__ = ["PowerBIClient"]
