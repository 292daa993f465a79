"""Workspace orchestration logic using the Pulumi Automation API."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import pulumi
from pulumi import automation as auto

from ..config import AppConfig, WorkspaceDeclaration
from .pulumi_programs.workspace import (
    ClientFactory,
    PowerBIWorkspace,
    WorkspaceArgs,
    WorkspaceProvider,
)

LOGGER = logging.getLogger(__name__)


class WorkspaceOrchestrator:
    """Apply the configured workspace declarations through a Pulumi stack."""

    def __init__(self, config: AppConfig, client_factory: Optional[ClientFactory] = None) -> None:
        self._config = config
        self._client_factory = client_factory

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def up(self) -> Dict[str, Any]:
        """Create, update or replace workspaces until they match the declarations."""

        stack_name = self.stack_name
        LOGGER.info(
            "Applying workspace declarations",
            extra={"stack": stack_name, "workspaces": len(self._config.workspaces)},
        )
        try:
            stack = self._create_or_select_stack()
            if self._config.pulumi.refresh_before_update:
                stack.refresh(on_output=lambda line: LOGGER.debug(line))
            result = stack.up(on_output=lambda line: LOGGER.info(line))
        except Exception as exc:
            LOGGER.exception("Pulumi stack update failed", extra={"stack": stack_name}, exc_info=exc)
            raise
        outputs = {key: value.value for key, value in (result.outputs or {}).items()}
        LOGGER.info("Pulumi stack applied", extra={"stack": stack_name, "outputs": outputs})
        return outputs

    def refresh(self) -> None:
        """Pull the remote state of every managed workspace into the stack."""

        stack_name = self.stack_name
        LOGGER.info("Refreshing workspace stack", extra={"stack": stack_name})
        try:
            stack = self._create_or_select_stack()
            stack.refresh(on_output=lambda line: LOGGER.info(line))
        except Exception as exc:
            LOGGER.exception("Pulumi stack refresh failed", extra={"stack": stack_name}, exc_info=exc)
            raise

    def destroy(self) -> bool:
        """Delete every managed workspace. Returns False if the stack did not exist."""

        stack_name = self.stack_name
        LOGGER.info("Destroying workspace stack", extra={"stack": stack_name})
        try:
            stack = auto.select_stack(**self._stack_kwargs())
        except auto.StackNotFoundError:
            LOGGER.info("Stack not found; nothing to destroy", extra={"stack": stack_name})
            return False
        try:
            stack.destroy(on_output=lambda line: LOGGER.info(line))
        except Exception as exc:
            LOGGER.exception("Pulumi stack destroy failed", extra={"stack": stack_name}, exc_info=exc)
            raise
        stack.workspace.remove_stack(stack_name)
        return True

    # ------------------------------------------------------------------
    # Stack Helpers
    # ------------------------------------------------------------------
    @property
    def stack_name(self) -> str:
        pulumi_config = self._config.pulumi
        if pulumi_config.organization:
            return f"{pulumi_config.organization}/{pulumi_config.project_name}/{pulumi_config.stack_name}"
        return pulumi_config.stack_name

    def _create_or_select_stack(self) -> auto.Stack:
        return auto.create_or_select_stack(**self._stack_kwargs())

    def _stack_kwargs(self) -> Dict[str, Any]:
        kwargs: Dict[str, Any] = {
            "stack_name": self.stack_name,
            "project_name": self._config.pulumi.project_name,
        }
        if self._config.pulumi.work_dir:
            kwargs["work_dir"] = self._config.pulumi.work_dir
        else:
            kwargs["program"] = self._build_pulumi_program()
        return kwargs

    def _build_pulumi_program(self):
        declarations = list(self._config.workspaces)
        client_factory = self._client_factory

        def pulumi_program() -> None:
            provider = WorkspaceProvider(client_factory)
            for declaration in declarations:
                workspace = declare_workspace(declaration, provider)
                pulumi.export(f"{declaration.resource_name}_id", workspace.id)
                pulumi.export(f"{declaration.resource_name}_capacity_id", workspace.capacity_id)

        return pulumi_program


def declare_workspace(
    declaration: WorkspaceDeclaration, provider: Optional[WorkspaceProvider] = None
) -> PowerBIWorkspace:
    """Register a :class:`PowerBIWorkspace` for a configured declaration."""

    opts = pulumi.ResourceOptions(import_=declaration.import_id) if declaration.import_id else None
    return PowerBIWorkspace(
        declaration.resource_name,
        WorkspaceArgs(
            name=declaration.name,
            capacity_display_name=declaration.capacity_display_name,
        ),
        opts=opts,
        provider=provider,
    )


__all__ = ["WorkspaceOrchestrator", "declare_workspace"]
