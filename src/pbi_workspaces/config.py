"""Application configuration module."""
from __future__ import annotations

from functools import lru_cache
from typing import List, Optional

from pydantic import BaseModel, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class PowerBIConfig(BaseModel):
    """Connection options for the Power BI REST API."""

    api_url: str = Field(
        "https://api.powerbi.com/v1.0/myorg", description="Base URL of the Power BI REST API"
    )
    access_token: SecretStr = Field(..., description="Bearer token used to authenticate API calls")
    timeout: Optional[float] = Field(
        None,
        gt=0,
        description="Optional request timeout in seconds. Requests never time out when unset.",
    )

    @field_validator("api_url")
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


class PulumiConfig(BaseModel):
    """Pulumi Automation API configuration."""

    project_name: str = Field("powerbi-workspaces", description="Pulumi project name for workspace stacks")
    stack_name: str = Field("dev", description="Name of the stack holding the declared workspaces")
    organization: Optional[str] = Field(
        None,
        description=(
            "Optional Pulumi organization name. When provided, the stack will be scoped as"
            " '<org>/<project>/<stack>'."
        ),
    )
    work_dir: Optional[str] = Field(
        None,
        description=(
            "Optional working directory containing the Pulumi program. If omitted the"
            " embedded inline program is used."
        ),
    )
    refresh_before_update: bool = Field(
        True, description="Refresh stack state from the remote service before updating"
    )

    @field_validator("stack_name")
    def _normalize_stack_name(cls, value: str) -> str:
        return value.replace(" ", "-").lower()


class WorkspaceDeclaration(BaseModel):
    """Desired state of a single workspace managed by the orchestrator."""

    resource_name: str = Field(..., description="Logical Pulumi resource name")
    name: str = Field(..., min_length=1, description="Display name of the workspace")
    capacity_display_name: str = Field(
        "", description="Display name of the capacity to assign. Empty means no capacity."
    )
    import_id: Optional[str] = Field(
        None, description="Existing workspace id to adopt instead of creating a new workspace"
    )


class LoggingConfig(BaseModel):
    """Simple logging configuration."""

    level: str = Field("INFO", description="Application log level")


class AppConfig(BaseSettings):
    """Top-level application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env", env_prefix="PBIW_", env_nested_delimiter="__", case_sensitive=False
    )

    powerbi: PowerBIConfig
    pulumi: PulumiConfig = Field(default_factory=PulumiConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    api_prefix: str = Field("/api/v1", description="Base prefix for FastAPI routes")
    service_name: str = Field("powerbi-workspace-service", description="Service identifier")
    workspaces: List[WorkspaceDeclaration] = Field(
        default_factory=list,
        description="Workspaces declared for the orchestrator stack.",
    )

    @field_validator("workspaces")
    def _unique_resource_names(cls, value: List[WorkspaceDeclaration]) -> List[WorkspaceDeclaration]:
        seen = set()
        for declaration in value:
            if declaration.resource_name in seen:
                raise ValueError(f"Duplicate workspace resource name: {declaration.resource_name}")
            seen.add(declaration.resource_name)
        return value


@lru_cache
def get_settings() -> AppConfig:
    """Return a cached instance of the application settings."""

    return AppConfig()


__all__ = [
    "AppConfig",
    "PowerBIConfig",
    "PulumiConfig",
    "WorkspaceDeclaration",
    "LoggingConfig",
    "get_settings",
]
