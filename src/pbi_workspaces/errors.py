"""Error taxonomy for workspace reconciliation."""
from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Optional


class WorkspaceServiceError(Exception):
    """Base class for every error raised by the service.

    ``step`` names the sub-step of the enclosing operation that failed and
    ``workspace_id`` the workspace it was operating on, when known.
    """

    def __init__(
        self,
        message: str,
        *,
        step: Optional[str] = None,
        workspace_id: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.step = step
        self.workspace_id = workspace_id

    def __str__(self) -> str:
        if self.step:
            return f"{self.step}: {self.message}"
        return self.message


class RemoteUnavailableError(WorkspaceServiceError):
    """The remote API could not be reached or answered with an error."""

    def __init__(
        self,
        message: str,
        *,
        operation: str,
        status_code: Optional[int] = None,
        **kwargs,
    ) -> None:
        super().__init__(message, **kwargs)
        self.operation = operation
        self.status_code = status_code


class CapacityNotFoundError(WorkspaceServiceError):
    """No capacity matches the requested display name or id."""


class AmbiguousRemoteStateError(WorkspaceServiceError):
    """A workspace references a capacity that cannot be resolved."""


class WorkspaceNotFoundError(WorkspaceServiceError):
    """A workspace expected to exist is missing on the remote service."""


class ReplacementRequiredError(WorkspaceServiceError):
    """The requested change cannot be applied in place."""


@contextmanager
def operation_step(step: str, workspace_id: Optional[str] = None) -> Iterator[None]:
    """Attach ``step`` and ``workspace_id`` to service errors raised inside the block.

    Context already set by an inner step is kept.
    """

    try:
        yield
    except WorkspaceServiceError as exc:
        if exc.step is None:
            exc.step = step
        if exc.workspace_id is None:
            exc.workspace_id = workspace_id
        raise


__all__ = [
    "AmbiguousRemoteStateError",
    "CapacityNotFoundError",
    "RemoteUnavailableError",
    "ReplacementRequiredError",
    "WorkspaceNotFoundError",
    "WorkspaceServiceError",
    "operation_step",
]
