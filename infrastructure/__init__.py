"""
Infrastructure Package - Lazy Loading Implementation.

Remote collaborators of the form engine. Imports are deferred until a
name is first accessed so that importing the package neither reads the
environment nor builds an HTTP client.

Exports:
    WorkspaceClient: Repository API client (httpx)
    WorkspaceClientResponse: Low-level response wrapper
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .workspace_client import WorkspaceClient as _WorkspaceClient
    from .workspace_client import WorkspaceClientResponse as _WorkspaceClientResponse


def __getattr__(name: str):
    """
    Lazy import mechanism - only imports when actually accessed.
    """
    if name == "WorkspaceClient":
        from .workspace_client import WorkspaceClient
        return WorkspaceClient
    elif name == "WorkspaceClientResponse":
        from .workspace_client import WorkspaceClientResponse
        return WorkspaceClientResponse

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "WorkspaceClient",
    "WorkspaceClientResponse",
]
