# ============================================================================
# WORKSPACE MODELS
# ============================================================================
# STATUS: Core - Data models
# PURPOSE: Repository workspace summaries and workspace detail
# LAST_REVIEWED: 19 OCT 2026
# EXPORTS: WorkspaceSummary, WorkspaceDetail
# DEPENDENCIES: pydantic
# ============================================================================
"""
Workspace Models - Repository Listing and Detail.

Exports:
    WorkspaceSummary: One item of a repository listing
    WorkspaceDetail: Workspace item plus its published parameters
"""

from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from .parameters import WorkspaceParameter


class WorkspaceSummary(BaseModel):
    """Repository item as returned by the listing endpoint."""

    model_config = ConfigDict(populate_by_name=True, extra="allow", frozen=True)

    name: str = Field(..., min_length=1)
    title: Optional[str] = None
    description: Optional[str] = None
    type: str = "WORKSPACE"
    last_save_date: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("lastSaveDate", "last_save_date")
    )

    @property
    def sort_key(self) -> str:
        """Case-insensitive sort key: title, then name."""
        return (self.title or self.name).lower()


class WorkspaceDetail(BaseModel):
    """Result of fetching one workspace: its item record and parameters."""

    model_config = ConfigDict(frozen=True)

    item: Dict[str, Any] = Field(default_factory=dict)
    parameters: List[WorkspaceParameter] = Field(default_factory=list)

    @property
    def name(self) -> Optional[str]:
        return self.item.get("name")
