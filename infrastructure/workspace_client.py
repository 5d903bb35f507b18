# ============================================================================
# REMOTE WORKSPACE CLIENT
# ============================================================================
# STATUS: Infrastructure - Repository API client
# PURPOSE: List workspaces and fetch workspace parameters over HTTP
# LAST_REVIEWED: 19 OCT 2026
# EXPORTS: WorkspaceClient, WorkspaceClientResponse
# DEPENDENCIES: httpx, pydantic, config.server_config
# ============================================================================
"""
Remote Workspace Client.

Async HTTP client for the processing server's repository API. Lists the
workspaces of a repository and fetches one workspace item with its
published parameters.

Endpoints (relative to ``{server_url}{api_base_path}``):
    GET /repositories/{repository}/items?type=WORKSPACE
    GET /repositories/{repository}/items/{workspace}
    GET /repositories/{repository}/items/{workspace}/parameters

Requests authenticate with ``Authorization: fmetoken token=<token>``.

Low-level ``get_*`` methods never raise for HTTP or transport failures;
they return a WorkspaceClientResponse. ``fetch_*`` methods raise
FetchError / ResourceNotFoundError for the loader.

Exports:
    WorkspaceClient: httpx-based repository client
    WorkspaceClientResponse: Response wrapper for low-level calls
"""

import asyncio
from dataclasses import dataclass
from typing import Any, List, Optional
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from config import ServerConfig, get_config
from config.defaults import ServerDefaults
from exceptions import FetchError, ResourceNotFoundError
from core.models import WorkspaceDetail, WorkspaceParameter, WorkspaceSummary
from util_logger import LoggerFactory, ComponentType

RETRYABLE_STATUS_CODES = frozenset({0, 408, 429, 500, 502, 503, 504})


@dataclass
class WorkspaceClientResponse:
    """Response wrapper for repository API calls."""
    success: bool
    status_code: int
    data: Any = None
    error: Optional[str] = None

    @property
    def retryable(self) -> bool:
        return self.status_code in RETRYABLE_STATUS_CODES


def _unwrap_items(data: Any) -> List[Any]:
    """Listing payloads come as a bare list or as ``{"items": [...]}``."""
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        for key in ("items", "parameters", "data"):
            if isinstance(data.get(key), list):
                return data[key]
    return []


class WorkspaceClient:
    """
    Repository API client.

    Usage:
        client = WorkspaceClient()
        workspaces = await client.fetch_workspace_list()
        detail = await client.fetch_parameters("clip.fmw")
        await client.close()

    Args:
        server_config: Server settings (defaults to the global config)
        client: Pre-built httpx.AsyncClient (tests pass one with a MockTransport)
    """

    def __init__(
        self,
        server_config: Optional[ServerConfig] = None,
        client: Optional[httpx.AsyncClient] = None
    ):
        self.config = (server_config or get_config().server).require_complete()
        self.base_url = f"{self.config.server_url}{self.config.api_base_path}"
        self.timeout = self.config.request_timeout_seconds
        self._client = client
        self.logger = LoggerFactory.create_logger(ComponentType.ADAPTER, "WorkspaceClient")

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create async HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                follow_redirects=True
            )
        return self._client

    async def close(self):
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    async def __aenter__(self) -> "WorkspaceClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    def _headers(self) -> dict:
        return {
            "Authorization": f"{ServerDefaults.AUTH_SCHEME} token={self.config.token}",
            "Accept": "application/json",
        }

    def _repository_url(self, repository: Optional[str]) -> str:
        return f"{self.base_url}/repositories/{quote(repository or self.config.repository, safe='')}"

    # ------------------------------------------------------------------
    # Low-level calls
    # ------------------------------------------------------------------

    async def _get(self, url: str, params: Optional[dict] = None, what: str = "resource") -> WorkspaceClientResponse:
        client = await self._get_client()
        try:
            response = await client.get(url, params=params, headers=self._headers())

            if response.status_code == 404:
                return WorkspaceClientResponse(
                    success=False,
                    status_code=404,
                    error=f"{what} not found"
                )

            if response.status_code >= 400:
                return WorkspaceClientResponse(
                    success=False,
                    status_code=response.status_code,
                    error=response.text[:500]
                )

            return WorkspaceClientResponse(
                success=True,
                status_code=response.status_code,
                data=response.json()
            )

        except httpx.TimeoutException:
            return WorkspaceClientResponse(
                success=False,
                status_code=504,
                error=f"Server timeout after {self.timeout}s"
            )
        except httpx.RequestError as e:
            return WorkspaceClientResponse(
                success=False,
                status_code=0,
                error=f"Request error: {str(e)}"
            )
        except ValueError as e:
            return WorkspaceClientResponse(
                success=False,
                status_code=502,
                error=f"Malformed response body: {str(e)}"
            )

    async def get_repository_items(self, repository: Optional[str] = None) -> WorkspaceClientResponse:
        """
        List the workspace items of a repository.

        Args:
            repository: Repository name (defaults to the configured one)

        Returns:
            WorkspaceClientResponse with the raw item list as ``data``
        """
        url = f"{self._repository_url(repository)}/items"
        response = await self._get(url, params={"type": ServerDefaults.WORKSPACE_ITEM_TYPE}, what="Repository")
        if response.success:
            response.data = _unwrap_items(response.data)
        return response

    async def get_workspace_item(self, workspace: str, repository: Optional[str] = None) -> WorkspaceClientResponse:
        url = f"{self._repository_url(repository)}/items/{quote(workspace, safe='')}"
        return await self._get(url, what=f"Workspace {workspace}")

    async def get_workspace_parameters(
        self,
        workspace: str,
        repository: Optional[str] = None
    ) -> WorkspaceClientResponse:
        url = f"{self._repository_url(repository)}/items/{quote(workspace, safe='')}/parameters"
        response = await self._get(url, what=f"Parameters of {workspace}")
        if response.success:
            response.data = _unwrap_items(response.data)
        return response

    # ------------------------------------------------------------------
    # Loader-facing calls
    # ------------------------------------------------------------------

    @staticmethod
    def _raise_for(response: WorkspaceClientResponse, code: str) -> None:
        if response.status_code == 404:
            raise ResourceNotFoundError(response.error or "Not found")
        raise FetchError(
            response.error or "Request failed",
            code=code,
            status_code=response.status_code,
            retryable=response.retryable,
        )

    async def fetch_workspace_list(self, repository: Optional[str] = None) -> List[WorkspaceSummary]:
        """
        Workspaces of a repository, in server order.

        Raises:
            ResourceNotFoundError: Repository does not exist
            FetchError: Any other failure
        """
        response = await self.get_repository_items(repository)
        if not response.success:
            self.logger.warning(
                f"Workspace list request failed ({response.status_code})",
                extra={'custom_dimensions': {'repository': repository or self.config.repository}}
            )
            self._raise_for(response, "WORKSPACE_LIST_ERROR")

        summaries = []
        for raw in response.data:
            try:
                summaries.append(WorkspaceSummary.model_validate(raw))
            except ValidationError:
                self.logger.warning("Dropped malformed repository item")
        return summaries

    async def fetch_parameters(self, workspace: str, repository: Optional[str] = None) -> WorkspaceDetail:
        """
        Workspace item and its published parameters.

        Item and parameters are requested concurrently. A failed item
        request fails the call; a failed parameter request yields an empty
        parameter list.

        Raises:
            ResourceNotFoundError: Workspace does not exist
            FetchError: Item request failed
        """
        item_result, params_result = await asyncio.gather(
            self.get_workspace_item(workspace, repository),
            self.get_workspace_parameters(workspace, repository),
            return_exceptions=True,
        )

        if isinstance(item_result, BaseException):
            raise item_result
        if not item_result.success:
            self.logger.warning(
                f"Workspace item request failed ({item_result.status_code})",
                extra={'custom_dimensions': {'workspace': workspace}}
            )
            self._raise_for(item_result, "WORKSPACE_ITEM_ERROR")

        if isinstance(params_result, asyncio.CancelledError):
            raise params_result
        parameters: List[WorkspaceParameter] = []
        if isinstance(params_result, BaseException) or not params_result.success:
            self.logger.warning(
                "Parameter request failed, continuing without parameters",
                extra={'custom_dimensions': {'workspace': workspace}}
            )
        else:
            for raw in params_result.data:
                try:
                    parameters.append(WorkspaceParameter.model_validate(raw))
                except ValidationError:
                    self.logger.warning("Dropped malformed parameter descriptor")

        item = item_result.data if isinstance(item_result.data, dict) else {}
        return WorkspaceDetail(item=item, parameters=parameters)
