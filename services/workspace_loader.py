# ============================================================================
# WORKSPACE LOADER
# ============================================================================
# STATUS: Service Layer - Cancellable remote loads
# PURPOSE: Load workspace lists and details into the form with per-resource tokens
# LAST_REVIEWED: 19 OCT 2026
# EXPORTS: WorkspaceLoader, RequestToken, LoaderError, format_load_error
# DEPENDENCIES: asyncio, services.form_state_manager
# ============================================================================
"""
Workspace Loader - Cancellable Remote Loads.

Loads the workspace list of a repository and the parameters of a chosen
workspace, and feeds the parameters into a FormStateManager.

Every load takes a fresh RequestToken and cancels the previous load of
the same resource (workspace list or workspace detail). A result is
applied only when its token is still current, not cancelled, and the
loader is still mounted; stale results are dropped silently.
Cancellation is never an error.

Any fetch failure becomes a LoaderError state. The previous workspace list
or detail stays in place.

Exports:
    RequestToken: Per-request cancellation handle
    LoaderError: Loader error state
    WorkspaceLoader: Load orchestration
    format_load_error: "{message_key}: {detail}" with HTML stripped
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

from config import FormConfig, get_config
from config.defaults import FormDefaults, ServerDefaults
from exceptions import FetchError
from core.models import LoadStatus, WorkspaceParameter, WorkspaceSummary
from core.logic import strip_html_to_text
from util_logger import LoggerFactory, ComponentType
from .form_state_manager import FormStateManager
from .loading_latch import LoadingLatch

LIST_RESOURCE = "workspace-list"
DETAIL_RESOURCE = "workspace-detail"
RESOURCES = (LIST_RESOURCE, DETAIL_RESOURCE)

WorkspaceSelectedCallback = Callable[[str, List[WorkspaceParameter], Dict[str, Any]], None]


@dataclass
class RequestToken:
    """Cancellation handle for one load; ``generation`` increases per load."""
    generation: int
    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True


@dataclass
class LoaderError:
    """Error state shown in place of the workspace list or form."""
    code: str
    message: str
    retryable: bool = True


def format_load_error(
    message_key: str,
    error: Any,
    max_length: int = FormDefaults.ERROR_MESSAGE_MAX_LENGTH
) -> str:
    """
    Build a load error message.

    Args:
        message_key: Translation key of the failed operation
        error: Exception or text carrying the detail (HTML allowed)
        max_length: Detail is truncated to this many characters

    Returns:
        ``"{message_key}: {detail}"``, or the key alone when there is no detail
    """
    detail = strip_html_to_text(str(error) if error is not None else "")
    if len(detail) > max_length:
        detail = detail[:max_length]
    return f"{message_key}: {detail}" if detail else message_key


class WorkspaceLoader:
    """
    Loads workspaces and their parameters.

    The workspace list and the workspace detail are separate resources.
    Each has its own token, task and latch flag, so a newer load only
    discards an older load of the same resource.

    Args:
        client: Object with ``fetch_workspace_list(repository)`` and
            ``fetch_parameters(workspace, repository)`` coroutines
        form_manager: Form to reset when a workspace is selected
        repository: Repository name (defaults to the configured one)
        form_config: Debounce, latch and message settings
        on_workspace_selected: Called with (name, parameters, item) after a
            successful workspace load that has parameters
        latch: Loading latch (one is created when omitted)
    """

    def __init__(
        self,
        client: Any,
        form_manager: Optional[FormStateManager] = None,
        repository: Optional[str] = None,
        form_config: Optional[FormConfig] = None,
        on_workspace_selected: Optional[WorkspaceSelectedCallback] = None,
        latch: Optional[LoadingLatch] = None
    ):
        config = get_config()
        self.client = client
        self.form_manager = form_manager
        self.form_config = form_config or config.form
        self.repository = repository or config.server.repository or ServerDefaults.REPOSITORY
        self.on_workspace_selected = on_workspace_selected
        self.latch = latch or LoadingLatch(self.form_config.min_loading_ms)
        self.logger = LoggerFactory.create_with_context(
            ComponentType.SERVICE, "WorkspaceLoader", repository=self.repository
        )

        self.workspaces: List[WorkspaceSummary] = []
        self.selected_workspace: Optional[str] = None
        self.workspace_item: Dict[str, Any] = {}
        self.parameters: List[WorkspaceParameter] = []
        self.error: Optional[LoaderError] = None
        self.status: LoadStatus = LoadStatus.IDLE

        self._generation = 0
        self._tokens: Dict[str, RequestToken] = {}
        self._tasks: Dict[str, asyncio.Task] = {}
        self._debounce: Optional[asyncio.TimerHandle] = None
        self._mounted = True
        self._last_failed: Optional[Tuple[str, Callable[[], Awaitable[None]]]] = None

    # ------------------------------------------------------------------
    # Token handling
    # ------------------------------------------------------------------

    @property
    def is_loading(self) -> bool:
        return self.latch.is_loading

    @property
    def is_mounted(self) -> bool:
        return self._mounted

    def current_token(self, resource: str) -> Optional[RequestToken]:
        """Token of the latest load of ``resource`` (LIST_RESOURCE or DETAIL_RESOURCE)."""
        return self._tokens.get(resource)

    def _begin(self, resource: str) -> RequestToken:
        self._cancel_token(resource)
        self._cancel_task(resource)
        self._generation += 1
        token = RequestToken(generation=self._generation)
        self._tokens[resource] = token
        self.latch.set_loading(resource, True)
        self.status = LoadStatus.LOADING
        return token

    def _is_current(self, resource: str, token: RequestToken) -> bool:
        return self._tokens.get(resource) is token and not token.cancelled and self._mounted

    def _finish(self, resource: str, token: RequestToken) -> None:
        if self._tokens.get(resource) is token:
            self.latch.set_loading(resource, False)

    def _cancel_token(self, resource: str) -> None:
        token = self._tokens.get(resource)
        if token is not None:
            token.cancel()

    def _cancel_task(self, resource: str) -> None:
        task = self._tasks.get(resource)
        if task is None or task is asyncio.current_task():
            return
        del self._tasks[resource]
        if not task.done():
            task.cancel()

    def _loading_any(self) -> bool:
        return any(self.latch.is_flag_set(resource) for resource in RESOURCES)

    def _succeed(self, code: str) -> None:
        if self.error is not None and self.error.code == code:
            self.error = None
        if self._last_failed is not None and self._last_failed[0] == code:
            self._last_failed = None
        if self._loading_any():
            self.status = LoadStatus.LOADING
        else:
            self.status = LoadStatus.ERROR if self.error is not None else LoadStatus.READY

    def _fail(self, code: str, error: Exception, retry: Callable[[], Awaitable[None]]) -> None:
        retryable = error.retryable if isinstance(error, FetchError) else True
        self.error = LoaderError(
            code=code,
            message=format_load_error(code, error, self.form_config.error_message_max_length),
            retryable=retryable,
        )
        self.status = LoadStatus.ERROR
        self._last_failed = (code, retry)

    # ------------------------------------------------------------------
    # Loads
    # ------------------------------------------------------------------

    async def load_workspaces(self) -> None:
        """
        Load the workspace list.

        Keeps WORKSPACE items, sorted case-insensitively by title, then name.
        On failure the previous list stays and the error is set. An
        in-flight workspace detail load is not affected.
        """
        if not self._mounted:
            return
        token = self._begin(LIST_RESOURCE)
        try:
            items = await self.client.fetch_workspace_list(self.repository)
        except asyncio.CancelledError:
            self.logger.debug("Workspace list load cancelled")
            raise
        except Exception as e:
            if self._is_current(LIST_RESOURCE, token):
                self.logger.warning(f"Failed to load workspaces: {e}")
                self._fail(FormDefaults.WORKSPACES_ERROR_KEY, e, self.load_workspaces)
            return
        finally:
            self._finish(LIST_RESOURCE, token)

        if not self._is_current(LIST_RESOURCE, token):
            self.logger.debug(f"Dropped stale workspace list (generation {token.generation})")
            return

        workspaces = [item for item in items if item.type == ServerDefaults.WORKSPACE_ITEM_TYPE]
        workspaces.sort(key=lambda item: (item.sort_key, item.name.lower()))
        self.workspaces = workspaces
        self._succeed(FormDefaults.WORKSPACES_ERROR_KEY)
        self.logger.info(f"Loaded {len(workspaces)} workspaces")

    async def load_workspace(self, name: str) -> None:
        """
        Load one workspace and reset the bound form with its parameters.

        The form is cleared before the fetch so no field of the previous
        workspace survives the switch.
        """
        if not self._mounted:
            return
        token = self._begin(DETAIL_RESOURCE)
        self.selected_workspace = name
        if self.form_manager is not None:
            self.form_manager.reset_form([], workspace_name=name)

        try:
            detail = await self.client.fetch_parameters(name, self.repository)
        except asyncio.CancelledError:
            self.logger.debug(f"Workspace load cancelled: {name}")
            raise
        except Exception as e:
            if self._is_current(DETAIL_RESOURCE, token):
                self.logger.warning(f"Failed to load workspace {name}: {e}")
                self._fail(FormDefaults.WORKSPACE_DETAILS_ERROR_KEY, e, lambda: self.load_workspace(name))
            return
        finally:
            self._finish(DETAIL_RESOURCE, token)

        if not self._is_current(DETAIL_RESOURCE, token):
            self.logger.debug(f"Dropped stale workspace detail for {name} (generation {token.generation})")
            return

        self.workspace_item = dict(detail.item)
        self.parameters = list(detail.parameters)
        self._succeed(FormDefaults.WORKSPACE_DETAILS_ERROR_KEY)

        if self.parameters:
            if self.on_workspace_selected is not None:
                self.on_workspace_selected(name, self.parameters, self.workspace_item)
            if self.form_manager is not None:
                self.form_manager.reset_form(self.parameters, workspace_name=name)
        self.logger.info(
            f"Loaded workspace {name} with {len(self.parameters)} parameters",
            extra={'custom_dimensions': {'workspace': name}}
        )

    def start_load_workspace(self, name: str) -> asyncio.Task:
        """Run ``load_workspace`` as a task; a later workspace load cancels it."""
        self._cancel_task(DETAIL_RESOURCE)
        task = asyncio.ensure_future(self.load_workspace(name))
        self._tasks[DETAIL_RESOURCE] = task
        return task

    def schedule_load(self) -> None:
        """Load the workspace list after the debounce delay; re-scheduling restarts it."""
        if not self._mounted:
            return
        if self._debounce is not None:
            self._debounce.cancel()
        loop = asyncio.get_running_loop()
        self._debounce = loop.call_later(self.form_config.load_debounce_ms / 1000, self._run_scheduled)

    def _run_scheduled(self) -> None:
        self._debounce = None
        if not self._mounted:
            return
        self._cancel_task(LIST_RESOURCE)
        self._tasks[LIST_RESOURCE] = asyncio.ensure_future(self.load_workspaces())

    def top_level_error(self) -> Optional[str]:
        """
        Message for the single top-level error channel.

        The loader's fetch error comes first. The bound form's blocked-submit
        error is shown only when no fetch error is set. Per-field error codes
        stay on the form manager either way.
        """
        if self.error is not None:
            return self.error.message
        if self.form_manager is not None and self.form_manager.submit_error is not None:
            return self.form_manager.submit_error.message_key
        return None

    async def retry(self) -> None:
        """Re-run the last failed load, if any."""
        if self._last_failed is None or not self._mounted:
            return
        _, rerun = self._last_failed
        await rerun()

    def cancel_current(self) -> None:
        """Cancel every in-flight load and any pending debounced load."""
        if self._debounce is not None:
            self._debounce.cancel()
            self._debounce = None
        for resource in RESOURCES:
            self._cancel_token(resource)
            self._cancel_task(resource)
            self.latch.set_loading(resource, False)
        if self.status is LoadStatus.LOADING:
            self.status = LoadStatus.READY if self.workspaces or self.parameters else LoadStatus.IDLE

    def unmount(self) -> None:
        """Cancel everything; later results and calls no longer change state."""
        self.cancel_current()
        self._mounted = False
        self.latch.reset()
        self.logger.debug("Loader unmounted")
