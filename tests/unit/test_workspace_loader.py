"""
Workspace loader tests: ordering, stale-result dropping, errors, retry
and unmount.
"""

import asyncio

import pytest

from config import FormConfig
from exceptions import FetchError, FormValidationError, ResourceNotFoundError
from core.models import LoadStatus, WorkspaceDetail, WorkspaceSummary
from services import FormStateManager, LoadingLatch, WorkspaceLoader, format_load_error
from tests.factories.model_factories import make_workspace_item, make_workspace_parameter


class FakeClient:
    """Stands in for WorkspaceClient; workspaces can be gated or made to fail."""

    def __init__(self, workspaces=None, details=None):
        self.workspaces = workspaces or []
        self.details = details or {}
        self.gates = {}
        self.errors = {}
        self.list_error = None
        self.list_calls = 0
        self.detail_calls = []

    async def fetch_workspace_list(self, repository):
        self.list_calls += 1
        if self.list_error is not None:
            raise self.list_error
        return list(self.workspaces)

    async def fetch_parameters(self, workspace, repository):
        self.detail_calls.append(workspace)
        gate = self.gates.get(workspace)
        if gate is not None:
            await gate.wait()
        if workspace in self.errors:
            raise self.errors[workspace]
        return WorkspaceDetail(item={"name": workspace}, parameters=self.details.get(workspace, []))


def _summary(**kwargs):
    return WorkspaceSummary.model_validate(make_workspace_item(**kwargs))


def _parameters(prefix, count):
    return [make_workspace_parameter(name=f"{prefix}_{i}") for i in range(count)]


@pytest.fixture
def client():
    return FakeClient(details={"w1.fmw": _parameters("w1", 3), "w2.fmw": _parameters("w2", 5)})


@pytest.fixture
def loader_config():
    return FormConfig(load_debounce_ms=10, min_loading_ms=0)


@pytest.fixture
def manager(loader_config):
    return FormStateManager(form_config=loader_config)


@pytest.fixture
def loader(client, manager, loader_config):
    return WorkspaceLoader(
        client,
        form_manager=manager,
        repository="Samples",
        form_config=loader_config,
        latch=LoadingLatch(min_ms=0),
    )


class TestFormatLoadError:
    def test_html_stripped(self):
        message = format_load_error("failedToLoadWorkspaces", "<p>Token <b>expired</b></p>")
        assert message == "failedToLoadWorkspaces: Token expired"

    def test_truncated(self):
        message = format_load_error("key", "x" * 50, max_length=20)
        assert message == "key: " + "x" * 20

    def test_key_only(self):
        assert format_load_error("key", None) == "key"
        assert format_load_error("key", "<br/>") == "key"


class TestWorkspaceList:
    @pytest.mark.asyncio
    async def test_filtered_and_sorted(self, client, loader):
        client.workspaces = [
            _summary(name="b.fmw", title="bravo"),
            _summary(name="x.fmw", title="Other", type="CUSTOM_FORMAT"),
            _summary(name="a.fmw", title="Alpha"),
            _summary(name="c.fmw", title=None),
        ]
        await loader.load_workspaces()

        assert [item.name for item in loader.workspaces] == ["a.fmw", "b.fmw", "c.fmw"]
        assert loader.status is LoadStatus.READY
        assert loader.error is None
        assert not loader.is_loading

    @pytest.mark.asyncio
    async def test_failure_keeps_previous_list(self, client, loader):
        client.workspaces = [_summary(name="a.fmw")]
        await loader.load_workspaces()

        client.list_error = FetchError("<h1>Bad gateway</h1>", status_code=502)
        await loader.load_workspaces()

        assert [item.name for item in loader.workspaces] == ["a.fmw"]
        assert loader.status is LoadStatus.ERROR
        assert loader.error.message == "failedToLoadWorkspaces: Bad gateway"
        assert loader.error.retryable is True

    @pytest.mark.asyncio
    async def test_retry(self, client, loader):
        client.list_error = FetchError("down")
        await loader.load_workspaces()
        assert loader.error is not None

        client.list_error = None
        client.workspaces = [_summary(name="a.fmw")]
        await loader.retry()

        assert loader.error is None
        assert client.list_calls == 2
        assert loader.status is LoadStatus.READY

    @pytest.mark.asyncio
    async def test_debounced_load(self, client, loader):
        loader.schedule_load()
        loader.schedule_load()
        await asyncio.sleep(0.05)
        assert client.list_calls == 1


class TestWorkspaceDetail:
    @pytest.mark.asyncio
    async def test_form_reset_with_parameters(self, loader, manager):
        selected = []
        loader.on_workspace_selected = lambda name, parameters, item: selected.append((name, len(parameters)))

        await loader.load_workspace("w1.fmw")

        assert [field.name for field in manager.fields] == ["w1_0", "w1_1", "w1_2"]
        assert manager.workspace_name == "w1.fmw"
        assert selected == [("w1.fmw", 3)]
        assert loader.workspace_item == {"name": "w1.fmw"}

    @pytest.mark.asyncio
    async def test_switch_clears_previous_fields(self, loader, manager):
        await loader.load_workspace("w1.fmw")
        await loader.load_workspace("w2.fmw")

        names = {field.name for field in manager.fields}
        assert names == {f"w2_{i}" for i in range(5)}
        assert set(manager.values) <= names

    @pytest.mark.asyncio
    async def test_stale_result_dropped(self, client, loader, manager):
        gate = asyncio.Event()
        client.gates["w1.fmw"] = gate

        first = asyncio.ensure_future(loader.load_workspace("w1.fmw"))
        await asyncio.sleep(0)
        await loader.load_workspace("w2.fmw")

        gate.set()
        await first

        assert loader.selected_workspace == "w2.fmw"
        assert [p.name for p in loader.parameters] == [f"w2_{i}" for i in range(5)]
        assert {field.name for field in manager.fields} == {f"w2_{i}" for i in range(5)}
        assert not loader.is_loading

    @pytest.mark.asyncio
    async def test_newer_load_cancels_task(self, client, loader):
        client.gates["w1.fmw"] = asyncio.Event()

        first = loader.start_load_workspace("w1.fmw")
        await asyncio.sleep(0)
        second = loader.start_load_workspace("w2.fmw")
        await second

        assert first.cancelled()
        assert loader.selected_workspace == "w2.fmw"
        assert loader.error is None

    @pytest.mark.asyncio
    async def test_not_found_is_not_retryable(self, client, loader, manager):
        client.errors["gone.fmw"] = ResourceNotFoundError("Workspace gone.fmw not found")
        await loader.load_workspace("gone.fmw")

        assert loader.status is LoadStatus.ERROR
        assert loader.error.retryable is False
        assert loader.error.message.startswith("failedToLoadWorkspaceDetails: ")
        assert manager.fields == []

    @pytest.mark.asyncio
    async def test_no_parameters_skips_callback(self, client, loader, manager):
        client.details["empty.fmw"] = []
        selected = []
        loader.on_workspace_selected = lambda *args: selected.append(args)

        await loader.load_workspace("empty.fmw")

        assert selected == []
        assert manager.fields == []
        assert loader.status is LoadStatus.READY


class TestCancellation:
    @pytest.mark.asyncio
    async def test_cancel_current(self, client, loader):
        client.gates["w1.fmw"] = asyncio.Event()
        task = loader.start_load_workspace("w1.fmw")
        await asyncio.sleep(0)

        loader.cancel_current()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert loader.status is LoadStatus.IDLE
        assert not loader.is_loading

    @pytest.mark.asyncio
    async def test_unmount_drops_in_flight_result(self, client, loader, manager):
        gate = asyncio.Event()
        client.gates["w1.fmw"] = gate
        pending = asyncio.ensure_future(loader.load_workspace("w1.fmw"))
        await asyncio.sleep(0)

        loader.unmount()
        gate.set()
        await pending

        assert loader.parameters == []
        assert manager.fields == []
        assert not loader.is_mounted

    @pytest.mark.asyncio
    async def test_calls_after_unmount_ignored(self, client, loader):
        loader.unmount()
        await loader.load_workspaces()
        loader.schedule_load()
        assert client.list_calls == 0

    @pytest.mark.asyncio
    async def test_list_reload_keeps_in_flight_detail(self, client, loader, manager):
        gate = asyncio.Event()
        client.gates["w1.fmw"] = gate
        client.workspaces = [_summary(name="w1.fmw")]

        detail = loader.start_load_workspace("w1.fmw")
        await asyncio.sleep(0)
        await loader.load_workspaces()

        assert loader.is_loading
        assert loader.status is LoadStatus.LOADING

        gate.set()
        await detail

        assert not detail.cancelled()
        assert [item.name for item in loader.workspaces] == ["w1.fmw"]
        assert [field.name for field in manager.fields] == ["w1_0", "w1_1", "w1_2"]
        assert loader.status is LoadStatus.READY
        assert loader.error is None

    @pytest.mark.asyncio
    async def test_debounced_list_reload_keeps_in_flight_detail(self, client, loader, manager):
        gate = asyncio.Event()
        client.gates["w1.fmw"] = gate

        detail = loader.start_load_workspace("w1.fmw")
        await asyncio.sleep(0)
        loader.schedule_load()
        await asyncio.sleep(0.05)
        assert client.list_calls == 1

        gate.set()
        await detail

        assert len(manager.fields) == 3

    @pytest.mark.asyncio
    async def test_network_error_becomes_error_state(self, client, loader, manager):
        client.errors["w1.fmw"] = ConnectionError("socket closed")
        await loader.load_workspace("w1.fmw")

        assert loader.status is LoadStatus.ERROR
        assert loader.error.message == "failedToLoadWorkspaceDetails: socket closed"
        assert loader.error.retryable is True
        assert manager.fields == []
        assert not loader.is_loading

    @pytest.mark.asyncio
    async def test_list_os_error_becomes_error_state(self, client, loader):
        client.list_error = OSError("network unreachable")
        await loader.load_workspaces()

        assert loader.error.code == "failedToLoadWorkspaces"
        assert loader.status is LoadStatus.ERROR

    @pytest.mark.asyncio
    async def test_list_success_keeps_detail_error(self, client, loader):
        client.errors["w1.fmw"] = FetchError("down")
        await loader.load_workspace("w1.fmw")
        await loader.load_workspaces()

        assert loader.error.code == "failedToLoadWorkspaceDetails"
        assert loader.status is LoadStatus.ERROR


class TestErrorPrecedence:
    def _blocked_submit(self, manager):
        manager.initialize([make_workspace_parameter(name="title", optional=False)], workspace_name="w1.fmw")
        with pytest.raises(FormValidationError):
            manager.submit(lambda payload: None)

    def test_no_error(self, loader):
        assert loader.top_level_error() is None

    def test_form_error_when_no_fetch_error(self, loader, manager):
        self._blocked_submit(manager)
        assert loader.top_level_error() == "formValidationSingleError"

    @pytest.mark.asyncio
    async def test_fetch_error_wins_over_form_error(self, client, loader, manager):
        self._blocked_submit(manager)
        client.list_error = FetchError("down")
        await loader.load_workspaces()

        assert loader.top_level_error() == "failedToLoadWorkspaces: down"
        assert manager.errors  # field codes still available

    def test_successful_submit_clears_form_error(self, loader, manager):
        self._blocked_submit(manager)
        manager.update_field("title", "Report")
        manager.submit(lambda payload: None)
        assert loader.top_level_error() is None
