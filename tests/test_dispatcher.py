"""
Tests for the request dispatcher.

Tests cover:
- Operation routing (pack vs. pack-estimate) and unknown names
- Argument validation
- Access guard short-circuit and the remote bypass
"""
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from repomix_mcp.core.config import Settings
from repomix_mcp.core.dispatcher import (
    Dispatcher,
    access_denied_message,
    parse_request,
    resolve_operation,
)
from repomix_mcp.core.errors import InvalidArgumentsError, UnknownOperationError
from repomix_mcp.core.models import Operation, PackRequest, PackResult


@pytest.fixture
def runner() -> AsyncMock:
    mock = AsyncMock()
    mock.run.return_value = PackResult("ok")
    return mock


@pytest.fixture
def dispatcher(settings: Settings, runner: AsyncMock) -> Dispatcher:
    return Dispatcher(settings, runner=runner)


class TestOperations:
    """Resolving tool names."""

    def test_known_names(self) -> None:
        assert resolve_operation("pack") is Operation.PACK
        assert resolve_operation("pack-estimate") is Operation.PACK_ESTIMATE

    def test_estimate_flag(self) -> None:
        assert Operation.PACK_ESTIMATE.is_estimate
        assert not Operation.PACK.is_estimate

    @pytest.mark.parametrize("name", ["repomix", "PACK", "pack_estimate", ""])
    def test_unknown_name_raises(self, name: str) -> None:
        with pytest.raises(UnknownOperationError, match="Unknown tool"):
            resolve_operation(name)

    @pytest.mark.asyncio
    async def test_dispatch_unknown_name_never_runs(
        self, dispatcher: Dispatcher, runner: AsyncMock
    ) -> None:
        with pytest.raises(UnknownOperationError) as excinfo:
            await dispatcher.dispatch("delete-everything", {"path": "."})
        assert excinfo.value.name == "delete-everything"
        runner.run.assert_not_called()

    @pytest.mark.asyncio
    async def test_pack_routes_to_retrieve(self, dispatcher: Dispatcher, runner: AsyncMock) -> None:
        result = await dispatcher.dispatch("pack", {"path": "."})
        assert result == PackResult("ok")
        runner.run.assert_awaited_once_with(PackRequest(path="."), estimate=False)

    @pytest.mark.asyncio
    async def test_estimate_routes_to_estimate(
        self, dispatcher: Dispatcher, runner: AsyncMock
    ) -> None:
        await dispatcher.dispatch(Operation.PACK_ESTIMATE, {"compress": True})
        runner.run.assert_awaited_once_with(PackRequest(compress=True), estimate=True)


class TestValidation:
    """Schema conformance of tool arguments."""

    def test_none_means_no_arguments(self) -> None:
        assert parse_request(None) == PackRequest()

    def test_unknown_keys_are_dropped(self) -> None:
        assert parse_request({"path": ".", "verbose": True}) == PackRequest(path=".")

    @pytest.mark.parametrize(
        "arguments",
        [
            {"style": "html"},
            {"style": 3},
            {"compress": "sometimes"},
            {"compress": "yes"},
            {"compress": "true"},
            {"compress": "on"},
            {"compress": 1},
            {"compress": 0.0},
            {"path": ["a", "b"]},
            {"include": {"glob": "*.py"}},
        ],
    )
    def test_bad_arguments_raise(self, arguments: dict) -> None:
        with pytest.raises(InvalidArgumentsError):
            parse_request(arguments)

    @pytest.mark.parametrize("value", [True, False])
    def test_real_booleans_accepted(self, value: bool) -> None:
        assert parse_request({"compress": value}).compress is value

    @pytest.mark.parametrize("style", ["xml", "markdown", "plain"])
    def test_every_style_accepted(self, style: str) -> None:
        assert parse_request({"style": style}).style == style

    @pytest.mark.asyncio
    async def test_dispatch_bad_arguments_never_runs(
        self, dispatcher: Dispatcher, runner: AsyncMock
    ) -> None:
        with pytest.raises(InvalidArgumentsError):
            await dispatcher.dispatch("pack", {"style": "yaml"})
        runner.run.assert_not_called()


class TestAccessCheck:
    """Local path confinement before anything runs."""

    @pytest.mark.asyncio
    async def test_inside_path_runs(self, dispatcher: Dispatcher, runner: AsyncMock) -> None:
        result = await dispatcher.dispatch("pack", {"path": "src"})
        assert not result.is_error
        runner.run.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_outside_path_is_denied(
        self, dispatcher: Dispatcher, runner: AsyncMock, outside: Path, project: Path
    ) -> None:
        result = await dispatcher.dispatch("pack", {"path": str(outside)})

        assert result.is_error
        assert result.text == (
            f'Access denied: Path "{outside}" is outside the allowed directory ({project})'
        )
        runner.run.assert_not_called()

    @pytest.mark.asyncio
    async def test_reference_message(self, fake_command, runner: AsyncMock) -> None:
        settings = Settings(allowed_directory=Path("/home/user/project"), command=fake_command)
        result = await Dispatcher(settings, runner=runner).dispatch("pack", {"path": "/etc"})

        assert result == PackResult.error(
            'Access denied: Path "/etc" is outside the allowed directory (/home/user/project)'
        )

    @pytest.mark.asyncio
    async def test_denial_applies_to_estimate_too(
        self, dispatcher: Dispatcher, runner: AsyncMock
    ) -> None:
        result = await dispatcher.dispatch("pack-estimate", {"path": "../outside"})
        assert result.is_error
        assert result.text.startswith("Access denied:")
        runner.run.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_path_is_denied(self, dispatcher: Dispatcher, runner: AsyncMock) -> None:
        result = await dispatcher.dispatch("pack", {"path": "no/such/dir"})
        assert result.is_error
        runner.run.assert_not_called()

    @pytest.mark.asyncio
    async def test_remote_skips_guard(
        self, dispatcher: Dispatcher, runner: AsyncMock, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        calls = []
        monkeypatch.setattr(
            "repomix_mcp.core.dispatcher.is_path_allowed",
            lambda *args: calls.append(args) or False,
        )
        result = await dispatcher.dispatch(
            "pack", {"path": "/etc", "remote": "https://github.com/yamadashy/repomix"}
        )

        assert not result.is_error
        assert calls == []
        runner.run.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_no_path_skips_guard(self, dispatcher: Dispatcher, runner: AsyncMock) -> None:
        result = await dispatcher.dispatch("pack", {})
        assert not result.is_error
        runner.run.assert_awaited_once()

    def test_message_format(self) -> None:
        assert access_denied_message("x", "/b") == (
            'Access denied: Path "x" is outside the allowed directory (/b)'
        )


class TestEndToEnd:
    """Dispatcher wired to the real runner and the fake tool."""

    @pytest.mark.asyncio
    async def test_pack_dot(
        self, settings: Settings, recorder, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("FAKE_REPOMIX_CONTENT", "full packed text")
        result = await Dispatcher(settings).dispatch("pack", {"path": "."})

        assert result == PackResult("full packed text")
        assert not recorder.output_path.exists()

    @pytest.mark.asyncio
    async def test_denied_request_never_spawns(self, settings: Settings, recorder) -> None:
        result = await Dispatcher(settings).dispatch("pack", {"path": ".."})
        assert result.is_error
        assert not recorder.path.exists()

    @pytest.mark.asyncio
    async def test_nul_in_remote_request_path_is_error_result(self, settings: Settings) -> None:
        result = await Dispatcher(settings).dispatch(
            "pack", {"path": "x\0y", "remote": "o/r"}
        )
        assert result.is_error
        assert result.text.startswith("Error executing repomix:")
