"""Tests for the tool registry, confirmation table and toolkit check."""

import logging

import pytest
from pydantic import BaseModel

from toolgate.core.context import ToolContext
from toolgate.tools import (
    AutoTool,
    ConfirmationTable,
    ConfirmTool,
    ToolConfigurationError,
    Toolkit,
    ToolRegistry,
    check_confirmations,
    default_toolkit,
)


class CityArgs(BaseModel):
    city: str


async def _noop(*, context: ToolContext) -> None:
    return None


def test_decorator_registers_auto_tool() -> None:
    """@tool registers an AutoTool and returns the function unchanged."""
    registry = ToolRegistry()

    @registry.tool("ping", "reply pong")
    async def ping(*, context: ToolContext) -> str:
        return "pong"

    definition = registry.lookup("ping")
    assert isinstance(definition, AutoTool)
    assert definition.executor is ping
    assert not definition.requires_confirmation


def test_confirm_tool_has_no_executor() -> None:
    """confirm_tool declares a ConfirmTool flagged for confirmation."""
    registry = ToolRegistry()
    definition = registry.confirm_tool("weather", "weather", params=CityArgs)

    assert isinstance(definition, ConfirmTool)
    assert definition.requires_confirmation
    assert registry.lookup("weather") is definition
    assert registry.lookup("nope") is None


def test_duplicate_names_rejected() -> None:
    """Names are unique in both the registry and the confirmation table."""
    registry = ToolRegistry()
    registry.confirm_tool("weather", "weather")
    with pytest.raises(ValueError, match="already registered"):
        registry.confirm_tool("weather", "again")

    table = ConfirmationTable({"weather": _noop})
    with pytest.raises(ValueError, match="already registered"):
        table.register("weather")


def test_missing_executor_fails_the_toolkit() -> None:
    """A confirm-required tool without an executor is a configuration error."""
    registry = ToolRegistry()
    registry.confirm_tool("weather", "weather")
    registry.confirm_tool("copy", "copy")

    with pytest.raises(ToolConfigurationError, match="copy, weather"):
        Toolkit(registry, ConfirmationTable())

    Toolkit(registry, ConfirmationTable({"weather": _noop, "copy": _noop}))


def test_stray_executor_is_only_a_warning(caplog: pytest.LogCaptureFixture) -> None:
    """Executors without a confirm-required tool are logged, not fatal."""
    registry = ToolRegistry()
    registry.tool("ping", "pong")(_noop)

    with caplog.at_level(logging.WARNING, logger="toolgate.tools"):
        check_confirmations(registry, ConfirmationTable({"ping": _noop, "ghost": _noop}))

    assert "shadows an auto-executing tool" in caplog.text
    assert "no matching tool definition" in caplog.text


def test_schemas_describe_parameters() -> None:
    """schemas() exposes description, JSON schema and the confirmation flag."""
    registry = ToolRegistry()
    registry.confirm_tool("weather", "show the weather", params=CityArgs)

    schema = registry.schemas()["weather"]
    assert schema["description"] == "show the weather"
    assert schema["parameters"]["properties"]["city"]["type"] == "string"
    assert schema["parameters"]["required"] == ["city"]
    assert schema["requires_confirmation"] is True


def test_default_toolkit_is_consistent() -> None:
    """The built-in tools load and every confirm-required one has an executor."""
    toolkit = default_toolkit()

    auto = {d.name for d in toolkit.registry if not d.requires_confirmation}
    confirm = {d.name for d in toolkit.registry if d.requires_confirmation}
    assert confirm == {"getWeatherInformation", "getPersuasiveCopy"}
    assert auto == {"getLocalTime", "scheduleTask", "getScheduledTasks", "cancelScheduledTask"}
    assert set(toolkit.executions.names()) == confirm
