"""Tests for the schedule normalizer and the scheduling tools."""

from datetime import (
    datetime,
    timezone,
)
from unittest.mock import AsyncMock

import pytest

from toolgate.agent.session import InMemoryAgent
from toolgate.agent.tool_executor import (
    ToolExecutionError,
    execute_tool,
)
from toolgate.core.context import (
    MissingAgentError,
    ToolContext,
)
from toolgate.tools import default_toolkit
from toolgate.tools.scheduling import (
    INVALID_SCHEDULE_RESULT,
    SCHEDULE_CALLBACK,
    CronSchedule,
    Delayed,
    InvalidScheduleError,
    NoSchedule,
    ScheduledAt,
    normalize_schedule,
)

registry = default_toolkit().registry


def test_normalize_each_shape() -> None:
    """Each schedule shape maps to its embedded value and the fixed callback."""
    when = datetime(2026, 10, 18, 9, 0, tzinfo=timezone.utc)

    assert normalize_schedule(ScheduledAt(date=when)) == (when, SCHEDULE_CALLBACK)
    assert normalize_schedule(Delayed(delay_in_seconds=30)) == (30, SCHEDULE_CALLBACK)
    assert normalize_schedule(CronSchedule(cron="0 9 * * 1")) == ("0 9 * * 1", SCHEDULE_CALLBACK)
    assert normalize_schedule(NoSchedule()) is None


def test_normalize_rejects_unknown_shapes() -> None:
    """Anything else is a programming error."""
    with pytest.raises(InvalidScheduleError):
        normalize_schedule({"type": "sometime"})


def test_cron_needs_five_fields() -> None:
    """Cron expressions are checked when the arguments are parsed."""
    with pytest.raises(ValueError):
        CronSchedule(cron="every monday")


@pytest.mark.asyncio
async def test_delayed_schedule_calls_agent() -> None:
    """A 30 second delay is handed to the agent with the fixed callback."""
    agent = AsyncMock()
    context = ToolContext(agent=agent)

    result = await execute_tool(
        "scheduleTask",
        {"description": "water the plants", "when": {"type": "delayed", "delayInSeconds": 30}},
        registry,
        context,
    )

    agent.schedule.assert_awaited_once_with(30, SCHEDULE_CALLBACK, "water the plants")
    assert result == 'Task scheduled for type "delayed" : 30'


@pytest.mark.asyncio
async def test_no_schedule_skips_agent() -> None:
    """no-schedule returns the fixed message without touching the agent."""
    agent = AsyncMock()

    result = await execute_tool(
        "scheduleTask",
        {"description": "x", "when": {"type": "no-schedule"}},
        registry,
        ToolContext(agent=agent),
    )

    assert result == INVALID_SCHEDULE_RESULT
    agent.schedule.assert_not_awaited()


@pytest.mark.asyncio
async def test_unknown_tag_is_rejected() -> None:
    """An unrecognised schedule tag never reaches the agent."""
    agent = AsyncMock()

    with pytest.raises(ToolExecutionError, match="Invalid arguments"):
        await execute_tool(
            "scheduleTask",
            {"description": "x", "when": {"type": "sometime"}},
            registry,
            ToolContext(agent=agent),
        )
    agent.schedule.assert_not_awaited()


@pytest.mark.asyncio
async def test_agent_failure_becomes_result() -> None:
    """Scheduling failures are reported, not raised."""
    agent = AsyncMock()
    agent.schedule.side_effect = RuntimeError("storage offline")

    result = await execute_tool(
        "scheduleTask",
        {"description": "x", "when": {"type": "cron", "cron": "0 9 * * 1"}},
        registry,
        ToolContext(agent=agent),
    )

    assert result == "Error scheduling task: storage offline"


@pytest.mark.asyncio
async def test_schedule_without_agent_raises() -> None:
    """The scheduling tools cannot run without an agent."""
    with pytest.raises(MissingAgentError):
        await execute_tool(
            "scheduleTask",
            {"description": "x", "when": {"type": "delayed", "delayInSeconds": 5}},
            registry,
            ToolContext(),
        )


@pytest.mark.asyncio
async def test_list_and_cancel_with_in_memory_agent() -> None:
    """Tasks can be listed and canceled through the tools."""
    context = ToolContext(agent=InMemoryAgent())

    assert await execute_tool("getScheduledTasks", {}, registry, context) == (
        "No scheduled tasks found."
    )

    await execute_tool(
        "scheduleTask",
        {"description": "standup", "when": {"type": "cron", "cron": "0 9 * * 1-5"}},
        registry,
        context,
    )
    tasks = await execute_tool("getScheduledTasks", {}, registry, context)
    assert len(tasks) == 1
    assert tasks[0].cron == "0 9 * * 1-5"
    assert tasks[0].callback == SCHEDULE_CALLBACK

    task_id = tasks[0].id
    result = await execute_tool("cancelScheduledTask", {"taskId": task_id}, registry, context)
    assert result == f"Task {task_id} has been successfully canceled."

    result = await execute_tool("cancelScheduledTask", {"taskId": task_id}, registry, context)
    assert result.startswith(f"Error canceling task {task_id}:")


@pytest.mark.asyncio
async def test_listing_failure_becomes_result() -> None:
    """getScheduledTasks reports agent errors as text."""
    agent = AsyncMock()
    agent.get_schedules.side_effect = RuntimeError("db down")

    result = await execute_tool("getScheduledTasks", {}, registry, ToolContext(agent=agent))

    assert result == "Error listing scheduled tasks: db down"
