"""
Task scheduling tools.

The model describes *when* a task should run with one of four tagged shapes::

    {"type": "no-schedule"}
    {"type": "scheduled", "date": "2026-10-18T09:00:00Z"}
    {"type": "delayed", "delayInSeconds": 30}
    {"type": "cron", "cron": "0 9 * * 1"}

:func:`normalize_schedule` turns that into a single concrete value, and the session's scheduling
agent does the bookkeeping.  All three tools run without confirmation.
"""

import logging
from datetime import datetime
from typing import (
    Annotated,
    Any,
    List,
    Literal,
    Optional,
    Tuple,
    Union,
)

from pydantic import (
    Field,
    field_validator,
)

from toolgate.core.context import (
    ScheduleWhen,
    ToolContext,
)
from toolgate.core.schema import (
    ScheduledTask,
    WireModel,
)
from toolgate.tools import TOOL_REGISTRY

logger = logging.getLogger(__name__)

SCHEDULE_CALLBACK = "executeTask"
"""Callback the scheduling agent invokes when a task is due."""

INVALID_SCHEDULE_RESULT = "Not a valid schedule input"


class InvalidScheduleError(TypeError):
    """Raised for a schedule value matching none of the known shapes."""


# ---------------------------------------------------------------------------
# Schedule shapes
# ---------------------------------------------------------------------------
class NoSchedule(WireModel):
    type: Literal["no-schedule"] = "no-schedule"


class ScheduledAt(WireModel):
    type: Literal["scheduled"] = "scheduled"
    date: datetime = Field(..., description="When to run the task")


class Delayed(WireModel):
    type: Literal["delayed"] = "delayed"
    delay_in_seconds: int = Field(..., ge=0, description="Seconds to wait before running the task")


class CronSchedule(WireModel):
    type: Literal["cron"] = "cron"
    cron: str = Field(..., description="Five-field cron expression for a recurring task")

    @field_validator("cron")
    @classmethod
    def _five_fields(cls, value: str) -> str:
        value = value.strip()
        if len(value.split()) != 5:
            raise ValueError(f"cron expression must have 5 fields: {value!r}")
        return value


ScheduleRequest = Annotated[
    Union[NoSchedule, ScheduledAt, Delayed, CronSchedule], Field(discriminator="type")
]


class ScheduleTaskArgs(WireModel):
    description: str = Field(..., description="What the task should do")
    when: ScheduleRequest


class CancelTaskArgs(WireModel):
    task_id: str = Field(..., description="The ID of the task to cancel")


def normalize_schedule(when: Any) -> Optional[Tuple[ScheduleWhen, str]]:
    """
    Reduce a schedule request to ``(when, callback)``.

    Returns
    -------
    tuple | None
        The concrete date, delay in seconds or cron expression together with
        :data:`SCHEDULE_CALLBACK`, or *None* for ``no-schedule``.

    Raises
    ------
    InvalidScheduleError
        If *when* is none of the known schedule shapes.
    """
    if isinstance(when, NoSchedule):
        return None
    if isinstance(when, ScheduledAt):
        return when.date, SCHEDULE_CALLBACK
    if isinstance(when, Delayed):
        return when.delay_in_seconds, SCHEDULE_CALLBACK
    if isinstance(when, CronSchedule):
        return when.cron, SCHEDULE_CALLBACK
    raise InvalidScheduleError(f"not a valid schedule input: {when!r}")


# ---------------------------------------------------------------------------
# Tools
# ---------------------------------------------------------------------------
@TOOL_REGISTRY.tool(
    "scheduleTask",
    "A tool to schedule a task to be executed at a later time",
    params=ScheduleTaskArgs,
)
async def schedule_task(description: str, when: Any, *, context: ToolContext) -> str:
    agent = context.require_agent()

    target = normalize_schedule(when)
    if target is None:
        return INVALID_SCHEDULE_RESULT
    value, callback = target

    try:
        await agent.schedule(value, callback, description)
    except Exception as exc:  # pylint: disable=broad-except
        logger.exception("Error scheduling task")
        return f"Error scheduling task: {exc}"

    return f'Task scheduled for type "{when.type}" : {value}'


@TOOL_REGISTRY.tool("getScheduledTasks", "List all tasks that have been scheduled")
async def get_scheduled_tasks(*, context: ToolContext) -> Union[str, List[ScheduledTask]]:
    agent = context.require_agent()

    try:
        tasks = await agent.get_schedules()
    except Exception as exc:  # pylint: disable=broad-except
        logger.exception("Error listing scheduled tasks")
        return f"Error listing scheduled tasks: {exc}"

    if not tasks:
        return "No scheduled tasks found."
    return tasks


@TOOL_REGISTRY.tool(
    "cancelScheduledTask", "Cancel a scheduled task using its ID", params=CancelTaskArgs
)
async def cancel_scheduled_task(task_id: str, *, context: ToolContext) -> str:
    agent = context.require_agent()

    try:
        await agent.cancel_schedule(task_id)
    except Exception as exc:  # pylint: disable=broad-except
        logger.exception("Error canceling scheduled task")
        return f"Error canceling task {task_id}: {exc}"

    return f"Task {task_id} has been successfully canceled."
