"""In-memory scheduling agent and session store for the HTTP host."""

import logging
import uuid
from datetime import datetime
from typing import (
    Dict,
    List,
    Optional,
)

from toolgate.core.context import (
    ScheduleWhen,
    ToolContext,
)
from toolgate.core.schema import ScheduledTask

logger = logging.getLogger(__name__)


class InMemoryAgent:
    """
    Keeps scheduled tasks in a dict.

    Tasks are only recorded; nothing wakes them up.  A real deployment swaps this for an agent
    backed by durable storage and a timer.
    """

    def __init__(self) -> None:
        self._tasks: Dict[str, ScheduledTask] = {}

    async def schedule(self, when: ScheduleWhen, callback: str, description: str) -> ScheduledTask:
        task_id = uuid.uuid4().hex[:12]
        if isinstance(when, datetime):
            task = ScheduledTask(
                id=task_id, callback=callback, description=description, type="scheduled", time=when
            )
        elif isinstance(when, int):
            task = ScheduledTask(
                id=task_id,
                callback=callback,
                description=description,
                type="delayed",
                delay_in_seconds=when,
            )
        elif isinstance(when, str):
            task = ScheduledTask(
                id=task_id, callback=callback, description=description, type="cron", cron=when
            )
        else:
            raise TypeError(f"Unsupported schedule value: {when!r}")

        self._tasks[task_id] = task
        logger.info("Scheduled task %s (%s) -> %s", task_id, task.type, callback)
        return task

    async def get_schedules(self) -> List[ScheduledTask]:
        return list(self._tasks.values())

    async def cancel_schedule(self, task_id: str) -> bool:
        if self._tasks.pop(task_id, None) is None:
            raise KeyError(f"no task with id '{task_id}'")
        logger.info("Canceled task %s", task_id)
        return True


# Session storage (in-memory for now, could be moved to a database)
sessions: Dict[str, ToolContext] = {}


def get_or_create_session(session_id: Optional[str] = None) -> ToolContext:
    """Get existing session or create a new one."""
    if session_id and session_id in sessions:
        return sessions[session_id]

    new_session_id = session_id or str(uuid.uuid4())
    context = ToolContext(session_id=new_session_id, agent=InMemoryAgent())
    sessions[new_session_id] = context
    return context
