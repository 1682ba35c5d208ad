"""Per-invocation context handed to every tool executor."""

from dataclasses import dataclass
from datetime import datetime
from typing import (
    Any,
    List,
    Optional,
    Protocol,
    Union,
)

from toolgate.core.schema import ScheduledTask

ScheduleWhen = Union[datetime, int, str]
"""A concrete schedule target: a date, a delay in seconds or a cron expression."""


class MissingAgentError(RuntimeError):
    """Raised when a tool that needs the scheduling agent runs without one."""


class SchedulingAgent(Protocol):
    """The scheduling collaborator a session exposes to its tools."""

    async def schedule(self, when: ScheduleWhen, callback: str, description: str) -> Any:
        """Schedule *callback* to run at *when*."""

    async def get_schedules(self) -> List[ScheduledTask]:
        """Return every task currently scheduled."""

    async def cancel_schedule(self, task_id: str) -> bool:
        """Cancel the task identified by *task_id*."""


@dataclass
class ToolContext:
    """Session state a tool may read while it runs."""

    session_id: str = "default"
    agent: Optional[SchedulingAgent] = None

    def require_agent(self) -> SchedulingAgent:
        """Return the scheduling agent or fail loudly when there is none."""
        if self.agent is None:
            raise MissingAgentError(f"No agent found for session '{self.session_id}'")
        return self.agent
