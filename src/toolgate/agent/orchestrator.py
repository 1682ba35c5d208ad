"""
Resolves tool calls waiting on a human decision.

When the model calls a confirm-required tool, the UI shows the call to the user and writes the
answer, ``"yes"`` or ``"no"``, into the invocation's ``result`` with ``state="result"``.  Before the
next assistant turn is generated, :func:`process_tool_calls` runs over the last message:

* ``"no"`` becomes a rejection message and the tool never runs.
* ``"yes"`` runs the approved executor from the :class:`~toolgate.tools.ConfirmationTable` and
  stores whatever it returns, or an error string if it fails.

Each resolved call is also written to the output sink as a ``tool_result`` event so a live
transcript can update immediately.  Calls are resolved one at a time, in the order they appear.
"""

from __future__ import annotations

import asyncio
import logging
from typing import (
    Any,
    Dict,
    List,
    Optional,
    Protocol,
    Sequence,
    Set,
)

from toolgate.agent.tool_executor import (
    ToolExecutionError,
    invoke,
)
from toolgate.core.context import ToolContext
from toolgate.core.schema import (
    Decision,
    Message,
    MessagePart,
    ToolInvocation,
    ToolInvocationPart,
)
from toolgate.tools import (
    ConfirmationTable,
    ToolRegistry,
)

logger = logging.getLogger(__name__)

DENIED_RESULT = "Error: User denied access to tool execution"


class OutputSink(Protocol):
    """Append-only channel receiving tool-result events."""

    def write(self, event: Dict[str, Any]) -> None: ...


class EventBuffer:
    """Sink that keeps every event in a list."""

    def __init__(self) -> None:
        self.events: List[Dict[str, Any]] = []

    def write(self, event: Dict[str, Any]) -> None:
        self.events.append(event)


class QueueSink:
    """Sink that hands events to an :class:`asyncio.Queue` for live streaming."""

    def __init__(self, queue: Optional[asyncio.Queue] = None) -> None:
        self.queue: asyncio.Queue = queue if queue is not None else asyncio.Queue()

    def write(self, event: Dict[str, Any]) -> None:
        self.queue.put_nowait(event)


def is_pending_confirmation(part: MessagePart) -> bool:
    """True if *part* is a tool call carrying an unprocessed ``yes``/``no`` answer."""
    return isinstance(part, ToolInvocationPart) and part.tool_invocation.decision is not None


async def _resolve(
    invocation: ToolInvocation,
    registry: ToolRegistry,
    executions: ConfirmationTable,
    context: ToolContext,
) -> Any:
    name = invocation.tool_name
    definition = registry.lookup(name)
    if definition is None:
        logger.warning("Confirmation for unknown tool '%s'", name)
        return f"Error: Tool '{name}' is not registered."

    if invocation.decision is Decision.NO:
        logger.info("User denied tool '%s' (%s)", name, invocation.tool_call_id)
        return DENIED_RESULT

    executor = executions.lookup(name)
    if executor is None:
        logger.error("No approved executor for tool '%s'", name)
        return f"Error: No execute function found on tool '{name}'"

    try:
        result = await invoke(definition, executor, invocation.args, context)
    except ToolExecutionError as exc:
        return f"Error: {exc}"

    logger.info("User approved tool '%s' (%s)", name, invocation.tool_call_id)
    return result


async def process_tool_calls(
    messages: Sequence[Message],
    registry: ToolRegistry,
    executions: ConfirmationTable,
    sink: OutputSink,
    context: Optional[ToolContext] = None,
) -> List[Message]:
    """
    Resolve pending confirmations in the last message of *messages*.

    Parameters
    ----------
    messages:
        The conversation so far.  Neither the sequence nor its messages are modified.
    registry, executions:
        Tool definitions and the executors for confirm-required tools.
    sink:
        Receives one ``{"type": "tool_result", "toolCallId": ..., "result": ...}`` event per
        resolved call, in order.
    context:
        Session state passed to each executor.

    Returns
    -------
    list[Message]
        The earlier messages as they were, followed by a copy of the last message whose pending
        calls now carry their results.  If nothing was pending, the input messages are returned
        as they are.
    """
    if not messages or not messages[-1].parts:
        return list(messages)

    last = messages[-1]
    if not any(is_pending_confirmation(part) for part in last.parts):
        return list(messages)

    context = context or ToolContext()
    updated = last.model_copy(deep=True)
    seen: Set[str] = set()

    for part in updated.parts:
        if not is_pending_confirmation(part):
            continue
        invocation = part.tool_invocation  # type: ignore[union-attr]

        if invocation.tool_call_id in seen:
            logger.warning("Duplicate tool call id '%s'", invocation.tool_call_id)
            invocation.result = f"Error: Duplicate tool call id '{invocation.tool_call_id}'"
        else:
            seen.add(invocation.tool_call_id)
            invocation.result = await _resolve(invocation, registry, executions, context)

        # Left unencoded for the transport to serialize
        sink.write(
            {
                "type": "tool_result",
                "toolCallId": invocation.tool_call_id,
                "result": invocation.result,
            }
        )

    return [*messages[:-1], updated]

