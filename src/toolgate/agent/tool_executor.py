"""Validates arguments, invokes a tool executor and wraps its errors."""

import logging
from typing import (
    Any,
    Mapping,
)

from pydantic import ValidationError

from toolgate.core.context import (
    MissingAgentError,
    ToolContext,
)
from toolgate.tools import (
    TOOL_REGISTRY,
    AutoTool,
    ToolDefinition,
    ToolFn,
    ToolRegistry,
)

logger = logging.getLogger(__name__)


class ToolExecutionError(RuntimeError):
    """Raised when a requested tool cannot run or fails."""


class ToolNotFoundError(ToolExecutionError):
    """Raised when the requested tool is not registered."""


class ConfirmationRequiredError(ToolExecutionError):
    """Raised when a confirm-required tool is run without a human decision."""


async def invoke(
    definition: ToolDefinition,
    executor: ToolFn,
    args: Mapping[str, Any] | None,
    context: ToolContext,
) -> Any:
    """
    Validate *args* against the tool's parameter model and await *executor*.

    Parameters
    ----------
    definition:
        The registered tool; its ``parameters`` model validates *args*.
    executor:
        The coroutine function to run.  It receives the validated fields as keyword arguments
        plus ``context=``.
    args:
        Raw arguments as sent by the model.  If *None*, an empty dict is assumed.
    context:
        Session state handed to the executor.

    Returns
    -------
    Any
        Whatever the executor returns.

    Raises
    ------
    ToolExecutionError
        If the arguments do not validate or the executor raises.
    MissingAgentError
        Propagated untouched: a tool that needs an agent ran without one.
    """
    name = definition.name
    if args is None:
        args = {}

    try:
        params = definition.parameters.model_validate(args)
    except ValidationError as exc:
        logger.warning("Invalid arguments for tool '%s': %s", name, exc)
        raise ToolExecutionError(f"Invalid arguments for tool '{name}': {exc}") from exc

    kwargs = dict(params)  # shallow, nested models stay models
    try:
        logger.debug("Executing tool '%s' with args=%s", name, args)
        return await executor(**kwargs, context=context)
    except MissingAgentError:
        raise
    except TypeError as exc:
        # Signature mismatch between the parameter model and the executor.
        logger.exception("Argument error while executing tool '%s'", name)
        raise ToolExecutionError(f"Invalid arguments for tool '{name}': {exc}") from exc
    except Exception as exc:  # noqa: BLE001
        logger.exception("Unhandled error in tool '%s'", name)
        raise ToolExecutionError(f"Tool '{name}' raised an error: {exc}") from exc


async def execute_tool(
    name: str,
    args: Mapping[str, Any] | None = None,
    registry: ToolRegistry | None = None,
    context: ToolContext | None = None,
) -> Any:
    """
    Run the auto-executing tool *name*.

    Raises
    ------
    ToolNotFoundError
        If the tool is not registered.
    ConfirmationRequiredError
        If the tool needs a human decision first.
    ToolExecutionError
        If the invocation fails.
    """
    registry = registry if registry is not None else TOOL_REGISTRY
    definition = registry.lookup(name)
    if definition is None:
        raise ToolNotFoundError(f"Tool '{name}' is not registered.")
    if not isinstance(definition, AutoTool):
        raise ConfirmationRequiredError(f"Tool '{name}' requires confirmation.")

    return await invoke(definition, definition.executor, args, context or ToolContext())


async def run_auto_tool(
    name: str,
    args: Mapping[str, Any] | None = None,
    registry: ToolRegistry | None = None,
    context: ToolContext | None = None,
) -> Any:
    """Like :func:`execute_tool`, but a failure becomes an error-valued result."""
    try:
        return await execute_tool(name, args, registry, context)
    except ToolExecutionError as exc:
        logger.warning("Auto tool failure: %s", exc)
        return f"Error: {exc}"
