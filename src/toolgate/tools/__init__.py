"""
Tool registry for Toolgate.

Every tool is declared once in a :class:`ToolRegistry` and is one of two kinds:

* :class:`AutoTool` carries its own executor and runs as soon as the model asks for it.
* :class:`ConfirmTool` only declares a name, a description and a parameter model.  Its executor
  lives in a :class:`ConfirmationTable` and runs after a human answers ``"yes"``.

A :class:`Toolkit` pairs a registry with a confirmation table and refuses to exist unless every
confirm-required tool has an executor, so a missing executor is caught at startup:

    registry = ToolRegistry()

    @registry.tool("getLocalTime", "get the local time", params=LocalTimeArgs)
    async def get_local_time(location: str, *, context: ToolContext) -> str:
        ...

    registry.confirm_tool("getWeatherInformation", "show the weather", params=WeatherArgs)

    executions = ConfirmationTable()

    @executions.register("getWeatherInformation")
    async def get_weather(city: str, *, context: ToolContext) -> str:
        ...

    toolkit = Toolkit(registry, executions)
"""

import logging
from dataclasses import (
    dataclass,
    field,
)
from typing import (
    Any,
    Awaitable,
    Callable,
    ClassVar,
    Dict,
    Iterator,
    List,
    Mapping,
    Optional,
    Type,
    TypedDict,
    Union,
)

from pydantic import BaseModel

logger = logging.getLogger(__name__)

ToolFn = Callable[..., Awaitable[Any]]
"""An async tool body; receives validated keyword args plus ``context=``."""


class ToolConfigurationError(RuntimeError):
    """Raised when confirm-required tools have no matching executor."""


class NoArgs(BaseModel):
    """Parameter model for tools that take no arguments."""


@dataclass(frozen=True)
class AutoTool:
    """A tool that runs without asking the user."""

    name: str
    description: str
    parameters: Type[BaseModel]
    executor: ToolFn

    requires_confirmation: ClassVar[bool] = False


@dataclass(frozen=True)
class ConfirmTool:
    """A tool that waits for a human ``yes``/``no`` before running."""

    name: str
    description: str
    parameters: Type[BaseModel]

    requires_confirmation: ClassVar[bool] = True


ToolDefinition = Union[AutoTool, ConfirmTool]


class ToolSchema(TypedDict):
    """
    What the model is told about a tool.
    """

    description: str
    parameters: Dict[str, Any]
    requires_confirmation: bool


class ToolRegistry:
    """Name -> :data:`ToolDefinition` mapping."""

    def __init__(self) -> None:
        self._tools: Dict[str, ToolDefinition] = {}

    def register(self, definition: ToolDefinition) -> ToolDefinition:
        """
        Add *definition* to the registry.

        Raises
        ------
        ValueError
            If a tool with the same name is already registered.
        """
        if definition.name in self._tools:
            raise ValueError(f"Tool '{definition.name}' is already registered.")
        logger.debug(
            "Registering %s tool '%s'",
            "confirm-required" if definition.requires_confirmation else "auto",
            definition.name,
        )
        self._tools[definition.name] = definition
        return definition

    def tool(
        self, name: str, description: str, params: Type[BaseModel] = NoArgs
    ) -> Callable[[ToolFn], ToolFn]:
        """Decorator registering an auto-executing tool."""

        def wrapper(fn: ToolFn) -> ToolFn:
            self.register(AutoTool(name, description, params, fn))
            return fn

        return wrapper

    def confirm_tool(
        self, name: str, description: str, params: Type[BaseModel] = NoArgs
    ) -> ConfirmTool:
        """Declare a tool that requires human confirmation before it runs."""
        definition = ConfirmTool(name, description, params)
        self.register(definition)
        return definition

    def lookup(self, name: str) -> Optional[ToolDefinition]:
        return self._tools.get(name)

    def names(self) -> List[str]:
        return list(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __iter__(self) -> Iterator[ToolDefinition]:
        return iter(self._tools.values())

    def __len__(self) -> int:
        return len(self._tools)

    def schemas(self) -> Mapping[str, ToolSchema]:
        """Description contract surfaced to the completion endpoint."""
        return {
            definition.name: ToolSchema(
                description=definition.description,
                parameters=definition.parameters.model_json_schema(by_alias=True),
                requires_confirmation=definition.requires_confirmation,
            )
            for definition in self._tools.values()
        }


class ConfirmationTable:
    """Executors for confirm-required tools, keyed by tool name."""

    def __init__(self, executors: Optional[Mapping[str, ToolFn]] = None) -> None:
        self._executors: Dict[str, ToolFn] = dict(executors or {})

    def register(self, name: str) -> Callable[[ToolFn], ToolFn]:
        """
        Decorator adding the approved executor for *name*.

        Raises
        ------
        ValueError
            If an executor is already registered under *name*.
        """
        if name in self._executors:
            raise ValueError(f"Executor for '{name}' is already registered.")

        def wrapper(fn: ToolFn) -> ToolFn:
            self._executors[name] = fn
            return fn

        return wrapper

    def lookup(self, name: str) -> Optional[ToolFn]:
        return self._executors.get(name)

    def names(self) -> List[str]:
        return list(self._executors)

    def __contains__(self, name: object) -> bool:
        return name in self._executors


def check_confirmations(registry: ToolRegistry, executions: ConfirmationTable) -> None:
    """
    Verify that every confirm-required tool in *registry* has an executor.

    Raises
    ------
    ToolConfigurationError
        Listing every confirm-required tool that has no executor.
    """
    missing = [
        definition.name
        for definition in registry
        if definition.requires_confirmation and definition.name not in executions
    ]
    if missing:
        raise ToolConfigurationError(
            f"Confirm-required tools without an executor: {', '.join(sorted(missing))}"
        )

    for name in executions.names():
        definition = registry.lookup(name)
        if definition is None:
            logger.warning("Executor '%s' has no matching tool definition", name)
        elif not definition.requires_confirmation:
            logger.warning("Executor '%s' shadows an auto-executing tool", name)


@dataclass
class Toolkit:
    """A registry and its confirmation table, checked for consistency on creation."""

    registry: ToolRegistry = field(default_factory=ToolRegistry)
    executions: ConfirmationTable = field(default_factory=ConfirmationTable)

    def __post_init__(self) -> None:
        check_confirmations(self.registry, self.executions)


TOOL_REGISTRY = ToolRegistry()
"""Global registry the built-in tools register into."""

EXECUTIONS = ConfirmationTable()
"""Global confirmation table for the built-in confirm-required tools."""


def default_toolkit() -> Toolkit:
    """Load the built-in tools and return the checked global toolkit."""
    # Importing the modules registers their tools.
    # pylint: disable=import-outside-toplevel,unused-import
    from toolgate.tools import (  # noqa: F401
        copywriter,
        local_time,
        scheduling,
        weather,
    )

    return Toolkit(TOOL_REGISTRY, EXECUTIONS)
