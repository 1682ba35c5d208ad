"""
Schema definitions for chat messages and tool invocations.

These data models are the wire contract between the model transport, the UI and the tool
orchestrator.  Field names are snake_case in Python and camelCase on the wire; both spellings are
accepted on input and models serialize by alias.
"""

from datetime import datetime
from enum import Enum
from typing import (
    Annotated,
    Any,
    List,
    Literal,
    Optional,
    Union,
)

from pydantic import (
    BaseModel,
    ConfigDict,
    Discriminator,
    Field,
    Tag,
)
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Base model using camelCase aliases on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PassthroughModel(WireModel):
    """Wire model that keeps fields it does not know about, so they survive a round trip."""

    model_config = ConfigDict(extra="allow")


class Decision(str, Enum):
    """A human decision on a confirm-required tool call."""

    YES = "yes"
    NO = "no"

    @classmethod
    def parse(cls, value: Any) -> Optional["Decision"]:
        """Return the decision carried by *value*, or *None* if it is not one."""
        if isinstance(value, str):
            for member in cls:
                if value == member.value:
                    return member
        return None


ToolState = Literal["call", "partial-call", "result"]


class ToolInvocation(PassthroughModel):
    """A single tool call requested by the model."""

    tool_call_id: str = Field(..., description="Unique id of the call within the conversation")
    tool_name: str = Field(..., description="Registered tool name")
    args: Any = Field(default_factory=dict, description="Arguments matching the tool's schema")
    state: ToolState = "call"
    result: Any = None

    @property
    def decision(self) -> Optional[Decision]:
        """The pending human decision, if this invocation is waiting on one."""
        if self.state != "result":
            return None
        return Decision.parse(self.result)


class TextPart(PassthroughModel):
    """Plain text content of a message."""

    type: Literal["text"] = "text"
    text: str = ""


class ToolInvocationPart(PassthroughModel):
    """A message part wrapping a tool invocation."""

    type: Literal["tool-invocation"] = "tool-invocation"
    tool_invocation: ToolInvocation


class OtherPart(PassthroughModel):
    """Any other part type (reasoning, sources, files...); passed through untouched."""

    type: str


def _part_kind(value: Any) -> str:
    kind = value.get("type") if isinstance(value, dict) else getattr(value, "type", None)
    return kind if kind in ("text", "tool-invocation") else "other"


MessagePart = Annotated[
    Union[
        Annotated[TextPart, Tag("text")],
        Annotated[ToolInvocationPart, Tag("tool-invocation")],
        Annotated[OtherPart, Tag("other")],
    ],
    Discriminator(_part_kind),
]


class Message(PassthroughModel):
    """A single conversation turn."""

    id: str
    role: Literal["user", "assistant", "system"]
    content: str = ""
    created_at: Optional[datetime] = None
    parts: List[MessagePart] = Field(default_factory=list)


class ScheduledTask(WireModel):
    """A task held by the scheduling agent."""

    id: str
    callback: str
    description: str = ""
    type: Literal["scheduled", "delayed", "cron"]
    time: Optional[datetime] = None
    delay_in_seconds: Optional[int] = None
    cron: Optional[str] = None
