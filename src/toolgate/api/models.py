"""
Pydantic models for Toolgate API requests and responses.
This module defines the request and response schemas used by the Toolgate API.
"""

from typing import (
    Any,
    Dict,
    List,
    Optional,
)

from pydantic import Field

from toolgate.core.schema import (
    Message,
    WireModel,
)


# ---------------------------------------------------------------------------
# Pydantic request / response schema
# ---------------------------------------------------------------------------
class SessionResponse(WireModel):
    """Response with session information."""

    session_id: str


class ToolDescription(WireModel):
    """One entry of the tool catalogue shown to the model."""

    name: str
    description: str
    parameters: Dict[str, Any]
    requires_confirmation: bool


class ToolCallsRequest(WireModel):
    """Conversation whose last turn may hold answered confirmations."""

    messages: List[Message] = Field(..., description="Conversation so far, oldest first")
    session_id: Optional[str] = Field(None, description="Session ID for tool context")


class ToolCallsResponse(WireModel):
    """Rewritten conversation plus the events emitted while resolving it."""

    messages: List[Message]
    events: List[Dict[str, Any]] = Field(default_factory=list)
    session_id: str


class ToolInvokeRequest(WireModel):
    """Arguments for a direct auto-tool run."""

    args: Dict[str, Any] = Field(default_factory=dict)
    session_id: Optional[str] = None


class ToolInvokeResponse(WireModel):
    """Result of a direct auto-tool run."""

    tool_name: str
    result: Any = None
    session_id: str
