"""
Core API backend for Toolgate.

This module exposes the tool layer to a chat frontend over HTTP:
- **GET /health**                 - liveness probe for health checks.
- **POST /sessions**              - create a new session, returns a session ID.
- **GET /sessions**               - list all active sessions.
- **GET /tools**                  - tool catalogue (descriptions and parameter schemas).
- **POST /chat/tool-calls**       - resolve answered confirmations in the last turn.
- **POST /chat/tool-calls/stream** - same, streaming ``tool_result`` events as NDJSON.
- **POST /tools/{name}**          - run an auto-executing tool directly.
"""

import asyncio
import json
import logging
from typing import (
    Any,
    AsyncIterator,
    List,
    Sequence,
)

from fastapi import (
    FastAPI,
    HTTPException,
)
from fastapi.responses import StreamingResponse

from toolgate.agent.orchestrator import (
    EventBuffer,
    QueueSink,
    process_tool_calls,
)
from toolgate.agent.session import (
    get_or_create_session,
    sessions,
)
from toolgate.agent.tool_executor import run_auto_tool
from toolgate.api.models import (
    SessionResponse,
    ToolCallsRequest,
    ToolCallsResponse,
    ToolDescription,
    ToolInvokeRequest,
    ToolInvokeResponse,
)
from toolgate.common import (
    AnsiColors,
    colored_print,
)
from toolgate.config import settings
from toolgate.core.context import ToolContext
from toolgate.core.schema import Message
from toolgate.tools import default_toolkit

logger = logging.getLogger(__name__)

# Fails at import if a confirm-required tool has no executor
toolkit = default_toolkit()

app = FastAPI(title="Toolgate API", version="0.1.0", description="Tool confirmation layer API")


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------
@app.get("/health", summary="Health check")
async def health() -> dict[str, str]:
    """Return a simple liveness payload."""
    return {"status": "ok"}


@app.post("/sessions", response_model=SessionResponse, summary="Create a new session")
async def create_session() -> SessionResponse:
    """Create a new conversation session."""
    context = get_or_create_session()
    return SessionResponse(session_id=context.session_id)


@app.get("/sessions", response_model=List[str], summary="List active sessions")
async def list_sessions() -> List[str]:
    """List all active session IDs."""
    return list(sessions.keys())


@app.get("/tools", response_model=List[ToolDescription], summary="Tool catalogue")
async def list_tools() -> List[ToolDescription]:
    """Describe every registered tool the way the model sees it."""
    return [
        ToolDescription(
            name=name,
            description=schema["description"],
            parameters=schema["parameters"],
            requires_confirmation=schema["requires_confirmation"],
        )
        for name, schema in toolkit.registry.schemas().items()
    ]


@app.post("/chat/tool-calls", response_model=ToolCallsResponse, summary="Resolve confirmations")
async def resolve_tool_calls(req: ToolCallsRequest) -> ToolCallsResponse:
    """Run answered confirmations in the last turn and return the rewritten conversation."""
    context = get_or_create_session(req.session_id)
    sink = EventBuffer()

    messages = await process_tool_calls(
        req.messages, toolkit.registry, toolkit.executions, sink, context
    )
    logger.info(
        "Resolved %d confirmation(s) for session %s", len(sink.events), context.session_id
    )
    return ToolCallsResponse(messages=messages, events=sink.events, session_id=context.session_id)


def _json_default(value: Any) -> Any:
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return str(value)


def _ndjson(payload: object) -> str:
    return json.dumps(payload, default=_json_default) + "\n"


async def _stream_tool_calls(
    messages: Sequence[Message], context: ToolContext
) -> AsyncIterator[str]:
    sink = QueueSink()

    async def run() -> List[Message]:
        try:
            return await process_tool_calls(
                messages, toolkit.registry, toolkit.executions, sink, context
            )
        finally:
            sink.queue.put_nowait(None)  # end of stream

    task = asyncio.create_task(run())
    while True:
        event = await sink.queue.get()
        if event is None:
            break
        yield _ndjson(event)

    try:
        updated = await task
    except Exception as exc:  # pylint: disable=broad-except
        logger.exception("Tool-call stream failed for session %s", context.session_id)
        yield _ndjson({"type": "error", "sessionId": context.session_id, "error": str(exc)})
        return

    yield _ndjson(
        {
            "type": "messages",
            "sessionId": context.session_id,
            "messages": [m.model_dump(by_alias=True) for m in updated],
        }
    )


@app.post("/chat/tool-calls/stream", summary="Resolve confirmations, streaming events")
async def stream_tool_calls(req: ToolCallsRequest) -> StreamingResponse:
    """Stream one NDJSON line per resolved call, then the rewritten conversation."""
    context = get_or_create_session(req.session_id)
    return StreamingResponse(
        _stream_tool_calls(req.messages, context), media_type="application/x-ndjson"
    )


@app.post("/tools/{name}", response_model=ToolInvokeResponse, summary="Run an auto tool")
async def invoke_tool(name: str, req: ToolInvokeRequest) -> ToolInvokeResponse:
    """Run an auto-executing tool; failures come back as an error-valued result."""
    definition = toolkit.registry.lookup(name)
    if definition is None:
        raise HTTPException(status_code=404, detail=f"Tool '{name}' is not registered.")
    if definition.requires_confirmation:
        raise HTTPException(status_code=409, detail=f"Tool '{name}' requires confirmation.")

    context = get_or_create_session(req.session_id)
    result = await run_auto_tool(name, req.args, toolkit.registry, context)
    return ToolInvokeResponse(tool_name=name, result=result, session_id=context.session_id)


@app.get("/", summary="API root")
async def root() -> dict[str, str]:
    """Return a simple welcome message."""
    return {"message": "Welcome to the Toolgate API! Use /docs for API documentation."}


# ---------------------------------------------------------------------------
# Public helper to launch the API (imported by main.py)
# ---------------------------------------------------------------------------
def run_api(
    host: str = "0.0.0.0", port: int = 8000, reload: bool = False, log_level: str | None = None
) -> None:
    """Start a uvicorn server hosting *app*.

    Parameters
    ----------
    host, port:
        Bind address for the HTTP server.
    reload:
        If *True*, enable auto-reload (useful in development).
    log_level:
        Logging level to use (default from settings if not provided).
    """

    # Lazy import - keeps uvicorn an optional dependency at pkg-import time
    import uvicorn  # pylint: disable=import-outside-toplevel

    if log_level is None:
        log_level = settings.LOG_LEVEL

    logger.info(
        "Starting Toolgate API at %s:%d (reload=%s, log_level=%s)", host, port, reload, log_level
    )
    logger.debug("Registered tools: %s", toolkit.registry.names())

    colored_print(f"Toolgate API is running at http://localhost:{port}.", AnsiColors.GREEN)
    uvicorn.run(
        "toolgate.api.app:app",
        host=host,
        port=port,
        reload=reload,
        log_level=log_level,
    )


# ---------------------------------------------------------------------------
# `python -m toolgate.api.app` helper
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    run_api(reload=True)
