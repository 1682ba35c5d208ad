"""Terminal confirmation client for the Toolgate API."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import (
    Any,
    Callable,
    Dict,
    List,
    Set,
    Tuple,
    cast,
)

import httpx

from toolgate.common import (
    AnsiColors,
    colored_print,
    format_result,
)
from toolgate.config import settings

logger = logging.getLogger(__name__)

Asker = Callable[[str, Dict[str, Any]], bool]


# ---------------------------------------------------------------------------
# CLI Client
# ---------------------------------------------------------------------------
def get_user_message() -> Tuple[str, bool]:
    """
    Get a message from the user via standard input.

    Returns:
        Tuple of (user_input, success_flag)
        The success_flag is False if input couldn't be read (e.g., Ctrl+C)
    """
    import signal  # pylint: disable=import-outside-toplevel

    # Ensure SIGINT breaks out of slow system calls such as read()
    signal.siginterrupt(signal.SIGINT, True)

    try:
        user_input = input().strip()
        return user_input, True
    except (EOFError, KeyboardInterrupt):
        return "", False


def ask_user(tool_name: str, args: Dict[str, Any]) -> bool:
    """Ask whether *tool_name* may run with *args*; anything but y/yes is a no."""
    colored_print(f"\nApprove {tool_name}({format_result(args)})? [y/N] ", AnsiColors.BLUE, end="")
    answer, ok = get_user_message()
    return ok and answer.lower() in {"y", "yes"}


def call_api(
    endpoint: str, data: Dict[str, Any] | None = None, max_retries: int = 5
) -> Dict[str, Any] | List[Any]:
    """Make a request to the API (POST if *data* is given, else GET) with connect retries."""
    api_url = f"http://localhost:{settings.API_PORT}{endpoint}"

    for attempt in range(max_retries):
        try:
            with httpx.Client(timeout=120.0) as client:
                if data is None:
                    response = client.get(api_url)
                else:
                    response = client.post(api_url, json=data)
                response.raise_for_status()
                return cast(Dict[str, Any] | List[Any], response.json())
        except httpx.ConnectError as e:
            if attempt < max_retries - 1:
                retry_delay = 0.5 * (2**attempt)  # exponential backoff: 0.5s, 1s, 2s, 4s...
                logger.info(
                    "API not ready yet, retrying in %.1f seconds (attempt %d/%d)...",
                    retry_delay,
                    attempt + 1,
                    max_retries,
                )
                import time  # pylint: disable=import-outside-toplevel

                time.sleep(retry_delay)
                continue
            raise RuntimeError(f"Failed to connect to API after {max_retries} attempts") from e

    raise RuntimeError(f"Failed to connect to API after {max_retries} attempts")


def collect_decisions(
    messages: List[Dict[str, Any]], confirm_required: Set[str], ask: Asker = ask_user
) -> int:
    """
    Ask the user about every confirm-required call in the last message.

    Each answered call is switched to ``state="result"`` with ``"yes"`` or ``"no"`` as its result,
    in place.  Returns the number of calls answered.
    """
    if not messages:
        return 0

    answered = 0
    for part in messages[-1].get("parts") or []:
        if part.get("type") != "tool-invocation":
            continue
        invocation = part.get("toolInvocation") or {}
        if invocation.get("state") != "call":
            continue
        if invocation.get("toolName") not in confirm_required:
            continue

        approved = ask(invocation["toolName"], invocation.get("args") or {})
        invocation["state"] = "result"
        invocation["result"] = "yes" if approved else "no"
        answered += 1
    return answered


def run_cli(transcript: str) -> None:
    """Confirm pending tool calls in *transcript* and write the resolved conversation back."""
    path = Path(transcript)
    messages = json.loads(path.read_text(encoding="utf-8"))

    tools = cast(List[Dict[str, Any]], call_api("/tools"))
    confirm_required = {t["name"] for t in tools if t.get("requiresConfirmation")}

    if not collect_decisions(messages, confirm_required, ask_user):
        colored_print("Nothing to confirm.", AnsiColors.YELLOW)
        return

    session = cast(Dict[str, Any], call_api("/sessions", {}))
    response = cast(
        Dict[str, Any],
        call_api(
            "/chat/tool-calls", {"messages": messages, "sessionId": session.get("sessionId")}
        ),
    )

    for event in response.get("events", []):
        result = event.get("result")
        color = (
            AnsiColors.RED
            if isinstance(result, str) and result.startswith("Error")
            else AnsiColors.GREEN
        )
        colored_print(f"[{event.get('toolCallId')}] {format_result(result)}", color)

    path.write_text(
        json.dumps(response["messages"], indent=2, ensure_ascii=False), encoding="utf-8"
    )
    colored_print(f"Transcript updated: {path}", AnsiColors.YELLOW)
