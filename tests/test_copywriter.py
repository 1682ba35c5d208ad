"""Tests for the copy generation tool, with the OpenAI client stubbed out."""

from types import SimpleNamespace
from typing import (
    Any,
    AsyncIterator,
    List,
)
from unittest.mock import (
    AsyncMock,
    MagicMock,
    patch,
)

import pytest

from toolgate.core.context import ToolContext
from toolgate.tools.copywriter import (
    SYSTEM_PROMPT,
    get_persuasive_copy,
)


def _chunk(content: Any) -> SimpleNamespace:
    return SimpleNamespace(choices=[SimpleNamespace(delta=SimpleNamespace(content=content))])


async def _stream(chunks: List[SimpleNamespace]) -> AsyncIterator[SimpleNamespace]:
    for chunk in chunks:
        yield chunk


@pytest.mark.asyncio
async def test_copy_is_assembled_from_stream() -> None:
    """The streamed deltas are concatenated; empty chunks are skipped."""
    chunks = [
        _chunk("- Headline: "),
        SimpleNamespace(choices=[]),
        _chunk(None),
        _chunk("Finanças sem stress"),
    ]
    client = MagicMock()
    client.chat.completions.create = AsyncMock(return_value=_stream(chunks))

    with patch("toolgate.tools.copywriter._client", return_value=client):
        text = await get_persuasive_copy("App para freelancers", context=ToolContext())

    assert text == "- Headline: Finanças sem stress"
    kwargs = client.chat.completions.create.await_args.kwargs
    assert kwargs["stream"] is True
    assert kwargs["messages"][0]["content"] == SYSTEM_PROMPT.format(prompt="App para freelancers")
    assert "App para freelancers" in kwargs["messages"][1]["content"]
