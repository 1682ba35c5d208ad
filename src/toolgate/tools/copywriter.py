"""
Persuasive copy generation for ads and marketing campaigns.

The tool is confirm-required: a completion call costs money, so the user approves each request.
The completion is streamed from the OpenAI chat endpoint and the full text is returned once the
stream is exhausted.
"""

import logging
from typing import (
    Any,
    List,
)

from pydantic import (
    BaseModel,
    Field,
)

from toolgate.config import settings
from toolgate.core.context import ToolContext
from toolgate.tools import (
    EXECUTIONS,
    TOOL_REGISTRY,
)

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """\
Você é um redator publicitário especializado em marketing e copywriting. Gere textos persuasivos \
(copies) com base nas informações fornecidas a seguir.

As copies devem ser criativas, envolventes e direcionadas ao público-alvo descrito. Foque em \
despertar o interesse, destacar a proposta de valor e incentivar a ação.

Informações:
"{prompt}"

A resposta deve conter:
1. Headline principal
2. Subheadline complementar
3. Texto para o corpo do anúncio (máximo 3 parágrafos curtos)
4. Call to Action (CTA) impactante
5. Versões alternativas de headline (2 variações)

Formato da resposta:
- Headline:
- Subheadline:
- Corpo do anúncio:
- CTA:
- Variações de headline:

Use uma linguagem clara, objetiva e emocionalmente envolvente, adaptada ao público descrito.
"""

USER_PROMPT = "Crie uma copy persuasiva com base nas seguintes informações: {prompt}"


class CopyArgs(BaseModel):
    prompt: str = Field(..., description="Product, audience and offer to write the copy for")


TOOL_REGISTRY.confirm_tool(
    "getPersuasiveCopy",
    "generate persuasive copy texts used in advertisements and marketing campaigns",
    params=CopyArgs,
)


def _client() -> Any:
    # Lazy import - keeps the OpenAI SDK off the import path of the orchestrator
    import openai  # pylint: disable=import-outside-toplevel

    return openai.AsyncOpenAI(api_key=settings.OPENAI_API_KEY)


@EXECUTIONS.register("getPersuasiveCopy")
async def get_persuasive_copy(prompt: str, *, context: ToolContext) -> str:
    """Stream a copy for *prompt* and return the whole text."""
    logger.info("Generating persuasive copy for %r (session=%s)", prompt, context.session_id)

    client = _client()
    stream = await client.chat.completions.create(
        model=settings.COPY_MODEL,
        messages=[
            {"role": "system", "content": SYSTEM_PROMPT.format(prompt=prompt)},
            {"role": "user", "content": USER_PROMPT.format(prompt=prompt)},
        ],
        temperature=settings.COPY_TEMPERATURE,
        stream=True,
    )

    chunks: List[str] = []
    async for chunk in stream:
        if not chunk.choices:
            continue
        delta = chunk.choices[0].delta.content
        if delta:
            chunks.append(delta)

    text = "".join(chunks)
    logger.debug("Generated copy: %s", text)
    return text
