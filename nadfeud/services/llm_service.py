"""OpenAI-compatible LLM client shared by answer grouping and suggestion categorizing."""
import asyncio
import json
import logging
import os
from typing import Any

import aiofiles
from openai import AsyncOpenAI

from nadfeud.core.config import settings

logger = logging.getLogger(__name__)

_client: AsyncOpenAI | None = None


def get_openai_client() -> AsyncOpenAI:
    """Lazily built client for the configured endpoint (Gemini's OpenAI-compatible API by default)."""
    global _client
    if _client is None:
        _client = AsyncOpenAI(
            api_key=settings.llm_api_key or "missing-api-key",
            base_url=settings.llm_base_url,
            timeout=settings.classifier_timeout_seconds,
            max_retries=0,
        )
    return _client


def strip_markdown_code(text: str) -> str:
    if not text:
        return text
    text = text.strip()
    if text.startswith("```"):
        lines = text.split("\n")
        if lines[-1].strip() == "```":
            return "\n".join(lines[1:-1])
        return "\n".join(lines[1:])
    return text


def parse_json_content(content: str | None) -> Any:
    """Parse a model reply as JSON, tolerating a markdown fence. Raises ValueError when unparseable."""
    raw = strip_markdown_code((content or "").strip())
    if not raw:
        raise ValueError("empty model response")
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValueError(f"model response is not JSON: {e}") from e


async def complete_json(prompt: str, *, model: str | None = None) -> str:
    """Single-turn chat completion asking for a JSON reply. Returns the raw content string."""
    client = get_openai_client()
    completion = await client.chat.completions.create(
        model=model or settings.grouping_model,
        messages=[{"role": "user", "content": prompt}],
        response_format={"type": "json_object"},
    )
    return completion.choices[0].message.content or ""


async def dump_debug(name: str, payload: Any) -> None:
    """Write a payload to DEBUG_DIR when configured. Failures are logged only."""
    debug_dir = settings.debug_dir
    if not debug_dir:
        return
    await asyncio.to_thread(os.makedirs, debug_dir, exist_ok=True)
    path = os.path.join(debug_dir, f"{name}.json")
    try:
        async with aiofiles.open(path, "w", encoding="utf-8") as f:
            await f.write(json.dumps(payload, ensure_ascii=False, indent=2))
        logger.info("[debug] wrote %s", path)
    except OSError as e:
        logger.warning("[debug] failed to write %s: %s", path, e)
