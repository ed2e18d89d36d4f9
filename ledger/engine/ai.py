"""LLM access: a one-method model client and strict JSON decoding of its output."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Protocol

import httpx

from ledger.errors import AIParsingError, AIProviderError

logger = logging.getLogger(__name__)

PROMPTS_DIR = Path(__file__).resolve().parent.parent / "prompts"


class ModelClient(Protocol):
    """Instruction text + user text in, raw completion text out."""

    async def complete(self, instruction: str, user_text: str) -> str: ...


class OpenAIChatClient:
    """OpenAI-compatible chat completions over a shared httpx client."""

    def __init__(
        self,
        http: httpx.AsyncClient,
        *,
        api_key: str,
        model: str,
        base_url: str = "https://api.openai.com/v1",
        temperature: float = 0.3,
    ) -> None:
        self._http = http
        self.api_key = api_key
        self.model = model
        self.url = f"{base_url.rstrip('/')}/chat/completions"
        self.temperature = temperature

    async def complete(self, instruction: str, user_text: str) -> str:
        if not self.api_key:
            raise AIProviderError("AI_API_KEY is not configured")
        messages = []
        if instruction:
            messages.append({"role": "system", "content": instruction})
        messages.append({"role": "user", "content": user_text})
        payload: Dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "temperature": self.temperature,
            "response_format": {"type": "json_object"},
        }
        headers = {"Authorization": f"Bearer {self.api_key}"}
        try:
            r = await self._http.post(self.url, headers=headers, json=payload)
            r.raise_for_status()
        except httpx.HTTPStatusError as err:
            logger.warning("AI provider returned %s: %s", err.response.status_code, err.response.text[:500])
            raise AIProviderError(f"AI API error: HTTP {err.response.status_code}") from err
        except httpx.RequestError as err:
            raise AIProviderError(f"AI API request failed: {err}") from err
        try:
            data = r.json()
            return data["choices"][0]["message"]["content"] or ""
        except (ValueError, KeyError, IndexError, TypeError) as err:
            raise AIProviderError("Unexpected AI provider response") from err


def load_prompt(name: str) -> str:
    """Read an instruction file from the prompts directory (fresh on every call)."""
    return (PROMPTS_DIR / name).read_text(encoding="utf-8")


def _strip_code_fence(text: str) -> str:
    s = text.strip()
    if s.startswith("```json"):
        s = s[len("```json"):]
    elif s.startswith("```"):
        s = s[len("```"):]
    else:
        return s
    s = s.lstrip("\n")
    if s.endswith("```"):
        s = s[: -len("```")]
    return s.strip()


def decode_json_response(text: Optional[str]) -> Dict[str, Any]:
    """
    Parse model output as a single JSON object.
    A surrounding ``` / ```json fence is removed; any other wrapping fails.
    """
    if not text or not text.strip():
        raise AIParsingError("AI returned invalid JSON: empty response")
    body = _strip_code_fence(text)
    try:
        parsed = json.loads(body)
    except json.JSONDecodeError as err:
        raise AIParsingError(f"AI returned invalid JSON: {err.msg}") from err
    if not isinstance(parsed, dict):
        raise AIParsingError("AI returned invalid JSON: expected an object")
    return parsed


async def call_ai_with_strict_json(
    client: ModelClient, prompt_file: str, user_prompt: str
) -> Dict[str, Any]:
    """Send the named instruction plus user content; return the decoded object."""
    instruction = load_prompt(prompt_file)
    raw = await client.complete(instruction, user_prompt)
    return decode_json_response(raw)
