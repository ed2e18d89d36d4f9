"""Unit tests for model output decoding and the chat completions client."""

import json

import httpx
import pytest

from ledger.engine.ai import (
    OpenAIChatClient,
    call_ai_with_strict_json,
    decode_json_response,
    load_prompt,
)
from ledger.errors import AIParsingError, AIProviderError


def test_decode_plain_object():
    """Plain JSON object decodes as-is."""
    assert decode_json_response('{"q1": "a"}') == {"q1": "a"}


def test_decode_json_fence():
    """A ```json fence is stripped before parsing."""
    text = '```json\n{"eligible": true}\n```'
    assert decode_json_response(text) == {"eligible": True}


def test_decode_bare_fence():
    """A bare ``` fence is stripped before parsing."""
    text = '```\n{"eligible": false}\n```'
    assert decode_json_response(text) == {"eligible": False}


def test_decode_rejects_prose_wrapping():
    """Only a code fence is unwrapped; leading prose fails."""
    with pytest.raises(AIParsingError):
        decode_json_response('Here you go: {"q1": "a"}')


def test_decode_rejects_non_object():
    """JSON that is not an object is a parsing error."""
    with pytest.raises(AIParsingError):
        decode_json_response('["a", "b"]')


def test_decode_rejects_empty():
    """Empty output is a parsing error."""
    with pytest.raises(AIParsingError):
        decode_json_response("   ")


def test_prompts_exist():
    """Each stage's instruction file exists and asks for JSON."""
    for name in ("domain_classifier.txt", "question_generator.txt", "answer_evaluator.txt"):
        assert "JSON" in load_prompt(name)


async def test_call_ai_with_strict_json_sends_instruction_and_user_text():
    """Instruction file text and user prompt reach the model."""
    class Recorder:
        def __init__(self):
            self.calls = []

        async def complete(self, instruction, user_text):
            self.calls.append((instruction, user_text))
            return '```json\n{"q1": "x"}\n```'

    rec = Recorder()
    data = await call_ai_with_strict_json(rec, "question_generator.txt", "Learning evidence: ...")
    assert data == {"q1": "x"}
    instruction, user_text = rec.calls[0]
    assert instruction == load_prompt("question_generator.txt")
    assert user_text == "Learning evidence: ..."


async def test_openai_client_payload_and_content():
    """Chat completion request shape and content extraction."""
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"choices": [{"message": {"content": '{"ok": true}'}}]})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        client = OpenAIChatClient(http, api_key="k", model="gpt-4", base_url="https://ai.test/v1")
        out = await client.complete("system text", "user text")

    assert out == '{"ok": true}'
    assert seen["url"] == "https://ai.test/v1/chat/completions"
    assert seen["auth"] == "Bearer k"
    assert seen["body"]["messages"] == [
        {"role": "system", "content": "system text"},
        {"role": "user", "content": "user text"},
    ]
    assert seen["body"]["response_format"] == {"type": "json_object"}
    assert seen["body"]["temperature"] == 0.3


async def test_openai_client_http_error():
    """Provider HTTP errors become AIProviderError."""
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(429, text="rate limited")

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        client = OpenAIChatClient(http, api_key="k", model="gpt-4")
        with pytest.raises(AIProviderError):
            await client.complete("s", "u")


async def test_openai_client_requires_key():
    """A missing API key fails before any request."""
    async with httpx.AsyncClient() as http:
        client = OpenAIChatClient(http, api_key="", model="gpt-4")
        with pytest.raises(AIProviderError):
            await client.complete("s", "u")
