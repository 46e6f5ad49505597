"""Tests for LLM client -- Ollama, OpenAI and Anthropic chat wrappers."""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from adjutant.clients import llm_client
from adjutant.clients.llm_client import (
    ANTHROPIC_MESSAGES_URL,
    OPENAI_CHAT_URL,
    _retry_on_transient,
    chat_anthropic,
    chat_ollama,
    chat_openai,
)
from adjutant.errors import ParseError, TransportError

OLLAMA_URL = "http://localhost:11434/api/chat"


def _response(status: int, url: str = OLLAMA_URL, **kwargs) -> httpx.Response:
    return httpx.Response(status, request=httpx.Request("POST", url), **kwargs)


def _mock_client(*responses) -> MagicMock:
    """A stand-in for the shared AsyncClient; ``post`` yields *responses* in order."""
    client = MagicMock()
    client.post = AsyncMock(side_effect=list(responses))
    return client


def _body(client: MagicMock) -> dict:
    return client.post.call_args.kwargs["json"]


# ---------------------------------------------------------------------------
# Ollama
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_ollama_success():
    client = _mock_client(_response(200, json={"message": {"role": "assistant", "content": "hi"}}))
    with patch("adjutant.clients.llm_client._get_client", return_value=client):
        text = await chat_ollama(
            "http://localhost:11434/", "llama3", [{"role": "user", "content": "hello"}],
        )

    assert text == "hi"
    assert client.post.call_args.args[0] == OLLAMA_URL
    body = _body(client)
    assert body == {
        "model": "llama3",
        "messages": [{"role": "user", "content": "hello"}],
        "stream": False,
    }


@pytest.mark.asyncio
async def test_ollama_json_mode_sets_format():
    client = _mock_client(_response(200, json={"message": {"content": "{}"}}))
    with patch("adjutant.clients.llm_client._get_client", return_value=client):
        await chat_ollama("http://localhost:11434", "llama3", [], json_mode=True)
    assert _body(client)["format"] == "json"


@pytest.mark.asyncio
async def test_ollama_non_2xx_is_transport_error():
    client = _mock_client(_response(404, json={"error": "model not found"}))
    with patch("adjutant.clients.llm_client._get_client", return_value=client):
        with pytest.raises(TransportError, match="Ollama API error: 404") as exc_info:
            await chat_ollama("http://localhost:11434", "nope", [])
    assert exc_info.value.http_status == 404
    assert client.post.await_count == 1


@pytest.mark.asyncio
async def test_ollama_missing_content_is_parse_error():
    client = _mock_client(_response(200, json={"done": True}))
    with patch("adjutant.clients.llm_client._get_client", return_value=client):
        with pytest.raises(ParseError, match="message.content"):
            await chat_ollama("http://localhost:11434", "llama3", [])


@pytest.mark.asyncio
@pytest.mark.parametrize("message", ["just text", ["content"], None])
async def test_ollama_non_object_message_is_parse_error(message):
    client = _mock_client(_response(200, json={"message": message}))
    with patch("adjutant.clients.llm_client._get_client", return_value=client):
        with pytest.raises(ParseError, match="message.content"):
            await chat_ollama("http://localhost:11434", "llama3", [])



@pytest.mark.asyncio
async def test_ollama_non_json_body_is_parse_error():
    client = _mock_client(_response(200, text="<html>proxy</html>"))
    with patch("adjutant.clients.llm_client._get_client", return_value=client):
        with pytest.raises(ParseError, match="non-JSON"):
            await chat_ollama("http://localhost:11434", "llama3", [])


@pytest.mark.asyncio
@patch("adjutant.clients.llm_client.asyncio.sleep", new_callable=AsyncMock)
async def test_ollama_retries_transient_status(mock_sleep):
    client = _mock_client(
        _response(503),
        _response(200, json={"message": {"content": "recovered"}}),
    )
    with patch("adjutant.clients.llm_client._get_client", return_value=client):
        text = await chat_ollama("http://localhost:11434", "llama3", [])

    assert text == "recovered"
    assert client.post.await_count == 2
    mock_sleep.assert_awaited_once()


@pytest.mark.asyncio
@patch("adjutant.clients.llm_client.asyncio.sleep", new_callable=AsyncMock)
async def test_ollama_unreachable_after_retries(mock_sleep, monkeypatch):
    monkeypatch.setattr("adjutant.config.settings.LLM_MAX_RETRIES", 2)
    client = MagicMock()
    client.post = AsyncMock(side_effect=httpx.ConnectError("connection refused"))
    with patch("adjutant.clients.llm_client._get_client", return_value=client):
        with pytest.raises(TransportError, match="Ollama unreachable: ConnectError"):
            await chat_ollama("http://localhost:11434", "llama3", [])

    assert client.post.await_count == 3
    assert mock_sleep.await_count == 2


# ---------------------------------------------------------------------------
# OpenAI
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_openai_success():
    client = _mock_client(_response(
        200, OPENAI_CHAT_URL,
        json={"choices": [{"message": {"role": "assistant", "content": "Hello from GPT!"}}]},
    ))
    with patch("adjutant.clients.llm_client._get_client", return_value=client):
        text = await chat_openai(
            "sk-test", "gpt-4o", "You are helpful.",
            [{"role": "user", "content": "Hi"}], max_tokens=100, json_mode=True,
        )

    assert text == "Hello from GPT!"
    call = client.post.call_args
    assert call.args[0] == OPENAI_CHAT_URL
    assert call.kwargs["headers"]["Authorization"] == "Bearer sk-test"
    body = call.kwargs["json"]
    assert body["messages"][0] == {"role": "system", "content": "You are helpful."}
    assert body["max_completion_tokens"] == 100
    assert body["response_format"] == {"type": "json_object"}


@pytest.mark.asyncio
async def test_openai_empty_choices():
    client = _mock_client(_response(200, OPENAI_CHAT_URL, json={"choices": []}))
    with patch("adjutant.clients.llm_client._get_client", return_value=client):
        with pytest.raises(ParseError, match="Empty response"):
            await chat_openai("sk-test", "gpt-4o", "sys", [])


@pytest.mark.asyncio
@pytest.mark.parametrize("choices", [["plain string"], [{"message": "plain string"}]])
async def test_openai_malformed_choice_is_parse_error(choices):
    client = _mock_client(_response(200, OPENAI_CHAT_URL, json={"choices": choices}))
    with patch("adjutant.clients.llm_client._get_client", return_value=client):
        with pytest.raises(ParseError, match="No content"):
            await chat_openai("sk-test", "gpt-4o", "sys", [])



@pytest.mark.asyncio
async def test_openai_unauthorized():
    client = _mock_client(_response(401, OPENAI_CHAT_URL, json={"error": {"message": "bad key"}}))
    with patch("adjutant.clients.llm_client._get_client", return_value=client):
        with pytest.raises(TransportError, match="401") as exc_info:
            await chat_openai("sk-bad", "gpt-4o", "sys", [])
    assert exc_info.value.http_status == 401


# ---------------------------------------------------------------------------
# Anthropic
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_anthropic_joins_text_blocks():
    client = _mock_client(_response(
        200, ANTHROPIC_MESSAGES_URL,
        json={"content": [
            {"type": "text", "text": "part one"},
            {"type": "tool_use", "id": "x"},
            {"type": "text", "text": "part two"},
        ]},
    ))
    with patch("adjutant.clients.llm_client._get_client", return_value=client):
        text = await chat_anthropic("sk-ant", "claude", "System", [{"role": "user", "content": "Hi"}])

    assert text == "part one\npart two"
    call = client.post.call_args
    assert call.kwargs["headers"]["x-api-key"] == "sk-ant"
    assert call.kwargs["headers"]["anthropic-version"] == "2023-06-01"
    assert call.kwargs["json"]["system"] == "System"


@pytest.mark.asyncio
async def test_anthropic_empty_content():
    client = _mock_client(_response(200, ANTHROPIC_MESSAGES_URL, json={"content": []}))
    with patch("adjutant.clients.llm_client._get_client", return_value=client):
        with pytest.raises(ParseError, match="Empty response"):
            await chat_anthropic("sk-ant", "claude", "System", [])


@pytest.mark.asyncio
async def test_anthropic_non_object_blocks_are_parse_error():
    client = _mock_client(_response(
        200, ANTHROPIC_MESSAGES_URL, json={"content": ["part one", 42]},
    ))
    with patch("adjutant.clients.llm_client._get_client", return_value=client):
        with pytest.raises(ParseError, match="No text block"):
            await chat_anthropic("sk-ant", "claude", "System", [])



# ---------------------------------------------------------------------------
# Retry helper / client lifecycle
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@patch("adjutant.clients.llm_client.asyncio.sleep", new_callable=AsyncMock)
async def test_retry_honours_retry_after(mock_sleep):
    request = httpx.Request("POST", OPENAI_CHAT_URL)
    limited = httpx.Response(429, headers={"retry-after": "7"}, request=request)
    factory = AsyncMock(side_effect=[
        httpx.HTTPStatusError("rate limited", request=request, response=limited),
        "ok",
    ])

    result = await _retry_on_transient(factory, provider="OpenAI", max_retries=1)

    assert result == "ok"
    mock_sleep.assert_awaited_once_with(7.0)


@pytest.mark.asyncio
async def test_retry_zero_retries_raises_immediately():
    request = httpx.Request("POST", OPENAI_CHAT_URL)
    factory = AsyncMock(side_effect=httpx.ReadTimeout("slow", request=request))
    with pytest.raises(TransportError, match="unreachable"):
        await _retry_on_transient(factory, provider="OpenAI", max_retries=0)
    assert factory.await_count == 1


@pytest.mark.asyncio
async def test_close_client_resets_shared_client():
    client = llm_client._get_client()
    assert llm_client._get_client() is client
    await llm_client.close_client()
    assert llm_client._client is None
