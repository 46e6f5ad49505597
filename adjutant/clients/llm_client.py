"""LLM client -- thin HTTP wrappers for Ollama, OpenAI and Anthropic chat APIs.

Every function returns the assistant text only.  Failures are normalised:

* unreachable host, timeout, non-2xx status  -> ``TransportError``
* 2xx response without the expected fields    -> ``ParseError``

Transient failures (connection errors, 429/5xx) are retried with
exponential backoff, up to ``settings.LLM_MAX_RETRIES`` extra attempts.
"""

import asyncio
import logging

import httpx

from adjutant.config import settings
from adjutant.errors import ParseError, TransportError

logger = logging.getLogger(__name__)

# ── Shared HTTP client (connection pooling) ─────────────────────────────────

_client: httpx.AsyncClient | None = None


def _get_client() -> httpx.AsyncClient:
    """Return (or create) the shared httpx client for LLM API calls."""
    global _client
    if _client is None:
        _client = httpx.AsyncClient(timeout=settings.LLM_TIMEOUT_SECONDS)
    return _client


async def close_client() -> None:
    """Close the shared LLM HTTP client.  Called during app shutdown."""
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None

# ---------------------------------------------------------------------------
# Retry configuration
# ---------------------------------------------------------------------------

RETRY_BACKOFF_BASE = 2.0  # seconds -- exponential: 2, 4, 8, ...
_RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 529})


def _compute_wait(exc: httpx.HTTPStatusError | None, attempt: int) -> float:
    """Return seconds to wait before retrying.

    Prefers the ``retry-after`` header for 429s.  Falls back to exponential
    backoff capped at 60 seconds.
    """
    if exc is not None and exc.response is not None:
        retry_after = exc.response.headers.get("retry-after")
        if retry_after:
            try:
                return min(float(retry_after), 120.0)
            except (ValueError, TypeError):
                pass
    return min(RETRY_BACKOFF_BASE ** (attempt + 1), 60.0)


async def _retry_on_transient(coro_factory, *, provider: str, max_retries: int | None = None):
    """Run ``coro_factory()`` retrying transient HTTP / timeout errors.

    ``coro_factory`` is a zero-arg callable that returns a new awaitable each
    time (so we can retry fresh).  Once retries are exhausted the httpx
    exception is converted to ``TransportError``.
    """
    retries = settings.LLM_MAX_RETRIES if max_retries is None else max_retries
    for attempt in range(retries + 1):
        try:
            return await coro_factory()
        except (httpx.TimeoutException, httpx.TransportError) as exc:
            if attempt < retries:
                wait = _compute_wait(None, attempt)
                logger.warning(
                    "%s request %s (attempt %d/%d), retrying in %.1fs",
                    provider, type(exc).__name__, attempt + 1, retries + 1, wait,
                )
                await asyncio.sleep(wait)
                continue
            raise TransportError(
                f"{provider} unreachable: {type(exc).__name__}: {exc}"
            ) from exc
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            if status in _RETRYABLE_STATUS_CODES and attempt < retries:
                wait = _compute_wait(exc, attempt)
                logger.warning(
                    "%s request %d (attempt %d/%d), retrying in %.1fs",
                    provider, status, attempt + 1, retries + 1, wait,
                )
                await asyncio.sleep(wait)
                continue
            raise TransportError(
                f"{provider} API error: {status} {exc.response.reason_phrase}",
                http_status=status,
            ) from exc
    raise AssertionError("unreachable")  # pragma: no cover


def _check_status(response: httpx.Response, provider: str) -> None:
    """Raise for non-2xx: retryable codes as ``HTTPStatusError``, others as ``TransportError``."""
    if response.status_code < 400:
        return
    if response.status_code in _RETRYABLE_STATUS_CODES:
        response.raise_for_status()
    raise TransportError(
        f"{provider} API error: {response.status_code} {response.reason_phrase}",
        http_status=response.status_code,
    )


def _json_body(response: httpx.Response, provider: str) -> dict:
    try:
        data = response.json()
    except ValueError as exc:
        raise ParseError(f"{provider} returned a non-JSON body", raw_output=response.text) from exc
    if not isinstance(data, dict):
        raise ParseError(f"{provider} returned an unexpected JSON shape")
    return data

# ---------------------------------------------------------------------------
# Ollama
# ---------------------------------------------------------------------------


async def chat_ollama(
    base_url: str,
    model: str,
    messages: list[dict],
    *,
    json_mode: bool = False,
) -> str:
    """POST ``{model, messages, stream: false}`` to ``{base_url}/api/chat``.

    When *json_mode* is set, ``format: "json"`` asks the server to constrain
    output to JSON (ignored by models that do not support it).
    """
    url = f"{base_url.rstrip('/')}/api/chat"
    body: dict = {"model": model, "messages": messages, "stream": False}
    if json_mode:
        body["format"] = "json"

    async def _call():
        response = await _get_client().post(url, json=body)
        _check_status(response, "Ollama")
        data = _json_body(response, "Ollama")
        message = data.get("message")
        content = message.get("content") if isinstance(message, dict) else None
        if content is None:
            raise ParseError("Ollama response has no message.content")
        return content

    return await _retry_on_transient(_call, provider="Ollama")

# ---------------------------------------------------------------------------
# OpenAI
# ---------------------------------------------------------------------------

OPENAI_CHAT_URL = "https://api.openai.com/v1/chat/completions"


def _openai_headers(api_key: str) -> dict:
    return {
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json",
    }


async def chat_openai(
    api_key: str,
    model: str,
    system_prompt: str,
    messages: list[dict],
    max_tokens: int = 2048,
    *,
    json_mode: bool = False,
) -> str:
    """Send a chat request to the OpenAI Chat Completions API."""
    oai_messages = [{"role": "system", "content": system_prompt}]
    oai_messages.extend(messages)
    body: dict = {
        "model": model,
        "messages": oai_messages,
        "max_completion_tokens": max_tokens,
    }
    if json_mode:
        body["response_format"] = {"type": "json_object"}

    async def _call():
        response = await _get_client().post(
            OPENAI_CHAT_URL, headers=_openai_headers(api_key), json=body,
        )
        _check_status(response, "OpenAI")
        data = _json_body(response, "OpenAI")
        choices = data.get("choices") or []
        if not choices:
            raise ParseError("Empty response from OpenAI API")
        first = choices[0] if isinstance(choices, list) else None
        message = first.get("message") if isinstance(first, dict) else None
        content = message.get("content") if isinstance(message, dict) else None
        if not content:
            raise ParseError("No content in OpenAI API response")
        return content

    return await _retry_on_transient(_call, provider="OpenAI")

# ---------------------------------------------------------------------------
# Anthropic
# ---------------------------------------------------------------------------

ANTHROPIC_MESSAGES_URL = "https://api.anthropic.com/v1/messages"
ANTHROPIC_API_VERSION = "2023-06-01"


def _anthropic_headers(api_key: str) -> dict:
    return {
        "x-api-key": api_key,
        "anthropic-version": ANTHROPIC_API_VERSION,
        "Content-Type": "application/json",
    }


async def chat_anthropic(
    api_key: str,
    model: str,
    system_prompt: str,
    messages: list[dict],
    max_tokens: int = 2048,
) -> str:
    """Send a chat request to the Anthropic Messages API.

    Anthropic rejects ``system`` turns inside ``messages``; callers pass the
    system prompt separately.
    """
    body: dict = {
        "model": model,
        "max_tokens": max_tokens,
        "system": system_prompt,
        "messages": messages,
    }

    async def _call():
        response = await _get_client().post(
            ANTHROPIC_MESSAGES_URL, headers=_anthropic_headers(api_key), json=body,
        )
        _check_status(response, "Anthropic")
        data = _json_body(response, "Anthropic")
        blocks = data.get("content") or []
        if not isinstance(blocks, list) or not blocks:
            raise ParseError("Empty response from Anthropic API")
        text_parts = [
            b["text"] for b in blocks
            if isinstance(b, dict) and b.get("type") == "text" and isinstance(b.get("text"), str)
        ]
        if not text_parts:
            raise ParseError("No text block in Anthropic API response")
        return "\n".join(text_parts)

    return await _retry_on_transient(_call, provider="Anthropic")
