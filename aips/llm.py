"""Completion client: HTTP connection to a chat-completion backend.

The controller and idea generators take a client matching the protocol:

    async def complete(self, system_prompt: str, user_prompt: str) -> Completion: ...

Two implementations are provided:

    HttpCompletionClient  real HTTP client for OpenAI-compatible chat
                           completion endpoints (Groq, OpenAI, llama.cpp, ...).
    EchoCompletionClient  returns the user prompt unchanged. Useful for
                           smoke-testing the wiring without an API key.

Tests use StubClient (defined in the test helpers) instead.
"""

from __future__ import annotations

import asyncio
import logging
import random
from typing import Protocol

import httpx

from aips.errors import CompletionError
from aips.models import Completion

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.groq.com/openai/v1"
DEFAULT_MODEL = "llama3-8b-8192"


# ---------------------------------------------------------------------------
# Protocol: every completion client must match this signature
# ---------------------------------------------------------------------------

class CompletionClient(Protocol):
    async def complete(self, system_prompt: str, user_prompt: str) -> Completion: ...


# ---------------------------------------------------------------------------
# HttpCompletionClient: connects to a real backend
# ---------------------------------------------------------------------------

class _Transient(Exception):
    """Internal marker for failures worth another attempt."""

    def __init__(self, error: CompletionError) -> None:
        super().__init__(str(error))
        self.error = error


class HttpCompletionClient:
    """Async HTTP client for chat-completion backends.

    POST {base_url}/chat/completions
        {"model": ..., "messages": [{"role": "system", ...}, {"role": "user", ...}]}
    Response: {"choices": [{"message": {"content": "...", "reasoning": "..."}}]}

    Args:
        base_url:    Base URL of the API, e.g. "https://api.groq.com/openai/v1".
        api_key:     Bearer token, or empty string if not required.
        model:       Model identifier sent with every request.
        timeout:     HTTP timeout in seconds. Defaults to 120.
        max_retries: Extra attempts after a 429, 5xx, timeout, or connection
                     failure. Defaults to 0 (fail on first error).
        backoff:     Base delay in seconds; attempt n waits backoff * 2**n plus
                     up to `backoff` of random jitter.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        api_key: str = "",
        model: str = DEFAULT_MODEL,
        timeout: float = 120.0,
        max_retries: int = 0,
        backoff: float = 0.5,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._model = model
        self._timeout = timeout
        self._max_retries = max(0, max_retries)
        self._backoff = backoff

    @property
    def model(self) -> str:
        return self._model

    def _headers(self) -> dict[str, str]:
        headers: dict[str, str] = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    def _build_request(self, system_prompt: str, user_prompt: str) -> tuple[str, dict]:
        """Return (url, body)."""
        url = f"{self._base_url}/chat/completions"
        body = {
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "model": self._model,
        }
        return url, body

    def _parse_response(self, data: dict) -> Completion:
        """Extract the completion text and optional reasoning trace."""
        choices = data.get("choices") if isinstance(data, dict) else None
        if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
            raise CompletionError("Unexpected response format from completion backend")
        message = choices[0].get("message")
        if not isinstance(message, dict):
            raise CompletionError("Unexpected response format from completion backend")
        content = message.get("content")
        reasoning = message.get("reasoning")
        if not isinstance(content, str) or not isinstance(reasoning, str | None):
            raise CompletionError("Unexpected response format from completion backend")
        return Completion(content=content, reasoning=reasoning or None)

    async def _attempt(self, url: str, body: dict) -> httpx.Response:
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.post(url, json=body, headers=self._headers())
                resp.raise_for_status()
        except httpx.ConnectError as e:
            raise _Transient(
                CompletionError(f"Cannot connect to completion backend at {self._base_url}")
            ) from e
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            error = CompletionError(f"Completion backend returned HTTP {status}")
            if status == 429 or status >= 500:
                raise _Transient(error) from e
            raise error from e
        except httpx.TimeoutException as e:
            raise _Transient(
                CompletionError(f"Completion backend timed out after {self._timeout}s")
            ) from e
        except httpx.HTTPError as e:
            raise CompletionError(f"Completion request failed: {type(e).__name__}") from e
        return resp

    def _delay(self, attempt: int) -> float:
        return self._backoff * (2 ** attempt) + random.uniform(0, self._backoff)

    async def complete(self, system_prompt: str, user_prompt: str) -> Completion:
        url, body = self._build_request(system_prompt, user_prompt)
        logger.debug(
            "completion call url=%s model=%s system_len=%d user_len=%d",
            url, self._model, len(system_prompt), len(user_prompt),
        )

        attempt = 0
        while True:
            try:
                resp = await self._attempt(url, body)
                break
            except _Transient as t:
                if attempt >= self._max_retries:
                    raise t.error from t.__cause__
                delay = self._delay(attempt)
                logger.warning("%s; retrying in %.2fs", t.error, delay)
                attempt += 1
                await asyncio.sleep(delay)

        try:
            data = resp.json()
        except ValueError as e:
            raise CompletionError("Completion backend returned invalid JSON") from e
        completion = self._parse_response(data)
        logger.debug("completion response len=%d", len(completion.content))
        return completion


# ---------------------------------------------------------------------------
# EchoCompletionClient: returns the user prompt; no network calls
# ---------------------------------------------------------------------------

class EchoCompletionClient:
    """Returns the user prompt as the completion. No network calls.

    Lets you verify the wiring (prompt assembly, thread creation, storage
    writes) end-to-end without an API key.
    """

    async def complete(self, system_prompt: str, user_prompt: str) -> Completion:
        logger.debug("EchoCompletionClient system_len=%d", len(system_prompt))
        return Completion(content=user_prompt)
