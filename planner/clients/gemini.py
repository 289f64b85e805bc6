"""Gemini generateContent client with rate limiting and retries.

This module provides a small async client for the Gemini REST API. It implements:
- Process-wide pacing of outbound requests via AsyncLimiter
- Automatic retry with exponential backoff for transient errors (429, 5xx, timeouts)
- Error classification (retriable vs non-retriable)

The API key is passed per call because each user may bring their own key.
Keys travel in the ``x-goog-api-key`` header, never in the URL, so they do
not end up in access logs.

Usage:
    client = GeminiClient()
    text = await client.generate_text(prompt, api_key=key)
    await client.close()
"""

from typing import Any

import httpx
import structlog
from aiolimiter import AsyncLimiter
from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from planner.config import get_gemini_model

log = structlog.get_logger(__name__)

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
RETRIABLE_STATUS_CODES = {429, 500, 502, 503, 504}


class GeminiAPIError(Exception):
    """Raised when Gemini rejects a request or retries are exhausted.

    Attributes:
        status_code: HTTP status of the last response, or None for
            network-level failures.
    """

    def __init__(self, message: str, status_code: int | None = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


def _is_retriable(exception: BaseException) -> bool:
    """Determine if an error should trigger retry logic.

    Returns:
        True for 429/5xx responses and network timeouts/connection errors.
    """
    if isinstance(exception, httpx.HTTPStatusError):
        return exception.response.status_code in RETRIABLE_STATUS_CODES
    return isinstance(exception, (httpx.TimeoutException, httpx.ConnectError))


def _error_message(response: httpx.Response) -> str:
    """Extract Gemini's error message from a failed response body."""
    try:
        body = response.json()
    except ValueError:
        return f"Gemini request failed with status {response.status_code}"
    message = (body.get("error") or {}).get("message") if isinstance(body, dict) else None
    return message or f"Gemini request failed with status {response.status_code}"


def extract_text(payload: dict[str, Any]) -> str:
    """Pull the first candidate's text out of a generateContent response.

    Returns an empty string when the response carries no text part.
    """
    candidates = payload.get("candidates") or []
    if not candidates:
        return ""
    parts = (candidates[0].get("content") or {}).get("parts") or []
    return "".join(part.get("text", "") for part in parts if isinstance(part, dict))


class GeminiClient:
    """Async Gemini client with request pacing and retries.

    Args:
        model: Model name; defaults to GEMINI_MODEL.
        http_client: Optional pre-built httpx client (tests inject a
            MockTransport-backed client here).
        max_rate: Requests allowed per ``time_period`` seconds.
        max_attempts: Attempts per call, including the first one.
        backoff: Base of the exponential wait between attempts, in seconds.
    """

    def __init__(
        self,
        model: str | None = None,
        http_client: httpx.AsyncClient | None = None,
        max_rate: float = 10,
        time_period: float = 1,
        max_attempts: int = 3,
        backoff: float = 1,
    ):
        self.model = model or get_gemini_model()
        self.client = http_client or httpx.AsyncClient(timeout=60.0)
        self.rate_limiter = AsyncLimiter(max_rate=max_rate, time_period=time_period)
        self.base_url = GEMINI_BASE_URL
        self.max_attempts = max_attempts
        self.backoff = backoff

    async def _post_generate(self, prompt: str, api_key: str) -> dict[str, Any]:
        """Issue a single generateContent request."""
        async with self.rate_limiter:
            response = await self.client.post(
                f"{self.base_url}/models/{self.model}:generateContent",
                headers={
                    "Content-Type": "application/json",
                    "x-goog-api-key": api_key,
                },
                json={"contents": [{"parts": [{"text": prompt}]}]},
            )

        if response.status_code >= 400 and response.status_code not in RETRIABLE_STATUS_CODES:
            # Non-retriable (bad key, bad request): fail fast
            raise GeminiAPIError(_error_message(response), status_code=response.status_code)

        response.raise_for_status()
        return response.json()  # type: ignore[no-any-return]

    async def generate_text(self, prompt: str, api_key: str) -> str:
        """Generate text for ``prompt``.

        Returns:
            Generated text (may be empty if the model returned no parts).

        Raises:
            GeminiAPIError: On non-retriable errors or once retries are exhausted.
        """
        retrying = AsyncRetrying(
            retry=retry_if_exception(_is_retriable),
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=self.backoff, min=self.backoff, max=8),
            before_sleep=lambda retry_state: log.warning(
                "gemini_request_retry",
                model=self.model,
                attempt=retry_state.attempt_number,
            ),
            reraise=True,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    payload = await self._post_generate(prompt, api_key)
        except httpx.HTTPStatusError as e:
            raise GeminiAPIError(
                _error_message(e.response), status_code=e.response.status_code
            ) from e
        except httpx.HTTPError as e:
            raise GeminiAPIError(f"Gemini request failed: {type(e).__name__}") from e

        text = extract_text(payload)
        log.info("gemini_text_generated", model=self.model, characters=len(text))
        return text

    async def close(self) -> None:
        """Close the underlying HTTP connections."""
        await self.client.aclose()
