from __future__ import annotations

import asyncio
import logging
import os
import time
from typing import Any, Union

import httpx
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ..core.errors import MalformedEnvelopeError, NetworkError

logger = logging.getLogger(__name__)

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
MAX_ATTEMPTS = 3


class GeminiAdapter:
    id = "gemini"

    def __init__(
        self,
        model: str,
        api_key_env: str,
        base_url: str = GEMINI_BASE_URL,
        timeout: float = 30.0,
        client: Union[httpx.AsyncClient, None] = None,
        sleep=asyncio.sleep,
    ) -> None:
        self.model = model
        self.api_key = os.environ.get(api_key_env, "")
        self.timeout = timeout
        self._sleep = sleep
        if client is not None:
            self.client = client
        else:
            proxy = os.environ.get("HTTPS_PROXY") or os.environ.get("HTTP_PROXY")
            if proxy:
                self.client = httpx.AsyncClient(base_url=base_url, proxy=proxy)
            else:
                self.client = httpx.AsyncClient(base_url=base_url)
        self.last_latency_ms: Union[int, None] = None
        self.last_attempts = 0

    async def generate(self, payload: dict[str, Any]) -> Any:
        url = f"/models/{self.model}:generateContent"
        headers = {"Content-Type": "application/json"}
        self.last_attempts = 0

        # Only network-level failures are retried; a 2xx body is returned as-is.
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(MAX_ATTEMPTS),
            wait=wait_exponential(multiplier=1, min=1, max=4),
            retry=retry_if_exception_type(NetworkError),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            sleep=self._sleep,
            reraise=True,
        ):
            with attempt:
                self.last_attempts += 1
                start_time = time.perf_counter()
                try:
                    response = await self.client.post(
                        url,
                        json=payload,
                        headers=headers,
                        params={"key": self.api_key},
                        timeout=self.timeout,
                    )
                    response.raise_for_status()
                except httpx.HTTPStatusError as e:
                    raise NetworkError(
                        self._parse_api_error(e.response, self.model),
                        status_code=e.response.status_code,
                    ) from e
                except httpx.RequestError as e:
                    # Transport failures, undecodable bodies and redirect loops.
                    raise NetworkError(
                        f"Gemini API request failed for model '{self.model}': {e!s}"
                    ) from e
                self.last_latency_ms = int((time.perf_counter() - start_time) * 1000)

        try:
            return response.json()
        except ValueError as e:
            raise MalformedEnvelopeError(
                f"Gemini API returned a non-JSON body for model '{self.model}'"
            ) from e

    async def aclose(self) -> None:
        await self.client.aclose()

    def _parse_api_error(self, response: httpx.Response, model_name: str) -> str:
        """Parse Gemini API error response and provide actionable error message."""
        try:
            error = response.json().get("error", {})
            error_message = error.get("message", "Unknown error occurred")
        except (ValueError, AttributeError):
            # Fallback if we can't parse the error response
            error_message = response.text[:200]
        status_code = response.status_code

        if status_code == 400 and "api key" in error_message.lower():
            return f"Invalid Gemini API key. Check the configured API key variable. Original error: {error_message}"
        if status_code in (401, 403):
            return (
                f"Access denied for Gemini model '{model_name}' ({status_code}). "
                f"Check the API key and that the Generative Language API is enabled. "
                f"Original error: {error_message}"
            )
        if status_code == 404:
            return f"Gemini model '{model_name}' not found. Original error: {error_message}"
        if status_code == 429:
            return f"Rate limit exceeded for Gemini API. Original error: {error_message}"
        return f"Gemini API error ({status_code}) for model '{model_name}': {error_message}"
