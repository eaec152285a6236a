"""Tiny Gemini (Google GenAI) client wrapper.

It expects GEMINI_API_KEY to be available in the environment (or passed
explicitly). Every request carries an HTTP timeout, and transient failures
are retried with exponential backoff until the attempt or time budget runs
out.
"""
from __future__ import annotations

import logging
import os
from typing import Optional

from google import genai
from google.genai import types
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception,
    stop_after_attempt,
    stop_after_delay,
    wait_exponential,
)

from fairrate.config import DEFAULT_MODEL, EMAIL_TIMEOUT_SECONDS
from fairrate.llm_base import LLMClient

LOG = logging.getLogger(__name__)

GEMINI_MAX_RETRIES = int(os.environ.get("GEMINI_MAX_RETRIES", "2"))


def _is_retryable(exc: BaseException) -> bool:
    """Return True for transient errors (rate limits, 5xx, network)."""
    if isinstance(exc, (ConnectionError, TimeoutError, OSError)):
        return True
    exc_str = str(exc).lower()
    if "429" in exc_str or "resource_exhausted" in exc_str:
        return True
    return any(code in exc_str for code in ("500", "502", "503", "504"))


class GeminiClient(LLMClient):
    """Minimal client for Google Gemini (GenAI)."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        default_model: Optional[str] = DEFAULT_MODEL,
        timeout_seconds: float = EMAIL_TIMEOUT_SECONDS,
    ):
        self.api_key = api_key or os.environ.get("GEMINI_API_KEY")
        if not self.api_key:
            raise RuntimeError("GEMINI_API_KEY is not set")
        self.default_model = default_model
        self.timeout_seconds = timeout_seconds

        try:
            self._client = genai.Client(
                api_key=self.api_key,
                http_options=types.HttpOptions(timeout=int(timeout_seconds * 1000)),
            )
        except Exception as exc:
            raise RuntimeError("Failed to initialize GenAI client: %s" % exc)

    def generate(
        self,
        prompt: str,
        model: Optional[str] = None,
        max_tokens: int = 512,
        temperature: float = 0.0,
        system_prompt: Optional[str] = None,
    ) -> str:
        """Generate text for the given prompt."""
        model_id = model or self.default_model
        if not model_id:
            raise ValueError("model must be provided either via constructor or argument")

        config = types.GenerateContentConfig(
            max_output_tokens=max_tokens,
            temperature=temperature,
            system_instruction=system_prompt,
        )

        @retry(
            stop=stop_after_attempt(GEMINI_MAX_RETRIES) | stop_after_delay(self.timeout_seconds),
            wait=wait_exponential(min=0.5, max=4),
            retry=retry_if_exception(_is_retryable),
            before_sleep=before_sleep_log(LOG, logging.WARNING),
            reraise=True,
        )
        def _call() -> str:
            response = self._client.models.generate_content(
                model=model_id,
                contents=prompt,
                config=config,
            )
            return response.text or ""

        try:
            return _call()
        except Exception as exc:
            raise RuntimeError(f"Gemini API error: {exc}")


__all__ = ["GeminiClient"]
