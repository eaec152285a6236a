"""Ollama client: talk to local LLMs via the Ollama HTTP API.

Uses ``requests`` to call the ``/api/generate`` endpoint, with the same
retry policy as ``GeminiClient``.

Configuration (environment variables):
    OLLAMA_BASE_URL   – default ``http://localhost:11434``
    OLLAMA_MODEL      – default model name, e.g. ``llama3``, ``mistral``
"""
from __future__ import annotations

import logging
import os
from typing import Optional

import requests
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception,
    stop_after_attempt,
    stop_after_delay,
    wait_exponential,
)

from fairrate.config import EMAIL_TIMEOUT_SECONDS
from fairrate.llm_base import LLMClient

LOG = logging.getLogger(__name__)

OLLAMA_BASE_URL = os.environ.get("OLLAMA_BASE_URL", "http://localhost:11434")
OLLAMA_DEFAULT_MODEL = os.environ.get("OLLAMA_MODEL", "llama3")
OLLAMA_MAX_RETRIES = int(os.environ.get("OLLAMA_MAX_RETRIES", "2"))


def _is_retryable(exc: BaseException) -> bool:
    """Return True for transient Ollama errors safe to retry."""
    if isinstance(exc, (requests.exceptions.ConnectionError, requests.exceptions.Timeout)):
        return True
    if isinstance(exc, requests.exceptions.HTTPError) and exc.response is not None:
        return exc.response.status_code in (429, 500, 502, 503, 504)
    return False


class OllamaClient(LLMClient):
    """LLM client that calls a local Ollama instance.

    Parameters
    ----------
    base_url : str | None
        Ollama API root (default ``OLLAMA_BASE_URL`` env var).
    default_model : str | None
        Model name to use when none is provided per-call.
    timeout_seconds : float
        Per-request timeout, also the overall retry budget.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        default_model: Optional[str] = None,
        timeout_seconds: float = EMAIL_TIMEOUT_SECONDS,
    ):
        self.base_url = (base_url or OLLAMA_BASE_URL).rstrip("/")
        self.default_model = default_model or OLLAMA_DEFAULT_MODEL
        self.timeout_seconds = timeout_seconds

    def generate(
        self,
        prompt: str,
        model: Optional[str] = None,
        max_tokens: int = 512,
        temperature: float = 0.0,
        system_prompt: Optional[str] = None,
    ) -> str:
        model_id = model or self.default_model
        if not model_id:
            raise ValueError("model must be provided either via constructor or argument")

        payload = {
            "model": model_id,
            "prompt": prompt,
            "stream": False,
            "options": {
                "num_predict": max_tokens,
                "temperature": temperature,
            },
        }
        if system_prompt:
            payload["system"] = system_prompt

        @retry(
            stop=stop_after_attempt(OLLAMA_MAX_RETRIES) | stop_after_delay(self.timeout_seconds),
            wait=wait_exponential(min=0.5, max=4),
            retry=retry_if_exception(_is_retryable),
            before_sleep=before_sleep_log(LOG, logging.WARNING),
            reraise=True,
        )
        def _call() -> str:
            resp = requests.post(
                f"{self.base_url}/api/generate",
                json=payload,
                timeout=self.timeout_seconds,
            )
            resp.raise_for_status()
            return resp.json().get("response", "")

        try:
            return _call()
        except Exception as exc:
            raise RuntimeError(f"Ollama API error: {exc}")


__all__ = ["OllamaClient"]
