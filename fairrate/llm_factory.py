"""LLM provider factory: returns the right client based on configuration.

The provider is selected by the ``LLM_PROVIDER`` environment variable:

- ``gemini`` (default): uses the Gemini (Google GenAI) SDK
- ``ollama``: calls a local Ollama instance

Callers should use ``get_llm_client()`` instead of instantiating
``GeminiClient`` / ``OllamaClient`` directly so the provider can be
swapped by configuration alone.
"""
from __future__ import annotations

import logging
import os
from typing import Optional

from fairrate.llm_base import LLMClient

LOG = logging.getLogger(__name__)

LLM_PROVIDER = os.environ.get("LLM_PROVIDER", "gemini").lower().strip()

SUPPORTED_PROVIDERS = ("gemini", "ollama")


def _resolve(provider: Optional[str]) -> str:
    return (provider or LLM_PROVIDER).lower().strip()


def llm_is_configured(provider: Optional[str] = None) -> bool:
    """True when the provider has what it needs to be called.

    Gemini needs ``GEMINI_API_KEY``; a local Ollama needs nothing.
    """
    prov = _resolve(provider)
    if prov == "gemini":
        return bool(os.environ.get("GEMINI_API_KEY"))
    return prov in SUPPORTED_PROVIDERS


def get_llm_client(
    *,
    provider: Optional[str] = None,
    default_model: Optional[str] = None,
) -> LLMClient:
    """Instantiate and return the configured LLM client.

    Parameters
    ----------
    provider : str | None
        Override ``LLM_PROVIDER`` env var for this call.
    default_model : str | None
        Override the provider's default model for this instance.
    """
    prov = _resolve(provider)
    kwargs: dict = {}
    if default_model:
        kwargs["default_model"] = default_model

    if prov == "gemini":
        from fairrate.gemini_client import GeminiClient
        return GeminiClient(**kwargs)

    if prov == "ollama":
        from fairrate.ollama_client import OllamaClient
        return OllamaClient(**kwargs)

    raise ValueError(
        f"Unknown LLM_PROVIDER '{prov}'. "
        "Supported values: gemini, ollama"
    )


__all__ = ["get_llm_client", "llm_is_configured", "LLM_PROVIDER"]
