"""Abstract base class for LLM clients.

Every LLM backend (Gemini, Ollama) must implement this thin interface so
the email drafter stays provider-agnostic.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional


class LLMClient(ABC):
    """Minimal contract that all LLM backends must satisfy."""

    default_model: Optional[str]

    @abstractmethod
    def generate(
        self,
        prompt: str,
        model: Optional[str] = None,
        max_tokens: int = 512,
        temperature: float = 0.0,
        system_prompt: Optional[str] = None,
    ) -> str:
        """Return the full model response as a single string."""


__all__ = ["LLMClient"]
