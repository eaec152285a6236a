"""Drafts rate-increase emails with the configured LLM.

Drafting is optional polish on top of the calculation: when the provider is
not configured, times out or fails, the caller gets a fixed template email
and an ``error`` indicator instead of a failed request.
"""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from fairrate.config import EMAIL_MAX_TOKENS, EMAIL_TEMPERATURE, EMAIL_TIMEOUT_SECONDS
from fairrate.llm_base import LLMClient
from fairrate.llm_factory import get_llm_client, llm_is_configured

LOG = logging.getLogger(__name__)

NOT_CONFIGURED_ERROR = "AI service not configured"
GENERATION_FAILED_ERROR = "Email generation failed"

SYSTEM_PROMPT = (
    "You are a professional freelance consultant helping write polite, "
    "concise rate adjustment emails."
)


def _fmt(value: Any) -> str:
    return "" if value is None else str(value)


def build_prompt(client_location: Any, current_rate: Any, fair_rate: Any, skill: Any) -> str:
    return (
        f"Write a professional email to a client in {_fmt(client_location)} explaining "
        f"a rate increase from ${_fmt(current_rate)} to ${_fmt(fair_rate)} for "
        f"{_fmt(skill)} services. Mention purchasing power parity and inflation. "
        "Keep it under 150 words."
    )


def fallback_email(skill: Any, fair_rate: Any) -> str:
    return (
        f"Subject: Rate Update for {_fmt(skill)} Services\n\n"
        "Dear Client,\n\n"
        "I hope this message finds you well. After careful consideration of current "
        "market rates and cost of living adjustments, I'm updating my rate for "
        f"{_fmt(skill)} services to ${_fmt(fair_rate)}/hour.\n\n"
        "This adjustment reflects the current economic environment while ensuring I can "
        "continue delivering the high-quality work you expect.\n\n"
        "I appreciate your understanding and look forward to continuing our partnership.\n\n"
        "Best regards"
    )


@dataclass
class EmailDraft:
    email: Optional[str] = None
    error: Optional[str] = None
    fallback: Optional[str] = None

    @property
    def generated(self) -> bool:
        return self.error is None

    def to_dict(self) -> Dict[str, Any]:
        if self.generated:
            return {"email": self.email}
        return {"error": self.error, "fallback": self.fallback}


class EmailDrafter:
    def __init__(
        self,
        client_factory: Callable[[], LLMClient] = get_llm_client,
        is_configured: Callable[[], bool] = llm_is_configured,
        timeout_seconds: float = EMAIL_TIMEOUT_SECONDS,
        max_workers: int = 4,
    ):
        self._client_factory = client_factory
        self._is_configured = is_configured
        self.timeout_seconds = timeout_seconds
        # Provider calls run here; the request thread stops waiting at the timeout
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="email-draft")

    def close(self) -> None:
        """Stop the worker pool, dropping drafts that have not started."""
        self._executor.shutdown(wait=False, cancel_futures=True)

    def draft(
        self,
        *,
        fair_rate: Any,
        current_rate: Any,
        skill: Any,
        client_location: Any,
    ) -> EmailDraft:
        fallback = fallback_email(skill, fair_rate)
        if not self._is_configured():
            LOG.info("Email drafting requested but no LLM provider is configured")
            return EmailDraft(error=NOT_CONFIGURED_ERROR, fallback=fallback)

        prompt = build_prompt(client_location, current_rate, fair_rate, skill)
        try:
            future = self._executor.submit(self._generate, prompt)
            text = future.result(timeout=self.timeout_seconds)
        except FutureTimeout:
            future.cancel()
            LOG.warning("Email drafting timed out after %ss", self.timeout_seconds)
            return EmailDraft(error=GENERATION_FAILED_ERROR, fallback=fallback)
        except Exception:
            LOG.exception("AI email generation error")
            return EmailDraft(error=GENERATION_FAILED_ERROR, fallback=fallback)

        if not text or not text.strip():
            LOG.warning("LLM returned an empty email draft")
            return EmailDraft(error=GENERATION_FAILED_ERROR, fallback=fallback)
        return EmailDraft(email=text.strip())

    def _generate(self, prompt: str) -> str:
        client = self._client_factory()
        return client.generate(
            prompt,
            max_tokens=EMAIL_MAX_TOKENS,
            temperature=EMAIL_TEMPERATURE,
            system_prompt=SYSTEM_PROMPT,
        )


__all__ = ["EmailDrafter", "EmailDraft", "build_prompt", "fallback_email"]
