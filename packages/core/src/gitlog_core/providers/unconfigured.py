"""Unconfigured summarizer: the default when no API key or model id is set.

Using an explicit variant rather than None means the dispatcher always holds
a summarizer and asks it ``ensure_configured()`` instead of null-checking
in every handler. Git-only tools never touch it.
"""

from __future__ import annotations

from gitlog_core.errors import ConfigurationError
from gitlog_core.providers.base import BaseSummarizer

NOT_CONFIGURED_MESSAGE = (
    "AI analysis not available. Please configure an OpenRouter API key and model ID to use this feature."
)


class UnconfiguredSummarizer(BaseSummarizer):
    def ensure_configured(self) -> None:
        raise ConfigurationError(NOT_CONFIGURED_MESSAGE)

    def _call_api(self, system_prompt: str, user_prompt: str, max_tokens: int) -> str:
        raise ConfigurationError(NOT_CONFIGURED_MESSAGE)
