from __future__ import annotations

import logging

from openai import (
    APIConnectionError,
    APIStatusError,
    APITimeoutError,
    AuthenticationError,
    BadRequestError,
    OpenAI,
    OpenAIError,
    RateLimitError,
)

from gitlog_core.errors import CompletionBackendError
from gitlog_core.providers.base import BaseSummarizer
from gitlog_core.rate_limit import RateLimiter

logger = logging.getLogger(__name__)

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"
_ATTRIBUTION_HEADERS = {
    "HTTP-Referer": "https://github.com/gitlogmcp/gitlogmcp",
    "X-Title": "GitLogMCP",
}


def _error_message(error: OpenAIError) -> str:
    return getattr(error, "message", None) or str(error)


class OpenRouterSummarizer(BaseSummarizer):
    """Summarizer backed by OpenRouter's OpenAI-compatible chat completions API."""

    TIMEOUT = 30.0

    def __init__(
        self,
        api_key: str,
        model_id: str,
        rate_limiter: RateLimiter | None = None,
        language: str = "en",
        client: OpenAI | None = None,
    ):
        super().__init__(rate_limiter=rate_limiter, language=language)
        self.model_id = model_id
        # max_retries=0: failures are reported to the caller, never retried here.
        self.client = client or OpenAI(
            api_key=api_key,
            base_url=OPENROUTER_BASE_URL,
            default_headers=_ATTRIBUTION_HEADERS,
            timeout=self.TIMEOUT,
            max_retries=0,
        )

    def _call_api(self, system_prompt: str, user_prompt: str, max_tokens: int) -> str:
        try:
            response = self.client.chat.completions.create(
                model=self.model_id,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=self.TEMPERATURE,
                max_tokens=max_tokens,
            )
        except AuthenticationError as e:
            raise CompletionBackendError("Invalid OpenRouter API key", status=401) from e
        except RateLimitError as e:
            raise CompletionBackendError("OpenRouter API rate limit exceeded", status=429) from e
        except BadRequestError as e:
            raise CompletionBackendError(f"Invalid request to OpenRouter: {_error_message(e)}", status=400) from e
        except APIStatusError as e:
            raise CompletionBackendError(
                f"OpenRouter API error ({e.status_code}): {_error_message(e)}", status=e.status_code
            ) from e
        except APITimeoutError as e:
            raise CompletionBackendError(f"OpenRouter request timed out after {self.TIMEOUT:g}s") from e
        except APIConnectionError as e:
            raise CompletionBackendError(f"Could not reach OpenRouter: {_error_message(e)}") from e

        if not response.choices or not response.choices[0].message.content:
            raise CompletionBackendError("No response from OpenRouter API")
        return response.choices[0].message.content.strip()

    def test_connection(self) -> bool:
        """Return True if the API answers a model listing request."""
        self._admit()
        try:
            self.client.models.list()
            return True
        except OpenAIError as e:
            logger.warning("OpenRouter connection test failed: %s", _error_message(e))
            return False
