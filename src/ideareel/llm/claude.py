"""Anthropic Claude completion backend."""

import asyncio
import logging

import anthropic

from ideareel.errors import ConfigurationError, ProviderError
from ideareel.llm.base import LLMClient

logger = logging.getLogger(__name__)

_MAX_RETRIES = 3
_RETRY_DELAY = 2.0


class ClaudeClient(LLMClient):
    """Completion using the Anthropic Messages API."""

    def __init__(
        self,
        api_key: str,
        model: str = "claude-sonnet-4-6",
        max_tokens: int = 1024,
        client: anthropic.AsyncAnthropic | None = None,
    ) -> None:
        if client is None:
            if not api_key:
                raise ConfigurationError(["anthropic_api_key"])
            client = anthropic.AsyncAnthropic(api_key=api_key)
        self._client = client
        self._model = model
        self._max_tokens = max_tokens

    async def complete(self, prompt: str) -> str:
        """Make a Claude API call with retry logic."""
        for attempt in range(_MAX_RETRIES):
            try:
                message = await self._client.messages.create(
                    model=self._model,
                    max_tokens=self._max_tokens,
                    messages=[{"role": "user", "content": prompt}],
                )
                return message.content[0].text  # type: ignore[union-attr]
            except anthropic.APIError as e:
                if attempt < _MAX_RETRIES - 1:
                    delay = _RETRY_DELAY * (2**attempt)
                    logger.warning(
                        "Claude API error (attempt %d/%d): %s. Retrying in %.1fs",
                        attempt + 1,
                        _MAX_RETRIES,
                        e,
                        delay,
                    )
                    await asyncio.sleep(delay)
                else:
                    status = getattr(e, "status_code", None)
                    raise ProviderError("Anthropic", str(e), status) from e
        msg = "Unexpected: exhausted retries"
        raise RuntimeError(msg)
