"""OpenAI chat completion backend."""

import asyncio
import logging

import openai

from ideareel.errors import ConfigurationError, ProviderError
from ideareel.llm.base import LLMClient

logger = logging.getLogger(__name__)

_MAX_RETRIES = 3
_RETRY_DELAY = 2.0


class OpenAIChatClient(LLMClient):
    """Completion using the OpenAI Chat Completions API."""

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o",
        temperature: float = 0.7,
        client: openai.AsyncOpenAI | None = None,
    ) -> None:
        if client is None:
            if not api_key:
                raise ConfigurationError(["openai_api_key"])
            client = openai.AsyncOpenAI(api_key=api_key)
        self._client = client
        self._model = model
        self._temperature = temperature

    async def complete(self, prompt: str) -> str:
        for attempt in range(_MAX_RETRIES):
            try:
                response = await self._client.chat.completions.create(
                    model=self._model,
                    messages=[{"role": "user", "content": prompt}],
                    temperature=self._temperature,
                )
                return response.choices[0].message.content or ""
            except openai.APIError as e:
                if attempt < _MAX_RETRIES - 1:
                    delay = _RETRY_DELAY * (2**attempt)
                    logger.warning(
                        "OpenAI API error (attempt %d/%d): %s. Retrying in %.1fs",
                        attempt + 1,
                        _MAX_RETRIES,
                        e,
                        delay,
                    )
                    await asyncio.sleep(delay)
                else:
                    status = getattr(e, "status_code", None)
                    raise ProviderError("OpenAI", str(e), status) from e
        msg = "Unexpected: exhausted retries"
        raise RuntimeError(msg)
