"""Abstract base class for LLM completion backends."""

from abc import ABC, abstractmethod

from ideareel.config import IdeaReelConfig
from ideareel.errors import ConfigurationError


class LLMClient(ABC):
    """Base class for prompt-in, text-out language model backends."""

    @abstractmethod
    async def complete(self, prompt: str) -> str:
        """Complete a single user prompt.

        Args:
            prompt: The full user prompt.

        Returns:
            The model's text answer (possibly empty).
        """
        ...


def create_llm_client(provider: str, config: IdeaReelConfig) -> LLMClient:
    """Build the backend selected by ``provider`` ("gpt4" or "claude")."""
    if provider == "claude":
        from ideareel.llm.claude import ClaudeClient

        return ClaudeClient(
            api_key=config.keys.anthropic_api_key,
            model=config.llm.claude_model,
            max_tokens=config.llm.max_tokens,
        )
    if provider == "gpt4":
        from ideareel.llm.openai_chat import OpenAIChatClient

        return OpenAIChatClient(
            api_key=config.keys.openai_api_key,
            model=config.llm.openai_model,
            temperature=config.llm.temperature,
        )
    msg = f"Unknown LLM provider: {provider}"
    raise ConfigurationError(["llm.provider"], msg)
