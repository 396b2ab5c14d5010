"""Leonardo.ai generation job API."""

import logging
from typing import Any

import httpx

from ideareel.errors import ConfigurationError, GenerationFailedError, ProviderError

logger = logging.getLogger(__name__)

_API_URL = "https://cloud.leonardo.ai/api/rest/v1/generations"
MAX_PROMPT_LENGTH = 1500
_WIDTH = 1472
_HEIGHT = 832
_TIMEOUT = 60.0


class LeonardoClient:
    """Submit image jobs and poll them by generation id."""

    def __init__(
        self,
        api_key: str,
        model_id: str = "b2614463-296c-462a-9586-aafdb8f00e36",
        base_url: str = _API_URL,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        if not api_key:
            raise ConfigurationError(["leonardo_api_key"])
        self._model_id = model_id
        self._base_url = base_url.rstrip("/")
        self._client = http_client or httpx.AsyncClient(timeout=_TIMEOUT)
        self._headers = {
            "accept": "application/json",
            "authorization": f"Bearer {api_key}",
        }

    async def aclose(self) -> None:
        await self._client.aclose()

    async def submit(self, prompt: str, style_preset: str | None = None) -> str:
        """Start a generation job and return its id."""
        if len(prompt) > MAX_PROMPT_LENGTH:
            msg = (
                f"Prompt exceeds maximum length of {MAX_PROMPT_LENGTH} "
                f"characters (current: {len(prompt)})"
            )
            raise ValueError(msg)

        body: dict[str, Any] = {
            "modelId": self._model_id,
            "prompt": prompt,
            "width": _WIDTH,
            "height": _HEIGHT,
            "num_images": 1,
        }
        if style_preset:
            body["styleUUID"] = style_preset

        logger.debug("Submitting image job: %.100s", prompt)
        data = await self._request("POST", self._base_url, json=body)
        generation_id = (data.get("sdGenerationJob") or {}).get("generationId")
        if not generation_id:
            raise ProviderError("Leonardo", "No generation ID received")
        return str(generation_id)

    async def fetch(self, generation_id: str) -> str | None:
        """Return the image URL once ready, ``None`` while still pending."""
        data = await self._request("GET", f"{self._base_url}/{generation_id}")
        generation = data.get("generations_by_pk") or {}
        status = generation.get("status")
        if status == "FAILED":
            msg = f"Generation {generation_id} failed"
            raise GenerationFailedError(msg)

        images = generation.get("generated_images") or []
        first = images[0] if images and isinstance(images[0], dict) else {}
        if first.get("url"):
            return str(first["url"])
        if status == "COMPLETE":
            msg = f"Generation {generation_id} completed without an image URL"
            raise GenerationFailedError(msg)
        return None

    async def _request(self, method: str, url: str, **kwargs: Any) -> dict[str, Any]:
        try:
            response = await self._client.request(
                method, url, headers=self._headers, **kwargs
            )
        except httpx.HTTPError as e:
            raise ProviderError("Leonardo", f"Request failed: {e}") from e

        if response.is_error:
            raise ProviderError("Leonardo", response.text, response.status_code)
        try:
            data = response.json()
        except ValueError as e:
            raise ProviderError("Leonardo", "Response is not JSON") from e
        return data if isinstance(data, dict) else {}
