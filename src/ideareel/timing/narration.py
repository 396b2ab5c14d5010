"""ElevenLabs text-to-speech with per-character timestamps."""

import base64
import binascii
import logging
from dataclasses import dataclass

import httpx
from pydantic import ValidationError

from ideareel.errors import (
    ConfigurationError,
    NarrationTimeoutError,
    TimingServiceError,
)
from ideareel.models import AudioBlob, CharacterTiming

logger = logging.getLogger(__name__)

_API_BASE = "https://api.elevenlabs.io/v1"
_DEFAULT_TIMEOUT = 120.0
_OUTPUT_FORMAT = "mp3_44100_128"


@dataclass
class NarrationResult:
    """Narration audio plus the provider's character alignment."""

    audio: AudioBlob
    character_timings: CharacterTiming


class NarrationService:
    """Narration via the ElevenLabs ``with-timestamps`` endpoint.

    Errors are not retried here; a timeout surfaces as
    :class:`NarrationTimeoutError`, everything else as
    :class:`TimingServiceError`.
    """

    def __init__(
        self,
        api_key: str,
        timeout: float = _DEFAULT_TIMEOUT,
        base_url: str = _API_BASE,
    ) -> None:
        if not api_key:
            raise ConfigurationError(["elevenlabs_api_key"])
        self._api_key = api_key
        self._timeout = timeout
        self._base_url = base_url.rstrip("/")

    async def synthesize(
        self, text: str, voice_id: str, model_id: str
    ) -> NarrationResult:
        """Narrate ``text`` and return MP3 audio with character timings."""
        logger.info(
            "Starting voice generation (voice=%s, model=%s, %d chars)",
            voice_id,
            model_id,
            len(text),
        )
        url = f"{self._base_url}/text-to-speech/{voice_id}/with-timestamps"
        headers = {
            "Accept": "application/json",
            "xi-api-key": self._api_key,
        }
        payload = {
            "text": text,
            "model_id": model_id,
            "output_format": _OUTPUT_FORMAT,
        }

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.post(url, headers=headers, json=payload)
        except httpx.TimeoutException as e:
            msg = (
                "Voice generation timed out - text may be too long or "
                "service is experiencing delays"
            )
            raise NarrationTimeoutError(msg) from e
        except httpx.HTTPError as e:
            msg = f"Voice generation request failed: {e}"
            raise TimingServiceError(msg) from e

        if response.is_error:
            msg = (
                f"ElevenLabs returned {response.status_code}: "
                f"{_error_message(response)}"
            )
            raise TimingServiceError(msg)

        return self._parse_response(response)

    @staticmethod
    def _parse_response(response: httpx.Response) -> NarrationResult:
        try:
            data = response.json()
        except ValueError as e:
            msg = "Invalid response format from ElevenLabs: body is not JSON"
            raise TimingServiceError(msg) from e

        if not isinstance(data, dict):
            msg = "Invalid response format from ElevenLabs"
            raise TimingServiceError(msg)
        audio_b64 = data.get("audio_base64")
        alignment = data.get("alignment")
        if not audio_b64 or not alignment:
            msg = "Invalid response format from ElevenLabs"
            raise TimingServiceError(msg)

        try:
            audio_bytes = base64.b64decode(audio_b64, validate=True)
        except (binascii.Error, ValueError) as e:
            msg = "ElevenLabs returned undecodable audio"
            raise TimingServiceError(msg) from e

        try:
            timings = CharacterTiming(
                characters=alignment["characters"],
                character_start_times_seconds=alignment[
                    "character_start_times_seconds"
                ],
                character_end_times_seconds=alignment[
                    "character_end_times_seconds"
                ],
            )
        except (KeyError, TypeError, ValidationError) as e:
            msg = f"ElevenLabs returned an invalid alignment: {e}"
            raise TimingServiceError(msg) from e

        logger.info(
            "Narration ready: %d bytes audio, %d characters, %.2fs",
            len(audio_bytes),
            len(timings.characters),
            timings.total_duration,
        )
        return NarrationResult(
            audio=AudioBlob(data=audio_bytes, mime_type="audio/mpeg"),
            character_timings=timings,
        )


def _error_message(response: httpx.Response) -> str:
    """Extract the provider's error message from a failed response."""
    try:
        data = response.json()
    except ValueError:
        return response.text
    if isinstance(data, dict):
        detail = data.get("detail", data)
        if isinstance(detail, dict):
            return str(detail.get("message", detail))
        return str(detail)
    return str(data)
