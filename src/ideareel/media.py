"""Audio decoding helpers."""

import io
import logging
from abc import ABC, abstractmethod

from pydub import AudioSegment

logger = logging.getLogger(__name__)


class MediaCodec(ABC):
    """Decodes encoded media payloads."""

    @abstractmethod
    def decode_audio_duration(self, data: bytes) -> float:
        """Return the playable duration of encoded audio in seconds."""
        ...


class PydubCodec(MediaCodec):
    """Decode audio with pydub (needs ffmpeg for MP3)."""

    def __init__(self, audio_format: str = "mp3") -> None:
        self._format = audio_format

    def decode_audio_duration(self, data: bytes) -> float:
        segment = AudioSegment.from_file(io.BytesIO(data), format=self._format)
        duration = len(segment) / 1000.0
        logger.debug("Decoded %d bytes of %s: %.3fs", len(data), self._format, duration)
        return duration
