"""Subtitle phrases built from character timings, with fades and wrapping."""

from collections.abc import Callable
from functools import lru_cache

from pydantic import BaseModel

from ideareel.models import CharacterTiming

FONT_SIZE = 32
MAX_LINE_WIDTH = 1200
FADE_DURATION = 0.1
_SENTENCE_END = frozenset(".!?")

TextMeasure = Callable[[str], float]


class Phrase(BaseModel):
    """A run of narrated text shown as one subtitle."""

    text: str
    start_time: float
    end_time: float


class SubtitleFrame(BaseModel):
    """What the subtitle layer shows at one instant."""

    text: str
    lines: list[str]
    opacity: float


def build_phrases(
    timings: CharacterTiming, max_line_length: int = 80
) -> list[Phrase]:
    """Group narrated characters into subtitle phrases.

    A phrase closes after sentence-ending punctuation, at the first word
    boundary once ``max_line_length`` characters are collected, or at the end
    of input. Whitespace never opens a phrase.
    """
    phrases: list[Phrase] = []
    buffer: list[str] = []
    start_time = 0.0
    last_end = 0.0

    def commit() -> None:
        text = "".join(buffer).strip()
        if text:
            phrases.append(
                Phrase(text=text, start_time=start_time, end_time=last_end)
            )
        buffer.clear()

    for char, start, end in zip(
        timings.characters,
        timings.character_start_times_seconds,
        timings.character_end_times_seconds,
    ):
        if not buffer:
            if char.isspace():
                continue
            start_time = start
        buffer.append(char)
        last_end = end
        if char in _SENTENCE_END or (
            len(buffer) >= max_line_length and char.isspace()
        ):
            commit()

    commit()
    return phrases


def subtitle_opacity(
    phrase: Phrase, seconds: float, fade: float = FADE_DURATION
) -> float:
    """Linear fade-in after the start and fade-out after the end."""
    if seconds < phrase.start_time or seconds > phrase.end_time + fade:
        return 0.0
    if fade <= 0:
        return 1.0
    fade_in = (seconds - phrase.start_time) / fade
    fade_out = 1.0 - (seconds - phrase.end_time) / fade
    return max(0.0, min(1.0, fade_in, fade_out))


def wrap_lines(text: str, max_width: float, measure: TextMeasure) -> list[str]:
    """Greedily pack words into lines no wider than ``max_width``.

    A single word wider than ``max_width`` gets a line of its own.
    """
    lines: list[str] = []
    current = ""
    for word in text.split():
        candidate = f"{current} {word}" if current else word
        if measure(candidate) > max_width and current:
            lines.append(current)
            current = word
        else:
            current = candidate
    if current:
        lines.append(current)
    return lines


@lru_cache(maxsize=8)
def pillow_measure(font_size: int = FONT_SIZE, font_path: str | None = None) -> TextMeasure:
    """Text width measurement backed by a Pillow font."""
    from PIL import ImageFont

    if font_path:
        font = ImageFont.truetype(font_path, font_size)
    else:
        font = ImageFont.load_default(size=font_size)
    return font.getlength


class SubtitleTrack:
    """Phrases for a narration, computed once and queried per frame."""

    def __init__(
        self,
        timings: CharacterTiming,
        max_line_length: int = 80,
        fade: float = FADE_DURATION,
        max_line_width: float = MAX_LINE_WIDTH,
        measure: TextMeasure | None = None,
    ) -> None:
        self.phrases = build_phrases(timings, max_line_length)
        self._fade = fade
        self._max_line_width = max_line_width
        self._measure = measure

    def phrase_at(self, seconds: float) -> Phrase | None:
        for phrase in self.phrases:
            if phrase.start_time <= seconds <= phrase.end_time + self._fade:
                return phrase
        return None

    def at(self, seconds: float) -> SubtitleFrame | None:
        """The subtitle visible at ``seconds``, if any."""
        phrase = self.phrase_at(seconds)
        if phrase is None:
            return None
        measure = self._measure or pillow_measure()
        return SubtitleFrame(
            text=phrase.text,
            lines=wrap_lines(phrase.text, self._max_line_width, measure),
            opacity=subtitle_opacity(phrase, seconds, self._fade),
        )

    def at_frame(self, frame: int, fps: int) -> SubtitleFrame | None:
        return self.at(frame / fps)
