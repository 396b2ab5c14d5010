"""Split raw script content into conceptual segments using an LLM."""

import json
import logging
from dataclasses import dataclass

from ideareel.llm.base import LLMClient
from ideareel.models import ConceptualSegment
from ideareel.script.prompts import build_segmentation_prompt

logger = logging.getLogger(__name__)

FALLBACK_THEME = "Complete Content"
FALLBACK_VISUAL = "Visual representation of the main topic"
CLOSING_THEME = "Closing"


@dataclass(frozen=True)
class SegmentationOk:
    """The model's answer was usable."""

    segments: list[ConceptualSegment]


@dataclass(frozen=True)
class SegmentationFallback:
    """The model's answer was unusable; ``reason`` says why."""

    reason: str


SegmentationResult = SegmentationOk | SegmentationFallback


def fallback_segments(raw_content: str) -> list[ConceptualSegment]:
    """A single segment spanning the entire content."""
    return [
        ConceptualSegment(
            index=0,
            concept_theme=FALLBACK_THEME,
            visual_description=FALLBACK_VISUAL,
            content=raw_content,
        )
    ]


def strip_code_fences(raw: str) -> str:
    """Remove markdown code fence lines around a JSON payload."""
    text = raw.strip()
    if text.startswith("```"):
        lines = text.split("\n")
        lines = lines[1:]
        if lines and lines[-1].strip().startswith("```"):
            lines = lines[:-1]
        text = "\n".join(lines)
    return text.replace("```json", "").replace("```", "").strip()


def parse_segments(response: str, raw_content: str) -> SegmentationResult:
    """Rebuild conceptual segments from a boundary-phrase JSON answer.

    Each ``endPhrase`` is searched for in order, never before the end of the
    previous match. Text after the last phrase becomes a closing segment.
    """
    try:
        data = json.loads(strip_code_fences(response))
    except json.JSONDecodeError as e:
        return SegmentationFallback(f"invalid JSON: {e}")

    if not isinstance(data, list):
        return SegmentationFallback("expected a JSON array")
    if not data:
        return SegmentationFallback("empty segment list")

    segments: list[ConceptualSegment] = []
    cursor = 0
    last_visual = ""
    for i, entry in enumerate(data):
        if not isinstance(entry, dict):
            return SegmentationFallback(f"entry {i} is not an object")
        phrase = str(entry.get("endPhrase") or "").strip()
        if not phrase:
            return SegmentationFallback(f"entry {i} has no endPhrase")
        found = raw_content.find(phrase, cursor)
        if found == -1:
            return SegmentationFallback(f"endPhrase {i} not found: {phrase[:50]!r}")
        end = found + len(phrase)
        last_visual = str(entry.get("visualDescription") or "")
        segments.append(
            ConceptualSegment(
                index=len(segments),
                concept_theme=str(entry.get("conceptTheme") or f"Segment {i + 1}"),
                visual_description=last_visual,
                content=raw_content[cursor:end],
            )
        )
        cursor = end

    tail = raw_content[cursor:]
    if tail.strip():
        segments.append(
            ConceptualSegment(
                index=len(segments),
                concept_theme=CLOSING_THEME,
                visual_description=last_visual,
                content=tail,
            )
        )
    elif tail:
        last = segments[-1]
        segments[-1] = last.model_copy(update={"content": last.content + tail})

    covered = sum(len(s.content) for s in segments)
    if covered != len(raw_content):
        return SegmentationFallback(
            f"coverage mismatch: {covered} of {len(raw_content)} characters"
        )
    return SegmentationOk(segments)


class SegmentIdentifier:
    """Asks the LLM where the visuals should change."""

    def __init__(self, llm: LLMClient) -> None:
        self._llm = llm

    async def identify(self, raw_content: str) -> list[ConceptualSegment]:
        """Return conceptual segments in index order.

        Unusable answers fall back to a single segment covering everything;
        only LLM transport errors propagate.
        """
        response = await self._llm.complete(build_segmentation_prompt(raw_content))
        result = parse_segments(response, raw_content)
        if isinstance(result, SegmentationFallback):
            logger.warning(
                "Falling back to a single segment (%s). Raw response: %.200s",
                result.reason,
                response,
            )
            return fallback_segments(raw_content)

        logger.info("Identified %d conceptual segments", len(result.segments))
        return result.segments
