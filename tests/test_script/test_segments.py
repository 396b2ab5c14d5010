"""Tests for conceptual segment identification."""

import json
import logging
from unittest.mock import AsyncMock

import pytest

from ideareel.script.segments import (
    CLOSING_THEME,
    FALLBACK_THEME,
    SegmentationFallback,
    SegmentationOk,
    SegmentIdentifier,
    fallback_segments,
    parse_segments,
    strip_code_fences,
)

RAW = (
    "The sun rises early. Birds start singing.\n\n"
    "By noon the heat is strong. Evening brings relief."
)


def _answer(*entries: tuple[str, str]) -> str:
    return json.dumps(
        [
            {
                "endPhrase": phrase,
                "conceptTheme": theme,
                "visualDescription": f"{theme} scene",
            }
            for phrase, theme in entries
        ]
    )


class TestStripCodeFences:
    def test_plain_json_untouched(self) -> None:
        assert strip_code_fences('[{"a": 1}]') == '[{"a": 1}]'

    def test_json_fence_removed(self) -> None:
        assert strip_code_fences('```json\n[1, 2]\n```') == "[1, 2]"

    def test_bare_fence_removed(self) -> None:
        assert strip_code_fences("```\n[]\n```\n") == "[]"


class TestParseSegments:
    def test_segments_cover_content(self) -> None:
        result = parse_segments(
            _answer(("Birds start singing.", "Morning"), ("brings relief.", "Day")),
            RAW,
        )
        assert isinstance(result, SegmentationOk)
        segments = result.segments
        assert [s.index for s in segments] == [0, 1]
        assert segments[0].content == "The sun rises early. Birds start singing."
        assert segments[1].content.startswith("\n\nBy noon")
        assert "".join(s.content for s in segments) == RAW
        assert segments[0].concept_theme == "Morning"
        assert segments[1].visual_description == "Day scene"

    def test_code_fenced_answer(self) -> None:
        answer = "```json\n" + _answer(("brings relief.", "All")) + "\n```"
        result = parse_segments(answer, RAW)
        assert isinstance(result, SegmentationOk)
        assert result.segments[0].content == RAW

    def test_trailing_text_becomes_closing_segment(self) -> None:
        result = parse_segments(_answer(("Birds start singing.", "Morning")), RAW)
        assert isinstance(result, SegmentationOk)
        closing = result.segments[-1]
        assert closing.index == 1
        assert closing.concept_theme == CLOSING_THEME
        assert closing.visual_description == "Morning scene"
        assert closing.content == RAW[len("The sun rises early. Birds start singing.") :]

    def test_trailing_whitespace_joins_last_segment(self) -> None:
        raw = RAW + "\n"
        result = parse_segments(_answer(("brings relief.", "All")), raw)
        assert isinstance(result, SegmentationOk)
        assert len(result.segments) == 1
        assert result.segments[0].content == raw

    def test_missing_theme_gets_numbered_label(self) -> None:
        answer = json.dumps([{"endPhrase": "Birds start singing."}, {"endPhrase": "relief."}])
        result = parse_segments(answer, RAW)
        assert isinstance(result, SegmentationOk)
        assert [s.concept_theme for s in result.segments] == ["Segment 1", "Segment 2"]
        assert result.segments[0].visual_description == ""

    @pytest.mark.parametrize(
        "answer",
        [
            "I think there are two segments.",
            '{"endPhrase": "relief."}',
            "[]",
            '["relief."]',
            '[{"conceptTheme": "No phrase"}]',
            _answer(("This never appears.", "Ghost")),
            _answer(("brings relief.", "Late"), ("Birds start singing.", "Early")),
        ],
        ids=[
            "not-json",
            "not-array",
            "empty",
            "not-object",
            "no-phrase",
            "phrase-missing",
            "out-of-order",
        ],
    )
    def test_unusable_answers_fall_back(self, answer: str) -> None:
        result = parse_segments(answer, RAW)
        assert isinstance(result, SegmentationFallback)
        assert result.reason


class TestFallbackSegments:
    def test_single_segment_covers_everything(self) -> None:
        segments = fallback_segments(RAW)
        assert len(segments) == 1
        assert segments[0].index == 0
        assert segments[0].concept_theme == FALLBACK_THEME
        assert segments[0].content == RAW


class TestSegmentIdentifier:
    @pytest.mark.asyncio
    async def test_identify_uses_llm_answer(self, llm: AsyncMock) -> None:
        llm.complete.return_value = _answer(
            ("Birds start singing.", "Morning"), ("brings relief.", "Day")
        )
        segments = await SegmentIdentifier(llm).identify(RAW)
        assert len(segments) == 2
        prompt = llm.complete.call_args.args[0]
        assert RAW in prompt
        assert "endPhrase" in prompt

    @pytest.mark.asyncio
    async def test_malformed_answer_falls_back(
        self, llm: AsyncMock, caplog: pytest.LogCaptureFixture
    ) -> None:
        llm.complete.return_value = "Sorry, here is the JSON: [oops"
        with caplog.at_level(logging.WARNING):
            segments = await SegmentIdentifier(llm).identify(RAW)
        assert len(segments) == 1
        assert segments[0].concept_theme == "Complete Content"
        assert segments[0].content == RAW
        assert "Falling back" in caplog.text

    @pytest.mark.asyncio
    async def test_llm_errors_propagate(self, llm: AsyncMock) -> None:
        llm.complete.side_effect = RuntimeError("boom")
        with pytest.raises(RuntimeError, match="boom"):
            await SegmentIdentifier(llm).identify(RAW)
