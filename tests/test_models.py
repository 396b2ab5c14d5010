"""Tests for Pydantic data models."""

import pytest
from pydantic import ValidationError

from ideareel.models import (
    CharacterTiming,
    ConceptualSegment,
    GenerationConfig,
    SegmentTiming,
    default_voice_model,
)


class TestCharacterTiming:
    def test_valid_timing(self) -> None:
        t = CharacterTiming(
            characters=["H", "i"],
            character_start_times_seconds=[0.0, 0.1],
            character_end_times_seconds=[0.1, 0.25],
        )
        assert t.total_duration == 0.25

    def test_empty_timing_has_zero_duration(self) -> None:
        t = CharacterTiming(
            characters=[],
            character_start_times_seconds=[],
            character_end_times_seconds=[],
        )
        assert t.total_duration == 0.0

    def test_length_mismatch(self) -> None:
        with pytest.raises(ValidationError, match="differ in length"):
            CharacterTiming(
                characters=["a", "b"],
                character_start_times_seconds=[0.0],
                character_end_times_seconds=[0.1, 0.2],
            )

    def test_end_before_start(self) -> None:
        with pytest.raises(ValidationError, match="ends before it starts"):
            CharacterTiming(
                characters=["a"],
                character_start_times_seconds=[0.5],
                character_end_times_seconds=[0.4],
            )

    def test_decreasing_starts(self) -> None:
        with pytest.raises(ValidationError, match="decrease"):
            CharacterTiming(
                characters=["a", "b"],
                character_start_times_seconds=[0.3, 0.2],
                character_end_times_seconds=[0.4, 0.5],
            )


class TestSegmentTiming:
    def test_valid(self) -> None:
        t = SegmentTiming(
            start=1.0, end=3.0, duration=2.0, content_start=0, content_end=10
        )
        assert t.duration == 2.0

    def test_end_before_start(self) -> None:
        with pytest.raises(ValidationError):
            SegmentTiming(
                start=3.0, end=1.0, duration=-2.0, content_start=0, content_end=1
            )

    def test_duration_must_match(self) -> None:
        with pytest.raises(ValidationError, match="duration"):
            SegmentTiming(
                start=1.0, end=3.0, duration=5.0, content_start=0, content_end=1
            )


class TestGenerationConfig:
    def test_segment_count_minimum(self) -> None:
        with pytest.raises(ValidationError):
            GenerationConfig(
                topic="t", style="s", style_preset="p", segment_count=0
            )

    def test_invalid_provider(self) -> None:
        with pytest.raises(ValidationError):
            GenerationConfig(
                topic="t",
                style="s",
                style_preset="p",
                llm_provider="llama",  # type: ignore[arg-type]
            )

    def test_frozen(self) -> None:
        config = GenerationConfig(topic="t", style="s", style_preset="p")
        with pytest.raises(ValidationError):
            config.topic = "other"  # type: ignore[misc]


class TestConceptualSegment:
    def test_negative_index(self) -> None:
        with pytest.raises(ValidationError):
            ConceptualSegment(index=-1, concept_theme="x", content="y")

    def test_timing_optional(self) -> None:
        seg = ConceptualSegment(index=0, concept_theme="x", content="y")
        assert seg.timing is None
        assert seg.visual_description == ""


def test_default_voice_model() -> None:
    assert default_voice_model().id == "eleven_multilingual_v2"
