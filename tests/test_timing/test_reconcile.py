"""Tests for mapping narration timing onto conceptual segments."""

import logging

import pytest

from ideareel.errors import SegmentAlignmentError
from ideareel.models import CharacterTiming, ConceptualSegment, Script
from ideareel.timing.reconcile import reconcile

_RAW = "First idea here.\n\nSecond   idea follows. Third idea ends it."


def _script(contents: list[str], raw: str = _RAW) -> Script:
    return Script(
        outline="outline",
        raw_content=raw,
        conceptual_segments=[
            ConceptualSegment(index=i, concept_theme=f"Theme {i}", content=c)
            for i, c in enumerate(contents)
        ],
        style="casual",
    )


class TestReconcile:
    def test_assigns_timing_to_every_segment(self, make_timings) -> None:
        script = _script(
            [
                "First idea here.\n\n",
                "Second   idea follows. ",
                "Third idea ends it.",
            ]
        )
        timings = make_timings(_RAW)
        result = reconcile(script, timings)

        segments = result.conceptual_segments
        assert all(s.timing is not None for s in segments)
        first, second, third = (s.timing for s in segments)
        assert first.start == 0.0
        assert first.end == pytest.approx(1.6)  # "First idea here." is 16 chars
        assert first.content_start == 0
        assert first.content_end == 16
        assert second.content_start == _RAW.index("Second")
        assert second.start == pytest.approx(_RAW.index("Second") * 0.1)
        assert third.end == timings.total_duration

    def test_last_segment_reaches_total_duration(self, make_timings) -> None:
        raw = "Alpha beta. Gamma delta.   "
        timings = make_timings(raw)
        script = _script(["Alpha beta.", "Gamma delta."], raw=raw)
        result = reconcile(script, timings)
        assert result.conceptual_segments[-1].timing.end == timings.total_duration

    def test_durations_match_windows(self, make_timings) -> None:
        result = reconcile(
            _script(["First idea here.", "Second idea follows. Third idea ends it."]),
            make_timings(_RAW),
        )
        for segment in result.conceptual_segments:
            t = segment.timing
            assert t.duration == pytest.approx(t.end - t.start)
            assert t.end >= t.start

    def test_short_final_segment_pulled_back(self, make_timings) -> None:
        raw = "A long opening sentence goes here. End."
        timings = make_timings(raw, step=0.1)
        result = reconcile(
            _script(["A long opening sentence goes here.", "End."], raw=raw), timings
        )
        last = result.conceptual_segments[-1].timing
        assert last.end == timings.total_duration
        assert last.duration == pytest.approx(2.0)
        assert last.content_start == raw.index("End.")

    def test_pull_back_never_precedes_previous_start(self, make_timings) -> None:
        raw = "Hi. Yo."
        timings = make_timings(raw, step=0.1)
        result = reconcile(_script(["Hi.", "Yo."], raw=raw), timings)
        first, last = (s.timing for s in result.conceptual_segments)
        assert last.start >= first.start
        assert last.end == timings.total_duration

    def test_relaxed_quote_match(self, make_timings) -> None:
        raw = 'She said "hello" to everyone. Then left.'
        result = reconcile(
            _script(["She said hello to everyone.", "Then left."], raw=raw),
            make_timings(raw),
        )
        first = result.conceptual_segments[0].timing
        assert first.content_start == 0
        assert first.content_end == raw.index(" Then")

    def test_unlocatable_segment_raises(self, make_timings) -> None:
        with pytest.raises(SegmentAlignmentError, match="Nothing like this"):
            reconcile(
                _script(["First idea here.", "Nothing like this exists"]),
                make_timings(_RAW),
            )

    def test_out_of_order_segment_raises(self, make_timings) -> None:
        with pytest.raises(SegmentAlignmentError) as exc_info:
            reconcile(
                _script(["Third idea ends it.", "First idea here."]),
                make_timings(_RAW),
            )
        assert exc_info.value.index == 1

    def test_empty_timings_raise(self) -> None:
        empty = CharacterTiming(
            characters=[],
            character_start_times_seconds=[],
            character_end_times_seconds=[],
        )
        with pytest.raises(SegmentAlignmentError):
            reconcile(_script([_RAW]), empty)

    def test_timing_shorter_than_text_is_clamped(self, make_timings) -> None:
        timings = make_timings(_RAW[:10])
        result = reconcile(_script(["First idea here.", _RAW[18:]]), timings)
        assert result.conceptual_segments[0].timing.end == pytest.approx(1.0)
        assert result.conceptual_segments[-1].timing.end == timings.total_duration

    def test_coverage_gap_warning(self, make_timings, caplog) -> None:
        timings = make_timings("narrated but never segmented")
        with caplog.at_level(logging.WARNING):
            result = reconcile(_script([], raw="narrated but never segmented"), timings)
        assert result.conceptual_segments == []
        assert "coverage gap" in caplog.text

    def test_full_coverage_has_no_warning(self, make_timings, caplog) -> None:
        with caplog.at_level(logging.WARNING):
            reconcile(_script([_RAW]), make_timings(_RAW))
        assert "coverage gap" not in caplog.text

    def test_original_script_untouched(self, make_timings) -> None:
        script = _script([_RAW])
        result = reconcile(script, make_timings(_RAW))
        assert script.conceptual_segments[0].timing is None
        assert result.character_timings is not None
