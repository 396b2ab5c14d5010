"""Tests for the frame timeline."""

import pytest

from ideareel.models import ConceptualSegment, GeneratedImage, SegmentTiming
from ideareel.render.timeline import build_timeline, frame_for_time


def _segment(index: int, start: float | None, end: float | None) -> ConceptualSegment:
    timing = None
    if start is not None and end is not None:
        timing = SegmentTiming(
            start=start,
            end=end,
            duration=end - start,
            content_start=index * 10,
            content_end=index * 10 + 10,
        )
    return ConceptualSegment(
        index=index, concept_theme=f"Theme {index}", content="text", timing=timing
    )


def _image(index: int) -> GeneratedImage:
    return GeneratedImage(
        url=f"https://img/{index}.jpg", concept_theme=f"Theme {index}", index=index
    )


class TestFrameForTime:
    def test_rounds(self) -> None:
        assert frame_for_time(1.5, 30, 100) == 45
        assert frame_for_time(1.01, 30, 100) == 30

    def test_clamps(self) -> None:
        assert frame_for_time(-1.0, 30, 100) == 0
        assert frame_for_time(10.0, 30, 100) == 100


class TestBuildTimeline:
    def test_sequences_fill_total_frames(self) -> None:
        segments = [_segment(0, 0.0, 1.01), _segment(1, 1.01, 2.02), _segment(2, 2.02, 3.0)]
        timeline = build_timeline(segments, [_image(i) for i in range(3)], 90)

        assert [s.start_frame for s in timeline.sequences] == [0, 30, 61]
        assert [s.duration_frames for s in timeline.sequences] == [30, 31, 29]
        assert sum(s.duration_frames for s in timeline.sequences) == 90
        assert timeline.sequences[-1].end_frame == 90

    def test_last_sequence_absorbs_rounding(self) -> None:
        segments = [_segment(0, 0.0, 1.01), _segment(1, 1.01, 3.0)]
        timeline = build_timeline(segments, [_image(0), _image(1)], 95)
        assert timeline.sequences[-1].duration_frames == 65
        assert sum(s.duration_frames for s in timeline.sequences) == 95

    def test_transitions_overlap_outgoing_tail(self) -> None:
        segments = [_segment(0, 0.0, 1.01), _segment(1, 1.01, 2.02), _segment(2, 2.02, 3.0)]
        timeline = build_timeline(segments, [_image(i) for i in range(3)], 90)

        first, second = timeline.transitions
        assert (first.from_index, first.to_index) == (0, 1)
        assert first.duration_frames == 30
        assert first.start_frame == 0
        # Shortened to fit the 29-frame incoming sequence
        assert second.duration_frames == 29
        assert second.start_frame == 61 - 29

    def test_missing_image_skipped(self, caplog: pytest.LogCaptureFixture) -> None:
        segments = [_segment(0, 0.0, 1.0), _segment(1, 1.0, 2.0), _segment(2, 2.0, 3.0)]
        timeline = build_timeline(segments, [_image(0), _image(2)], 90)
        assert [s.index for s in timeline.sequences] == [0, 2]
        assert [s.duration_frames for s in timeline.sequences] == [30, 60]
        assert "No matching image for segment 1" in caplog.text

    def test_untimed_segment_skipped(self) -> None:
        segments = [_segment(0, 0.0, 1.0), _segment(1, None, None)]
        timeline = build_timeline(segments, [_image(0), _image(1)], 60)
        assert [s.index for s in timeline.sequences] == [0]
        assert timeline.sequences[0].duration_frames == 60
        assert timeline.transitions == []

    def test_segments_sorted_by_index(self) -> None:
        segments = [_segment(1, 1.0, 2.0), _segment(0, 0.0, 1.0)]
        timeline = build_timeline(segments, [_image(1), _image(0)], 60)
        assert [s.image_url for s in timeline.sequences] == [
            "https://img/0.jpg",
            "https://img/1.jpg",
        ]

    def test_empty(self) -> None:
        timeline = build_timeline([], [], 30)
        assert timeline.sequences == []
        assert timeline.layers_at(0) == []


class TestLayersAt:
    @pytest.fixture
    def timeline(self):
        segments = [_segment(0, 0.0, 2.0), _segment(1, 2.0, 4.0)]
        return build_timeline(segments, [_image(0), _image(1)], 120)

    def test_single_image_outside_transition(self, timeline) -> None:
        assert timeline.layers_at(10) == [("https://img/0.jpg", 1.0)]
        assert timeline.layers_at(60) == [("https://img/1.jpg", 1.0)]

    def test_cross_fade(self, timeline) -> None:
        (out_url, out_opacity), (in_url, in_opacity) = timeline.layers_at(30)
        assert out_url == "https://img/0.jpg"
        assert in_url == "https://img/1.jpg"
        assert in_opacity == pytest.approx(1 / 30)
        assert out_opacity + in_opacity == pytest.approx(1.0)

    def test_fade_completes_at_boundary(self, timeline) -> None:
        layers = timeline.layers_at(59)
        assert layers[1] == ("https://img/1.jpg", 1.0)
        assert layers[0][1] == pytest.approx(0.0)

    def test_past_end(self, timeline) -> None:
        assert timeline.layers_at(120) == []
