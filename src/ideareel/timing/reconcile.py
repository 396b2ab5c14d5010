"""Map character-level narration timing onto conceptual segments."""

import logging

from ideareel.errors import SegmentAlignmentError
from ideareel.models import CharacterTiming, Script, SegmentTiming
from ideareel.timing.alignment import build_position_map, find_span, normalize

logger = logging.getLogger(__name__)

MIN_FINAL_SEGMENT_SECONDS = 2.0
_COVERAGE_TOLERANCE = 0.98
_PREVIEW_CHARS = 50


def reconcile(script: Script, character_timings: CharacterTiming) -> Script:
    """Return a copy of ``script`` with timing attached to every segment.

    Segments are searched for in order in the normalized raw content, each
    search starting where the previous match ended. The last segment always
    ends at the final character's end time.

    Raises:
        SegmentAlignmentError: A segment's text cannot be found.
    """
    starts = character_timings.character_start_times_seconds
    ends = character_timings.character_end_times_seconds
    segments = script.conceptual_segments
    if segments and not starts:
        raise SegmentAlignmentError(0, "no character timings to align against")

    total_duration = character_timings.total_duration
    normalized_raw = normalize(script.raw_content)
    position_map = build_position_map(script.raw_content)

    logger.debug(
        "Timing calculation: raw=%d chars, normalized=%d chars, "
        "%d segments, %d timed characters, %.2fs",
        len(script.raw_content),
        len(normalized_raw),
        len(segments),
        len(starts),
        total_duration,
    )

    cursor = 0
    timed = []
    for position, segment in enumerate(segments):
        is_last = position == len(segments) - 1
        normalized_content = normalize(segment.content)
        span = find_span(normalized_raw, normalized_content, cursor)
        if span is None or not normalized_content:
            logger.error(
                "Segment match failed at %d: %r", cursor, normalized_content[:100]
            )
            raise SegmentAlignmentError(
                segment.index, normalized_content[:_PREVIEW_CHARS]
            )
        match_start, match_end = span
        cursor = match_end

        original_start = position_map[min(match_start, len(position_map) - 1)]
        original_end = position_map[min(match_end, len(position_map)) - 1] + 1

        start_time = starts[min(original_start, len(starts) - 1)]
        end_time = ends[max(0, min(original_end - 1, len(ends) - 1))]

        if is_last:
            end_time = total_duration
            if end_time - start_time < MIN_FINAL_SEGMENT_SECONDS:
                floor = timed[-1].timing.start if timed else 0.0
                start_time = max(
                    0.0, floor, min(start_time, end_time - MIN_FINAL_SEGMENT_SECONDS)
                )
        end_time = max(end_time, start_time)

        timing = SegmentTiming(
            start=start_time,
            end=end_time,
            duration=end_time - start_time,
            content_start=original_start,
            content_end=original_end,
        )
        logger.debug(
            "Segment %d (%s): %.2fs - %.2fs",
            segment.index,
            segment.concept_theme,
            timing.start,
            timing.end,
        )
        timed.append(segment.model_copy(update={"timing": timing}))

    covered = max((s.timing.end for s in timed if s.timing), default=0.0)
    if covered < total_duration * _COVERAGE_TOLERANCE:
        logger.warning(
            "Timing coverage gap detected: total=%.2fs covered=%.2fs gap=%.2fs",
            total_duration,
            covered,
            total_duration - covered,
        )

    return script.model_copy(
        update={
            "conceptual_segments": timed,
            "character_timings": character_timings,
        }
    )
