"""Frame-accurate image timeline with cross-fades between segments."""

import logging

from pydantic import BaseModel

from ideareel.models import ConceptualSegment, GeneratedImage

logger = logging.getLogger(__name__)

TRANSITION_FRAMES = 30


class Sequence(BaseModel):
    """One image held on screen for a run of frames."""

    index: int
    image_url: str
    concept_theme: str
    start_frame: int
    duration_frames: int

    @property
    def end_frame(self) -> int:
        return self.start_frame + self.duration_frames


class Transition(BaseModel):
    """Cross-fade over the tail of ``from_index`` into ``to_index``."""

    from_index: int
    to_index: int
    start_frame: int
    duration_frames: int


class Timeline(BaseModel):
    """Sequences laid back to back, covering exactly ``total_frames``."""

    fps: int
    total_frames: int
    sequences: list[Sequence]
    transitions: list[Transition]

    def layers_at(self, frame: int) -> list[tuple[str, float]]:
        """Images visible at ``frame`` as (url, opacity), bottom first."""
        for position, sequence in enumerate(self.sequences):
            if not sequence.start_frame <= frame < sequence.end_frame:
                continue
            if position < len(self.transitions):
                transition = self.transitions[position]
                if frame >= transition.start_frame and transition.duration_frames:
                    progress = (
                        frame - transition.start_frame + 1
                    ) / transition.duration_frames
                    incoming = self.sequences[position + 1]
                    return [
                        (sequence.image_url, 1.0 - progress),
                        (incoming.image_url, progress),
                    ]
            return [(sequence.image_url, 1.0)]
        return []


def frame_for_time(seconds: float, fps: int, total_frames: int) -> int:
    """Convert seconds to a frame number clamped to ``[0, total_frames]``."""
    return min(max(round(seconds * fps), 0), total_frames)


def build_timeline(
    segments: list[ConceptualSegment],
    images: list[GeneratedImage],
    total_frames: int,
    fps: int = 30,
    transition_frames: int = TRANSITION_FRAMES,
) -> Timeline:
    """Assign frame ranges and images to timed segments.

    Segments without timing or without an image of the same index are
    skipped. The last sequence is stretched or trimmed so the sequence
    lengths sum to ``total_frames``.
    """
    by_index = {image.index: image for image in images}

    planned: list[tuple[ConceptualSegment, GeneratedImage, int]] = []
    for segment in sorted(segments, key=lambda s: s.index):
        if segment.timing is None:
            logger.error("Missing timing for segment %d", segment.index)
            continue
        image = by_index.get(segment.index)
        if image is None:
            logger.error("No matching image for segment %d", segment.index)
            continue
        start = frame_for_time(segment.timing.start, fps, total_frames)
        end = frame_for_time(segment.timing.end, fps, total_frames)
        planned.append((segment, image, end - start))

    sequences: list[Sequence] = []
    offset = 0
    for position, (segment, image, duration) in enumerate(planned):
        remaining = total_frames - offset
        if position == len(planned) - 1:
            duration = remaining
        duration = max(0, min(duration, remaining))
        if duration == 0:
            logger.warning("Segment %d has no frames, skipping", segment.index)
            continue
        sequences.append(
            Sequence(
                index=segment.index,
                image_url=image.url,
                concept_theme=segment.concept_theme,
                start_frame=offset,
                duration_frames=duration,
            )
        )
        offset += duration

    transitions: list[Transition] = []
    for outgoing, incoming in zip(sequences, sequences[1:]):
        length = min(
            transition_frames, outgoing.duration_frames, incoming.duration_frames
        )
        transitions.append(
            Transition(
                from_index=outgoing.index,
                to_index=incoming.index,
                start_frame=outgoing.end_frame - length,
                duration_frames=length,
            )
        )

    logger.debug(
        "Timeline: %d sequences, %d transitions, %d frames at %d fps",
        len(sequences),
        len(transitions),
        total_frames,
        fps,
    )
    return Timeline(
        fps=fps,
        total_frames=total_frames,
        sequences=sequences,
        transitions=transitions,
    )
