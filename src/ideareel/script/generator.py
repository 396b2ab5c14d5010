"""Script generation pipeline: outline to timed, illustrated script."""

import logging
from collections.abc import Callable
from enum import Enum

from ideareel.config import KeysConfig
from ideareel.errors import ConfigurationError, PhaseError
from ideareel.images.scheduler import ImageScheduler
from ideareel.llm.base import LLMClient
from ideareel.models import (
    GeneratedContent,
    GenerationConfig,
    RawScript,
    Script,
)
from ideareel.script.prompts import build_outline_prompt, build_part_prompt
from ideareel.script.segments import SegmentIdentifier
from ideareel.timing.narration import NarrationService
from ideareel.timing.reconcile import reconcile

logger = logging.getLogger(__name__)

StepCallback = Callable[[str], None]


class GenerationPhase(str, Enum):
    """Pipeline phases in execution order."""

    GENERATING_OUTLINE = "GeneratingOutline"
    GENERATING_SEGMENTS = "GeneratingSegments"
    IDENTIFYING_CONCEPTUAL_SEGMENTS = "IdentifyingConceptualSegments"
    GENERATING_NARRATION = "GeneratingNarration"
    RECONCILING_TIMINGS = "ReconcilingTimings"
    GENERATING_IMAGES = "GeneratingImages"
    DONE = "Done"

    @property
    def status(self) -> str:
        return _PHASE_STATUS[self]


_PHASE_STATUS = {
    GenerationPhase.GENERATING_OUTLINE: "Generating outline...",
    GenerationPhase.GENERATING_SEGMENTS: "Generating script content...",
    GenerationPhase.IDENTIFYING_CONCEPTUAL_SEGMENTS: "Analyzing content structure...",
    GenerationPhase.GENERATING_NARRATION: "Generating audio narration...",
    GenerationPhase.RECONCILING_TIMINGS: "Aligning narration with segments...",
    GenerationPhase.GENERATING_IMAGES: "Generating visuals...",
    GenerationPhase.DONE: "Done",
}

_REQUIRED_LLM_KEY = {"gpt4": "openai_api_key", "claude": "anthropic_api_key"}


def check_api_keys(keys: KeysConfig, provider: str) -> None:
    """Raise ConfigurationError naming every key the run needs but lacks."""
    required = [
        _REQUIRED_LLM_KEY.get(provider, "openai_api_key"),
        "elevenlabs_api_key",
        "leonardo_api_key",
    ]
    missing = [name for name in required if not getattr(keys, name)]
    if missing:
        raise ConfigurationError(missing)


class ScriptGenerator:
    """Runs one generation from topic to timed script, narration and images.

    Holds no per-run state; each :meth:`generate` call is independent.
    """

    def __init__(
        self,
        llm: LLMClient,
        narration: NarrationService,
        images: ImageScheduler,
        default_voice_id: str | None = None,
        default_model_id: str | None = None,
    ) -> None:
        self._llm = llm
        self._narration = narration
        self._images = images
        self._identifier = SegmentIdentifier(llm)
        self._default_voice_id = default_voice_id
        self._default_model_id = default_model_id

    async def generate(
        self,
        config: GenerationConfig,
        on_step: StepCallback | None = None,
    ) -> GeneratedContent:
        """Run every phase in order.

        Raises:
            ConfigurationError: No voice or voice model was selected.
            PhaseError: A phase failed; ``cause`` holds the original error.
        """
        voice_id = config.voice_id or self._default_voice_id
        model_id = config.model_id or self._default_model_id
        missing = [
            name
            for name, value in (("voice_id", voice_id), ("model_id", model_id))
            if not value
        ]
        if missing:
            raise ConfigurationError(missing)

        def announce(phase: GenerationPhase) -> None:
            logger.info("Phase %s", phase.value)
            if on_step is not None:
                on_step(phase.status)

        phase = GenerationPhase.GENERATING_OUTLINE
        try:
            announce(phase)
            outline = await self._llm.complete(
                build_outline_prompt(
                    config.topic, config.style, config.segment_count
                )
            )

            phase = GenerationPhase.GENERATING_SEGMENTS
            announce(phase)
            raw = await self._generate_content(config, outline)

            phase = GenerationPhase.IDENTIFYING_CONCEPTUAL_SEGMENTS
            announce(phase)
            segments = await self._identifier.identify(raw.raw_content)

            phase = GenerationPhase.GENERATING_NARRATION
            announce(phase)
            narration = await self._narration.synthesize(
                raw.raw_content, voice_id, model_id  # type: ignore[arg-type]
            )

            phase = GenerationPhase.RECONCILING_TIMINGS
            announce(phase)
            script = reconcile(
                Script(
                    outline=raw.outline,
                    raw_content=raw.raw_content,
                    conceptual_segments=segments,
                    style=config.style,
                    character_timings=narration.character_timings,
                ),
                narration.character_timings,
            )

            phase = GenerationPhase.GENERATING_IMAGES
            announce(phase)

            def image_progress(done: int, total: int) -> None:
                if on_step is not None:
                    on_step(f"Generating images: {round(done / total * 100)}%")

            images = await self._images.generate_all(
                script.conceptual_segments, config.style_preset, image_progress
            )
        except Exception as e:
            logger.error("Generation failed during %s: %s", phase.value, e)
            raise PhaseError(phase.value, e) from e

        announce(GenerationPhase.DONE)
        return GeneratedContent(
            script=script,
            audio=narration.audio,
            images=images,
            total_duration=_total_duration(script),
            subtitles=config.subtitles,
        )

    async def _generate_content(
        self, config: GenerationConfig, outline: str
    ) -> RawScript:
        """Write the narrated parts one after another."""
        parts: list[str] = []
        for i in range(config.segment_count):
            prompt = build_part_prompt(
                config.topic, outline, config.style, i, config.segment_count
            )
            parts.append((await self._llm.complete(prompt)).strip())
            logger.info("Generated part %d/%d", i + 1, config.segment_count)
        return RawScript(outline=outline, raw_content="\n\n".join(parts))


def _total_duration(script: Script) -> float:
    if not script.conceptual_segments:
        return 0.0
    timing = script.conceptual_segments[-1].timing
    return timing.end if timing else 0.0
