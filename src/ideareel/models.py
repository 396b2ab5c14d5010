"""Data models for IdeaReel."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

LLMProvider = Literal["gpt4", "claude"]


class GenerationConfig(BaseModel):
    """Immutable input to one pipeline run."""

    model_config = ConfigDict(frozen=True)

    topic: str
    style: str
    style_preset: str
    llm_provider: LLMProvider = "gpt4"
    segment_count: int = Field(default=2, ge=1)
    voice_id: str | None = None
    model_id: str | None = None
    subtitles: bool = True


class RawScript(BaseModel):
    """Outline plus the concatenated generated prose."""

    model_config = ConfigDict(frozen=True)

    outline: str
    raw_content: str


class CharacterTiming(BaseModel):
    """Per-character narration timing as returned by the TTS provider."""

    model_config = ConfigDict(frozen=True)

    characters: list[str]
    character_start_times_seconds: list[float]
    character_end_times_seconds: list[float]

    @model_validator(mode="after")
    def _check_sequences(self) -> "CharacterTiming":
        starts = self.character_start_times_seconds
        ends = self.character_end_times_seconds
        if not (len(self.characters) == len(starts) == len(ends)):
            msg = (
                "Character timing sequences differ in length: "
                f"{len(self.characters)} characters, {len(starts)} starts, "
                f"{len(ends)} ends"
            )
            raise ValueError(msg)
        for i in range(len(starts)):
            if ends[i] < starts[i]:
                msg = f"Character {i} ends before it starts"
                raise ValueError(msg)
            if i and (starts[i] < starts[i - 1] or ends[i] < ends[i - 1]):
                msg = f"Character timings decrease at index {i}"
                raise ValueError(msg)
        return self

    @property
    def total_duration(self) -> float:
        """End time of the final narrated character."""
        if not self.character_end_times_seconds:
            return 0.0
        return self.character_end_times_seconds[-1]


class SegmentTiming(BaseModel):
    """Timing window of a conceptual segment within the narration."""

    model_config = ConfigDict(frozen=True)

    start: float
    end: float
    duration: float
    content_start: int
    content_end: int

    @model_validator(mode="after")
    def _check_window(self) -> "SegmentTiming":
        if self.end < self.start:
            msg = f"Segment ends ({self.end}) before it starts ({self.start})"
            raise ValueError(msg)
        if abs(self.duration - (self.end - self.start)) > 1e-9:
            msg = "Segment duration must equal end - start"
            raise ValueError(msg)
        return self


class ConceptualSegment(BaseModel):
    """A span of narration sharing one visual theme."""

    index: int = Field(ge=0)
    concept_theme: str
    visual_description: str = ""
    content: str
    timing: SegmentTiming | None = None


class GeneratedImage(BaseModel):
    """An illustration generated for the segment with the same index."""

    url: str
    concept_theme: str
    index: int = Field(ge=0)


class AudioBlob(BaseModel):
    """Binary narration audio."""

    model_config = ConfigDict(frozen=True)

    data: bytes
    mime_type: str = "audio/mpeg"


class Script(BaseModel):
    """The assembled script of a run."""

    outline: str
    raw_content: str
    conceptual_segments: list[ConceptualSegment]
    style: str
    character_timings: CharacterTiming | None = None


class GeneratedContent(BaseModel):
    """Everything a finished run hands back to the caller."""

    script: Script
    audio: AudioBlob
    images: list[GeneratedImage]
    total_duration: float
    subtitles: bool = True


class StylePreset(BaseModel):
    """A visual style preset offered by the image provider."""

    name: str
    uuid: str


class Voice(BaseModel):
    """A narration voice."""

    id: str
    name: str
    type: Literal["male", "female"]


class VoiceModel(BaseModel):
    """A text-to-speech model."""

    id: str
    name: str
    is_default: bool = False


STYLE_PRESETS: list[StylePreset] = [
    StylePreset(name="Dynamic", uuid="111dc692-d470-4eec-b791-3475abac4c46"),
    StylePreset(name="3D Render", uuid="debdf72a-91a4-467b-bf61-cc02bdeb69c6"),
    StylePreset(name="Cinematic", uuid="5632c7c-ddbb-4e2f-ba34-8456ab3ac436"),
    StylePreset(name="Creative", uuid="6fedbf1f-4a17-45ec-84fb-92fe524a29ef"),
    StylePreset(name="HDR", uuid="97c20e5c-1af6-4d42-b227-54d03d8f0727"),
    StylePreset(name="Vibrant", uuid="dee282d3-891f-4f73-ba02-7f8131e5541b"),
]

VOICE_MODELS: list[VoiceModel] = [
    VoiceModel(id="eleven_english_v1", name="Eleven English v1"),
    VoiceModel(id="eleven_multilingual_v1", name="Eleven Multilingual v1"),
    VoiceModel(id="eleven_turbo_v1", name="Eleven Turbo v1"),
    VoiceModel(id="eleven_turbo_v2", name="Eleven Turbo v2.5"),
    VoiceModel(
        id="eleven_multilingual_v2", name="Eleven Multilingual v2", is_default=True
    ),
]

VOICES: list[Voice] = [
    Voice(id="EiNlNiXeDU1pqqOPrYMO", name="John Doe - Deep", type="male"),
    Voice(id="pNInz6obpgDQGcFmaJgB", name="Arnold (Legacy)", type="male"),
    Voice(id="pqHfZKP75CvOlQylNhV4", name="Bill", type="male"),
    Voice(id="nPczCjzI2devNBz1zQrb", name="Brian", type="male"),
    Voice(id="N2lVS1w4EtoT3dr4eOWO", name="Callum", type="male"),
    Voice(id="IKne3meq5aSn9XLyUdCD", name="Charlie", type="male"),
    Voice(id="XB0fDUnXU5powFXDhCwa", name="Charlotte", type="female"),
    Voice(id="iP95p4xoKVk53GoZ742B", name="Chris", type="male"),
    Voice(id="onwK4e9ZLuTAKqWW03F9", name="Daniel", type="male"),
    Voice(id="cjVigY5qzO86Huf0OWal", name="Eric", type="male"),
    Voice(id="JBFqnCBsd6RMkjVDRZzb", name="George", type="male"),
    Voice(id="cgSgspJ2msm6clMCkdW9", name="Jessica", type="female"),
    Voice(id="FGY2WhTYpPnrIDTdsKH5", name="Laura", type="female"),
    Voice(id="TX3LPaxmHKxFdv7VOQHJ", name="Liam", type="male"),
    Voice(id="pFZP5JQG7iQjIQuC4Bku", name="Lily", type="female"),
    Voice(id="XrExE9yKIg1WjnnlVkGX", name="Matilda", type="female"),
    Voice(id="SAz9YHcvj6GT2YYXdXww", name="River", type="male"),
    Voice(id="CwhRBWXzGAHq8TQ4Fs17", name="Roger", type="male"),
    Voice(id="EXAVITQu4vr4xnSDxMaL", name="Sarah", type="female"),
    Voice(id="bIHbv24MWmeRgasZH58o", name="Will", type="male"),
]


def default_voice_model() -> VoiceModel:
    """Return the voice model flagged as default."""
    return next(m for m in VOICE_MODELS if m.is_default)
