"""Error hierarchy for IdeaReel."""

from __future__ import annotations


class IdeaReelError(Exception):
    """Base class for all IdeaReel errors."""


class ConfigurationError(IdeaReelError):
    """Required configuration (API keys, voice selection) is missing."""

    def __init__(self, missing: list[str], message: str | None = None) -> None:
        self.missing = list(missing)
        if message is None:
            message = "Missing required configuration: " + ", ".join(self.missing)
        super().__init__(message)


class ProviderError(IdeaReelError):
    """An external provider returned an error response."""

    def __init__(
        self, provider: str, message: str, status_code: int | None = None
    ) -> None:
        self.provider = provider
        self.message = message
        self.status_code = status_code
        prefix = f"{provider} error"
        if status_code is not None:
            prefix += f" ({status_code})"
        super().__init__(f"{prefix}: {message}")


class TimingServiceError(IdeaReelError):
    """Narration could not be produced or its response was malformed."""


class NarrationTimeoutError(IdeaReelError, TimeoutError):
    """The text-to-speech provider did not answer within the timeout."""


class SegmentAlignmentError(IdeaReelError):
    """A conceptual segment could not be located in the narrated text."""

    def __init__(self, index: int, content_prefix: str) -> None:
        self.index = index
        self.content_prefix = content_prefix
        super().__init__(
            f"Could not find segment {index} in full text: {content_prefix}..."
        )


class BatchGenerationError(IdeaReelError):
    """More than half of the image jobs in a batch failed."""

    def __init__(self, failed_indices: list[int], total: int) -> None:
        self.failed_indices = sorted(failed_indices)
        self.total = total
        super().__init__(
            f"Image generation failed for {len(self.failed_indices)} of "
            f"{total} segments (indices: {self.failed_indices})"
        )


class PhaseError(IdeaReelError):
    """A pipeline phase failed; wraps the original error."""

    def __init__(self, phase: str, cause: BaseException) -> None:
        self.phase = phase
        self.cause = cause
        super().__init__(f"{phase} failed: {cause}")


class ImageJobError(IdeaReelError):
    """A single segment's image could not be produced."""


class GenerationFailedError(ImageJobError):
    """The image provider reported a generation as permanently failed."""
