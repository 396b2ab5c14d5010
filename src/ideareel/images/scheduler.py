"""Concurrent, rate-limited image generation for conceptual segments."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Protocol

from ideareel.errors import BatchGenerationError, ImageJobError, ProviderError
from ideareel.images.leonardo import MAX_PROMPT_LENGTH
from ideareel.images.rate_limit import SlidingWindowRateLimiter
from ideareel.llm.base import LLMClient
from ideareel.models import ConceptualSegment, GeneratedImage
from ideareel.script.prompts import build_image_prompt

logger = logging.getLogger(__name__)

STYLE_SUFFIX = (
    ", professional photography, cinematic lighting, "
    "photorealistic quality, 4K UHD"
)

ProgressCallback = Callable[[int, int], None]


class ImageProvider(Protocol):
    """Asynchronous job API of an image-generation provider."""

    async def submit(self, prompt: str, style_preset: str | None = None) -> str: ...

    async def fetch(self, generation_id: str) -> str | None: ...


@dataclass
class _JobOutcome:
    index: int
    image: GeneratedImage | None = None
    error: BaseException | None = None


def finalize_prompt(image_prompt: str, fallback: str = "") -> str:
    """Append the style suffix, keeping the result within the provider limit."""
    text = image_prompt.strip() or fallback.strip()
    budget = MAX_PROMPT_LENGTH - len(STYLE_SUFFIX)
    return text[:budget].rstrip() + STYLE_SUFFIX


class ImageScheduler:
    """Generate one image per segment with bounded concurrency.

    Every submission passes through one shared
    :class:`SlidingWindowRateLimiter`. Results are returned in segment index
    order regardless of completion order.
    """

    def __init__(
        self,
        llm: LLMClient,
        provider: ImageProvider,
        max_concurrency: int = 10,
        requests_per_minute: int = 100,
        initial_delay: float = 15.0,
        poll_interval: float = 5.0,
        max_poll_attempts: int = 3,
        rate_limiter: SlidingWindowRateLimiter | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._llm = llm
        self._provider = provider
        self._max_concurrency = max_concurrency
        self._initial_delay = initial_delay
        self._poll_interval = poll_interval
        self._max_poll_attempts = max_poll_attempts
        self._sleep = sleep
        self._rate_limiter = rate_limiter or SlidingWindowRateLimiter(
            requests_per_minute, 60.0, sleep=sleep
        )

    async def generate_all(
        self,
        segments: list[ConceptualSegment],
        style_preset: str,
        on_progress: ProgressCallback | None = None,
    ) -> list[GeneratedImage]:
        """Generate images for ``segments``.

        Raises:
            BatchGenerationError: More than half of the jobs failed.
        """
        total = len(segments)
        if not total:
            return []

        logger.info("Starting batch generation for %d segments", total)
        semaphore = asyncio.Semaphore(self._max_concurrency)
        completed = 0

        async def run(segment: ConceptualSegment) -> _JobOutcome:
            nonlocal completed
            async with semaphore:
                try:
                    image = await self._generate_one(segment, style_preset)
                    outcome = _JobOutcome(segment.index, image=image)
                except Exception as e:
                    logger.warning(
                        "Image for segment %d failed: %s: %s",
                        segment.index,
                        type(e).__name__,
                        e,
                    )
                    outcome = _JobOutcome(segment.index, error=e)
            completed += 1
            if on_progress is not None:
                on_progress(completed, total)
            return outcome

        outcomes = await asyncio.gather(*(run(s) for s in segments))

        failed = sorted(o.index for o in outcomes if o.image is None)
        if len(failed) * 2 > total:
            raise BatchGenerationError(failed, total)
        if failed:
            logger.warning(
                "Image generation failed for segments %s; continuing with %d images",
                failed,
                total - len(failed),
            )

        images = [o.image for o in outcomes if o.image is not None]
        images.sort(key=lambda img: img.index)
        logger.info("Completed batch generation: %d images", len(images))
        return images

    async def _generate_one(
        self, segment: ConceptualSegment, style_preset: str
    ) -> GeneratedImage:
        prompt = await self._build_prompt(segment)

        await self._rate_limiter.acquire()
        generation_id = await self._provider.submit(prompt, style_preset)
        logger.debug("Segment %d: generation %s", segment.index, generation_id)

        await self._sleep(self._initial_delay)
        url = await self._poll(generation_id)
        return GeneratedImage(
            url=url, concept_theme=segment.concept_theme, index=segment.index
        )

    async def _build_prompt(self, segment: ConceptualSegment) -> str:
        request = build_image_prompt(
            segment.concept_theme, segment.visual_description, segment.content
        )
        image_prompt = await self._llm.complete(request)
        fallback = f"{segment.concept_theme}. {segment.visual_description}"
        return finalize_prompt(image_prompt, fallback)

    async def _poll(self, generation_id: str) -> str:
        """Poll with exponential backoff between attempts.

        Transient provider errors are retried; a generation the provider
        reports as failed ends the job at once.
        """
        last_error: Exception | None = None
        for attempt in range(self._max_poll_attempts):
            try:
                url = await self._provider.fetch(generation_id)
                if url:
                    return url
                last_error = None
            except ProviderError as e:
                last_error = e
            if attempt < self._max_poll_attempts - 1:
                delay = self._poll_interval * (2**attempt)
                logger.debug(
                    "Generation %s not ready (attempt %d/%d), retrying in %.1fs",
                    generation_id,
                    attempt + 1,
                    self._max_poll_attempts,
                    delay,
                )
                await self._sleep(delay)

        msg = (
            f"Generation {generation_id} not ready after "
            f"{self._max_poll_attempts} attempts"
        )
        if last_error is not None:
            msg += f": {last_error}"
        raise ImageJobError(msg) from last_error
