"""Prompt templates for script writing, segmentation and image prompts."""

_OUTLINE_PROMPT = """Create a {segment_count}-part outline about "{topic}" that:
1. Flows naturally
2. Builds information progressively
3. Maintains engagement
4. Covers the topic comprehensively

Write in a {style} style, optimized for spoken delivery.
Avoid technical markers or directions - focus on content."""

_PART_PROMPT = """Write part {part_num} of {total_parts} about "{topic}" that:
- Follows a {style} style
- Sounds natural when read aloud
- Includes vivid, visual details
- Flows from the outline naturally

Outline:
{outline}

Use natural language and avoid any technical directions. Return only the \
narration text for this part."""

_SEGMENTATION_PROMPT = """You are a script analyzer that returns ONLY valid JSON.
Your task is to break this script into conceptual segments where the visual \
imagery should change.

Return a JSON array in script order where each object has these exact keys:
- "endPhrase": the last 5 to 10 words of the segment, copied verbatim from \
the script (same spelling, punctuation and capitalization)
- "conceptTheme": a short label for the main theme of the segment
- "visualDescription": what should be shown on screen during the segment

Segments must not overlap and together must cover the whole script.
Return ONLY the JSON array, no other text, no markdown, no code blocks.

Script to analyze:
{content}"""

_IMAGE_PROMPT = """Convert this script segment into a concise, vivid image prompt.
Focus on one key visual moment that captures the essence.
Include: composition, lighting, atmosphere, and mood.
Avoid: dialogue, narrative, and temporal elements.

Theme: {theme}
Visual description: {visual_description}

Script segment:
{content}

Create a brief, impactful image prompt (max 200 characters):"""

_MAX_SEGMENT_CHARS = 800


def build_outline_prompt(topic: str, style: str, segment_count: int) -> str:
    """Build the prompt for the script outline."""
    return _OUTLINE_PROMPT.format(
        topic=topic, style=style, segment_count=segment_count
    )


def build_part_prompt(
    topic: str, outline: str, style: str, index: int, total_parts: int
) -> str:
    """Build the prompt for one narrated part (``index`` is 0-based)."""
    return _PART_PROMPT.format(
        topic=topic,
        outline=outline,
        style=style,
        part_num=index + 1,
        total_parts=total_parts,
    )


def build_segmentation_prompt(content: str) -> str:
    """Build the prompt asking for boundary-phrase segmentation JSON."""
    return _SEGMENTATION_PROMPT.format(content=content)


def build_image_prompt(
    theme: str, visual_description: str, content: str
) -> str:
    """Build the prompt that turns a segment into an image prompt.

    Segment text longer than 800 characters is truncated.
    """
    if len(content) > _MAX_SEGMENT_CHARS:
        content = content[:_MAX_SEGMENT_CHARS] + "..."
    return _IMAGE_PROMPT.format(
        theme=theme,
        visual_description=visual_description or "(none)",
        content=content,
    )
