"""Plain-text script export."""

from ideareel.models import Script


def render(script: Script) -> str:
    """Render a Script as the downloadable ``script.txt``."""
    lines: list[str] = []

    lines.append("Outline:")
    lines.append(script.outline.strip())

    lines.append("\nRaw Content:")
    lines.append(script.raw_content.strip())

    lines.append("\nConceptual Segments:")
    blocks = [
        f"[{segment.concept_theme}]\n{segment.content.strip()}"
        for segment in script.conceptual_segments
    ]
    lines.append("\n\n".join(blocks))

    return "\n".join(lines).strip() + "\n"
