"""CLI commands for IdeaReel."""

from __future__ import annotations

import asyncio
import json
import logging
import math
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

if TYPE_CHECKING:
    from ideareel.images.leonardo import LeonardoClient
    from ideareel.script.generator import ScriptGenerator

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from ideareel.config import IdeaReelConfig, load_config, set_config_value
from ideareel.errors import IdeaReelError
from ideareel.models import (
    STYLE_PRESETS,
    VOICE_MODELS,
    VOICES,
    GeneratedContent,
    GenerationConfig,
)

app = typer.Typer(
    name="ideareel",
    help="Turn a topic into a narrated, illustrated video timeline.",
    no_args_is_help=True,
)
config_app = typer.Typer(help="Manage configuration.")
app.add_typer(config_app, name="config")

console = Console()
logger = logging.getLogger(__name__)


@app.callback()
def main(
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Show debug logging")
    ] = False,
) -> None:
    """IdeaReel video generator."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def _get_config() -> IdeaReelConfig:
    return load_config()


def _resolve_preset(value: str | None, config: IdeaReelConfig) -> str:
    """Accept a preset name or uuid; default from config."""
    if not value:
        return config.images.default_preset
    for preset in STYLE_PRESETS:
        if value.lower() in (preset.name.lower(), preset.uuid):
            return preset.uuid
    console.print(f"[red]Unknown style preset: {value}[/red]")
    raise typer.Exit(1)


def _resolve_voice(value: str | None) -> str | None:
    """Accept a voice name or id."""
    if not value:
        return None
    for voice in VOICES:
        if value.lower() == voice.name.lower():
            return voice.id
    return value


def _build_generator(
    provider: str, config: IdeaReelConfig
) -> tuple[ScriptGenerator, LeonardoClient]:
    from ideareel.images.leonardo import LeonardoClient
    from ideareel.images.scheduler import ImageScheduler
    from ideareel.llm.base import create_llm_client
    from ideareel.script.generator import ScriptGenerator
    from ideareel.timing.narration import NarrationService

    llm = create_llm_client(provider, config)
    narration = NarrationService(
        config.keys.elevenlabs_api_key, timeout=config.voice.timeout_seconds
    )
    leonardo = LeonardoClient(
        config.keys.leonardo_api_key, model_id=config.images.model_id
    )
    scheduler = ImageScheduler(
        llm,
        leonardo,
        max_concurrency=config.images.max_concurrency,
        requests_per_minute=config.images.requests_per_minute,
        initial_delay=config.images.initial_delay_seconds,
        poll_interval=config.images.poll_interval_seconds,
        max_poll_attempts=config.images.max_poll_attempts,
    )
    generator = ScriptGenerator(
        llm,
        narration,
        scheduler,
        default_voice_id=config.voice.voice_id,
        default_model_id=config.voice.model_id,
    )
    return generator, leonardo


async def _run_generation(
    generator: ScriptGenerator,
    leonardo: LeonardoClient,
    gen_config: GenerationConfig,
) -> GeneratedContent:
    with console.status("[bold]Initializing...[/bold]") as status:

        def on_step(step: str) -> None:
            status.update(f"[bold]{step}[/bold]")

        try:
            return await generator.generate(gen_config, on_step)
        finally:
            await leonardo.aclose()


def _audio_duration(content: GeneratedContent) -> float:
    """Decoded audio length, or the narration timing length if undecodable."""
    from pydub.exceptions import CouldntDecodeError

    from ideareel.media import PydubCodec

    try:
        return PydubCodec().decode_audio_duration(content.audio.data)
    except (CouldntDecodeError, OSError) as e:
        logger.warning("Could not decode narration audio (%s), using timings", e)
        return content.total_duration


def _save_outputs(
    content: GeneratedContent, output_dir: Path, config: IdeaReelConfig
) -> list[Path]:
    """Write script.txt, narration.mp3 and timeline.json."""
    from ideareel.output import script_text
    from ideareel.render.subtitles import SubtitleTrack
    from ideareel.render.timeline import build_timeline

    output_dir.mkdir(parents=True, exist_ok=True)

    script_path = output_dir / "script.txt"
    script_path.write_text(script_text.render(content.script))

    audio_path = output_dir / "narration.mp3"
    audio_path.write_bytes(content.audio.data)

    fps = config.general.fps
    duration = _audio_duration(content)
    total_frames = max(1, math.ceil(duration * fps))
    timeline = build_timeline(
        content.script.conceptual_segments, content.images, total_frames, fps
    )

    phrases: list[dict[str, object]] = []
    timings = content.script.character_timings
    if content.subtitles and timings is not None:
        track = SubtitleTrack(
            timings,
            max_line_length=config.subtitles.max_line_length,
            fade=config.subtitles.fade_seconds,
            max_line_width=config.subtitles.max_line_width,
        )
        phrases = [p.model_dump() for p in track.phrases]

    timeline_path = output_dir / "timeline.json"
    timeline_path.write_text(
        json.dumps(
            {
                "duration_seconds": duration,
                "width": config.general.width,
                "height": config.general.height,
                "timeline": timeline.model_dump(),
                "subtitles": phrases,
                "images": [img.model_dump() for img in content.images],
            },
            indent=2,
        )
    )
    return [script_path, audio_path, timeline_path]


@app.command()
def generate(
    topic: Annotated[str, typer.Argument(help="What the video is about")],
    style: Annotated[
        str,
        typer.Option(
            "--style", "-s", help="Writing style: educational, casual, formal, ..."
        ),
    ] = "educational",
    preset: Annotated[
        str | None,
        typer.Option("--preset", "-p", help="Visual style preset name or uuid"),
    ] = None,
    provider: Annotated[
        str | None,
        typer.Option("--provider", help="LLM provider: gpt4 or claude"),
    ] = None,
    segments: Annotated[
        int,
        typer.Option("--segments", "-n", min=1, max=10, help="Script parts to write"),
    ] = 2,
    voice: Annotated[
        str | None, typer.Option("--voice", help="Voice name or id")
    ] = None,
    voice_model: Annotated[
        str | None, typer.Option("--voice-model", help="TTS model id")
    ] = None,
    subtitles: Annotated[
        bool | None,
        typer.Option("--subtitles/--no-subtitles", help="Include subtitles"),
    ] = None,
    output: Annotated[
        str | None, typer.Option("--output", "-o", help="Output directory")
    ] = None,
) -> None:
    """Generate a narrated, illustrated video timeline for a topic."""
    from ideareel.script.generator import check_api_keys

    config = _get_config()
    provider = provider or config.llm.provider
    if provider not in ("gpt4", "claude"):
        console.print(f"[red]Unknown provider: {provider}[/red]")
        raise typer.Exit(1)

    try:
        check_api_keys(config.keys, provider)
    except IdeaReelError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        console.print("[dim]Hint: ideareel config set keys.<name> <value>[/dim]")
        raise typer.Exit(1) from e

    gen_config = GenerationConfig(
        topic=topic,
        style=style,
        style_preset=_resolve_preset(preset, config),
        llm_provider=provider,  # type: ignore[arg-type]
        segment_count=segments,
        voice_id=_resolve_voice(voice),
        model_id=voice_model,
        subtitles=config.subtitles.enabled if subtitles is None else subtitles,
    )

    try:
        generator, leonardo = _build_generator(provider, config)
        content = asyncio.run(_run_generation(generator, leonardo, gen_config))
    except IdeaReelError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1) from e

    output_dir = Path(output or config.general.output_dir).expanduser()
    paths = _save_outputs(content, output_dir, config)

    console.print(
        f"[green]Generated {len(content.script.conceptual_segments)} segments, "
        f"{len(content.images)} images, {content.total_duration:.1f}s of narration"
        "[/green]"
    )
    for path in paths:
        console.print(f"  {path}")


@app.command()
def presets() -> None:
    """List visual style presets."""
    table = Table(title="Style Presets")
    table.add_column("Name", style="bold")
    table.add_column("UUID", style="dim")
    for preset in STYLE_PRESETS:
        table.add_row(preset.name, preset.uuid)
    console.print(table)


@app.command()
def voices() -> None:
    """List narration voices and models."""
    table = Table(title="Voices")
    table.add_column("Name", style="bold")
    table.add_column("ID", style="dim")
    table.add_column("Type")
    for voice in VOICES:
        table.add_row(voice.name, voice.id, voice.type)
    console.print(table)

    models = Table(title="Voice Models")
    models.add_column("Name", style="bold")
    models.add_column("ID", style="dim")
    models.add_column("Default")
    for model in VOICE_MODELS:
        models.add_row(model.name, model.id, "Yes" if model.is_default else "")
    console.print(models)


@config_app.command("show")
def config_show() -> None:
    """Show current configuration."""
    config = _get_config()
    console.print("[bold]Current Configuration[/bold]\n")

    sections = {
        "general": config.general,
        "llm": config.llm,
        "voice": config.voice,
        "images": config.images,
        "subtitles": config.subtitles,
        "keys": config.keys,
    }

    for name, section in sections.items():
        console.print(f"[bold cyan][{name}][/bold cyan]")
        for key, value in section.__dict__.items():
            if name == "keys" and value:
                value = f"{str(value)[:4]}..."
            console.print(f"  {key} = {value}")
        console.print()


@config_app.command("set")
def config_set(
    key: Annotated[str, typer.Argument(help="Config key (e.g., voice.voice_id)")],
    value: Annotated[str, typer.Argument(help="Value to set")],
) -> None:
    """Set a configuration value."""
    try:
        set_config_value(key, value)
        console.print(f"[green]Set {key} = {value}[/green]")
    except ValueError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1) from e
