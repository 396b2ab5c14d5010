"""Configuration loading for IdeaReel."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

_DEFAULT_CONFIG_PATH = Path("~/.config/ideareel/config.toml").expanduser()


@dataclass
class GeneralConfig:
    """General settings."""

    output_dir: str = "~/Videos/ideareel"
    fps: int = 30
    width: int = 1472
    height: int = 832


@dataclass
class LLMConfig:
    """Language model settings."""

    provider: str = "gpt4"
    openai_model: str = "gpt-4o"
    claude_model: str = "claude-sonnet-4-6"
    max_tokens: int = 1024
    temperature: float = 0.7


@dataclass
class VoiceConfig:
    """Text-to-speech settings."""

    voice_id: str = "EiNlNiXeDU1pqqOPrYMO"
    model_id: str = "eleven_multilingual_v2"
    timeout_seconds: float = 120.0


@dataclass
class ImageConfig:
    """Image generation settings."""

    default_preset: str = "111dc692-d470-4eec-b791-3475abac4c46"
    model_id: str = "b2614463-296c-462a-9586-aafdb8f00e36"
    max_concurrency: int = 10
    requests_per_minute: int = 100
    initial_delay_seconds: float = 15.0
    poll_interval_seconds: float = 5.0
    max_poll_attempts: int = 3


@dataclass
class SubtitleConfig:
    """Subtitle rendering settings."""

    enabled: bool = True
    max_line_length: int = 80
    max_line_width: int = 1200
    font_size: int = 32
    fade_seconds: float = 0.1


@dataclass
class KeysConfig:
    """Provider API keys."""

    openai_api_key: str = ""
    anthropic_api_key: str = ""
    elevenlabs_api_key: str = ""
    leonardo_api_key: str = ""


@dataclass
class IdeaReelConfig:
    """Top-level configuration for IdeaReel."""

    general: GeneralConfig = field(default_factory=GeneralConfig)
    llm: LLMConfig = field(default_factory=LLMConfig)
    voice: VoiceConfig = field(default_factory=VoiceConfig)
    images: ImageConfig = field(default_factory=ImageConfig)
    subtitles: SubtitleConfig = field(default_factory=SubtitleConfig)
    keys: KeysConfig = field(default_factory=KeysConfig)


def _apply_section(target: object, data: dict[str, object]) -> None:
    """Apply a dict of values onto a dataclass instance."""
    for key, value in data.items():
        if hasattr(target, key):
            expected_type = type(getattr(target, key))
            if expected_type is bool and isinstance(value, str):
                setattr(target, key, value.lower() in ("true", "1", "yes"))
            elif expected_type is int and isinstance(value, str):
                setattr(target, key, int(value))
            elif expected_type is float and isinstance(value, (str, int)):
                setattr(target, key, float(value))
            else:
                setattr(target, key, value)


def _apply_env_overrides(config: IdeaReelConfig) -> None:
    """Override config values from environment variables."""
    env_map: dict[str, tuple[object, str]] = {
        "IDEAREEL_OUTPUT_DIR": (config.general, "output_dir"),
        "IDEAREEL_FPS": (config.general, "fps"),
        "IDEAREEL_LLM_PROVIDER": (config.llm, "provider"),
        "IDEAREEL_OPENAI_MODEL": (config.llm, "openai_model"),
        "IDEAREEL_CLAUDE_MODEL": (config.llm, "claude_model"),
        "IDEAREEL_VOICE_ID": (config.voice, "voice_id"),
        "IDEAREEL_VOICE_MODEL": (config.voice, "model_id"),
        "IDEAREEL_IMAGE_CONCURRENCY": (config.images, "max_concurrency"),
        "IDEAREEL_IMAGE_RPM": (config.images, "requests_per_minute"),
        "IDEAREEL_SUBTITLES": (config.subtitles, "enabled"),
        "OPENAI_API_KEY": (config.keys, "openai_api_key"),
        "ANTHROPIC_API_KEY": (config.keys, "anthropic_api_key"),
        "ELEVENLABS_API_KEY": (config.keys, "elevenlabs_api_key"),
        "LEONARDO_API_KEY": (config.keys, "leonardo_api_key"),
    }
    for env_var, (section, attr) in env_map.items():
        value = os.environ.get(env_var)
        if value is not None:
            _apply_section(section, {attr: value})


def load_config(path: Path | None = None) -> IdeaReelConfig:
    """Load configuration from TOML file with env var overrides.

    Config file path resolution:
    1. Explicit ``path`` argument
    2. ``IDEAREEL_CONFIG`` environment variable
    3. ``~/.config/ideareel/config.toml``
    """
    import tomllib

    config = IdeaReelConfig()

    config_path = path or Path(
        os.environ.get("IDEAREEL_CONFIG", str(_DEFAULT_CONFIG_PATH))
    )
    config_path = config_path.expanduser()

    if config_path.exists():
        logger.info("Loading config from %s", config_path)
        with open(config_path, "rb") as f:
            data = tomllib.load(f)

        section_map: dict[str, object] = {
            "general": config.general,
            "llm": config.llm,
            "voice": config.voice,
            "images": config.images,
            "subtitles": config.subtitles,
            "keys": config.keys,
        }
        for section_name, section_obj in section_map.items():
            if section_name in data and isinstance(data[section_name], dict):
                _apply_section(section_obj, data[section_name])
    else:
        logger.debug("No config file found at %s, using defaults", config_path)

    _apply_env_overrides(config)
    return config


def set_config_value(key: str, value: str) -> None:
    """Set a single config value in the TOML file.

    Args:
        key: Dotted key like ``voice.voice_id``.
        value: The value to set.
    """
    import tomllib

    config_path = Path(
        os.environ.get("IDEAREEL_CONFIG", str(_DEFAULT_CONFIG_PATH))
    ).expanduser()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    data: dict[str, dict[str, object]] = {}
    if config_path.exists():
        with open(config_path, "rb") as f:
            raw = tomllib.load(f)
        for k, v in raw.items():
            if isinstance(v, dict):
                data[k] = dict(v)
            else:
                data.setdefault("general", {})[k] = v

    parts = key.split(".", 1)
    if len(parts) != 2:
        msg = f"Key must be in 'section.key' format, got: {key}"
        raise ValueError(msg)

    section, attr = parts
    data.setdefault(section, {})[attr] = value

    _write_toml(config_path, data)
    logger.info("Set %s = %s in %s", key, value, config_path)


def _write_toml(path: Path, data: dict[str, dict[str, object]]) -> None:
    """Write a simple nested dict as TOML."""
    lines: list[str] = []
    for section, values in data.items():
        lines.append(f"[{section}]")
        for k, v in values.items():
            if isinstance(v, bool):
                lines.append(f"{k} = {str(v).lower()}")
            elif isinstance(v, (int, float)):
                lines.append(f"{k} = {v}")
            else:
                lines.append(f'{k} = "{v}"')
        lines.append("")
    path.write_text("\n".join(lines))
