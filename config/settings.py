"""
Kitten TTS - Settings

Builds a SpeechServiceConfig from KITTEN_* environment variables. A .env
file, if present, fills in variables that are not already set.

Variables (all optional):
    KITTEN_MODEL_DIR, KITTEN_MODEL_CONFIG, KITTEN_MODEL_PATH, KITTEN_VOICES_PATH
    KITTEN_VOICE, KITTEN_SPEED, KITTEN_SAMPLE_RATE, KITTEN_THREADS
    KITTEN_PLAYBACK, KITTEN_OUTPUT_DEVICE, KITTEN_VOLUME, KITTEN_FADE_MS
    KITTEN_WORKERS, KITTEN_VERBOSE
"""

from pathlib import Path
from typing import Optional
import os

from pipeline.config import SpeechServiceConfig


PREFIX = "KITTEN_"
_TRUE = ("true", "1", "yes", "on")


def _load_env(path: str = ".env") -> int:
    """
    Read KEY=value lines into os.environ without overriding existing keys.

    Blank lines, comments and lines without '=' are ignored; an optional
    leading 'export ' is accepted.

    Returns:
        Number of keys added
    """
    env_path = Path(path)
    if not env_path.is_file():
        return 0

    added = 0
    for raw in env_path.read_text(encoding="utf-8").splitlines():
        line = raw.strip()
        if line.startswith("export "):
            line = line[len("export "):].lstrip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, value = line.partition("=")
        key = key.strip()
        if key and key not in os.environ:
            os.environ[key] = value.strip().strip('"').strip("'")
            added += 1
    return added


def _env(name: str) -> Optional[str]:
    value = os.getenv(PREFIX + name)
    return value.strip() if value is not None else None


def _env_str(name: str, default: str = "") -> str:
    value = _env(name)
    return default if value is None else value


def _env_int(name: str, default: int) -> int:
    try:
        return int(_env_str(name, str(default)))
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    try:
        return float(_env_str(name, str(default)))
    except ValueError:
        return default


def _env_bool(name: str, default: bool = False) -> bool:
    value = _env(name)
    if not value:
        return default
    return value.lower() in _TRUE


def _env_device(name: str) -> Optional[int]:
    value = _env_str(name)
    return int(value) if value.isdigit() else None


def load_config(env_path: str = ".env") -> SpeechServiceConfig:
    """Environment (and .env) -> SpeechServiceConfig. Unset or bad values keep the defaults."""
    _load_env(env_path)
    defaults = SpeechServiceConfig()

    return SpeechServiceConfig(
        model_dir=_env_str("MODEL_DIR", defaults.model_dir),
        model_config_path=_env_str("MODEL_CONFIG", defaults.model_config_path),
        model_path=_env_str("MODEL_PATH", defaults.model_path),
        voices_path=_env_str("VOICES_PATH", defaults.voices_path),
        default_voice=_env_str("VOICE", defaults.default_voice),
        speed=_env_float("SPEED", defaults.speed),
        sample_rate=_env_int("SAMPLE_RATE", defaults.sample_rate),
        intra_op_threads=_env_int("THREADS", defaults.intra_op_threads),
        enable_playback=_env_bool("PLAYBACK", defaults.enable_playback),
        output_device=_env_device("OUTPUT_DEVICE"),
        volume=_env_float("VOLUME", defaults.volume),
        fade_ms=_env_int("FADE_MS", defaults.fade_ms),
        max_workers=max(1, _env_int("WORKERS", defaults.max_workers)),
        verbose=_env_bool("VERBOSE", defaults.verbose),
    )


if __name__ == "__main__":
    config = load_config()
    print("Kitten TTS settings:")
    for key, value in vars(config).items():
        print(f"  {key}: {value}")
