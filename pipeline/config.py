"""
Speech Service Configuration
============================

Centralized configuration for the speech service components.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional

from core.tts import DEFAULT_VOICE
from core.wav import SAMPLE_RATE


class ServiceState(Enum):
    """Speech service lifecycle states."""
    IDLE = auto()
    LOADING = auto()
    READY = auto()
    FAILED = auto()


# State display strings
STATE_DISPLAY = {
    ServiceState.IDLE: "💤 Model not loaded",
    ServiceState.LOADING: "⏳ Loading model",
    ServiceState.READY: "✅ Ready",
    ServiceState.FAILED: "❌ Model failed to load",
}


@dataclass
class SpeechServiceConfig:
    """Configuration for the speech service."""

    # =========================================================================
    # Model Bundle (auto-detected from model_dir if empty)
    # =========================================================================
    model_dir: str = "models/tts"
    model_config_path: str = ""     # config.json naming model_file / voices
    model_path: str = ""            # .onnx
    voices_path: str = ""           # .json or .npz

    # =========================================================================
    # Synthesis
    # =========================================================================
    default_voice: str = DEFAULT_VOICE
    speed: float = 1.0
    sample_rate: int = SAMPLE_RATE
    intra_op_threads: int = 0       # 0 = onnxruntime default

    # =========================================================================
    # Playback
    # =========================================================================
    enable_playback: bool = True
    output_device: Optional[int] = None
    volume: float = 1.0
    fade_ms: int = 10

    # =========================================================================
    # Workers
    # =========================================================================
    max_workers: int = 1            # Synthesis worker threads

    # =========================================================================
    # Debug
    # =========================================================================
    verbose: bool = False
