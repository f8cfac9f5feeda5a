"""
Component Manager
=================

Builds the speech service components from configuration:
the voice store, the inference engine and the audio output.

Model bundle layout (models/tts by default):

    config.json                  {"model_file": "...onnx", "voices": "voices.npz"}
    kitten_tts_nano_v0_1.onnx
    voices.npz | voices.json

Explicit model_path / voices_path settings win over the bundle.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional
import json
import sys

# Add project root to path
_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from core.voices import VoiceStore
from pipeline.config import SpeechServiceConfig


BUNDLE_CONFIG = "config.json"
VOICE_FILES = ("voices.npz", "voices.json")


@dataclass
class ModelBundle:
    """Resolved model and voice file locations."""
    model_path: Optional[Path] = None
    voices_path: Optional[Path] = None
    error: str = ""                 # Why the model cannot be loaded, if known


def read_bundle_config(config_path: Path) -> ModelBundle:
    """
    Read a bundle config.json.

    'model_file' and 'voices' are resolved relative to the config's folder.
    A missing or unreadable config leaves model_path unset and records why.
    """
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        return ModelBundle(error=f"Invalid model config {config_path}: {e}")

    if not isinstance(data, dict):
        return ModelBundle(error=f"Invalid model config {config_path}: expected an object")

    base = config_path.parent
    bundle = ModelBundle()

    model_file = data.get("model_file")
    if isinstance(model_file, str) and model_file:
        bundle.model_path = base / model_file
    else:
        bundle.error = f"Model config {config_path} has no 'model_file'"

    voices = data.get("voices")
    if isinstance(voices, str) and voices:
        bundle.voices_path = base / voices

    return bundle


def resolve_bundle(config: SpeechServiceConfig) -> ModelBundle:
    """Work out which model and voice files to load."""
    model_dir = Path(config.model_dir)

    if config.model_config_path:
        bundle = read_bundle_config(Path(config.model_config_path))
    elif (model_dir / BUNDLE_CONFIG).exists():
        bundle = read_bundle_config(model_dir / BUNDLE_CONFIG)
    else:
        bundle = ModelBundle()
        onnx_files = sorted(model_dir.glob("*.onnx")) if model_dir.exists() else []
        if onnx_files:
            bundle.model_path = onnx_files[0]
        for name in VOICE_FILES:
            if (model_dir / name).exists():
                bundle.voices_path = model_dir / name
                break

    if config.model_path:
        bundle.model_path = Path(config.model_path)
        bundle.error = ""
    if config.voices_path:
        bundle.voices_path = Path(config.voices_path)

    if bundle.model_path is None and not bundle.error:
        bundle.error = f"No TTS model found in {model_dir}. Download one first."

    return bundle


class ComponentManager:
    """
    Owns the speech service components.

    Components:
    - voices: VoiceStore (real voices or the fallback set)
    - engine: ONNX inference engine (None if the model failed to load)
    - audio_output: speaker playback (None if disabled or unavailable)
    """

    def __init__(self, config: SpeechServiceConfig, voices: Optional[VoiceStore] = None):
        self.config = config
        self.voices = voices if voices is not None else VoiceStore()
        self.engine = None
        self.audio_output = None
        self.bundle: Optional[ModelBundle] = None
        self.last_error = ""

    def initialize_all(
        self,
        load_voices: bool = True,
        load_engine: bool = True,
        load_output: bool = True,
    ) -> bool:
        """
        Initialize the requested components.

        Voices always end up usable (fallback set on failure); the engine
        may not.

        Returns:
            True if an engine is available afterwards
        """
        print("=" * 60)
        print(" Initializing Kitten TTS")
        print("=" * 60)

        self.bundle = resolve_bundle(self.config)

        if load_voices:
            self._init_voices()
        if load_engine:
            self._init_engine()
        if load_output:
            self._init_audio_output()

        print("=" * 60)
        return self.engine is not None

    def _init_voices(self) -> None:
        """Load voice embeddings, falling back to generated voices."""
        print("\n[1/3] Voices...")
        self.voices.load_or_fallback(self.bundle.voices_path)
        print(f"      {len(self.voices)} voices ({self.voices.origin})")

    def _init_engine(self) -> None:
        """Load the ONNX model."""
        print("[2/3] Model...")

        if self.bundle.model_path is None:
            self._fail_engine(self.bundle.error)
            return

        from core.inference import OnnxInferenceEngine

        try:
            self.engine = OnnxInferenceEngine(
                self.bundle.model_path,
                intra_op_threads=self.config.intra_op_threads,
            )
            self.last_error = ""
        except Exception as e:
            # onnxruntime reports bad models with its own exception types
            self._fail_engine(f"Failed to load model {self.bundle.model_path}: {e}")

    def _fail_engine(self, reason: str) -> None:
        self.engine = None
        self.last_error = reason
        print(f"      Warning: {reason}")

    def _init_audio_output(self) -> None:
        """Initialize audio output."""
        print("[3/3] Audio Output...")

        if not self.config.enable_playback:
            print("      (disabled)")
            return

        from core.audio_output import AudioOutput, AudioOutputConfig

        try:
            self.audio_output = AudioOutput(AudioOutputConfig(
                device=self.config.output_device,
                volume=self.config.volume,
                fade_ms=self.config.fade_ms,
            ))
        except (ImportError, ValueError) as e:
            print(f"      Warning: Audio output not available ({e})")
            self.audio_output = None

    def stop(self) -> None:
        """Stop all components."""
        if self.audio_output:
            self.audio_output.stop()
