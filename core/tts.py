"""
Kitten TTS - Text-to-Speech Module
==================================

Convert text to WAV audio with the Kitten TTS ONNX model.

Pipeline (one blocking call):
    text -> phonemes -> token ids -> tensors -> model -> trim/normalize -> PCM16 -> WAV

Features:
- Bit-exact front-end (vocabulary, phoneme rules, tensor layout)
- Any InferenceEngine can run the model (ONNX Runtime by default)
- Deterministic post-processing and WAV encoding
- Synthesis statistics

Model Download Instructions:
============================

python -c "
from core.tts import download_model
download_model(output_dir='models/tts')
"

Browse the model: https://huggingface.co/KittenML/kitten-tts-nano-0.1
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Union
from pathlib import Path
import threading
import time

import numpy as np

from .errors import ModelNotLoadedError, VoiceNotFoundError
from .inference import InferenceEngine, run_inference, select_waveform
from .phonemizer import Phonemizer
from .postprocess import AudioPostProcessor
from .tensors import TensorBuilder, TensorDescriptor
from .tokenizer import Tokenizer, collapse_whitespace
from .voices import VoiceStore
from .wav import SAMPLE_RATE, WavEncoder
from utils.audio_utils import describe


DEFAULT_VOICE = "expr-voice-2-f"

MODEL_REPO = "KittenML/kitten-tts-nano-0.1"
MODEL_FILES = ("config.json", "kitten_tts_nano_v0_1.onnx", "voices.npz")


@dataclass
class TTSConfig:
    """Configuration for TTS synthesis."""
    default_voice: str = DEFAULT_VOICE
    speed: float = 1.0              # Passed to the model's speed input
    sample_rate: int = SAMPLE_RATE  # Model output rate (Hz)
    channels: int = 1
    verbose: bool = False           # Print per-call pipeline details


class TTS:
    """
    Text-to-Speech over an external inference engine.

    The engine may be attached later (set_engine); until then every
    synthesis fails with ModelNotLoadedError.

    Usage:
        voices = VoiceStore()
        voices.load_or_fallback("models/tts/voices.npz")
        tts = TTS(OnnxInferenceEngine("models/tts/kitten_tts_nano_v0_1.onnx"), voices)

        audio = tts.synthesize("Hello! How are you?")        # float32 samples
        wav_bytes = tts.synthesize_to_bytes("Hello!")         # WAV container
        tts.synthesize_to_file("Hello world!", "output.wav")
    """

    def __init__(
        self,
        engine: Optional[InferenceEngine],
        voices: VoiceStore,
        config: Optional[TTSConfig] = None,
    ):
        self.config = config or TTSConfig()
        self._engine = engine
        self.voices = voices

        self.phonemizer = Phonemizer()
        self.tokenizer = Tokenizer(phonemizer=self.phonemizer)
        self.tensor_builder = TensorBuilder()
        self.post_processor = AudioPostProcessor()
        self.encoder = WavEncoder(self.config.sample_rate, self.config.channels)

        self._stats_lock = threading.Lock()
        self._stats = self._empty_stats()

    @property
    def engine(self) -> Optional[InferenceEngine]:
        return self._engine

    def set_engine(self, engine: Optional[InferenceEngine]) -> None:
        self._engine = engine

    @property
    def is_ready(self) -> bool:
        return self._engine is not None

    def _log(self, message: str) -> None:
        if self.config.verbose:
            print(f"[TTS] {message}")

    def prepare_inputs(
        self,
        text: str,
        voice_name: Optional[str] = None,
        speed: Optional[float] = None,
    ) -> List[TensorDescriptor]:
        """
        Run the front-end only: text -> [input_ids, style, speed] descriptors.

        Raises:
            VoiceNotFoundError: if the voice is not in the store
            SynthesisError: if the tensors cannot be built
        """
        voice_name = voice_name or self.config.default_voice
        speed = self.config.speed if speed is None else speed

        voice = self.voices.get(voice_name)
        if voice is None:
            raise VoiceNotFoundError(
                f"Voice '{voice_name}' not found. Available: {self.voices.names()}"
            )

        phonemes = self.phonemizer.phonemize(text)
        token_ids = self.tokenizer.tokenize(phonemes)
        self._log(f"Text preprocessing: '{text}' -> '{collapse_whitespace(phonemes)}' -> {len(token_ids)} tokens")
        unknown = self.tokenizer.unknown_symbols(phonemes)
        if unknown:
            self._log(f"Unknown characters mapped to space: {sorted(set(unknown))}")

        self._log(f"Using voice: {voice_name} with embedding size: {voice.dimensions}")
        return self.tensor_builder.build(token_ids, voice.embedding, speed)

    def synthesize(
        self,
        text: str,
        voice_name: Optional[str] = None,
        speed: Optional[float] = None,
    ) -> np.ndarray:
        """
        Convert text to speech audio.

        Args:
            text: Text to synthesize
            voice_name: Voice to use (default: config.default_voice)
            speed: Model speed input (default: config.speed)

        Returns:
            Trimmed, peak-normalized float32 samples at config.sample_rate

        Raises:
            ModelNotLoadedError, VoiceNotFoundError, SynthesisError
        """
        start_time = time.time()

        engine = self._engine
        if engine is None:
            raise ModelNotLoadedError()

        tensors = self.prepare_inputs(text, voice_name, speed)
        bound = self.tensor_builder.bind(tensors, engine.input_names)
        self._log(f"Mapped inputs: {list(bound)}")

        feeds = {name: tensor.to_array() for name, tensor in bound.items()}
        outputs = run_inference(engine, feeds)
        self._log(f"Inference completed. Output names: {list(outputs)}")

        raw = select_waveform(outputs)
        audio = self.post_processor.process(raw)
        self._log(f"Audio normalization: {raw.size} -> {audio.size} samples, stats {describe(audio)}")

        # Update stats
        with self._stats_lock:
            self._stats["syntheses"] += 1
            self._stats["total_chars"] += len(text)
            self._stats["total_time"] += time.time() - start_time
            self._stats["audio_seconds"] += audio.size / self.config.sample_rate

        return audio

    def synthesize_to_bytes(
        self,
        text: str,
        voice_name: Optional[str] = None,
        speed: Optional[float] = None,
    ) -> bytes:
        """
        Synthesize text and return a complete WAV container.

        Returns:
            WAV bytes (PCM16, mono, config.sample_rate)
        """
        audio = self.synthesize(text, voice_name, speed)
        return self.encoder.encode_float(audio)

    def synthesize_to_file(
        self,
        text: str,
        output_path: Union[str, Path],
        voice_name: Optional[str] = None,
        speed: Optional[float] = None,
    ) -> float:
        """
        Synthesize text and save to WAV file.

        Returns:
            Duration of audio in seconds
        """
        audio = self.synthesize(text, voice_name, speed)
        Path(output_path).write_bytes(self.encoder.encode_float(audio))
        return audio.size / self.config.sample_rate

    @property
    def sample_rate(self) -> int:
        """Get output sample rate."""
        return self.config.sample_rate

    @staticmethod
    def _empty_stats() -> Dict[str, float]:
        return {
            "syntheses": 0,
            "total_chars": 0,
            "total_time": 0.0,
            "audio_seconds": 0.0,
        }

    def get_stats(self) -> dict:
        """Get synthesis statistics."""
        with self._stats_lock:
            stats = dict(self._stats)
        total_time = stats["total_time"]
        total_chars = stats["total_chars"]

        return {
            **stats,
            "chars_per_second": total_chars / total_time if total_time > 0 else 0,
        }

    def reset_stats(self) -> None:
        """Reset statistics counters."""
        with self._stats_lock:
            self._stats = self._empty_stats()


def download_model(
    output_dir: str = "models/tts",
    repo_id: str = MODEL_REPO,
) -> Path:
    """
    Download the Kitten TTS model bundle (config, ONNX model, voices).

    Args:
        output_dir: Directory to save the files
        repo_id: Hugging Face repository

    Returns:
        Path to the downloaded config.json
    """
    try:
        from huggingface_hub import hf_hub_download
    except ImportError:
        raise ImportError("Install huggingface-hub: pip install huggingface-hub")

    print(f"Downloading model bundle: {repo_id}")

    paths = [
        hf_hub_download(repo_id=repo_id, filename=filename, local_dir=output_dir)
        for filename in MODEL_FILES
    ]

    print(f"Downloaded to: {Path(paths[0]).parent}")
    return Path(paths[0])
