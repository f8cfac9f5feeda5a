# Kitten TTS - Core Package
from .errors import (
    ErrorKind,
    TTSError,
    ModelNotLoadedError,
    VoiceNotFoundError,
    VoiceLoadError,
    SynthesisError,
    SynthesisResult,
)
from .vocabulary import Vocabulary, VOCABULARY
from .phonemizer import Phonemizer, phonemize
from .tokenizer import Tokenizer
from .voices import VoiceEntry, VoiceStore
from .tensors import TensorBuilder, TensorDescriptor
from .inference import InferenceEngine, OnnxInferenceEngine
from .postprocess import AudioPostProcessor
from .wav import WavEncoder
from .audio_output import AudioOutput, AudioSink
from .tts import TTS, TTSConfig

__all__ = [
    "ErrorKind",
    "TTSError",
    "ModelNotLoadedError",
    "VoiceNotFoundError",
    "VoiceLoadError",
    "SynthesisError",
    "SynthesisResult",
    "Vocabulary",
    "VOCABULARY",
    "Phonemizer",
    "phonemize",
    "Tokenizer",
    "VoiceEntry",
    "VoiceStore",
    "TensorBuilder",
    "TensorDescriptor",
    "InferenceEngine",
    "OnnxInferenceEngine",
    "AudioPostProcessor",
    "WavEncoder",
    "AudioOutput",
    "AudioSink",
    "TTS",
    "TTSConfig",
]
