"""
Kitten TTS - Errors
===================

Error kinds shared by the synthesis pipeline.

Inside the pipeline failures are raised as TTSError subclasses. At the
service boundary they are turned into a SynthesisResult so that callers on
the other side of a worker thread get a value instead of an exception.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    """Failure categories reported to callers."""
    MODEL_NOT_LOADED = "model_not_loaded"
    VOICE_NOT_FOUND = "voice_not_found"
    VOICE_LOAD_ERROR = "voice_load_error"
    SYNTHESIS_ERROR = "synthesis_error"


ERROR_DESCRIPTIONS = {
    ErrorKind.MODEL_NOT_LOADED: "TTS model not loaded",
    ErrorKind.VOICE_NOT_FOUND: "Voice not found",
    ErrorKind.VOICE_LOAD_ERROR: "Failed to load voice data",
    ErrorKind.SYNTHESIS_ERROR: "Speech synthesis failed",
}


class TTSError(Exception):
    """Base class for pipeline failures."""
    kind: ErrorKind = ErrorKind.SYNTHESIS_ERROR

    def __init__(self, message: str = ""):
        super().__init__(message or ERROR_DESCRIPTIONS[self.kind])


class ModelNotLoadedError(TTSError):
    kind = ErrorKind.MODEL_NOT_LOADED


class VoiceNotFoundError(TTSError):
    kind = ErrorKind.VOICE_NOT_FOUND


class VoiceLoadError(TTSError):
    kind = ErrorKind.VOICE_LOAD_ERROR


class SynthesisError(TTSError):
    kind = ErrorKind.SYNTHESIS_ERROR


@dataclass(frozen=True)
class SynthesisResult:
    """Outcome of one synthesis request: WAV bytes or an error kind."""
    wav: bytes = b""
    error: Optional[ErrorKind] = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, wav: bytes) -> "SynthesisResult":
        return cls(wav=wav)

    @classmethod
    def failure(cls, error: TTSError) -> "SynthesisResult":
        return cls(error=error.kind, message=str(error))
