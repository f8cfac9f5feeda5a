"""
Kitten TTS - Audio Utilities
============================

Sample conversions shared by the WAV encoder and the playback sink.
"""

from typing import Dict

import numpy as np


INT16_MAX = 32767
INT16_SCALE = 32768.0


def float_to_int16(audio: np.ndarray) -> np.ndarray:
    """
    Float samples -> int16 in [-32767, 32767].

    Samples are clamped to [-1, 1], multiplied by 32767 in float32 and
    truncated toward zero. No rounding: the output must match the reference
    encoder bit for bit.
    """
    clipped = np.clip(np.asarray(audio, dtype=np.float32), -1.0, 1.0)
    return (clipped * np.float32(INT16_MAX)).astype(np.int16)


def int16_to_float(pcm: np.ndarray) -> np.ndarray:
    """int16 samples -> float32 in [-1, 1)."""
    return pcm.astype(np.float32) / np.float32(INT16_SCALE)


def float_to_pcm_bytes(audio: np.ndarray) -> bytes:
    """Float samples -> little-endian PCM16 bytes."""
    return float_to_int16(audio).astype("<i2").tobytes()


def pcm_bytes_to_int16(pcm: bytes) -> np.ndarray:
    """Little-endian PCM16 bytes -> int16 array."""
    return np.frombuffer(pcm, dtype="<i2").astype(np.int16)


def peak(audio: np.ndarray) -> np.float32:
    """Largest absolute sample, 0 for empty input."""
    if audio.size == 0:
        return np.float32(0.0)
    return np.float32(np.max(np.abs(audio)))


def describe(audio: np.ndarray) -> Dict[str, float]:
    """Summary statistics for diagnostic messages."""
    if audio.size == 0:
        return {"samples": 0, "min": 0.0, "max": 0.0, "mean": 0.0}
    return {
        "samples": int(audio.size),
        "min": float(np.min(audio)),
        "max": float(np.max(audio)),
        "mean": float(np.mean(audio)),
    }


def apply_fade(audio: np.ndarray, fade_in: int = 0, fade_out: int = 0) -> np.ndarray:
    """
    Linear fade-in / fade-out ramps.

    Args:
        audio: 1-D sample array (not modified)
        fade_in: Ramp length at the start, in samples
        fade_out: Ramp length at the end, in samples

    Returns:
        A faded copy
    """
    faded = audio.copy()
    if fade_in > 0:
        faded[:fade_in] *= np.linspace(0, 1, fade_in, dtype=faded.dtype)
    if fade_out > 0:
        faded[-fade_out:] *= np.linspace(1, 0, fade_out, dtype=faded.dtype)
    return faded
