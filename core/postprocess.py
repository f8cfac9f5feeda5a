"""
Kitten TTS - Audio Post-Processing
==================================

Cleans up the raw model waveform before encoding:

1. Trim: the model produces artifacts at both ends. Cut
   min(1000, 5%) samples from the start and min(2000, 5%) from the end.
2. Peak-normalize: scale so the loudest sample sits at 0.8.

All arithmetic is float32 so the output matches the reference front-end
sample for sample. Every stage returns a new array.
"""

from dataclasses import dataclass
from typing import Optional, Tuple
import math

import numpy as np

from utils.audio_utils import peak


@dataclass
class PostProcessConfig:
    """Trim and normalization constants."""
    trim_fraction: float = 0.05
    max_trim_start: int = 1000     # samples
    max_trim_end: int = 2000       # samples
    target_peak: float = 0.8


class AudioPostProcessor:
    """
    Trim + peak-normalize for model output.

    Usage:
        post = AudioPostProcessor()
        audio = post.process(raw_waveform)
    """

    def __init__(self, config: Optional[PostProcessConfig] = None):
        self.config = config or PostProcessConfig()

    def trim_bounds(self, length: int) -> Tuple[int, int]:
        """Return (start, end) of the kept region for a buffer length."""
        cut = int(math.floor(length * self.config.trim_fraction))
        start = min(self.config.max_trim_start, cut)
        end_trim = min(self.config.max_trim_end, cut)
        end = max(start, length - end_trim)
        return start, end

    def trim(self, audio: np.ndarray) -> np.ndarray:
        """
        Drop the artifact regions at both ends.

        Buffers too short to trim are returned unchanged (as a copy).
        """
        audio = np.asarray(audio, dtype=np.float32)
        start, end = self.trim_bounds(len(audio))
        if start >= end:
            return audio.copy()
        return audio[start:end].copy()

    def normalize(self, audio: np.ndarray) -> np.ndarray:
        """Scale so max(|x|) becomes target_peak. Silent input is left as is."""
        audio = np.asarray(audio, dtype=np.float32)
        max_abs = peak(audio)
        if max_abs > 0:
            gain = np.float32(self.config.target_peak) / max_abs
        else:
            gain = np.float32(1.0)
        return (audio * gain).astype(np.float32)

    def process(self, audio: np.ndarray) -> np.ndarray:
        """Trim, then normalize."""
        return self.normalize(self.trim(audio))

    __call__ = process
