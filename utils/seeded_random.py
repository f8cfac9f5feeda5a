"""
Kitten TTS - Seeded Random
==========================

Small reproducible generator used to synthesize fallback voice vectors.

A 64-bit linear congruential generator feeds float32 uniforms into a
Box-Muller transform. The same seed always yields the same sequence on
every platform, which numpy's own generators do not promise across
versions.
"""

import numpy as np


_MULTIPLIER = 1103515245
_INCREMENT = 12345
_MASK_64 = (1 << 64) - 1
_MODULUS = 2147483647

_TWO_PI = np.float32(2.0) * np.float32(np.pi)


class SeededRandom:
    """
    Deterministic uniform and Gaussian draws.

    Usage:
        rng = SeededRandom(12345)
        u = rng.next_float()         # float32 in [0, 1)
        g = rng.gaussian(256)        # float32 array of 256 draws
    """

    def __init__(self, seed: int):
        self.state = seed & _MASK_64

    def _advance(self) -> int:
        self.state = (self.state * _MULTIPLIER + _INCREMENT) & _MASK_64
        return self.state % _MODULUS

    def next_float(self) -> np.float32:
        """Next uniform sample as float32."""
        return np.float32(self._advance()) / np.float32(_MODULUS)

    def uniform(self, size: int) -> np.ndarray:
        """Next `size` uniform samples as a float32 array."""
        raw = np.array([self._advance() for _ in range(size)], dtype=np.float32)
        return raw / np.float32(_MODULUS)

    def next_gaussian(self) -> np.float32:
        """One Box-Muller sample from two consecutive uniforms."""
        return self.gaussian(1)[0]

    def gaussian(self, size: int) -> np.ndarray:
        """
        Draw `size` Gaussian samples.

        Each sample consumes two uniforms (u1, u2) in order:
        sqrt(-2 ln u1) * cos(2 pi u2), evaluated in float32.
        """
        draws = self.uniform(2 * size)
        u1 = draws[0::2]
        u2 = draws[1::2]
        with np.errstate(divide="ignore"):
            radius = np.sqrt(np.float32(-2.0) * np.log(u1))
        return (radius * np.cos(_TWO_PI * u2)).astype(np.float32)
