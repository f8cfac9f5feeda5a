"""
Kitten TTS - Voice Store
========================

Named voice style vectors for the acoustic model.

Features:
- Loads voices from a mapping, a JSON file or a NumPy .npz archive
- Validates each entry and skips bad ones instead of failing the load
- Deterministic fallback voices when no real voice data is usable
- Atomic replacement: readers never see a half-loaded voice set

Voice source format:
    {"expr-voice-2-f": [[0.01, -0.2, ...]], ...}

Each value is a list of inner arrays. A single inner array is used as is,
several are concatenated. Embeddings are never truncated or resized.
"""

from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union
import json
import threading

import numpy as np

from .errors import VoiceLoadError
from utils.seeded_random import SeededRandom


MAX_ABS_VALUE = 10.0
MIN_VALUE_SPREAD = 0.01

FALLBACK_DIMENSIONS = 256

# numpy dtype kinds accepted as voice data: signed, unsigned, float
NUMERIC_KINDS = "iuf"

# name -> (seed, bias, scale)
FALLBACK_VOICES: Dict[str, Tuple[int, float, float]] = {
    "expr-voice-2-m": (12345, -0.1, 0.3),
    "expr-voice-2-f": (23456, 0.2, 0.25),
    "expr-voice-3-m": (34567, -0.05, 0.35),
    "expr-voice-3-f": (45678, 0.15, 0.28),
    "expr-voice-4-m": (56789, -0.08, 0.32),
    "expr-voice-4-f": (67890, 0.1, 0.3),
    "expr-voice-5-m": (78901, -0.12, 0.33),
    "expr-voice-5-f": (89012, 0.25, 0.27),
}

ORIGIN_LOADED = "loaded"
ORIGIN_FALLBACK = "fallback"


@dataclass(frozen=True)
class VoiceEntry:
    """A named style vector. The embedding array is read-only."""
    name: str
    embedding: np.ndarray

    @classmethod
    def create(cls, name: str, values: Any) -> "VoiceEntry":
        embedding = np.array(values, dtype=np.float32).reshape(-1)
        embedding.setflags(write=False)
        return cls(name=name, embedding=embedding)

    @property
    def dimensions(self) -> int:
        return int(self.embedding.size)


def validate_embedding(embedding: np.ndarray) -> Optional[str]:
    """
    Check the voice invariants.

    Returns:
        None when valid, otherwise a short reason
    """
    if embedding.size == 0:
        return "no data"
    # NaN fails this comparison as well
    if not bool(np.all(np.abs(embedding) < MAX_ABS_VALUE)):
        return f"values outside (-{MAX_ABS_VALUE}, {MAX_ABS_VALUE})"
    spread = float(np.max(embedding) - np.min(embedding))
    if not spread > MIN_VALUE_SPREAD:
        return f"no variation (spread {spread:.4f})"
    return None


def flatten_voice(value: Any) -> np.ndarray:
    """
    Flatten a nested voice array into one float32 vector.

    Raises:
        ValueError: if the value is not a list of numeric arrays
    """
    if isinstance(value, np.ndarray):
        if value.dtype.kind not in NUMERIC_KINDS:
            raise ValueError(f"non-numeric dtype {value.dtype}")
        if value.ndim != 2:
            raise ValueError(f"expected a 2-D array, got shape {value.shape}")
        rows = [value[i] for i in range(value.shape[0])]
    elif isinstance(value, (list, tuple)) and all(isinstance(row, (list, tuple, np.ndarray)) for row in value):
        rows = list(value)
    else:
        raise ValueError("expected a list of arrays")

    arrays = []
    for row in rows:
        # A bool mixed into floats would be promoted silently
        if any(isinstance(v, (bool, np.bool_, str, bytes)) for v in row):
            raise ValueError("non-numeric values")
        try:
            arr = np.asarray(row)
        except (TypeError, ValueError) as e:
            raise ValueError(f"non-numeric values ({e})") from e
        if arr.dtype.kind not in NUMERIC_KINDS:
            raise ValueError(f"non-numeric dtype {arr.dtype}")
        if arr.ndim != 1:
            raise ValueError("inner arrays must be flat")
        arrays.append(arr.astype(np.float32))

    if not arrays:
        return np.zeros(0, dtype=np.float32)
    if len(arrays) == 1:
        return arrays[0]
    return np.concatenate(arrays)


def generate_fallback_embedding(seed: int, bias: float, scale: float, size: int = FALLBACK_DIMENSIONS) -> np.ndarray:
    """
    Synthesize a structured pseudo-random style vector.

    value[i] = gauss * scale + bias + sin(i * 0.1) * 0.05 + cos(i * 0.05) * 0.03,
    clamped to [-1, 1]. Pure function of (seed, bias, scale, size).
    """
    rng = SeededRandom(seed)
    gauss = rng.gaussian(size)
    index = np.arange(size, dtype=np.float32)

    base = gauss * np.float32(scale) + np.float32(bias)
    periodic = np.sin(index * np.float32(0.1)) * np.float32(0.05)
    harmonic = np.cos(index * np.float32(0.05)) * np.float32(0.03)

    values = (base + periodic + harmonic).astype(np.float32)
    return np.clip(values, np.float32(-1.0), np.float32(1.0))


def generate_fallback_voices(table: Optional[Mapping[str, Tuple[int, float, float]]] = None) -> Dict[str, VoiceEntry]:
    """Build the fallback voice set from a (seed, bias, scale) table."""
    table = FALLBACK_VOICES if table is None else table
    return {
        name: VoiceEntry.create(name, generate_fallback_embedding(seed, bias, scale))
        for name, (seed, bias, scale) in table.items()
    }


def read_voice_file(path: Union[str, Path]) -> Dict[str, Any]:
    """
    Read a voice source file (.json or .npz) into a name -> array mapping.

    Raises:
        VoiceLoadError: if the file is missing or cannot be parsed
    """
    path = Path(path)
    if not path.exists():
        raise VoiceLoadError(f"Voice file not found: {path}")

    try:
        if path.suffix.lower() == ".npz":
            with np.load(path, allow_pickle=False) as archive:
                return {name: archive[name] for name in archive.files}
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise VoiceLoadError(f"Failed to read {path.name}: {e}") from e

    if not isinstance(data, dict):
        raise VoiceLoadError(f"Invalid {path.name} format - not a dictionary")
    return data


class VoiceStore:
    """
    Owns the current voice set.

    The set is populated once per load and read-only afterwards. A load
    builds a complete new mapping and swaps it in; a failed load leaves
    the previous set untouched.

    Usage:
        store = VoiceStore()
        if not store.load_or_fallback("models/tts/voices.json"):
            print("using fallback voices")
        entry = store.get("expr-voice-2-f")
        print(store.names())
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._voices: Mapping[str, VoiceEntry] = MappingProxyType({})
        self._origin: Optional[str] = None

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self, source: Mapping[str, Any]) -> None:
        """
        Replace the voice set with the valid entries of `source`.

        Invalid entries are reported and skipped.

        Raises:
            VoiceLoadError: if source is not a mapping or no entry is valid
        """
        if not isinstance(source, Mapping):
            raise VoiceLoadError("Invalid voice data - not a mapping")

        voices: Dict[str, VoiceEntry] = {}
        for name, value in source.items():
            try:
                embedding = flatten_voice(value)
            except ValueError as e:
                print(f"[VoiceStore] Voice '{name}' has invalid nested array format: {e}")
                continue

            reason = validate_embedding(embedding)
            if reason is not None:
                print(f"[VoiceStore] Voice '{name}' skipped: {reason}")
                continue

            entry = VoiceEntry.create(str(name), embedding)
            voices[entry.name] = entry
            print(
                f"[VoiceStore] Loaded voice '{entry.name}': {entry.dimensions} dims, "
                f"range [{embedding.min():.4f}...{embedding.max():.4f}], mean {embedding.mean():.4f}"
            )

        if not voices:
            raise VoiceLoadError("No valid voices in voice data")

        self._replace(voices, ORIGIN_LOADED)
        print(f"[VoiceStore] Voice data loaded with {len(voices)} voices: {sorted(voices)}")

    def load_file(self, path: Union[str, Path]) -> None:
        """Load voices from a .json or .npz file. Raises VoiceLoadError."""
        self.load(read_voice_file(path))

    def use_fallback(self) -> None:
        """Replace the voice set with the generated fallback voices."""
        self._replace(generate_fallback_voices(), ORIGIN_FALLBACK)
        print(f"[VoiceStore] Using fallback voice data with {len(FALLBACK_VOICES)} voices")

    def load_or_fallback(self, source: Union[str, Path, Mapping[str, Any], None]) -> bool:
        """
        Load real voices, or install the fallback set if that fails.

        The fallback set replaces the whole mapping; it is never merged with
        real voices.

        Returns:
            True if real voices were loaded, False if fallback voices are in use
        """
        try:
            if source is None:
                raise VoiceLoadError("No voice source configured")
            if isinstance(source, Mapping):
                self.load(source)
            else:
                self.load_file(source)
            return True
        except VoiceLoadError as e:
            print(f"[VoiceStore] Failed to load voices: {e}")
            self.use_fallback()
            return False

    @staticmethod
    def fallback() -> Dict[str, VoiceEntry]:
        """The deterministic fallback voice set (not installed)."""
        return generate_fallback_voices()

    def _replace(self, voices: Dict[str, VoiceEntry], origin: str) -> None:
        frozen = MappingProxyType(dict(voices))
        with self._lock:
            self._voices = frozen
            self._origin = origin

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def get(self, name: str) -> Optional[VoiceEntry]:
        return self._voices.get(name)

    def names(self) -> List[str]:
        return sorted(self._voices)

    def snapshot(self) -> Mapping[str, VoiceEntry]:
        """The current read-only mapping."""
        return self._voices

    @property
    def origin(self) -> Optional[str]:
        """'loaded', 'fallback', or None before the first load."""
        return self._origin

    def __contains__(self, name: object) -> bool:
        return name in self._voices

    def __len__(self) -> int:
        return len(self._voices)
