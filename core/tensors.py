"""
Kitten TTS - Tensor Builder
===========================

Packs the three model inputs (token ids, style vector, speed) into
little-endian byte buffers with fixed shapes, and binds them to the input
names the inference engine declares.

Shapes:
    input_ids: int64   [1, N]   N = number of tokens
    style:     float32 [1, D]   D = embedding length
    speed:     float32 [1]
"""

from dataclasses import dataclass, replace
from typing import Dict, List, Sequence, Tuple
import math

import numpy as np

from .errors import SynthesisError


INPUT_IDS = "input_ids"
STYLE = "style"
SPEED = "speed"
CANONICAL_INPUTS = (INPUT_IDS, STYLE, SPEED)

ELEMENT_DTYPES = {
    "int64": np.dtype("<i8"),
    "float32": np.dtype("<f4"),
}


@dataclass(frozen=True)
class TensorDescriptor:
    """A named, typed, shaped tensor held as raw little-endian bytes."""
    name: str
    element_type: str
    shape: Tuple[int, ...]
    raw_bytes: bytes

    @classmethod
    def from_values(cls, name: str, element_type: str, shape: Sequence[int], values) -> "TensorDescriptor":
        dtype = ELEMENT_DTYPES[element_type]
        raw = np.ascontiguousarray(np.asarray(values).reshape(-1), dtype=dtype).tobytes()
        return cls(name=name, element_type=element_type, shape=tuple(int(d) for d in shape), raw_bytes=raw)

    @property
    def dtype(self) -> np.dtype:
        return ELEMENT_DTYPES[self.element_type]

    def to_array(self) -> np.ndarray:
        """Decode the raw bytes into a new, writable array of the declared shape."""
        return np.frombuffer(self.raw_bytes, dtype=self.dtype).reshape(self.shape).copy()

    def renamed(self, name: str) -> "TensorDescriptor":
        return replace(self, name=name)


class TensorBuilder:
    """
    Builds model inputs for one synthesis call.

    Usage:
        builder = TensorBuilder()
        tensors = builder.build(token_ids, voice.embedding, speed=1.0)
        feeds = builder.bind(tensors, engine.input_names)
    """

    def build(self, token_ids: Sequence[int], embedding: np.ndarray, speed: float = 1.0) -> List[TensorDescriptor]:
        """
        Create the ids, style and speed descriptors, in that order.

        Raises:
            SynthesisError: on empty inputs or a non-positive speed
        """
        if len(token_ids) == 0:
            raise SynthesisError("No token ids to synthesize")
        embedding = np.asarray(embedding, dtype=np.float32).reshape(-1)
        if embedding.size == 0:
            raise SynthesisError("Empty voice embedding")
        if not (math.isfinite(speed) and speed > 0):
            raise SynthesisError(f"Invalid speed: {speed}")

        return [
            TensorDescriptor.from_values(INPUT_IDS, "int64", (1, len(token_ids)), token_ids),
            TensorDescriptor.from_values(STYLE, "float32", (1, embedding.size), embedding),
            TensorDescriptor.from_values(SPEED, "float32", (1,), [speed]),
        ]

    @staticmethod
    def bind(tensors: Sequence[TensorDescriptor], input_names: Sequence[str]) -> Dict[str, TensorDescriptor]:
        """
        Map descriptors onto the engine's declared input names.

        A declared name equal to a canonical name (input_ids, style, speed)
        gets that tensor. Any other name takes the tensor at its own
        position, for the first three positions.

        Raises:
            SynthesisError: if fewer than 3 input names are declared
        """
        input_names = list(input_names)
        if len(input_names) < len(CANONICAL_INPUTS):
            raise SynthesisError(
                f"Model declares {len(input_names)} inputs, expected at least {len(CANONICAL_INPUTS)}: {input_names}"
            )

        by_name = {tensor.name: tensor for tensor in tensors}
        bound: Dict[str, TensorDescriptor] = {}
        for index, name in enumerate(input_names):
            if name in by_name:
                bound[name] = by_name[name]
            elif index < len(tensors):
                bound[name] = tensors[index].renamed(name)
        return bound
