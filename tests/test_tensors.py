"""
Tests: Tensor Builder (core/tensors.py)
"""

import struct
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import numpy as np
import pytest

from core.errors import ErrorKind, SynthesisError
from core.tensors import TensorBuilder, TensorDescriptor


@pytest.fixture
def builder():
    return TensorBuilder()


@pytest.fixture
def embedding():
    return np.linspace(-0.5, 0.5, 256, dtype=np.float32)


@pytest.fixture
def tensors(builder, embedding):
    return builder.build([0, 50, 102, 0], embedding, 1.0)


def test_build_shapes(tensors):
    ids, style, speed = tensors
    assert (ids.name, ids.element_type, ids.shape) == ("input_ids", "int64", (1, 4))
    assert (style.name, style.element_type, style.shape) == ("style", "float32", (1, 256))
    assert (speed.name, speed.element_type, speed.shape) == ("speed", "float32", (1,))


def test_build_raw_bytes_little_endian(tensors, embedding):
    ids, style, speed = tensors
    assert ids.raw_bytes == struct.pack("<4q", 0, 50, 102, 0)
    assert style.raw_bytes == struct.pack("<256f", *embedding.tolist())
    assert speed.raw_bytes == struct.pack("<f", 1.0)
    assert len(ids.raw_bytes) == 32
    assert len(style.raw_bytes) == 1024


def test_to_array(tensors, embedding):
    ids, style, speed = tensors
    ids_array = ids.to_array()
    assert ids_array.dtype == np.int64
    assert ids_array.tolist() == [[0, 50, 102, 0]]
    assert np.array_equal(style.to_array()[0], embedding)
    assert speed.to_array().tolist() == [1.0]


def test_speed_is_float32(builder, embedding):
    _, _, speed = builder.build([0, 0], embedding, 1.3)
    assert speed.raw_bytes == np.array([1.3], dtype="<f4").tobytes()


@pytest.mark.parametrize("token_ids, size, speed", [
    ([], 256, 1.0),
    ([0, 0], 0, 1.0),
    ([0, 0], 256, 0.0),
    ([0, 0], 256, -1.0),
    ([0, 0], 256, float("nan")),
    ([0, 0], 256, float("inf")),
])
def test_build_rejects_invalid_inputs(builder, token_ids, size, speed):
    with pytest.raises(SynthesisError) as exc_info:
        builder.build(token_ids, np.linspace(-1, 1, size, dtype=np.float32), speed)
    assert exc_info.value.kind is ErrorKind.SYNTHESIS_ERROR


def test_bind_canonical_names_in_any_order(tensors):
    bound = TensorBuilder.bind(tensors, ["speed", "input_ids", "style"])
    assert list(bound) == ["speed", "input_ids", "style"]
    assert bound["speed"] is tensors[2]
    assert bound["input_ids"] is tensors[0]
    assert bound["style"] is tensors[1]


def test_bind_unknown_names_by_position(tensors):
    bound = TensorBuilder.bind(tensors, ["tokens", "ref_s", "rate"])
    assert bound["tokens"].raw_bytes == tensors[0].raw_bytes
    assert bound["tokens"].name == "tokens"
    assert bound["ref_s"].shape == (1, 256)
    assert bound["rate"].element_type == "float32"


def test_bind_mixed_names(tensors):
    bound = TensorBuilder.bind(tensors, ["style", "x", "y"])
    assert bound["style"] is tensors[1]
    # Unmatched names take the tensor at their own position
    assert bound["x"].raw_bytes == tensors[1].raw_bytes
    assert bound["y"].raw_bytes == tensors[2].raw_bytes


def test_bind_ignores_extra_positions(tensors):
    bound = TensorBuilder.bind(tensors, ["input_ids", "style", "speed", "extra"])
    assert list(bound) == ["input_ids", "style", "speed"]


def test_bind_requires_three_inputs(tensors):
    with pytest.raises(SynthesisError):
        TensorBuilder.bind(tensors, ["input_ids", "style"])


def test_descriptor_from_values():
    tensor = TensorDescriptor.from_values("x", "int64", [2, 2], [[1, 2], [3, 4]])
    assert tensor.shape == (2, 2)
    assert tensor.to_array().tolist() == [[1, 2], [3, 4]]
    assert tensor.renamed("y").name == "y"
