"""
Kitten TTS - Inference Adapter
==============================

Boundary to the neural model. The pipeline only needs something with
declared input/output names and a `run` method; the ONNX Runtime binding
below is the default implementation.

Dependencies:
- onnxruntime (CPU provider is enough for the nano model)
"""

from pathlib import Path
from typing import Dict, List, Mapping, Optional, Protocol, Sequence, Union
import time

import numpy as np

from .errors import ModelNotLoadedError, SynthesisError

# Import onnxruntime
try:
    import onnxruntime as ort
    HAS_ONNXRUNTIME = True
except ImportError:
    HAS_ONNXRUNTIME = False
    print("[Inference] Warning: onnxruntime not installed")


WAVEFORM_OUTPUT = "waveform"


class InferenceEngine(Protocol):
    """Executes the model on named input arrays."""

    @property
    def input_names(self) -> List[str]:
        ...

    @property
    def output_names(self) -> List[str]:
        ...

    def run(self, feeds: Mapping[str, np.ndarray]) -> Dict[str, np.ndarray]:
        """Return outputs keyed by name, in the engine's own order."""
        ...


class OnnxInferenceEngine:
    """
    InferenceEngine backed by an onnxruntime InferenceSession.

    Usage:
        engine = OnnxInferenceEngine("models/tts/kitten_tts_nano_v0_1.onnx")
        outputs = engine.run({"input_ids": ids, "style": style, "speed": speed})
    """

    def __init__(
        self,
        model_path: Union[str, Path],
        providers: Optional[Sequence[str]] = None,
        intra_op_threads: int = 0,
    ):
        if not HAS_ONNXRUNTIME:
            raise ImportError(
                "onnxruntime not installed. "
                "Run: pip install onnxruntime"
            )

        model_path = Path(model_path)
        if not model_path.exists():
            raise FileNotFoundError(f"ONNX model file not found: {model_path}")

        print(f"[Inference] Loading model: {model_path.name}")
        load_start = time.time()

        options = ort.SessionOptions()
        if intra_op_threads > 0:
            options.intra_op_num_threads = intra_op_threads

        self._session = ort.InferenceSession(
            str(model_path),
            sess_options=options,
            providers=list(providers) if providers else ["CPUExecutionProvider"],
        )
        self._input_names = [i.name for i in self._session.get_inputs()]
        self._output_names = [o.name for o in self._session.get_outputs()]

        print(f"[Inference] Model loaded in {time.time() - load_start:.2f}s")
        print(f"      Inputs: {self._input_names}")
        print(f"      Outputs: {self._output_names}")

    @property
    def input_names(self) -> List[str]:
        return list(self._input_names)

    @property
    def output_names(self) -> List[str]:
        return list(self._output_names)

    def run(self, feeds: Mapping[str, np.ndarray]) -> Dict[str, np.ndarray]:
        outputs = self._session.run(None, dict(feeds))
        return dict(zip(self._output_names, outputs))


def run_inference(engine: Optional[InferenceEngine], feeds: Mapping[str, np.ndarray]) -> Dict[str, np.ndarray]:
    """
    Run the engine, turning its failures into SynthesisError.

    Raises:
        ModelNotLoadedError: if no engine is available
        SynthesisError: if the engine raises
    """
    if engine is None:
        raise ModelNotLoadedError()
    try:
        return engine.run(feeds)
    except Exception as e:
        raise SynthesisError(f"ONNX inference failed: {e}") from e


def select_waveform(outputs: Mapping[str, np.ndarray]) -> np.ndarray:
    """
    Pick the waveform tensor from the model outputs.

    Uses the output named 'waveform', otherwise the first output in the
    engine's order. The tensor is flattened to a mono float32 buffer.

    Raises:
        SynthesisError: if there is no output, or it is not a finite,
            non-empty float tensor
    """
    if WAVEFORM_OUTPUT in outputs:
        name = WAVEFORM_OUTPUT
    elif len(outputs) > 0:
        name = next(iter(outputs))
    else:
        raise SynthesisError("No valid outputs found")

    tensor = outputs[name]
    try:
        array = np.asarray(tensor)
        if array.dtype.kind != "f":
            raise TypeError(f"unsupported dtype {array.dtype}")
        waveform = array.astype(np.float32).reshape(-1)
    except (TypeError, ValueError) as e:
        raise SynthesisError(f"Output '{name}' is not a float tensor: {e}") from e

    if waveform.size == 0:
        raise SynthesisError(f"Output '{name}' is empty")
    if not bool(np.all(np.isfinite(waveform))):
        raise SynthesisError(f"Output '{name}' contains non-finite samples")
    return waveform
