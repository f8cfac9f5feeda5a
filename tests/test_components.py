"""
Tests: Component Manager / model bundle resolution (pipeline/components.py)
"""

import json
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest

from pipeline.components import ComponentManager, read_bundle_config, resolve_bundle
from pipeline.config import SpeechServiceConfig


@pytest.fixture
def model_dir(tmp_path):
    return tmp_path


def _write_config(folder, data):
    path = folder / "config.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def test_bundle_config_paths_are_relative(model_dir):
    path = _write_config(model_dir, {"model_file": "model.onnx", "voices": "voices.npz"})
    bundle = read_bundle_config(path)
    assert bundle.model_path == model_dir / "model.onnx"
    assert bundle.voices_path == model_dir / "voices.npz"
    assert bundle.error == ""


def test_bundle_config_without_model_file(model_dir):
    bundle = read_bundle_config(_write_config(model_dir, {"voices": "voices.json"}))
    assert bundle.model_path is None
    assert bundle.voices_path == model_dir / "voices.json"
    assert "model_file" in bundle.error


@pytest.mark.parametrize("content", ["{broken", "[1, 2]"])
def test_invalid_bundle_config(model_dir, content):
    path = model_dir / "config.json"
    path.write_text(content, encoding="utf-8")
    bundle = read_bundle_config(path)
    assert bundle.model_path is None
    assert bundle.voices_path is None
    assert bundle.error.startswith("Invalid model config")


def test_resolve_from_model_dir_config(model_dir):
    _write_config(model_dir, {"model_file": "kitten.onnx", "voices": "voices.npz"})
    bundle = resolve_bundle(SpeechServiceConfig(model_dir=str(model_dir)))
    assert bundle.model_path == model_dir / "kitten.onnx"
    assert bundle.voices_path == model_dir / "voices.npz"


def test_resolve_explicit_config_path(tmp_path):
    folder = tmp_path / "bundle"
    folder.mkdir()
    path = _write_config(folder, {"model_file": "a.onnx", "voices": "v.json"})
    bundle = resolve_bundle(SpeechServiceConfig(model_dir=str(tmp_path / "other"), model_config_path=str(path)))
    assert bundle.model_path == folder / "a.onnx"


def test_resolve_by_scanning_folder(model_dir):
    (model_dir / "b.onnx").write_bytes(b"")
    (model_dir / "a.onnx").write_bytes(b"")
    (model_dir / "voices.json").write_text("{}", encoding="utf-8")
    bundle = resolve_bundle(SpeechServiceConfig(model_dir=str(model_dir)))
    assert bundle.model_path == model_dir / "a.onnx"
    assert bundle.voices_path == model_dir / "voices.json"


def test_explicit_paths_win(model_dir):
    _write_config(model_dir, {"model_file": "kitten.onnx", "voices": "voices.npz"})
    bundle = resolve_bundle(SpeechServiceConfig(
        model_dir=str(model_dir),
        model_path="/models/custom.onnx",
        voices_path="/models/custom.json",
    ))
    assert bundle.model_path == Path("/models/custom.onnx")
    assert bundle.voices_path == Path("/models/custom.json")


def test_empty_folder(model_dir):
    bundle = resolve_bundle(SpeechServiceConfig(model_dir=str(model_dir / "missing")))
    assert bundle.model_path is None
    assert bundle.voices_path is None
    assert "No TTS model found" in bundle.error


def test_initialize_without_model(model_dir):
    manager = ComponentManager(SpeechServiceConfig(model_dir=str(model_dir), enable_playback=False))
    assert manager.initialize_all() is False
    assert manager.engine is None
    assert manager.audio_output is None
    assert len(manager.voices) == 8
    assert manager.last_error


def test_initialize_with_unloadable_model(model_dir):
    (model_dir / "broken.onnx").write_bytes(b"not a model")
    manager = ComponentManager(SpeechServiceConfig(model_dir=str(model_dir), enable_playback=False))
    assert manager.initialize_all(load_voices=False) is False
    assert "broken.onnx" in manager.last_error
    assert len(manager.voices) == 0
