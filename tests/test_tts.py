"""
Test: Text-to-Speech Module
===========================

Runs the full synthesis chain (core/tts.py) against a fake inference
engine, so no model download is needed.
"""

import struct
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import numpy as np
import pytest

from core.errors import ModelNotLoadedError, SynthesisError, VoiceNotFoundError
from core.tts import TTS, TTSConfig
from core.voices import VoiceStore


class FakeEngine:
    """Returns a fixed 20000-sample tone and records the feeds."""

    def __init__(self, input_names=("input_ids", "style", "speed"), error=None, length=20000):
        self.input_names = list(input_names)
        self.output_names = ["waveform"]
        self.error = error
        self.length = length
        self.calls = []

    def run(self, feeds):
        self.calls.append(feeds)
        if self.error is not None:
            raise self.error
        t = np.arange(self.length, dtype=np.float32)
        return {"waveform": (np.sin(t * np.float32(0.01)) * np.float32(0.4)).reshape(1, -1)}


@pytest.fixture
def voices():
    store = VoiceStore()
    store.use_fallback()
    return store


@pytest.fixture
def engine():
    return FakeEngine()


@pytest.fixture
def tts(engine, voices):
    return TTS(engine, voices)


def test_model_not_loaded(voices):
    tts = TTS(None, voices)
    assert not tts.is_ready
    with pytest.raises(ModelNotLoadedError):
        tts.synthesize("Hi")


def test_set_engine(voices, engine):
    tts = TTS(None, voices)
    tts.set_engine(engine)
    assert tts.is_ready
    assert tts.synthesize("Hi").size == 18000


def test_synthesis(tts):
    audio = tts.synthesize("Hi")
    assert audio.dtype == np.float32
    assert audio.shape == (18000,)
    assert float(np.max(np.abs(audio))) == pytest.approx(0.8, abs=1e-6)


def test_model_inputs(tts, engine, voices):
    tts.synthesize("Hi", speed=1.5)
    feeds = engine.calls[0]
    assert feeds["input_ids"].dtype == np.int64
    assert feeds["input_ids"].tolist() == [[0, 50, 102, 0]]
    assert feeds["style"].shape == (1, 256)
    assert np.array_equal(feeds["style"][0], voices.get("expr-voice-2-f").embedding)
    assert feeds["speed"].tolist() == [1.5]


def test_voice_selection(tts, engine, voices):
    tts.synthesize("Hi", voice_name="expr-voice-4-m")
    assert np.array_equal(engine.calls[0]["style"][0], voices.get("expr-voice-4-m").embedding)


def test_unknown_voice(tts, engine):
    with pytest.raises(VoiceNotFoundError):
        tts.synthesize("Hi", voice_name="nobody")
    assert engine.calls == []


def test_positional_input_names(voices):
    engine = FakeEngine(input_names=("tokens", "ref_s", "rate"))
    TTS(engine, voices).synthesize("Hi")
    assert set(engine.calls[0]) == {"tokens", "ref_s", "rate"}
    assert engine.calls[0]["tokens"].shape == (1, 4)


def test_too_few_model_inputs(voices):
    tts = TTS(FakeEngine(input_names=("input_ids", "style")), voices)
    with pytest.raises(SynthesisError):
        tts.synthesize("Hi")


def test_engine_failure_is_synthesis_error(voices):
    tts = TTS(FakeEngine(error=RuntimeError("boom")), voices)
    with pytest.raises(SynthesisError):
        tts.synthesize("Hi")


def test_output_format(tts):
    wav = tts.synthesize_to_bytes("Hello world")
    assert len(wav) == 44 + 2 * 18000
    fields = struct.unpack("<4sI4s4sIHHIIHH4sI", wav[:44])
    assert fields[7] == 24000
    assert fields[6] == 1
    assert fields[12] == 36000


def test_synthesize_to_file(tts, tmp_path):
    path = tmp_path / "out.wav"
    duration = tts.synthesize_to_file("Hi", path)
    assert duration == pytest.approx(18000 / 24000)
    assert path.read_bytes()[:4] == b"RIFF"


def test_prepare_inputs(tts):
    ids, style, speed = tts.prepare_inputs("Hi")
    assert ids.shape == (1, 4)
    assert style.shape == (1, 256)
    assert speed.shape == (1,)


def test_config_defaults(voices, engine):
    tts = TTS(engine, voices, TTSConfig(default_voice="expr-voice-3-f", speed=0.8, verbose=True))
    tts.synthesize("Hi")
    assert np.array_equal(engine.calls[0]["style"][0], voices.get("expr-voice-3-f").embedding)
    assert engine.calls[0]["speed"][0] == np.float32(0.8)


def test_stats(tts):
    tts.synthesize("Hi")
    tts.synthesize("Hello")
    stats = tts.get_stats()
    assert stats["syntheses"] == 2
    assert stats["total_chars"] == 7
    assert stats["audio_seconds"] == pytest.approx(2 * 0.75)
    assert "chars_per_second" in stats

    tts.reset_stats()
    assert tts.get_stats()["syntheses"] == 0
