"""
Tests: Audio Post-Processing (core/postprocess.py)
"""

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import numpy as np
import pytest

from core.postprocess import AudioPostProcessor, PostProcessConfig


@pytest.fixture
def post():
    return AudioPostProcessor()


def _tone(length, amplitude=0.3):
    t = np.arange(length, dtype=np.float32)
    return (np.sin(t * np.float32(0.05)) * np.float32(amplitude)).astype(np.float32)


def test_trim_bounds(post):
    assert post.trim_bounds(20000) == (1000, 19000)
    assert post.trim_bounds(100000) == (1000, 98000)
    assert post.trim_bounds(1000) == (50, 950)
    assert post.trim_bounds(10) == (0, 10)
    assert post.trim_bounds(0) == (0, 0)


def test_trim_length_law(post):
    audio = _tone(20000)
    trimmed = post.trim(audio)
    assert len(trimmed) == 18000
    assert np.array_equal(trimmed, audio[1000:19000])


def test_trim_end_cap(post):
    assert len(post.trim(_tone(100000))) == 100000 - 1000 - 2000


def test_degenerate_lengths_unchanged(post):
    assert post.trim(np.zeros(0, dtype=np.float32)).size == 0
    short = _tone(15)
    assert np.array_equal(post.trim(short), short)


def test_normalize_peak(post):
    audio = _tone(5000, amplitude=0.2)
    out = post.normalize(audio)
    assert out.dtype == np.float32
    assert float(np.max(np.abs(out))) == pytest.approx(0.8, abs=1e-6)


def test_normalize_gain_is_float32(post):
    audio = np.array([0.1, -0.4, 0.25], dtype=np.float32)
    gain = np.float32(0.8) / np.float32(0.4)
    assert np.array_equal(post.normalize(audio), audio * gain)


def test_normalize_silence_unchanged(post):
    silence = np.zeros(3000, dtype=np.float32)
    out = post.normalize(silence)
    assert np.array_equal(out, silence)
    assert np.all(np.isfinite(out))


def test_process_returns_new_buffer(post):
    audio = _tone(20000)
    original = audio.copy()
    out = post.process(audio)
    assert np.array_equal(audio, original)
    assert len(out) == 18000
    assert float(np.max(np.abs(out))) == pytest.approx(0.8, abs=1e-6)


def test_custom_config():
    post = AudioPostProcessor(PostProcessConfig(target_peak=0.5, max_trim_start=10, max_trim_end=10))
    out = post(_tone(1000))
    assert len(out) == 980
    assert float(np.max(np.abs(out))) == pytest.approx(0.5, abs=1e-6)
