"""
Kitten TTS - WAV Encoder
========================

Float waveform -> PCM16 -> WAV container bytes.

Header layout (44 bytes, little-endian):

    offset  size  field
    0       4     "RIFF"
    4       4     ChunkSize      = 36 + data bytes
    8       4     "WAVE"
    12      4     "fmt "
    16      4     Subchunk1Size  = 16
    20      2     AudioFormat    = 1 (PCM)
    22      2     NumChannels
    24      4     SampleRate
    28      4     ByteRate       = rate * channels * 2
    32      2     BlockAlign     = channels * 2
    34      2     BitsPerSample  = 16
    36      4     "data"
    40      4     Subchunk2Size  = data bytes
"""

from typing import Tuple
import io
import struct
import wave

import numpy as np

from utils.audio_utils import float_to_pcm_bytes


SAMPLE_RATE = 24000
CHANNELS = 1
BITS_PER_SAMPLE = 16
BYTES_PER_SAMPLE = BITS_PER_SAMPLE // 8
HEADER_SIZE = 44

_HEADER = struct.Struct("<4sI4s4sIHHIIHH4sI")


def quantize(audio: np.ndarray) -> bytes:
    """
    Convert float samples to PCM16 bytes.

    Each sample is clamped to [-1, 1], scaled by 32767 and truncated
    toward zero.
    """
    return float_to_pcm_bytes(audio)


def wav_header(data_size: int, sample_rate: int = SAMPLE_RATE, channels: int = CHANNELS) -> bytes:
    """Build the 44-byte PCM16 WAV header for `data_size` payload bytes."""
    block_align = channels * BYTES_PER_SAMPLE
    return _HEADER.pack(
        b"RIFF",
        36 + data_size,
        b"WAVE",
        b"fmt ",
        16,
        1,
        channels,
        sample_rate,
        sample_rate * block_align,
        block_align,
        BITS_PER_SAMPLE,
        b"data",
        data_size,
    )


def encode(pcm: bytes, sample_rate: int = SAMPLE_RATE, channels: int = CHANNELS) -> bytes:
    """Wrap PCM16 bytes in a WAV container."""
    pcm = bytes(pcm)
    return wav_header(len(pcm), sample_rate, channels) + pcm


def float_to_wav(audio: np.ndarray, sample_rate: int = SAMPLE_RATE, channels: int = CHANNELS) -> bytes:
    """Quantize float samples and wrap them in a WAV container."""
    return encode(quantize(audio), sample_rate, channels)


def decode(wav_bytes: bytes) -> Tuple[np.ndarray, int, int]:
    """
    Read a PCM16 WAV container.

    Returns:
        (int16 samples, sample_rate, channels)

    Raises:
        ValueError: if the bytes are not a 16-bit PCM WAV file
    """
    try:
        with wave.open(io.BytesIO(wav_bytes), "rb") as wf:
            frames = wf.readframes(wf.getnframes())
            rate = wf.getframerate()
            sampwidth = wf.getsampwidth()
            channels = wf.getnchannels()
    except (wave.Error, EOFError) as e:
        raise ValueError(f"Invalid WAV data: {e}") from e

    if sampwidth != BYTES_PER_SAMPLE:
        raise ValueError(f"Expected 16-bit samples, got {sampwidth * 8}-bit")
    return np.frombuffer(frames, dtype="<i2").astype(np.int16), rate, channels


class WavEncoder:
    """
    Encoder bound to a sample rate and channel count.

    Usage:
        encoder = WavEncoder()
        wav_bytes = encoder.encode_float(audio)
    """

    def __init__(self, sample_rate: int = SAMPLE_RATE, channels: int = CHANNELS):
        self.sample_rate = sample_rate
        self.channels = channels

    def quantize(self, audio: np.ndarray) -> bytes:
        return quantize(audio)

    def encode(self, pcm: bytes) -> bytes:
        return encode(pcm, self.sample_rate, self.channels)

    def encode_float(self, audio: np.ndarray) -> bytes:
        return float_to_wav(audio, self.sample_rate, self.channels)
