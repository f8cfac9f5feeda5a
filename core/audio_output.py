"""
Kitten TTS - Audio Output
=========================

Playback sink for synthesized WAV bytes.

One AudioOutput owns at most one playback session. Starting a session
stops the previous one; stopping is safe at any time.

Features:
- Accepts WAV containers straight from the encoder
- Non-blocking playback with session tracking
- Volume and a short fade against clicks
- Output device listing

Dependencies:
- sounddevice (uses PortAudio)
"""

from dataclasses import dataclass
from typing import Optional, List, Protocol
import numpy as np
import threading
import time

from .wav import decode
from utils.audio_utils import apply_fade, int16_to_float

# Import sounddevice
try:
    import sounddevice as sd
    HAS_SOUNDDEVICE = True
except (ImportError, OSError):
    # OSError: the package is there but PortAudio is not
    sd = None
    HAS_SOUNDDEVICE = False
    print("[AudioOutput] Warning: sounddevice not available")


class AudioSink(Protocol):
    """Plays WAV bytes; stop() ends the current playback."""

    def play(self, wav_bytes: bytes) -> None:
        ...

    def stop(self) -> None:
        ...


@dataclass
class AudioOutputConfig:
    """Configuration for audio output."""
    device: Optional[int] = None    # None = default device
    volume: float = 1.0             # 0.0 to 1.0
    latency: str = "low"            # "low", "high"
    fade_ms: int = 10               # Mono clips only


@dataclass
class PlaybackSession:
    """One started playback."""
    session_id: int
    frames: int
    sample_rate: int
    channels: int
    started_at: float

    @property
    def duration(self) -> float:
        return self.frames / self.sample_rate if self.sample_rate else 0.0


def _device_info(device_id: int, device) -> dict:
    return {
        'id': device_id,
        'name': device['name'],
        'channels': device['max_output_channels'],
        'sample_rate': device['default_samplerate'],
    }


class AudioOutput:
    """
    sounddevice-backed AudioSink.

    Usage:
        output = AudioOutput(AudioOutputConfig(volume=0.9))
        output.play(wav_bytes)                  # returns immediately
        output.play(wav_bytes, blocking=True)   # returns when done
        output.stop()
    """

    def __init__(self, config: Optional[AudioOutputConfig] = None):
        if not HAS_SOUNDDEVICE:
            raise ImportError(
                "sounddevice not available. "
                "Run: pip install sounddevice (and install PortAudio)"
            )

        self.config = config or AudioOutputConfig()

        self._lock = threading.Lock()
        self._session: Optional[PlaybackSession] = None
        self._session_count = 0
        self._timer: Optional[threading.Timer] = None

        if self.config.device is not None:
            devices = sd.query_devices()
            if self.config.device >= len(devices):
                raise ValueError(f"Output device {self.config.device} not found")

        device_name = self.config.device if self.config.device is not None else "default"
        print(f"[AudioOutput] Ready on device {device_name}, volume {self.config.volume:.0%}")

    @property
    def session(self) -> Optional[PlaybackSession]:
        """The session currently playing, if any."""
        with self._lock:
            return self._session

    def play(self, wav_bytes: bytes, blocking: bool = False) -> None:
        """
        Start a new session with a PCM16 WAV container.

        Raises:
            ValueError: if the bytes are not a PCM16 WAV file
        """
        pcm, sample_rate, channels = decode(wav_bytes)
        self.stop()

        if pcm.size == 0:
            print("[AudioOutput] Nothing to play (empty audio)")
            return

        frames = self._prepare(pcm, sample_rate, channels)

        with self._lock:
            self._session_count += 1
            session = PlaybackSession(
                session_id=self._session_count,
                frames=len(frames),
                sample_rate=sample_rate,
                channels=channels,
                started_at=time.time(),
            )
            self._session = session

        try:
            sd.play(
                frames,
                samplerate=sample_rate,
                device=self.config.device,
                latency=self.config.latency,
            )
        except sd.PortAudioError as e:
            print(f"[AudioOutput] Warning: Playback failed: {e}")
            self._end(session.session_id)
            return

        if blocking:
            self.wait()
        else:
            timer = threading.Timer(session.duration, self._end, args=(session.session_id,))
            timer.daemon = True
            with self._lock:
                self._timer = timer
            timer.start()

    def _prepare(self, pcm: np.ndarray, sample_rate: int, channels: int) -> np.ndarray:
        """Interleaved int16 -> float32 (frames, channels) with volume and fade."""
        audio = np.clip(int16_to_float(pcm) * np.float32(self.config.volume), -1.0, 1.0)

        fade = int(self.config.fade_ms * sample_rate / 1000)
        if channels == 1 and 0 < fade and 2 * fade <= audio.size:
            audio = apply_fade(audio, fade, fade)

        return audio.reshape(-1, channels)

    def _end(self, session_id: int) -> None:
        with self._lock:
            if self._session is not None and self._session.session_id == session_id:
                self._session = None

    def stop(self) -> None:
        """End the current session. Does nothing harmful when idle."""
        sd.stop()
        with self._lock:
            self._session = None
            timer, self._timer = self._timer, None
        if timer is not None:
            timer.cancel()

    def is_playing(self) -> bool:
        return self.session is not None

    def wait(self) -> None:
        """Block until the current session finishes."""
        try:
            sd.wait()
        except sd.PortAudioError as e:
            print(f"[AudioOutput] Warning: wait failed: {e}")
        with self._lock:
            self._session = None

    def set_volume(self, volume: float) -> None:
        """Set playback volume, clamped to [0, 1]. Applies to the next session."""
        self.config.volume = max(0.0, min(1.0, volume))

    @staticmethod
    def list_devices() -> List[dict]:
        """Devices with at least one output channel."""
        return [
            _device_info(i, device)
            for i, device in enumerate(sd.query_devices())
            if device['max_output_channels'] > 0
        ]

    @staticmethod
    def get_default_device() -> dict:
        """Default output device info."""
        device_id = sd.default.device[1]  # (input, output)
        return _device_info(device_id, sd.query_devices(device_id))
