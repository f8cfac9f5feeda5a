"""
Kitten TTS - Speech Service
===========================

The single entry point for applications:

    text + voice + speed  ->  SynthesisResult (WAV bytes or an error kind)

Responsibilities:
- Owns the voice store, the inference engine and the playback session
- Runs synthesis on a worker thread and hands back a Future
- Turns pipeline exceptions into SynthesisResult values
- Keeps at most one playback session alive

Usage:
    with SpeechService(load_config()) as service:
        service.load()
        result = service.generate_speech("Hello world!")
        if result.ok:
            service.play(result.wav)

Command line:
    python -m pipeline.speech_service "Hello world!" --voice expr-voice-3-f --out hello.wav
"""

from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Callable, List, Optional
import sys
import threading

# Add project root to path for direct script execution
_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from core.audio_output import AudioSink
from core.errors import SynthesisResult, TTSError
from core.inference import InferenceEngine
from core.tts import TTS, TTSConfig
from core.voices import VoiceStore
from pipeline.components import ComponentManager
from pipeline.config import SpeechServiceConfig, ServiceState, STATE_DISPLAY


ResultCallback = Callable[[SynthesisResult], None]


class SpeechService:
    """
    Owned-state speech service.

    Collaborators can be injected (engine, sink, voices); anything not
    injected is built by load() from the configuration.

    Threading:
    - generate_speech() blocks; generate_speech_async() runs it on the
      worker pool. Cancelling the Future only works before the call starts.
    - play() and stop_playback() share one lock, so a new session always
      stops the previous one first.
    - Voice replacement is atomic for readers (see VoiceStore).
    """

    def __init__(
        self,
        config: Optional[SpeechServiceConfig] = None,
        engine: Optional[InferenceEngine] = None,
        sink: Optional[AudioSink] = None,
        voices: Optional[VoiceStore] = None,
    ):
        self.config = config or SpeechServiceConfig()
        self.voices = voices if voices is not None else VoiceStore()

        self.tts = TTS(engine, self.voices, TTSConfig(
            default_voice=self.config.default_voice,
            speed=self.config.speed,
            sample_rate=self.config.sample_rate,
            verbose=self.config.verbose,
        ))

        self.components = ComponentManager(self.config, self.voices)

        self._sink = sink
        self._playback_lock = threading.Lock()
        self._state_lock = threading.Lock()
        self._state = ServiceState.READY if engine is not None else ServiceState.IDLE

        self._executor = ThreadPoolExecutor(
            max_workers=max(1, self.config.max_workers),
            thread_name_prefix="kitten-tts",
        )

    # =========================================================================
    # Lifecycle
    # =========================================================================

    @property
    def state(self) -> ServiceState:
        with self._state_lock:
            return self._state

    def _set_state(self, state: ServiceState) -> None:
        with self._state_lock:
            self._state = state
        print(f"[SpeechService] {STATE_DISPLAY[state]}")

    @property
    def is_ready(self) -> bool:
        return self.tts.is_ready

    @property
    def last_error(self) -> str:
        """Why the model failed to load, if it did."""
        return self.components.last_error

    def load(self) -> bool:
        """
        Load whatever was not injected: voices, model, audio output.

        Voices always end up usable; if they cannot be loaded the fallback
        set is installed.

        Returns:
            True if the service can synthesize
        """
        self._set_state(ServiceState.LOADING)

        self.components.initialize_all(
            load_voices=self.voices.origin is None,
            load_engine=self.tts.engine is None,
            load_output=self._sink is None,
        )

        if self.tts.engine is None and self.components.engine is not None:
            self.tts.set_engine(self.components.engine)
        if self._sink is None and self.components.audio_output is not None:
            with self._playback_lock:
                self._sink = self.components.audio_output

        ready = self.tts.is_ready
        self._set_state(ServiceState.READY if ready else ServiceState.FAILED)
        return ready

    def load_async(self, callback: Optional[Callable[[bool], None]] = None) -> "Future[bool]":
        """Run load() on the worker pool."""
        future = self._executor.submit(self.load)
        if callback is not None:
            future.add_done_callback(lambda f: self._deliver(f, callback))
        return future

    def shutdown(self, wait: bool = True) -> None:
        """Stop playback and the worker pool. Pending requests are cancelled."""
        self.stop_playback()
        self._executor.shutdown(wait=wait, cancel_futures=True)
        print("[SpeechService] Shut down")

    def __enter__(self) -> "SpeechService":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()

    # =========================================================================
    # Voices
    # =========================================================================

    def available_voices(self) -> List[str]:
        """Sorted names of the voices currently loaded."""
        return self.voices.names()

    # =========================================================================
    # Synthesis
    # =========================================================================

    def generate_speech(
        self,
        text: str,
        voice_name: Optional[str] = None,
        speed: Optional[float] = None,
    ) -> SynthesisResult:
        """
        Synthesize text to WAV bytes.

        Args:
            text: Text to speak
            voice_name: Voice to use (default: config.default_voice)
            speed: Model speed input (default: config.speed)

        Returns:
            SynthesisResult with wav bytes, or the error kind and message
        """
        try:
            wav = self.tts.synthesize_to_bytes(text, voice_name, speed)
        except TTSError as e:
            print(f"[SpeechService] {e.kind.name}: {e}")
            return SynthesisResult.failure(e)
        return SynthesisResult.success(wav)

    def generate_speech_async(
        self,
        text: str,
        voice_name: Optional[str] = None,
        speed: Optional[float] = None,
        callback: Optional[ResultCallback] = None,
    ) -> "Future[SynthesisResult]":
        """
        Run generate_speech() on the worker pool.

        The callback (if any) is called on the worker thread with the
        result. It is not called for a cancelled request.
        """
        future = self._executor.submit(self.generate_speech, text, voice_name, speed)
        if callback is not None:
            future.add_done_callback(lambda f: self._deliver(f, callback))
        return future

    @staticmethod
    def _deliver(future: Future, callback: Callable) -> None:
        if future.cancelled():
            return
        error = future.exception()
        if error is not None:
            # Left on the Future for the caller
            print(f"[SpeechService] Request failed: {error}")
            return
        callback(future.result())

    def speak(
        self,
        text: str,
        voice_name: Optional[str] = None,
        speed: Optional[float] = None,
    ) -> SynthesisResult:
        """Synthesize and, on success, play the result."""
        result = self.generate_speech(text, voice_name, speed)
        if result.ok:
            self.play(result.wav)
        return result

    def speak_async(
        self,
        text: str,
        voice_name: Optional[str] = None,
        speed: Optional[float] = None,
        callback: Optional[ResultCallback] = None,
    ) -> "Future[SynthesisResult]":
        """Run speak() on the worker pool."""
        future = self._executor.submit(self.speak, text, voice_name, speed)
        if callback is not None:
            future.add_done_callback(lambda f: self._deliver(f, callback))
        return future

    # =========================================================================
    # Playback
    # =========================================================================

    def play(self, wav_bytes: bytes) -> bool:
        """
        Start a new playback session, stopping the previous one.

        Returns:
            False if there is no audio output
        """
        with self._playback_lock:
            if self._sink is None:
                print("[SpeechService] No audio output available")
                return False
            self._sink.stop()
            self._sink.play(wav_bytes)
            return True

    def stop_playback(self) -> None:
        """Stop the current playback session. Safe to call when idle."""
        with self._playback_lock:
            if self._sink is not None:
                self._sink.stop()

    def wait_playback(self) -> None:
        """Block until the current session ends, if the sink can wait."""
        with self._playback_lock:
            sink = self._sink
        wait = getattr(sink, "wait", None)
        if wait is not None:
            wait()

    # =========================================================================
    # Stats
    # =========================================================================

    def get_stats(self) -> dict:
        """Synthesis statistics plus service status."""
        return {
            **self.tts.get_stats(),
            "state": self.state.name,
            "voices": len(self.voices),
            "voice_origin": self.voices.origin,
        }


# =============================================================================
# MAIN ENTRY POINT
# =============================================================================

def main(argv: Optional[List[str]] = None) -> int:
    """Synthesize text from the command line."""
    import argparse
    from config.settings import load_config

    parser = argparse.ArgumentParser(description="Kitten TTS - text to speech")
    parser.add_argument("text", nargs="?", default="", help="Text to speak")
    parser.add_argument("--voice", default=None, help="Voice name (see --list-voices)")
    parser.add_argument("--speed", type=float, default=None, help="Speech speed (default 1.0)")
    parser.add_argument("--out", default=None, help="Write the WAV file here")
    parser.add_argument("--list-voices", action="store_true", help="List available voices")
    parser.add_argument("--no-play", action="store_true", help="Do not play the audio")
    parser.add_argument("--verbose", action="store_true", help="Print pipeline details")
    args = parser.parse_args(argv)

    config = load_config()
    if args.no_play:
        config.enable_playback = False
    if args.verbose:
        config.verbose = True

    with SpeechService(config) as service:
        service.load()

        if args.list_voices:
            print(f"\nVoices ({service.voices.origin}):")
            for name in service.available_voices():
                print(f"  - {name}")
            if not args.text:
                return 0

        if not args.text:
            parser.error("text is required unless --list-voices is given")

        result = service.generate_speech(args.text, args.voice, args.speed)
        if not result.ok:
            print(f"\n❌ Error: {result.message}")
            if service.last_error:
                print(f"   {service.last_error}")
            return 1

        if args.out:
            Path(args.out).write_bytes(result.wav)
            print(f"\n💾 Saved: {args.out} ({len(result.wav)} bytes)")

        if config.enable_playback and service.play(result.wav):
            try:
                service.wait_playback()
            except KeyboardInterrupt:
                service.stop_playback()

    return 0


if __name__ == "__main__":
    sys.exit(main())
