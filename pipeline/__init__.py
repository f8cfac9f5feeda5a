# Kitten TTS - Pipeline Package

from .config import SpeechServiceConfig, ServiceState
from .components import ComponentManager, resolve_bundle
from .speech_service import SpeechService, main

__all__ = [
    "SpeechService",
    "SpeechServiceConfig",
    "ServiceState",
    "ComponentManager",
    "resolve_bundle",
    "main",
]
