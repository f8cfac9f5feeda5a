# Kitten TTS - Utils Package
from .audio_utils import *
from .seeded_random import SeededRandom

__all__ = [
    "SeededRandom",
]
