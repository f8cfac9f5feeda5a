"""
Kitten TTS - Phonemizer
=======================

Rule-based approximation of English spelling to IPA-like symbols.

This is not a grapheme-to-phoneme system. It is a fixed list of literal
substring rewrites that the model's reference front-end applies, and the
token stream the model sees depends on it exactly. Rules run in order, each
replacing every occurrence, and each sees the output of the rules before it.
"""

from typing import Sequence, Tuple


PHONEME_RULES: Tuple[Tuple[str, str], ...] = (
    # Digraphs
    ("th", "θ"),
    ("sh", "ʃ"),
    ("ch", "tʃ"),
    ("ng", "ŋ"),
    ("ph", "f"),
    # Vowel clusters
    ("ee", "i"),
    ("oo", "u"),
    ("ou", "aʊ"),
    ("ow", "oʊ"),
    # Single vowels
    ("a", "ə"),
    ("e", "ɛ"),
    ("i", "ɪ"),
    ("o", "ɔ"),
    ("u", "ʊ"),
)


class Phonemizer:
    """
    Deterministic text -> phoneme string transform.

    Usage:
        phonemizer = Phonemizer()
        phonemizer.phonemize("The show")  # -> "θɛ ʃɔʊ"
    """

    def __init__(self, rules: Sequence[Tuple[str, str]] = PHONEME_RULES):
        self.rules = tuple(rules)

    def phonemize(self, text: str) -> str:
        result = text.lower()
        for pattern, replacement in self.rules:
            result = result.replace(pattern, replacement)
        return result

    __call__ = phonemize


def phonemize(text: str) -> str:
    """Phonemize with the default rule list."""
    return _DEFAULT.phonemize(text)


_DEFAULT = Phonemizer()
