"""
Kitten TTS - Tokenizer
======================

Phoneme string -> token ids.

The number of ids becomes the second dimension of the model's input_ids
tensor, so the whitespace collapsing and padding here are part of the
model contract.
"""

from typing import List, Optional

from .phonemizer import Phonemizer
from .vocabulary import VOCABULARY, Vocabulary, split_symbols


def collapse_whitespace(text: str) -> str:
    """Split on any whitespace, drop empty fragments, rejoin with single spaces."""
    return " ".join(text.split())


class Tokenizer:
    """
    Maps phonemized text to a padded id sequence.

    The collapsed text is read one grapheme cluster at a time, so a base
    character and its combining marks form a single token. Clusters missing
    from the vocabulary map to the id of the space character. The result always starts and ends with the pad id.

    Usage:
        tokenizer = Tokenizer()
        tokenizer.tokenize("hɪ")   # -> [0, 50, 102, 0]
        tokenizer.encode("Hi")     # phonemize + tokenize
    """

    def __init__(
        self,
        vocabulary: Optional[Vocabulary] = None,
        phonemizer: Optional[Phonemizer] = None,
    ):
        self.vocabulary = vocabulary or VOCABULARY
        self.phonemizer = phonemizer or Phonemizer()
        self.unknown_id = self.vocabulary.id_of(" ")

    def tokenize(self, phonemized: str) -> List[int]:
        """
        Convert a phoneme string into token ids.

        Args:
            phonemized: Output of the phonemizer

        Returns:
            List of ids, length = grapheme clusters in the collapsed text + 2
        """
        pad_id = self.vocabulary.pad_id
        ids = [pad_id]

        for symbol in split_symbols(collapse_whitespace(phonemized)):
            token_id = self.vocabulary.id_of(symbol)
            if token_id is None:
                token_id = self.unknown_id
            ids.append(token_id)

        ids.append(pad_id)
        return ids

    def unknown_symbols(self, phonemized: str) -> List[str]:
        """Grapheme clusters of the collapsed text that fall back to the space id."""
        return [s for s in split_symbols(collapse_whitespace(phonemized)) if s not in self.vocabulary]

    def encode(self, text: str) -> List[int]:
        """Phonemize raw text, then tokenize it."""
        return self.tokenize(self.phonemizer.phonemize(text))
