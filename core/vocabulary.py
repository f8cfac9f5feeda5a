"""
Kitten TTS - Vocabulary
=======================

Fixed symbol table shared with the acoustic model.

The table is the concatenation pad + punctuation + Latin letters + IPA
letters, split into extended grapheme clusters (a base character plus any
combining marks). A symbol's position is its token id. The model was
trained against this exact order, so it must never change.

Lookups compare symbols after NFC normalization, so a precomposed
character and its decomposed form map to the same id.
"""

from typing import Dict, List, Optional, Tuple
import unicodedata

import regex


PAD = "$"
PUNCTUATION = ';:,.!?¡¿—…"«»"" '
LETTERS = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz"
LETTERS_IPA = (
    "ɑɐɒæɓʙβɔɕçɗɖðʤəɘɚɛɜɝɞɟʄɡɠɢʛɦɧħɥʜɨɪʝɭɬɫɮʟɱɯɰŋɳɲɴøɵɸθœɶʘɹɺɾɻʀʁɽʂʃʈʧʉʊʋⱱʌ"
    "ɣɤʍχʎʏʑʐʒʔʡʕʢǀǁǂǃˈˌːˑʼʴʰʱʲʷˠˤ˞↓↑→↗↘'̩'ᵻ"
)

_GRAPHEME = regex.compile(r"\X")


def split_symbols(text: str) -> List[str]:
    """Split text into extended grapheme clusters ("'\\u0329" stays one symbol)."""
    return _GRAPHEME.findall(text)


def _key(symbol: str) -> str:
    return unicodedata.normalize("NFC", symbol)


def build_symbols() -> List[str]:
    """Return the ordered symbol list."""
    return [PAD] + split_symbols(PUNCTUATION) + split_symbols(LETTERS) + split_symbols(LETTERS_IPA)


class Vocabulary:
    """
    Immutable symbol <-> id table.

    Some symbols (the double quote) appear twice in the source strings.
    Lookups by symbol return the later position; lookups by id return
    whatever sits at that position.

    Usage:
        vocab = Vocabulary()
        vocab.id_of("a")    # -> 43
        vocab.id_of("€")    # -> None
        vocab.symbol_of(0)  # -> "$"
    """

    def __init__(self):
        self._symbols: Tuple[str, ...] = tuple(build_symbols())
        self._ids: Dict[str, int] = {_key(symbol): i for i, symbol in enumerate(self._symbols)}

    @property
    def pad_id(self) -> int:
        return 0

    @property
    def pad(self) -> str:
        return self._symbols[0]

    @property
    def symbols(self) -> Tuple[str, ...]:
        return self._symbols

    def id_of(self, symbol: str) -> Optional[int]:
        """Token id for a symbol, or None when the symbol is unknown."""
        return self._ids.get(_key(symbol))

    def symbol_of(self, token_id: int) -> str:
        """Symbol stored at a token id. Raises IndexError when out of range."""
        if token_id < 0:
            raise IndexError(f"Token id out of range: {token_id}")
        return self._symbols[token_id]

    def __contains__(self, symbol: object) -> bool:
        return isinstance(symbol, str) and _key(symbol) in self._ids

    def __len__(self) -> int:
        return len(self._symbols)


# Built once at import; shared by every tokenizer.
VOCABULARY = Vocabulary()
