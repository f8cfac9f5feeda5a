"""
Tests: Vocabulary (core/vocabulary.py)
======================================

Run with pytest:
    python -m pytest tests/test_vocabulary.py -v
"""

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest

from core.vocabulary import VOCABULARY, Vocabulary, build_symbols, split_symbols


@pytest.fixture
def vocab():
    return Vocabulary()


def test_pad_is_id_zero(vocab):
    assert vocab.pad_id == 0
    assert vocab.pad == "$"
    assert vocab.symbol_of(0) == "$"
    assert vocab.id_of("$") == 0


def test_symbol_count(vocab):
    assert len(vocab) == 177
    assert len(build_symbols()) == 177


def test_punctuation_block(vocab):
    assert vocab.id_of(";") == 1
    assert vocab.id_of(".") == 4
    assert vocab.id_of(" ") == 16


def test_letter_block(vocab):
    assert vocab.id_of("A") == 17
    assert vocab.id_of("Z") == 42
    assert vocab.id_of("a") == 43
    assert vocab.id_of("h") == 50
    assert vocab.id_of("i") == 51
    assert vocab.id_of("z") == 68


def test_ipa_block(vocab):
    assert vocab.id_of("ɑ") == 69
    assert vocab.id_of("ɔ") == 76
    assert vocab.id_of("ə") == 83
    assert vocab.id_of("ɛ") == 86
    assert vocab.id_of("ɪ") == 102
    assert vocab.id_of("ŋ") == 112
    assert vocab.id_of("θ") == 119
    assert vocab.id_of("ʃ") == 131
    assert vocab.id_of("ʊ") == 135
    assert vocab.id_of("ᵻ") == 176


def test_duplicate_symbols_resolve_to_last_position(vocab):
    # Double quote sits at 11, 14 and 15
    assert vocab.symbol_of(11) == '"'
    assert vocab.id_of('"') == 15
    assert vocab.symbol_of(175) == "'"
    assert vocab.id_of("'") == 175


def test_unknown_symbol(vocab):
    assert vocab.id_of("€") is None
    assert "€" not in vocab
    assert "a" in vocab


def test_symbol_of_out_of_range(vocab):
    with pytest.raises(IndexError):
        vocab.symbol_of(len(vocab))
    with pytest.raises(IndexError):
        vocab.symbol_of(-1)


def test_shared_instance_matches_fresh_table(vocab):
    assert VOCABULARY.symbols == vocab.symbols


def test_lookup_ignores_composition(vocab):
    # Stored precomposed (U+00E7); c + combining cedilla finds the same id
    assert vocab.id_of("ç") == 78
    assert vocab.id_of("c\u0327") == 78
    assert "c\u0327" in vocab


def test_combining_mark_stays_with_its_base(vocab):
    # The syllabic mark U+0329 after an apostrophe is one symbol, not two
    assert vocab.symbol_of(174) == "'\u0329"
    assert vocab.id_of("'\u0329") == 174
    assert "\u0329" not in vocab


def test_split_symbols_uses_grapheme_clusters():
    assert split_symbols("ab") == ["a", "b"]
    assert split_symbols("e\u0301x") == ["e\u0301", "x"]
    assert split_symbols("") == []
