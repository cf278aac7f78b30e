from conftest import PinnedRandom
from narrator.text import smart_join_sentences


def test_empty_and_single():
    assert smart_join_sentences([], "short") == ""
    assert smart_join_sentences(["Alone here."], "short") == "Alone here."


def test_short_joins_with_and():
    joined = smart_join_sentences(["The wind howls.", "Snow falls."], "short", "en", PinnedRandom())
    assert joined == "The wind howls and Snow falls."


def test_vietnamese_connectors():
    joined = smart_join_sentences(["Gió rít.", "Tuyết rơi."], "short", "vi", PinnedRandom())
    assert joined == "Gió rít và Tuyết rơi."


def test_long_uses_long_connectors():
    joined = smart_join_sentences(["It is dark.", "Water drips."], "detailed", "en", PinnedRandom())
    assert joined == "It is dark, moreover, Water drips."


def test_terminal_punctuation_added():
    assert smart_join_sentences(["No period", "here either"], "short", "en", PinnedRandom()).endswith(".")


def test_whitespace_and_duplicate_punctuation_collapsed():
    joined = smart_join_sentences(["Too   many spaces..", "  Next  "], "medium", "en", PinnedRandom())
    assert "  " not in joined
    assert ".." not in joined
