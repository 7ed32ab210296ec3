import random
from pathlib import Path

from morsetrainer.words import DEFAULT_WORDS, load_words, parse_words, sample_words


def test_parse_words_normalizes_and_filters(log_messages: list[str]) -> None:
    words = parse_words(["the", "", "# comment", "  sos ", "THE", "what?", "cq"])
    assert words == ["THE", "SOS", "CQ"]
    assert any("WHAT?" in message for message in log_messages)


def test_missing_word_list_uses_default(tmp_path: Path, log_messages: list[str]) -> None:
    words = load_words(tmp_path / "missing.txt")
    assert words == list(DEFAULT_WORDS)
    assert any("not found" in message for message in log_messages)


def test_load_words_from_file(tmp_path: Path) -> None:
    path = tmp_path / "words.txt"
    path.write_text("alpha\nbravo\ncharlie\n", encoding="utf-8")
    assert load_words(path) == ["ALPHA", "BRAVO", "CHARLIE"]


def test_unusable_word_file_uses_default(tmp_path: Path) -> None:
    path = tmp_path / "words.txt"
    path.write_text("???\n\n", encoding="utf-8")
    assert load_words(path) == list(DEFAULT_WORDS)


def test_sample_is_distinct_and_bounded() -> None:
    words = [f"W{index}" for index in range(20)]
    sample = sample_words(words, 10, random.Random(7))
    assert len(sample) == 10
    assert len(set(sample)) == 10
    assert set(sample) <= set(words)

    short = ["A", "B", "A"]
    assert sorted(sample_words(short, 10, random.Random(1))) == ["A", "B"]


def test_default_words_are_encodable() -> None:
    assert parse_words(DEFAULT_WORDS) == list(DEFAULT_WORDS)
