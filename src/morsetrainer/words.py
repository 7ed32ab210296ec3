"""Load the practice word list used once every tier is cleared."""

from __future__ import annotations

import random
from collections.abc import Iterable
from pathlib import Path

from loguru import logger

from .codes import normalize_symbol, unencodable_symbols

WORDS_PER_SESSION = 10

DEFAULT_WORDS: tuple[str, ...] = (
    "THE",
    "AND",
    "FOR",
    "ARE",
    "BUT",
    "NOT",
    "YOU",
    "ALL",
    "CAN",
    "HER",
    "WAS",
    "ONE",
    "OUR",
    "OUT",
    "DAY",
    "GET",
    "HAS",
    "HIM",
    "HIS",
    "HOW",
    "SOS",
    "CQ",
    "QTH",
    "RST",
    "73",
)


def parse_words(lines: Iterable[str]) -> list[str]:
    """Normalize word lines, dropping blanks, comments, duplicates and unencodable words."""
    words: list[str] = []
    seen: set[str] = set()
    for line in lines:
        word = normalize_symbol(line)
        if not word or word.startswith("#"):
            continue
        bad = unencodable_symbols(word)
        if bad:
            logger.warning("Skipping word {!r}: no code for {}", word, ", ".join(repr(char) for char in bad))
            continue
        if word in seen:
            continue
        seen.add(word)
        words.append(word)
    return words


def load_words(path: Path | None) -> list[str]:
    """Load words from a file, falling back to the built-in list."""
    if path is None or not path.exists():
        logger.warning("Word list {} not found; using built-in word list", path)
        return list(DEFAULT_WORDS)
    try:
        text = path.read_text(encoding="utf-8-sig")
    except OSError as exc:
        logger.warning("Could not read word list {} ({}); using built-in word list", path, exc)
        return list(DEFAULT_WORDS)
    words = parse_words(text.splitlines())
    if not words:
        logger.warning("Word list {} has no usable words; using built-in word list", path)
        return list(DEFAULT_WORDS)
    return words


def sample_words(words: list[str], count: int = WORDS_PER_SESSION, rng: random.Random | None = None) -> list[str]:
    """Return a shuffled sample of distinct words, at most `count` long."""
    chooser = rng if rng is not None else random.Random()
    unique = list(dict.fromkeys(words))
    return chooser.sample(unique, min(count, len(unique)))
