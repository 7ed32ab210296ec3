"""Morse code table and item encoding."""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

SHORT = "."
LONG = "-"

CODE_TABLE: Mapping[str, str] = MappingProxyType(
    {
        "A": ".-",
        "B": "-...",
        "C": "-.-.",
        "D": "-..",
        "E": ".",
        "F": "..-.",
        "G": "--.",
        "H": "....",
        "I": "..",
        "J": ".---",
        "K": "-.-",
        "L": ".-..",
        "M": "--",
        "N": "-.",
        "O": "---",
        "P": ".--.",
        "Q": "--.-",
        "R": ".-.",
        "S": "...",
        "T": "-",
        "U": "..-",
        "V": "...-",
        "W": ".--",
        "X": "-..-",
        "Y": "-.--",
        "Z": "--..",
        "0": "-----",
        "1": ".----",
        "2": "..---",
        "3": "...--",
        "4": "....-",
        "5": ".....",
        "6": "-....",
        "7": "--...",
        "8": "---..",
        "9": "----.",
    }
)

_REVERSE_TABLE: Mapping[str, str] = MappingProxyType({code: symbol for symbol, code in CODE_TABLE.items()})


def normalize_symbol(symbol: str) -> str:
    """Return canonical (upper-case, trimmed) form of a symbol or word."""
    return symbol.strip().upper()


def encode_symbol(symbol: str) -> str | None:
    """Return code for one symbol, or None when it has no mapping."""
    return CODE_TABLE.get(normalize_symbol(symbol))


def encode_word(word: str) -> str:
    """Return space-joined code for a word.

    Symbols without a mapping are skipped; use `unencodable_symbols` to detect them.
    """
    codes = [CODE_TABLE[char] for char in normalize_symbol(word) if char in CODE_TABLE]
    return " ".join(codes)


def encode_item(item: str) -> str:
    """Return expected code for a practice item (single symbol or word)."""
    normalized = normalize_symbol(item)
    if len(normalized) == 1:
        return encode_symbol(normalized) or ""
    return encode_word(normalized)


def unencodable_symbols(word: str) -> list[str]:
    """Return symbols of a word that have no code, in order of appearance."""
    return [char for char in normalize_symbol(word) if char not in CODE_TABLE]


def decode_code(code: str) -> str | None:
    """Reverse lookup for a single-symbol code."""
    return _REVERSE_TABLE.get(code.strip())


def is_valid_code(text: str) -> bool:
    """Return whether text only contains pulse characters and separating spaces."""
    stripped = text.strip()
    if not stripped:
        return False
    return all(char in (SHORT, LONG, " ") for char in stripped)
