"""Core domain models for adaptive Morse code practice."""

from __future__ import annotations

from dataclasses import dataclass, field

DEFAULT_LEVEL = 1
DEFAULT_SESSION_MINUTES = 5


@dataclass(frozen=True)
class Tier:
    """One difficulty rank with its unlock gate."""

    level: int
    symbols: tuple[str, ...]
    speed_requirement: float
    accuracy_requirement: float


@dataclass
class LearnerProfile:
    """Persisted tier position and known-symbol set."""

    difficulty_level: int = DEFAULT_LEVEL
    known_chars: list[str] = field(default_factory=list)
    session_duration: int = DEFAULT_SESSION_MINUTES

    def add_known(self, symbols: tuple[str, ...] | list[str]) -> list[str]:
        """Add symbols to the known set and return the ones that were new."""
        added: list[str] = []
        for symbol in symbols:
            if symbol not in self.known_chars:
                self.known_chars.append(symbol)
                added.append(symbol)
        return added


@dataclass(frozen=True)
class SessionLogEntry:
    """One row of the append-only session history."""

    timestamp: str
    duration_seconds: float
    items_practiced: int
    accuracy: float
    level: int


@dataclass
class PerformanceRecord:
    """Cumulative statistics persisted across runs."""

    sessions_completed: int = 0
    chars_learned: int = 0
    words_learned: int = 0
    overall_accuracy: float = 0.0
    char_times: dict[str, float] = field(default_factory=dict)
    word_times: dict[str, float] = field(default_factory=dict)
    session_history: list[SessionLogEntry] = field(default_factory=list)


@dataclass(frozen=True)
class SessionSummary:
    """Aggregate evidence for one finished session."""

    correct: int
    total: int
    duration_seconds: float
    accuracy: float
    avg_response_time: float
