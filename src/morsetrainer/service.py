"""Application service wiring stores, progression and practice sessions."""

from __future__ import annotations

import random
import time
from dataclasses import dataclass
from pathlib import Path

from loguru import logger

from .codes import CODE_TABLE
from .models import LearnerProfile, PerformanceRecord, SessionLogEntry, Tier
from .progression import TIERS, current_tier, is_word_mode
from .session import Clock, SessionController
from .stats import StatsAggregator
from .storage import ProgressStore
from .words import load_words

WORDS_FILENAME = "words.txt"


@dataclass(frozen=True)
class ProgressStatus:
    """Snapshot of learner progress for the status view."""

    level: int
    word_mode: bool
    tier: Tier | None
    known_chars: tuple[str, ...]
    session_duration: int
    sessions_completed: int
    overall_accuracy: float
    recent_sessions: tuple[SessionLogEntry, ...]
    slowest: tuple[tuple[str, float], ...]


@dataclass(frozen=True)
class CodeReference:
    """One row of the code table view."""

    symbol: str
    code: str
    known: bool


class TrainerService:
    """Coordinates learner state and practice sessions."""

    def __init__(
        self,
        data_dir: Path | str,
        words_path: Path | str | None = None,
        tier_table: tuple[Tier, ...] = TIERS,
    ) -> None:
        """Load profile and statistics from the data directory."""
        self.store = ProgressStore(data_dir)
        self.tier_table = tier_table
        self.words_path = Path(words_path) if words_path is not None else self.store.data_dir / WORDS_FILENAME
        self.profile: LearnerProfile = self.store.load_profile()
        self.record: PerformanceRecord = self.store.load_record()
        self.stats = StatsAggregator(self.record)
        self._words: list[str] | None = None

    @property
    def word_mode(self) -> bool:
        """Return whether every tier has been cleared."""
        return is_word_mode(self.profile, self.tier_table)

    def words(self) -> list[str]:
        """Return the word list, loading it on first use."""
        if self._words is None:
            self._words = load_words(self.words_path)
        return self._words

    def set_session_duration(self, minutes: int) -> None:
        """Change and persist the session time budget."""
        if minutes < 1:
            raise ValueError("Session duration must be at least 1 minute.")
        self.profile.session_duration = minutes
        self.store.save_profile(self.profile)
        logger.info("Session duration set to {} min", minutes)

    def new_session(self, clock: Clock = time.monotonic, rng: random.Random | None = None) -> SessionController:
        """Create a controller for the next session."""
        words = self.words() if self.word_mode else []
        return SessionController(
            profile=self.profile,
            stats=self.stats,
            store=self.store,
            words=words,
            tier_table=self.tier_table,
            clock=clock,
            rng=rng,
        )

    def status(self, recent: int = 5, slowest: int = 5) -> ProgressStatus:
        """Return current progress summary."""
        word_mode = self.word_mode
        return ProgressStatus(
            level=self.profile.difficulty_level,
            word_mode=word_mode,
            tier=current_tier(self.profile, self.tier_table),
            known_chars=tuple(self.profile.known_chars),
            session_duration=self.profile.session_duration,
            sessions_completed=self.record.sessions_completed,
            overall_accuracy=self.record.overall_accuracy,
            recent_sessions=tuple(self.record.session_history[-recent:]) if recent > 0 else (),
            slowest=tuple(self.stats.slowest(slowest, word_mode=word_mode)),
        )

    def code_references(self) -> list[CodeReference]:
        """Return the code table with known-symbol markers."""
        known = set(self.profile.known_chars)
        return [CodeReference(symbol=symbol, code=code, known=symbol in known) for symbol, code in CODE_TABLE.items()]
