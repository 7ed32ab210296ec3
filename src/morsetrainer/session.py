"""Session controller: seeds the queue, scores answers and evaluates the session."""

from __future__ import annotations

import random
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum

from loguru import logger

from .codes import encode_item, normalize_symbol
from .models import LearnerProfile, SessionSummary, Tier
from .practice_queue import PracticeQueue
from .progression import (
    TIERS,
    AdvanceDecision,
    apply_advancement,
    current_tier,
    evaluate_advancement,
    is_word_mode,
    learnable_symbols,
)
from .stats import StatsAggregator
from .storage import ProgressStore, StorageError
from .words import WORDS_PER_SESSION, sample_words

Clock = Callable[[], float]
QUIT_TOKEN = "Q"


class Phase(Enum):
    """Controller lifecycle phase."""

    IDLE = "idle"
    RUNNING = "running"
    EVALUATING = "evaluating"


class ExitReason(Enum):
    """Why a session left the running phase."""

    COMPLETED = "completed"
    TIMEOUT = "timeout"
    QUIT = "quit"


@dataclass
class SessionState:
    """Counters and queue for the session in progress."""

    queue: PracticeQueue
    word_mode: bool
    level: int
    started_at: float
    started_wall: str
    correct: int = 0
    total: int = 0


@dataclass(frozen=True)
class AnswerResult:
    """Scored answer for one presented item."""

    item: str
    expected: str
    answer: str
    correct: bool
    elapsed_seconds: float


@dataclass(frozen=True)
class SessionResult:
    """Everything the terminal needs to report a finished session."""

    summary: SessionSummary
    reason: ExitReason
    level: int
    word_mode: bool
    tier: Tier | None
    decision: AdvanceDecision | None
    new_symbols: tuple[str, ...]
    saved: bool
    errors: tuple[str, ...]


def is_quit(text: str) -> bool:
    """Return whether raw input is the quit token."""
    return normalize_symbol(text) == QUIT_TOKEN


def _utc_now() -> str:
    return datetime.now(UTC).isoformat()


class SessionController:
    """Drives one practice session at a time through idle, running and evaluating."""

    def __init__(
        self,
        profile: LearnerProfile,
        stats: StatsAggregator,
        store: ProgressStore | None = None,
        words: list[str] | None = None,
        tier_table: tuple[Tier, ...] = TIERS,
        clock: Clock = time.monotonic,
        rng: random.Random | None = None,
        now: Callable[[], str] = _utc_now,
    ) -> None:
        """Initialize controller with its collaborators."""
        self.profile = profile
        self.stats = stats
        self.store = store
        self.words = list(words) if words is not None else []
        self.tier_table = tier_table
        self.clock = clock
        self.rng = rng if rng is not None else random.Random()
        self.now = now
        self.phase = Phase.IDLE
        self.state: SessionState | None = None
        self.reason: ExitReason | None = None
        self._presented_at: float | None = None

    @property
    def word_mode(self) -> bool:
        """Return whether the profile is past the last tier."""
        return is_word_mode(self.profile, self.tier_table)

    def start(self) -> SessionState:
        """Seed a fresh queue and start the session clock."""
        if self.phase is not Phase.IDLE:
            raise RuntimeError(f"Cannot start a session while {self.phase.value}.")

        word_mode = self.word_mode
        if word_mode:
            items = sample_words(self.words, WORDS_PER_SESSION, self.rng)
        else:
            items = learnable_symbols(self.profile, self.tier_table)
            self.rng.shuffle(items)

        started_wall = self.now()
        self.state = SessionState(
            queue=PracticeQueue(items),
            word_mode=word_mode,
            level=self.profile.difficulty_level,
            started_at=self.clock(),
            started_wall=started_wall,
        )
        self.reason = None
        self._presented_at = None
        self.stats.open_session(started_wall, self.profile.difficulty_level)
        self.phase = Phase.RUNNING
        logger.debug("Session started: level={} word_mode={} items={}", self.state.level, word_mode, len(items))
        return self.state

    def _running_state(self) -> SessionState:
        if self.phase is not Phase.RUNNING or self.state is None:
            raise RuntimeError("No session is running.")
        return self.state

    def elapsed(self) -> float:
        """Seconds since the running session started."""
        state = self._running_state()
        return self.clock() - state.started_at

    def time_budget_exceeded(self) -> bool:
        """Return whether the session budget is used up; never true in word practice."""
        state = self._running_state()
        if state.word_mode:
            return False
        return self.elapsed() > self.profile.session_duration * 60

    def next_item(self) -> str | None:
        """Present the head item, or return None when the session should stop."""
        state = self._running_state()
        if state.queue.peek() is None:
            self.reason = ExitReason.COMPLETED
            return None
        if self.time_budget_exceeded():
            self.reason = ExitReason.TIMEOUT
            logger.debug("Session budget of {} min exceeded", self.profile.session_duration)
            return None
        self._presented_at = self.clock()
        return state.queue.peek()

    def submit(self, answer: str) -> AnswerResult:
        """Score a trimmed, upper-cased answer for the presented item and requeue it on failure."""
        state = self._running_state()
        item = state.queue.peek()
        if item is None or self._presented_at is None:
            raise RuntimeError("No item has been presented.")

        elapsed = max(0.0, self.clock() - self._presented_at)
        self._presented_at = None
        expected = encode_item(item)
        normalized = normalize_symbol(answer)
        correct = normalized == expected

        self.stats.record_response(item, elapsed, state.word_mode)
        state.total += 1
        if correct:
            state.correct += 1
        state.queue.resolve(correct)
        return AnswerResult(item=item, expected=expected, answer=normalized, correct=correct, elapsed_seconds=elapsed)

    def quit(self) -> None:
        """Stop the running session at the user's request."""
        self._running_state()
        self.reason = ExitReason.QUIT
        self._presented_at = None

    def finish(self) -> SessionResult:
        """Summarize, gate advancement, persist and return to idle."""
        state = self._running_state()
        self.phase = Phase.EVALUATING
        reason = self.reason or ExitReason.COMPLETED

        duration = self.clock() - state.started_at
        summary = self.stats.session_summary(state.correct, state.total, duration, state.word_mode)

        tier = None if state.word_mode else current_tier(self.profile, self.tier_table)
        decision: AdvanceDecision | None = None
        new_symbols: list[str] = []
        if tier is not None:
            decision = evaluate_advancement(tier, summary.accuracy, summary.avg_response_time)
            new_symbols = apply_advancement(self.profile, decision, self.tier_table)

        self.stats.commit_session(summary, state.level, len(self.profile.known_chars))
        errors = self._persist()

        self.state = None
        self.phase = Phase.IDLE
        logger.info(
            "Session finished ({}): {}/{} correct, avg {:.1f}s",
            reason.value,
            summary.correct,
            summary.total,
            summary.avg_response_time,
        )
        return SessionResult(
            summary=summary,
            reason=reason,
            level=state.level,
            word_mode=state.word_mode,
            tier=tier,
            decision=decision,
            new_symbols=tuple(new_symbols),
            saved=not errors,
            errors=tuple(errors),
        )

    def _persist(self) -> list[str]:
        """Write profile and record; failures are reported, not raised."""
        store = self.store
        if store is None:
            return []
        errors: list[str] = []
        for label, save in (
            ("configuration", lambda: store.save_profile(self.profile)),
            ("statistics", lambda: store.save_record(self.stats.record)),
        ):
            try:
                save()
            except StorageError as exc:
                logger.error("Could not save {}: {}", label, exc)
                errors.append(f"Could not save {label}: {exc}")
        return errors
