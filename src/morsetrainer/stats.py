"""Response-time samples and session accuracy aggregation."""

from __future__ import annotations

from dataclasses import replace
from datetime import UTC, datetime

from loguru import logger

from .codes import normalize_symbol
from .models import PerformanceRecord, SessionLogEntry, SessionSummary


class StatsAggregator:
    """Feeds the progression gate from a PerformanceRecord."""

    def __init__(self, record: PerformanceRecord) -> None:
        """Wrap the record mutated by this aggregator."""
        self.record = record
        self._open_entry = False

    def _samples(self, word_mode: bool) -> dict[str, float]:
        return self.record.word_times if word_mode else self.record.char_times

    def record_response(self, item: str, elapsed_seconds: float, word_mode: bool = False) -> None:
        """Store the latest response time for an item, replacing any earlier sample."""
        self._samples(word_mode)[normalize_symbol(item)] = max(0.0, float(elapsed_seconds))

    def average_response_time(self, word_mode: bool = False) -> float:
        """Mean of all currently stored samples for the mode, 0.0 when none exist."""
        samples = self._samples(word_mode)
        if not samples:
            return 0.0
        return sum(samples.values()) / len(samples)

    def session_summary(
        self, correct: int, total: int, duration_seconds: float, word_mode: bool = False
    ) -> SessionSummary:
        """Build accuracy and speed evidence for one session."""
        accuracy = correct / total if total > 0 else 0.0
        return SessionSummary(
            correct=correct,
            total=total,
            duration_seconds=duration_seconds,
            accuracy=accuracy,
            avg_response_time=self.average_response_time(word_mode),
        )

    def open_session(self, timestamp: str, level: int) -> None:
        """Append an open history entry for a session that has just started."""
        self.record.session_history.append(
            SessionLogEntry(timestamp=timestamp, duration_seconds=0.0, items_practiced=0, accuracy=0.0, level=level)
        )
        self._open_entry = True

    def commit_session(self, summary: SessionSummary, level: int, known_count: int | None = None) -> SessionLogEntry:
        """Finalize the session entry and fold accuracy into the running average."""
        record = self.record
        if self._open_entry and record.session_history:
            entry = replace(
                record.session_history[-1],
                duration_seconds=summary.duration_seconds,
                items_practiced=summary.total,
                accuracy=summary.accuracy,
                level=level,
            )
            record.session_history[-1] = entry
        else:
            entry = SessionLogEntry(
                timestamp=datetime.now(UTC).isoformat(),
                duration_seconds=summary.duration_seconds,
                items_practiced=summary.total,
                accuracy=summary.accuracy,
                level=level,
            )
            record.session_history.append(entry)
        self._open_entry = False

        record.sessions_completed += 1
        n = record.sessions_completed
        record.overall_accuracy = (record.overall_accuracy * (n - 1) + summary.accuracy) / n
        if known_count is not None:
            record.chars_learned = known_count
        record.words_learned = len(record.word_times)
        logger.debug(
            "Session {} committed: accuracy={:.2f} running={:.2f}",
            n,
            summary.accuracy,
            record.overall_accuracy,
        )
        return entry

    def slowest(self, limit: int = 5, word_mode: bool = False) -> list[tuple[str, float]]:
        """Return items with the highest latest response times."""
        samples = self._samples(word_mode)
        ranked = sorted(samples.items(), key=lambda pair: (-pair[1], pair[0]))
        return ranked[:limit]
