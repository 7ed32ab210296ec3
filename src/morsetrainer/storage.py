"""JSON persistence for the learner profile and performance record."""

from __future__ import annotations

import json
import math
from dataclasses import asdict
from pathlib import Path
from typing import cast

from loguru import logger

from .codes import CODE_TABLE, normalize_symbol
from .models import LearnerProfile, PerformanceRecord, SessionLogEntry

CONFIG_FILENAME = "config.json"
STATS_FILENAME = "stats.json"


class StorageError(OSError):
    """Raised when a store cannot be written."""


class ProgressStore:
    """File access layer for the configuration and statistics stores."""

    def __init__(self, data_dir: Path | str) -> None:
        """Initialize store paths under a data directory."""
        self.data_dir = Path(data_dir)
        self.config_path = self.data_dir / CONFIG_FILENAME
        self.stats_path = self.data_dir / STATS_FILENAME

    def load_profile(self) -> LearnerProfile:
        """Load the learner profile, creating a default one when absent.

        Malformed content is not repaired field by field; the whole profile falls
        back to the default.
        """
        if not self.config_path.exists():
            profile = LearnerProfile()
            logger.info("No configuration at {}; creating default profile", self.config_path)
            try:
                self.save_profile(profile)
            except StorageError as exc:
                logger.error("Could not write default configuration: {}", exc)
            return profile
        try:
            raw = _read_json(self.config_path)
            return profile_from_dict(raw)
        except (OSError, ValueError) as exc:
            logger.warning("Could not load configuration from {} ({}); using defaults", self.config_path, exc)
            return LearnerProfile()

    def save_profile(self, profile: LearnerProfile) -> None:
        """Write the learner profile."""
        _write_json(self.config_path, profile_to_dict(profile))

    def load_record(self) -> PerformanceRecord:
        """Load the performance record, falling back to an empty one."""
        if not self.stats_path.exists():
            return PerformanceRecord()
        try:
            raw = _read_json(self.stats_path)
            return record_from_dict(raw)
        except (OSError, ValueError) as exc:
            logger.warning("Could not load statistics from {} ({}); starting fresh", self.stats_path, exc)
            return PerformanceRecord()

    def save_record(self, record: PerformanceRecord) -> None:
        """Write the performance record."""
        _write_json(self.stats_path, record_to_dict(record))


def profile_to_dict(profile: LearnerProfile) -> dict[str, object]:
    """Serialize a learner profile."""
    return {
        "difficulty_level": profile.difficulty_level,
        "known_chars": list(profile.known_chars),
        "session_duration": profile.session_duration,
    }


def profile_from_dict(raw: dict[str, object]) -> LearnerProfile:
    """Parse a learner profile, raising ValueError on any malformed field."""
    level = _require_int(raw, "difficulty_level", minimum=1)
    duration = _require_int(raw, "session_duration", minimum=1)
    known_raw = raw.get("known_chars")
    if not isinstance(known_raw, list):
        raise ValueError("known_chars must be a list.")
    known: list[str] = []
    for item in cast(list[object], known_raw):
        if not isinstance(item, str) or len(item.strip()) != 1:
            raise ValueError(f"known_chars entry {item!r} is not a single character.")
        symbol = normalize_symbol(item)
        if symbol not in CODE_TABLE:
            raise ValueError(f"known_chars entry {item!r} has no code.")
        if symbol not in known:
            known.append(symbol)
    return LearnerProfile(difficulty_level=level, known_chars=known, session_duration=duration)


def record_to_dict(record: PerformanceRecord) -> dict[str, object]:
    """Serialize a performance record."""
    return {
        "sessions_completed": record.sessions_completed,
        "chars_learned": record.chars_learned,
        "words_learned": record.words_learned,
        "overall_accuracy": record.overall_accuracy,
        "char_times": dict(record.char_times),
        "word_times": dict(record.word_times),
        "session_history": [asdict(entry) for entry in record.session_history],
    }


def record_from_dict(raw: dict[str, object]) -> PerformanceRecord:
    """Parse a performance record, raising ValueError on any malformed field."""
    history_raw = raw.get("session_history", [])
    if not isinstance(history_raw, list):
        raise ValueError("session_history must be a list.")
    history: list[SessionLogEntry] = []
    for item in cast(list[object], history_raw):
        if not isinstance(item, dict):
            raise ValueError("session_history entries must be objects.")
        entry = cast(dict[str, object], item)
        timestamp = entry.get("timestamp")
        if not isinstance(timestamp, str):
            raise ValueError("session_history entry has no timestamp.")
        history.append(
            SessionLogEntry(
                timestamp=timestamp,
                duration_seconds=_require_float(entry, "duration_seconds", minimum=0.0),
                items_practiced=_require_int(entry, "items_practiced", minimum=0),
                accuracy=_require_float(entry, "accuracy", minimum=0.0, maximum=1.0),
                level=_require_int(entry, "level", minimum=1),
            )
        )

    return PerformanceRecord(
        sessions_completed=_require_int(raw, "sessions_completed", minimum=0),
        chars_learned=_require_int(raw, "chars_learned", 0, minimum=0),
        words_learned=_require_int(raw, "words_learned", 0, minimum=0),
        overall_accuracy=_require_float(raw, "overall_accuracy", minimum=0.0, maximum=1.0),
        char_times=_require_times(raw, "char_times"),
        word_times=_require_times(raw, "word_times"),
        session_history=history,
    )


def _read_json(path: Path) -> dict[str, object]:
    raw_obj: object = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(raw_obj, dict):
        raise ValueError(f"{path.name} root must be a JSON object.")
    return cast(dict[str, object], raw_obj)


def _write_json(path: Path, payload: dict[str, object]) -> None:
    """Write payload through a temporary file so a failed write keeps the old file."""
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        tmp_path.replace(path)
    except OSError as exc:
        raise StorageError(f"Could not write {path}: {exc}") from exc
    logger.debug("Wrote {}", path)


def _require_int(
    raw: dict[str, object], key: str, default: int | None = None, *, minimum: int | None = None
) -> int:
    """Return an int field; bools, non-integral and out-of-range values are rejected."""
    value = raw.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{key} must be an integer.")
    if minimum is not None and value < minimum:
        raise ValueError(f"{key} must be at least {minimum}.")
    return value


def _require_float(
    raw: dict[str, object], key: str, *, minimum: float | None = None, maximum: float | None = None
) -> float:
    value = raw.get(key)
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise ValueError(f"{key} must be a number.")
    number = float(value)
    if not math.isfinite(number):
        raise ValueError(f"{key} must be finite.")
    if minimum is not None and number < minimum:
        raise ValueError(f"{key} must be at least {minimum}.")
    if maximum is not None and number > maximum:
        raise ValueError(f"{key} must be at most {maximum}.")
    return number


def _require_times(raw: dict[str, object], key: str) -> dict[str, float]:
    """Return a response-time map keyed by normalized item."""
    value = raw.get(key, {})
    if not isinstance(value, dict):
        raise ValueError(f"{key} must be an object.")
    times: dict[str, float] = {}
    for item in cast(dict[object, object], value):
        if not isinstance(item, str):
            raise ValueError(f"{key} has a non-string key {item!r}.")
        times[normalize_symbol(item)] = _require_float(cast(dict[str, object], value), item, minimum=0.0)
    return times
