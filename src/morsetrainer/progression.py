"""Difficulty tiers and the advancement state machine."""

from __future__ import annotations

from dataclasses import dataclass

from loguru import logger

from .models import LearnerProfile, Tier

# (level, newly introduced symbols, max average seconds, min accuracy)
_TIER_DATA: tuple[tuple[int, str, float, float], ...] = (
    (1, "ET", 10.0, 0.7),
    (2, "AIMN", 9.0, 0.75),
    (3, "DGKORSUW", 8.5, 0.8),
    (4, "BCFHJLPQVXYZ", 7.0, 0.85),
    (5, "0123456789", 7.0, 0.9),
)

TIERS: tuple[Tier, ...] = tuple(
    Tier(level=level, symbols=tuple(symbols), speed_requirement=speed, accuracy_requirement=accuracy)
    for level, symbols, speed, accuracy in _TIER_DATA
)


@dataclass(frozen=True)
class AdvanceDecision:
    """Outcome of gating one session against its tier."""

    level: int
    advanced: bool
    accuracy_met: bool
    speed_met: bool


def tiers() -> tuple[Tier, ...]:
    """Return the static ordered tier table."""
    return TIERS


def current_tier(profile: LearnerProfile, tier_table: tuple[Tier, ...] = TIERS) -> Tier | None:
    """Return the profile's tier, or None once past the last tier (word practice)."""
    for tier in tier_table:
        if tier.level == profile.difficulty_level:
            return tier
    return None


def is_word_mode(profile: LearnerProfile, tier_table: tuple[Tier, ...] = TIERS) -> bool:
    """Return whether the profile has exhausted all tiers."""
    if not tier_table:
        return True
    return profile.difficulty_level > max(tier.level for tier in tier_table)


def learnable_symbols(profile: LearnerProfile, tier_table: tuple[Tier, ...] = TIERS) -> list[str]:
    """Return known symbols followed by the current tier's new symbols, without duplicates."""
    symbols = list(dict.fromkeys(profile.known_chars))
    tier = current_tier(profile, tier_table)
    if tier is not None:
        for symbol in tier.symbols:
            if symbol not in symbols:
                symbols.append(symbol)
    return symbols


def evaluate_advancement(tier: Tier, accuracy: float, avg_response_time: float) -> AdvanceDecision:
    """Advance only when both accuracy and speed gates hold (inclusive bounds)."""
    accuracy_met = accuracy >= tier.accuracy_requirement
    speed_met = avg_response_time <= tier.speed_requirement
    return AdvanceDecision(
        level=tier.level,
        advanced=accuracy_met and speed_met,
        accuracy_met=accuracy_met,
        speed_met=speed_met,
    )


def next_tier(level: int, tier_table: tuple[Tier, ...] = TIERS) -> Tier | None:
    """Return the tier directly after `level`, if defined."""
    for tier in tier_table:
        if tier.level == level + 1:
            return tier
    return None


def apply_advancement(
    profile: LearnerProfile, decision: AdvanceDecision, tier_table: tuple[Tier, ...] = TIERS
) -> list[str]:
    """Apply a positive decision to the profile and return newly known symbols.

    Level and known symbols only ever grow. Decisions for a level other than the
    profile's current one are ignored.
    """
    if not decision.advanced or decision.level != profile.difficulty_level:
        return []
    tier = current_tier(profile, tier_table)
    if tier is None:
        return []

    added = profile.add_known(tier.symbols)
    following = next_tier(tier.level, tier_table)
    if following is not None:
        added.extend(profile.add_known(following.symbols))
    profile.difficulty_level = tier.level + 1

    if following is None:
        logger.info("Level {} cleared; entering word practice", tier.level)
    else:
        logger.info("Advanced to level {}; new symbols: {}", profile.difficulty_level, " ".join(following.symbols))
    return added
