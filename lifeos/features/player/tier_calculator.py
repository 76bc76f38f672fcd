"""
Relationship tier calculator.

Relationships decay without contact: every logged interaction contributes
points that shrink by a fixed factor per week of age, with longer
interactions worth more. The summed score maps to a discrete tier.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum

DEFAULT_DURATION_MINUTES = 15
MAX_DURATION_MINUTES = 120
MAX_SCORE = 100

_WEEK = timedelta(weeks=1)


class ContactTier(str, Enum):
    INNER_CIRCLE = "inner_circle"
    CLOSE = "close"
    REGULAR = "regular"
    ACQUAINTANCE = "acquaintance"
    DORMANT = "dormant"


TIER_DISPLAY_NAMES: dict[ContactTier, str] = {
    ContactTier.INNER_CIRCLE: "Inner Circle",
    ContactTier.CLOSE: "Close",
    ContactTier.REGULAR: "Regular",
    ContactTier.ACQUAINTANCE: "Acquaintance",
    ContactTier.DORMANT: "Dormant",
}


def _default_thresholds() -> dict[ContactTier, int]:
    return {
        ContactTier.INNER_CIRCLE: 80,
        ContactTier.CLOSE: 60,
        ContactTier.REGULAR: 40,
        ContactTier.ACQUAINTANCE: 20,
        ContactTier.DORMANT: 0,
    }


@dataclass(frozen=True, slots=True)
class TierConfig:
    interaction_weight: float = 10
    recency_decay: float = 0.95  # weekly: 0.95 keeps 95% after one week
    duration_bonus_multiplier: float = 0.5  # per hour, capped at two hours
    thresholds: Mapping[ContactTier, int] = field(default_factory=_default_thresholds)


DEFAULT_TIER_CONFIG = TierConfig()


@dataclass(frozen=True, slots=True)
class InteractionForScoring:
    occurred_at: datetime
    duration_minutes: int | None = None


@dataclass(frozen=True, slots=True)
class TierResult:
    score: int
    tier: ContactTier


def interaction_points(
    interaction: InteractionForScoring,
    now: datetime,
    config: TierConfig = DEFAULT_TIER_CONFIG,
) -> float:
    """Points one interaction contributes at ``now`` before rounding."""
    weeks_ago = (now - interaction.occurred_at) / _WEEK
    decay_factor = config.recency_decay ** max(0.0, weeks_ago)

    minutes = interaction.duration_minutes
    if minutes is None:
        minutes = DEFAULT_DURATION_MINUTES
    capped_minutes = min(minutes, MAX_DURATION_MINUTES)
    duration_bonus = 1 + (capped_minutes / 60) * config.duration_bonus_multiplier

    return config.interaction_weight * decay_factor * duration_bonus


def compute_tier_score(
    interactions: Iterable[InteractionForScoring],
    config: TierConfig = DEFAULT_TIER_CONFIG,
    now: datetime | None = None,
) -> int:
    """
    Score a relationship from its interaction history.

    Args:
        interactions: Interactions with occurrence time and optional duration
        config: Weights and thresholds
        now: Evaluation instant; must match the interactions' awareness.
            Defaults to the current time.

    Returns:
        Integer score in [0, 100]; 0 when there are no interactions
    """
    if now is None:
        now = datetime.now().astimezone()

    total = sum(interaction_points(i, now, config) for i in interactions)

    # round half up, then clamp
    score = math.floor(total + 0.5)
    return max(0, min(MAX_SCORE, score))


def score_to_tier(score: int, config: TierConfig = DEFAULT_TIER_CONFIG) -> ContactTier:
    """Highest tier whose threshold the score reaches."""
    thresholds = config.thresholds
    for tier in (
        ContactTier.INNER_CIRCLE,
        ContactTier.CLOSE,
        ContactTier.REGULAR,
        ContactTier.ACQUAINTANCE,
    ):
        if score >= thresholds[tier]:
            return tier
    return ContactTier.DORMANT


def compute_tier(
    interactions: Iterable[InteractionForScoring],
    config: TierConfig = DEFAULT_TIER_CONFIG,
    now: datetime | None = None,
) -> TierResult:
    """Compute both score and tier in one call."""
    score = compute_tier_score(interactions, config, now)
    return TierResult(score=score, tier=score_to_tier(score, config))


def get_tier_display_name(tier: ContactTier | str) -> str:
    return TIER_DISPLAY_NAMES[ContactTier(tier)]
