"""
Domain models for the Player Menu feature.

Plain dataclasses mirroring the player_contacts, interactions and
journal_entries rows. The contact's tier fields are a cache of what the
tier calculator derives from its interactions.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from lifeos.features.player.tier_calculator import ContactTier, InteractionForScoring


class InteractionType(str, Enum):
    CALL = "call"
    MEETING = "meeting"
    TEXT = "text"
    EMAIL = "email"
    COFFEE = "coffee"
    EVENT = "event"
    INTRO = "intro"
    OTHER = "other"


@dataclass(slots=True)
class PlayerContact:
    id: str
    name: str
    title: str | None
    source: str
    first_met_context: str | None
    metadata: dict[str, Any] | None
    tier: ContactTier
    tier_score: int
    interaction_count: int
    total_interaction_minutes: int
    last_interaction_at: datetime | None
    is_archived: bool
    created_at: datetime
    updated_at: datetime


@dataclass(slots=True)
class Interaction:
    id: str
    contact_id: str
    type: InteractionType
    occurred_at: datetime
    duration_minutes: int | None
    summary: str | None
    topics: list[str] | None
    sentiment: str | None
    follow_up_needed: bool
    follow_up_note: str | None
    location: str | None
    created_at: datetime

    def for_scoring(self) -> InteractionForScoring:
        return InteractionForScoring(
            occurred_at=self.occurred_at, duration_minutes=self.duration_minutes
        )


@dataclass(slots=True)
class InteractionWithContact:
    interaction: Interaction
    contact: PlayerContact


@dataclass(slots=True)
class JournalEntry:
    id: str
    entity_type: str
    entity_id: str | None
    entry_type: str
    content: str
    metadata: dict[str, Any] | None
    ai_generated: bool
    created_at: datetime


@dataclass(slots=True)
class ContactStats:
    """Derived values written back onto a contact after rescoring."""

    contact_id: str
    tier: ContactTier
    tier_score: int
    interaction_count: int
    total_interaction_minutes: int
    last_interaction_at: datetime | None
