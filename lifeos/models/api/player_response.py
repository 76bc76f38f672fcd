# lifeos/models/api/player_response.py
"""
Player Menu API response models.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel

from lifeos.features.player.domain import (
    ContactStats,
    Interaction,
    InteractionWithContact,
    JournalEntry,
    PlayerContact,
)
from lifeos.features.player.tier_calculator import ContactTier, get_tier_display_name


class ContactResponse(BaseModel):
    id: str
    name: str
    title: str | None
    source: str
    first_met_context: str | None
    metadata: dict[str, Any] | None
    tier: ContactTier
    tier_display_name: str
    tier_score: int
    interaction_count: int
    total_interaction_minutes: int
    last_interaction_at: datetime | None
    is_archived: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, contact: PlayerContact) -> "ContactResponse":
        return cls(
            id=contact.id,
            name=contact.name,
            title=contact.title,
            source=contact.source,
            first_met_context=contact.first_met_context,
            metadata=contact.metadata,
            tier=contact.tier,
            tier_display_name=get_tier_display_name(contact.tier),
            tier_score=contact.tier_score,
            interaction_count=contact.interaction_count,
            total_interaction_minutes=contact.total_interaction_minutes,
            last_interaction_at=contact.last_interaction_at,
            is_archived=contact.is_archived,
            created_at=contact.created_at,
            updated_at=contact.updated_at,
        )


class ContactsListResponse(BaseModel):
    contacts: list[ContactResponse]
    total_count: int


class ContactsByTierResponse(BaseModel):
    tiers: dict[ContactTier, list[ContactResponse]]
    counts: dict[ContactTier, int]


class ContactStatsResponse(BaseModel):
    contact_id: str
    tier: ContactTier
    tier_score: int
    interaction_count: int
    total_interaction_minutes: int
    last_interaction_at: datetime | None

    @classmethod
    def from_domain(cls, stats: ContactStats) -> "ContactStatsResponse":
        return cls(
            contact_id=stats.contact_id,
            tier=stats.tier,
            tier_score=stats.tier_score,
            interaction_count=stats.interaction_count,
            total_interaction_minutes=stats.total_interaction_minutes,
            last_interaction_at=stats.last_interaction_at,
        )


class InteractionResponse(BaseModel):
    id: str
    contact_id: str
    type: str
    occurred_at: datetime
    duration_minutes: int | None
    summary: str | None
    topics: list[str] | None
    sentiment: str | None
    follow_up_needed: bool
    follow_up_note: str | None
    location: str | None
    created_at: datetime

    @classmethod
    def from_domain(cls, interaction: Interaction) -> "InteractionResponse":
        return cls(
            id=interaction.id,
            contact_id=interaction.contact_id,
            type=interaction.type.value,
            occurred_at=interaction.occurred_at,
            duration_minutes=interaction.duration_minutes,
            summary=interaction.summary,
            topics=interaction.topics,
            sentiment=interaction.sentiment,
            follow_up_needed=interaction.follow_up_needed,
            follow_up_note=interaction.follow_up_note,
            location=interaction.location,
            created_at=interaction.created_at,
        )


class InteractionWithContactResponse(InteractionResponse):
    contact_name: str
    contact_tier: ContactTier

    @classmethod
    def from_pair(cls, pair: InteractionWithContact) -> "InteractionWithContactResponse":
        base = InteractionResponse.from_domain(pair.interaction)
        return cls(
            **base.model_dump(),
            contact_name=pair.contact.name,
            contact_tier=pair.contact.tier,
        )


class InteractionsListResponse(BaseModel):
    interactions: list[InteractionResponse]
    total_count: int


class JournalEntryResponse(BaseModel):
    id: str
    entity_type: str
    entity_id: str | None
    entry_type: str
    content: str
    metadata: dict[str, Any] | None
    ai_generated: bool
    created_at: datetime

    @classmethod
    def from_domain(cls, entry: JournalEntry) -> "JournalEntryResponse":
        return cls(
            id=entry.id,
            entity_type=entry.entity_type,
            entity_id=entry.entity_id,
            entry_type=entry.entry_type,
            content=entry.content,
            metadata=entry.metadata,
            ai_generated=entry.ai_generated,
            created_at=entry.created_at,
        )


class RecentInteractionsResponse(BaseModel):
    interactions: list[InteractionWithContactResponse]
    total_count: int


class JournalEntryCountsResponse(BaseModel):
    """Journal entries per entry_type, e.g. {"interaction": 12, "tier_change": 3}."""

    counts: dict[str, int]
    total: int
