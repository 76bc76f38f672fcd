"""
Player Menu service.

Orchestrates contacts and interactions: every change to a contact's
interaction list recomputes its cached tier and score, and logging an
interaction writes journal entries for the interaction itself and for any
tier change it causes.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

import psycopg

from lifeos.config import settings
from lifeos.db.helpers import db_transaction
from lifeos.features.player.domain import (
    ContactStats,
    Interaction,
    InteractionType,
    InteractionWithContact,
    JournalEntry,
    PlayerContact,
)
from lifeos.features.player.repository import (
    ContactRepository,
    InteractionRepository,
    JournalRepository,
)
from lifeos.features.player.tier_calculator import (
    ContactTier,
    compute_tier,
    get_tier_display_name,
)
from lifeos.infrastructure.observability.logging import get_logger
from lifeos.utils.clock import now_local

logger = get_logger(__name__)

INTERACTION_DESCRIPTIONS: dict[InteractionType, str] = {
    InteractionType.CALL: "Had a call with {name}",
    InteractionType.MEETING: "Met with {name}",
    InteractionType.TEXT: "Texted with {name}",
    InteractionType.EMAIL: "Emailed {name}",
    InteractionType.COFFEE: "Had coffee with {name}",
    InteractionType.EVENT: "Attended an event with {name}",
    InteractionType.INTRO: "Was introduced to {name}",
    InteractionType.OTHER: "Interacted with {name}",
}


class PlayerServiceError(Exception):
    """Base exception for Player Menu operations."""


class ContactNotFoundError(PlayerServiceError):
    def __init__(self, contact_id: str):
        super().__init__(f"Contact not found: {contact_id}")
        self.contact_id = contact_id


class InteractionNotFoundError(PlayerServiceError):
    def __init__(self, interaction_id: str):
        super().__init__(f"Interaction not found: {interaction_id}")
        self.interaction_id = interaction_id


class InvalidContactError(PlayerServiceError):
    """Rejected contact input, e.g. a blank name."""


class JournalEntryNotFoundError(PlayerServiceError):
    def __init__(self, entry_id: str):
        super().__init__(f"Journal entry not found: {entry_id}")
        self.entry_id = entry_id


class InvalidJournalEntryError(PlayerServiceError):
    """Rejected journal input, e.g. an empty note."""


def describe_interaction(interaction_type: InteractionType, contact_name: str) -> str:
    template = INTERACTION_DESCRIPTIONS.get(interaction_type, "Interacted with {name}")
    return template.format(name=contact_name)


class PlayerService:
    """Contacts, interactions and the tier cache that links them."""

    # Contacts

    async def create_contact(
        self,
        name: str,
        *,
        title: str | None = None,
        source: str = "manual",
        first_met_context: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> PlayerContact:
        name = (name or "").strip()
        if not name:
            raise InvalidContactError("Name is required")

        return await ContactRepository.create(
            name,
            title=title,
            source=source,
            first_met_context=first_met_context,
            metadata=metadata,
        )

    async def get_contact(self, contact_id: str) -> PlayerContact:
        contact = await ContactRepository.get(contact_id)
        if contact is None:
            raise ContactNotFoundError(contact_id)
        return contact

    async def list_contacts(
        self,
        *,
        tier: ContactTier | None = None,
        include_archived: bool = False,
        limit: int = 100,
    ) -> list[PlayerContact]:
        return await ContactRepository.list_contacts(
            tier=tier, include_archived=include_archived, limit=limit
        )

    async def search_contacts(self, query: str, limit: int = 50) -> list[PlayerContact]:
        term = (query or "").strip()
        if not term:
            return await self.list_contacts(limit=limit)
        return await ContactRepository.search(term, limit)

    async def update_contact(self, contact_id: str, fields: dict[str, Any]) -> PlayerContact:
        if "name" in fields:
            name = (fields["name"] or "").strip()
            if not name:
                raise InvalidContactError("Name cannot be blank")
            fields = {**fields, "name": name}

        contact = await ContactRepository.update(contact_id, fields)
        if contact is None:
            raise ContactNotFoundError(contact_id)
        return contact

    async def archive_contact(self, contact_id: str) -> PlayerContact:
        return await self.update_contact(contact_id, {"is_archived": True})

    async def delete_contact(self, contact_id: str) -> None:
        if not await ContactRepository.delete(contact_id):
            raise ContactNotFoundError(contact_id)
        logger.info("Player contact deleted", contact_id=contact_id)

    async def contacts_by_tier(self) -> dict[ContactTier, list[PlayerContact]]:
        grouped: dict[ContactTier, list[PlayerContact]] = {tier: [] for tier in ContactTier}
        for contact in await self.list_contacts():
            grouped[contact.tier].append(contact)
        return grouped

    async def contact_counts_by_tier(self) -> dict[ContactTier, int]:
        grouped = await self.contacts_by_tier()
        return {tier: len(contacts) for tier, contacts in grouped.items()}

    # Tier cache

    async def update_contact_stats(
        self,
        contact_id: str,
        now: datetime | None = None,
        *,
        connection: psycopg.AsyncConnection | None = None,
    ) -> ContactStats:
        """Recompute a contact's tier, score and totals from its full interaction list."""
        interactions = await InteractionRepository.list_for_contact(
            contact_id, connection=connection
        )

        result = compute_tier(
            [interaction.for_scoring() for interaction in interactions],
            settings.get_tier_config(),
            now or now_local(),
        )
        stats = ContactStats(
            contact_id=contact_id,
            tier=result.tier,
            tier_score=result.score,
            interaction_count=len(interactions),
            total_interaction_minutes=sum(i.duration_minutes or 0 for i in interactions),
            last_interaction_at=max((i.occurred_at for i in interactions), default=None),
        )

        if not await ContactRepository.save_stats(contact_id, stats, connection=connection):
            raise ContactNotFoundError(contact_id)

        logger.info(
            "Contact tier recomputed",
            contact_id=contact_id,
            tier=stats.tier.value,
            tier_score=stats.tier_score,
            interaction_count=stats.interaction_count,
        )
        return stats

    # Interactions

    async def log_interaction(
        self,
        contact_id: str,
        interaction_type: InteractionType,
        *,
        occurred_at: datetime | None = None,
        duration_minutes: int | None = None,
        summary: str | None = None,
        topics: list[str] | None = None,
        sentiment: str | None = None,
        follow_up_needed: bool = False,
        follow_up_note: str | None = None,
        location: str | None = None,
    ) -> Interaction:
        """
        Record an interaction, rescore the contact and journal both.

        The insert, the rescore and the journal entries commit together.
        """
        contact = await self.get_contact(contact_id)
        now = now_local()
        previous_tier = contact.tier

        async with db_transaction("log_interaction") as conn:
            interaction = await InteractionRepository.create(
                contact_id,
                interaction_type,
                occurred_at or now,
                duration_minutes=duration_minutes,
                summary=summary,
                topics=topics,
                sentiment=sentiment,
                follow_up_needed=follow_up_needed,
                follow_up_note=follow_up_note,
                location=location,
                connection=conn,
            )

            stats = await self.update_contact_stats(contact_id, now, connection=conn)

            await JournalRepository.create(
                "interaction",
                "interaction",
                summary or describe_interaction(InteractionType(interaction_type), contact.name),
                entity_id=interaction.id,
                metadata={
                    "contact_id": contact_id,
                    "contact_name": contact.name,
                    "type": InteractionType(interaction_type).value,
                    "duration_minutes": duration_minutes,
                },
                connection=conn,
            )

            if stats.tier != previous_tier:
                await JournalRepository.create(
                    "contact",
                    "tier_change",
                    f"{contact.name} moved from {get_tier_display_name(previous_tier)} "
                    f"to {get_tier_display_name(stats.tier)}",
                    entity_id=contact_id,
                    metadata={"previous_tier": previous_tier.value, "new_tier": stats.tier.value},
                    ai_generated=True,
                    connection=conn,
                )

        if stats.tier != previous_tier:
            logger.info(
                "Contact tier changed",
                contact_id=contact_id,
                previous_tier=previous_tier.value,
                new_tier=stats.tier.value,
            )

        return interaction

    async def list_contact_interactions(
        self, contact_id: str, limit: int = 50
    ) -> list[Interaction]:
        return await InteractionRepository.list_for_contact(contact_id, limit)

    async def list_recent_interactions(
        self, limit: int = 20, interaction_type: InteractionType | None = None
    ) -> list[InteractionWithContact]:
        interactions = await InteractionRepository.list_recent(limit, interaction_type)
        return await self._attach_contacts(interactions)

    async def list_follow_ups(self) -> list[InteractionWithContact]:
        return await self._attach_contacts(await InteractionRepository.list_follow_ups())

    async def list_interactions_between(self, start: datetime, end: datetime) -> list[Interaction]:
        if end < start:
            raise PlayerServiceError("Range end is before its start")
        return await InteractionRepository.list_between(start, end)

    async def update_interaction(self, interaction_id: str, fields: dict[str, Any]) -> Interaction:
        interaction = await InteractionRepository.update(interaction_id, fields)
        if interaction is None:
            raise InteractionNotFoundError(interaction_id)
        return interaction

    async def delete_interaction(self, interaction_id: str) -> ContactStats:
        interaction = await InteractionRepository.get(interaction_id)
        if interaction is None:
            raise InteractionNotFoundError(interaction_id)

        async with db_transaction("delete_interaction") as conn:
            await InteractionRepository.delete(interaction_id, connection=conn)
            return await self.update_contact_stats(interaction.contact_id, connection=conn)

    async def _attach_contacts(
        self, interactions: list[Interaction]
    ) -> list[InteractionWithContact]:
        contacts = await ContactRepository.get_many(
            sorted({interaction.contact_id for interaction in interactions})
        )
        return [
            InteractionWithContact(interaction=interaction, contact=contacts[interaction.contact_id])
            for interaction in interactions
            if interaction.contact_id in contacts
        ]

    # Journal

    async def list_journal_entries(
        self,
        limit: int = 50,
        entry_type: str | None = None,
        entity_type: str | None = None,
    ) -> list[JournalEntry]:
        return await JournalRepository.list_recent(limit, entry_type, entity_type)

    async def list_journal_entries_between(
        self, start: datetime, end: datetime
    ) -> list[JournalEntry]:
        if end < start:
            raise PlayerServiceError("Range end is before its start")
        return await JournalRepository.list_between(start, end)

    async def create_manual_note(self, content: str) -> JournalEntry:
        """A user-written insight, not tied to any contact."""
        content = (content or "").strip()
        if not content:
            raise InvalidJournalEntryError("Content is required")
        return await JournalRepository.create("system", "insight", content)

    async def delete_journal_entry(self, entry_id: str) -> None:
        if not await JournalRepository.delete(entry_id):
            raise JournalEntryNotFoundError(entry_id)

    async def journal_entry_counts(self) -> dict[str, int]:
        return await JournalRepository.count_by_entry_type()


# Singleton instance for application use
player_service = PlayerService()
