"""
Persistence for player contacts and their cached tier statistics.
"""

from typing import Any

import psycopg
from psycopg import sql
from psycopg.types.json import Jsonb

from lifeos.db.helpers import execute_query, fetch_all, fetch_one, with_db_retry
from lifeos.features.player.domain import ContactStats, PlayerContact
from lifeos.features.player.tier_calculator import ContactTier
from lifeos.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


class ContactRepository:
    """SQL for the player_contacts table."""

    SELECT_COLUMNS = """
        id, name, title, source, first_met_context, metadata,
        tier, tier_score, interaction_count, total_interaction_minutes,
        last_interaction_at, is_archived, created_at, updated_at
    """

    UPDATABLE_FIELDS = ("name", "title", "first_met_context", "metadata", "is_archived")

    @classmethod
    def _row_to_contact(cls, row: dict | None) -> PlayerContact | None:
        if not row:
            return None

        return PlayerContact(
            id=str(row["id"]),
            name=row["name"],
            title=row.get("title"),
            source=row.get("source") or "manual",
            first_met_context=row.get("first_met_context"),
            metadata=row.get("metadata"),
            tier=ContactTier(row["tier"]),
            tier_score=row.get("tier_score") or 0,
            interaction_count=row.get("interaction_count") or 0,
            total_interaction_minutes=row.get("total_interaction_minutes") or 0,
            last_interaction_at=row.get("last_interaction_at"),
            is_archived=bool(row.get("is_archived")),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    @classmethod
    async def create(
        cls,
        name: str,
        *,
        title: str | None = None,
        source: str = "manual",
        first_met_context: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> PlayerContact:
        query = f"""
            INSERT INTO player_contacts (
                name, title, source, first_met_context, metadata, tier, tier_score
            )
            VALUES (%s, %s, %s, %s, %s, %s, 0)
            RETURNING {cls.SELECT_COLUMNS}
        """
        row = await fetch_one(
            query,
            (
                name,
                title,
                source,
                first_met_context,
                Jsonb(metadata) if metadata is not None else None,
                ContactTier.ACQUAINTANCE.value,
            ),
        )
        logger.info("Player contact created", contact_id=str(row["id"]))
        return cls._row_to_contact(row)

    @classmethod
    @with_db_retry()
    async def get(
        cls, contact_id: str, *, connection: psycopg.AsyncConnection | None = None
    ) -> PlayerContact | None:
        query = f"SELECT {cls.SELECT_COLUMNS} FROM player_contacts WHERE id = %s"
        row = await fetch_one(query, (contact_id,), connection=connection)
        return cls._row_to_contact(row)

    @classmethod
    @with_db_retry()
    async def get_many(cls, contact_ids: list[str]) -> dict[str, PlayerContact]:
        if not contact_ids:
            return {}
        query = f"SELECT {cls.SELECT_COLUMNS} FROM player_contacts WHERE id = ANY(%s)"
        rows = await fetch_all(query, (contact_ids,))
        contacts = (cls._row_to_contact(row) for row in rows)
        return {contact.id: contact for contact in contacts}

    @classmethod
    @with_db_retry()
    async def list_contacts(
        cls,
        *,
        tier: ContactTier | None = None,
        include_archived: bool = False,
        limit: int = 100,
    ) -> list[PlayerContact]:
        conditions = []
        params: list[Any] = []

        if not include_archived:
            conditions.append("is_archived = false")
        if tier is not None:
            conditions.append("tier = %s")
            params.append(ContactTier(tier).value)

        where = f"WHERE {' AND '.join(conditions)}" if conditions else ""
        query = f"""
            SELECT {cls.SELECT_COLUMNS}
            FROM player_contacts
            {where}
            ORDER BY tier_score DESC, last_interaction_at DESC NULLS LAST
            LIMIT %s
        """
        params.append(limit)
        rows = await fetch_all(query, tuple(params))
        return [cls._row_to_contact(row) for row in rows]

    @classmethod
    @with_db_retry()
    async def search(cls, term: str, limit: int = 50) -> list[PlayerContact]:
        query = f"""
            SELECT {cls.SELECT_COLUMNS}
            FROM player_contacts
            WHERE is_archived = false AND name ILIKE %s
            ORDER BY tier_score DESC
            LIMIT %s
        """
        rows = await fetch_all(query, (f"%{term}%", limit))
        return [cls._row_to_contact(row) for row in rows]

    @classmethod
    async def update(cls, contact_id: str, fields: dict[str, Any]) -> PlayerContact | None:
        """Update whitelisted columns and return the fresh row."""
        unknown = set(fields) - set(cls.UPDATABLE_FIELDS)
        if unknown:
            raise ValueError(f"Cannot update contact fields: {sorted(unknown)}")
        if not fields:
            return await cls.get(contact_id)

        assignments = [
            sql.SQL("{} = %s").format(sql.Identifier(column)) for column in fields
        ]
        params = [
            Jsonb(value) if column == "metadata" and value is not None else value
            for column, value in fields.items()
        ]
        query = sql.SQL(
            "UPDATE player_contacts SET {}, updated_at = NOW() WHERE id = %s RETURNING {}"
        ).format(sql.SQL(", ").join(assignments), sql.SQL(cls.SELECT_COLUMNS))

        row = await fetch_one(query, (*params, contact_id))
        return cls._row_to_contact(row)

    @classmethod
    async def save_stats(
        cls,
        contact_id: str,
        stats: ContactStats,
        *,
        connection: psycopg.AsyncConnection | None = None,
    ) -> bool:
        query = """
            UPDATE player_contacts
            SET tier = %s,
                tier_score = %s,
                interaction_count = %s,
                total_interaction_minutes = %s,
                last_interaction_at = %s,
                updated_at = NOW()
            WHERE id = %s
        """
        affected = await execute_query(
            query,
            (
                stats.tier.value,
                stats.tier_score,
                stats.interaction_count,
                stats.total_interaction_minutes,
                stats.last_interaction_at,
                contact_id,
            ),
            connection=connection,
        )
        return affected > 0

    @classmethod
    async def delete(cls, contact_id: str) -> bool:
        # interactions go with it (ON DELETE CASCADE)
        affected = await execute_query("DELETE FROM player_contacts WHERE id = %s", (contact_id,))
        return affected > 0
