import sys
from contextlib import asynccontextmanager
from datetime import timedelta
from unittest.mock import AsyncMock

import pytest

from lifeos.db.helpers import DatabaseError
from lifeos.features.player.domain import InteractionType
from lifeos.features.player.repository import (
    ContactRepository,
    InteractionRepository,
    JournalRepository,
)
from lifeos.features.player.services.player_service import (
    ContactNotFoundError,
    InteractionNotFoundError,
    InvalidContactError,
    InvalidJournalEntryError,
    JournalEntryNotFoundError,
    PlayerService,
    PlayerServiceError,
    describe_interaction,
)
from lifeos.features.player.tier_calculator import ContactTier

# Module object; the services package re-exports a singleton under its name
SERVICE_MODULE = sys.modules[PlayerService.__module__]


@pytest.fixture
def service():
    return PlayerService()


@pytest.fixture
def frozen_clock(monkeypatch, fixed_now):
    monkeypatch.setattr(SERVICE_MODULE, "now_local", lambda: fixed_now)
    return fixed_now


class FakeTransaction:
    """Stands in for db_transaction; records what ran and how it ended."""

    def __init__(self):
        self.connection = object()
        self.operations: list[str] = []
        self.rolled_back = False

    @asynccontextmanager
    async def __call__(self, operation: str = "transaction"):
        self.operations.append(operation)
        try:
            yield self.connection
        except Exception:
            self.rolled_back = True
            raise


@pytest.fixture(autouse=True)
def transaction(monkeypatch):
    fake = FakeTransaction()
    monkeypatch.setattr(SERVICE_MODULE, "db_transaction", fake)
    return fake


@pytest.mark.asyncio
async def test_create_contact_rejects_blank_name(service, monkeypatch):
    create_mock = AsyncMock()
    monkeypatch.setattr(ContactRepository, "create", create_mock)

    with pytest.raises(InvalidContactError):
        await service.create_contact("   ")

    create_mock.assert_not_awaited()


@pytest.mark.asyncio
async def test_create_contact_strips_name(service, monkeypatch, make_contact):
    contact = make_contact()
    create_mock = AsyncMock(return_value=contact)
    monkeypatch.setattr(ContactRepository, "create", create_mock)

    result = await service.create_contact("  Ana Souza ", title="Founder")

    assert result is contact
    create_mock.assert_awaited_once_with(
        "Ana Souza", title="Founder", source="manual", first_met_context=None, metadata=None
    )


@pytest.mark.asyncio
async def test_get_contact_not_found(service, monkeypatch):
    monkeypatch.setattr(ContactRepository, "get", AsyncMock(return_value=None))

    with pytest.raises(ContactNotFoundError) as exc_info:
        await service.get_contact("missing")

    assert exc_info.value.contact_id == "missing"


@pytest.mark.asyncio
async def test_search_with_blank_query_lists_contacts(service, monkeypatch, make_contact):
    contacts = [make_contact()]
    list_mock = AsyncMock(return_value=contacts)
    search_mock = AsyncMock()
    monkeypatch.setattr(ContactRepository, "list_contacts", list_mock)
    monkeypatch.setattr(ContactRepository, "search", search_mock)

    result = await service.search_contacts("  ", limit=5)

    assert result == contacts
    list_mock.assert_awaited_once_with(tier=None, include_archived=False, limit=5)
    search_mock.assert_not_awaited()


@pytest.mark.asyncio
async def test_update_contact_rejects_blank_name(service, monkeypatch):
    monkeypatch.setattr(ContactRepository, "update", AsyncMock())

    with pytest.raises(InvalidContactError):
        await service.update_contact("contact-1", {"name": ""})


@pytest.mark.asyncio
async def test_archive_contact_sets_flag(service, monkeypatch, make_contact):
    update_mock = AsyncMock(return_value=make_contact(is_archived=True))
    monkeypatch.setattr(ContactRepository, "update", update_mock)

    result = await service.archive_contact("contact-1")

    assert result.is_archived is True
    update_mock.assert_awaited_once_with("contact-1", {"is_archived": True})


@pytest.mark.asyncio
async def test_delete_contact_not_found(service, monkeypatch):
    monkeypatch.setattr(ContactRepository, "delete", AsyncMock(return_value=False))

    with pytest.raises(ContactNotFoundError):
        await service.delete_contact("missing")


@pytest.mark.asyncio
async def test_contacts_grouped_by_tier(service, monkeypatch, make_contact):
    contacts = [
        make_contact(id="a", tier=ContactTier.CLOSE),
        make_contact(id="b", tier=ContactTier.CLOSE),
        make_contact(id="c", tier=ContactTier.DORMANT),
    ]
    monkeypatch.setattr(ContactRepository, "list_contacts", AsyncMock(return_value=contacts))

    counts = await service.contact_counts_by_tier()

    assert counts[ContactTier.CLOSE] == 2
    assert counts[ContactTier.DORMANT] == 1
    assert counts[ContactTier.INNER_CIRCLE] == 0
    assert set(counts) == set(ContactTier)


@pytest.mark.asyncio
async def test_update_contact_stats_persists_score(service, monkeypatch, fixed_now, make_interaction):
    interactions = [
        make_interaction(id="i1", occurred_at=fixed_now, duration_minutes=120),
        make_interaction(id="i2", occurred_at=fixed_now - timedelta(weeks=1), duration_minutes=None),
    ]
    monkeypatch.setattr(
        InteractionRepository, "list_for_contact", AsyncMock(return_value=interactions)
    )
    save_mock = AsyncMock(return_value=True)
    monkeypatch.setattr(ContactRepository, "save_stats", save_mock)

    stats = await service.update_contact_stats("contact-1", now=fixed_now)

    # 20 + 10 * 0.95 * 1.125
    assert stats.tier_score == 31
    assert stats.tier == ContactTier.ACQUAINTANCE
    assert stats.interaction_count == 2
    assert stats.total_interaction_minutes == 120
    assert stats.last_interaction_at == fixed_now
    save_mock.assert_awaited_once_with("contact-1", stats, connection=None)


@pytest.mark.asyncio
async def test_update_contact_stats_without_interactions(service, monkeypatch, fixed_now):
    monkeypatch.setattr(InteractionRepository, "list_for_contact", AsyncMock(return_value=[]))
    monkeypatch.setattr(ContactRepository, "save_stats", AsyncMock(return_value=True))

    stats = await service.update_contact_stats("contact-1", now=fixed_now)

    assert stats.tier_score == 0
    assert stats.tier == ContactTier.DORMANT
    assert stats.last_interaction_at is None


@pytest.mark.asyncio
async def test_update_contact_stats_missing_contact(service, monkeypatch, fixed_now):
    monkeypatch.setattr(InteractionRepository, "list_for_contact", AsyncMock(return_value=[]))
    monkeypatch.setattr(ContactRepository, "save_stats", AsyncMock(return_value=False))

    with pytest.raises(ContactNotFoundError):
        await service.update_contact_stats("missing", now=fixed_now)


@pytest.mark.asyncio
async def test_log_interaction_writes_journal_and_tier_change(
    service, monkeypatch, frozen_clock, make_contact, make_interaction
):
    contact = make_contact(tier=ContactTier.DORMANT)
    interaction = make_interaction(occurred_at=frozen_clock, duration_minutes=120)

    monkeypatch.setattr(ContactRepository, "get", AsyncMock(return_value=contact))
    create_mock = AsyncMock(return_value=interaction)
    monkeypatch.setattr(InteractionRepository, "create", create_mock)
    monkeypatch.setattr(
        InteractionRepository, "list_for_contact", AsyncMock(return_value=[interaction])
    )
    monkeypatch.setattr(ContactRepository, "save_stats", AsyncMock(return_value=True))
    journal_mock = AsyncMock()
    monkeypatch.setattr(JournalRepository, "create", journal_mock)

    result = await service.log_interaction(
        "contact-1", InteractionType.COFFEE, duration_minutes=120
    )

    assert result is interaction
    assert create_mock.await_args.args == ("contact-1", InteractionType.COFFEE, frozen_clock)
    assert journal_mock.await_count == 2

    interaction_entry = journal_mock.await_args_list[0]
    assert interaction_entry.args == ("interaction", "interaction", "Had coffee with Ana Souza")
    assert interaction_entry.kwargs["entity_id"] == interaction.id

    tier_entry = journal_mock.await_args_list[1]
    assert tier_entry.args == (
        "contact",
        "tier_change",
        "Ana Souza moved from Dormant to Acquaintance",
    )
    assert tier_entry.kwargs["ai_generated"] is True
    assert tier_entry.kwargs["metadata"] == {
        "previous_tier": "dormant",
        "new_tier": "acquaintance",
    }


@pytest.mark.asyncio
async def test_log_interaction_without_tier_change(
    service, monkeypatch, frozen_clock, make_contact, make_interaction
):
    contact = make_contact(tier=ContactTier.DORMANT)
    interaction = make_interaction(occurred_at=frozen_clock - timedelta(weeks=10), duration_minutes=5)

    monkeypatch.setattr(ContactRepository, "get", AsyncMock(return_value=contact))
    monkeypatch.setattr(InteractionRepository, "create", AsyncMock(return_value=interaction))
    monkeypatch.setattr(
        InteractionRepository, "list_for_contact", AsyncMock(return_value=[interaction])
    )
    monkeypatch.setattr(ContactRepository, "save_stats", AsyncMock(return_value=True))
    journal_mock = AsyncMock()
    monkeypatch.setattr(JournalRepository, "create", journal_mock)

    await service.log_interaction(
        "contact-1",
        InteractionType.TEXT,
        occurred_at=interaction.occurred_at,
        duration_minutes=5,
        summary="Quick check-in",
    )

    journal_mock.assert_awaited_once()
    assert journal_mock.await_args.args[2] == "Quick check-in"


@pytest.mark.asyncio
async def test_log_interaction_unknown_contact(service, monkeypatch):
    monkeypatch.setattr(ContactRepository, "get", AsyncMock(return_value=None))
    create_mock = AsyncMock()
    monkeypatch.setattr(InteractionRepository, "create", create_mock)

    with pytest.raises(ContactNotFoundError):
        await service.log_interaction("missing", InteractionType.CALL)

    create_mock.assert_not_awaited()


@pytest.mark.asyncio
async def test_delete_interaction_rescores_contact(
    service, monkeypatch, frozen_clock, transaction, make_interaction
):
    interaction = make_interaction(contact_id="contact-9")
    monkeypatch.setattr(InteractionRepository, "get", AsyncMock(return_value=interaction))
    delete_mock = AsyncMock(return_value=True)
    monkeypatch.setattr(InteractionRepository, "delete", delete_mock)
    monkeypatch.setattr(InteractionRepository, "list_for_contact", AsyncMock(return_value=[]))
    monkeypatch.setattr(ContactRepository, "save_stats", AsyncMock(return_value=True))

    stats = await service.delete_interaction("interaction-1")

    assert transaction.operations == ["delete_interaction"]
    delete_mock.assert_awaited_once_with("interaction-1", connection=transaction.connection)
    assert stats.contact_id == "contact-9"
    assert stats.tier == ContactTier.DORMANT


@pytest.mark.asyncio
async def test_delete_interaction_not_found(service, monkeypatch):
    monkeypatch.setattr(InteractionRepository, "get", AsyncMock(return_value=None))

    with pytest.raises(InteractionNotFoundError):
        await service.delete_interaction("missing")


@pytest.mark.asyncio
async def test_recent_interactions_skip_missing_contacts(
    service, monkeypatch, make_contact, make_interaction
):
    interactions = [
        make_interaction(id="i1", contact_id="contact-1"),
        make_interaction(id="i2", contact_id="gone"),
    ]
    monkeypatch.setattr(InteractionRepository, "list_recent", AsyncMock(return_value=interactions))
    get_many_mock = AsyncMock(return_value={"contact-1": make_contact()})
    monkeypatch.setattr(ContactRepository, "get_many", get_many_mock)

    result = await service.list_recent_interactions(limit=10)

    assert [pair.interaction.id for pair in result] == ["i1"]
    get_many_mock.assert_awaited_once_with(["contact-1", "gone"])


def test_describe_interaction():
    assert describe_interaction(InteractionType.CALL, "Ana") == "Had a call with Ana"
    assert describe_interaction(InteractionType.INTRO, "Ana") == "Was introduced to Ana"


@pytest.mark.asyncio
async def test_log_interaction_writes_in_one_transaction(
    service, monkeypatch, frozen_clock, transaction, make_contact, make_interaction
):
    contact = make_contact(tier=ContactTier.DORMANT)
    interaction = make_interaction(occurred_at=frozen_clock, duration_minutes=120)

    monkeypatch.setattr(ContactRepository, "get", AsyncMock(return_value=contact))
    create_mock = AsyncMock(return_value=interaction)
    monkeypatch.setattr(InteractionRepository, "create", create_mock)
    list_mock = AsyncMock(return_value=[interaction])
    monkeypatch.setattr(InteractionRepository, "list_for_contact", list_mock)
    save_mock = AsyncMock(return_value=True)
    monkeypatch.setattr(ContactRepository, "save_stats", save_mock)
    journal_mock = AsyncMock()
    monkeypatch.setattr(JournalRepository, "create", journal_mock)

    await service.log_interaction("contact-1", InteractionType.COFFEE, duration_minutes=120)

    conn = transaction.connection
    assert transaction.operations == ["log_interaction"]
    assert create_mock.await_args.kwargs["connection"] is conn
    assert list_mock.await_args.kwargs["connection"] is conn
    assert save_mock.await_args.kwargs["connection"] is conn
    assert [call.kwargs["connection"] for call in journal_mock.await_args_list] == [conn, conn]
    assert transaction.rolled_back is False


@pytest.mark.asyncio
async def test_log_interaction_rolls_back_when_journal_write_fails(
    service, monkeypatch, frozen_clock, transaction, make_contact, make_interaction
):
    interaction = make_interaction(occurred_at=frozen_clock)
    monkeypatch.setattr(ContactRepository, "get", AsyncMock(return_value=make_contact()))
    monkeypatch.setattr(InteractionRepository, "create", AsyncMock(return_value=interaction))
    monkeypatch.setattr(
        InteractionRepository, "list_for_contact", AsyncMock(return_value=[interaction])
    )
    monkeypatch.setattr(ContactRepository, "save_stats", AsyncMock(return_value=True))
    failure = DatabaseError("Query failed: connection lost", operation="fetch_one")
    monkeypatch.setattr(JournalRepository, "create", AsyncMock(side_effect=failure))

    with pytest.raises(DatabaseError):
        await service.log_interaction("contact-1", InteractionType.CALL)

    assert transaction.rolled_back is True


@pytest.mark.asyncio
async def test_interactions_between_requires_ordered_range(service, fixed_now):
    with pytest.raises(PlayerServiceError):
        await service.list_interactions_between(fixed_now, fixed_now - timedelta(days=1))


@pytest.mark.asyncio
async def test_interactions_between(service, monkeypatch, fixed_now, make_interaction):
    interactions = [make_interaction()]
    between_mock = AsyncMock(return_value=interactions)
    monkeypatch.setattr(InteractionRepository, "list_between", between_mock)
    start = fixed_now - timedelta(days=7)

    result = await service.list_interactions_between(start, fixed_now)

    assert result == interactions
    between_mock.assert_awaited_once_with(start, fixed_now)


@pytest.mark.asyncio
async def test_create_manual_note(service, monkeypatch):
    create_mock = AsyncMock()
    monkeypatch.setattr(JournalRepository, "create", create_mock)

    await service.create_manual_note("  Ask Ana about the Lisbon offsite ")

    create_mock.assert_awaited_once_with("system", "insight", "Ask Ana about the Lisbon offsite")


@pytest.mark.asyncio
async def test_create_manual_note_rejects_blank(service, monkeypatch):
    create_mock = AsyncMock()
    monkeypatch.setattr(JournalRepository, "create", create_mock)

    with pytest.raises(InvalidJournalEntryError):
        await service.create_manual_note("   ")

    create_mock.assert_not_awaited()


@pytest.mark.asyncio
async def test_delete_journal_entry_not_found(service, monkeypatch):
    monkeypatch.setattr(JournalRepository, "delete", AsyncMock(return_value=False))

    with pytest.raises(JournalEntryNotFoundError) as exc_info:
        await service.delete_journal_entry("missing")

    assert exc_info.value.entry_id == "missing"


@pytest.mark.asyncio
async def test_journal_entry_counts(service, monkeypatch):
    counts = {"interaction": 4, "tier_change": 1}
    monkeypatch.setattr(JournalRepository, "count_by_entry_type", AsyncMock(return_value=counts))

    assert await service.journal_entry_counts() == counts
