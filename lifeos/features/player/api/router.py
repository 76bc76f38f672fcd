"""
Player Menu routes: contacts, interactions and the journal.
"""

from datetime import datetime

from fastapi import APIRouter, HTTPException, Query, status

from lifeos.db.helpers import DatabaseError
from lifeos.features.player.domain import InteractionType
from lifeos.features.player.services import (
    ContactNotFoundError,
    InteractionNotFoundError,
    InvalidContactError,
    InvalidJournalEntryError,
    JournalEntryNotFoundError,
    PlayerServiceError,
    player_service,
)
from lifeos.features.player.tier_calculator import ContactTier
from lifeos.infrastructure.observability.logging import get_logger
from lifeos.models.api.player_request import (
    CreateContactRequest,
    CreateNoteRequest,
    LogInteractionRequest,
    UpdateContactRequest,
    UpdateInteractionRequest,
)
from lifeos.models.api.player_response import (
    ContactResponse,
    ContactsByTierResponse,
    ContactsListResponse,
    ContactStatsResponse,
    InteractionResponse,
    InteractionsListResponse,
    InteractionWithContactResponse,
    JournalEntryCountsResponse,
    JournalEntryResponse,
    RecentInteractionsResponse,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/player", tags=["player"])


def _database_failure(action: str, error: DatabaseError) -> HTTPException:
    logger.error(f"Failed to {action}", error=str(error), operation=error.operation)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Failed to {action}"
    )


# Contacts


@router.post("/contacts", response_model=ContactResponse, status_code=status.HTTP_201_CREATED)
async def create_contact(request: CreateContactRequest):
    """Add a contact at the acquaintance tier."""
    try:
        contact = await player_service.create_contact(
            request.name,
            title=request.title,
            source=request.source,
            first_met_context=request.first_met_context,
            metadata=request.metadata,
        )
    except InvalidContactError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except DatabaseError as e:
        raise _database_failure("create contact", e)

    return ContactResponse.from_domain(contact)


@router.get("/contacts", response_model=ContactsListResponse)
async def list_contacts(
    tier: ContactTier | None = Query(default=None, description="Only contacts in this tier"),
    include_archived: bool = Query(default=False),
    q: str | None = Query(default=None, description="Search by name"),
    limit: int = Query(default=100, ge=1, le=500),
):
    """List contacts ordered by tier score, or search them by name."""
    try:
        if q is not None:
            contacts = await player_service.search_contacts(q, limit)
        else:
            contacts = await player_service.list_contacts(
                tier=tier, include_archived=include_archived, limit=limit
            )
    except DatabaseError as e:
        raise _database_failure("list contacts", e)

    responses = [ContactResponse.from_domain(contact) for contact in contacts]
    return ContactsListResponse(contacts=responses, total_count=len(responses))


@router.get("/contacts/by-tier", response_model=ContactsByTierResponse)
async def get_contacts_by_tier():
    """Active contacts grouped by tier, with a count per tier."""
    try:
        grouped = await player_service.contacts_by_tier()
    except DatabaseError as e:
        raise _database_failure("group contacts", e)

    return ContactsByTierResponse(
        tiers={
            tier: [ContactResponse.from_domain(contact) for contact in contacts]
            for tier, contacts in grouped.items()
        },
        counts={tier: len(contacts) for tier, contacts in grouped.items()},
    )


@router.get("/contacts/{contact_id}", response_model=ContactResponse)
async def get_contact(contact_id: str):
    try:
        contact = await player_service.get_contact(contact_id)
    except ContactNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Contact not found")
    except DatabaseError as e:
        raise _database_failure("get contact", e)

    return ContactResponse.from_domain(contact)


@router.patch("/contacts/{contact_id}", response_model=ContactResponse)
async def update_contact(contact_id: str, request: UpdateContactRequest):
    fields = request.model_dump(exclude_unset=True)
    try:
        contact = await player_service.update_contact(contact_id, fields)
    except ContactNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Contact not found")
    except InvalidContactError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except DatabaseError as e:
        raise _database_failure("update contact", e)

    return ContactResponse.from_domain(contact)


@router.post("/contacts/{contact_id}/archive", response_model=ContactResponse)
async def archive_contact(contact_id: str):
    """Soft-delete a contact."""
    try:
        contact = await player_service.archive_contact(contact_id)
    except ContactNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Contact not found")
    except DatabaseError as e:
        raise _database_failure("archive contact", e)

    return ContactResponse.from_domain(contact)


@router.delete("/contacts/{contact_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_contact(contact_id: str):
    """Permanently delete a contact and its interactions."""
    try:
        await player_service.delete_contact(contact_id)
    except ContactNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Contact not found")
    except DatabaseError as e:
        raise _database_failure("delete contact", e)


@router.post("/contacts/{contact_id}/rescore", response_model=ContactStatsResponse)
async def rescore_contact(contact_id: str):
    """Recompute the cached tier from the contact's interaction history."""
    try:
        stats = await player_service.update_contact_stats(contact_id)
    except ContactNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Contact not found")
    except DatabaseError as e:
        raise _database_failure("rescore contact", e)

    return ContactStatsResponse.from_domain(stats)


# Interactions


@router.post(
    "/contacts/{contact_id}/interactions",
    response_model=InteractionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def log_interaction(contact_id: str, request: LogInteractionRequest):
    """Log an interaction and refresh the contact's tier."""
    try:
        interaction = await player_service.log_interaction(
            contact_id,
            request.type,
            occurred_at=request.occurred_at,
            duration_minutes=request.duration_minutes,
            summary=request.summary,
            topics=request.topics,
            sentiment=request.sentiment,
            follow_up_needed=request.follow_up_needed,
            follow_up_note=request.follow_up_note,
            location=request.location,
        )
    except ContactNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Contact not found")
    except DatabaseError as e:
        raise _database_failure("log interaction", e)

    return InteractionResponse.from_domain(interaction)


@router.get("/contacts/{contact_id}/interactions", response_model=InteractionsListResponse)
async def list_contact_interactions(
    contact_id: str, limit: int = Query(default=50, ge=1, le=500)
):
    try:
        interactions = await player_service.list_contact_interactions(contact_id, limit)
    except DatabaseError as e:
        raise _database_failure("list interactions", e)

    responses = [InteractionResponse.from_domain(i) for i in interactions]
    return InteractionsListResponse(interactions=responses, total_count=len(responses))


@router.get("/interactions/recent", response_model=RecentInteractionsResponse)
async def list_recent_interactions(
    limit: int = Query(default=20, ge=1, le=200),
    type: InteractionType | None = Query(default=None),
):
    try:
        pairs = await player_service.list_recent_interactions(limit, type)
    except DatabaseError as e:
        raise _database_failure("list recent interactions", e)

    responses = [InteractionWithContactResponse.from_pair(pair) for pair in pairs]
    return RecentInteractionsResponse(interactions=responses, total_count=len(responses))


@router.get("/interactions/follow-ups", response_model=RecentInteractionsResponse)
async def list_follow_ups():
    """Interactions flagged as needing a follow-up."""
    try:
        pairs = await player_service.list_follow_ups()
    except DatabaseError as e:
        raise _database_failure("list follow-ups", e)

    responses = [InteractionWithContactResponse.from_pair(pair) for pair in pairs]
    return RecentInteractionsResponse(interactions=responses, total_count=len(responses))


@router.get("/interactions", response_model=InteractionsListResponse)
async def list_interactions_between(start: datetime = Query(...), end: datetime = Query(...)):
    """Interactions that happened within [start, end], newest first."""
    try:
        interactions = await player_service.list_interactions_between(start, end)
    except PlayerServiceError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except DatabaseError as e:
        raise _database_failure("list interactions", e)

    responses = [InteractionResponse.from_domain(i) for i in interactions]
    return InteractionsListResponse(interactions=responses, total_count=len(responses))


@router.patch("/interactions/{interaction_id}", response_model=InteractionResponse)
async def update_interaction(interaction_id: str, request: UpdateInteractionRequest):
    fields = request.model_dump(exclude_unset=True)
    try:
        interaction = await player_service.update_interaction(interaction_id, fields)
    except InteractionNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Interaction not found")
    except DatabaseError as e:
        raise _database_failure("update interaction", e)

    return InteractionResponse.from_domain(interaction)


@router.delete("/interactions/{interaction_id}", response_model=ContactStatsResponse)
async def delete_interaction(interaction_id: str):
    """Delete an interaction and return the contact's recomputed stats."""
    try:
        stats = await player_service.delete_interaction(interaction_id)
    except (InteractionNotFoundError, ContactNotFoundError) as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except DatabaseError as e:
        raise _database_failure("delete interaction", e)

    return ContactStatsResponse.from_domain(stats)


# Journal


@router.get("/journal", response_model=list[JournalEntryResponse])
async def list_journal_entries(
    limit: int = Query(default=50, ge=1, le=500),
    entry_type: str | None = Query(default=None),
    entity_type: str | None = Query(default=None),
):
    try:
        entries = await player_service.list_journal_entries(limit, entry_type, entity_type)
    except DatabaseError as e:
        raise _database_failure("list journal entries", e)

    return [JournalEntryResponse.from_domain(entry) for entry in entries]


@router.get("/journal/range", response_model=list[JournalEntryResponse])
async def list_journal_entries_between(start: datetime = Query(...), end: datetime = Query(...)):
    try:
        entries = await player_service.list_journal_entries_between(start, end)
    except PlayerServiceError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except DatabaseError as e:
        raise _database_failure("list journal entries", e)

    return [JournalEntryResponse.from_domain(entry) for entry in entries]


@router.get("/journal/counts", response_model=JournalEntryCountsResponse)
async def journal_entry_counts():
    try:
        counts = await player_service.journal_entry_counts()
    except DatabaseError as e:
        raise _database_failure("count journal entries", e)

    return JournalEntryCountsResponse(counts=counts, total=sum(counts.values()))


@router.post(
    "/journal/notes", response_model=JournalEntryResponse, status_code=status.HTTP_201_CREATED
)
async def create_manual_note(request: CreateNoteRequest):
    """Write a free-form insight into the journal."""
    try:
        entry = await player_service.create_manual_note(request.content)
    except InvalidJournalEntryError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except DatabaseError as e:
        raise _database_failure("create note", e)

    return JournalEntryResponse.from_domain(entry)


@router.delete("/journal/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_journal_entry(entry_id: str):
    try:
        await player_service.delete_journal_entry(entry_id)
    except JournalEntryNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Journal entry not found")
    except DatabaseError as e:
        raise _database_failure("delete journal entry", e)
