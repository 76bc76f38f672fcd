"""
Service subpackage for the Player Menu feature.
"""

from .player_service import (
    ContactNotFoundError,
    InteractionNotFoundError,
    InvalidContactError,
    InvalidJournalEntryError,
    JournalEntryNotFoundError,
    PlayerService,
    PlayerServiceError,
    player_service,
)

__all__ = [
    "ContactNotFoundError",
    "InteractionNotFoundError",
    "InvalidContactError",
    "InvalidJournalEntryError",
    "JournalEntryNotFoundError",
    "PlayerService",
    "PlayerServiceError",
    "player_service",
]
