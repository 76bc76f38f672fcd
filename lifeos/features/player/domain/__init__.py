"""
Domain subpackage for the Player Menu feature.
"""

from .models import (
    ContactStats,
    Interaction,
    InteractionType,
    InteractionWithContact,
    JournalEntry,
    PlayerContact,
)

__all__ = [
    "ContactStats",
    "Interaction",
    "InteractionType",
    "InteractionWithContact",
    "JournalEntry",
    "PlayerContact",
]
