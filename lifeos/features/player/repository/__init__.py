"""
Repository subpackage for the Player Menu feature.
"""

from .contact_repository import ContactRepository
from .interaction_repository import InteractionRepository
from .journal_repository import JournalRepository

__all__ = ["ContactRepository", "InteractionRepository", "JournalRepository"]
