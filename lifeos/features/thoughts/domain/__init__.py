"""
Domain subpackage for the thoughts feature.
"""

from .models import Thought

__all__ = ["Thought"]
