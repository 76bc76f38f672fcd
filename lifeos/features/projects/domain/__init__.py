"""
Domain subpackage for the projects feature.
"""

from .models import Project, ProjectWithCount

__all__ = ["Project", "ProjectWithCount"]
