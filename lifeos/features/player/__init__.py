"""
Player Menu feature package.

Contacts, logged interactions, the relationship tier they produce and the
journal that records both. Domain models, the tier calculator, repository,
service and API router live side by side here.
"""
