"""
Thoughts feature package: freeform captured notes, the natural-language
due dates parsed out of them and the routes that serve them.
"""
