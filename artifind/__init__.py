"""
Artifind backend.

A small REST API connecting craft buyers with artisans. The catalogue
endpoints live in :mod:`artifind.catalog`; chat and the keyword-driven
assistant helpers are wired up in :mod:`artifind.main`.
"""

__version__ = "1.0.0"
