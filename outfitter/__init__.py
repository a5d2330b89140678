"""Wardrobe cataloguing, outfit composition and planning service."""

__version__ = "0.1.0"
