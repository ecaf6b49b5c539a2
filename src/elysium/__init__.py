"""Elysium - macro-aware language server for the Cronus kernel tree."""

__version__ = "0.1.0"
