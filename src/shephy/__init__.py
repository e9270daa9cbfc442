"""Shephy - a solitaire sheep card game rules engine."""

__version__ = "0.1.0"
