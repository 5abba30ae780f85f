"""Beautrip planner: treatment category rankings and travel/recovery scheduling."""

__version__ = "0.1.0"
