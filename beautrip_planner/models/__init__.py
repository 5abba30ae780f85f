"""Pydantic models for catalogue records and schedule data."""
