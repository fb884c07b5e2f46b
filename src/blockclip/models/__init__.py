"""Pydantic data models for blockclip."""
