"""Pydantic request payload schemas."""
