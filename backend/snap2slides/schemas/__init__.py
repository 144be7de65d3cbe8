"""Pydantic request/response models (API contracts)."""
