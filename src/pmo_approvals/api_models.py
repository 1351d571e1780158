"""Shared Pydantic base for API models."""

from __future__ import annotations

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire; accepts either on input."""
    model_config = {"alias_generator": to_camel, "populate_by_name": True}


class ErrorResponse(BaseModel):
    error: str
    message: str
