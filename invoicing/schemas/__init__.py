"""
Pydantic schemas for API request and response validation.

All FastAPI endpoints use strict Pydantic models with explicit types.
JSON field names are camelCase; database columns stay snake_case and are
accepted by field name when building responses from stored rows.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model exposing camelCase aliases on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )
