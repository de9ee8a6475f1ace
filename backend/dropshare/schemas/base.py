"""Base schema classes with camelCase alias generation.

All API schemas inherit from these instead of BaseModel directly.
Python code stays snake_case. API JSON becomes camelCase.
"""
from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for request schemas. Accepts and outputs camelCase, no type coercion."""
    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "strict": True,
    }


class CamelORMModel(BaseModel):
    """Base for response schemas. Reads from dataclass records, outputs camelCase."""
    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "from_attributes": True,
    }
