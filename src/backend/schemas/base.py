"""Shared schema base classes."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelSchema(BaseModel):
    """
    Schema exchanged with the frontend in camelCase.

    Accepts both camelCase and snake_case on input; serializes by alias.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def blank_to_none(value: object) -> object:
    """Treat empty / whitespace-only strings as missing."""
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value
