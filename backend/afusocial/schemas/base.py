"""Shared base for API schemas."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class APIModel(BaseModel):
    """Base model exposing camelCase field names on the wire.

    Snake case names are still accepted on input so internal callers can
    build payloads with regular keyword arguments.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )
