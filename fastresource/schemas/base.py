# Copyright Krafter SAS <developer@krafter.io>
# MIT License (see LICENSE file).

from datetime import date, datetime

from pydantic import BaseModel as PydanticBaseModel, ConfigDict, field_serializer


class BaseModel(PydanticBaseModel):
    """
    Base Pydantic schema of the structures returned by the resource layer.

    Dates are serialized in ISO 8601 when dumped as JSON, the transport layer
    does not need to know about them.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    @field_serializer("*", mode="wrap", when_used="json")
    @classmethod
    def _serialize_date_fields(cls, value, handler, info):
        if isinstance(value, (datetime, date)):
            return value.isoformat()

        return handler(value)


__all__ = [
    "BaseModel",
]
