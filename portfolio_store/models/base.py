"""
Base Model Components and Mixins

Shared behaviour for the stored entities:

- DateTimeMixin: ISO-8601 parsing and UTC normalization for datetime fields
- DynamoDBMixin: conversion to and from stored DynamoDB items
- StoredModel: PascalCase attribute aliases (``project_id`` is stored as
  ``ProjectId``) so records line up with the existing table data

Records are always built from field names in Python code; aliases only
appear at the storage boundary (``model_dump(by_alias=True)`` and
``model_validate`` on stored items).
"""

import logging
from datetime import datetime
from typing import Any, Dict, Union, get_args, get_origin

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_pascal

from ..utils import from_dynamodb_value, to_dynamodb_value, to_utc

logger = logging.getLogger(__name__)


def _is_datetime_annotation(annotation: Any) -> bool:
    if annotation is datetime:
        return True
    if get_origin(annotation) is Union:
        return any(arg is datetime for arg in get_args(annotation))
    return False


class DateTimeMixin(BaseModel):
    """
    Mixin providing consistent datetime validation.

    Applies to every field but only touches datetime-typed ones:
    - ISO strings are parsed, with a trailing 'Z' accepted as UTC
    - Naive datetimes are treated as UTC
    - Aware datetimes are converted to UTC
    """

    @field_validator('*', mode='before')
    @classmethod
    def validate_datetime_fields(cls, v, info):
        if v is None or info.field_name is None:
            return v

        field = cls.model_fields.get(info.field_name)
        if field is None or not _is_datetime_annotation(field.annotation):
            return v

        if isinstance(v, str):
            try:
                return to_utc(datetime.fromisoformat(v.replace('Z', '+00:00')))
            except ValueError as e:
                raise ValueError(f"Invalid datetime format: {v}. Expected ISO format.") from e

        if isinstance(v, datetime):
            return to_utc(v)

        raise ValueError(f"Invalid datetime type: {type(v)}. Expected datetime object or ISO string.")


class DynamoDBMixin(BaseModel):
    """
    Mixin providing DynamoDB serialization and deserialization.

    - datetime → ISO string with microseconds (sortable in index keys)
    - float → Decimal, and Decimal → int/float on the way back
    - set → sorted list
    - bool stays a native boolean; index keys carry their own string tokens
    """

    def to_dynamodb_item(self) -> Dict[str, Any]:
        """Attributes of this record in stored form, without key attributes."""
        return to_dynamodb_value(self.model_dump(by_alias=True, exclude_none=True))

    @classmethod
    def from_dynamodb_item(cls, item: Dict[str, Any]):
        """
        Create a record from a stored item.

        Key attributes and other unknown attributes are ignored.

        Raises:
            MalformedRecordError: If the item does not validate as this model
        """
        try:
            return cls.model_validate(from_dynamodb_value(item))
        except PydanticValidationError as e:
            from ..exceptions import MalformedRecordError
            key = {k: item[k] for k in ('PK', 'SK') if k in item}
            logger.error(f"Failed to convert DynamoDB item to {cls.__name__}: {e}")
            raise MalformedRecordError(
                f"Failed to convert DynamoDB item to {cls.__name__}: {e.error_count()} invalid attribute(s)",
                key,
                e
            ) from e


class StoredModel(DynamoDBMixin, DateTimeMixin, BaseModel):
    """Base class for records persisted in the portfolio table."""

    model_config = ConfigDict(
        alias_generator=to_pascal,
        populate_by_name=True,
        validate_assignment=True,
        use_enum_values=True,
        validate_default=True
    )
