"""
Helpers shared by the read/write APIs.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Sequence, Type, TypeVar, Union

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ..config import PortfolioStoreConfig
from ..core import keys
from ..core.sequences import next_sequence_value
from ..core.table_gateway import TableGateway
from ..exceptions import ValidationError
from ..models.codec import Record, encode, stored_name

logger = logging.getLogger(__name__)

DTO = TypeVar("DTO", bound=BaseModel)

ITEM_EXISTS = 'attribute_exists(PK)'
ITEM_NOT_EXISTS = 'attribute_not_exists(PK)'


def coerce_input(dto_cls: Type[DTO], data: Union[DTO, Mapping[str, Any]]) -> DTO:
    """
    Validate caller input into ``dto_cls``.

    Accepts an instance of the DTO, another pydantic model (only the fields
    it had set are carried over) or a plain mapping.

    Raises:
        ValidationError: Input is not a mapping or fails validation
    """
    if isinstance(data, dto_cls):
        return data
    if isinstance(data, BaseModel):
        data = data.model_dump(exclude_unset=True)
    if not isinstance(data, Mapping):
        raise ValidationError(f"Expected {dto_cls.__name__} or a mapping, got {type(data).__name__}")
    try:
        return dto_cls.model_validate(dict(data))
    except PydanticValidationError as e:
        errors = [
            {'field': '.'.join(str(part) for part in err['loc']), 'message': err['msg']}
            for err in e.errors()
        ]
        raise ValidationError(f"Invalid {dto_cls.__name__}: {e.error_count()} error(s)", errors, e) from e


def coerce_entries(dto_cls: Type[DTO], entries: Iterable[Union[DTO, Mapping[str, Any]]], id_field: str) -> List[DTO]:
    """Validate reorder entries and reject duplicate ids."""
    validated = [coerce_input(dto_cls, entry) for entry in entries]
    seen = set()
    for entry in validated:
        identity = getattr(entry, id_field)
        if identity in seen:
            raise ValidationError(f"Duplicate {id_field} in reorder: {identity}", {id_field: identity})
        seen.add(identity)
    return validated


def check_ordering(value: int, width: int, field_name: str) -> int:
    """Ensure an ordering value fits the zero-padded sort key width."""
    upper = keys.max_ordering_value(width)
    if value < 0 or value > upper:
        raise ValidationError(
            f"{field_name} must be between 0 and {upper}, got {value}",
            {field_name: f"out of range 0..{upper}"}
        )
    return value


def next_ordering(
    gateway: TableGateway,
    config: PortfolioStoreConfig,
    partition: str,
    sequence_name: str,
    existing: Sequence[int]
) -> int:
    """
    Ordering value for a new record appended at the end.

    ``max(existing) + 1`` (1 when empty) is a read-then-write and two
    concurrent creators can receive the same value; with
    ``atomic_ordering`` the value comes from the partition's sequence row.
    """
    current_max = max(existing, default=0)
    if config.atomic_ordering:
        return next_sequence_value(gateway, partition, sequence_name, floor=current_max)
    return current_max + 1


def move_ops(
    gateway: TableGateway,
    previous: Record,
    record: Record,
    width: int,
    guard_fields: Sequence[str] = ()
) -> List[Dict[str, Any]]:
    """
    Delete + Put pair that moves a record to the key of its new ordering value.

    ``guard_fields`` are counters that may be incremented concurrently with
    native ADD; the delete only succeeds if they still hold the values that
    were read, so a move never rewinds a counter.
    """
    condition = ITEM_EXISTS
    names: Dict[str, str] = {}
    values: Dict[str, Any] = {}
    for name in guard_fields:
        attribute = stored_name(name)
        names[f"#{attribute}"] = attribute
        values[f":{attribute}"] = getattr(previous, name)
        condition += f" AND #{attribute} = :{attribute}"

    delete = gateway.delete_op(previous.primary_key(width), condition)
    if names:
        delete['Delete']['ExpressionAttributeNames'] = names
        delete['Delete']['ExpressionAttributeValues'] = values

    return [delete, gateway.put_op(encode(record, width), ITEM_NOT_EXISTS)]


def touch_attributes(timestamp: str, indexed: bool = True) -> Dict[str, Any]:
    """SET values that refresh ``UpdatedAt`` and the index sort keys that follow it."""
    values = {stored_name('updated_at'): timestamp}
    if indexed:
        values[keys.GSI1SK] = timestamp
        values[keys.GSI2SK] = timestamp
    return values
