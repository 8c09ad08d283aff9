"""
Entity Codec

Converts domain records to stored items and back, and merges partial
updates into existing records.

Stored item = record attributes (PascalCase) + ``EntityType`` + key
attributes derived by the key scheme. A project additionally owns a ref row
in its own partition (``PROJECT#<id>`` / ``#META``) that points at the
project's sort key, so the project can be found from its id alone.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Tuple, Type, Union, get_args

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_pascal

from ..core import keys
from ..exceptions import MalformedRecordError, ValidationError
from ..utils import format_timestamp, to_dynamodb_value, utc_now
from .base import StoredModel
from .domain_models import CarouselItem, Image, Project, ProjectStatus

logger = logging.getLogger(__name__)

Record = Union[Project, Image, CarouselItem]

ENTITY_TYPE = 'EntityType'
PROJECT_REF_TYPE = 'ProjectRef'
SEQUENCE_TYPE = 'Sequence'
PROJECT_SORT_KEY = 'ProjectSortKey'

ENTITY_MODELS: Dict[str, Type[StoredModel]] = {
    Project.Meta.entity_type: Project,
    Image.Meta.entity_type: Image,
    CarouselItem.Meta.entity_type: CarouselItem,
}


def stored_name(field_name: str) -> str:
    """Stored attribute name of a model field (``image_count`` -> ``ImageCount``)."""
    return to_pascal(field_name)


def wrap_validation_error(entity_type: str, error: PydanticValidationError) -> ValidationError:
    errors = [
        {'field': '.'.join(str(part) for part in err['loc']), 'message': err['msg']}
        for err in error.errors()
    ]
    return ValidationError(f"Invalid {entity_type} data: {error.error_count()} error(s)", errors, error)


# =============================================================================
# Encode / Decode
# =============================================================================

def encode(record: Record, pad_width: int = keys.DEFAULT_PAD_WIDTH) -> Dict[str, Any]:
    """Stored item for a record, including EntityType and every key attribute."""
    item = record.to_dynamodb_item()
    item[ENTITY_TYPE] = record.Meta.entity_type
    item.update(record.primary_key(pad_width))
    item.update(record.index_keys(pad_width))
    return item


def encode_project_ref(project: Project) -> Dict[str, Any]:
    """Ref row that locates a project's item from its id."""
    return {
        **keys.project_ref_keys(project.project_id),
        ENTITY_TYPE: PROJECT_REF_TYPE,
        'ProjectId': project.project_id,
        PROJECT_SORT_KEY: project.primary_key()[keys.SK],
        'CreatedAt': format_timestamp(project.created_at),
    }


def decode(item: Dict[str, Any]) -> Record:
    """
    Record for a stored item, dispatched on ``EntityType``.

    Missing optional attributes take model defaults.

    Raises:
        MalformedRecordError: Missing keys, unknown entity type, missing
            identity, or attributes that fail validation
    """
    if not item.get(keys.PK) or not item.get(keys.SK):
        raise MalformedRecordError("Stored item is missing PK or SK", {k: item.get(k) for k in (keys.PK, keys.SK)})

    key = keys.primary_key(item)
    entity_type = item.get(ENTITY_TYPE)
    model_cls = ENTITY_MODELS.get(entity_type)
    if model_cls is None:
        raise MalformedRecordError(f"Unknown EntityType {entity_type!r}", key)

    id_attribute = stored_name(model_cls.Meta.id_field)
    if not item.get(id_attribute):
        raise MalformedRecordError(f"{entity_type} item is missing {id_attribute}", key)

    return model_cls.from_dynamodb_item(item)


def decode_many(items: Iterable[Dict[str, Any]], entity_type: str) -> List[Record]:
    """Decode the items of one entity type, skipping other rows in the partition."""
    return [decode(item) for item in items if item.get(ENTITY_TYPE) == entity_type]


# =============================================================================
# Creation
# =============================================================================

def new_record(model_cls: Type[StoredModel], data: Dict[str, Any], now: Optional[datetime] = None) -> Record:
    """
    Build a new record, stamping ``created_at``/``updated_at``.

    ``published_at`` is set only when the record is created as published.

    Raises:
        ValidationError: If the data does not validate
    """
    now = now or utc_now()
    values = dict(data)
    values['created_at'] = now
    values['updated_at'] = now
    if 'published_at' in model_cls.model_fields and values.get('status') == ProjectStatus.PUBLISHED.value:
        values['published_at'] = now
    try:
        return model_cls(**values)
    except PydanticValidationError as e:
        raise wrap_validation_error(model_cls.Meta.entity_type, e) from e


# =============================================================================
# Partial Updates
# =============================================================================

@dataclass(frozen=True)
class PartialUpdate:
    """Result of merging a partial update into a record.

    Attributes:
        record: The merged record
        previous: The record before the update
        changed_fields: Fields whose value changed (set or cleared)
        cleared_fields: Optional fields explicitly set to null
        changed_indexed: Changed fields that move the record in an index
        key_changed: The ordering field changed, so the primary key moves
    """
    record: Record
    previous: Record
    changed_fields: FrozenSet[str]
    cleared_fields: FrozenSet[str]
    changed_indexed: FrozenSet[str]
    key_changed: bool


def _is_optional(annotation: Any) -> bool:
    return type(None) in get_args(annotation)


def apply_partial_update(existing: Record, updates: BaseModel, now: Optional[datetime] = None) -> PartialUpdate:
    """
    Merge the fields the caller actually sent into ``existing``.

    - absent field: unchanged
    - explicit null on an optional field: cleared
    - explicit null on a defaulted field: reset to its default
    - explicit null on a required or ordering field: ValidationError

    ``updated_at`` is always refreshed and ``published_at`` is stamped when
    status moves to published.
    """
    model_cls = type(existing)
    entity_type = model_cls.Meta.entity_type
    now = now or utc_now()
    values = existing.model_dump()
    changed = set()
    cleared = set()

    for name in updates.model_fields_set:
        field_info = model_cls.model_fields.get(name)
        if field_info is None:
            raise ValidationError(f"{entity_type} has no updatable field {name!r}", {name: 'unknown field'})

        value = getattr(updates, name)
        if isinstance(value, BaseModel):
            value = value.model_dump()

        if value is None:
            if field_info.is_required() or name == model_cls.Meta.ordering_field:
                raise ValidationError(f"{entity_type}.{name} cannot be cleared", {name: 'cannot be null'})
            if _is_optional(field_info.annotation):
                cleared.add(name)
            else:
                value = field_info.get_default(call_default_factory=True)
                if isinstance(value, BaseModel):
                    value = value.model_dump()

        if values.get(name) != value:
            changed.add(name)
        values[name] = value

    values['updated_at'] = now
    if ('status' in changed and values.get('status') == ProjectStatus.PUBLISHED.value
            and 'published_at' in model_cls.model_fields):
        values['published_at'] = now
        changed.add('published_at')
        cleared.discard('published_at')

    try:
        record = model_cls.model_validate(values)
    except PydanticValidationError as e:
        raise wrap_validation_error(entity_type, e) from e

    changed_indexed = frozenset(changed & set(model_cls.Meta.indexed_fields))
    return PartialUpdate(
        record=record,
        previous=existing,
        changed_fields=frozenset(changed),
        cleared_fields=frozenset(cleared & changed),
        changed_indexed=changed_indexed,
        key_changed=bool(model_cls.Meta.ordering_field and model_cls.Meta.ordering_field in changed),
    )


def update_attributes(update: PartialUpdate, pad_width: int = keys.DEFAULT_PAD_WIDTH) -> Tuple[Dict[str, Any], List[str]]:
    """
    Attributes to SET and REMOVE for an in-place UpdateItem.

    Index keys are always rewritten because their sort keys follow
    ``updated_at`` (projects, images) or the position (carousel).

    Returns:
        Tuple of (set_values, remove_attributes) keyed by stored names
    """
    dumped = update.record.model_dump()
    set_values: Dict[str, Any] = {}
    for name in sorted(update.changed_fields - update.cleared_fields):
        set_values[stored_name(name)] = to_dynamodb_value(dumped[name])
    set_values[stored_name('updated_at')] = format_timestamp(update.record.updated_at)
    set_values.update(update.record.index_keys(pad_width))

    remove = [stored_name(name) for name in sorted(update.cleared_fields)]
    return set_values, remove
