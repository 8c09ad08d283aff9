"""
Carousel Write API

Write operations for carousel slides using:
- Conditional PutItem / UpdateItem / DeleteItem for single slides
- Delete + Put pairs, guarded on the engagement counters, to move a slide
  when its position changes
- Chunked transactions for reordering
- Native ADD for view and click counters
"""

import logging
import uuid
from typing import Any, Dict, Iterable, Mapping, Union

from boto3.dynamodb.conditions import Attr

from ...config import PortfolioStoreConfig
from ...core import create_table_gateway, keys
from ...exceptions import AlreadyExistsError, ConflictError, ItemNotFoundError
from ...models import CarouselItem, CarouselItemCreate, CarouselItemUpdate, CarouselPosition
from ...models.codec import (
    apply_partial_update,
    decode,
    encode,
    new_record,
    stored_name,
    update_attributes,
)
from ...utils import build_update_expression, utc_now
from ..common import check_ordering, coerce_entries, coerce_input, move_ops, next_ordering
from .queries import CarouselReadApi

logger = logging.getLogger(__name__)

COUNTER_FIELDS = ('view_count', 'click_count')


def generate_item_id() -> str:
    return f"slide-{uuid.uuid4().hex[:8]}"


class CarouselWriteApi:
    """Write-only API for carousel mutations."""

    def __init__(self, config: PortfolioStoreConfig):
        """Initialize write API with configuration."""
        self.config = config
        self.gateway = create_table_gateway(config)
        self.reader = CarouselReadApi(config, gateway=self.gateway)

    def create_item(self, item_data: Union[CarouselItemCreate, Mapping[str, Any]]) -> CarouselItem:
        """
        Create a carousel slide.

        Without an explicit position the slide goes after the current last
        one (1 for an empty carousel).

        DynamoDB Operation: PutItem with ConditionExpression attribute_not_exists(PK)

        Raises:
            ValidationError: Invalid slide data or position out of key range
            AlreadyExistsError: A slide with this id already exists
        """
        dto = coerce_input(CarouselItemCreate, item_data)
        width = self.config.key_pad_width
        existing_items = self.reader.item_records(consistent=True)

        item_id = dto.item_id or generate_item_id()
        if any(item.get(stored_name('item_id')) == item_id for item in existing_items):
            raise AlreadyExistsError(CarouselItem.Meta.entity_type, {'item_id': item_id})

        if dto.position is not None:
            position = dto.position
        else:
            position = next_ordering(
                self.gateway,
                self.config,
                keys.CAROUSEL_PARTITION,
                keys.CAROUSEL_SEQUENCE,
                [int(item.get(stored_name('position'), 0)) for item in existing_items]
            )
        check_ordering(position, width, 'position')

        values = dto.model_dump(exclude_none=True)
        values.update(item_id=item_id, position=position)
        record = new_record(CarouselItem, values)

        try:
            self.gateway.put_item(encode(record, width), condition_expression=Attr(keys.PK).not_exists())
        except ConflictError as e:
            raise AlreadyExistsError(CarouselItem.Meta.entity_type, {'item_id': item_id}, e) from e

        logger.info(f"Created carousel item {item_id} at position {position}")
        return record

    def update_item(self, item_id: str, updates: Union[CarouselItemUpdate, Mapping[str, Any]]) -> CarouselItem:
        """
        Apply a partial update to a slide.

        A position change moves the slide to its new sort key in one
        transaction. The move only commits if the view and click counters
        still hold the values that were read; a counter bumped in between
        makes the move re-read and try once more.

        Raises:
            ValidationError: Invalid update data
            ItemNotFoundError: Slide doesn't exist
        """
        dto = coerce_input(CarouselItemUpdate, updates)
        width = self.config.key_pad_width

        for attempt in range(2):
            existing = decode(self.reader.find_item(item_id, consistent=True))
            partial = apply_partial_update(existing, dto)

            if not partial.key_changed:
                return self._update_in_place(item_id, existing, partial, width)

            check_ordering(partial.record.position, width, 'position')
            try:
                self.gateway.transact_write_items(
                    move_ops(self.gateway, existing, partial.record, width, COUNTER_FIELDS)
                )
            except ConflictError as e:
                if e.failed_indexes and 0 not in e.failed_indexes:
                    raise AlreadyExistsError(CarouselItem.Meta.entity_type, {'item_id': item_id}, e) from e
                if attempt == 0:
                    logger.warning(f"Carousel item {item_id} changed during move, retrying")
                    continue
                raise ItemNotFoundError(CarouselItem.Meta.entity_type, {'item_id': item_id}, e) from e

            logger.info(f"Moved carousel item {item_id} to position {partial.record.position}")
            return partial.record

        raise ItemNotFoundError(CarouselItem.Meta.entity_type, {'item_id': item_id})

    def _update_in_place(self, item_id: str, existing: CarouselItem, partial, width: int) -> CarouselItem:
        set_values, remove_fields = update_attributes(partial, width)
        update_expression, names, values = build_update_expression(set_values, remove_fields)
        try:
            attributes = self.gateway.update_item(
                key=existing.primary_key(width),
                update_expression=update_expression,
                expression_attribute_values=values,
                expression_attribute_names=names,
                condition_expression=Attr(keys.PK).exists(),
                return_values='ALL_NEW'
            )
        except ConflictError as e:
            raise ItemNotFoundError(CarouselItem.Meta.entity_type, {'item_id': item_id}, e) from e

        logger.info(f"Updated carousel item {item_id}: {sorted(partial.changed_fields)}")
        return decode(attributes)

    def delete_item(self, item_id: str) -> bool:
        """
        Delete a slide.

        DynamoDB Operation: DeleteItem with ConditionExpression attribute_exists(PK)

        Raises:
            ItemNotFoundError: Slide doesn't exist
        """
        item = self.reader.find_item(item_id, consistent=True)
        try:
            self.gateway.delete_item(keys.primary_key(item), condition_expression=Attr(keys.PK).exists())
        except ConflictError as e:
            raise ItemNotFoundError(CarouselItem.Meta.entity_type, {'item_id': item_id}, e) from e

        logger.info(f"Deleted carousel item {item_id}")
        return True

    def reorder_items(self, entries: Iterable[Union[CarouselPosition, Mapping[str, Any]]]) -> int:
        """
        Assign new positions to slides.

        Each moved slide is a Delete + Put pair rewriting SK and GSI1SK;
        pairs are packed into transactions of at most
        ``transaction_chunk_size`` operations. Entries whose position is
        unchanged are skipped.

        Returns:
            Number of slides moved

        Raises:
            ValidationError: Duplicate ids or position out of key range
            ItemNotFoundError: One of the slides doesn't exist
            PartiallyAppliedError: A transaction after the first failed
        """
        positions = coerce_entries(CarouselPosition, entries, 'item_id')
        width = self.config.key_pad_width
        for entry in positions:
            check_ordering(entry.position, width, 'position')

        by_id: Dict[str, Dict[str, Any]] = {
            item[stored_name('item_id')]: item
            for item in self.reader.item_records(consistent=True)
        }
        for entry in positions:
            if entry.item_id not in by_id:
                raise ItemNotFoundError(CarouselItem.Meta.entity_type, {'item_id': entry.item_id})

        now = utc_now()
        groups = []
        for entry in positions:
            existing = decode(by_id[entry.item_id])
            if existing.position == entry.position:
                continue
            moved = existing.model_copy(update={'position': entry.position, 'updated_at': now})
            groups.append(move_ops(self.gateway, existing, moved, width, COUNTER_FIELDS))

        if not groups:
            logger.info("Carousel reorder changed nothing")
            return 0

        try:
            moved_count = self.gateway.transact_in_chunks(groups, "reorder_items")
        except ConflictError as e:
            raise ItemNotFoundError(CarouselItem.Meta.entity_type, {'item_ids': [p.item_id for p in positions]}, e) from e

        logger.info(f"Reordered {moved_count} carousel items")
        return moved_count

    def increment_view(self, item_id: str) -> int:
        """Add one to the slide's view counter and return the new value."""
        return self._increment(item_id, 'view_count')

    def increment_click(self, item_id: str) -> int:
        """Add one to the slide's click counter and return the new value."""
        return self._increment(item_id, 'click_count')

    def _increment(self, item_id: str, field_name: str) -> int:
        """
        Native ``ADD`` on a counter, conditioned on the slide existing.

        The slide's key embeds its position, so a concurrent move can make
        the key read here stale; the increment then re-reads the key once.

        Raises:
            ItemNotFoundError: Slide doesn't exist
        """
        attribute = stored_name(field_name)
        for attempt in range(2):
            item = self.reader.find_item(item_id, consistent=True)
            try:
                attributes = self.gateway.update_item(
                    key=keys.primary_key(item),
                    update_expression=f"ADD #{attribute} :one",
                    expression_attribute_values={':one': 1},
                    expression_attribute_names={f"#{attribute}": attribute},
                    condition_expression=Attr(keys.PK).exists(),
                    return_values='UPDATED_NEW'
                )
            except ConflictError as e:
                if attempt == 0:
                    logger.warning(f"Carousel item {item_id} moved during {field_name} increment, retrying")
                    continue
                raise ItemNotFoundError(CarouselItem.Meta.entity_type, {'item_id': item_id}, e) from e
            value = int(attributes[attribute])
            logger.debug(f"Carousel item {item_id} {field_name} is now {value}")
            return value

        raise ItemNotFoundError(CarouselItem.Meta.entity_type, {'item_id': item_id})
