"""
Images Write API

Write operations for images using:
- Transactions that keep the owning project's ImageCount in step with its
  images (put/delete + ADD on the project)
- UpdateItem for in-place partial updates
- Delete + Put pairs that move an image when its sortOrder changes
- Chunked transactions for reordering
"""

import logging
import time
import uuid
from typing import Any, Dict, Iterable, Mapping, Union

from boto3.dynamodb.conditions import Attr

from ...config import PortfolioStoreConfig
from ...core import create_table_gateway, keys
from ...exceptions import AlreadyExistsError, ConflictError, ItemNotFoundError
from ...models import Image, ImageCreate, ImageOrder, ImageUpdate, Project
from ...models.codec import (
    apply_partial_update,
    decode,
    encode,
    new_record,
    stored_name,
    update_attributes,
)
from ...utils import build_update_expression, format_timestamp, utc_now
from ..common import (
    ITEM_EXISTS,
    ITEM_NOT_EXISTS,
    check_ordering,
    coerce_entries,
    coerce_input,
    move_ops,
    next_ordering,
    touch_attributes,
)
from ..projects.queries import ProjectsReadApi
from .queries import ImagesReadApi

logger = logging.getLogger(__name__)


def generate_image_id() -> str:
    """``<epoch millis>-<8 hex>``, e.g. ``1718000000000-3f2a9c1d``."""
    return f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}"


class ImagesWriteApi:
    """
    Write-only API for image mutations.

    ``Project.image_count`` changes only here, inside the same transaction
    as the image put or delete it accounts for.
    """

    def __init__(self, config: PortfolioStoreConfig):
        """Initialize write API with configuration."""
        self.config = config
        self.gateway = create_table_gateway(config)
        self.reader = ImagesReadApi(config, gateway=self.gateway)
        self.projects = ProjectsReadApi(config, gateway=self.gateway)

    def add_image(self, project_id: str, image_data: Union[ImageCreate, Mapping[str, Any]]) -> Image:
        """
        Add an image to a project.

        Without an explicit sortOrder the image goes after the current last
        one (1 for an empty project).

        DynamoDB Operation: TransactWriteItems
        - Put image, attribute_not_exists(PK)
        - Update project: SET UpdatedAt, ADD ImageCount 1, attribute_exists(PK)

        Raises:
            ValidationError: Invalid image data or sortOrder out of key range
            ItemNotFoundError: Project doesn't exist
            AlreadyExistsError: The project already has an image with this id
        """
        dto = coerce_input(ImageCreate, image_data)
        project_key = self.projects.get_project_key(project_id)
        width = self.config.key_pad_width

        existing_items = self.reader.image_items(project_id, consistent=True)
        image_id = dto.image_id or generate_image_id()
        if any(item.get(stored_name('image_id')) == image_id for item in existing_items):
            raise AlreadyExistsError(Image.Meta.entity_type, {'project_id': project_id, 'image_id': image_id})

        if dto.sort_order is not None:
            sort_order = dto.sort_order
        else:
            sort_order = next_ordering(
                self.gateway,
                self.config,
                keys.project_partition(project_id),
                keys.IMAGE_SEQUENCE,
                [int(item.get(stored_name('sort_order'), 0)) for item in existing_items]
            )
        check_ordering(sort_order, width, 'sort_order')

        values = dto.model_dump(exclude_none=True)
        values.update(image_id=image_id, project_id=project_id, sort_order=sort_order)
        image = new_record(Image, values)

        update_expression, names, expression_values = build_update_expression(
            touch_attributes(format_timestamp(image.updated_at)),
            add_values={stored_name('image_count'): 1}
        )
        transact_items = [
            self.gateway.put_op(encode(image, width), ITEM_NOT_EXISTS),
            self.gateway.update_op(project_key, update_expression, names, expression_values, ITEM_EXISTS),
        ]
        try:
            self.gateway.transact_write_items(transact_items)
        except ConflictError as e:
            if 0 in e.failed_indexes or (not e.cancellation_reasons and self._project_exists(project_id)):
                raise AlreadyExistsError(
                    Image.Meta.entity_type, {'project_id': project_id, 'image_id': image_id}, e
                ) from e
            raise ItemNotFoundError(Project.Meta.entity_type, {'project_id': project_id}, e) from e

        logger.info(f"Added image {image_id} to project {project_id} at sortOrder {sort_order}")
        return image

    def _project_exists(self, project_id: str) -> bool:
        """Whether the project still resolves, for cancellations that carry no reasons."""
        try:
            self.projects.get_project_key(project_id)
        except ItemNotFoundError:
            return False
        return True

    def update_image(
        self,
        project_id: str,
        image_id: str,
        updates: Union[ImageUpdate, Mapping[str, Any]]
    ) -> Image:
        """
        Apply a partial update to an image.

        A sortOrder change moves the image to its new sort key in one
        transaction; any other change is a single conditional UpdateItem.

        Raises:
            ValidationError: Invalid update data
            ItemNotFoundError: Image doesn't exist
        """
        dto = coerce_input(ImageUpdate, updates)
        width = self.config.key_pad_width
        existing = decode(self.reader.find_image_item(project_id, image_id, consistent=True))
        partial = apply_partial_update(existing, dto)
        identity = {'project_id': project_id, 'image_id': image_id}

        if partial.key_changed:
            check_ordering(partial.record.sort_order, width, 'sort_order')
            try:
                self.gateway.transact_write_items(move_ops(self.gateway, existing, partial.record, width))
            except ConflictError as e:
                if e.failed_indexes and 0 not in e.failed_indexes:
                    raise AlreadyExistsError(Image.Meta.entity_type, identity, e) from e
                raise ItemNotFoundError(Image.Meta.entity_type, identity, e) from e
            logger.info(f"Moved image {image_id} to sortOrder {partial.record.sort_order}")
            return partial.record

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
            raise ItemNotFoundError(Image.Meta.entity_type, identity, e) from e

        logger.info(f"Updated image {image_id}: {sorted(partial.changed_fields)}")
        return decode(attributes)

    def delete_image(self, project_id: str, image_id: str) -> bool:
        """
        Delete an image and decrement its project's ImageCount.

        DynamoDB Operation: TransactWriteItems
        - Delete image, attribute_exists(PK)
        - Update project: SET UpdatedAt, ADD ImageCount -1, attribute_exists(PK)

        Raises:
            ItemNotFoundError: Image (or its project) doesn't exist
        """
        item = self.reader.find_image_item(project_id, image_id, consistent=True)
        project_key = self.projects.get_project_key(project_id)

        update_expression, names, values = build_update_expression(
            touch_attributes(format_timestamp(utc_now())),
            add_values={stored_name('image_count'): -1}
        )
        transact_items = [
            self.gateway.delete_op(keys.primary_key(item), ITEM_EXISTS),
            self.gateway.update_op(project_key, update_expression, names, values, ITEM_EXISTS),
        ]
        try:
            self.gateway.transact_write_items(transact_items)
        except ConflictError as e:
            raise ItemNotFoundError(Image.Meta.entity_type, {'project_id': project_id, 'image_id': image_id}, e) from e

        logger.info(f"Deleted image {image_id} from project {project_id}")
        return True

    def reorder_images(
        self,
        project_id: str,
        entries: Iterable[Union[ImageOrder, Mapping[str, Any]]]
    ) -> int:
        """
        Assign new sortOrder values to images of a project.

        Each moved image is a Delete + Put pair; pairs are packed into
        transactions of at most ``transaction_chunk_size`` operations. The
        first transaction also touches the project's UpdatedAt. Entries
        whose sortOrder is unchanged are skipped.

        Args:
            project_id: Owning project
            entries: ``(image_id, sort_order)`` entries

        Returns:
            Number of images moved

        Raises:
            ValidationError: Duplicate ids or sortOrder out of key range
            ItemNotFoundError: Project or one of the images doesn't exist
            PartiallyAppliedError: A transaction after the first failed
        """
        orders = coerce_entries(ImageOrder, entries, 'image_id')
        width = self.config.key_pad_width
        for entry in orders:
            check_ordering(entry.sort_order, width, 'sort_order')

        project_key = self.projects.get_project_key(project_id)
        by_id: Dict[str, Dict[str, Any]] = {
            item[stored_name('image_id')]: item
            for item in self.reader.image_items(project_id, consistent=True)
        }
        for entry in orders:
            if entry.image_id not in by_id:
                raise ItemNotFoundError(Image.Meta.entity_type, {'project_id': project_id, 'image_id': entry.image_id})

        now = utc_now()
        timestamp = format_timestamp(now)
        update_expression, names, values = build_update_expression(touch_attributes(timestamp))
        groups = [[self.gateway.update_op(project_key, update_expression, names, values, ITEM_EXISTS)]]
        counts = [0]

        for entry in orders:
            existing = decode(by_id[entry.image_id])
            if existing.sort_order == entry.sort_order:
                continue
            moved = existing.model_copy(update={'sort_order': entry.sort_order, 'updated_at': now})
            groups.append(move_ops(self.gateway, existing, moved, width))
            counts.append(1)

        if len(groups) == 1:
            logger.info(f"Reorder of project {project_id} changed nothing")
            return 0

        try:
            moved_count = self.gateway.transact_in_chunks(groups, f"reorder_images({project_id})", counts)
        except ConflictError as e:
            raise ItemNotFoundError(Image.Meta.entity_type, {'project_id': project_id}, e) from e

        logger.info(f"Reordered {moved_count} images in project {project_id}")
        return moved_count
