"""
Projects Write API

Write operations for projects using:
- A transaction that creates the project item and its ref row together
- UpdateItem with SET/REMOVE built from a partial update, re-deriving the
  index keys in the same request
- Chunked transactions for the cascading delete of a project and its images

``ImageCount`` is never written here except by the cascading delete, which
decrements it chunk by chunk as images go.
"""

import logging
from typing import Any, Dict, List, Mapping, Union

from boto3.dynamodb.conditions import Attr

from ...config import PortfolioStoreConfig
from ...core import create_table_gateway, keys
from ...exceptions import AlreadyExistsError, ConflictError, ItemNotFoundError
from ...models import Project, ProjectCreate, ProjectUpdate
from ...models.codec import (
    apply_partial_update,
    decode,
    encode,
    encode_project_ref,
    new_record,
    update_attributes,
)
from ...utils import build_update_expression
from ..common import ITEM_EXISTS, ITEM_NOT_EXISTS, coerce_input
from .queries import ProjectsReadApi

logger = logging.getLogger(__name__)


class ProjectsWriteApi:
    """
    Write-only API for project mutations.

    Every write carries a condition: creates require the keys to be free,
    updates and deletes require the item to exist.
    """

    def __init__(self, config: PortfolioStoreConfig):
        """Initialize write API with configuration."""
        self.config = config
        self.gateway = create_table_gateway(config)
        self.reader = ProjectsReadApi(config, gateway=self.gateway)

    def create_project(self, project_data: Union[ProjectCreate, Mapping[str, Any]]) -> Project:
        """
        Create a project.

        The id is the explicit ``project_id`` or the slug of the title
        ("Mountain Series" -> "mountain-series").

        DynamoDB Operation: TransactWriteItems
        - Put project item, attribute_not_exists(PK)
        - Put ref row PROJECT#<id> / #META, attribute_not_exists(PK)

        The ref row makes a second project with the same slug fail even when
        it is created on a different date.

        Raises:
            ValidationError: Invalid project data
            AlreadyExistsError: A project with this id already exists
        """
        dto = coerce_input(ProjectCreate, project_data)
        project_id = dto.resolved_project_id

        values = dto.model_dump(exclude_none=True, exclude={'project_id'})
        values['project_id'] = project_id
        project = new_record(Project, values)

        transact_items = [
            self.gateway.put_op(encode(project, self.config.key_pad_width), ITEM_NOT_EXISTS),
            self.gateway.put_op(encode_project_ref(project), ITEM_NOT_EXISTS),
        ]
        try:
            self.gateway.transact_write_items(transact_items)
        except ConflictError as e:
            raise AlreadyExistsError(Project.Meta.entity_type, {'project_id': project_id}, e) from e

        logger.info(f"Created project: {project_id}")
        return project

    def update_project(self, project_id: str, updates: Union[ProjectUpdate, Mapping[str, Any]]) -> Project:
        """
        Apply a partial update to a project.

        Only fields present in ``updates`` change; an explicit null clears
        or resets the field. Status and category changes move the project in
        GSI1/GSI2, and both index sort keys follow the new updatedAt.

        DynamoDB Operation: UpdateItem with ConditionExpression attribute_exists(PK)

        Raises:
            ValidationError: Invalid update data
            ItemNotFoundError: Project doesn't exist
        """
        dto = coerce_input(ProjectUpdate, updates)
        existing = self.reader.get_project(project_id, consistent=True)
        partial = apply_partial_update(existing, dto)

        set_values, remove_fields = update_attributes(partial, self.config.key_pad_width)
        update_expression, names, values = build_update_expression(set_values, remove_fields)

        try:
            attributes = self.gateway.update_item(
                key=existing.primary_key(),
                update_expression=update_expression,
                expression_attribute_values=values,
                expression_attribute_names=names,
                condition_expression=Attr(keys.PK).exists(),
                return_values='ALL_NEW'
            )
        except ConflictError as e:
            raise ItemNotFoundError(Project.Meta.entity_type, {'project_id': project_id}, e) from e

        logger.info(f"Updated project {project_id}: {sorted(partial.changed_fields)}")
        return decode(attributes)

    def delete_project(self, project_id: str) -> int:
        """
        Delete a project together with all of its images.

        DynamoDB Operation: TransactWriteItems in chunks of
        ``transaction_chunk_size`` operations
        - Leading chunks delete images and ADD -n to ImageCount
        - The final chunk deletes the remaining images, the ref row, any
          sequence row and the project item

        Each chunk is atomic and every delete requires the item to exist,
        so ImageCount stays equal to the number of remaining images between
        chunks and a failed delete can simply be retried.

        Returns:
            Number of records deleted (the project plus its images)

        Raises:
            ItemNotFoundError: Project doesn't exist
            PartiallyAppliedError: A chunk after the first failed
        """
        partition_items = self.reader.partition_items(project_id, consistent=True)
        ref, image_items, other_rows = ProjectsReadApi.split_partition(project_id, partition_items)
        project_key = ProjectsReadApi.project_key_from_ref(ref)

        trailer = [
            self.gateway.delete_op(project_key, ITEM_EXISTS),
            self.gateway.delete_op(keys.primary_key(ref), ITEM_EXISTS),
        ]
        trailer.extend(self.gateway.delete_op(keys.primary_key(row)) for row in other_rows)

        chunks, counts = self._delete_chunks(project_key, image_items, trailer)
        try:
            deleted = self.gateway.run_chunks(chunks, counts, f"delete_project({project_id})")
        except ConflictError as e:
            raise ItemNotFoundError(Project.Meta.entity_type, {'project_id': project_id}, e) from e

        logger.info(f"Deleted project {project_id} with {len(image_items)} images in {len(chunks)} transaction(s)")
        return deleted

    def _delete_chunks(
        self,
        project_key: Dict[str, str],
        image_items: List[Dict[str, Any]],
        trailer: List[Dict[str, Any]]
    ):
        chunk_size = self.config.transaction_chunk_size
        image_ops = [self.gateway.delete_op(keys.primary_key(item), ITEM_EXISTS) for item in image_items]
        final_capacity = chunk_size - len(trailer)

        chunks: List[List[Dict[str, Any]]] = []
        counts: List[int] = []
        remaining = image_ops
        while len(remaining) > final_capacity:
            batch, remaining = remaining[:chunk_size - 1], remaining[chunk_size - 1:]
            decrement = self.gateway.update_op(
                project_key,
                "ADD #ImageCount :delta",
                expression_attribute_names={'#ImageCount': 'ImageCount'},
                expression_attribute_values={':delta': -len(batch)},
                condition_expression=ITEM_EXISTS
            )
            chunks.append(batch + [decrement])
            counts.append(len(batch))

        chunks.append(remaining + trailer)
        counts.append(len(remaining) + 1)
        return chunks, counts
