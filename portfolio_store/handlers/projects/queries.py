"""
Projects Read API

Read operations for projects:
- Published and per-category listings through the overloaded indexes
- Full listing from the PROJECT partition, newest first
- Lookup by id through the project's ref row, returning its images too

Listings page through LastEvaluatedKey and return complete lists.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from boto3.dynamodb.conditions import Attr, Key

from ...config import PortfolioStoreConfig
from ...core import create_table_gateway, keys
from ...core.table_gateway import TableGateway
from ...exceptions import ItemNotFoundError
from ...models import Image, Project, ProjectStatus, ProjectWithImages
from ...models.codec import ENTITY_TYPE, PROJECT_REF_TYPE, PROJECT_SORT_KEY, decode, decode_many

logger = logging.getLogger(__name__)


class ProjectsReadApi:
    """
    Read-only API for project queries.

    Access patterns:
    - GSI1 ``PROJECT#STATUS#<status>`` sorted by updatedAt for published listings
    - GSI2 ``PROJECT#CATEGORY#<category>`` sorted by updatedAt for category pages
    - ``PK=PROJECT`` range for the admin listing
    - ``PK=PROJECT#<id>`` range for a single project with its images
    """

    def __init__(self, config: PortfolioStoreConfig, gateway: Optional[TableGateway] = None):
        """Initialize read API with configuration."""
        self.config = config
        self.gateway = gateway or create_table_gateway(config)

    def list_published(self) -> List[Project]:
        """
        Published, visible projects, most recently updated first.

        DynamoDB Operation: Query on GSI1 with FilterExpression IsVisible = true
        """
        items = self.gateway.query_all(
            IndexName=self.config.index1_name,
            KeyConditionExpression=Key(keys.GSI1PK).eq(keys.project_status_partition(ProjectStatus.PUBLISHED.value)),
            FilterExpression=Attr('IsVisible').eq(True),
            ScanIndexForward=False
        )
        return decode_many(items, Project.Meta.entity_type)

    def list_all(self) -> List[Project]:
        """
        Every project regardless of status or visibility, newest first.

        DynamoDB Operation: Query PK = PROJECT, descending sort key
        (creation date, then id)
        """
        items = self.gateway.query_all(
            KeyConditionExpression=Key(keys.PK).eq(keys.PROJECT_PARTITION) & Key(keys.SK).begins_with(keys.PROJECT_PREFIX),
            ScanIndexForward=False
        )
        return decode_many(items, Project.Meta.entity_type)

    def list_by_category(self, category: str) -> List[Project]:
        """
        Published, visible projects of one category, most recently updated first.

        DynamoDB Operation: Query on GSI2 with FilterExpression on Status and IsVisible
        """
        items = self.gateway.query_all(
            IndexName=self.config.index2_name,
            KeyConditionExpression=Key(keys.GSI2PK).eq(keys.project_category_partition(category)),
            FilterExpression=Attr('Status').eq(ProjectStatus.PUBLISHED.value) & Attr('IsVisible').eq(True),
            ScanIndexForward=False
        )
        return decode_many(items, Project.Meta.entity_type)

    def get_by_id(self, project_id: str) -> ProjectWithImages:
        """
        A project and all of its images ordered by sortOrder.

        DynamoDB Operations: Query PK = PROJECT#<id> (ref row + images), then
        GetItem on the project item the ref points at.

        Raises:
            ItemNotFoundError: No project with this id
        """
        partition_items = self.partition_items(project_id)
        project = self._load_project(project_id, self._ref_from(project_id, partition_items))
        images = decode_many(partition_items, Image.Meta.entity_type)
        return ProjectWithImages(project=project, images=images)

    def get_project(self, project_id: str, consistent: bool = False) -> Project:
        """
        The project record alone.

        Raises:
            ItemNotFoundError: No project with this id
        """
        ref = self.gateway.get_item(keys.project_ref_keys(project_id), consistent_read=consistent)
        if ref is None:
            raise ItemNotFoundError(Project.Meta.entity_type, {'project_id': project_id})
        return self._load_project(project_id, ref, consistent)

    def get_project_key(self, project_id: str, consistent: bool = True) -> Dict[str, str]:
        """
        Primary key of the project item, resolved through its ref row.

        Raises:
            ItemNotFoundError: No project with this id
        """
        ref = self.gateway.get_item(keys.project_ref_keys(project_id), consistent_read=consistent)
        if ref is None:
            raise ItemNotFoundError(Project.Meta.entity_type, {'project_id': project_id})
        return self.project_key_from_ref(ref)

    def partition_items(self, project_id: str, consistent: bool = False) -> List[Dict[str, Any]]:
        """Every row in the project's partition: ref, images and sequence rows."""
        return self.gateway.query_all(
            KeyConditionExpression=Key(keys.PK).eq(keys.project_partition(project_id)),
            ConsistentRead=consistent
        )

    @staticmethod
    def project_key_from_ref(ref: Dict[str, Any]) -> Dict[str, str]:
        return {keys.PK: keys.PROJECT_PARTITION, keys.SK: ref[PROJECT_SORT_KEY]}

    @staticmethod
    def split_partition(
        project_id: str,
        partition_items: List[Dict[str, Any]]
    ) -> Tuple[Dict[str, Any], List[Dict[str, Any]], List[Dict[str, Any]]]:
        """
        Split a project partition into (ref row, image items, other rows).

        Raises:
            ItemNotFoundError: The partition has no ref row
        """
        ref = None
        images: List[Dict[str, Any]] = []
        others: List[Dict[str, Any]] = []
        for item in partition_items:
            entity_type = item.get(ENTITY_TYPE)
            if entity_type == PROJECT_REF_TYPE:
                ref = item
            elif entity_type == Image.Meta.entity_type:
                images.append(item)
            else:
                others.append(item)
        if ref is None:
            raise ItemNotFoundError(Project.Meta.entity_type, {'project_id': project_id})
        return ref, images, others

    def _ref_from(self, project_id: str, partition_items: List[Dict[str, Any]]) -> Dict[str, Any]:
        ref, _, _ = self.split_partition(project_id, partition_items)
        return ref

    def _load_project(self, project_id: str, ref: Dict[str, Any], consistent: bool = False) -> Project:
        item = self.gateway.get_item(self.project_key_from_ref(ref), consistent_read=consistent)
        if item is None:
            logger.warning(f"Project ref for {project_id} points at a missing item {ref.get(PROJECT_SORT_KEY)}")
            raise ItemNotFoundError(Project.Meta.entity_type, {'project_id': project_id})
        return decode(item)
