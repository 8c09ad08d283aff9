"""
Images Read API

Read operations for images:
- Per-project listing from the project partition, ascending sortOrder
- Status and featured listings through the overloaded indexes
- Point lookup of one image by id within its project
"""

import logging
from typing import Any, Dict, List, Optional

from boto3.dynamodb.conditions import Attr, Key

from ...config import PortfolioStoreConfig
from ...core import create_table_gateway, keys
from ...core.table_gateway import TableGateway
from ...exceptions import ItemNotFoundError, ValidationError
from ...models import Image, ImageStatus
from ...models.codec import decode, decode_many, stored_name

logger = logging.getLogger(__name__)


class ImagesReadApi:
    """
    Read-only API for image queries.

    Access patterns:
    - ``PK=PROJECT#<id>``, ``begins_with(SK, IMAGE#)`` for a project's gallery
    - GSI1 ``IMAGE#STATUS#<status>`` sorted by updatedAt
    - GSI2 ``IMAGE#FEATURED#true`` sorted by updatedAt
    """

    def __init__(self, config: PortfolioStoreConfig, gateway: Optional[TableGateway] = None):
        """Initialize read API with configuration."""
        self.config = config
        self.gateway = gateway or create_table_gateway(config)

    def list_for_project(self, project_id: str) -> List[Image]:
        """
        Visible images of a project in ascending sortOrder.

        An unknown project simply has no images, so the result is empty
        rather than an error.

        DynamoDB Operation: Query PK = PROJECT#<id>, begins_with(SK, IMAGE#),
        FilterExpression IsVisible = true
        """
        items = self.gateway.query_all(
            KeyConditionExpression=Key(keys.PK).eq(keys.project_partition(project_id)) & Key(keys.SK).begins_with(keys.IMAGE_PREFIX),
            FilterExpression=Attr('IsVisible').eq(True),
            ScanIndexForward=True
        )
        return decode_many(items, Image.Meta.entity_type)

    def list_by_status(self, status: str) -> List[Image]:
        """
        Images in one status across all projects, most recently updated first.

        DynamoDB Operation: Query on GSI1
        """
        try:
            status_value = ImageStatus(status).value
        except ValueError as e:
            raise ValidationError(f"Unknown image status: {status}", {"status": "must be draft or published"}, e) from e
        items = self.gateway.query_all(
            IndexName=self.config.index1_name,
            KeyConditionExpression=Key(keys.GSI1PK).eq(keys.image_status_partition(status_value)),
            ScanIndexForward=False
        )
        return decode_many(items, Image.Meta.entity_type)

    def list_featured(self) -> List[Image]:
        """
        Featured images that are published and visible, most recently updated first.

        DynamoDB Operation: Query on GSI2 with FilterExpression on Status and IsVisible
        """
        items = self.gateway.query_all(
            IndexName=self.config.index2_name,
            KeyConditionExpression=Key(keys.GSI2PK).eq(keys.image_featured_partition(True)),
            FilterExpression=Attr('Status').eq(ImageStatus.PUBLISHED.value) & Attr('IsVisible').eq(True),
            ScanIndexForward=False
        )
        return decode_many(items, Image.Meta.entity_type)

    def get_image(self, project_id: str, image_id: str) -> Image:
        """
        One image by id, visible or not.

        The sort key embeds sortOrder, so the lookup is a range query over
        the project's images filtered on ImageId.

        Raises:
            ItemNotFoundError: No such image in the project
        """
        return decode(self.find_image_item(project_id, image_id))

    def find_image_item(self, project_id: str, image_id: str, consistent: bool = False) -> Dict[str, Any]:
        """
        Stored item of one image.

        Raises:
            ItemNotFoundError: No such image in the project
        """
        items = self.gateway.query_all(
            KeyConditionExpression=Key(keys.PK).eq(keys.project_partition(project_id)) & Key(keys.SK).begins_with(keys.IMAGE_PREFIX),
            FilterExpression=Attr(stored_name('image_id')).eq(image_id),
            ConsistentRead=consistent
        )
        if not items:
            raise ItemNotFoundError(Image.Meta.entity_type, {'project_id': project_id, 'image_id': image_id})
        if len(items) > 1:
            logger.warning(f"Image {image_id} of project {project_id} is stored under {len(items)} sort keys")
        return items[0]

    def image_items(self, project_id: str, consistent: bool = False) -> List[Dict[str, Any]]:
        """Every stored image item of a project, visible or not, in sortOrder."""
        return self.gateway.query_all(
            KeyConditionExpression=Key(keys.PK).eq(keys.project_partition(project_id)) & Key(keys.SK).begins_with(keys.IMAGE_PREFIX),
            ConsistentRead=consistent
        )
