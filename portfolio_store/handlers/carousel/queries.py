"""
Carousel Read API

Read operations for homepage carousel slides, including per-slide
engagement analytics.
"""

import logging
from typing import Any, Dict, List, Optional

from boto3.dynamodb.conditions import Attr, Key

from ...config import PortfolioStoreConfig
from ...core import create_table_gateway, keys
from ...core.table_gateway import TableGateway
from ...exceptions import ItemNotFoundError
from ...models import (
    CarouselAnalytics,
    CarouselAnalyticsSummary,
    CarouselItem,
    CarouselItemAnalytics,
    CarouselStatus,
)
from ...models.codec import decode, decode_many, stored_name
from ...utils import format_rate

logger = logging.getLogger(__name__)


class CarouselReadApi:
    """
    Read-only API for carousel queries.

    Access patterns:
    - GSI1 ``CAROUSEL#STATUS#active`` sorted by padded position
    - ``PK=CAROUSEL``, ``begins_with(SK, ITEM#)`` for every slide
    """

    def __init__(self, config: PortfolioStoreConfig, gateway: Optional[TableGateway] = None):
        """Initialize read API with configuration."""
        self.config = config
        self.gateway = gateway or create_table_gateway(config)

    def list_active(self) -> List[CarouselItem]:
        """
        Active, visible slides in ascending position.

        DynamoDB Operation: Query on GSI1 with FilterExpression IsVisible = true
        """
        items = self.gateway.query_all(
            IndexName=self.config.index1_name,
            KeyConditionExpression=Key(keys.GSI1PK).eq(keys.carousel_status_partition(CarouselStatus.ACTIVE.value)),
            FilterExpression=Attr('IsVisible').eq(True),
            ScanIndexForward=True
        )
        return decode_many(items, CarouselItem.Meta.entity_type)

    def list_all(self) -> List[CarouselItem]:
        """Every slide regardless of status, in ascending position."""
        return decode_many(self.item_records(), CarouselItem.Meta.entity_type)

    def get_by_id(self, item_id: str) -> CarouselItem:
        """
        One slide by id.

        Raises:
            ItemNotFoundError: No slide with this id
        """
        return decode(self.find_item(item_id))

    def get_analytics(self) -> CarouselAnalytics:
        """
        View and click figures for every slide plus totals.

        Click-through rate is ``clicks / views * 100`` with two decimals,
        "0.00" when there are no views.
        """
        slides = self.list_all()
        rows = [
            CarouselItemAnalytics(
                item_id=slide.item_id,
                title=slide.title,
                status=slide.status,
                position=slide.position,
                view_count=slide.view_count,
                click_count=slide.click_count,
                click_through_rate=format_rate(slide.click_count, slide.view_count),
                created_at=slide.created_at,
                updated_at=slide.updated_at,
            )
            for slide in slides
        ]

        total_views = sum(slide.view_count for slide in slides)
        total_clicks = sum(slide.click_count for slide in slides)
        summary = CarouselAnalyticsSummary(
            total_items=len(slides),
            active_items=sum(1 for slide in slides if slide.status == CarouselStatus.ACTIVE.value),
            total_views=total_views,
            total_clicks=total_clicks,
            overall_click_through_rate=format_rate(total_clicks, total_views),
        )
        return CarouselAnalytics(items=rows, summary=summary)

    def item_records(self, consistent: bool = False) -> List[Dict[str, Any]]:
        """Stored items of every slide in position order."""
        return self.gateway.query_all(
            KeyConditionExpression=Key(keys.PK).eq(keys.CAROUSEL_PARTITION) & Key(keys.SK).begins_with(keys.ITEM_PREFIX),
            ConsistentRead=consistent
        )

    def find_item(self, item_id: str, consistent: bool = False) -> Dict[str, Any]:
        """
        Stored item of one slide.

        Raises:
            ItemNotFoundError: No slide with this id
        """
        items = self.gateway.query_all(
            KeyConditionExpression=Key(keys.PK).eq(keys.CAROUSEL_PARTITION) & Key(keys.SK).begins_with(keys.ITEM_PREFIX),
            FilterExpression=Attr(stored_name('item_id')).eq(item_id),
            ConsistentRead=consistent
        )
        if not items:
            raise ItemNotFoundError(CarouselItem.Meta.entity_type, {'item_id': item_id})
        if len(items) > 1:
            logger.warning(f"Carousel item {item_id} is stored under {len(items)} sort keys")
        return items[0]
