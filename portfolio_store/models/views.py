"""
Read-Side View Models

Composite results returned by the read APIs that are not stored records
themselves.
"""

from datetime import datetime
from typing import List

from pydantic import BaseModel, Field

from .domain_models import Image, Project


class ProjectWithImages(BaseModel):
    """A project together with its images in sortOrder order."""

    project: Project
    images: List[Image] = Field(default_factory=list)

    @property
    def visible_images(self) -> List[Image]:
        return [image for image in self.images if image.is_visible]


class CarouselItemAnalytics(BaseModel):
    """Per-slide engagement figures."""

    item_id: str
    title: str
    status: str
    position: int
    view_count: int = 0
    click_count: int = 0
    click_through_rate: str = Field("0.00", description="clicks / views * 100 with two decimals")
    created_at: datetime
    updated_at: datetime


class CarouselAnalyticsSummary(BaseModel):
    total_items: int = 0
    active_items: int = 0
    total_views: int = 0
    total_clicks: int = 0
    overall_click_through_rate: str = "0.00"


class CarouselAnalytics(BaseModel):
    """Analytics for every slide, ordered by position, plus totals."""

    items: List[CarouselItemAnalytics] = Field(default_factory=list)
    summary: CarouselAnalyticsSummary = Field(default_factory=CarouselAnalyticsSummary)
