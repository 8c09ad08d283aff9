"""
Write-Side DTOs (Data Transfer Objects)

Input models for create, partial-update and reorder operations.

- Create DTOs leave server-controlled fields (counters, timestamps) out and
  let the domain model fill defaults for anything not given.
- Update DTOs make every field optional and forbid unknown fields. Which
  fields the caller actually sent is read from ``model_fields_set``, so an
  absent field, an explicit null and a value are three different requests.
- Counters (``image_count``, ``view_count``, ``click_count``) are not
  updatable through these models.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Set

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..utils import slugify, to_utc
from .domain_models import CarouselStatus, LinkType, ProjectStatus

_ID_PATTERN = r'^[^#]+$'


class WriteModel(BaseModel):
    model_config = ConfigDict(extra='forbid', use_enum_values=True)


# =============================================================================
# Projects
# =============================================================================

class ProjectCreate(WriteModel):
    """
    Input for creating a project.

    ``project_id`` defaults to the slug of ``title``.
    """

    project_id: Optional[str] = Field(None, min_length=1, max_length=128, pattern=_ID_PATTERN,
                                      description="Explicit project slug")
    title: str = Field(..., min_length=1, max_length=256)
    description: Optional[str] = Field(None, max_length=5000)
    category: str = Field(..., min_length=1, max_length=128)
    status: Optional[ProjectStatus] = None
    tags: Optional[Set[str]] = None
    location: Optional[str] = Field(None, max_length=256)
    sort_order: Optional[int] = Field(None, ge=0)
    is_visible: Optional[bool] = None
    featured_image: Optional[str] = None
    cover_image: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None

    @field_validator('title', 'category')
    @classmethod
    def strip_required_text(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Value cannot be blank")
        return v

    @property
    def resolved_project_id(self) -> str:
        return self.project_id or slugify(self.title)


class ProjectUpdate(WriteModel):
    """Partial update of a project."""

    title: Optional[str] = Field(None, min_length=1, max_length=256)
    description: Optional[str] = Field(None, max_length=5000)
    category: Optional[str] = Field(None, min_length=1, max_length=128)
    status: Optional[ProjectStatus] = None
    tags: Optional[Set[str]] = None
    location: Optional[str] = Field(None, max_length=256)
    sort_order: Optional[int] = Field(None, ge=0)
    is_visible: Optional[bool] = None
    featured_image: Optional[str] = None
    cover_image: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None


# =============================================================================
# Images
# =============================================================================

class DimensionsInput(WriteModel):
    width: int = Field(0, ge=0)
    height: int = Field(0, ge=0)


class ImageCreate(WriteModel):
    """
    Input for adding an image to a project.

    Without ``sort_order`` the image goes after the current last image.
    Without ``image_id`` one is generated as ``<epoch millis>-<8 hex>``.
    """

    image_id: Optional[str] = Field(None, min_length=1, max_length=128, pattern=_ID_PATTERN)
    title: Optional[str] = Field(None, max_length=256)
    description: Optional[str] = Field(None, max_length=5000)
    file_name: str = Field(..., min_length=1, max_length=512)
    file_path: str = Field(..., min_length=1, max_length=1024)
    thumbnail_path: Optional[str] = None
    file_size: Optional[int] = Field(None, ge=0)
    dimensions: Optional[DimensionsInput] = None
    format: Optional[str] = Field(None, max_length=16)
    status: Optional[ProjectStatus] = None
    sort_order: Optional[int] = Field(None, ge=0)
    is_featured: Optional[bool] = None
    is_visible: Optional[bool] = None
    tags: Optional[Set[str]] = None
    location: Optional[str] = Field(None, max_length=256)
    exif_data: Optional[Dict[str, Any]] = None
    color_palette: Optional[List[str]] = None

    @field_validator('format')
    @classmethod
    def normalize_format(cls, v: Optional[str]) -> Optional[str]:
        return v.upper() if v else v


class ImageUpdate(WriteModel):
    """Partial update of an image. Changing ``sort_order`` moves it to a new sort key."""

    title: Optional[str] = Field(None, max_length=256)
    description: Optional[str] = Field(None, max_length=5000)
    file_name: Optional[str] = Field(None, min_length=1, max_length=512)
    file_path: Optional[str] = Field(None, min_length=1, max_length=1024)
    thumbnail_path: Optional[str] = None
    file_size: Optional[int] = Field(None, ge=0)
    dimensions: Optional[DimensionsInput] = None
    format: Optional[str] = Field(None, max_length=16)
    status: Optional[ProjectStatus] = None
    sort_order: Optional[int] = Field(None, ge=0)
    is_featured: Optional[bool] = None
    is_visible: Optional[bool] = None
    tags: Optional[Set[str]] = None
    location: Optional[str] = Field(None, max_length=256)
    exif_data: Optional[Dict[str, Any]] = None
    color_palette: Optional[List[str]] = None

    @field_validator('format')
    @classmethod
    def normalize_format(cls, v: Optional[str]) -> Optional[str]:
        return v.upper() if v else v


class ImageOrder(WriteModel):
    """One entry of an image reorder."""
    image_id: str = Field(..., min_length=1)
    sort_order: int = Field(..., ge=0)


# =============================================================================
# Carousel Items
# =============================================================================

class _CarouselFields(WriteModel):
    title: Optional[str] = Field(None, max_length=256)
    subtitle: Optional[str] = Field(None, max_length=256)
    description: Optional[str] = Field(None, max_length=2000)
    image_path: Optional[str] = None
    mobile_image_path: Optional[str] = None
    link_type: Optional[LinkType] = None
    link_target: Optional[str] = None
    link_url: Optional[str] = None
    button_text: Optional[str] = Field(None, max_length=64)
    position: Optional[int] = Field(None, ge=0)
    status: Optional[CarouselStatus] = None
    is_visible: Optional[bool] = None
    display_duration: Optional[int] = Field(None, ge=0)
    transition_type: Optional[str] = None
    text_position: Optional[str] = None
    text_color: Optional[str] = Field(None, max_length=32)
    overlay_opacity: Optional[float] = Field(None, ge=0.0, le=1.0)
    scheduled_start: Optional[datetime] = None
    scheduled_end: Optional[datetime] = None

    @model_validator(mode='after')
    def validate_schedule(self):
        """A schedule window must end after it starts."""
        if self.scheduled_start and self.scheduled_end and to_utc(self.scheduled_end) <= to_utc(self.scheduled_start):
            raise ValueError("scheduled_end must be after scheduled_start")
        return self


class CarouselItemCreate(_CarouselFields):
    """
    Input for creating a carousel slide.

    Without ``position`` the slide goes after the current last slide.
    Without ``item_id`` one is generated as ``slide-<8 hex>``.
    """

    item_id: Optional[str] = Field(None, min_length=1, max_length=128, pattern=_ID_PATTERN)


class CarouselItemUpdate(_CarouselFields):
    """Partial update of a carousel slide. Changing ``position`` moves it to a new sort key."""


class CarouselPosition(WriteModel):
    """One entry of a carousel reorder."""
    item_id: str = Field(..., min_length=1)
    position: int = Field(..., ge=0)
