"""
Domain Models for the Portfolio Store

Core records stored in the single portfolio table.

Organized by domain:
1. Projects
2. Images
3. Carousel Items

Each record knows its own keys (``primary_key`` / ``index_keys``); the
``Meta`` class names the stored entity type, the identity field and the
fields whose change moves the record in an index.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Set, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..core import keys
from ..utils import date_part, format_timestamp
from .base import StoredModel


def _validate_identity(v: str) -> str:
    if not v or not v.strip():
        raise ValueError("Identifier cannot be empty")
    if '#' in v:
        raise ValueError("Identifier cannot contain '#'")
    return v


# =============================================================================
# Record Metadata
# =============================================================================

class EntityMeta:
    """Base class for stored entity metadata."""
    entity_type: str
    id_field: str
    ordering_field: Optional[str] = None
    indexed_fields: Tuple[str, ...] = ()


# =============================================================================
# Projects
# =============================================================================

class ProjectStatus(str, Enum):
    """Publication state of a project or image."""
    DRAFT = "draft"
    PUBLISHED = "published"


class Project(StoredModel):
    """
    A portfolio project: a titled collection of images in one category.

    ``image_count`` is denormalized and only changes inside the image write
    transactions; partial updates never set it.
    """

    project_id: str = Field(..., description="Slug identifying the project")
    title: str = Field(..., min_length=1, description="Display title")
    description: str = Field(default="", description="Long description")
    category: str = Field(..., min_length=1, description="Category used for Index2 grouping")
    status: ProjectStatus = Field(default=ProjectStatus.DRAFT, description="draft or published")
    tags: Set[str] = Field(default_factory=set, description="Free-form tags")
    location: str = Field(default="", description="Where the project was shot")
    sort_order: int = Field(default=0, ge=0, description="Manual ordering hint")
    is_visible: bool = Field(default=True, description="Hidden projects are excluded from public listings")
    image_count: int = Field(default=0, ge=0, description="Number of images in the project")
    view_count: int = Field(default=0, ge=0, description="Page view counter")
    featured_image: str = Field(default="", description="Path of the featured image")
    cover_image: str = Field(default="", description="Path of the cover image")
    metadata: Dict[str, Any] = Field(default_factory=dict, description="Opaque caller metadata")

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    published_at: Optional[datetime] = Field(None, description="Set when the project is first published")

    class Meta(EntityMeta):
        entity_type = "Project"
        id_field = "project_id"
        indexed_fields = ("status", "category")

    @field_validator('project_id')
    @classmethod
    def validate_project_id(cls, v):
        return _validate_identity(v)

    def primary_key(self, width: int = keys.DEFAULT_PAD_WIDTH) -> Dict[str, str]:
        return keys.project_keys(self.project_id, date_part(self.created_at))

    def index_keys(self, width: int = keys.DEFAULT_PAD_WIDTH) -> Dict[str, str]:
        return keys.project_index_keys(self.status, self.category, format_timestamp(self.updated_at))


# =============================================================================
# Images
# =============================================================================

ImageStatus = ProjectStatus


class Dimensions(BaseModel):
    """Pixel dimensions, stored as a plain {width, height} map."""
    width: int = Field(default=0, ge=0)
    height: int = Field(default=0, ge=0)

    model_config = ConfigDict(validate_assignment=True)


class Image(StoredModel):
    """
    An image belonging to one project.

    Images live in their project's partition, ordered by the zero-padded
    ``sort_order`` inside the sort key.
    """

    image_id: str = Field(..., description="Identifier unique within the project")
    project_id: str = Field(..., description="Owning project")
    title: str = Field(default="")
    description: str = Field(default="")
    file_name: str = Field(..., min_length=1, description="Original file name")
    file_path: str = Field(..., min_length=1, description="Storage path of the full-size file")
    thumbnail_path: str = Field(default="")
    file_size: int = Field(default=0, ge=0, description="Size in bytes")
    dimensions: Dimensions = Field(default_factory=Dimensions)
    format: str = Field(default="JPEG")
    status: ImageStatus = Field(default=ImageStatus.DRAFT)
    sort_order: int = Field(default=0, ge=0, description="Position within the project")
    is_featured: bool = Field(default=False)
    is_visible: bool = Field(default=True)
    tags: Set[str] = Field(default_factory=set)
    location: str = Field(default="")
    view_count: int = Field(default=0, ge=0)
    exif_data: Dict[str, Any] = Field(default_factory=dict, description="Opaque EXIF map")
    color_palette: List[str] = Field(default_factory=list, description="Dominant colours, most dominant first")

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    published_at: Optional[datetime] = None

    class Meta(EntityMeta):
        entity_type = "Image"
        id_field = "image_id"
        ordering_field = "sort_order"
        indexed_fields = ("status", "is_featured", "sort_order")

    @field_validator('image_id', 'project_id')
    @classmethod
    def validate_ids(cls, v):
        return _validate_identity(v)

    def primary_key(self, width: int = keys.DEFAULT_PAD_WIDTH) -> Dict[str, str]:
        return keys.image_keys(self.project_id, self.sort_order, self.image_id, width)

    def index_keys(self, width: int = keys.DEFAULT_PAD_WIDTH) -> Dict[str, str]:
        return keys.image_index_keys(self.status, self.is_featured, format_timestamp(self.updated_at))


# =============================================================================
# Carousel Items
# =============================================================================

class CarouselStatus(str, Enum):
    DRAFT = "draft"
    ACTIVE = "active"


class LinkType(str, Enum):
    NONE = "none"
    PROJECT = "project"
    EXTERNAL = "external"
    PAGE = "page"


class CarouselItem(StoredModel):
    """A homepage carousel slide, ordered by ``position``."""

    item_id: str = Field(..., description="Slide identifier")
    title: str = Field(default="")
    subtitle: str = Field(default="")
    description: str = Field(default="")
    image_path: str = Field(default="", description="Desktop image path")
    mobile_image_path: str = Field(default="", description="Mobile image path")
    link_type: LinkType = Field(default=LinkType.NONE)
    link_target: str = Field(default="", description="Project id or page slug for internal links")
    link_url: str = Field(default="", description="URL for external links")
    button_text: str = Field(default="Learn More")
    position: int = Field(default=0, ge=0)
    status: CarouselStatus = Field(default=CarouselStatus.DRAFT)
    is_visible: bool = Field(default=True)
    display_duration: int = Field(default=5000, ge=0, description="Milliseconds on screen")
    transition_type: str = Field(default="fade")
    text_position: str = Field(default="center-left")
    text_color: str = Field(default="#FFFFFF")
    overlay_opacity: float = Field(default=0.3, ge=0.0, le=1.0)
    scheduled_start: Optional[datetime] = None
    scheduled_end: Optional[datetime] = None
    view_count: int = Field(default=0, ge=0)
    click_count: int = Field(default=0, ge=0)

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Meta(EntityMeta):
        entity_type = "CarouselItem"
        id_field = "item_id"
        ordering_field = "position"
        indexed_fields = ("status", "position")

    @field_validator('item_id')
    @classmethod
    def validate_item_id(cls, v):
        return _validate_identity(v)

    def primary_key(self, width: int = keys.DEFAULT_PAD_WIDTH) -> Dict[str, str]:
        return keys.carousel_keys(self.position, self.item_id, width)

    def index_keys(self, width: int = keys.DEFAULT_PAD_WIDTH) -> Dict[str, str]:
        return keys.carousel_index_keys(self.status, self.position, width)
