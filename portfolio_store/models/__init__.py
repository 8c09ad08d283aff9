# Base mixins
from .base import (
    DateTimeMixin,
    DynamoDBMixin,
    StoredModel,
)

# Stored records
from .domain_models import (
    CarouselItem,
    CarouselStatus,
    Dimensions,
    Image,
    ImageStatus,
    LinkType,
    Project,
    ProjectStatus,
)

# Read-side views
from .views import (
    CarouselAnalytics,
    CarouselAnalyticsSummary,
    CarouselItemAnalytics,
    ProjectWithImages,
)

# Write-side DTOs
from .dtos import (
    CarouselItemCreate,
    CarouselItemUpdate,
    CarouselPosition,
    DimensionsInput,
    ImageCreate,
    ImageOrder,
    ImageUpdate,
    ProjectCreate,
    ProjectUpdate,
)

# Codec
from .codec import (
    PartialUpdate,
    apply_partial_update,
    decode,
    encode,
    new_record,
)

__all__ = [
    # Base mixins
    "DateTimeMixin",
    "DynamoDBMixin",
    "StoredModel",

    # Stored records
    "CarouselItem",
    "CarouselStatus",
    "Dimensions",
    "Image",
    "ImageStatus",
    "LinkType",
    "Project",
    "ProjectStatus",

    # Read-side views
    "CarouselAnalytics",
    "CarouselAnalyticsSummary",
    "CarouselItemAnalytics",
    "ProjectWithImages",

    # Write-side DTOs
    "CarouselItemCreate",
    "CarouselItemUpdate",
    "CarouselPosition",
    "DimensionsInput",
    "ImageCreate",
    "ImageOrder",
    "ImageUpdate",
    "ProjectCreate",
    "ProjectUpdate",

    # Codec
    "PartialUpdate",
    "apply_partial_update",
    "decode",
    "encode",
    "new_record",
]
