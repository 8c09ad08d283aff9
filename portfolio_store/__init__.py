from .config import PortfolioStoreConfig
from .exceptions import (
    AlreadyExistsError,
    BackingStoreUnavailableError,
    ConflictError,
    ItemNotFoundError,
    MalformedRecordError,
    PartiallyAppliedError,
    PortfolioStoreError,
    ValidationError,
)
from .models import (
    # Stored records
    CarouselItem,
    Image,
    Project,
    # Enums
    CarouselStatus,
    ImageStatus,
    LinkType,
    ProjectStatus,
    # Model components
    Dimensions,
    # Read-side views
    CarouselAnalytics,
    CarouselAnalyticsSummary,
    CarouselItemAnalytics,
    ProjectWithImages,
    # Write-side DTOs
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
from .core import table_definition
from .handlers.projects import (
    # Project CQRS APIs
    ProjectsReadApi,
    ProjectsWriteApi,
)
from .handlers.images import (
    # Image CQRS APIs
    ImagesReadApi,
    ImagesWriteApi,
)
from .handlers.carousel import (
    # Carousel CQRS APIs
    CarouselReadApi,
    CarouselWriteApi,
)

__version__ = "1.0.0"
__all__ = [
    # Configuration
    "PortfolioStoreConfig",

    # Exceptions
    "AlreadyExistsError",
    "BackingStoreUnavailableError",
    "ConflictError",
    "ItemNotFoundError",
    "MalformedRecordError",
    "PartiallyAppliedError",
    "PortfolioStoreError",
    "ValidationError",

    # Stored records
    "CarouselItem",
    "Image",
    "Project",

    # Enums
    "CarouselStatus",
    "ImageStatus",
    "LinkType",
    "ProjectStatus",

    # Model components
    "Dimensions",

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

    # Table schema
    "table_definition",

    # CQRS APIs
    "ProjectsReadApi",
    "ProjectsWriteApi",
    "ImagesReadApi",
    "ImagesWriteApi",
    "CarouselReadApi",
    "CarouselWriteApi",
]
