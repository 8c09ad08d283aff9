"""
Key Scheme for the single portfolio table

Pure functions that map domain identifiers to primary and secondary index
keys. Every function returns a dict keyed by the stored attribute names, so
results merge straight into items and into ``Key=`` arguments.

Layout:

    Entity          PK                      SK
    Project         PROJECT                 PROJECT#<date>#<projectId>
    ProjectRef      PROJECT#<projectId>     #META
    Image           PROJECT#<projectId>     IMAGE#<pad(sortOrder)>#<imageId>
    CarouselItem    CAROUSEL                ITEM#<pad(position)>#<itemId>
    Sequence        <partition>             #SEQUENCE#<name>

    Entity          GSI1PK / GSI1SK                         GSI2PK / GSI2SK
    Project         PROJECT#STATUS#<status> / updatedAt     PROJECT#CATEGORY#<category> / updatedAt
    Image           IMAGE#STATUS#<status> / updatedAt       IMAGE#FEATURED#<true|false> / updatedAt
    CarouselItem    CAROUSEL#STATUS#<status> / pad(pos)     -

Ordering inside a partition relies on lexicographic order of the padded
numbers, so callers must keep ordering values below ``10 ** width``.
"""

from enum import Enum
from typing import Dict, Union

DEFAULT_PAD_WIDTH = 3

PK = 'PK'
SK = 'SK'
GSI1PK = 'GSI1PK'
GSI1SK = 'GSI1SK'
GSI2PK = 'GSI2PK'
GSI2SK = 'GSI2SK'

KEY_ATTRIBUTES = (PK, SK, GSI1PK, GSI1SK, GSI2PK, GSI2SK)

PROJECT_PARTITION = 'PROJECT'
CAROUSEL_PARTITION = 'CAROUSEL'
PROJECT_PREFIX = 'PROJECT#'
IMAGE_PREFIX = 'IMAGE#'
ITEM_PREFIX = 'ITEM#'
META_SORT_KEY = '#META'
SEQUENCE_PREFIX = '#SEQUENCE#'

IMAGE_SEQUENCE = 'IMAGE'
CAROUSEL_SEQUENCE = 'POSITION'


def max_ordering_value(width: int = DEFAULT_PAD_WIDTH) -> int:
    return 10 ** width - 1


def pad_ordering(value: int, width: int = DEFAULT_PAD_WIDTH) -> str:
    """Zero-pad an ordering value, e.g. 7 -> '007'."""
    return str(value).zfill(width)


def bool_token(value: bool) -> str:
    return 'true' if value else 'false'


def value_token(value: Union[str, Enum]) -> str:
    """Plain string of an enum or string value, e.g. ProjectStatus.DRAFT -> 'draft'."""
    return value.value if isinstance(value, Enum) else value


# =============================================================================
# Projects
# =============================================================================

def project_keys(project_id: str, creation_date: str) -> Dict[str, str]:
    """Primary key of a project.

    Args:
        project_id: Project slug
        creation_date: ``YYYY-MM-DD`` or a full ISO timestamp (only the date is used)
    """
    return {
        PK: PROJECT_PARTITION,
        SK: f"{PROJECT_PREFIX}{creation_date.split('T')[0]}#{project_id}",
    }


def project_status_partition(status: str) -> str:
    return f"PROJECT#STATUS#{value_token(status)}"


def project_category_partition(category: str) -> str:
    return f"PROJECT#CATEGORY#{category}"


def project_index_keys(status: str, category: str, updated_at: str) -> Dict[str, str]:
    return {
        GSI1PK: project_status_partition(status),
        GSI1SK: updated_at,
        GSI2PK: project_category_partition(category),
        GSI2SK: updated_at,
    }


def project_partition(project_id: str) -> str:
    """Partition holding a project's ref row, images and image sequence."""
    return f"{PROJECT_PREFIX}{project_id}"


def project_ref_keys(project_id: str) -> Dict[str, str]:
    return {PK: project_partition(project_id), SK: META_SORT_KEY}


# =============================================================================
# Images
# =============================================================================

def image_keys(project_id: str, sort_order: int, image_id: str, width: int = DEFAULT_PAD_WIDTH) -> Dict[str, str]:
    return {
        PK: project_partition(project_id),
        SK: f"{IMAGE_PREFIX}{pad_ordering(sort_order, width)}#{image_id}",
    }


def image_status_partition(status: str) -> str:
    return f"IMAGE#STATUS#{value_token(status)}"


def image_featured_partition(is_featured: bool) -> str:
    return f"IMAGE#FEATURED#{bool_token(is_featured)}"


def image_index_keys(status: str, is_featured: bool, updated_at: str) -> Dict[str, str]:
    return {
        GSI1PK: image_status_partition(status),
        GSI1SK: updated_at,
        GSI2PK: image_featured_partition(is_featured),
        GSI2SK: updated_at,
    }


# =============================================================================
# Carousel
# =============================================================================

def carousel_keys(position: int, item_id: str, width: int = DEFAULT_PAD_WIDTH) -> Dict[str, str]:
    return {
        PK: CAROUSEL_PARTITION,
        SK: f"{ITEM_PREFIX}{pad_ordering(position, width)}#{item_id}",
    }


def carousel_status_partition(status: str) -> str:
    return f"CAROUSEL#STATUS#{value_token(status)}"


def carousel_index_keys(status: str, position: int, width: int = DEFAULT_PAD_WIDTH) -> Dict[str, str]:
    return {
        GSI1PK: carousel_status_partition(status),
        GSI1SK: pad_ordering(position, width),
    }


# =============================================================================
# Sequences
# =============================================================================

def sequence_keys(partition: str, name: str) -> Dict[str, str]:
    """Key of an atomic counter row living in ``partition``."""
    return {PK: partition, SK: f"{SEQUENCE_PREFIX}{name}"}


def primary_key(item: Dict[str, str]) -> Dict[str, str]:
    """Extract ``{PK, SK}`` from a stored item."""
    return {PK: item[PK], SK: item[SK]}
