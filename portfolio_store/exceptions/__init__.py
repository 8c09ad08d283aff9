# Base exception class
from .base import PortfolioStoreError

# Domain-specific exceptions
from .domain_exceptions import (
    AlreadyExistsError,
    BackingStoreUnavailableError,
    ConflictError,
    ItemNotFoundError,
    MalformedRecordError,
    PartiallyAppliedError,
    ValidationError,
)

__all__ = [
    # Base exception
    "PortfolioStoreError",

    # Domain exceptions (alphabetically ordered)
    "AlreadyExistsError",
    "BackingStoreUnavailableError",
    "ConflictError",
    "ItemNotFoundError",
    "MalformedRecordError",
    "PartiallyAppliedError",
    "ValidationError",
]
