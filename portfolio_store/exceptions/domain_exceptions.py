"""
Domain-Specific Exceptions for the Portfolio Store

Every failure a repository operation can report extends PortfolioStoreError.

Organized by category:
1. Data Validation Errors
2. Resource Not Found Errors
3. Conflict and Conditional Errors
4. Chunked Operation Errors
5. Infrastructure Errors
"""

from typing import Any, Dict, List, Optional

from .base import PortfolioStoreError


# =============================================================================
# Data Validation Errors
# =============================================================================

class ValidationError(PortfolioStoreError):
    """Raised when caller-supplied data fails type or range checks.

    Used for:
    - Pydantic DTO validation failures
    - Ordering values that do not fit the key pad width
    - Explicit nulls on fields that cannot be cleared
    """

    def __init__(self, message: str, errors: Optional[Any] = None, original_error: Optional[Exception] = None):
        """Initialize validation error.

        Args:
            message: Human-readable error message
            errors: Field-level validation errors
            original_error: The original exception that caused this error
        """
        self.errors = errors or {}
        context = {}
        if self.errors:
            context['validation_errors'] = self.errors
        super().__init__(message, original_error, context)


class MalformedRecordError(PortfolioStoreError):
    """Raised when a stored item cannot be decoded into a domain record.

    Used for:
    - Items missing PK, SK, EntityType or their identity attribute
    - Items whose attributes fail model validation
    """

    def __init__(self, message: str, key: Optional[Dict[str, Any]] = None, original_error: Optional[Exception] = None):
        self.key = key or {}
        context = {}
        if self.key:
            context['key'] = self.key
        super().__init__(message, original_error, context)


# =============================================================================
# Resource Not Found Errors
# =============================================================================

class ItemNotFoundError(PortfolioStoreError):
    """Raised when a project, image or carousel item does not exist.

    Used for:
    - Lookups that return no record
    - Update/Delete operations on records that are already gone
    - Transactions whose existence precondition failed
    """

    def __init__(self, entity_type: str, identity: Dict[str, Any], original_error: Optional[Exception] = None):
        """Initialize item not found error.

        Args:
            entity_type: Stored entity type (e.g., 'Project', 'Image')
            identity: Identifying attributes of the missing record
            original_error: The original exception that caused this error
        """
        self.entity_type = entity_type
        self.identity = identity
        message = f"{entity_type} not found: {identity}"
        context = {
            'entity_type': entity_type,
            'identity': identity
        }
        super().__init__(message, original_error, context)


# =============================================================================
# Conflict and Conditional Errors
# =============================================================================

class ConflictError(PortfolioStoreError):
    """Raised when a conditional write or transaction precondition fails.

    The gateway raises this for ConditionalCheckFailedException and for
    transactions cancelled by a condition. Repositories translate it into
    ItemNotFoundError or AlreadyExistsError depending on which operation in
    the transaction failed (see ``failed_indexes``).
    """

    def __init__(
        self,
        message: str,
        resource_id: Optional[str] = None,
        original_error: Optional[Exception] = None,
        cancellation_reasons: Optional[List[str]] = None
    ):
        """Initialize conflict error.

        Args:
            message: Human-readable error message
            resource_id: ID of the conflicting resource
            original_error: The original exception that caused this error
            cancellation_reasons: Per-operation reason codes of a cancelled transaction
        """
        self.resource_id = resource_id
        self.cancellation_reasons = cancellation_reasons or []
        context = {}
        if resource_id:
            context['resource_id'] = resource_id
        if self.cancellation_reasons:
            context['cancellation_reasons'] = self.cancellation_reasons
        super().__init__(message, original_error, context)

    @property
    def failed_indexes(self) -> List[int]:
        """Positions of the transaction operations whose condition failed."""
        return [
            i for i, code in enumerate(self.cancellation_reasons)
            if code == 'ConditionalCheckFailed'
        ]


class AlreadyExistsError(ConflictError):
    """Raised when a record with the same identity already exists.

    Covers duplicate project slugs (two titles that slugify to the same id),
    duplicate image ids within a project, and duplicate carousel item ids.
    """

    def __init__(self, entity_type: str, identity: Dict[str, Any], original_error: Optional[Exception] = None):
        self.entity_type = entity_type
        self.identity = identity
        resource_id = next(iter(identity.values()), None) if identity else None
        super().__init__(f"{entity_type} already exists: {identity}", resource_id, original_error)


# =============================================================================
# Chunked Operation Errors
# =============================================================================

class PartiallyAppliedError(PortfolioStoreError):
    """Raised when a chunked operation fails after earlier chunks committed.

    Each chunk is its own transaction, so chunks before ``failed_at_chunk``
    are durable and the failing chunk and everything after it were not
    applied. Reorders and cascading deletes are idempotent per item, so the
    caller may retry the whole operation.
    """

    def __init__(self, operation: str, completed_count: int, failed_at_chunk: int, original_error: Optional[Exception] = None):
        """Initialize partially applied error.

        Args:
            operation: Name of the chunked operation
            completed_count: Number of entries committed before the failure
            failed_at_chunk: Zero-based index of the chunk that failed
            original_error: The error raised by the failing chunk
        """
        self.operation = operation
        self.completed_count = completed_count
        self.failed_at_chunk = failed_at_chunk
        message = f"{operation} partially applied: {completed_count} entries committed, chunk {failed_at_chunk} failed"
        context = {
            'completed_count': completed_count,
            'failed_at_chunk': failed_at_chunk
        }
        super().__init__(message, original_error, context)


# =============================================================================
# Infrastructure Errors
# =============================================================================

class BackingStoreUnavailableError(PortfolioStoreError):
    """Raised when DynamoDB cannot be reached or refuses the request.

    Used for:
    - Throttling and capacity errors (retryable)
    - Service errors, timeouts and transaction conflicts (retryable)
    - Authentication failures, missing tables and endpoint errors
    """

    def __init__(self, message: str, original_error: Optional[Exception] = None, retryable: bool = False, context: Optional[Dict[str, Any]] = None):
        """Initialize backing store error.

        Args:
            message: Human-readable error message
            original_error: The original exception that caused this error
            retryable: Whether retrying the same call may succeed
            context: Additional context information (e.g., endpoint, region)
        """
        self.retryable = retryable
        context = dict(context or {})
        context['retryable'] = retryable
        super().__init__(message, original_error, context)
