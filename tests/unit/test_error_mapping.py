"""
Tests for DynamoDB error mapping and the store's exception hierarchy.

Every botocore failure must surface as one of the store's exceptions with
the original error and its context preserved.
"""

import pytest
from botocore.exceptions import ClientError

from portfolio_store.core.table_gateway import extract_cancellation_reasons, map_dynamodb_error
from portfolio_store.exceptions import (
    AlreadyExistsError,
    BackingStoreUnavailableError,
    ConflictError,
    ItemNotFoundError,
    PartiallyAppliedError,
    PortfolioStoreError,
    ValidationError,
)


def create_client_error(error_code: str, message: str = "Test error", **extra) -> ClientError:
    """Helper to create ClientError for testing."""
    response = {
        'Error': {
            'Code': error_code,
            'Message': message
        }
    }
    response.update(extra)
    return ClientError(error_response=response, operation_name='TestOperation')


class TestConditionalErrors:
    """Test mapping of conditional check and transaction errors."""

    def test_conditional_check_failed(self):
        error = create_client_error('ConditionalCheckFailedException', 'The conditional request failed')

        result = map_dynamodb_error(error, 'PutItem', 'test_table', 'ITEM#001#a')

        assert isinstance(result, ConflictError)
        assert 'ITEM#001#a' in str(result)
        assert 'conditional request failed' in str(result).lower()
        assert result.original_error is error

    def test_transaction_cancelled_by_condition(self):
        error = create_client_error(
            'TransactionCanceledException',
            'Transaction cancelled',
            CancellationReasons=[
                {'Code': 'None'},
                {'Code': 'ConditionalCheckFailed', 'Message': 'The conditional request failed'},
            ]
        )

        result = map_dynamodb_error(error, 'TransactWriteItems', 'test_table')

        assert isinstance(result, ConflictError)
        assert result.cancellation_reasons == ['None', 'ConditionalCheckFailed']
        assert result.failed_indexes == [1]

    def test_cancellation_reasons_from_message(self):
        """Reasons are recovered from the message when not structured."""
        error = create_client_error(
            'TransactionCanceledException',
            'Transaction cancelled, please refer cancellation reasons for specific reasons '
            '[ConditionalCheckFailed, None]'
        )

        assert extract_cancellation_reasons(error) == ['ConditionalCheckFailed', 'None']
        assert map_dynamodb_error(error, 'TransactWriteItems', 't').failed_indexes == [0]

    def test_transaction_cancelled_by_validation(self):
        error = create_client_error(
            'TransactionCanceledException', 'cancelled',
            CancellationReasons=[{'Code': 'ValidationError'}]
        )

        assert isinstance(map_dynamodb_error(error, 'TransactWriteItems', 't'), ValidationError)

    def test_transaction_cancelled_by_conflict_is_retryable(self):
        error = create_client_error(
            'TransactionCanceledException', 'cancelled',
            CancellationReasons=[{'Code': 'TransactionConflict'}, {'Code': 'None'}]
        )

        result = map_dynamodb_error(error, 'TransactWriteItems', 't')

        assert isinstance(result, BackingStoreUnavailableError)
        assert result.retryable is True

    def test_transaction_conflict(self):
        error = create_client_error('TransactionConflictException')

        result = map_dynamodb_error(error, 'TransactWriteItems', 't')

        assert isinstance(result, BackingStoreUnavailableError)
        assert result.retryable is True


class TestInfrastructureErrors:
    """Test mapping of throttling, service and access errors."""

    @pytest.mark.parametrize("code", [
        'ProvisionedThroughputExceededException',
        'ThrottlingException',
        'RequestLimitExceeded',
        'InternalServerError',
        'ServiceUnavailable',
    ])
    def test_retryable_codes(self, code):
        result = map_dynamodb_error(create_client_error(code), 'Query', 'test_table')

        assert isinstance(result, BackingStoreUnavailableError)
        assert result.retryable is True
        assert result.context['retryable'] is True

    @pytest.mark.parametrize("code", [
        'AccessDeniedException',
        'UnrecognizedClientException',
        'ResourceNotFoundException',
    ])
    def test_non_retryable_codes(self, code):
        result = map_dynamodb_error(create_client_error(code), 'Query', 'test_table')

        assert isinstance(result, BackingStoreUnavailableError)
        assert result.retryable is False

    def test_validation_exception(self):
        result = map_dynamodb_error(create_client_error('ValidationException', 'bad key'), 'GetItem', 't')

        assert isinstance(result, ValidationError)
        assert 'bad key' in str(result)

    def test_unknown_code(self):
        result = map_dynamodb_error(create_client_error('SomethingNew'), 'GetItem', 'test_table')

        assert isinstance(result, BackingStoreUnavailableError)
        assert 'test_table' in str(result)


class TestExceptionHierarchy:
    """Test exception attributes and string forms."""

    def test_all_derive_from_base(self):
        for cls in (AlreadyExistsError, BackingStoreUnavailableError, ConflictError,
                    ItemNotFoundError, PartiallyAppliedError, ValidationError):
            assert issubclass(cls, PortfolioStoreError)

    def test_already_exists_is_conflict(self):
        error = AlreadyExistsError('Project', {'project_id': 'mountain-series'})

        assert isinstance(error, ConflictError)
        assert error.resource_id == 'mountain-series'
        assert 'mountain-series' in str(error)

    def test_item_not_found_context(self):
        error = ItemNotFoundError('Image', {'project_id': 'p', 'image_id': 'i'})

        assert error.entity_type == 'Image'
        assert error.to_dict()['error'] == 'ItemNotFoundError'
        assert "entity_type=Image" in str(error)

    def test_partially_applied_fields(self):
        cause = BackingStoreUnavailableError("throttled", retryable=True)

        error = PartiallyAppliedError('reorder_items', completed_count=12, failed_at_chunk=1, original_error=cause)

        assert error.completed_count == 12
        assert error.failed_at_chunk == 1
        assert error.original_error is cause
        assert error.context == {'completed_count': 12, 'failed_at_chunk': 1}
