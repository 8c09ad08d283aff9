"""
Thin DynamoDB Table Gateway

Lightweight wrapper around the boto3 Table resource for the single portfolio
table. The gateway:

1. Creates the boto3 resource lazily from PortfolioStoreConfig
2. Maps botocore failures onto the store's exception hierarchy
3. Builds TransactWriteItems operations and runs them in chunks

Read/write APIs compose these building blocks; the gateway itself knows
nothing about projects, images or carousel items. It is internal to the
package and not exported as a raw write API.
"""

import logging
import re
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Sequence

import boto3
from boto3.dynamodb.conditions import ConditionBase
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from ..config import PortfolioStoreConfig
from ..exceptions import (
    BackingStoreUnavailableError,
    ConflictError,
    PartiallyAppliedError,
    PortfolioStoreError,
    ValidationError,
)

logger = logging.getLogger(__name__)

THROTTLING_CODES = {
    'ProvisionedThroughputExceededException', 'RequestLimitExceeded', 'ThrottlingException',
    'TooManyRequestsException', 'SlowDown',
}
SERVICE_CODES = {
    'InternalServerError', 'ServiceUnavailable', 'ServiceUnavailableException',
    'InternalFailure', 'RequestTimeoutException', 'RequestExpiredException',
}
AUTH_CODES = {
    'UnrecognizedClientException', 'AccessDeniedException', 'ExpiredTokenException',
    'InvalidSignatureException', 'IncompleteSignatureException', 'MissingAuthenticationTokenException',
}

_REASONS_IN_MESSAGE = re.compile(r'\[([^\]]*)\]\s*$')


def extract_cancellation_reasons(error: ClientError) -> List[str]:
    """Per-operation reason codes of a TransactionCanceledException.

    botocore exposes them as ``CancellationReasons``; when only the message
    survives, the codes are read from its trailing ``[A, B, ...]`` list.
    """
    reasons = error.response.get('CancellationReasons') or error.response.get('Error', {}).get('CancellationReasons')
    if reasons:
        return [reason.get('Code', 'None') or 'None' for reason in reasons]

    message = error.response.get('Error', {}).get('Message', '')
    match = _REASONS_IN_MESSAGE.search(message)
    if match:
        return [code.strip() for code in match.group(1).split(',')]
    return []


def map_dynamodb_error(
    error: ClientError,
    operation: str,
    table_name: str,
    resource_id: Optional[str] = None
) -> PortfolioStoreError:
    """Map a DynamoDB ClientError to a store exception.

    Args:
        error: The boto3 ClientError
        operation: The operation that failed (e.g., "GetItem", "TransactWriteItems")
        table_name: The DynamoDB table name
        resource_id: Optional resource identifier for context

    Returns:
        ConflictError for failed conditions, ValidationError for rejected
        requests, BackingStoreUnavailableError for everything else
    """
    error_code = error.response.get('Error', {}).get('Code', 'Unknown')
    error_message = error.response.get('Error', {}).get('Message', '')

    context = f"{operation} on {table_name}"
    if resource_id:
        context += f" (resource: {resource_id})"

    full_message = f"{context}: {error_message}"

    if error_code == 'ConditionalCheckFailedException':
        return ConflictError(f"Conditional check failed - {full_message}", resource_id, original_error=error)

    elif error_code == 'TransactionCanceledException':
        reasons = extract_cancellation_reasons(error)
        if 'ConditionalCheckFailed' in reasons:
            return ConflictError(
                f"Transaction condition failed - {full_message}",
                resource_id,
                original_error=error,
                cancellation_reasons=reasons
            )
        if 'ValidationError' in reasons:
            return ValidationError(f"Transaction rejected - {full_message}", {'cancellation_reasons': reasons}, error)
        return BackingStoreUnavailableError(
            f"Transaction cancelled - {full_message}",
            original_error=error,
            retryable=True,
            context={'cancellation_reasons': reasons}
        )

    elif error_code in ('TransactionConflictException', 'TransactionInProgressException'):
        return BackingStoreUnavailableError(f"Transaction conflict - {full_message}", original_error=error, retryable=True)

    elif error_code == 'ValidationException':
        return ValidationError(f"Validation failed - {full_message}", original_error=error)

    elif error_code == 'ItemCollectionSizeLimitExceededException':
        return ValidationError(f"Item collection size limit exceeded - {full_message}", original_error=error)

    elif error_code in THROTTLING_CODES:
        return BackingStoreUnavailableError(f"Throttling - {full_message}", original_error=error, retryable=True)

    elif error_code in SERVICE_CODES:
        return BackingStoreUnavailableError(f"Service unavailable - {full_message}", original_error=error, retryable=True)

    elif error_code in AUTH_CODES:
        return BackingStoreUnavailableError(f"Authentication/authorization failed - {full_message}", original_error=error)

    elif error_code == 'ResourceNotFoundException':
        return BackingStoreUnavailableError(f"Table or index not found - {full_message}", original_error=error)

    logger.warning(f"Unknown DynamoDB error code '{error_code}' mapped to BackingStoreUnavailableError")
    return BackingStoreUnavailableError(f"DynamoDB operation failed - {full_message}", original_error=error)


def pack_groups(groups: Sequence[List[Dict[str, Any]]], chunk_size: int) -> List[List[int]]:
    """Pack operation groups into chunks of at most ``chunk_size`` operations.

    A group is the set of operations for one logical entry (e.g. the delete
    and put that move an image to a new sort key) and is never split across
    chunks.

    Returns:
        Group indexes per chunk, in order
    """
    chunks: List[List[int]] = []
    current: List[int] = []
    current_size = 0
    for index, group in enumerate(groups):
        if len(group) > chunk_size:
            raise ValidationError(f"Operation group of {len(group)} exceeds chunk size {chunk_size}")
        if current and current_size + len(group) > chunk_size:
            chunks.append(current)
            current, current_size = [], 0
        current.append(index)
        current_size += len(group)
    if current:
        chunks.append(current)
    return chunks


class TableGateway:
    """
    Thin gateway for the portfolio table.

    Provides minimal, composable DynamoDB operations. Designed to be used by
    the read/write APIs rather than directly by clients.
    """

    def __init__(self, config: PortfolioStoreConfig, table_name: str):
        """Initialize table gateway.

        Args:
            config: Store configuration
            table_name: Full name of the DynamoDB table
        """
        self.config = config
        self.table_name = table_name
        self._dynamodb = None
        self._table = None

    @property
    def dynamodb(self):
        """Lazy initialization of DynamoDB resource."""
        if self._dynamodb is None:
            try:
                session = boto3.Session(
                    aws_access_key_id=self.config.aws_access_key_id,
                    aws_secret_access_key=self.config.aws_secret_access_key,
                    region_name=self.config.region_name
                )

                dynamodb_config = {
                    'region_name': self.config.region_name
                }

                if self.config.endpoint_url:
                    dynamodb_config['endpoint_url'] = self.config.endpoint_url

                dynamodb_config['config'] = Config(
                    retries={'max_attempts': self.config.retries},
                    max_pool_connections=self.config.max_pool_connections,
                    read_timeout=self.config.timeout_seconds,
                    connect_timeout=self.config.timeout_seconds
                )

                self._dynamodb = session.resource('dynamodb', **dynamodb_config)
            except (BotoCoreError, ValueError) as e:
                logger.error(f"Failed to create DynamoDB resource: {e}")
                raise BackingStoreUnavailableError(f"Failed to connect to DynamoDB: {e}", e) from e
        return self._dynamodb

    @property
    def table(self):
        """boto3 Table resource for the portfolio table."""
        if self._table is None:
            self._table = self.dynamodb.Table(self.table_name)
        return self._table

    @contextmanager
    def _mapped_errors(self, operation: str, resource_id: Optional[str] = None) -> Iterator[None]:
        try:
            yield
        except ClientError as e:
            mapped = map_dynamodb_error(e, operation, self.table_name, resource_id)
            if isinstance(mapped, BackingStoreUnavailableError):
                logger.error(f"{operation} failed on {self.table_name}: {mapped}")
            raise mapped from e
        except BotoCoreError as e:
            logger.error(f"{operation} could not reach {self.table_name}: {e}")
            raise BackingStoreUnavailableError(
                f"{operation} on {self.table_name}: {e}", original_error=e, retryable=True
            ) from e

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def query(self, **kwargs) -> Dict[str, Any]:
        """
        Execute a single Query page.

        Args:
            **kwargs: boto3 query parameters (IndexName, KeyConditionExpression,
                FilterExpression, ScanIndexForward, ExclusiveStartKey...)

        Returns:
            Raw DynamoDB response
        """
        with self._mapped_errors("Query"):
            return self.table.query(**kwargs)

    def query_all(self, **kwargs) -> List[Dict[str, Any]]:
        """
        Execute a Query and follow LastEvaluatedKey until exhausted.

        Filter expressions apply per page, so pages may come back empty
        while more remain.

        Returns:
            All matching items in index order
        """
        items: List[Dict[str, Any]] = []
        query_kwargs = dict(kwargs)
        while True:
            response = self.query(**query_kwargs)
            items.extend(response.get('Items', []))
            last_key = response.get('LastEvaluatedKey')
            if not last_key:
                break
            query_kwargs['ExclusiveStartKey'] = last_key
        logger.debug(f"Query on {self.table_name} returned {len(items)} items")
        return items

    def get_item(self, key: Dict[str, Any], consistent_read: bool = False) -> Optional[Dict[str, Any]]:
        """Fetch one item by primary key, None when absent."""
        with self._mapped_errors("GetItem", key.get('SK')):
            response = self.table.get_item(Key=key, ConsistentRead=consistent_read)
        return response.get('Item')

    # -------------------------------------------------------------------------
    # Single-item writes
    # -------------------------------------------------------------------------

    def put_item(self, item: Dict[str, Any], condition_expression=None) -> None:
        """
        Put item into the table.

        Example:
            gateway.put_item(item, condition_expression=Attr('PK').not_exists())
        """
        put_kwargs = {'Item': item}
        if condition_expression is not None:
            put_kwargs['ConditionExpression'] = condition_expression

        with self._mapped_errors("PutItem", item.get('SK')):
            self.table.put_item(**put_kwargs)
        logger.info(f"Put item in {self.table_name}: {item.get('PK')} / {item.get('SK')}")
        logger.debug(f"Put item body: {item}")

    def update_item(
        self,
        key: Dict[str, Any],
        update_expression: str,
        expression_attribute_values: Optional[Dict[str, Any]] = None,
        expression_attribute_names: Optional[Dict[str, str]] = None,
        condition_expression=None,
        return_values: str = 'NONE'
    ) -> Optional[Dict[str, Any]]:
        """
        Update item in the table.

        Args:
            key: Primary key of item to update
            update_expression: UPDATE expression
            expression_attribute_values: Values for update expression
            expression_attribute_names: Names for update expression
            condition_expression: Optional condition for update
            return_values: What to return after update

        Returns:
            Updated attributes if return_values != 'NONE'
        """
        update_kwargs = {
            'Key': key,
            'UpdateExpression': update_expression,
            'ReturnValues': return_values
        }

        if expression_attribute_values:
            update_kwargs['ExpressionAttributeValues'] = expression_attribute_values
        if expression_attribute_names:
            update_kwargs['ExpressionAttributeNames'] = expression_attribute_names
        if condition_expression is not None:
            update_kwargs['ConditionExpression'] = condition_expression

        with self._mapped_errors("UpdateItem", key.get('SK')):
            response = self.table.update_item(**update_kwargs)
        logger.info(f"Updated item in {self.table_name}: {key}")

        return response.get('Attributes') if return_values != 'NONE' else None

    def delete_item(
        self,
        key: Dict[str, Any],
        condition_expression=None,
        return_values: str = 'NONE'
    ) -> Optional[Dict[str, Any]]:
        """
        Delete item from the table.

        Returns:
            Deleted attributes if return_values != 'NONE'
        """
        delete_kwargs = {
            'Key': key,
            'ReturnValues': return_values
        }

        if condition_expression is not None:
            delete_kwargs['ConditionExpression'] = condition_expression

        with self._mapped_errors("DeleteItem", key.get('SK')):
            response = self.table.delete_item(**delete_kwargs)
        logger.info(f"Deleted item from {self.table_name}: {key}")

        return response.get('Attributes') if return_values != 'NONE' else None

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    def put_op(self, item: Dict[str, Any], condition_expression: Optional[str] = None) -> Dict[str, Any]:
        """Build a transactional Put."""
        put = {'TableName': self.table_name, 'Item': item}
        if condition_expression:
            put['ConditionExpression'] = condition_expression
        return {'Put': put}

    def delete_op(self, key: Dict[str, Any], condition_expression: Optional[str] = None) -> Dict[str, Any]:
        """Build a transactional Delete."""
        delete = {'TableName': self.table_name, 'Key': key}
        if condition_expression:
            delete['ConditionExpression'] = condition_expression
        return {'Delete': delete}

    def update_op(
        self,
        key: Dict[str, Any],
        update_expression: str,
        expression_attribute_names: Optional[Dict[str, str]] = None,
        expression_attribute_values: Optional[Dict[str, Any]] = None,
        condition_expression: Optional[str] = None
    ) -> Dict[str, Any]:
        """Build a transactional Update."""
        update = {
            'TableName': self.table_name,
            'Key': key,
            'UpdateExpression': update_expression,
        }
        if expression_attribute_names:
            update['ExpressionAttributeNames'] = expression_attribute_names
        if expression_attribute_values:
            update['ExpressionAttributeValues'] = expression_attribute_values
        if condition_expression:
            update['ConditionExpression'] = condition_expression
        return {'Update': update}

    def transact_write_items(self, transact_items: List[Dict[str, Any]]) -> None:
        """
        Execute one all-or-nothing transaction.

        Uses the resource's client, which accepts native Python values the
        same way the Table resource does. Condition expressions must be
        strings here; ``Attr``/``Key`` objects are not rendered inside
        TransactItems.

        Raises:
            ConflictError: A condition failed; ``cancellation_reasons`` tells which
            BackingStoreUnavailableError: Throttled, conflicted or unreachable
        """
        if any(isinstance(op_body.get('ConditionExpression'), ConditionBase)
               for op in transact_items for op_body in op.values()):
            raise ValidationError("Transaction condition expressions must be strings")

        with self._mapped_errors("TransactWriteItems"):
            self.dynamodb.meta.client.transact_write_items(
                TransactItems=transact_items
            )
        logger.info(f"Transaction of {len(transact_items)} operations completed on {self.table_name}")

    def run_chunks(
        self,
        chunks: Sequence[List[Dict[str, Any]]],
        counts: Sequence[int],
        operation: str
    ) -> int:
        """
        Execute pre-built chunks, one transaction each, in order.

        Each chunk is atomic; there is no atomicity across chunks. A failure
        in the first chunk re-raises the mapped error since nothing was
        applied. A later failure raises PartiallyAppliedError carrying the
        number of entries already committed.

        Args:
            chunks: Transaction item lists, each at most the configured chunk size
            counts: Logical entries each chunk represents
            operation: Name used in logs and errors

        Returns:
            Total entries committed
        """
        completed = 0
        for index, (chunk, count) in enumerate(zip(chunks, counts)):
            try:
                self.transact_write_items(chunk)
            except PortfolioStoreError as e:
                if index == 0:
                    raise
                logger.warning(
                    f"{operation} stopped at chunk {index} of {len(chunks)} after {completed} entries: {e}"
                )
                raise PartiallyAppliedError(operation, completed, index, original_error=e) from e
            completed += count
            logger.debug(f"{operation}: chunk {index + 1}/{len(chunks)} committed ({count} entries)")
        return completed

    def transact_in_chunks(
        self,
        groups: Sequence[List[Dict[str, Any]]],
        operation: str,
        counts: Optional[Sequence[int]] = None,
        chunk_size: Optional[int] = None
    ) -> int:
        """
        Pack operation groups into chunks and execute them with ``run_chunks``.

        Args:
            groups: One list of operations per logical entry
            operation: Name used in logs and errors
            counts: Entries each group represents (defaults to 1 per group)
            chunk_size: Operations per transaction (defaults to config)

        Returns:
            Total entries committed
        """
        size = chunk_size or self.config.transaction_chunk_size
        weights = list(counts) if counts is not None else [1] * len(groups)

        packed = pack_groups(groups, size)
        chunks = [[op for index in chunk for op in groups[index]] for chunk in packed]
        chunk_counts = [sum(weights[index] for index in chunk) for chunk in packed]
        return self.run_chunks(chunks, chunk_counts, operation)


def create_table_gateway(config: PortfolioStoreConfig, table_name: Optional[str] = None) -> TableGateway:
    """
    Factory function to create a TableGateway instance.

    Args:
        config: Store configuration
        table_name: Base table name (defaults to ``config.table_name``); prefix
            and environment are applied by ``config.get_table_name``

    Returns:
        Configured TableGateway instance
    """
    config.configure_logging()
    return TableGateway(config, config.get_table_name(table_name))
