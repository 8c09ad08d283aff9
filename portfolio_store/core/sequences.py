"""
Atomic ordering sequences.

``max + 1`` ordering reads the partition and then writes, so two concurrent
creators can pick the same value. With ``atomic_ordering`` enabled the
write APIs instead draw values from a counter row updated with

    SET #Value = if_not_exists(#Value, :floor) + :one

which DynamoDB applies atomically. The floor is the current maximum the
caller observed, so enabling the sequence on a partition that already holds
items continues after them.
"""

import logging

from .keys import sequence_keys
from .table_gateway import TableGateway

logger = logging.getLogger(__name__)


def next_sequence_value(gateway: TableGateway, partition: str, name: str, floor: int = 0) -> int:
    """Atomically increment and return the sequence stored at ``partition``/``name``.

    Args:
        gateway: Table gateway
        partition: Partition the counter row lives in
        name: Sequence name (e.g., 'IMAGE', 'POSITION')
        floor: Value assumed when the row does not exist yet

    Returns:
        The new counter value
    """
    attributes = gateway.update_item(
        key=sequence_keys(partition, name),
        update_expression="SET #Value = if_not_exists(#Value, :floor) + :one, #EntityType = :entity",
        expression_attribute_names={'#Value': 'Value', '#EntityType': 'EntityType'},
        expression_attribute_values={':floor': floor, ':one': 1, ':entity': 'Sequence'},
        return_values='UPDATED_NEW'
    )
    value = int(attributes['Value'])
    logger.debug(f"Sequence {partition}/{name} advanced to {value}")
    return value
