"""
Core infrastructure components for the portfolio table.

- TableGateway: Thin wrapper over boto3 DynamoDB operations
- keys: Pure key-construction functions for the single-table layout
- schema: create_table definition shared by scripts and tests
- sequences: Atomic ordering counters
"""

from . import keys
from .schema import table_definition
from .sequences import next_sequence_value
from .table_gateway import TableGateway, create_table_gateway, map_dynamodb_error

__all__ = [
    "keys",
    "table_definition",
    "next_sequence_value",
    "TableGateway",
    "create_table_gateway",
    "map_dynamodb_error",
]
