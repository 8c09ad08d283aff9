"""
Table definition for the single portfolio table.

Used by ``scripts/create_table.py`` and by the test fixtures so the key
schema and both overloaded indexes are declared in one place.
"""

from typing import Any, Dict

from ..config import PortfolioStoreConfig
from .keys import GSI1PK, GSI1SK, GSI2PK, GSI2SK, PK, SK


def _index(name: str, partition_key: str, sort_key: str) -> Dict[str, Any]:
    return {
        'IndexName': name,
        'KeySchema': [
            {'AttributeName': partition_key, 'KeyType': 'HASH'},
            {'AttributeName': sort_key, 'KeyType': 'RANGE'}
        ],
        'Projection': {'ProjectionType': 'ALL'}
    }


def table_definition(config: PortfolioStoreConfig) -> Dict[str, Any]:
    """Keyword arguments for ``create_table`` (on-demand billing)."""
    return {
        'TableName': config.get_table_name(),
        'KeySchema': [
            {'AttributeName': PK, 'KeyType': 'HASH'},
            {'AttributeName': SK, 'KeyType': 'RANGE'}
        ],
        'AttributeDefinitions': [
            {'AttributeName': name, 'AttributeType': 'S'}
            for name in (PK, SK, GSI1PK, GSI1SK, GSI2PK, GSI2SK)
        ],
        'GlobalSecondaryIndexes': [
            _index(config.index1_name, GSI1PK, GSI1SK),
            _index(config.index2_name, GSI2PK, GSI2SK),
        ],
        'BillingMode': 'PAY_PER_REQUEST'
    }
