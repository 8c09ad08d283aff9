#!/usr/bin/env python3
"""
Portfolio Table Manager

Creates, deletes or describes the portfolio table for the current
environment. Configuration comes from the environment (and a .env file);
pass --local to target DynamoDB Local on localhost:8000.

Usage:
    python3 scripts/create_table.py {create|delete|status} [--local]
"""

import sys
from pathlib import Path

from botocore.exceptions import BotoCoreError, ClientError

sys.path.insert(0, str(Path(__file__).parent.parent))

from portfolio_store import PortfolioStoreConfig, table_definition  # noqa: E402
from portfolio_store.core import create_table_gateway  # noqa: E402


def load_config(args):
    """Build the store configuration from the command line flags."""
    if "--local" in args:
        return PortfolioStoreConfig.for_local_development()
    return PortfolioStoreConfig.from_env()


def create_table(config):
    """Create the table and wait until it is active."""
    gateway = create_table_gateway(config)
    definition = table_definition(config)
    print(f"🚀 Creating table {definition['TableName']}...")

    try:
        table = gateway.dynamodb.create_table(**definition)
    except ClientError as e:
        if e.response['Error']['Code'] == 'ResourceInUseException':
            print(f"✅ Table {definition['TableName']} already exists")
            return True
        print(f"❌ Failed to create table: {e}")
        return False

    print("⏳ Waiting for table to become active...")
    table.wait_until_exists()
    print(f"✅ Table {definition['TableName']} is active")
    return True


def delete_table(config):
    """Delete the table."""
    gateway = create_table_gateway(config)
    print(f"🛑 Deleting table {gateway.table_name}...")

    try:
        gateway.table.delete()
        gateway.table.wait_until_not_exists()
    except ClientError as e:
        if e.response['Error']['Code'] == 'ResourceNotFoundException':
            print(f"✅ Table {gateway.table_name} does not exist")
            return True
        print(f"❌ Failed to delete table: {e}")
        return False

    print("✅ Table deleted")
    return True


def table_status(config):
    """Show table status, item count and indexes."""
    gateway = create_table_gateway(config)
    try:
        description = gateway.dynamodb.meta.client.describe_table(TableName=gateway.table_name)['Table']
    except ClientError as e:
        if e.response['Error']['Code'] == 'ResourceNotFoundException':
            print(f"❌ Table {gateway.table_name} does not exist")
            return False
        raise

    print(f"✅ Table {gateway.table_name}: {description['TableStatus']}")
    print(f"   Items: {description.get('ItemCount', 0)}")
    for index in description.get('GlobalSecondaryIndexes', []):
        print(f"   Index {index['IndexName']}: {index.get('IndexStatus', 'UNKNOWN')}")
    return True


def main():
    """Main entry point."""
    if len(sys.argv) < 2:
        print("Usage: python3 scripts/create_table.py {create|delete|status} [--local]")
        sys.exit(1)

    command = sys.argv[1]
    config = load_config(sys.argv[2:])

    try:
        if command == "create":
            success = create_table(config)
        elif command == "delete":
            success = delete_table(config)
        elif command == "status":
            success = table_status(config)
        else:
            print(f"Unknown command: {command}")
            success = False
    except (BotoCoreError, ClientError) as e:
        print(f"❌ DynamoDB error: {e}")
        success = False

    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
