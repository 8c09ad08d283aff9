"""
Test configuration and fixtures for the portfolio store.

Provides a moto-backed portfolio table plus read/write API fixtures for
projects, images and the carousel.
"""

import sys
from pathlib import Path

# Add project root to path so we can import portfolio_store
sys.path.insert(0, str(Path(__file__).parent.parent))

import boto3
import pytest
from moto import mock_aws

from portfolio_store import (
    CarouselReadApi,
    CarouselWriteApi,
    ImagesReadApi,
    ImagesWriteApi,
    PortfolioStoreConfig,
    ProjectsReadApi,
    ProjectsWriteApi,
    table_definition,
)


@pytest.fixture
def store_config():
    """Store configuration for mocked testing."""
    return PortfolioStoreConfig(
        aws_access_key_id="test_key",
        aws_secret_access_key="test_secret",
        region_name="us-east-1",
        endpoint_url=None,  # Use default AWS endpoint for moto
        environment="test",
        table_prefix="test_",
        atomic_ordering=False,
        transaction_chunk_size=25,
    )


@pytest.fixture
def mock_dynamodb_resource():
    """Mock DynamoDB resource."""
    with mock_aws():
        yield boto3.resource(
            'dynamodb',
            region_name='us-east-1',
            aws_access_key_id='test_key',
            aws_secret_access_key='test_secret'
        )


@pytest.fixture
def portfolio_table(mock_dynamodb_resource, store_config):
    """Create the single portfolio table with both overloaded indexes."""
    table = mock_dynamodb_resource.create_table(**table_definition(store_config))
    table.wait_until_exists()
    return table


# CQRS API Fixtures

@pytest.fixture
def projects_read_api(store_config, portfolio_table):
    """Project read API with mocked DynamoDB."""
    return ProjectsReadApi(store_config)


@pytest.fixture
def projects_write_api(store_config, portfolio_table):
    """Project write API with mocked DynamoDB."""
    return ProjectsWriteApi(store_config)


@pytest.fixture
def images_read_api(store_config, portfolio_table):
    """Image read API with mocked DynamoDB."""
    return ImagesReadApi(store_config)


@pytest.fixture
def images_write_api(store_config, portfolio_table):
    """Image write API with mocked DynamoDB."""
    return ImagesWriteApi(store_config)


@pytest.fixture
def carousel_read_api(store_config, portfolio_table):
    """Carousel read API with mocked DynamoDB."""
    return CarouselReadApi(store_config)


@pytest.fixture
def carousel_write_api(store_config, portfolio_table):
    """Carousel write API with mocked DynamoDB."""
    return CarouselWriteApi(store_config)


# Sample Data Fixtures

@pytest.fixture
def sample_project_data():
    """Sample project input for testing."""
    return {
        "title": "Mountain Series",
        "category": "landscape",
        "description": "Alpine light across four seasons",
        "tags": {"mountains", "alps"},
        "location": "Chamonix",
    }


@pytest.fixture
def sample_image_data():
    """Sample image input for testing."""
    return {
        "file_name": "summit.jpg",
        "file_path": "projects/mountain-series/summit.jpg",
        "title": "Summit",
        "dimensions": {"width": 6000, "height": 4000},
        "file_size": 1048576,
        "exif_data": {"iso": 100, "aperture": 2.8},
        "color_palette": ["#1B2A41", "#F2E9E4"],
    }


@pytest.fixture
def sample_carousel_data():
    """Sample carousel slide input for testing."""
    return {
        "title": "Autumn Light",
        "subtitle": "New work",
        "image_path": "carousel/autumn.jpg",
        "link_type": "project",
        "link_target": "mountain-series",
        "status": "active",
    }
