import logging
import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

# Load environment variables from .env file if it exists
load_dotenv()

PACKAGE_LOGGER = "portfolio_store"


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


class PortfolioStoreConfig(BaseModel):
    """Configuration for the portfolio table connection and store behaviour."""

    aws_access_key_id: Optional[str] = Field(
        default_factory=lambda: os.getenv("AWS_ACCESS_KEY_ID"),
        description="AWS access key ID"
    )

    aws_secret_access_key: Optional[str] = Field(
        default_factory=lambda: os.getenv("AWS_SECRET_ACCESS_KEY"),
        description="AWS secret access key"
    )

    region_name: str = Field(
        default_factory=lambda: os.getenv("AWS_REGION", "us-east-1"),
        description="AWS region name"
    )

    endpoint_url: Optional[str] = Field(
        default_factory=lambda: os.getenv("DYNAMODB_ENDPOINT_URL"),
        description="DynamoDB endpoint URL (for local development)"
    )

    # Table configuration
    table_prefix: str = Field(
        default_factory=lambda: os.getenv("DYNAMODB_TABLE_PREFIX", ""),
        description="Prefix to add to the table name"
    )

    table_name: str = Field(
        default_factory=lambda: os.getenv("PORTFOLIO_TABLE_NAME", "portfolio"),
        description="Base name of the single portfolio table"
    )

    index1_name: str = Field(default="GSI1", description="Status index (GSI1PK/GSI1SK)")
    index2_name: str = Field(default="GSI2", description="Category/featured index (GSI2PK/GSI2SK)")

    # Connection settings
    max_pool_connections: int = Field(
        default=50,
        description="Maximum number of connections in the connection pool"
    )

    retries: int = Field(
        default=3,
        description="Number of retry attempts for failed requests"
    )

    timeout_seconds: float = Field(
        default=30.0,
        description="Request timeout in seconds"
    )

    # Store behaviour
    key_pad_width: int = Field(
        default_factory=lambda: int(os.getenv("PORTFOLIO_KEY_PAD_WIDTH", "3")),
        ge=1,
        le=10,
        description="Zero-pad width for sortOrder/position inside sort keys"
    )

    transaction_chunk_size: int = Field(
        default_factory=lambda: int(os.getenv("PORTFOLIO_TRANSACTION_CHUNK_SIZE", "25")),
        ge=4,
        le=100,
        description="Maximum operations per transaction in chunked reorders and deletes "
                    "(a cascading delete's last chunk needs room for the project, its ref and sequence rows)"
    )

    atomic_ordering: bool = Field(
        default_factory=lambda: _env_flag("PORTFOLIO_ATOMIC_ORDERING"),
        description="Allocate sortOrder/position from an atomic sequence row instead of max+1"
    )

    # Environment settings
    environment: str = Field(
        default_factory=lambda: os.getenv("ENVIRONMENT", "dev"),
        description="Current environment (dev, test, staging, prod)"
    )

    # Logging settings
    enable_debug_logging: bool = Field(
        default_factory=lambda: _env_flag("PORTFOLIO_DEBUG_LOGGING"),
        description="Enable debug logging for table operations"
    )

    @field_validator('region_name')
    @classmethod
    def validate_region(cls, v):
        """Validate AWS region name."""
        if not v:
            raise ValueError("AWS region name is required")
        return v

    @field_validator('environment')
    @classmethod
    def validate_environment(cls, v):
        """Validate environment value."""
        valid_environments = ['dev', 'test', 'staging', 'prod']
        if v not in valid_environments:
            raise ValueError(f"Environment must be one of: {valid_environments}")
        return v

    @field_validator('table_name')
    @classmethod
    def validate_table_name(cls, v):
        if not v or not v.strip():
            raise ValueError("Table name cannot be empty")
        return v.strip()

    def get_table_name(self, base_name: Optional[str] = None) -> str:
        """Get the full table name with prefix and environment.

        Args:
            base_name: Base table name (defaults to ``table_name``)

        Returns:
            Full table name, e.g. ``myapp_dev_portfolio``; prod omits the environment
        """
        parts = []

        if self.table_prefix:
            parts.append(self.table_prefix.rstrip("_"))

        if self.environment != "prod":
            parts.append(self.environment)

        parts.append(base_name or self.table_name)

        return "_".join(parts)

    def configure_logging(self) -> None:
        """Raise the package logger to DEBUG when debug logging is enabled."""
        if self.enable_debug_logging:
            logging.getLogger(PACKAGE_LOGGER).setLevel(logging.DEBUG)

    @classmethod
    def from_env(cls) -> 'PortfolioStoreConfig':
        """Create configuration from environment variables."""
        return cls()

    @classmethod
    def for_local_development(cls) -> 'PortfolioStoreConfig':
        """Create configuration for DynamoDB Local / LocalStack development.

        Returns:
            PortfolioStoreConfig pointing at http://localhost:8000
        """
        return cls(
            aws_access_key_id="local",
            aws_secret_access_key="local",
            region_name="us-east-1",
            endpoint_url="http://localhost:8000",
            environment="dev",
            enable_debug_logging=True
        )

    model_config = ConfigDict(
        validate_assignment=True,
        use_enum_values=True
    )
