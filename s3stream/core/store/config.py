"""
Store configuration module.

Builds boto3 S3 clients for AWS and S3-compatible providers.
"""
import os
from dataclasses import dataclass
from typing import Optional

import boto3
from botocore.client import BaseClient
from botocore.config import Config


@dataclass
class StoreConfig:
    """
    S3 client configuration.

    Credentials left as None fall back to boto3's default provider chain
    (environment, shared config, instance profile).
    """
    region_name: Optional[str] = None
    endpoint_url: Optional[str] = None
    aws_access_key_id: Optional[str] = None
    aws_secret_access_key: Optional[str] = None
    aws_session_token: Optional[str] = None
    max_attempts: int = 3
    connect_timeout: float = 10.0
    read_timeout: float = 120.0
    max_pool_connections: int = 10

    @classmethod
    def from_env(cls) -> 'StoreConfig':
        """Create configuration from environment variables."""
        return cls(
            region_name=os.environ.get('AWS_REGION') or os.environ.get('AWS_DEFAULT_REGION'),
            endpoint_url=os.environ.get('S3STREAM_ENDPOINT_URL') or None,
            aws_access_key_id=os.environ.get('AWS_ACCESS_KEY_ID') or None,
            aws_secret_access_key=os.environ.get('AWS_SECRET_ACCESS_KEY') or None,
            aws_session_token=os.environ.get('AWS_SESSION_TOKEN') or None,
        )

    def to_botocore_config(self) -> Config:
        """Convert to botocore client Config."""
        return Config(
            signature_version="s3v4",
            retries={'max_attempts': self.max_attempts, 'mode': 'standard'},
            connect_timeout=self.connect_timeout,
            read_timeout=self.read_timeout,
            max_pool_connections=self.max_pool_connections,
        )


def create_s3_client(config: Optional[StoreConfig] = None) -> BaseClient:
    """
    Create a boto3 S3 client.

    Args:
        config: Store configuration (defaults to environment)

    Returns:
        boto3 S3 client
    """
    config = config or StoreConfig.from_env()
    return boto3.client(
        "s3",
        region_name=config.region_name,
        endpoint_url=config.endpoint_url,
        aws_access_key_id=config.aws_access_key_id,
        aws_secret_access_key=config.aws_secret_access_key,
        aws_session_token=config.aws_session_token,
        config=config.to_botocore_config(),
    )
