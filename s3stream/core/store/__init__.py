"""Object store module."""
from .protocols import ObjectStoreProtocol
from .config import StoreConfig, create_s3_client
from .s3_store import S3ObjectStore

__all__ = [
    'ObjectStoreProtocol',
    'StoreConfig',
    'create_s3_client',
    'S3ObjectStore',
]
