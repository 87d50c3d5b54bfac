"""Upload models."""
from .upload_models import (
    SessionState,
    Destination,
    UploadSession,
    Chunk,
    PartResult,
    PartFailure,
    UploadConfig,
    UploadResult,
    UploadProgress,
    MIN_PART_SIZE,
    MAX_PART_NUMBER,
    DEFAULT_CHUNK_SIZE,
)

__all__ = [
    'SessionState',
    'Destination',
    'UploadSession',
    'Chunk',
    'PartResult',
    'PartFailure',
    'UploadConfig',
    'UploadResult',
    'UploadProgress',
    'MIN_PART_SIZE',
    'MAX_PART_NUMBER',
    'DEFAULT_CHUNK_SIZE',
]
