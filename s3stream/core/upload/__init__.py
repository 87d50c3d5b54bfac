"""
Upload module for multipart stream uploads.

Streams are split into fixed-size chunks, uploaded in parallel by a
bounded worker pool and stitched together by the store on completion.
"""
from .facade import UploadFacade
from .coordinator import SessionCoordinator
from .engine import ConcurrentUploadEngine
from .models import (
    SessionState,
    Destination,
    UploadSession,
    Chunk,
    PartResult,
    PartFailure,
    UploadConfig,
    UploadResult,
    UploadProgress,
)
from .protocols import ByteStreamProtocol, ChunkingStrategy, PartUploaderProtocol
from .services import PartUploader
from .strategies import FixedSizeChunker, iter_chunks

__all__ = [
    # Main classes
    'UploadFacade',
    'SessionCoordinator',
    'ConcurrentUploadEngine',
    'PartUploader',
    'FixedSizeChunker',
    'iter_chunks',

    # Models
    'SessionState',
    'Destination',
    'UploadSession',
    'Chunk',
    'PartResult',
    'PartFailure',
    'UploadConfig',
    'UploadResult',
    'UploadProgress',

    # Protocols
    'ByteStreamProtocol',
    'ChunkingStrategy',
    'PartUploaderProtocol',
]
