"""
s3stream - Concurrent multipart uploads of generated streams to S3.

Usage:
    >>> from s3stream import ReportUploader, OfferReport
    >>>
    >>> uploader = ReportUploader("reports-bucket")
    >>> result = uploader.upload_report("offers", [OfferReport("cid", "pid", "err")])
    >>> print(result.part_count)
"""
import logging
from .client import ReportUploader

# Upload core
from .core.upload import (
    UploadFacade,
    SessionCoordinator,
    ConcurrentUploadEngine,
    PartUploader,
    FixedSizeChunker,
    iter_chunks,
    Destination,
    SessionState,
    UploadConfig,
    UploadResult,
    PartResult,
    PartFailure,
)

# Store
from .core.store import S3ObjectStore, StoreConfig, ObjectStoreProtocol

# Events
from .core.events import EventEmitter

# Errors
from .core.exceptions import (
    S3StreamException,
    UploadStateError,
    PartLimitError,
    StoreError,
    InitiateUploadError,
    CompleteUploadError,
    PartUploadError,
    MultipartUploadError,
)

# Reports
from .reports import OfferReport, ReportBuilder, ReportFormat

__version__ = '1.0.0'


def setup_logging(level=logging.INFO):
    """
    Configure logging for s3stream modules.

    Sets the level of every s3stream logger and keeps propagation
    enabled so records reach the root handlers.

    Args:
        level: Logging level (default: logging.INFO)
    """
    loggers = [
        's3stream',
        's3stream.client',
        's3stream.events',
        's3stream.store',
        's3stream.upload',
        's3stream.upload.coordinator',
        's3stream.upload.engine',
        's3stream.upload.part',
    ]

    for logger_name in loggers:
        logger = logging.getLogger(logger_name)
        logger.setLevel(level)
        logger.propagate = True


__all__ = [
    'ReportUploader',
    'UploadFacade',
    'SessionCoordinator',
    'ConcurrentUploadEngine',
    'PartUploader',
    'FixedSizeChunker',
    'iter_chunks',
    'Destination',
    'SessionState',
    'UploadConfig',
    'UploadResult',
    'PartResult',
    'PartFailure',
    'S3ObjectStore',
    'StoreConfig',
    'ObjectStoreProtocol',
    'EventEmitter',
    'S3StreamException',
    'UploadStateError',
    'PartLimitError',
    'StoreError',
    'InitiateUploadError',
    'CompleteUploadError',
    'PartUploadError',
    'MultipartUploadError',
    'OfferReport',
    'ReportBuilder',
    'ReportFormat',
    'setup_logging',
]
