"""
Data models for upload module.

Uses dataclasses for immutable, type-safe data structures.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Any, Optional, List


MIN_PART_SIZE = 5 * 1024 * 1024  # 5MB, store minimum for every part but the last
MAX_PART_NUMBER = 10000
DEFAULT_CHUNK_SIZE = 10 * 1024 * 1024  # 10MB


class SessionState(Enum):
    """Lifecycle state of a multipart upload session."""
    INITIALIZED = "initialized"
    UPLOADING = "uploading"
    COMPLETING = "completing"
    COMPLETED = "completed"
    ABORTED = "aborted"

    @property
    def is_terminal(self) -> bool:
        """Returns True for COMPLETED and ABORTED."""
        return self in (SessionState.COMPLETED, SessionState.ABORTED)


@dataclass(frozen=True)
class Destination:
    """
    Target location of an upload.

    Attributes:
        bucket: Bucket (container) name
        key: Object key
    """
    bucket: str
    key: str

    def __post_init__(self):
        if not self.bucket:
            raise ValueError("Destination bucket has not been set")
        if not self.key:
            raise ValueError("Destination key has not been set")

    def __str__(self) -> str:
        return f"s3://{self.bucket}/{self.key}"


@dataclass
class UploadSession:
    """
    Server-side multipart upload context.

    Created on initiate and mutated only by the session coordinator.

    Attributes:
        destination: Where the object is written
        upload_id: Identifier issued by the store (None until initiated)
        state: Current lifecycle state
    """
    destination: Destination
    upload_id: Optional[str] = None
    state: SessionState = SessionState.INITIALIZED

    @property
    def bucket(self) -> str:
        return self.destination.bucket

    @property
    def key(self) -> str:
        return self.destination.key

    @property
    def is_active(self) -> bool:
        """Returns True while parts may be submitted."""
        return self.state is SessionState.UPLOADING and bool(self.upload_id)


@dataclass(frozen=True)
class Chunk:
    """
    A bounded slice of the source stream.

    Attributes:
        index: Zero-based position in the stream
        data: Chunk payload
        is_final: True for the last chunk of the stream
    """
    index: int
    data: bytes
    is_final: bool = False

    @property
    def size(self) -> int:
        """Returns chunk size."""
        return len(self.data)


@dataclass(frozen=True)
class PartResult:
    """
    A successfully uploaded part.

    Attributes:
        part_number: Part number (1..10000)
        etag: Integrity tag returned by the store
        size: Payload size in bytes
        is_final: True for the last part of the session
    """
    part_number: int
    etag: str
    size: int = 0
    is_final: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert to S3 CompletedPart format."""
        return {'PartNumber': self.part_number, 'ETag': self.etag}


@dataclass(frozen=True)
class PartFailure:
    """
    A part whose upload raised.

    Attributes:
        part_number: Part number (1..10000)
        error: Exception raised by the upload task
        is_final: True for the last part of the session
    """
    part_number: int
    error: BaseException
    is_final: bool = False


@dataclass
class UploadConfig:
    """
    Configuration for multipart uploads.

    Attributes:
        chunk_size: Part size in bytes (all parts but the last)
        max_workers: Number of parallel part uploads
        shutdown_grace_seconds: Graceful wait before pending parts are cancelled
        content_type: Object content type, set at initiate time
        metadata: User metadata, set at initiate time
        tags: Object tags, set at initiate time
        checksum: Send Content-MD5 with every part
        enforce_min_part_size: Reject chunk sizes below the store minimum
    """
    chunk_size: int = DEFAULT_CHUNK_SIZE
    max_workers: int = 4
    shutdown_grace_seconds: float = 2.0
    content_type: str = "application/octet-stream"
    metadata: Dict[str, str] = field(default_factory=dict)
    tags: Dict[str, str] = field(default_factory=dict)
    checksum: bool = False
    enforce_min_part_size: bool = True

    def __post_init__(self):
        """Validate config."""
        if self.chunk_size <= 0:
            raise ValueError("Chunk size must be positive")
        if self.enforce_min_part_size and self.chunk_size < MIN_PART_SIZE:
            raise ValueError(
                f"Chunk size {self.chunk_size} is below the minimum part size "
                f"of {MIN_PART_SIZE} bytes"
            )
        if self.max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        if self.shutdown_grace_seconds < 0:
            raise ValueError("shutdown_grace_seconds cannot be negative")


@dataclass(frozen=True)
class UploadResult:
    """
    Result of a completed multipart upload.

    Attributes:
        upload_id: Store-issued session identifier
        destination: Where the object was written
        parts: Manifest sent to the store, ordered by part number
        response: Raw completion response
    """
    upload_id: str
    destination: Destination
    parts: List[PartResult]
    response: Dict[str, Any] = field(default_factory=dict)

    @property
    def total_bytes(self) -> int:
        return sum(part.size for part in self.parts)

    @property
    def part_count(self) -> int:
        return len(self.parts)

    @property
    def etag(self) -> Optional[str]:
        """Returns the object ETag reported by the store, if any."""
        return self.response.get('ETag')


@dataclass
class UploadProgress:
    """
    Upload progress information.

    Attributes:
        submitted_parts: Parts handed to the worker pool
        completed_parts: Parts uploaded successfully
        failed_parts: Parts whose upload raised
        submitted_bytes: Bytes handed to the worker pool
        uploaded_bytes: Bytes uploaded successfully
    """
    submitted_parts: int = 0
    completed_parts: int = 0
    failed_parts: int = 0
    submitted_bytes: int = 0
    uploaded_bytes: int = 0

    @property
    def pending_parts(self) -> int:
        """Returns parts neither completed nor failed."""
        return self.submitted_parts - self.completed_parts - self.failed_parts

    @property
    def percentage(self) -> float:
        """Returns share of submitted bytes already uploaded."""
        if self.submitted_bytes == 0:
            return 0.0
        return (self.uploaded_bytes / self.submitted_bytes) * 100

    @property
    def is_complete(self) -> bool:
        """Returns True once every submitted part has a result."""
        return self.pending_parts == 0
