"""
Upload facade.

Provides a simplified interface for stream uploads.
Follows Facade Pattern - hides chunking, session and pool handling.
"""
import io
from pathlib import Path
from typing import Optional, Union, TYPE_CHECKING

from ..events import EventEmitter
from ..logging import get_logger
from .coordinator import SessionCoordinator
from .models import Destination, UploadConfig, UploadResult
from .protocols import ByteStreamProtocol, ChunkingStrategy
from .strategies import FixedSizeChunker

if TYPE_CHECKING:
    from ..store.protocols import ObjectStoreProtocol


class UploadFacade:
    """
    Simplified interface for multipart uploads.

    This is the main entry point for uploading streams. The source is
    read chunk by chunk while earlier parts upload in parallel.

    Example:
        >>> from s3stream.core.upload import UploadFacade
        >>> uploader = UploadFacade(store)
        >>> with open("report.csv", "rb") as f:
        ...     result = uploader.upload_stream(f, "bucket", "reports/report.csv")
        >>> print(f"Uploaded {result.part_count} parts")
    """

    def __init__(
        self,
        store: "ObjectStoreProtocol",
        config: Optional[UploadConfig] = None,
        events: Optional[EventEmitter] = None,
        chunking_strategy: Optional[ChunkingStrategy] = None
    ):
        """
        Initialize upload facade.

        Args:
            store: Object store
            config: Upload configuration shared by every upload
            events: Optional emitter receiving part and session events
            chunking_strategy: Optional custom chunking strategy
        """
        self._store = store
        self._config = config or UploadConfig()
        self._events = events or EventEmitter()
        self._chunking = chunking_strategy or FixedSizeChunker(self._config.chunk_size)
        self._logger = get_logger('s3stream.upload')

    @property
    def config(self) -> UploadConfig:
        return self._config

    @property
    def events(self) -> EventEmitter:
        return self._events

    def upload_stream(
        self,
        stream: ByteStreamProtocol,
        bucket: str,
        key: str,
        config: Optional[UploadConfig] = None
    ) -> UploadResult:
        """
        Upload a binary stream of unknown length.

        Args:
            stream: Source stream; fully drained
            bucket: Destination bucket
            key: Destination object key
            config: Optional per-upload configuration

        Returns:
            UploadResult with the ordered part manifest

        Raises:
            InitiateUploadError: If the session cannot be opened
            MultipartUploadError: If any part failed (session aborted)
            CompleteUploadError: If completion failed (session aborted)
        """
        config = config or self._config
        chunking = self._chunking
        if config is not self._config:
            chunking = FixedSizeChunker(config.chunk_size)

        coordinator = SessionCoordinator(
            self._store,
            Destination(bucket, key),
            config=config,
            events=self._events
        )
        coordinator.initiate()

        # leaving the block with an error aborts a live session
        with coordinator:
            try:
                for chunk in chunking.iter_chunks(stream):
                    coordinator.submit_chunk(chunk)
            except BaseException as e:
                self._logger.error(f"Upload to s3://{bucket}/{key} interrupted: {e}")
                raise

            return coordinator.finalize_upload()

    def upload_bytes(self, data: bytes, bucket: str, key: str, config: Optional[UploadConfig] = None) -> UploadResult:
        """Upload an in-memory payload."""
        return self.upload_stream(io.BytesIO(data), bucket, key, config)

    def upload_file(
        self,
        file_path: Union[str, Path],
        bucket: str,
        key: Optional[str] = None,
        config: Optional[UploadConfig] = None
    ) -> UploadResult:
        """
        Upload a local file.

        Args:
            file_path: Path to file to upload
            bucket: Destination bucket
            key: Object key (defaults to the file name)
            config: Optional per-upload configuration

        Raises:
            FileNotFoundError: If file doesn't exist
            ValueError: If path is not a regular file
        """
        path = Path(file_path)
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")
        if not path.is_file():
            raise ValueError(f"Path is not a file: {path}")

        with path.open('rb') as f:
            return self.upload_stream(f, bucket, key or path.name, config)
