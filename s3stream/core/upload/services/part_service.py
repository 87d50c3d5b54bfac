"""
Part upload service.

Handles uploading individual parts of a multipart session.
"""
import time
from typing import TYPE_CHECKING

from ...exceptions import PartUploadError, UploadStateError
from ...logging import get_logger
from ..models import PartResult, UploadSession, MAX_PART_NUMBER

if TYPE_CHECKING:
    from ...store.protocols import ObjectStoreProtocol


class PartUploader:
    """
    Uploads single parts of one multipart session.

    Responsibilities:
    - Validate part numbers
    - Call the store's upload-part operation
    - Wrap failures with the part number
    """

    def __init__(self, store: "ObjectStoreProtocol", session: UploadSession):
        """
        Initialize part uploader.

        Args:
            store: Object store
            session: Initiated session the parts belong to
        """
        if not session.upload_id:
            raise UploadStateError("Initial multipart upload request has not been made")
        self._store = store
        self._session = session
        self._logger = get_logger('s3stream.upload.part')

    @property
    def session(self) -> UploadSession:
        return self._session

    def upload(self, part_number: int, data: bytes, is_final: bool) -> PartResult:
        """
        Upload one part.

        Args:
            part_number: Part number (1..10000)
            data: Part payload
            is_final: True for the last part

        Returns:
            Part result with the store's ETag

        Raises:
            ValueError: If part number is out of range
            PartUploadError: If the store call fails
        """
        if not 1 <= part_number <= MAX_PART_NUMBER:
            raise ValueError(f"Part number {part_number} outside 1..{MAX_PART_NUMBER}")

        size_kb = len(data) / 1024
        self._logger.debug(f"Uploading part {part_number} ({size_kb:.1f} KB, final={is_final})")
        upload_start = time.time()

        try:
            etag = self._store.upload_part(
                self._session.bucket,
                self._session.key,
                self._session.upload_id,
                part_number,
                is_final,
                data
            )
        except Exception as e:
            upload_time = time.time() - upload_start
            self._logger.error(f"Part {part_number} upload failed after {upload_time:.2f}s: {e}")
            raise PartUploadError(
                f"Part {part_number} upload failed: {e}",
                part_number=part_number,
                cause=e
            ) from e

        upload_time = time.time() - upload_start
        speed_kbps = (size_kb / upload_time) if upload_time > 0 else 0
        self._logger.debug(f"Part {part_number} uploaded in {upload_time:.2f}s ({speed_kbps:.1f} KB/s)")
        return PartResult(part_number=part_number, etag=etag, size=len(data), is_final=is_final)
