"""
Custom exceptions for multipart upload operations.

This module defines exception classes raised by the upload engine,
the session coordinator and the object-store adapter.
"""
from typing import Optional, List, TYPE_CHECKING

if TYPE_CHECKING:
    from .upload.models import PartFailure


class S3StreamException(Exception):
    """Base exception for all s3stream errors."""

    def __init__(self, message: str, error_code: Optional[str] = None) -> None:
        """
        Initialize the exception.

        Args:
            message: Error message
            error_code: Store error code (if available)
        """
        self.error_code = error_code
        super().__init__(message)


class UploadStateError(S3StreamException):
    """Exception raised when an operation is called in the wrong lifecycle phase."""
    pass


class PartLimitError(UploadStateError):
    """Exception raised when a session would exceed the maximum part number."""
    pass


class StoreError(S3StreamException):
    """Exception raised when an object-store call fails."""

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        error_code: Optional[str] = None
    ) -> None:
        """
        Initialize the exception.

        Args:
            message: Error message
            operation: Store operation that failed
            error_code: Store error code (if available)
        """
        self.operation = operation
        super().__init__(message, error_code)


class InitiateUploadError(StoreError):
    """Exception raised when a multipart session cannot be initiated."""
    pass


class CompleteUploadError(StoreError):
    """Exception raised when the store rejects the completion call."""
    pass


class PartUploadError(S3StreamException):
    """Exception raised when a single part fails to upload."""

    def __init__(
        self,
        message: str,
        part_number: int,
        cause: Optional[BaseException] = None
    ) -> None:
        """
        Initialize the exception.

        Args:
            message: Error message
            part_number: Number of the failed part
            cause: Underlying exception
        """
        self.part_number = part_number
        self.cause = cause
        super().__init__(message, getattr(cause, 'error_code', None))


class MultipartUploadError(S3StreamException):
    """
    Aggregate exception raised when one or more parts failed.

    Reports every failed part, not only the first one.
    """

    def __init__(
        self,
        failures: List["PartFailure"],
        upload_id: Optional[str] = None
    ) -> None:
        """
        Initialize the exception.

        Args:
            failures: Failed parts
            upload_id: Session the parts belonged to
        """
        self.failures = sorted(failures, key=lambda f: f.part_number)
        self.upload_id = upload_id
        details = "; ".join(
            f"part {f.part_number}: {type(f.error).__name__}: {f.error}"
            for f in self.failures
        )
        super().__init__(
            f"Multipart upload failed for {len(self.failures)} part(s): {details}"
        )

    @property
    def failed_part_numbers(self) -> List[int]:
        """Returns failed part numbers in ascending order."""
        return [f.part_number for f in self.failures]
