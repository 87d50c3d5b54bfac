"""
Protocol definitions for the object-store collaborator.

The upload engine depends only on this interface; transport,
authentication and retries belong to the implementation.
"""
from typing import Protocol, Dict, Any, List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from ..upload.models import PartResult


class ObjectStoreProtocol(Protocol):
    """Protocol for stores exposing the multipart-upload operations."""

    def initiate_multipart_upload(
        self,
        bucket: str,
        key: str,
        metadata: Optional[Dict[str, str]] = None,
        tags: Optional[Dict[str, str]] = None,
        content_type: Optional[str] = None
    ) -> str:
        """
        Open a multipart session.

        Args:
            bucket: Destination bucket
            key: Destination object key
            metadata: User metadata attached to the object
            tags: Object tags
            content_type: Object content type

        Returns:
            Upload ID issued by the store
        """
        ...

    def upload_part(
        self,
        bucket: str,
        key: str,
        upload_id: str,
        part_number: int,
        is_last_part: bool,
        payload: bytes
    ) -> str:
        """
        Upload one part.

        Returns:
            Integrity tag (ETag) of the stored part
        """
        ...

    def complete_multipart_upload(
        self,
        bucket: str,
        key: str,
        upload_id: str,
        parts: List["PartResult"]
    ) -> Dict[str, Any]:
        """
        Stitch the uploaded parts into the final object.

        Args:
            parts: Manifest ordered by part number

        Returns:
            Store response
        """
        ...

    def abort_multipart_upload(self, bucket: str, key: str, upload_id: str) -> None:
        """Discard the session and every part uploaded to it."""
        ...
