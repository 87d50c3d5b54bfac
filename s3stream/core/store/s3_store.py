"""
S3 object store.

Implements ObjectStoreProtocol on top of a boto3 S3 client.
"""
import base64
import hashlib
from typing import Dict, Any, List, Optional
from urllib.parse import urlencode

from botocore.client import BaseClient
from botocore.exceptions import BotoCoreError, ClientError

from ..exceptions import StoreError
from ..logging import get_logger
from ..upload.models import PartResult
from .config import StoreConfig, create_s3_client


class S3ObjectStore:
    """
    Multipart-upload operations against S3 or an S3-compatible store.

    Retries are handled by botocore according to the client config;
    this class only translates calls and errors.

    Example:
        >>> store = S3ObjectStore.from_config(StoreConfig(region_name="us-east-1"))
        >>> upload_id = store.initiate_multipart_upload("bucket", "report.csv")
    """

    def __init__(self, client: BaseClient, checksum: bool = False):
        """
        Initialize store.

        Args:
            client: boto3 S3 client
            checksum: Send Content-MD5 with every part
        """
        self._client = client
        self._checksum = checksum
        self._logger = get_logger('s3stream.store')

    @classmethod
    def from_config(cls, config: Optional[StoreConfig] = None, checksum: bool = False) -> 'S3ObjectStore':
        """Create store with a new boto3 client."""
        return cls(create_s3_client(config), checksum=checksum)

    @property
    def client(self) -> BaseClient:
        return self._client

    def initiate_multipart_upload(
        self,
        bucket: str,
        key: str,
        metadata: Optional[Dict[str, str]] = None,
        tags: Optional[Dict[str, str]] = None,
        content_type: Optional[str] = None
    ) -> str:
        params: Dict[str, Any] = {'Bucket': bucket, 'Key': key}
        if content_type:
            params['ContentType'] = content_type
        if metadata:
            params['Metadata'] = dict(metadata)
        if tags:
            params['Tagging'] = urlencode(tags)

        response = self._call('create_multipart_upload', **params)
        upload_id = response.get('UploadId')
        if not upload_id:
            raise StoreError(
                f"No upload ID returned for s3://{bucket}/{key}",
                operation='create_multipart_upload'
            )
        self._logger.debug(f"Multipart upload created for s3://{bucket}/{key}: {upload_id}")
        return upload_id

    def upload_part(
        self,
        bucket: str,
        key: str,
        upload_id: str,
        part_number: int,
        is_last_part: bool,
        payload: bytes
    ) -> str:
        params: Dict[str, Any] = {
            'Bucket': bucket,
            'Key': key,
            'UploadId': upload_id,
            'PartNumber': part_number,
            'Body': payload,
            'ContentLength': len(payload),
        }
        if self._checksum:
            params['ContentMD5'] = base64.b64encode(hashlib.md5(payload).digest()).decode('ascii')

        response = self._call('upload_part', **params)
        etag = response.get('ETag')
        if not etag:
            raise StoreError(
                f"No ETag returned for part {part_number}",
                operation='upload_part'
            )
        if is_last_part:
            self._logger.debug(f"Last part {part_number} stored for upload {upload_id}")
        return etag

    def complete_multipart_upload(
        self,
        bucket: str,
        key: str,
        upload_id: str,
        parts: List[PartResult]
    ) -> Dict[str, Any]:
        response = self._call(
            'complete_multipart_upload',
            Bucket=bucket,
            Key=key,
            UploadId=upload_id,
            MultipartUpload={'Parts': [part.to_dict() for part in parts]},
        )
        response.pop('ResponseMetadata', None)
        return response

    def abort_multipart_upload(self, bucket: str, key: str, upload_id: str) -> None:
        self._call('abort_multipart_upload', Bucket=bucket, Key=key, UploadId=upload_id)

    def _call(self, operation: str, **params) -> Dict[str, Any]:
        """Invoke a client operation, translating botocore errors."""
        try:
            return getattr(self._client, operation)(**params)
        except ClientError as e:
            error = e.response.get('Error', {})
            code = error.get('Code')
            message = error.get('Message') or str(e)
            raise StoreError(f"{operation} failed: {code}: {message}", operation, code) from e
        except BotoCoreError as e:
            raise StoreError(f"{operation} failed: {e}", operation) from e
