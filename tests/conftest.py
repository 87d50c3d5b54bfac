"""Pytest fixtures for s3stream tests."""
import threading
import time
from typing import Dict, List, Optional

import pytest

from s3stream.core.exceptions import StoreError
from s3stream.core.upload.models import Destination, UploadConfig


class FakeObjectStore:
    """
    In-memory store recording every multipart call.

    Parts listed in ``fail_parts`` raise; ``delays`` (part number -> seconds)
    reorders completion.
    """

    def __init__(
        self,
        fail_parts: Optional[Dict[int, Exception]] = None,
        delays: Optional[Dict[int, float]] = None,
        fail_initiate: Optional[Exception] = None,
        fail_complete: Optional[Exception] = None,
        fail_abort: Optional[Exception] = None
    ):
        self.fail_parts = fail_parts or {}
        self.delays = delays or {}
        self.fail_initiate = fail_initiate
        self.fail_complete = fail_complete
        self.fail_abort = fail_abort

        self._lock = threading.Lock()
        self.initiate_calls: List[dict] = []
        self.part_calls: List[dict] = []
        self.completion_order: List[int] = []
        self.complete_calls: List[dict] = []
        self.abort_calls: List[dict] = []

    def initiate_multipart_upload(self, bucket, key, metadata=None, tags=None, content_type=None):
        self.initiate_calls.append({
            'bucket': bucket, 'key': key, 'metadata': metadata,
            'tags': tags, 'content_type': content_type,
        })
        if self.fail_initiate:
            raise self.fail_initiate
        return f"upload-{len(self.initiate_calls)}"

    def upload_part(self, bucket, key, upload_id, part_number, is_last_part, payload):
        with self._lock:
            self.part_calls.append({
                'upload_id': upload_id, 'part_number': part_number,
                'is_last_part': is_last_part, 'size': len(payload),
            })
        time.sleep(self.delays.get(part_number, 0))
        if part_number in self.fail_parts:
            raise self.fail_parts[part_number]
        with self._lock:
            self.completion_order.append(part_number)
        return f'"etag-{part_number}"'

    def complete_multipart_upload(self, bucket, key, upload_id, parts):
        self.complete_calls.append({
            'bucket': bucket, 'key': key, 'upload_id': upload_id,
            'parts': [(p.part_number, p.etag) for p in parts],
        })
        if self.fail_complete:
            raise self.fail_complete
        return {'ETag': '"final-etag"', 'Location': f"https://{bucket}.s3/{key}"}

    def abort_multipart_upload(self, bucket, key, upload_id):
        self.abort_calls.append({'bucket': bucket, 'key': key, 'upload_id': upload_id})
        if self.fail_abort:
            raise self.fail_abort

    @property
    def part_numbers(self) -> List[int]:
        with self._lock:
            return sorted(call['part_number'] for call in self.part_calls)


@pytest.fixture
def store():
    """Returns a store where every call succeeds."""
    return FakeObjectStore()


@pytest.fixture
def make_store():
    """Factory for stores with injected failures or delays."""
    return FakeObjectStore


@pytest.fixture
def destination():
    """Returns a sample destination."""
    return Destination("reports-bucket", "offers/report.csv")


@pytest.fixture
def small_config():
    """Upload config with tiny chunks and a short grace period."""
    return UploadConfig(
        chunk_size=10,
        max_workers=4,
        shutdown_grace_seconds=1.0,
        enforce_min_part_size=False,
    )


@pytest.fixture
def transport_error():
    """Returns a store error as raised by the S3 adapter."""
    return StoreError("upload_part failed: InternalError: boom", operation='upload_part', error_code='InternalError')
