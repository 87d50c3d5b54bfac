"""Tests for the session coordinator."""
import logging

import pytest

from s3stream.core.events import EventEmitter, SESSION_INITIATED, SESSION_COMPLETED, SESSION_ABORTED
from s3stream.core.exceptions import (
    CompleteUploadError,
    InitiateUploadError,
    MultipartUploadError,
    StoreError,
    UploadStateError,
)
from s3stream.core.upload import SessionCoordinator
from s3stream.core.upload.models import Chunk, SessionState, UploadConfig


@pytest.fixture
def coordinator(store, destination, small_config):
    """Returns a coordinator over the default fake store."""
    coordinator = SessionCoordinator(store, destination, small_config)
    yield coordinator
    coordinator.engine.shutdown()


def upload_parts(coordinator, count):
    """Submit count - 1 regular parts and one final part."""
    for _ in range(count - 1):
        coordinator.upload_part(b"0123456789")
    coordinator.upload_final_part(b"tail")


class TestInitiate:
    """Test suite for session initiation."""

    def test_initiate(self, coordinator, store, destination):
        """Test initiate stores the upload ID and starts uploading."""
        upload_id = coordinator.initiate()

        assert upload_id == "upload-1"
        assert coordinator.upload_id == "upload-1"
        assert coordinator.state is SessionState.UPLOADING
        assert coordinator.engine.is_initialized
        assert store.initiate_calls[0]['bucket'] == destination.bucket
        assert store.initiate_calls[0]['key'] == destination.key

    def test_initiate_passes_metadata_and_tags(self, store, destination):
        """Test config metadata, tags and content type reach the store."""
        config = UploadConfig(
            chunk_size=10,
            enforce_min_part_size=False,
            content_type="text/csv",
            metadata={'source': 'offers'},
            tags={'team': 'pricing'}
        )
        coordinator = SessionCoordinator(store, destination, config)
        coordinator.initiate()
        coordinator.abort("done")

        call = store.initiate_calls[0]
        assert call['content_type'] == "text/csv"
        assert call['metadata'] == {'source': 'offers'}
        assert call['tags'] == {'team': 'pricing'}

    def test_initiate_twice(self, coordinator):
        """Test a session is initiated only once."""
        coordinator.initiate()

        with pytest.raises(UploadStateError):
            coordinator.initiate()

    def test_initiate_failure(self, make_store, destination, small_config):
        """Test initiate failure leaves the session aborted and unusable."""
        cause = StoreError("create_multipart_upload failed: AccessDenied: no", error_code='AccessDenied')
        store = make_store(fail_initiate=cause)
        coordinator = SessionCoordinator(store, destination, small_config)

        with pytest.raises(InitiateUploadError) as exc_info:
            coordinator.initiate()

        assert exc_info.value.__cause__ is cause
        assert exc_info.value.error_code == 'AccessDenied'
        assert coordinator.state is SessionState.ABORTED
        assert coordinator.upload_id is None

        with pytest.raises(UploadStateError):
            coordinator.upload_part(b"x")
        assert store.part_calls == []
        assert store.abort_calls == []


class TestUploadParts:
    """Test suite for part submission through the coordinator."""

    def test_upload_before_initiate(self, coordinator, store):
        """Test parts are rejected until the session is initiated."""
        with pytest.raises(UploadStateError, match="Initial multipart upload request has not been made"):
            coordinator.upload_part(b"x")

        with pytest.raises(UploadStateError, match="Initial multipart upload request has not been made"):
            coordinator.upload_final_part(b"x")

        assert store.part_calls == []

    def test_part_numbers_returned(self, coordinator):
        """Test part numbers are assigned in submission order."""
        coordinator.initiate()

        assert coordinator.upload_part(b"a") == 1
        assert coordinator.upload_part(b"b") == 2
        assert coordinator.upload_final_part(b"c") == 3

    def test_submit_chunk_dispatches_on_flag(self, coordinator, store):
        """Test chunks are routed by their final flag."""
        coordinator.initiate()
        coordinator.submit_chunk(Chunk(index=0, data=b"a"))
        coordinator.submit_chunk(Chunk(index=1, data=b"b", is_final=True))
        coordinator.finalize_upload()

        finals = {call['part_number']: call['is_last_part'] for call in store.part_calls}
        assert finals == {1: False, 2: True}

    def test_upload_after_final_part(self, coordinator):
        """Test no part may follow the final one."""
        coordinator.initiate()
        coordinator.upload_final_part(b"x")

        with pytest.raises(UploadStateError):
            coordinator.upload_part(b"y")

    def test_upload_after_completion(self, coordinator):
        """Test completed session rejects parts."""
        coordinator.initiate()
        coordinator.upload_final_part(b"x")
        coordinator.finalize_upload()

        with pytest.raises(UploadStateError):
            coordinator.upload_part(b"y")

    def test_upload_after_abort(self, coordinator):
        """Test aborted session rejects parts."""
        coordinator.initiate()
        coordinator.abort("cancelled")

        with pytest.raises(UploadStateError):
            coordinator.upload_final_part(b"y")


class TestFinalize:
    """Test suite for finalize_upload."""

    def test_all_parts_succeed(self, coordinator, store):
        """Test complete is called once with the ordered manifest."""
        coordinator.initiate()
        upload_parts(coordinator, 3)

        result = coordinator.finalize_upload()

        assert coordinator.state is SessionState.COMPLETED
        assert len(store.complete_calls) == 1
        assert store.complete_calls[0]['parts'] == [
            (1, '"etag-1"'), (2, '"etag-2"'), (3, '"etag-3"'),
        ]
        assert [p.part_number for p in result.parts] == [1, 2, 3]
        assert result.upload_id == "upload-1"
        assert result.etag == '"final-etag"'
        assert result.total_bytes == 24
        assert store.abort_calls == []
        assert coordinator.engine.is_shut_down

    def test_manifest_sorted_when_completion_reordered(self, make_store, destination, small_config):
        """Test manifest is ascending even when parts finish out of order."""
        store = make_store(delays={1: 0.3, 2: 0.1})
        coordinator = SessionCoordinator(store, destination, small_config)
        coordinator.initiate()
        upload_parts(coordinator, 4)

        coordinator.finalize_upload()

        assert store.completion_order[0] != 1
        assert [number for number, _ in store.complete_calls[0]['parts']] == [1, 2, 3, 4]

    def test_single_final_part(self, coordinator, store):
        """Test a one-part session."""
        coordinator.initiate()
        coordinator.upload_final_part(b"only")

        result = coordinator.finalize_upload()

        assert store.complete_calls[0]['parts'] == [(1, '"etag-1"')]
        assert result.parts[0].is_final

    def test_part_failure_aborts(self, make_store, destination, small_config, transport_error):
        """Test a failed part aborts the session instead of completing it."""
        store = make_store(fail_parts={2: transport_error})
        coordinator = SessionCoordinator(store, destination, small_config)
        coordinator.initiate()
        upload_parts(coordinator, 3)

        with pytest.raises(MultipartUploadError) as exc_info:
            coordinator.finalize_upload()

        assert exc_info.value.failed_part_numbers == [2]
        assert exc_info.value.upload_id == "upload-1"
        assert "part 2" in str(exc_info.value)
        assert store.complete_calls == []
        assert store.abort_calls == [{
            'bucket': destination.bucket, 'key': destination.key, 'upload_id': "upload-1",
        }]
        assert coordinator.state is SessionState.ABORTED
        assert store.part_numbers == [1, 2, 3]

    def test_every_failure_reported(self, make_store, destination, small_config, transport_error):
        """Test all failed parts appear in the aggregate error."""
        store = make_store(fail_parts={1: transport_error, 4: ConnectionError("reset")})
        coordinator = SessionCoordinator(store, destination, small_config)
        coordinator.initiate()
        upload_parts(coordinator, 5)

        with pytest.raises(MultipartUploadError) as exc_info:
            coordinator.finalize_upload()

        assert exc_info.value.failed_part_numbers == [1, 4]
        assert isinstance(exc_info.value.failures[1].error, ConnectionError)
        assert len(store.abort_calls) == 1

    def test_complete_failure_aborts(self, make_store, destination, small_config):
        """Test store rejecting completion aborts the session."""
        cause = StoreError("complete_multipart_upload failed: InvalidPart: bad", error_code='InvalidPart')
        store = make_store(fail_complete=cause)
        coordinator = SessionCoordinator(store, destination, small_config)
        coordinator.initiate()
        upload_parts(coordinator, 2)

        with pytest.raises(CompleteUploadError) as exc_info:
            coordinator.finalize_upload()

        assert exc_info.value.error_code == 'InvalidPart'
        assert len(store.complete_calls) == 1
        assert len(store.abort_calls) == 1
        assert coordinator.state is SessionState.ABORTED

    def test_abort_failure_does_not_mask_error(self, make_store, destination, small_config, transport_error):
        """Test original part failure surfaces when abort also fails."""
        store = make_store(
            fail_parts={1: transport_error},
            fail_abort=StoreError("abort failed", error_code='NoSuchUpload')
        )
        coordinator = SessionCoordinator(store, destination, small_config)
        coordinator.initiate()
        upload_parts(coordinator, 2)

        with pytest.raises(MultipartUploadError):
            coordinator.finalize_upload()

        assert len(store.abort_calls) == 1
        assert coordinator.state is SessionState.ABORTED

    def test_finalize_before_initiate(self, coordinator, store):
        """Test finalize requires an initiated session."""
        with pytest.raises(UploadStateError):
            coordinator.finalize_upload()
        assert store.complete_calls == []

    def test_finalize_without_final_part(self, coordinator, store):
        """Test finalize refuses sessions whose last part is missing."""
        coordinator.initiate()
        coordinator.upload_part(b"a")

        with pytest.raises(UploadStateError, match="Final part"):
            coordinator.finalize_upload()

        assert coordinator.state is SessionState.UPLOADING
        assert store.complete_calls == []

    def test_finalize_twice(self, coordinator, store):
        """Test completed session cannot be finalized again."""
        coordinator.initiate()
        coordinator.upload_final_part(b"x")
        coordinator.finalize_upload()

        with pytest.raises(UploadStateError):
            coordinator.finalize_upload()
        assert len(store.complete_calls) == 1


class TestAbort:
    """Test suite for abort and context manager."""

    def test_abort_uploading_session(self, coordinator, store):
        """Test abort discards the session at the store."""
        coordinator.initiate()
        coordinator.upload_part(b"a")

        coordinator.abort(IOError("producer failed"))

        assert coordinator.state is SessionState.ABORTED
        assert len(store.abort_calls) == 1
        assert coordinator.engine.is_shut_down

    def test_abort_logs_parts_in_flight(self, make_store, destination, small_config, caplog):
        """Test abort reports how many parts were still uploading."""
        store = make_store(delays={1: 0.3, 2: 0.3})
        coordinator = SessionCoordinator(store, destination, small_config)
        coordinator.initiate()
        coordinator.upload_part(b"a")
        coordinator.upload_part(b"b")

        with caplog.at_level(logging.INFO, logger='s3stream.upload.coordinator'):
            coordinator.abort("cancelled")

        assert "2 of 2 part(s) still in flight" in caplog.text
        assert coordinator.state is SessionState.ABORTED

    def test_abort_before_initiate(self, coordinator, store):
        """Test abort without upload ID makes no store call."""
        coordinator.abort("not needed")

        assert coordinator.state is SessionState.ABORTED
        assert store.abort_calls == []

    def test_abort_is_idempotent(self, coordinator, store):
        """Test aborting twice calls the store once."""
        coordinator.initiate()
        coordinator.abort("first")
        coordinator.abort("second")

        assert len(store.abort_calls) == 1

    def test_abort_after_completion(self, coordinator, store):
        """Test completed sessions are not aborted."""
        coordinator.initiate()
        coordinator.upload_final_part(b"x")
        coordinator.finalize_upload()

        coordinator.abort("late")

        assert coordinator.state is SessionState.COMPLETED
        assert store.abort_calls == []

    def test_context_manager_aborts_on_error(self, store, destination, small_config):
        """Test leaving the block with an exception aborts the session."""
        with pytest.raises(RuntimeError):
            with SessionCoordinator(store, destination, small_config) as coordinator:
                coordinator.initiate()
                coordinator.upload_part(b"a")
                raise RuntimeError("producer crashed")

        assert coordinator.state is SessionState.ABORTED
        assert len(store.abort_calls) == 1
        assert coordinator.engine.is_shut_down

    def test_context_manager_success(self, store, destination, small_config):
        """Test clean exit leaves a completed session alone."""
        with SessionCoordinator(store, destination, small_config) as coordinator:
            coordinator.initiate()
            coordinator.upload_final_part(b"a")
            coordinator.finalize_upload()

        assert coordinator.state is SessionState.COMPLETED
        assert store.abort_calls == []


class TestSessionEvents:
    """Test suite for session events."""

    def test_completed_session_events(self, store, destination, small_config):
        """Test initiated and completed events."""
        events = EventEmitter()
        seen = []
        events.on(SESSION_INITIATED, lambda session: seen.append(('initiated', session.upload_id)))
        events.on(SESSION_COMPLETED, lambda result: seen.append(('completed', result.part_count)))

        coordinator = SessionCoordinator(store, destination, small_config, events)
        coordinator.initiate()
        upload_parts(coordinator, 2)
        coordinator.finalize_upload()

        assert seen == [('initiated', "upload-1"), ('completed', 2)]

    def test_aborted_session_event(self, make_store, destination, small_config, transport_error):
        """Test aborted event carries the reason."""
        events = EventEmitter()
        reasons = []
        events.on(SESSION_ABORTED, lambda session, reason: reasons.append(reason))

        coordinator = SessionCoordinator(
            make_store(fail_parts={1: transport_error}), destination, small_config, events
        )
        coordinator.initiate()
        coordinator.upload_final_part(b"x")
        with pytest.raises(MultipartUploadError):
            coordinator.finalize_upload()

        assert len(reasons) == 1
        assert isinstance(reasons[0], MultipartUploadError)
