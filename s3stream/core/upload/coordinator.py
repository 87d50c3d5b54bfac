"""
Session coordinator.

Drives the multipart protocol for one destination:
initiate, feed parts to the upload engine, then complete or abort.
"""
import time
from typing import Optional, Union, TYPE_CHECKING

from ..events import EventEmitter, SESSION_INITIATED, SESSION_COMPLETED, SESSION_ABORTED
from ..exceptions import (
    CompleteUploadError,
    InitiateUploadError,
    MultipartUploadError,
    UploadStateError,
)
from ..logging import get_logger
from .engine import ConcurrentUploadEngine
from .models import Chunk, Destination, SessionState, UploadConfig, UploadResult, UploadSession

if TYPE_CHECKING:
    from ..store.protocols import ObjectStoreProtocol

logger = get_logger('s3stream.upload.coordinator')


class SessionCoordinator:
    """
    Coordinates one multipart upload session.

    State machine: INITIALIZED -> UPLOADING -> COMPLETING -> COMPLETED | ABORTED.
    The worker pool is released on every path out of the session.

    Example:
        >>> coordinator = SessionCoordinator(store, Destination("bucket", "report.csv"))
        >>> coordinator.initiate()
        >>> coordinator.upload_part(first_chunk)
        >>> coordinator.upload_final_part(last_chunk)
        >>> result = coordinator.finalize_upload()
    """

    def __init__(
        self,
        store: "ObjectStoreProtocol",
        destination: Destination,
        config: Optional[UploadConfig] = None,
        events: Optional[EventEmitter] = None,
        engine: Optional[ConcurrentUploadEngine] = None
    ):
        """
        Initialize session coordinator.

        Args:
            store: Object store
            destination: Target bucket and key
            config: Upload configuration
            events: Optional emitter for session and part events
            engine: Optional engine (a new one is created by default)
        """
        self._store = store
        self._config = config or UploadConfig()
        self._events = events or EventEmitter()
        self._session = UploadSession(destination=destination)
        self._engine = engine or ConcurrentUploadEngine(store, self._config, self._events)
        self._started_at: Optional[float] = None

    @property
    def session(self) -> UploadSession:
        return self._session

    @property
    def state(self) -> SessionState:
        return self._session.state

    @property
    def upload_id(self) -> Optional[str]:
        return self._session.upload_id

    @property
    def engine(self) -> ConcurrentUploadEngine:
        return self._engine

    def initiate(self) -> str:
        """
        Open the multipart session at the store.

        Returns:
            Upload ID issued by the store

        Raises:
            UploadStateError: If the session was already initiated
            InitiateUploadError: If the store call fails; the session is
                left ABORTED and no parts can be submitted
        """
        if self._session.state is not SessionState.INITIALIZED:
            raise UploadStateError(
                f"Session for {self._session.destination} is already {self._session.state.value}"
            )

        destination = self._session.destination
        logger.info(f"Initiating multipart upload to {destination}")
        try:
            upload_id = self._store.initiate_multipart_upload(
                destination.bucket,
                destination.key,
                metadata=self._config.metadata,
                tags=self._config.tags,
                content_type=self._config.content_type
            )
        except Exception as e:
            self._session.state = SessionState.ABORTED
            self._engine.shutdown()
            logger.error(f"Failed to initiate multipart upload to {destination}: {e}")
            self._events.emit(SESSION_ABORTED, self._session, e)
            raise InitiateUploadError(
                f"Failed to initiate multipart upload to {destination}: {e}",
                operation='initiate_multipart_upload',
                error_code=getattr(e, 'error_code', None)
            ) from e

        self._session.upload_id = upload_id
        self._session.state = SessionState.UPLOADING
        self._engine.initialize(self._session)
        self._started_at = time.time()
        logger.info(f"Multipart upload initiated: {upload_id}")
        self._events.emit(SESSION_INITIATED, self._session)
        return upload_id

    def upload_part(self, data: bytes) -> int:
        """
        Submit a non-final part.

        Returns:
            Assigned part number
        """
        self._require_uploading()
        return self._engine.submit_part(data, is_final=False)

    def upload_final_part(self, data: bytes) -> int:
        """
        Submit the last part; no further parts are accepted afterwards.

        Returns:
            Assigned part number
        """
        self._require_uploading()
        return self._engine.submit_part(data, is_final=True)

    def submit_chunk(self, chunk: Chunk) -> int:
        """Submit a chunk as a regular or final part according to its flag."""
        if chunk.is_final:
            return self.upload_final_part(chunk.data)
        return self.upload_part(chunk.data)

    def finalize_upload(self) -> UploadResult:
        """
        Wait for every part, then complete the session.

        Parts are sorted by part number before the completion call. If any
        part failed, the session is aborted at the store instead.

        Returns:
            Upload result with the ordered manifest

        Raises:
            UploadStateError: If the session is not uploading or the final
                part has not been submitted
            MultipartUploadError: If one or more parts failed
            CompleteUploadError: If the store rejects the completion call
        """
        self._require_uploading()
        if not self._engine.final_submitted:
            raise UploadStateError("Final part has not been submitted")

        session = self._session
        try:
            results, failures = self._engine.await_all()
            session.state = SessionState.COMPLETING

            if failures:
                error = MultipartUploadError(failures, upload_id=session.upload_id)
                self._abort_session(error)
                raise error

            manifest = sorted(results, key=lambda part: part.part_number)
            logger.info(f"Completing multipart upload {session.upload_id} with {len(manifest)} part(s)")
            try:
                response = self._store.complete_multipart_upload(
                    session.bucket,
                    session.key,
                    session.upload_id,
                    manifest
                )
            except Exception as e:
                self._abort_session(e)
                raise CompleteUploadError(
                    f"Failed to complete multipart upload {session.upload_id}: {e}",
                    operation='complete_multipart_upload',
                    error_code=getattr(e, 'error_code', None)
                ) from e

            session.state = SessionState.COMPLETED
            result = UploadResult(
                upload_id=session.upload_id,
                destination=session.destination,
                parts=manifest,
                response=response or {}
            )
            elapsed = time.time() - self._started_at if self._started_at else 0.0
            total_mb = result.total_bytes / (1024 * 1024)
            logger.info(
                f"Upload to {session.destination} completed: {result.part_count} part(s), "
                f"{total_mb:.2f} MB in {elapsed:.2f}s"
            )
            self._events.emit(SESSION_COMPLETED, result)
            return result
        finally:
            self._engine.shutdown()

    def abort(self, reason: Optional[Union[BaseException, str]] = None) -> None:
        """
        Abort the session, e.g. when the producer fails mid-stream.

        Releases the worker pool before discarding the session at the
        store. Does nothing for sessions already COMPLETED or ABORTED.

        Args:
            reason: Why the session is aborted (for logs and events)
        """
        if self._session.state.is_terminal:
            return
        if self._session.state is SessionState.INITIALIZED:
            self._session.state = SessionState.ABORTED
            self._engine.shutdown()
            self._events.emit(SESSION_ABORTED, self._session, reason)
            return

        logger.info(
            f"Abort requested for {self._session.upload_id}: "
            f"{self._engine.in_flight} of {self._engine.submitted_count} part(s) still in flight"
        )
        self._engine.shutdown()
        self._abort_session(reason)

    def _abort_session(self, reason: Optional[Union[BaseException, str]]) -> None:
        """Abort at the store and mark the session ABORTED."""
        session = self._session
        logger.warning(f"Aborting multipart upload {session.upload_id} to {session.destination}: {reason}")
        try:
            self._store.abort_multipart_upload(session.bucket, session.key, session.upload_id)
        except Exception as e:
            # the original failure is what the caller sees
            logger.error(f"Failed to abort multipart upload {session.upload_id}: {e}")
        session.state = SessionState.ABORTED
        self._events.emit(SESSION_ABORTED, session, reason)

    def _require_uploading(self) -> None:
        state = self._session.state
        if state is SessionState.INITIALIZED:
            raise UploadStateError("Initial multipart upload request has not been made")
        if state is not SessionState.UPLOADING:
            raise UploadStateError(f"Session for {self._session.destination} is {state.value}")

    def __enter__(self) -> 'SessionCoordinator':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if exc_type is not None and not self._session.state.is_terminal:
            self.abort(exc_val)
        self._engine.shutdown()
