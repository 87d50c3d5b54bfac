"""
Concurrent upload engine.

Fans parts of one multipart session out to a bounded worker pool.
Part numbers are assigned at submission time; results are collected
in completion order and must be sorted by the caller.
"""
import threading
import time
from concurrent.futures import ThreadPoolExecutor, Future, CancelledError, as_completed, wait
from dataclasses import replace
from typing import Dict, List, Optional, Tuple, TYPE_CHECKING

from ..events import EventEmitter, PART_SUBMITTED, PART_SUCCEEDED, PART_FAILED
from ..exceptions import UploadStateError, PartLimitError, PartUploadError
from ..logging import get_logger
from .models import (
    PartResult,
    PartFailure,
    SessionState,
    UploadConfig,
    UploadProgress,
    UploadSession,
    MAX_PART_NUMBER,
)
from .protocols import PartUploaderProtocol
from .services import PartUploader

if TYPE_CHECKING:
    from ..store.protocols import ObjectStoreProtocol

logger = get_logger('s3stream.upload.engine')


class ConcurrentUploadEngine:
    """
    Uploads the parts of one session with bounded parallelism.

    Submission never waits for the network: each part becomes a task on a
    thread pool of ``config.max_workers`` threads, and parts beyond pool
    capacity are queued. A failed part does not cancel the others; every
    failure is reported by await_all().

    For each part, PART_SUBMITTED is emitted before PART_SUCCEEDED or
    PART_FAILED; events of different parts may interleave.

    Example:
        >>> engine = ConcurrentUploadEngine(store, UploadConfig(max_workers=4))
        >>> engine.initialize(session)
        >>> engine.submit_part(b"...", is_final=True)
        1
        >>> results, failures = engine.await_all()
        >>> engine.shutdown()
    """

    def __init__(
        self,
        store: "ObjectStoreProtocol",
        config: Optional[UploadConfig] = None,
        events: Optional[EventEmitter] = None,
        part_uploader: Optional[PartUploaderProtocol] = None
    ):
        """
        Initialize upload engine.

        Args:
            store: Object store receiving the parts
            config: Pool size and shutdown grace period
            events: Optional emitter for part events
            part_uploader: Optional uploader replacing the default PartUploader
        """
        self._store = store
        self._config = config or UploadConfig()
        self._events = events or EventEmitter()
        self._uploader = part_uploader

        self._lock = threading.Lock()
        self._session: Optional[UploadSession] = None
        self._executor: Optional[ThreadPoolExecutor] = None
        self._last_part_number = 0
        self._handles: Dict[Future, Tuple[int, bool]] = {}
        self._final_submitted = False
        self._shut_down = False
        self._progress = UploadProgress()

    @property
    def session(self) -> Optional[UploadSession]:
        return self._session

    @property
    def events(self) -> EventEmitter:
        return self._events

    @property
    def is_initialized(self) -> bool:
        return self._session is not None

    @property
    def is_shut_down(self) -> bool:
        return self._shut_down

    @property
    def final_submitted(self) -> bool:
        """Returns True once the final part was submitted."""
        return self._final_submitted

    @property
    def submitted_count(self) -> int:
        """Returns number of parts submitted so far."""
        with self._lock:
            return self._last_part_number

    @property
    def in_flight(self) -> int:
        """Returns number of parts queued or uploading."""
        with self._lock:
            return sum(1 for future in self._handles if not future.done())

    @property
    def progress(self) -> UploadProgress:
        """Returns a snapshot of upload progress."""
        with self._lock:
            return replace(self._progress)

    def initialize(self, session: UploadSession) -> None:
        """
        Bind the engine to an initiated session and start the worker pool.

        Args:
            session: Session in UPLOADING state with an upload ID

        Raises:
            UploadStateError: If already initialized, shut down, or the
                session has not been initiated
        """
        with self._lock:
            if self._session is not None:
                raise UploadStateError("Upload engine is already initialized")
            if self._shut_down:
                raise UploadStateError("Upload engine has been shut down")
            if not session.is_active:
                raise UploadStateError(
                    f"Session for {session.destination} has not been initiated"
                )

            if self._uploader is None:
                self._uploader = PartUploader(self._store, session)
            self._session = session
            self._executor = ThreadPoolExecutor(
                max_workers=self._config.max_workers,
                thread_name_prefix="s3stream-part"
            )

        logger.debug(
            f"Upload engine initialized for {session.destination} "
            f"(upload {session.upload_id}, {self._config.max_workers} workers)"
        )

    def submit_part(self, data: bytes, is_final: bool = False) -> int:
        """
        Queue one part for upload and return its part number.

        Part numbers are assigned under a lock together with the task
        submission, so concurrent callers get distinct, contiguous numbers.

        Args:
            data: Part payload
            is_final: True for the last part of the session

        Returns:
            Assigned part number

        Raises:
            UploadStateError: If not initialized, shut down, the session is
                not uploading, or the final part was already submitted
            PartLimitError: If the part number would exceed 10000
        """
        size = len(data)
        with self._lock:
            if self._session is None:
                raise UploadStateError("Initial multipart upload request has not been made")
            if self._shut_down:
                raise UploadStateError("Upload engine has been shut down")
            if self._session.state is not SessionState.UPLOADING:
                raise UploadStateError(
                    f"Cannot submit parts to a session in state {self._session.state.value}"
                )
            if self._final_submitted:
                raise UploadStateError("Final part has already been submitted")
            if self._last_part_number >= MAX_PART_NUMBER:
                raise PartLimitError(
                    f"Session already has {MAX_PART_NUMBER} parts; increase the chunk size"
                )

            self._last_part_number += 1
            part_number = self._last_part_number
            announced = threading.Event()
            future = self._executor.submit(
                self._upload_task, part_number, data, is_final, time.time(), announced
            )
            self._handles[future] = (part_number, is_final)
            self._final_submitted = is_final
            self._progress.submitted_parts += 1
            self._progress.submitted_bytes += size

        logger.debug(f"Submitted part {part_number} ({size / 1024:.1f} KB, final={is_final})")
        try:
            self._events.emit(PART_SUBMITTED, part_number, size, is_final)
        finally:
            announced.set()
        return part_number

    def await_all(self) -> Tuple[List[PartResult], List[PartFailure]]:
        """
        Block until every submitted part has finished.

        Waits on every task even after a failure. Results come back in
        completion order, not part-number order.

        Returns:
            Tuple of (successful parts, failed parts)

        Raises:
            UploadStateError: If the engine was never initialized
        """
        with self._lock:
            if self._session is None:
                raise UploadStateError("Initial multipart upload request has not been made")
            handles = dict(self._handles)

        results: List[PartResult] = []
        failures: List[PartFailure] = []

        if handles:
            logger.info(f"Waiting for {len(handles)} part upload(s) to complete")

        for future in as_completed(handles):
            part_number, is_final = handles[future]
            try:
                results.append(future.result())
            except CancelledError as e:
                failures.append(PartFailure(part_number, e, is_final))
            except PartUploadError as e:
                failures.append(PartFailure(part_number, e.cause or e, is_final))
            except Exception as e:
                failures.append(PartFailure(part_number, e, is_final))

        if failures:
            logger.error(
                f"{len(failures)} of {len(handles)} part(s) failed: "
                f"{sorted(f.part_number for f in failures)}"
            )
        return results, failures

    def shutdown(self) -> None:
        """
        Release the worker pool.

        Two phases: wait up to ``shutdown_grace_seconds`` for outstanding
        parts, then cancel the ones still queued. Parts already running
        cannot be interrupted and finish in the background. A timeout is
        logged, never raised. Safe to call more than once.
        """
        with self._lock:
            if self._shut_down:
                return
            self._shut_down = True
            executor = self._executor
            pending = [future for future in self._handles if not future.done()]

        if executor is None:
            return

        logger.debug("Upload engine shutting down")
        executor.shutdown(wait=False)

        if pending:
            _, not_done = wait(pending, timeout=self._config.shutdown_grace_seconds)
            if not_done:
                cancelled = sum(1 for future in not_done if future.cancel())
                logger.warning(
                    f"Worker pool did not terminate within "
                    f"{self._config.shutdown_grace_seconds:.1f}s: cancelled {cancelled} queued part(s), "
                    f"{len(not_done) - cancelled} still running"
                )

    def _upload_task(
        self,
        part_number: int,
        data: bytes,
        is_final: bool,
        submitted_at: float,
        announced: threading.Event
    ) -> PartResult:
        """Upload one part (runs on a worker thread)."""
        try:
            result = self._uploader.upload(part_number, data, is_final)
        except Exception as e:
            elapsed = time.time() - submitted_at
            with self._lock:
                self._progress.failed_parts += 1
            logger.error(f"Part {part_number} failed {elapsed:.2f}s after submission: {e}")
            announced.wait()
            self._events.emit(PART_FAILED, part_number, e)
            raise

        with self._lock:
            self._progress.completed_parts += 1
            self._progress.uploaded_bytes += result.size
        announced.wait()
        self._events.emit(PART_SUCCEEDED, result)
        return result

    def __enter__(self) -> 'ConcurrentUploadEngine':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.shutdown()
