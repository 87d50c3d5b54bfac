"""
Stream data of unknown length and follow progress
"""
import gzip
import sys

from s3stream import (
    SessionCoordinator,
    Destination,
    UploadConfig,
    S3ObjectStore,
    EventEmitter,
    MultipartUploadError,
    iter_chunks,
)
from s3stream.core.events import PART_SUCCEEDED, PART_FAILED


def main():
    store = S3ObjectStore.from_config()
    config = UploadConfig(max_workers=4)

    events = EventEmitter()
    events.on(PART_SUCCEEDED, lambda part: print(f"Part {part.part_number} done ({part.size:,} bytes)"))
    events.on(PART_FAILED, lambda number, error: print(f"Part {number} failed: {error}"))

    # Drive the session by hand: any exception inside the block aborts it
    with SessionCoordinator(store, Destination("my-bucket", "logs/app.log.gz"), config, events) as session:
        session.initiate()
        with gzip.open("app.log.gz", "rb") as source:
            for chunk in iter_chunks(source, config.chunk_size):
                session.submit_chunk(chunk)

        try:
            result = session.finalize_upload()
        except MultipartUploadError as e:
            print(f"Failed parts: {e.failed_part_numbers}")
            sys.exit(1)

    print(f"Uploaded {result.total_bytes:,} bytes as {result.destination}")


if __name__ == "__main__":
    main()
