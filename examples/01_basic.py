"""
Upload a local file with a parallel multipart upload
"""
import logging

from s3stream import UploadFacade, UploadConfig, S3ObjectStore, StoreConfig, setup_logging


def main():
    logging.basicConfig(level=logging.INFO)
    setup_logging(logging.INFO)

    store = S3ObjectStore.from_config(StoreConfig.from_env())
    uploader = UploadFacade(store, UploadConfig(max_workers=8))

    # Key defaults to the file name
    result = uploader.upload_file("large_file.zip", "my-bucket")
    print(f"Uploaded: {result.destination} ({result.part_count} parts)")

    # Custom key, tags and metadata
    config = UploadConfig(
        chunk_size=16 * 1024 * 1024,
        content_type="application/zip",
        tags={'team': 'data'},
        metadata={'source': 'nightly-export'}
    )
    result = uploader.upload_file("large_file.zip", "my-bucket", "exports/2024/large_file.zip", config)
    print(f"ETag: {result.etag}")


if __name__ == "__main__":
    main()
