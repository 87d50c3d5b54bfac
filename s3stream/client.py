"""
Report upload client.

Builds named reports and streams each one to the object store
through a multipart upload.
"""
from dataclasses import replace
from typing import Dict, Iterable, List, Optional, Union

from .core.events import EventEmitter
from .core.logging import get_logger
from .core.store import ObjectStoreProtocol, S3ObjectStore, StoreConfig
from .core.upload import UploadConfig, UploadFacade, UploadResult
from .reports import OfferReport, ReportBuilder, ReportFormat

logger = get_logger('s3stream.client')


class ReportUploader:
    """
    Uploads generated reports to one bucket.

    Each report becomes the object ``<prefix><name>.<format>``.

    Example:
        >>> uploader = ReportUploader("reports-bucket")
        >>> results = uploader.upload_reports({
        ...     "offers_2024_06": [OfferReport("cid", "pid", "missing price")]
        ... })
    """

    def __init__(
        self,
        bucket: str,
        store: Optional[ObjectStoreProtocol] = None,
        config: Optional[UploadConfig] = None,
        report_format: Union[str, ReportFormat] = ReportFormat.CSV,
        prefix: str = "",
        store_config: Optional[StoreConfig] = None,
        events: Optional[EventEmitter] = None
    ):
        """
        Initialize report uploader.

        Args:
            bucket: Destination bucket
            store: Object store (an S3 store is created by default)
            config: Upload configuration
            report_format: Serialization of every report
            prefix: Key prefix, e.g. "reports/2024/"
            store_config: Client settings used when no store is given
            events: Optional emitter for upload events
        """
        if not bucket:
            raise ValueError("Destination bucket has not been set")
        self.bucket = bucket
        self.prefix = prefix
        self._builder = ReportBuilder(report_format)
        self._config = config or UploadConfig()
        self._store = store or S3ObjectStore.from_config(store_config, checksum=self._config.checksum)
        self._facade = UploadFacade(self._store, self._config, events)

    @property
    def builder(self) -> ReportBuilder:
        return self._builder

    @property
    def events(self) -> EventEmitter:
        return self._facade.events

    def upload_report(self, name: str, reports: Iterable[OfferReport]) -> UploadResult:
        """
        Build one report and upload it.

        Args:
            name: Report name (used for the object key)
            reports: Report records

        Returns:
            UploadResult of the multipart upload
        """
        key = f"{self.prefix}{self._builder.key_for(name)}"
        records: List[OfferReport] = list(reports)
        logger.info(f"Uploading report '{name}' ({len(records)} records) to s3://{self.bucket}/{key}")

        config = self._config
        if not config.content_type or config.content_type == UploadConfig.content_type:
            config = replace(config, content_type=self._builder.content_type)

        stream = self._builder.open_stream(records)
        return self._facade.upload_stream(stream, self.bucket, key, config)

    def upload_reports(self, reports: Dict[str, Iterable[OfferReport]]) -> Dict[str, UploadResult]:
        """
        Upload several named reports, one multipart session each.

        Stops at the first failed report; its session is aborted.

        Returns:
            Upload results keyed by report name
        """
        results = {}
        for name, records in reports.items():
            results[name] = self.upload_report(name, records)
        return results
