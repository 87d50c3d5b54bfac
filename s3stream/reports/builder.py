"""
Report builder.

Serializes report records to a byte payload the upload engine can stream.
"""
import csv
import io
import json
from enum import Enum
from typing import Iterable, Union

from .models import OfferReport


class ReportFormat(Enum):
    """Supported report serializations."""
    CSV = "csv"
    JSON = "json"

    @property
    def content_type(self) -> str:
        return {
            ReportFormat.CSV: "text/csv",
            ReportFormat.JSON: "application/json",
        }[self]

    @property
    def extension(self) -> str:
        return self.value


class ReportBuilder:
    """
    Builds offer reports as CSV or JSON.

    Example:
        >>> builder = ReportBuilder("csv")
        >>> builder.build([OfferReport("cid", "pid", "missing price")])
        b'customer_id,product_id,error_message\\r\\ncid,pid,missing price\\r\\n'
    """

    def __init__(self, report_format: Union[str, ReportFormat] = ReportFormat.CSV, encoding: str = "utf-8"):
        """
        Initialize builder.

        Args:
            report_format: Output format ("csv" or "json")
            encoding: Text encoding of the payload
        """
        self.format = ReportFormat(report_format)
        self.encoding = encoding

    @property
    def content_type(self) -> str:
        return f"{self.format.content_type}; charset={self.encoding}"

    def key_for(self, name: str) -> str:
        """Returns the object key for a report name."""
        suffix = f".{self.format.extension}"
        return name if name.endswith(suffix) else f"{name}{suffix}"

    def build(self, reports: Iterable[OfferReport]) -> bytes:
        """
        Serialize reports.

        Args:
            reports: Report records

        Returns:
            Encoded payload
        """
        if self.format is ReportFormat.JSON:
            payload = json.dumps([report.to_dict() for report in reports], ensure_ascii=False)
            return payload.encode(self.encoding)

        buffer = io.StringIO()
        writer = csv.DictWriter(buffer, fieldnames=OfferReport.FIELDS)
        writer.writeheader()
        for report in reports:
            writer.writerow(report.to_dict())
        return buffer.getvalue().encode(self.encoding)

    def open_stream(self, reports: Iterable[OfferReport]) -> io.BytesIO:
        """Returns the serialized reports as a readable binary stream."""
        return io.BytesIO(self.build(reports))
