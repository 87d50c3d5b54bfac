"""Tests for report models and builder."""
import csv
import io
import json

import pytest

from s3stream.reports import OfferReport, ReportBuilder, ReportFormat


@pytest.fixture
def reports():
    """Returns sample offer reports."""
    return [
        OfferReport("c-1", "p-1", "missing price"),
        OfferReport("c-2", "p-9", "quote, with comma"),
        OfferReport("c-3", "p-4"),
    ]


class TestOfferReport:
    """Test suite for OfferReport."""

    def test_to_dict_column_order(self):
        """Test keys follow report columns."""
        data = OfferReport("c", "p", "e").to_dict()

        assert list(data) == ['customer_id', 'product_id', 'error_message']


class TestReportBuilder:
    """Test suite for ReportBuilder."""

    def test_csv(self, reports):
        """Test CSV payload with header and quoting."""
        payload = ReportBuilder("csv").build(reports)

        rows = list(csv.reader(io.StringIO(payload.decode("utf-8"))))
        assert rows[0] == ['customer_id', 'product_id', 'error_message']
        assert rows[2] == ['c-2', 'p-9', 'quote, with comma']
        assert rows[3] == ['c-3', 'p-4', '']
        assert payload.startswith(b"customer_id,product_id,error_message\r\n")

    def test_csv_header_only(self):
        """Test empty report still has a header."""
        assert ReportBuilder().build([]) == b"customer_id,product_id,error_message\r\n"

    def test_json(self, reports):
        """Test JSON payload is a list of records."""
        payload = ReportBuilder(ReportFormat.JSON).build(reports)

        data = json.loads(payload)
        assert data[0] == {'customer_id': "c-1", 'product_id': "p-1", 'error_message': "missing price"}
        assert data[2]['error_message'] is None

    def test_non_ascii(self):
        """Test payload uses the configured encoding."""
        payload = ReportBuilder("json").build([OfferReport("c", "p", "précio inválido")])

        assert "précio inválido".encode("utf-8") in payload

    def test_unknown_format(self):
        """Test unknown format raises error."""
        with pytest.raises(ValueError):
            ReportBuilder("xml")

    def test_content_type(self):
        """Test content type includes charset."""
        assert ReportBuilder("csv").content_type == "text/csv; charset=utf-8"
        assert ReportBuilder("json").content_type == "application/json; charset=utf-8"

    @pytest.mark.parametrize("name,expected", [
        ("offers", "offers.csv"),
        ("offers.csv", "offers.csv"),
        ("2024/offers", "2024/offers.csv"),
    ])
    def test_key_for(self, name, expected):
        """Test extension is appended once."""
        assert ReportBuilder("csv").key_for(name) == expected

    def test_open_stream(self, reports):
        """Test stream yields the built payload."""
        builder = ReportBuilder()

        assert builder.open_stream(reports).read() == builder.build(reports)
