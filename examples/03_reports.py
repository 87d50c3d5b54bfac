"""
Generate offer reports and upload them
"""
from s3stream import ReportUploader, OfferReport, StoreConfig


def main():
    uploader = ReportUploader(
        "reports-bucket",
        prefix="offers/2024-06-01/",
        store_config=StoreConfig(region_name="eu-west-1"),
    )

    rejected = [
        OfferReport("cust-001", "prod-42", "missing price"),
        OfferReport("cust-002", "prod-17", "currency not supported"),
    ]
    result = uploader.upload_report("rejected_offers", rejected)
    print(f"Uploaded: {result.destination}")

    # One multipart session per report
    json_uploader = ReportUploader("reports-bucket", report_format="json")
    results = json_uploader.upload_reports({
        "rejected": rejected,
        "warnings": [OfferReport("cust-003", "prod-08")],
    })
    for name, res in results.items():
        print(f"{name}: {res.destination} ({res.total_bytes:,} bytes)")


if __name__ == "__main__":
    main()
