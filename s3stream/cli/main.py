"""s3stream CLI - Main commands."""
import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional

import typer
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn, DownloadColumn
from rich.table import Table

app = typer.Typer(
    name="s3stream",
    help="Multipart uploads of streams and reports to S3",
    add_completion=False
)
console = Console()

MB = 1024 * 1024


def get_store(region: Optional[str], endpoint_url: Optional[str], checksum: bool):
    """Create the S3 store from options and environment."""
    from s3stream.core.store import S3ObjectStore, StoreConfig

    config = StoreConfig.from_env()
    if region:
        config.region_name = region
    if endpoint_url:
        config.endpoint_url = endpoint_url
    return S3ObjectStore.from_config(config, checksum=checksum)


def parse_pairs(values: Optional[List[str]], option: str) -> Dict[str, str]:
    """Parse repeated key=value options."""
    pairs = {}
    for value in values or []:
        key, sep, val = value.partition("=")
        if not sep or not key:
            raise typer.BadParameter(f"Expected key=value, got '{value}'", param_hint=option)
        pairs[key.strip()] = val.strip()
    return pairs


def _print_result(result) -> None:
    table = Table(show_header=True, header_style="bold")
    table.add_column("Part", justify="right")
    table.add_column("Size", justify="right")
    table.add_column("ETag")
    for part in result.parts:
        table.add_row(str(part.part_number), f"{part.size:,}", part.etag)
    console.print(table)
    console.print(f"[green]Uploaded:[/green] {result.destination}")
    console.print(f"Upload ID: {result.upload_id}")
    console.print(f"Size: {result.total_bytes:,} bytes in {result.part_count} part(s)")


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logs"),
):
    """Configure logging for every command."""
    from s3stream import setup_logging

    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(level=level, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    setup_logging(level)


@app.command()
def upload(
    source: str = typer.Argument(..., help="Local file to upload, or '-' for stdin"),
    bucket: str = typer.Option(..., "--bucket", "-b", help="Destination bucket"),
    key: str = typer.Option(None, "--key", "-k", help="Object key (defaults to file name)"),
    chunk_size_mb: int = typer.Option(10, "--chunk-size-mb", "-c", help="Part size in MB (min 5)"),
    workers: int = typer.Option(4, "--workers", "-w", help="Parallel part uploads"),
    content_type: str = typer.Option("application/octet-stream", "--content-type", help="Object content type"),
    tag: List[str] = typer.Option(None, "--tag", "-t", help="Object tag key=value (repeatable)"),
    meta: List[str] = typer.Option(None, "--meta", "-m", help="Object metadata key=value (repeatable)"),
    checksum: bool = typer.Option(False, "--checksum", help="Send Content-MD5 with every part"),
    region: str = typer.Option(None, "--region", help="AWS region"),
    endpoint_url: str = typer.Option(None, "--endpoint-url", help="S3-compatible endpoint URL"),
):
    """Upload a file or stdin with a parallel multipart upload."""
    from s3stream.core.events import PART_SUCCEEDED
    from s3stream.core.exceptions import S3StreamException
    from s3stream.core.upload import UploadConfig, UploadFacade

    from_stdin = source == "-"
    path = None if from_stdin else Path(source)
    if path is not None and not path.is_file():
        console.print(f"[red]File not found: {source}[/red]")
        raise typer.Exit(1)
    if from_stdin and not key:
        console.print("[red]--key is required when reading from stdin[/red]")
        raise typer.Exit(1)

    try:
        config = UploadConfig(
            chunk_size=chunk_size_mb * MB,
            max_workers=workers,
            content_type=content_type,
            tags=parse_pairs(tag, "--tag"),
            metadata=parse_pairs(meta, "--meta"),
            checksum=checksum,
        )
    except ValueError as e:
        console.print(f"[red]Invalid options: {e}[/red]")
        raise typer.Exit(1)

    facade = UploadFacade(get_store(region, endpoint_url, checksum), config)
    object_key = key or path.name
    total = None if from_stdin else path.stat().st_size

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        DownloadColumn(),
        console=console
    ) as progress:
        task = progress.add_task(f"Uploading {object_key}", total=total)
        facade.events.on(PART_SUCCEEDED, lambda part: progress.advance(task, part.size))

        try:
            if from_stdin:
                result = facade.upload_stream(sys.stdin.buffer, bucket, object_key)
            else:
                result = facade.upload_file(path, bucket, object_key)
        except S3StreamException as e:
            progress.stop()
            console.print(f"[red]Upload failed: {e}[/red]")
            raise typer.Exit(1)

    _print_result(result)


@app.command()
def report(
    bucket: str = typer.Option(..., "--bucket", "-b", help="Destination bucket"),
    name: str = typer.Option("offer_report", "--name", "-n", help="Report name"),
    report_format: str = typer.Option("csv", "--format", "-f", help="csv or json"),
    customer_id: str = typer.Option(..., "--customer-id", help="Customer identifier"),
    product_id: str = typer.Option(..., "--product-id", help="Product identifier"),
    error_message: str = typer.Option(None, "--error-message", "-e", help="Offer error message"),
    prefix: str = typer.Option("", "--prefix", help="Key prefix"),
    region: str = typer.Option(None, "--region", help="AWS region"),
    endpoint_url: str = typer.Option(None, "--endpoint-url", help="S3-compatible endpoint URL"),
):
    """Build an offer report and upload it."""
    from s3stream import ReportUploader, OfferReport
    from s3stream.core.exceptions import S3StreamException

    if report_format not in ("csv", "json"):
        console.print(f"[red]Unsupported format: {report_format}[/red]")
        raise typer.Exit(1)

    uploader = ReportUploader(
        bucket,
        store=get_store(region, endpoint_url, checksum=False),
        report_format=report_format,
        prefix=prefix,
    )
    records = [OfferReport(customer_id, product_id, error_message)]

    try:
        with console.status(f"Uploading report {name}..."):
            result = uploader.upload_report(name, records)
    except S3StreamException as e:
        console.print(f"[red]Report upload failed: {e}[/red]")
        raise typer.Exit(1)

    _print_result(result)


def main():
    """Entry point."""
    app()


if __name__ == "__main__":
    main()
