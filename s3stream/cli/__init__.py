"""s3stream command line interface."""
