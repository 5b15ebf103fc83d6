"""Amazon bestseller tracker: category discovery, #1 extraction and ingestion."""

__version__ = "1.0.0"
