"""Region-Crawler: concurrent ingestion of the administrative region hierarchy."""

__version__ = "0.1.0"
