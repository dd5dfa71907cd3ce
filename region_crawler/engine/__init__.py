"""Engine components orchestrating fetch → decode → persist."""

from .errors import (
    DestinationNotFoundError,
    InvalidCodeError,
    InvalidRowError,
    MalformedResponseError,
    NetworkError,
    PipelineCancelled,
    PipelineError,
)
from .fetcher import ResourceFetcher, endpoint_path
from .levels import HierarchyLevel
from .locks import FileMutexRegistry
from .records import RegionalRecord, decode_records
from .retry import RetryEveryError, RetryExecutor, RetryOnErrors, RetryPolicy
from .store import CsvOptions, RecordStore
from .text import capitalize_except_roman

__all__ = [
    "CsvOptions",
    "DestinationNotFoundError",
    "FileMutexRegistry",
    "HierarchyLevel",
    "InvalidCodeError",
    "InvalidRowError",
    "MalformedResponseError",
    "NetworkError",
    "PipelineCancelled",
    "PipelineError",
    "RecordStore",
    "RegionalRecord",
    "ResourceFetcher",
    "RetryEveryError",
    "RetryExecutor",
    "RetryOnErrors",
    "RetryPolicy",
    "capitalize_except_roman",
    "decode_records",
    "endpoint_path",
]
