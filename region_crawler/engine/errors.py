"""Error kinds raised by the fetch-and-persist pipeline."""

from __future__ import annotations


class PipelineError(Exception):
    """Base class for every pipeline failure."""


class NetworkError(PipelineError):
    """Transport failure or non-success HTTP status."""

    def __init__(self, message: str, url: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class MalformedResponseError(PipelineError):
    """Response body does not decode into a list of region records."""


class InvalidCodeError(PipelineError, ValueError):
    """Parent code is too short to build the child endpoint path."""


class DestinationNotFoundError(PipelineError, FileNotFoundError):
    """A destination expected to exist is missing."""


class InvalidRowError(PipelineError, ValueError):
    """A persisted row cannot be parsed back in the strict read path."""

    def __init__(self, message: str, line_number: int, line: str) -> None:
        super().__init__(message)
        self.line_number = line_number
        self.line = line


class PipelineCancelled(PipelineError):
    """Cooperative cancellation was observed."""


__all__ = [
    "DestinationNotFoundError",
    "InvalidCodeError",
    "InvalidRowError",
    "MalformedResponseError",
    "NetworkError",
    "PipelineCancelled",
    "PipelineError",
]
