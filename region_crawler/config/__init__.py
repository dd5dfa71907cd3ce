"""Configuration package exports."""

from .loader import ConfigLocator, ConfigRepository
from .models import (
    CsvConfig,
    DestinationConfig,
    EndpointConfig,
    GlobalConfig,
    PipelineConfig,
)

__all__ = [
    "ConfigLocator",
    "ConfigRepository",
    "CsvConfig",
    "DestinationConfig",
    "EndpointConfig",
    "GlobalConfig",
    "PipelineConfig",
]
