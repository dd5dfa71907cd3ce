"""Pydantic models describing the crawler configuration."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field, field_validator, model_validator

if TYPE_CHECKING:
    from ..engine.levels import HierarchyLevel

DEFAULT_BASE_URL = "https://sirekap-obj-data.kpu.go.id/wilayah/pemilu/ppwp/"
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0 Safari/537.36"
)


class EndpointConfig(BaseModel):
    """Remote JSON source."""

    base_url: str = DEFAULT_BASE_URL
    root_path: str = "0.json"
    timeout: float = 20.0
    user_agent: str | None = DEFAULT_USER_AGENT

    @field_validator("base_url")
    @classmethod
    def _ensure_trailing_slash(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("base_url cannot be empty")
        return value if value.endswith("/") else value + "/"

    @field_validator("timeout")
    @classmethod
    def _positive_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("timeout must be > 0")
        return value


class DestinationConfig(BaseModel):
    """Where each level's records are written."""

    output_dir: Path = Field(default=Path("outputs"))
    region: str = "provinsi.csv"
    sub_region: str = "kabupaten_kota.csv"
    district: str = "kecamatan.csv"
    sub_district: str = "kelurahan.csv"

    @field_validator("output_dir", mode="before")
    @classmethod
    def _coerce_dir(cls, value: Any) -> Path:
        return Path(value)

    @model_validator(mode="after")
    def _distinct_files(self) -> "DestinationConfig":
        names = [self.region, self.sub_region, self.district, self.sub_district]
        if any(not name for name in names):
            raise ValueError("destination file names cannot be empty")
        if len(set(names)) != len(names):
            raise ValueError("each level needs its own destination file")
        return self

    def file_name(self, level: HierarchyLevel) -> str:
        return getattr(self, level.value)


class PipelineConfig(BaseModel):
    """Concurrency, batching and retry limits."""

    max_concurrency: int = 3
    batch_size: int = 100
    max_attempts: int = 3
    backoff_base: float = 2.0
    backoff_unit: float = 1.0
    write_attempts: int = 3
    write_retry_step: float = 0.5
    buffer_size: int = 8192

    @model_validator(mode="after")
    def _validate_limits(self) -> "PipelineConfig":
        for name in ("max_concurrency", "batch_size", "max_attempts", "write_attempts", "buffer_size"):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be >= 1")
        if self.backoff_base < 1:
            raise ValueError("backoff_base must be >= 1")
        if self.backoff_unit < 0 or self.write_retry_step < 0:
            raise ValueError("retry delays must be non-negative")
        return self


class CsvConfig(BaseModel):
    """Options used for every CSV append."""

    include_header: bool = True
    ignore_null_values: bool = True
    capitalize_names: bool = True
    encoding: str = "utf-8"


class GlobalConfig(BaseModel):
    """Top-level configuration."""

    endpoint: EndpointConfig = Field(default_factory=EndpointConfig)
    destinations: DestinationConfig = Field(default_factory=DestinationConfig)
    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)
    csv: CsvConfig = Field(default_factory=CsvConfig)
    excluded_names: list[str] = Field(default_factory=lambda: ["Luar Negeri"])
    enable_progress_bar: bool = True

    def destination_path(self, level: HierarchyLevel) -> Path:
        return self.destinations.output_dir / self.destinations.file_name(level)


__all__ = [
    "CsvConfig",
    "DestinationConfig",
    "EndpointConfig",
    "GlobalConfig",
    "PipelineConfig",
]
