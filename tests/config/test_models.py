from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from region_crawler.config.models import DestinationConfig, EndpointConfig, GlobalConfig, PipelineConfig
from region_crawler.engine import HierarchyLevel


def test_global_defaults() -> None:
    config = GlobalConfig()
    assert config.endpoint.base_url == "https://sirekap-obj-data.kpu.go.id/wilayah/pemilu/ppwp/"
    assert config.pipeline.max_concurrency == 3
    assert config.pipeline.batch_size == 100
    assert config.pipeline.max_attempts == 3
    assert config.csv.encoding == "utf-8"


def test_destination_path_per_level() -> None:
    config = GlobalConfig(destinations=DestinationConfig(output_dir="/data/out"))
    assert config.destination_path(HierarchyLevel.REGION) == Path("/data/out/provinsi.csv")
    assert config.destination_path(HierarchyLevel.SUB_REGION) == Path("/data/out/kabupaten_kota.csv")
    assert config.destination_path(HierarchyLevel.DISTRICT) == Path("/data/out/kecamatan.csv")
    assert config.destination_path(HierarchyLevel.SUB_DISTRICT) == Path("/data/out/kelurahan.csv")


def test_base_url_gets_trailing_slash() -> None:
    assert EndpointConfig(base_url="https://example.test/api").base_url == "https://example.test/api/"


@pytest.mark.parametrize(
    "overrides",
    [
        {"max_concurrency": 0},
        {"batch_size": 0},
        {"max_attempts": 0},
        {"backoff_base": 0.5},
        {"backoff_unit": -1},
    ],
)
def test_pipeline_limits_validated(overrides: dict) -> None:
    with pytest.raises(ValidationError):
        PipelineConfig(**overrides)


def test_destinations_must_be_distinct() -> None:
    with pytest.raises(ValidationError):
        DestinationConfig(region="same.csv", sub_region="same.csv")


def test_endpoint_timeout_must_be_positive() -> None:
    with pytest.raises(ValidationError):
        EndpointConfig(timeout=0)
