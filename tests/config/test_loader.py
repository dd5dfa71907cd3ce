from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml

from region_crawler.config.loader import ConfigLocator, ConfigRepository
from region_crawler.config.models import GlobalConfig, PipelineConfig


def test_config_locator_uses_env_and_creates_directories(crawler_home: Path) -> None:
    locator = ConfigLocator()
    assert locator.project_root == crawler_home.resolve()
    assert locator.data_dir == crawler_home.resolve() / "data"
    assert locator.outputs_dir == crawler_home.resolve() / "data" / "outputs"
    assert locator.logs_dir == crawler_home.resolve() / "logs"
    for path in (locator.data_dir, locator.outputs_dir, locator.logs_dir):
        assert path.exists()
    assert locator.global_config_path().name == "global_config.yaml"


def test_first_load_writes_defaults(crawler_home: Path) -> None:
    repo = ConfigRepository(ConfigLocator())
    config = repo.load_global_config()
    path = repo.locator.global_config_path()
    assert path.exists()
    payload = yaml.safe_load(path.read_text(encoding="utf-8"))
    assert payload["pipeline"]["max_concurrency"] == 3
    assert payload["excluded_names"] == ["Luar Negeri"]
    assert config.destinations.output_dir == repo.locator.data_dir / "outputs"


def test_config_repository_global_roundtrip(crawler_home: Path) -> None:
    repo = ConfigRepository(ConfigLocator())
    config = GlobalConfig(pipeline=PipelineConfig(max_concurrency=5, batch_size=50), enable_progress_bar=False)
    repo.save_global_config(config)
    loaded = repo.load_global_config()
    assert loaded.pipeline == config.pipeline
    assert loaded.enable_progress_bar is False
    assert loaded is repo.load_global_config()


def test_load_explicit_json_file(tmp_path: Path) -> None:
    repo = ConfigRepository(ConfigLocator())
    path = tmp_path / "custom.json"
    path.write_text(
        json.dumps({"destinations": {"output_dir": str(tmp_path / "csv")}, "pipeline": {"batch_size": 10}}),
        encoding="utf-8",
    )
    loaded = repo.load_global_config(path)
    assert loaded.pipeline.batch_size == 10
    assert loaded.destinations.output_dir == tmp_path / "csv"


def test_load_missing_explicit_file(tmp_path: Path) -> None:
    repo = ConfigRepository(ConfigLocator())
    with pytest.raises(FileNotFoundError):
        repo.load_global_config(tmp_path / "missing.yaml")


def test_non_mapping_file_rejected(tmp_path: Path) -> None:
    repo = ConfigRepository(ConfigLocator())
    path = tmp_path / "list.yaml"
    path.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ValueError):
        repo.load_global_config(path)
