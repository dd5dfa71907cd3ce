from __future__ import annotations

import os
from pathlib import Path

import pytest

from region_crawler.engine import FileMutexRegistry, HierarchyLevel


def test_registry_returns_same_lock_per_destination(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    registry = FileMutexRegistry()
    monkeypatch.chdir(tmp_path)
    absolute = registry.get(tmp_path / "provinsi.csv")
    relative = registry.get("provinsi.csv")
    assert absolute is relative
    assert len(registry) == 1
    assert os.fspath(tmp_path / "provinsi.csv") in registry


def test_registry_separates_destinations(tmp_path: Path) -> None:
    registry = FileMutexRegistry()
    first = registry.get(tmp_path / "kecamatan.csv")
    second = registry.get(tmp_path / "kelurahan.csv")
    assert first is not second
    assert len(registry) == 2
    assert 42 not in registry


def test_hierarchy_order_and_parents() -> None:
    levels = HierarchyLevel.ordered()
    assert levels == [
        HierarchyLevel.REGION,
        HierarchyLevel.SUB_REGION,
        HierarchyLevel.DISTRICT,
        HierarchyLevel.SUB_DISTRICT,
    ]
    assert HierarchyLevel.REGION.parent is None
    assert HierarchyLevel.SUB_DISTRICT.parent is HierarchyLevel.DISTRICT
    assert HierarchyLevel.SUB_DISTRICT.child is None
    assert HierarchyLevel.REGION.child is HierarchyLevel.SUB_REGION
    assert [level.label for level in levels] == ["Provinsi", "Kabupaten/Kota", "Kecamatan", "Kelurahan"]
