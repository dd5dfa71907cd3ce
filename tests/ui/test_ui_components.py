from __future__ import annotations

import pytest

from region_crawler.ui import LevelProgress, ProgressActivity


def test_level_progress_counts_when_disabled() -> None:
    progress = LevelProgress(enabled=False)
    progress.start(total=3, label="Kecamatan")
    progress.advance()
    progress.advance(2)
    progress.close()
    assert progress.processed == 3
    assert progress.label == "Kecamatan"


def test_level_progress_requires_start() -> None:
    progress = LevelProgress(enabled=False)
    with pytest.raises(RuntimeError):
        progress.advance()


def test_activity_noop_when_disabled() -> None:
    activity = ProgressActivity(enabled=False)
    activity.start("Reading Provinsi data...")
    activity.close()
