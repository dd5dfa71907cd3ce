"""Pipeline orchestrator walking the hierarchy level by level."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from functools import partial
from pathlib import Path
from typing import Awaitable, Callable, Iterator, Sequence

import structlog

from .config import GlobalConfig
from .engine import (
    FileMutexRegistry,
    HierarchyLevel,
    PipelineCancelled,
    RecordStore,
    ResourceFetcher,
    RetryEveryError,
    RetryExecutor,
)
from .logging_conf import level_logger
from .ui import LevelProgress, ProgressActivity


@dataclass(frozen=True, slots=True)
class LevelStrategy:
    """How one non-root level is fetched and where it is written."""

    level: HierarchyLevel
    destination: Path
    fetch: Callable[[str], Awaitable[Path | None]]

    @property
    def parent(self) -> HierarchyLevel:
        parent = self.level.parent
        if parent is None:
            raise ValueError("The root level has no parent strategy")
        return parent


class LevelSummary(Mapping):
    """Level label → persisted record count; each level is recorded once."""

    def __init__(self) -> None:
        self._counts: dict[str, int] = {}

    def record(self, level: HierarchyLevel, count: int) -> None:
        if level.label in self._counts:
            raise ValueError(f"{level.label} has already been summarised")
        self._counts[level.label] = count

    def __getitem__(self, key: str) -> int:
        return self._counts[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._counts)

    def __len__(self) -> int:
        return len(self._counts)

    @property
    def total(self) -> int:
        return sum(self._counts.values())

    def as_dict(self) -> dict[str, int]:
        return dict(self._counts)


@dataclass(slots=True)
class RunReport:
    """Outcome of one pipeline run."""

    summary: LevelSummary = field(default_factory=LevelSummary)
    processed: dict[str, int] = field(default_factory=dict)
    cancelled: bool = False
    elapsed: float = 0.0

    @property
    def completed(self) -> bool:
        return not self.cancelled and len(self.summary) == len(HierarchyLevel.ordered())


def chunked(items: Sequence[str], size: int) -> Iterator[Sequence[str]]:
    for start in range(0, len(items), size):
        yield items[start : start + size]


class PipelineOrchestrator:
    """Drive the four-level fetch-and-persist traversal.

    The root level is fetched once. Every following level reads the codes its
    parent level persisted, dispatches them in fixed-size batches under a
    global concurrency cap and finally counts what its own destination holds.
    """

    def __init__(
        self,
        config: GlobalConfig,
        *,
        fetcher: ResourceFetcher | None = None,
        store: RecordStore | None = None,
        locks: FileMutexRegistry | None = None,
        retry: RetryExecutor | None = None,
        cancel_event: asyncio.Event | None = None,
        progress_factory: Callable[[], LevelProgress] | None = None,
        activity_factory: Callable[[], ProgressActivity] | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.config = config
        self.locks = locks or FileMutexRegistry()
        self.store = store or RecordStore(self.locks, buffer_size=config.pipeline.buffer_size)
        self.cancel_event = cancel_event or asyncio.Event()
        self.logger = logger or structlog.get_logger("region_crawler").bind(component="orchestrator")
        pipeline = config.pipeline
        self.retry = retry or RetryExecutor(
            RetryEveryError(
                max_attempts=pipeline.max_attempts,
                base=pipeline.backoff_base,
                unit=pipeline.backoff_unit,
            ),
            cancel_event=self.cancel_event,
            logger=self.logger,
        )
        self._fetcher = fetcher
        self._progress_factory = progress_factory or (
            lambda: LevelProgress(enabled=config.enable_progress_bar)
        )
        self._activity_factory = activity_factory or (
            lambda: ProgressActivity(enabled=config.enable_progress_bar)
        )
        self._semaphore: asyncio.Semaphore | None = None

    # ------------------------------------------------------------------
    def cancel(self) -> None:
        self.cancel_event.set()

    def build_strategies(self, fetcher: ResourceFetcher) -> list[LevelStrategy]:
        return [
            LevelStrategy(
                level=level,
                destination=self.config.destination_path(level),
                fetch=partial(fetcher.fetch_level, level),
            )
            for level in HierarchyLevel.ordered()[1:]
        ]

    def read_parent_codes(self, destination: Path) -> list[str]:
        """Codes persisted in ``destination``, without empty or missing ones."""

        return [record.code for record in self.store.read_all(destination) if record.code]

    async def run(self) -> RunReport:
        started = time.perf_counter()
        report = RunReport()
        self._semaphore = asyncio.Semaphore(self.config.pipeline.max_concurrency)
        owns_fetcher = self._fetcher is None
        fetcher = self._fetcher or ResourceFetcher(self.config, self.store, logger=self.logger)
        try:
            if await self.process_root(fetcher, report):
                for strategy in self.build_strategies(fetcher):
                    await self.process_level(strategy, report)
        except PipelineCancelled:
            report.cancelled = True
            self.logger.warning("run_cancelled", summarised=list(report.summary))
        except Exception as exc:
            self.logger.error("run_failed", error=str(exc), error_type=type(exc).__name__)
            raise
        finally:
            report.elapsed = time.perf_counter() - started
            if owns_fetcher:
                await fetcher.aclose()
            self.logger.info(
                "run_finished",
                elapsed_seconds=round(report.elapsed, 2),
                cancelled=report.cancelled,
                summary=report.summary.as_dict(),
            )
        return report

    async def process_root(self, fetcher: ResourceFetcher, report: RunReport) -> bool:
        level = HierarchyLevel.REGION
        log = level_logger(level)
        self._check_cancelled()
        log.info("level_started")
        try:
            written = await self.retry.run(
                lambda: fetcher.fetch_level(level),
                context={"entity": level.label},
            )
        except PipelineCancelled:
            raise
        except Exception as exc:
            log.error("fetch_failed", error=str(exc), error_type=type(exc).__name__)
            raise
        if written is None:
            log.warning("level_empty")
            return False
        report.processed[level.label] = 1
        count = await self.store.count(self.config.destination_path(level))
        report.summary.record(level, count)
        log.info("level_completed", records=count)
        return True

    async def process_level(self, strategy: LevelStrategy, report: RunReport) -> int:
        log = level_logger(strategy.level)
        parent_destination = self.config.destination_path(strategy.parent)
        self._check_cancelled()
        log.info("level_started", source=str(parent_destination))

        activity = self._activity_factory()
        activity.start(f"Reading {strategy.parent.label} data...")
        try:
            codes = await asyncio.to_thread(self.read_parent_codes, parent_destination)
        finally:
            activity.close()

        processed = 0
        progress = self._progress_factory()
        progress.start(total=len(codes), label=strategy.level.label)
        try:
            for batch in chunked(codes, self.config.pipeline.batch_size):
                self._check_cancelled()
                results = await asyncio.gather(
                    *(self._dispatch(strategy, code, progress, log) for code in batch),
                    return_exceptions=True,
                )
                failures = [result for result in results if isinstance(result, BaseException)]
                processed += len(results) - len(failures)
                if failures:
                    errors = [error for error in failures if not isinstance(error, PipelineCancelled)]
                    raise (errors or failures)[0]
        finally:
            progress.close()
            report.processed[strategy.level.label] = processed
            log.info("level_processed", processed=processed, total=len(codes))

        if not codes and not strategy.destination.exists():
            log.warning("no_parent_codes", source=str(parent_destination))
            count = 0
        else:
            count = await self.store.count(strategy.destination)
        report.summary.record(strategy.level, count)
        log.info("level_completed", records=count)
        return count

    async def _dispatch(
        self,
        strategy: LevelStrategy,
        code: str,
        progress: LevelProgress,
        log: structlog.BoundLogger,
    ) -> Path | None:
        if self._semaphore is None:
            raise RuntimeError("PipelineOrchestrator.run must create the semaphore before dispatching")
        async with self._semaphore:
            self._check_cancelled()
            try:
                written = await self.retry.run(
                    lambda: strategy.fetch(code),
                    context={"entity": strategy.level.label, "code": code},
                )
            except PipelineCancelled:
                raise
            except Exception as exc:
                log.error("fetch_failed", code=code, error=str(exc), error_type=type(exc).__name__)
                raise
        progress.advance()
        return written

    def _check_cancelled(self) -> None:
        if self.cancel_event.is_set():
            raise PipelineCancelled("Cancellation requested")


__all__ = [
    "LevelStrategy",
    "LevelSummary",
    "PipelineOrchestrator",
    "RunReport",
    "chunked",
]
