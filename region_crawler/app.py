"""Typer CLI entrypoint for Region-Crawler."""

from __future__ import annotations

import asyncio
import signal
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import typer
import yaml
from rich import box
from rich.console import Console
from rich.table import Table

from .config import ConfigRepository, GlobalConfig
from .engine import DestinationNotFoundError, FileMutexRegistry, HierarchyLevel, RecordStore
from .logging_conf import configure_logging, default_log_dir, tail_log
from .orchestrator import PipelineOrchestrator, RunReport

app = typer.Typer(
    help="Region-Crawler command line tool",
    no_args_is_help=True,
    rich_markup_mode=None,
)
config_app = typer.Typer(
    name="config",
    help="Configuration commands",
    no_args_is_help=True,
    rich_markup_mode=None,
)
log_app = typer.Typer(
    name="log",
    help="Log viewing commands",
    no_args_is_help=True,
    rich_markup_mode=None,
)

console = Console()

EXIT_FAILURE = 1
EXIT_INCOMPLETE = 3
EXIT_CANCELLED = 130


@dataclass
class AppState:
    repository: ConfigRepository
    verbose: bool = False


def build_state(verbose: bool) -> AppState:
    repository = ConfigRepository()
    configure_logging(verbose=verbose, log_dir=repository.locator.logs_dir)
    return AppState(repository=repository, verbose=verbose)


def _get_state(ctx: typer.Context) -> AppState:
    state = ctx.obj
    if state is None:
        state = build_state(verbose=False)
        ctx.obj = state
    return state


def _apply_overrides(
    config: GlobalConfig,
    output_dir: Optional[Path],
    concurrency: Optional[int],
    batch_size: Optional[int],
    max_attempts: Optional[int],
    no_progress: bool,
) -> GlobalConfig:
    pipeline_updates = {
        key: value
        for key, value in (
            ("max_concurrency", concurrency),
            ("batch_size", batch_size),
            ("max_attempts", max_attempts),
        )
        if value is not None
    }
    payload = config.model_dump()
    payload["pipeline"].update(pipeline_updates)
    if output_dir is not None:
        payload["destinations"]["output_dir"] = output_dir.expanduser().resolve()
    if no_progress:
        payload["enable_progress_bar"] = False
    try:
        return GlobalConfig.model_validate(payload)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


def render_summary(counts: dict[str, int | None], title: str = "Run summary") -> Table:
    table = Table(title=title, box=box.SIMPLE_HEAD)
    table.add_column("Level", style="cyan", no_wrap=True)
    table.add_column("Records", style="green", justify="right")
    total = 0
    for label, count in counts.items():
        table.add_row(label, "-" if count is None else f"{count:,}")
        total += count or 0
    table.add_section()
    table.add_row("Total", f"{total:,}", style="bold")
    return table


async def _run_pipeline(orchestrator: PipelineOrchestrator) -> RunReport:
    loop = asyncio.get_running_loop()
    installed: list[signal.Signals] = []
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, orchestrator.cancel)
            installed.append(sig)
        except (NotImplementedError, RuntimeError, ValueError):
            continue
    try:
        return await orchestrator.run()
    finally:
        for sig in installed:
            loop.remove_signal_handler(sig)


app.add_typer(config_app, name="config", help="Show or initialise the configuration file")
app.add_typer(log_app, name="log", help="Inspect log files")


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging", is_flag=True),
) -> None:
    ctx.obj = build_state(verbose)


@app.command("run", help="Fetch every hierarchy level and append it to the CSV destinations.")
def run(
    ctx: typer.Context,
    config_path: Optional[Path] = typer.Option(None, "--config", help="Alternative YAML/JSON config file."),
    output_dir: Optional[Path] = typer.Option(None, "--output-dir", help="Directory for the CSV files."),
    concurrency: Optional[int] = typer.Option(None, "--concurrency", help="Maximum in-flight fetches."),
    batch_size: Optional[int] = typer.Option(None, "--batch-size", help="Codes dispatched per batch."),
    max_attempts: Optional[int] = typer.Option(None, "--max-attempts", help="Attempts per fetch."),
    no_progress: bool = typer.Option(False, "--no-progress", help="Disable progress bars.", is_flag=True),
) -> None:
    state = _get_state(ctx)
    try:
        config = state.repository.load_global_config(config_path)
    except FileNotFoundError as exc:
        console.print(str(exc), style="red")
        raise typer.Exit(code=EXIT_FAILURE)
    config = _apply_overrides(config, output_dir, concurrency, batch_size, max_attempts, no_progress)
    orchestrator = PipelineOrchestrator(config)
    try:
        report = asyncio.run(_run_pipeline(orchestrator))
    except Exception as exc:  # noqa: BLE001
        console.print(f"Run aborted: {type(exc).__name__}: {exc}", style="red")
        raise typer.Exit(code=EXIT_FAILURE)

    console.print(render_summary(report.summary.as_dict()))
    console.print(f"Total time: {report.elapsed:.2f} seconds", style="dim")
    if report.cancelled:
        console.print("Run cancelled before all levels completed.", style="yellow")
        raise typer.Exit(code=EXIT_CANCELLED)
    if not report.completed:
        console.print("Run stopped early: the root level returned no records.", style="yellow")
        raise typer.Exit(code=EXIT_INCOMPLETE)


@app.command("summary", help="Count the records already stored for each level.")
def summary(
    ctx: typer.Context,
    config_path: Optional[Path] = typer.Option(None, "--config", help="Alternative YAML/JSON config file."),
) -> None:
    state = _get_state(ctx)
    config = state.repository.load_global_config(config_path)
    store = RecordStore(FileMutexRegistry(), buffer_size=config.pipeline.buffer_size)

    async def _collect() -> dict[str, int | None]:
        counts: dict[str, int | None] = {}
        for level in HierarchyLevel.ordered():
            try:
                counts[level.label] = await store.count(config.destination_path(level))
            except DestinationNotFoundError:
                counts[level.label] = None
        return counts

    console.print(render_summary(asyncio.run(_collect()), title="Stored records"))


@config_app.command("show", help="Print the active configuration as YAML.")
def config_show(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    config = state.repository.load_global_config()
    console.print(f"# {state.repository.locator.global_config_path()}", style="dim")
    console.print(
        yaml.safe_dump(config.model_dump(mode="json"), allow_unicode=True, sort_keys=False),
        markup=False,
    )


@config_app.command("init", help="Write a default configuration file.")
def config_init(
    ctx: typer.Context,
    force: bool = typer.Option(False, "--force", help="Overwrite an existing file.", is_flag=True),
) -> None:
    state = _get_state(ctx)
    path = state.repository.locator.global_config_path()
    if path.exists() and not force:
        console.print(f"Configuration already exists at {path}; use --force to overwrite.", style="yellow")
        raise typer.Exit(code=EXIT_FAILURE)
    state.repository.save_global_config(GlobalConfig())
    console.print(f"Default configuration written to {path}.", style="green")


@log_app.command("show", help="Print the last lines of the application log.")
def log_show(
    ctx: typer.Context,
    lines: int = typer.Option(50, "--lines", "-n", help="Number of lines to show."),
    errors: bool = typer.Option(False, "--errors", help="Show the error log instead.", is_flag=True),
) -> None:
    state = _get_state(ctx)
    log_dir = state.repository.locator.logs_dir or default_log_dir()
    path = log_dir / ("error.log" if errors else "crawler.log")
    content = tail_log(path, lines)
    if not content:
        console.print(f"No log entries in {path}.", style="dim")
        return
    for line in content:
        console.print(line.rstrip("\n"), markup=False, highlight=False)


if __name__ == "__main__":  # pragma: no cover
    app()
