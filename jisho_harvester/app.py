"""Typer CLI entrypoint for the harvester."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import typer
import yaml
from rich import box
from rich.console import Console
from rich.table import Table

from .config import ConfigRepository, HarvestConfig, StorageConfig
from .errors import HarvestError
from .infra import atomic_write, list_records
from .logging_conf import configure_logging
from .orchestrator import HarvestOrchestrator, dump_entries
from .ui import ProgressReporter

app = typer.Typer(
    help="Harvest JLPT vocabulary from jisho.org.",
    no_args_is_help=True,
    rich_markup_mode=None,
)
config_app = typer.Typer(name="config", help="Inspect the run configuration.", no_args_is_help=True)
cache_app = typer.Typer(name="cache", help="Inspect the fetch cache.", no_args_is_help=True)

# stdout carries the harvest result only
console = Console(stderr=True)


@dataclass
class AppState:
    repository: ConfigRepository
    config: HarvestConfig
    storage: StorageConfig
    verbose: bool = False


def build_state(verbose: bool, config_path: Path | None = None) -> AppState:
    repository = ConfigRepository()
    configure_logging(verbose=verbose, log_dir=repository.locator.logs_dir)
    config = repository.load_config(config_path)
    return AppState(
        repository=repository,
        config=config,
        storage=repository.storage_for(config),
        verbose=verbose,
    )


def _get_state(ctx: typer.Context) -> AppState:
    state = ctx.obj
    if state is None:
        state = build_state(verbose=False)
        ctx.obj = state
    return state


def _progress_default_enabled() -> bool:
    return console.is_terminal


app.add_typer(config_app, name="config")
app.add_typer(cache_app, name="cache")


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging.", is_flag=True),
    config_path: Optional[Path] = typer.Option(
        None, "--config", help="Read configuration from this YAML/JSON file."
    ),
) -> None:
    ctx.obj = build_state(verbose, config_path)


@app.command("run", help="Harvest every query page and print the entries as JSON.")
def run(
    ctx: typer.Context,
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Write the JSON here instead of stdout."
    ),
    progress: Optional[bool] = typer.Option(
        None, "--progress/--no-progress", help="Show a progress bar on stderr."
    ),
) -> None:
    state = _get_state(ctx)
    enabled = _progress_default_enabled() if progress is None else progress
    orchestrator = HarvestOrchestrator(
        state.config,
        storage=state.storage,
        progress=ProgressReporter(enabled=enabled, console=console),
    )
    try:
        entries = orchestrator.run()
    except HarvestError as exc:
        console.print(f"[red]Harvest aborted:[/red] {exc}")
        raise typer.Exit(code=1) from exc

    payload = dump_entries(entries)
    if output is None:
        typer.echo(payload)
        return
    output = output.resolve()
    atomic_write(output.parent, output.name, [payload.encode("utf-8")])
    console.print(f"Wrote {len(entries)} entries to {output}")


@config_app.command("show", help="Print the effective configuration as YAML.")
def config_show(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    typer.echo(
        yaml.safe_dump(state.config.model_dump(mode="json"), allow_unicode=True, sort_keys=False)
    )


@config_app.command("path", help="Show where configuration, cache and audio live.")
def config_paths(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    locator = state.repository.locator
    table = Table(title="Locations", box=box.SIMPLE)
    table.add_column("Item")
    table.add_column("Path")
    table.add_row("config", str(locator.config_path()))
    table.add_row("data", str(locator.data_dir))
    table.add_row("logs", str(locator.logs_dir))
    table.add_row("cache", str(state.storage.cache_dir))
    table.add_row("audio", str(state.storage.audio_dir))
    Console().print(table)


@cache_app.command("stats", help="Count cached records and their total size.")
def cache_stats(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    records = list_records(Path(state.storage.cache_dir))
    audio = list_records(Path(state.storage.audio_dir))
    table = Table(title="Fetch cache", box=box.SIMPLE)
    table.add_column("Store")
    table.add_column("Files", justify="right")
    table.add_column("Bytes", justify="right")
    table.add_row("cache", str(len(records)), str(sum(p.stat().st_size for p in records)))
    table.add_row("audio", str(len(audio)), str(sum(p.stat().st_size for p in audio)))
    Console().print(table)


__all__ = ["AppState", "app", "build_state"]
