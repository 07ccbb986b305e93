"""CLI entry point: inspect signatures, replay deliveries, read aggregates."""

from __future__ import annotations

import asyncio
import json
import logging
import sys
import time
from dataclasses import replace
from pathlib import Path
from typing import Any

import click
from rich.console import Console
from rich.progress import BarColumn, MofNCompleteColumn, Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

from fundind.core.config import PipelineConfig, load_config
from fundind.core.delivery import normalize_delivery
from fundind.core.errors import DeliveryError
from fundind.core.models import Delivery
from fundind.core.use_cases import DeliveryProcessor, DeliveryResult, ProcessStats
from fundind.decoding.registries import make_launchpad_registry
from fundind.decoding.registry import EventRegistryProvider
from fundind.events import EVENT_TYPES
from fundind.storage import InMemoryDocumentStore, SQLiteDocumentStore

console = Console()
log = logging.getLogger(__name__)


@click.group()
@click.option("-c", "--config", "config_path", default=None, help="Path to config TOML file")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, verbose: bool) -> None:
    """fundind - launchpad webhook log ingestion."""
    ctx.ensure_object(dict)
    cfg = load_config(config_path)
    ctx.obj["config"] = cfg

    level = logging.DEBUG if verbose else getattr(logging, cfg.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


@cli.command("signatures")
def signatures_cmd() -> None:
    """List every event signature the pipeline decodes."""
    table = Table(title="Launchpad events")
    table.add_column("kind", style="bold")
    table.add_column("topic0", overflow="fold")
    table.add_column("audit collection")
    for topic0, spec in sorted(make_launchpad_registry().items(), key=lambda kv: kv[1].name):
        handler = EVENT_TYPES.get(spec.name)
        table.add_row(spec.name, topic0, handler.audit_collection if handler else "-")
    console.print(table)


def _load_payloads(path: Path) -> list[Any]:
    """Raw delivery payloads from a .json or .jsonl file."""
    text = path.read_text()
    if path.suffix == ".jsonl":
        return [json.loads(line) for line in text.splitlines() if line.strip()]
    raw = json.loads(text)
    return raw if isinstance(raw, list) else [raw]


@cli.command("process")
@click.argument("paths", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--db", "db_path", default=None, help="SQLite file (defaults to config db_path)")
@click.option("--dry-run", is_flag=True, help="Process into an in-memory store and discard it")
@click.option("--concurrency", type=int, default=None, help="Deliveries processed at once")
@click.pass_context
def process_cmd(
    ctx: click.Context,
    paths: tuple[Path, ...],
    db_path: str | None,
    dry_run: bool,
    concurrency: int | None,
) -> None:
    """Replay webhook deliveries stored as JSON / JSONL files."""
    cfg: PipelineConfig = ctx.obj["config"]
    if db_path:
        cfg = replace(cfg, db_path=db_path)
    if concurrency:
        cfg = replace(cfg, concurrency=concurrency)

    deliveries: list[Delivery] = []
    rejected = 0
    for path in paths:
        for raw in _load_payloads(path):
            try:
                deliveries.append(normalize_delivery(raw))
            except DeliveryError as e:
                rejected += 1
                console.print(f"[red]rejected[/] {path}: {e}")

    results = asyncio.run(_process_all(cfg, deliveries, dry_run=dry_run))

    totals = ProcessStats()
    failed = [r for r in results if not r.ok]
    for r in results:
        if r.stats is not None:
            totals.merge(r.stats)
    for r in failed:
        tag = "retryable" if r.retryable else "failed"
        console.print(f"[red]{tag}[/] {r.delivery_id}: {r.error}")

    console.print(
        f"[bold]summary[/]: deliveries={len(results)}  "
        f"logs={totals.logs}  decoded={totals.decoded}  "
        f"[green]applied[/]={totals.applied}  duplicates={totals.duplicates}  "
        f"[yellow]unknown[/]={totals.unknown}  [yellow]malformed[/]={totals.malformed}  "
        f"[red]failed deliveries[/]={len(failed) + rejected}"
    )
    if failed or rejected:
        sys.exit(1)


async def _process_all(cfg: PipelineConfig, deliveries: list[Delivery], *, dry_run: bool) -> list[DeliveryResult]:
    registry = EventRegistryProvider(make_launchpad_registry())
    progress = Progress(
        SpinnerColumn(),
        TextColumn("[bold]processing deliveries[/]"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )
    t0 = time.time()

    async def run(store: Any) -> list[DeliveryResult]:
        processor = DeliveryProcessor(store, registry, cfg)
        with progress:
            task = progress.add_task("deliveries", total=len(deliveries))
            results = await processor.process_many(deliveries, on_done=lambda _: progress.advance(task, 1))
        if dry_run:
            for name in store.collections():
                console.print(f"  {name}: {len(await store.list(name))} document(s)")
        return results

    if dry_run:
        results = await run(InMemoryDocumentStore())
    else:
        async with SQLiteDocumentStore(cfg.db_path) as store:
            results = await run(store)
    log.debug("Processed %d deliveries in %.2fs", len(deliveries), time.time() - t0)
    return results


@cli.command("show")
@click.argument("collection")
@click.argument("doc_id", required=False)
@click.option("--db", "db_path", default=None, help="SQLite file (defaults to config db_path)")
@click.pass_context
def show_cmd(ctx: click.Context, collection: str, doc_id: str | None, db_path: str | None) -> None:
    """Print one document, or list the documents of a collection."""
    cfg: PipelineConfig = ctx.obj["config"]
    path = db_path or cfg.db_path
    if not Path(path).exists():
        raise click.ClickException(f"No database at {path}")

    async def run() -> None:
        async with SQLiteDocumentStore(path) as store:
            if doc_id is not None:
                doc = await store.get(collection, doc_id)
                if doc is None:
                    raise click.ClickException(f"{collection}/{doc_id} not found")
                console.print_json(data={"id": doc.id, "version": doc.version, **doc.data})
                return
            docs = await store.list(collection)
            table = Table(title=f"{collection} ({len(docs)})")
            table.add_column("id", overflow="fold")
            table.add_column("version", justify="right")
            table.add_column("lastUpdated")
            for doc in docs:
                table.add_row(doc.id, str(doc.version), str(doc.data.get("lastUpdated", "")))
            console.print(table)

    asyncio.run(run())


if __name__ == "__main__":
    cli()
