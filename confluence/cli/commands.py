"""Click CLI commands for the confluence engine."""

from __future__ import annotations

import csv
import json
from pathlib import Path

import click

from confluence.config import AppConfig
from confluence.service import AnalysisService
from confluence.types import Candle, Resolution
from confluence.utils.logging import setup_logging
from confluence.utils.time import format_ms

_CSV_COLUMNS = ("timestamp", "open", "high", "low", "close", "volume")


@click.group()
def cli() -> None:
    """Confluence: multi-timeframe trend/momentum/entry scoring."""


def load_bars_csv(path: Path) -> list[Candle]:
    """Read closed 1-min bars from a CSV with a header row.

    Required columns: timestamp (epoch ms), open, high, low, close, volume.
    """
    with path.open(newline="", encoding="utf-8") as fh:
        reader = csv.DictReader(fh)
        missing = [c for c in _CSV_COLUMNS if c not in (reader.fieldnames or [])]
        if missing:
            raise click.ClickException(
                f"{path} is missing columns: {', '.join(missing)}"
            )
        bars: list[Candle] = []
        for line_no, row in enumerate(reader, start=2):
            try:
                bars.append(
                    Candle(
                        timestamp=int(row["timestamp"]),
                        open=float(row["open"]),
                        high=float(row["high"]),
                        low=float(row["low"]),
                        close=float(row["close"]),
                        volume=float(row["volume"]),
                    )
                )
            except ValueError as e:
                raise click.ClickException(f"{path}:{line_no}: {e}") from e
    return bars


@cli.command()
@click.argument(
    "csv_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option("--pair", required=True, help="Instrument name (e.g. btcusdt).")
@click.option("--as-json", is_flag=True, help="Print the analysis as JSON.")
def replay(csv_path: Path, pair: str, as_json: bool) -> None:
    """Replay 1-min bars from CSV_PATH and print the resulting analysis."""
    cfg = AppConfig()
    setup_logging(level=cfg.log_level, log_format=cfg.log_format)

    service = AnalysisService(config=cfg.scoring)
    bars = load_bars_csv(csv_path)
    for bar in sorted(bars, key=lambda b: b.timestamp):
        service.on_bar(pair, bar)

    click.echo(f"Replayed {len(bars)} bars for {pair.upper()}")
    for res in Resolution:
        click.echo(f"  {res.name:<4} candles: {service.buffer_size(pair, res)}")
    click.echo(f"  Stale drops: {service.aggregator.stale_drops}")

    result = service.analyze(pair)
    if result is None:
        click.echo("\nNot enough history yet.")
        return

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    click.echo(f"\n{result.pair}: {result.recommendation.value}")
    click.echo(f"  Last Price:   {result.last_price:,.6f}")
    click.echo(f"  Bullish:      {result.prob_bull:.1f}%")
    click.echo(f"  Bearish:      {result.prob_bear:.1f}%")
    click.echo(f"  Take Profit:  {result.take_profit:,.6f}")
    click.echo(f"  Stop Loss:    {result.stop_loss:,.6f}")
    click.echo(f"  Insight:      {result.insight}")
    click.echo(f"  Computed At:  {format_ms(result.computed_at_ms)}")


@cli.command()
def config() -> None:
    """Show current configuration."""
    cfg = AppConfig()

    click.echo("=== Confluence Configuration ===\n")

    click.echo(f"Log Level:    {cfg.log_level}")
    click.echo(f"Log Format:   {cfg.log_format}")
    click.echo("")

    click.echo("[Scoring]")
    click.echo(f"  Max Workers: {cfg.scoring.max_workers}")
    click.echo("")

    click.echo("[Web]")
    click.echo(f"  Address:     {cfg.web.host}:{cfg.web.port}")
    click.echo("")

    click.echo("[Buffers]")
    for res in Resolution:
        minutes = res.interval_ms // 60_000
        click.echo(f"  {res.name:<4} {minutes:>4} min x {res.capacity}")
    click.echo("")

    click.echo(f"Pairs:        {', '.join(cfg.pairs)}")
