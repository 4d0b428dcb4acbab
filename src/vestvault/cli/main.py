#!/usr/bin/env python3
"""
vestvault CLI

Commands:
- preview: daily rate and releasable amounts for a hypothetical schedule
- simulate: run a YAML vesting plan against an in-memory ledger
- config show: print the effective configuration
"""

from __future__ import annotations

import json
import logging
import sys
from typing import Any

import click
from rich.console import Console
from rich.table import Table

from vestvault import metrics
from vestvault.config import load_config
from vestvault.core.release import SECONDS_PER_DAY, daily_rate
from vestvault.exceptions import VestingError
from vestvault.logging_config import setup_logging
from vestvault.simulation import load_plan, run_plan

logger = logging.getLogger(__name__)
console = Console()


def _handle_cli_error(exc: Exception, exit_code: int = 1, json_output: bool = False) -> None:
    """Centralized CLI error handler for consistent messaging/exit codes."""
    logger.debug("CLI error: %s", exc, exc_info=True)
    if json_output and isinstance(exc, VestingError):
        _emit_json(exc.to_dict())
    else:
        console.print(f"[bold red]Error:[/] {exc}", highlight=False)
    sys.exit(exit_code)


def _emit_json(payload: Any) -> None:
    click.echo(json.dumps(payload, indent=2, default=str))


@click.group()
@click.option("--config", "config_path", type=click.Path(dir_okay=False), default=None, help="YAML config file")
@click.option("--log-level", default=None, help="Override the configured log level")
@click.option("--json-output", is_flag=True, default=False, help="Emit JSON instead of tables")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, log_level: str | None, json_output: bool):
    """vestvault - token vesting engine tools."""
    overrides = {"logging.level": log_level} if log_level else {}
    try:
        config = load_config(config_path, overrides=overrides)
    except VestingError as exc:
        _handle_cli_error(exc, json_output=json_output)
    setup_logging(
        level=config.logging.level,
        log_file=config.logging.file or None,
        environment=config.environment.value,
        json_format=config.logging.json_format,
    )
    metrics.set_enabled(config.metrics.enabled)
    ctx.obj = {"config": config, "json_output": json_output}


@cli.command()
@click.option("--amount", type=int, required=True, help="Total allocation in base units")
@click.option("--duration", type=int, required=True, help="Vesting duration in seconds")
@click.option("--days", type=click.IntRange(min=0), default=10, show_default=True)
@click.pass_context
def preview(ctx: click.Context, amount: int, duration: int, days: int):
    """Show the daily rate and releasable amount per elapsed day."""
    if duration <= 0:
        _handle_cli_error(click.BadParameter("duration must be greater than zero"))
    if amount <= 0:
        _handle_cli_error(click.BadParameter("amount must be greater than zero"))

    rate = daily_rate(amount, duration)
    rows = [
        {"day": day, "elapsed_seconds": day * SECONDS_PER_DAY, "releasable": min(rate * day, amount)}
        for day in range(days + 1)
    ]

    if ctx.obj["json_output"]:
        _emit_json({"amount": amount, "duration": duration, "daily_rate": rate, "days": rows})
        return

    table = Table(title=f"Release preview (rate {rate}/day)")
    table.add_column("Day", justify="right")
    table.add_column("Releasable", justify="right")
    for row in rows:
        table.add_row(str(row["day"]), str(row["releasable"]))
    console.print(table)


@cli.command()
@click.argument("plan_path", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def simulate(ctx: click.Context, plan_path: str):
    """Run the vesting plan in PLAN_PATH and report each claim."""
    try:
        report = run_plan(load_plan(plan_path))
    except VestingError as exc:
        _handle_cli_error(exc, json_output=ctx.obj["json_output"])

    if ctx.obj["json_output"]:
        _emit_json(report.to_dict())
        return

    table = Table(title="Claims")
    table.add_column("#", justify="right")
    table.add_column("Schedule", justify="right")
    table.add_column("Day", justify="right")
    table.add_column("Outcome")
    table.add_column("Amount", justify="right")
    table.add_column("Claimed", justify="right")
    for outcome in report.outcomes:
        table.add_row(
            str(outcome.step),
            str(outcome.schedule),
            str(outcome.day),
            "[green]success[/]" if outcome.succeeded else f"[red]{outcome.outcome}[/]",
            str(outcome.amount),
            "-" if outcome.tokens_claimed is None else str(outcome.tokens_claimed),
        )
    console.print(table)
    console.print(
        f"Released {report.total_released} tokens; engine balance {report.engine_balance}",
        highlight=False,
    )


@cli.group()
def config():
    """Configuration commands."""


@config.command("show")
@click.pass_context
def config_show(ctx: click.Context):
    """Print the effective configuration."""
    cfg = ctx.obj["config"]
    if ctx.obj["json_output"]:
        _emit_json(cfg.to_dict())
        return
    for section, values in cfg.to_dict().items():
        if isinstance(values, dict):
            for key, value in values.items():
                console.print(f"{section}.{key} = {value!r}", highlight=False, markup=False)
        else:
            console.print(f"{section} = {values!r}", highlight=False, markup=False)


def main():
    cli(obj={})


if __name__ == "__main__":
    main()
