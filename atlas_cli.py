#!/usr/bin/env python3
"""
Atlas CLI - Command-line interface for the Atlas scheduling engine

Usage:
    atlas check ride --at 2026-10-18T14:00 --data schedule.yaml [--now ISO]
                                     - Check a ride request for conflicts
    atlas brief week --data schedule.yaml
                                     - Show this week's schedule briefing
    atlas ask "what's on my agenda today" --data schedule.yaml
                                     - Route a chat message
    atlas version                    - Show version

Options:
    --json                           - Output in JSON format for scripting
    --config PATH                    - YAML file with engine overrides
    --verbose                        - Enable debug logging
"""

import asyncio
import json
from datetime import datetime
from typing import Any, Callable, Dict, Optional

import click
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from atlas import __version__
from atlas.config import ConfigError, DEFAULT_CONFIG, EngineConfig, load_config, setup_logging
from atlas.core import (
    BookingType,
    BriefingPeriod,
    CalendarAwareResult,
    ScheduleBriefing,
)
from atlas.core.timeutils import format_date, format_time, parse_datetime
from atlas.integrations import DataSourceError, InMemoryScheduleStore
from atlas.tools import CalendarAwareService


console = Console()

SEVERITY_COLORS = {
    "hard": "red",
    "soft": "yellow",
}

OUTCOME_BADGES = {
    "conflict": "[red]CONFLICT[/red]",
    "no_conflict": "[green]CLEAR[/green]",
    "check_failed": "[yellow]UNCHECKED[/yellow]",
}


# =============================================================================
# OUTPUT HELPERS
# =============================================================================

def output_json(data: Dict[str, Any]) -> None:
    """Output data as JSON."""
    click.echo(json.dumps(data, indent=2, default=str))


def create_check_panel(result: CalendarAwareResult) -> Panel:
    """Create a panel summarising a conflict check."""
    content = Text()
    content.append("Requested: ")
    content.append(f"{format_date(result.original_time)} {format_time(result.original_time)}\n", style="bold")

    if result.adjusted_time:
        content.append("Adjusted:  ")
        content.append(
            f"{format_date(result.adjusted_time)} {format_time(result.adjusted_time)}\n",
            style="bold green"
        )
    if result.explanation:
        content.append(f"\n{result.explanation}\n", style="italic")

    return Panel(
        content,
        title=f"[bold blue]Conflict Check[/bold blue] {OUTCOME_BADGES[result.outcome.value]}",
        border_style="blue",
        box=box.ROUNDED,
    )


def create_conflicts_table(result: CalendarAwareResult) -> Table:
    """Create a table of detected conflicts."""
    table = Table(
        title="Conflicts",
        box=box.SIMPLE,
        show_header=True,
        header_style="bold magenta",
    )

    table.add_column("Severity", width=8)
    table.add_column("With", style="cyan", width=24)
    table.add_column("At", style="dim", width=10)
    table.add_column("Description", style="white")

    for conflict in result.conflicts:
        severity = conflict.severity.value
        table.add_row(
            Text(severity.upper(), style=SEVERITY_COLORS.get(severity, "white")),
            conflict.conflicting_item.title,
            format_time(conflict.conflict_time),
            conflict.description,
        )

    return table


def create_briefing_table(briefing: ScheduleBriefing) -> Table:
    """Create a table of briefing items."""
    table = Table(
        title=f"{briefing.period.label}'s Schedule",
        box=box.SIMPLE,
        show_header=True,
        header_style="bold magenta",
    )

    table.add_column("Date", style="dim", width=12)
    table.add_column("Time", width=9)
    table.add_column("Type", style="cyan", width=8)
    table.add_column("Title", style="white")

    for item in briefing.items:
        table.add_row(
            format_date(item.start_time),
            format_time(item.start_time),
            item.kind.value,
            item.title,
        )

    return table


# =============================================================================
# ENGINE WIRING
# =============================================================================

def build_service(ctx: click.Context, data_path: str,
                  clock: Optional[Callable[[], datetime]] = None) -> CalendarAwareService:
    """Create a service over a YAML schedule file."""
    try:
        store = InMemoryScheduleStore.from_yaml(data_path, user_id=ctx.obj['user'], clock=clock)
    except DataSourceError as e:
        raise click.ClickException(str(e))
    return CalendarAwareService(store, config=ctx.obj['config'], clock=clock)


def parse_now(value: Optional[str]) -> Optional[Callable[[], datetime]]:
    if value is None:
        return None
    now = parse_datetime(value)
    if now is None:
        raise click.BadParameter(f"Invalid datetime: {value}", param_hint="--now")
    return lambda: now


def render_briefing(briefing: ScheduleBriefing) -> None:
    console.print()
    if briefing.items:
        console.print(create_briefing_table(briefing))
    console.print(Panel(
        Text(briefing.summary),
        title="[bold blue]Briefing[/bold blue]",
        border_style="red" if briefing.failed else "blue",
        box=box.ROUNDED,
    ))
    if briefing.gaps:
        gaps = ", ".join(
            f"{format_time(g.start)}-{format_time(g.end)} ({g.duration_minutes} min)"
            for g in briefing.gaps
        )
        console.print(f"[dim]Free time: {gaps}[/dim]")
    console.print()


# =============================================================================
# CLI GROUPS AND COMMANDS
# =============================================================================

@click.group()
@click.option('--json', 'json_output', is_flag=True, help='Output in JSON format')
@click.option('--config', 'config_path', type=click.Path(dir_okay=False), default=None,
              help='YAML file with engine overrides')
@click.option('--user', default='demo', help='User id to read the schedule for')
@click.option('--verbose', is_flag=True, help='Enable debug logging')
@click.pass_context
def cli(ctx: click.Context, json_output: bool, config_path: Optional[str],
        user: str, verbose: bool) -> None:
    """Atlas - calendar-aware scheduling for the travel concierge."""
    ctx.ensure_object(dict)
    ctx.obj['json'] = json_output
    ctx.obj['user'] = user

    if verbose:
        setup_logging("DEBUG")

    config: EngineConfig = DEFAULT_CONFIG
    if config_path:
        try:
            config = load_config(config_path)
        except ConfigError as e:
            raise click.ClickException(str(e))
    ctx.obj['config'] = config


@cli.command()
@click.argument('booking_type', type=click.Choice([t.value for t in BookingType]))
@click.option('--at', 'requested', required=True, help='Requested time (ISO 8601)')
@click.option('--destination', default=None, help='Ride destination or drop-off address')
@click.option('--data', 'data_path', required=True, type=click.Path(dir_okay=False),
              help='YAML file with bookings and events')
@click.option('--now', default=None, help='Override the current time (ISO 8601)')
@click.pass_context
def check(ctx: click.Context, booking_type: str, requested: str,
          destination: Optional[str], data_path: str, now: Optional[str]) -> None:
    """Check a requested booking time for conflicts."""
    json_output = ctx.obj.get('json', False)
    service = build_service(ctx, data_path, clock=parse_now(now))

    requested_time = parse_datetime(requested)
    if requested_time is None:
        raise click.BadParameter(f"Invalid datetime: {requested}", param_hint="--at")

    intent = {"destination": destination} if destination else None
    result = asyncio.run(service.check_calendar_conflicts(
        ctx.obj['user'], booking_type, requested_time, intent
    ))

    if json_output:
        output_json(result.to_dict())
        return

    console.print()
    console.print(create_check_panel(result))
    if result.conflicts:
        console.print(create_conflicts_table(result))
    for warning in result.warnings:
        console.print(f"[yellow]! {warning}[/yellow]")
    console.print()


@cli.command()
@click.argument('period', type=click.Choice([p.value for p in BriefingPeriod]), default='day')
@click.option('--data', 'data_path', required=True, type=click.Path(dir_okay=False),
              help='YAML file with bookings and events')
@click.option('--now', default=None, help='Override the current time (ISO 8601)')
@click.pass_context
def brief(ctx: click.Context, period: str, data_path: str, now: Optional[str]) -> None:
    """Show a schedule briefing for a period."""
    json_output = ctx.obj.get('json', False)
    service = build_service(ctx, data_path, clock=parse_now(now))

    briefing = asyncio.run(service.get_schedule_briefing(ctx.obj['user'], period))

    if json_output:
        output_json(briefing.to_dict())
        return

    render_briefing(briefing)


@cli.command()
@click.argument('message')
@click.option('--data', 'data_path', required=True, type=click.Path(dir_okay=False),
              help='YAML file with bookings and events')
@click.option('--now', default=None, help='Override the current time (ISO 8601)')
@click.pass_context
def ask(ctx: click.Context, message: str, data_path: str, now: Optional[str]) -> None:
    """Route a chat message; briefing requests get a briefing."""
    json_output = ctx.obj.get('json', False)
    service = build_service(ctx, data_path, clock=parse_now(now))

    intent = service.detect_briefing_request(message)
    if not intent.is_briefing:
        if json_output:
            output_json({"handled": False, "intent": intent.to_dict()})
        else:
            console.print("\n[dim]Not a schedule request.[/dim]\n")
        return

    briefing = asyncio.run(service.get_schedule_briefing(ctx.obj['user'], intent.period))

    if json_output:
        output_json({"handled": True, "intent": intent.to_dict(), "briefing": briefing.to_dict()})
        return

    render_briefing(briefing)


@cli.command()
@click.pass_context
def version(ctx: click.Context) -> None:
    """Show Atlas CLI version."""
    json_output = ctx.obj.get('json', False)

    version_info = {
        "name": "Atlas CLI",
        "version": __version__,
        "description": "Calendar-aware scheduling engine",
    }

    if json_output:
        output_json(version_info)
        return

    console.print()
    console.print(Panel(
        f"[bold]Name:[/bold] {version_info['name']}\n"
        f"[bold]Version:[/bold] {version_info['version']}\n"
        f"[bold]Description:[/bold] {version_info['description']}",
        title="[bold blue]Atlas[/bold blue]",
        border_style="blue",
        box=box.DOUBLE,
    ))
    console.print()


# =============================================================================
# MAIN ENTRY POINT
# =============================================================================

def main():
    """Main entry point for Atlas CLI."""
    cli(obj={})


if __name__ == '__main__':
    main()
