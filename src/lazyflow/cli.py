"""Lazyflow CLI - inspect the scheduling and ranking engine."""

import json
import logging
import sys
from datetime import date, datetime

import click

from .adapters.file_feedback import FileFeedbackStore
from .adapters.json_files import JsonFileRepository
from .config import load_config
from .core.conflicts import ConflictRecord
from .core.ordering import repair
from .core.recurrence import (
    RecurrenceRule,
    calculate_intraday_times,
    describe,
    next_occurrence,
    to_coarse_recurrence,
)
from .workflows import build_signal_context, find_conflicts, load_completion_patterns


def _parse_rule(rule_json: str) -> RecurrenceRule:
    """Parse RULE_JSON, exiting with an error message when it is not a valid rule."""
    try:
        return RecurrenceRule.from_dict(json.loads(rule_json))
    except (KeyError, ValueError) as e:
        click.echo(f"Error: invalid rule: {e}", err=True)
        sys.exit(1)


@click.group()
@click.version_option()
@click.option("--debug", is_flag=True, help="Enable debug logging")
def main(debug: bool):
    """Lazyflow - scheduling and ranking engine CLI."""
    if debug:
        logging.basicConfig(
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            level=logging.DEBUG,
        )


@main.command("next")
@click.argument("rule_json")
@click.option("--from", "from_", default=None, help="Start instant (ISO 8601), defaults to now")
@click.option("-n", "count", default=1, show_default=True, help="Number of occurrences")
def next_cmd(rule_json: str, from_: str | None, count: int):
    """Show the next occurrences of a recurrence rule."""
    config = load_config()
    tz = config.zone()
    rule = _parse_rule(rule_json)
    try:
        current = datetime.fromisoformat(from_) if from_ else datetime.now(tz)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(describe(rule))
    for _ in range(count):
        current = next_occurrence(rule, current, tz)
        if current is None:
            click.echo("(series ended)")
            return
        click.echo(f"  {current:%a %Y-%m-%d %H:%M}")


@main.command()
@click.argument("rule_json")
@click.option("--date", "-d", "target_date", default=None, help="Day (YYYY-MM-DD), defaults to today")
def day(rule_json: str, target_date: str | None):
    """Show all of one day's times for an intraday rule."""
    config = load_config()
    rule = _parse_rule(rule_json)
    try:
        target = date.fromisoformat(target_date) if target_date else date.today()
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    times = calculate_intraday_times(rule, target, config.zone())
    if not times:
        click.echo(f"{describe(rule)} does not repeat within a day.")
        return
    click.echo(", ".join(f"{t:%H:%M}" for t in times))


@main.command()
@click.argument("rule_json")
def export(rule_json: str):
    """Show the calendar RRULE for a recurrence rule."""
    coarse = to_coarse_recurrence(_parse_rule(rule_json))
    if coarse is None:
        click.echo("Intraday rules cannot be exported to external calendars.")
        return
    click.echo(coarse.to_rrule())


def _conflict_json(c: ConflictRecord) -> dict:
    return {
        "task": c.task.id,
        "title": c.task.title,
        "type": c.type.value,
        "severity": c.severity.name.lower(),
        "conflict_time": c.conflict_time.isoformat(),
        "overlap_minutes": int(c.overlap_duration.total_seconds() // 60),
        "description": c.description(),
    }


@main.command()
@click.option("--tasks", "tasks_file", required=True, type=click.Path(exists=True), help="Tasks JSON file")
@click.option("--events", "events_file", required=True, type=click.Path(exists=True), help="Events JSON file")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def conflicts(tasks_file: str, events_file: str, as_json: bool):
    """List conflicts between tasks and calendar events for the next day."""
    config = load_config()
    repo = JsonFileRepository(tasks_file, events_file, config.zone())
    try:
        found = find_conflicts(repo, repo, config, datetime.now(config.zone()))
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if as_json:
        click.echo(json.dumps([_conflict_json(c) for c in found], indent=2))
        return

    if not found:
        click.echo("No conflicts.")
        return

    for c in found:
        click.echo(f"[{c.severity.display_name:6}] {c.task.title}: {c.description()} ({c.format_overlap()})")


@main.command()
def signals():
    """Show the behavioral digest sent to the suggestion model."""
    config = load_config()
    store = FileFeedbackStore(config.feedback_path())
    text = build_signal_context(store, load_completion_patterns(config), config)
    click.echo(text or f"Not enough feedback yet ({len(store.events())} events).")


@main.command(context_settings={"ignore_unknown_options": True})
@click.argument("n", type=int)
@click.argument("values", nargs=-1, type=int)
@click.option("--max-displacement", "-m", type=int, default=None, help="Override configured bound")
def reorder(n: int, values: tuple[int, ...], max_displacement: int | None):
    """Repair a proposed ordering of N items."""
    if n < 1:
        click.echo("Error: N must be at least 1", err=True)
        sys.exit(1)
    if max_displacement is not None and max_displacement < 0:
        click.echo("Error: --max-displacement must not be negative", err=True)
        sys.exit(1)
    config = load_config()
    bound = config.max_displacement if max_displacement is None else max_displacement
    click.echo(" ".join(str(v) for v in repair(values, n, bound)))
