"""Matching and deduplication commands."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import typer
from rich.progress import Progress
from rich.table import Table

from ..deduplication import Deduplicator
from ..exceptions import RecordLinkError
from ..index import create_index
from ..io import groups_payload, load_records, match_payload
from ..matching import Matcher
from ..similarity import build_registry
from ..stores import SequenceStore
from ..utils import log_timing, logging_context, serialize_json
from .common import CLIError, console, get_state, resolve_path

_COMPARE_FLAGS = {"fuzzy", "name"}


def _parse_weight(raw: str, rule: str) -> float:
    try:
        return float(raw)
    except ValueError as exc:
        raise typer.BadParameter(f"Weight in '{rule}' must be a number") from exc


def parse_join_rule(rule: str) -> Tuple[str, str, float]:
    """Parse ``LEFT:RIGHT[:WEIGHT]``."""

    parts = rule.split(":")
    if len(parts) not in (2, 3) or not all(parts[:2]):
        raise typer.BadParameter(f"Join rules must look like left:right[:weight], got '{rule}'")
    weight = _parse_weight(parts[2], rule) if len(parts) == 3 else 1.0
    return parts[0], parts[1], weight


def parse_compare_rule(rule: str) -> Tuple[str, str, float, bool, Dict[str, Any]]:
    """Parse ``LEFT:RIGHT[:WEIGHT][:fuzzy][:name][:option=value]``.

    ``name`` selects name-aware string comparison and implies ``fuzzy``.
    """

    parts = rule.split(":")
    if len(parts) < 2 or not all(parts[:2]):
        raise typer.BadParameter(f"Compare rules must look like left:right[:weight][:fuzzy], got '{rule}'")
    left_attr, right_attr, rest = parts[0], parts[1], parts[2:]
    weight = 1.0
    if rest and rest[0] not in _COMPARE_FLAGS and "=" not in rest[0]:
        weight = _parse_weight(rest.pop(0), rule)

    fuzzy = False
    options: Dict[str, Any] = {}
    for token in rest:
        if token == "fuzzy":
            fuzzy = True
        elif token == "name":
            fuzzy = True
            options["comparison"] = "name"
        elif "=" in token:
            key, value = token.split("=", 1)
            try:
                options[key] = json.loads(value)
            except json.JSONDecodeError:
                options[key] = value
        else:
            raise typer.BadParameter(f"Unknown compare flag '{token}' in '{rule}'")
    return left_attr, right_attr, weight, fuzzy, options


def _load(path: str) -> List[Dict[str, Any]]:
    source = resolve_path(path)
    try:
        with log_timing(f"load:{source.name}") as counters:
            records = load_records(source)
            counters["records"] = len(records)
            return records
    except ValueError as exc:
        raise CLIError(str(exc)) from exc


def match_command(
    ctx: typer.Context,
    left: str = typer.Argument(..., help="Left record file (.csv, .jsonl, or .json)."),
    right: str = typer.Argument(..., help="Right record file (.csv, .jsonl, or .json)."),
    join: List[str] = typer.Option(  # noqa: B008 - Typer signature
        [],
        "--join",
        "-j",
        metavar="LEFT:RIGHT[:WEIGHT]",
        help="Join rule used to find candidates (repeatable).",
    ),
    compare: List[str] = typer.Option(  # noqa: B008 - Typer signature
        [],
        "--compare",
        "-c",
        metavar="LEFT:RIGHT[:WEIGHT][:fuzzy][:name]",
        help="Compare rule adjusting candidate scores (repeatable).",
    ),
    min_score: Optional[float] = typer.Option(
        None,
        "--min-score",
        help="Minimum score for a match; defaults to the matching policy.",
        show_default=False,
    ),
    output: Optional[Path] = typer.Option(None, "--output", help="Write the match summary as JSON."),
) -> None:
    """Link the records of two files."""

    state = get_state(ctx)
    policies = state.settings.policies
    if not join:
        raise CLIError("At least one --join rule is required")
    join_rules = [parse_join_rule(rule) for rule in join]
    compare_rules = [parse_compare_rule(rule) for rule in compare]

    left_records = _load(left)
    right_records = _load(right)

    with logging_context(run_id=state.run_id, step="match"):
        try:
            matcher = Matcher(
                SequenceStore(left_records),
                SequenceStore(right_records),
                min_score=min_score,
                index=create_index(policies.index),
                policy=policies.matching,
                registry=build_registry(policies.similarity.days_scale),
            )
            for left_attr, right_attr, weight in join_rules:
                matcher.join(left_attr, right_attr, weight)
            for left_attr, right_attr, weight, fuzzy, options in compare_rules:
                matcher.compare(left_attr, right_attr, weight, fuzzy, **options)
            with Progress(console=console, transient=True) as bar:
                task = bar.add_task("Matching", total=len(left_records))
                matcher.match(progress=lambda _record: bar.advance(task))
        except RecordLinkError as exc:
            raise CLIError(str(exc)) from exc

    table = Table(title="Match Summary", show_header=False, box=None)
    table.add_row("Left records", str(len(left_records)))
    table.add_row("Right records", str(len(right_records)))
    table.add_row("Matches", str(len(matcher.matches())))
    table.add_row("Left exceptions", str(len(matcher.left_exceptions())))
    table.add_row("Right exceptions", str(len(matcher.right_exceptions())))
    console.print(table)

    if output is not None:
        destination = serialize_json(match_payload(matcher), output)
        console.print(f"[green]Wrote match summary to[/green] {destination}")


def dedupe_command(
    ctx: typer.Context,
    input_path: str = typer.Argument(..., metavar="INPUT", help="Record file (.csv, .jsonl, or .json)."),
    criteria: List[str] = typer.Option(  # noqa: B008 - Typer signature
        [],
        "--criteria",
        "-c",
        metavar="ATTR[,ATTR...]",
        help="Comma separated attributes that must all be equal (repeatable).",
    ),
    output: Optional[Path] = typer.Option(None, "--output", help="Write the groups as JSON."),
) -> None:
    """Group the duplicate records of a file."""

    state = get_state(ctx)
    policies = state.settings.policies
    groups = [[attr.strip() for attr in item.split(",") if attr.strip()] for item in criteria]
    if not groups:
        raise CLIError("At least one --criteria group is required")

    records = _load(input_path)

    with logging_context(run_id=state.run_id, step="dedupe"):
        try:
            deduplicator = Deduplicator(
                SequenceStore(records),
                index=create_index(policies.index),
                policy=policies.deduplication,
            )
            for group in groups:
                deduplicator.match_attrs(group)
            with Progress(console=console, transient=True) as bar:
                task = bar.add_task("Deduplicating", total=len(records))
                deduplicator.deduplicate(progress=lambda _record: bar.advance(task))
        except RecordLinkError as exc:
            raise CLIError(str(exc)) from exc

    sizes = [len(group) for group in deduplicator.groups]
    table = Table(title="Deduplication Summary", show_header=False, box=None)
    table.add_row("Records", str(len(records)))
    table.add_row("Groups", str(len(sizes)))
    table.add_row("Duplicate groups", str(sum(1 for size in sizes if size > 1)))
    table.add_row("Largest group", str(max(sizes, default=0)))
    console.print(table)

    if output is not None:
        destination = serialize_json(groups_payload(deduplicator), output)
        console.print(f"[green]Wrote groups to[/green] {destination}")


__all__ = ["match_command", "dedupe_command", "parse_join_rule", "parse_compare_rule"]
