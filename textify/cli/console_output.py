# textify/cli/console_output.py
"""
Prints summary information to the console (stderr) during CLI execution.
"""
from pathlib import Path
from typing import Iterable, List, Optional

import click
import structlog

from textify.config.settings import RuleStore

log = structlog.get_logger(__name__)

SUMMARY_RULE = "-" * 50


def print_run_summary(files_written: List[str], output_path: Path, word_count: Optional[int]):
    log.debug("console_summary_output_requested")
    click.secho(f"\n✔ Done! Added {len(files_written)} files. Output saved to: {output_path}", fg="green", err=True)
    if word_count is not None:
        click.echo(SUMMARY_RULE, err=True)
        click.secho(f"Total Word Count: {word_count:,}", fg="yellow", err=True)
        click.echo(SUMMARY_RULE, err=True)


def print_discovered_rules(store: RuleStore, new_keys: Iterable[str]):
    new_keys = sorted(new_keys)
    if not new_keys:
        click.echo("No new directories found; existing rules left untouched.", err=True)
        return
    click.secho("Discovered rules:", fg="cyan", err=True)
    for key in new_keys:
        rule = store.get(key)
        extensions = ", ".join(rule.extensions) if rule and rule.extensions else "(all)"
        click.echo(f"  {key}: {extensions}", err=True)
