# textify/cli/interface.py
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Optional, Tuple

import click
from click_option_group import optgroup
import structlog

from textify import __version__ as app_version
from textify.config.settings import (
    ProjectConfig, ScanSettings,
    DEFAULT_CONFIG_FILENAME, DEFAULT_OUTPUT_FILENAME, DEFAULT_ENCODING,
)
from textify.config.loader import load_project_config, save_project_config
from textify.logging_setup import configure_logging
from textify.core.counting import count_words_in_file, count_tokens_in_file, DEFAULT_TOKEN_ENCODING
from textify.core.discovery.rule_discovery import discover_rules
from textify.core.output import open_output_file
from textify.core.pipeline import Textifier
from textify.cli.console_output import print_run_summary, print_discovered_rules
from textify.exceptions import TextifyError, WalkError

log = structlog.get_logger(__name__)


@contextmanager
def _cli_errors():
    try:
        yield
    except click.exceptions.Exit:
        raise
    except TextifyError as e:
        log.error("handled_application_error_in_cli", error_type=type(e).__name__, message=str(e))
        click.secho(f"Error: {e}", fg="red", err=True)
        sys.exit(1)
    except click.ClickException:
        raise
    except Exception as e:
        log.critical("unexpected_critical_error_in_cli", message=str(e), exc_info=True)
        click.secho(f"Unexpected critical error: {e}. Please report this.", fg="red", err=True)
        sys.exit(1)


def _resolve_project_paths(root_dir: Path, config_path: Optional[Path]) -> Tuple[Path, Path]:
    root = root_dir.resolve()
    if config_path is None:
        config_path = root / DEFAULT_CONFIG_FILENAME
    return root, config_path.resolve()


def project_options(cmd):
    """Applies the project location options shared by init, discover and start."""
    cmd = optgroup.option("-c", "--config", "config_path", type=click.Path(dir_okay=False, path_type=Path), default=None, help=f"Config file. Default: <dir>/{DEFAULT_CONFIG_FILENAME}.")(cmd)
    cmd = optgroup.option("-d", "--dir", "root_dir", type=click.Path(exists=True, file_okay=False, path_type=Path), default=Path("."), show_default=True, help="Project root directory.")(cmd)
    cmd = optgroup.group("Project Options", help="Where the project and its config live.")(cmd)
    return cmd


@click.group(context_settings=dict(help_option_names=["-h", "--help"]))
@click.option("--verbose", "-v", "verbosity_level", count=True, help="Verbosity: -v info, -vv debug.")
@click.option("--json-logs", "force_json_logs", is_flag=True, default=False, help="Force JSON logs.")
@click.version_option(version=app_version, prog_name="textify", help="Show version and exit.")
def main_cli_group(verbosity_level: int, force_json_logs: bool):
    """textify: turn your codebase into one AI-ready text file,
    filtered by per-directory rules kept in textify.toml."""
    log_level = "warning"
    if verbosity_level == 1: log_level = "info"
    elif verbosity_level >= 2: log_level = "debug"
    configure_logging(log_level_str=log_level, force_json_logs=force_json_logs)


@main_cli_group.command("init")
@project_options
@optgroup.group("Init Options")
@optgroup.option("--force", "force", is_flag=True, default=False, help="Overwrite an existing config file.")
@optgroup.option("--no-discover", "no_discover", is_flag=True, default=False, help="Write the static starter rules instead of scanning the project.")
def init_command(root_dir: Path, config_path: Optional[Path], force: bool, no_discover: bool):
    """Scan the project and generate textify.toml."""
    with _cli_errors():
        root, config_path = _resolve_project_paths(root_dir, config_path)
        if config_path.exists() and not force:
            click.secho(f"Error: {config_path.name} already exists in this directory.", fg="red", err=True)
            sys.exit(1)

        if no_discover:
            config = ProjectConfig.default()
        else:
            click.echo("Scanning directory structure to generate configuration...", err=True)
            config = ProjectConfig(dirs=discover_rules(root))
        save_project_config(config, config_path)

        click.secho(f"✔ Initialization complete. Created {config_path.name}", fg="green", err=True)
        click.echo("  1. Edit the file to configure extensions and inclusions.", err=True)
        click.echo("  2. Run 'textify start' to generate your output file.", err=True)


@main_cli_group.command("discover")
@project_options
def discover_command(root_dir: Path, config_path: Optional[Path]):
    """Add rules for top-level directories that have none yet."""
    with _cli_errors():
        root, config_path = _resolve_project_paths(root_dir, config_path)
        config = load_project_config(config_path)
        updated_store = discover_rules(root, config.dirs)
        changed_keys = [key for key, rule in updated_store.items() if config.dirs.get(key) != rule]
        config.dirs = updated_store
        save_project_config(config, config_path)
        print_discovered_rules(updated_store, changed_keys)


@main_cli_group.command("start")
@project_options
@optgroup.group("Output Options")
@optgroup.option("-o", "--output", "output_file", type=click.Path(dir_okay=False, path_type=Path), default=None, help="Output file. Default: output_file from the config.")
@optgroup.option("--count/--no-count", "show_word_count", default=True, help="Print the word count of the output when done.")
@optgroup.group("Walk Options")
@optgroup.option("-L", "--follow-symlinks", "follow_symlinks", is_flag=True, default=False, help="Descend into symlinked directories.")
@optgroup.option("--encoding", "encoding", default=DEFAULT_ENCODING, show_default=True, help="Text encoding used to tell text files from binary ones.")
def start_command(root_dir: Path, config_path: Optional[Path], output_file: Optional[Path], show_word_count: bool, follow_symlinks: bool, encoding: str):
    """Read textify.toml and generate the output file."""
    with _cli_errors():
        root, config_path = _resolve_project_paths(root_dir, config_path)
        config = load_project_config(config_path)
        output_path = output_file.resolve() if output_file else config.resolve_output_path(root)
        settings = ScanSettings(
            root=root,
            output_path=output_path,
            config_filename=config_path.name,
            follow_symlinks=follow_symlinks,
            encoding=encoding,
        )

        click.echo(f"Textifying project using {config_path.name}...", err=True)
        textifier = Textifier(config, settings)
        with open_output_file(output_path) as stream:
            try:
                textifier.run(stream)
            except WalkError:
                click.echo(f"Partial output ({len(textifier.files_written)} files) left in {output_path}", err=True)
                raise

        word_count = count_words_in_file(output_path) if show_word_count else None
        print_run_summary(textifier.files_written, output_path, word_count)


@main_cli_group.command("count")
@click.argument("target_file", type=click.Path(dir_okay=False, path_type=Path), default=DEFAULT_OUTPUT_FILENAME)
@click.option("--tokens", "show_tokens", is_flag=True, default=False, help="Also count tokens with tiktoken.")
@click.option("--encoding", "token_encoding", default=DEFAULT_TOKEN_ENCODING, show_default=True, help="Tiktoken encoding for --tokens.")
def count_command(target_file: Path, show_tokens: bool, token_encoding: str):
    """Count the words (and optionally tokens) in an output file."""
    with _cli_errors():
        words = count_words_in_file(target_file)
        click.echo(f"File: {target_file}")
        click.echo(f"Word Count: {words}")
        if show_tokens:
            tokens = count_tokens_in_file(target_file, token_encoding)
            click.echo(f"Token Count ({token_encoding}): {tokens}")
