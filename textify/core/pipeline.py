# textify/core/pipeline.py
import sys
from typing import BinaryIO, List

from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.console import Console as RichConsole
import structlog
import logging as stdlib_logging

from textify.config.settings import ProjectConfig, ScanSettings
from textify.core.discovery.pattern_matching import IgnoreMatcher
from textify.core.discovery.walker import walk_tree
from textify.core.output import write_file_record


class Textifier:
    # orchestrates one run: build the ignore matcher, walk, append each record to the stream.
    def __init__(self, config: ProjectConfig, settings: ScanSettings):
        self.config: ProjectConfig = config
        self.settings: ScanSettings = settings
        self.log = structlog.get_logger(f"{__name__}.{self.__class__.__name__}")
        self.files_written: List[str] = []
        self.bytes_written: int = 0

    def run(self, stream: BinaryIO) -> List[str]:
        """
        Writes every included file to `stream` in traversal order and returns
        their relative paths. A WalkError propagates after the records already
        written have been flushed; `files_written` still reflects them.
        """
        matcher = IgnoreMatcher.from_root(self.settings.root, self.settings.ignore_filename)
        app_log_level = stdlib_logging.getLogger("textify").getEffectiveLevel()
        progress_disabled = app_log_level > stdlib_logging.INFO or not sys.stderr.isatty()
        stderr_console = RichConsole(file=sys.stderr)

        self.log.info("textify_run_started", root=str(self.settings.root), rules=len(self.config.dirs))
        with Progress(
            SpinnerColumn(), TextColumn("[bold blue]{task.description}"),
            transient=True, disable=progress_disabled, console=stderr_console
        ) as progress:
            task = progress.add_task("walking project...", total=None)
            for record in walk_tree(self.settings, self.config.dirs, matcher):
                self.bytes_written += write_file_record(stream, record.relative_path, record.content)
                self.files_written.append(record.relative_path)
                self.log.info("file_added", path=record.relative_path, size=len(record.content))
                progress.update(task, description=f"added {record.relative_path}")
            progress.update(task, description=f"added {len(self.files_written)} files.")

        self.log.info("textify_run_complete", files=len(self.files_written), bytes=self.bytes_written)
        return self.files_written
