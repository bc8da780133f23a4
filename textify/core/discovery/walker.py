# textify/core/discovery/walker.py
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, List, Optional, Set
import structlog

from textify.config.settings import DirRule, RuleStore, ScanSettings
from textify.core.discovery.pattern_matching import IgnoreMatcher, matches_rule_patterns
from textify.core.processing import load_text_content
from textify.exceptions import WalkError
from textify.util import ROOT_KEY, extension_of, relative_posix

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class FileRecord:
    # one included text file, ready to be written.
    relative_path: str
    absolute_path: Path
    content: bytes


@dataclass
class _WalkContext:
    settings: ScanSettings
    store: RuleStore
    matcher: IgnoreMatcher
    visited_real_dirs: Set[str] = field(default_factory=set)


def walk_tree(
    settings: ScanSettings,
    store: RuleStore,
    matcher: Optional[IgnoreMatcher] = None,
) -> Iterator[FileRecord]:
    """
    Depth-first walk from `settings.root`, yielding every included text file in
    traversal order (children sorted by name).

    The rule store and matcher are treated as read-only snapshots. A directory
    whose children cannot be listed raises WalkError; records yielded before
    that point stay valid.
    """
    if matcher is None:
        matcher = IgnoreMatcher.from_root(settings.root, settings.ignore_filename)
    context = _WalkContext(settings=settings, store=store, matcher=matcher)
    log.info("walk_started", root=str(settings.root), rules=len(store))
    # with no "." entry the root starts from an all-default rule.
    yield from _walk_directory(settings.root, DirRule(), context)
    log.info("walk_finished", root=str(settings.root))


def _list_children(dir_path: Path) -> List[os.DirEntry]:
    try:
        with os.scandir(dir_path) as entries:
            return sorted(entries, key=lambda entry: entry.name)
    except OSError as e:
        raise WalkError(f"cannot list directory '{dir_path}': {e}", path=dir_path) from e


def _entry_kind(entry: os.DirEntry, follow_symlinks: bool) -> Optional[str]:
    # "dir", "file", or None for anything that is neither (sockets, broken links).
    try:
        if entry.is_dir(follow_symlinks=follow_symlinks):
            return "dir"
        if entry.is_file():
            return "file"
    except OSError as e:
        log.debug("walk_skip_unstatable", path=entry.path, error=str(e))
    return None


def _walk_directory(dir_path: Path, inherited_rule: DirRule, context: _WalkContext) -> Iterator[FileRecord]:
    settings = context.settings
    rel_dir = relative_posix(dir_path, settings.root)

    # an explicit rule for this exact path replaces the inherited one wholesale.
    explicit_rule, found = context.store.lookup(rel_dir)
    active_rule = explicit_rule if found else inherited_rule
    if found:
        log.debug("walk_rule_override", directory=rel_dir)

    if not active_rule.enabled:
        log.debug("walk_skip_disabled_dir", directory=rel_dir)
        return

    if settings.follow_symlinks:
        real_dir = os.path.realpath(dir_path)
        if real_dir in context.visited_real_dirs:
            log.debug("walk_skip_already_visited", directory=rel_dir, real_path=real_dir)
            return
        context.visited_real_dirs.add(real_dir)

    excluded_names = settings.excluded_names
    for entry in _list_children(dir_path):
        child_path = Path(entry.path)
        rel_path = entry.name if rel_dir == ROOT_KEY else f"{rel_dir}/{entry.name}"

        if entry.name in excluded_names or child_path == settings.output_path:
            log.debug("walk_skip_hardcoded", path=rel_path)
            continue

        kind = _entry_kind(entry, settings.follow_symlinks)
        if kind is None:
            continue
        is_dir = kind == "dir"

        if matches_rule_patterns(active_rule.exclude, rel_path, is_dir):
            log.debug("walk_skip_excluded_pattern", path=rel_path)
            continue

        is_forced = matches_rule_patterns(active_rule.include, rel_path, is_dir)

        if is_dir:
            child_rule, has_child_rule = context.store.lookup(rel_path)
            if has_child_rule and not child_rule.enabled:
                log.debug("walk_skip_disabled_dir", directory=rel_path)
                continue
            if not is_forced and context.matcher.matches(rel_path, is_dir=True):
                log.debug("walk_skip_ignored", path=rel_path)
                continue
            yield from _walk_directory(child_path, active_rule, context)
            continue

        if not is_forced:
            if context.matcher.matches(rel_path, is_dir=False):
                log.debug("walk_skip_ignored", path=rel_path)
                continue
            ext = extension_of(entry.name)
            if ext in active_rule.exclude_extensions:
                log.debug("walk_skip_excluded_extension", path=rel_path, extension=ext)
                continue
            if active_rule.extensions and ext not in active_rule.extensions:
                log.debug("walk_skip_extension_not_allowed", path=rel_path, extension=ext)
                continue

        content = load_text_content(child_path, settings.encoding, settings.sniff_bytes)
        if content is None:
            continue
        yield FileRecord(relative_path=rel_path, absolute_path=child_path, content=content)
