# textify/core/discovery/rule_discovery.py
"""
Proposes starter directory rules by inspecting the extensions present in a
project: one rule for the root, covering every visible extension in the tree,
and one rule per top-level directory, covering the extensions below it.
"""
import os
from pathlib import Path
from typing import List, Optional, Set, Tuple
import structlog

from textify.config.settings import DirRule, RuleStore, DEFAULT_IGNORE_FILENAME, VCS_DIR_NAME
from textify.core.discovery.pattern_matching import IgnoreMatcher
from textify.exceptions import DiscoveryError
from textify.util import ROOT_KEY, extension_of, relative_posix

log = structlog.get_logger(__name__)


def _join_rel(rel_dir: str, name: str) -> str:
    return name if rel_dir == ROOT_KEY else f"{rel_dir}/{name}"


def scan_extensions(start_path: Path, root: Path, matcher: IgnoreMatcher) -> Tuple[str, ...]:
    """
    Returns the sorted set of extensions of all visible files under `start_path`.

    `.git` is pruned at every depth and ignored paths are skipped. Unreadable
    subdirectories simply contribute nothing.
    """
    found: Set[str] = set()

    def _on_walk_error(err: OSError):
        log.debug("extension_scan_error_skipped", path=getattr(err, "filename", None), error=str(err))

    for dir_str, subdir_names, file_names in os.walk(start_path, topdown=True, onerror=_on_walk_error):
        rel_dir = relative_posix(Path(dir_str), root)
        subdir_names[:] = [
            d for d in subdir_names
            if d != VCS_DIR_NAME and not matcher.matches(_join_rel(rel_dir, d), is_dir=True)
        ]
        for file_name in file_names:
            if matcher.matches(_join_rel(rel_dir, file_name), is_dir=False):
                continue
            ext = extension_of(file_name)
            if ext:
                found.add(ext)

    return tuple(sorted(found))


def _list_top_level_dirs(root: Path) -> List[os.DirEntry]:
    try:
        with os.scandir(root) as entries:
            return sorted(
                (e for e in entries if e.is_dir(follow_symlinks=False)),
                key=lambda e: e.name,
            )
    except OSError as e:
        raise DiscoveryError(f"cannot list project root '{root}': {e}") from e


def discover_rules(
    root: Path,
    existing: Optional[RuleStore] = None,
    matcher: Optional[IgnoreMatcher] = None,
    ignore_filename: str = DEFAULT_IGNORE_FILENAME,
) -> RuleStore:
    """
    Returns a copy of `existing` (or a fresh store) extended with discovered rules.

    Existing rules are never overwritten; the only exception is a root rule whose
    extension list is empty, which gets the extensions of the whole tree.
    Ignored top-level directories get no rule at all.
    """
    root = Path(root).resolve()
    store = existing.copy() if existing is not None else RuleStore()
    if matcher is None:
        matcher = IgnoreMatcher.from_root(root, ignore_filename)

    log.info("rule_discovery_started", root=str(root), existing_rules=len(store))
    top_level_dirs = _list_top_level_dirs(root)

    root_rule, has_root_rule = store.lookup(ROOT_KEY)
    if not has_root_rule or not root_rule.extensions:
        root_extensions = scan_extensions(root, root, matcher)
        if has_root_rule:
            store.set(ROOT_KEY, root_rule.with_extensions(root_extensions))
        else:
            store.set(ROOT_KEY, DirRule(enabled=True, extensions=root_extensions))
        log.info("root_rule_discovered", extensions=list(root_extensions))
    else:
        log.debug("root_rule_kept", extensions=list(root_rule.extensions))

    for entry in top_level_dirs:
        if entry.name == VCS_DIR_NAME:
            continue
        if entry.name in store:
            log.debug("dir_rule_kept", directory=entry.name)
            continue
        if matcher.matches(entry.name, is_dir=True):
            log.debug("dir_rule_skipped_ignored", directory=entry.name)
            continue
        dir_extensions = scan_extensions(Path(entry.path), root, matcher)
        store.upsert_if_absent(entry.name, DirRule(enabled=True, extensions=dir_extensions))
        log.info("dir_rule_discovered", directory=entry.name, extensions=list(dir_extensions))

    log.info("rule_discovery_finished", rules=len(store))
    return store
