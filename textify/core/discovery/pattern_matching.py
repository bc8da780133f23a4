# textify/core/discovery/pattern_matching.py
from fnmatch import fnmatchcase
from pathlib import Path
from typing import List, Optional, Sequence, Tuple
import pathspec
import structlog

from textify.util import normalize_rel_key

log = structlog.get_logger(__name__)


def _spec_path(rel_path: str, is_dir: bool) -> str:
    # pathspec only applies directory-only patterns ("build/") to paths ending in "/".
    return f"{rel_path}/" if is_dir else rel_path


def _ancestor_dirs(rel_path: str) -> List[str]:
    # "a/b/c.txt" -> ["a/", "a/b/"]
    parts = rel_path.split("/")[:-1]
    return ["/".join(parts[:i]) + "/" for i in range(1, len(parts) + 1)]


class IgnoreMatcher:
    """Answers "is this path ignored?" for one walk, from the root's ignore file.

    Built once per walk and passed down explicitly; an absent or unreadable
    ignore file yields a matcher that ignores nothing.
    """

    def __init__(self, spec: Optional[pathspec.PathSpec] = None, source: Optional[Path] = None):
        self._spec = spec
        self.source = source

    @classmethod
    def from_root(cls, root: Path, ignore_filename: str = ".gitignore") -> "IgnoreMatcher":
        ignore_file = root / ignore_filename
        if not ignore_file.is_file():
            log.debug("ignore_file_absent", path=str(ignore_file))
            return cls()
        try:
            with ignore_file.open("r", encoding="utf-8", errors="ignore") as f_obj:
                spec = pathspec.GitIgnoreSpec.from_lines(f_obj)
        except (OSError, ValueError) as e:
            log.warning("failed_to_parse_ignore_file", path=str(ignore_file), error=str(e))
            return cls()
        log.debug("loaded_ignore_file", path=str(ignore_file), patterns=len(spec.patterns))
        return cls(spec, source=ignore_file)

    @classmethod
    def from_lines(cls, lines: Sequence[str]) -> "IgnoreMatcher":
        return cls(pathspec.GitIgnoreSpec.from_lines(lines))

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        """
        True if the last ignore pattern naming this path itself says "ignore".

        Patterns that only reach the path through one of its parent directories
        are not counted: each parent was already judged when the walk entered
        it, so the contents of a force-included directory are judged by name.
        """
        if self._spec is None or rel_path == ".":
            return False
        target = _spec_path(rel_path, is_dir)
        ancestors = _ancestor_dirs(rel_path)
        ignored = False
        for pattern in self._spec.patterns:
            if pattern.include is None or pattern.match_file(target) is None:
                continue
            if any(pattern.match_file(parent) is not None for parent in ancestors):
                continue
            ignored = bool(pattern.include)
        return ignored


def _glob_match(path: str, pattern: str) -> bool:
    # whole-string glob; wildcards never cross a "/".
    path_parts = path.split("/")
    pattern_parts = pattern.split("/")
    if len(path_parts) != len(pattern_parts):
        return False
    return all(fnmatchcase(part, pat) for part, pat in zip(path_parts, pattern_parts))


def rule_pattern_matches(pattern: str, rel_path: str, is_dir: bool) -> bool:
    """
    True if one include/exclude entry names `rel_path`.

    The entry matches the child's bare name, its root-relative path, or the
    path itself by literal equality. A leading "/" anchors the entry to the
    root-relative path only and a trailing "/" restricts it to directories.
    Naming a directory says nothing about the files below it.
    """
    if pattern.endswith("/") and not is_dir:
        return False
    if normalize_rel_key(pattern) == rel_path:
        return True
    glob = pattern.strip("/")
    if not glob:
        return False
    if pattern.startswith("/"):
        return _glob_match(rel_path, glob)
    name = rel_path.rsplit("/", 1)[-1]
    return _glob_match(name, glob) or _glob_match(rel_path, glob)


def matches_rule_patterns(patterns: Tuple[str, ...], rel_path: str, is_dir: bool) -> bool:
    return any(rule_pattern_matches(p, rel_path, is_dir) for p in patterns)
