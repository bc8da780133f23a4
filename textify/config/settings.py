import codecs
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, Iterator, Optional, Sequence, Tuple
import structlog

from textify.exceptions import ConfigError
from textify.util import ROOT_KEY, normalize_extensions, normalize_rel_key

log = structlog.get_logger(__name__)

# Default values for various configuration options
DEFAULT_CONFIG_FILENAME = "textify.toml"
DEFAULT_OUTPUT_FILENAME = "codebase.txt"
DEFAULT_IGNORE_FILENAME = ".gitignore"
DEFAULT_ENCODING = "utf-8"
DEFAULT_SNIFF_BYTES = 512
VCS_DIR_NAME = ".git"

DEFAULT_ROOT_EXTENSIONS = ("go", "md", "txt", "json", "js", "ts", "yml", "yaml", "toml")
DEFAULT_ROOT_INCLUDE = (".env.example",)


@dataclass(frozen=True)
class DirRule:
    """Filtering policy for one directory and, by inheritance, its descendants.

    A child directory with its own rule replaces this one wholesale; fields are
    never merged across levels.
    """
    enabled: bool = True
    extensions: Tuple[str, ...] = ()
    exclude_extensions: Tuple[str, ...] = ()
    include: Tuple[str, ...] = ()
    exclude: Tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "enabled", bool(self.enabled))
        object.__setattr__(self, "extensions", normalize_extensions(self.extensions))
        object.__setattr__(self, "exclude_extensions", normalize_extensions(self.exclude_extensions))
        object.__setattr__(self, "include", tuple(str(p) for p in self.include))
        object.__setattr__(self, "exclude", tuple(str(p) for p in self.exclude))

    def with_extensions(self, extensions: Iterable[str]) -> "DirRule":
        return replace(self, extensions=tuple(extensions))


class RuleStore:
    """Directory path -> DirRule, keyed by root-relative slash paths ("." is the root).

    Lookups are exact; inheritance is the walker's job.
    """

    def __init__(self, rules: Optional[Dict[str, DirRule]] = None):
        self._rules: Dict[str, DirRule] = {}
        for path_key, rule in (rules or {}).items():
            self.set(path_key, rule)

    def lookup(self, path_key: str) -> Tuple[Optional[DirRule], bool]:
        rule = self._rules.get(normalize_rel_key(path_key))
        return rule, rule is not None

    def get(self, path_key: str, default: Optional[DirRule] = None) -> Optional[DirRule]:
        return self._rules.get(normalize_rel_key(path_key), default)

    def set(self, path_key: str, rule: DirRule) -> None:
        self._rules[normalize_rel_key(path_key)] = rule

    def upsert_if_absent(self, path_key: str, rule: DirRule) -> bool:
        # returns True when the rule was inserted.
        key = normalize_rel_key(path_key)
        if key in self._rules:
            return False
        self._rules[key] = rule
        return True

    def copy(self) -> "RuleStore":
        return RuleStore(dict(self._rules))

    def keys(self) -> Sequence[str]:
        return sorted(self._rules)

    def items(self) -> Iterator[Tuple[str, DirRule]]:
        for key in self.keys():
            yield key, self._rules[key]

    def __contains__(self, path_key: object) -> bool:
        return isinstance(path_key, str) and normalize_rel_key(path_key) in self._rules

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RuleStore):
            return NotImplemented
        return self._rules == other._rules

    def __repr__(self) -> str:
        return f"RuleStore({dict(self.items())!r})"


@dataclass
class ProjectConfig:
    # holds everything persisted in textify.toml.
    output_file: str = DEFAULT_OUTPUT_FILENAME
    dirs: RuleStore = field(default_factory=RuleStore)

    @classmethod
    def default(cls) -> "ProjectConfig":
        """Starter configuration written by `textify init --no-discover`."""
        store = RuleStore()
        store.set(ROOT_KEY, DirRule(extensions=DEFAULT_ROOT_EXTENSIONS, include=DEFAULT_ROOT_INCLUDE))
        return cls(output_file=DEFAULT_OUTPUT_FILENAME, dirs=store)

    def resolve_output_path(self, root: Path) -> Path:
        out = Path(self.output_file)
        if not out.is_absolute():
            out = root / out
        return out.resolve()


@dataclass
class ScanSettings:
    # holds the per-run parameters of one walk.
    root: Path
    output_path: Optional[Path] = None
    config_filename: str = DEFAULT_CONFIG_FILENAME
    always_exclude: FrozenSet[str] = frozenset()
    follow_symlinks: bool = False
    encoding: str = DEFAULT_ENCODING
    sniff_bytes: int = DEFAULT_SNIFF_BYTES
    ignore_filename: str = DEFAULT_IGNORE_FILENAME

    def __post_init__(self):
        self.root = Path(self.root).resolve()
        if self.output_path is not None:
            self.output_path = Path(self.output_path).resolve()
        try:
            codecs.lookup(self.encoding)
        except LookupError as e:
            raise ConfigError(f"unknown text encoding '{self.encoding}'") from e
        if self.sniff_bytes <= 0:
            raise ConfigError(f"sniff_bytes must be positive, got {self.sniff_bytes}")
        log.debug("scan_settings_initialized", root=str(self.root), excluded_names=sorted(self.excluded_names))

    @property
    def excluded_names(self) -> FrozenSet[str]:
        # names skipped unconditionally, at any depth, before any rule is consulted.
        names = {VCS_DIR_NAME, self.config_filename}
        if self.output_path is not None:
            names.add(self.output_path.name)
        return frozenset(names | set(self.always_exclude))
